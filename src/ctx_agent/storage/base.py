"""Storage interface for per-conversation pending approvals."""

from __future__ import annotations

from typing import Protocol

from ctx_agent.storage.models import PendingApproval

ConversationId = int | str


class ApprovalStore(Protocol):
    def put(
        self, conversation_id: ConversationId, approval: PendingApproval
    ) -> PendingApproval | None: ...

    def take(self, conversation_id: ConversationId) -> PendingApproval | None: ...
