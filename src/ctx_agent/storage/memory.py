"""In-process approval store, one slot per conversation."""

from __future__ import annotations

import threading

from ctx_agent.storage.base import ConversationId
from ctx_agent.storage.models import PendingApproval


class InMemoryApprovalStore:
    """Single-slot map from conversation id to its outstanding approval.

    ``put`` overwrites any earlier approval for the same conversation and hands
    the replaced one back. ``take`` reads and clears under one lock so a slot is
    resolved at most once.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._slots: dict[str, PendingApproval] = {}

    def put(
        self, conversation_id: ConversationId, approval: PendingApproval
    ) -> PendingApproval | None:
        with self._lock:
            replaced = self._slots.get(str(conversation_id))
            self._slots[str(conversation_id)] = approval
            return replaced

    def take(self, conversation_id: ConversationId) -> PendingApproval | None:
        with self._lock:
            return self._slots.pop(str(conversation_id), None)
