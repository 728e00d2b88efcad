"""Pending approval storage."""

from ctx_agent.storage.base import ApprovalStore, ConversationId
from ctx_agent.storage.memory import InMemoryApprovalStore
from ctx_agent.storage.models import PendingApproval

__all__ = [
    "ApprovalStore",
    "ConversationId",
    "InMemoryApprovalStore",
    "PendingApproval",
]
