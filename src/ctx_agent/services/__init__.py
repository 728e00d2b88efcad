"""Collaborator services invoked by tools and the chat gateway."""

from ctx_agent.services.results import ServiceError, ServiceResult
from ctx_agent.services.telegram import TelegramClient
from ctx_agent.services.trello import TrelloBoard, TrelloCard, TrelloClient, TrelloList
from ctx_agent.services.vault import NotesVault

__all__ = [
    "NotesVault",
    "ServiceError",
    "ServiceResult",
    "TelegramClient",
    "TrelloBoard",
    "TrelloCard",
    "TrelloClient",
    "TrelloList",
]
