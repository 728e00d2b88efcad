"""Conversation front door shared by the webhook and the CLI."""

from ctx_agent.conversation.factory import build_handler
from ctx_agent.conversation.handler import APOLOGY_REPLY, ConversationHandler

__all__ = ["APOLOGY_REPLY", "ConversationHandler", "build_handler"]
