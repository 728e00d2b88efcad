"""Conversation front door: approval resolution first, then the agent loop."""

from __future__ import annotations

import logging
from typing import Callable

from ctx_agent.graph.nodes.run_tools import ToolDispatcher
from ctx_agent.graph.runner import AgentResult
from ctx_agent.storage.base import ApprovalStore, ConversationId
from ctx_agent.storage.models import PendingApproval
from ctx_agent.tools.gateway import ToolExecutor
from ctx_agent.tools.outcomes import Success

logger = logging.getLogger(__name__)

APOLOGY_REPLY = "Sorry, something went wrong on my end. Please try again in a moment."

AgentRunner = Callable[[str, ToolDispatcher], AgentResult]
ExecutorFactory = Callable[[ConversationId], ToolExecutor]


class ConversationHandler:
    """Turn one inbound chat message into one reply.

    A pending approval for the conversation is taken (and so cleared) before
    anything else. The reply is compared after trimming surrounding whitespace
    and ignoring case, so ``" Yes\\n"`` counts as ``yes``; nothing looser than
    that (``y``, ``yep``) is accepted. ``yes`` replays the parked tool call,
    ``no`` cancels it, and any other text is handled by a normal agent run.
    """

    def __init__(
        self,
        *,
        approvals: ApprovalStore,
        executor_factory: ExecutorFactory,
        agent_runner: AgentRunner,
    ) -> None:
        self.approvals = approvals
        self.executor_factory = executor_factory
        self.agent_runner = agent_runner

    def handle(self, conversation_id: ConversationId, text: str) -> str:
        pending = self.approvals.take(conversation_id)
        if pending is not None:
            answer = text.strip().lower()
            if answer == "yes":
                return self._approve(conversation_id, pending)
            if answer == "no":
                logger.info(
                    "conversation event=approval_cancelled conversation_id=%s target_id=%s",
                    conversation_id,
                    pending.target_id,
                )
                return f"Cancelled. '{pending.description}' was left as is."
            logger.info(
                "conversation event=approval_dropped conversation_id=%s target_id=%s",
                conversation_id,
                pending.target_id,
            )

        result = self.agent_runner(text, self.executor_factory(conversation_id))
        if result.error is None:
            return result.data or ""

        logger.error(
            "conversation event=agent_failed conversation_id=%s code=%s message=%s",
            conversation_id,
            result.error.code,
            result.error.message,
        )
        return APOLOGY_REPLY

    def _approve(self, conversation_id: ConversationId, pending: PendingApproval) -> str:
        outcome = self.executor_factory(conversation_id).resume(pending)
        if isinstance(outcome, Success) and outcome.failure is not None:
            logger.error(
                "conversation event=approved_call_failed conversation_id=%s tool=%s kind=%s",
                conversation_id,
                pending.tool_name,
                outcome.failure.kind,
            )
            return f"Couldn't complete '{pending.description}': {outcome.message}"
        return outcome.message
