"""Run-tools node: execute requested tool calls in order and collect results."""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

from ctx_agent.graph.state import AgentState
from ctx_agent.tools.outcomes import ConfirmationRequired, ExecutorOutcome, Success, ToolFailure

logger = logging.getLogger(__name__)


class ToolDispatcher(Protocol):
    def execute(self, tool_name: str, args: Any) -> ExecutorOutcome: ...


def build(executor: ToolDispatcher) -> Callable[[AgentState], AgentState]:
    def run(state: AgentState) -> AgentState:
        results: list[dict[str, Any]] = []
        for block in state.get("pending_tool_uses", []):
            tool_name = block.name or ""
            logger.info("agent_run event=tool_call tool=%s tool_use_id=%s", tool_name, block.id)
            try:
                args = block.input if block.input is not None else {}
                outcome = executor.execute(tool_name, args)
            except Exception as exc:  # noqa: BLE001
                logger.exception("agent_run event=tool_crashed tool=%s", tool_name)
                outcome = Success(
                    failure=ToolFailure(kind="TOOL_ERROR", detail=str(exc), tool_name=tool_name)
                )

            if isinstance(outcome, ConfirmationRequired):
                return {"reply": outcome.message, "pending_tool_uses": []}

            results.append(
                {"type": "tool_result", "tool_use_id": block.id, "content": outcome.message}
            )

        messages = [*state.get("messages", []), {"role": "user", "content": results}]
        return {"messages": messages, "pending_tool_uses": []}

    return run
