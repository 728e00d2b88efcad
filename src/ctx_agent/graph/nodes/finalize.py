"""Finalize node: settle the user-facing reply and record how the run ended."""

from __future__ import annotations

import logging

from ctx_agent.graph.state import AgentState

logger = logging.getLogger(__name__)

EMPTY_REPLY = "Done, but I didn't have anything to say."


def run(state: AgentState) -> AgentState:
    error = state.get("error")
    logger.info(
        "agent_run event=%s iterations=%d input_tokens=%d output_tokens=%d "
        "stop_reason=%s code=%s",
        "failed" if error else "done",
        int(state.get("iterations", 0)),
        int(state.get("input_tokens", 0)),
        int(state.get("output_tokens", 0)),
        state.get("stop_reason"),
        error.get("code") if error else None,
    )
    if error:
        return {"reply": None}
    return {"reply": state.get("reply") or EMPTY_REPLY}
