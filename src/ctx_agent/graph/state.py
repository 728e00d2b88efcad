"""Typed state contract for the agent LangGraph workflow."""

from typing import Any, TypedDict

from ctx_agent.llm.client import ContentBlock


class AgentState(TypedDict, total=False):
    messages: list[dict[str, Any]]
    iterations: int
    input_tokens: int
    output_tokens: int
    token_warning_emitted: bool
    stop_reason: str | None
    pending_tool_uses: list[ContentBlock]
    reply: str | None
    error: dict[str, str] | None


def initial_state(user_message: str) -> AgentState:
    return {
        "messages": [{"role": "user", "content": user_message}],
        "iterations": 0,
        "input_tokens": 0,
        "output_tokens": 0,
        "token_warning_emitted": False,
        "stop_reason": None,
        "pending_tool_uses": [],
        "reply": None,
        "error": None,
    }
