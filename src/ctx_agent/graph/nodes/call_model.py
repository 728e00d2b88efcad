"""Call-model node: one completion round trip with retry and token accounting."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Callable

from ctx_agent.graph.prompt import build_system_prompt
from ctx_agent.graph.state import AgentState
from ctx_agent.llm.client import CompletionClient, CompletionError, is_retryable_completion_error
from ctx_agent.llm.retry import call_with_retry

logger = logging.getLogger(__name__)


def build(
    client: CompletionClient,
    *,
    tools: list[dict[str, Any]],
    max_iterations: int = 10,
    max_retries: int = 1,
    backoff_s: float = 1.0,
    context_window: int = 200_000,
    warning_ratio: float = 0.75,
    clock: Callable[[], datetime] = datetime.now,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[[AgentState], AgentState]:
    warning_threshold = context_window * warning_ratio

    def run(state: AgentState) -> AgentState:
        iterations = int(state.get("iterations", 0))
        if iterations >= max_iterations:
            return {
                "error": {
                    "code": "AGENT_LOOP_LIMIT",
                    "message": (
                        f"Agent hit iteration limit ({max_iterations}). Something might be stuck."
                    ),
                }
            }

        iterations += 1
        messages = list(state.get("messages", []))
        system = build_system_prompt(clock().date())

        try:
            response = call_with_retry(
                lambda: client.create_message(system=system, messages=messages, tools=tools),
                is_retryable=is_retryable_completion_error,
                max_retries=max_retries,
                backoff_s=backoff_s,
                sleep=sleep,
            )
        except CompletionError as exc:
            logger.error(
                "agent_run event=completion_failed iteration=%d status=%s reason=%s",
                iterations,
                exc.status_code,
                exc,
            )
            return {
                "iterations": iterations,
                "error": {"code": "API_ERROR", "message": str(exc)},
            }

        input_tokens = int(state.get("input_tokens", 0)) + response.usage.input_tokens
        output_tokens = int(state.get("output_tokens", 0)) + response.usage.output_tokens
        warned = bool(state.get("token_warning_emitted", False))
        if not warned and input_tokens + output_tokens > warning_threshold:
            logger.warning(
                "agent_run event=token_budget iteration=%d total_tokens=%d context_window=%d",
                iterations,
                input_tokens + output_tokens,
                context_window,
            )
            warned = True

        messages.append(response.assistant_turn())
        update: AgentState = {
            "messages": messages,
            "iterations": iterations,
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "token_warning_emitted": warned,
            "stop_reason": response.stop_reason,
            "pending_tool_uses": [],
        }

        if response.stop_reason == "end_turn":
            update["reply"] = response.text()
        elif response.stop_reason == "tool_use" and response.tool_uses():
            update["pending_tool_uses"] = response.tool_uses()
        elif response.stop_reason == "tool_use":
            update["error"] = {
                "code": "AGENT_ERROR",
                "message": "Stop reason tool_use without any tool calls",
            }
        else:
            update["error"] = {
                "code": "AGENT_ERROR",
                "message": f"Unexpected stop reason: {response.stop_reason}",
            }
        return update

    return run
