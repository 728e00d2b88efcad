"""Entry point for one agent run over a single inbound message."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from ctx_agent.config.settings import Settings, get_settings
from ctx_agent.graph.nodes.run_tools import ToolDispatcher
from ctx_agent.graph.state import initial_state
from ctx_agent.graph.workflow import build_graph, recursion_limit_for
from ctx_agent.llm.client import CompletionClient
from ctx_agent.tools.registry import tool_catalog


@dataclass(frozen=True)
class AgentError:
    code: str
    message: str


@dataclass(frozen=True)
class AgentResult:
    success: bool
    data: str | None = None
    error: AgentError | None = None

    @classmethod
    def ok(cls, data: str) -> AgentResult:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, code: str, message: str) -> AgentResult:
        return cls(success=False, error=AgentError(code=code, message=message))

    def to_dict(self) -> dict[str, Any]:
        if self.error is None:
            return {"success": True, "data": self.data}
        return {
            "success": False,
            "error": {"code": self.error.code, "message": self.error.message},
        }


def run_agent(
    user_message: str,
    executor: ToolDispatcher,
    *,
    client: CompletionClient,
    settings: Settings | None = None,
    clock: Callable[[], datetime] = datetime.now,
    sleep: Callable[[float], None] = time.sleep,
) -> AgentResult:
    """Drive the tool-calling loop for one message.

    Orchestrator-level failures (completion endpoint errors, unknown stop
    reasons, the iteration cap) come back as a failed ``AgentResult``; tool
    failures never do, they are shown to the model as tool output instead.
    """
    settings = settings or get_settings()
    workflow = build_graph(
        client=client,
        executor=executor,
        tools=tool_catalog(),
        max_iterations=settings.max_iterations,
        max_retries=settings.llm_max_retries,
        backoff_s=settings.llm_backoff_s,
        context_window=settings.llm_context_window,
        warning_ratio=settings.token_warning_ratio,
        clock=clock,
        sleep=sleep,
    )

    result: dict[str, Any] = workflow.invoke(
        initial_state(user_message),
        config={"recursion_limit": recursion_limit_for(settings.max_iterations)},
    )

    error = result.get("error")
    if error:
        return AgentResult.fail(str(error.get("code")), str(error.get("message")))
    return AgentResult.ok(str(result.get("reply")))
