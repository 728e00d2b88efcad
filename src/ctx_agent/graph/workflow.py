"""LangGraph workflow assembly for the agent loop."""

from __future__ import annotations

import time
from datetime import datetime
from typing import Any, Callable

from langgraph.graph import END, StateGraph

from ctx_agent.graph.nodes import call_model, finalize, run_tools
from ctx_agent.graph.nodes.run_tools import ToolDispatcher
from ctx_agent.graph.state import AgentState
from ctx_agent.llm.client import CompletionClient


def build_graph(
    *,
    client: CompletionClient,
    executor: ToolDispatcher,
    tools: list[dict[str, Any]],
    max_iterations: int = 10,
    max_retries: int = 1,
    backoff_s: float = 1.0,
    context_window: int = 200_000,
    warning_ratio: float = 0.75,
    clock: Callable[[], datetime] = datetime.now,
    sleep: Callable[[float], None] = time.sleep,
):
    def _after_model(state: AgentState) -> str:
        if state.get("error") or state.get("reply") is not None:
            return "done"
        return "tools"

    def _after_tools(state: AgentState) -> str:
        if state.get("reply") is not None:
            return "done"
        return "model"

    graph = StateGraph(AgentState)

    graph.add_node(
        "call_model",
        call_model.build(
            client,
            tools=tools,
            max_iterations=max_iterations,
            max_retries=max_retries,
            backoff_s=backoff_s,
            context_window=context_window,
            warning_ratio=warning_ratio,
            clock=clock,
            sleep=sleep,
        ),
    )
    graph.add_node("run_tools", run_tools.build(executor))
    graph.add_node("finalize", finalize.run)

    graph.set_entry_point("call_model")
    graph.add_conditional_edges(
        "call_model", _after_model, {"tools": "run_tools", "done": "finalize"}
    )
    graph.add_conditional_edges(
        "run_tools", _after_tools, {"model": "call_model", "done": "finalize"}
    )
    graph.add_edge("finalize", END)

    return graph.compile()


def recursion_limit_for(max_iterations: int) -> int:
    # call_model + run_tools per iteration, one extra call_model for the limit check, finalize.
    return max_iterations * 2 + 5
