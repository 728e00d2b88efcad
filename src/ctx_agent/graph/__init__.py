"""Agent orchestration loop built on LangGraph."""

from ctx_agent.graph.runner import AgentError, AgentResult, run_agent
from ctx_agent.graph.state import AgentState, initial_state
from ctx_agent.graph.workflow import build_graph

__all__ = [
    "AgentError",
    "AgentResult",
    "AgentState",
    "build_graph",
    "initial_state",
    "run_agent",
]
