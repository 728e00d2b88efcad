"""Tooling layer for schema-validated execution."""

from ctx_agent.tools.gateway import ToolExecutor
from ctx_agent.tools.outcomes import ConfirmationRequired, ExecutorOutcome, Success, ToolFailure
from ctx_agent.tools.registry import ToolSpec, build_registry, list_tools, tool_catalog

__all__ = [
    "ConfirmationRequired",
    "ExecutorOutcome",
    "Success",
    "ToolExecutor",
    "ToolFailure",
    "ToolSpec",
    "build_registry",
    "list_tools",
    "tool_catalog",
]
