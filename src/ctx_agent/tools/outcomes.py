"""Executor outcomes and the in-band failure values they may carry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from ctx_agent.storage.models import PendingApproval

FailureKind = Literal["PARSING_ERROR", "SERVICE_ERROR", "TOOL_ERROR", "UNKNOWN_TOOL"]


@dataclass(frozen=True)
class ToolFailure:
    """A failed tool call, kept structured until it is shown to the model."""

    kind: FailureKind
    detail: str
    tool_name: str = ""

    def render(self) -> str:
        if self.kind == "TOOL_ERROR":
            return f"Tool error: {self.tool_name} failed - {self.detail}"
        if self.kind == "UNKNOWN_TOOL":
            return f"Unknown tool: {self.tool_name}"
        return f"{self.kind}: {self.detail}"


@dataclass(frozen=True)
class Success:
    text: str = ""
    failure: ToolFailure | None = None

    @property
    def message(self) -> str:
        if self.failure is not None:
            return self.failure.render()
        return self.text


@dataclass(frozen=True)
class ConfirmationRequired:
    message: str
    approval: PendingApproval


ExecutorOutcome = Success | ConfirmationRequired
