"""Approval records shared by the executor and the conversation front door."""

from typing import Any

from pydantic import BaseModel, Field


class PendingApproval(BaseModel):
    """A tool call parked until the user replies yes or no.

    ``arguments`` is the validated tool input, replayed unchanged on approval.
    """

    tool_name: str
    target_id: str
    description: str
    arguments: dict[str, Any] = Field(default_factory=dict)
