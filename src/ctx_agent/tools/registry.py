"""Tool catalog: names, model-facing descriptions and input schemas."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from pydantic import BaseModel

from ctx_agent.tools.schemas import (
    AppendNoteInput,
    ArchiveCardInput,
    CreateTaskInput,
    GetBoardsInput,
    GetCardsInput,
    GetListsInput,
    MoveCardInput,
    ReadDailyInput,
    SearchNotesInput,
    SetDueDateInput,
)


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_model: type[BaseModel]
    requires_confirmation: bool = False
    confirmation_label: str = ""

    def to_catalog_entry(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_model.model_json_schema(),
        }


def build_registry() -> dict[str, ToolSpec]:
    specs = [
        ToolSpec(
            name="create_task",
            description=(
                "Create a new task as a Trello card. Use when the user mentions something "
                "actionable that needs tracking. Clean up informal input into a clear task "
                "title. Resolves to the default inbox list unless a specific list_id is provided."
            ),
            input_model=CreateTaskInput,
        ),
        ToolSpec(
            name="get_boards",
            description=(
                "List all Trello boards the user has access to. Use when the user asks about "
                "their boards or you need to find a board ID."
            ),
            input_model=GetBoardsInput,
        ),
        ToolSpec(
            name="get_lists",
            description=(
                "List all lists on a Trello board. Use when the user asks what lists exist on a "
                "board, or when you need a list ID to move or create cards."
            ),
            input_model=GetListsInput,
        ),
        ToolSpec(
            name="get_cards",
            description=(
                "List all cards on a Trello list. Use when the user asks what tasks are on a "
                "list, wants to review their inbox, or you need a card ID for another operation."
            ),
            input_model=GetCardsInput,
        ),
        ToolSpec(
            name="move_card",
            description=(
                "Move a Trello card to a different list. Use when the user wants to organize, "
                "sort, or reclassify a task. Requires the card ID and the target list ID."
            ),
            input_model=MoveCardInput,
        ),
        ToolSpec(
            name="archive_card",
            description=(
                "Archive a Trello card. Use when the user wants to remove or complete a task. "
                "This is destructive: the card is hidden from the board, so the user is asked "
                "to confirm before anything happens. Pass the card name along with its ID."
            ),
            input_model=ArchiveCardInput,
            requires_confirmation=True,
            confirmation_label="Archive card",
        ),
        ToolSpec(
            name="set_due_date",
            description=(
                "Set or update the due date on a Trello card. Use when the user mentions a "
                "deadline for an existing task. The due_date should be an ISO 8601 date "
                "string (YYYY-MM-DD)."
            ),
            input_model=SetDueDateInput,
        ),
        ToolSpec(
            name="append_note",
            description=(
                "Append a timestamped entry to today's daily note in Obsidian. Use when the "
                "user shares something informational that doesn't need to be a task: "
                "observations, reminders, context, meeting notes."
            ),
            input_model=AppendNoteInput,
        ),
        ToolSpec(
            name="search_notes",
            description=(
                "Search the Obsidian vault for a keyword or phrase. Use when the user asks "
                "about past notes or wants to find something they previously captured."
            ),
            input_model=SearchNotesInput,
        ),
        ToolSpec(
            name="read_daily",
            description=(
                "Read today's daily note from Obsidian. Use when the user asks what they've "
                "captured today or wants to review their daily note."
            ),
            input_model=ReadDailyInput,
        ),
    ]
    return {spec.name: spec for spec in specs}


@lru_cache(maxsize=1)
def _catalog() -> tuple[dict[str, Any], ...]:
    return tuple(spec.to_catalog_entry() for spec in build_registry().values())


def tool_catalog() -> list[dict[str, Any]]:
    """Tool definitions in the shape the Messages API expects, built once."""
    return [dict(entry) for entry in _catalog()]


def list_tools() -> list[str]:
    return sorted(build_registry().keys())
