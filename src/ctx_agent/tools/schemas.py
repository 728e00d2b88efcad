"""Strict Pydantic schemas for tool inputs."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class StrictModel(BaseModel):
    """Base model for strict schema validation."""

    model_config = ConfigDict(extra="forbid")


class CreateTaskInput(StrictModel):
    name: str = Field(min_length=1, description="Clean, short task title.")
    desc: str | None = Field(default=None, description="Optional longer description.")
    list_id: str | None = Field(
        default=None,
        description="Target list id. Omit to use the default inbox list.",
    )
    due: str | None = Field(default=None, description="Due date as YYYY-MM-DD.")


class GetBoardsInput(StrictModel):
    pass


class GetListsInput(StrictModel):
    board_id: str


class GetCardsInput(StrictModel):
    list_id: str


class MoveCardInput(StrictModel):
    card_id: str
    target_list_id: str


class ArchiveCardInput(StrictModel):
    card_id: str
    name: str | None = Field(
        default=None,
        description="Card title, shown to the user when asking for confirmation.",
    )


class SetDueDateInput(StrictModel):
    card_id: str
    due_date: str = Field(description="ISO 8601 date (YYYY-MM-DD).")


class AppendNoteInput(StrictModel):
    note_text: str = Field(min_length=1)


class SearchNotesInput(StrictModel):
    query_text: str = Field(min_length=1)


class ReadDailyInput(StrictModel):
    pass
