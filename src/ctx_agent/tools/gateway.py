"""Schema-enforcing tool execution gateway over the Trello and vault services."""

from __future__ import annotations

import logging
from typing import Any, Callable

from pydantic import BaseModel, ValidationError

from ctx_agent.services.results import ServiceResult
from ctx_agent.services.trello import TrelloCard, TrelloClient
from ctx_agent.services.vault import NotesVault
from ctx_agent.storage.base import ApprovalStore, ConversationId
from ctx_agent.storage.models import PendingApproval
from ctx_agent.tools.outcomes import ConfirmationRequired, ExecutorOutcome, Success, ToolFailure
from ctx_agent.tools.registry import ToolSpec, build_registry
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

logger = logging.getLogger(__name__)


class ToolExecutor:
    """Validate tool input and dispatch to the matching collaborator call.

    Validation and service failures come back as ``Success`` carrying a
    ``ToolFailure`` so the model reads them as ordinary tool output. Tools whose
    spec requires confirmation are never run from ``execute``: their validated
    input is parked as a ``PendingApproval`` and ``ConfirmationRequired`` is
    returned. ``resume`` runs a parked call once the user has said yes.
    """

    def __init__(
        self,
        *,
        trello: TrelloClient,
        vault: NotesVault,
        approvals: ApprovalStore,
        conversation_id: ConversationId,
        default_list_id: str = "",
        registry: dict[str, ToolSpec] | None = None,
    ) -> None:
        self.trello = trello
        self.vault = vault
        self.approvals = approvals
        self.conversation_id = conversation_id
        self.default_list_id = default_list_id
        self.registry = registry or build_registry()
        self._handlers: dict[str, Callable[[Any], ExecutorOutcome]] = {
            "create_task": self._create_task,
            "get_boards": self._get_boards,
            "get_lists": self._get_lists,
            "get_cards": self._get_cards,
            "move_card": self._move_card,
            "archive_card": self._archive_card,
            "set_due_date": self._set_due_date,
            "append_note": self._append_note,
            "search_notes": self._search_notes,
            "read_daily": self._read_daily,
        }

    def execute(self, tool_name: str, args: Any) -> ExecutorOutcome:
        spec = self.registry.get(tool_name)
        handler = self._handlers.get(tool_name)
        if spec is None or handler is None:
            logger.warning("tool_execute event=unknown_tool tool=%s", tool_name)
            return Success(failure=ToolFailure(kind="UNKNOWN_TOOL", detail="", tool_name=tool_name))

        try:
            payload: BaseModel = spec.input_model.model_validate(args)
        except ValidationError as exc:
            logger.info(
                "tool_execute event=invalid_input tool=%s errors=%d",
                tool_name,
                exc.error_count(),
            )
            return Success(
                failure=ToolFailure(kind="PARSING_ERROR", detail=str(exc), tool_name=tool_name)
            )

        if spec.requires_confirmation:
            return self._park(spec, payload)
        return handler(payload)

    def resume(self, approval: PendingApproval) -> ExecutorOutcome:
        spec = self.registry.get(approval.tool_name)
        handler = self._handlers.get(approval.tool_name)
        if spec is None or handler is None:
            logger.warning("tool_resume event=unknown_tool tool=%s", approval.tool_name)
            return Success(
                failure=ToolFailure(kind="UNKNOWN_TOOL", detail="", tool_name=approval.tool_name)
            )
        try:
            payload = spec.input_model.model_validate(approval.arguments)
        except ValidationError as exc:
            return Success(
                failure=ToolFailure(kind="PARSING_ERROR", detail=str(exc), tool_name=spec.name)
            )
        logger.info(
            "tool_resume event=approved tool=%s conversation_id=%s target_id=%s",
            spec.name,
            self.conversation_id,
            approval.target_id,
        )
        return handler(payload)

    def _park(self, spec: ToolSpec, payload: BaseModel) -> ConfirmationRequired:
        target_id = str(getattr(payload, "card_id", ""))
        approval = PendingApproval(
            tool_name=spec.name,
            target_id=target_id,
            description=getattr(payload, "name", None) or target_id,
            arguments=payload.model_dump(exclude_none=True),
        )
        replaced = self.approvals.put(self.conversation_id, approval)
        if replaced is not None:
            logger.info(
                "tool_execute event=approval_replaced conversation_id=%s previous_target_id=%s",
                self.conversation_id,
                replaced.target_id,
            )
        logger.info(
            "tool_execute event=confirmation_required tool=%s conversation_id=%s target_id=%s",
            spec.name,
            self.conversation_id,
            target_id,
        )
        label = spec.confirmation_label or spec.name
        return ConfirmationRequired(
            message=f"{label}: '{approval.description}'? Reply yes or no.",
            approval=approval,
        )

    def _create_task(self, payload: CreateTaskInput) -> ExecutorOutcome:
        list_id = payload.list_id or self.default_list_id
        if not list_id:
            return _service_failure(
                "create_task",
                "CONFIG_ERROR",
                "No list_id given and no default inbox list is configured",
            )
        result = self.trello.create_card(list_id, payload.name, payload.desc, payload.due)
        return _card_outcome("create_task", result)

    def _get_boards(self, _payload: GetBoardsInput) -> ExecutorOutcome:
        result = self.trello.get_boards()
        if result.error is not None:
            return _service_failure("get_boards", result.error.code, result.error.message)
        if not result.data:
            return Success(text="No boards found.")
        return Success(text="\n".join(f"- {board.name} (id: {board.id})" for board in result.data))

    def _get_lists(self, payload: GetListsInput) -> ExecutorOutcome:
        result = self.trello.get_lists(payload.board_id)
        if result.error is not None:
            return _service_failure("get_lists", result.error.code, result.error.message)
        if not result.data:
            return Success(text="No lists on this board.")
        return Success(text="\n".join(f"- {item.name} (id: {item.id})" for item in result.data))

    def _get_cards(self, payload: GetCardsInput) -> ExecutorOutcome:
        result = self.trello.get_cards(payload.list_id)
        if result.error is not None:
            return _service_failure("get_cards", result.error.code, result.error.message)
        if not result.data:
            return Success(text="No cards on this list.")
        lines = [
            f"- {card.name} (id: {card.id}), (desc: {card.desc or 'none'}), "
            f"(due: {card.due or 'none'})"
            for card in result.data
        ]
        return Success(text="\n".join(lines))

    def _move_card(self, payload: MoveCardInput) -> ExecutorOutcome:
        result = self.trello.move_card(payload.card_id, payload.target_list_id)
        return _card_outcome("move_card", result)

    def _archive_card(self, payload: ArchiveCardInput) -> ExecutorOutcome:
        result = self.trello.archive_card(payload.card_id)
        if result.error is not None or result.data is None:
            code = result.error.code if result.error else "API_ERROR"
            message = result.error.message if result.error else "Empty response"
            return _service_failure("archive_card", code, message)
        return Success(text=f"Archived: {result.data.name} (id: {result.data.id})")

    def _set_due_date(self, payload: SetDueDateInput) -> ExecutorOutcome:
        result = self.trello.set_due(payload.card_id, payload.due_date)
        return _card_outcome("set_due_date", result)

    def _append_note(self, payload: AppendNoteInput) -> ExecutorOutcome:
        result = self.vault.append_to_daily(payload.note_text)
        if result.error is not None:
            return _service_failure("append_note", result.error.code, result.error.message)
        return Success(text="Note appended to daily note.")

    def _search_notes(self, payload: SearchNotesInput) -> ExecutorOutcome:
        result = self.vault.search_notes(payload.query_text)
        if result.error is not None:
            return _service_failure("search_notes", result.error.code, result.error.message)
        if not result.data:
            return Success(text=f"No notes matched '{payload.query_text}'.")
        return Success(text="Notes found:\n" + "\n".join(result.data))

    def _read_daily(self, _payload: ReadDailyInput) -> ExecutorOutcome:
        result = self.vault.read_daily()
        if result.error is not None:
            return _service_failure("read_daily", result.error.code, result.error.message)
        return Success(text=f"Daily note:\n{result.data}")


def _card_outcome(tool_name: str, result: ServiceResult[TrelloCard]) -> ExecutorOutcome:
    if result.error is not None or result.data is None:
        code = result.error.code if result.error else "API_ERROR"
        message = result.error.message if result.error else "Empty response"
        return _service_failure(tool_name, code, message)
    return Success(text=f"Card name: {result.data.name}, id: {result.data.id}")


def _service_failure(tool_name: str, code: str, message: str) -> Success:
    logger.warning("tool_execute event=service_error tool=%s code=%s", tool_name, code)
    return Success(
        failure=ToolFailure(kind="SERVICE_ERROR", detail=f"{code}, {message}", tool_name=tool_name)
    )
