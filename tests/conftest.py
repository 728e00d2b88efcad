from __future__ import annotations

import copy
from datetime import datetime
from typing import Any

import pytest

from ctx_agent.config.settings import Settings
from ctx_agent.llm.client import CompletionResponse
from ctx_agent.services.results import ServiceResult
from ctx_agent.services.trello import TrelloBoard, TrelloCard, TrelloList
from ctx_agent.services.vault import NotesVault
from ctx_agent.storage.memory import InMemoryApprovalStore
from ctx_agent.tools.gateway import ToolExecutor

# Monday
FIXED_NOW = datetime(2026, 10, 19, 14, 47)


def text_response(
    *texts: str, input_tokens: int = 10, output_tokens: int = 5
) -> CompletionResponse:
    return CompletionResponse.model_validate(
        {
            "content": [{"type": "text", "text": text} for text in texts],
            "stop_reason": "end_turn",
            "usage": {"input_tokens": input_tokens, "output_tokens": output_tokens},
        }
    )


def tool_use_response(
    *calls: tuple[str, str, dict[str, Any]],
    preamble: str | None = None,
    input_tokens: int = 10,
    output_tokens: int = 5,
) -> CompletionResponse:
    content: list[dict[str, Any]] = []
    if preamble:
        content.append({"type": "text", "text": preamble})
    for tool_use_id, name, tool_input in calls:
        content.append({"type": "tool_use", "id": tool_use_id, "name": name, "input": tool_input})
    return CompletionResponse.model_validate(
        {
            "content": content,
            "stop_reason": "tool_use",
            "usage": {"input_tokens": input_tokens, "output_tokens": output_tokens},
        }
    )


class ScriptedClient:
    """Completion client double that replays responses (or raises exceptions) in order."""

    def __init__(self, script: list[CompletionResponse | Exception]) -> None:
        self.script = list(script)
        self.calls: list[dict[str, Any]] = []

    def create_message(
        self,
        *,
        system: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> CompletionResponse:
        self.calls.append(
            {"system": system, "messages": copy.deepcopy(messages), "tools": tools}
        )
        if not self.script:
            raise AssertionError("ScriptedClient ran out of responses")
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class LoopingClient:
    """Always asks for another tool call, to exercise the iteration cap."""

    def __init__(self) -> None:
        self.calls = 0

    def create_message(self, *, system, messages, tools) -> CompletionResponse:
        self.calls += 1
        return tool_use_response((f"toolu_{self.calls}", "get_boards", {}))


class FakeTrello:
    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.cards: dict[str, TrelloCard] = {
            "card-nancy": _card("card-nancy", "Call Nancy about UAT", "list-inbox"),
        }
        self.failures: dict[str, tuple[str, str]] = {}

    def _fail(self, operation: str) -> ServiceResult | None:
        if operation in self.failures:
            code, message = self.failures[operation]
            return ServiceResult.failure(code, message)
        return None

    def get_boards(self) -> ServiceResult[list[TrelloBoard]]:
        self.calls.append(("get_boards", ()))
        return self._fail("get_boards") or ServiceResult.success(
            [TrelloBoard(id="board-1", name="Work"), TrelloBoard(id="board-2", name="Home")]
        )

    def get_lists(self, board_id: str) -> ServiceResult[list[TrelloList]]:
        self.calls.append(("get_lists", (board_id,)))
        return self._fail("get_lists") or ServiceResult.success(
            [TrelloList(id="list-inbox", name="Inbox", idBoard=board_id)]
        )

    def get_cards(self, list_id: str) -> ServiceResult[list[TrelloCard]]:
        self.calls.append(("get_cards", (list_id,)))
        return self._fail("get_cards") or ServiceResult.success(
            [card for card in self.cards.values() if card.list_id == list_id]
        )

    def create_card(self, list_id, name, desc=None, due=None) -> ServiceResult[TrelloCard]:
        self.calls.append(("create_card", (list_id, name, desc, due)))
        failed = self._fail("create_card")
        if failed:
            return failed
        card = _card(f"card-{len(self.cards) + 1}", name, list_id, due=due)
        self.cards[card.id] = card
        return ServiceResult.success(card)

    def move_card(self, card_id: str, target_list_id: str) -> ServiceResult[TrelloCard]:
        self.calls.append(("move_card", (card_id, target_list_id)))
        failed = self._fail("move_card")
        if failed:
            return failed
        card = self.cards[card_id].model_copy(update={"list_id": target_list_id})
        self.cards[card_id] = card
        return ServiceResult.success(card)

    def archive_card(self, card_id: str) -> ServiceResult[TrelloCard]:
        self.calls.append(("archive_card", (card_id,)))
        failed = self._fail("archive_card")
        if failed:
            return failed
        card = self.cards[card_id].model_copy(update={"closed": True})
        self.cards[card_id] = card
        return ServiceResult.success(card)

    def set_due(self, card_id: str, due_date: str) -> ServiceResult[TrelloCard]:
        self.calls.append(("set_due", (card_id, due_date)))
        failed = self._fail("set_due")
        if failed:
            return failed
        card = self.cards[card_id].model_copy(update={"due": due_date})
        self.cards[card_id] = card
        return ServiceResult.success(card)

    def operations(self) -> list[str]:
        return [name for name, _ in self.calls]


def _card(card_id: str, name: str, list_id: str, *, due: str | None = None) -> TrelloCard:
    return TrelloCard(id=card_id, name=name, desc="", idList=list_id, due=due)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        max_iterations=10,
        llm_max_retries=1,
        llm_backoff_s=1.0,
        llm_context_window=200_000,
        token_warning_ratio=0.75,
        default_list_id="list-inbox",
        vault_path="",
        user_config_path="/nonexistent/ctx/config.json",
    )


@pytest.fixture
def trello() -> FakeTrello:
    return FakeTrello()


@pytest.fixture
def vault(tmp_path) -> NotesVault:
    return NotesVault(tmp_path / "vault", clock=lambda: FIXED_NOW)


@pytest.fixture
def approvals() -> InMemoryApprovalStore:
    return InMemoryApprovalStore()


@pytest.fixture
def executor(
    trello: FakeTrello, vault: NotesVault, approvals: InMemoryApprovalStore
) -> ToolExecutor:
    return ToolExecutor(
        trello=trello,
        vault=vault,
        approvals=approvals,
        conversation_id=4242,
        default_list_id="list-inbox",
    )
