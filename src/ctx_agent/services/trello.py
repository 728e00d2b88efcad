"""Trello REST client returning typed ``ServiceResult`` values."""

from __future__ import annotations

import http.client
import json
import logging
from datetime import UTC, datetime
from typing import Any, TypeVar
from urllib import error, parse, request

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from ctx_agent.services.results import ServiceResult

T = TypeVar("T")
logger = logging.getLogger(__name__)


class TrelloModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TrelloBoard(TrelloModel):
    id: str
    name: str


class TrelloList(TrelloModel):
    id: str
    name: str
    board_id: str = Field(alias="idBoard")


class TrelloCard(TrelloModel):
    id: str
    name: str
    desc: str = ""
    list_id: str = Field(alias="idList")
    due: str | None = None
    closed: bool = False


_BOARDS = TypeAdapter(list[TrelloBoard])
_LISTS = TypeAdapter(list[TrelloList])
_CARDS = TypeAdapter(list[TrelloCard])
_CARD = TypeAdapter(TrelloCard)


class TrelloClient:
    """Small Trello adapter using the public REST API."""

    def __init__(
        self,
        *,
        api_key: str,
        token: str,
        base_url: str = "https://api.trello.com/1/",
        timeout_s: float = 10.0,
    ) -> None:
        self.api_key = api_key
        self.token = token
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.timeout_s = timeout_s

    def get_boards(self) -> ServiceResult[list[TrelloBoard]]:
        return self._request("GET", "members/me/boards", _BOARDS)

    def get_lists(self, board_id: str) -> ServiceResult[list[TrelloList]]:
        return self._request("GET", f"boards/{board_id}/lists", _LISTS)

    def get_cards(self, list_id: str) -> ServiceResult[list[TrelloCard]]:
        return self._request("GET", f"lists/{list_id}/cards", _CARDS)

    def create_card(
        self,
        list_id: str,
        name: str,
        desc: str | None = None,
        due: str | None = None,
    ) -> ServiceResult[TrelloCard]:
        body: dict[str, Any] = {"name": name, "idList": list_id}
        if desc is not None:
            body["desc"] = desc
        if due is not None:
            try:
                body["due"] = to_iso_due(due)
            except ValueError:
                return ServiceResult.failure("VALIDATION_ERROR", f"Invalid due date: {due}")
        return self._request("POST", "cards", _CARD, body=body)

    def move_card(self, card_id: str, target_list_id: str) -> ServiceResult[TrelloCard]:
        return self._request("PUT", f"cards/{card_id}", _CARD, params={"idList": target_list_id})

    def archive_card(self, card_id: str) -> ServiceResult[TrelloCard]:
        return self._request("PUT", f"cards/{card_id}", _CARD, params={"closed": "true"})

    def set_due(self, card_id: str, due_date: str) -> ServiceResult[TrelloCard]:
        try:
            due = to_iso_due(due_date)
        except ValueError:
            return ServiceResult.failure("VALIDATION_ERROR", f"Invalid due date: {due_date}")
        return self._request("PUT", f"cards/{card_id}", _CARD, params={"due": due})

    def _build_url(self, path: str, params: dict[str, str] | None = None) -> str:
        query = {"key": self.api_key, "token": self.token}
        if params:
            query.update(params)
        return f"{parse.urljoin(self.base_url, path)}?{parse.urlencode(query)}"

    def _request(
        self,
        method: str,
        path: str,
        adapter: TypeAdapter[T],
        *,
        params: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> ServiceResult[T]:
        headers = {"Accept": "application/json"}
        raw_body: bytes | None = None
        if body is not None:
            raw_body = json.dumps(body).encode("utf-8")
            headers["Content-Type"] = "application/json"

        req = request.Request(
            url=self._build_url(path, params),
            data=raw_body,
            method=method,
            headers=headers,
        )
        try:
            with request.urlopen(req, timeout=self.timeout_s) as response:
                raw = response.read()
        except error.HTTPError as exc:
            logger.warning("trello_request method=%s path=%s status=%d", method, path, exc.code)
            return ServiceResult.failure("API_ERROR", f"Request failed with status {exc.code}")
        except (error.URLError, OSError, http.client.HTTPException) as exc:
            logger.warning("trello_request method=%s path=%s reason=%s", method, path, exc)
            return ServiceResult.failure("NETWORK_ERROR", "Failed to connect to Trello API")

        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return ServiceResult.failure("PARSE_ERROR", "Response was not valid JSON")

        try:
            return ServiceResult.success(adapter.validate_python(payload))
        except ValidationError:
            return ServiceResult.failure("VALIDATION_ERROR", "Invalid response from Trello API")


def to_iso_due(value: str) -> str:
    """Normalize a date or datetime string to the UTC ISO form Trello stores.

    Plain dates (``2026-10-22``) become midnight UTC.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = f"{text[:-1]}+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    stamp = parsed.astimezone(UTC).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")
