from __future__ import annotations

import http.client
import io
import json
from typing import Any
from urllib import error

import pytest

from ctx_agent.llm import client as client_module
from ctx_agent.llm.client import (
    AnthropicMessagesClient,
    CompletionError,
    CompletionResponse,
    is_retryable_completion_error,
)
from ctx_agent.llm.retry import call_with_retry


class _FakeResponse:
    status = 200

    def __init__(self, body: str) -> None:
        self._body = body.encode("utf-8")

    def __enter__(self) -> _FakeResponse:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        return None

    def read(self) -> bytes:
        return self._body


def _client() -> AnthropicMessagesClient:
    return AnthropicMessagesClient(api_key="sk-test", base_url="https://llm.test/v1/")


def _call(client: AnthropicMessagesClient) -> CompletionResponse:
    return client.create_message(
        system="be brief",
        messages=[{"role": "user", "content": "hi"}],
        tools=[{"name": "read_daily", "description": "d", "input_schema": {"type": "object"}}],
    )


def test_missing_api_key_fails_fast() -> None:
    with pytest.raises(RuntimeError, match="ANTHROPIC_API_KEY"):
        AnthropicMessagesClient(api_key="")


def test_request_shape_and_response_parsing(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Any] = {}

    def _fake_urlopen(req, timeout=None):
        captured["url"] = req.full_url
        captured["headers"] = {key.lower(): value for key, value in req.header_items()}
        captured["body"] = json.loads(req.data)
        return _FakeResponse(
            json.dumps(
                {
                    "id": "msg_1",
                    "content": [
                        {"type": "text", "text": "Checking."},
                        {"type": "tool_use", "id": "toolu_1", "name": "read_daily", "input": {}},
                    ],
                    "stop_reason": "tool_use",
                    "usage": {"input_tokens": 120, "output_tokens": 30},
                }
            )
        )

    monkeypatch.setattr(client_module.request, "urlopen", _fake_urlopen)

    response = _call(_client())

    assert captured["url"] == "https://llm.test/v1/messages"
    assert captured["headers"]["x-api-key"] == "sk-test"
    assert captured["headers"]["anthropic-version"] == "2023-06-01"
    assert captured["body"]["system"] == "be brief"
    assert captured["body"]["tools"][0]["name"] == "read_daily"
    assert response.stop_reason == "tool_use"
    assert response.text() == "Checking."
    assert [block.id for block in response.tool_uses()] == ["toolu_1"]
    assert response.usage.input_tokens == 120
    assert response.assistant_turn() == {
        "role": "assistant",
        "content": [
            {"type": "text", "text": "Checking."},
            {"type": "tool_use", "id": "toolu_1", "name": "read_daily", "input": {}},
        ],
    }


def test_rate_limit_error_is_retryable(monkeypatch: pytest.MonkeyPatch) -> None:
    body = json.dumps({"type": "error", "error": {"type": "rate_limit_error", "message": "slow"}})

    def _fake_urlopen(req, timeout=None):
        raise error.HTTPError(req.full_url, 429, "Too Many Requests", {}, io.BytesIO(body.encode()))

    monkeypatch.setattr(client_module.request, "urlopen", _fake_urlopen)

    with pytest.raises(CompletionError) as excinfo:
        _call(_client())

    assert excinfo.value.status_code == 429
    assert excinfo.value.error_type == "rate_limit_error"
    assert excinfo.value.retryable is True


def test_client_error_is_not_retryable(monkeypatch: pytest.MonkeyPatch) -> None:
    body = json.dumps({"error": {"type": "invalid_request_error", "message": "bad tools"}})

    def _fake_urlopen(req, timeout=None):
        raise error.HTTPError(req.full_url, 400, "Bad Request", {}, io.BytesIO(body.encode()))

    monkeypatch.setattr(client_module.request, "urlopen", _fake_urlopen)

    with pytest.raises(CompletionError) as excinfo:
        _call(_client())

    assert "bad tools" in str(excinfo.value)
    assert excinfo.value.retryable is False


def test_transport_failure_is_retryable(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fake_urlopen(req, timeout=None):
        raise error.URLError("connection refused")

    monkeypatch.setattr(client_module.request, "urlopen", _fake_urlopen)

    with pytest.raises(CompletionError) as excinfo:
        _call(_client())

    assert excinfo.value.status_code is None
    assert is_retryable_completion_error(excinfo.value) is True


def test_garbled_body_is_a_completion_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        client_module.request, "urlopen", lambda req, timeout=None: _FakeResponse("not json")
    )

    with pytest.raises(CompletionError) as excinfo:
        _call(_client())

    assert excinfo.value.error_type == "invalid_response"
    assert excinfo.value.retryable is False


def test_retry_gives_up_after_one_retry() -> None:
    attempts: list[int] = []
    sleeps: list[float] = []

    def _always_down() -> str:
        attempts.append(1)
        raise CompletionError("down")

    with pytest.raises(CompletionError):
        call_with_retry(
            _always_down,
            is_retryable=is_retryable_completion_error,
            max_retries=1,
            backoff_s=1.0,
            sleep=sleeps.append,
        )

    assert len(attempts) == 2
    assert sleeps == [1.0]


def test_retry_does_not_touch_other_exceptions() -> None:
    sleeps: list[float] = []

    def _broken() -> str:
        raise ValueError("bug")

    with pytest.raises(ValueError):
        call_with_retry(_broken, is_retryable=is_retryable_completion_error, sleep=sleeps.append)

    assert sleeps == []


def test_retry_returns_the_first_success() -> None:
    outcomes: list[Any] = [CompletionError("blip"), "ok"]

    def _flaky() -> str:
        item = outcomes.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    assert call_with_retry(_flaky, is_retryable=lambda exc: True, sleep=lambda s: None) == "ok"


@pytest.mark.parametrize(
    "failure",
    [
        http.client.RemoteDisconnected("Remote end closed connection without response"),
        ConnectionResetError("connection reset by peer"),
        http.client.IncompleteRead(b"{", 120),
    ],
)
def test_mid_response_failures_are_retryable(
    monkeypatch: pytest.MonkeyPatch, failure: Exception
) -> None:
    def _fake_urlopen(req, timeout=None):
        raise failure

    monkeypatch.setattr(client_module.request, "urlopen", _fake_urlopen)

    with pytest.raises(CompletionError) as excinfo:
        _call(_client())

    assert excinfo.value.status_code is None
    assert excinfo.value.retryable is True


def test_undecodable_body_is_an_invalid_response(monkeypatch: pytest.MonkeyPatch) -> None:
    response = _FakeResponse("")
    response._body = b"\xff\xfe\x00garbage"
    monkeypatch.setattr(client_module.request, "urlopen", lambda req, timeout=None: response)

    with pytest.raises(CompletionError) as excinfo:
        _call(_client())

    assert excinfo.value.error_type == "invalid_response"
    assert excinfo.value.retryable is False
