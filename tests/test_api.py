from __future__ import annotations

import json
from typing import Any

import pytest
from fastapi.testclient import TestClient

from ctx_agent.api.main import create_app
from ctx_agent.config.settings import Settings
from ctx_agent.conversation.handler import APOLOGY_REPLY
from ctx_agent.services import telegram as telegram_module
from ctx_agent.services.results import ServiceResult
from ctx_agent.services.telegram import TelegramClient
from ctx_agent.tools.registry import list_tools

SECRET = "s3cret"


class _EchoHandler:
    def __init__(self) -> None:
        self.received: list[tuple[Any, str]] = []

    def handle(self, conversation_id, text: str) -> str:
        self.received.append((conversation_id, text))
        return f"echo: {text}"


class _CrashingHandler:
    def handle(self, conversation_id, text: str) -> str:
        raise RuntimeError("vault unplugged")


class _Replier:
    def __init__(self) -> None:
        self.sent: list[tuple[Any, str]] = []

    def send_message(self, chat_id, text: str) -> ServiceResult[None]:
        self.sent.append((chat_id, text))
        return ServiceResult.success(None)


def _update(text: str | None, chat_id: int = 555) -> dict[str, Any]:
    message: dict[str, Any] = {"message_id": 1, "chat": {"id": chat_id, "type": "private"}}
    if text is not None:
        message["text"] = text
    return {"update_id": 10, "message": message}


@pytest.fixture
def replier() -> _Replier:
    return _Replier()


@pytest.fixture
def echo() -> _EchoHandler:
    return _EchoHandler()


@pytest.fixture
def client(echo: _EchoHandler, replier: _Replier) -> TestClient:
    app = create_app(
        handler=echo,
        replier=replier,
        settings_override=Settings(telegram_webhook_secret=SECRET),
    )
    return TestClient(app)


def _headers(secret: str = SECRET) -> dict[str, str]:
    return {"X-Telegram-Bot-Api-Secret-Token": secret}


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "ctx-agent"}


def test_tools_lists_the_catalog(client: TestClient) -> None:
    response = client.get("/tools")

    assert response.status_code == 200
    assert response.json() == {"tools": list_tools()}


def test_webhook_replies_in_the_same_chat(
    client: TestClient, echo: _EchoHandler, replier: _Replier
) -> None:
    response = client.post("/webhook", json=_update("nancy thursday uat"), headers=_headers())

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert echo.received == [(555, "nancy thursday uat")]
    assert replier.sent == [(555, "echo: nancy thursday uat")]


def test_webhook_ignores_updates_without_text(
    client: TestClient, echo: _EchoHandler, replier: _Replier
) -> None:
    response = client.post("/webhook", json=_update(None), headers=_headers())
    edited = client.post("/webhook", json={"update_id": 11}, headers=_headers())

    assert response.status_code == 200
    assert edited.status_code == 200
    assert echo.received == []
    assert replier.sent == []


def test_webhook_rejects_wrong_secret(
    client: TestClient, echo: _EchoHandler, replier: _Replier
) -> None:
    response = client.post("/webhook", json=_update("hi"), headers=_headers("nope"))
    missing = client.post("/webhook", json=_update("hi"))

    assert response.status_code == 401
    assert missing.status_code == 401
    assert echo.received == []
    assert replier.sent == []


def test_handler_crash_still_sends_an_apology(replier: _Replier) -> None:
    app = create_app(
        handler=_CrashingHandler(),
        replier=replier,
        settings_override=Settings(telegram_webhook_secret=""),
    )

    response = TestClient(app).post("/webhook", json=_update("hello", chat_id=9))

    assert response.status_code == 200
    assert replier.sent == [(9, APOLOGY_REPLY)]


class _FakeResponse:
    def __enter__(self) -> _FakeResponse:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        return None

    def read(self) -> bytes:
        return b'{"ok": true}'


def test_telegram_client_posts_send_message(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Any] = {}

    def _fake_urlopen(req, timeout=None):
        captured["url"] = req.full_url
        captured["body"] = json.loads(req.data)
        return _FakeResponse()

    monkeypatch.setattr(telegram_module.request, "urlopen", _fake_urlopen)

    result = TelegramClient(bot_token="123:abc", base_url="https://tg.test/").send_message(
        9, "Done."
    )

    assert result.error is None
    assert captured["url"] == "https://tg.test/bot123:abc/sendMessage"
    assert captured["body"] == {"chat_id": 9, "text": "Done."}


def test_telegram_client_requires_a_token() -> None:
    with pytest.raises(RuntimeError, match="TELEGRAM_BOT_TOKEN"):
        TelegramClient(bot_token="")
