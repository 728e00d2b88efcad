"""FastAPI app entrypoint: Telegram webhook ingestion."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Protocol

from fastapi import BackgroundTasks, FastAPI, Header, HTTPException, Request
from pydantic import BaseModel, ConfigDict

from ctx_agent.config.settings import Settings, get_settings
from ctx_agent.conversation.factory import build_handler
from ctx_agent.conversation.handler import APOLOGY_REPLY, ConversationHandler
from ctx_agent.services.results import ServiceResult
from ctx_agent.services.telegram import TelegramClient
from ctx_agent.tools import list_tools

logger = logging.getLogger(__name__)


class Replier(Protocol):
    def send_message(self, chat_id: int | str, text: str) -> ServiceResult[None]: ...


class TelegramChat(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int


class TelegramMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message_id: int | None = None
    text: str | None = None
    chat: TelegramChat


class TelegramUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    update_id: int | None = None
    message: TelegramMessage | None = None


def _ensure_runtime_state(
    app: FastAPI,
    *,
    settings: Settings,
    handler_override: ConversationHandler | None,
    replier_override: Replier | None,
) -> None:
    if not hasattr(app.state, "handler"):
        app.state.handler = handler_override or build_handler(settings)

    if not hasattr(app.state, "replier"):
        app.state.replier = replier_override or TelegramClient(
            bot_token=settings.resolved_telegram_bot_token(),
            base_url=settings.telegram_base_url,
        )

    if not hasattr(app.state, "settings"):
        app.state.settings = settings


def create_app(
    *,
    handler: ConversationHandler | None = None,
    replier: Replier | None = None,
    settings_override: Settings | None = None,
) -> FastAPI:
    settings = settings_override or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _ensure_runtime_state(
            app,
            settings=settings,
            handler_override=handler,
            replier_override=replier,
        )
        yield

    app_lifespan = lifespan if handler is None else None
    app = FastAPI(title=settings.app_name, lifespan=app_lifespan)

    # Keep test paths reliable when lifespan is not executed by the client.
    if handler is not None:
        _ensure_runtime_state(
            app,
            settings=settings,
            handler_override=handler,
            replier_override=replier,
        )

    def _runtime(request: Request) -> tuple[ConversationHandler, Replier]:
        if not hasattr(request.app.state, "handler"):
            _ensure_runtime_state(
                request.app,
                settings=settings,
                handler_override=handler,
                replier_override=replier,
            )
        return request.app.state.handler, request.app.state.replier

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "service": settings.app_name}

    @app.get("/tools")
    def tools() -> dict[str, list[str]]:
        return {"tools": list_tools()}

    @app.post("/webhook")
    def webhook(
        update: TelegramUpdate,
        request: Request,
        background_tasks: BackgroundTasks,
        x_telegram_bot_api_secret_token: str | None = Header(default=None),
    ) -> dict[str, bool]:
        secret = settings.telegram_webhook_secret
        if secret and x_telegram_bot_api_secret_token != secret:
            raise HTTPException(status_code=401, detail="Invalid webhook secret")

        message = update.message
        if message is None or not message.text:
            return {"ok": True}

        logger.info(
            "webhook event=received update_id=%s chat_id=%s",
            update.update_id,
            message.chat.id,
        )
        conversation_handler, reply_client = _runtime(request)
        background_tasks.add_task(
            _process_message,
            conversation_handler,
            reply_client,
            message.chat.id,
            message.text,
        )
        return {"ok": True}

    return app


def _process_message(
    handler: ConversationHandler,
    replier: Replier,
    chat_id: int,
    text: str,
) -> None:
    try:
        reply = handler.handle(chat_id, text)
    except Exception:  # noqa: BLE001
        logger.exception("webhook event=handler_crashed chat_id=%s", chat_id)
        reply = APOLOGY_REPLY
    replier.send_message(chat_id, reply)


app = create_app()
