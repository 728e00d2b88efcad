"""Telegram Bot API reply client."""

from __future__ import annotations

import http.client
import json
import logging
from urllib import error, request

from ctx_agent.services.results import ServiceResult

logger = logging.getLogger(__name__)


class TelegramClient:
    def __init__(
        self,
        *,
        bot_token: str,
        base_url: str = "https://api.telegram.org",
        timeout_s: float = 10.0,
    ) -> None:
        if not bot_token:
            raise RuntimeError("TELEGRAM_BOT_TOKEN is missing")
        self.bot_token = bot_token
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s

    def send_message(self, chat_id: int | str, text: str) -> ServiceResult[None]:
        url = f"{self.base_url}/bot{self.bot_token}/sendMessage"
        req = request.Request(
            url=url,
            data=json.dumps({"chat_id": chat_id, "text": text}).encode("utf-8"),
            method="POST",
            headers={"Content-Type": "application/json"},
        )
        try:
            with request.urlopen(req, timeout=self.timeout_s) as response:
                response.read()
        except error.HTTPError as exc:
            logger.error("telegram_reply chat_id=%s status=%d", chat_id, exc.code)
            return ServiceResult.failure("API_ERROR", f"Telegram reply failed: {exc.code}")
        except (error.URLError, OSError, http.client.HTTPException) as exc:
            logger.error("telegram_reply chat_id=%s reason=%s", chat_id, exc)
            return ServiceResult.failure("NETWORK_ERROR", "Failed to connect to Telegram API")
        return ServiceResult.success(None)
