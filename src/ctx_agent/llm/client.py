"""Completion endpoint client for the Anthropic Messages API."""

from __future__ import annotations

import http.client
import json
import logging
from typing import Any, Protocol
from urllib import error, request

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

RATE_LIMIT_STATUS = 429


class CompletionError(RuntimeError):
    """A failed completion call.

    ``status_code`` is ``None`` for transport failures (DNS, refused connection,
    timeout) and the HTTP status for errors reported by the API itself.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error_type: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_type = error_type

    @property
    def retryable(self) -> bool:
        if self.status_code is None:
            return True
        return self.status_code == RATE_LIMIT_STATUS or self.error_type == "rate_limit_error"


def is_retryable_completion_error(exc: Exception) -> bool:
    return isinstance(exc, CompletionError) and exc.retryable


class ContentBlock(BaseModel):
    """One block of an assistant message; unknown block types pass through."""

    model_config = ConfigDict(extra="allow")

    type: str
    text: str | None = None
    id: str | None = None
    name: str | None = None
    input: Any = None


class Usage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    input_tokens: int = 0
    output_tokens: int = 0


class CompletionResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: list[ContentBlock] = Field(default_factory=list)
    stop_reason: str | None = None
    usage: Usage = Field(default_factory=Usage)

    def text(self) -> str:
        return "\n".join(
            block.text for block in self.content if block.type == "text" and block.text
        )

    def tool_uses(self) -> list[ContentBlock]:
        return [block for block in self.content if block.type == "tool_use"]

    def assistant_turn(self) -> dict[str, Any]:
        return {
            "role": "assistant",
            "content": [block.model_dump(exclude_none=True) for block in self.content],
        }


class CompletionClient(Protocol):
    """Interface for one tool-aware completion round trip."""

    def create_message(
        self,
        *,
        system: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> CompletionResponse: ...


class AnthropicMessagesClient:
    """Small Anthropic adapter using the Messages REST API."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str = "claude-haiku-4-5-20251001",
        base_url: str = "https://api.anthropic.com/v1",
        api_version: str = "2023-06-01",
        max_tokens: int = 1024,
        timeout_s: float = 30.0,
    ) -> None:
        if not api_key:
            raise RuntimeError("ANTHROPIC_API_KEY is missing")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.max_tokens = max_tokens
        self.timeout_s = timeout_s

    def create_message(
        self,
        *,
        system: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> CompletionResponse:
        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": system,
            "tools": tools,
            "messages": messages,
        }
        req = request.Request(
            url=f"{self.base_url}/messages",
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": self.api_version,
                "content-type": "application/json",
            },
        )
        try:
            with request.urlopen(req, timeout=self.timeout_s) as response:
                status = response.status
                raw_body = response.read()
        except error.HTTPError as exc:
            raw = exc.read().decode("utf-8", errors="replace")
            error_type, message = _parse_error_body(raw)
            raise CompletionError(
                f"Messages API request failed with status {exc.code}: {message[:400]}",
                status_code=exc.code,
                error_type=error_type,
            ) from exc
        except (error.URLError, OSError, http.client.HTTPException) as exc:
            reason = getattr(exc, "reason", exc)
            raise CompletionError(f"Failed to connect to Messages API: {reason}") from exc

        try:
            return CompletionResponse.model_validate(json.loads(raw_body.decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
            raise CompletionError(
                "Messages API returned an unexpected response body",
                status_code=status,
                error_type="invalid_response",
            ) from exc


def _parse_error_body(raw: str) -> tuple[str | None, str]:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        return None, raw
    detail = payload.get("error") if isinstance(payload, dict) else None
    if not isinstance(detail, dict):
        return None, raw
    return detail.get("type"), str(detail.get("message", raw))
