"""Application settings."""

from functools import lru_cache
import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ctx_agent.config.user_config import UserConfigStore

PROJECT_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "ctx-agent"
    log_level: str = "INFO"
    max_iterations: int = Field(default=10, ge=1)
    llm_model: str = "claude-haiku-4-5-20251001"
    llm_base_url: str = "https://api.anthropic.com/v1"
    llm_api_version: str = "2023-06-01"
    llm_max_tokens: int = Field(default=1024, ge=1)
    llm_timeout_s: float = Field(default=30.0, ge=0.5)
    llm_max_retries: int = Field(default=1, ge=0)
    llm_backoff_s: float = Field(default=1.0, ge=0.0)
    llm_context_window: int = Field(default=200_000, ge=1)
    token_warning_ratio: float = Field(default=0.75, gt=0.0, le=1.0)
    anthropic_api_key: str = ""
    trello_base_url: str = "https://api.trello.com/1/"
    trello_api_key: str = ""
    trello_token: str = ""
    trello_timeout_s: float = Field(default=10.0, ge=0.5)
    default_list_id: str = ""
    vault_path: str = ""
    telegram_bot_token: str = ""
    telegram_base_url: str = "https://api.telegram.org"
    telegram_webhook_secret: str = ""
    user_config_path: str = ""

    model_config = SettingsConfigDict(
        env_prefix="CTX_AGENT_",
        extra="ignore",
        env_file=(PROJECT_ROOT / ".env", PROJECT_ROOT / ".env.local"),
        env_file_encoding="utf-8",
    )

    def user_config_store(self) -> UserConfigStore:
        if self.user_config_path:
            return UserConfigStore(Path(self.user_config_path))
        return UserConfigStore()

    def resolved_anthropic_api_key(self) -> str:
        return self.anthropic_api_key or os.getenv("ANTHROPIC_API_KEY", "")

    def resolved_trello_api_key(self) -> str:
        return self.trello_api_key or os.getenv("TRELLO_API_KEY", "")

    def resolved_trello_token(self) -> str:
        return self.trello_token or os.getenv("TRELLO_TOKEN", "")

    def resolved_trello_base_url(self) -> str:
        return os.getenv("TRELLO_BASE_URL", "") or self.trello_base_url

    def resolved_telegram_bot_token(self) -> str:
        return self.telegram_bot_token or os.getenv("TELEGRAM_BOT_TOKEN", "")

    def resolved_default_list_id(self) -> str:
        if self.default_list_id:
            return self.default_list_id
        return self.user_config_store().load().trello.default_inbox_list_id or ""

    def resolved_vault_path(self) -> str:
        if self.vault_path:
            return self.vault_path
        return self.user_config_store().load().obsidian.default_vault_path or ""


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
