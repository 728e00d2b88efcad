"""Per-user defaults stored in ``~/.ctx/config.json``."""

from __future__ import annotations

import json
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

DEFAULT_CONFIG_DIR = Path.home() / ".ctx"


class UserConfigError(RuntimeError):
    """Raised when the config file exists but cannot be used."""


class _ConfigSection(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class TrelloConfig(_ConfigSection):
    default_board_id: str | None = Field(default=None, alias="defaultBoardId")
    default_inbox_list_id: str | None = Field(default=None, alias="defaultInboxListId")


class ObsidianConfig(_ConfigSection):
    default_vault_path: str | None = Field(default=None, alias="defaultVaultPath")


class UserConfig(_ConfigSection):
    trello: TrelloConfig = Field(default_factory=TrelloConfig)
    obsidian: ObsidianConfig = Field(default_factory=ObsidianConfig)


class UserConfigStore:
    """Read-merge-write access to the user config file.

    A missing file is an empty config, not an error. The directory is created
    owner-only (0700) and the file is written owner read/write (0600).
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or DEFAULT_CONFIG_DIR / "config.json"

    def load(self) -> UserConfig:
        if not self.path.exists():
            return UserConfig()

        raw = self.path.read_text(encoding="utf-8")
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise UserConfigError(f"Config file is not valid JSON: {self.path}") from exc

        try:
            return UserConfig.model_validate(payload)
        except ValidationError as exc:
            raise UserConfigError(f"Invalid config format: {self.path}") from exc

    def save(self, config: UserConfig) -> None:
        directory = self.path.parent
        if not directory.exists():
            directory.mkdir(parents=True, exist_ok=True)
            os.chmod(directory, 0o700)

        body = json.dumps(config.model_dump(by_alias=True, exclude_none=True), indent=2)
        self.path.write_text(body, encoding="utf-8")
        os.chmod(self.path, 0o600)

    def set_default_board(self, board_id: str) -> UserConfig:
        config = self.load()
        updated = config.model_copy(
            update={"trello": config.trello.model_copy(update={"default_board_id": board_id})}
        )
        self.save(updated)
        return updated

    def set_default_inbox(self, list_id: str) -> UserConfig:
        config = self.load()
        updated = config.model_copy(
            update={"trello": config.trello.model_copy(update={"default_inbox_list_id": list_id})}
        )
        self.save(updated)
        return updated

    def set_vault_path(self, vault_path: str) -> UserConfig:
        config = self.load()
        updated = config.model_copy(
            update={
                "obsidian": config.obsidian.model_copy(update={"default_vault_path": vault_path})
            }
        )
        self.save(updated)
        return updated
