"""Obsidian vault access: daily notes and keyword search over markdown files."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Callable

from ctx_agent.services.results import ServiceResult

CAPTURED_MARKER = "## Captured\n"


def daily_template(date_string: str) -> str:
    return f"# {date_string}\n\n{CAPTURED_MARKER}\n## Tasks Created\n\n## Notes\n"


def format_time(moment: datetime) -> str:
    """Render a clock time as ``2:47pm``."""
    hour = moment.hour % 12 or 12
    suffix = "am" if moment.hour < 12 else "pm"
    return f"{hour}:{moment.minute:02d}{suffix}"


class NotesVault:
    def __init__(
        self,
        vault_path: str | Path,
        *,
        clock: Callable[[], datetime] = datetime.now,
        max_search_results: int = 20,
    ) -> None:
        self.vault_path = Path(vault_path)
        self.clock = clock
        self.max_search_results = max_search_results

    def daily_note_path(self, day: date | None = None) -> Path:
        day = day or self.clock().date()
        return self.vault_path / "Daily" / f"{day.isoformat()}.md"

    def append_to_daily(self, content: str) -> ServiceResult[None]:
        """Insert a timestamped entry at the top of today's ``## Captured`` section.

        The note is created from the daily template when it does not exist yet. A
        note that lost its Captured heading gets the section appended at the end.
        """
        now = self.clock()
        note_path = self.daily_note_path(now.date())
        entry = f"- {format_time(now)} - {content}\n"

        try:
            note_path.parent.mkdir(parents=True, exist_ok=True)
            if note_path.exists():
                existing = note_path.read_text(encoding="utf-8")
            else:
                existing = daily_template(now.date().isoformat())

            marker_at = existing.find(CAPTURED_MARKER)
            if marker_at == -1:
                separator = "" if existing.endswith("\n") else "\n"
                updated = f"{existing}{separator}\n{CAPTURED_MARKER}{entry}"
            else:
                insert_at = marker_at + len(CAPTURED_MARKER)
                updated = existing[:insert_at] + entry + existing[insert_at:]

            note_path.write_text(updated, encoding="utf-8")
        except OSError as exc:
            return ServiceResult.failure("WRITE_ERROR", str(exc) or "Write operation failed")
        return ServiceResult.success(None)

    def read_note(self, note_path: Path) -> ServiceResult[str]:
        try:
            return ServiceResult.success(note_path.read_text(encoding="utf-8"))
        except OSError as exc:
            return ServiceResult.failure("READ_ERROR", str(exc) or "Read operation failed")

    def read_daily(self) -> ServiceResult[str]:
        return self.read_note(self.daily_note_path())

    def search_notes(self, query: str) -> ServiceResult[list[str]]:
        """Return ``relative/path.md:line: text`` hits for a case-insensitive phrase."""
        needle = query.strip().lower()
        if not needle:
            return ServiceResult.failure("VALIDATION_ERROR", "Search query is empty")
        if not self.vault_path.is_dir():
            return ServiceResult.failure("READ_ERROR", f"Vault not found: {self.vault_path}")

        hits: list[str] = []
        try:
            for note_path in sorted(self.vault_path.rglob("*.md")):
                relative = note_path.relative_to(self.vault_path).as_posix()
                if any(part.startswith(".") for part in Path(relative).parts):
                    continue
                text = note_path.read_text(encoding="utf-8", errors="replace")
                for line_number, line in enumerate(text.splitlines(), start=1):
                    if needle in line.lower():
                        hits.append(f"{relative}:{line_number}: {line.strip()}")
                        if len(hits) >= self.max_search_results:
                            return ServiceResult.success(hits)
        except OSError as exc:
            return ServiceResult.failure("READ_ERROR", str(exc) or "Read operation failed")
        return ServiceResult.success(hits)
