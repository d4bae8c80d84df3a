"""Run log written next to the archives for every command a run executes."""
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from .types import CommandResult

LOGGER = logging.getLogger("vitebackup.runlog")

_SEPARATOR = "-" * 40


class RunLog:
    """Append-only text record of external command invocations.

    ``start`` truncates any previous log; every ``record`` call is flushed and
    closed before it returns, so the file is complete even if the process dies
    during the next command.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def start(self) -> None:
        stamp = datetime.now().strftime("%d/%m/%Y, %H:%M:%S")
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(f"[BACKUP LOG - {stamp}]\n", encoding="utf-8")

    def _append(self, text: str) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(text)

    def record(self, result: CommandResult) -> None:
        lines = [
            "",
            f"--- Command: {result.command}",
            f"--- Success: {'true' if result.success else 'false'}",
        ]
        if result.stdout:
            lines.append(f"--- Stdout:\n{result.stdout}")
        if result.stderr:
            lines.append(f"--- Stderr:\n{result.stderr}")
        lines.append(_SEPARATOR)
        self._append("\n".join(lines) + "\n")
        if result.success:
            LOGGER.info("command ok: %s", result.command)
        else:
            LOGGER.warning(
                'Command "%s" failed. Check %s for details.', result.command, self._path.name
            )

    def exists(self) -> bool:
        return self._path.exists()

    def delete(self) -> bool:
        try:
            self._path.unlink()
        except OSError as exc:
            LOGGER.error("Failed to delete log file %s: %s", self._path, exc)
            return False
        return True


__all__ = ["RunLog"]
