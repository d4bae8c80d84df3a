"""Size and date helpers used when describing a backup."""
from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

LOGGER = logging.getLogger("vitebackup.measure")

FILE_DATE_FORMAT = "%d-%m-%y"
DISPLAY_DATE_FORMAT = "%d/%m/%y"

_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_bytes(size: int) -> str:
    if size <= 0:
        return "0 B"
    value = float(size)
    index = 0
    while value >= 1024 and index < len(_UNITS) - 1:
        value /= 1024
        index += 1
    return f"{value:.2f} {_UNITS[index]}"


def folder_size(root: Path) -> int:
    """Total size in bytes of the regular files below *root*; symlinks count as themselves."""

    total = 0
    for current, dirs, files in os.walk(root, onerror=_raise):
        for name in files + [d for d in dirs if os.path.islink(os.path.join(current, d))]:
            total += os.lstat(os.path.join(current, name)).st_size
    return total


def _raise(exc: OSError) -> None:
    raise exc


def source_date(project_dir: Path, source_dir: str = "src", *, now: Optional[datetime] = None) -> datetime:
    """Modification time of the project's source folder, or now when it cannot be read."""

    try:
        return datetime.fromtimestamp((Path(project_dir) / source_dir).stat().st_mtime)
    except OSError:
        LOGGER.warning(
            "Unable to get last modified date from %s folder. Falling back to current date.", source_dir
        )
        return now or datetime.now()


def backup_dates(project_dir: Path, source_dir: str = "src") -> Tuple[str, str]:
    """Return ``(file_name_date, display_date)`` for *project_dir*."""

    stamp = source_date(project_dir, source_dir)
    return stamp.strftime(FILE_DATE_FORMAT), stamp.strftime(DISPLAY_DATE_FORMAT)


__all__ = ["backup_dates", "folder_size", "format_bytes", "source_date"]
