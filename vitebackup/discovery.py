"""Locate front-end project folders below a base directory."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .types import ProjectCandidate, ProjectCheck

LOGGER = logging.getLogger("vitebackup.discovery")

DEFAULT_SOURCE_DIR = "src"
DEFAULT_CONFIG_FILES: Sequence[str] = ("vite.config.js",)
DEFAULT_LOCKFILES: Sequence[str] = ("package-lock.json",)


def _first_file(folder: Path, names: Iterable[str]) -> Optional[Path]:
    for name in names:
        path = folder / name
        if path.is_file() and not path.is_symlink():
            return path
    return None


def check_project_folder(
    folder: Path,
    *,
    source_dir: str = DEFAULT_SOURCE_DIR,
    config_files: Sequence[str] = DEFAULT_CONFIG_FILES,
    lockfiles: Sequence[str] = DEFAULT_LOCKFILES,
) -> ProjectCheck:
    """Decide whether *folder* is a project: source dir, build config and lockfile."""

    folder = Path(folder)
    try:
        src = folder / source_dir
        if not src.is_dir() or src.is_symlink():
            return ProjectCheck(False, f"missing {source_dir}/ directory")
        if _first_file(folder, config_files) is None:
            return ProjectCheck(False, f"missing build config ({', '.join(config_files)})")
        if _first_file(folder, lockfiles) is None:
            return ProjectCheck(False, f"missing lockfile ({', '.join(lockfiles)})")
    except OSError as exc:
        return ProjectCheck(False, str(exc))
    return ProjectCheck(True)


def find_project_candidates(
    base_dir: Path,
    *,
    source_dir: str = DEFAULT_SOURCE_DIR,
    config_files: Sequence[str] = DEFAULT_CONFIG_FILES,
    lockfiles: Sequence[str] = DEFAULT_LOCKFILES,
) -> List[ProjectCandidate]:
    """Walk *base_dir* depth-first and return every project folder found.

    Empty directories are skipped, a project folder is not descended into, and
    unreadable directories are ignored. Order follows ``os.scandir``.
    """

    candidates: List[ProjectCandidate] = []

    def _search(directory: Path) -> None:
        try:
            with os.scandir(directory) as it:
                entries = [entry for entry in it if entry.is_dir(follow_symlinks=False)]
        except OSError:
            return
        for entry in entries:
            full_path = Path(entry.path)
            try:
                with os.scandir(full_path) as sub:
                    has_children = next(sub, None) is not None
            except OSError:
                continue
            if not has_children:
                continue
            check = check_project_folder(
                full_path,
                source_dir=source_dir,
                config_files=config_files,
                lockfiles=lockfiles,
            )
            if check:
                LOGGER.debug("project found: %s", full_path)
                candidates.append(ProjectCandidate(full_path))
            else:
                _search(full_path)

    _search(Path(base_dir))
    return candidates


def read_package_name(project_dir: Path, manifest: str = "package.json") -> str:
    """Return the ``name`` declared in the project's manifest, or an empty string."""

    try:
        data = json.loads((Path(project_dir) / manifest).read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return ""
    if not isinstance(data, dict):
        return ""
    name = data.get("name")
    return name.strip() if isinstance(name, str) else ""


__all__ = ["check_project_folder", "find_project_candidates", "read_package_name"]
