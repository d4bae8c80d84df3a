from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Mapping, Optional

__all__ = [
    "get_default_settings_paths",
    "get_log_path",
    "get_user_config_dir",
    "resolve_base_dir",
    "resolve_desktop_dir",
]

_LOCAL_SETTINGS_NAME = ".vitebackup.json"


def _expand_path(value: str) -> Path:
    expanded = os.path.expandvars(os.path.expanduser(value))
    return Path(expanded).resolve()


def resolve_base_dir(value: Optional[str | os.PathLike[str]] = None) -> Path:
    """Return the directory that is scanned for projects and receives archives."""

    if value is None:
        return Path.cwd().resolve()
    return _expand_path(str(value))


def get_user_config_dir(env: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if env is None else env
    override = env.get("VITEBACKUP_HOME")
    if override:
        try:
            return _expand_path(override)
        except Exception:
            pass
    return Path.home() / ".vitebackup"


def get_default_settings_paths(base_dir: Path, env: Optional[Mapping[str, str]] = None) -> list[Path]:
    """Return the search order for settings files."""

    return [
        base_dir / _LOCAL_SETTINGS_NAME,
        get_user_config_dir(env) / "settings.json",
    ]


def get_log_path(base_dir: Path, settings: Mapping[str, Any]) -> Path:
    log_cfg = settings.get("log") if isinstance(settings.get("log"), Mapping) else {}
    name = str(log_cfg.get("file_name") or "backup_log.txt")
    return base_dir / name


def resolve_desktop_dir(
    settings: Optional[Mapping[str, Any]] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
    platform: Optional[str] = None,
) -> Optional[Path]:
    """Resolve the user's Desktop folder, or None when it cannot be determined.

    An explicit ``desktop_dir`` setting wins. Otherwise ``%USERPROFILE%`` is
    used on Windows and ``$HOME`` everywhere else. Existence is not checked.
    """

    env = os.environ if env is None else env
    platform = sys.platform if platform is None else platform
    override = (settings or {}).get("desktop_dir")
    if isinstance(override, str) and override.strip():
        return _expand_path(override)
    if platform == "win32" and env.get("USERPROFILE"):
        return Path(env["USERPROFILE"]) / "Desktop"
    if env.get("HOME"):
        return Path(env["HOME"]) / "Desktop"
    return None
