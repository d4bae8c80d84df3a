from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .paths import get_default_settings_paths
from .settings_schema import SETTINGS_VALIDATOR

__all__ = [
    "DEFAULT_SETTINGS",
    "SETTINGS_VERSION",
    "load_settings",
    "merge_defaults",
]

LOGGER = logging.getLogger("vitebackup.settings")

SETTINGS_VERSION = 1


DEFAULT_SETTINGS: Dict[str, Any] = {
    "version": SETTINGS_VERSION,
    "project": {
        "source_dir": "src",
        "config_files": ["vite.config.js"],
        "lockfiles": ["package-lock.json"],
        "manifest": "package.json",
    },
    "cleanup": {
        "targets": ["node_modules", "dist", ".turbo", ".cache", "coverage"],
    },
    "archive": {
        "engine": "auto",
        "verify": True,
    },
    "log": {
        "file_name": "backup_log.txt",
    },
    "desktop_dir": None,
    "pause_on_exit": True,
}


def merge_defaults(data: Mapping[str, Any]) -> Dict[str, Any]:
    def _merge(default: Mapping[str, Any], payload: Mapping[str, Any]) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for key, value in default.items():
            if isinstance(value, dict):
                current = payload.get(key)
                if isinstance(current, Mapping):
                    result[key] = _merge(value, current)
                else:
                    result[key] = _merge(value, {})
            elif isinstance(value, list):
                current = payload.get(key)
                result[key] = list(current) if isinstance(current, list) else list(value)
            else:
                result[key] = payload.get(key, value)
        for key, value in payload.items():
            if key not in result:
                result[key] = value
        return result

    return _merge(DEFAULT_SETTINGS, data or {})


def _apply_migrations(settings: Dict[str, Any]) -> Dict[str, Any]:
    version = settings.get("version")
    try:
        version_int = int(version)
    except (TypeError, ValueError):
        version_int = 0
    if version_int < SETTINGS_VERSION:
        settings["version"] = SETTINGS_VERSION
    return settings


def _reset_invalid(settings: Dict[str, Any]) -> Dict[str, Any]:
    for dotted in SETTINGS_VALIDATOR.invalid_values(settings):
        section, key = dotted.split(".", 1)
        LOGGER.warning("Ignoring invalid setting %s=%r", dotted, settings[section].get(key))
        settings[section][key] = copy.deepcopy(DEFAULT_SETTINGS[section][key])
    return settings


def _log_unknown_keys(settings: Mapping[str, Any], source: Optional[Path]) -> None:
    unknown = list(SETTINGS_VALIDATOR.unknown_keys(settings))
    if not unknown:
        return
    LOGGER.warning("Unknown settings keys in %s: %s", source or "<defaults>", ", ".join(unknown))


def load_settings(base_dir: Path, env: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    source: Optional[Path] = None
    for candidate in get_default_settings_paths(base_dir, env):
        try:
            with open(candidate, "r", encoding="utf-8") as handle:
                loaded = json.load(handle)
        except FileNotFoundError:
            continue
        except json.JSONDecodeError:
            LOGGER.warning("Skipping malformed settings file %s", candidate)
            continue
        except OSError:
            continue
        if isinstance(loaded, dict):
            data = loaded
            source = candidate
            break
    merged = merge_defaults(data)
    merged = _apply_migrations(merged)
    merged = _reset_invalid(merged)
    _log_unknown_keys(merged, source)
    return merged
