from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Tuple


_ALLOWED_STRUCTURE: Dict[str, Any] = {
    "project": {
        "source_dir",
        "config_files",
        "lockfiles",
        "manifest",
    },
    "cleanup": {"targets"},
    "archive": {"engine", "verify"},
    "log": {"file_name"},
    "desktop_dir": None,
    "pause_on_exit": None,
    "version": None,
}

_STRING_LISTS: Tuple[Tuple[str, str], ...] = (
    ("project", "config_files"),
    ("project", "lockfiles"),
    ("cleanup", "targets"),
)

_STRINGS: Tuple[Tuple[str, str], ...] = (
    ("project", "source_dir"),
    ("project", "manifest"),
)

_BOOLS: Tuple[Tuple[str, str], ...] = (
    ("archive", "verify"),
)

_SEPARATORS = frozenset({"/", "\\", os.sep} | ({os.altsep} if os.altsep else set()))

ARCHIVE_ENGINES = ("auto", "shell", "zipfile")


def is_plain_name(value: Any) -> bool:
    """True for a single path component such as ``node_modules``."""

    if not isinstance(value, str) or value in ("", ".", ".."):
        return False
    return not any(sep in value for sep in _SEPARATORS)


@dataclass(slots=True)
class SettingsValidator:
    schema: Mapping[str, Any]

    def unknown_keys(self, payload: Mapping[str, Any]) -> Iterable[str]:
        return sorted(self._iter_unknown(payload, self.schema, path=""))

    def invalid_values(self, payload: Mapping[str, Any]) -> Iterable[str]:
        problems = []
        for section, key, value in self._present(payload, _STRING_LISTS):
            if not isinstance(value, list) or not all(isinstance(item, str) and item for item in value):
                problems.append(f"{section}.{key}")
            elif section == "cleanup" and not all(is_plain_name(item) for item in value):
                problems.append(f"{section}.{key}")
        for section, key, value in self._present(payload, _STRINGS):
            if not isinstance(value, str) or not value.strip():
                problems.append(f"{section}.{key}")
        for section, key, value in self._present(payload, _BOOLS):
            if not isinstance(value, bool):
                problems.append(f"{section}.{key}")
        archive = payload.get("archive")
        if isinstance(archive, Mapping) and archive.get("engine", "auto") not in ARCHIVE_ENGINES:
            problems.append("archive.engine")
        return problems

    @staticmethod
    def _present(payload: Mapping[str, Any], keys: Tuple[Tuple[str, str], ...]) -> Iterable[Tuple[str, str, Any]]:
        for section, key in keys:
            block = payload.get(section)
            if isinstance(block, Mapping) and key in block:
                yield section, key, block[key]

    def _iter_unknown(self, payload: Mapping[str, Any], schema: Mapping[str, Any], *, path: str) -> Iterable[str]:
        for key, value in payload.items():
            if key not in schema:
                yield f"{path}{key}"
                continue
            rule = schema[key]
            if rule is None:
                continue
            if isinstance(rule, set):
                if not isinstance(value, Mapping):
                    continue
                for sub in value.keys():
                    if sub not in rule:
                        yield f"{path}{key}.{sub}"


SETTINGS_VALIDATOR = SettingsValidator(_ALLOWED_STRUCTURE)

__all__ = ["ARCHIVE_ENGINES", "SETTINGS_VALIDATOR", "SettingsValidator", "is_plain_name"]
