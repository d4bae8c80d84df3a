"""Tests for core.settings helpers."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from core.settings import DEFAULT_SETTINGS, load_settings, merge_defaults
from core.settings_schema import SETTINGS_VALIDATOR


def test_merge_defaults_reproduces_fixed_targets() -> None:
    merged = merge_defaults({})

    assert merged["cleanup"]["targets"] == ["node_modules", "dist", ".turbo", ".cache", "coverage"]
    assert merged["project"]["source_dir"] == "src"
    assert merged["project"]["config_files"] == ["vite.config.js"]
    assert merged["project"]["lockfiles"] == ["package-lock.json"]
    assert merged["log"]["file_name"] == "backup_log.txt"
    assert merged["archive"]["engine"] == "auto"


def test_merge_defaults_does_not_share_lists_with_defaults() -> None:
    merged = merge_defaults({})
    merged["cleanup"]["targets"].append("build")

    assert "build" not in DEFAULT_SETTINGS["cleanup"]["targets"]


def test_load_settings_prefers_base_dir_file(tmp_path: Path) -> None:
    base = tmp_path / "base"
    base.mkdir()
    (base / ".vitebackup.json").write_text(
        json.dumps({"archive": {"engine": "zipfile"}, "pause_on_exit": False}),
        encoding="utf-8",
    )
    env = {"VITEBACKUP_HOME": str(tmp_path / "home")}

    loaded = load_settings(base, env=env)

    assert loaded["archive"]["engine"] == "zipfile"
    assert loaded["archive"]["verify"] is True
    assert loaded["pause_on_exit"] is False


def test_load_settings_falls_back_to_user_file(tmp_path: Path) -> None:
    home = tmp_path / "home"
    home.mkdir()
    (home / "settings.json").write_text(json.dumps({"desktop_dir": "/somewhere"}), encoding="utf-8")

    loaded = load_settings(tmp_path, env={"VITEBACKUP_HOME": str(home)})

    assert loaded["desktop_dir"] == "/somewhere"


def test_load_settings_skips_malformed_file(tmp_path: Path) -> None:
    (tmp_path / ".vitebackup.json").write_text("{not json", encoding="utf-8")

    loaded = load_settings(tmp_path, env={"VITEBACKUP_HOME": str(tmp_path / "none")})

    assert loaded["cleanup"]["targets"] == DEFAULT_SETTINGS["cleanup"]["targets"]


def test_invalid_values_are_reset_to_defaults(tmp_path: Path) -> None:
    (tmp_path / ".vitebackup.json").write_text(
        json.dumps({"cleanup": {"targets": "node_modules"}, "archive": {"engine": "rar"}}),
        encoding="utf-8",
    )

    loaded = load_settings(tmp_path, env={"VITEBACKUP_HOME": str(tmp_path / "none")})

    assert loaded["cleanup"]["targets"] == DEFAULT_SETTINGS["cleanup"]["targets"]
    assert loaded["archive"]["engine"] == "auto"


def test_unknown_keys_are_reported() -> None:
    payload = merge_defaults({"cleanup": {"targets": [], "extra": 1}, "colour": "red"})

    unknown = list(SETTINGS_VALIDATOR.unknown_keys(payload))

    assert unknown == ["cleanup.extra", "colour"]


@pytest.mark.parametrize("target", ["..", ".", "a/../..", "nested/dist", "..\\..", ""])
def test_cleanup_targets_must_be_plain_folder_names(tmp_path: Path, target: str) -> None:
    (tmp_path / ".vitebackup.json").write_text(
        json.dumps({"cleanup": {"targets": ["dist", target]}}),
        encoding="utf-8",
    )

    loaded = load_settings(tmp_path, env={"VITEBACKUP_HOME": str(tmp_path / "none")})

    assert loaded["cleanup"]["targets"] == DEFAULT_SETTINGS["cleanup"]["targets"]


def test_custom_cleanup_targets_are_kept(tmp_path: Path) -> None:
    (tmp_path / ".vitebackup.json").write_text(
        json.dumps({"cleanup": {"targets": ["build", ".next"]}}),
        encoding="utf-8",
    )

    loaded = load_settings(tmp_path, env={"VITEBACKUP_HOME": str(tmp_path / "none")})

    assert loaded["cleanup"]["targets"] == ["build", ".next"]


def test_mistyped_scalars_are_reset(tmp_path: Path) -> None:
    (tmp_path / ".vitebackup.json").write_text(
        json.dumps(
            {
                "archive": {"verify": "false"},
                "project": {"source_dir": 5, "manifest": ["package.json"]},
            }
        ),
        encoding="utf-8",
    )

    loaded = load_settings(tmp_path, env={"VITEBACKUP_HOME": str(tmp_path / "none")})

    assert loaded["archive"]["verify"] is True
    assert loaded["project"]["source_dir"] == "src"
    assert loaded["project"]["manifest"] == "package.json"


def test_verify_false_is_accepted() -> None:
    payload = merge_defaults({"archive": {"verify": False}})

    assert SETTINGS_VALIDATOR.invalid_values(payload) == []
