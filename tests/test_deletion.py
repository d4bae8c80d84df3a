from __future__ import annotations

import os
from pathlib import Path

from vitebackup.deletion import collect_paths, delete_directory


def _write(path: Path, content: str = "x") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


def _tree(root: Path) -> Path:
    _write(root / "a.txt")
    _write(root / "pkg" / "index.js")
    _write(root / "pkg" / "lib" / "deep.js")
    (root / "pkg" / "empty").mkdir(parents=True)
    return root


def test_collect_paths_lists_directories_after_their_contents(tmp_path: Path) -> None:
    root = _tree(tmp_path / "node_modules")

    items = collect_paths(root)

    assert set(items) == {
        root / "a.txt",
        root / "pkg",
        root / "pkg" / "index.js",
        root / "pkg" / "lib",
        root / "pkg" / "lib" / "deep.js",
        root / "pkg" / "empty",
    }
    position = {path: idx for idx, path in enumerate(items)}
    for path in items:
        if path.parent != root:
            assert position[path] < position[path.parent]


def test_collect_paths_does_not_follow_symlinks(tmp_path: Path) -> None:
    outside = _tree(tmp_path / "outside")
    root = tmp_path / "dist"
    root.mkdir()
    os.symlink(outside, root / "link", target_is_directory=True)

    items = collect_paths(root)

    assert items == [root / "link"]


def test_delete_directory_removes_everything(tmp_path: Path) -> None:
    root = _tree(tmp_path / "node_modules")

    outcome = delete_directory(root, show_progress=False)

    assert outcome.ok
    assert outcome.root_removed
    assert outcome.total == 7
    assert outcome.processed == 7
    assert not root.exists()


def test_delete_directory_keeps_symlink_targets(tmp_path: Path) -> None:
    outside = _tree(tmp_path / "outside")
    root = tmp_path / "dist"
    root.mkdir()
    os.symlink(outside, root / "link", target_is_directory=True)

    outcome = delete_directory(root, show_progress=False)

    assert outcome.ok
    assert not root.exists()
    assert (outside / "pkg" / "index.js").exists()


def test_delete_directory_continues_past_failures(tmp_path: Path, monkeypatch) -> None:
    root = _tree(tmp_path / "coverage")
    stuck = root / "pkg" / "index.js"

    from vitebackup import deletion

    real_remove = deletion._remove_item

    def flaky(path: Path) -> None:
        if path == stuck:
            raise PermissionError("locked")
        real_remove(path)

    monkeypatch.setattr(deletion, "_remove_item", flaky)

    outcome = delete_directory(root, show_progress=False)

    assert not outcome.ok
    assert stuck.exists()
    assert not (root / "a.txt").exists()
    assert not (root / "pkg" / "lib").exists()
    failed = {path for path, _ in outcome.errors}
    assert stuck in failed
    assert root / "pkg" in failed
    assert not outcome.root_removed
    assert outcome.processed == outcome.total - 1


def test_delete_missing_directory_is_a_no_op(tmp_path: Path) -> None:
    outcome = delete_directory(tmp_path / "nope", show_progress=False)

    assert not outcome.existed
    assert outcome.ok
    assert outcome.total == 0
