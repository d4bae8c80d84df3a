"""Remove directory trees item by item with progress reporting."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

from tqdm import tqdm

from .types import DeletionOutcome

LOGGER = logging.getLogger("vitebackup.deletion")


def collect_paths(root: Path, errors: Optional[List[Tuple[Path, str]]] = None) -> List[Path]:
    """List everything below *root*, each directory after its own contents.

    Symlinks are listed as leaves and never followed. Subtrees that cannot be
    read are left out and reported through *errors*.
    """

    results: List[Path] = []

    def _traverse(current: Path) -> None:
        try:
            with os.scandir(current) as it:
                entries = list(it)
        except OSError as exc:
            if errors is not None:
                errors.append((current, str(exc)))
            return
        for entry in entries:
            full_path = Path(entry.path)
            if entry.is_dir(follow_symlinks=False):
                _traverse(full_path)
            results.append(full_path)

    _traverse(Path(root))
    return results


def _remove_item(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        os.rmdir(path)
    else:
        os.unlink(path)


def delete_directory(
    root: Path,
    display_name: Optional[str] = None,
    *,
    show_progress: bool = True,
) -> DeletionOutcome:
    """Delete *root* and its contents, continuing past items that fail."""

    root = Path(root)
    display_name = display_name or root.name
    outcome = DeletionOutcome(root=root)
    if not root.exists() and not root.is_symlink():
        outcome.existed = False
        return outcome

    items = collect_paths(root, outcome.errors)
    for path, error in outcome.errors:
        LOGGER.error("Error reading %s: %s", path, error)
    outcome.total = len(items) + 1

    print(f"    Deleting {display_name}...")
    with tqdm(
        total=outcome.total,
        desc=f"    Deleting {display_name}",
        unit=" items",
        leave=False,
        disable=not show_progress,
    ) as bar:
        for item in items:
            try:
                _remove_item(item)
            except OSError as exc:
                outcome.errors.append((item, str(exc)))
                LOGGER.error("Error deleting %s: %s", item, exc)
            outcome.processed += 1
            bar.set_postfix_str(item.name, refresh=False)
            bar.update(1)

        try:
            os.rmdir(root)
        except OSError as exc:
            LOGGER.error("Error deleting %s: %s", root, exc)
        else:
            outcome.root_removed = True
            outcome.processed += 1
            bar.set_postfix_str("Done", refresh=False)
            bar.update(1)
    return outcome


__all__ = ["collect_paths", "delete_directory"]
