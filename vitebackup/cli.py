from __future__ import annotations

import argparse
import logging
from collections.abc import Iterable
from typing import Optional

import colorama

from core.logging_utils import configure_logging
from core.paths import resolve_base_dir
from core.settings import load_settings
from core.settings_schema import ARCHIVE_ENGINES

from vitebackup import __version__
from vitebackup.orchestrator import BackupOrchestrator, build_context
from vitebackup.prompts import ConsolePrompter, Prompter


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vitebackup",
        description=(
            "Find Vite projects below a directory, strip build artifacts and "
            "archive each project to <name>-backup-<DD-MM-YY>.zip."
        ),
    )
    parser.add_argument("--path", default=None, help="Base directory to scan (default: current directory)")
    parser.add_argument(
        "--engine",
        choices=ARCHIVE_ENGINES,
        default=None,
        help="Archiver: platform command (auto/shell) or in-process zipfile",
    )
    parser.add_argument("--no-pause", action="store_true", help="Do not wait for a key before exiting")
    parser.add_argument("--no-progress", action="store_true", help="Hide deletion progress bars")
    parser.add_argument("--no-color", action="store_true", help="Disable colored report output")
    parser.add_argument("--log-level", default="INFO", help="Console log level (default: INFO)")
    parser.add_argument("--json-log", default=None, help="Also write JSON-lines diagnostics to this file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Iterable[str] | None = None, *, prompter: Optional[Prompter] = None) -> int:
    args = _parser().parse_args(list(argv) if argv is not None else None)
    level = getattr(logging, str(args.log_level).upper(), None)
    if not isinstance(level, int):
        raise SystemExit(f"Unknown log level: {args.log_level}")
    configure_logging(level, json_path=args.json_log)

    base_dir = resolve_base_dir(args.path)
    if not base_dir.is_dir():
        raise SystemExit(f"Path does not exist or is not a directory: {base_dir}")

    settings = load_settings(base_dir)
    if args.engine:
        settings["archive"]["engine"] = args.engine
    if args.no_pause:
        settings["pause_on_exit"] = False

    colorama.just_fix_windows_console()
    context = build_context(
        base_dir,
        settings=settings,
        prompter=prompter or ConsolePrompter(),
        show_progress=not args.no_progress,
        color=not args.no_color,
    )
    return BackupOrchestrator(context).run()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
