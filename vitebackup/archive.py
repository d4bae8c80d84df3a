"""Stage a project in a temporary workspace and compress it into the base directory."""
from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import sys
import tempfile
import zipfile
from pathlib import Path
from typing import List, Optional, Protocol

from .errors import ArchiveError, ArchiveVerificationError
from .logs import RunLog
from .measure import backup_dates
from .types import ArchiveResult, BackupConfiguration, CommandResult

LOGGER = logging.getLogger("vitebackup.archive")

_WORKSPACE_PREFIX = "backup-"


class Archiver(Protocol):
    """Compress ``source_dir`` (kept under its own name) into ``dest_file``."""

    name: str

    def compress(self, source_dir: Path, dest_file: Path) -> CommandResult:
        ...


class CommandArchiver:
    """Run an external compression command from the directory holding the source."""

    name = "command"

    def build_command(self, source_name: str, archive_name: str) -> List[str]:
        raise NotImplementedError

    def format_command(self, args: List[str]) -> str:
        return shlex.join(args)

    def compress(self, source_dir: Path, dest_file: Path) -> CommandResult:
        cwd = source_dir.parent
        args = self.build_command(source_dir.name, os.path.relpath(dest_file, cwd))
        command = self.format_command(args)
        try:
            completed = subprocess.run(
                args,
                cwd=str(cwd),
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            return CommandResult(command=command, success=False, stderr=str(exc))
        return CommandResult(
            command=command,
            success=completed.returncode == 0,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            returncode=completed.returncode,
        )


class ZipCommandArchiver(CommandArchiver):
    name = "zip"

    def build_command(self, source_name: str, archive_name: str) -> List[str]:
        return ["zip", "-r", archive_name, source_name]


def _ps_quote(value: str) -> str:
    # single-quoted PowerShell strings expand nothing; '' is a literal quote
    return "'" + value.replace("'", "''") + "'"


class PowerShellArchiver(CommandArchiver):
    name = "powershell"

    def build_command(self, source_name: str, archive_name: str) -> List[str]:
        script = (
            f"Compress-Archive -LiteralPath {_ps_quote(source_name)} "
            f"-DestinationPath {_ps_quote(archive_name)} -Force"
        )
        return ["powershell", "-NoProfile", "-NonInteractive", "-Command", script]

    def format_command(self, args: List[str]) -> str:
        return subprocess.list2cmdline(args)


class ZipArchiver:
    """In-process archiver built on :mod:`zipfile`."""

    name = "zipfile"

    def compress(self, source_dir: Path, dest_file: Path) -> CommandResult:
        command = f"zipfile {dest_file.name} {source_dir.name}"
        root = source_dir.parent
        count = 0
        try:
            with zipfile.ZipFile(dest_file, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                archive.write(source_dir, source_dir.relative_to(root).as_posix())
                count += 1
                for item in sorted(source_dir.rglob("*")):
                    archive.write(item, item.relative_to(root).as_posix())
                    count += 1
        except (OSError, zipfile.BadZipFile) as exc:
            return CommandResult(command=command, success=False, stderr=str(exc))
        return CommandResult(command=command, success=True, stdout=f"added {count} entries\n", returncode=0)


def select_archiver(engine: str = "auto", platform: Optional[str] = None) -> Archiver:
    """Pick the archiver for *engine*; ``auto`` and ``shell`` use the platform command."""

    platform = sys.platform if platform is None else platform
    if engine == "zipfile":
        return ZipArchiver()
    if engine not in ("auto", "shell"):
        raise ValueError(f"unknown archive engine: {engine}")
    if platform == "win32":
        return PowerShellArchiver()
    return ZipCommandArchiver()


def archive_file_name(backup_name: str, file_date: str) -> str:
    return f"{backup_name}-backup-{file_date}.zip"


def verify_archive(path: Path) -> None:
    try:
        if path.stat().st_size == 0:
            raise ArchiveVerificationError(f"archive is empty: {path}")
        with zipfile.ZipFile(path, "r") as archive:
            bad = archive.testzip()
    except (OSError, zipfile.BadZipFile) as exc:
        raise ArchiveVerificationError(f"archive unreadable: {path}: {exc}") from exc
    if bad is not None:
        raise ArchiveVerificationError(f"corrupt member {bad} in {path}")


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        LOGGER.warning("Could not remove incomplete archive %s: %s", path, exc)


def build_archive(
    config: BackupConfiguration,
    *,
    archiver: Archiver,
    run_log: RunLog,
    source_dir: str = "src",
    verify: bool = True,
) -> ArchiveResult:
    """Archive ``config.project_dir`` to ``<base>/<name>-backup-<DD-MM-YY>.zip``.

    The project is copied into a fresh temporary workspace first and the
    archiver only ever works there. The workspace is removed on every exit
    path. Raises :class:`ArchiveError` when no valid archive reaches the
    destination, in which case nothing is left at the destination path.
    """

    workspace = Path(tempfile.mkdtemp(prefix=_WORKSPACE_PREFIX))
    try:
        staged = workspace / config.backup_name
        print(f"    Temporary backup path: {staged}")
        try:
            shutil.copytree(config.project_dir, staged, symlinks=True)
        except (OSError, shutil.Error) as exc:
            raise ArchiveError(f"could not stage {config.project_dir}: {exc}") from exc

        file_date, display_date = backup_dates(config.project_dir, source_dir)
        archive_name = archive_file_name(config.backup_name, file_date)
        destination = config.base_dir / archive_name
        if destination.exists():
            LOGGER.warning("Removing existing archive: %s", destination)
            try:
                destination.unlink()
            except OSError as exc:
                raise ArchiveError(f"could not replace {destination}: {exc}") from exc

        print(f"\n  Creating zip archive: {archive_name}")
        produced = workspace / archive_name
        result = archiver.compress(staged, produced)
        run_log.record(result)
        if not result.success:
            raise ArchiveError(f"{archiver.name} failed for {config.backup_name}")

        try:
            shutil.copyfile(produced, destination)
        except OSError as exc:
            _discard(destination)
            raise ArchiveError(f"archive was not produced at {destination}: {exc}") from exc

        if verify:
            try:
                verify_archive(destination)
            except ArchiveVerificationError:
                _discard(destination)
                raise
        print(f"    Zip archive created at: {destination}")
        return ArchiveResult(
            archive_path=destination,
            archive_name=archive_name,
            backup_date=display_date,
            command=result,
        )
    finally:
        print(f"    Removing temporary folder: {workspace}")
        shutil.rmtree(workspace, ignore_errors=True)
        if workspace.exists():
            LOGGER.warning("Temporary folder could not be fully removed: %s", workspace)


__all__ = [
    "Archiver",
    "CommandArchiver",
    "PowerShellArchiver",
    "ZipArchiver",
    "ZipCommandArchiver",
    "archive_file_name",
    "build_archive",
    "select_archiver",
    "verify_archive",
]
