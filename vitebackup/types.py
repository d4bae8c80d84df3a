"""Common dataclasses shared across backup modules."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

STATUS_SUCCESS = "Success"
STATUS_FAILED = "Failed"

DELETION_NOT_DELETED = "Not Deleted"
DELETION_DELETED = "Deleted"
DELETION_FAILED = "Failed"


@dataclass(frozen=True, slots=True)
class ProjectCandidate:
    """Directory recognised as a front-end project; identity is its path."""

    path: Path

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True, slots=True)
class ProjectCheck:
    is_project: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.is_project


@dataclass(frozen=True, slots=True)
class BackupConfiguration:
    """Parameters resolved once per project before any work starts."""

    project_dir: Path
    backup_name: str
    base_dir: Path
    cleanup_targets: Tuple[str, ...]
    log_path: Path


@dataclass(slots=True)
class BackupReport:
    project: str
    source_folder: Path
    archive_path: Optional[Path] = None
    archive_name: str = ""
    backup_date: str = ""
    source_size: str = ""
    archive_size: str = ""
    backup_status: str = STATUS_SUCCESS
    deletion_status: str = DELETION_NOT_DELETED

    @property
    def succeeded(self) -> bool:
        return self.backup_status == STATUS_SUCCESS


@dataclass(slots=True)
class CommandResult:
    command: str
    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: Optional[int] = None


@dataclass(slots=True)
class ArchiveResult:
    archive_path: Path
    archive_name: str
    backup_date: str
    command: CommandResult


@dataclass(slots=True)
class DeletionOutcome:
    root: Path
    existed: bool = True
    processed: int = 0
    total: int = 0
    root_removed: bool = False
    errors: List[Tuple[Path, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.existed or (self.root_removed and not self.errors)


__all__ = [
    "ArchiveResult",
    "BackupConfiguration",
    "BackupReport",
    "CommandResult",
    "DELETION_DELETED",
    "DELETION_FAILED",
    "DELETION_NOT_DELETED",
    "DeletionOutcome",
    "ProjectCandidate",
    "ProjectCheck",
    "STATUS_FAILED",
    "STATUS_SUCCESS",
]
