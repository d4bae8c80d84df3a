"""Error hierarchy for project backup runs."""
from __future__ import annotations


class BackupError(RuntimeError):
    """Base exception for backup related failures."""

    exit_code = 1


class NoProjectsFoundError(BackupError):
    """Raised when discovery finds no project folder under the base directory."""


class InvalidSelectionError(BackupError):
    """Raised when the user's project selection resolves to nothing."""


class ArchiveError(BackupError):
    """Raised when a project could not be archived to its destination."""


class ArchiveVerificationError(ArchiveError):
    """Raised when the archive at its final location is empty or unreadable."""


__all__ = [
    "ArchiveError",
    "ArchiveVerificationError",
    "BackupError",
    "InvalidSelectionError",
    "NoProjectsFoundError",
]
