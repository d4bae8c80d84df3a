"""Back up Vite front-end projects found below a directory."""
from __future__ import annotations

__version__ = "1.0.0"

from .errors import ArchiveError, BackupError
from .orchestrator import BackupOrchestrator, RunContext, build_context
from .types import BackupConfiguration, BackupReport, ProjectCandidate

__all__ = [
    "ArchiveError",
    "BackupConfiguration",
    "BackupError",
    "BackupOrchestrator",
    "BackupReport",
    "ProjectCandidate",
    "RunContext",
    "build_context",
]
