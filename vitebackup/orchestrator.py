"""Sequence discovery, cleanup, archiving and follow-up actions for one run."""
from __future__ import annotations

import logging
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from core.paths import get_log_path, resolve_desktop_dir
from core.settings import merge_defaults
from core.settings_schema import is_plain_name

from . import prompts
from .archive import Archiver, archive_file_name, build_archive, select_archiver
from .deletion import delete_directory
from .discovery import find_project_candidates, read_package_name
from .errors import ArchiveError, BackupError, InvalidSelectionError, NoProjectsFoundError
from .logs import RunLog
from .measure import backup_dates, folder_size, format_bytes
from .report import print_report_table
from .types import (
    DELETION_DELETED,
    DELETION_FAILED,
    STATUS_FAILED,
    BackupConfiguration,
    BackupReport,
    ProjectCandidate,
)

LOGGER = logging.getLogger("vitebackup.orchestrator")

_UNSAFE_NAME = re.compile(r"[\\/]+")


@dataclass
class RunContext:
    """State owned by one run: settings, collaborators, run log and reports."""

    base_dir: Path
    settings: Dict[str, Any]
    prompter: prompts.Prompter
    archiver: Archiver
    run_log: RunLog
    reports: List[BackupReport] = field(default_factory=list)
    show_progress: bool = True
    color: bool = True
    env: Optional[Mapping[str, str]] = None
    platform: Optional[str] = None

    @property
    def project_settings(self) -> Dict[str, Any]:
        return self.settings["project"]

    @property
    def cleanup_targets(self) -> tuple[str, ...]:
        return tuple(self.settings["cleanup"]["targets"])

    @property
    def verify_archives(self) -> bool:
        value = self.settings["archive"].get("verify", True)
        return value if isinstance(value, bool) else True


def build_context(
    base_dir: Path,
    *,
    settings: Optional[Mapping[str, Any]] = None,
    prompter: Optional[prompts.Prompter] = None,
    archiver: Optional[Archiver] = None,
    show_progress: bool = True,
    color: bool = True,
    env: Optional[Mapping[str, str]] = None,
    platform: Optional[str] = None,
) -> RunContext:
    base_dir = Path(base_dir)
    merged = merge_defaults(dict(settings or {}))
    if archiver is None:
        archiver = select_archiver(str(merged["archive"].get("engine", "auto")), platform)
    return RunContext(
        base_dir=base_dir,
        settings=merged,
        prompter=prompter or prompts.ConsolePrompter(),
        archiver=archiver,
        run_log=RunLog(get_log_path(base_dir, merged)),
        show_progress=show_progress,
        color=color,
        env=env,
        platform=platform,
    )


def parse_selection(text: str, count: int) -> List[int]:
    """Turn ``a``/``all`` or a comma separated list of 1-based numbers into indices."""

    cleaned = text.strip().lower()
    if cleaned in ("a", "all"):
        return list(range(count))
    chosen: List[int] = []
    for token in cleaned.split(","):
        try:
            number = int(token.strip())
        except ValueError:
            continue
        if 1 <= number <= count and number - 1 not in chosen:
            chosen.append(number - 1)
    return chosen


def safe_backup_name(value: str, fallback: str) -> str:
    cleaned = _UNSAFE_NAME.sub("-", value.strip()).strip(". ")
    return cleaned or fallback


class BackupOrchestrator:
    """Run every stage of a backup in order, one project at a time."""

    def __init__(self, context: RunContext) -> None:
        self.context = context

    # ------------------------------------------------------------------
    def _ask(self, decision: str, message: str) -> str:
        return self.context.prompter.ask(decision, message)

    def run(self) -> int:
        ctx = self.context
        try:
            candidates = self.discover()
            selected = self.select(candidates)
        except BackupError as exc:
            LOGGER.error("%s", exc)
            self.pause_before_exit()
            return exc.exit_code

        print(f"[3/7] Starting backup process for {len(selected)} project(s)...")
        ctx.run_log.start()
        for idx, candidate in enumerate(selected, start=1):
            print(f"\n--- Processing project {idx} of {len(selected)} ---")
            ctx.reports.append(self.process_project(candidate))

        self.offer_source_deletion()
        self.offer_desktop_copy()

        print("\n[6/7] All backups completed!")
        print_report_table(ctx.reports, color=ctx.color)
        self.offer_log_deletion()
        self.pause_before_exit()
        return 0

    # ------------------------------------------------------------------
    def discover(self) -> List[ProjectCandidate]:
        project = self.context.project_settings
        print("\n[1/7] Searching for Vite project folders (recursively)...")
        candidates = find_project_candidates(
            self.context.base_dir,
            source_dir=project["source_dir"],
            config_files=project["config_files"],
            lockfiles=project["lockfiles"],
        )
        if not candidates:
            required = ", ".join(
                [f"{project['source_dir']}/", *project["config_files"], *project["lockfiles"]]
            )
            raise NoProjectsFoundError(f"No candidate Vite project folder found (needs {required}).")
        return candidates

    def select(self, candidates: Sequence[ProjectCandidate]) -> List[ProjectCandidate]:
        if not candidates:
            raise NoProjectsFoundError("No candidate Vite project folder found.")
        if len(candidates) == 1:
            print(f"[2/7] One project folder detected:\n    {candidates[0].path}")
            return [candidates[0]]

        manifest = self.context.project_settings["manifest"]
        print("[2/7] Multiple project folders detected:")
        for idx, candidate in enumerate(candidates, start=1):
            package_name = read_package_name(candidate.path, manifest)
            suffix = f', package: "{package_name}"' if package_name else ""
            print(f'    {idx}: {candidate.path} (folder: "{candidate.name}"{suffix})')
        answer = self._ask(
            prompts.SELECT_PROJECTS,
            "Enter project numbers separated by commas, or 'a' for all: ",
        )
        indices = parse_selection(answer, len(candidates))
        if not indices:
            raise InvalidSelectionError("Invalid selection. Exiting.")
        return [candidates[idx] for idx in indices]

    # ------------------------------------------------------------------
    def choose_backup_name(self, candidate: ProjectCandidate) -> str:
        folder_name = candidate.name
        package_name = read_package_name(candidate.path, self.context.project_settings["manifest"])
        if not package_name or package_name == folder_name:
            print(
                f'\nBackup name automatically set to "{folder_name}" '
                "(folder and package name are identical or package name missing)."
            )
            return folder_name

        print("\nDetermine backup name:")
        print(f'   1) Use folder name ("{folder_name}")')
        print(f'   2) Use package.json name ("{package_name}")')
        print("   3) Enter a custom name")
        choice = self._ask(prompts.CHOOSE_NAME, "Enter 1, 2, or 3: ")
        if choice == "2":
            return safe_backup_name(package_name, folder_name)
        if choice == "3":
            custom = self._ask(prompts.CUSTOM_NAME, "Enter custom project name: ")
            return safe_backup_name(custom, folder_name)
        return folder_name

    def configure(self, candidate: ProjectCandidate) -> BackupConfiguration:
        backup_name = self.choose_backup_name(candidate)
        print(f'Project will be backed up as: "{backup_name}"')
        return BackupConfiguration(
            project_dir=candidate.path,
            backup_name=backup_name,
            base_dir=self.context.base_dir,
            cleanup_targets=self.context.cleanup_targets,
            log_path=self.context.run_log.path,
        )

    def cleanup(self, config: BackupConfiguration) -> None:
        print(f"\n  Cleaning up project folder (removing {', '.join(config.cleanup_targets)})...")
        project_dir = config.project_dir.resolve()
        for name in config.cleanup_targets:
            target = config.project_dir / name
            if not is_plain_name(name) or target.resolve().parent != project_dir:
                LOGGER.warning("Skipping cleanup target %r: not a folder inside %s", name, config.project_dir)
                continue
            if not target.is_dir() or target.is_symlink():
                continue
            outcome = delete_directory(target, name, show_progress=self.context.show_progress)
            if not outcome.ok:
                LOGGER.warning(
                    "Cleanup of %s finished with %d error(s); continuing with the backup.",
                    target,
                    len(outcome.errors) + (0 if outcome.root_removed else 1),
                )

    def archive(self, config: BackupConfiguration, report: BackupReport) -> None:
        print("\n  Creating temporary directory for backup...")
        source_dir = self.context.project_settings["source_dir"]
        try:
            result = build_archive(
                config,
                archiver=self.context.archiver,
                run_log=self.context.run_log,
                source_dir=source_dir,
                verify=self.context.verify_archives,
            )
        except ArchiveError as exc:
            LOGGER.error("Error creating zip archive: %s", exc)
            report.backup_status = STATUS_FAILED
        except Exception:
            LOGGER.exception("Unexpected error while archiving %s", config.project_dir)
            report.backup_status = STATUS_FAILED
        else:
            report.archive_path = result.archive_path
            report.archive_name = result.archive_name
            report.backup_date = result.backup_date
            return

        file_date, display_date = backup_dates(config.project_dir, source_dir)
        report.archive_name = archive_file_name(config.backup_name, file_date)
        report.archive_path = config.base_dir / report.archive_name
        report.backup_date = display_date

    def measure(self, report: BackupReport) -> None:
        try:
            report.source_size = format_bytes(folder_size(report.source_folder))
        except OSError:
            report.source_size = ""
        if not report.succeeded or report.archive_path is None:
            return
        try:
            report.archive_size = format_bytes(report.archive_path.stat().st_size)
        except OSError:
            report.archive_size = ""

    def process_project(self, candidate: ProjectCandidate) -> BackupReport:
        print(f"\n=== Processing project: {candidate.path} ===")
        config = self.configure(candidate)
        report = BackupReport(project=config.backup_name, source_folder=candidate.path)
        self.cleanup(config)
        self.archive(config, report)
        self.measure(report)
        print(f"\n  Backup completed for project:\n   {candidate.path}")
        print("To restore the project, unzip the archive and run:\n   npm install && npm run dev\n")
        return report

    # ------------------------------------------------------------------
    def successful_reports(self) -> List[BackupReport]:
        return [report for report in self.context.reports if report.succeeded]

    def offer_source_deletion(self) -> None:
        successful = self.successful_reports()
        if not successful:
            return
        answer = self._ask(
            prompts.DELETE_SOURCES,
            "[4/7] Enter 'd' to delete source folders for successfully backed-up projects, "
            "or any other key to keep them: ",
        )
        if answer.lower() != "d":
            return
        for report in successful:
            try:
                outcome = delete_directory(
                    report.source_folder,
                    report.source_folder.name,
                    show_progress=self.context.show_progress,
                )
            except OSError as exc:
                LOGGER.error("Error deleting source folder %s: %s", report.source_folder, exc)
                report.deletion_status = DELETION_FAILED
                continue
            if outcome.ok:
                report.deletion_status = DELETION_DELETED
            else:
                LOGGER.error("Source folder %s was not fully deleted", report.source_folder)
                report.deletion_status = DELETION_FAILED

    def offer_desktop_copy(self) -> None:
        successful = self.successful_reports()
        if not successful:
            return
        answer = self._ask(
            prompts.COPY_TO_DESKTOP,
            "[5/7] Enter 'y' to copy succeeded backups to the Desktop, or any other key to skip: ",
        )
        if answer.lower() != "y":
            return
        desktop = resolve_desktop_dir(
            self.context.settings, env=self.context.env, platform=self.context.platform
        )
        if desktop is None or not desktop.is_dir():
            LOGGER.warning("Desktop folder not found. Skipping copy to Desktop.")
            return
        for report in successful:
            target = desktop / report.archive_name
            print(f"\n  Copying zip archive to Desktop: {target}")
            try:
                shutil.copy2(report.archive_path, target)
            except OSError as exc:
                LOGGER.error("Failed to copy zip archive to Desktop: %s", exc)
            else:
                print("    Zip archive copied to Desktop.")

    def offer_log_deletion(self) -> None:
        run_log = self.context.run_log
        if not run_log.exists():
            return
        if all(report.succeeded for report in self.context.reports):
            answer = self._ask(
                prompts.DELETE_LOG,
                "[7/7] All backups succeeded. Press any key to delete the log file, or type 'x' to keep it: ",
            )
            remove = answer.lower() != "x"
        else:
            answer = self._ask(
                prompts.DELETE_LOG,
                "[7/7] WARNING: Some backups failed. It is recommended to keep the log file for "
                "troubleshooting. To delete it anyway, type 'd'; otherwise, press any key to keep it: ",
            )
            remove = answer.lower() == "d"
        if remove and run_log.delete():
            print("Log file deleted.")

    def pause_before_exit(self) -> None:
        if self.context.settings.get("pause_on_exit"):
            self._ask(prompts.EXIT_PAUSE, "Press any key to exit...")


__all__ = [
    "BackupOrchestrator",
    "RunContext",
    "build_context",
    "parse_selection",
    "safe_backup_name",
]
