"""Render the end-of-run summary table."""
from __future__ import annotations

from typing import Callable, List, Sequence

from colorama import Fore, Style

from .types import BackupReport, DELETION_DELETED, DELETION_FAILED, STATUS_SUCCESS

HEADERS = ("Project", "Source Size", "Zip Size", "Backup Date", "Status", "Deletion")


def _cells(report: BackupReport) -> List[str]:
    return [
        report.project,
        report.source_size,
        report.archive_size,
        report.backup_date,
        report.backup_status,
        report.deletion_status,
    ]


def column_widths(reports: Sequence[BackupReport]) -> List[int]:
    widths = [len(header) for header in HEADERS]
    for report in reports:
        for idx, cell in enumerate(_cells(report)):
            widths[idx] = max(widths[idx], len(cell))
    return widths


def _status_color(value: str) -> str:
    return Fore.GREEN if value.lower() == STATUS_SUCCESS.lower() else Fore.RED


def _deletion_color(value: str) -> str:
    lowered = value.lower()
    if lowered == DELETION_DELETED.lower():
        return Fore.GREEN
    if lowered == DELETION_FAILED.lower():
        return Fore.RED
    return ""


def render_report_table(reports: Sequence[BackupReport], *, color: bool = True) -> str:
    widths = column_widths(reports)
    border = "+" + "+".join("-" * (width + 2) for width in widths) + "+"

    def _row(cells: Sequence[str], colors: Sequence[str]) -> str:
        parts = []
        for cell, width, tint in zip(cells, widths, colors):
            padded = cell.ljust(width)
            if color and tint:
                padded = f"{tint}{cell}{Style.RESET_ALL}{' ' * (width - len(cell))}"
            parts.append(f" {padded} ")
        return "|" + "|".join(parts) + "|"

    lines = [border, _row(HEADERS, [""] * len(HEADERS)), border]
    for report in reports:
        tints = ["", "", "", "", _status_color(report.backup_status), _deletion_color(report.deletion_status)]
        lines.append(_row(_cells(report), tints))
    lines.append(border)
    return "\n".join(lines)


def print_report_table(
    reports: Sequence[BackupReport],
    *,
    color: bool = True,
    echo: Callable[[str], None] = print,
) -> None:
    echo("\n" + render_report_table(reports, color=color) + "\n")


__all__ = ["HEADERS", "column_widths", "print_report_table", "render_report_table"]
