"""Decision points where a backup run waits for the user."""
from __future__ import annotations

from collections import deque
from typing import Callable, Deque, Dict, Iterable, List, Mapping, Optional, Protocol, Tuple

SELECT_PROJECTS = "select_projects"
CHOOSE_NAME = "choose_name"
CUSTOM_NAME = "custom_name"
DELETE_SOURCES = "delete_sources"
COPY_TO_DESKTOP = "copy_to_desktop"
DELETE_LOG = "delete_log"
EXIT_PAUSE = "exit_pause"

DECISIONS = (
    SELECT_PROJECTS,
    CHOOSE_NAME,
    CUSTOM_NAME,
    DELETE_SOURCES,
    COPY_TO_DESKTOP,
    DELETE_LOG,
    EXIT_PAUSE,
)


class Prompter(Protocol):
    def ask(self, decision: str, message: str) -> str:
        ...


class ConsolePrompter:
    """Block on a line of input from the controlling terminal."""

    def __init__(self, reader: Callable[[str], str] = input) -> None:
        self._reader = reader

    def ask(self, decision: str, message: str) -> str:
        try:
            return self._reader(message).strip()
        except EOFError:
            return ""


class ScriptedPrompter:
    """Answer prompts from canned responses, one queue per decision point.

    Decisions without a queued answer get an empty string, the same as a
    user pressing Enter. Every question is kept in ``asked`` for inspection.
    """

    def __init__(self, responses: Optional[Mapping[str, Iterable[str]]] = None) -> None:
        self._responses: Dict[str, Deque[str]] = {}
        for decision, answers in (responses or {}).items():
            if decision not in DECISIONS:
                raise ValueError(f"unknown decision point: {decision}")
            if isinstance(answers, str):
                answers = [answers]
            self._responses[decision] = deque(answers)
        self.asked: List[Tuple[str, str]] = []

    def ask(self, decision: str, message: str) -> str:
        self.asked.append((decision, message))
        queue = self._responses.get(decision)
        if not queue:
            return ""
        return queue.popleft().strip()

    def decisions(self) -> List[str]:
        return [decision for decision, _ in self.asked]


__all__ = [
    "CHOOSE_NAME",
    "COPY_TO_DESKTOP",
    "CUSTOM_NAME",
    "ConsolePrompter",
    "DECISIONS",
    "DELETE_LOG",
    "DELETE_SOURCES",
    "EXIT_PAUSE",
    "Prompter",
    "SELECT_PROJECTS",
    "ScriptedPrompter",
]
