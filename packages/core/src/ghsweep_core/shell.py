"""Abstract interactive shell.

The executor and traversal never talk to the terminal directly. Everything
the operator sees or answers goes through a Shell, so the decision logic can
run against the rich/click implementation in ghsweep_cli or a scripted one in
tests. All methods are synchronous.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Callable, Sequence

from ghsweep_core.results import ActionResult

Task = tuple[str, Callable[[], ActionResult]]


class Shell(ABC):
    @abstractmethod
    def frame(self, title: str) -> AbstractContextManager:
        """Render a titled section around the body of a ``with`` block."""

    @abstractmethod
    def notice(self, message: str, level: str = "info") -> None:
        """Print a one-line message. ``level`` is one of info, dim, success, warning or error."""

    @abstractmethod
    def confirm(self, question: str, default: bool = False) -> bool:
        """Ask a yes/no question."""

    @abstractmethod
    def choose(self, question: str, options: Sequence[str]) -> str:
        """Ask the operator to pick one of ``options``; return the chosen label."""

    @abstractmethod
    def ask(self, question: str, hide_input: bool = False) -> str:
        """Ask for free text."""

    @abstractmethod
    def run_tasks(self, title: str, tasks: Sequence[Task]) -> list[ActionResult]:
        """Run labelled tasks concurrently and block until every one has finished.

        Returns one result per task, in the order given. A task that raises is
        reported as a failed result; it never stops the other tasks.
        """

    @abstractmethod
    def open_url(self, url: str) -> None:
        """Open ``url`` in the operator's browser."""
