"""Terminal implementation of the Shell contract using rich and click."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from typing import Iterator, Sequence

import click
from rich.console import Console
from rich.text import Text

from ghsweep_core.results import ActionResult
from ghsweep_core.shell import Shell, Task

logger = logging.getLogger(__name__)

_LEVEL_STYLE = {
    "info": "",
    "dim": "dim",
    "success": "green",
    "warning": "yellow",
    "error": "red",
}

_LEVEL_ICON = {
    "info": "ℹ ",
    "success": "✓ ",
    "warning": "! ",
    "error": "✗ ",
}


class RichShell(Shell):
    """Frames are rich rules, questions are click prompts.

    Messages are printed as plain Text so repository names and issue titles
    containing square brackets are never parsed as rich markup.
    """

    def __init__(self, console: Console | None = None, max_workers: int = 8):
        self._console = console or Console()
        self._max_workers = max(1, max_workers)

    @contextmanager
    def frame(self, title: str) -> Iterator[None]:
        self._console.rule(Text(title, style="bold cyan"), align="left")
        yield
        self._console.rule(style="dim")

    def notice(self, message: str, level: str = "info") -> None:
        text = Text(_LEVEL_ICON.get(level, ""))
        text.append(message, style=_LEVEL_STYLE.get(level, ""))
        self._console.print(text)

    def confirm(self, question: str, default: bool = False) -> bool:
        return click.confirm(question, default=default)

    def choose(self, question: str, options: Sequence[str]) -> str:
        for i, option in enumerate(options, 1):
            self._console.print(Text(f"  {i}. {option}"))
        index = click.prompt(question, type=click.IntRange(1, len(options)))
        return options[index - 1]

    def ask(self, question: str, hide_input: bool = False) -> str:
        return click.prompt(question, default="", show_default=False, hide_input=hide_input)

    def run_tasks(self, title: str, tasks: Sequence[Task]) -> list[ActionResult]:
        results: list[ActionResult] = [ActionResult.failure("not run")] * len(tasks)
        if not tasks:
            return results

        workers = min(self._max_workers, len(tasks))
        with self._console.status(title), ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(fn): i for i, (_, fn) in enumerate(tasks)}
            for future in as_completed(futures):
                i = futures[future]
                try:
                    result = future.result()
                except Exception as e:
                    # One failing task must not take the rest of the batch down.
                    logger.warning("Task %r raised %s: %s", tasks[i][0], type(e).__name__, e)
                    result = ActionResult.failure(str(e))
                results[i] = result
                self._report(tasks[i][0], result)
        return results

    def open_url(self, url: str) -> None:
        click.launch(url)

    def _report(self, label: str, result: ActionResult) -> None:
        if result.ok:
            self.notice(label, "success")
        else:
            self.notice(f"{label}: {result.error}", "error")
