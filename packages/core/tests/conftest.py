"""Shared fixtures for the core tests."""

from __future__ import annotations

from contextlib import contextmanager
from unittest.mock import MagicMock

import pytest

from ghsweep_core.gh.client import GitHubClient
from ghsweep_core.results import ActionResult
from ghsweep_core.shell import Shell


class ScriptedShell(Shell):
    """Answers questions from pre-loaded queues and records everything shown.

    Running out of answers raises KeyboardInterrupt, which is also how tests
    simulate the operator pressing Ctrl-C.
    """

    def __init__(self, choices=(), confirms=()):
        self.choices = list(choices)
        self.confirms = list(confirms)
        self.answers: list[str] = []
        self.frames: list[str] = []
        self.notices: list[tuple[str, str]] = []
        self.questions: list[str] = []
        self.prompts: list[str] = []
        self.opened: list[str] = []
        self.task_labels: list[str] = []

    @contextmanager
    def frame(self, title):
        self.frames.append(title)
        yield

    def notice(self, message, level="info"):
        self.notices.append((level, message))

    def confirm(self, question, default=False):
        self.questions.append(question)
        if not self.confirms:
            raise KeyboardInterrupt
        return self.confirms.pop(0)

    def choose(self, question, options):
        self.prompts.append(question)
        if not self.choices:
            raise KeyboardInterrupt
        choice = self.choices.pop(0)
        assert choice in options
        return choice

    def ask(self, question, hide_input=False):
        if not self.answers:
            raise KeyboardInterrupt
        return self.answers.pop(0)

    def run_tasks(self, title, tasks):
        results = []
        for label, fn in tasks:
            self.task_labels.append(label)
            try:
                results.append(fn())
            except Exception as e:
                results.append(ActionResult.failure(str(e)))
        return results

    def open_url(self, url):
        self.opened.append(url)

    def messages(self, level=None):
        return [m for lvl, m in self.notices if level is None or lvl == level]


@pytest.fixture
def shell():
    return ScriptedShell()


@pytest.fixture
def client():
    mock = MagicMock(spec=GitHubClient)
    mock.archive_repo.return_value = ActionResult.success()
    mock.delete_repo.return_value = ActionResult.success()
    mock.list_open_issues.return_value = ActionResult.success([])
    mock.close_issue.return_value = ActionResult.success()
    return mock


@pytest.fixture
def make_shell():
    return ScriptedShell
