"""Repository snapshot and decision log data models.

Decoupled from ghsweep_core so the store layer can be used independently
(the status and history commands only ever touch this package).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Action(str, Enum):
    """Actions recorded against a single repository."""

    ARCHIVE = "Archive"
    DELETE = "Delete"
    CLOSE_ISSUES = "CloseIssues"
    SKIP = "Skip"


@dataclass(frozen=True)
class RepositoryRecord:
    """A repository as listed by GitHub at snapshot time."""

    id: int
    owner: str
    name: str
    fork: bool = False
    archived: bool = False
    private: bool = False
    url: str = ""
    stars: int = 0
    subscribers: int = 0
    open_issues_count: int = 0
    last_push: str | None = None  # ISO-8601 UTC timestamp
    last_update: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass
class RepoEvent:
    """One entry in a repository's append-only decision log."""

    action: Action
    time: str = field(default_factory=_now)
    extra: dict | None = None


@dataclass
class RepoDecision:
    """Decision record for one repository.

    Any of archived / deleted / skipped makes the repository resolved. The
    flags only ever move from False to True, hence the mark_* methods and no
    setters for the opposite direction.
    """

    decisions: list[RepoEvent] = field(default_factory=list)
    archived: bool = False
    deleted: bool = False
    skipped: bool = False

    @property
    def resolved(self) -> bool:
        return self.archived or self.deleted or self.skipped

    def record(self, action: Action, extra: dict | None = None) -> RepoEvent:
        event = RepoEvent(action=action, extra=extra)
        self.decisions.append(event)
        return event

    def mark_archived(self) -> None:
        self.archived = True

    def mark_deleted(self) -> None:
        self.deleted = True

    def mark_skipped(self) -> None:
        self.skipped = True


@dataclass
class OwnerEvent:
    """An owner-level decision: "Process" or "Skipped"."""

    name: str
    time: str = field(default_factory=_now)


@dataclass
class OwnerDecisions:
    """Decision record for an owner and every repository visited under it."""

    skipped: bool = False
    decisions: list[OwnerEvent] = field(default_factory=list)
    repos: dict[str, RepoDecision] = field(default_factory=dict)

    def skip(self) -> None:
        self.skipped = True
        self.decisions.append(OwnerEvent(name="Skipped"))

    def process(self) -> None:
        self.decisions.append(OwnerEvent(name="Process"))
