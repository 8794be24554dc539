"""Result types passed between the GitHub client, the shell and the executor."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Outcome(Enum):
    """What the traversal should do after one pass of the action menu."""

    RESOLVED = "resolved"  # terminal: move to the next repository
    RETRY = "retry"  # show the same menu again
    UNRESOLVED = "unresolved"  # give up for this session; offered again next run


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a single remote call.

    Remote helpers return this instead of raising so that no GitHub failure
    escapes the handling of one repository.
    """

    ok: bool
    error: str | None = None
    status: int | None = None  # HTTP status of the failed call, if known
    value: Any = None

    @classmethod
    def success(cls, value: Any = None) -> ActionResult:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str, status: int | None = None) -> ActionResult:
        return cls(ok=False, error=error, status=status)
