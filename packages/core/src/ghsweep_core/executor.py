"""Per-repository action menu: confirm, call GitHub, record.

One call to ActionExecutor.visit() is one pass through the menu. It returns
an Outcome telling the traversal whether the repository is done (RESOLVED),
should be offered again straight away (RETRY), or should be left for a later
session (UNRESOLVED).

Destructive actions are logged in the repository's decision log before the
remote call is made, so the log records what the operator asked for even
when GitHub refused it. The archived/deleted flags are only set on success.
"""

from __future__ import annotations

import logging
import re

from ghsweep_core.gh.client import GitHubClient
from ghsweep_core.results import ActionResult, Outcome
from ghsweep_core.shell import Shell
from ghsweep_store.models import Action, RepoDecision, RepositoryRecord

logger = logging.getLogger(__name__)

ARCHIVE = "Archive"
DELETE = "Delete"
CLOSE_ISSUES = "Close all issues"
OPEN = "Open"
SKIP = "Skip"

MENU = (ARCHIVE, DELETE, CLOSE_ISSUES, OPEN, SKIP)

# GitHub answers 403 "Repository was archived so is read-only." when the
# repository is already archived.
_ALREADY_ARCHIVED_RE = re.compile(r"was archived", re.IGNORECASE)


def is_already_archived(result: ActionResult) -> bool:
    return not result.ok and bool(_ALREADY_ARCHIVED_RE.search(result.error or ""))


def describe(record: RepositoryRecord) -> str:
    """One-line summary shown above the action menu."""
    parts = ["private" if record.private else "public"]
    if record.fork:
        parts.append("fork")
    if record.archived:
        parts.append("archived")
    parts.append(f"★ {record.stars}")
    parts.append(f"{record.subscribers} watching")
    parts.append(f"{record.open_issues_count} open issue(s)")
    if record.last_push:
        parts.append(f"last push {record.last_push[:10]}")
    return " · ".join(parts)


class ActionExecutor:
    def __init__(self, client: GitHubClient, shell: Shell):
        self._client = client
        self._shell = shell
        self._handlers = {
            ARCHIVE: self.archive,
            DELETE: self.delete,
            CLOSE_ISSUES: self.close_all_issues,
            OPEN: self.open,
            SKIP: self.skip,
        }

    def visit(self, record: RepositoryRecord, decision: RepoDecision) -> Outcome:
        """Show the menu once for ``record`` and run the chosen action."""
        self._shell.notice(describe(record), "dim")
        choice = self._shell.choose("What do you want to do?", MENU)
        logger.debug("%s: operator chose %s", record.full_name, choice)
        return self._handlers[choice](record, decision)

    def archive(self, record: RepositoryRecord, decision: RepoDecision) -> Outcome:
        if record.archived or decision.archived:
            self._shell.notice(f"{record.full_name} is already archived.", "warning")
            return Outcome.RETRY

        if not self._shell.confirm("Are you sure you want to archive this repo?"):
            return Outcome.RETRY

        decision.record(Action.ARCHIVE)
        result = self._client.archive_repo(record.owner, record.name)

        if result.ok or is_already_archived(result):
            decision.mark_archived()
            self._shell.notice("Archived.", "success")
            return Outcome.RESOLVED

        self._shell.notice(f"Failed. {result.error}", "error")
        return Outcome.UNRESOLVED

    def delete(self, record: RepositoryRecord, decision: RepoDecision) -> Outcome:
        if not self._shell.confirm(
            f"Are you sure you want to DELETE {record.full_name}? This cannot be undone"
        ):
            return Outcome.RETRY

        decision.record(Action.DELETE)
        result = self._client.delete_repo(record.owner, record.name)

        if result.ok:
            decision.mark_deleted()
            self._shell.notice("Deleted.", "success")
            return Outcome.RESOLVED

        self._shell.notice(f"Failed. {result.error}", "error")
        return Outcome.UNRESOLVED

    def close_all_issues(self, record: RepositoryRecord, decision: RepoDecision) -> Outcome:
        # Closing issues never resolves a repository: it always comes back to the menu.
        if not self._shell.confirm("Are you sure you want to close all open issues?"):
            return Outcome.RETRY

        listing = self._client.list_open_issues(record.owner, record.name)
        if not listing.ok:
            self._shell.notice(f"Could not list issues. {listing.error}", "error")
            return Outcome.RETRY

        issues = listing.value or []
        self._shell.notice(f"Found {len(issues)} issue(s) for {record.full_name}")
        decision.record(Action.CLOSE_ISSUES, extra={"issues": [i.number for i in issues]})
        if not issues:
            return Outcome.RETRY

        tasks = [
            (
                f"Closing [#{issue.number}] {issue.title}",
                lambda number=issue.number: self._client.close_issue(record.owner, record.name, number),
            )
            for issue in issues
        ]
        results = self._shell.run_tasks(f"Closing issues in {record.full_name}", tasks)

        failed = sum(1 for r in results if not r.ok)
        if failed:
            self._shell.notice(f"{failed} of {len(issues)} issue(s) could not be closed.", "error")
        else:
            self._shell.notice(f"Closed {len(issues)} issue(s).", "success")
        return Outcome.RETRY

    def open(self, record: RepositoryRecord, decision: RepoDecision) -> Outcome:
        self._shell.open_url(record.url or f"https://github.com/{record.full_name}")
        return Outcome.RETRY

    def skip(self, record: RepositoryRecord, decision: RepoDecision) -> Outcome:
        decision.record(Action.SKIP)
        decision.mark_skipped()
        return Outcome.RESOLVED
