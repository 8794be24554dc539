"""Owner-by-owner walk over the repository directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ghsweep_core.executor import ActionExecutor
from ghsweep_core.results import Outcome
from ghsweep_core.shell import Shell
from ghsweep_store.base import BaseDecisionStore
from ghsweep_store.cache import RepositoryDirectory
from ghsweep_store.models import RepoDecision, RepositoryRecord

logger = logging.getLogger(__name__)


@dataclass
class TraversalSummary:
    owners_processed: int = 0
    owners_skipped: int = 0
    repos_resolved: int = 0
    repos_left: int = 0


def is_resolved(record: RepositoryRecord, decision: RepoDecision | None) -> bool:
    """True if the repository needs no further interaction.

    A repository that was already archived when the snapshot was taken counts
    as resolved, so with include_archived it shows up in the owner's count but
    is never prompted.
    """
    if record.archived:
        return True
    return decision is not None and decision.resolved


class TraversalController:
    def __init__(
        self,
        store: BaseDecisionStore,
        executor: ActionExecutor,
        shell: Shell,
        include_archived: bool = False,
    ):
        self._store = store
        self._executor = executor
        self._shell = shell
        self._include_archived = include_archived

    def run(self, directory: RepositoryDirectory) -> TraversalSummary:
        summary = TraversalSummary()
        with self._shell.frame("Processing by owner..."):
            for owner, repos in directory.items():
                self._process_owner(owner, list(repos.values()), summary)
        return summary

    def visible_repos(self, repos: list[RepositoryRecord]) -> list[RepositoryRecord]:
        if self._include_archived:
            return list(repos)
        return [r for r in repos if not r.archived]

    def owner_resolved(self, owner: str, repos: list[RepositoryRecord]) -> bool:
        known = self._store.get_or_create_owner(owner).repos
        return all(is_resolved(r, known.get(r.name)) for r in repos)

    def _process_owner(self, owner: str, repos: list[RepositoryRecord], summary: TraversalSummary) -> None:
        decisions = self._store.get_or_create_owner(owner)

        if decisions.skipped:
            self._shell.notice(f"{owner} is marked as skipped in the decision log, skipping.")
            summary.owners_skipped += 1
            return

        repos = self.visible_repos(repos)
        if self.owner_resolved(owner, repos):
            self._shell.notice(
                f"All repos in {owner} are marked as skipped, deleted, or archived in the decision log, "
                "skipping this owner."
            )
            summary.owners_skipped += 1
            return

        with self._shell.frame(owner):
            if not self._shell.confirm(f"Do you want to process {len(repos)} repo(s) in {owner}?"):
                decisions.skip()
                logger.debug("Owner %s skipped by operator", owner)
                summary.owners_skipped += 1
                return

            decisions.process()
            summary.owners_processed += 1
            for record in repos:
                self._process_repo(record, summary)

    def _process_repo(self, record: RepositoryRecord, summary: TraversalSummary) -> None:
        decision = self._store.get_or_create_repo(record.owner, record.name)
        if is_resolved(record, decision):
            return

        with self._shell.frame(record.name):
            outcome = self._executor.visit(record, decision)
            while outcome is Outcome.RETRY:
                outcome = self._executor.visit(record, decision)

        if outcome is Outcome.RESOLVED:
            summary.repos_resolved += 1
        else:
            summary.repos_left += 1
