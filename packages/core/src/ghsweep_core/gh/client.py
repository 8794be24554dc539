from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator

from github import Github, GithubException
from requests import RequestException

from ghsweep_core.results import ActionResult
from ghsweep_store.models import RepositoryRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssueRef:
    number: int
    title: str


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _error_message(e: GithubException) -> str:
    """Pull GitHub's human-readable message out of an API error."""
    data = e.data
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return str(e)


def _to_record(repo) -> RepositoryRecord:
    return RepositoryRecord(
        id=repo.id,
        owner=repo.owner.login,
        name=repo.name,
        fork=bool(repo.fork),
        archived=bool(repo.archived),
        private=bool(repo.private),
        url=repo.html_url,
        stars=repo.stargazers_count or 0,
        # Not part of the listing payload; PyGithub fetches it per repository.
        # Paid once, when the snapshot is first built.
        subscribers=repo.subscribers_count or 0,
        open_issues_count=repo.open_issues_count or 0,
        last_push=_iso(repo.pushed_at),
        last_update=_iso(repo.updated_at),
    )


class GitHubClient:
    """The handful of GitHub operations the sweep needs.

    Everything except list_repositories returns an ActionResult instead of
    raising GithubException, so callers can decide what a failure means.
    """

    def __init__(self, token: str, gh: Github | None = None):
        self._gh = gh if gh is not None else Github(token)

    def list_repositories(self) -> Iterator[RepositoryRecord]:
        """Yield every repository the authenticated user can access."""
        for repo in self._gh.get_user().get_repos():
            yield _to_record(repo)

    def archive_repo(self, owner: str, name: str) -> ActionResult:
        return self._call(owner, name, "archive", lambda repo: repo.edit(archived=True))

    def delete_repo(self, owner: str, name: str) -> ActionResult:
        return self._call(owner, name, "delete", lambda repo: repo.delete())

    def list_open_issues(self, owner: str, name: str) -> ActionResult:
        """Open issues of a repository, pull requests excluded.

        On success the result value is a list of IssueRef.
        """

        def _list(repo):
            return [
                IssueRef(number=issue.number, title=issue.title or "")
                for issue in repo.get_issues(state="open")
                if issue.pull_request is None
            ]

        return self._call(owner, name, "list issues of", _list)

    def close_issue(self, owner: str, name: str, number: int) -> ActionResult:
        return self._call(
            owner,
            name,
            f"close issue #{number} of",
            lambda repo: repo.get_issue(number).edit(state="closed"),
        )

    def _call(self, owner: str, name: str, what: str, fn) -> ActionResult:
        try:
            repo = self._gh.get_repo(f"{owner}/{name}")
            return ActionResult.success(fn(repo))
        except GithubException as e:
            message = _error_message(e)
            logger.warning("Could not %s %s/%s (%s): %s", what, owner, name, e.status, message)
            return ActionResult.failure(message, status=e.status)
        except RequestException as e:
            logger.warning("Could not %s %s/%s: %s", what, owner, name, e)
            return ActionResult.failure(str(e))
