"""Point-in-time snapshot of every repository the credential can see.

The snapshot is fetched once and reused on every later run, even when stale.
Delete the file (or run with --refresh) to fetch again. The schema version
lives in the filename so an incompatible snapshot from an older release is
simply never read.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Callable, Iterable

from ghsweep_store.models import RepositoryRecord

logger = logging.getLogger(__name__)

REPOS_CACHE_FILENAME = "repos.v1.json"

RepositoryDirectory = dict[str, dict[int, RepositoryRecord]]


class RepositoryCache:
    """Loads the repository directory from disk, fetching it on first use."""

    def __init__(self, path: str | Path = Path("data") / REPOS_CACHE_FILENAME):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self, fetch: Callable[[], Iterable[RepositoryRecord]]) -> RepositoryDirectory:
        """Return the cached directory, calling ``fetch`` only if there is none.

        A missing, malformed or empty snapshot all count as "no snapshot".
        """
        directory = self.read()
        if directory:
            logger.debug("Loaded %d owner(s) from %s", len(directory), self._path)
            return directory

        directory = {}
        for record in fetch():
            directory.setdefault(record.owner, {})[record.id] = record

        self._write(directory)
        return directory

    def read(self) -> RepositoryDirectory:
        """Return the snapshot on disk, or {} if there is no usable one."""
        try:
            document = json.loads(self._path.read_text())
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable repository cache %s: %s", self._path, e)
            return {}

        try:
            return {
                owner: {int(repo_id): RepositoryRecord(**data) for repo_id, data in repos.items()}
                for owner, repos in document.items()
            }
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning("Ignoring repository cache %s with unexpected shape: %s", self._path, e)
            return {}

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)

    def _write(self, directory: RepositoryDirectory) -> None:
        document = {
            owner: {str(repo_id): asdict(record) for repo_id, record in repos.items()}
            for owner, repos in directory.items()
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(document, indent=2) + "\n")
        except OSError as e:
            # The fetched directory is still usable; the next run just fetches again.
            logger.warning("Could not write repository cache %s: %s", self._path, e)
