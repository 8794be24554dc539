"""Abstract decision store interface.

The traversal and executor depend on BaseDecisionStore, not on a concrete
backend. A store holds the whole decision state in memory for the session;
backends only decide how the document is read at start-up and written at the
end.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ghsweep_store.models import OwnerDecisions, RepoDecision


class PersistenceError(Exception):
    """The decision document could not be written."""


class BaseDecisionStore(ABC):
    """In-memory decision state with a pluggable load/persist backend.

    Nothing is written until persist() is called. The run command calls it
    exactly once, from a finally block, so an interrupted session still
    flushes whatever it decided.
    """

    def __init__(self):
        self._owners: dict[str, OwnerDecisions] = {}

    @property
    def owners(self) -> dict[str, OwnerDecisions]:
        return self._owners

    def load(self) -> dict[str, OwnerDecisions]:
        """Replace the in-memory state with the persisted one.

        Returns an empty mapping if nothing usable is persisted; never raises.
        """
        self._owners = self._read()
        return self._owners

    def get_or_create_owner(self, owner: str) -> OwnerDecisions:
        if owner not in self._owners:
            self._owners[owner] = OwnerDecisions()
        return self._owners[owner]

    def get_or_create_repo(self, owner: str, name: str) -> RepoDecision:
        repos = self.get_or_create_owner(owner).repos
        if name not in repos:
            repos[name] = RepoDecision()
        return repos[name]

    def persist(self) -> None:
        """Write the whole in-memory state. Raises PersistenceError on failure."""
        self._write(self._owners)

    @abstractmethod
    def _read(self) -> dict[str, OwnerDecisions]:
        """Return the persisted state, or {} when missing or unreadable."""

    @abstractmethod
    def _write(self, owners: dict[str, OwnerDecisions]) -> None:
        """Replace the persisted state with ``owners``."""

    def close(self) -> None:
        """Release any resources held by the store.

        Optional: subclasses that need cleanup should override this.
        """
