"""JsonDecisionStore: the decision log as a pretty-printed JSON document.

Data format: one JSON object keyed by owner login:

    {
      "acme": {
        "skipped": true,
        "decisions": [{"name": "Skipped", "time": "..."}],
        "repos": {
          "web": {"decisions": [{"action": "Skip", "time": "..."}], "skipped": true},
          "api": {}
        }
      }
    }

False flags and empty logs are left out, so a repository that was shown but
not acted on is written as {}. The file is always rewritten whole: a
temporary file in the same directory is renamed over the target, so a crash
mid-write leaves the previous document intact.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from ghsweep_store.base import BaseDecisionStore, PersistenceError
from ghsweep_store.models import Action, OwnerDecisions, OwnerEvent, RepoDecision, RepoEvent

logger = logging.getLogger(__name__)

# Spellings written by earlier versions of the decision log.
_LEGACY_ACTIONS = {
    "Close Issues": Action.CLOSE_ISSUES,
    "Skip Issues": Action.SKIP,
}

# Flag keys written by earlier versions, read as their current names.
_LEGACY_FLAGS = {"archived": "archive", "deleted": "delete"}


class JsonDecisionStore(BaseDecisionStore):
    """Stores decisions in a local JSON file (``data/decisions.json`` by default)."""

    def __init__(self, path: str | Path = "data/decisions.json"):
        super().__init__()
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, OwnerDecisions]:
        try:
            document = json.loads(self._path.read_text())
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable decision log %s: %s", self._path, e)
            return {}

        if not isinstance(document, dict):
            logger.warning("Ignoring decision log %s: top level is not an object", self._path)
            return {}

        try:
            return {
                owner: self._owner_from_dict(data)
                for owner, data in document.items()
                if isinstance(data, dict)
            }
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning("Ignoring decision log %s: unexpected shape (%s)", self._path, e)
            return {}

    def _write(self, owners: dict[str, OwnerDecisions]) -> None:
        document = {owner: self._owner_to_dict(decisions) for owner, decisions in owners.items()}
        text = json.dumps(document, indent=2) + "\n"

        tmp_path = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".decisions.", suffix=".tmp", dir=self._path.parent)
            with os.fdopen(fd, "w") as fh:
                fh.write(text)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise PersistenceError(f"Could not write decision log {self._path}: {e}") from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

    @staticmethod
    def _owner_to_dict(owner: OwnerDecisions) -> dict:
        d: dict = {}
        if owner.skipped:
            d["skipped"] = True
        if owner.decisions:
            d["decisions"] = [{"name": e.name, "time": e.time} for e in owner.decisions]
        d["repos"] = {name: JsonDecisionStore._repo_to_dict(r) for name, r in owner.repos.items()}
        return d

    @staticmethod
    def _repo_to_dict(repo: RepoDecision) -> dict:
        d: dict = {}
        if repo.decisions:
            events = []
            for e in repo.decisions:
                event = {"action": e.action.value, "time": e.time}
                if e.extra is not None:
                    event["extra"] = e.extra
                events.append(event)
            d["decisions"] = events
        for flag in ("archived", "deleted", "skipped"):
            if getattr(repo, flag):
                d[flag] = True
        return d

    @staticmethod
    def _owner_from_dict(d: dict) -> OwnerDecisions:
        repos = d.get("repos") or {}
        return OwnerDecisions(
            skipped=bool(d.get("skipped", False)),
            decisions=[
                OwnerEvent(name=e.get("name", ""), time=e.get("time", ""))
                for e in d.get("decisions") or []
                if isinstance(e, dict)
            ],
            repos={
                name: JsonDecisionStore._repo_from_dict(r)
                for name, r in repos.items()
                if isinstance(r, dict)
            },
        )

    @staticmethod
    def _repo_from_dict(d: dict) -> RepoDecision:
        events = []
        for e in d.get("decisions") or []:
            action = JsonDecisionStore._parse_action(e.get("action")) if isinstance(e, dict) else None
            if action is None:
                logger.debug("Dropping unrecognised decision entry: %r", e)
                continue
            events.append(RepoEvent(action=action, time=e.get("time", ""), extra=e.get("extra")))
        return RepoDecision(
            decisions=events,
            archived=JsonDecisionStore._flag(d, "archived"),
            deleted=JsonDecisionStore._flag(d, "deleted"),
            skipped=bool(d.get("skipped", False)),
        )

    @staticmethod
    def _flag(d: dict, name: str) -> bool:
        legacy = _LEGACY_FLAGS.get(name)
        return bool(d.get(name, False)) or bool(legacy and d.get(legacy, False))

    @staticmethod
    def _parse_action(value) -> Action | None:
        if not isinstance(value, str):
            return None
        if value in _LEGACY_ACTIONS:
            return _LEGACY_ACTIONS[value]
        try:
            return Action(value)
        except ValueError:
            return None
