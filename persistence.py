# /// script
# requires-python = ">=3.12"
# dependencies = []
# ///
"""Persistence port and adapters for game snapshots.

The session hands every new state to ``PersistencePort.commit`` before
making it visible.  Adapters raise ``PersistError`` when a write fails;
retrying is the caller's decision.  Commits are idempotent: writing the
same snapshot twice leaves the store unchanged.

Usage::

    from persistence import JsonFilePersistence

    store = JsonFilePersistence("data/games")
    store.commit("g-001", snapshot)        # writes data/games/g-001.json
    snapshot = store.load("g-001")

Completed games are moved to ``<root>/archive/``.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Protocol

from errors import PersistError

logger = logging.getLogger(__name__)

_DEFAULT_ROOT = Path(__file__).resolve().parent / "data" / "games"
_SAFE_ID = re.compile(r"^[A-Za-z0-9_.-]+$")

ARCHIVE_DIR = "archive"
COMPLETED = "COMPLETED"


class PersistencePort(Protocol):
    def commit(self, game_id: str, state: dict[str, Any]) -> None: ...


# ---------------------------------------------------------------------------
# In-memory adapter
# ---------------------------------------------------------------------------

class InMemoryPersistence:
    """Keeps the latest snapshot per game in a dict.

    Args:
        fail: When true every commit raises ``PersistError``; used to
            exercise the failure path.
    """

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.snapshots: dict[str, dict[str, Any]] = {}
        self.commits = 0

    def commit(self, game_id: str, state: dict[str, Any]) -> None:
        if self.fail:
            raise PersistError(f"store unavailable for {game_id}", game_id=game_id)
        self.snapshots[game_id] = json.loads(json.dumps(state))
        self.commits += 1

    def load(self, game_id: str) -> dict[str, Any] | None:
        return self.snapshots.get(game_id)


# ---------------------------------------------------------------------------
# JSON file adapter
# ---------------------------------------------------------------------------

class JsonFilePersistence:
    """One JSON file per game under *root*, written by atomic rename."""

    def __init__(self, root: str | Path | None = None):
        self._root = Path(root) if root else _DEFAULT_ROOT

    @property
    def root(self) -> Path:
        return self._root

    def commit(self, game_id: str, state: dict[str, Any]) -> None:
        path = self._path_for(game_id)
        archived = self._archive_path_for(game_id)
        target = archived if state.get("status") == COMPLETED else path
        tmp_path = target.with_suffix(".tmp")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w") as f:
                json.dump(state, f, indent=2)
            tmp_path.replace(target)  # atomic rename
            if target == archived:
                path.unlink(missing_ok=True)
        except (OSError, TypeError, ValueError) as exc:
            if tmp_path.parent.is_dir():
                tmp_path.unlink(missing_ok=True)
            raise PersistError(f"Could not write {target}: {exc}", game_id=game_id) from exc
        logger.debug("Saved game %s to %s", game_id, target)

    def load(self, game_id: str) -> dict[str, Any] | None:
        """Return the stored snapshot (live or archived), or ``None``."""
        for path in (self._path_for(game_id), self._archive_path_for(game_id)):
            if not path.exists():
                continue
            try:
                with open(path) as f:
                    return json.load(f)
            except (json.JSONDecodeError, OSError) as exc:
                raise PersistError(f"Could not read {path}: {exc}", game_id=game_id) from exc
        return None

    def list_games(self, include_archived: bool = False) -> list[str]:
        ids = [p.stem for p in sorted(self._root.glob("*.json"))] if self._root.exists() else []
        if include_archived:
            archive = self._root / ARCHIVE_DIR
            if archive.exists():
                ids.extend(p.stem for p in sorted(archive.glob("*.json")))
        return ids

    # -- helpers -----------------------------------------------------------

    def _path_for(self, game_id: str) -> Path:
        return self._root / f"{_checked(game_id)}.json"

    def _archive_path_for(self, game_id: str) -> Path:
        return self._root / ARCHIVE_DIR / f"{_checked(game_id)}.json"


def _checked(game_id: str) -> str:
    if not _SAFE_ID.match(game_id):
        raise PersistError(
            f"Game ID {game_id!r} cannot be used as a file name", game_id=game_id
        )
    return game_id
