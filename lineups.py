# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Starting lineups: loading, parsing and game-start validation.

Lineups are owned by the roster collaborator; the engine only reads them.
``validate_lineup`` collects every rule violation instead of stopping at
the first, so the operator sees the whole list at once.

Lineup file format::

    {
      "home": {"team_name": "Hornets", "roster_size": 12,
               "lineup": [{"player_id": "h01", "name": "Ana Ruiz",
                           "jersey_number": "7", "position": "SS"}, ...]},
      "away": {...},
      "games": {"<game_id>": {"home": {...}, "away": {...}}}
    }

``games`` is optional; when a game ID is listed there its lineups win over
the top-level ``home``/``away`` entries.
"""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from errors import LineupInvalid
from models import BattingTeam, FieldingPosition, Lineup

MIN_LINEUP_SIZE = 9

# positions that may be listed more than once
REPEATABLE_POSITIONS = {FieldingPosition.EP}
ESSENTIAL_POSITIONS = (FieldingPosition.P, FieldingPosition.C)

_LINEUP_PATH = Path(__file__).resolve().parent / "data" / "sample_lineups.json"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def lineup_violations(lineup: Lineup) -> list[str]:
    """Return a human-readable list of rule violations (empty when valid)."""
    problems = []
    size = len(lineup)
    if size < MIN_LINEUP_SIZE:
        problems.append(f"lineup has {size} batters; at least {MIN_LINEUP_SIZE} required")
    if lineup.roster_size is not None and size > lineup.roster_size:
        problems.append(
            f"lineup has {size} batters but the roster only has {lineup.roster_size} players"
        )

    orders = [slot.batting_order for slot in lineup.slots]
    if orders != list(range(1, size + 1)):
        problems.append("batting order must run 1.." + str(size) + " without gaps or repeats")

    ids = Counter(slot.player.player_id for slot in lineup.slots)
    for player_id, count in sorted(ids.items()):
        if count > 1:
            problems.append(f"player {player_id} is listed {count} times")

    positions = Counter(slot.position for slot in lineup.slots)
    for position, count in positions.items():
        if count > 1 and position not in REPEATABLE_POSITIONS:
            problems.append(f"position {position.value} is assigned {count} times")

    for position in ESSENTIAL_POSITIONS:
        if positions[position] == 0:
            problems.append(f"no player assigned to {position.value}")
    return problems


def validate_lineup(lineup: Lineup, side: str = "") -> Lineup:
    """Raise ``LineupInvalid`` listing every violation, else return *lineup*."""
    problems = lineup_violations(lineup)
    if problems:
        label = f"{side} lineup" if side else "Lineup"
        raise LineupInvalid(
            f"{label.capitalize()} for {lineup.team_name or 'unnamed team'} is invalid: "
            + "; ".join(problems),
            details=problems,
        )
    return lineup


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def build_lineup(data: dict[str, Any]) -> Lineup:
    """Build a ``Lineup`` from a lineup file entry.

    Accepts either explicit ``slots`` (with ``batting_order``) or a plain
    ``lineup`` list whose order is the batting order.

    Raises:
        LineupInvalid: If the entry is malformed.
    """
    if "slots" in data:
        payload = data
    else:
        payload = {
            "team_name": data.get("team_name", ""),
            "roster_size": data.get("roster_size"),
            "slots": [
                {
                    "batting_order": i,
                    "player": {
                        "player_id": p.get("player_id", ""),
                        "name": p.get("name", ""),
                        "jersey_number": str(p.get("jersey_number", "")),
                    },
                    "position": p.get("position"),
                }
                for i, p in enumerate(data.get("lineup", []), start=1)
            ],
        }
    try:
        return Lineup.model_validate(payload)
    except ValidationError as exc:
        details = [f"{'.'.join(str(x) for x in e['loc'])}: {e['msg']}" for e in exc.errors()]
        raise LineupInvalid(
            f"Lineup for {data.get('team_name') or 'unnamed team'} is malformed",
            details=details,
        ) from exc


def load_lineups(path: Path | str | None = None) -> dict[str, Any]:
    """Load a lineup file from JSON."""
    p = Path(path) if path else _LINEUP_PATH
    with open(p) as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------

class LineupProvider(Protocol):
    def get_lineup(self, game_id: str, side: BattingTeam) -> Lineup: ...


class JsonLineupProvider:
    """Serves lineups from a JSON lineup file."""

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path else _LINEUP_PATH
        self._data: dict[str, Any] | None = None

    def get_lineup(self, game_id: str, side: BattingTeam) -> Lineup:
        if self._data is None:
            self._data = load_lineups(self.path)
        key = BattingTeam(side).value.lower()
        game_entry = self._data.get("games", {}).get(game_id, {})
        entry = game_entry.get(key) or self._data.get(key)
        if entry is None:
            raise LineupInvalid(f"No {key} lineup for game {game_id} in {self.path}")
        return build_lineup(entry)


class StaticLineupProvider:
    """Serves a fixed pair of lineups regardless of game ID."""

    def __init__(self, home: Lineup, away: Lineup):
        self.home = home
        self.away = away

    def get_lineup(self, game_id: str, side: BattingTeam) -> Lineup:
        return self.home if BattingTeam(side) == BattingTeam.HOME else self.away
