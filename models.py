# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Data models for the softball scorekeeper.

Lineups and the read-only game projection are Pydantic models: they cross
the boundary to the roster collaborator and the presentation layer.  The
engine's own working state lives in dataclasses (see ``resolver.py``).
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Half(str, Enum):
    TOP = "TOP"  # away bats
    BOTTOM = "BOTTOM"  # home bats


class BattingTeam(str, Enum):
    HOME = "HOME"
    AWAY = "AWAY"


class Base(str, Enum):
    FIRST = "first"
    SECOND = "second"
    THIRD = "third"

    @property
    def number(self) -> int:
        return _BASE_NUMBERS[self]

    @classmethod
    def from_number(cls, n: int) -> Base:
        for base, num in _BASE_NUMBERS.items():
            if num == n:
                return base
        raise ValueError(f"No base numbered {n}")


_BASE_NUMBERS = {Base.FIRST: 1, Base.SECOND: 2, Base.THIRD: 3}


class GameStatus(str, Enum):
    SETUP = "SETUP"
    IN_PROGRESS = "IN_PROGRESS"
    SUSPENDED = "SUSPENDED"
    COMPLETED = "COMPLETED"


class FieldingPosition(str, Enum):
    P = "P"
    C = "C"
    FIRST_BASE = "1B"
    SECOND_BASE = "2B"
    THIRD_BASE = "3B"
    SS = "SS"
    LF = "LF"
    CF = "CF"
    RF = "RF"
    SF = "SF"  # short fielder (slow-pitch)
    EP = "EP"  # extra player, may appear more than once
    DH = "DH"


def batting_team_for(half: Half) -> BattingTeam:
    return BattingTeam.AWAY if half == Half.TOP else BattingTeam.HOME


# ---------------------------------------------------------------------------
# Roster references
# ---------------------------------------------------------------------------

class PlayerRef(BaseModel):
    """A player as known to the roster collaborator; never owned here."""
    model_config = ConfigDict(frozen=True)

    player_id: str = Field(min_length=1)
    name: str
    jersey_number: str = ""

    @field_validator("player_id")
    @classmethod
    def validate_player_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Player ID must be a non-empty string")
        return v


class LineupSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    batting_order: int = Field(ge=1, description="1-based batting order position")
    player: PlayerRef
    position: FieldingPosition


class Lineup(BaseModel):
    """Starting batting order for one team.

    Field-level checks only; the game-start rules (minimum size, unique
    positions, sequential order) are enforced by ``lineups.validate_lineup``
    so that every violation is reported at once.
    """
    model_config = ConfigDict(frozen=True)

    team_name: str
    slots: tuple[LineupSlot, ...]
    roster_size: Optional[int] = Field(default=None, ge=1)

    def __len__(self) -> int:
        return len(self.slots)

    def slot_at(self, index: int) -> LineupSlot:
        return self.slots[index]

    def index_of(self, player_id: str) -> int | None:
        for i, slot in enumerate(self.slots):
            if slot.player.player_id == player_id:
                return i
        return None


# ---------------------------------------------------------------------------
# State projection
# ---------------------------------------------------------------------------

class Runners(BaseModel):
    model_config = ConfigDict(frozen=True)

    first: Optional[PlayerRef] = None
    second: Optional[PlayerRef] = None
    third: Optional[PlayerRef] = None


class Score(BaseModel):
    model_config = ConfigDict(frozen=True)

    home: int = 0
    away: int = 0


class InningLine(BaseModel):
    """Runs per side for one inning; ``None`` when that half has not started."""
    model_config = ConfigDict(frozen=True)

    inning: int = Field(ge=1)
    away_runs: Optional[int] = None
    home_runs: Optional[int] = None


class GameView(BaseModel):
    """Read-only snapshot of a live game for rendering."""
    model_config = ConfigDict(frozen=True)

    game_id: str
    status: GameStatus
    inning: int = Field(ge=1)
    half: Half
    outs: int = Field(ge=0, le=2)
    balls: int = Field(default=0, ge=0, le=3)
    strikes: int = Field(default=0, ge=0, le=2)
    runners: Runners = Field(default_factory=Runners)
    batting_team: BattingTeam
    current_batter: Optional[LineupSlot] = None
    on_deck_batter: Optional[LineupSlot] = None
    score: Score = Field(default_factory=Score)
    innings: list[InningLine] = Field(default_factory=list)
    home_team: str = ""
    away_team: str = ""
    completion_reason: Optional[str] = None
    at_bats_recorded: int = 0
