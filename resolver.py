# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""At-bat resolution.

Turns one recorded outcome into the next game state: builds the runner
advancement proposal (automatic rule overlaid with the operator's manual
choices), applies it to the bases, credits runs and outs, runs the
half-inning transition and rotates the batting order.

``AtBatResolver.resolve`` never mutates the state it is given.  It works on
a clone and returns the clone, so a rejected at-bat leaves the caller's
state untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from baserunners import (
    BATTER,
    ActionKind,
    BaserunnerState,
    RunnerAction,
    normalize_proposal,
)
from batting_order import BattingOrderCursor
from errors import BatterMismatch, InvalidGameState
from inning import HalfInningRuns, InningState, ScoreLedger
from models import (
    Base,
    BattingTeam,
    GameStatus,
    Half,
    LineupSlot,
    PlayerRef,
)
from outcomes import OutcomeInfo, OutcomeKind, lookup, rbis_for

logger = logging.getLogger(__name__)

ManualAdvancement = Mapping[Base | str, RunnerAction | str]

BALLS_FOR_WALK = 4
STRIKES_FOR_STRIKEOUT = 3


# ---------------------------------------------------------------------------
# Balls and strikes
# ---------------------------------------------------------------------------

class PitchKind(str, Enum):
    BALL = "ball"
    STRIKE = "strike"
    FOUL = "foul"


def parse_pitch(value: PitchKind | str) -> PitchKind:
    if isinstance(value, PitchKind):
        return value
    try:
        return PitchKind(value.strip().lower())
    except ValueError:
        valid = ", ".join(p.value for p in PitchKind)
        raise ValueError(f"Unknown pitch {value!r}; expected one of {valid}") from None


@dataclass(frozen=True)
class Count:
    balls: int = 0
    strikes: int = 0

    def after(self, pitch: PitchKind | str) -> tuple[Count, OutcomeKind | None]:
        """Return the count after *pitch* and the outcome it forces, if any.

        Ball four is a walk and strike three a strikeout; both hand back a
        fresh 0-0 count for the next batter.  A foul adds a strike only
        while the batter has fewer than two.
        """
        pitch = parse_pitch(pitch)
        if pitch == PitchKind.BALL:
            if self.balls + 1 >= BALLS_FOR_WALK:
                return Count(), OutcomeKind.WALK
            return Count(self.balls + 1, self.strikes), None
        if pitch == PitchKind.STRIKE:
            if self.strikes + 1 >= STRIKES_FOR_STRIKEOUT:
                return Count(), OutcomeKind.STRIKEOUT
            return Count(self.balls, self.strikes + 1), None
        return Count(self.balls, min(self.strikes + 1, STRIKES_FOR_STRIKEOUT - 1)), None

    def to_dict(self) -> dict:
        return {"balls": self.balls, "strikes": self.strikes}

    def __str__(self) -> str:
        return f"{self.balls}-{self.strikes}"


# ---------------------------------------------------------------------------
# Play-by-play event
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PlayEvent:
    inning: int
    half: Half
    outs_before: int
    batter_id: str
    outcome: OutcomeKind
    description: str
    runs_scored: int = 0
    outs_recorded: int = 0
    score_home: int = 0
    score_away: int = 0
    rbis: int = 0

    def to_dict(self) -> dict:
        return {
            "inning": self.inning,
            "half": self.half.value,
            "outs_before": self.outs_before,
            "batter_id": self.batter_id,
            "outcome": self.outcome.value,
            "description": self.description,
            "runs_scored": self.runs_scored,
            "outs_recorded": self.outs_recorded,
            "rbis": self.rbis,
            "score": {"home": self.score_home, "away": self.score_away},
        }

    @classmethod
    def from_dict(cls, d: dict) -> PlayEvent:
        score = d.get("score", {})
        return cls(
            inning=d["inning"],
            half=Half(d["half"]),
            outs_before=d["outs_before"],
            batter_id=d["batter_id"],
            outcome=OutcomeKind(d["outcome"]),
            description=d["description"],
            runs_scored=d.get("runs_scored", 0),
            outs_recorded=d.get("outs_recorded", 0),
            rbis=d.get("rbis", 0),
            score_home=score.get("home", 0),
            score_away=score.get("away", 0),
        )


# ---------------------------------------------------------------------------
# Working game state
# ---------------------------------------------------------------------------

@dataclass
class GameState:
    """Everything that changes while a game is scored.

    The session swaps one ``GameState`` for the next; nothing outside the
    resolver and session mutates it.
    """
    status: GameStatus = GameStatus.SETUP
    inning: InningState = field(default_factory=InningState)
    bases: BaserunnerState = field(default_factory=BaserunnerState)
    home_order: BattingOrderCursor | None = None
    away_order: BattingOrderCursor | None = None
    ledger: ScoreLedger = field(default_factory=ScoreLedger)
    play_log: list[PlayEvent] = field(default_factory=list)
    completion_reason: str | None = None
    count: Count = field(default_factory=Count)

    def batting_order(self) -> BattingOrderCursor:
        order = self.home_order if self.inning.batting_team == BattingTeam.HOME else self.away_order
        if order is None:
            raise InvalidGameState("Lineups have not been set for this game")
        return order

    def clone(self) -> GameState:
        return GameState(
            status=self.status,
            inning=self.inning.copy(),
            bases=self.bases,
            home_order=self.home_order.copy() if self.home_order else None,
            away_order=self.away_order.copy() if self.away_order else None,
            ledger=self.ledger.copy(),
            play_log=list(self.play_log),
            completion_reason=self.completion_reason,
            count=self.count,
        )


# ---------------------------------------------------------------------------
# Resolution result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AtBatOutcome:
    batter: PlayerRef
    kind: OutcomeKind
    runs_scored: int
    new_baserunners: BaserunnerState
    outs_produced: int
    half_ended: bool
    next_batter_slot: LineupSlot
    scored: tuple[PlayerRef, ...] = ()
    proposal: dict[str, RunnerAction] = field(default_factory=dict)
    closed_half: HalfInningRuns | None = None
    rbis: int = 0
    description: str = ""


@dataclass(frozen=True)
class PitchOutcome:
    """A recorded pitch; *at_bat* is set when the pitch ended the at-bat."""
    pitch: PitchKind
    count: Count
    at_bat: AtBatOutcome | None = None


class AtBatResolver:
    """Resolves recorded outcomes against a ``GameState``."""

    def build_proposal(
        self,
        info: OutcomeInfo,
        bases: BaserunnerState,
        manual_advancement: ManualAdvancement | None = None,
    ) -> dict[str, RunnerAction]:
        """Automatic rule for *info*, with each manual choice replacing its runner's."""
        proposal = info.automatic_proposal(bases)
        if manual_advancement:
            proposal.update(normalize_proposal(manual_advancement))
        return proposal

    def batter_due(
        self,
        state: GameState,
        batter: PlayerRef | str,
        action: str = "record an at-bat",
    ) -> LineupSlot:
        """Return the slot due up, checking the game is live and *batter* matches it.

        Raises:
            InvalidGameState: If the game is not in progress.
            BatterMismatch: If *batter* is not the batter due up.
        """
        if state.status != GameStatus.IN_PROGRESS:
            raise InvalidGameState(
                f"Cannot {action} while the game is {state.status.value}"
            )
        due = state.batting_order().current()
        batter_id = batter if isinstance(batter, str) else batter.player_id
        if batter_id != due.player.player_id:
            raise BatterMismatch(
                f"{batter_id} is not due up; expected {due.player.name} "
                f"(#{due.batting_order} in the order)",
                expected=due.player.player_id,
                got=batter_id,
            )
        return due

    def resolve(
        self,
        state: GameState,
        batter: PlayerRef | str,
        kind: OutcomeKind | str,
        manual_advancement: ManualAdvancement | None = None,
    ) -> tuple[AtBatOutcome, GameState]:
        """Resolve one at-bat.

        Args:
            state: The current committed state (left unmodified).
            batter: The batter's ``PlayerRef`` or player ID.
            kind: The recorded outcome.
            manual_advancement: Optional per-origin overrides, e.g.
                ``{"first": "out", "third": "score"}``.

        Returns:
            ``(outcome, new_state)``.

        Raises:
            InvalidGameState: If the game is not in progress.
            BatterMismatch: If *batter* is not the batter due up.
            InvalidAdvancement: If the advancement proposal is invalid.
        """
        due = self.batter_due(state, batter)
        info = lookup(kind)

        new = state.clone()
        order = new.batting_order()

        bases_before = new.bases
        proposal = self.build_proposal(info, bases_before, manual_advancement)
        result = bases_before.apply_advancement(proposal, batter=due.player)
        rbis = rbis_for(info.kind, bases_before, result.runs_scored)

        inning_before = new.inning.inning_number
        half_before = new.inning.half
        outs_before = new.inning.outs
        # a double play's forced runner is one of the two outs it is credited with
        outs = max(info.outs_produced, int(result.batter_out) + result.runner_outs)
        outs = min(outs, new.inning.outs_remaining())

        new.inning.add_runs(result.runs_scored)
        score = new.ledger.totals(new.inning)
        closed = new.inning.record_outs(outs)
        if closed is not None:
            new.ledger.append(closed)
            new.bases = BaserunnerState.empty()
        else:
            new.bases = result.state

        next_slot = order.advance()
        new.count = Count()

        description = _describe(due.player, info, proposal, bases_before)
        new.play_log.append(PlayEvent(
            inning=inning_before,
            half=half_before,
            outs_before=outs_before,
            batter_id=due.player.player_id,
            outcome=info.kind,
            description=description,
            runs_scored=result.runs_scored,
            outs_recorded=outs,
            score_home=score.home,
            score_away=score.away,
            rbis=rbis,
        ))
        logger.debug("Resolved at-bat: %s", description)

        outcome = AtBatOutcome(
            batter=due.player,
            kind=info.kind,
            runs_scored=result.runs_scored,
            new_baserunners=new.bases,
            outs_produced=outs,
            half_ended=closed is not None,
            next_batter_slot=next_slot,
            scored=result.scored,
            proposal=proposal,
            closed_half=closed,
            rbis=rbis,
            description=description,
        )
        return outcome, new

    def pitch(
        self,
        state: GameState,
        batter: PlayerRef | str,
        pitch: PitchKind | str,
    ) -> tuple[PitchOutcome, GameState]:
        """Apply one pitch to the count; ball four or strike three resolves the at-bat.

        Raises:
            InvalidGameState: If the game is not in progress.
            BatterMismatch: If *batter* is not the batter due up.
            ValueError: If *pitch* is not a known pitch.
        """
        pitch = parse_pitch(pitch)
        due = self.batter_due(state, batter, "record a pitch")
        count, forced = state.count.after(pitch)
        if forced is not None:
            at_bat, new = self.resolve(state, due.player, forced)
            return PitchOutcome(pitch=pitch, count=new.count, at_bat=at_bat), new
        new = state.clone()
        new.count = count
        logger.debug("Pitch to %s: %s (%s)", due.player.name, pitch.value, count)
        return PitchOutcome(pitch=pitch, count=count), new


def _describe(
    batter: PlayerRef,
    info: OutcomeInfo,
    proposal: dict[str, RunnerAction],
    bases_before: BaserunnerState,
) -> str:
    """Play-by-play text such as 'Ana Ruiz singles. Kim Lee scores'."""
    text = f"{batter.name} {info.description}"
    details = []
    batter_action = proposal.get(BATTER)
    if batter_action is not None:
        if batter_action.kind == ActionKind.OUT and not info.is_out:
            details.append(f"{batter.name} out")
        elif batter_action.kind == ActionKind.ADVANCE and info.bases_for_batter != batter_action.base.number:
            details.append(f"{batter.name} to {batter_action.base.value}")
    for base in (Base.THIRD, Base.SECOND, Base.FIRST):
        action = proposal.get(base.value)
        runner = bases_before.runner_on(base)
        if action is None or runner is None or action.kind == ActionKind.STAY:
            continue
        if action.kind == ActionKind.SCORE:
            details.append(f"{runner.name} scores")
        elif action.kind == ActionKind.OUT:
            details.append(f"{runner.name} out at {_next_base_name(base)}")
        else:
            details.append(f"{runner.name} {action.describe()}")
    if details:
        text += ". " + ". ".join(details)
    return text


def _next_base_name(base: Base) -> str:
    return "home" if base == Base.THIRD else Base.from_number(base.number + 1).value
