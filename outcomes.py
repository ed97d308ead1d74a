# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Outcome catalog: the closed set of at-bat results.

Each outcome carries whether the batter is out, how many outs the play
itself is credited with, and the automatic advancement rule used when the
operator does not override runner movement.

Automatic rules are deliberately conservative.  Outs made on contact
(ground outs, air outs, strikeouts) never move runners by themselves; an
operator who saw a runner advance on contact records that with a manual
override.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from baserunners import (
    BATTER,
    OUT,
    SCORE,
    STAY,
    BaserunnerState,
    RunnerAction,
)
from errors import InvalidAdvancement
from models import Base

AdvancementRule = Callable[[BaserunnerState], dict[str, RunnerAction]]


class OutcomeKind(str, Enum):
    SINGLE = "1B"
    DOUBLE = "2B"
    TRIPLE = "3B"
    HOME_RUN = "HR"
    WALK = "BB"
    INTENTIONAL_WALK = "IBB"
    SACRIFICE_FLY = "SF"
    ERROR = "E"
    FIELDERS_CHOICE = "FC"
    STRIKEOUT = "SO"
    GROUND_OUT = "GO"
    AIR_OUT = "AO"
    DOUBLE_PLAY = "DP"


# ---------------------------------------------------------------------------
# Automatic advancement rules
# ---------------------------------------------------------------------------

def _advance_all(bases: BaserunnerState, n: int) -> dict[str, RunnerAction]:
    """Move every runner exactly *n* bases; anyone passing third scores."""
    actions = {}
    for base, _ in bases.occupied():
        dest = base.number + n
        actions[base.value] = SCORE if dest > 3 else RunnerAction.advance_to(Base.from_number(dest))
    return actions


def _hold_all(bases: BaserunnerState) -> dict[str, RunnerAction]:
    return {base.value: STAY for base, _ in bases.occupied()}


def _forced(bases: BaserunnerState) -> dict[str, RunnerAction]:
    """Advance only runners with no open base behind them."""
    actions = {}
    forced = True  # the batter takes first
    for base in Base:
        if bases.runner_on(base) is None:
            forced = False
            continue
        if forced:
            dest = base.number + 1
            actions[base.value] = SCORE if dest > 3 else RunnerAction.advance_to(Base.from_number(dest))
        else:
            actions[base.value] = STAY
    return actions


def _single(bases: BaserunnerState) -> dict[str, RunnerAction]:
    return {BATTER: RunnerAction.advance_to(Base.FIRST), **_advance_all(bases, 1)}


def _double(bases: BaserunnerState) -> dict[str, RunnerAction]:
    return {BATTER: RunnerAction.advance_to(Base.SECOND), **_advance_all(bases, 2)}


def _triple(bases: BaserunnerState) -> dict[str, RunnerAction]:
    return {BATTER: RunnerAction.advance_to(Base.THIRD), **_advance_all(bases, 3)}


def _home_run(bases: BaserunnerState) -> dict[str, RunnerAction]:
    return {BATTER: SCORE, **_advance_all(bases, 4)}


def _walk(bases: BaserunnerState) -> dict[str, RunnerAction]:
    return {BATTER: RunnerAction.advance_to(Base.FIRST), **_forced(bases)}


def _sacrifice_fly(bases: BaserunnerState) -> dict[str, RunnerAction]:
    # only the runner on third tags and scores
    actions = {BATTER: OUT, **_hold_all(bases)}
    if bases.runner_on(Base.THIRD) is not None:
        actions[Base.THIRD.value] = SCORE
    return actions


def _fielders_choice(bases: BaserunnerState) -> dict[str, RunnerAction]:
    actions = {BATTER: RunnerAction.advance_to(Base.FIRST), **_hold_all(bases)}
    if bases.runner_on(Base.FIRST) is not None:
        actions[Base.FIRST.value] = OUT
    return actions


def _batter_out(bases: BaserunnerState) -> dict[str, RunnerAction]:
    return {BATTER: OUT, **_hold_all(bases)}


def _double_play(bases: BaserunnerState) -> dict[str, RunnerAction]:
    occupied = bases.occupied()
    if not occupied:
        raise InvalidAdvancement("A double play needs at least one runner on base")
    actions = {BATTER: OUT, **_hold_all(bases)}
    # the runner forced from first, otherwise the trailing runner
    victim, _ = occupied[0]
    actions[victim.value] = OUT
    return actions


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OutcomeInfo:
    kind: OutcomeKind
    description: str
    is_out: bool
    outs_produced: int
    automatic_advancement: AdvancementRule
    is_hit: bool = False
    reaches_base: bool = False
    bases_for_batter: int = 0

    def automatic_proposal(self, bases: BaserunnerState) -> dict[str, RunnerAction]:
        return self.automatic_advancement(bases)


CATALOG: dict[OutcomeKind, OutcomeInfo] = {
    OutcomeKind.SINGLE: OutcomeInfo(
        OutcomeKind.SINGLE, "singles", False, 0, _single,
        is_hit=True, reaches_base=True, bases_for_batter=1),
    OutcomeKind.DOUBLE: OutcomeInfo(
        OutcomeKind.DOUBLE, "doubles", False, 0, _double,
        is_hit=True, reaches_base=True, bases_for_batter=2),
    OutcomeKind.TRIPLE: OutcomeInfo(
        OutcomeKind.TRIPLE, "triples", False, 0, _triple,
        is_hit=True, reaches_base=True, bases_for_batter=3),
    OutcomeKind.HOME_RUN: OutcomeInfo(
        OutcomeKind.HOME_RUN, "homers", False, 0, _home_run,
        is_hit=True, reaches_base=True, bases_for_batter=4),
    OutcomeKind.WALK: OutcomeInfo(
        OutcomeKind.WALK, "walks", False, 0, _walk,
        reaches_base=True, bases_for_batter=1),
    OutcomeKind.INTENTIONAL_WALK: OutcomeInfo(
        OutcomeKind.INTENTIONAL_WALK, "is intentionally walked", False, 0, _walk,
        reaches_base=True, bases_for_batter=1),
    OutcomeKind.SACRIFICE_FLY: OutcomeInfo(
        OutcomeKind.SACRIFICE_FLY, "hits a sacrifice fly", True, 1, _sacrifice_fly),
    OutcomeKind.ERROR: OutcomeInfo(
        OutcomeKind.ERROR, "reaches on an error", False, 0, _single,
        reaches_base=True, bases_for_batter=1),
    OutcomeKind.FIELDERS_CHOICE: OutcomeInfo(
        OutcomeKind.FIELDERS_CHOICE, "reaches on a fielder's choice", False, 0,
        _fielders_choice, reaches_base=True, bases_for_batter=1),
    OutcomeKind.STRIKEOUT: OutcomeInfo(
        OutcomeKind.STRIKEOUT, "strikes out", True, 1, _batter_out),
    OutcomeKind.GROUND_OUT: OutcomeInfo(
        OutcomeKind.GROUND_OUT, "grounds out", True, 1, _batter_out),
    OutcomeKind.AIR_OUT: OutcomeInfo(
        OutcomeKind.AIR_OUT, "flies out", True, 1, _batter_out),
    OutcomeKind.DOUBLE_PLAY: OutcomeInfo(
        OutcomeKind.DOUBLE_PLAY, "grounds into a double play", True, 2, _double_play),
}


def parse_outcome(value: OutcomeKind | str) -> OutcomeKind:
    """Accept an ``OutcomeKind``, its code (``"1B"``) or its name (``"single"``)."""
    if isinstance(value, OutcomeKind):
        return value
    text = value.strip()
    try:
        return OutcomeKind(text.upper())
    except ValueError:
        pass
    try:
        return OutcomeKind[text.upper().replace(" ", "_").replace("'", "")]
    except KeyError:
        valid = ", ".join(k.value for k in OutcomeKind)
        raise ValueError(f"Unknown outcome {value!r}; expected one of {valid}") from None


def lookup(kind: OutcomeKind | str) -> OutcomeInfo:
    return CATALOG[parse_outcome(kind)]


def rbis_for(kind: OutcomeKind | str, bases_before: BaserunnerState, runs_scored: int) -> int:
    """Runs batted in for one at-bat.

    A walk only drives in a run with the bases loaded, and runs that score on
    an error are unearned by the batter.  Everything else, sacrifice flies
    included, credits each run that scored on the play.
    """
    kind = parse_outcome(kind)
    if kind in (OutcomeKind.WALK, OutcomeKind.INTENTIONAL_WALK) and not bases_before.is_loaded():
        return 0
    if kind == OutcomeKind.ERROR:
        return 0
    return runs_scored
