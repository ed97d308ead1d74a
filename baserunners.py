# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Baserunner state and advancement proposals.

A proposal assigns every runner (and usually the batter) one action:
stay, advance to a base, score, or be put out.  ``apply_advancement``
checks the proposal against the base-occupancy rules and produces the
next state together with the runs and outs it generates.

Proposal keys are origins: ``"batter"``, ``"first"``, ``"second"`` and
``"third"``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from errors import InvalidAdvancement
from models import Base, PlayerRef, Runners

BATTER = "batter"
ORIGINS = (BATTER, Base.FIRST.value, Base.SECOND.value, Base.THIRD.value)

HOME_PLATE = 4  # destination number for a runner who scores


# ---------------------------------------------------------------------------
# Runner actions
# ---------------------------------------------------------------------------

class ActionKind(str, Enum):
    STAY = "stay"
    ADVANCE = "advance"
    SCORE = "score"
    OUT = "out"


@dataclass(frozen=True)
class RunnerAction:
    kind: ActionKind
    base: Base | None = None

    @classmethod
    def advance_to(cls, base: Base | str) -> RunnerAction:
        return cls(ActionKind.ADVANCE, Base(base))

    @classmethod
    def parse(cls, text: str) -> RunnerAction:
        """Parse an operator-entered action such as ``out``, ``score`` or ``third``."""
        value = text.strip().lower()
        if value in ("stay", "hold"):
            return STAY
        if value == "out":
            return OUT
        if value in ("score", "home", "scores"):
            return SCORE
        if value in _BASE_ALIASES:
            return cls.advance_to(_BASE_ALIASES[value])
        raise ValueError(
            f"Unknown runner action {text!r}; expected stay, out, score, "
            "first, second or third"
        )

    def describe(self) -> str:
        if self.kind == ActionKind.ADVANCE:
            return f"to {self.base.value}"
        return self.kind.value

    def __str__(self) -> str:
        if self.kind == ActionKind.ADVANCE:
            return self.base.value
        return self.kind.value


STAY = RunnerAction(ActionKind.STAY)
SCORE = RunnerAction(ActionKind.SCORE)
OUT = RunnerAction(ActionKind.OUT)

_BASE_ALIASES = {
    "first": Base.FIRST, "1": Base.FIRST, "1b": Base.FIRST,
    "second": Base.SECOND, "2": Base.SECOND, "2b": Base.SECOND,
    "third": Base.THIRD, "3": Base.THIRD, "3b": Base.THIRD,
}


def origin_key(origin: Base | str) -> str:
    """Normalise a proposal key to its plain string form."""
    if isinstance(origin, Base):
        return origin.value
    key = str(origin).strip().lower()
    if key in _BASE_ALIASES:
        return _BASE_ALIASES[key].value
    if key != BATTER:
        raise InvalidAdvancement(
            f"Unknown runner origin {origin!r}; expected one of {', '.join(ORIGINS)}"
        )
    return key


def normalize_proposal(
    proposal: Mapping[Base | str, RunnerAction | str],
) -> dict[str, RunnerAction]:
    """Return a copy of *proposal* keyed by origin string with parsed actions."""
    result: dict[str, RunnerAction] = {}
    for origin, action in proposal.items():
        key = origin_key(origin)
        if not isinstance(action, RunnerAction):
            try:
                action = RunnerAction.parse(action)
            except ValueError as exc:
                raise InvalidAdvancement(str(exc)) from exc
        result[key] = action
    return result


# ---------------------------------------------------------------------------
# Baserunner state
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AdvancementResult:
    state: BaserunnerState
    runs_scored: int
    runner_outs: int
    batter_out: bool
    scored: tuple[PlayerRef, ...] = ()


@dataclass(frozen=True)
class BaserunnerState:
    """Which player, if any, occupies each base."""
    first: PlayerRef | None = None
    second: PlayerRef | None = None
    third: PlayerRef | None = None

    def __post_init__(self) -> None:
        ids = [r.player_id for r in (self.first, self.second, self.third) if r]
        if len(ids) != len(set(ids)):
            raise InvalidAdvancement("A player cannot occupy two bases at once")

    @classmethod
    def empty(cls) -> BaserunnerState:
        return cls()

    def runner_on(self, base: Base | str) -> PlayerRef | None:
        return getattr(self, Base(base).value)

    def occupied(self) -> list[tuple[Base, PlayerRef]]:
        """Occupied bases ordered from first to third."""
        return [(b, r) for b in Base if (r := self.runner_on(b)) is not None]

    def is_empty(self) -> bool:
        return not self.occupied()

    def is_loaded(self) -> bool:
        return len(self.occupied()) == 3

    def runner_count(self) -> int:
        return len(self.occupied())

    def has_runner(self, player_id: str) -> bool:
        return self.base_of(player_id) is not None

    def base_of(self, player_id: str) -> Base | None:
        for base, runner in self.occupied():
            if runner.player_id == player_id:
                return base
        return None

    def bases_string(self) -> str:
        """Return base state string like '110' for runners on 1st and 2nd."""
        return "".join("1" if self.runner_on(b) else "0" for b in Base)

    def apply_advancement(
        self,
        proposal: Mapping[Base | str, RunnerAction | str],
        batter: PlayerRef | None = None,
    ) -> AdvancementResult:
        """Apply a full advancement proposal and return the resulting state.

        Args:
            proposal: One action per occupied base, plus ``"batter"`` when
                the batter's fate is part of the play.
            batter: The batter; required when the proposal has a batter entry.

        Raises:
            InvalidAdvancement: If the proposal leaves two runners on a
                base, lets a runner pass a lead runner still on base, moves a
                runner backward, or does not match the occupied bases.
        """
        actions = normalize_proposal(proposal)

        for origin in actions:
            if origin != BATTER and self.runner_on(origin) is None:
                raise InvalidAdvancement(f"No runner on {origin} to move")
        for base, runner in self.occupied():
            if base.value not in actions:
                raise InvalidAdvancement(
                    f"No action given for {runner.name} on {base.value}"
                )
        if BATTER in actions:
            if batter is None:
                raise InvalidAdvancement("Batter action given without a batter")
            if self.has_runner(batter.player_id):
                raise InvalidAdvancement(f"{batter.name} is already on base")

        placements: list[tuple[int, int, PlayerRef]] = []
        scored: list[tuple[int, PlayerRef]] = []
        runner_outs = 0
        batter_out = False

        for origin, action in actions.items():
            if origin == BATTER:
                start, player = 0, batter
            else:
                start, player = Base(origin).number, self.runner_on(origin)

            if action.kind == ActionKind.OUT:
                if origin == BATTER:
                    batter_out = True
                else:
                    runner_outs += 1
                continue

            if action.kind == ActionKind.STAY:
                if origin == BATTER:
                    raise InvalidAdvancement("The batter cannot stay at the plate")
                dest = start
            elif action.kind == ActionKind.SCORE:
                dest = HOME_PLATE
                scored.append((start, player))
            else:
                dest = action.base.number
                if dest < start:
                    raise InvalidAdvancement(
                        f"{player.name} cannot move back from {origin} to {action.base.value}"
                    )
            placements.append((start, dest, player))

        occupied_after: dict[int, PlayerRef] = {}
        for _, dest, player in placements:
            if dest == HOME_PLATE:
                continue
            if dest in occupied_after:
                raise InvalidAdvancement(
                    f"{player.name} and {occupied_after[dest].name} cannot both "
                    f"end on {Base.from_number(dest).value}"
                )
            occupied_after[dest] = player

        ordered = sorted(placements, key=lambda p: p[0])
        for (_, trail_dest, trailing), (_, lead_dest, leading) in zip(ordered, ordered[1:]):
            if trail_dest > lead_dest:
                raise InvalidAdvancement(
                    f"{trailing.name} cannot pass {leading.name} on the bases"
                )

        new_state = BaserunnerState(**{
            Base.from_number(dest).value: player
            for _, dest, player in placements
            if dest != HOME_PLATE
        })
        # lead runners cross the plate first
        scored_order = tuple(p for _, p in sorted(scored, key=lambda s: -s[0]))
        return AdvancementResult(
            state=new_state,
            runs_scored=len(scored_order),
            runner_outs=runner_outs,
            batter_out=batter_out,
            scored=scored_order,
        )

    # -- conversion ---------------------------------------------------------

    def to_runners(self) -> Runners:
        return Runners(first=self.first, second=self.second, third=self.third)

    def to_dict(self) -> dict:
        return {
            b.value: (r.model_dump() if (r := self.runner_on(b)) else None)
            for b in Base
        }

    @classmethod
    def from_dict(cls, d: dict) -> BaserunnerState:
        return cls(**{
            b.value: PlayerRef(**d[b.value]) if d.get(b.value) else None
            for b in Base
        })

    def __str__(self) -> str:
        on_base = [f"{b.value}: {r.name}" for b, r in self.occupied()]
        return ", ".join(on_base) if on_base else "bases empty"
