# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Live game session.

A ``GameSession`` is the single mutable object behind one game.  Every
command runs under the session's lock and follows the same commit
protocol: clone the committed state, compute the complete next state,
hand it to the persistence port, and swap it in only after the port
accepts it.  A rejected command or a failed write leaves the previous
state visible.

Completion is manual (``complete()``) unless ``CompletionRules`` are
supplied, in which case regulation length, walk-offs and the mercy rule
end the game inside the same commit as the at-bat that triggered them.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable

from baserunners import BaserunnerState
from batting_order import BattingOrderCursor
from errors import InvalidGameState, PersistError, PersistenceFailure
from inning import HalfInningRuns, InningState, ScoreLedger
from lineups import LineupProvider, validate_lineup
from models import (
    BattingTeam,
    GameStatus,
    GameView,
    Half,
    Lineup,
    PlayerRef,
)
from outcomes import OutcomeKind
from persistence import PersistencePort
from resolver import (
    AtBatOutcome,
    AtBatResolver,
    Count,
    GameState,
    ManualAdvancement,
    PitchKind,
    PitchOutcome,
    PlayEvent,
)

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

REASON_MANUAL = "manual"
REASON_REGULATION = "regulation"
REASON_WALK_OFF = "walk-off"
REASON_MERCY = "mercy-rule"


# ---------------------------------------------------------------------------
# Completion rules
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CompletionRules:
    """Conditions under which a game ends on its own.

    Attributes:
        regulation_innings: Scheduled length (7 for softball, 9 for
            baseball).  ``None`` disables automatic completion.
        mercy_run_differential: Lead that ends the game early.  ``None``
            disables the mercy rule.
        mercy_after_inning: First inning the mercy rule applies to.  A home
            lead reached in the bottom half ends the game at once; otherwise
            the rule is checked when a half-inning closes.
    """
    regulation_innings: int | None = None
    mercy_run_differential: int | None = None
    mercy_after_inning: int = 5

    def __post_init__(self) -> None:
        if self.regulation_innings is not None and self.regulation_innings < 1:
            raise ValueError("regulation_innings must be at least 1")
        if self.mercy_run_differential is not None and self.mercy_run_differential < 1:
            raise ValueError("mercy_run_differential must be at least 1")
        if self.mercy_after_inning < 1:
            raise ValueError("mercy_after_inning must be at least 1")

    def evaluate(self, state: GameState, closed: HalfInningRuns | None) -> str | None:
        """Return a completion reason if *state* ends the game, else ``None``.

        *closed* is the half-inning the last at-bat ended, if any; when it
        is ``None`` the half is still being played.
        """
        score = state.ledger.totals(state.inning)
        home_lead = score.home - score.away

        if closed is None:
            # walk-off: home takes the lead in the bottom of a regulation inning
            if (self.regulation_innings is not None
                    and state.inning.half == Half.BOTTOM
                    and state.inning.inning_number >= self.regulation_innings
                    and home_lead > 0):
                return REASON_WALK_OFF
            # mercy lead reached by the home team in the bottom half
            if (self.mercy_run_differential is not None
                    and state.inning.half == Half.BOTTOM
                    and state.inning.inning_number >= self.mercy_after_inning
                    and home_lead >= self.mercy_run_differential):
                return REASON_MERCY
            return None

        if self.regulation_innings is not None and closed.inning >= self.regulation_innings:
            if closed.half == Half.TOP and home_lead > 0:
                return REASON_REGULATION
            if closed.half == Half.BOTTOM and home_lead != 0:
                return REASON_REGULATION

        if self.mercy_run_differential is not None and closed.inning >= self.mercy_after_inning:
            if closed.half == Half.BOTTOM and abs(home_lead) >= self.mercy_run_differential:
                return REASON_MERCY
            # home ahead after the top half: the bottom half is not needed
            if closed.half == Half.TOP and home_lead >= self.mercy_run_differential:
                return REASON_MERCY
        return None


# ---------------------------------------------------------------------------
# Game session
# ---------------------------------------------------------------------------

class GameSession:
    """One live game: lineups, inning, bases, batting orders and score."""

    def __init__(
        self,
        game_id: str,
        persistence: PersistencePort | None = None,
        rules: CompletionRules | None = None,
        resolver: AtBatResolver | None = None,
    ):
        if not game_id or not game_id.strip():
            raise ValueError("game_id must be a non-empty string")
        self.game_id = game_id
        self.persistence = persistence
        self.rules = rules or CompletionRules()
        self.resolver = resolver or AtBatResolver()
        self.home_lineup: Lineup | None = None
        self.away_lineup: Lineup | None = None
        self._state = GameState()
        self._lock = threading.Lock()

    # -- read-only accessors -------------------------------------------------

    @property
    def status(self) -> GameStatus:
        return self._state.status

    @property
    def play_log(self) -> list[PlayEvent]:
        with self._lock:
            return list(self._state.play_log)

    @property
    def baserunners(self) -> BaserunnerState:
        return self._state.bases

    @property
    def inning(self) -> InningState:
        return self._state.inning.copy()

    @property
    def ledger(self) -> ScoreLedger:
        return self._state.ledger.copy()

    # -- commands ------------------------------------------------------------

    def start(self, home_lineup: Lineup, away_lineup: Lineup) -> GameView:
        """Move the game from SETUP to IN_PROGRESS with both lineups bound.

        Raises:
            InvalidGameState: If the game has already started.
            LineupInvalid: If either lineup breaks a lineup rule.
            PersistenceFailure: If the port rejects the commit.
        """
        with self._lock:
            if self._state.status != GameStatus.SETUP:
                raise InvalidGameState(
                    f"Game can only be started from SETUP, not {self._state.status.value}"
                )
            validate_lineup(home_lineup, side="home")
            validate_lineup(away_lineup, side="away")

            new = GameState(
                status=GameStatus.IN_PROGRESS,
                home_order=BattingOrderCursor(home_lineup),
                away_order=BattingOrderCursor(away_lineup),
            )

            def bind() -> None:
                self.home_lineup = home_lineup
                self.away_lineup = away_lineup

            self._commit(new, "start", lineups=(home_lineup, away_lineup), on_success=bind)
            logger.info("Game %s started: %s at %s", self.game_id,
                        away_lineup.team_name, home_lineup.team_name)
            return self._view()

    def start_from_provider(self, provider: LineupProvider) -> GameView:
        """Fetch both lineups for this game from *provider* and start."""
        home = provider.get_lineup(self.game_id, BattingTeam.HOME)
        away = provider.get_lineup(self.game_id, BattingTeam.AWAY)
        return self.start(home, away)

    def record_at_bat(
        self,
        batter: PlayerRef | str,
        kind: OutcomeKind | str,
        manual_advancement: ManualAdvancement | None = None,
    ) -> AtBatOutcome:
        """Resolve and commit one at-bat.

        Raises:
            InvalidGameState: If the game is not IN_PROGRESS.
            BatterMismatch: If *batter* is not due up.
            InvalidAdvancement: If the manual advancement is invalid.
            PersistenceFailure: If the port rejects the commit.
        """
        with self._lock:
            outcome, new = self.resolver.resolve(self._state, batter, kind, manual_advancement)
            self._finish_at_bat(outcome, new, "record_at_bat")
            return outcome

    def record_pitch(self, batter: PlayerRef | str, pitch: PitchKind | str) -> PitchOutcome:
        """Add a ball, strike or foul to the batter's count and commit it.

        Ball four and strike three complete the at-bat as a walk or a
        strikeout, exactly as if it had been recorded with ``record_at_bat``.

        Raises:
            InvalidGameState: If the game is not IN_PROGRESS.
            BatterMismatch: If *batter* is not due up.
            PersistenceFailure: If the port rejects the commit.
            ValueError: If *pitch* is not a known pitch.
        """
        with self._lock:
            result, new = self.resolver.pitch(self._state, batter, pitch)
            if result.at_bat is not None:
                self._finish_at_bat(result.at_bat, new, "record_pitch")
            else:
                self._commit(new, "record_pitch")
            return result

    def suspend(self) -> GameView:
        return self._transition(GameStatus.IN_PROGRESS, GameStatus.SUSPENDED, "suspend")

    def resume(self) -> GameView:
        return self._transition(GameStatus.SUSPENDED, GameStatus.IN_PROGRESS, "resume")

    def complete(self) -> GameView:
        return self._transition(GameStatus.IN_PROGRESS, GameStatus.COMPLETED, "complete")

    def current_view(self) -> GameView:
        with self._lock:
            return self._view()

    # -- internals -----------------------------------------------------------

    def _transition(self, source: GameStatus, target: GameStatus, command: str) -> GameView:
        with self._lock:
            if self._state.status != source:
                raise InvalidGameState(
                    f"Cannot {command} a game that is {self._state.status.value}"
                )
            new = self._state.clone()
            new.status = target
            if target == GameStatus.COMPLETED:
                new.completion_reason = REASON_MANUAL
            self._commit(new, command)
            logger.info("Game %s %s -> %s", self.game_id, source.value, target.value)
            return self._view()

    def _finish_at_bat(self, outcome: AtBatOutcome, new: GameState, command: str) -> None:
        """Apply completion rules to a resolved at-bat and commit it."""
        reason = self.rules.evaluate(new, outcome.closed_half)
        if reason is not None:
            new.status = GameStatus.COMPLETED
            new.completion_reason = reason
        self._commit(new, command)
        logger.info("Game %s: %s", self.game_id, outcome.description)
        if reason is not None:
            logger.info("Game %s completed (%s): %s", self.game_id, reason,
                        new.ledger.score_display(new.inning))

    def _commit(
        self,
        new: GameState,
        command: str,
        lineups: tuple[Lineup, Lineup] | None = None,
        on_success: Callable[[], None] | None = None,
    ) -> None:
        """Persist *new* and swap it in; leave the old state on failure."""
        if self.persistence is not None:
            home, away = lineups or (self.home_lineup, self.away_lineup)
            snapshot = _snapshot(self.game_id, new, home, away)
            try:
                self.persistence.commit(self.game_id, snapshot)
            except PersistError as exc:
                logger.error("Game %s: %s rejected by persistence: %s",
                             self.game_id, command, exc)
                raise PersistenceFailure(
                    f"Could not save game {self.game_id} after {command}: {exc}"
                ) from exc
        if on_success is not None:
            on_success()
        self._state = new

    def _view(self) -> GameView:
        state = self._state
        current = on_deck = None
        if state.home_order is not None and state.away_order is not None:
            order = state.batting_order()
            current, on_deck = order.current(), order.on_deck()
        running = state.inning
        if state.status == GameStatus.COMPLETED and not _half_started(state):
            # the game ended on a third out; the next half was never played
            running = None
        return GameView(
            game_id=self.game_id,
            status=state.status,
            inning=state.inning.inning_number,
            half=state.inning.half,
            outs=state.inning.outs,
            balls=state.count.balls,
            strikes=state.count.strikes,
            runners=state.bases.to_runners(),
            batting_team=state.inning.batting_team,
            current_batter=current,
            on_deck_batter=on_deck,
            score=state.ledger.totals(running),
            innings=state.ledger.lines(running) if state.status != GameStatus.SETUP else [],
            home_team=self.home_lineup.team_name if self.home_lineup else "",
            away_team=self.away_lineup.team_name if self.away_lineup else "",
            completion_reason=state.completion_reason,
            at_bats_recorded=len(state.play_log),
        )

    # -- snapshots -----------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        with self._lock:
            return _snapshot(self.game_id, self._state, self.home_lineup, self.away_lineup)

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        persistence: PersistencePort | None = None,
        rules: CompletionRules | None = None,
    ) -> GameSession:
        """Rebuild a session from a snapshot produced by ``to_dict``."""
        session = cls(data["game_id"], persistence=persistence, rules=rules)
        home = Lineup.model_validate(data["home_lineup"]) if data.get("home_lineup") else None
        away = Lineup.model_validate(data["away_lineup"]) if data.get("away_lineup") else None
        session.home_lineup = home
        session.away_lineup = away
        session._state = GameState(
            status=GameStatus(data["status"]),
            inning=InningState.from_dict(data["inning"]),
            bases=BaserunnerState.from_dict(data["bases"]),
            home_order=BattingOrderCursor(home, data["home_index"]) if home else None,
            away_order=BattingOrderCursor(away, data["away_index"]) if away else None,
            ledger=ScoreLedger.from_dict(data["ledger"]),
            play_log=[PlayEvent.from_dict(e) for e in data.get("play_log", [])],
            completion_reason=data.get("completion_reason"),
            count=Count(**data.get("count", {})),
        )
        return session


def _half_started(state: GameState) -> bool:
    inning = state.inning
    return bool(inning.outs or inning.runs_this_half or not state.bases.is_empty())


def _snapshot(game_id: str, state: GameState,
              home: Lineup | None, away: Lineup | None) -> dict[str, Any]:
    """Serialize game state to a dict for JSON persistence."""
    return {
        "version": SNAPSHOT_VERSION,
        "game_id": game_id,
        "status": state.status.value,
        "inning": state.inning.to_dict(),
        "bases": state.bases.to_dict(),
        "home_index": state.home_order.index if state.home_order else 0,
        "away_index": state.away_order.index if state.away_order else 0,
        "ledger": state.ledger.to_dict(),
        "play_log": [e.to_dict() for e in state.play_log],
        "completion_reason": state.completion_reason,
        "count": state.count.to_dict(),
        "score": state.ledger.totals(state.inning).model_dump(),
        "home_lineup": home.model_dump(mode="json") if home else None,
        "away_lineup": away.model_dump(mode="json") if away else None,
    }
