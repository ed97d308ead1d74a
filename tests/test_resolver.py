# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0", "pytest>=7.0"]
# ///
"""Tests for at-bat resolution.

Verifies:
1. Rejections (wrong status, wrong batter, bad proposal) leave state untouched
2. Manual choices overlay the automatic rule per runner
3. Outs are combined and capped at the third out
4. Half-inning close flushes runs to the ledger and clears the bases
5. Play-by-play events and RBIs
6. Balls and strikes: ball four walks, strike three strikes out, fouls
   never make strike three
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from baserunners import BATTER, OUT, SCORE, STAY, BaserunnerState, RunnerAction
from batting_order import BattingOrderCursor
from errors import BatterMismatch, InvalidAdvancement, InvalidGameState
from inning import InningState
from models import Base, FieldingPosition, GameStatus, Half, Lineup, LineupSlot, PlayerRef
from outcomes import OutcomeKind, lookup
from resolver import AtBatResolver, Count, GameState, PitchKind, PlayEvent


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

POSITIONS = ["P", "C", "1B", "2B", "3B", "SS", "LF", "CF", "RF", "SF"]


def make_lineup(prefix: str, team_name: str) -> Lineup:
    return Lineup(
        team_name=team_name,
        slots=tuple(
            LineupSlot(
                batting_order=i + 1,
                player=PlayerRef(player_id=f"{prefix}{i + 1:02d}", name=f"{team_name} {i + 1}"),
                position=FieldingPosition(pos),
            )
            for i, pos in enumerate(POSITIONS)
        ),
    )


def make_state(**overrides) -> GameState:
    state = GameState(
        status=GameStatus.IN_PROGRESS,
        home_order=BattingOrderCursor(make_lineup("h", "Home")),
        away_order=BattingOrderCursor(make_lineup("a", "Away")),
    )
    for key, value in overrides.items():
        setattr(state, key, value)
    return state


def runner(pid: str) -> PlayerRef:
    return PlayerRef(player_id=pid, name=f"Runner {pid}")


@pytest.fixture
def resolver():
    return AtBatResolver()


# ===========================================================================
# Step 1: Rejections
# ===========================================================================

class TestStep1Rejections:

    @pytest.mark.parametrize("status", [GameStatus.SETUP, GameStatus.SUSPENDED, GameStatus.COMPLETED])
    def test_not_in_progress(self, resolver, status):
        state = make_state(status=status)
        with pytest.raises(InvalidGameState):
            resolver.resolve(state, "a01", "1B")

    def test_wrong_batter(self, resolver):
        state = make_state()
        with pytest.raises(BatterMismatch) as exc_info:
            resolver.resolve(state, "a02", "1B")
        assert exc_info.value.expected == "a01"
        assert exc_info.value.got == "a02"

    def test_home_batter_in_top_half_rejected(self, resolver):
        with pytest.raises(BatterMismatch):
            resolver.resolve(make_state(), "h01", "1B")

    def test_invalid_manual_advancement(self, resolver):
        state = make_state(bases=BaserunnerState(first=runner("r1")))
        with pytest.raises(InvalidAdvancement):
            resolver.resolve(state, "a01", "1B", {"first": "stay"})

    def test_rejection_leaves_state_untouched(self, resolver):
        state = make_state(bases=BaserunnerState(first=runner("r1")))
        before = (state.inning.copy(), state.bases, state.away_order.index, len(state.play_log))
        with pytest.raises(InvalidAdvancement):
            resolver.resolve(state, "a01", "1B", {"first": "stay"})
        assert (state.inning, state.bases, state.away_order.index, len(state.play_log)) == before

    def test_success_does_not_mutate_input(self, resolver):
        state = make_state()
        _, new = resolver.resolve(state, "a01", "1B")
        assert state.bases.is_empty()
        assert state.away_order.index == 0
        assert new.away_order.index == 1


# ===========================================================================
# Step 2: Proposal building
# ===========================================================================

class TestStep2Proposals:

    def test_automatic_only(self, resolver):
        bases = BaserunnerState(first=runner("r1"))
        proposal = resolver.build_proposal(lookup("1B"), bases)
        assert proposal == {
            BATTER: RunnerAction.advance_to(Base.FIRST),
            "first": RunnerAction.advance_to(Base.SECOND),
        }

    def test_manual_wins_per_runner(self, resolver):
        bases = BaserunnerState(first=runner("r1"), third=runner("r3"))
        proposal = resolver.build_proposal(lookup("GO"), bases, {"third": "score"})
        assert proposal == {BATTER: OUT, "first": STAY, "third": SCORE}

    def test_manual_batter_override(self, resolver):
        proposal = resolver.build_proposal(lookup("1B"), BaserunnerState(), {"batter": "second"})
        assert proposal == {BATTER: RunnerAction.advance_to(Base.SECOND)}


# ===========================================================================
# Step 3: Outs and runs
# ===========================================================================

class TestStep3OutsAndRuns:

    def test_single_bases_empty(self, resolver):
        outcome, new = resolver.resolve(make_state(), "a01", OutcomeKind.SINGLE)
        assert outcome.runs_scored == 0
        assert outcome.outs_produced == 0
        assert outcome.half_ended is False
        assert new.bases.first.player_id == "a01"
        assert outcome.next_batter_slot.player.player_id == "a02"

    def test_strikeout_records_one_out(self, resolver):
        outcome, new = resolver.resolve(make_state(), "a01", "SO")
        assert outcome.outs_produced == 1
        assert new.inning.outs == 1

    def test_double_play_credits_two_outs(self, resolver):
        state = make_state(bases=BaserunnerState(first=runner("r1")))
        outcome, new = resolver.resolve(state, "a01", "DP")
        assert outcome.outs_produced == 2
        assert new.inning.outs == 2
        assert new.bases.is_empty()

    def test_fielders_choice_with_extra_runner_out(self, resolver):
        state = make_state(bases=BaserunnerState(first=runner("r1"), second=runner("r2")))
        outcome, _ = resolver.resolve(state, "a01", "FC", {"second": "out"})
        assert outcome.outs_produced == 2

    def test_outs_capped_at_third_out(self, resolver):
        inning = InningState(outs=2)
        state = make_state(inning=inning, bases=BaserunnerState(first=runner("r1")))
        outcome, new = resolver.resolve(state, "a01", "DP")
        assert outcome.outs_produced == 1
        assert outcome.half_ended is True
        assert new.inning.outs == 0
        assert new.inning.half == Half.BOTTOM

    def test_runs_accumulate_in_running_half(self, resolver):
        state = make_state(bases=BaserunnerState(second=runner("r2"), third=runner("r3")))
        outcome, new = resolver.resolve(state, "a01", "2B")
        assert outcome.runs_scored == 2
        assert [p.player_id for p in outcome.scored] == ["r3", "r2"]
        assert new.inning.runs_this_half == 2
        assert new.ledger.totals(new.inning).away == 2

    def test_sacrifice_fly_scores_and_records_out(self, resolver):
        state = make_state(bases=BaserunnerState(third=runner("r3")))
        outcome, new = resolver.resolve(state, "a01", "SF")
        assert outcome.runs_scored == 1
        assert outcome.outs_produced == 1
        assert new.bases.is_empty()

    def test_sacrifice_fly_trailing_runner_holds(self, resolver):
        state = make_state(bases=BaserunnerState(first=runner("r1"), third=runner("r3")))
        outcome, new = resolver.resolve(state, "a01", "SF")
        assert outcome.runs_scored == 1
        assert outcome.rbis == 1
        assert new.bases.runner_on(Base.FIRST).player_id == "r1"
        assert new.bases.runner_on(Base.SECOND) is None


# ===========================================================================
# Step 4: Half-inning close
# ===========================================================================

class TestStep4HalfInningClose:

    def test_third_out_flushes_ledger_and_clears_bases(self, resolver):
        state = make_state(
            inning=InningState(outs=2, runs_this_half=2),
            bases=BaserunnerState(first=runner("r1"), third=runner("r3")),
        )
        outcome, new = resolver.resolve(state, "a01", "AO")
        assert outcome.half_ended is True
        assert outcome.closed_half.runs == 2
        assert new.bases.is_empty()
        assert new.ledger.totals().away == 2
        assert new.inning.runs_this_half == 0

    def test_run_on_third_out_play_counts(self, resolver):
        state = make_state(inning=InningState(outs=2), bases=BaserunnerState(third=runner("r3")))
        outcome, new = resolver.resolve(state, "a01", "GO", {"third": "score"})
        assert outcome.half_ended is True
        assert new.ledger.entries[-1].runs == 1

    def test_cursor_carries_over_between_halves(self, resolver):
        state = make_state(inning=InningState(outs=2))
        _, new = resolver.resolve(state, "a01", "SO")
        assert new.away_order.index == 1
        assert new.batting_order().current().player.player_id == "h01"


# ===========================================================================
# Step 5: Play log
# ===========================================================================

class TestStep5PlayLog:

    def test_event_recorded(self, resolver):
        state = make_state(bases=BaserunnerState(third=runner("r3")))
        _, new = resolver.resolve(state, "a01", "1B")
        event = new.play_log[-1]
        assert event.batter_id == "a01"
        assert event.outcome == OutcomeKind.SINGLE
        assert event.inning == 1
        assert event.half == Half.TOP
        assert event.outs_before == 0
        assert event.runs_scored == 1
        assert event.score_away == 1
        assert event.description == "Away 1 singles. Runner r3 scores"

    def test_description_names_runner_outs(self, resolver):
        state = make_state(bases=BaserunnerState(first=runner("r1")))
        _, new = resolver.resolve(state, "a01", "DP")
        assert new.play_log[-1].description == (
            "Away 1 grounds into a double play. Runner r1 out at second"
        )

    def test_event_dict_round_trip(self, resolver):
        _, new = resolver.resolve(make_state(), "a01", "BB")
        event = new.play_log[-1]
        assert PlayEvent.from_dict(event.to_dict()) == event

    def test_event_carries_rbis(self, resolver):
        state = make_state(bases=BaserunnerState(second=runner("r2"), third=runner("r3")))
        outcome, new = resolver.resolve(state, "a01", "2B")
        assert outcome.rbis == 2
        assert new.play_log[-1].rbis == 2
        assert PlayEvent.from_dict(new.play_log[-1].to_dict()).rbis == 2

    def test_outcome_carries_description(self, resolver):
        outcome, new = resolver.resolve(make_state(), "a01", "2B")
        assert outcome.description == "Away 1 doubles"
        assert outcome.description == new.play_log[-1].description

    def test_walk_without_loaded_bases_drives_in_nothing(self, resolver):
        state = make_state(bases=BaserunnerState(first=runner("r1"), second=runner("r2")))
        outcome, _ = resolver.resolve(state, "a01", "BB")
        assert (outcome.runs_scored, outcome.rbis) == (0, 0)

    def test_run_on_error_is_not_an_rbi(self, resolver):
        state = make_state(bases=BaserunnerState(third=runner("r3")))
        outcome, _ = resolver.resolve(state, "a01", "E")
        assert (outcome.runs_scored, outcome.rbis) == (1, 0)


# ===========================================================================
# Step 6: Balls and strikes
# ===========================================================================

class TestStep6Count:

    def test_balls_and_strikes_accumulate(self):
        count = Count()
        for pitch in ("ball", "strike", "ball"):
            count, forced = count.after(pitch)
            assert forced is None
        assert (count.balls, count.strikes) == (2, 1)
        assert str(count) == "2-1"

    def test_ball_four_is_a_walk(self):
        count, forced = Count(3, 2).after(PitchKind.BALL)
        assert forced == OutcomeKind.WALK
        assert count == Count()

    def test_strike_three_is_a_strikeout(self):
        count, forced = Count(1, 2).after(PitchKind.STRIKE)
        assert forced == OutcomeKind.STRIKEOUT
        assert count == Count()

    def test_foul_adds_a_strike_below_two(self):
        assert Count(0, 1).after("foul") == (Count(0, 2), None)

    def test_foul_with_two_strikes_keeps_count(self):
        assert Count(2, 2).after("FOUL") == (Count(2, 2), None)

    def test_unknown_pitch_rejected(self):
        with pytest.raises(ValueError, match="Unknown pitch"):
            Count().after("balk")

    def test_pitch_updates_count_only(self, resolver):
        state = make_state()
        result, new = resolver.pitch(state, "a01", "ball")
        assert result.at_bat is None
        assert new.count == Count(1, 0)
        assert state.count == Count()
        assert new.away_order.index == 0
        assert new.play_log == []

    def test_fourth_ball_resolves_walk(self, resolver):
        state = make_state(bases=BaserunnerState(first=runner("r1")), count=Count(3, 1))
        result, new = resolver.pitch(state, "a01", "ball")
        assert result.at_bat.kind == OutcomeKind.WALK
        assert result.count == Count()
        assert new.bases.bases_string() == "110"
        assert new.play_log[-1].outcome == OutcomeKind.WALK

    def test_third_strike_resolves_strikeout(self, resolver):
        result, new = resolver.pitch(make_state(count=Count(0, 2)), "a01", "strike")
        assert result.at_bat.kind == OutcomeKind.STRIKEOUT
        assert new.inning.outs == 1
        assert new.away_order.current().player.player_id == "a02"

    def test_recorded_at_bat_resets_count(self, resolver):
        _, new = resolver.resolve(make_state(count=Count(2, 1)), "a01", "1B")
        assert new.count == Count()

    def test_pitch_checks_batter_and_status(self, resolver):
        with pytest.raises(BatterMismatch):
            resolver.pitch(make_state(), "a02", "ball")
        with pytest.raises(InvalidGameState):
            resolver.pitch(make_state(status=GameStatus.SUSPENDED), "a01", "ball")
