# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0", "pytest>=7.0"]
# ///
"""Tests for the circular batting-order cursor."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from batting_order import BattingOrderCursor
from models import FieldingPosition, Lineup, LineupSlot, PlayerRef


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_lineup(size: int = 10) -> Lineup:
    positions = list(FieldingPosition)
    return Lineup(
        team_name="Test",
        slots=tuple(
            LineupSlot(
                batting_order=i + 1,
                player=PlayerRef(player_id=f"p{i + 1}", name=f"Player {i + 1}"),
                position=positions[i % len(positions)],
            )
            for i in range(size)
        ),
    )


# ===========================================================================
# Cursor behaviour
# ===========================================================================

def test_starts_at_leadoff():
    cursor = BattingOrderCursor(make_lineup())
    assert cursor.current().batting_order == 1
    assert cursor.on_deck().batting_order == 2


def test_advance_returns_next_slot():
    cursor = BattingOrderCursor(make_lineup())
    slot = cursor.advance()
    assert slot.player.player_id == "p2"
    assert cursor.current() == slot


def test_wraps_modulo_lineup_length():
    cursor = BattingOrderCursor(make_lineup(9))
    for _ in range(9):
        cursor.advance()
    assert cursor.current().batting_order == 1
    assert cursor.index == 0


def test_on_deck_wraps_from_last_batter():
    cursor = BattingOrderCursor(make_lineup(9), index=8)
    assert cursor.current().batting_order == 9
    assert cursor.on_deck().batting_order == 1


def test_copy_is_independent():
    cursor = BattingOrderCursor(make_lineup())
    clone = cursor.copy()
    clone.advance()
    assert cursor.index == 0
    assert clone.index == 1


def test_index_out_of_range_rejected():
    with pytest.raises(ValueError):
        BattingOrderCursor(make_lineup(9), index=9)


def test_empty_lineup_rejected():
    with pytest.raises(ValueError):
        BattingOrderCursor(Lineup(team_name="Empty", slots=()))
