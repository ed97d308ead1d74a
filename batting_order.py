# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Circular batting-order cursor for one team."""

from __future__ import annotations

from dataclasses import dataclass

from models import Lineup, LineupSlot


@dataclass
class BattingOrderCursor:
    """Points at the lineup slot due to bat next.

    The cursor carries over between innings: the first batter of a new
    half-inning is whoever follows the last batter of that team's previous
    half.
    """
    lineup: Lineup
    index: int = 0

    def __post_init__(self) -> None:
        if len(self.lineup) == 0:
            raise ValueError("Batting order cursor needs a non-empty lineup")
        if not 0 <= self.index < len(self.lineup):
            raise ValueError(
                f"Cursor index {self.index} outside lineup of {len(self.lineup)}"
            )

    def current(self) -> LineupSlot:
        return self.lineup.slot_at(self.index)

    def on_deck(self) -> LineupSlot:
        return self.lineup.slot_at((self.index + 1) % len(self.lineup))

    def advance(self) -> LineupSlot:
        self.index = (self.index + 1) % len(self.lineup)
        return self.current()

    def copy(self) -> BattingOrderCursor:
        return BattingOrderCursor(lineup=self.lineup, index=self.index)
