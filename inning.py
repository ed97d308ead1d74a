# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Inning progression and the per-inning score ledger.

``InningState`` owns the half-inning transition rule: outs accumulate
within a half and the third out closes it.  Closing a half yields a
``HalfInningRuns`` record that is appended to the ``ScoreLedger``; the
ledger is append-only and never rewritten.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from models import BattingTeam, Half, InningLine, Score, batting_team_for

OUTS_PER_HALF = 3


@dataclass(frozen=True)
class HalfInningRuns:
    inning: int
    half: Half
    runs: int

    @property
    def team(self) -> BattingTeam:
        return batting_team_for(self.half)

    def to_dict(self) -> dict:
        return {"inning": self.inning, "half": self.half.value, "runs": self.runs}


@dataclass
class InningState:
    inning_number: int = 1
    half: Half = Half.TOP
    outs: int = 0
    runs_this_half: int = 0

    @property
    def batting_team(self) -> BattingTeam:
        return batting_team_for(self.half)

    def add_runs(self, runs: int) -> None:
        if runs < 0:
            raise ValueError("Cannot add negative runs")
        self.runs_this_half += runs

    def record_outs(self, outs: int) -> HalfInningRuns | None:
        """Add *outs* to the half; return the closed half if it ended.

        Outs past the third are ignored.  When the half ends the outs and
        run accumulator reset and play moves to the other half, incrementing
        the inning number only after the bottom half.
        """
        if outs < 0:
            raise ValueError("Cannot add negative outs")
        self.outs += outs
        if self.outs < OUTS_PER_HALF:
            return None

        closed = HalfInningRuns(self.inning_number, self.half, self.runs_this_half)
        self.outs = 0
        self.runs_this_half = 0
        if self.half == Half.TOP:
            self.half = Half.BOTTOM
        else:
            self.half = Half.TOP
            self.inning_number += 1
        return closed

    def outs_remaining(self) -> int:
        return OUTS_PER_HALF - self.outs

    def copy(self) -> InningState:
        return InningState(self.inning_number, self.half, self.outs, self.runs_this_half)

    def to_dict(self) -> dict:
        return {
            "inning_number": self.inning_number,
            "half": self.half.value,
            "outs": self.outs,
            "runs_this_half": self.runs_this_half,
        }

    @classmethod
    def from_dict(cls, d: dict) -> InningState:
        return cls(
            inning_number=d["inning_number"],
            half=Half(d["half"]),
            outs=d["outs"],
            runs_this_half=d.get("runs_this_half", 0),
        )


@dataclass
class ScoreLedger:
    """Closed half-innings in the order they were played."""
    entries: list[HalfInningRuns] = field(default_factory=list)

    def append(self, record: HalfInningRuns) -> None:
        if not self.entries:
            expected = (1, Half.TOP)
        elif self.entries[-1].half == Half.TOP:
            expected = (self.entries[-1].inning, Half.BOTTOM)
        else:
            expected = (self.entries[-1].inning + 1, Half.TOP)
        if (record.inning, record.half) != expected:
            raise ValueError(
                f"Ledger entry for {record.half.value} {record.inning} is out of "
                f"order; expected {expected[1].value} {expected[0]}"
            )
        if record.runs < 0:
            raise ValueError("Cannot record negative runs")
        self.entries.append(record)

    def runs_for(self, team: BattingTeam) -> int:
        return sum(e.runs for e in self.entries if e.team == team)

    def totals(self, inning: InningState | None = None) -> Score:
        """Score totals, including the runs of the half still in progress."""
        home = self.runs_for(BattingTeam.HOME)
        away = self.runs_for(BattingTeam.AWAY)
        if inning is not None:
            if inning.batting_team == BattingTeam.HOME:
                home += inning.runs_this_half
            else:
                away += inning.runs_this_half
        return Score(home=home, away=away)

    def lines(self, inning: InningState | None = None) -> list[InningLine]:
        """Per-inning lines, with the running half shown as provisional."""
        by_inning: dict[int, dict[str, int | None]] = {}
        for e in self.entries:
            row = by_inning.setdefault(e.inning, {"away_runs": None, "home_runs": None})
            row["away_runs" if e.half == Half.TOP else "home_runs"] = e.runs
        if inning is not None:
            row = by_inning.setdefault(
                inning.inning_number, {"away_runs": None, "home_runs": None}
            )
            key = "away_runs" if inning.half == Half.TOP else "home_runs"
            row[key] = inning.runs_this_half
        return [InningLine(inning=n, **row) for n, row in sorted(by_inning.items())]

    def run_differential(self, inning: InningState | None = None) -> int:
        """Home minus away."""
        score = self.totals(inning)
        return score.home - score.away

    def winner(self, inning: InningState | None = None) -> BattingTeam | None:
        diff = self.run_differential(inning)
        if diff > 0:
            return BattingTeam.HOME
        if diff < 0:
            return BattingTeam.AWAY
        return None

    def score_display(self, inning: InningState | None = None) -> str:
        score = self.totals(inning)
        return f"Away {score.away} - Home {score.home}"

    def copy(self) -> ScoreLedger:
        return ScoreLedger(entries=list(self.entries))

    def to_dict(self) -> list[dict]:
        return [e.to_dict() for e in self.entries]

    @classmethod
    def from_dict(cls, data: list[dict]) -> ScoreLedger:
        return cls(entries=[
            HalfInningRuns(inning=d["inning"], half=Half(d["half"]), runs=d["runs"])
            for d in data
        ])
