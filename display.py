# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Plain-text rendering of a ``GameView`` for the command line."""

from __future__ import annotations

from models import GameStatus, GameView, Half


def situation_text(view: GameView) -> str:
    """Build a compact situation string.

    Returns:
        A string like "Bot 7, 1 out, runners on 1st, 3rd | Hornets 4, Wasps 3"
        (away team first).  Finished games read "Final | ...".
    """
    away = view.away_team or "Away"
    home = view.home_team or "Home"
    score_str = f"{away} {view.score.away}, {home} {view.score.home}"

    if view.status == GameStatus.SETUP:
        return f"Not started | {score_str}"
    if view.status == GameStatus.COMPLETED:
        reason = f" ({view.completion_reason})" if view.completion_reason else ""
        return f"Final{reason} | {score_str}"

    half_str = "Top" if view.half == Half.TOP else "Bot"
    out_str = f"{view.outs} out"
    if view.balls or view.strikes:
        out_str += f", {view.balls}-{view.strikes}"

    on_bases = []
    if view.runners.first:
        on_bases.append("1st")
    if view.runners.second:
        on_bases.append("2nd")
    if view.runners.third:
        on_bases.append("3rd")

    if not on_bases:
        runners_str = "bases empty"
    elif len(on_bases) == 3:
        runners_str = "bases loaded"
    elif len(on_bases) == 1:
        runners_str = f"runner on {on_bases[0]}"
    else:
        runners_str = f"runners on {', '.join(on_bases)}"

    text = f"{half_str} {view.inning}, {out_str}, {runners_str} | {score_str}"
    if view.status == GameStatus.SUSPENDED:
        text += " | suspended"
    return text


def batter_text(view: GameView) -> str:
    """'Now batting: #3 Ana Ruiz (SS); on deck: #4 Kim Lee (C)'."""
    if view.current_batter is None:
        return "No batter due"
    parts = [f"Now batting: {_slot_label(view.current_batter)}"]
    if view.on_deck_batter is not None:
        parts.append(f"on deck: {_slot_label(view.on_deck_batter)}")
    return "; ".join(parts)


def line_score(view: GameView) -> str:
    """Render the inning-by-inning line score with run totals."""
    innings = max((line.inning for line in view.innings), default=0)
    name_width = max(len(view.away_team or "Away"), len(view.home_team or "Home"), 4) + 2

    header = f"{'Team':<{name_width}}"
    for i in range(1, innings + 1):
        header += f" {i:>3}"
    header += "  |   R"
    lines = [header, "-" * len(header)]

    by_inning = {line.inning: line for line in view.innings}
    for name, attr, total in (
        (view.away_team or "Away", "away_runs", view.score.away),
        (view.home_team or "Home", "home_runs", view.score.home),
    ):
        row = f"{name:<{name_width}}"
        for i in range(1, innings + 1):
            runs = getattr(by_inning[i], attr) if i in by_inning else None
            row += f" {'-' if runs is None else runs:>3}"
        row += f"  | {total:>3}"
        lines.append(row)
    return "\n".join(lines)


def _slot_label(slot) -> str:
    return f"#{slot.batting_order} {slot.player.name} ({slot.position.value})"
