# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Score a softball or baseball game from the command line.

Each input line is one command:

    1B                      record a single for the batter due up
    DP first=out            outcome plus manual runner choices
    GO third=score          contact play where the runner on third scored
    2B first=score @h04     '@' names the batter explicitly
    ball | strike | foul    one pitch; ball four and strike three end the at-bat
    suspend | resume | complete | view | quit

Lines starting with '#' are comments.

Usage:
    uv run scorekeeper.py --lineups data/sample_lineups.json --game-id g1
    uv run scorekeeper.py --game-id g1 --script plays.txt
    uv run scorekeeper.py --game-id g1 --resume
    uv run scorekeeper.py --lineups my_lineups.json --dry-run
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, TextIO

import config
from commands import ScoringCommands
from display import batter_text, line_score, situation_text
from errors import PersistError, ScoringError
from lineups import JsonLineupProvider, validate_lineup
from models import BattingTeam, GameStatus, GameView
from persistence import JsonFilePersistence
from session import GameSession

logger = logging.getLogger(__name__)

CONTROL_COMMANDS = ("suspend", "resume", "complete", "view", "quit")
PITCH_COMMANDS = ("ball", "strike", "foul")


# ---------------------------------------------------------------------------
# Command-line parsing
# ---------------------------------------------------------------------------

@dataclass
class ScriptCommand:
    name: str
    outcome: str | None = None
    advancement: dict[str, str] = field(default_factory=dict)
    batter_id: str | None = None


def parse_command_line(line: str) -> ScriptCommand | None:
    """Parse one input line; returns ``None`` for blank lines and comments.

    Raises:
        ValueError: If a token is not of the form ``origin=action`` or
            ``@player_id``.
    """
    text = line.strip()
    if not text or text.startswith("#"):
        return None
    tokens = text.split()
    head = tokens[0]
    if head.lower() in CONTROL_COMMANDS:
        if len(tokens) > 1:
            raise ValueError(f"'{head.lower()}' takes no arguments")
        return ScriptCommand(name=head.lower())

    if head.lower() in PITCH_COMMANDS:
        command = ScriptCommand(name="record_pitch", outcome=head.lower())
    else:
        command = ScriptCommand(name="record_at_bat", outcome=head)
    for token in tokens[1:]:
        if token.startswith("@"):
            if len(token) == 1:
                raise ValueError("'@' must be followed by a player ID")
            command.batter_id = token[1:]
            continue
        if command.name == "record_pitch":
            raise ValueError(f"'{head.lower()}' only takes an @player_id")
        origin, sep, action = token.partition("=")
        if not sep or not origin or not action:
            raise ValueError(f"Expected origin=action, got {token!r}")
        command.advancement[origin] = action
    return command


# ---------------------------------------------------------------------------
# Command loop
# ---------------------------------------------------------------------------

def run_commands(
    commands: ScoringCommands,
    lines: Iterable[str],
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Execute each line against *commands*; return the number of failures."""
    out = out or sys.stdout
    err = err or sys.stderr
    failures = 0
    for lineno, line in enumerate(lines, start=1):
        try:
            parsed = parse_command_line(line)
        except ValueError as e:
            print(f"Line {lineno}: {e}", file=err)
            failures += 1
            continue
        if parsed is None:
            continue
        if parsed.name == "quit":
            break

        if parsed.name == "record_at_bat":
            batter_id = parsed.batter_id or _batter_due(commands)
            response = commands.record_at_bat(batter_id or "", parsed.outcome, parsed.advancement)
        elif parsed.name == "record_pitch":
            batter_id = parsed.batter_id or _batter_due(commands)
            response = commands.record_pitch(batter_id or "", parsed.outcome)
        else:
            response = getattr(commands, parsed.name)()

        if response["status"] != "ok":
            failures += 1
            _print_error(response, err, f"Line {lineno}: ")
            continue

        data = response["data"]
        view = GameView.model_validate(data["view"])
        if "at_bat" in data:
            print(data["at_bat"]["description"], file=out)
        if parsed.name == "view" or view.status == GameStatus.COMPLETED:
            print(line_score(view), file=out)
        print(situation_text(view), file=out)
        if view.status == GameStatus.IN_PROGRESS:
            print(batter_text(view), file=out)
        if view.status == GameStatus.COMPLETED and "at_bat" in data:
            break
    return failures


def _batter_due(commands: ScoringCommands) -> str | None:
    response = commands.view()
    if response["status"] != "ok":
        return None
    current = response["data"]["view"].get("current_batter")
    return current["player"]["player_id"] if current else None


def _print_error(response: dict, err: TextIO, prefix: str = "") -> None:
    print(f"{prefix}[{response['error_code']}] {response['message']}", file=err)
    for detail in response.get("details", []):
        print(f"  - {detail}", file=err)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Score a softball or baseball game one at-bat at a time."
    )
    parser.add_argument(
        "--lineups", default=None,
        help="Lineup JSON file (default: data/sample_lineups.json).",
    )
    parser.add_argument(
        "--game-id", default=None,
        help="Game identifier; also the snapshot file name (default: timestamp).",
    )
    parser.add_argument(
        "--script", default=None, metavar="FILE",
        help="Read commands from FILE instead of standard input.",
    )
    parser.add_argument(
        "--resume", action="store_true",
        help="Continue a saved game instead of starting a new one.",
    )
    parser.add_argument(
        "--state-dir", default=None,
        help="Directory for game snapshots (default: $SCOREKEEPER_STATE_DIR or data/games).",
    )
    parser.add_argument(
        "--regulation-innings", type=int, default=None, metavar="N",
        help="Scheduled innings; 0 disables automatic completion.",
    )
    parser.add_argument(
        "--mercy-runs", type=int, default=None, metavar="N",
        help="Run lead that ends the game early; 0 disables the mercy rule.",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Validate the lineups and exit without scoring.",
    )
    parser.add_argument(
        "--quiet", action="store_true",
        help="Only log errors.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        level = logging.ERROR if args.quiet else config.get_log_level()
        rules = config.get_completion_rules()
        if args.regulation_innings is not None:
            rules = dataclasses.replace(rules, regulation_innings=args.regulation_innings or None)
        if args.mercy_runs is not None:
            rules = dataclasses.replace(rules, mercy_run_differential=args.mercy_runs or None)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )

    provider = JsonLineupProvider(args.lineups)
    game_id = args.game_id or datetime.now().strftime("game-%Y%m%d-%H%M%S")
    logger.info("Game %s with %s", game_id, rules)

    if args.dry_run:
        return _check_lineups(provider, game_id)

    store = JsonFilePersistence(args.state_dir or config.get_state_dir())
    if args.resume:
        try:
            snapshot = store.load(game_id)
        except PersistError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        if snapshot is None:
            print(f"Error: no saved game {game_id} in {store.root}", file=sys.stderr)
            return 1
        session = GameSession.from_dict(snapshot, persistence=store, rules=rules)
        commands = ScoringCommands(session, provider)
        print(f"Resumed game {game_id}")
    else:
        session = GameSession(game_id, persistence=store, rules=rules)
        commands = ScoringCommands(session, provider)
        try:
            response = commands.start()
        except (OSError, ValueError) as e:
            print(f"Error reading lineups from {provider.path}: {e}", file=sys.stderr)
            return 1
        if response["status"] != "ok":
            _print_error(response, sys.stderr, "Error: ")
            return 1
        print(f"Started game {game_id}")

    view = session.current_view()
    print(situation_text(view))
    if view.status == GameStatus.IN_PROGRESS:
        print(batter_text(view))

    if args.script:
        with open(args.script) as f:
            failures = run_commands(commands, f.readlines())
    else:
        failures = run_commands(commands, sys.stdin)
    return 1 if failures else 0


def _check_lineups(provider: JsonLineupProvider, game_id: str) -> int:
    status = 0
    for side in (BattingTeam.AWAY, BattingTeam.HOME):
        label = side.value.lower()
        try:
            lineup = validate_lineup(provider.get_lineup(game_id, side), side=label)
        except ScoringError as e:
            print(f"{label}: {e}", file=sys.stderr)
            for detail in e.details:
                print(f"  - {detail}", file=sys.stderr)
            status = 1
            continue
        except (OSError, ValueError) as e:
            print(f"Error reading lineups from {provider.path}: {e}", file=sys.stderr)
            return 1
        print(f"{label}: {lineup.team_name} ({len(lineup)} batters) OK")
    return status


if __name__ == "__main__":
    sys.exit(main())
