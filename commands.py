# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Command surface for the presentation layer.

Wraps a ``GameSession`` so that every command returns a structured
response instead of raising:

  Success:
    {
      "status": "ok",
      "command": "<command>",
      "data": {"view": { ...GameView... }, ...}
    }

  Error:
    {
      "status": "error",
      "command": "<command>",
      "error_code": "<ERROR_CODE>",
      "message": "Human-readable error description",
      "details": [...]
    }

Parameters are validated with Pydantic input models before they reach the
session; a validation failure is reported as ``INVALID_PARAMETER``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from pydantic import BaseModel, Field, ValidationError, field_validator

from baserunners import ORIGINS, RunnerAction, origin_key
from errors import InvalidAdvancement, LineupInvalid, ScoringError
from lineups import LineupProvider, build_lineup
from models import Lineup
from outcomes import OutcomeKind, parse_outcome
from resolver import AtBatOutcome, PitchKind, PitchOutcome, parse_pitch
from session import GameSession

logger = logging.getLogger(__name__)

INVALID_PARAMETER = "INVALID_PARAMETER"


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------

def success_response(command: str, data: dict[str, Any]) -> dict[str, Any]:
    return {
        "status": "ok",
        "command": command,
        "data": data,
    }


def error_response(command: str, error_code: str, message: str,
                   details: list[str] | None = None) -> dict[str, Any]:
    return {
        "status": "error",
        "command": command,
        "error_code": error_code,
        "message": message,
        "details": details or [],
    }


def _format_validation_error(exc: ValidationError) -> list[str]:
    return [
        f"Parameter '{'.'.join(str(x) for x in e['loc']) or 'input'}': {e['msg']}"
        for e in exc.errors()
    ]


# ---------------------------------------------------------------------------
# Input models
# ---------------------------------------------------------------------------

class RecordAtBatInput(BaseModel):
    """Input schema for record_at_bat."""
    batter_id: str = Field(min_length=1, description="Player ID of the batter due up.")
    outcome: OutcomeKind = Field(description="Outcome code such as '1B', 'SO' or 'DP'.")
    advancement: dict[str, str] = Field(
        default_factory=dict,
        description="Manual runner choices keyed by origin (batter, first, second, third).",
    )

    @field_validator("batter_id")
    @classmethod
    def validate_batter_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Player ID must be a non-empty string")
        return v

    @field_validator("outcome", mode="before")
    @classmethod
    def validate_outcome(cls, v: Any) -> OutcomeKind:
        if isinstance(v, (str, OutcomeKind)):
            return parse_outcome(v)
        raise ValueError("Outcome must be a string")

    @field_validator("advancement")
    @classmethod
    def validate_advancement(cls, v: dict[str, str]) -> dict[str, str]:
        normalized = {}
        for origin, action in v.items():
            try:
                key = origin_key(origin)
            except InvalidAdvancement:
                raise ValueError(
                    f"Unknown runner origin {origin!r}; expected one of {', '.join(ORIGINS)}"
                ) from None
            normalized[key] = str(RunnerAction.parse(action))
        return normalized


class RecordPitchInput(BaseModel):
    """Input schema for record_pitch."""
    batter_id: str = Field(min_length=1, description="Player ID of the batter due up.")
    pitch: PitchKind = Field(description="One of 'ball', 'strike' or 'foul'.")

    @field_validator("batter_id")
    @classmethod
    def validate_batter_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Player ID must be a non-empty string")
        return v

    @field_validator("pitch", mode="before")
    @classmethod
    def validate_pitch(cls, v: Any) -> PitchKind:
        if isinstance(v, (str, PitchKind)):
            return parse_pitch(v)
        raise ValueError("Pitch must be a string")


# ---------------------------------------------------------------------------
# Command surface
# ---------------------------------------------------------------------------

class ScoringCommands:
    """Structured-response facade over one ``GameSession``."""

    def __init__(self, session: GameSession, provider: LineupProvider | None = None):
        self.session = session
        self.provider = provider

    def start(self, home: dict | Lineup | None = None,
              away: dict | Lineup | None = None) -> dict[str, Any]:
        def run() -> dict[str, Any]:
            if home is None and away is None:
                if self.provider is None:
                    raise LineupInvalid("No lineups supplied and no lineup provider configured")
                view = self.session.start_from_provider(self.provider)
            else:
                if home is None or away is None:
                    raise LineupInvalid("Both home and away lineups are required")
                view = self.session.start(_as_lineup(home), _as_lineup(away))
            return {"view": view.model_dump(mode="json")}
        return self._run("start", run)

    def record_at_bat(self, batter_id: str, outcome: str,
                      advancement: dict[str, str] | None = None) -> dict[str, Any]:
        try:
            params = RecordAtBatInput(
                batter_id=batter_id, outcome=outcome, advancement=advancement or {},
            )
        except ValidationError as exc:
            details = _format_validation_error(exc)
            logger.warning("record_at_bat rejected: %s", "; ".join(details))
            return error_response("record_at_bat", INVALID_PARAMETER,
                                  "Invalid record_at_bat parameters", details)

        def run() -> dict[str, Any]:
            result = self.session.record_at_bat(
                params.batter_id, params.outcome, params.advancement or None,
            )
            return {
                "at_bat": at_bat_summary(result),
                "view": self.session.current_view().model_dump(mode="json"),
            }
        return self._run("record_at_bat", run)

    def record_pitch(self, batter_id: str, pitch: str) -> dict[str, Any]:
        try:
            params = RecordPitchInput(batter_id=batter_id, pitch=pitch)
        except ValidationError as exc:
            details = _format_validation_error(exc)
            logger.warning("record_pitch rejected: %s", "; ".join(details))
            return error_response("record_pitch", INVALID_PARAMETER,
                                  "Invalid record_pitch parameters", details)

        def run() -> dict[str, Any]:
            result = self.session.record_pitch(params.batter_id, params.pitch)
            data = {
                "pitch": pitch_summary(result),
                "view": self.session.current_view().model_dump(mode="json"),
            }
            if result.at_bat is not None:
                data["at_bat"] = at_bat_summary(result.at_bat)
            return data
        return self._run("record_pitch", run)

    def suspend(self) -> dict[str, Any]:
        return self._run("suspend", lambda: {"view": self.session.suspend().model_dump(mode="json")})

    def resume(self) -> dict[str, Any]:
        return self._run("resume", lambda: {"view": self.session.resume().model_dump(mode="json")})

    def complete(self) -> dict[str, Any]:
        return self._run("complete", lambda: {"view": self.session.complete().model_dump(mode="json")})

    def view(self) -> dict[str, Any]:
        return self._run("view", lambda: {"view": self.session.current_view().model_dump(mode="json")})

    def _run(self, command: str, fn: Callable[[], dict[str, Any]]) -> dict[str, Any]:
        try:
            return success_response(command, fn())
        except ScoringError as exc:
            logger.warning("%s rejected for game %s: %s", command, self.session.game_id, exc)
            return error_response(command, exc.error_code, str(exc), exc.details)


def at_bat_summary(result: AtBatOutcome) -> dict[str, Any]:
    return {
        "batter_id": result.batter.player_id,
        "outcome": result.kind.value,
        "runs_scored": result.runs_scored,
        "scored": [p.player_id for p in result.scored],
        "rbis": result.rbis,
        "outs_produced": result.outs_produced,
        "half_ended": result.half_ended,
        "next_batter_id": result.next_batter_slot.player.player_id,
        "advancement": {origin: str(action) for origin, action in result.proposal.items()},
        "description": result.description,
    }


def pitch_summary(result: PitchOutcome) -> dict[str, Any]:
    return {
        "pitch": result.pitch.value,
        "balls": result.count.balls,
        "strikes": result.count.strikes,
        "at_bat_complete": result.at_bat is not None,
    }


def _as_lineup(value: dict | Lineup) -> Lineup:
    return value if isinstance(value, Lineup) else build_lineup(value)
