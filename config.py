# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Centralized configuration for environment variables."""

import logging
import os
from pathlib import Path

from session import CompletionRules

STATE_DIR_ENV = "SCOREKEEPER_STATE_DIR"
REGULATION_INNINGS_ENV = "SCOREKEEPER_REGULATION_INNINGS"
MERCY_RUNS_ENV = "SCOREKEEPER_MERCY_RUNS"
MERCY_INNING_ENV = "SCOREKEEPER_MERCY_INNING"
LOG_LEVEL_ENV = "SCOREKEEPER_LOG_LEVEL"

DEFAULT_STATE_DIR = Path(__file__).resolve().parent / "data" / "games"
DEFAULT_REGULATION_INNINGS = 7  # slow-pitch softball
DEFAULT_MERCY_INNING = 5


def _int_env(name: str, default: int | None) -> int | None:
    """Read a positive integer; an empty value or ``0`` disables the setting."""
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value or None


def get_state_dir() -> Path:
    """Return the directory where game snapshots are written."""
    raw = os.environ.get(STATE_DIR_ENV, "").strip()
    return Path(raw) if raw else DEFAULT_STATE_DIR


def get_completion_rules() -> CompletionRules:
    """Build completion rules from the environment.

    Regulation length defaults to 7 innings; the mercy rule is off unless
    ``SCOREKEEPER_MERCY_RUNS`` is set.
    """
    return CompletionRules(
        regulation_innings=_int_env(REGULATION_INNINGS_ENV, DEFAULT_REGULATION_INNINGS),
        mercy_run_differential=_int_env(MERCY_RUNS_ENV, None),
        mercy_after_inning=_int_env(MERCY_INNING_ENV, DEFAULT_MERCY_INNING) or DEFAULT_MERCY_INNING,
    )


def get_log_level() -> int:
    """Return the logging level named by ``SCOREKEEPER_LOG_LEVEL`` (default WARNING)."""
    raw = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
    if not raw:
        return logging.WARNING
    level = logging.getLevelName(raw)
    if not isinstance(level, int):
        raise ValueError(f"{LOG_LEVEL_ENV} must be a logging level name, got {raw!r}")
    return level
