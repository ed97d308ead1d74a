# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0", "pytest>=7.0"]
# ///
"""Tests for environment-driven configuration."""

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

import config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        config.STATE_DIR_ENV,
        config.REGULATION_INNINGS_ENV,
        config.MERCY_RUNS_ENV,
        config.MERCY_INNING_ENV,
        config.LOG_LEVEL_ENV,
    ):
        monkeypatch.delenv(name, raising=False)


class TestStateDir:

    def test_default(self):
        assert config.get_state_dir() == config.DEFAULT_STATE_DIR

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv(config.STATE_DIR_ENV, str(tmp_path))
        assert config.get_state_dir() == tmp_path


class TestCompletionRules:

    def test_defaults(self):
        rules = config.get_completion_rules()
        assert rules.regulation_innings == 7
        assert rules.mercy_run_differential is None
        assert rules.mercy_after_inning == 5

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv(config.REGULATION_INNINGS_ENV, "9")
        monkeypatch.setenv(config.MERCY_RUNS_ENV, "10")
        monkeypatch.setenv(config.MERCY_INNING_ENV, "4")
        rules = config.get_completion_rules()
        assert (rules.regulation_innings, rules.mercy_run_differential, rules.mercy_after_inning) == (
            9, 10, 4
        )

    def test_zero_disables_regulation(self, monkeypatch):
        monkeypatch.setenv(config.REGULATION_INNINGS_ENV, "0")
        assert config.get_completion_rules().regulation_innings is None

    @pytest.mark.parametrize("value", ["seven", "-1", "7.5"])
    def test_invalid_values_name_the_variable(self, monkeypatch, value):
        monkeypatch.setenv(config.REGULATION_INNINGS_ENV, value)
        with pytest.raises(ValueError, match=config.REGULATION_INNINGS_ENV):
            config.get_completion_rules()


class TestLogLevel:

    def test_default_warning(self):
        assert config.get_log_level() == logging.WARNING

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv(config.LOG_LEVEL_ENV, "debug")
        assert config.get_log_level() == logging.DEBUG

    def test_invalid(self, monkeypatch):
        monkeypatch.setenv(config.LOG_LEVEL_ENV, "chatty")
        with pytest.raises(ValueError, match=config.LOG_LEVEL_ENV):
            config.get_log_level()
