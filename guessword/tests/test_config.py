"""
Tests for configuration, logging setup and the CLI.
"""

import json
import logging

import pytest

from ..cli import main
from ..config import GameConfig
from ..engine import WORD_POOL
from ..observability import configure_logging, get_logger


class TestGameConfig:
    """Tests for GameConfig."""

    def test_defaults(self):
        config = GameConfig()

        assert config.session_length == 60
        assert config.tick_seconds == 1.0
        assert config.end_on_empty is False
        assert config.reject_stale_commands is False
        assert config.word_pool == WORD_POOL
        assert config.duration_seconds == 60.0

    @pytest.mark.parametrize("kwargs", [
        {"session_length": 0},
        {"tick_seconds": 0},
        {"tick_seconds": -1.0},
        {"word_pool": ()},
        {"word_pool": ("cat", "dog", "cat")},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            GameConfig(**kwargs)

    def test_word_pool_stored_as_tuple(self):
        config = GameConfig(word_pool=["a", "b"])
        assert config.word_pool == ("a", "b")

    def test_frozen(self):
        config = GameConfig()
        with pytest.raises(AttributeError):
            config.session_length = 10

    def test_with_overrides_skips_none(self):
        config = GameConfig(session_length=30)

        assert config.with_overrides(session_length=None) is config

        changed = config.with_overrides(session_length=None, tick_seconds=0.5)
        assert changed.session_length == 30
        assert changed.tick_seconds == 0.5
        assert changed.duration_seconds == 15.0

    def test_with_overrides_validates(self):
        with pytest.raises(ValueError):
            GameConfig().with_overrides(session_length=0)

    def test_from_env(self):
        config = GameConfig.from_env({
            "GUESSWORD_SESSION_LENGTH": "90",
            "GUESSWORD_TICK_SECONDS": "0.5",
            "GUESSWORD_END_ON_EMPTY": "yes",
            "GUESSWORD_REJECT_STALE": "TRUE",
        })

        assert config.session_length == 90
        assert config.tick_seconds == 0.5
        assert config.end_on_empty is True
        assert config.reject_stale_commands is True

    def test_from_empty_env(self):
        assert GameConfig.from_env({}) == GameConfig()

    def test_from_env_unknown_flag_is_false(self):
        config = GameConfig.from_env({"GUESSWORD_END_ON_EMPTY": "maybe"})
        assert config.end_on_empty is False


class TestLogging:
    """Tests for JSON logging setup."""

    @pytest.fixture
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield root
        root.handlers = handlers
        root.setLevel(level)

    def test_json_lines_with_service_name(self, restore_root, capsys):
        configure_logging("DEBUG", service_name="guessword-test")

        get_logger("guessword.test").info("Game finished", extra={"final_score": 4})

        line = capsys.readouterr().err.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["message"] == "Game finished"
        assert record["level"] == "INFO"
        assert record["service"] == "guessword-test"
        assert record["final_score"] == 4

    def test_reconfigure_replaces_handler(self, restore_root):
        configure_logging("INFO")
        configure_logging("WARNING")

        assert len(restore_root.handlers) == 1
        assert restore_root.level == logging.WARNING


class TestCLI:
    """Tests for the command-line entry point."""

    def test_words(self, capsys):
        main(["words"])

        lines = capsys.readouterr().out.splitlines()
        assert lines == list(WORD_POOL)

    def test_config(self, capsys, monkeypatch):
        monkeypatch.setenv("GUESSWORD_SESSION_LENGTH", "30")
        monkeypatch.setenv("GUESSWORD_TICK_SECONDS", "2")
        main(["config"])

        out = capsys.readouterr().out
        assert "Session length: 30 ticks" in out
        assert "60s per game" in out

    def test_config_invalid_env(self, capsys, monkeypatch):
        monkeypatch.setenv("GUESSWORD_SESSION_LENGTH", "0")
        with pytest.raises(SystemExit) as exc_info:
            main(["config"])

        assert exc_info.value.code == 1
        assert "Error" in capsys.readouterr().out

    def test_no_command(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 1
