"""
Game Configuration - Tunables for a play-through.

A GameConfig is fixed for the lifetime of a session. The API layer
builds one from the environment and lets a client override individual
fields when it creates a session.

Environment variables:
    GUESSWORD_SESSION_LENGTH   Countdown length in ticks (default 60)
    GUESSWORD_TICK_SECONDS     Seconds per tick (default 1.0)
    GUESSWORD_END_ON_EMPTY     Finish when the word queue runs out (default false)
    GUESSWORD_REJECT_STALE     Raise on commands after expiry (default false)
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any
import os

from .engine.words import WORD_POOL


DEFAULT_SESSION_LENGTH = 60
DEFAULT_TICK_SECONDS = 1.0

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class GameConfig:
    """
    Settings for one game session.

    session_length is counted in ticks; tick_seconds is how much wall
    time one tick represents when the countdown runs on an event loop.
    """
    session_length: int = DEFAULT_SESSION_LENGTH
    tick_seconds: float = DEFAULT_TICK_SECONDS

    # Alternate mode: an exhausted queue ends the game instead of reshuffling
    end_on_empty: bool = False

    # Stale command policy: False ignores, True raises StaleCommandError
    reject_stale_commands: bool = False

    word_pool: tuple[str, ...] = field(default=WORD_POOL)

    def __post_init__(self):
        if self.session_length < 1:
            raise ValueError(f"session_length must be at least 1, got {self.session_length}")
        if self.tick_seconds <= 0:
            raise ValueError(f"tick_seconds must be positive, got {self.tick_seconds}")
        if not self.word_pool:
            raise ValueError("word_pool must contain at least one word")
        if len(set(self.word_pool)) != len(self.word_pool):
            raise ValueError("word_pool must not contain duplicate words")
        # Accept any sequence, store a tuple
        object.__setattr__(self, "word_pool", tuple(self.word_pool))

    @property
    def duration_seconds(self) -> float:
        """Total wall time of a countdown run."""
        return self.session_length * self.tick_seconds

    def with_overrides(self, **overrides: Any) -> GameConfig:
        """Return a copy with the non-None overrides applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if not changes:
            return self
        return replace(self, **changes)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> GameConfig:
        """Build a config from GUESSWORD_* environment variables."""
        env = os.environ if environ is None else environ

        def _flag(name: str) -> bool:
            return env.get(name, "").strip().lower() in _TRUTHY

        return cls(
            session_length=int(env.get("GUESSWORD_SESSION_LENGTH", DEFAULT_SESSION_LENGTH)),
            tick_seconds=float(env.get("GUESSWORD_TICK_SECONDS", DEFAULT_TICK_SECONDS)),
            end_on_empty=_flag("GUESSWORD_END_ON_EMPTY"),
            reject_stale_commands=_flag("GUESSWORD_REJECT_STALE"),
        )
