"""
Game State - Read-only views of a session for the presentation layer.

Snapshots are frozen values: a listener or a polling client can keep one
around without seeing it change underneath it.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any


class GamePhase(Enum):
    """Lifecycle of a single countdown run."""
    CREATED = "created"  # Constructed, timer not armed
    ACTIVE = "active"  # Accepting commands, timer ticking
    FINISHED = "finished"  # Countdown expired (or queue ran out), state frozen


@dataclass(frozen=True)
class GameSnapshot:
    """Observable outputs of a GameSession at one instant."""
    phase: GamePhase
    current_word: str | None
    score: int
    remaining_time: int
    finished: bool  # One-shot flag, pending until consumed
    active: bool  # Commands are accepted

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["phase"] = self.phase.value
        return data


@dataclass(frozen=True)
class SummarySnapshot:
    """Observable outputs of a SummaryHandoff."""
    final_score: int
    restart_requested: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
