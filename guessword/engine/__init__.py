"""
Engine - The game-session state machine.

Components:
- words: reference vocabulary and the shuffled working queue
- events: idle/pending one-shot flags
- timer: countdown driven by the event loop or by the host
- session: GameSession (queue, score, countdown, finished event)
- handoff: SummaryHandoff (final score, restart event)
"""

from .words import WORD_POOL, WordQueue
from .events import OneShotEvent
from .timer import CountdownTimer
from .state import GamePhase, GameSnapshot, SummarySnapshot
from .session import GameSession, StaleCommandError
from .handoff import SummaryHandoff

__all__ = [
    "WORD_POOL",
    "WordQueue",
    "OneShotEvent",
    "CountdownTimer",
    "GamePhase",
    "GameSnapshot",
    "SummarySnapshot",
    "GameSession",
    "StaleCommandError",
    "SummaryHandoff",
]
