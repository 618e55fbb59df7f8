"""
Session Module - Play sessions and the flow that drives them.

A play session spans many games:
- Created when a player opens the game
- Runs a game, shows the summary, restarts on request
- Destroyed when the player leaves (or goes idle too long)

Sessions are EPHEMERAL: in-memory only, nothing survives a restart of
the process.
"""

from .manager import SessionManager, Session, FlowStage
from .flow import GameFlow, FlowResult

__all__ = [
    "SessionManager",
    "Session",
    "FlowStage",
    "GameFlow",
    "FlowResult",
]
