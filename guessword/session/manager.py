"""
Session Manager - Creates and tracks play sessions.

A play session is the long-lived owner that survives while game and
summary stages come and go:
- PLAYING: a GameSession is running
- SUMMARY: the game finished, a SummaryHandoff holds the final score
- ENDED: the player left, everything is released

Sessions are EPHEMERAL:
- In-memory only, no persistence
- Ending a session always disposes its game (cancels the countdown)
- Stale sessions are swept by cleanup_stale_sessions()
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import logging
import random
import time
import uuid

from ..config import GameConfig
from ..engine import GameSession, SummaryHandoff


logger = logging.getLogger(__name__)


class FlowStage(Enum):
    """Which stage a play session is in."""
    PLAYING = "playing"  # Game in progress
    SUMMARY = "summary"  # Showing the final score
    ENDED = "ended"  # Session closed


@dataclass
class Session:
    """
    An ephemeral play session.

    Holds at most one of game / summary at a time, depending on stage.
    """
    session_id: str
    config: GameConfig
    created_at: float
    rng: random.Random = field(default_factory=random.Random)

    stage: FlowStage = FlowStage.PLAYING
    game: GameSession | None = None
    summary: SummaryHandoff | None = None

    rounds_completed: int = 0
    last_activity: float = 0.0

    metadata: dict[str, Any] = field(default_factory=dict)

    def is_active(self) -> bool:
        return self.stage != FlowStage.ENDED

    def touch(self) -> None:
        self.last_activity = time.time()

    def release(self) -> None:
        """Dispose the game and drop both stages."""
        if self.game is not None:
            self.game.dispose()
        self.game = None
        self.summary = None


class SessionManager:
    """
    Manages play sessions.

    Responsibilities:
    - Create sessions with their config and word shuffle source
    - Track active sessions
    - Release sessions (and their timers) when they end
    """

    def __init__(self, default_config: GameConfig | None = None):
        self.default_config = default_config or GameConfig()
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        config: GameConfig | None = None,
        seed: int | None = None,
    ) -> Session:
        """
        Create a new play session.

        The first game is not started here; GameFlow.begin() does that.
        """
        now = time.time()
        session = Session(
            session_id=str(uuid.uuid4()),
            config=config or self.default_config,
            created_at=now,
            rng=random.Random(seed),
            last_activity=now,
        )
        self._sessions[session.session_id] = session
        logger.info("Session created", extra={"session_id": session.session_id})
        return session

    def get_session(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and release it.

        Returns False if the session did not exist.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False

        session.release()
        session.stage = FlowStage.ENDED
        logger.info(
            "Session ended",
            extra={
                "session_id": session_id,
                "reason": reason,
                "rounds_completed": session.rounds_completed,
            },
        )
        return True

    def list_active_sessions(self) -> list[str]:
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_idle_seconds: int = 3600) -> list[str]:
        """
        End sessions with no activity for max_idle_seconds.

        Returns the IDs that were removed.
        """
        current_time = time.time()
        stale = [
            sid for sid, session in self._sessions.items()
            if current_time - session.last_activity > max_idle_seconds
        ]
        for session_id in stale:
            self.end_session(session_id, reason="stale")
        return stale
