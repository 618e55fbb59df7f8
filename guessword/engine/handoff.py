"""
Summary Handoff - Carries the final score to the summary stage.

Built once per finished game with the score captured at expiry. The
score never changes afterwards. The handoff's only other job is to hold
a single "play again" request until the observing layer acts on it.
"""

from __future__ import annotations
from typing import TYPE_CHECKING
import logging

from .events import OneShotEvent
from .state import SummarySnapshot

if TYPE_CHECKING:
    from .session import GameSession


logger = logging.getLogger(__name__)


class SummaryHandoff:
    """Frozen final score plus a one-shot restart request."""

    def __init__(self, final_score: int):
        self._final_score = int(final_score)
        self._restart = OneShotEvent("restart")

    @classmethod
    def from_session(cls, session: GameSession) -> SummaryHandoff:
        """Capture the final score of a finished session."""
        if session.final_score is None:
            raise ValueError("Game session has not finished; no final score to hand off")
        return cls(session.final_score)

    @property
    def final_score(self) -> int:
        return self._final_score

    @property
    def restart_requested(self) -> bool:
        return self._restart.pending

    def request_restart(self) -> bool:
        """
        Ask for a new game.

        Returns False if a request was already pending; repeated presses
        collapse into one.
        """
        raised = self._restart.trigger()
        if raised:
            logger.info("Restart requested", extra={"final_score": self._final_score})
        return raised

    def consume_restart(self) -> bool:
        """Acknowledge the restart request. No-op if nothing is pending."""
        return self._restart.consume()

    def snapshot(self) -> SummarySnapshot:
        return SummarySnapshot(
            final_score=self._final_score,
            restart_requested=self._restart.pending,
        )

    def __repr__(self) -> str:
        return f"SummaryHandoff(final_score={self._final_score}, restart_requested={self.restart_requested})"
