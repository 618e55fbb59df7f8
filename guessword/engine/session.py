"""
Game Session - One play-through from start to timer expiration.

The session owns three things and nobody else writes to them:
- the word queue (shuffled copy of the pool, refilled when it runs dry)
- the score (+1 for correct, -1 for skip, no floor or ceiling)
- the countdown (the only source of asynchronous activity)

When the countdown reaches zero the session freezes its score and word,
captures the final score, and raises the one-shot `finished` event. The
observing layer reacts once, then calls consume_finished().

LIFECYCLE:
    session = GameSession(config)
    session.start()            # arms the countdown on the running loop
    session.mark_correct()
    session.mark_skip()
    ...                        # countdown expires -> session.finished
    session.consume_finished()
    session.dispose()          # always, on every exit path

A disposed or finished session is never restarted; build a new one.
"""

from __future__ import annotations
from typing import Callable, TYPE_CHECKING
import logging
import random

from .events import OneShotEvent
from .state import GamePhase, GameSnapshot
from .timer import CountdownTimer
from .words import WordQueue

if TYPE_CHECKING:
    from ..config import GameConfig


logger = logging.getLogger(__name__)

SnapshotListener = Callable[[GameSnapshot], None]


class StaleCommandError(RuntimeError):
    """A mutating command arrived after the session stopped accepting them."""

    def __init__(self, command: str, state: str):
        self.command = command
        self.state = state
        super().__init__(f"Cannot {command}: session is {state}")


class GameSession:
    """
    The game-session state machine.

    Reads (current_word, score, remaining_time, finished) are always
    safe. Commands are synchronous and complete before the next tick.
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        rng: random.Random | None = None,
    ):
        if config is None:
            from ..config import GameConfig
            config = GameConfig()

        self.config = config
        self._queue = WordQueue(config.word_pool, rng=rng)
        self._timer = CountdownTimer(
            duration=config.session_length,
            interval=config.tick_seconds,
            on_tick=self._on_tick,
            on_finish=self._on_countdown_finished,
        )

        self._phase = GamePhase.CREATED
        self._disposed = False
        self._current_word: str | None = None
        self._score = 0
        self._final_score: int | None = None
        self._finished = OneShotEvent("finished")
        self._listeners: list[SnapshotListener] = []

    # =========================================================================
    # Observable state
    # =========================================================================

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def current_word(self) -> str | None:
        return self._current_word

    @property
    def score(self) -> int:
        return self._score

    @property
    def remaining_time(self) -> int:
        return self._timer.remaining

    @property
    def finished(self) -> bool:
        """One-shot: True from expiry until consume_finished()."""
        return self._finished.pending

    @property
    def final_score(self) -> int | None:
        """Score captured at the instant the session finished."""
        return self._final_score

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def is_active(self) -> bool:
        """Commands are accepted only while active."""
        return self._phase == GamePhase.ACTIVE and not self._disposed

    @property
    def timer_running(self) -> bool:
        return self._timer.running

    @property
    def words_left(self) -> int:
        """Words remaining in the current shuffle."""
        return len(self._queue)

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            phase=self._phase,
            current_word=self._current_word,
            score=self._score,
            remaining_time=self._timer.remaining,
            finished=self._finished.pending,
            active=self.is_active,
        )

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """
        Register a listener called with a snapshot after every change.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # =========================================================================
    # Commands
    # =========================================================================

    def start(self, auto_tick: bool = True) -> None:
        """
        Begin the play-through.

        Refills the queue, shows the first word, zeroes the score and arms
        the countdown. With auto_tick=False the host drives tick() itself.
        """
        if self._disposed:
            raise RuntimeError("Cannot start a disposed session")
        if self._phase != GamePhase.CREATED:
            raise RuntimeError("Session already started")

        self._queue.refill()
        self._current_word = self._queue.pop()
        self._score = 0
        self._final_score = None
        self._finished.consume()

        # Arm before flipping the phase so a missing loop leaves us CREATED
        self._timer.start(auto=auto_tick)
        self._phase = GamePhase.ACTIVE

        logger.info(
            "Game session started",
            extra={
                "session_length": self.config.session_length,
                "tick_seconds": self.config.tick_seconds,
                "end_on_empty": self.config.end_on_empty,
            },
        )
        self._notify()

    def mark_correct(self) -> bool:
        """Player guessed the word: score +1, next word."""
        if not self._accepts("mark_correct"):
            return False
        self._score += 1
        self._advance_word()
        self._notify()
        return True

    def mark_skip(self) -> bool:
        """Player skipped the word: score -1, next word."""
        if not self._accepts("mark_skip"):
            return False
        self._score -= 1
        self._advance_word()
        self._notify()
        return True

    def tick(self) -> bool:
        """
        One unit of elapsed time.

        For hosts that own the clock (start(auto_tick=False)). Returns
        False and does nothing while the event loop drives the countdown,
        and after expiry or disposal.
        """
        if not self.is_active:
            return False
        return self._timer.tick()

    def consume_finished(self) -> bool:
        """Acknowledge the finished event. No-op if nothing is pending."""
        consumed = self._finished.consume()
        if consumed:
            self._notify()
        return consumed

    def dispose(self) -> None:
        """
        Cancel the countdown.

        Idempotent. After a natural expiry nothing observable changes; on
        an active session it ends command acceptance (abandonment).
        """
        self._timer.cancel()
        if self._disposed:
            return
        was_active = self.is_active
        self._disposed = True
        if was_active:
            logger.info("Game session abandoned", extra={"score": self._score})
            self._notify()
        self._listeners.clear()

    # =========================================================================
    # Internals
    # =========================================================================

    def _accepts(self, command: str) -> bool:
        if self.is_active:
            return True
        if self.config.reject_stale_commands:
            state = "disposed" if self._disposed else self._phase.value
            raise StaleCommandError(command, state)
        logger.debug(
            "Ignoring stale command",
            extra={"command": command, "phase": self._phase.value},
        )
        return False

    def _advance_word(self) -> None:
        if self._queue.is_empty:
            if self.config.end_on_empty:
                self._finish(reason="words_exhausted")
                return
            self._queue.refill()
            logger.debug("Word queue reshuffled", extra={"refills": self._queue.refills})
        self._current_word = self._queue.pop()

    def _on_tick(self, remaining: int) -> None:
        if remaining > 0:
            self._notify()

    def _on_countdown_finished(self) -> None:
        self._finish(reason="time_expired")
        self._notify()

    def _finish(self, reason: str) -> None:
        if self._phase == GamePhase.FINISHED:
            return
        self._timer.cancel()
        self._phase = GamePhase.FINISHED
        self._final_score = self._score
        self._finished.trigger()
        logger.info(
            "Game session finished",
            extra={"reason": reason, "final_score": self._final_score},
        )

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                # Observers are isolated from each other
                logger.exception("Game session listener failed")
