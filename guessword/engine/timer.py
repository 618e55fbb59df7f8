"""
Countdown Timer - Periodic tick source for a game session.

The timer counts a fixed number of ticks down to zero. Ticks either come
from the running asyncio loop (scheduled with call_at against fixed
deadlines, so loop latency does not accumulate) or from the host calling
tick() directly, which is how a host with its own clock, and the tests,
drive it. The two sources never mix: tick() is refused while the loop
owns the clock.

Everything runs on the loop thread: a tick never overlaps a command.
cancel() is idempotent and leaves no scheduled callback behind, so a
cancelled timer can never fire into a discarded session.
"""

from __future__ import annotations
from typing import Callable
import asyncio


class CountdownTimer:
    """
    Counts remaining ticks down from duration to zero.

    Callbacks:
        on_tick(remaining)  after every decrement, including the last one
        on_finish()         once, when remaining reaches zero
    """

    def __init__(
        self,
        duration: int,
        interval: float,
        on_tick: Callable[[int], None] | None = None,
        on_finish: Callable[[], None] | None = None,
    ):
        if duration < 1:
            raise ValueError("Countdown duration must be at least one tick")
        if interval <= 0:
            raise ValueError("Countdown interval must be positive")

        self.duration = duration
        self.interval = interval
        self._on_tick = on_tick
        self._on_finish = on_finish

        self._remaining = duration
        self._armed = False
        self._finished = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._handle: asyncio.TimerHandle | None = None
        self._started_at: float | None = None
        self._deadline = 0.0

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def running(self) -> bool:
        return self._armed

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def scheduled(self) -> bool:
        """True while a loop callback is pending."""
        return self._handle is not None

    @property
    def auto(self) -> bool:
        """True when the event loop drives the ticks."""
        return self._loop is not None

    @property
    def started_at(self) -> float | None:
        """Loop time at start(), None for a host-driven countdown."""
        return self._started_at

    @property
    def next_deadline(self) -> float | None:
        """Loop time of the next scheduled tick."""
        return self._handle.when() if self._handle is not None else None

    def start(self, auto: bool = True) -> None:
        """
        Arm the countdown.

        With auto=True the ticks are scheduled on the running event loop;
        asyncio raises RuntimeError if there is none.
        """
        if self._armed or self._finished:
            raise RuntimeError("Countdown already started")

        if auto:
            self._loop = asyncio.get_running_loop()
            self._started_at = self._deadline = self._loop.time()
        self._armed = True
        self._schedule()

    def tick(self) -> bool:
        """
        Advance the countdown by one tick.

        Returns False (and does nothing) if the timer is not armed, or if
        the event loop is driving it.
        """
        if not self._armed or self.auto:
            return False
        self._advance()
        return True

    def cancel(self) -> None:
        """Stop ticking. Safe to call any number of times."""
        self._armed = False
        self._unschedule()

    def _advance(self) -> None:
        self._remaining = max(0, self._remaining - 1)
        try:
            if self._on_tick:
                self._on_tick(self._remaining)
        finally:
            # Zero ends the countdown even if on_tick raised
            if self._remaining == 0 and self._armed:
                self._armed = False
                self._finished = True
                self._unschedule()
                if self._on_finish:
                    self._on_finish()

    def _schedule(self) -> None:
        if self._loop is None or not self._armed:
            return
        self._deadline += self.interval
        self._handle = self._loop.call_at(self._deadline, self._fire)

    def _unschedule(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        if not self._armed:
            return
        try:
            self._advance()
        finally:
            self._schedule()
