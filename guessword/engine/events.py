"""
One-shot events.

A one-shot event is a flag with two states, idle and pending. The source
(timer expiry, a button press) moves it to pending; only the party that
reacts to it moves it back to idle by consuming it. An observer that is
torn down and re-attached while the flag is pending sees it once more,
acts, and consumes; after that it stays quiet until the next trigger.

Triggers that arrive while already pending collapse into the one
pending event.
"""

from __future__ import annotations


class OneShotEvent:
    """Idle/pending flag with explicit consumption."""

    def __init__(self, name: str):
        self.name = name
        self._pending = False
        self.trigger_count = 0

    @property
    def pending(self) -> bool:
        return self._pending

    def trigger(self) -> bool:
        """
        Move idle -> pending.

        Returns True if this call raised the event, False if it was
        already pending.
        """
        if self._pending:
            return False
        self._pending = True
        self.trigger_count += 1
        return True

    def consume(self) -> bool:
        """
        Move pending -> idle.

        Consuming an idle event is a no-op and returns False.
        """
        if not self._pending:
            return False
        self._pending = False
        return True

    def __repr__(self) -> str:
        state = "pending" if self._pending else "idle"
        return f"OneShotEvent({self.name!r}, {state})"
