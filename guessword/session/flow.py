"""
Game Flow - The observing layer between the engine and the screens.

The flow reacts to the engine's one-shot events exactly once:
1. Game finished -> capture the final score into a SummaryHandoff,
   consume the event, dispose the game, switch to SUMMARY
2. Restart requested -> build and start a brand-new GameSession,
   consume the event, drop the handoff, switch to PLAYING
3. Repeat until the session is ended

With a ticking game the flow subscribes to it, so expiry switches the
stage on the same loop iteration the countdown hits zero. Listeners
attached to the flow (WebSocket clients, tests) may come and go at any
time; consumed events are never replayed to them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, TYPE_CHECKING
import logging

from ..engine import GameSession, GameSnapshot, StaleCommandError, SummaryHandoff, SummarySnapshot
from .manager import FlowStage

if TYPE_CHECKING:
    from .manager import Session


logger = logging.getLogger(__name__)


@dataclass
class FlowResult:
    """
    State of the flow after a command or event.

    transitions lists what happened during this call:
    "game_started", "game_finished", "restarted".
    """
    stage: FlowStage
    accepted: bool = True
    transitions: list[str] = field(default_factory=list)
    game: GameSnapshot | None = None
    summary: SummarySnapshot | None = None
    rounds_completed: int = 0


FlowListener = Callable[[FlowResult], None]


class GameFlow:
    """
    Drives one play session through game and summary stages.

    Usage:
        flow = GameFlow(session)
        flow.begin()

        flow.mark_correct()
        flow.mark_skip()

        # ... countdown expires, stage becomes SUMMARY
        flow.request_restart()   # new game, stage back to PLAYING
    """

    def __init__(self, session: Session, auto_tick: bool = True):
        self.session = session
        self.auto_tick = auto_tick
        self._listeners: list[FlowListener] = []
        self._unsubscribe_game: Callable[[], None] | None = None
        self._in_command = False

    @property
    def stage(self) -> FlowStage:
        return self.session.stage

    @property
    def game(self) -> GameSession | None:
        return self.session.game

    @property
    def summary(self) -> SummaryHandoff | None:
        return self.session.summary

    def state(self, accepted: bool = True, transitions: list[str] | None = None) -> FlowResult:
        return FlowResult(
            stage=self.session.stage,
            accepted=accepted,
            transitions=transitions or [],
            game=self.session.game.snapshot() if self.session.game else None,
            summary=self.session.summary.snapshot() if self.session.summary else None,
            rounds_completed=self.session.rounds_completed,
        )

    def subscribe(self, listener: FlowListener) -> Callable[[], None]:
        """Register a listener for flow updates. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # =========================================================================
    # Commands
    # =========================================================================

    def begin(self) -> FlowResult:
        """Start the first game of the session."""
        if self.session.game is not None or self.session.stage != FlowStage.PLAYING:
            raise RuntimeError("Flow already begun")
        self._start_game()
        result = self.state(transitions=["game_started"])
        self._notify(result)
        return result

    def mark_correct(self) -> FlowResult:
        return self._game_command("mark_correct")

    def mark_skip(self) -> FlowResult:
        return self._game_command("mark_skip")

    def request_restart(self) -> FlowResult:
        """
        Play again from the summary.

        The request is acted on immediately: the flow starts a new game
        and consumes the request.
        """
        self.session.touch()
        if self.session.stage != FlowStage.SUMMARY or self.session.summary is None:
            return self._stale("request_restart")

        self.session.summary.request_restart()
        return self.sync()

    def sync(self) -> FlowResult:
        """
        React to pending one-shot events.

        Safe to call any time; with nothing pending it just reports the
        current state.
        """
        transitions: list[str] = []
        session = self.session

        game = session.game
        if session.stage == FlowStage.PLAYING and game is not None and game.finished:
            self._detach_game()
            session.summary = SummaryHandoff.from_session(game)
            game.consume_finished()
            game.dispose()
            session.game = None
            session.stage = FlowStage.SUMMARY
            session.rounds_completed += 1
            transitions.append("game_finished")
            logger.info(
                "Showing summary",
                extra={
                    "session_id": session.session_id,
                    "final_score": session.summary.final_score,
                },
            )

        summary = session.summary
        if session.stage == FlowStage.SUMMARY and summary is not None and summary.restart_requested:
            self._start_game()
            summary.consume_restart()
            session.summary = None
            session.stage = FlowStage.PLAYING
            transitions.append("restarted")
            logger.info("Session restarted", extra={"session_id": session.session_id})

        result = self.state(transitions=transitions)
        if transitions:
            self._notify(result)
        return result

    def close(self) -> None:
        """Detach from the game and drop all listeners."""
        self._detach_game()
        self._listeners.clear()

    # =========================================================================
    # Internals
    # =========================================================================

    def _game_command(self, command: str) -> FlowResult:
        self.session.touch()
        game = self.session.game
        if self.session.stage != FlowStage.PLAYING or game is None:
            return self._stale(command)

        # The command's own sync() handles an end-on-empty finish
        self._in_command = True
        try:
            accepted = getattr(game, command)()
        finally:
            self._in_command = False
        result = self.sync()
        result.accepted = accepted
        if accepted and not result.transitions:
            self._notify(result)
        return result

    def _stale(self, command: str) -> FlowResult:
        if self.session.config.reject_stale_commands:
            raise StaleCommandError(command, self.session.stage.value)
        logger.debug(
            "Ignoring stale command",
            extra={"command": command, "stage": self.session.stage.value},
        )
        return self.state(accepted=False)

    def _start_game(self) -> None:
        game = GameSession(self.session.config, rng=self.session.rng)
        game.start(auto_tick=self.auto_tick)
        self._unsubscribe_game = game.subscribe(self._on_game_change)
        self.session.game = game

    def _detach_game(self) -> None:
        if self._unsubscribe_game is not None:
            self._unsubscribe_game()
            self._unsubscribe_game = None

    def _on_game_change(self, snapshot: GameSnapshot) -> None:
        if self._in_command:
            return
        if snapshot.finished and self.session.game is not None:
            self.sync()
            return
        self._notify(self.state())

    def _notify(self, result: FlowResult) -> None:
        for listener in list(self._listeners):
            listener(result)
