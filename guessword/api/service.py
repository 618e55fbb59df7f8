"""
API Service - Business logic layer between the API and the engine.

The service:
1. Translates API requests to flow commands
2. Owns one GameFlow per play session
3. Formats engine snapshots for clients

This layer is framework-agnostic: FastAPI calls it, and so can tests or
any other host. Missing sessions and rejected commands come back as
ErrorResponse values, not exceptions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable

from .schemas import (
    # Requests
    CreateSessionRequest,
    # Responses
    CommandResponse,
    ErrorResponse,
    SessionResponse,
    WordsResponse,
    # Shared
    GameStateInfo,
    SummaryInfo,
    # Enums
    ErrorCode,
    SessionStage,
)
from ..config import GameConfig
from ..engine import StaleCommandError
from ..session import SessionManager, Session, GameFlow, FlowResult


SessionListener = Callable[[SessionResponse], None]


def format_elapsed_time(seconds: float) -> str:
    """
    Format seconds as MM:SS, or H:MM:SS from one hour up.

        >>> format_elapsed_time(9)
        '00:09'
        >>> format_elapsed_time(3725)
        '1:02:05'
    """
    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        response = service.create_session(CreateSessionRequest())
        service.mark_correct(response.session_id)
        service.mark_skip(response.session_id)

        # ... countdown expires, stage becomes "summary"
        service.request_restart(response.session_id)

    auto_tick=False leaves the countdowns to the host, which then calls
    GameSession.tick() itself (tests do this).
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    auto_tick: bool = True

    # Flow drivers per session
    _flows: dict[str, GameFlow] = field(default_factory=dict)

    @property
    def config(self) -> GameConfig:
        return self.session_manager.default_config

    def create_session(self, request: CreateSessionRequest | None = None) -> SessionResponse:
        """
        Create a play session and start its first game.
        """
        request = request or CreateSessionRequest()
        config = self.config.with_overrides(
            session_length=request.session_length,
            tick_seconds=request.tick_seconds,
            end_on_empty=request.end_on_empty,
        )

        session = self.session_manager.create_session(config=config, seed=request.seed)
        flow = GameFlow(session, auto_tick=self.auto_tick)
        try:
            flow.begin()
        except RuntimeError:
            self.session_manager.end_session(session.session_id, reason="start_failed")
            raise
        self._flows[session.session_id] = flow

        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        """
        Get session state.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._session_to_response(session)

    def mark_correct(self, session_id: str) -> CommandResponse | ErrorResponse:
        return self._run_command(session_id, "mark_correct")

    def mark_skip(self, session_id: str) -> CommandResponse | ErrorResponse:
        return self._run_command(session_id, "mark_skip")

    def request_restart(self, session_id: str) -> CommandResponse | ErrorResponse:
        return self._run_command(session_id, "request_restart")

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        """
        End a play session, cancelling its countdown.
        """
        flow = self._flows.pop(session_id, None)
        if flow:
            flow.close()
        return self.session_manager.end_session(session_id, reason)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    def list_words(self) -> WordsResponse:
        words = list(self.config.word_pool)
        return WordsResponse(words=words, count=len(words))

    def cleanup_stale_sessions(self, max_idle_seconds: int = 3600) -> list[str]:
        removed = self.session_manager.cleanup_stale_sessions(max_idle_seconds)
        for session_id in removed:
            flow = self._flows.pop(session_id, None)
            if flow:
                flow.close()
        return removed

    def subscribe(
        self,
        session_id: str,
        listener: SessionListener,
    ) -> Callable[[], None] | None:
        """
        Push a SessionResponse to listener on every change of the session.

        Returns an unsubscribe function, or None if the session is unknown.
        """
        flow = self._flows.get(session_id)
        if not flow:
            return None

        def forward(result: FlowResult) -> None:
            listener(self._session_to_response(flow.session))

        return flow.subscribe(forward)

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _run_command(self, session_id: str, command: str) -> CommandResponse | ErrorResponse:
        flow = self._flows.get(session_id)
        if not flow:
            return self._not_found(session_id)

        try:
            result = getattr(flow, command)()
        except StaleCommandError as e:
            return ErrorResponse(
                error=str(e),
                error_code=ErrorCode.STALE_COMMAND,
                details={"command": e.command, "state": e.state},
            )

        return CommandResponse(
            session_id=session_id,
            command=command,
            accepted=result.accepted,
            transitions=result.transitions,
            session=self._session_to_response(flow.session),
        )

    def _not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session {session_id} not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )

    def _session_to_response(self, session: Session) -> SessionResponse:
        """Convert Session to SessionResponse."""
        game_info = None
        if session.game is not None:
            snapshot = session.game.snapshot()
            game_info = GameStateInfo(
                current_word=snapshot.current_word,
                score=snapshot.score,
                remaining_time=snapshot.remaining_time,
                remaining_time_text=format_elapsed_time(
                    snapshot.remaining_time * session.config.tick_seconds
                ),
                finished=snapshot.finished,
                active=snapshot.active,
            )

        summary_info = None
        if session.summary is not None:
            summary_info = SummaryInfo(
                final_score=session.summary.final_score,
                restart_requested=session.summary.restart_requested,
            )

        return SessionResponse(
            session_id=session.session_id,
            stage=SessionStage(session.stage.value),
            game=game_info,
            summary=summary_info,
            rounds_completed=session.rounds_completed,
            session_length=session.config.session_length,
            tick_seconds=session.config.tick_seconds,
            created_at=session.created_at,
        )
