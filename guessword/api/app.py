"""
FastAPI Application - REST + WebSocket API for game clients.

Endpoints:
    POST   /api/v1/sessions                 Create a session, start its first game
    GET    /api/v1/sessions                 List active sessions
    GET    /api/v1/sessions/{id}            Get session state
    DELETE /api/v1/sessions/{id}            End session
    POST   /api/v1/sessions/{id}/correct    Word guessed (+1)
    POST   /api/v1/sessions/{id}/skip       Word skipped (-1)
    POST   /api/v1/sessions/{id}/restart    Play again from the summary
    WS     /api/v1/sessions/{id}/ws         Real-time updates (one per tick)
    GET    /api/v1/words                    Word pool

Countdowns run on the server's event loop. When one expires the session
moves to the "summary" stage by itself; clients learn about it from the
WebSocket or the next GET.

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Optional, Union
from contextlib import asynccontextmanager, suppress
import asyncio
import json
import os

from .. import __version__
from ..config import GameConfig
from ..observability import configure_logging, get_logger

# Environment configuration
GUESSWORD_ENV = os.getenv("GUESSWORD_ENV", "development")
GUESSWORD_LOG_LEVEL = os.getenv("GUESSWORD_LOG_LEVEL", "INFO")
SESSION_IDLE_TIMEOUT = int(os.getenv("GUESSWORD_SESSION_IDLE_TIMEOUT", "3600"))
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = get_logger(__name__)


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, WebSocket, WebSocketDisconnect, Body, Query
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .service import APIService
    from ..session import SessionManager
    from .schemas import (
        # Request models
        CreateSessionRequest,
        # Response models
        SessionResponse,
        CommandResponse,
        ErrorResponse,
        SessionListResponse,
        EndSessionResponse,
        WordsResponse,
        HealthResponse,
        # Enums
        ErrorCode,
    )

    # Service instance
    api_service = service or APIService(
        session_manager=SessionManager(default_config=GameConfig.from_env()),
    )

    @asynccontextmanager
    async def lifespan(app):
        configure_logging(GUESSWORD_LOG_LEVEL, service_name="guessword")
        logger.info("Starting guessword API", extra={"env": GUESSWORD_ENV})
        sweeper = asyncio.create_task(_sweep_stale_sessions())
        try:
            yield
        finally:
            sweeper.cancel()
            with suppress(asyncio.CancelledError):
                await sweeper
            # Cancel every countdown still armed
            for session_id in api_service.list_sessions():
                api_service.end_session(session_id, reason="shutdown")

    async def _sweep_stale_sessions():
        while True:
            await asyncio.sleep(max(1, SESSION_IDLE_TIMEOUT // 4))
            removed = api_service.cleanup_stale_sessions(SESSION_IDLE_TIMEOUT)
            if removed:
                logger.info("Swept stale sessions", extra={"count": len(removed)})

    app = FastAPI(
        title="Guess the Word API",
        description="""
Timed word-guessing game. One word at a time, mark it correct or skip,
score as many as you can before the countdown runs out.

## Session Flow

1. `POST /sessions` starts the first game (stage `playing`)
2. `POST /correct` and `POST /skip` while the countdown runs
3. At zero the stage becomes `summary` with the `final_score`
4. `POST /restart` starts a new game

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `STALE_COMMAND` | Command arrived after its stage ended (strict servers only) |
| `VALIDATION_ERROR` | Invalid request |
""",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.service = api_service

    # =========================================================================
    # Error helpers
    # =========================================================================

    status_codes = {
        ErrorCode.SESSION_NOT_FOUND: 404,
        ErrorCode.STALE_COMMAND: 409,
        ErrorCode.VALIDATION_ERROR: 400,
        ErrorCode.INTERNAL_ERROR: 500,
    }

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Render an ErrorResponse with the status code for its error code."""
        return JSONResponse(
            status_code=status_codes.get(error.error_code, 400),
            content=error.model_dump(mode="json"),
        )

    def command_response(response) -> Union[CommandResponse, JSONResponse]:
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Create a session and start the first game",
    )
    async def create_session(
        body: Optional[CreateSessionRequest] = Body(None),
    ) -> Union[SessionResponse, JSONResponse]:
        """
        Create a new play session.

        All fields are optional; omitted ones use the server defaults.
        """
        try:
            return api_service.create_session(body)
        except ValueError as e:
            return make_error_response(
                ErrorResponse(error=str(e), error_code=ErrorCode.VALIDATION_ERROR)
            )

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session state",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Current stage plus the running game or the summary."""
        response = api_service.get_session(session_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a session",
    )
    async def end_session(
        session_id: str,
        reason: str = Query("user_ended", description="Reason for ending"),
    ) -> EndSessionResponse:
        """End a session and cancel its countdown."""
        success = api_service.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Game Commands
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/correct",
        response_model=CommandResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Mark the current word as guessed",
    )
    async def mark_correct(session_id: str) -> Union[CommandResponse, JSONResponse]:
        """Score +1 and show the next word. `accepted=false` once the game is over."""
        return command_response(api_service.mark_correct(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/skip",
        response_model=CommandResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Skip the current word",
    )
    async def mark_skip(session_id: str) -> Union[CommandResponse, JSONResponse]:
        """Score -1 and show the next word. `accepted=false` once the game is over."""
        return command_response(api_service.mark_skip(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/restart",
        response_model=CommandResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Play again from the summary",
    )
    async def request_restart(session_id: str) -> Union[CommandResponse, JSONResponse]:
        """Start a new game. Only meaningful in the `summary` stage."""
        return command_response(api_service.request_restart(session_id))

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    ws_commands = {
        "correct": api_service.mark_correct,
        "skip": api_service.mark_skip,
        "restart": api_service.request_restart,
    }

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        WebSocket for real-time updates.

        Messages from server:
        - state_update: Session changed (tick, command, stage switch)
        - command_result: Reply to a command sent over the socket
        - error: Error occurred

        Messages from client:
        - ping: Keep-alive
        - correct / skip / restart: Game commands
        """
        await websocket.accept()

        updates: asyncio.Queue = asyncio.Queue()
        unsubscribe = api_service.subscribe(session_id, updates.put_nowait)
        if unsubscribe is None:
            await websocket.send_json({
                "type": "error",
                "payload": {"message": f"Session {session_id} not found"},
            })
            await websocket.close()
            return

        async def push_updates():
            while True:
                update = await updates.get()
                await websocket.send_json({
                    "type": "state_update",
                    "payload": update.model_dump(mode="json"),
                })

        pusher = asyncio.create_task(push_updates())
        try:
            initial = api_service.get_session(session_id)
            await websocket.send_json({
                "type": "state_update",
                "payload": initial.model_dump(mode="json"),
            })

            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })
                    continue

                message_type = message.get("type")
                if message_type == "ping":
                    await websocket.send_json({"type": "pong"})
                elif message_type in ws_commands:
                    result = ws_commands[message_type](session_id)
                    await websocket.send_json({
                        "type": "error" if isinstance(result, ErrorResponse) else "command_result",
                        "payload": result.model_dump(mode="json"),
                    })
                else:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": f"Unknown message type: {message_type}"},
                    })

        except WebSocketDisconnect:
            pass
        finally:
            unsubscribe()
            pusher.cancel()
            # A send on a closed socket ends the pusher with an error
            with suppress(asyncio.CancelledError, Exception):
                await pusher

    # =========================================================================
    # Words & Health
    # =========================================================================

    @app.get(
        "/api/v1/words",
        response_model=WordsResponse,
        tags=["Game"],
        summary="The word pool",
    )
    async def list_words() -> WordsResponse:
        return api_service.list_words()

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="guessword",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Guess the Word API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn guessword.api.app:app
app = None
try:
    app = create_app()
except ImportError:
    # FastAPI not installed
    pass
