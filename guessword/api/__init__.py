"""
API Module - Client interface.

Exposes the engine via REST and WebSocket. A client:
1. Creates a play session (the first game starts immediately)
2. Shows the current word and the countdown
3. Sends correct / skip for each word
4. Shows the final score when the stage turns to summary
5. Sends restart to play again

All state is session-scoped. No accounts, no persistence.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    # Responses
    SessionResponse,
    CommandResponse,
    ErrorResponse,
    SessionListResponse,
    EndSessionResponse,
    WordsResponse,
    HealthResponse,
    # Shared
    GameStateInfo,
    SummaryInfo,
    # Enums
    SessionStage,
    ErrorCode,
)
from .service import APIService, format_elapsed_time
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    # Responses
    "SessionResponse",
    "CommandResponse",
    "ErrorResponse",
    "SessionListResponse",
    "EndSessionResponse",
    "WordsResponse",
    "HealthResponse",
    # Shared
    "GameStateInfo",
    "SummaryInfo",
    # Enums
    "SessionStage",
    "ErrorCode",
    # Service
    "APIService",
    "format_elapsed_time",
    "create_app",
]
