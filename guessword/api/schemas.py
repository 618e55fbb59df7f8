"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a client (mobile or web) and
the engine. The client renders them; it never computes game state.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has been ended
- STALE_COMMAND: Command arrived after the stage it belongs to ended
- VALIDATION_ERROR: Request body is invalid
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStage(str, Enum):
    """Stage of a play session."""
    PLAYING = "playing"
    SUMMARY = "summary"
    ENDED = "ended"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    STALE_COMMAND = "STALE_COMMAND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class GameStateInfo(BaseModel):
    """The running game as the client should display it."""
    current_word: Optional[str] = None
    score: int = 0
    remaining_time: int = Field(0, ge=0, description="Ticks left on the countdown")
    remaining_time_text: str = Field("00:00", description="Remaining time as MM:SS")
    finished: bool = False
    active: bool = False

    model_config = {"from_attributes": True}


class SummaryInfo(BaseModel):
    """The finished game's score, shown on the summary screen."""
    final_score: int
    restart_requested: bool = False

    model_config = {"from_attributes": True}


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a play session. Unset fields use server defaults."""
    session_length: Optional[int] = Field(
        None, ge=1, le=3600, description="Countdown length in ticks"
    )
    tick_seconds: Optional[float] = Field(
        None, gt=0.0, le=60.0, description="Seconds per tick"
    )
    end_on_empty: Optional[bool] = Field(
        None, description="End the game when the word queue runs out instead of reshuffling"
    )
    seed: Optional[int] = Field(None, description="Seed for a reproducible word order")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class SessionResponse(BaseModel):
    """
    Complete session state.

    Exactly one of game / summary is set while the session is open:
    game while stage is playing, summary while stage is summary.
    """
    session_id: str
    stage: SessionStage
    game: Optional[GameStateInfo] = None
    summary: Optional[SummaryInfo] = None
    rounds_completed: int = 0
    session_length: int = 0
    tick_seconds: float = 1.0
    created_at: float = 0.0
    api_version: str = "v1"


class CommandResponse(BaseModel):
    """Response to correct / skip / restart."""
    session_id: str
    command: str
    accepted: bool = Field(..., description="False if the command was stale and ignored")
    transitions: list[str] = Field(
        default_factory=list, description="game_started, game_finished, restarted"
    )
    session: SessionResponse
    api_version: str = "v1"


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class WordsResponse(BaseModel):
    """The configured word pool."""
    words: list[str]
    count: int


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
