"""
Pytest fixtures for Guess the Word tests.

Games here are started with auto_tick=False: the tests own the clock and
call tick() themselves, so nothing depends on wall time.
"""

import random

import pytest

from ..config import GameConfig
from ..engine import GameSession
from ..session import SessionManager, GameFlow
from ..api.service import APIService
from .helpers import SMALL_POOL


@pytest.fixture
def config() -> GameConfig:
    """Five-tick game over the default pool."""
    return GameConfig(session_length=5, tick_seconds=1.0)


@pytest.fixture
def small_config() -> GameConfig:
    """Long game over a three-word pool, for queue tests."""
    return GameConfig(session_length=1000, word_pool=SMALL_POOL)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def game(config: GameConfig, rng: random.Random) -> GameSession:
    """A started game whose countdown the test drives."""
    session = GameSession(config, rng=rng)
    session.start(auto_tick=False)
    yield session
    session.dispose()


@pytest.fixture
def manager(config: GameConfig) -> SessionManager:
    return SessionManager(default_config=config)


@pytest.fixture
def flow(manager: SessionManager) -> GameFlow:
    """A begun flow with a host-driven countdown."""
    session = manager.create_session(seed=42)
    game_flow = GameFlow(session, auto_tick=False)
    game_flow.begin()
    yield game_flow
    manager.end_session(session.session_id)


@pytest.fixture
def service(manager: SessionManager) -> APIService:
    """API service whose games the test ticks by hand."""
    return APIService(session_manager=manager, auto_tick=False)

