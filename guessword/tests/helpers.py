"""Shared test helpers."""

from ..engine import GameSession


def expire(game: GameSession) -> int:
    """Tick a game until its countdown runs out. Returns ticks used."""
    ticks = 0
    while game.tick():
        ticks += 1
    return ticks


SMALL_POOL = ("alpha", "beta", "gamma")
