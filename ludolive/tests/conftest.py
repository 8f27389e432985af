"""
Pytest fixtures for Ludo Live tests.
"""

import random

import pytest

from ..engine_core.rules import initialize_tokens
from ..engine_core.state import MatchState, MatchStatus, Player, SEAT_ORDER
from ..session import GameLoop, MatchRegistry


@pytest.fixture
def make_match():
    """Factory for a match with the given player names seated in order."""

    def _make(names=("Alice", "Bob"), status=MatchStatus.IN_PROGRESS, code="TEST23"):
        players = [
            Player(id=name.lower(), name=name, color=SEAT_ORDER[i])
            for i, name in enumerate(names)
        ]
        return MatchState(
            code=code,
            players=players,
            tokens=initialize_tokens(),
            status=status,
        )

    return _make


@pytest.fixture
def two_player_match(make_match) -> MatchState:
    """Alice (red) and Bob (green), started, Alice to play."""
    return make_match()


@pytest.fixture
def registry() -> MatchRegistry:
    """Fresh registry with a seeded code generator."""
    return MatchRegistry(rng=random.Random(7))


@pytest.fixture
def game_loop(registry) -> GameLoop:
    return GameLoop(registry)
