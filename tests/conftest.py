"""
Pytest fixtures for role allocator tests.
"""

import random

import pytest
from typing import Any, Dict, List, Tuple

from mafia_allocator.core import AssignmentEngine, GameSession
from mafia_allocator.config.game_config import GameConfig
from mafia_allocator.web import EventEmitter


FIVE_PLAYERS = ["A", "B", "C", "D", "E"]


@pytest.fixture
def game_config():
    """Test configuration."""
    return GameConfig(
        random_seed=1234,
        use_announcements=False  # Disable for cleaner test output
    )


@pytest.fixture
def seeded_rng():
    """Deterministic random source."""
    return random.Random(1234)


@pytest.fixture
def engine(seeded_rng):
    """Assignment engine driven by a seeded generator."""
    return AssignmentEngine(seeded_rng)


@pytest.fixture
def recorded_events() -> List[Tuple[str, Dict[str, Any]]]:
    """Events captured by the event_emitter fixture."""
    return []


@pytest.fixture
def event_emitter(recorded_events):
    """Event emitter that records every event in memory."""
    emitter = EventEmitter()
    emitter.register_listener(lambda event_type, data: recorded_events.append((event_type, data)))
    return emitter


@pytest.fixture
def session(game_config, engine, event_emitter):
    """A fresh session in the input stage."""
    return GameSession(game_config, engine=engine, event_emitter=event_emitter)


@pytest.fixture
def allocated_session(session):
    """Session with five players and two Mafia allocated."""
    session.allocate(FIVE_PLAYERS, 2)
    return session


def scripted_input(answers: List[str]):
    """Build an input() replacement that replays `answers`, then signals EOF."""
    remaining = iter(answers)

    def _input(prompt: str) -> str:
        try:
            return next(remaining)
        except StopIteration:
            raise EOFError(prompt)

    return _input
