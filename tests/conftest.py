import random

import pytest

from config import TestConfig
from game import GameSession
from segments import parse_segment
from state import AI, GameRules, Player, Throw


@pytest.fixture
def alice() -> Player:
    return Player(id="a", name="Alice")


@pytest.fixture
def bob() -> Player:
    return Player(id="b", name="Bob")


@pytest.fixture
def bot() -> Player:
    return Player(id="bot", name="Bot", kind=AI, difficulty=7)


@pytest.fixture
def rules_501() -> GameRules:
    return GameRules(game_type="501", double_out=True)


@pytest.fixture
def rules_cricket() -> GameRules:
    return GameRules(game_type="cricket")


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def session() -> GameSession:
    return GameSession()


@pytest.fixture
def throw_labels():
    """Record chart labels ("T20", "D16", None for a miss) for a player in a session."""

    def _throw(session: GameSession, player_id: str, *labels):
        outcome = None
        for label in labels:
            segment = parse_segment(label) if label else None
            outcome = session.record_throw(Throw(segment=segment, player_id=player_id))
        return outcome

    return _throw


@pytest.fixture
def app():
    from app import create_app

    return create_app(TestConfig)


@pytest.fixture
def client(app):
    return app.test_client()
