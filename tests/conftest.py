"""Shared pytest fixtures for hoopstats tests."""
import os
import sys
from pathlib import Path
from typing import AsyncGenerator, Callable, Generator, List

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Settings are read at import time, so the test environment is pinned first
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["API_KEY"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_JSON"] = "false"


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create fresh test database session with isolated in-memory database."""
    from hoopstats.models import Base

    # One shared connection so every session sees the same in-memory database
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestSessionLocal = sessionmaker(bind=engine, autoflush=False)
    session = TestSessionLocal()

    yield session

    session.close()
    engine.dispose()


# =============================================================================
# DOMAIN FIXTURES
# =============================================================================

PLAYER_NAMES = [
    ("Maya", "Lopez"),
    ("Jordan", "Reed"),
    ("Ava", "Chen"),
    ("Eli", "Brooks"),
    ("Nia", "Turner"),
    ("Sam", "Patel"),
    ("Leo", "Kim"),
    ("Zoe", "Walker"),
]


@pytest.fixture
def team(db_session: Session):
    """A team with no players."""
    from hoopstats.services.team_service import TeamService

    return TeamService(db_session).create_team(
        name="Riverside Hawks", coach="Dana Ortiz", season="2025-26", league="City U14"
    )


@pytest.fixture
def players(db_session: Session, team) -> List:
    """Eight players on the team."""
    from hoopstats.services.player_service import PlayerService

    service = PlayerService(db_session)
    return [
        service.create_player(team.id, first_name=first, last_name=last)
        for first, last in PLAYER_NAMES
    ]


@pytest.fixture
def player_ids(players) -> List[str]:
    return [p.id for p in players]


@pytest.fixture
def make_game(db_session: Session, team) -> Callable:
    """Factory for not-started games of the team."""
    from hoopstats.services.game_service import GameService

    def _make(opponent: str = "Lakeside Lions", **kwargs):
        return GameService(db_session).create_game(team_id=team.id, opponent=opponent, **kwargs)

    return _make


@pytest.fixture
def game(make_game):
    return make_game()


@pytest.fixture
def live_game(db_session: Session, game, player_ids):
    """
    A game in progress: roster of eight, first five start.

    Bench: player_ids[5:].
    """
    from hoopstats.services.game_service import GameService

    service = GameService(db_session)
    service.set_roster(game.id, player_ids)
    service.set_starting_lineup(game.id, player_ids[:5])
    return service.start_game(game.id)


# =============================================================================
# FASTAPI CLIENT FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
def test_client(db_session):
    """
    Create FastAPI TestClient bound to the test database session.

    Not used as a context manager, so the lifespan (init_db against the
    configured engine) does not run; tables come from db_session.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/api/v1/teams/")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from hoopstats.main import app
    from hoopstats.core.database import get_db

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def async_client(db_session: Session) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for testing FastAPI endpoints."""
    from hoopstats.main import app
    from hoopstats.core.database import get_db

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()
