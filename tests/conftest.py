"""Shared test fixtures."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.core.session import Catalogs, GameSession
from src.db.database import get_db
from src.db.models import Base
from src.main import app, build_game_service

DATA_DIR = Path("src/data")

TEST_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSession = sessionmaker(bind=TEST_ENGINE, autocommit=False, autoflush=False)
Base.metadata.create_all(bind=TEST_ENGINE)


def _override_get_db():
    db = TestSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture()
def catalogs() -> Catalogs:
    """src/data의 실제 카탈로그"""
    return Catalogs.load(DATA_DIR)


@pytest.fixture()
def game_session(catalogs: Catalogs) -> GameSession:
    """town_start에서 시작하는 새 세션"""
    return GameSession("test_session", catalogs)


@pytest.fixture()
def client() -> TestClient:
    """FastAPI TestClient wired to an in-memory SQLite database."""
    app.state.game_service = build_game_service(str(DATA_DIR))
    yield TestClient(app)
    app.state.game_service = None


@pytest.fixture()
def db_session() -> Session:
    """Raw database session for direct DB assertions."""
    session = TestSession()
    try:
        yield session
    finally:
        session.close()
