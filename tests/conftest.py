"""
Pytest will auto-discover / import this file called 'conftest.py'.
Fixtures shared by the persistence and service tests: an in-memory blind move database and a repository on top of it.
"""

from typing import Generator
from uuid import UUID, uuid4

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.db.schema import Base
from src.db.sql_repository import SQLBlindMoveRepository

# In-memory SQLite: StaticPool keeps the one connection (and so the tables) alive for the whole test
TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Fresh blind_moves table per test: dropped again at teardown."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def repository(db_session_repo: Session) -> SQLBlindMoveRepository:
    return SQLBlindMoveRepository(db_session_repo)


@pytest.fixture
def game_id() -> UUID:
    return uuid4()
