"""
Shared pytest fixtures for all tests.

Provides a throwaway database, sessions, typed operations and an HTTP test
client bound to the same database.
"""

import os
import tempfile
from pathlib import Path

import pytest
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from starlette.testclient import TestClient

from lms_calendar.api import create_app
from lms_calendar.database import Base, EventRetrievalOperations, create_event


env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    try:
        load_dotenv(env_path)
    except (OSError, IOError):
        pass


@pytest.fixture
def db_engine():
    """
    Engine for a fresh test database.

    Uses TEST_DATABASE_URL when set, otherwise a temporary SQLite file.
    """
    db_url = os.environ.get("TEST_DATABASE_URL")
    db_fd, db_path = None, None
    if not db_url:
        db_fd, db_path = tempfile.mkstemp(suffix=".db")
        db_url = f"sqlite:///{db_path}"

    engine = create_engine(db_url, echo=False)
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()
    if db_path is not None:
        os.close(db_fd)
        os.unlink(db_path)


@pytest.fixture
def session(db_engine) -> Session:
    """SQLAlchemy session on the test database."""
    SessionLocal = sessionmaker(bind=db_engine)
    session = SessionLocal()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def ops(session) -> EventRetrievalOperations:
    return EventRetrievalOperations(session)


@pytest.fixture
def add_event(session):
    """Insert an event with sensible defaults, returning the ORM instance."""
    counter = {"n": 0}

    def _add_event(**fields):
        counter["n"] += 1
        fields.setdefault("name", f"Event {counter['n']}")
        fields.setdefault("timestart", 1_700_000_000 + counter["n"] * 3600)
        return create_event(session, **fields)

    return _add_event


@pytest.fixture
def client(db_engine):
    """Starlette TestClient for the calendar application."""
    app = create_app(engine=db_engine)
    return TestClient(app)
