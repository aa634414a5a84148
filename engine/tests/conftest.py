"""Shared pytest fixtures."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker

from rematch.app import create_app
from rematch.db import Base, get_db
from rematch.services.failure_log import failure_log
import rematch.models  # noqa: F401 — register tables on Base.metadata


@pytest.fixture()
def db_engine():
    """In-memory SQLite engine with all tables."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(db_engine):
    return sessionmaker(bind=db_engine)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def client(db_session):
    """TestClient with the DB dependency pointed at the in-memory database."""
    app = create_app()

    def override():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override
    failure_log.clear()
    yield TestClient(app)
    app.dependency_overrides.clear()
    failure_log.clear()
