"""Database engine, session factory, and base model."""

from __future__ import annotations

from typing import Callable, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .config import settings
from .exceptions import ConfigurationError


def _make_engine(url: str) -> Engine:
    engine_kwargs: dict = {"echo": settings.debug}
    if url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        # Postgres connection pool settings
        engine_kwargs["pool_size"] = 5
        engine_kwargs["max_overflow"] = 10
        engine_kwargs["pool_pre_ping"] = True
    return create_engine(url, **engine_kwargs)


_db_url = settings.effective_database_url

engine: Optional[Engine] = _make_engine(_db_url) if _db_url else None

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all Rematch models."""
    pass


def is_configured() -> bool:
    """True when a database URL is available to connect to."""
    return engine is not None


def get_session_factory() -> Optional[Callable[[], Session]]:
    """Return the session factory, or None when the database is not configured."""
    return SessionLocal if is_configured() else None


def get_db():
    """FastAPI dependency — yields a DB session, auto-closes."""
    if not is_configured():
        raise ConfigurationError(
            "Database is not configured. Set REMATCH_DATABASE_URL or enable REMATCH_LOCAL_DATABASE."
        )
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create all tables when the database is configured."""
    if engine is None:
        return
    from . import models  # noqa: F401 — register models on Base.metadata
    Base.metadata.create_all(bind=engine)
