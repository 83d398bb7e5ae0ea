"""
SQLAlchemy database engine and session management.

Provides:
- Database engine creation
- Session factory (SessionLocal)
- FastAPI dependency for database sessions (get_db)
- Table creation on startup (init_db)
"""

from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from .config import settings


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the given URL.

    SQLite connections are shared across threads (FastAPI runs sync work in a
    threadpool), and an in-memory SQLite database is pinned to a single
    connection so every session sees the same tables.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)

    return create_engine(
        url,
        pool_pre_ping=True,  # Verify connections before using
        echo=echo,
    )


def create_session_factory(bind: Engine) -> sessionmaker:
    """Session factory for an engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


# Create SQLAlchemy engine
engine = create_db_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)

# Create session factory
SessionLocal = create_session_factory(engine)


def init_db(bind: Engine = engine) -> None:
    """Create all tables that do not exist yet."""
    # Import models so they are registered with Base
    from roomboard.models import Base

    Base.metadata.create_all(bind=bind)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a session from the app's session factory.

    Usage in FastAPI routes:
        @router.get("/items")
        def read_items(db: Session = Depends(get_db)):
            ...
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
