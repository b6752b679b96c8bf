"""Database engine and session configuration."""

from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from proflow.config import get_settings

settings = get_settings()


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine with options suited to the backend.

    An in-memory SQLite database lives on a single shared connection so that
    every session of the store sees the same documents.

    Args:
        database_url: SQLAlchemy database URL.
        echo: Log emitted SQL.

    Returns:
        Engine: Configured engine.
    """
    engine_kwargs = {"echo": echo}

    # SQLite doesn't support pool_size/max_overflow
    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url:
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs.update(pool_pre_ping=True, pool_size=5, max_overflow=10)

    return create_engine(database_url, **engine_kwargs)


engine = build_engine(settings.database_url, echo=settings.debug)

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def get_db() -> Generator[Session, None, None]:
    """Get database session.

    Yields:
        Session: SQLAlchemy session.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope(session_factory: sessionmaker = SessionLocal) -> Iterator[Session]:
    """Open a session for one unit of work.

    The session is rolled back if the block raises and is always closed.
    Committing is left to the caller.
    """
    db = session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Create the work item and preference tables if they don't exist."""
    from proflow.db.models import Base

    Base.metadata.create_all(bind=bind or engine)
