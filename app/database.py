"""Database engine and session management for Streamline."""

from collections.abc import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from app.config import get_settings


def build_engine(url: str, echo: bool = False, **kwargs) -> Engine:
    """Create an engine for ``url``. SQLite connections enforce foreign keys."""
    is_sqlite = url.startswith("sqlite")
    engine = create_engine(
        url,
        echo=echo,
        connect_args={"check_same_thread": False} if is_sqlite else {},
        **kwargs,
    )
    if is_sqlite:
        # subscription, video and watch_history rows must point at real users
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


settings = get_settings()
engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class Base(DeclarativeBase):
    """Base class for all Streamline models."""

    pass


def get_db() -> Generator[Session, None, None]:
    """Yield a database session, closed when the request finishes."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
