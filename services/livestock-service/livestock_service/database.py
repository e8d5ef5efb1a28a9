"""
Database configuration and connection management.

Engine and session factory are built from environment-driven settings.
"""

import logging
import time
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import settings
from .models import Base

logger = logging.getLogger(__name__)


def _safe_url(db_url: str) -> str:
    """Strip credentials from a database URL for logging."""
    if "@" in db_url:
        return db_url.split("://")[0] + "://...@" + db_url.split("@", 1)[1]
    return db_url


def get_connect_args(db_url: str) -> dict:
    """
    Get database-specific connection arguments.

    Args:
        db_url: Database connection URL

    Returns:
        Connection arguments dict
    """
    if db_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


def create_db_engine(db_url: str) -> Engine:
    """
    Create an engine with pooling tuned from settings.

    SQLite keeps SQLAlchemy's default pool since it does not accept pool sizing.
    """
    options: dict = {
        "connect_args": get_connect_args(db_url),
        "pool_pre_ping": settings.DB_POOL_PRE_PING,
        "echo": False,
    }
    if not db_url.startswith("sqlite"):
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )

    logger.info(f"Using database: {_safe_url(db_url)}")
    return create_engine(db_url, **options)


@event.listens_for(Engine, "before_cursor_execute")
def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    """Track query start time."""
    conn.info.setdefault("query_start_time", []).append(time.time())


@event.listens_for(Engine, "after_cursor_execute")
def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    """Log slow queries."""
    total_time_ms = (time.time() - conn.info["query_start_time"].pop()) * 1000

    if total_time_ms > settings.QUERY_LOG_THRESHOLD_MS:
        logger.warning(
            f"Slow query detected: {total_time_ms:.2f}ms",
            extra={
                "query_time_ms": total_time_ms,
                "statement": statement[:200],
            },
        )


engine = create_db_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """
    Create tables that do not exist yet.

    Production schemas are managed by the alembic migrations; this only
    bootstraps local development databases.
    """
    try:
        logger.info("Initializing database tables...")
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


def get_db() -> Generator[Session, None, None]:
    """
    Get database session for dependency injection.

    Yields:
        SQLAlchemy database session, closed after the request
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ping(db: Session) -> bool:
    """Return True when the database answers a trivial query."""
    db.execute(text("SELECT 1"))
    return True
