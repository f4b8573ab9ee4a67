"""
Database connection management for the Startup Tracker.

Provides engine and session management using SQLAlchemy. SQLite is used for
local development and tests, PostgreSQL in deployment.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker

from ..config import DatabaseConfig, get_config

logger = logging.getLogger(__name__)

# Global engine and session factory
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def get_database_url(config: Optional[DatabaseConfig] = None) -> str:
    """Get database URL from settings."""
    if config is None:
        config = get_config().database
    return config.url


def create_database_engine(config: Optional[DatabaseConfig] = None) -> Engine:
    """Create and configure the database engine."""
    if config is None:
        config = get_config().database
    database_url = get_database_url(config)

    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            echo=config.echo,
            connect_args={"check_same_thread": False},
        )

        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            """Set SQLite pragmas for better concurrency."""
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()

        return engine

    return create_engine(
        database_url,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_pre_ping=True,  # Validate connections before use
        pool_recycle=3600,  # Recycle connections after 1 hour
        echo=config.echo,
    )


def get_engine() -> Engine:
    """Get the database engine, creating it if necessary."""
    global _engine
    if _engine is None:
        _engine = create_database_engine()
        logger.info("Database engine created")
    return _engine


def create_session_factory(engine: Optional[Engine] = None) -> sessionmaker:
    """Create session factory with engine."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine or get_engine(),
        expire_on_commit=False
    )


def get_session_factory() -> sessionmaker:
    """Get the session factory, creating it if necessary."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = create_session_factory()
        logger.info("Database session factory created")
    return _SessionLocal


@contextmanager
def get_db(session_factory: Optional[sessionmaker] = None) -> Generator[Session, None, None]:
    """Context manager for database sessions with automatic commit/rollback."""
    session = (session_factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Optional[Engine] = None) -> None:
    """Create all tables that do not exist yet."""
    from .models import Base

    Base.metadata.create_all(bind=engine or get_engine())
    logger.info("Database tables ensured")


def check_database_connection(session_factory: Optional[sessionmaker] = None) -> bool:
    """Run a trivial query and report whether the database answered."""
    try:
        with get_db(session_factory) as session:
            session.execute(text("SELECT 1"))
            return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False
