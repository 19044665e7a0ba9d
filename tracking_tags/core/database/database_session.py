"""
Standardized database session management.

Provides a consistent, thread-safe approach to database session management
for the generation services and the API.
"""

import logging
import os
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.exc import DisconnectionError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, scoped_session, sessionmaker

from tracking_tags.core.database.db_config import DatabaseConfig

logger = logging.getLogger(__name__)

# Module-level globals for lazy initialization
_engine: Engine | None = None
_session_factory = None
_scoped_session = None


def _create_engine_from_config() -> Engine:
    connection_string = DatabaseConfig.get_connection_string()

    if connection_string.startswith("sqlite"):
        logger.info("SQLite database configured - intended for local runs and tests only")
        return create_engine(connection_string, echo=False)

    query_timeout = int(os.environ.get("DATABASE_QUERY_TIMEOUT", "30"))
    connect_timeout = int(os.environ.get("DATABASE_CONNECT_TIMEOUT", "10"))
    pool_timeout = int(os.environ.get("DATABASE_POOL_TIMEOUT", "30"))

    engine = create_engine(
        connection_string,
        pool_size=10,
        max_overflow=20,
        pool_timeout=pool_timeout,
        pool_recycle=3600,
        pool_pre_ping=True,
        echo=False,
        connect_args={"connect_timeout": connect_timeout},
    )

    @event.listens_for(engine, "connect")
    def set_statement_timeout(dbapi_conn, connection_record):
        """Set statement_timeout on new connections."""
        cursor = dbapi_conn.cursor()
        cursor.execute(f"SET statement_timeout = '{query_timeout * 1000}'")
        cursor.close()

    return engine


def set_engine(engine: Engine) -> None:
    """Install an externally created engine (tests, scripts)."""
    global _engine, _session_factory, _scoped_session

    reset_engine()
    _engine = engine
    _session_factory = sessionmaker(bind=_engine)
    _scoped_session = scoped_session(_session_factory)


def get_engine() -> Engine:
    """Get or create the database engine (lazy initialization)."""
    global _engine, _session_factory, _scoped_session

    if _engine is None:
        _engine = _create_engine_from_config()
        _session_factory = sessionmaker(bind=_engine)
        _scoped_session = scoped_session(_session_factory)

    return _engine


def reset_engine():
    """Reset engine for testing - closes existing connections and clears global state."""
    global _engine, _session_factory, _scoped_session

    if _scoped_session is not None:
        _scoped_session.remove()
        _scoped_session = None

    if _engine is not None:
        _engine.dispose()
        _engine = None

    _session_factory = None


def get_scoped_session():
    """Get the scoped session factory (lazy initialization)."""
    get_engine()
    return _scoped_session


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Context manager for database sessions with automatic cleanup.

    Usage:
        with get_db_session() as session:
            stmt = select(Model).filter_by(...)
            result = session.scalars(stmt).first()
            session.add(new_object)
            session.commit()  # Explicit commit needed

    The session will automatically rollback on exception and
    always be properly closed.
    """
    scoped = get_scoped_session()
    session = scoped()
    try:
        yield session
    except (OperationalError, DisconnectionError) as e:
        logger.error(f"Database connection error: {e}")
        session.rollback()
        # Remove session from registry to force reconnection
        scoped.remove()
        raise
    except SQLAlchemyError as e:
        logger.error(f"Database error: {e}")
        session.rollback()
        raise
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
        scoped.remove()
