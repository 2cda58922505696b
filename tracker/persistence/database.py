"""Engine and session lifecycle for the application store.

The store is either a local SQLite file (default, and what tests use) or
the hosted tracker's Postgres database. Everything outside this module goes
through ``get_session()``.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tracker.logging import get_logger

from .exceptions import DatabaseConnectionError

_engine: Engine | None = None
_session_factory: sessionmaker | None = None

logger = get_logger(__name__, component="database")


def init_database(database_url: str) -> None:
    """Create the engine, validate connectivity and create the schema.

    Call once at startup. Calling again replaces the current engine.

    Args:
        database_url: SQLAlchemy URL (e.g. "sqlite:///./data/tracker.db").
            Hosted ``postgres://`` URLs are accepted as ``postgresql://``.

    Raises:
        DatabaseConnectionError: If the URL is invalid or the database is unreachable
    """
    global _engine, _session_factory

    url = _parse_url(database_url)
    redacted = _redact_url(database_url)

    logger.info(
        "Initializing database",
        extra={"event": "database.initializing", "database_url": redacted},
    )

    if _engine is not None:
        _engine.dispose()
        _engine, _session_factory = None, None

    try:
        if _is_sqlite_file(url):
            _ensure_parent_directory(Path(url.database))

        engine = create_engine(url, echo=False, future=True, **_engine_options(url))
        if url.get_backend_name() == "sqlite":
            _configure_sqlite(engine, in_memory=not _is_sqlite_file(url))

        _validate_connection(engine)

        from .schema import create_schema

        create_schema(engine)
    except DatabaseConnectionError:
        raise
    except Exception as e:
        logger.error(
            f"Failed to initialize database: {e}",
            extra={"event": "database.init.failed", "error_type": type(e).__name__},
            exc_info=True,
        )
        raise DatabaseConnectionError(f"Failed to initialize database: {e}") from e

    _engine = engine
    _session_factory = sessionmaker(bind=engine, expire_on_commit=False, future=True)

    logger.info(
        "Database ready",
        extra={
            "event": "database.initialised",
            "database_url": redacted,
            "backend": url.get_backend_name(),
        },
    )


def _parse_url(database_url: str) -> URL:
    if not database_url or not isinstance(database_url, str):
        raise DatabaseConnectionError("Database URL must be a non-empty string")

    try:
        url = make_url(database_url)
    except ArgumentError as e:
        raise DatabaseConnectionError(f"Invalid database URL: {e}") from e

    if url.drivername == "postgres":
        url = url.set(drivername="postgresql")
    return url


def _is_sqlite_file(url: URL) -> bool:
    return url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:")


def _ensure_parent_directory(db_file: Path) -> None:
    if not db_file.parent.exists():
        logger.info(
            f"Creating database directory: {db_file.parent}",
            extra={"event": "database.directory.created"},
        )
        db_file.parent.mkdir(parents=True, exist_ok=True)


def _engine_options(url: URL) -> Dict[str, Any]:
    """Pool and driver options per backend."""
    if url.get_backend_name() != "sqlite":
        return {"pool_pre_ping": True}

    # Flask request threads and the scheduler thread share the engine
    options: Dict[str, Any] = {"connect_args": {"check_same_thread": False, "timeout": 30}}
    if not _is_sqlite_file(url):
        # One shared connection, otherwise every thread sees an empty database
        options["poolclass"] = StaticPool
    return options


def _configure_sqlite(engine: Engine, in_memory: bool) -> None:
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if not in_memory:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()


def _validate_connection(engine: Engine) -> None:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).scalar()
    except Exception as e:
        raise DatabaseConnectionError(f"Failed to validate database connection: {e}") from e


def _redact_url(database_url: str) -> str:
    """Render a URL for logs with the password masked."""
    try:
        return make_url(database_url).render_as_string(hide_password=True)
    except ArgumentError:
        return "<invalid url>"


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Provide a session that commits on success and rolls back on error.

    Raises:
        DatabaseConnectionError: If the database has not been initialized

    Example:
        >>> with get_session() as session:
        ...     ApplicationRepository(session).count_for_actor("user-1")
    """
    if _session_factory is None:
        raise DatabaseConnectionError(
            "Database not initialized. Call init_database() before using get_session()"
        )

    session = _session_factory()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.warning(
            f"Database session rolled back: {e}",
            extra={"event": "database.session.rolled_back", "error_type": type(e).__name__},
        )
        raise
    finally:
        session.close()


def get_engine() -> Engine:
    """Return the active engine.

    Raises:
        DatabaseConnectionError: If the database has not been initialized
    """
    if _engine is None:
        raise DatabaseConnectionError(
            "Database not initialized. Call init_database() before using get_engine()"
        )
    return _engine


def close_database() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _session_factory

    if _engine is None:
        return

    _engine.dispose()
    _engine, _session_factory = None, None
    logger.info("Database connections closed", extra={"event": "database.closed"})
