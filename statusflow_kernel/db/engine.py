"""
Module: statusflow_kernel.db.engine
Responsibility: The one place the process connects to its database.  Holds
    the module-level engine and session factory, and offers
    ``session_scope()`` for commit-or-rollback units of work.
Architecture position: Kernel > DB.  Imports only db/base.py and, lazily,
    the models package so that create_tables/drop_tables see every table.

Dialects:
    - PostgreSQL (production): QueuePool with pre-ping, READ COMMITTED.
      Concurrent transitions on one project are settled by the project
      version column, not by isolation level.
    - SQLite (tests, local runs): foreign keys switched on per connection.
      In-memory URLs use a StaticPool so every session shares one database.

Failure modes:
    - RuntimeError from get_engine/get_session before init_engine_from_url().
"""

import atexit
from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from statusflow_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_MEMORY_SQLITE_URLS = frozenset({"sqlite://", "sqlite:///:memory:"})

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None


def _sqlite_foreign_keys_on(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _sqlite_engine(database_url: str, echo: bool) -> Engine:
    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if database_url in _MEMORY_SQLITE_URLS or "mode=memory" in database_url:
        options["poolclass"] = StaticPool
    engine = create_engine(database_url, echo=echo, **options)
    event.listen(engine, "connect", _sqlite_foreign_keys_on)
    return engine


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 20,
    max_overflow: int = 10,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Create the engine and session factory for ``database_url``.

    A second call replaces the first.  Pool settings apply to server
    databases only.
    """
    global _engine, _SessionFactory

    if database_url.startswith("sqlite"):
        _engine = _sqlite_engine(database_url, echo)
    else:
        _engine = create_engine(
            database_url,
            echo=echo,
            poolclass=QueuePool,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_timeout=pool_timeout,
            pool_recycle=pool_recycle,
            isolation_level="READ COMMITTED",
        )
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info("engine_initialized", extra={"dialect": _engine.dialect.name, "echo": echo})
    return _engine


def _not_initialized() -> RuntimeError:
    return RuntimeError("Engine not initialized. Call init_engine_from_url() first.")


def get_engine() -> Engine:
    if _engine is None:
        raise _not_initialized()
    return _engine


def get_session() -> Session:
    """A new session from the configured factory."""
    if _SessionFactory is None:
        raise _not_initialized()
    return _SessionFactory()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    One unit of work: commit on normal exit, roll back and re-raise on error.

        with session_scope() as session:
            WorkflowExecutor(session).execute_transition(project_id, transition_id, actor_id)

    A project's new status and its history entry therefore land together
    or not at all.
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    from statusflow_kernel.db.base import Base
    import statusflow_kernel.models  # noqa: F401  (registers every table)

    Base.metadata.create_all(get_engine())


def drop_tables() -> None:
    """Drop every table.  Tests only."""
    from statusflow_kernel.db.base import Base
    import statusflow_kernel.models  # noqa: F401

    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _SessionFactory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None


def is_postgres() -> bool:
    return _engine is not None and _engine.dialect.name == "postgresql"


atexit.register(reset_engine)
