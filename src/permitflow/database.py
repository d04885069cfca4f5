"""Database session factory and transaction helpers.

The engine and session factory are built from Settings; components never
create sessions themselves but receive one from the host (FastAPI dependency
or a script) and run each public operation inside unit_of_work().
"""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from .config import get_settings
from .observability.metrics import discard_pending_counts, publish_pending_counts


def build_engine(database_url: Optional[str] = None, **kwargs) -> Engine:
    """Create an engine for the configured database.

    Pool settings only apply to PostgreSQL; SQLite engines get foreign keys
    and SAVEPOINT-correct transaction handling via configure_sqlite().
    """
    url = database_url or get_settings().DATABASE_URL

    engine_kwargs = {
        "pool_pre_ping": True,  # Verify connections before using
        "echo": False,
    }
    if not url.startswith("sqlite"):
        engine_kwargs["pool_size"] = 5
        engine_kwargs["max_overflow"] = 10
    engine_kwargs.update(kwargs)

    engine = create_engine(url, **engine_kwargs)
    if url.startswith("sqlite"):
        configure_sqlite(engine)
    return engine


def configure_sqlite(engine: Engine) -> None:
    """Enable foreign keys and let SQLAlchemy own BEGIN on pysqlite.

    pysqlite defers BEGIN on its own, which breaks SAVEPOINT semantics used
    by the conflict-retry paths; this is the recipe from the SQLAlchemy docs.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def get_session_factory() -> sessionmaker:
    """Lazily build the process-wide session factory."""
    global _engine, _session_factory

    if _session_factory is None:
        _engine = build_engine()
        _session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=_engine,
        )
    return _session_factory


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """Context manager for database sessions.

    Usage:
        with get_db_session() as session:
            session.query(PermitPackage).all()

    Automatically commits on success, rolls back on exception.
    """
    session = get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    """Dependency for FastAPI endpoints.

    Usage:
        @app.get("/permits")
        def list_permits(db: Session = Depends(get_db)):
            return db.query(PermitPackage).all()
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(session: Session) -> Generator[Session, None, None]:
    """Run a block as one transaction on an existing session.

    A state mutation and the activity entries describing it are written
    inside the same block, so they commit together or roll back together.
    Metric increments queued during the block are applied only after the
    commit succeeds.
    """
    try:
        yield session
        session.commit()
    except Exception:
        discard_pending_counts(session)
        session.rollback()
        raise
    publish_pending_counts(session)
