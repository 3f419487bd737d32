"""
db.engine - Engine bootstrap and session factory.

Designed so the connection string can be swapped between SQLite and
MySQL by changing config.DB_URL; no other code needs to change.
Tables are NOT created here: schema creation is an explicit bootstrap
step owned by services.schema_gateway.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

_engine: Engine | None = None
_schema: Optional[str] = None
_SessionLocal: sessionmaker | None = None


def init_db(db_url: str, schema: Optional[str] = None) -> None:
    """Create the engine, apply SQLite pragmas, bind the session factory."""
    global _engine, _schema, _SessionLocal

    _engine = create_engine(db_url, echo=False, future=True)
    _schema = schema

    if db_url.startswith("sqlite"):
        @event.listens_for(_engine, "connect")
        def _sqlite_pragmas(dbapi_conn, _rec):
            # Let SQLAlchemy emit BEGIN itself so SAVEPOINTs nest properly
            dbapi_conn.isolation_level = None
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA journal_mode=WAL")
            cur.execute("PRAGMA foreign_keys=ON")
            cur.execute("PRAGMA synchronous=NORMAL")
            cur.close()

        @event.listens_for(_engine, "begin")
        def _sqlite_begin(conn):
            conn.exec_driver_sql("BEGIN")

    _SessionLocal = sessionmaker(bind=get_engine(), expire_on_commit=False)


def get_engine() -> Engine:
    """Return the engine with the configured schema name applied to every table."""
    if _engine is None:
        raise RuntimeError("Database not initialised - call init_db() first")
    if _schema:
        return _engine.execution_options(schema_translate_map={None: _schema})
    return _engine


def get_schema() -> Optional[str]:
    return _schema


def get_session() -> Session:
    """Return a new session.  Caller is responsible for .close()."""
    if _SessionLocal is None:
        raise RuntimeError("Database not initialised - call init_db() first")
    return _SessionLocal()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    One session for one unit of work: commit on success, roll back on
    any exception, always close.
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def dispose_db() -> None:
    """Drop the engine and its pooled connections (used between tests)."""
    global _engine, _schema, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _schema = None
    _SessionLocal = None
