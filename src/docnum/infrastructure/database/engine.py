"""Database engine setup for SQLite with WAL mode.

SQLite is the default persistence layer: WAL mode so readers never block
the writer, ACID transactions so a counter advance and its used-number
entry commit together. The DB is stored at {root}/.docnum/docnum.db.

Transactions are started by an explicit ``BEGIN`` from a ``begin`` event
listener instead of by the sqlite3 driver. A connection carrying the
``sqlite_begin="IMMEDIATE"`` execution option takes the database write lock
before its first read, which serializes read-modify-write sequences across
processes sharing one file.

SQLAlchemy Core (not ORM) is used because the engine only ever reads and
writes whole JSON documents by key.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine

from docnum.config.discovery import STATE_DIRNAME
from docnum.infrastructure.database.schema import metadata

DEFAULT_DB_FILENAME = "docnum.db"


def create_db_engine(db_path: Path) -> Engine:
    """Create a SQLite engine with WAL mode and a busy timeout."""
    engine = create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        # Let the begin listener below own transaction start.
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin(conn: Connection) -> None:
        mode = conn.get_execution_options().get("sqlite_begin", "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")

    return engine


def init_database(root: Path, *, db_filename: str = DEFAULT_DB_FILENAME) -> Engine:
    """Initialize the docnum database at ``{root}/.docnum/{db_filename}``.

    Creates the ``.docnum/`` directory and all tables from
    :data:`schema.metadata`. Idempotent — safe to call on an existing root.

    Returns the engine ready for use.
    """
    state_dir = root / STATE_DIRNAME
    state_dir.mkdir(parents=True, exist_ok=True)

    engine = create_db_engine(state_dir / db_filename)
    metadata.create_all(engine)
    return engine
