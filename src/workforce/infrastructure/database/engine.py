"""Database engine setup for SQLite with WAL mode.

SQLite is the persistence layer: WAL mode for concurrent reads and
ACID transactions for data integrity. The DB is stored at
``{root}/.workforce/{db_name}``.

Every transaction opens with ``BEGIN IMMEDIATE`` so writers take the
database write lock up front. Two use-cases touching the same aggregate
or ledger row are therefore serialised, and a load-check-save sequence
inside one transaction cannot interleave with another writer.
SQLite has no row-level locks, so this write lock covers the whole
database: writers on unrelated aggregates also queue behind each other,
bounded by ``busy_timeout``. Repositories still check row versions, and
ledger reads use ``FOR UPDATE`` so a server database would lock per row.

SQLAlchemy Core (not ORM) is used: aggregates are mapped by hand in the
repositories, so sessions and identity maps add nothing.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from workforce.infrastructure.database.schema import metadata

DATA_DIR = ".workforce"
DEFAULT_DB_NAME = "workforce.db"


def create_db_engine(db_path: Path, *, busy_timeout: float = 30.0) -> Engine:
    """Create a SQLite engine with WAL mode, foreign keys, and immediate transactions."""
    engine = create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"timeout": busy_timeout, "check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        # Hand transaction control to the "begin" listener below.
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def init_database(root: Path, db_name: str = DEFAULT_DB_NAME, **engine_kwargs: Any) -> Engine:
    """Initialize the database at ``{root}/.workforce/{db_name}``.

    Creates the data directory and all tables from :data:`schema.metadata`.
    Idempotent — safe to call on an existing store.

    Returns the engine ready for use.
    """
    data_dir = root / DATA_DIR
    data_dir.mkdir(parents=True, exist_ok=True)
    (data_dir / "plugins").mkdir(exist_ok=True)

    engine = create_db_engine(data_dir / db_name, **engine_kwargs)
    metadata.create_all(engine)
    return engine
