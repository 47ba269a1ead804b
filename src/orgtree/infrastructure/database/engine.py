"""Database engine setup for SQLite with WAL mode.

SQLite backs the default resource store: WAL mode for concurrent readers,
ACID transactions so a reconciliation's inserts land whole or not at all.

SQLAlchemy Core (not ORM) is used because records cross into the domain
as pydantic models; there is no benefit from an identity map.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event, insert, select
from sqlalchemy.engine import Engine

from orgtree.infrastructure.database.counters import ID_PREFIXES
from orgtree.infrastructure.database.schema import id_counters, metadata


def create_db_engine(db_path: Path) -> Engine:
    """Create a SQLite engine with WAL mode and foreign keys enabled."""
    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def init_database(db_path: Path) -> Engine:
    """Initialize the orgtree database at *db_path*.

    Creates the parent directory, all tables from :data:`schema.metadata`,
    and seeds the ``id_counters`` table for every record prefix.

    Idempotent, safe to call on an existing database.

    Returns the engine ready for use.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(db_path)
    metadata.create_all(engine)
    _seed_counters(engine)
    return engine


def _seed_counters(engine: Engine) -> None:
    """Insert initial counter rows for each ID prefix if they don't exist."""
    with engine.begin() as conn:
        for prefix in ID_PREFIXES:
            row = conn.execute(
                select(id_counters.c.type_prefix).where(id_counters.c.type_prefix == prefix)
            ).first()
            if row is None:
                conn.execute(insert(id_counters).values(type_prefix=prefix, next_value=1))
