"""SQLite database engine, schema, and ID counters via SQLAlchemy Core."""

from orgtree.infrastructure.database.counters import next_sequential_id
from orgtree.infrastructure.database.engine import create_db_engine, init_database
from orgtree.infrastructure.database.schema import (
    departments,
    designations,
    employees,
    id_counters,
    metadata,
)

__all__ = [
    "create_db_engine",
    "departments",
    "designations",
    "employees",
    "id_counters",
    "init_database",
    "metadata",
    "next_sequential_id",
]
