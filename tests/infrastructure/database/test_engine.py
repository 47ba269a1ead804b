"""Tests for database initialization."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import inspect, select, text

from orgtree.infrastructure.database.engine import init_database
from orgtree.infrastructure.database.schema import id_counters


class TestInitDatabase:
    def test_creates_parent_directory_and_tables(self, tmp_path: Path) -> None:
        db_path = tmp_path / ".orgtree" / "orgtree.db"
        engine = init_database(db_path)
        try:
            assert db_path.exists()
            tables = set(inspect(engine).get_table_names())
            assert {"designations", "departments", "employees", "id_counters"} <= tables
        finally:
            engine.dispose()

    def test_wal_mode(self, tmp_path: Path) -> None:
        engine = init_database(tmp_path / "orgtree.db")
        try:
            with engine.connect() as conn:
                assert conn.execute(text("PRAGMA journal_mode")).scalar() == "wal"
        finally:
            engine.dispose()

    def test_idempotent(self, tmp_path: Path) -> None:
        db_path = tmp_path / "orgtree.db"
        init_database(db_path).dispose()
        engine = init_database(db_path)
        try:
            with engine.connect() as conn:
                prefixes = conn.execute(select(id_counters.c.type_prefix)).scalars().all()
            assert sorted(prefixes) == ["DEP-", "DSG-", "EMP-"]
        finally:
            engine.dispose()
