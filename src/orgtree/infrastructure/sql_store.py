"""SqlResourceStore: the default store, SQLAlchemy Core over SQLite.

Designation creation is idempotent on ``(organization_id, title_key)``:
creating a title that already exists in the organization (in any letter
case) returns the existing record instead of inserting a duplicate. Two
reconciliations racing on the same missing title therefore converge on one
row.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError
from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from orgtree.domain.records import RECORD_TYPES, Entity
from orgtree.domain.titles import title_key
from orgtree.infrastructure.database.counters import next_sequential_id
from orgtree.infrastructure.database.engine import init_database
from orgtree.infrastructure.database.schema import departments, designations, employees
from orgtree.infrastructure.store import RecordNotFoundError, StoreError

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy import Connection, Table
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

_TABLES: dict[Entity, Table] = {
    Entity.DESIGNATION: designations,
    Entity.DEPARTMENT: departments,
    Entity.EMPLOYEE: employees,
}

_PREFIXES: dict[Entity, str] = {
    Entity.DESIGNATION: "DSG-",
    Entity.DEPARTMENT: "DEP-",
    Entity.EMPLOYEE: "EMP-",
}

# Columns that never leave the store.
_INTERNAL_COLUMNS = frozenset({"title_key", "created"})


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class SqlResourceStore:
    """Resource store backed by a SQLite database."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @classmethod
    def open(cls, db_path: Path) -> SqlResourceStore:
        """Initialize (if needed) and open the database at *db_path*."""
        return cls(init_database(db_path))

    @property
    def engine(self) -> Engine:
        return self._engine

    def close(self) -> None:
        self._engine.dispose()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_records(
        self,
        entity: Entity,
        organization_id: str,
        *,
        department_id: str | None = None,
    ) -> list[Any]:
        table = _TABLES[entity]
        stmt = select(table).where(table.c.organization_id == organization_id)
        if department_id is not None and entity != Entity.DEPARTMENT:
            stmt = stmt.where(table.c.department_id == department_id)
        # Insertion order is source order for the tree builder.
        stmt = stmt.order_by(table.c.created, table.c.id)
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as exc:
            raise StoreError(str(exc), entity=entity, operation="list") from exc
        return [self._to_record(entity, row) for row in rows]

    def get_record(self, entity: Entity, record_id: str, organization_id: str) -> Any:
        try:
            with self._engine.connect() as conn:
                row = self._fetch(conn, entity, record_id, organization_id)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc), entity=entity, operation="get") from exc
        return self._to_record(entity, row)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_record(self, entity: Entity, data: BaseModel) -> Any:
        values = data.model_dump()
        organization_id = values.get("organization_id")
        if not organization_id:
            msg = f"{entity} payload requires organization_id"
            raise StoreError(msg, entity=entity, operation="create")

        try:
            with self._engine.begin() as conn:
                if entity == Entity.DESIGNATION:
                    existing = self._find_designation(conn, organization_id, values["title"])
                    if existing is not None:
                        logger.debug("Designation %r already exists", values["title"])
                        return self._to_record(entity, existing)
                    values["title_key"] = title_key(values["title"])
                values["id"] = next_sequential_id(conn, _PREFIXES[entity])
                values["created"] = _now_iso()
                table = _TABLES[entity]
                conn.execute(insert(table).values(**_columns(table, values)))
                row = self._fetch(conn, entity, values["id"], organization_id)
        except IntegrityError as exc:
            if entity == Entity.DESIGNATION:
                # Lost a race with a concurrent writer; theirs is the record.
                return self._existing_after_race(organization_id, values["title"], exc)
            raise StoreError(str(exc), entity=entity, operation="create") from exc
        except SQLAlchemyError as exc:
            raise StoreError(str(exc), entity=entity, operation="create") from exc
        return self._to_record(entity, row)

    def update_record(
        self,
        entity: Entity,
        record_id: str,
        patch: dict[str, Any],
        organization_id: str,
    ) -> Any:
        table = _TABLES[entity]
        values = _columns(table, {k: v for k, v in patch.items() if k not in {"id", "created"}})
        if entity == Entity.DESIGNATION and "title" in values:
            values["title_key"] = title_key(values["title"])
        try:
            with self._engine.begin() as conn:
                self._fetch(conn, entity, record_id, organization_id)
                if values:
                    conn.execute(
                        update(table)
                        .where(table.c.id == record_id, table.c.organization_id == organization_id)
                        .values(**values)
                    )
                row = self._fetch(conn, entity, record_id, organization_id)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc), entity=entity, operation="update") from exc
        return self._to_record(entity, row)

    def delete_record(self, entity: Entity, record_id: str, organization_id: str) -> None:
        table = _TABLES[entity]
        try:
            with self._engine.begin() as conn:
                result = conn.execute(
                    delete(table).where(
                        table.c.id == record_id, table.c.organization_id == organization_id
                    )
                )
        except SQLAlchemyError as exc:
            raise StoreError(str(exc), entity=entity, operation="delete") from exc
        if result.rowcount == 0:
            msg = f"{entity} '{record_id}' not found"
            raise RecordNotFoundError(msg, entity=entity, operation="delete")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _fetch(conn: Connection, entity: Entity, record_id: str, organization_id: str) -> Any:
        table = _TABLES[entity]
        row = (
            conn.execute(
                select(table).where(
                    table.c.id == record_id, table.c.organization_id == organization_id
                )
            )
            .mappings()
            .first()
        )
        if row is None:
            msg = f"{entity} '{record_id}' not found"
            raise RecordNotFoundError(msg, entity=entity, operation="get")
        return row

    @staticmethod
    def _find_designation(conn: Connection, organization_id: str, title: str) -> Any:
        return (
            conn.execute(
                select(designations).where(
                    designations.c.organization_id == organization_id,
                    designations.c.title_key == title_key(title),
                )
            )
            .mappings()
            .first()
        )

    def _existing_after_race(self, organization_id: str, title: str, exc: Exception) -> Any:
        with self._engine.connect() as conn:
            row = self._find_designation(conn, organization_id, title)
        if row is None:
            raise StoreError(str(exc), entity=Entity.DESIGNATION, operation="create") from exc
        return self._to_record(Entity.DESIGNATION, row)

    @staticmethod
    def _to_record(entity: Entity, row: Any) -> Any:
        data = {k: v for k, v in dict(row).items() if k not in _INTERNAL_COLUMNS}
        try:
            return RECORD_TYPES[entity].model_validate(data)
        except ValidationError as exc:
            msg = f"Stored {entity} '{data.get('id')}' is invalid: {exc}"
            raise StoreError(msg, entity=entity, operation="read") from exc


def _columns(table: Table, values: dict[str, Any]) -> dict[str, Any]:
    """Keep only keys that are columns of *table*."""
    return {k: v for k, v in values.items() if k in table.c}
