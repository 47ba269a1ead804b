"""Shared pytest fixtures for orgtree tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from orgtree.config.settings import OrgSettings
from orgtree.domain.records import (
    Department,
    DepartmentInput,
    Designation,
    DesignationInput,
    Entity,
    Staff,
    StaffInput,
)
from orgtree.infrastructure.sql_store import SqlResourceStore
from orgtree.infrastructure.store import StoreError
from orgtree.services.telemetry import _current_span, disable_telemetry

ORG = "acme"


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    """The CLI enables telemetry on --verbose; keep it from leaking across tests."""
    yield
    disable_telemetry()
    _current_span.set(None)


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def store(tmp_path: Path) -> Generator[SqlResourceStore]:
    """Empty SQLite-backed store on a temp database."""
    s = SqlResourceStore.open(tmp_path / ".orgtree" / "orgtree.db")
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> OrgSettings:
    monkeypatch.delenv("ORGTREE_CONFIG", raising=False)
    return OrgSettings.from_cli(root=tmp_path, organization_id=ORG)


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run the CLI from a temp directory so it opens a fresh database there.

    Use via ``@pytest.mark.usefixtures("_isolated_root")`` on command test
    classes; request ``tmp_path`` for the same directory.
    """
    monkeypatch.delenv("ORGTREE_CONFIG", raising=False)
    monkeypatch.delenv("ORGTREE_ORGANIZATION_ID", raising=False)
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Seeding helpers
# ---------------------------------------------------------------------------


def add_designation(
    store: Any,
    title: str,
    level: int = 1,
    reports_to: str | None = None,
    *,
    org: str = ORG,
    department_id: str | None = None,
) -> Designation:
    record: Designation = store.create_record(
        Entity.DESIGNATION,
        DesignationInput(
            title=title,
            level=level,
            reports_to=reports_to,
            department_id=department_id,
            organization_id=org,
        ),
    )
    return record


def add_department(
    store: Any,
    name: str,
    whitelist: list[str] | None = None,
    *,
    org: str = ORG,
) -> Department:
    record: Department = store.create_record(
        Entity.DEPARTMENT,
        DepartmentInput(name=name, organization_id=org, designations=whitelist or []),
    )
    return record


def add_staff(
    store: Any,
    name: str,
    designation: str,
    reports_to: str | None = None,
    *,
    org: str = ORG,
    department_id: str | None = None,
    department_name: str | None = None,
    added_by_department_id: str | None = None,
) -> Staff:
    record: Staff = store.create_record(
        Entity.EMPLOYEE,
        StaffInput(
            name=name,
            designation=designation,
            reports_to=reports_to,
            department_id=department_id,
            department_name=department_name,
            added_by_department_id=added_by_department_id,
            organization_id=org,
        ),
    )
    return record


class FlakyStore:
    """Wraps a store and fails selected calls.

    ``fail_create`` is a set of designation titles whose creation raises;
    ``fail_list`` / ``fail_get`` are sets of entities whose reads raise.
    """

    def __init__(
        self,
        inner: Any,
        *,
        fail_create: set[str] | None = None,
        fail_list: set[Entity] | None = None,
        fail_get: set[Entity] | None = None,
    ) -> None:
        self.inner = inner
        self.fail_create = {t.casefold() for t in fail_create or set()}
        self.fail_list = fail_list or set()
        self.fail_get = fail_get or set()
        self.create_calls: list[str] = []

    def list_records(self, entity: Entity, organization_id: str, **kwargs: Any) -> list[Any]:
        if entity in self.fail_list:
            raise StoreError("list unavailable", entity=entity, operation="list")
        return self.inner.list_records(entity, organization_id, **kwargs)

    def get_record(self, entity: Entity, record_id: str, organization_id: str) -> Any:
        if entity in self.fail_get:
            raise StoreError("get unavailable", entity=entity, operation="get")
        return self.inner.get_record(entity, record_id, organization_id)

    def create_record(self, entity: Entity, data: Any) -> Any:
        title = getattr(data, "title", None)
        if title is not None:
            self.create_calls.append(title)
            if title.casefold() in self.fail_create:
                raise StoreError(f"cannot create {title}", entity=entity, operation="create")
        return self.inner.create_record(entity, data)

    def update_record(self, *args: Any, **kwargs: Any) -> Any:
        return self.inner.update_record(*args, **kwargs)

    def delete_record(self, *args: Any, **kwargs: Any) -> None:
        self.inner.delete_record(*args, **kwargs)

    def close(self) -> None:
        self.inner.close()
