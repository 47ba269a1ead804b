"""RoleCatalog and CatalogService: designation and whitelist management.

:class:`RoleCatalog` is the thin record-level view of an organization's
designations used by the reconciler; it raises :class:`StoreError`.
:class:`CatalogService` wraps the administrative operations (explicit
create, delete, whitelist edits) in ServiceResult.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from orgtree.domain.records import (
    Department,
    DepartmentInput,
    Designation,
    DesignationInput,
    Entity,
)
from orgtree.domain.titles import dedupe_titles, resolve_title, same_title
from orgtree.infrastructure.store import StoreError
from orgtree.services.base import BaseService
from orgtree.services.result import ServiceError, ServiceResult
from orgtree.services.telemetry import traced

if TYPE_CHECKING:
    from orgtree.infrastructure.store import ResourceStore


def by_level(designations: list[Designation]) -> list[Designation]:
    """Stable sort by level, most senior first."""
    return sorted(designations, key=lambda d: d.level)


def designation_dict(designation: Designation) -> dict[str, Any]:
    return designation.model_dump()


class RoleCatalog:
    """All designation records of an organization."""

    def __init__(self, store: ResourceStore) -> None:
        self._store = store

    def all_for_organization(self, organization_id: str) -> list[Designation]:
        return list(self._store.list_records(Entity.DESIGNATION, organization_id))

    def create(self, data: DesignationInput) -> Designation:
        record: Designation = self._store.create_record(Entity.DESIGNATION, data)
        return record

    def delete(self, designation_id: str, organization_id: str) -> None:
        self._store.delete_record(Entity.DESIGNATION, designation_id, organization_id)

    @staticmethod
    def find(title: str, designations: list[Designation]) -> Designation | None:
        return resolve_title(title, designations)


class CatalogService(BaseService):
    """Administrative designation and whitelist operations."""

    @property
    def catalog(self) -> RoleCatalog:
        return RoleCatalog(self._store)

    @traced
    def list_designations(self, organization_id: str) -> ServiceResult:
        """All designations of the organization, sorted by level."""
        op = "list_designations"
        try:
            designations = by_level(self.catalog.all_for_organization(organization_id))
        except StoreError as exc:
            return self._store_failure(op, exc)
        items = [designation_dict(d) for d in designations]
        return ServiceResult(ok=True, op=op, data={"count": len(items), "items": items})

    @traced
    def create_designation(
        self,
        organization_id: str,
        title: str,
        *,
        level: int = 1,
        reports_to: str | None = None,
        department_id: str | None = None,
    ) -> ServiceResult:
        """Create a designation explicitly.

        When *department_id* is given the designation is scoped to it and
        its title is appended to the department's whitelist (unless the
        whitelist already names it, in any letter case). An existing title
        is not an error in that case: the existing record is reused and
        whitelisted. Without a department a duplicate is ``DUPLICATE_TITLE``.
        """
        op = "create_designation"
        warnings: list[str] = []

        department: Department | None = None
        if department_id is not None:
            try:
                department = self._store.get_record(
                    Entity.DEPARTMENT, department_id, organization_id
                )
            except StoreError as exc:
                return self._store_failure(op, exc, department_id=department_id)

        try:
            existing = self.catalog.find(title, self.catalog.all_for_organization(organization_id))
        except StoreError as exc:
            return self._store_failure(op, exc)
        if existing is not None and department is None:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="DUPLICATE_TITLE",
                    message=f"Designation '{existing.title}' already exists",
                    detail={"id": existing.id, "title": existing.title},
                ),
            )

        if existing is not None:
            record = existing
            warnings.append(f"Designation '{existing.title}' already exists; reusing it")
        else:
            try:
                data = DesignationInput(
                    title=title,
                    level=level,
                    reports_to=reports_to,
                    department_id=department_id,
                    department_name=department.name if department else None,
                    organization_id=organization_id,
                )
            except ValidationError as exc:
                return ServiceResult(
                    ok=False,
                    op=op,
                    error=ServiceError(code="VALIDATION", message=str(exc)),
                )
            try:
                record = self.catalog.create(data)
            except StoreError as exc:
                return self._store_failure(op, exc, title=title)

        whitelisted = False
        if department is not None:
            whitelisted = self._append_to_whitelist(
                organization_id, department, record.title, warnings
            )

        return ServiceResult(
            ok=True,
            op=op,
            data={
                **designation_dict(record),
                "whitelisted": whitelisted,
                "existing": existing is not None,
            },
            warnings=warnings,
        )

    def _append_to_whitelist(
        self,
        organization_id: str,
        department: Department,
        title: str,
        warnings: list[str],
    ) -> bool:
        """Add *title* to the department's whitelist unless already named."""
        if any(same_title(t, title) for t in department.designations):
            return False
        try:
            self._store.update_record(
                Entity.DEPARTMENT,
                department.id,
                {"designations": [*department.designations, title]},
                organization_id,
            )
        except StoreError as exc:
            warnings.append(f"Could not add '{title}' to whitelist: {exc}")
            return False
        return True

    @traced
    def delete_designation(self, organization_id: str, designation_id: str) -> ServiceResult:
        """Delete a designation. Staff holding the title are left untouched."""
        op = "delete_designation"
        try:
            self.catalog.delete(designation_id, organization_id)
        except StoreError as exc:
            return self._store_failure(op, exc, id=designation_id)
        return ServiceResult(ok=True, op=op, data={"id": designation_id})

    @traced
    def list_departments(self, organization_id: str) -> ServiceResult:
        op = "list_departments"
        try:
            departments = self._store.list_records(Entity.DEPARTMENT, organization_id)
        except StoreError as exc:
            return self._store_failure(op, exc)
        items = [d.model_dump() for d in departments]
        return ServiceResult(ok=True, op=op, data={"count": len(items), "items": items})

    @traced
    def create_department(
        self,
        organization_id: str,
        name: str,
        *,
        whitelist: list[str] | None = None,
    ) -> ServiceResult:
        op = "create_department"
        data = DepartmentInput(
            name=name.strip(),
            organization_id=organization_id,
            designations=dedupe_titles(whitelist or []),
        )
        try:
            department = self._store.create_record(Entity.DEPARTMENT, data)
        except StoreError as exc:
            return self._store_failure(op, exc, name=name)
        return ServiceResult(ok=True, op=op, data=department.model_dump())

    @traced
    def get_whitelist(self, organization_id: str, department_id: str) -> ServiceResult:
        op = "get_whitelist"
        try:
            department = self._store.get_record(Entity.DEPARTMENT, department_id, organization_id)
        except StoreError as exc:
            return self._store_failure(op, exc, department_id=department_id)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "department_id": department.id,
                "name": department.name,
                "whitelist": list(department.designations),
            },
        )

    @traced
    def set_whitelist(
        self,
        organization_id: str,
        department_id: str,
        titles: list[str],
    ) -> ServiceResult:
        """Replace a department's whitelist. Case-insensitive duplicates collapse."""
        op = "set_whitelist"
        whitelist = dedupe_titles(titles)
        try:
            department = self._store.update_record(
                Entity.DEPARTMENT,
                department_id,
                {"designations": whitelist},
                organization_id,
            )
        except StoreError as exc:
            return self._store_failure(op, exc, department_id=department_id)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "department_id": department.id,
                "name": department.name,
                "whitelist": list(department.designations),
            },
        )
