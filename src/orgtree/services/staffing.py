"""StaffingService: manager eligibility, hiring and moving staff.

All rank checks go through :mod:`orgtree.domain.eligibility` and fail open
when a title is unknown. With a department, the active designation set is
the department's reconciled whitelist and manager candidates are limited to
the department's staff.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from orgtree.domain import eligibility
from orgtree.domain.records import Entity, Staff, StaffInput
from orgtree.domain.titles import ref_key, resolve_title, same_title
from orgtree.infrastructure.store import RecordNotFoundError, StoreError
from orgtree.services.base import BaseService
from orgtree.services.catalog import designation_dict
from orgtree.services.hierarchy import staff_dict
from orgtree.services.reconcile import reconcile_warnings
from orgtree.services.result import ServiceResult
from orgtree.services.telemetry import traced

if TYPE_CHECKING:
    from orgtree.domain.records import Department

log = structlog.get_logger(__name__)


class StaffingService(BaseService):
    """Eligibility queries and staff creation."""

    @traced
    def manager_candidates(
        self,
        organization_id: str,
        designation: str,
        department_id: str | None = None,
        *,
        exclude_id: str | None = None,
    ) -> ServiceResult:
        """Staff who may manage a holder of *designation*.

        *exclude_id* drops one record, typically the subordinate being edited.
        """
        op = "manager_candidates"
        outcome = self.reconciler.active(organization_id, department_id)
        warnings = reconcile_warnings(outcome)
        try:
            staff = self._department_staff(organization_id, department_id)
        except StoreError as exc:
            return self._store_failure(op, exc, department_id=department_id)

        candidates = eligibility.eligible_managers(
            designation, staff, outcome.designations, exclude_id=exclude_id
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "designation": designation,
                "count": len(candidates),
                "items": [staff_dict(p) for p in candidates],
            },
            warnings=warnings,
        )

    @traced
    def designation_options(
        self,
        organization_id: str,
        manager_id: str,
        department_id: str | None = None,
    ) -> ServiceResult:
        """Designations a new report of *manager_id* may be given."""
        op = "designation_options"
        try:
            manager: Staff = self._store.get_record(Entity.EMPLOYEE, manager_id, organization_id)
        except StoreError as exc:
            return self._store_failure(op, exc, manager_id=manager_id)

        outcome = self.reconciler.active(organization_id, department_id)
        options = eligibility.designation_options(manager.designation, outcome.designations)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "manager_id": manager.id,
                "manager_designation": manager.designation,
                "count": len(options),
                "items": [designation_dict(d) for d in options],
            },
            warnings=reconcile_warnings(outcome),
        )

    @traced
    def suggest_manager(
        self,
        organization_id: str,
        designation: str,
        department_id: str | None = None,
    ) -> ServiceResult:
        """First staff member holding the role *designation* reports to.

        ``data["manager"]`` is None when the designation has no parent role
        or nobody holds it.
        """
        op = "suggest_manager"
        outcome = self.reconciler.active(organization_id, department_id)
        warnings = reconcile_warnings(outcome)
        role = resolve_title(designation, outcome.designations)
        parent_title = role.reports_to if role is not None else None

        manager: Staff | None = None
        if parent_title is not None:
            try:
                staff = self._department_staff(organization_id, department_id)
            except StoreError as exc:
                return self._store_failure(op, exc, department_id=department_id)
            manager = next((p for p in staff if same_title(p.designation, parent_title)), None)

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "designation": designation,
                "reports_to": parent_title,
                "manager": staff_dict(manager) if manager is not None else None,
            },
            warnings=warnings,
        )

    @traced
    def hire(
        self,
        organization_id: str,
        name: str,
        designation: str,
        *,
        manager_id: str | None = None,
        department_id: str | None = None,
        email: str | None = None,
        strict: bool = True,
    ) -> ServiceResult:
        """Create a staff record.

        Without *department_id* the department is inherited from the
        manager. A pairing the rank rule rejects fails with
        ``INELIGIBLE_MANAGER`` in strict mode and is a warning otherwise.
        """
        op = "hire"
        warnings: list[str] = []

        manager: Staff | None = None
        if manager_id is not None:
            try:
                manager = self._store.get_record(Entity.EMPLOYEE, manager_id, organization_id)
            except StoreError as exc:
                return self._store_failure(op, exc, manager_id=manager_id)

        department_name: str | None = None
        if department_id is None and manager is not None:
            department_id = manager.department_id
            department_name = manager.department_name
        elif department_id is not None:
            try:
                department: Department = self._store.get_record(
                    Entity.DEPARTMENT, department_id, organization_id
                )
            except StoreError as exc:
                return self._store_failure(op, exc, department_id=department_id)
            department_name = department.name or None

        outcome = self.reconciler.active(organization_id, department_id)
        warnings.extend(reconcile_warnings(outcome))
        if resolve_title(designation, outcome.designations) is None and not outcome.stale:
            warnings.append(f"Designation '{designation}' is not in the active designation list")

        if manager is not None and not eligibility.may_report_to(
            designation, manager.designation, outcome.designations
        ):
            message = (
                f"'{manager.name}' ({manager.designation}) does not outrank '{designation}'"
            )
            if strict:
                return ServiceResult.failure(
                    op,
                    "INELIGIBLE_MANAGER",
                    message,
                    manager_id=manager.id,
                    designation=designation,
                )
            warnings.append(message)

        try:
            data = StaffInput(
                name=name.strip(),
                designation=designation.strip(),
                reports_to=manager.id if manager is not None else None,
                department_id=department_id,
                department_name=department_name,
                organization_id=organization_id,
                email=email,
            )
        except ValidationError as exc:
            return ServiceResult.failure(op, "VALIDATION", str(exc))

        try:
            person: Staff = self._store.create_record(Entity.EMPLOYEE, data)
        except StoreError as exc:
            return self._store_failure(op, exc, name=name)

        log.info("staff.hired", id=person.id, designation=person.designation)
        return ServiceResult(ok=True, op=op, data=staff_dict(person), warnings=warnings)

    @traced
    def transfer(
        self,
        organization_id: str,
        staff_id: str,
        *,
        department_id: str | None = None,
        designation: str | None = None,
        manager_id: str | None = None,
        detach: bool = False,
        strict: bool = True,
    ) -> ServiceResult:
        """Move a staff record to a new department, designation, or manager.

        Unset arguments keep the current value; *detach* makes the record
        top level. The resulting pairing is checked with the same rank rule
        as :meth:`hire`. A manager that is the record itself or one of its
        (indirect) reports fails with ``INVALID_MANAGER`` in every mode.
        """
        op = "transfer"
        warnings: list[str] = []

        if detach and manager_id is not None:
            return ServiceResult.failure(op, "VALIDATION", "A manager cannot be set while detaching")
        if designation is not None and not designation.strip():
            return ServiceResult.failure(op, "VALIDATION", "designation must not be blank")

        try:
            person: Staff = self._store.get_record(Entity.EMPLOYEE, staff_id, organization_id)
        except StoreError as exc:
            return self._store_failure(op, exc, staff_id=staff_id)

        patch: dict[str, Any] = {}
        target_department = person.department_id
        if department_id is not None:
            try:
                department: Department = self._store.get_record(
                    Entity.DEPARTMENT, department_id, organization_id
                )
            except StoreError as exc:
                return self._store_failure(op, exc, department_id=department_id)
            target_department = department.id
            patch["department_id"] = department.id
            patch["department_name"] = department.name or None

        new_designation = designation.strip() if designation is not None else person.designation
        if designation is not None:
            patch["designation"] = new_designation

        manager: Staff | None = None
        if manager_id is not None:
            if ref_key(manager_id) == ref_key(person.id):
                return _invalid_manager(op, person, f"'{person.name}' cannot report to themselves")
            try:
                manager = self._store.get_record(Entity.EMPLOYEE, manager_id, organization_id)
                staff: list[Staff] = self._store.list_records(Entity.EMPLOYEE, organization_id)
            except StoreError as exc:
                return self._store_failure(op, exc, manager_id=manager_id)
            if ref_key(manager.id) in _reports_under(person.id, staff):
                return _invalid_manager(
                    op, person, f"'{manager.name}' reports to '{person.name}'"
                )
            patch["reports_to"] = manager.id
        elif detach:
            patch["reports_to"] = None
        elif person.reports_to is not None:
            try:
                manager = self._store.get_record(
                    Entity.EMPLOYEE, person.reports_to, organization_id
                )
            except RecordNotFoundError:
                manager = None
            except StoreError as exc:
                return self._store_failure(op, exc, manager_id=person.reports_to)

        outcome = self.reconciler.active(organization_id, target_department)
        warnings.extend(reconcile_warnings(outcome))
        if resolve_title(new_designation, outcome.designations) is None and not outcome.stale:
            warnings.append(
                f"Designation '{new_designation}' is not in the active designation list"
            )

        if manager is not None and not eligibility.may_report_to(
            new_designation, manager.designation, outcome.designations
        ):
            message = (
                f"'{manager.name}' ({manager.designation}) does not outrank '{new_designation}'"
            )
            if strict:
                return ServiceResult.failure(
                    op,
                    "INELIGIBLE_MANAGER",
                    message,
                    manager_id=manager.id,
                    designation=new_designation,
                )
            warnings.append(message)

        if not patch:
            warnings.append("Nothing to change")
            return ServiceResult(
                ok=True, op=op, data={**staff_dict(person), "changed": []}, warnings=warnings
            )

        try:
            moved: Staff = self._store.update_record(
                Entity.EMPLOYEE, person.id, patch, organization_id
            )
        except StoreError as exc:
            return self._store_failure(op, exc, staff_id=staff_id)

        log.info("staff.transferred", id=moved.id, changed=sorted(patch))
        return ServiceResult(
            ok=True,
            op=op,
            data={**staff_dict(moved), "changed": sorted(patch)},
            warnings=warnings,
        )


def _reports_under(staff_id: str, staff: list[Staff]) -> set[str | None]:
    """Ids of everyone reporting to *staff_id*, directly or indirectly."""
    children: dict[str | None, list[str | None]] = {}
    for person in staff:
        children.setdefault(ref_key(person.reports_to), []).append(ref_key(person.id))
    found: set[str | None] = set()
    stack = list(children.get(ref_key(staff_id), []))
    while stack:
        current = stack.pop()
        if current in found:
            continue
        found.add(current)
        stack.extend(children.get(current, []))
    return found


def _invalid_manager(op: str, person: Staff, message: str) -> ServiceResult:
    return ServiceResult.failure(op, "INVALID_MANAGER", message, staff_id=person.id)
