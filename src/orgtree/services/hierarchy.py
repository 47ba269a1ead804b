"""HierarchyService: designation and staff forests for display.

The role view is built over the active designation set (the reconciled
whitelist when a department is given, otherwise the whole catalog); each
role node lists the staff holding that title. The staff view is built over
the department's staff, linked by ``reports_to``. Department membership is
:func:`orgtree.services.base.in_department` everywhere, so the trees show
exactly the staff the eligibility queries offer.

Store failures degrade to an empty, ``stale`` forest with warnings. A parent
cycle or an over-deep branch is a hard error.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from orgtree.domain.expansion import ExpansionState
from orgtree.domain.forest import (
    DEFAULT_MAX_DEPTH,
    Forest,
    HierarchyCycleError,
    HierarchyDepthError,
    HierarchyError,
    build_forest,
)
from orgtree.domain.records import Designation, Staff
from orgtree.domain.titles import ref_key, title_key
from orgtree.infrastructure.store import StoreError
from orgtree.services.base import BaseService
from orgtree.services.catalog import designation_dict
from orgtree.services.reconcile import reconcile_warnings
from orgtree.services.result import ServiceError, ServiceResult
from orgtree.services.telemetry import trace_span, traced


def role_forest(
    designations: Iterable[Designation],
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Forest[Designation]:
    """Designations linked by ``reports_to`` title."""
    return build_forest(
        designations,
        key=lambda d: d.title,
        parent=lambda d: d.reports_to,
        max_depth=max_depth,
    )


def staff_forest(
    staff: Iterable[Staff],
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Forest[Staff]:
    """Staff linked by ``reports_to`` id."""
    return build_forest(
        staff,
        key=lambda s: s.id,
        parent=lambda s: s.reports_to,
        normalize=ref_key,
        max_depth=max_depth,
    )


def staff_dict(person: Staff) -> dict[str, Any]:
    return person.model_dump()


def _holder(person: Staff) -> dict[str, Any]:
    return {"id": person.id, "name": person.name}


def _expansion(
    forest: Forest[Any],
    expanded: Iterable[str] | None,
    expand_all: bool,
) -> ExpansionState:
    state = ExpansionState(expanded or ())
    if expand_all:
        state.expand_all(forest)
    state.prune(forest)
    return state


def _parents_of(forest: Forest[Any]) -> set[str]:
    return {forest.nodes[n.parent].item.id for n in forest.walk() if n.parent is not None}


def _hierarchy_failure(op: str, exc: HierarchyError) -> ServiceResult:
    if isinstance(exc, HierarchyCycleError):
        error = ServiceError(
            code="HIERARCHY_CYCLE",
            message=str(exc),
            detail={"unplaced": exc.unplaced, "cycle": exc.cycle},
        )
    elif isinstance(exc, HierarchyDepthError):
        error = ServiceError(
            code="HIERARCHY_TOO_DEEP",
            message=str(exc),
            detail={"max_depth": exc.max_depth, "key": exc.key},
        )
    else:
        error = ServiceError(code="HIERARCHY_ERROR", message=str(exc))
    return ServiceResult(ok=False, op=op, error=error)


class HierarchyService(BaseService):
    """Builds the role and staff views."""

    @traced
    def role_tree(
        self,
        organization_id: str,
        department_id: str | None = None,
        *,
        expanded: Iterable[str] | None = None,
        expand_all: bool = False,
    ) -> ServiceResult:
        """Designation forest with the holders of each role.

        Args:
            organization_id: Organization whose catalog is shown.
            department_id: Restrict to the department's reconciled whitelist.
            expanded: Designation ids the viewer has expanded.
            expand_all: Expand every role that has child roles.
        """
        op = "role_tree"
        outcome = self.reconciler.active(organization_id, department_id)
        warnings = reconcile_warnings(outcome)

        staff: list[Staff] = []
        if not outcome.stale:
            try:
                staff = self._department_staff(organization_id, department_id)
            except StoreError as exc:
                warnings.append(f"Could not load role holders: {exc}")

        with trace_span("build_forest") as span:
            try:
                forest = role_forest(outcome.designations, max_depth=self.max_depth)
            except HierarchyError as exc:
                return _hierarchy_failure(op, exc)
            if span:
                span.annotate("nodes", len(forest))

        holders: dict[str, list[Staff]] = {}
        for person in staff:
            key = title_key(person.designation)
            if key is not None:
                holders.setdefault(key, []).append(person)

        state = _expansion(forest, expanded, expand_all)
        with_children = _parents_of(forest)

        def render(designation: Designation) -> dict[str, Any]:
            held_by = holders.get(title_key(designation.title) or "", [])
            return {
                **designation_dict(designation),
                "holders": [_holder(p) for p in held_by],
                "has_children": designation.id in with_children,
                "expanded": state.is_expanded(designation.id),
            }

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "organization_id": organization_id,
                "department_id": department_id,
                "count": len(forest),
                "roots": forest.to_dicts(render),
                "expanded": sorted(state.expanded),
                "stale": outcome.stale,
            },
            warnings=warnings,
        )

    @traced
    def staff_tree(
        self,
        organization_id: str,
        department_id: str | None = None,
        *,
        expanded: Iterable[str] | None = None,
        expand_all: bool = False,
    ) -> ServiceResult:
        """Staff forest by reporting line.

        Staff whose manager is outside the listed set (another department,
        or deleted) are roots.
        """
        op = "staff_tree"
        warnings: list[str] = []
        stale = False
        try:
            staff = self._department_staff(organization_id, department_id)
        except StoreError as exc:
            staff = []
            stale = True
            warnings.append(f"Could not load staff: {exc}")

        with trace_span("build_forest") as span:
            try:
                forest = staff_forest(staff, max_depth=self.max_depth)
            except HierarchyError as exc:
                return _hierarchy_failure(op, exc)
            if span:
                span.annotate("nodes", len(forest))

        state = _expansion(forest, expanded, expand_all)
        with_children = _parents_of(forest)

        def render(person: Staff) -> dict[str, Any]:
            return {
                **staff_dict(person),
                "has_children": person.id in with_children,
                "expanded": state.is_expanded(person.id),
            }

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "organization_id": organization_id,
                "department_id": department_id,
                "count": len(forest),
                "roots": forest.to_dicts(render),
                "expanded": sorted(state.expanded),
                "stale": stale,
            },
            warnings=warnings,
        )

    @traced
    def direct_reports(
        self,
        organization_id: str,
        staff_id: str,
        department_id: str | None = None,
    ) -> ServiceResult:
        """Staff whose ``reports_to`` is *staff_id*, in source order."""
        op = "direct_reports"
        try:
            staff = self._department_staff(organization_id, department_id)
        except StoreError as exc:
            return self._store_failure(op, exc, staff_id=staff_id)

        target = ref_key(staff_id)
        manager = next((p for p in staff if ref_key(p.id) == target), None)
        if manager is None:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="NOT_FOUND",
                    message=f"Staff member '{staff_id}' not found",
                    detail={"staff_id": staff_id},
                ),
            )

        reports = [p for p in staff if p.id != manager.id and ref_key(p.reports_to) == target]
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "manager": staff_dict(manager),
                "count": len(reports),
                "items": [staff_dict(p) for p in reports],
            },
        )
