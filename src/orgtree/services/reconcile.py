"""WhitelistReconciler: materialize a department's sanctioned designations.

Given ``(organization_id, department_id)``:

1. Fetch the organization's full designation catalog.
2. Fetch the department whitelist. Empty or absent: the whole catalog,
   sorted by level, is the result; nothing is filtered or created.
3. Diff the whitelist against the catalog (case-insensitive titles).
4. Create each missing title in turn at the default level, no parent,
   scoped to the department. A failed create is logged and skipped.
5. Re-fetch the catalog if anything was created.
6. Keep designations whose title is on the whitelist.
7. Sort by level, most senior first.

Reconciliations of the same department are serialized in-process, and the
SQLite store additionally makes designation creation idempotent per title,
so overlapping runs never produce duplicate records.
"""

from __future__ import annotations

import threading
import weakref
from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

from orgtree.domain.records import Department, Designation, DesignationInput, Entity
from orgtree.domain.titles import dedupe_titles, title_key
from orgtree.infrastructure.store import StoreError
from orgtree.services.base import BaseService
from orgtree.services.catalog import RoleCatalog, by_level, designation_dict
from orgtree.services.result import ServiceResult
from orgtree.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from contextlib import AbstractContextManager

    from orgtree.infrastructure.store import ResourceStore

log = structlog.get_logger(__name__)

# Entries disappear once no reconciliation holds the lock.
_locks: weakref.WeakValueDictionary[tuple[str, str], threading.Lock] = (
    weakref.WeakValueDictionary()
)
_locks_guard = threading.Lock()


def _department_lock(organization_id: str, department_id: str) -> threading.Lock:
    with _locks_guard:
        return _locks.setdefault((organization_id, department_id), threading.Lock())


@dataclass(frozen=True)
class Reconciliation:
    """Outcome of one reconciliation pass.

    Attributes:
        designations: The sanctioned designations, sorted by level.
        whitelist: The department whitelist as fetched (deduplicated).
        created: Designations created during this pass.
        failed: Whitelist titles that could not be created, with the reason.
        filtered: False when the department had no whitelist and the whole
            catalog was returned.
        stale: True when the catalog or whitelist could not be fetched; the
            designations list is then empty and should be retried later.
    """

    organization_id: str
    department_id: str | None
    designations: list[Designation] = field(default_factory=list)
    whitelist: list[str] = field(default_factory=list)
    created: list[Designation] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    filtered: bool = False
    stale: bool = False
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "organization_id": self.organization_id,
            "department_id": self.department_id,
            "count": len(self.designations),
            "items": [designation_dict(d) for d in self.designations],
            "whitelist": list(self.whitelist),
            "created": [designation_dict(d) for d in self.created],
            "failed": dict(self.failed),
            "filtered": self.filtered,
            "stale": self.stale,
        }


class WhitelistReconciler:
    """Reconciles department whitelists against the role catalog."""

    def __init__(
        self,
        store: ResourceStore,
        *,
        default_level: int = 1,
        serialize: bool = True,
    ) -> None:
        self._store = store
        self._catalog = RoleCatalog(store)
        self._default_level = default_level
        self._serialize = serialize

    def reconcile(self, organization_id: str, department_id: str) -> Reconciliation:
        """Run one reconciliation pass. Never raises for store failures."""
        lock: AbstractContextManager[Any] = (
            _department_lock(organization_id, department_id) if self._serialize else nullcontext()
        )
        with lock:
            return self._reconcile(organization_id, department_id)

    def active(self, organization_id: str, department_id: str | None = None) -> Reconciliation:
        """The active designation set for a view.

        With a department this is :meth:`reconcile`; without one it is the
        organization's whole catalog sorted by level.
        """
        if department_id is not None:
            return self.reconcile(organization_id, department_id)
        try:
            catalog = self._catalog.all_for_organization(organization_id)
        except StoreError as exc:
            log.warning("reconcile.stale", organization_id=organization_id, error=str(exc))
            return Reconciliation(
                organization_id=organization_id,
                department_id=None,
                stale=True,
                error=str(exc),
            )
        return Reconciliation(
            organization_id=organization_id,
            department_id=None,
            designations=by_level(catalog),
        )

    def _reconcile(self, organization_id: str, department_id: str) -> Reconciliation:
        bound = log.bind(organization_id=organization_id, department_id=department_id)

        with trace_span("fetch_catalog"):
            try:
                catalog = self._catalog.all_for_organization(organization_id)
                department: Department = self._store.get_record(
                    Entity.DEPARTMENT, department_id, organization_id
                )
            except StoreError as exc:
                bound.warning("reconcile.stale", error=str(exc))
                return Reconciliation(
                    organization_id=organization_id,
                    department_id=department_id,
                    stale=True,
                    error=str(exc),
                )

        whitelist = dedupe_titles(department.designations)
        if not whitelist:
            bound.debug("reconcile.no_whitelist", catalog=len(catalog))
            return Reconciliation(
                organization_id=organization_id,
                department_id=department_id,
                designations=by_level(catalog),
            )

        known = {title_key(d.title) for d in catalog}
        missing = [title for title in whitelist if title_key(title) not in known]

        created: list[Designation] = []
        failed: dict[str, str] = {}
        with trace_span("create_missing") as span:
            for title in missing:
                try:
                    record = self._catalog.create(
                        DesignationInput(
                            title=title,
                            level=self._default_level,
                            department_id=department.id,
                            department_name=department.name or None,
                            organization_id=organization_id,
                        )
                    )
                except StoreError as exc:
                    bound.warning("reconcile.create_failed", title=title, error=str(exc))
                    failed[title] = str(exc)
                    continue
                bound.info("reconcile.created", title=record.title, id=record.id)
                created.append(record)
            if span:
                span.annotate("missing", len(missing))
                span.annotate("created", len(created))

        if created:
            with trace_span("refetch_catalog"):
                try:
                    catalog = self._catalog.all_for_organization(organization_id)
                except StoreError as exc:
                    # The creates landed; fall back to the old catalog plus what we made.
                    bound.warning("reconcile.refetch_failed", error=str(exc))
                    catalog = [*catalog, *created]

        wanted = {title_key(title) for title in whitelist}
        designations = by_level([d for d in catalog if title_key(d.title) in wanted])
        return Reconciliation(
            organization_id=organization_id,
            department_id=department_id,
            designations=designations,
            whitelist=whitelist,
            created=created,
            failed=failed,
            filtered=True,
        )


class ReconcileService(BaseService):
    """ServiceResult wrapper around :class:`WhitelistReconciler`."""

    @traced
    def reconcile(self, organization_id: str, department_id: str) -> ServiceResult:
        """Reconcile a department whitelist and return its sorted designations.

        Store failures and partial creation failures are reported as
        warnings; the result is still ``ok``.
        """
        outcome = self.reconciler.reconcile(organization_id, department_id)
        return ServiceResult(
            ok=True,
            op="reconcile",
            data=outcome.to_dict(),
            warnings=reconcile_warnings(outcome),
        )


def reconcile_warnings(outcome: Reconciliation) -> list[str]:
    """Human-readable warnings naming every title that failed to materialize."""
    warnings: list[str] = []
    if outcome.stale:
        warnings.append(f"Reconciliation failed, designations are stale: {outcome.error}")
    for title, reason in outcome.failed.items():
        warnings.append(f"Could not create designation '{title}': {reason}")
    return warnings
