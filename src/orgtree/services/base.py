"""BaseService: shared foundation for orgtree services.

Every service receives a :class:`ResourceStore` at construction time plus
optional settings. Organization and department context is passed into each
call explicitly; services hold no per-request state.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from orgtree.domain.forest import DEFAULT_MAX_DEPTH
from orgtree.domain.records import Entity
from orgtree.domain.titles import ref_key, same_title
from orgtree.infrastructure.store import RecordNotFoundError
from orgtree.services.result import ServiceResult

if TYPE_CHECKING:
    from orgtree.config.settings import OrgSettings
    from orgtree.domain.records import Department, Staff
    from orgtree.infrastructure.store import ResourceStore, StoreError
    from orgtree.services.reconcile import WhitelistReconciler

logger = logging.getLogger(__name__)


def in_department(person: Staff, department: Department) -> bool:
    """Department membership of a staff record.

    A record belongs when its ``department_id`` (or, when that is unset, the
    department that added it) is the department's id, or when its
    ``department_name`` matches the department's name case-insensitively.
    The name check covers older records whose id points elsewhere or is
    missing.
    """
    owner = person.department_id or person.added_by_department_id
    if owner is not None and ref_key(owner) == ref_key(department.id):
        return True
    return same_title(person.department_name, department.name)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class CatalogService(BaseService):
            def list_designations(self, organization_id: str) -> ServiceResult:
                records = self._store.list_records(Entity.DESIGNATION, organization_id)
                ...
    """

    def __init__(self, store: ResourceStore, settings: OrgSettings | None = None) -> None:
        self._store = store
        self._settings = settings

    @property
    def max_depth(self) -> int:
        if self._settings is None:
            return DEFAULT_MAX_DEPTH
        return self._settings.hierarchy.max_depth

    @property
    def default_level(self) -> int:
        if self._settings is None:
            return 1
        return self._settings.reconcile.default_level

    @property
    def serialize_reconcile(self) -> bool:
        if self._settings is None:
            return True
        return self._settings.reconcile.serialize

    @property
    def reconciler(self) -> WhitelistReconciler:
        """A reconciler over this service's store, configured from settings."""
        from orgtree.services.reconcile import WhitelistReconciler

        return WhitelistReconciler(
            self._store,
            default_level=self.default_level,
            serialize=self.serialize_reconcile,
        )

    def _department_staff(
        self,
        organization_id: str,
        department_id: str | None,
    ) -> list[Staff]:
        """Organization staff, narrowed to the department when one is given.

        Raises:
            StoreError: The staff list or the department could not be loaded.
        """
        staff: list[Staff] = self._store.list_records(Entity.EMPLOYEE, organization_id)
        if department_id is None:
            return staff
        department = self._store.get_record(Entity.DEPARTMENT, department_id, organization_id)
        return [p for p in staff if in_department(p, department)]

    @staticmethod
    def _store_failure(op: str, exc: StoreError, **detail: Any) -> ServiceResult:
        """Error result for a failed store call."""
        code = "NOT_FOUND" if isinstance(exc, RecordNotFoundError) else "STORE_ERROR"
        logger.warning("%s failed: %s", op, exc)
        return ServiceResult.failure(op, code, str(exc), **detail)
