"""ResourceStore: the persistence collaborator contract.

Every entity (designation, department, employee) supports the same five
operations. Implementations return validated domain records and raise
:class:`StoreError` on any failure, so an empty list always means "no
records" and never "the call failed".
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from pydantic import BaseModel

    from orgtree.config.settings import OrgSettings
    from orgtree.domain.records import Entity


class StoreError(Exception):
    """A store call did not complete successfully."""

    def __init__(self, message: str, *, entity: str | None = None, operation: str | None = None):
        super().__init__(message)
        self.entity = entity
        self.operation = operation


class RecordNotFoundError(StoreError):
    """The requested record does not exist in the organization."""


class ResourceStore(Protocol):
    """Per-entity list/get/create/update/delete over organization-scoped records."""

    def list_records(
        self,
        entity: Entity,
        organization_id: str,
        *,
        department_id: str | None = None,
    ) -> list[Any]: ...

    def get_record(self, entity: Entity, record_id: str, organization_id: str) -> Any: ...

    def create_record(self, entity: Entity, data: BaseModel) -> Any: ...

    def update_record(
        self,
        entity: Entity,
        record_id: str,
        patch: dict[str, Any],
        organization_id: str,
    ) -> Any: ...

    def delete_record(self, entity: Entity, record_id: str, organization_id: str) -> None: ...

    def close(self) -> None: ...


def open_store(settings: OrgSettings) -> ResourceStore:
    """Construct the store selected by ``[store] backend``."""
    if settings.store.backend == "http":
        from orgtree.infrastructure.http_store import HttpResourceStore

        return HttpResourceStore(settings.store.base_url, timeout=settings.store.timeout)

    from orgtree.infrastructure.sql_store import SqlResourceStore

    return SqlResourceStore.open(settings.database_path)
