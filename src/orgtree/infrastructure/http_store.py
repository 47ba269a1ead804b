"""HttpResourceStore: client for the dashboard's generic resource API.

Endpoints follow ``{base_url}/api/resource/{entity}[/{id}]`` with the
organization (and optional department) passed as query parameters. Every
response is an envelope::

    {"success": true, "data": [...] | {...}}

A non-2xx status, ``success: false``, a list call whose ``data`` is not a
list, or a transport error raises :class:`StoreError`; HTTP 404 raises
:class:`RecordNotFoundError`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import requests
import structlog
from pydantic import ValidationError

from orgtree.domain.records import RECORD_TYPES, Entity
from orgtree.infrastructure.store import RecordNotFoundError, StoreError

if TYPE_CHECKING:
    from pydantic import BaseModel

log = structlog.get_logger(__name__)


class HttpResourceStore:
    """Resource store speaking the JSON envelope protocol over HTTP."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    def close(self) -> None:
        self._session.close()

    def list_records(
        self,
        entity: Entity,
        organization_id: str,
        *,
        department_id: str | None = None,
    ) -> list[Any]:
        params = {"organizationId": organization_id}
        if department_id is not None:
            params["departmentId"] = department_id
        data = self._request("GET", entity, "list", params=params)
        if not isinstance(data, list):
            raise StoreError(
                f"{entity} list returned {type(data).__name__}, expected a list",
                entity=entity,
                operation="list",
            )
        records = []
        for raw in data:
            try:
                records.append(RECORD_TYPES[entity].model_validate(raw))
            except ValidationError as exc:
                # One malformed document must not hide the rest of the collection.
                log.warning("store.invalid_record", entity=str(entity), error=str(exc))
        return records

    def get_record(self, entity: Entity, record_id: str, organization_id: str) -> Any:
        data = self._request(
            "GET", entity, "get", record_id=record_id, params={"organizationId": organization_id}
        )
        return self._validate(entity, data, "get")

    def create_record(self, entity: Entity, data: BaseModel) -> Any:
        payload = data.model_dump(by_alias=True, exclude_none=True)
        params = {}
        if payload.get("organizationId"):
            params["organizationId"] = payload["organizationId"]
        created = self._request("POST", entity, "create", params=params, json=payload)
        return self._validate(entity, created, "create")

    def update_record(
        self,
        entity: Entity,
        record_id: str,
        patch: dict[str, Any],
        organization_id: str,
    ) -> Any:
        fields = RECORD_TYPES[entity].model_fields
        body = {
            (fields[name].alias or name) if name in fields else name: value
            for name, value in patch.items()
        }
        updated = self._request(
            "PUT",
            entity,
            "update",
            record_id=record_id,
            params={"organizationId": organization_id},
            json=body,
        )
        return self._validate(entity, updated, "update")

    def delete_record(self, entity: Entity, record_id: str, organization_id: str) -> None:
        self._request(
            "DELETE",
            entity,
            "delete",
            record_id=record_id,
            params={"organizationId": organization_id},
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _url(self, entity: Entity, record_id: str | None) -> str:
        url = f"{self._base_url}/api/resource/{entity}"
        if record_id is not None:
            url += f"/{record_id}"
        return url

    def _request(
        self,
        method: str,
        entity: Entity,
        operation: str,
        *,
        record_id: str | None = None,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        url = self._url(entity, record_id)
        try:
            resp = self._session.request(
                method, url, params=params, json=json, timeout=self._timeout
            )
        except requests.RequestException as exc:
            raise StoreError(
                f"{method} {url} failed: {exc}", entity=entity, operation=operation
            ) from exc

        if resp.status_code == 404:
            raise RecordNotFoundError(
                f"{entity} '{record_id}' not found", entity=entity, operation=operation
            )
        if not resp.ok:
            raise StoreError(
                f"{method} {url} returned HTTP {resp.status_code}",
                entity=entity,
                operation=operation,
            )
        if method == "DELETE" and not resp.content:
            return None

        try:
            envelope = resp.json()
        except ValueError as exc:
            raise StoreError(
                f"{method} {url} returned a non-JSON body", entity=entity, operation=operation
            ) from exc

        if not isinstance(envelope, dict) or envelope.get("success") is False:
            message = envelope.get("error") if isinstance(envelope, dict) else None
            raise StoreError(
                f"{method} {url} was rejected: {message or 'unsuccessful response'}",
                entity=entity,
                operation=operation,
            )
        return envelope.get("data")

    @staticmethod
    def _validate(entity: Entity, data: Any, operation: str) -> Any:
        if data is None:
            raise StoreError(
                f"{entity} {operation} returned no record", entity=entity, operation=operation
            )
        try:
            return RECORD_TYPES[entity].model_validate(data)
        except ValidationError as exc:
            raise StoreError(
                f"{entity} {operation} returned an invalid record: {exc}",
                entity=entity,
                operation=operation,
            ) from exc
