"""Envelope returned by every orgtree service call.

Reconciliation, tree building, catalog and staffing operations all hand
back a :class:`ServiceResult` instead of raising. Stale or partial data
shows up as ``warnings`` on an ``ok`` result; refusals carry a
:class:`ServiceError` whose ``code`` (``NOT_FOUND``, ``INELIGIBLE_MANAGER``,
``HIERARCHY_CYCLE`` and so on) the CLI maps to an exit status.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ServiceError(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    ``op`` names the operation (``"reconcile"``, ``"staff_tree"``,
    ``"hire"``...) and selects the CLI renderer. ``data`` is only
    meaningful when ``ok`` is true; ``error`` only when it is false.
    ``meta`` holds telemetry spans when verbose tracing is on.
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(
        cls,
        op: str,
        code: str,
        message: str,
        *,
        warnings: list[str] | None = None,
        **detail: Any,
    ) -> ServiceResult:
        """Build a refused result for *op* with error *code*."""
        return cls(
            ok=False,
            op=op,
            warnings=warnings or [],
            error=ServiceError(code=code, message=message, detail=detail),
        )
