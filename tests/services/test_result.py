"""Tests for ServiceResult and ServiceError."""

from __future__ import annotations

import json

import pytest

from orgtree.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="reconcile", data={"count": 2})
        assert result.ok is True
        assert result.data == {"count": 2}
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_error_construction(self) -> None:
        result = ServiceResult(
            ok=False, op="role_tree", error=ServiceError(code="HIERARCHY_CYCLE", message="loop")
        )
        assert result.error is not None
        assert result.error.code == "HIERARCHY_CYCLE"
        assert result.error.detail == {}

    def test_json_serialization(self) -> None:
        result = ServiceResult(
            ok=True,
            op="reconcile",
            data={"items": []},
            warnings=["Could not create designation 'Lead': boom"],
        )
        parsed = json.loads(result.model_dump_json())
        assert parsed["ok"] is True
        assert parsed["warnings"] == ["Could not create designation 'Lead': boom"]

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="test")
        with pytest.raises(Exception):
            result.ok = False  # type: ignore[misc]

    def test_failure_helper(self) -> None:
        result = ServiceResult.failure(
            "transfer", "INVALID_MANAGER", "cannot report to self", staff_id="EMP-0001"
        )
        assert result.ok is False
        assert result.op == "transfer"
        assert result.data == {}
        assert result.error == ServiceError(
            code="INVALID_MANAGER",
            message="cannot report to self",
            detail={"staff_id": "EMP-0001"},
        )
