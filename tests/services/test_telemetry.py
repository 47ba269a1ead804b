"""Tests for telemetry primitives: Span, trace_span, @traced."""

from __future__ import annotations

import time

from orgtree.services.result import ServiceResult
from orgtree.services.telemetry import (
    Span,
    _current_span,
    disable_telemetry,
    enable_telemetry,
    get_current_span,
    trace_span,
    traced,
)


class TestSpan:
    def test_duration_before_end_is_zero(self) -> None:
        assert Span(name="test").duration_ms == 0.0

    def test_duration_after_end(self) -> None:
        span = Span(name="test")
        time.sleep(0.005)
        span.end()
        assert span.duration_ms > 0

    def test_to_dict_minimal(self) -> None:
        span = Span(name="root")
        span.end()
        d = span.to_dict()
        assert d["name"] == "root"
        assert "children" not in d
        assert "annotations" not in d

    def test_annotate(self) -> None:
        span = Span(name="create_missing")
        span.annotate("created", 2)
        span.end()
        assert span.to_dict()["annotations"] == {"created": 2}


class TestTraceSpan:
    def test_disabled_yields_none(self) -> None:
        with trace_span("test") as span:
            assert span is None

    def test_no_root_yields_none(self) -> None:
        enable_telemetry()
        with trace_span("test") as span:
            assert span is None

    def test_nested_spans(self) -> None:
        enable_telemetry()
        root = Span(name="root")
        token = _current_span.set(root)
        try:
            with trace_span("a"):
                with trace_span("b"):
                    pass
        finally:
            _current_span.reset(token)
        assert [c.name for c in root.children] == ["a"]
        assert [c.name for c in root.children[0].children] == ["b"]
        assert root.children[0].end_time is not None


class TestTraced:
    def test_noop_when_disabled(self) -> None:
        @traced
        def op() -> ServiceResult:
            return ServiceResult(ok=True, op="test")

        assert op().meta is None

    def test_injects_span_tree(self) -> None:
        @traced
        def op() -> ServiceResult:
            with trace_span("phase") as span:
                assert span is not None
                span.annotate("rows", 3)
            return ServiceResult(ok=True, op="test", meta={"existing": 1})

        enable_telemetry()
        result = op()
        assert result.meta is not None
        assert result.meta["existing"] == 1
        telemetry = result.meta["telemetry"]
        assert telemetry["name"].endswith("op")
        assert telemetry["children"][0]["annotations"] == {"rows": 3}

    def test_span_closed_when_function_raises(self) -> None:
        @traced
        def op() -> ServiceResult:
            raise RuntimeError("boom")

        enable_telemetry()
        try:
            op()
        except RuntimeError:
            pass
        assert _current_span.get() is None

    def test_non_service_result_passthrough(self) -> None:
        @traced
        def op() -> str:
            return "hello"

        enable_telemetry()
        assert op() == "hello"

    def test_get_current_span(self) -> None:
        assert get_current_span() is None
        enable_telemetry()
        root = Span(name="root")
        token = _current_span.set(root)
        try:
            assert get_current_span() is root
        finally:
            _current_span.reset(token)
        disable_telemetry()
        assert get_current_span() is None
