"""Tests for config section models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from orgtree.config.models import HierarchyConfig, ReconcileConfig, StoreConfig


class TestSections:
    def test_store_defaults(self) -> None:
        cfg = StoreConfig()
        assert cfg.backend == "sqlite"
        assert cfg.database == ".orgtree/orgtree.db"

    def test_unknown_backend_rejected(self) -> None:
        with pytest.raises(ValidationError):
            StoreConfig(backend="mongo")  # type: ignore[arg-type]

    def test_default_level_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ReconcileConfig(default_level=0)

    def test_max_depth_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            HierarchyConfig(max_depth=0)

    def test_sparse_override(self) -> None:
        cfg = ReconcileConfig.model_validate({"serialize": False})
        assert cfg.serialize is False
        assert cfg.default_level == 1
