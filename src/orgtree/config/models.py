"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, orgtree.toml only contains
overrides. An empty file (or none at all) gives a working SQLite setup.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    backend: Literal["sqlite", "http"] = "sqlite"
    database: str = ".orgtree/orgtree.db"
    base_url: str = "http://localhost:3000"
    timeout: float = 10.0


class ReconcileConfig(BaseModel):
    """[reconcile] section."""

    model_config = {"frozen": True}

    default_level: int = Field(default=1, ge=1)
    serialize: bool = True


class HierarchyConfig(BaseModel):
    """[hierarchy] section."""

    model_config = {"frozen": True}

    max_depth: int = Field(default=256, ge=1)
