"""Locate the ``orgtree.toml`` that applies to a working directory.

An organization keeps its settings next to the ``.orgtree/`` database at
the top of its checkout, so lookups start in the current directory and
climb toward the filesystem root. ``ORGTREE_CONFIG`` pins a single file
instead; a pinned file that does not exist means no config at all, never
a fallback to the climb.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

CONFIG_FILENAME = "orgtree.toml"
CONFIG_ENV_VAR = "ORGTREE_CONFIG"


def _candidates(start: Path) -> Iterator[Path]:
    start = start.resolve()
    for directory in (start, *start.parents):
        yield directory / CONFIG_FILENAME


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file for *start* (default: cwd), or ``None``."""
    pinned = os.environ.get(CONFIG_ENV_VAR)
    if pinned:
        path = Path(pinned).expanduser()
        return path if path.is_file() else None
    return next((c for c in _candidates(start or Path.cwd()) if c.is_file()), None)
