"""Title matching rules.

Designations reference each other, and staff reference designations, by
title rather than id. All title comparisons are case-insensitive and ignore
surrounding whitespace, so "Team Lead", "team lead " and "TEAM LEAD" name
the same role.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from orgtree.domain.records import Designation


def title_key(title: str | None) -> str | None:
    """Normalize a title for comparison. Blank or missing titles yield None.

    Examples:
        >>> title_key("  Team Lead ")
        'team lead'
        >>> title_key("") is None
        True
    """
    if title is None:
        return None
    key = title.strip().casefold()
    return key or None


def ref_key(ref: str | None) -> str | None:
    """Normalize an opaque identifier reference (exact match, trimmed)."""
    if ref is None:
        return None
    key = str(ref).strip()
    return key or None


def same_title(a: str | None, b: str | None) -> bool:
    """True when both titles are present and match case-insensitively."""
    ka = title_key(a)
    return ka is not None and ka == title_key(b)


def dedupe_titles(titles: Iterable[str]) -> list[str]:
    """Drop blank and case-insensitive duplicate titles, keeping first spelling."""
    seen: set[str] = set()
    result: list[str] = []
    for title in titles:
        key = title_key(title)
        if key is None or key in seen:
            continue
        seen.add(key)
        result.append(title.strip())
    return result


def index_by_title(designations: Iterable[Designation]) -> dict[str, Designation]:
    """Map normalized title to designation. The first record for a title wins."""
    index: dict[str, Designation] = {}
    for designation in designations:
        key = title_key(designation.title)
        if key is not None and key not in index:
            index[key] = designation
    return index


def resolve_title(title: str | None, designations: Iterable[Designation]) -> Designation | None:
    """Find the designation a title refers to, or None."""
    key = title_key(title)
    if key is None:
        return None
    for designation in designations:
        if title_key(designation.title) == key:
            return designation
    return None
