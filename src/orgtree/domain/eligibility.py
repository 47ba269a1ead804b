"""Rank rules for manager/subordinate pairings.

A manager must hold a strictly more senior designation (numerically lower
level) than the subordinate. When either title cannot be resolved in the
active designation set the rule fails open: the pairing is permitted.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from orgtree.domain.titles import index_by_title, title_key

if TYPE_CHECKING:
    from orgtree.domain.records import Designation, Staff


def may_report_to(
    subordinate_title: str | None,
    manager_title: str | None,
    designations: Iterable[Designation],
) -> bool:
    """Whether a holder of *subordinate_title* may report to *manager_title*."""
    index = index_by_title(designations)
    return _permitted(index, subordinate_title, manager_title)


def designation_options(
    manager_title: str | None,
    designations: Sequence[Designation],
) -> list[Designation]:
    """Designations selectable for a new hire reporting to *manager_title*.

    Only designations junior to the manager are offered. An unresolved
    manager designation leaves the list unfiltered.
    """
    index = index_by_title(designations)
    key = title_key(manager_title)
    manager = index.get(key) if key is not None else None
    if manager is None:
        return list(designations)
    return [d for d in designations if d.level > manager.level]


def eligible_managers(
    subordinate_title: str | None,
    staff: Iterable[Staff],
    designations: Iterable[Designation],
    *,
    exclude_id: str | None = None,
) -> list[Staff]:
    """Staff records permitted to manage a holder of *subordinate_title*."""
    index = index_by_title(designations)
    return [
        person
        for person in staff
        if person.id != exclude_id and _permitted(index, subordinate_title, person.designation)
    ]


def _permitted(
    index: dict[str, Designation],
    subordinate_title: str | None,
    manager_title: str | None,
) -> bool:
    sub_key = title_key(subordinate_title)
    mgr_key = title_key(manager_title)
    subordinate = index.get(sub_key) if sub_key is not None else None
    manager = index.get(mgr_key) if mgr_key is not None else None
    if subordinate is None or manager is None:
        return True
    return manager.level < subordinate.level
