"""Human-readable record ids: ``DSG-0001``, ``DEP-0001``, ``EMP-0001``.

Each prefix owns one row in ``id_counters`` holding the next number to
hand out. Claiming an id bumps that row on the caller's connection, so an
insert that rolls back gives its number back too. Numbers are padded to
four digits and just get wider after ``9999``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select, update

from orgtree.infrastructure.database.schema import id_counters

if TYPE_CHECKING:
    from sqlalchemy import Connection

# Designations, departments, employees; seeded by ``init_database``.
ID_PREFIXES = ("DSG-", "DEP-", "EMP-")


def format_id(prefix: str, number: int) -> str:
    return f"{prefix}{number:04d}"


def next_sequential_id(conn: Connection, type_prefix: str) -> str:
    """Claim the next id for *type_prefix* on *conn*.

    Raises:
        ValueError: *type_prefix* has no counter row.
    """
    if type_prefix not in ID_PREFIXES:
        known = ", ".join(ID_PREFIXES)
        raise ValueError(f"No id counter for prefix {type_prefix!r} (known: {known})")

    counter = id_counters.c
    number: int = conn.execute(
        select(counter.next_value).where(counter.type_prefix == type_prefix)
    ).scalar_one()
    conn.execute(
        update(id_counters)
        .where(counter.type_prefix == type_prefix)
        .values(next_value=counter.next_value + 1)
    )
    return format_id(type_prefix, number)
