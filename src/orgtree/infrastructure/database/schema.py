"""SQLAlchemy Core table definitions for the orgtree database.

Every row is scoped to an organization. Designations carry a normalized
``title_key`` so the unique constraint enforces case-insensitive titles.
"""

from __future__ import annotations

from sqlalchemy import (
    JSON,
    Column,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

designations = Table(
    "designations",
    metadata,
    Column("id", Text, primary_key=True),
    Column("organization_id", Text, nullable=False),
    Column("title", Text, nullable=False),
    Column("title_key", Text, nullable=False),
    Column("level", Integer, nullable=False, default=1, server_default="1"),
    Column("reports_to", Text),  # title of the parent designation
    Column("department_id", Text),
    Column("department_name", Text),
    Column("created", Text, nullable=False),
    UniqueConstraint("organization_id", "title_key"),
)

departments = Table(
    "departments",
    metadata,
    Column("id", Text, primary_key=True),
    Column("organization_id", Text, nullable=False),
    Column("name", Text, nullable=False),
    Column("designations", JSON, nullable=False, default=list),  # whitelist titles
    Column("created", Text, nullable=False),
)

employees = Table(
    "employees",
    metadata,
    Column("id", Text, primary_key=True),
    Column("organization_id", Text, nullable=False),
    Column("name", Text, nullable=False),
    Column("designation", Text, nullable=False, default="", server_default=""),
    Column("reports_to", Text),  # staff id of the manager
    Column("department_id", Text),
    Column("department_name", Text),
    Column("added_by_department_id", Text),  # department panel that created the record
    Column("email", Text),
    Column("status", Text, nullable=False, default="Active", server_default="Active"),
    Column("created", Text, nullable=False),
)

# ---------------------------------------------------------------------------
# Indexes for frequently filtered columns
# ---------------------------------------------------------------------------

Index("ix_designations_org", designations.c.organization_id)
Index("ix_departments_org", departments.c.organization_id)
Index("ix_employees_org_dept", employees.c.organization_id, employees.c.department_id)

id_counters = Table(
    "id_counters",
    metadata,
    Column("type_prefix", Text, primary_key=True),
    Column("next_value", Integer, nullable=False, default=1, server_default="1"),
)
