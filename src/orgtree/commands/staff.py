"""Command group: staffing and reporting lines."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from orgtree.commands._base import OrgGroup
from orgtree.services.hierarchy import HierarchyService
from orgtree.services.staffing import StaffingService

if TYPE_CHECKING:
    from orgtree.commands._context import AppContext

_STAFF_EXAMPLES = """\
  orgtree staff hire "Ada Lovelace" Engineer --manager EMP-0002
  orgtree staff move EMP-0003 --department DEP-0002 --manager EMP-0007
  orgtree staff managers Engineer --department DEP-0001
  orgtree staff options EMP-0002
  orgtree staff suggest Engineer --department DEP-0001
  orgtree staff reports EMP-0002"""

_department_option = click.option(
    "-d", "--department", "department_id", default=None, help="Department scope."
)


@click.group(cls=OrgGroup, examples=_STAFF_EXAMPLES)
def staff() -> None:
    """Hire staff and query reporting eligibility."""


@staff.command(
    examples="""\
  orgtree staff hire "Ada Lovelace" Engineer --manager EMP-0002
  orgtree staff hire "Grace Hopper" Director --department DEP-0001
  orgtree staff hire "Alan Turing" Manager --manager EMP-0005 --allow-ineligible"""
)
@click.argument("name")
@click.argument("designation")
@click.option("--manager", "manager_id", default=None, help="Staff id to report to.")
@_department_option
@click.option("--email", default=None, help="Contact email.")
@click.option(
    "--allow-ineligible",
    is_flag=True,
    help="Warn instead of failing when the manager does not outrank the role.",
)
@click.pass_obj
def hire(
    app: AppContext,
    name: str,
    designation: str,
    manager_id: str | None,
    department_id: str | None,
    email: str | None,
    allow_ineligible: bool,
) -> None:
    """Create a staff record. The department defaults to the manager's."""
    service = StaffingService(app.store, app.settings)
    app.emit(
        service.hire(
            app.organization_id,
            name,
            designation,
            manager_id=manager_id,
            department_id=department_id,
            email=email,
            strict=not allow_ineligible,
        )
    )


@staff.command(
    examples="""\
  orgtree staff move EMP-0003 --department DEP-0002
  orgtree staff move EMP-0003 --designation Manager --manager EMP-0001
  orgtree staff move EMP-0003 --top-level"""
)
@click.argument("staff_id")
@click.option("-d", "--department", "department_id", default=None, help="New department.")
@click.option("--designation", default=None, help="New designation title.")
@click.option("--manager", "manager_id", default=None, help="New manager's staff id.")
@click.option("--top-level", "detach", is_flag=True, help="Remove the current manager.")
@click.option(
    "--allow-ineligible",
    is_flag=True,
    help="Warn instead of failing when the manager does not outrank the role.",
)
@click.pass_obj
def move(
    app: AppContext,
    staff_id: str,
    department_id: str | None,
    designation: str | None,
    manager_id: str | None,
    detach: bool,
    allow_ineligible: bool,
) -> None:
    """Transfer STAFF_ID to another department, designation, or manager."""
    if detach and manager_id is not None:
        raise click.UsageError("--top-level and --manager are mutually exclusive.")
    service = StaffingService(app.store, app.settings)
    app.emit(
        service.transfer(
            app.organization_id,
            staff_id,
            department_id=department_id,
            designation=designation,
            manager_id=manager_id,
            detach=detach,
            strict=not allow_ineligible,
        )
    )


@staff.command(
    examples="""\
  orgtree staff managers Engineer
  orgtree staff managers Engineer --department DEP-0001 --exclude EMP-0007"""
)
@click.argument("designation")
@_department_option
@click.option("--exclude", "exclude_id", default=None, help="Staff id to leave out.")
@click.pass_obj
def managers(
    app: AppContext,
    designation: str,
    department_id: str | None,
    exclude_id: str | None,
) -> None:
    """Staff eligible to manage a holder of DESIGNATION."""
    service = StaffingService(app.store, app.settings)
    app.emit(
        service.manager_candidates(
            app.organization_id, designation, department_id, exclude_id=exclude_id
        )
    )


@staff.command(
    examples="""\
  orgtree staff options EMP-0002
  orgtree staff options EMP-0002 --department DEP-0001"""
)
@click.argument("manager_id")
@_department_option
@click.pass_obj
def options(app: AppContext, manager_id: str, department_id: str | None) -> None:
    """Designations a new report of MANAGER_ID may hold."""
    service = StaffingService(app.store, app.settings)
    app.emit(service.designation_options(app.organization_id, manager_id, department_id))


@staff.command(
    examples="""\
  orgtree staff suggest Engineer --department DEP-0001"""
)
@click.argument("designation")
@_department_option
@click.pass_obj
def suggest(app: AppContext, designation: str, department_id: str | None) -> None:
    """Suggest a manager from the role DESIGNATION reports to."""
    service = StaffingService(app.store, app.settings)
    app.emit(service.suggest_manager(app.organization_id, designation, department_id))


@staff.command(
    examples="""\
  orgtree staff reports EMP-0002
  orgtree --json staff reports EMP-0002"""
)
@click.argument("staff_id")
@_department_option
@click.pass_obj
def reports(app: AppContext, staff_id: str, department_id: str | None) -> None:
    """Direct reports of STAFF_ID."""
    service = HierarchyService(app.store, app.settings)
    app.emit(service.direct_reports(app.organization_id, staff_id, department_id))
