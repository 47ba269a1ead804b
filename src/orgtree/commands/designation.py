"""Command group: designation catalog and department reconciliation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from orgtree.commands._base import OrgGroup
from orgtree.services.catalog import CatalogService
from orgtree.services.reconcile import ReconcileService

if TYPE_CHECKING:
    from orgtree.commands._context import AppContext

_DESIGNATION_EXAMPLES = """\
  orgtree designation list
  orgtree designation reconcile DEP-0001
  orgtree designation create "Team Lead" --level 3 --reports-to Manager
  orgtree designation create Associate --level 4 --department DEP-0001
  orgtree designation delete DSG-0004
  orgtree designation whitelist DEP-0001
  orgtree designation whitelist DEP-0001 --set Manager --set Associate"""


@click.group(cls=OrgGroup, examples=_DESIGNATION_EXAMPLES)
def designation() -> None:
    """Manage designations and department whitelists."""


@designation.command(
    "list",
    examples="""\
  orgtree designation list
  orgtree --org acme --json designation list""",
)
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List every designation of the organization, most senior first."""
    app.emit(CatalogService(app.store, app.settings).list_designations(app.organization_id))


@designation.command(
    examples="""\
  orgtree designation reconcile DEP-0001
  orgtree --json designation reconcile DEP-0001"""
)
@click.argument("department_id")
@click.pass_obj
def reconcile(app: AppContext, department_id: str) -> None:
    """Create missing whitelisted designations and list the department's set."""
    service = ReconcileService(app.store, app.settings)
    app.emit(service.reconcile(app.organization_id, department_id))


@designation.command(
    examples="""\
  orgtree designation create Director --level 1
  orgtree designation create "Team Lead" --level 3 --reports-to Manager
  orgtree designation create Associate --level 4 --department DEP-0001"""
)
@click.argument("title")
@click.option("--level", default=1, type=click.IntRange(min=1), help="Rank, 1 is most senior.")
@click.option("--reports-to", default=None, help="Title of the parent designation.")
@click.option(
    "-d", "--department", "department_id", default=None, help="Scope to and whitelist in."
)
@click.pass_obj
def create(
    app: AppContext,
    title: str,
    level: int,
    reports_to: str | None,
    department_id: str | None,
) -> None:
    """Create a designation."""
    service = CatalogService(app.store, app.settings)
    app.emit(
        service.create_designation(
            app.organization_id,
            title,
            level=level,
            reports_to=reports_to,
            department_id=department_id,
        )
    )


@designation.command(
    examples="""\
  orgtree designation delete DSG-0004"""
)
@click.argument("designation_id")
@click.pass_obj
def delete(app: AppContext, designation_id: str) -> None:
    """Delete a designation by id."""
    service = CatalogService(app.store, app.settings)
    app.emit(service.delete_designation(app.organization_id, designation_id))


@designation.command(
    examples="""\
  orgtree designation whitelist DEP-0001
  orgtree designation whitelist DEP-0001 --set Manager --set Associate
  orgtree designation whitelist DEP-0001 --clear"""
)
@click.argument("department_id")
@click.option("--set", "titles", multiple=True, help="Replace the whitelist (repeatable).")
@click.option("--clear", is_flag=True, help="Remove the whitelist entirely.")
@click.pass_obj
def whitelist(app: AppContext, department_id: str, titles: tuple[str, ...], clear: bool) -> None:
    """Show or replace a department's designation whitelist."""
    service = CatalogService(app.store, app.settings)
    if titles and clear:
        raise click.UsageError("--set and --clear are mutually exclusive.")
    if titles or clear:
        app.emit(service.set_whitelist(app.organization_id, department_id, list(titles)))
    else:
        app.emit(service.get_whitelist(app.organization_id, department_id))
