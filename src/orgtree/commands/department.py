"""Command group: departments."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from orgtree.commands._base import OrgGroup
from orgtree.services.catalog import CatalogService

if TYPE_CHECKING:
    from orgtree.commands._context import AppContext


@click.group(
    cls=OrgGroup,
    examples="""\
  orgtree department list
  orgtree department create Engineering --whitelist Manager --whitelist Engineer""",
)
def department() -> None:
    """List and create departments."""


@department.command("list")
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List departments with their whitelists."""
    app.emit(CatalogService(app.store, app.settings).list_departments(app.organization_id))


@department.command(
    examples="""\
  orgtree department create Engineering
  orgtree department create Sales --whitelist "Account Executive" --whitelist Manager"""
)
@click.argument("name")
@click.option("--whitelist", "titles", multiple=True, help="Sanctioned title (repeatable).")
@click.pass_obj
def create(app: AppContext, name: str, titles: tuple[str, ...]) -> None:
    """Create a department."""
    service = CatalogService(app.store, app.settings)
    app.emit(service.create_department(app.organization_id, name, whitelist=list(titles)))
