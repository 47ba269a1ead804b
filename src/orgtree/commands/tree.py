"""Command group: hierarchy views."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from orgtree.commands._base import OrgGroup
from orgtree.services.hierarchy import HierarchyService

if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import Any

    from orgtree.commands._context import AppContext

_TREE_EXAMPLES = """\
  orgtree tree roles
  orgtree tree roles --department DEP-0001
  orgtree tree staff --department DEP-0001 --expand EMP-0001
  orgtree --json tree staff"""


def _tree_options(func: Callable[..., Any]) -> Callable[..., Any]:
    func = click.option(
        "--expand-all/--no-expand-all",
        "expand_all",
        default=None,
        help="Expand every node (default unless --expand is given).",
    )(func)
    func = click.option(
        "--expand", "expanded", multiple=True, help="Expand this node id (repeatable)."
    )(func)
    return click.option(
        "-d", "--department", "department_id", default=None, help="Restrict to a department."
    )(func)


def _resolve_expand_all(expanded: tuple[str, ...], expand_all: bool | None) -> bool:
    return expand_all if expand_all is not None else not expanded


@click.group(cls=OrgGroup, examples=_TREE_EXAMPLES)
def tree() -> None:
    """Show designation and staff hierarchies."""


@tree.command(
    examples="""\
  orgtree tree roles
  orgtree tree roles --department DEP-0001 --no-expand-all"""
)
@_tree_options
@click.pass_obj
def roles(
    app: AppContext,
    department_id: str | None,
    expanded: tuple[str, ...],
    expand_all: bool | None,
) -> None:
    """Designation hierarchy with the staff holding each role."""
    service = HierarchyService(app.store, app.settings)
    app.emit(
        service.role_tree(
            app.organization_id,
            department_id,
            expanded=expanded,
            expand_all=_resolve_expand_all(expanded, expand_all),
        )
    )


@tree.command(
    examples="""\
  orgtree tree staff
  orgtree tree staff --department DEP-0001 --expand EMP-0001"""
)
@_tree_options
@click.pass_obj
def staff(
    app: AppContext,
    department_id: str | None,
    expanded: tuple[str, ...],
    expand_all: bool | None,
) -> None:
    """Reporting-line hierarchy of staff."""
    service = HierarchyService(app.store, app.settings)
    app.emit(
        service.staff_tree(
            app.organization_id,
            department_id,
            expanded=expanded,
            expand_all=_resolve_expand_all(expanded, expand_all),
        )
    )
