"""Subcommand modules for orgtree.

:func:`register_commands` imports each group lazily so ``orgtree --help``
stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups on the root CLI group."""
    from orgtree.commands.department import department
    from orgtree.commands.designation import designation
    from orgtree.commands.staff import staff
    from orgtree.commands.tree import tree

    cli.add_command(designation)
    cli.add_command(department)
    cli.add_command(tree)
    cli.add_command(staff)
