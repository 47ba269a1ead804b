"""Click classes for orgtree commands that carry canned invocations.

Every ``orgtree`` group and command may pass ``examples=`` with a few
ready-to-paste command lines. Those are shown by ``--examples`` rather
than in ``--help``, which stays a plain option list.
"""

from __future__ import annotations

from typing import Any

import click


def _show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    click.echo(f"Examples for '{ctx.command_path}':\n")
    click.echo(ctx.command.examples)  # type: ignore[attr-defined]
    ctx.exit(0)


class _ExamplesMixin:
    """Stores ``examples`` and registers the eager ``--examples`` flag."""

    params: list[click.Parameter]

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=_show_examples,
                    help="Show example invocations and exit.",
                )
            )


class OrgCommand(_ExamplesMixin, click.Command):
    pass


class OrgGroup(_ExamplesMixin, click.Group):
    """Group whose subcommands are :class:`OrgCommand` by default."""

    command_class = OrgCommand
