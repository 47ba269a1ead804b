"""Root CLI group for orgtree with global flags and command registration."""

from __future__ import annotations

import click

from orgtree import __version__
from orgtree.commands import register_commands
from orgtree.commands._context import AppContext
from orgtree.config.settings import OrgSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="orgtree")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with timing.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option("--org", "organization_id", default=None, help="Organization to operate on.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    organization_id: str | None,
) -> None:
    """orgtree: designation whitelists and org-chart hierarchies."""
    overrides = {"organization_id": organization_id} if organization_id else {}
    settings = OrgSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        **overrides,
    )
    ctx.obj = AppContext(settings)
    ctx.call_on_close(ctx.obj.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
