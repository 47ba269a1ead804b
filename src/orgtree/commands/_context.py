"""AppContext: shared Click context for all commands.

Created once by the root group and handed to subcommands via
``@click.pass_obj``. Opens the resource store lazily and centralizes result
emission (stdout/stderr routing and exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from orgtree.config.logging import configure_logging
from orgtree.output.formatters import OutputSettings, format_result
from orgtree.services.telemetry import enable_telemetry

if TYPE_CHECKING:
    from orgtree.config.settings import OrgSettings
    from orgtree.infrastructure.store import ResourceStore
    from orgtree.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The store is created on first use, so ``--help`` and ``--version`` never
    touch the database or the network.
    """

    def __init__(self, settings: OrgSettings) -> None:
        self.settings = settings
        self._store: ResourceStore | None = None

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        if settings.verbose:
            enable_telemetry()

    @property
    def organization_id(self) -> str:
        return self.settings.organization_id

    @property
    def store(self) -> ResourceStore:
        if self._store is None:
            from orgtree.infrastructure.store import open_store

            self._store = open_store(self.settings)
        return self._store

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        Success goes to stdout with warnings on stderr. Failure goes to
        stderr and exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # JSON output already carries the warnings.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
