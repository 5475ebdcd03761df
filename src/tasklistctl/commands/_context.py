"""AppContext: shared Click context for all commands.

Created once by the root group and handed to subcommands through
``@click.pass_obj``. Opens the store lazily and routes results to
stdout/stderr with the right exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tasklistctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from tasklistctl.config.settings import TaskSettings
    from tasklistctl.infrastructure.store import Store
    from tasklistctl.services.result import ServiceResult


class AppContext:
    """Settings plus a lazily opened Store.

    ``--help`` and ``--version`` never touch the database because the
    store is only created on first access.
    """

    def __init__(self, settings: TaskSettings) -> None:
        self.settings = settings
        self._store: Store | None = None

        from tasklistctl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from tasklistctl.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def store(self) -> Store:
        if self._store is None:
            from tasklistctl.infrastructure.store import Store

            self._store = Store(self.settings)
        return self._store

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None

    def emit(self, result: ServiceResult) -> None:
        """Print *result*; failures go to stderr and exit with status 1.

        Warnings on success go to stderr unless the output is JSON, where
        they are already part of the payload.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
