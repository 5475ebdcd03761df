"""Entry point for the ``tasklistctl`` command.

The root group resolves settings from its output and logging flags, opens
one :class:`AppContext` (and with it the store) for the invocation, and
closes it when the command finishes.
"""

from __future__ import annotations

import click

from tasklistctl import __version__
from tasklistctl.commands import register_commands
from tasklistctl.commands._context import AppContext
from tasklistctl.config.settings import TaskSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="tasklistctl")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print ids and counts only.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging and operation timings.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option("-c", "--config", "config_path", default=None, help="Path to tasklistctl.toml.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """Manage nested task lists, tasks, templates, tags and attributes."""
    settings = TaskSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
