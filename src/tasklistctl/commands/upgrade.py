"""Command: database schema migration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tasklistctl.commands._base import TaskCommand

if TYPE_CHECKING:
    from tasklistctl.commands._context import AppContext


@click.command(
    cls=TaskCommand,
    examples="""\
  tasklistctl upgrade
  tasklistctl upgrade --check
  tasklistctl upgrade --stamp""",
)
@click.option(
    "--check", "check_only", is_flag=True, help="Show pending migrations without applying."
)
@click.option("--stamp", is_flag=True, help="Record the schema as current without migrating.")
@click.pass_obj
def upgrade(app: AppContext, check_only: bool, stamp: bool) -> None:
    """Run pending database migrations."""
    from tasklistctl.services.upgrade import UpgradeService

    if check_only and stamp:
        raise click.UsageError("--check and --stamp are mutually exclusive.")
    svc = UpgradeService(app.store)
    if check_only:
        app.emit(svc.check_pending())
    elif stamp:
        app.emit(svc.stamp_current())
    else:
        app.emit(svc.apply())
