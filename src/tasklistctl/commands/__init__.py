"""Subcommand modules for tasklistctl.

register_commands() imports each module on registration so the root
group stays a thin shell.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the command groups and standalone commands on *cli*."""
    # --- Groups ---
    from tasklistctl.commands.attributes import attr
    from tasklistctl.commands.lists import list_group
    from tasklistctl.commands.search import search
    from tasklistctl.commands.tags import tag
    from tasklistctl.commands.tasks import task
    from tasklistctl.commands.templates import template

    cli.add_command(list_group)
    cli.add_command(task)
    cli.add_command(template)
    cli.add_command(tag)
    cli.add_command(attr)
    cli.add_command(search)

    # --- Standalone commands ---
    from tasklistctl.commands.serve import serve
    from tasklistctl.commands.upgrade import upgrade

    cli.add_command(serve)
    cli.add_command(upgrade)
