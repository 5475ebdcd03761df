"""Command group: task lists and their hierarchy."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tasklistctl.commands._base import TaskGroup
from tasklistctl.services.lists import ListService

if TYPE_CHECKING:
    from tasklistctl.commands._context import AppContext

_LIST_EXAMPLES = """\
  tasklistctl list create "Work"
  tasklistctl list create "Q3 launch" --parent 1
  tasklistctl list all --tree
  tasklistctl list update 2 --parent 3
  tasklistctl list delete 1 --cascade
  tasklistctl list move-task 7 2"""


@click.group("list", cls=TaskGroup, examples=_LIST_EXAMPLES)
@click.pass_obj
def list_group(app: AppContext) -> None:
    """Create, browse, and reorganize task lists."""


@list_group.command(
    examples="""\
  tasklistctl list create "Home"
  tasklistctl list create "Garden" --parent 1 --description "Outdoor jobs" """
)
@click.argument("name")
@click.option("--description", default=None, help="List description.")
@click.option("--parent", "parent_id", type=int, default=None, help="Parent list id.")
@click.pass_obj
def create(app: AppContext, name: str, description: str | None, parent_id: int | None) -> None:
    """Create a list, optionally nested under another."""
    app.emit(
        ListService(app.store).create_list(name, description=description, parent_id=parent_id)
    )


@list_group.command(examples="  tasklistctl list get 3")
@click.argument("list_id", type=int)
@click.pass_obj
def get(app: AppContext, list_id: int) -> None:
    """Show one list with its path and counts."""
    app.emit(ListService(app.store).get_list(list_id))


@list_group.command(
    examples="""\
  tasklistctl list update 3 --name "Errands"
  tasklistctl list update 3 --parent 1
  tasklistctl list update 3 --root"""
)
@click.argument("list_id", type=int)
@click.option("--name", default=None, help="New name.")
@click.option("--description", default=None, help="New description.")
@click.option("--parent", "parent_id", type=int, default=None, help="Move under this list.")
@click.option("--root", "to_root", is_flag=True, help="Detach from the parent list.")
@click.pass_obj
def update(
    app: AppContext,
    list_id: int,
    name: str | None,
    description: str | None,
    parent_id: int | None,
    to_root: bool,
) -> None:
    """Rename, describe, or re-parent a list."""
    if parent_id is not None and to_root:
        raise click.UsageError("--parent and --root are mutually exclusive.")
    changes: dict[str, object] = {}
    if name is not None:
        changes["name"] = name
    if description is not None:
        changes["description"] = description
    if parent_id is not None:
        changes["parent_list_id"] = parent_id
    if to_root:
        changes["parent_list_id"] = None

    if not changes:
        click.echo("No changes specified. Use --help for options.", err=True)
        raise SystemExit(1)

    app.emit(ListService(app.store).update_list(list_id, changes=changes))


@list_group.command(
    examples="""\
  tasklistctl list delete 4
  tasklistctl list delete 1 --cascade"""
)
@click.argument("list_id", type=int)
@click.option("--cascade", is_flag=True, help="Also delete every descendant list.")
@click.pass_obj
def delete(app: AppContext, list_id: int, cascade: bool) -> None:
    """Delete a list; its tasks are kept without a list."""
    app.emit(ListService(app.store).delete_list(list_id, cascade=cascade))


@list_group.command(
    "all",
    examples="""\
  tasklistctl list all
  tasklistctl list all --tree
  tasklistctl --json list all --tree""",
)
@click.option("--tree", "hierarchical", is_flag=True, help="Nest children under parents.")
@click.pass_obj
def all_lists(app: AppContext, hierarchical: bool) -> None:
    """Show every live list."""
    app.emit(ListService(app.store).list_all(hierarchical=hierarchical))


@list_group.command(
    "move-task",
    examples="""\
  tasklistctl list move-task 12 3
  tasklistctl list move-task 12 --none""",
)
@click.argument("task_id", type=int)
@click.argument("target_list_id", type=int, required=False)
@click.option("--none", "detach", is_flag=True, help="Leave the task without a list.")
@click.pass_obj
def move_task(app: AppContext, task_id: int, target_list_id: int | None, detach: bool) -> None:
    """Move a task to another list."""
    if target_list_id is None and not detach:
        raise click.UsageError("Give a TARGET_LIST_ID or pass --none.")
    if target_list_id is not None and detach:
        raise click.UsageError("TARGET_LIST_ID and --none are mutually exclusive.")
    app.emit(ListService(app.store).move_task(task_id, target_list_id))
