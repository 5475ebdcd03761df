"""Command group: tasks and their status lifecycle."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tasklistctl.commands._base import TaskGroup
from tasklistctl.domain.lifecycle import Priority, TaskStatus
from tasklistctl.services.tasks import TaskService

if TYPE_CHECKING:
    from tasklistctl.commands._context import AppContext

_STATUS_CHOICE = click.Choice([s.value for s in TaskStatus])
_PRIORITY_CHOICE = click.Choice([p.value for p in Priority])

_TASK_EXAMPLES = """\
  tasklistctl task create 1 "Write report" --priority high --due 2024-07-01
  tasklistctl task start 5
  tasklistctl task complete 5
  tasklistctl task update 5 --status blocked
  tasklistctl task list --list 1 --status pending"""


@click.group(cls=TaskGroup, examples=_TASK_EXAMPLES)
@click.pass_obj
def task(app: AppContext) -> None:
    """Create tasks and move them through their lifecycle."""


@task.command(
    examples="""\
  tasklistctl task create 1 "Buy milk"
  tasklistctl task create 1 "Ship release" --status in_progress --hours 4.5"""
)
@click.argument("list_id", type=int)
@click.argument("title")
@click.option("--description", default=None, help="Task description.")
@click.option("--status", type=_STATUS_CHOICE, default=TaskStatus.PENDING.value)
@click.option("--priority", type=_PRIORITY_CHOICE, default=Priority.NORMAL.value)
@click.option("--due", "due_date", default=None, help="Due date (ISO date or datetime).")
@click.option("--hours", "estimated_hours", type=float, default=None, help="Estimated hours.")
@click.option("--notes", default=None, help="Free-form notes.")
@click.pass_obj
def create(
    app: AppContext,
    list_id: int,
    title: str,
    description: str | None,
    status: str,
    priority: str,
    due_date: str | None,
    estimated_hours: float | None,
    notes: str | None,
) -> None:
    """Create a task in a list."""
    app.emit(
        TaskService(app.store).create_task(
            title,
            list_id,
            description=description,
            status=status,
            priority=priority,
            due_date=due_date,
            estimated_hours=estimated_hours,
            notes=notes,
        )
    )


@task.command(examples="  tasklistctl task get 5")
@click.argument("task_id", type=int)
@click.pass_obj
def get(app: AppContext, task_id: int) -> None:
    """Show one task with its list name and tags."""
    app.emit(TaskService(app.store).get_task(task_id))


@task.command(
    examples="""\
  tasklistctl task update 5 --title "Write final report"
  tasklistctl task update 5 --status cancelled
  tasklistctl task update 5 --clear-due"""
)
@click.argument("task_id", type=int)
@click.option("--title", default=None, help="New title.")
@click.option("--description", default=None, help="New description.")
@click.option("--status", type=_STATUS_CHOICE, default=None, help="New status.")
@click.option("--priority", type=_PRIORITY_CHOICE, default=None, help="New priority.")
@click.option("--due", "due_date", default=None, help="New due date.")
@click.option("--clear-due", is_flag=True, help="Remove the due date.")
@click.option("--hours", "estimated_hours", type=float, default=None, help="Estimated hours.")
@click.option("--notes", default=None, help="Replace notes.")
@click.option("--list", "list_id", type=int, default=None, help="Move to this list.")
@click.pass_obj
def update(
    app: AppContext,
    task_id: int,
    title: str | None,
    description: str | None,
    status: str | None,
    priority: str | None,
    due_date: str | None,
    clear_due: bool,
    estimated_hours: float | None,
    notes: str | None,
    list_id: int | None,
) -> None:
    """Change any subset of a task's fields."""
    if due_date is not None and clear_due:
        raise click.UsageError("--due and --clear-due are mutually exclusive.")
    changes: dict[str, object] = {}
    for key, value in (
        ("title", title),
        ("description", description),
        ("status", status),
        ("priority", priority),
        ("due_date", due_date),
        ("estimated_hours", estimated_hours),
        ("notes", notes),
        ("list_id", list_id),
    ):
        if value is not None:
            changes[key] = value
    if clear_due:
        changes["due_date"] = None

    if not changes:
        click.echo("No changes specified. Use --help for options.", err=True)
        raise SystemExit(1)

    app.emit(TaskService(app.store).update_task(task_id, changes=changes))


@task.command(examples="  tasklistctl task start 5")
@click.argument("task_id", type=int)
@click.pass_obj
def start(app: AppContext, task_id: int) -> None:
    """Mark a task in progress, pausing the list's other active task."""
    app.emit(TaskService(app.store).start_task(task_id))


@task.command(examples="  tasklistctl task complete 5")
@click.argument("task_id", type=int)
@click.pass_obj
def complete(app: AppContext, task_id: int) -> None:
    """Mark a task completed."""
    app.emit(TaskService(app.store).complete_task(task_id))


@task.command(examples="  tasklistctl task delete 5")
@click.argument("task_id", type=int)
@click.pass_obj
def delete(app: AppContext, task_id: int) -> None:
    """Delete a task."""
    app.emit(TaskService(app.store).delete_task(task_id))


@task.command(
    "list",
    examples="""\
  tasklistctl task list
  tasklistctl task list --list 2 --status in_progress
  tasklistctl -q task list --limit 10 --offset 10""",
)
@click.option("--list", "list_id", type=int, default=None, help="Only tasks in this list.")
@click.option("--status", type=_STATUS_CHOICE, default=None, help="Only tasks with this status.")
@click.option("--limit", type=int, default=None, help="Max results.")
@click.option("--offset", type=int, default=None, help="Skip this many results.")
@click.pass_obj
def list_cmd(
    app: AppContext,
    list_id: int | None,
    status: str | None,
    limit: int | None,
    offset: int | None,
) -> None:
    """List live tasks, newest first."""
    app.emit(
        TaskService(app.store).list_tasks(
            list_id=list_id, status=status, limit=limit, offset=offset
        )
    )
