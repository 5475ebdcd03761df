"""Command group: hierarchical tags."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tasklistctl.commands._base import TaskGroup
from tasklistctl.services.tags import TagService

if TYPE_CHECKING:
    from tasklistctl.commands._context import AppContext

_TAG_EXAMPLES = """\
  tasklistctl tag create urgent --color "#ff0000"
  tasklistctl tag create backend --parent 2
  tasklistctl tag add task 5 1
  tasklistctl tag show list 3"""

_KIND = click.Choice(["task", "list"])


@click.group(cls=TaskGroup, examples=_TAG_EXAMPLES)
@click.pass_obj
def tag(app: AppContext) -> None:
    """Create tags and attach them to tasks and lists."""


@tag.command(examples='  tasklistctl tag create urgent --color "#ff0000"')
@click.argument("name")
@click.option("--color", default=None, help="Display color.")
@click.option("--parent", "parent_id", type=int, default=None, help="Parent tag id.")
@click.pass_obj
def create(app: AppContext, name: str, color: str | None, parent_id: int | None) -> None:
    """Create a tag."""
    app.emit(TagService(app.store).create_tag(name, color=color, parent_id=parent_id))


@tag.command(examples="  tasklistctl tag get 1")
@click.argument("tag_id", type=int)
@click.pass_obj
def get(app: AppContext, tag_id: int) -> None:
    """Show one tag."""
    app.emit(TagService(app.store).get_tag(tag_id))


@tag.command("list", examples="  tasklistctl tag list")
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List every tag with its path and usage."""
    app.emit(TagService(app.store).list_tags())


@tag.command(examples="  tasklistctl tag delete 1")
@click.argument("tag_id", type=int)
@click.pass_obj
def delete(app: AppContext, tag_id: int) -> None:
    """Delete a tag and its associations."""
    app.emit(TagService(app.store).delete_tag(tag_id))


@tag.command(
    examples="""\
  tasklistctl tag add task 5 1
  tasklistctl tag add list 3 1"""
)
@click.argument("kind", type=_KIND)
@click.argument("entity_id", type=int)
@click.argument("tag_id", type=int)
@click.pass_obj
def add(app: AppContext, kind: str, entity_id: int, tag_id: int) -> None:
    """Attach a tag to a task or list."""
    svc = TagService(app.store)
    if kind == "task":
        app.emit(svc.add_tag_to_task(entity_id, tag_id))
    else:
        app.emit(svc.add_tag_to_list(entity_id, tag_id))


@tag.command(examples="  tasklistctl tag remove task 5 1")
@click.argument("kind", type=_KIND)
@click.argument("entity_id", type=int)
@click.argument("tag_id", type=int)
@click.pass_obj
def remove(app: AppContext, kind: str, entity_id: int, tag_id: int) -> None:
    """Detach a tag from a task or list."""
    svc = TagService(app.store)
    if kind == "task":
        app.emit(svc.remove_tag_from_task(entity_id, tag_id))
    else:
        app.emit(svc.remove_tag_from_list(entity_id, tag_id))


@tag.command(examples="  tasklistctl tag show task 5")
@click.argument("kind", type=_KIND)
@click.argument("entity_id", type=int)
@click.pass_obj
def show(app: AppContext, kind: str, entity_id: int) -> None:
    """Show the tags on a task or list."""
    svc = TagService(app.store)
    if kind == "task":
        app.emit(svc.get_task_tags(entity_id))
    else:
        app.emit(svc.get_list_tags(entity_id))
