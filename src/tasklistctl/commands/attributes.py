"""Command group: typed custom attributes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tasklistctl.commands._base import TaskGroup
from tasklistctl.domain.attributes import AttributeType
from tasklistctl.services.attributes import AttributeService

if TYPE_CHECKING:
    from tasklistctl.commands._context import AppContext

_ATTR_EXAMPLES = """\
  tasklistctl attr define Severity integer --rules '{"min": 1, "max": 5}'
  tasklistctl attr define Stage single_choice --rules '{"choices": ["dev", "qa"]}'
  tasklistctl attr set task 5 1 3
  tasklistctl attr show task 5"""

_KIND = click.Choice(["task", "list"])


@click.group(cls=TaskGroup, examples=_ATTR_EXAMPLES)
@click.pass_obj
def attr(app: AppContext) -> None:
    """Define attributes and set their values on tasks and lists."""


@attr.command(
    examples="""\
  tasklistctl attr define Estimate decimal --default 1.0
  tasklistctl attr define Owner text --required --rules '{"max_length": 40}'"""
)
@click.argument("name")
@click.argument("attr_type", type=click.Choice([t.value for t in AttributeType]))
@click.option("--required", "is_required", is_flag=True, help="Values may not be empty.")
@click.option("--default", "default_value", default=None, help="Default value.")
@click.option("--rules", "validation_rules", default=None, help="Validation rules as JSON.")
@click.pass_obj
def define(
    app: AppContext,
    name: str,
    attr_type: str,
    is_required: bool,
    default_value: str | None,
    validation_rules: str | None,
) -> None:
    """Create an attribute definition."""
    app.emit(
        AttributeService(app.store).create_attribute_definition(
            name,
            attr_type,
            is_required=is_required,
            default_value=default_value,
            validation_rules=validation_rules,
        )
    )


@attr.command(examples="  tasklistctl attr get 1")
@click.argument("definition_id", type=int)
@click.pass_obj
def get(app: AppContext, definition_id: int) -> None:
    """Show one attribute definition."""
    app.emit(AttributeService(app.store).get_attribute_definition(definition_id))


@attr.command("list", examples="  tasklistctl attr list")
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List attribute definitions."""
    app.emit(AttributeService(app.store).list_attribute_definitions())


@attr.command(examples="  tasklistctl attr delete 1")
@click.argument("definition_id", type=int)
@click.pass_obj
def delete(app: AppContext, definition_id: int) -> None:
    """Delete a definition and every value stored for it."""
    app.emit(AttributeService(app.store).delete_attribute_definition(definition_id))


@attr.command(
    "set",
    examples="""\
  tasklistctl attr set task 5 1 3
  tasklistctl attr set list 2 4 "2024-06-01" """,
)
@click.argument("kind", type=_KIND)
@click.argument("entity_id", type=int)
@click.argument("definition_id", type=int)
@click.argument("value", required=False)
@click.pass_obj
def set_value(
    app: AppContext, kind: str, entity_id: int, definition_id: int, value: str | None
) -> None:
    """Set an attribute value on a task or list."""
    svc = AttributeService(app.store)
    if kind == "task":
        app.emit(svc.set_task_attribute(entity_id, definition_id, value))
    else:
        app.emit(svc.set_list_attribute(entity_id, definition_id, value))


@attr.command(examples="  tasklistctl attr show task 5")
@click.argument("kind", type=_KIND)
@click.argument("entity_id", type=int)
@click.pass_obj
def show(app: AppContext, kind: str, entity_id: int) -> None:
    """Show the attribute values on a task or list."""
    svc = AttributeService(app.store)
    if kind == "task":
        app.emit(svc.get_task_attributes(entity_id))
    else:
        app.emit(svc.get_list_attributes(entity_id))


@attr.command(examples="  tasklistctl attr remove task 5 1")
@click.argument("kind", type=_KIND)
@click.argument("entity_id", type=int)
@click.argument("definition_id", type=int)
@click.pass_obj
def remove(app: AppContext, kind: str, entity_id: int, definition_id: int) -> None:
    """Remove an attribute value from a task or list."""
    svc = AttributeService(app.store)
    if kind == "task":
        app.emit(svc.remove_task_attribute(entity_id, definition_id))
    else:
        app.emit(svc.remove_list_attribute(entity_id, definition_id))
