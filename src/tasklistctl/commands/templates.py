"""Command group: reusable task templates."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tasklistctl.commands._base import TaskGroup
from tasklistctl.domain.lifecycle import Priority
from tasklistctl.services.templates import TemplateService

if TYPE_CHECKING:
    from tasklistctl.commands._context import AppContext

_TEMPLATE_EXAMPLES = """\
  tasklistctl template create "Release" --category eng
  tasklistctl template add-task 1 "Tag {{version}}" --priority high
  tasklistctl template from-list 4 "Onboarding"
  tasklistctl template apply 1 "Release {{version}}" --param version=2.1"""


def _parse_params(pairs: tuple[str, ...]) -> dict[str, str]:
    params: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--param")
        params[key.strip()] = value
    return params


@click.group(cls=TaskGroup, examples=_TEMPLATE_EXAMPLES)
@click.pass_obj
def template(app: AppContext) -> None:
    """Build templates and instantiate them as lists."""


@template.command(examples='  tasklistctl template create "Sprint" --category agile')
@click.argument("name")
@click.option("--description", default=None, help="Template description.")
@click.option("--category", default=None, help="Free-form category.")
@click.pass_obj
def create(app: AppContext, name: str, description: str | None, category: str | None) -> None:
    """Create an empty template."""
    app.emit(
        TemplateService(app.store).create_template(
            name, description=description, category=category
        )
    )


@template.command(
    "from-list",
    examples='  tasklistctl template from-list 4 "Weekly review"',
)
@click.argument("list_id", type=int)
@click.argument("name")
@click.option("--description", default=None, help="Template description.")
@click.option("--category", default=None, help="Free-form category.")
@click.pass_obj
def from_list(
    app: AppContext,
    list_id: int,
    name: str,
    description: str | None,
    category: str | None,
) -> None:
    """Capture a list's tasks as a template."""
    app.emit(
        TemplateService(app.store).create_template_from_list(
            list_id, name, description=description, category=category
        )
    )


@template.command(
    "add-task",
    examples='  tasklistctl template add-task 1 "Review {{module}}" --hours 2',
)
@click.argument("template_id", type=int)
@click.argument("title")
@click.option("--description", default=None, help="Step description.")
@click.option(
    "--priority",
    type=click.Choice([p.value for p in Priority]),
    default=Priority.NORMAL.value,
)
@click.option("--hours", "estimated_hours", type=float, default=None, help="Estimated hours.")
@click.pass_obj
def add_task(
    app: AppContext,
    template_id: int,
    title: str,
    description: str | None,
    priority: str,
    estimated_hours: float | None,
) -> None:
    """Append a step to a template."""
    app.emit(
        TemplateService(app.store).add_template_task(
            template_id,
            title,
            description=description,
            priority=priority,
            estimated_hours=estimated_hours,
        )
    )


@template.command(examples="  tasklistctl template get 1")
@click.argument("template_id", type=int)
@click.pass_obj
def get(app: AppContext, template_id: int) -> None:
    """Show a template with its ordered steps."""
    app.emit(TemplateService(app.store).get_template(template_id))


@template.command(
    "list",
    examples="""\
  tasklistctl template list
  tasklistctl template list --category eng""",
)
@click.option("--category", default=None, help="Only this category.")
@click.pass_obj
def list_cmd(app: AppContext, category: str | None) -> None:
    """List templates."""
    app.emit(TemplateService(app.store).list_templates(category=category))


@template.command(
    examples="""\
  tasklistctl template apply 1 "Release 2.1"
  tasklistctl template apply 1 "Release {{v}}" --param v=2.1 --parent 3"""
)
@click.argument("template_id", type=int)
@click.argument("list_name")
@click.option("--description", "list_description", default=None, help="List description.")
@click.option("--parent", "parent_list_id", type=int, default=None, help="Parent list id.")
@click.option("--param", "params", multiple=True, help="Placeholder value as KEY=VALUE.")
@click.pass_obj
def apply(
    app: AppContext,
    template_id: int,
    list_name: str,
    list_description: str | None,
    parent_list_id: int | None,
    params: tuple[str, ...],
) -> None:
    """Create a new list from a template."""
    app.emit(
        TemplateService(app.store).apply_template(
            template_id,
            list_name,
            list_description=list_description,
            parent_list_id=parent_list_id,
            parameters=_parse_params(params),
        )
    )


@template.command(examples="  tasklistctl template delete 1")
@click.argument("template_id", type=int)
@click.pass_obj
def delete(app: AppContext, template_id: int) -> None:
    """Delete a template."""
    app.emit(TemplateService(app.store).delete_template(template_id))
