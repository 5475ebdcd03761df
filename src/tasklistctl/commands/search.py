"""Command group: filtered search, suggestions, and aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from tasklistctl.commands._base import TaskGroup
from tasklistctl.domain.lifecycle import Priority, TaskStatus
from tasklistctl.domain.search import SortKey
from tasklistctl.services.search import SearchService

if TYPE_CHECKING:
    from collections.abc import Callable

    from tasklistctl.commands._context import AppContext

_SEARCH_EXAMPLES = """\
  tasklistctl search tasks "report" --status pending --tag work
  tasklistctl search tasks --due-to 2024-06-30 --sort due_date --asc
  tasklistctl search tasks --attr Severity=3
  tasklistctl search lists "home"
  tasklistctl search suggest rep
  tasklistctl search analytics --list 1"""


def _filter_options[F: Callable[..., Any]](func: F) -> F:
    """Options shared by ``search tasks`` and ``search lists``."""
    options = [
        click.argument("query", required=False),
        click.option(
            "--status", type=click.Choice([s.value for s in TaskStatus]), default=None
        ),
        click.option(
            "--priority", type=click.Choice([p.value for p in Priority]), default=None
        ),
        click.option("--list", "list_id", type=int, default=None, help="Restrict to a list."),
        click.option("--tag", "tag_names", multiple=True, help="Tag name (repeatable, any)."),
        click.option("--attr", "attr_pairs", multiple=True, help="Attribute as NAME=VALUE."),
        click.option("--due-from", default=None, help="Due on or after (ISO date/datetime)."),
        click.option("--due-to", default=None, help="Due on or before."),
        click.option("--created-from", default=None, help="Created on or after."),
        click.option("--created-to", default=None, help="Created on or before."),
        click.option("--completed-from", default=None, help="Completed on or after."),
        click.option("--completed-to", default=None, help="Completed on or before."),
        click.option(
            "--completed/--no-completed",
            "include_completed",
            default=True,
            help="Include completed tasks.",
        ),
        click.option(
            "--cancelled/--no-cancelled",
            "include_cancelled",
            default=False,
            help="Include cancelled tasks.",
        ),
        click.option(
            "--sort",
            "sort_by",
            type=click.Choice([k.value for k in SortKey]),
            default=SortKey.RELEVANCE.value,
        ),
        click.option("--asc", "ascending", is_flag=True, help="Ascending order."),
        click.option("--limit", type=int, default=None, help="Max results."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _criteria(
    query: str | None,
    tag_names: tuple[str, ...],
    attr_pairs: tuple[str, ...],
    ascending: bool,
    **fields: Any,
) -> dict[str, Any]:
    attributes = []
    for pair in attr_pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected NAME=VALUE, got {pair!r}", param_hint="--attr")
        attributes.append({"name": name.strip(), "value": value})
    criteria: dict[str, Any] = {k: v for k, v in fields.items() if v is not None}
    if query:
        criteria["query"] = query
    if tag_names:
        criteria["tags"] = list(tag_names)
    if attributes:
        criteria["attributes"] = attributes
    criteria["descending"] = not ascending
    return criteria


@click.group(cls=TaskGroup, examples=_SEARCH_EXAMPLES)
@click.pass_obj
def search(app: AppContext) -> None:
    """Search tasks and lists, and summarize the workload."""


@search.command("tasks", examples='  tasklistctl search tasks "invoice" --priority high')
@_filter_options
@click.pass_obj
def search_tasks(
    app: AppContext,
    query: str | None,
    tag_names: tuple[str, ...],
    attr_pairs: tuple[str, ...],
    ascending: bool,
    **fields: Any,
) -> None:
    """Search live tasks."""
    criteria = _criteria(query, tag_names, attr_pairs, ascending, **fields)
    app.emit(SearchService(app.store).search_tasks(criteria))


@search.command("lists", examples='  tasklistctl search lists "garden" --tag home')
@_filter_options
@click.pass_obj
def search_lists(
    app: AppContext,
    query: str | None,
    tag_names: tuple[str, ...],
    attr_pairs: tuple[str, ...],
    ascending: bool,
    **fields: Any,
) -> None:
    """Search live lists."""
    criteria = _criteria(query, tag_names, attr_pairs, ascending, **fields)
    app.emit(SearchService(app.store).search_lists(criteria))


@search.command(examples="  tasklistctl search suggest rep --limit 5")
@click.argument("partial")
@click.option("--limit", type=int, default=None, help="Max suggestions.")
@click.pass_obj
def suggest(app: AppContext, partial: str, limit: int | None) -> None:
    """Suggest task titles, list names and tag names containing PARTIAL."""
    app.emit(SearchService(app.store).get_search_suggestions(partial, limit=limit))


@search.command(examples="  tasklistctl search counts --list 2")
@click.option("--list", "list_id", type=int, default=None, help="Restrict to a list.")
@click.pass_obj
def counts(app: AppContext, list_id: int | None) -> None:
    """Count live tasks per status."""
    app.emit(SearchService(app.store).get_task_count_by_status(list_id=list_id))


@search.command("top-tags", examples="  tasklistctl search top-tags --limit 5")
@click.option("--limit", type=int, default=20, help="Max tags.")
@click.pass_obj
def top_tags(app: AppContext, limit: int) -> None:
    """Most used tags."""
    app.emit(SearchService(app.store).get_most_used_tags(limit=limit))


@search.command(examples="  tasklistctl search analytics --list 1")
@click.option("--list", "list_id", type=int, default=None, help="Restrict to a list.")
@click.pass_obj
def analytics(app: AppContext, list_id: int | None) -> None:
    """Status counts, completion rate and top tags."""
    app.emit(SearchService(app.store).get_task_analytics(list_id=list_id))
