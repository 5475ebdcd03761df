"""Search query composition over tasks and lists.

:class:`QueryComposer` accumulates join requirements and predicates in
order, then assembles a single SELECT. Which joins and predicates appear
depends only on which :class:`SearchFilter` fields are populated.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Self

from sqlalchemy import Select, Table, and_, case, nulls_last, or_, select
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.sql.expression import FromClause

from tasklistctl.domain.fields import lower_bound, upper_bound
from tasklistctl.domain.lifecycle import PRIORITY_RANK, TaskStatus
from tasklistctl.domain.search import SearchFilter, SortKey
from tasklistctl.infrastructure.database.schema import (
    attribute_definitions,
    list_attributes,
    list_tags,
    tags,
    task_attributes,
    task_lists,
    task_tags,
    tasks,
)


class QueryComposer:
    """Builder for a filtered SELECT over one base table."""

    def __init__(self, base: Table) -> None:
        self._base = base
        self._joins: list[tuple[FromClause, ColumnElement[bool]]] = []
        self._predicates: list[ColumnElement[bool]] = []
        self._distinct = False

    def join(self, target: FromClause, onclause: ColumnElement[bool]) -> Self:
        """Require an inner join; results become DISTINCT since joins can fan out."""
        self._joins.append((target, onclause))
        self._distinct = True
        return self

    def where(self, clause: ColumnElement[bool]) -> Self:
        self._predicates.append(clause)
        return self

    def where_any(self, clauses: list[ColumnElement[bool]]) -> Self:
        """Add one OR-group predicate; an empty group adds nothing."""
        if clauses:
            self._predicates.append(or_(*clauses))
        return self

    def where_between(
        self,
        column: ColumnElement[str],
        lower: date | datetime | None,
        upper: date | datetime | None,
    ) -> Self:
        """Range predicate on an ISO text column; a missing bound is open."""
        if lower is not None:
            self._predicates.append(column >= lower_bound(lower))
        if upper is not None:
            bound, exclusive = upper_bound(upper)
            self._predicates.append(column < bound if exclusive else column <= bound)
        return self

    def build(
        self,
        *,
        order_by: list[ColumnElement[object]],
        limit: int | None = None,
    ) -> Select[tuple[object, ...]]:
        source: FromClause = self._base
        for target, onclause in self._joins:
            source = source.join(target, onclause)
        stmt = select(self._base).select_from(source)
        if self._predicates:
            stmt = stmt.where(and_(*self._predicates))
        if self._distinct:
            stmt = stmt.distinct()
        stmt = stmt.order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        return stmt


def _priority_rank() -> ColumnElement[int]:
    return case(
        {p.value: rank for p, rank in PRIORITY_RANK.items()},
        value=tasks.c.priority,
        else_=-1,
    )


def _task_order(sort_by: SortKey, descending: bool) -> list[ColumnElement[object]]:
    def direction(col: ColumnElement[object]) -> ColumnElement[object]:
        return col.desc() if descending else col.asc()

    match sort_by:
        case SortKey.CREATED_DATE:
            return [direction(tasks.c.created_at), direction(tasks.c.id)]
        case SortKey.DUE_DATE:
            return [nulls_last(direction(tasks.c.due_date)), direction(tasks.c.id)]
        case SortKey.PRIORITY:
            return [direction(_priority_rank()), direction(tasks.c.created_at)]
        case SortKey.TITLE:
            return [direction(tasks.c.title), direction(tasks.c.id)]
        case _:
            # Relevance has no scoring model yet; it orders by last update.
            return [direction(tasks.c.updated_at), direction(tasks.c.id)]


def _effective_limit(requested: int | None, cap: int) -> int:
    return min(requested, cap) if requested is not None else cap


def compose_task_search(criteria: SearchFilter, *, max_results: int) -> Select[tuple[object, ...]]:
    """Build the task search SELECT for *criteria*."""
    q = QueryComposer(tasks).where(tasks.c.deleted_at.is_(None))

    if criteria.query:
        term = criteria.query.strip()
        q.where_any(
            [
                tasks.c.title.contains(term, autoescape=True),
                tasks.c.description.contains(term, autoescape=True),
                tasks.c.notes.contains(term, autoescape=True),
            ]
        )

    if criteria.status is not None:
        q.where(tasks.c.status == criteria.status.value)
    else:
        if not criteria.include_completed:
            q.where(tasks.c.status != TaskStatus.COMPLETED.value)
        if not criteria.include_cancelled:
            q.where(tasks.c.status != TaskStatus.CANCELLED.value)

    if criteria.priority is not None:
        q.where(tasks.c.priority == criteria.priority.value)
    if criteria.list_id is not None:
        q.where(tasks.c.list_id == criteria.list_id)

    if criteria.tags:
        q.join(task_tags, task_tags.c.task_id == tasks.c.id)
        q.join(tags, tags.c.id == task_tags.c.tag_id)
        q.where_any([tags.c.name == name for name in criteria.tags])

    for i, attr in enumerate(criteria.attributes):
        values = task_attributes.alias(f"ta_{i}")
        definition = attribute_definitions.alias(f"ad_{i}")
        q.join(values, values.c.task_id == tasks.c.id)
        q.join(definition, definition.c.id == values.c.attribute_definition_id)
        q.where(definition.c.name == attr.name)
        q.where(values.c.value.contains(attr.value, autoescape=True))

    q.where_between(tasks.c.due_date, criteria.due_from, criteria.due_to)
    q.where_between(tasks.c.created_at, criteria.created_from, criteria.created_to)
    q.where_between(tasks.c.completed_at, criteria.completed_from, criteria.completed_to)

    return q.build(
        order_by=_task_order(criteria.sort_by, criteria.descending),
        limit=_effective_limit(criteria.limit, max_results),
    )


def compose_list_search(criteria: SearchFilter, *, max_results: int) -> Select[tuple[object, ...]]:
    """Build the list search SELECT (text, tags, attributes, created range)."""
    q = QueryComposer(task_lists).where(task_lists.c.deleted_at.is_(None))

    if criteria.query:
        term = criteria.query.strip()
        q.where_any(
            [
                task_lists.c.name.contains(term, autoescape=True),
                task_lists.c.description.contains(term, autoescape=True),
            ]
        )

    if criteria.tags:
        q.join(list_tags, list_tags.c.list_id == task_lists.c.id)
        q.join(tags, tags.c.id == list_tags.c.tag_id)
        q.where_any([tags.c.name == name for name in criteria.tags])

    for i, attr in enumerate(criteria.attributes):
        values = list_attributes.alias(f"la_{i}")
        definition = attribute_definitions.alias(f"ad_{i}")
        q.join(values, values.c.list_id == task_lists.c.id)
        q.join(definition, definition.c.id == values.c.attribute_definition_id)
        q.where(definition.c.name == attr.name)
        q.where(values.c.value.contains(attr.value, autoescape=True))

    q.where_between(task_lists.c.created_at, criteria.created_from, criteria.created_to)

    col = {
        SortKey.TITLE: task_lists.c.name,
        SortKey.CREATED_DATE: task_lists.c.created_at,
    }.get(criteria.sort_by, task_lists.c.updated_at)
    ordered = col.desc() if criteria.descending else col.asc()
    return q.build(
        order_by=[ordered, task_lists.c.name.asc()],
        limit=_effective_limit(criteria.limit, max_results),
    )
