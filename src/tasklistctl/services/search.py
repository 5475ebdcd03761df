"""SearchService: filtered task/list search, suggestions and analytics.

The composition of joins and predicates lives in
:mod:`tasklistctl.infrastructure.repositories.search`; this service
validates the filter, runs the statement in a read scope and shapes the
payload. Counts and tag usage are plain aggregates.
"""

from __future__ import annotations

import logging
from typing import Any

import pydantic
from sqlalchemy import func, select, union

from tasklistctl.domain.errors import ValidationError
from tasklistctl.domain.lifecycle import TaskStatus
from tasklistctl.domain.search import SearchFilter
from tasklistctl.infrastructure.database.schema import list_tags, tags, task_lists, task_tags, tasks
from tasklistctl.infrastructure.repositories.search import compose_list_search, compose_task_search
from tasklistctl.services.base import BaseService, reports_errors
from tasklistctl.services.contracts import ListItem, TaskItem, collection
from tasklistctl.services.result import ServiceResult
from tasklistctl.services.telemetry import annotate, traced

logger = logging.getLogger(__name__)


def _coerce_filter(criteria: SearchFilter | dict[str, Any] | None) -> SearchFilter:
    if isinstance(criteria, SearchFilter):
        return criteria
    try:
        return SearchFilter.model_validate(criteria or {})
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "filter"
        msg = f"Invalid search filter {field}: {first['msg']}"
        raise ValidationError(msg, field=field) from exc


class SearchService(BaseService):
    """Read-only search and aggregate queries."""

    @traced
    @reports_errors("search_tasks")
    def search_tasks(self, criteria: SearchFilter | dict[str, Any] | None = None) -> ServiceResult:
        """Tasks matching every populated predicate group of *criteria*."""
        search_filter = _coerce_filter(criteria)
        stmt = compose_task_search(
            search_filter, max_results=self._store.settings.search.max_results
        )
        with self._store.read() as txn:
            rows = [dict(r._mapping) for r in txn.conn.execute(stmt)]
        annotate("matches", len(rows))
        data = collection(TaskItem, rows)
        data["filter"] = search_filter.model_dump(mode="json", exclude_defaults=True)
        return ServiceResult(ok=True, op="search_tasks", data=data)

    @traced
    @reports_errors("search_lists")
    def search_lists(self, criteria: SearchFilter | dict[str, Any] | None = None) -> ServiceResult:
        """Lists matching text, tag, attribute and created-range predicates."""
        search_filter = _coerce_filter(criteria)
        stmt = compose_list_search(
            search_filter, max_results=self._store.settings.search.max_results
        )
        with self._store.read() as txn:
            rows = [dict(r._mapping) for r in txn.conn.execute(stmt)]
        data = collection(ListItem, rows)
        data["filter"] = search_filter.model_dump(mode="json", exclude_defaults=True)
        return ServiceResult(ok=True, op="search_lists", data=data)

    @traced
    @reports_errors("get_search_suggestions")
    def get_search_suggestions(self, partial: str, *, limit: int | None = None) -> ServiceResult:
        """Distinct task titles, list names and tag names containing *partial*, A to Z."""
        op = "get_search_suggestions"
        config = self._store.settings.search
        if limit is not None and limit < 1:
            raise ValidationError("limit must be positive", field="limit")
        term = (partial or "").strip()
        if len(term) < config.suggestion_min_length:
            return ServiceResult(ok=True, op=op, data={"query": term, "count": 0, "items": []})

        sources = union(
            select(tasks.c.title.label("text")).where(
                tasks.c.deleted_at.is_(None), tasks.c.title.contains(term, autoescape=True)
            ),
            select(task_lists.c.name.label("text")).where(
                task_lists.c.deleted_at.is_(None),
                task_lists.c.name.contains(term, autoescape=True),
            ),
            select(tags.c.name.label("text")).where(tags.c.name.contains(term, autoescape=True)),
        ).subquery()
        stmt = (
            select(sources.c.text)
            .order_by(sources.c.text)
            .limit(min(config.suggestion_limit if limit is None else limit, config.max_results))
        )
        with self._store.read() as txn:
            items = list(txn.conn.execute(stmt).scalars())
        return ServiceResult(
            ok=True, op=op, data={"query": term, "count": len(items), "items": items}
        )

    def _status_counts(self, list_id: int | None) -> dict[str, int]:
        stmt = select(tasks.c.status, func.count(tasks.c.id)).where(tasks.c.deleted_at.is_(None))
        if list_id is not None:
            stmt = stmt.where(tasks.c.list_id == list_id)
        stmt = stmt.group_by(tasks.c.status)
        counts = {status.value: 0 for status in TaskStatus}
        with self._store.read() as txn:
            for status, count in txn.conn.execute(stmt):
                counts[status] = int(count)
        return counts

    def _top_tags(self, limit: int) -> list[dict[str, Any]]:
        task_usage = (
            select(func.count())
            .select_from(task_tags.join(tasks, tasks.c.id == task_tags.c.task_id))
            .where(task_tags.c.tag_id == tags.c.id, tasks.c.deleted_at.is_(None))
            .scalar_subquery()
        )
        list_usage = (
            select(func.count())
            .select_from(list_tags.join(task_lists, task_lists.c.id == list_tags.c.list_id))
            .where(list_tags.c.tag_id == tags.c.id, task_lists.c.deleted_at.is_(None))
            .scalar_subquery()
        )
        stmt = (
            select(
                tags.c.id,
                tags.c.name,
                tags.c.color,
                task_usage.label("task_count"),
                list_usage.label("list_count"),
            )
            .where((task_usage + list_usage) > 0)
            .order_by((task_usage + list_usage).desc(), tags.c.name)
            .limit(limit)
        )
        with self._store.read() as txn:
            rows = [dict(r._mapping) for r in txn.conn.execute(stmt)]
        for row in rows:
            row["usage_count"] = row["task_count"] + row["list_count"]
        return rows

    @traced
    @reports_errors("get_task_count_by_status")
    def get_task_count_by_status(self, *, list_id: int | None = None) -> ServiceResult:
        counts = self._status_counts(list_id)
        return ServiceResult(
            ok=True,
            op="get_task_count_by_status",
            data={"list_id": list_id, "counts": counts, "total": sum(counts.values())},
        )

    @traced
    @reports_errors("get_most_used_tags")
    def get_most_used_tags(self, *, limit: int = 20) -> ServiceResult:
        """Tags ordered by combined live task and list usage; unused tags are omitted."""
        if limit < 1:
            raise ValidationError("limit must be positive", field="limit")
        items = self._top_tags(limit)
        return ServiceResult(
            ok=True, op="get_most_used_tags", data={"count": len(items), "items": items}
        )

    @traced
    @reports_errors("get_task_analytics")
    def get_task_analytics(
        self, *, list_id: int | None = None, max_tags: int = 10
    ) -> ServiceResult:
        """Status counts, completion/cancellation rates and top tags in one payload."""
        if max_tags < 1:
            raise ValidationError("max_tags must be positive", field="max_tags")
        if list_id is not None:
            with self._store.read() as txn:
                txn.require_live(task_lists, list_id, "List")
        counts = self._status_counts(list_id)
        total = sum(counts.values())

        def rate(status: TaskStatus) -> float:
            return round(counts[status.value] * 100 / total, 1) if total else 0.0

        return ServiceResult(
            ok=True,
            op="get_task_analytics",
            data={
                "list_id": list_id,
                "total": total,
                "counts": counts,
                "completion_rate": rate(TaskStatus.COMPLETED),
                "cancellation_rate": rate(TaskStatus.CANCELLED),
                "active": counts[TaskStatus.IN_PROGRESS.value],
                "top_tags": self._top_tags(max_tags),
            },
        )
