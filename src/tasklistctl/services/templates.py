"""TemplateService: reusable task blueprints.

Capturing a list copies only structural task fields (title, description,
priority, estimated hours) in creation order; status, dates, tags and
attributes never reach a template. Applying one creates a new list and
pending tasks through the regular list and task creation paths, in a
single transaction, with ``{{token}}`` placeholders filled from the
caller's parameters. Unmatched tokens stay verbatim.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, insert, select, update

from tasklistctl.domain.fields import TEMPLATE_NAME_MAX, check_hours, require_text
from tasklistctl.domain.lifecycle import Priority, TaskStatus
from tasklistctl.domain.placeholders import find_placeholders, substitute
from tasklistctl.infrastructure.database.schema import task_lists, tasks, template_tasks, templates
from tasklistctl.services._helpers import now_iso, parse_enum
from tasklistctl.services.base import BaseService, reports_errors
from tasklistctl.services.contracts import ListItem, TemplateItem, collection, dump_validated
from tasklistctl.services.lists import ListService
from tasklistctl.services.result import ServiceResult
from tasklistctl.services.tasks import TaskService
from tasklistctl.services.telemetry import traced

if TYPE_CHECKING:
    from collections.abc import Mapping

    from tasklistctl.infrastructure.store import StoreTransaction

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "1.0"


def _template_tasks(txn: StoreTransaction, template_id: int) -> list[dict[str, Any]]:
    rows = txn.conn.execute(
        select(template_tasks)
        .where(template_tasks.c.template_id == template_id)
        .order_by(template_tasks.c.order_index, template_tasks.c.id)
    )
    return [dict(r._mapping) for r in rows]


class TemplateService(BaseService):
    """Create, inspect, apply and delete templates."""

    def _insert_template(
        self,
        txn: StoreTransaction,
        *,
        name: str,
        description: str | None,
        category: str | None,
    ) -> dict[str, Any]:
        clean_name = require_text(name, "name", max_length=TEMPLATE_NAME_MAX)
        now = now_iso()
        result = txn.conn.execute(
            insert(templates).values(
                name=clean_name,
                description=description,
                category=category,
                version=DEFAULT_VERSION,
                created_at=now,
                updated_at=now,
            )
        )
        row = txn.fetch(templates, int(result.inserted_primary_key[0]))
        assert row is not None
        return row

    def _append_step(
        self,
        txn: StoreTransaction,
        template_id: int,
        *,
        title: str,
        description: str | None,
        priority: Priority,
        estimated_hours: float | None,
        order_index: int,
    ) -> None:
        max_length = self._store.settings.tasks.title_max_length
        txn.conn.execute(
            insert(template_tasks).values(
                template_id=template_id,
                title=require_text(title, "title", max_length=max_length),
                description=description,
                order_index=order_index,
                estimated_hours=check_hours(estimated_hours),
                priority=priority.value,
                created_at=now_iso(),
            )
        )

    @traced
    @reports_errors("create_template")
    def create_template(
        self,
        name: str,
        *,
        description: str | None = None,
        category: str | None = None,
    ) -> ServiceResult:
        """Create an empty template shell."""
        with self._store.transaction() as txn:
            row = self._insert_template(txn, name=name, description=description, category=category)
        row["tasks"] = []
        return ServiceResult(ok=True, op="create_template", data=dump_validated(TemplateItem, row))

    @traced
    @reports_errors("create_template_from_list")
    def create_template_from_list(
        self,
        list_id: int,
        name: str,
        *,
        description: str | None = None,
        category: str | None = None,
    ) -> ServiceResult:
        """Capture the live tasks of *list_id* as ordered template steps."""
        with self._store.transaction() as txn:
            txn.require_live(task_lists, list_id, "List")
            row = self._insert_template(txn, name=name, description=description, category=category)
            source = txn.conn.execute(
                select(
                    tasks.c.title,
                    tasks.c.description,
                    tasks.c.priority,
                    tasks.c.estimated_hours,
                )
                .where(tasks.c.list_id == list_id, tasks.c.deleted_at.is_(None))
                .order_by(tasks.c.created_at, tasks.c.id)
            ).all()
            for index, task in enumerate(source):
                self._append_step(
                    txn,
                    row["id"],
                    title=task.title,
                    description=task.description,
                    priority=Priority(task.priority),
                    estimated_hours=task.estimated_hours,
                    order_index=index,
                )
            row["tasks"] = _template_tasks(txn, row["id"])

        logger.debug(
            "Captured %d task(s) from list %d into template %d", len(source), list_id, row["id"]
        )
        return ServiceResult(
            ok=True, op="create_template_from_list", data=dump_validated(TemplateItem, row)
        )

    @traced
    @reports_errors("add_template_task")
    def add_template_task(
        self,
        template_id: int,
        title: str,
        *,
        description: str | None = None,
        priority: str = Priority.NORMAL,
        estimated_hours: float | None = None,
    ) -> ServiceResult:
        """Append a step at the end of the template's order."""
        step_priority = parse_enum(Priority, priority, "priority")
        with self._store.transaction() as txn:
            row = txn.require_writable(templates, template_id, "Template")
            next_index = txn.conn.execute(
                select(func.coalesce(func.max(template_tasks.c.order_index) + 1, 0)).where(
                    template_tasks.c.template_id == template_id
                )
            ).scalar_one()
            self._append_step(
                txn,
                template_id,
                title=title,
                description=description,
                priority=step_priority,
                estimated_hours=estimated_hours,
                order_index=int(next_index),
            )
            txn.conn.execute(
                update(templates)
                .where(templates.c.id == template_id)
                .values(updated_at=now_iso())
            )
            row = txn.fetch(templates, template_id) or row
            row["tasks"] = _template_tasks(txn, template_id)
        return ServiceResult(
            ok=True, op="add_template_task", data=dump_validated(TemplateItem, row)
        )

    @traced
    @reports_errors("get_template")
    def get_template(self, template_id: int) -> ServiceResult:
        with self._store.read() as txn:
            row = txn.require_live(templates, template_id, "Template")
            row["tasks"] = _template_tasks(txn, template_id)
        placeholders: dict[str, None] = {}
        for step in row["tasks"]:
            for token in find_placeholders(step["title"]) + find_placeholders(step["description"]):
                placeholders.setdefault(token, None)
        data = dump_validated(TemplateItem, row)
        data["placeholders"] = list(placeholders)
        return ServiceResult(ok=True, op="get_template", data=data)

    @traced
    @reports_errors("list_templates")
    def list_templates(self, *, category: str | None = None) -> ServiceResult:
        """Live templates ordered by name, with step counts."""
        step_count = (
            select(func.count(template_tasks.c.id))
            .where(template_tasks.c.template_id == templates.c.id)
            .scalar_subquery()
        )
        stmt = select(templates, step_count.label("task_count")).where(
            templates.c.deleted_at.is_(None)
        )
        if category is not None:
            stmt = stmt.where(templates.c.category == category)
        stmt = stmt.order_by(templates.c.name, templates.c.id)
        with self._store.read() as txn:
            rows = [dict(r._mapping) for r in txn.conn.execute(stmt)]
        return ServiceResult(ok=True, op="list_templates", data=collection(TemplateItem, rows))

    @traced
    @reports_errors("apply_template")
    def apply_template(
        self,
        template_id: int,
        list_name: str,
        *,
        list_description: str | None = None,
        parent_list_id: int | None = None,
        parameters: Mapping[str, str] | None = None,
    ) -> ServiceResult:
        """Instantiate a template as a new list of pending tasks."""
        lists = ListService(self._store)
        task_service = TaskService(self._store)

        with self._store.transaction() as txn:
            template = txn.require_live(templates, template_id, "Template")
            description = list_description
            if description is None:
                description = substitute(template["description"], parameters)
            new_list = lists._insert_list(
                txn, name=list_name, description=description, parent_id=parent_list_id
            )
            steps = _template_tasks(txn, template_id)
            for step in steps:
                task_service._insert_task(
                    txn,
                    title=substitute(step["title"], parameters),
                    list_id=new_list["id"],
                    description=substitute(step["description"], parameters),
                    status=TaskStatus.PENDING,
                    priority=Priority(step["priority"]),
                    estimated_hours=step["estimated_hours"],
                )

        logger.info(
            "Applied template %d as list %d with %d task(s)",
            template_id,
            new_list["id"],
            len(steps),
        )
        data = dump_validated(ListItem, new_list)
        data["task_count"] = len(steps)
        data["template_id"] = template_id
        return ServiceResult(ok=True, op="apply_template", data=data)

    @traced
    @reports_errors("delete_template")
    def delete_template(self, template_id: int) -> ServiceResult:
        """Soft-delete a template; lists created from it are untouched."""
        now = now_iso()
        with self._store.transaction() as txn:
            deleted = (
                txn.conn.execute(
                    update(templates)
                    .where(templates.c.id == template_id, templates.c.deleted_at.is_(None))
                    .values(deleted_at=now, updated_at=now)
                ).rowcount
                > 0
            )
        return ServiceResult(
            ok=True, op="delete_template", data={"id": template_id, "deleted": deleted}
        )
