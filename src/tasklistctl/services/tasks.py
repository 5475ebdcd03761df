"""TaskService: task CRUD and the single-active-task state machine.

INVARIANT: within one list, at most one live task is ``in_progress``.
Whenever a task becomes (or moves while) in progress, every other
in-progress task of its resulting list is paused back to ``pending`` in
the same transaction. The pause is a designed side effect, not an error.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, insert, select, update

from tasklistctl.domain.errors import ValidationError
from tasklistctl.domain.fields import check_hours, require_text, timestamp_text
from tasklistctl.domain.lifecycle import Priority, TaskStatus, transition_warning
from tasklistctl.infrastructure.database.schema import tags, task_lists, task_tags, tasks
from tasklistctl.services._helpers import now_iso, parse_enum
from tasklistctl.services.base import BaseService, reports_errors
from tasklistctl.services.contracts import (
    TaskChanges,
    TaskItem,
    collection,
    dump_validated,
    parse_changes,
)
from tasklistctl.services.result import ServiceResult
from tasklistctl.services.telemetry import annotate, traced

if TYPE_CHECKING:
    from sqlalchemy import Connection

    from tasklistctl.infrastructure.store import StoreTransaction

logger = logging.getLogger(__name__)


def pause_other_active(conn: Connection, list_id: int, *, exclude_task_id: int | None) -> int:
    """Move every other live in-progress task of *list_id* back to pending.

    Returns the number of tasks paused.
    """
    stmt = (
        update(tasks)
        .where(
            tasks.c.list_id == list_id,
            tasks.c.status == TaskStatus.IN_PROGRESS.value,
            tasks.c.deleted_at.is_(None),
        )
        .values(status=TaskStatus.PENDING.value, updated_at=now_iso())
    )
    if exclude_task_id is not None:
        stmt = stmt.where(tasks.c.id != exclude_task_id)
    paused = conn.execute(stmt).rowcount
    if paused:
        logger.info("Paused %d in-progress task(s) in list %d", paused, list_id)
        annotate("paused_tasks", paused)
    return paused


class TaskService(BaseService):
    """Create, read, update, transition, and delete tasks."""

    # --- Internal creation path (shared with template instantiation) ---

    def _insert_task(
        self,
        txn: StoreTransaction,
        *,
        title: str | None,
        list_id: int,
        description: str | None = None,
        status: TaskStatus = TaskStatus.PENDING,
        priority: Priority = Priority.NORMAL,
        due_date: date | datetime | str | None = None,
        estimated_hours: float | None = None,
        notes: str | None = None,
    ) -> dict[str, Any]:
        """Validate and insert one task inside *txn*; return the stored row."""
        max_length = self._store.settings.tasks.title_max_length
        clean_title = require_text(title, "title", max_length=max_length)
        txn.require_live(task_lists, list_id, "List")
        hours = check_hours(estimated_hours)
        due = timestamp_text(due_date)

        if status is TaskStatus.IN_PROGRESS:
            pause_other_active(txn.conn, list_id, exclude_task_id=None)

        now = now_iso()
        result = txn.conn.execute(
            insert(tasks).values(
                title=clean_title,
                description=description,
                notes=notes,
                status=status.value,
                priority=priority.value,
                list_id=list_id,
                due_date=due,
                estimated_hours=hours,
                completed_at=now if status is TaskStatus.COMPLETED else None,
                created_at=now,
                updated_at=now,
            )
        )
        task_id = int(result.inserted_primary_key[0])
        row = txn.fetch(tasks, task_id)
        assert row is not None
        return row

    # --- Public operations ---

    @traced
    @reports_errors("create_task")
    def create_task(
        self,
        title: str,
        list_id: int,
        *,
        description: str | None = None,
        status: str = TaskStatus.PENDING,
        priority: str = Priority.NORMAL,
        due_date: date | datetime | str | None = None,
        estimated_hours: float | None = None,
        notes: str | None = None,
    ) -> ServiceResult:
        """Create a task in *list_id*. Starting it in progress pauses the list's active task."""
        op = "create_task"
        task_status = parse_enum(TaskStatus, status, "status")
        task_priority = parse_enum(Priority, priority, "priority")

        with self._store.transaction() as txn:
            row = self._insert_task(
                txn,
                title=title,
                list_id=list_id,
                description=description,
                status=task_status,
                priority=task_priority,
                due_date=due_date,
                estimated_hours=estimated_hours,
                notes=notes,
            )

        logger.debug("Created task %d in list %d", row["id"], list_id)
        return ServiceResult(ok=True, op=op, data=dump_validated(TaskItem, row))

    @traced
    @reports_errors("get_task")
    def get_task(self, task_id: int) -> ServiceResult:
        """Fetch one live task with its list name and tag names."""
        with self._store.read() as txn:
            row = txn.require_live(tasks, task_id, "Task")
            if row["list_id"] is not None:
                row["list_name"] = txn.conn.execute(
                    select(task_lists.c.name).where(task_lists.c.id == row["list_id"])
                ).scalar_one_or_none()
            row["tags"] = list(
                txn.conn.execute(
                    select(tags.c.name)
                    .select_from(task_tags.join(tags, tags.c.id == task_tags.c.tag_id))
                    .where(task_tags.c.task_id == task_id)
                    .order_by(tags.c.name)
                ).scalars()
            )
        return ServiceResult(ok=True, op="get_task", data=dump_validated(TaskItem, row))

    def _apply_update(
        self, task_id: int, changes: dict[str, Any]
    ) -> tuple[dict[str, Any], list[str]]:
        """Apply a partial update in one transaction; return the new row and warnings."""
        parsed = parse_changes(TaskChanges, changes)
        fields = parsed.model_fields_set
        warnings: list[str] = []

        with self._store.transaction() as txn:
            row = txn.require_live(tasks, task_id, "Task")
            values: dict[str, Any] = {}

            if "title" in fields:
                max_length = self._store.settings.tasks.title_max_length
                values["title"] = require_text(parsed.title, "title", max_length=max_length)
            for name in ("description", "notes"):
                if name in fields:
                    values[name] = getattr(parsed, name)
            if "priority" in fields:
                if parsed.priority is None:
                    raise ValidationError("priority cannot be cleared", field="priority")
                values["priority"] = parsed.priority.value
            if "due_date" in fields:
                values["due_date"] = timestamp_text(parsed.due_date)
            if "estimated_hours" in fields:
                values["estimated_hours"] = check_hours(parsed.estimated_hours)

            target_list = row["list_id"]
            if "list_id" in fields and parsed.list_id != row["list_id"]:
                if parsed.list_id is not None:
                    txn.require_live(task_lists, parsed.list_id, "List")
                target_list = parsed.list_id
                values["list_id"] = target_list

            current = TaskStatus(row["status"])
            new_status = current
            if "status" in fields:
                if parsed.status is None:
                    raise ValidationError("status cannot be cleared", field="status")
                new_status = parsed.status
            if new_status is not current:
                values["status"] = new_status.value
                if new_status is TaskStatus.COMPLETED:
                    values["completed_at"] = now_iso()
                elif current is TaskStatus.COMPLETED:
                    values["completed_at"] = None
                warning = transition_warning(current, new_status)
                if warning:
                    warnings.append(warning)

            becomes_active = new_status is TaskStatus.IN_PROGRESS and (
                new_status is not current or target_list != row["list_id"]
            )
            if becomes_active and target_list is not None:
                pause_other_active(txn.conn, target_list, exclude_task_id=task_id)

            if not values:
                return row, warnings

            values["updated_at"] = now_iso()
            txn.conn.execute(update(tasks).where(tasks.c.id == task_id).values(**values))
            updated = txn.fetch(tasks, task_id)
            assert updated is not None

        logger.debug("Updated task %d: %s", task_id, sorted(values))
        return updated, warnings

    @traced
    @reports_errors("update_task")
    def update_task(self, task_id: int, *, changes: dict[str, Any]) -> ServiceResult:
        """Apply a partial update; only keys present in *changes* are written.

        Accepted keys: title, description, notes, status, priority, list_id,
        due_date, estimated_hours.
        """
        row, warnings = self._apply_update(task_id, changes)
        return ServiceResult(
            ok=True, op="update_task", data=dump_validated(TaskItem, row), warnings=warnings
        )

    @traced
    @reports_errors("start_task")
    def start_task(self, task_id: int) -> ServiceResult:
        """Set the task in progress, pausing any other active task in its list."""
        row, warnings = self._apply_update(task_id, {"status": TaskStatus.IN_PROGRESS})
        return ServiceResult(
            ok=True, op="start_task", data=dump_validated(TaskItem, row), warnings=warnings
        )

    @traced
    @reports_errors("complete_task")
    def complete_task(self, task_id: int) -> ServiceResult:
        row, warnings = self._apply_update(task_id, {"status": TaskStatus.COMPLETED})
        return ServiceResult(
            ok=True, op="complete_task", data=dump_validated(TaskItem, row), warnings=warnings
        )

    @traced
    @reports_errors("delete_task")
    def delete_task(self, task_id: int) -> ServiceResult:
        """Soft-delete a task. Missing or already-deleted ids report ``deleted: False``."""
        now = now_iso()
        with self._store.transaction() as txn:
            deleted = (
                txn.conn.execute(
                    update(tasks)
                    .where(tasks.c.id == task_id, tasks.c.deleted_at.is_(None))
                    .values(deleted_at=now, updated_at=now)
                ).rowcount
                > 0
            )
        if deleted:
            logger.debug("Soft-deleted task %d", task_id)
        return ServiceResult(ok=True, op="delete_task", data={"id": task_id, "deleted": deleted})

    @traced
    @reports_errors("list_tasks")
    def list_tasks(
        self,
        *,
        list_id: int | None = None,
        status: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> ServiceResult:
        """Live tasks, newest first; every filter is optional and they combine with AND."""
        filters = [tasks.c.deleted_at.is_(None)]
        if list_id is not None:
            filters.append(tasks.c.list_id == list_id)
        if status is not None:
            filters.append(tasks.c.status == parse_enum(TaskStatus, status, "status").value)
        if limit is not None and limit < 1:
            raise ValidationError("limit must be positive", field="limit")
        if offset is not None and offset < 0:
            raise ValidationError("offset must not be negative", field="offset")
        cap = self._store.settings.search.max_results
        stmt = (
            select(tasks)
            .where(*filters)
            .order_by(tasks.c.created_at.desc(), tasks.c.id.desc())
            .limit(min(limit, cap) if limit is not None else cap)
            .offset(offset or 0)
        )

        with self._store.read() as txn:
            rows = [dict(r._mapping) for r in txn.conn.execute(stmt)]
            total = txn.conn.execute(
                select(func.count()).select_from(tasks).where(*filters)
            ).scalar_one()

        data = collection(TaskItem, rows)
        data["total"] = int(total)
        return ServiceResult(ok=True, op="list_tasks", data=data)
