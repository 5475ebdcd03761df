"""ListService: the list hierarchy manager.

INVARIANT: the parent relation over live lists is acyclic. Every parent
assignment walks upward from the proposed parent with a visited set and
fails closed on self-ancestry or an already-corrupt cycle.

Deleting a list with children or tasks requires ``cascade``: descendants
are soft-deleted depth-first and every task of the subtree is orphaned
(``list_id`` set to NULL), all in one transaction.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, insert, select, update

from tasklistctl.domain.errors import IntegrityError
from tasklistctl.domain.fields import LIST_NAME_MAX, require_text
from tasklistctl.domain.hierarchy import (
    build_forest,
    check_reparent,
    collect_subtree,
    iter_ancestors,
)
from tasklistctl.domain.lifecycle import TaskStatus
from tasklistctl.infrastructure.database.schema import task_lists, tasks
from tasklistctl.services._helpers import now_iso
from tasklistctl.services.base import BaseService, reports_errors
from tasklistctl.services.contracts import (
    ListChanges,
    ListItem,
    collection,
    dump_validated,
    parse_changes,
)
from tasklistctl.services.result import ServiceResult
from tasklistctl.services.tasks import pause_other_active
from tasklistctl.services.telemetry import traced

if TYPE_CHECKING:
    from tasklistctl.infrastructure.store import StoreTransaction

logger = logging.getLogger(__name__)

PATH_SEPARATOR = " > "


def _live_parents(txn: StoreTransaction) -> dict[int, int | None]:
    """Parent id of every live list, keyed by list id."""
    rows = txn.conn.execute(
        select(task_lists.c.id, task_lists.c.parent_list_id).where(
            task_lists.c.deleted_at.is_(None)
        )
    )
    return {row.id: row.parent_list_id for row in rows}


def _listing_rows(txn: StoreTransaction) -> list[dict[str, Any]]:
    """Every live list with counts, parent name, depth, path and root id."""
    child = task_lists.alias("child")
    parent = task_lists.alias("parent")
    task_count = (
        select(func.count(tasks.c.id))
        .where(tasks.c.list_id == task_lists.c.id, tasks.c.deleted_at.is_(None))
        .scalar_subquery()
    )
    child_count = (
        select(func.count(child.c.id))
        .where(child.c.parent_list_id == task_lists.c.id, child.c.deleted_at.is_(None))
        .scalar_subquery()
    )
    stmt = (
        select(
            task_lists,
            parent.c.name.label("parent_name"),
            task_count.label("task_count"),
            child_count.label("child_list_count"),
        )
        .select_from(
            task_lists.outerjoin(parent, parent.c.id == task_lists.c.parent_list_id)
        )
        .where(task_lists.c.deleted_at.is_(None))
    )
    rows = [dict(r._mapping) for r in txn.conn.execute(stmt)]

    parents = {row["id"]: row["parent_list_id"] for row in rows}
    names = {row["id"]: row["name"] for row in rows}

    def live_parent(list_id: int) -> int | None:
        parent_id = parents.get(list_id)
        return parent_id if parent_id in parents else None

    for row in rows:
        chain = iter_ancestors(row["id"], live_parent)
        row["depth"] = len(chain) - 1
        row["path"] = PATH_SEPARATOR.join(names[i] for i in reversed(chain))
        row["root_id"] = chain[-1]
    rows.sort(key=lambda r: (r["root_id"], r["name"].casefold(), r["id"]))
    return rows


class ListService(BaseService):
    """Create, read, reorganize and delete task lists."""

    # --- Internal creation path (shared with template instantiation) ---

    def _insert_list(
        self,
        txn: StoreTransaction,
        *,
        name: str,
        description: str | None = None,
        parent_id: int | None = None,
    ) -> dict[str, Any]:
        """Validate and insert one list inside *txn*; return the stored row."""
        clean_name = require_text(name, "name", max_length=LIST_NAME_MAX)
        if parent_id is not None:
            txn.require_live(task_lists, parent_id, "List")
            check_reparent(None, parent_id, _live_parents(txn).get)

        now = now_iso()
        result = txn.conn.execute(
            insert(task_lists).values(
                name=clean_name,
                description=description,
                parent_list_id=parent_id,
                created_at=now,
                updated_at=now,
            )
        )
        row = txn.fetch(task_lists, int(result.inserted_primary_key[0]))
        assert row is not None
        return row

    # --- Public operations ---

    @traced
    @reports_errors("create_list")
    def create_list(
        self,
        name: str,
        *,
        description: str | None = None,
        parent_id: int | None = None,
    ) -> ServiceResult:
        """Create a list, optionally under a live parent."""
        with self._store.transaction() as txn:
            row = self._insert_list(txn, name=name, description=description, parent_id=parent_id)
        logger.debug("Created list %d (parent=%s)", row["id"], parent_id)
        return ServiceResult(ok=True, op="create_list", data=dump_validated(ListItem, row))

    @traced
    @reports_errors("get_list")
    def get_list(self, list_id: int) -> ServiceResult:
        """Fetch one live list with path, depth, parent name and counts."""
        with self._store.read() as txn:
            txn.require_live(task_lists, list_id, "List")
            row = next(r for r in _listing_rows(txn) if r["id"] == list_id)
        return ServiceResult(ok=True, op="get_list", data=dump_validated(ListItem, row))

    @traced
    @reports_errors("update_list")
    def update_list(self, list_id: int, *, changes: dict[str, Any]) -> ServiceResult:
        """Apply a partial update (name, description, parent_list_id).

        Re-parenting runs the ancestor walk from the proposed parent and is
        rejected with INTEGRITY_VIOLATION if it would create a cycle.
        """
        parsed = parse_changes(ListChanges, changes)
        fields = parsed.model_fields_set

        with self._store.transaction() as txn:
            row = txn.require_live(task_lists, list_id, "List")
            values: dict[str, Any] = {}
            if "name" in fields:
                values["name"] = require_text(parsed.name, "name", max_length=LIST_NAME_MAX)
            if "description" in fields:
                values["description"] = parsed.description
            if "parent_list_id" in fields and parsed.parent_list_id != row["parent_list_id"]:
                new_parent = parsed.parent_list_id
                if new_parent == list_id:
                    raise IntegrityError("A list cannot be its own parent", id=list_id)
                if new_parent is not None:
                    txn.require_live(task_lists, new_parent, "List")
                check_reparent(list_id, new_parent, _live_parents(txn).get)
                values["parent_list_id"] = new_parent

            if values:
                values["updated_at"] = now_iso()
                txn.conn.execute(
                    update(task_lists).where(task_lists.c.id == list_id).values(**values)
                )
                row = txn.fetch(task_lists, list_id) or row

        return ServiceResult(ok=True, op="update_list", data=dump_validated(ListItem, row))

    @traced
    @reports_errors("delete_list")
    def delete_list(self, list_id: int, *, cascade: bool = False) -> ServiceResult:
        """Soft-delete a list.

        Without *cascade*, a list that still has live child lists or tasks
        is rejected with INTEGRITY_VIOLATION. With it, the whole subtree is
        deleted and its tasks are orphaned. Missing or already-deleted ids
        report ``deleted: False``.
        """
        op = "delete_list"
        with self._store.transaction() as txn:
            row = txn.fetch(task_lists, list_id)
            if row is None or row["deleted_at"] is not None:
                return ServiceResult(ok=True, op=op, data={"id": list_id, "deleted": False})

            children_of: dict[int, list[int]] = defaultdict(list)
            for child_id, parent_id in sorted(_live_parents(txn).items()):
                if parent_id is not None:
                    children_of[parent_id].append(child_id)

            task_count = txn.conn.execute(
                select(func.count(tasks.c.id)).where(
                    tasks.c.list_id == list_id, tasks.c.deleted_at.is_(None)
                )
            ).scalar_one()
            child_count = len(children_of.get(list_id, []))
            if not cascade and (child_count or task_count):
                raise IntegrityError(
                    f"List {list_id} has {child_count} child list(s) and {task_count} task(s); "
                    "delete with cascade to remove them",
                    id=list_id,
                    child_list_count=child_count,
                    task_count=task_count,
                )

            descendants = collect_subtree(list_id, children_of)
            subtree = [*descendants, list_id]
            now = now_iso()
            orphaned = txn.conn.execute(
                update(tasks)
                .where(tasks.c.list_id.in_(subtree), tasks.c.deleted_at.is_(None))
                .values(list_id=None, updated_at=now)
            ).rowcount
            for doomed in subtree:
                txn.conn.execute(
                    update(task_lists)
                    .where(task_lists.c.id == doomed)
                    .values(deleted_at=now, updated_at=now)
                )

        logger.info(
            "Deleted list %d with %d descendant(s); orphaned %d task(s)",
            list_id,
            len(descendants),
            orphaned,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": list_id,
                "deleted": True,
                "deleted_list_ids": subtree,
                "orphaned_task_count": orphaned,
            },
        )

    @traced
    @reports_errors("list_all_lists")
    def list_all(self, *, hierarchical: bool = False) -> ServiceResult:
        """All live lists ordered by (root id, name), or as a forest of roots."""
        with self._store.read() as txn:
            rows = _listing_rows(txn)
        if hierarchical:
            roots = build_forest(rows)
            return ServiceResult(ok=True, op="list_all_lists", data=collection(ListItem, roots))
        return ServiceResult(ok=True, op="list_all_lists", data=collection(ListItem, rows))

    @traced
    @reports_errors("move_task")
    def move_task(self, task_id: int, target_list_id: int | None) -> ServiceResult:
        """Reassign a task to *target_list_id* (None for no list).

        A task that is in progress keeps its status and becomes the single
        active task of the target list. Missing or deleted tasks report
        ``moved: False``.
        """
        op = "move_task"
        with self._store.transaction() as txn:
            task = txn.fetch(tasks, task_id)
            if task is None or task["deleted_at"] is not None:
                return ServiceResult(ok=True, op=op, data={"id": task_id, "moved": False})
            if target_list_id is not None:
                txn.require_live(task_lists, target_list_id, "List")
                if task["status"] == TaskStatus.IN_PROGRESS.value:
                    pause_other_active(txn.conn, target_list_id, exclude_task_id=task_id)
            txn.conn.execute(
                update(tasks)
                .where(tasks.c.id == task_id)
                .values(list_id=target_list_id, updated_at=now_iso())
            )
        return ServiceResult(
            ok=True, op=op, data={"id": task_id, "moved": True, "list_id": target_list_id}
        )

