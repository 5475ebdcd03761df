"""TagService: the hierarchical tag forest and its task/list associations.

Tag names are globally unique. Paths join ancestor names with ``/`` from
the root down. Associations are idempotent: adding an existing one is a
no-op, removing a missing one reports ``removed: False``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import Table, delete, func, insert, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from tasklistctl.domain.errors import ConflictError
from tasklistctl.domain.fields import TAG_NAME_MAX, require_text
from tasklistctl.domain.hierarchy import iter_ancestors
from tasklistctl.infrastructure.database.schema import list_tags, tags, task_lists, task_tags, tasks
from tasklistctl.services._helpers import now_iso
from tasklistctl.services.base import BaseService, reports_errors
from tasklistctl.services.contracts import TagItem, collection, dump_validated
from tasklistctl.services.result import ServiceResult
from tasklistctl.services.telemetry import traced

if TYPE_CHECKING:
    from sqlalchemy import Column

    from tasklistctl.infrastructure.store import StoreTransaction

logger = logging.getLogger(__name__)

TAG_PATH_SEPARATOR = "/"

# entity kind -> (entity table, association table, association owner column, label)
_TARGETS: dict[str, tuple[Table, Table, str, str]] = {
    "task": (tasks, task_tags, "task_id", "Task"),
    "list": (task_lists, list_tags, "list_id", "List"),
}


def _tag_rows(txn: StoreTransaction) -> list[dict[str, Any]]:
    """Every tag with path, depth and combined task/list usage."""
    task_usage = (
        select(func.count())
        .select_from(task_tags)
        .where(task_tags.c.tag_id == tags.c.id)
        .scalar_subquery()
    )
    list_usage = (
        select(func.count())
        .select_from(list_tags)
        .where(list_tags.c.tag_id == tags.c.id)
        .scalar_subquery()
    )
    stmt = select(tags, (task_usage + list_usage).label("usage_count")).order_by(tags.c.name)
    rows = [dict(r._mapping) for r in txn.conn.execute(stmt)]

    parents = {row["id"]: row["parent_id"] for row in rows}
    names = {row["id"]: row["name"] for row in rows}
    for row in rows:
        chain = iter_ancestors(row["id"], parents.get)
        row["depth"] = len(chain) - 1
        row["path"] = TAG_PATH_SEPARATOR.join(names[i] for i in reversed(chain))
    return rows


class TagService(BaseService):
    """Create, browse and attach tags."""

    @traced
    @reports_errors("create_tag")
    def create_tag(
        self,
        name: str,
        *,
        color: str | None = None,
        parent_id: int | None = None,
    ) -> ServiceResult:
        """Create a tag, optionally beneath *parent_id*."""
        clean_name = require_text(name, "name", max_length=TAG_NAME_MAX)
        with self._store.transaction() as txn:
            exists = txn.conn.execute(
                select(tags.c.id).where(tags.c.name == clean_name)
            ).first()
            if exists is not None:
                raise ConflictError(f"Tag '{clean_name}' already exists", name=clean_name)
            if parent_id is not None:
                txn.require_live(tags, parent_id, "Tag")
            result = txn.conn.execute(
                insert(tags).values(
                    name=clean_name, color=color, parent_id=parent_id, created_at=now_iso()
                )
            )
            tag_id = int(result.inserted_primary_key[0])
            row = next(r for r in _tag_rows(txn) if r["id"] == tag_id)
        return ServiceResult(ok=True, op="create_tag", data=dump_validated(TagItem, row))

    @traced
    @reports_errors("get_tag")
    def get_tag(self, tag_id: int) -> ServiceResult:
        with self._store.read() as txn:
            txn.require_live(tags, tag_id, "Tag")
            row = next(r for r in _tag_rows(txn) if r["id"] == tag_id)
        return ServiceResult(ok=True, op="get_tag", data=dump_validated(TagItem, row))

    @traced
    @reports_errors("list_tags")
    def list_tags(self) -> ServiceResult:
        """All tags ordered by name, each with path, depth and usage count."""
        with self._store.read() as txn:
            rows = _tag_rows(txn)
        return ServiceResult(ok=True, op="list_tags", data=collection(TagItem, rows))

    @traced
    @reports_errors("delete_tag")
    def delete_tag(self, tag_id: int) -> ServiceResult:
        """Hard-delete a tag: drop its associations and re-root its children."""
        op = "delete_tag"
        with self._store.transaction() as txn:
            if txn.fetch(tags, tag_id) is None:
                return ServiceResult(ok=True, op=op, data={"id": tag_id, "deleted": False})
            removed = 0
            for assoc in (task_tags, list_tags):
                removed += txn.conn.execute(delete(assoc).where(assoc.c.tag_id == tag_id)).rowcount
            txn.conn.execute(update(tags).where(tags.c.parent_id == tag_id).values(parent_id=None))
            txn.conn.execute(delete(tags).where(tags.c.id == tag_id))
        logger.debug("Deleted tag %d and %d association(s)", tag_id, removed)
        return ServiceResult(
            ok=True, op=op, data={"id": tag_id, "deleted": True, "associations_removed": removed}
        )

    # --- Associations ---

    def _add(self, kind: str, entity_id: int, tag_id: int) -> bool:
        entity_table, assoc, owner, label = _TARGETS[kind]
        owner_col: Column[int] = assoc.c[owner]
        with self._store.transaction() as txn:
            txn.require_writable(entity_table, entity_id, label)
            txn.require_live(tags, tag_id, "Tag")
            stmt = (
                sqlite_insert(assoc)
                .values({owner: entity_id, "tag_id": tag_id, "created_at": now_iso()})
                .on_conflict_do_nothing(index_elements=[owner_col, assoc.c.tag_id])
            )
            return txn.conn.execute(stmt).rowcount > 0

    def _remove(self, kind: str, entity_id: int, tag_id: int) -> bool:
        _, assoc, owner, _ = _TARGETS[kind]
        with self._store.transaction() as txn:
            result = txn.conn.execute(
                delete(assoc).where(assoc.c[owner] == entity_id, assoc.c.tag_id == tag_id)
            )
            return result.rowcount > 0

    def _entity_tags(self, kind: str, entity_id: int) -> list[dict[str, Any]]:
        entity_table, assoc, owner, label = _TARGETS[kind]
        with self._store.read() as txn:
            txn.require_live(entity_table, entity_id, label)
            tag_ids = set(
                txn.conn.execute(
                    select(assoc.c.tag_id).where(assoc.c[owner] == entity_id)
                ).scalars()
            )
            return [row for row in _tag_rows(txn) if row["id"] in tag_ids]

    @traced
    @reports_errors("add_tag_to_task")
    def add_tag_to_task(self, task_id: int, tag_id: int) -> ServiceResult:
        """Attach a tag to a task; repeating it changes nothing."""
        created = self._add("task", task_id, tag_id)
        return ServiceResult(
            ok=True,
            op="add_tag_to_task",
            data={"task_id": task_id, "tag_id": tag_id, "added": True, "created": created},
        )

    @traced
    @reports_errors("add_tag_to_list")
    def add_tag_to_list(self, list_id: int, tag_id: int) -> ServiceResult:
        created = self._add("list", list_id, tag_id)
        return ServiceResult(
            ok=True,
            op="add_tag_to_list",
            data={"list_id": list_id, "tag_id": tag_id, "added": True, "created": created},
        )

    @traced
    @reports_errors("remove_tag_from_task")
    def remove_tag_from_task(self, task_id: int, tag_id: int) -> ServiceResult:
        removed = self._remove("task", task_id, tag_id)
        return ServiceResult(
            ok=True,
            op="remove_tag_from_task",
            data={"task_id": task_id, "tag_id": tag_id, "removed": removed},
        )

    @traced
    @reports_errors("remove_tag_from_list")
    def remove_tag_from_list(self, list_id: int, tag_id: int) -> ServiceResult:
        removed = self._remove("list", list_id, tag_id)
        return ServiceResult(
            ok=True,
            op="remove_tag_from_list",
            data={"list_id": list_id, "tag_id": tag_id, "removed": removed},
        )

    @traced
    @reports_errors("get_task_tags")
    def get_task_tags(self, task_id: int) -> ServiceResult:
        rows = self._entity_tags("task", task_id)
        return ServiceResult(ok=True, op="get_task_tags", data=collection(TagItem, rows))

    @traced
    @reports_errors("get_list_tags")
    def get_list_tags(self, list_id: int) -> ServiceResult:
        rows = self._entity_tags("list", list_id)
        return ServiceResult(ok=True, op="get_list_tags", data=collection(TagItem, rows))
