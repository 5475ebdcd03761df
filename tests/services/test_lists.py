"""Tests for ListService: hierarchy, cascade delete, listing, task moves."""

from __future__ import annotations

from sqlalchemy import select, update

from tasklistctl.infrastructure.database.schema import task_lists, tasks
from tasklistctl.infrastructure.store import Store
from tasklistctl.services.lists import ListService
from tasklistctl.services.tasks import TaskService
from tests.conftest import create_list, create_task, task_status


class TestCreateList:
    def test_root_list(self, store: Store) -> None:
        data = create_list(store, "  Work  ", description="Day job")
        assert data["name"] == "Work"
        assert data["parent_list_id"] is None
        assert data["description"] == "Day job"
        assert "deleted_at" not in data

    def test_child_list(self, store: Store) -> None:
        parent = create_list(store, "Work")
        child = create_list(store, "Q3", parent_id=parent["id"])
        assert child["parent_list_id"] == parent["id"]

    def test_empty_name_rejected(self, store: Store) -> None:
        result = ListService(store).create_list("   ")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "VALIDATION_FAILED"

    def test_name_length_boundary(self, store: Store) -> None:
        assert ListService(store).create_list("n" * 200).ok
        result = ListService(store).create_list("n" * 201)
        assert not result.ok
        assert result.error.code == "VALIDATION_FAILED"

    def test_missing_parent(self, store: Store) -> None:
        result = ListService(store).create_list("Orphan", parent_id=999)
        assert not result.ok
        assert result.error.code == "NOT_FOUND"

    def test_deleted_parent(self, store: Store) -> None:
        parent = create_list(store, "Gone")
        assert ListService(store).delete_list(parent["id"]).data["deleted"] is True
        result = ListService(store).create_list("Child", parent_id=parent["id"])
        assert not result.ok
        assert result.error.code == "NOT_FOUND"


class TestGetList:
    def test_path_depth_and_counts(self, store: Store) -> None:
        a = create_list(store, "A")
        b = create_list(store, "B", parent_id=a["id"])
        c = create_list(store, "C", parent_id=b["id"])
        create_task(store, "t1", b["id"])

        data = ListService(store).get_list(b["id"]).data
        assert data["path"] == "A > B"
        assert data["depth"] == 1
        assert data["parent_name"] == "A"
        assert data["task_count"] == 1
        assert data["child_list_count"] == 1

        assert ListService(store).get_list(c["id"]).data["path"] == "A > B > C"

    def test_not_found(self, store: Store) -> None:
        result = ListService(store).get_list(42)
        assert not result.ok
        assert result.error.code == "NOT_FOUND"


class TestReparent:
    def test_cycle_rejected(self, store: Store) -> None:
        a = create_list(store, "A")
        b = create_list(store, "B", parent_id=a["id"])
        c = create_list(store, "C", parent_id=b["id"])

        result = ListService(store).update_list(a["id"], changes={"parent_list_id": c["id"]})
        assert not result.ok
        assert result.error.code == "INTEGRITY_VIOLATION"
        # Unchanged
        assert ListService(store).get_list(a["id"]).data["parent_list_id"] is None

    def test_self_parent_rejected(self, store: Store) -> None:
        a = create_list(store, "A")
        result = ListService(store).update_list(a["id"], changes={"parent_list_id": a["id"]})
        assert not result.ok
        assert result.error.code == "INTEGRITY_VIOLATION"

    def test_move_subtree(self, store: Store) -> None:
        a = create_list(store, "A")
        b = create_list(store, "B")
        c = create_list(store, "C", parent_id=b["id"])
        result = ListService(store).update_list(b["id"], changes={"parent_id": a["id"]})
        assert result.ok, result.error
        assert ListService(store).get_list(c["id"]).data["path"] == "A > B > C"

    def test_detach_to_root(self, store: Store) -> None:
        a = create_list(store, "A")
        b = create_list(store, "B", parent_id=a["id"])
        result = ListService(store).update_list(b["id"], changes={"parent_list_id": None})
        assert result.ok
        assert result.data["parent_list_id"] is None

    def test_corrupt_cycle_detected(self, store: Store) -> None:
        a = create_list(store, "A")
        b = create_list(store, "B", parent_id=a["id"])
        x = create_list(store, "X")
        with store.transaction() as txn:
            txn.conn.execute(
                update(task_lists)
                .where(task_lists.c.id == a["id"])
                .values(parent_list_id=b["id"])
            )
        result = ListService(store).update_list(x["id"], changes={"parent_list_id": a["id"]})
        assert not result.ok
        assert result.error.code == "INTEGRITY_VIOLATION"
        assert "Circular reference" in result.error.message

    def test_unknown_change_key(self, store: Store) -> None:
        a = create_list(store, "A")
        result = ListService(store).update_list(a["id"], changes={"colour": "red"})
        assert not result.ok
        assert result.error.code == "VALIDATION_FAILED"

    def test_rename(self, store: Store) -> None:
        a = create_list(store, "A")
        result = ListService(store).update_list(a["id"], changes={"name": "Renamed"})
        assert result.data["name"] == "Renamed"
        assert result.data["updated_at"] >= a["updated_at"]


class TestDeleteList:
    def test_non_empty_requires_cascade(self, store: Store) -> None:
        a = create_list(store, "A")
        create_list(store, "B", parent_id=a["id"])
        result = ListService(store).delete_list(a["id"])
        assert not result.ok
        assert result.error.code == "INTEGRITY_VIOLATION"
        assert ListService(store).get_list(a["id"]).ok

    def test_list_with_tasks_requires_cascade(self, store: Store) -> None:
        a = create_list(store, "A")
        create_task(store, "t", a["id"])
        result = ListService(store).delete_list(a["id"])
        assert result.error is not None
        assert result.error.detail["task_count"] == 1

    def test_empty_list(self, store: Store) -> None:
        a = create_list(store, "A")
        result = ListService(store).delete_list(a["id"])
        assert result.ok
        assert result.data["deleted"] is True
        assert result.data["deleted_list_ids"] == [a["id"]]

    def test_cascade_orphans_tasks(self, store: Store) -> None:
        a = create_list(store, "A")
        b = create_list(store, "B", parent_id=a["id"])
        c = create_list(store, "C", parent_id=b["id"])
        t1 = create_task(store, "t1", a["id"])
        t2 = create_task(store, "t2", c["id"])

        result = ListService(store).delete_list(a["id"], cascade=True)
        assert result.ok, result.error
        assert result.data["deleted_list_ids"] == [c["id"], b["id"], a["id"]]
        assert result.data["orphaned_task_count"] == 2

        for list_id in (a["id"], b["id"], c["id"]):
            assert ListService(store).get_list(list_id).error.code == "NOT_FOUND"
        for task in (t1, t2):
            data = TaskService(store).get_task(task["id"]).data
            assert data["list_id"] is None
            assert data["status"] == "pending"

    def test_missing_or_repeat_delete(self, store: Store) -> None:
        svc = ListService(store)
        assert svc.delete_list(999).data["deleted"] is False
        a = create_list(store, "A")
        assert svc.delete_list(a["id"]).data["deleted"] is True
        second = svc.delete_list(a["id"])
        assert second.ok
        assert second.data["deleted"] is False

    def test_soft_delete_keeps_row(self, store: Store) -> None:
        a = create_list(store, "A")
        ListService(store).delete_list(a["id"])
        with store.read() as txn:
            deleted_at = txn.conn.execute(
                select(task_lists.c.deleted_at).where(task_lists.c.id == a["id"])
            ).scalar_one()
        assert deleted_at is not None


class TestListAll:
    def test_flat_order_by_root_then_name(self, store: Store) -> None:
        work = create_list(store, "Work")
        home = create_list(store, "home")
        create_list(store, "beta", parent_id=work["id"])
        create_list(store, "Alpha", parent_id=work["id"])

        items = ListService(store).list_all().data["items"]
        names = [i["name"] for i in items]
        assert names == ["Alpha", "beta", "Work", "home"]
        assert {i["id"] for i in items} >= {work["id"], home["id"]}

    def test_hierarchical(self, store: Store) -> None:
        work = create_list(store, "Work")
        q3 = create_list(store, "Q3", parent_id=work["id"])
        create_list(store, "Launch", parent_id=q3["id"])
        create_list(store, "Home")

        data = ListService(store).list_all(hierarchical=True).data
        assert data["count"] == 2
        roots = {r["name"]: r for r in data["items"]}
        assert roots["Work"]["children"][0]["name"] == "Q3"
        assert roots["Work"]["children"][0]["children"][0]["name"] == "Launch"
        assert roots["Home"]["children"] == []

    def test_deleted_lists_hidden(self, store: Store) -> None:
        a = create_list(store, "A")
        create_list(store, "B")
        ListService(store).delete_list(a["id"])
        names = [i["name"] for i in ListService(store).list_all().data["items"]]
        assert names == ["B"]


class TestMoveTask:
    def test_move(self, store: Store) -> None:
        a = create_list(store, "A")
        b = create_list(store, "B")
        task = create_task(store, "t", a["id"])
        result = ListService(store).move_task(task["id"], b["id"])
        assert result.ok
        assert result.data == {"id": task["id"], "moved": True, "list_id": b["id"]}
        assert TaskService(store).get_task(task["id"]).data["list_id"] == b["id"]

    def test_missing_task_reports_false(self, store: Store) -> None:
        b = create_list(store, "B")
        result = ListService(store).move_task(999, b["id"])
        assert result.ok
        assert result.data["moved"] is False

    def test_missing_target_list(self, store: Store) -> None:
        a = create_list(store, "A")
        task = create_task(store, "t", a["id"])
        result = ListService(store).move_task(task["id"], 999)
        assert not result.ok
        assert result.error.code == "NOT_FOUND"

    def test_active_task_keeps_single_active_in_target(self, store: Store) -> None:
        a = create_list(store, "A")
        b = create_list(store, "B")
        moving = create_task(store, "moving", a["id"], status="in_progress")
        resident = create_task(store, "resident", b["id"], status="in_progress")

        assert ListService(store).move_task(moving["id"], b["id"]).data["moved"] is True
        assert task_status(store, moving["id"]) == "in_progress"
        assert task_status(store, resident["id"]) == "pending"

    def test_detach_from_list(self, store: Store) -> None:
        a = create_list(store, "A")
        task = create_task(store, "t", a["id"])
        assert ListService(store).move_task(task["id"], None).data["moved"] is True
        with store.read() as txn:
            list_id = txn.conn.execute(
                select(tasks.c.list_id).where(tasks.c.id == task["id"])
            ).scalar_one()
        assert list_id is None
