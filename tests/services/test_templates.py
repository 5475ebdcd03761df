"""Tests for TemplateService: capture, steps, placeholders and instantiation."""

from __future__ import annotations

from tasklistctl.infrastructure.store import Store
from tasklistctl.services.lists import ListService
from tasklistctl.services.tags import TagService
from tasklistctl.services.tasks import TaskService
from tasklistctl.services.templates import TemplateService
from tests.conftest import create_list, create_task


def _template_with_steps(store: Store, *titles: str) -> int:
    svc = TemplateService(store)
    template_id = svc.create_template("Release", category="eng").data["id"]
    for title in titles:
        assert svc.add_template_task(template_id, title).ok
    return template_id


class TestCreateTemplate:
    def test_empty_template(self, store: Store) -> None:
        result = TemplateService(store).create_template("Sprint", description="2 weeks")
        assert result.ok
        assert result.data["version"] == "1.0"
        assert result.data["tasks"] == []

    def test_name_required(self, store: Store) -> None:
        assert TemplateService(store).create_template(" ").error.code == "VALIDATION_FAILED"

    def test_add_task_appends_in_order(self, store: Store) -> None:
        template_id = _template_with_steps(store, "first", "second")
        result = TemplateService(store).add_template_task(
            template_id, "third", priority="high", estimated_hours=1.5
        )
        steps = result.data["tasks"]
        assert [s["title"] for s in steps] == ["first", "second", "third"]
        assert [s["order_index"] for s in steps] == [0, 1, 2]
        assert steps[2]["priority"] == "high"
        assert steps[2]["estimated_hours"] == 1.5

    def test_add_task_to_deleted_template(self, store: Store) -> None:
        template_id = _template_with_steps(store)
        TemplateService(store).delete_template(template_id)
        result = TemplateService(store).add_template_task(template_id, "late")
        assert result.error.code == "CONFLICT"


class TestCreateFromList:
    def test_captures_structure_only(self, store: Store) -> None:
        lst = create_list(store, "Onboarding")
        a = create_task(
            store, "Laptop", lst["id"], description="order", priority="high", estimated_hours=2
        )
        create_task(store, "Accounts", lst["id"], status="completed", due_date="2024-01-01")
        tag = TagService(store).create_tag("hr").data
        TagService(store).add_tag_to_task(a["id"], tag["id"])

        result = TemplateService(store).create_template_from_list(lst["id"], "Onboarding")
        assert result.ok, result.error
        steps = result.data["tasks"]
        assert [s["title"] for s in steps] == ["Laptop", "Accounts"]
        assert steps[0]["description"] == "order"
        assert steps[0]["priority"] == "high"
        assert steps[0]["estimated_hours"] == 2
        assert set(steps[0]) == {
            "id",
            "title",
            "description",
            "order_index",
            "priority",
            "estimated_hours",
        }

    def test_deleted_tasks_skipped(self, store: Store) -> None:
        lst = create_list(store, "L")
        gone = create_task(store, "gone", lst["id"])
        create_task(store, "kept", lst["id"])
        TaskService(store).delete_task(gone["id"])
        steps = TemplateService(store).create_template_from_list(lst["id"], "T").data["tasks"]
        assert [s["title"] for s in steps] == ["kept"]

    def test_missing_list(self, store: Store) -> None:
        result = TemplateService(store).create_template_from_list(404, "T")
        assert result.error.code == "NOT_FOUND"


class TestApplyTemplate:
    def test_creates_list_with_pending_tasks(self, store: Store) -> None:
        template_id = _template_with_steps(store, "Tag {{version}}", "Announce {{version}}")
        result = TemplateService(store).apply_template(
            template_id, "Release 2.1", parameters={"version": "2.1"}
        )
        assert result.ok, result.error
        assert result.data["task_count"] == 2
        assert result.data["template_id"] == template_id

        listed = TaskService(store).list_tasks(list_id=result.data["id"]).data["items"]
        assert sorted(t["title"] for t in listed) == ["Announce 2.1", "Tag 2.1"]
        assert {t["status"] for t in listed} == {"pending"}

    def test_unmatched_placeholders_kept(self, store: Store) -> None:
        template_id = _template_with_steps(store, "Ping {{owner}}")
        new_list = TemplateService(store).apply_template(template_id, "Run").data
        items = TaskService(store).list_tasks(list_id=new_list["id"]).data["items"]
        titles = [t["title"] for t in items]
        assert titles == ["Ping {{owner}}"]

    def test_empty_substituted_title_rejected(self, store: Store) -> None:
        template_id = _template_with_steps(store, "{{owner}}")
        result = TemplateService(store).apply_template(
            template_id, "Run", parameters={"owner": "  "}
        )
        assert result.error.code == "VALIDATION_FAILED"
        assert ListService(store).list_all().data["count"] == 0

    def test_round_trip_preserves_steps(self, store: Store) -> None:
        lst = create_list(store, "Source")
        for title, priority in (("one", "low"), ("two", "critical"), ("three", "normal")):
            create_task(store, title, lst["id"], priority=priority)
        svc = TemplateService(store)
        template_id = svc.create_template_from_list(lst["id"], "Copy").data["id"]
        new_list = svc.apply_template(template_id, "Copy of Source").data

        copied = TaskService(store).list_tasks(list_id=new_list["id"]).data["items"]
        pairs = sorted((t["title"], t["priority"]) for t in copied)
        assert pairs == [("one", "low"), ("three", "normal"), ("two", "critical")]

    def test_under_parent(self, store: Store) -> None:
        parent = create_list(store, "Projects")
        template_id = _template_with_steps(store, "step")
        new_list = TemplateService(store).apply_template(
            template_id, "Child", parent_list_id=parent["id"]
        ).data
        assert new_list["parent_list_id"] == parent["id"]

    def test_failure_is_atomic(self, store: Store) -> None:
        template_id = _template_with_steps(store, "step")
        result = TemplateService(store).apply_template(template_id, "X", parent_list_id=999)
        assert result.error.code == "NOT_FOUND"
        assert ListService(store).list_all().data["count"] == 0
        assert TaskService(store).list_tasks().data["count"] == 0

    def test_deleted_template(self, store: Store) -> None:
        template_id = _template_with_steps(store, "step")
        TemplateService(store).delete_template(template_id)
        result = TemplateService(store).apply_template(template_id, "X")
        assert result.error.code == "NOT_FOUND"


class TestInspect:
    def test_get_lists_placeholders(self, store: Store) -> None:
        template_id = _template_with_steps(store, "Deploy {{service}}", "Notify {{team}}")
        TemplateService(store).add_template_task(
            template_id, "Verify", description="check {{service}}"
        )
        data = TemplateService(store).get_template(template_id).data
        assert data["placeholders"] == ["service", "team"]
        assert len(data["tasks"]) == 3

    def test_list_templates_by_category(self, store: Store) -> None:
        svc = TemplateService(store)
        svc.create_template("B", category="eng")
        svc.create_template("A", category="ops")
        svc.create_template("C", category="eng")
        names = [t["name"] for t in svc.list_templates(category="eng").data["items"]]
        assert names == ["B", "C"]
        assert svc.list_templates().data["count"] == 3

    def test_task_count(self, store: Store) -> None:
        _template_with_steps(store, "a", "b")
        item = TemplateService(store).list_templates().data["items"][0]
        assert item["task_count"] == 2

    def test_delete(self, store: Store) -> None:
        template_id = _template_with_steps(store)
        svc = TemplateService(store)
        assert svc.delete_template(template_id).data["deleted"] is True
        assert svc.delete_template(template_id).data["deleted"] is False
        assert svc.get_template(template_id).error.code == "NOT_FOUND"
        assert svc.list_templates().data["count"] == 0
