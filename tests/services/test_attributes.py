"""Tests for AttributeService definitions and values."""

from __future__ import annotations

import pytest

from tasklistctl.infrastructure.store import Store
from tasklistctl.services.attributes import AttributeService
from tasklistctl.services.tasks import TaskService
from tests.conftest import create_list, create_task


@pytest.fixture
def task_id(store: Store) -> int:
    lst = create_list(store, "L")
    return create_task(store, "T", lst["id"])["id"]


def _define(store: Store, name: str, attr_type: str, **kwargs) -> int:
    result = AttributeService(store).create_attribute_definition(name, attr_type, **kwargs)
    assert result.ok, result.error
    return result.data["id"]


class TestDefinitions:
    def test_rules_decoded(self, store: Store) -> None:
        svc = AttributeService(store)
        result = svc.create_attribute_definition(
            "Severity", "integer", validation_rules='{"min": 1, "max": 5}'
        )
        assert result.ok
        assert result.data["type"] == "integer"
        assert result.data["is_required"] is False
        assert result.data["validation_rules"] == {"min": 1, "max": 5}

    def test_duplicate_name(self, store: Store) -> None:
        _define(store, "Owner", "text")
        result = AttributeService(store).create_attribute_definition("Owner", "text")
        assert result.error.code == "CONFLICT"

    def test_unknown_type(self, store: Store) -> None:
        result = AttributeService(store).create_attribute_definition("x", "colour")
        assert result.error.code == "VALIDATION_FAILED"

    def test_invalid_default(self, store: Store) -> None:
        result = AttributeService(store).create_attribute_definition(
            "Count", "integer", default_value="many"
        )
        assert result.error.code == "VALIDATION_FAILED"

    def test_list_sorted_by_name(self, store: Store) -> None:
        _define(store, "b", "text")
        _define(store, "a", "boolean")
        items = AttributeService(store).list_attribute_definitions().data["items"]
        assert [d["name"] for d in items] == ["a", "b"]

    def test_delete_removes_values(self, store: Store, task_id: int) -> None:
        definition = _define(store, "Owner", "text")
        svc = AttributeService(store)
        svc.set_task_attribute(task_id, definition, "sam")
        result = svc.delete_attribute_definition(definition)
        assert result.data == {"id": definition, "deleted": True, "values_removed": 1}
        assert svc.get_task_attributes(task_id).data["count"] == 0
        assert svc.delete_attribute_definition(definition).data["deleted"] is False


class TestValues:
    def test_range_enforced(self, store: Store, task_id: int) -> None:
        definition = _define(store, "Severity", "integer", validation_rules={"min": 1, "max": 5})
        svc = AttributeService(store)

        rejected = svc.set_task_attribute(task_id, definition, "6")
        assert not rejected.ok
        assert rejected.error.code == "VALIDATION_FAILED"
        assert svc.get_task_attributes(task_id).data["count"] == 0

        assert svc.set_task_attribute(task_id, definition, "3").ok
        values = svc.get_task_attributes(task_id).data["items"]
        assert [(v["name"], v["value"]) for v in values] == [("Severity", "3")]

    def test_upsert_keeps_one_value(self, store: Store, task_id: int) -> None:
        definition = _define(store, "Owner", "text")
        svc = AttributeService(store)
        svc.set_task_attribute(task_id, definition, "sam")
        svc.set_task_attribute(task_id, definition, "alex")
        values = svc.get_task_attributes(task_id).data["items"]
        assert [v["value"] for v in values] == ["alex"]

    def test_empty_value_uses_default(self, store: Store, task_id: int) -> None:
        definition = _define(store, "Stage", "text", default_value="triage")
        result = AttributeService(store).set_task_attribute(task_id, definition, "")
        assert result.data["value"] == "triage"

    def test_required_rejects_empty(self, store: Store, task_id: int) -> None:
        definition = _define(store, "Owner", "text", is_required=True)
        result = AttributeService(store).set_task_attribute(task_id, definition, None)
        assert result.error.code == "VALIDATION_FAILED"

    def test_choice_values(self, store: Store, task_id: int) -> None:
        definition = _define(
            store, "Env", "single_choice", validation_rules={"choices": ["dev", "prod"]}
        )
        svc = AttributeService(store)
        assert svc.set_task_attribute(task_id, definition, "prod").ok
        assert not svc.set_task_attribute(task_id, definition, "qa").ok

    def test_list_values(self, store: Store) -> None:
        lst = create_list(store, "L")
        definition = _define(store, "Budget", "decimal")
        svc = AttributeService(store)
        assert svc.set_list_attribute(lst["id"], definition, "12.50").ok
        assert svc.get_list_attributes(lst["id"]).data["items"][0]["value"] == "12.50"
        assert svc.remove_list_attribute(lst["id"], definition).data["removed"] is True
        assert svc.remove_list_attribute(lst["id"], definition).data["removed"] is False

    def test_deleted_task_rejected(self, store: Store, task_id: int) -> None:
        definition = _define(store, "Owner", "text")
        TaskService(store).delete_task(task_id)
        result = AttributeService(store).set_task_attribute(task_id, definition, "sam")
        assert result.error.code == "CONFLICT"

    def test_missing_definition(self, store: Store, task_id: int) -> None:
        result = AttributeService(store).set_task_attribute(task_id, 99, "x")
        assert result.error.code == "NOT_FOUND"
