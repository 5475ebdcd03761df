"""Typed payload contracts for service and adapter boundaries.

Rows leave the service layer only after passing through one of these
models, which fixes the payload shape for the CLI and MCP adapters and
drops storage-only columns such as ``deleted_at``.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

import pydantic
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from tasklistctl.domain.errors import ValidationError
from tasklistctl.domain.lifecycle import Priority, TaskStatus


def dump_validated[T: BaseModel](model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="python")


class _Row(BaseModel):
    model_config = ConfigDict(extra="ignore")


class TaskItem(_Row):
    """One task."""

    id: int
    title: str
    description: str | None = None
    notes: str | None = None
    status: str
    priority: str
    list_id: int | None = None
    list_name: str | None = None
    due_date: str | None = None
    estimated_hours: float | None = None
    completed_at: str | None = None
    created_at: str
    updated_at: str
    tags: list[str] | None = None


class ListItem(_Row):
    """One task list, optionally with hierarchy context and resolved children."""

    id: int
    name: str
    description: str | None = None
    parent_list_id: int | None = None
    parent_name: str | None = None
    task_count: int | None = None
    child_list_count: int | None = None
    path: str | None = None
    depth: int | None = None
    created_at: str
    updated_at: str
    children: list[ListItem] | None = None


class TemplateTaskItem(_Row):
    """One ordered template step. Carries no status or dates."""

    id: int
    title: str
    description: str | None = None
    order_index: int
    priority: str
    estimated_hours: float | None = None


class TemplateItem(_Row):
    """One template, with its steps when fetched individually."""

    id: int
    name: str
    description: str | None = None
    category: str | None = None
    version: str
    task_count: int | None = None
    created_at: str
    updated_at: str
    tasks: list[TemplateTaskItem] | None = None


class TagItem(_Row):
    """One tag with its position in the tag forest."""

    id: int
    name: str
    color: str | None = None
    parent_id: int | None = None
    path: str | None = None
    depth: int | None = None
    usage_count: int | None = None
    created_at: str


class AttributeDefinitionItem(_Row):
    """One attribute definition; ``validation_rules`` is decoded JSON."""

    id: int
    name: str
    type: str
    is_required: bool
    default_value: str | None = None
    validation_rules: dict[str, Any] | None = None
    created_at: str


class AttributeValueItem(_Row):
    """One attribute value joined with its definition."""

    attribute_definition_id: int
    name: str
    type: str
    value: str
    created_at: str
    updated_at: str


class CollectionData(BaseModel):
    """Payload contract for every listing operation."""

    count: int
    items: list[dict[str, Any]] = Field(default_factory=list)


def collection(model_cls: type[BaseModel], rows: list[dict[str, Any]]) -> dict[str, Any]:
    """Validate each row with *model_cls* and wrap them as ``{count, items}``."""
    items = [dump_validated(model_cls, row) for row in rows]
    return dump_validated(CollectionData, {"count": len(items), "items": items})


# ---------------------------------------------------------------------------
# Input change-sets (partial updates): only fields the caller sent are applied
# ---------------------------------------------------------------------------


class TaskChanges(BaseModel):
    """Fields accepted by ``TaskService.update_task``."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    description: str | None = None
    notes: str | None = None
    status: TaskStatus | None = None
    priority: Priority | None = None
    list_id: int | None = None
    due_date: date | datetime | None = None
    estimated_hours: float | None = None


class ListChanges(BaseModel):
    """Fields accepted by ``ListService.update_list``."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str | None = None
    description: str | None = None
    parent_list_id: int | None = Field(
        default=None, validation_alias=AliasChoices("parent_list_id", "parent_id")
    )


def parse_changes[T: BaseModel](model_cls: type[T], changes: dict[str, Any]) -> T:
    """Validate a partial-update mapping, raising the domain ValidationError."""
    try:
        return model_cls.model_validate(changes)
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "changes"
        raise ValidationError(f"Invalid change to {field}: {first['msg']}", field=field) from exc
