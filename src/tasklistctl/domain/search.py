"""SearchFilter: the caller-supplied value object driving search composition."""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainValidator

from tasklistctl.domain.lifecycle import Priority, TaskStatus


def _date_or_datetime(value: object) -> date | datetime | None:
    """Parse a range bound; text with a time part stays a datetime even at midnight."""
    if value is None or isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError("expected an ISO-8601 date or datetime")
    text = value.strip()
    if not text:
        return None
    if "T" in text or " " in text:
        return datetime.fromisoformat(text)
    return date.fromisoformat(text)


DateBound = Annotated[date | datetime | None, PlainValidator(_date_or_datetime)]


class SortKey(StrEnum):
    CREATED_DATE = "created_date"
    DUE_DATE = "due_date"
    PRIORITY = "priority"
    TITLE = "title"
    UPDATED_DATE = "updated_date"
    RELEVANCE = "relevance"


class AttributeFilter(BaseModel):
    """Match entities whose attribute *name* has a value containing *value*."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    value: str = ""


class SearchFilter(BaseModel):
    """Composite search criteria. Unset fields add no predicate."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    query: str | None = None
    status: TaskStatus | None = None
    priority: Priority | None = None
    list_id: int | None = None
    tags: list[str] = Field(default_factory=list)
    attributes: list[AttributeFilter] = Field(default_factory=list)

    due_from: DateBound = None
    due_to: DateBound = None
    created_from: DateBound = None
    created_to: DateBound = None
    completed_from: DateBound = None
    completed_to: DateBound = None

    include_completed: bool = True
    include_cancelled: bool = False

    sort_by: SortKey = SortKey.RELEVANCE
    descending: bool = True
    limit: int | None = Field(default=None, ge=1)
