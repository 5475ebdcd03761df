"""Field limits and input normalization shared by the domain services."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

from tasklistctl.domain.errors import ValidationError

LIST_NAME_MAX = 200
TEMPLATE_NAME_MAX = 200
TAG_NAME_MAX = 100
ATTRIBUTE_NAME_MAX = 100


def require_text(value: str | None, field: str, *, max_length: int) -> str:
    """Strip *value* and check it is non-empty and within *max_length*."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{field} is required", field=field)
    if len(cleaned) > max_length:
        raise ValidationError(
            f"{field} must be at most {max_length} characters (got {len(cleaned)})",
            field=field,
        )
    return cleaned


def check_hours(value: float | None) -> float | None:
    if value is not None and value < 0:
        raise ValidationError("estimated_hours must not be negative", field="estimated_hours")
    return value


def to_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def timestamp_text(
    value: date | datetime | str | None,
    *,
    field: str = "due_date",
) -> str | None:
    """Normalize a date/datetime (or ISO string) to the stored ISO text form."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            if "T" in value or " " in value:
                value = datetime.fromisoformat(value)
            else:
                value = date.fromisoformat(value)
        except ValueError:
            raise ValidationError(
                f"{field}: '{value}' is not an ISO-8601 date or datetime", field=field
            ) from None
    if isinstance(value, datetime):
        return to_utc(value).isoformat()
    return value.isoformat()


def lower_bound(value: date | datetime) -> str:
    """Inclusive lower bound text for range predicates."""
    if isinstance(value, datetime):
        return to_utc(value).isoformat()
    return value.isoformat()


def upper_bound(value: date | datetime) -> tuple[str, bool]:
    """Upper bound text and whether it is exclusive.

    A plain date covers its whole day, expressed as an exclusive bound on
    the following day.
    """
    if isinstance(value, datetime):
        return to_utc(value).isoformat(), False
    return (value + timedelta(days=1)).isoformat(), True
