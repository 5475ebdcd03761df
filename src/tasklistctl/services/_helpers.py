"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from tasklistctl.domain.errors import ValidationError


def now_iso() -> str:
    """Current UTC time as ISO 8601 with microseconds (stored timestamp form)."""
    return datetime.now(UTC).isoformat(timespec="microseconds")


def parse_enum[E: StrEnum](enum_cls: type[E], value: str | E, field: str) -> E:
    """Coerce *value* into *enum_cls*, raising the domain ValidationError."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {field} '{value}'. Valid: {allowed}", field=field) from None


def now_compact() -> str:
    """Current UTC time as compact ISO (YYYYMMDDTHHmmss, for backup filenames)."""
    return datetime.now(UTC).strftime("%Y%m%dT%H%M%S")
