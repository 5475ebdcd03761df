"""Typed custom attributes: definition rules and write-time value validation.

Values are stored as strings. Validation checks that the string parses as
the definition's type and satisfies the optional rule payload.
"""

from __future__ import annotations

import json
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from typing import Any
from urllib.parse import urlparse

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from tasklistctl.domain.errors import ValidationError


class AttributeType(StrEnum):
    TEXT = "text"
    INTEGER = "integer"
    DECIMAL = "decimal"
    DATE = "date"
    DATETIME = "datetime"
    BOOLEAN = "boolean"
    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"
    URL = "url"
    FILE_REFERENCE = "file_reference"


_NUMERIC = frozenset({AttributeType.INTEGER, AttributeType.DECIMAL})
_CHOICE = frozenset({AttributeType.SINGLE_CHOICE, AttributeType.MULTIPLE_CHOICE})
_TEXTUAL = frozenset({AttributeType.TEXT, AttributeType.URL, AttributeType.FILE_REFERENCE})


class ValidationRules(BaseModel):
    """Structured rule payload attached to an attribute definition."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    min: float | None = None
    max: float | None = None
    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=0)
    pattern: str | None = None
    choices: list[str] | None = None


def parse_validation_rules(
    attr_type: AttributeType,
    payload: str | dict[str, Any] | None,
) -> ValidationRules | None:
    """Parse and check a rule payload for *attr_type*.

    Accepts a JSON string or an already-decoded mapping. Raises
    ValidationError when the payload is malformed or names rules that do
    not apply to the type.
    """
    if payload is None or payload == "":
        if attr_type in _CHOICE:
            raise ValidationError(
                f"{attr_type.value} attributes require a 'choices' rule",
                field="validation_rules",
            )
        return None

    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ValidationError(
                f"Validation rules are not valid JSON: {exc.msg}",
                field="validation_rules",
            ) from exc
    if not isinstance(payload, dict):
        raise ValidationError("Validation rules must be a JSON object", field="validation_rules")

    try:
        rules = ValidationRules.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ValidationError(
            f"Malformed validation rules: {exc.errors()[0]['msg']}",
            field="validation_rules",
        ) from exc

    if (rules.min is not None or rules.max is not None) and attr_type not in _NUMERIC:
        raise ValidationError(
            f"'min'/'max' rules do not apply to {attr_type.value} attributes",
            field="validation_rules",
        )
    if rules.min is not None and rules.max is not None and rules.min > rules.max:
        raise ValidationError("'min' must not exceed 'max'", field="validation_rules")
    has_text_rules = any(
        v is not None for v in (rules.min_length, rules.max_length, rules.pattern)
    )
    if has_text_rules and attr_type not in _TEXTUAL:
        raise ValidationError(
            f"Length/pattern rules do not apply to {attr_type.value} attributes",
            field="validation_rules",
        )
    if rules.pattern is not None:
        try:
            re.compile(rules.pattern)
        except re.error as exc:
            raise ValidationError(
                f"Invalid 'pattern' rule: {exc}", field="validation_rules"
            ) from exc
    if attr_type in _CHOICE:
        if not rules.choices:
            raise ValidationError(
                f"{attr_type.value} attributes require a non-empty 'choices' rule",
                field="validation_rules",
            )
    elif rules.choices is not None:
        raise ValidationError(
            f"'choices' rule does not apply to {attr_type.value} attributes",
            field="validation_rules",
        )
    return rules


def _fail(name: str, message: str) -> ValidationError:
    return ValidationError(f"Attribute '{name}': {message}", field="value", attribute=name)


def _parse_number(attr_type: AttributeType, name: str, value: str) -> float:
    if attr_type is AttributeType.INTEGER:
        try:
            return int(value.strip())
        except ValueError:
            raise _fail(name, f"'{value}' is not a valid integer") from None
    try:
        number = Decimal(value.strip())
    except InvalidOperation:
        raise _fail(name, f"'{value}' is not a valid decimal") from None
    if not number.is_finite():
        raise _fail(name, f"'{value}' is not a finite decimal")
    return float(number)


def _check_type(attr_type: AttributeType, name: str, value: str) -> None:
    match attr_type:
        case AttributeType.DATE:
            try:
                date.fromisoformat(value.strip())
            except ValueError:
                raise _fail(name, f"'{value}' is not a valid date (YYYY-MM-DD)") from None
        case AttributeType.DATETIME:
            try:
                datetime.fromisoformat(value.strip())
            except ValueError:
                raise _fail(name, f"'{value}' is not a valid ISO-8601 datetime") from None
        case AttributeType.BOOLEAN:
            if value.strip().lower() not in ("true", "false"):
                raise _fail(name, f"'{value}' is not a boolean (true/false)")
        case AttributeType.URL:
            parsed = urlparse(value.strip())
            if not parsed.scheme or not parsed.netloc:
                raise _fail(name, f"'{value}' is not an absolute URL")
        case _:
            pass


def validate_value(
    name: str,
    attr_type: AttributeType,
    value: str,
    *,
    rules: ValidationRules | None = None,
) -> None:
    """Raise ValidationError unless *value* is a valid, non-empty *attr_type* value."""
    if attr_type in _NUMERIC:
        number = _parse_number(attr_type, name, value)
        if rules is not None:
            if rules.min is not None and number < rules.min:
                raise _fail(name, f"{value} is below the minimum {rules.min:g}")
            if rules.max is not None and number > rules.max:
                raise _fail(name, f"{value} is above the maximum {rules.max:g}")
        return

    _check_type(attr_type, name, value)
    if rules is None:
        return

    if attr_type in _CHOICE:
        allowed = set(rules.choices or [])
        picked = [part.strip() for part in value.split(",")]
        if attr_type is AttributeType.SINGLE_CHOICE and len(picked) != 1:
            raise _fail(name, "exactly one choice is allowed")
        unknown = [p for p in picked if p not in allowed]
        if unknown:
            raise _fail(name, f"{', '.join(unknown)} not in {sorted(allowed)}")
        return

    if rules.min_length is not None and len(value) < rules.min_length:
        raise _fail(name, f"must be at least {rules.min_length} characters")
    if rules.max_length is not None and len(value) > rules.max_length:
        raise _fail(name, f"must be at most {rules.max_length} characters")
    if rules.pattern is not None and re.fullmatch(rules.pattern, value) is None:
        raise _fail(name, f"'{value}' does not match pattern {rules.pattern}")


def resolve_value(
    name: str,
    attr_type: AttributeType,
    value: str | None,
    *,
    is_required: bool,
    default_value: str | None = None,
    rules: ValidationRules | None = None,
) -> str:
    """Return the string to store for *value*, validating it against the definition.

    Empty values are rejected for required definitions; otherwise they fall
    back to the default value (validated as usual) or are stored empty.
    """
    if value is None or value.strip() == "":
        if is_required:
            raise _fail(name, "a value is required")
        if default_value:
            validate_value(name, attr_type, default_value, rules=rules)
            return default_value
        return ""
    validate_value(name, attr_type, value, rules=rules)
    return value
