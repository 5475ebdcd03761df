"""Tests for attribute rule parsing and value validation."""

from __future__ import annotations

import pytest

from tasklistctl.domain.attributes import (
    AttributeType,
    ValidationRules,
    parse_validation_rules,
    resolve_value,
    validate_value,
)
from tasklistctl.domain.errors import ValidationError


class TestParseValidationRules:
    def test_none_for_plain_types(self) -> None:
        assert parse_validation_rules(AttributeType.TEXT, None) is None
        assert parse_validation_rules(AttributeType.INTEGER, "") is None

    def test_json_string(self) -> None:
        rules = parse_validation_rules(AttributeType.INTEGER, '{"min": 1, "max": 5}')
        assert rules == ValidationRules(min=1, max=5)

    def test_mapping(self) -> None:
        rules = parse_validation_rules(AttributeType.TEXT, {"max_length": 3})
        assert rules is not None
        assert rules.max_length == 3

    def test_invalid_json(self) -> None:
        with pytest.raises(ValidationError, match="not valid JSON"):
            parse_validation_rules(AttributeType.INTEGER, "{min: 1")

    def test_non_object(self) -> None:
        with pytest.raises(ValidationError, match="JSON object"):
            parse_validation_rules(AttributeType.INTEGER, "[1, 2]")

    def test_unknown_rule_key(self) -> None:
        with pytest.raises(ValidationError, match="Malformed"):
            parse_validation_rules(AttributeType.INTEGER, {"minimum": 1})

    def test_min_max_only_for_numbers(self) -> None:
        with pytest.raises(ValidationError, match="do not apply"):
            parse_validation_rules(AttributeType.TEXT, {"min": 1})

    def test_min_above_max(self) -> None:
        with pytest.raises(ValidationError, match="must not exceed"):
            parse_validation_rules(AttributeType.DECIMAL, {"min": 5, "max": 1})

    def test_bad_pattern(self) -> None:
        with pytest.raises(ValidationError, match="pattern"):
            parse_validation_rules(AttributeType.TEXT, {"pattern": "("})

    def test_choice_types_require_choices(self) -> None:
        with pytest.raises(ValidationError, match="choices"):
            parse_validation_rules(AttributeType.SINGLE_CHOICE, None)
        with pytest.raises(ValidationError, match="choices"):
            parse_validation_rules(AttributeType.MULTIPLE_CHOICE, {"choices": []})

    def test_choices_rejected_elsewhere(self) -> None:
        with pytest.raises(ValidationError, match="does not apply"):
            parse_validation_rules(AttributeType.TEXT, {"choices": ["a"]})


class TestValidateValue:
    def test_integer_range(self) -> None:
        rules = ValidationRules(min=1, max=5)
        validate_value("Severity", AttributeType.INTEGER, "1", rules=rules)
        validate_value("Severity", AttributeType.INTEGER, "5", rules=rules)
        with pytest.raises(ValidationError, match="above the maximum"):
            validate_value("Severity", AttributeType.INTEGER, "6", rules=rules)
        with pytest.raises(ValidationError, match="below the minimum"):
            validate_value("Severity", AttributeType.INTEGER, "0", rules=rules)

    def test_integer_rejects_fraction(self) -> None:
        with pytest.raises(ValidationError, match="not a valid integer"):
            validate_value("Count", AttributeType.INTEGER, "1.5")

    def test_decimal(self) -> None:
        validate_value("Cost", AttributeType.DECIMAL, "12.75")
        with pytest.raises(ValidationError, match="not a valid decimal"):
            validate_value("Cost", AttributeType.DECIMAL, "abc")
        with pytest.raises(ValidationError, match="finite"):
            validate_value("Cost", AttributeType.DECIMAL, "NaN")

    def test_date_and_datetime(self) -> None:
        validate_value("Due", AttributeType.DATE, "2024-02-29")
        validate_value("At", AttributeType.DATETIME, "2024-02-29T10:30:00")
        with pytest.raises(ValidationError):
            validate_value("Due", AttributeType.DATE, "2023-02-29")
        with pytest.raises(ValidationError):
            validate_value("At", AttributeType.DATETIME, "yesterday")

    def test_boolean(self) -> None:
        validate_value("Done", AttributeType.BOOLEAN, "TRUE")
        validate_value("Done", AttributeType.BOOLEAN, "false")
        with pytest.raises(ValidationError, match="boolean"):
            validate_value("Done", AttributeType.BOOLEAN, "yes")

    def test_url(self) -> None:
        validate_value("Link", AttributeType.URL, "https://example.com/x")
        with pytest.raises(ValidationError, match="absolute URL"):
            validate_value("Link", AttributeType.URL, "example.com")

    def test_single_choice(self) -> None:
        rules = ValidationRules(choices=["dev", "qa"])
        validate_value("Stage", AttributeType.SINGLE_CHOICE, "qa", rules=rules)
        with pytest.raises(ValidationError, match="exactly one"):
            validate_value("Stage", AttributeType.SINGLE_CHOICE, "dev,qa", rules=rules)
        with pytest.raises(ValidationError, match="not in"):
            validate_value("Stage", AttributeType.SINGLE_CHOICE, "prod", rules=rules)

    def test_multiple_choice(self) -> None:
        rules = ValidationRules(choices=["a", "b", "c"])
        validate_value("Pick", AttributeType.MULTIPLE_CHOICE, "a, c", rules=rules)
        with pytest.raises(ValidationError, match="z"):
            validate_value("Pick", AttributeType.MULTIPLE_CHOICE, "a,z", rules=rules)

    def test_text_length_and_pattern(self) -> None:
        rules = ValidationRules(min_length=2, max_length=4, pattern=r"[A-Z]+")
        validate_value("Code", AttributeType.TEXT, "ABC", rules=rules)
        with pytest.raises(ValidationError, match="at least"):
            validate_value("Code", AttributeType.TEXT, "A", rules=rules)
        with pytest.raises(ValidationError, match="at most"):
            validate_value("Code", AttributeType.TEXT, "ABCDE", rules=rules)
        with pytest.raises(ValidationError, match="does not match"):
            validate_value("Code", AttributeType.TEXT, "abc", rules=rules)

    def test_error_names_the_attribute(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_value("Severity", AttributeType.INTEGER, "x")
        assert "Severity" in exc_info.value.message
        assert exc_info.value.detail["attribute"] == "Severity"


class TestResolveValue:
    def test_required_rejects_empty(self) -> None:
        with pytest.raises(ValidationError, match="required"):
            resolve_value("Owner", AttributeType.TEXT, "  ", is_required=True)

    def test_empty_falls_back_to_default(self) -> None:
        stored = resolve_value(
            "Severity", AttributeType.INTEGER, None, is_required=False, default_value="3"
        )
        assert stored == "3"

    def test_empty_without_default(self) -> None:
        assert resolve_value("Note", AttributeType.TEXT, "", is_required=False) == ""

    def test_value_is_validated(self) -> None:
        with pytest.raises(ValidationError):
            resolve_value("Severity", AttributeType.INTEGER, "ten", is_required=False)
        assert resolve_value("Severity", AttributeType.INTEGER, "7", is_required=False) == "7"
