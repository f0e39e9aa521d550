"""Tests for the structural validator against matcher trees."""

from __future__ import annotations

import pytest

from treatycore.matching.match import Match, build_matcher_tree
from treatycore.types import ValidationDirection, ViolationKind
from treatycore.validation.models import PartialValidationConfig
from treatycore.validation.validator import StructuralValidator

RESPONSE = ValidationDirection.RESPONSE


@pytest.fixture
def validator() -> StructuralValidator:
    return StructuralValidator()


def _only(violations):
    assert len(violations) == 1, violations
    return violations[0]


class TestIntegerRange:
    def test_above_maximum(self, validator):
        violation = _only(validator.validate(150, Match.integer(min=0, max=100), RESPONSE))
        assert violation.kind == ViolationKind.OUT_OF_RANGE
        assert violation.expected == "<= 100"
        assert violation.actual == "150"
        assert violation.message == "Value 150 is greater than maximum 100"

    def test_below_minimum(self, validator):
        violation = _only(validator.validate(-1, Match.integer(min=0), RESPONSE))
        assert violation.expected == ">= 0"

    def test_decimal_rejected(self, validator):
        violation = _only(validator.validate(1.5, Match.integer(), RESPONSE))
        assert violation.kind == ViolationKind.INVALID_TYPE
        assert violation.message == "Expected integer but got decimal"

    def test_string_rejected(self, validator):
        assert _only(validator.validate("5", Match.integer(), RESPONSE)).kind == ViolationKind.INVALID_TYPE

    def test_in_range(self, validator):
        assert validator.validate(50, Match.integer(min=0, max=100), RESPONSE) == []


class TestDecimalRange:
    def test_accepts_integers(self, validator):
        assert validator.validate(2, Match.decimal(min=0.5, max=3.5), RESPONSE) == []

    def test_out_of_range(self, validator):
        violation = _only(validator.validate(4.25, Match.decimal(max=3.5), RESPONSE))
        assert violation.expected == "<= 3.5"
        assert violation.actual == "4.25"


class TestStringMatchers:
    @pytest.mark.parametrize(
        "matcher,good,bad",
        [
            (Match.guid(), "3f2504e0-4f89-11d3-9a0c-0305e82c3301", "not-a-guid"),
            (Match.email(), "user@example.com", "user.example.com"),
            (Match.uri(), "https://example.com/a", "/relative/path"),
            (Match.date_time(), "2024-01-15T10:30:00Z", "15/01/2024"),
            (Match.date_only(), "2024-01-15", "2024-13-40"),
            (Match.time_only(), "10:30:00", "25:99"),
            (Match.non_empty_string(), "x", ""),
        ],
    )
    def test_format_matchers(self, validator, matcher, good, bad):
        assert validator.validate(good, matcher, RESPONSE) == []
        assert _only(validator.validate(bad, matcher, RESPONSE)).kind == ViolationKind.INVALID_FORMAT

    def test_non_string_is_invalid_type(self, validator):
        violation = _only(validator.validate(42, Match.guid(), RESPONSE))
        assert violation.kind == ViolationKind.INVALID_TYPE
        assert violation.expected == "string (GUID)"

    def test_any_string(self, validator):
        assert validator.validate("", Match.string(), RESPONSE) == []
        assert _only(validator.validate(1, Match.string(), RESPONSE)).kind == ViolationKind.INVALID_TYPE

    def test_regex(self, validator):
        matcher = Match.regex(r"^[A-Z]{3}$", "ABC")
        assert validator.validate("XYZ", matcher, RESPONSE) == []
        violation = _only(validator.validate("abc", matcher, RESPONSE))
        assert violation.kind == ViolationKind.PATTERN_MISMATCH
        assert violation.expected == "^[A-Z]{3}$"


class TestValueMatchers:
    def test_boolean(self, validator):
        assert validator.validate(False, Match.boolean(), RESPONSE) == []
        assert _only(validator.validate("true", Match.boolean(), RESPONSE)).kind == ViolationKind.INVALID_TYPE

    def test_one_of(self, validator):
        matcher = Match.one_of("active", "inactive")
        assert validator.validate("active", matcher, RESPONSE) == []
        violation = _only(validator.validate("deleted", matcher, RESPONSE))
        assert violation.kind == ViolationKind.INVALID_ENUM_VALUE

    def test_one_of_listing_null_accepts_null(self, validator):
        matcher = Match.one_of(None, "active")
        assert validator.validate(None, matcher, RESPONSE) == []
        assert validator.validate("active", matcher, RESPONSE) == []
        assert _only(validator.validate("gone", matcher, RESPONSE)).kind == ViolationKind.INVALID_ENUM_VALUE

    def test_one_of_without_null_rejects_null(self, validator):
        violation = _only(validator.validate(None, Match.one_of("active"), RESPONSE))
        assert violation.kind == ViolationKind.UNEXPECTED_NULL

    def test_one_of_normalizes_numbers_not_booleans(self, validator):
        assert validator.validate(1.0, Match.one_of(1, 2), RESPONSE) == []
        assert validator.validate(True, Match.one_of(1, 2), RESPONSE) != []

    def test_null_only(self, validator):
        assert validator.validate(None, Match.null(), RESPONSE) == []
        assert _only(validator.validate(0, Match.null(), RESPONSE)).kind == ViolationKind.INVALID_TYPE

    def test_any_value(self, validator):
        for value in (None, 1, "x", [1], {"a": 1}):
            assert validator.validate(value, Match.any(), RESPONSE) == []

    def test_type_of(self, validator):
        assert validator.validate(7.5, Match.type_of(1), RESPONSE) == []
        violation = _only(validator.validate("7", Match.type_of(1), RESPONSE))
        assert violation.message == "Value type mismatch: expected integer"

    def test_equals(self, validator):
        tree = build_matcher_tree("user")
        assert validator.validate("user", tree, RESPONSE) == []
        assert _only(validator.validate("admin", tree, RESPONSE)).kind == ViolationKind.INVALID_ENUM_VALUE
        assert _only(validator.validate(1, tree, RESPONSE)).kind == ViolationKind.INVALID_TYPE


class TestNullability:
    def test_null_rejected(self, validator):
        violation = _only(validator.validate(None, Match.email(), RESPONSE))
        assert violation.kind == ViolationKind.UNEXPECTED_NULL
        assert violation.message == "Value is null but expected a valid email address"

    def test_nullable_matcher(self, validator):
        assert validator.validate(None, Match.nullable(Match.email()), RESPONSE) == []


class TestObjectMatchers:
    @pytest.fixture
    def user(self):
        return build_matcher_tree({
            "id": Match.guid(),
            "profile": {"age": Match.integer(min=0), "email": Match.email()},
            "tags": Match.each_like(Match.string(), min_count=1),
        })

    def test_valid(self, validator, user):
        value = {
            "id": "3f2504e0-4f89-11d3-9a0c-0305e82c3301",
            "profile": {"age": 30, "email": "a@b.co"},
            "tags": ["x", "y"],
        }
        assert validator.validate(value, user, RESPONSE) == []

    def test_nested_paths_are_spliced(self, validator, user):
        value = {
            "id": "3f2504e0-4f89-11d3-9a0c-0305e82c3301",
            "profile": {"age": -1},
            "tags": ["admin", 5],
        }
        violations = validator.validate(value, user, RESPONSE)
        assert [v.path for v in violations] == ["$.profile.age", "$.profile.email", "$.tags[1]"]

    def test_each_like_minimum_count(self, validator, user):
        value = {
            "id": "3f2504e0-4f89-11d3-9a0c-0305e82c3301",
            "profile": {"age": 1, "email": "a@b.co"},
            "tags": [],
        }
        violation = _only(validator.validate(value, user, RESPONSE))
        assert violation.kind == ViolationKind.OUT_OF_RANGE
        assert violation.path == "$.tags"
        assert violation.expected == "at least 1 items"

    def test_extra_fields_ignored_by_default(self, validator):
        tree = build_matcher_tree({"id": Match.integer()})
        assert validator.validate({"id": 1, "other": 2}, tree, RESPONSE) == []

    def test_strict_mode_flags_extra_fields_with_hint(self, validator):
        tree = build_matcher_tree({"userId": Match.integer()})
        config = PartialValidationConfig(strict_mode=True)
        violations = validator.validate({"userId": 1, "userid": 2}, tree, RESPONSE, config)
        violation = _only(violations)
        assert violation.kind == ViolationKind.UNEXPECTED_FIELD
        assert violation.path == "$.userid"
        assert "did you mean 'userId'" in violation.message

    def test_allow_list(self, validator):
        tree = build_matcher_tree({"id": Match.integer(), "name": Match.string()})
        config = PartialValidationConfig(properties_to_validate=frozenset({"id"}))
        assert validator.validate({"id": 1}, tree, RESPONSE, config) == []

    def test_array_root(self, validator):
        tree = Match.each_like({"id": Match.integer()})
        violations = validator.validate([{"id": 1}, {"id": "x"}], tree, RESPONSE)
        assert [v.path for v in violations] == ["$[1].id"]
