"""Tests for the structural validator against schema nodes."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from treatycore.config import get_config
from treatycore.matching.matchers import MATCHER_TYPES
from treatycore.schema.nodes import (
    SchemaNode,
    all_of,
    any_of,
    any_schema,
    array_schema,
    boolean_schema,
    integer_schema,
    null_schema,
    number_schema,
    object_schema,
    one_of,
    string_schema,
    titled,
)
from treatycore.types import ValidationDirection, ViolationKind
from treatycore.validation.models import PartialValidationConfig
from treatycore.validation.validator import (
    StructuralValidator,
    check,
    default_validator,
    validate,
    validate_json,
)

REQUEST = ValidationDirection.REQUEST
RESPONSE = ValidationDirection.RESPONSE


def _kinds(violations):
    return [v.kind for v in violations]


def _make_person() -> SchemaNode:
    return object_schema(
        {"id": integer_schema(), "name": string_schema(min_length=1)},
        required=["id", "name"],
    )


def _make_xy() -> tuple[SchemaNode, SchemaNode]:
    a = object_schema({"x": string_schema()}, required=["x"])
    b = object_schema({"y": string_schema()}, required=["y"])
    return a, b


@pytest.fixture
def validator() -> StructuralValidator:
    return StructuralValidator()


class TestScenarios:
    def test_missing_required_name(self, validator):
        violations = validator.validate({"id": 1}, _make_person(), RESPONSE)
        assert len(violations) == 1
        assert violations[0].kind == ViolationKind.MISSING_REQUIRED
        assert violations[0].path == "$.name"
        assert violations[0].actual == "missing"

    def test_valid_value_has_no_violations(self, validator):
        assert validator.validate({"id": 1, "name": "Ada"}, _make_person(), RESPONSE) == []

    def test_idempotent(self, validator):
        value = {"id": "x", "name": "", "extra": 1}
        first = validator.validate(value, _make_person(), RESPONSE)
        second = validator.validate(value, _make_person(), RESPONSE)
        assert first == second
        assert len(first) == 2

    def test_endpoint_label_copied(self, validator):
        violations = validator.validate({}, _make_person(), RESPONSE, endpoint="GET /people/{id}")
        assert {v.endpoint for v in violations} == {"GET /people/{id}"}

    def test_string_direction_accepted(self, validator):
        assert validator.validate({"id": 1, "name": "A"}, _make_person(), "response") == []


class TestNullHandling:
    def test_null_rejected_for_non_nullable(self, validator):
        violations = validator.validate(None, string_schema(), RESPONSE)
        assert _kinds(violations) == [ViolationKind.UNEXPECTED_NULL]
        assert violations[0].path == "$"

    def test_null_accepted_for_nullable(self, validator):
        assert validator.validate(None, string_schema(nullable=True), RESPONSE) == []

    def test_null_and_any_kinds_accept_null(self, validator):
        assert validator.validate(None, null_schema(), RESPONSE) == []
        assert validator.validate(None, any_schema(), RESPONSE) == []

    def test_null_does_not_descend(self, validator):
        violations = validator.validate({"id": None, "name": "a"}, _make_person(), RESPONSE)
        assert _kinds(violations) == [ViolationKind.UNEXPECTED_NULL]
        assert violations[0].path == "$.id"


class TestKinds:
    @pytest.mark.parametrize(
        "schema,value",
        [
            (string_schema(), 1),
            (integer_schema(), "1"),
            (number_schema(), "1.5"),
            (boolean_schema(), 1),
            (object_schema({}), []),
            (array_schema(), {}),
            (null_schema(), 0),
        ],
    )
    def test_kind_mismatch_is_invalid_type(self, validator, schema, value):
        violations = validator.validate(value, schema, RESPONSE)
        assert _kinds(violations) == [ViolationKind.INVALID_TYPE]

    def test_integer_rejects_fraction(self, validator):
        violations = validator.validate(1.5, integer_schema(), RESPONSE)
        assert violations[0].message == "Expected integer but got decimal"

    def test_integer_accepts_integral_float(self, validator):
        assert validator.validate(3.0, integer_schema(), RESPONSE) == []

    def test_booleans_are_not_numbers(self, validator):
        assert _kinds(validator.validate(True, integer_schema(), RESPONSE)) == [ViolationKind.INVALID_TYPE]
        assert _kinds(validator.validate(False, number_schema(), RESPONSE)) == [ViolationKind.INVALID_TYPE]

    def test_invalid_type_does_not_descend(self, validator):
        schema = object_schema({"a": object_schema({"b": string_schema()}, required=["b"])}, required=["a"])
        violations = validator.validate({"a": "text"}, schema, RESPONSE)
        assert len(violations) == 1
        assert violations[0].path == "$.a"
        assert violations[0].expected == "object"
        assert violations[0].actual == "string"


class TestLeafConstraints:
    def test_format(self, validator):
        violations = validator.validate("nope", string_schema(format="email"), RESPONSE)
        assert _kinds(violations) == [ViolationKind.INVALID_FORMAT]
        assert violations[0].expected == "email"

    def test_unknown_format_passes(self, validator):
        assert validator.validate("anything", string_schema(format="x-custom"), RESPONSE) == []

    def test_pattern(self, validator):
        violations = validator.validate("abc", string_schema(pattern=r"^\d+$"), RESPONSE)
        assert _kinds(violations) == [ViolationKind.PATTERN_MISMATCH]

    def test_length_reported_alongside_format(self, validator):
        schema = string_schema(format="email", min_length=20)
        violations = validator.validate("bad", schema, RESPONSE)
        assert _kinds(violations) == [ViolationKind.INVALID_FORMAT, ViolationKind.OUT_OF_RANGE]
        assert violations[1].expected == "at least 20 characters"

    def test_max_length(self, validator):
        violations = validator.validate("abcdef", string_schema(max_length=3), RESPONSE)
        assert violations[0].expected == "at most 3 characters"
        assert violations[0].actual == "6 characters"

    def test_enum(self, validator):
        violations = validator.validate("c", string_schema(enum=["a", "b"]), RESPONSE)
        assert _kinds(violations) == [ViolationKind.INVALID_ENUM_VALUE]
        assert violations[0].expected == '"a", "b"'

    def test_const(self, validator):
        violations = validator.validate("b", string_schema(const="a"), RESPONSE)
        assert violations[0].message == "Value does not equal the constant value"

    def test_enum_compares_numbers_by_value(self, validator):
        assert validator.validate(1.0, number_schema(enum=[1, 2]), RESPONSE) == []

    @pytest.mark.parametrize(
        "schema,value,message,expected",
        [
            (integer_schema(minimum=5), 4, "Value is less than minimum", ">= 5"),
            (integer_schema(minimum=5, exclusive_minimum=True), 5, "Value is not greater than minimum", "> 5"),
            (integer_schema(maximum=5), 6, "Value is greater than maximum", "<= 5"),
            (integer_schema(maximum=5, exclusive_maximum=True), 5, "Value is not less than maximum", "< 5"),
        ],
    )
    def test_ranges(self, validator, schema, value, message, expected):
        violations = validator.validate(value, schema, RESPONSE)
        assert len(violations) == 1
        assert violations[0].kind == ViolationKind.OUT_OF_RANGE
        assert violations[0].message == message
        assert violations[0].expected == expected

    def test_range_bounds_inclusive(self, validator):
        assert validator.validate(5, integer_schema(minimum=5, maximum=5), RESPONSE) == []


class TestArrays:
    def test_items_validated_with_index_paths(self, validator):
        schema = array_schema(integer_schema())
        violations = validator.validate([1, "two", 3, "four"], schema, RESPONSE)
        assert [v.path for v in violations] == ["$[1]", "$[3]"]

    def test_nested_paths(self, validator):
        schema = object_schema({"tags": array_schema(string_schema())}, required=["tags"])
        violations = validator.validate({"tags": ["a", 2]}, schema, RESPONSE)
        assert violations[0].path == "$.tags[1]"

    def test_item_count_bounds(self, validator):
        schema = array_schema(min_items=2, max_items=3)
        assert validator.validate([1], schema, RESPONSE)[0].expected == "at least 2 items"
        assert validator.validate([1, 2, 3, 4], schema, RESPONSE)[0].expected == "at most 3 items"


class TestObjects:
    def test_lenient_by_default(self, validator):
        value = {"id": 1, "name": "a"}
        before = validator.validate(value, _make_person(), RESPONSE)
        after = validator.validate({**value, "surprise": True}, _make_person(), RESPONSE)
        assert len(before) == len(after) == 0

    def test_additional_properties_disallowed(self, validator):
        schema = object_schema({"id": integer_schema()}, additional_properties_allowed=False)
        violations = validator.validate({"id": 1, "x": 2}, schema, RESPONSE)
        assert _kinds(violations) == [ViolationKind.UNEXPECTED_FIELD]
        assert violations[0].path == "$.x"

    def test_strict_mode(self, validator):
        config = PartialValidationConfig(strict_mode=True)
        violations = validator.validate({"id": 1, "name": "a", "x": 2}, _make_person(), RESPONSE, config)
        assert _kinds(violations) == [ViolationKind.UNEXPECTED_FIELD]

    def test_ignore_extra_fields_wins_over_strict(self, validator):
        config = PartialValidationConfig(strict_mode=True, ignore_extra_fields=True)
        schema = object_schema({"id": integer_schema()}, additional_properties_allowed=False)
        assert validator.validate({"id": 1, "x": 2}, schema, RESPONSE, config) == []

    def test_properties_to_validate_allow_list(self, validator):
        config = PartialValidationConfig(properties_to_validate=frozenset({"ID"}))
        violations = validator.validate({"id": "oops"}, _make_person(), RESPONSE, config)
        assert [v.path for v in violations] == ["$.id"]

    def test_allow_list_applies_to_top_level_only(self, validator):
        schema = object_schema(
            {"user": _make_person()},
            required=["user"],
        )
        config = PartialValidationConfig(properties_to_validate=frozenset({"user"}))
        violations = validator.validate({"user": {"id": 1}}, schema, RESPONSE, config)
        assert [v.path for v in violations] == ["$.user.name"]

    def test_validator_defaults_apply(self):
        strict = StructuralValidator(PartialValidationConfig(strict_mode=True))
        assert strict.defaults.strict_mode
        violations = strict.validate({"id": 1, "name": "a", "x": 1}, _make_person(), RESPONSE)
        assert _kinds(violations) == [ViolationKind.UNEXPECTED_FIELD]


class TestDirection:
    def test_write_only_field_in_response(self, validator, user_schema):
        value = {"id": 1, "name": "a", "email": "a@b.co", "password": "secret123"}
        violations = validator.validate(value, user_schema, RESPONSE)
        assert _kinds(violations) == [ViolationKind.UNEXPECTED_FIELD]
        assert violations[0].path == "$.password"
        assert "visibility violation" in violations[0].message
        assert "write-only" in violations[0].message

    def test_required_write_only_field_missing_in_request(self, validator, user_schema):
        violations = validator.validate({"name": "a", "email": "a@b.co"}, user_schema, REQUEST)
        assert _kinds(violations) == [ViolationKind.MISSING_REQUIRED]
        assert violations[0].path == "$.password"

    def test_write_only_field_in_request_not_flagged(self, validator, user_schema):
        value = {"name": "a", "email": "a@b.co", "password": "secret123"}
        assert validator.validate(value, user_schema, REQUEST) == []

    def test_read_only_field_in_request(self, validator, user_schema):
        value = {"id": 7, "name": "a", "email": "a@b.co", "password": "secret123"}
        violations = validator.validate(value, user_schema, REQUEST)
        assert [v.path for v in violations] == ["$.id"]
        assert "read-only" in violations[0].message

    def test_read_only_required_not_demanded_in_request(self, validator, user_schema):
        value = {"name": "a", "email": "a@b.co", "password": "secret123"}
        assert all(v.path != "$.id" for v in validator.validate(value, user_schema, REQUEST))


class TestComposition:
    def test_one_of_single_match(self, validator):
        a, b = _make_xy()
        assert validator.validate({"x": "1"}, one_of(a, b), RESPONSE) == []

    def test_one_of_ambiguous(self, validator):
        a, b = _make_xy()
        violations = validator.validate({"x": "1", "y": "2"}, one_of(a, b), RESPONSE)
        assert len(violations) == 1
        assert violations[0].kind == ViolationKind.INVALID_TYPE
        assert "exactly one" in violations[0].message

    def test_any_of_accepts_multiple_matches(self, validator):
        a, b = _make_xy()
        assert validator.validate({"x": "1", "y": "2"}, any_of(a, b), RESPONSE) == []

    def test_no_branch_matches(self, validator):
        a, b = _make_xy()
        violations = validator.validate({"z": 1}, any_of(a, b), RESPONSE)
        assert len(violations) == 1
        assert violations[0].message == "Value does not match any of the allowed schemas"

    def test_all_of_concatenates(self, validator):
        a, b = _make_xy()
        violations = validator.validate({}, all_of(a, b), RESPONSE)
        assert [v.path for v in violations] == ["$.x", "$.y"]

    def test_scalar_branches(self, validator):
        node = one_of(string_schema(), integer_schema())
        assert validator.validate("a", node, RESPONSE) == []
        assert validator.validate(3, node, RESPONSE) == []
        assert _kinds(validator.validate(True, node, RESPONSE)) == [ViolationKind.INVALID_TYPE]

    def test_nullable_composition(self, validator):
        node = any_of(string_schema(), integer_schema()).model_copy(update={"nullable": True})
        assert validator.validate(None, node, RESPONSE) == []
        assert _kinds(validator.validate(None, any_of(string_schema()), RESPONSE)) == [
            ViolationKind.UNEXPECTED_NULL
        ]


class TestDiscriminator:
    @pytest.fixture
    def pets(self) -> SchemaNode:
        cat = titled(
            object_schema({"petType": string_schema(), "lives": integer_schema()}, required=["petType", "lives"]),
            "Cat",
        )
        dog = titled(
            object_schema({"petType": string_schema(), "bark": boolean_schema()}, required=["petType"]),
            "Dog",
        )
        return one_of(cat, dog, discriminator="petType")

    def test_selected_branch_violations_reported_directly(self, validator, pets):
        violations = validator.validate({"petType": "Cat"}, pets, RESPONSE)
        assert _kinds(violations) == [ViolationKind.MISSING_REQUIRED]
        assert violations[0].path == "$.lives"

    def test_valid_branch(self, validator, pets):
        assert validator.validate({"petType": "dog", "bark": True}, pets, RESPONSE) == []

    def test_missing_discriminator(self, validator, pets):
        violations = validator.validate({"lives": 9}, pets, RESPONSE)
        assert _kinds(violations) == [ViolationKind.MISSING_REQUIRED]
        assert violations[0].path == "$.petType"

    def test_unknown_discriminator_value(self, validator, pets):
        violations = validator.validate({"petType": "Bird"}, pets, RESPONSE)
        assert _kinds(violations) == [ViolationKind.DISCRIMINATOR_MISMATCH]
        assert violations[0].expected == "Cat, Dog"
        assert violations[0].actual == "Bird"


class TestValidateJson:
    def test_parses_text(self, validator):
        assert validator.validate_json('{"id": 1, "name": "a"}', _make_person(), RESPONSE) == []

    def test_malformed_json_is_single_violation(self, validator):
        violations = validator.validate_json("{not json", _make_person(), RESPONSE)
        assert len(violations) == 1
        assert violations[0].kind == ViolationKind.INVALID_FORMAT
        assert violations[0].path == "$"
        assert violations[0].message.startswith("Invalid JSON: ")


class TestInvalidCalls:
    def test_none_schema(self, validator):
        with pytest.raises(TypeError):
            validator.validate({}, None, RESPONSE)

    def test_none_direction(self, validator):
        with pytest.raises(TypeError):
            validator.validate({}, _make_person(), None)

    def test_wrong_schema_type(self, validator):
        with pytest.raises(TypeError, match="SchemaNode or matcher"):
            validator.validate({}, {"kind": "object"}, RESPONSE)

    def test_none_schema_for_json(self, validator):
        with pytest.raises(TypeError):
            validator.validate_json("{}", None, RESPONSE)


class TestSupportedMatchers:
    def test_every_matcher_variant_is_handled(self, validator):
        assert validator.supported_matchers == frozenset(MATCHER_TYPES)


class TestModuleFunctions:
    def test_default_validator_reads_config(self):
        get_config(strict_mode=True)
        assert default_validator().defaults.strict_mode

    def test_validate_uses_config_defaults(self):
        get_config(strict_mode=True)
        violations = validate({"id": 1, "name": "a", "x": 1}, _make_person(), RESPONSE)
        assert _kinds(violations) == [ViolationKind.UNEXPECTED_FIELD]

    def test_validate_json(self):
        assert validate_json('{"id": 1, "name": "a"}', _make_person(), "response") == []

    def test_check_wraps_result_and_emits(self):
        with patch("treatycore.validation.validator.emit_validation_result") as emit:
            result = check({"id": 1}, _make_person(), "response", endpoint="GET /p")
        assert not result.is_valid
        assert result.direction == RESPONSE
        assert result.endpoint == "GET /p"
        emit.assert_called_once_with(result)
