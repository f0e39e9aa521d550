"""
Structural validator: walks a decoded JSON value against a ``SchemaNode``
or matcher tree in lock-step and collects every ``Violation`` in one pass.

Traversal rules:

- **Null first** -- null passes only for nullable nodes, ``null``/``any``
  kinds and nullable or null-only matchers; otherwise ``UnexpectedNull``.
- **Kind next** -- a kind mismatch is a single ``InvalidType``.  Neither
  ``InvalidType`` nor ``UnexpectedNull`` descends any further.
- **Leaf constraints** run in order format/pattern, range (length), then
  enum/const.  Each failed check adds one violation.
- **Objects** report missing required properties first, then walk the
  present properties in payload order.  Visibility conflicts with the
  direction are ``UnexpectedField``; undeclared properties are only
  violations when the schema forbids them or the call is strict.
- **Composition** -- allOf concatenates branch violations; anyOf/oneOf
  report a single summary violation; a discriminator picks one branch
  whose violations are reported directly.

The validator holds no per-call state and never raises for an invalid
*value*.  Passing ``None`` as the schema or direction is a caller bug and
raises ``TypeError``.

Usage::

    from treatycore.validation.validator import StructuralValidator
    from treatycore.types import ValidationDirection

    validator = StructuralValidator()
    violations = validator.validate(payload, schema, ValidationDirection.RESPONSE)
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional, Union

from treatycore._json import (
    canonical,
    is_integral,
    is_number,
    kind_of,
    render,
    render_literal,
)
from treatycore.diagnostics.otel import emit_validation_result
from treatycore.matching.matchers import (
    AnyStringMatcher,
    AnyValueMatcher,
    BooleanMatcher,
    DateOnlyMatcher,
    DateTimeMatcher,
    DecimalRangeMatcher,
    EachLikeMatcher,
    EmailMatcher,
    EqualsMatcher,
    GuidMatcher,
    IntegerRangeMatcher,
    MatcherBase,
    NonEmptyStringMatcher,
    NullOnlyMatcher,
    ObjectOfMatcher,
    OneOfMatcher,
    RegexMatcher,
    TimeOnlyMatcher,
    TypeMatcher,
    UriMatcher,
)
from treatycore.schema.nodes import SchemaNode
from treatycore.types import (
    CompositionMode,
    SchemaKind,
    ValidationDirection,
    ViolationKind,
    Visibility,
)
from treatycore.validation import formats, paths
from treatycore.validation.models import (
    PartialValidationConfig,
    ValidationResult,
    Violation,
)

SchemaOrMatcher = Union[SchemaNode, MatcherBase]


@lru_cache(maxsize=256)
def _compiled(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


@dataclass(frozen=True)
class _Walk:
    """Immutable per-call context threaded through the traversal."""

    endpoint: str
    direction: ValidationDirection
    config: PartialValidationConfig

    def violation(
        self,
        path: str,
        message: str,
        kind: ViolationKind,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
    ) -> Violation:
        return Violation(
            endpoint=self.endpoint,
            path=path,
            message=message,
            kind=kind,
            expected=expected,
            actual=actual,
        )


def _coerce_direction(direction: Any) -> ValidationDirection:
    if direction is None:
        raise TypeError("direction must not be None")
    if isinstance(direction, ValidationDirection):
        return direction
    return ValidationDirection(direction)


def _check_schema(schema: Any) -> None:
    if schema is None:
        raise TypeError("schema must not be None")
    if not isinstance(schema, (SchemaNode, MatcherBase)):
        raise TypeError(
            f"expected a SchemaNode or matcher, got {type(schema).__name__}"
        )


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------


class StructuralValidator:
    """Validates decoded JSON values against schema or matcher trees.

    Args:
        defaults: Policy used when a call passes no ``PartialValidationConfig``.
    """

    def __init__(self, defaults: Optional[PartialValidationConfig] = None) -> None:
        self._defaults = defaults or PartialValidationConfig()
        self._matcher_checks: dict[type, Callable[..., None]] = {
            GuidMatcher: self._check_guid,
            AnyStringMatcher: self._check_any_string,
            NonEmptyStringMatcher: self._check_non_empty_string,
            EmailMatcher: self._check_email,
            UriMatcher: self._check_uri,
            RegexMatcher: self._check_regex,
            IntegerRangeMatcher: self._check_integer_range,
            DecimalRangeMatcher: self._check_decimal_range,
            BooleanMatcher: self._check_boolean,
            DateTimeMatcher: self._check_date_time,
            DateOnlyMatcher: self._check_date_only,
            TimeOnlyMatcher: self._check_time_only,
            OneOfMatcher: self._check_one_of,
            NullOnlyMatcher: self._check_null_only,
            AnyValueMatcher: self._check_any_value,
            TypeMatcher: self._check_type,
            EqualsMatcher: self._check_equals,
            ObjectOfMatcher: self._check_object_of,
            EachLikeMatcher: self._check_each_like,
        }

    @property
    def defaults(self) -> PartialValidationConfig:
        return self._defaults

    @property
    def supported_matchers(self) -> frozenset[type]:
        return frozenset(self._matcher_checks)

    def validate(
        self,
        value: Any,
        schema: SchemaOrMatcher,
        direction: Union[ValidationDirection, str],
        config: Optional[PartialValidationConfig] = None,
        endpoint: str = "",
    ) -> list[Violation]:
        """Validate a decoded JSON value.

        Args:
            value: Result of ``json.loads`` (dict, list, str, number, bool, None).
            schema: Schema node or matcher tree to validate against.
            direction: Request or Response; decides which properties are legal.
            config: Per-call policy; the validator defaults apply when omitted.
            endpoint: Label copied into every violation.

        Returns:
            Violations in traversal order (empty when the value conforms).

        Raises:
            TypeError: If *schema* or *direction* is None.
        """
        _check_schema(schema)
        walk = _Walk(
            endpoint=endpoint,
            direction=_coerce_direction(direction),
            config=config or self._defaults,
        )
        out: list[Violation] = []
        self._dispatch(schema, value, paths.ROOT, walk, out, top=True)
        return out

    def validate_json(
        self,
        text: Union[str, bytes],
        schema: SchemaOrMatcher,
        direction: Union[ValidationDirection, str],
        config: Optional[PartialValidationConfig] = None,
        endpoint: str = "",
    ) -> list[Violation]:
        """Parse *text* as JSON and validate it.

        Malformed JSON yields a single ``InvalidFormat`` violation at ``$``.
        """
        _check_schema(schema)
        direction = _coerce_direction(direction)
        try:
            value = json.loads(text)
        except ValueError as exc:
            return [
                Violation(
                    endpoint=endpoint,
                    path=paths.ROOT,
                    message=f"Invalid JSON: {exc}",
                    kind=ViolationKind.INVALID_FORMAT,
                    expected="valid JSON",
                    actual=None,
                )
            ]
        return self.validate(value, schema, direction, config=config, endpoint=endpoint)

    def matches(
        self,
        value: Any,
        schema: SchemaOrMatcher,
        direction: Union[ValidationDirection, str],
        config: Optional[PartialValidationConfig] = None,
    ) -> bool:
        return not self.validate(value, schema, direction, config=config)

    # -- dispatch ----------------------------------------------------------

    def _dispatch(
        self,
        schema: SchemaOrMatcher,
        value: Any,
        path: str,
        walk: _Walk,
        out: list[Violation],
        top: bool = False,
    ) -> None:
        if isinstance(schema, SchemaNode):
            self._validate_node(schema, value, path, walk, out, top)
        else:
            self._validate_matcher(schema, value, path, walk, out, top)

    # -- schema nodes ------------------------------------------------------

    def _validate_node(
        self,
        node: SchemaNode,
        value: Any,
        path: str,
        walk: _Walk,
        out: list[Violation],
        top: bool,
    ) -> None:
        if value is None:
            accepts_null = node.nullable or (
                node.composition is None and node.kind in (SchemaKind.NULL, SchemaKind.ANY)
            )
            if not accepts_null:
                out.append(walk.violation(
                    path,
                    "Value is null but schema does not allow null",
                    ViolationKind.UNEXPECTED_NULL,
                    "non-null value",
                    "null",
                ))
            return

        if node.is_composition:
            self._validate_composition(node, value, path, walk, out, top)
            return

        if not self._kind_ok(node, value, path, walk, out):
            return

        kind = node.kind
        if kind == SchemaKind.OBJECT:
            self._validate_object(node, value, path, walk, out, top)
        elif kind == SchemaKind.ARRAY:
            self._validate_array(node, value, path, walk, out)
        elif kind == SchemaKind.STRING:
            self._validate_string(node, value, path, walk, out)
        elif kind in (SchemaKind.INTEGER, SchemaKind.NUMBER):
            self._validate_range(node, value, path, walk, out)
            self._validate_literals(node, value, path, walk, out)
        elif kind in (SchemaKind.BOOLEAN, SchemaKind.ANY):
            self._validate_literals(node, value, path, walk, out)

    def _kind_ok(
        self,
        node: SchemaNode,
        value: Any,
        path: str,
        walk: _Walk,
        out: list[Violation],
    ) -> bool:
        kind = node.kind
        if kind == SchemaKind.ANY:
            return True
        if kind == SchemaKind.INTEGER and is_number(value) and not is_integral(value):
            out.append(walk.violation(
                path,
                "Expected integer but got decimal",
                ViolationKind.INVALID_TYPE,
                "integer",
                render(value),
            ))
            return False

        checks: dict[SchemaKind, Callable[[Any], bool]] = {
            SchemaKind.OBJECT: lambda v: isinstance(v, dict),
            SchemaKind.ARRAY: lambda v: isinstance(v, list),
            SchemaKind.STRING: lambda v: isinstance(v, str),
            SchemaKind.INTEGER: is_integral,
            SchemaKind.NUMBER: is_number,
            SchemaKind.BOOLEAN: lambda v: isinstance(v, bool),
            SchemaKind.NULL: lambda v: v is None,
        }
        if checks[kind](value):
            return True
        out.append(walk.violation(
            path,
            f"Expected {kind.value}",
            ViolationKind.INVALID_TYPE,
            kind.value,
            kind_of(value),
        ))
        return False

    def _validate_object(
        self,
        node: SchemaNode,
        value: dict[str, Any],
        path: str,
        walk: _Walk,
        out: list[Violation],
        top: bool,
    ) -> None:
        config = walk.config

        def in_scope(name: str) -> bool:
            return not top or config.allows(name)

        for name, prop in node.properties.items():
            if (
                name in node.required
                and name not in value
                and prop.visible_in(walk.direction)
                and in_scope(name)
            ):
                out.append(walk.violation(
                    paths.child(path, name),
                    f"Missing required field '{name}'",
                    ViolationKind.MISSING_REQUIRED,
                    prop.node.kind.value,
                    "missing",
                ))

        for name, item in value.items():
            if not in_scope(name):
                continue
            child_path = paths.child(path, name)
            prop = node.properties.get(name)
            if prop is None:
                if config.flags_undeclared(node.additional_properties_allowed):
                    out.append(walk.violation(
                        child_path,
                        f"Unexpected field '{name}'",
                        ViolationKind.UNEXPECTED_FIELD,
                        "no such field",
                        render(item),
                    ))
                continue
            if not prop.visible_in(walk.direction):
                side = "write-only" if prop.visibility == Visibility.REQUEST_ONLY else "read-only"
                out.append(walk.violation(
                    child_path,
                    f"Field '{name}' is {side} and must not appear in a "
                    f"{walk.direction.value} (visibility violation)",
                    ViolationKind.UNEXPECTED_FIELD,
                    f"absent from {walk.direction.value}",
                    "present",
                ))
                continue
            self._validate_node(prop.node, item, child_path, walk, out, top=False)

    def _validate_array(
        self,
        node: SchemaNode,
        value: list[Any],
        path: str,
        walk: _Walk,
        out: list[Violation],
    ) -> None:
        count = len(value)
        if node.min_items is not None and count < node.min_items:
            out.append(walk.violation(
                path,
                "Array has fewer items than minimum",
                ViolationKind.OUT_OF_RANGE,
                f"at least {node.min_items} items",
                f"{count} items",
            ))
        if node.max_items is not None and count > node.max_items:
            out.append(walk.violation(
                path,
                "Array has more items than maximum",
                ViolationKind.OUT_OF_RANGE,
                f"at most {node.max_items} items",
                f"{count} items",
            ))
        if node.item_schema is None:
            return
        for i, item in enumerate(value):
            self._validate_node(node.item_schema, item, paths.index(path, i), walk, out, top=False)

    def _validate_string(
        self,
        node: SchemaNode,
        value: str,
        path: str,
        walk: _Walk,
        out: list[Violation],
    ) -> None:
        if node.format is not None:
            if not formats.check_format(node.format, value):
                out.append(walk.violation(
                    path,
                    f"Value does not match format '{node.format}'",
                    ViolationKind.INVALID_FORMAT,
                    node.format,
                    value,
                ))
        elif node.pattern is not None:
            if _compiled(node.pattern).search(value) is None:
                out.append(walk.violation(
                    path,
                    "Value does not match pattern",
                    ViolationKind.PATTERN_MISMATCH,
                    node.pattern,
                    value,
                ))

        length = len(value)
        if node.min_length is not None and length < node.min_length:
            out.append(walk.violation(
                path,
                "String is shorter than minimum length",
                ViolationKind.OUT_OF_RANGE,
                f"at least {node.min_length} characters",
                f"{length} characters",
            ))
        if node.max_length is not None and length > node.max_length:
            out.append(walk.violation(
                path,
                "String is longer than maximum length",
                ViolationKind.OUT_OF_RANGE,
                f"at most {node.max_length} characters",
                f"{length} characters",
            ))

        self._validate_literals(node, value, path, walk, out)

    def _validate_range(
        self,
        node: SchemaNode,
        value: Union[int, float],
        path: str,
        walk: _Walk,
        out: list[Violation],
    ) -> None:
        if node.minimum is not None:
            if node.exclusive_minimum and value <= node.minimum:
                out.append(walk.violation(
                    path,
                    "Value is not greater than minimum",
                    ViolationKind.OUT_OF_RANGE,
                    f"> {render(node.minimum)}",
                    render(value),
                ))
            elif not node.exclusive_minimum and value < node.minimum:
                out.append(walk.violation(
                    path,
                    "Value is less than minimum",
                    ViolationKind.OUT_OF_RANGE,
                    f">= {render(node.minimum)}",
                    render(value),
                ))
        if node.maximum is not None:
            if node.exclusive_maximum and value >= node.maximum:
                out.append(walk.violation(
                    path,
                    "Value is not less than maximum",
                    ViolationKind.OUT_OF_RANGE,
                    f"< {render(node.maximum)}",
                    render(value),
                ))
            elif not node.exclusive_maximum and value > node.maximum:
                out.append(walk.violation(
                    path,
                    "Value is greater than maximum",
                    ViolationKind.OUT_OF_RANGE,
                    f"<= {render(node.maximum)}",
                    render(value),
                ))

    def _validate_literals(
        self,
        node: SchemaNode,
        value: Any,
        path: str,
        walk: _Walk,
        out: list[Violation],
    ) -> None:
        if node.enum_values is not None:
            allowed = {canonical(v) for v in node.enum_values}
            if canonical(value) not in allowed:
                out.append(walk.violation(
                    path,
                    "Value is not one of the allowed enum values",
                    ViolationKind.INVALID_ENUM_VALUE,
                    ", ".join(render_literal(v) for v in node.enum_values),
                    render(value),
                ))
        if node.const_value is not None and canonical(value) != canonical(node.const_value):
            out.append(walk.violation(
                path,
                "Value does not equal the constant value",
                ViolationKind.INVALID_ENUM_VALUE,
                render_literal(node.const_value),
                render(value),
            ))

    def _validate_composition(
        self,
        node: SchemaNode,
        value: Any,
        path: str,
        walk: _Walk,
        out: list[Violation],
        top: bool,
    ) -> None:
        composition = node.composition
        assert composition is not None
        branches = composition.branches

        if composition.mode == CompositionMode.ALL_OF:
            for branch in branches:
                self._validate_node(branch, value, path, walk, out, top)
            return

        discriminator = composition.discriminator
        if discriminator is not None and isinstance(value, dict):
            prop = discriminator.property_name
            prop_path = paths.child(path, prop)
            selector = value.get(prop)
            if not isinstance(selector, str):
                out.append(walk.violation(
                    prop_path,
                    f"Missing required discriminator property '{prop}'",
                    ViolationKind.MISSING_REQUIRED,
                    prop,
                    "missing" if selector is None else render(selector),
                ))
                return
            branch = composition.branch_for(selector)
            if branch is None:
                out.append(walk.violation(
                    prop_path,
                    f"Discriminator value '{selector}' does not match any known schema",
                    ViolationKind.DISCRIMINATOR_MISMATCH,
                    ", ".join(composition.discriminator_values()),
                    selector,
                ))
                return
            self._validate_node(branch, value, path, walk, out, top)
            return

        matched = 0
        for branch in branches:
            scratch: list[Violation] = []
            self._validate_node(branch, value, path, walk, scratch, top)
            if not scratch:
                matched += 1
                if composition.mode == CompositionMode.ANY_OF:
                    return

        if composition.mode == CompositionMode.ONE_OF and matched == 1:
            return
        if matched == 0:
            out.append(walk.violation(
                path,
                "Value does not match any of the allowed schemas",
                ViolationKind.INVALID_TYPE,
                f"{composition.mode.value} of {len(branches)} schemas",
                kind_of(value),
            ))
        else:
            out.append(walk.violation(
                path,
                f"Value matches {matched} of the allowed schemas but exactly one is required",
                ViolationKind.INVALID_TYPE,
                f"exactly one of {len(branches)} schemas",
                f"{matched} matches",
            ))

    # -- matchers ----------------------------------------------------------

    def _validate_matcher(
        self,
        matcher: MatcherBase,
        value: Any,
        path: str,
        walk: _Walk,
        out: list[Violation],
        top: bool,
    ) -> None:
        if value is None:
            if matcher.nullable or isinstance(matcher, (NullOnlyMatcher, AnyValueMatcher)):
                return
            if isinstance(matcher, OneOfMatcher) and any(v is None for v in matcher.values):
                return
            out.append(walk.violation(
                path,
                f"Value is null but expected {matcher.description}",
                ViolationKind.UNEXPECTED_NULL,
                matcher.description,
                "null",
            ))
            return
        check = self._matcher_checks.get(type(matcher))
        if check is None:
            raise TypeError(f"unsupported matcher type: {type(matcher).__name__}")
        check(matcher, value, path, walk, out, top)

    @staticmethod
    def _string_or_report(
        value: Any,
        label: str,
        path: str,
        walk: _Walk,
        out: list[Violation],
    ) -> bool:
        if isinstance(value, str):
            return True
        out.append(walk.violation(
            path,
            "Value is not a string",
            ViolationKind.INVALID_TYPE,
            label,
            kind_of(value),
        ))
        return False

    def _check_format_matcher(
        self,
        matcher: MatcherBase,
        value: Any,
        path: str,
        walk: _Walk,
        out: list[Violation],
        label: str,
        predicate: Callable[[str], bool],
        message: str,
    ) -> None:
        if not self._string_or_report(value, label, path, walk, out):
            return
        if not predicate(value):
            out.append(walk.violation(
                path, message, ViolationKind.INVALID_FORMAT, matcher.description, value
            ))

    def _check_guid(self, m, value, path, walk, out, top) -> None:
        self._check_format_matcher(
            m, value, path, walk, out, "string (GUID)", formats.is_uuid, "Value is not a valid GUID"
        )

    def _check_any_string(self, m, value, path, walk, out, top) -> None:
        self._string_or_report(value, "string", path, walk, out)

    def _check_non_empty_string(self, m, value, path, walk, out, top) -> None:
        self._check_format_matcher(
            m, value, path, walk, out, "string", bool, "String is empty but must be non-empty"
        )

    def _check_email(self, m, value, path, walk, out, top) -> None:
        self._check_format_matcher(
            m, value, path, walk, out, "string (email)", formats.is_email,
            "Value is not a valid email address",
        )

    def _check_uri(self, m, value, path, walk, out, top) -> None:
        self._check_format_matcher(
            m, value, path, walk, out, "string (URI)", formats.is_absolute_uri,
            "Value is not a valid absolute URI",
        )

    def _check_date_time(self, m, value, path, walk, out, top) -> None:
        self._check_format_matcher(
            m, value, path, walk, out, "string (date-time)", formats.is_date_time,
            "Value is not a valid date-time",
        )

    def _check_date_only(self, m, value, path, walk, out, top) -> None:
        self._check_format_matcher(
            m, value, path, walk, out, "string (date)", formats.is_date,
            "Value is not a valid date",
        )

    def _check_time_only(self, m, value, path, walk, out, top) -> None:
        self._check_format_matcher(
            m, value, path, walk, out, "string (time)", formats.is_time,
            "Value is not a valid time",
        )

    def _check_regex(self, m: RegexMatcher, value, path, walk, out, top) -> None:
        if not self._string_or_report(value, "string", path, walk, out):
            return
        if _compiled(m.pattern).search(value) is None:
            out.append(walk.violation(
                path,
                f"Value does not match pattern '{m.pattern}'",
                ViolationKind.PATTERN_MISMATCH,
                m.pattern,
                value,
            ))

    def _check_bounds(self, low, high, value, path, walk, out) -> None:
        shown = render(value)
        if low is not None and value < low:
            out.append(walk.violation(
                path,
                f"Value {shown} is less than minimum {render(low)}",
                ViolationKind.OUT_OF_RANGE,
                f">= {render(low)}",
                shown,
            ))
        if high is not None and value > high:
            out.append(walk.violation(
                path,
                f"Value {shown} is greater than maximum {render(high)}",
                ViolationKind.OUT_OF_RANGE,
                f"<= {render(high)}",
                shown,
            ))

    def _check_integer_range(self, m: IntegerRangeMatcher, value, path, walk, out, top) -> None:
        if not is_number(value):
            out.append(walk.violation(
                path, "Value is not an integer", ViolationKind.INVALID_TYPE, "integer", kind_of(value)
            ))
            return
        if not is_integral(value):
            out.append(walk.violation(
                path, "Expected integer but got decimal", ViolationKind.INVALID_TYPE, "integer", render(value)
            ))
            return
        self._check_bounds(m.min, m.max, value, path, walk, out)

    def _check_decimal_range(self, m: DecimalRangeMatcher, value, path, walk, out, top) -> None:
        if not is_number(value):
            out.append(walk.violation(
                path, "Value is not a number", ViolationKind.INVALID_TYPE, "number", kind_of(value)
            ))
            return
        self._check_bounds(m.min, m.max, value, path, walk, out)

    def _check_boolean(self, m, value, path, walk, out, top) -> None:
        if not isinstance(value, bool):
            out.append(walk.violation(
                path, "Value is not a boolean", ViolationKind.INVALID_TYPE, "boolean", kind_of(value)
            ))

    def _check_one_of(self, m: OneOfMatcher, value, path, walk, out, top) -> None:
        allowed = {canonical(v) for v in m.values}
        if canonical(value) not in allowed:
            out.append(walk.violation(
                path,
                "Value is not one of the allowed values",
                ViolationKind.INVALID_ENUM_VALUE,
                m.description,
                render(value),
            ))

    def _check_null_only(self, m, value, path, walk, out, top) -> None:
        # null itself is accepted before dispatch
        out.append(walk.violation(
            path, "Value is not null but expected null", ViolationKind.INVALID_TYPE, "null", kind_of(value)
        ))

    def _check_any_value(self, m, value, path, walk, out, top) -> None:
        return

    def _check_type(self, m: TypeMatcher, value, path, walk, out, top) -> None:
        expected = m.json_kind
        if expected in (SchemaKind.INTEGER, SchemaKind.NUMBER):
            ok = is_number(value)
        else:
            ok = _KIND_TESTS[expected](value)
        if not ok:
            out.append(walk.violation(
                path,
                f"Value type mismatch: expected {expected.value}",
                ViolationKind.INVALID_TYPE,
                expected.value,
                kind_of(value),
            ))

    def _check_equals(self, m: EqualsMatcher, value, path, walk, out, top) -> None:
        expected = m.value
        same_kind = (
            (is_number(expected) and is_number(value))
            or (isinstance(expected, bool) and isinstance(value, bool))
            or (isinstance(expected, str) and isinstance(value, str))
        )
        if not same_kind:
            out.append(walk.violation(
                path,
                f"Value type mismatch: expected {m.json_kind}",
                ViolationKind.INVALID_TYPE,
                m.json_kind,
                kind_of(value),
            ))
            return
        if canonical(value) != canonical(expected):
            out.append(walk.violation(
                path,
                "Value does not equal the expected literal",
                ViolationKind.INVALID_ENUM_VALUE,
                render_literal(expected),
                render(value),
            ))

    def _check_object_of(self, m: ObjectOfMatcher, value, path, walk, out, top) -> None:
        if not isinstance(value, dict):
            out.append(walk.violation(
                path, "Value is not an object", ViolationKind.INVALID_TYPE, "object", kind_of(value)
            ))
            return

        config = walk.config
        nested: list[Violation] = []
        declared = {name.lower(): name for name in m.properties}

        for name, child in m.properties.items():
            if top and not config.allows(name):
                continue
            child_path = paths.child(paths.ROOT, name)
            if name not in value:
                nested.append(walk.violation(
                    child_path,
                    f"Missing required field '{name}'",
                    ViolationKind.MISSING_REQUIRED,
                    child.description,
                    "missing",
                ))
                continue
            self._validate_matcher(child, value[name], child_path, walk, nested, top=False)

        if config.flags_undeclared(True):
            for name, item in value.items():
                if name in m.properties:
                    continue
                if top and not config.allows(name):
                    continue
                hint = declared.get(name.lower())
                message = f"Unexpected field '{name}'"
                if hint is not None:
                    message += f" (did you mean '{hint}'?)"
                nested.append(walk.violation(
                    paths.child(paths.ROOT, name),
                    message,
                    ViolationKind.UNEXPECTED_FIELD,
                    "no such field",
                    render(item),
                ))

        out.extend(_rebase(nested, path))

    def _check_each_like(self, m: EachLikeMatcher, value, path, walk, out, top) -> None:
        if not isinstance(value, list):
            out.append(walk.violation(
                path, "Value is not an array", ViolationKind.INVALID_TYPE, "array", kind_of(value)
            ))
            return
        if len(value) < m.min_count:
            out.append(walk.violation(
                path,
                f"Array has {len(value)} items but requires at least {m.min_count}",
                ViolationKind.OUT_OF_RANGE,
                f"at least {m.min_count} items",
                f"{len(value)} items",
            ))
        nested: list[Violation] = []
        for i, item in enumerate(value):
            self._validate_matcher(m.item, item, paths.index(paths.ROOT, i), walk, nested, top=False)
        out.extend(_rebase(nested, path))


_KIND_TESTS: dict[SchemaKind, Callable[[Any], bool]] = {
    SchemaKind.OBJECT: lambda v: isinstance(v, dict),
    SchemaKind.ARRAY: lambda v: isinstance(v, list),
    SchemaKind.STRING: lambda v: isinstance(v, str),
    SchemaKind.BOOLEAN: lambda v: isinstance(v, bool),
}


def _rebase(violations: list[Violation], parent: str) -> list[Violation]:
    """Splice nested-root violation paths onto *parent*."""
    return [
        v.model_copy(update={"path": paths.splice(parent, v.path)})
        for v in violations
    ]


# ---------------------------------------------------------------------------
# Module-level convenience
# ---------------------------------------------------------------------------


def default_validator() -> StructuralValidator:
    """Validator whose defaults come from ``TreatyConfig``."""
    from treatycore.config import get_config

    config = get_config()
    return StructuralValidator(
        PartialValidationConfig(
            strict_mode=config.strict_mode,
            ignore_extra_fields=config.ignore_extra_fields,
        )
    )


def validate(
    value: Any,
    schema: SchemaOrMatcher,
    direction: Union[ValidationDirection, str],
    config: Optional[PartialValidationConfig] = None,
    endpoint: str = "",
) -> list[Violation]:
    """Validate *value* with a validator configured from ``TreatyConfig``."""
    return default_validator().validate(value, schema, direction, config=config, endpoint=endpoint)


def validate_json(
    text: Union[str, bytes],
    schema: SchemaOrMatcher,
    direction: Union[ValidationDirection, str],
    config: Optional[PartialValidationConfig] = None,
    endpoint: str = "",
) -> list[Violation]:
    return default_validator().validate_json(text, schema, direction, config=config, endpoint=endpoint)


def check(
    value: Any,
    schema: SchemaOrMatcher,
    direction: Union[ValidationDirection, str],
    config: Optional[PartialValidationConfig] = None,
    endpoint: str = "",
) -> ValidationResult:
    """Validate *value* and wrap the outcome in a ``ValidationResult``.

    Unlike :func:`validate` the outcome is logged and emitted as a
    ``treaty.validation.result`` span event.
    """
    direction = _coerce_direction(direction)
    result = ValidationResult(
        endpoint=endpoint,
        direction=direction,
        violations=validate(value, schema, direction, config=config, endpoint=endpoint),
    )
    emit_validation_result(result)
    return result
