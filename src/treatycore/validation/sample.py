"""
Sample payload generation.

``SampleGenerator`` produces a JSON-compatible value that validates against
the schema or matcher tree it came from (in the same direction).  Samples
are deterministic except for format-driven values such as ``uuid`` and
``date-time``.

Selection order for a schema node:

1. ``example`` (checked against the node first),
2. ``const``, then the first ``enum`` value,
3. composition (allOf merges object samples, anyOf takes the first branch,
   oneOf the first branch whose sample satisfies the whole composition),
4. the per-kind default.

Usage::

    from treatycore.validation.sample import generate_sample

    payload = generate_sample(user_schema, "request")
"""

from __future__ import annotations

import json
from typing import Any, Optional, Union

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
from treatycore.types import CompositionMode, SchemaKind, ValidationDirection
from treatycore.validation import formats
from treatycore.validation.validator import StructuralValidator

SchemaOrMatcher = Union[SchemaNode, MatcherBase]


class SampleGenerationError(ValueError):
    """Raised when no valid sample can be derived from a schema."""


def _coerce_direction(direction: Any) -> ValidationDirection:
    if direction is None:
        raise TypeError("direction must not be None")
    return ValidationDirection(direction)


class SampleGenerator:
    """Builds example payloads from schema nodes and matcher trees."""

    def __init__(self) -> None:
        self._validator = StructuralValidator()

    def generate(
        self,
        schema: SchemaOrMatcher,
        direction: Union[ValidationDirection, str] = ValidationDirection.RESPONSE,
    ) -> Any:
        """Return a sample value for *schema*.

        Raises:
            TypeError: If *schema* or *direction* is None.
            SampleGenerationError: If the schema admits no derivable sample.
        """
        if schema is None:
            raise TypeError("schema must not be None")
        direction = _coerce_direction(direction)
        if isinstance(schema, MatcherBase):
            return self._from_matcher(schema)
        return self._from_node(schema, direction, "$")

    def generate_json(
        self,
        schema: SchemaOrMatcher,
        direction: Union[ValidationDirection, str] = ValidationDirection.RESPONSE,
        indent: Optional[int] = 2,
    ) -> str:
        return json.dumps(self.generate(schema, direction), indent=indent)

    # -- schema nodes ------------------------------------------------------

    def _from_node(self, node: SchemaNode, direction: ValidationDirection, path: str) -> Any:
        if node.example is not None:
            if self._validator.validate(node.example, node, direction):
                raise SampleGenerationError(
                    f"example at {path} does not satisfy its own schema"
                )
            return node.example
        if node.const_value is not None:
            return node.const_value
        if node.enum_values:
            return node.enum_values[0]
        if node.is_composition:
            return self._from_composition(node, direction, path)

        kind = node.kind
        if kind == SchemaKind.OBJECT:
            return {
                name: self._from_node(prop.node, direction, f"{path}.{name}")
                for name, prop in node.visible_properties(direction).items()
            }
        if kind == SchemaKind.ARRAY:
            return self._array(node, direction, path)
        if kind == SchemaKind.STRING:
            return self._string(node, path)
        if kind == SchemaKind.INTEGER:
            return self._integer(node, path)
        if kind == SchemaKind.NUMBER:
            return self._number(node, path)
        if kind == SchemaKind.BOOLEAN:
            return True
        return None

    def _from_composition(
        self, node: SchemaNode, direction: ValidationDirection, path: str
    ) -> Any:
        composition = node.composition
        assert composition is not None

        if composition.mode == CompositionMode.ALL_OF:
            merged: dict[str, Any] = {}
            for branch in composition.branches:
                sample = self._from_node(branch, direction, path)
                if not isinstance(sample, dict):
                    raise SampleGenerationError(
                        f"allOf at {path} combines non-object branches"
                    )
                merged.update(sample)
            return merged

        if composition.mode == CompositionMode.ANY_OF:
            return self._from_node(composition.branches[0], direction, path)

        for branch in composition.branches:
            try:
                sample = self._from_node(branch, direction, path)
            except SampleGenerationError:
                continue
            disc = composition.discriminator
            if disc is not None and isinstance(sample, dict) and branch.title is not None:
                sample = {**sample, disc.property_name: _discriminator_value(disc, branch.title)}
            if not self._validator.validate(sample, node, direction):
                return sample
        raise SampleGenerationError(
            f"no oneOf branch at {path} yields a sample matching exactly one schema"
        )

    def _array(self, node: SchemaNode, direction: ValidationDirection, path: str) -> list[Any]:
        if node.max_items == 0:
            return []
        count = max(1, node.min_items or 0)
        if node.item_schema is None:
            return ["string"] * count
        return [
            self._from_node(node.item_schema, direction, f"{path}[{index}]")
            for index in range(count)
        ]

    def _string(self, node: SchemaNode, path: str) -> str:
        if node.pattern is not None:
            raise SampleGenerationError(
                f"string at {path} has pattern '{node.pattern}' but no example"
            )
        value = formats.sample_for_format(node.format)
        if node.min_length is not None and len(value) < node.min_length:
            if node.format is not None and node.format.lower() in formats.FORMAT_CHECKERS:
                raise SampleGenerationError(
                    f"format '{node.format}' sample at {path} is shorter than min_length"
                )
            value = value + "x" * (node.min_length - len(value))
        if node.max_length is not None and len(value) > node.max_length:
            if node.format is not None and node.format.lower() in formats.FORMAT_CHECKERS:
                raise SampleGenerationError(
                    f"format '{node.format}' sample at {path} exceeds max_length"
                )
            value = value[: node.max_length]
        return value

    def _integer(self, node: SchemaNode, path: str) -> int:
        low = node.minimum
        high = node.maximum
        if low is not None:
            low = int(low) + 1 if node.exclusive_minimum and float(low).is_integer() else _ceil(low)
        if high is not None:
            high = int(high) - 1 if node.exclusive_maximum and float(high).is_integer() else _floor(high)
        if low is not None and high is not None:
            if low > high:
                raise SampleGenerationError(f"no integer satisfies the range at {path}")
            return (low + high) // 2
        if low is not None:
            return low
        if high is not None:
            return high
        return 1

    def _number(self, node: SchemaNode, path: str) -> float:
        low = node.minimum
        high = node.maximum
        if low is not None and high is not None:
            mid = (float(low) + float(high)) / 2
            if (node.exclusive_minimum and mid <= low) or (node.exclusive_maximum and mid >= high):
                raise SampleGenerationError(f"no number satisfies the range at {path}")
            return mid
        if low is not None:
            return float(low) + 1 if node.exclusive_minimum else float(low)
        if high is not None:
            return float(high) - 1 if node.exclusive_maximum else float(high)
        return 1.0

    # -- matchers ----------------------------------------------------------

    def _from_matcher(self, matcher: MatcherBase) -> Any:
        m = matcher
        if isinstance(m, GuidMatcher):
            return formats.FORMAT_SAMPLES["uuid"]()
        if isinstance(m, AnyStringMatcher):
            return formats.DEFAULT_STRING_SAMPLE
        if isinstance(m, NonEmptyStringMatcher):
            return "sample"
        if isinstance(m, EmailMatcher):
            return formats.FORMAT_SAMPLES["email"]()
        if isinstance(m, UriMatcher):
            return formats.FORMAT_SAMPLES["uri"]()
        if isinstance(m, RegexMatcher):
            return m.example
        if isinstance(m, DateTimeMatcher):
            return formats.FORMAT_SAMPLES["date-time"]()
        if isinstance(m, DateOnlyMatcher):
            return formats.FORMAT_SAMPLES["date"]()
        if isinstance(m, TimeOnlyMatcher):
            return formats.FORMAT_SAMPLES["time"]()
        if isinstance(m, IntegerRangeMatcher):
            if m.min is not None and m.max is not None:
                return (m.min + m.max) // 2
            if m.min is not None:
                return m.min
            if m.max is not None:
                return m.max
            return 1
        if isinstance(m, DecimalRangeMatcher):
            if m.min is not None and m.max is not None:
                return (m.min + m.max) / 2
            if m.min is not None:
                return float(m.min)
            if m.max is not None:
                return float(m.max)
            return 1.0
        if isinstance(m, BooleanMatcher):
            return True
        if isinstance(m, OneOfMatcher):
            return m.values[0]
        if isinstance(m, (NullOnlyMatcher, AnyValueMatcher)):
            return None
        if isinstance(m, TypeMatcher):
            return m.example
        if isinstance(m, EqualsMatcher):
            return m.value
        if isinstance(m, ObjectOfMatcher):
            return {name: self._from_matcher(child) for name, child in m.properties.items()}
        if isinstance(m, EachLikeMatcher):
            return [self._from_matcher(m.item) for _ in range(max(1, m.min_count))]
        raise TypeError(f"unknown matcher type: {type(m).__name__}")


def _discriminator_value(disc: Any, title: str) -> str:
    """Mapping key pointing at *title*, or the title itself."""
    lowered = title.lower()
    for key in disc.mapping:
        if disc.target_for(key).lower() == lowered:
            return key
    return title


def _ceil(value: Union[int, float]) -> int:
    as_int = int(value)
    return as_int if as_int >= value else as_int + 1


def _floor(value: Union[int, float]) -> int:
    as_int = int(value)
    return as_int if as_int <= value else as_int - 1


def generate_sample(
    schema: SchemaOrMatcher,
    direction: Union[ValidationDirection, str] = ValidationDirection.RESPONSE,
) -> Any:
    """Module-level shortcut for ``SampleGenerator().generate()``."""
    return SampleGenerator().generate(schema, direction)


def generate_sample_json(
    schema: SchemaOrMatcher,
    direction: Union[ValidationDirection, str] = ValidationDirection.RESPONSE,
) -> str:
    return SampleGenerator().generate_json(schema, direction)
