"""
Matcher factory and tree building.

``Match`` is the fluent entry point for declaring matcher leaves.
``build_matcher_tree()`` turns an example literal (nested dicts/lists
containing matcher leaves) into a matcher tree: matcher instances stay as
leaves, dicts become ``ObjectOfMatcher``, lists become ``EachLikeMatcher``
over their first element and plain scalars become literal-equality nodes.

``matcher_to_schema()`` converts a matcher tree into the equivalent
``SchemaNode`` so matcher-described bodies can take part in contract
comparison.

Usage::

    from treatycore.matching.match import Match, build_matcher_tree

    tree = build_matcher_tree({
        "id": Match.guid(),
        "email": Match.email(),
        "age": Match.integer(min=0, max=150),
        "tags": Match.each_like("admin"),
        "kind": "user",
    })
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from treatycore._json import is_integral, is_number
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
    Matcher,
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
from treatycore.schema.nodes import SchemaNode, object_schema
from treatycore.types import SchemaKind


class Match:
    """Factory for matcher leaves and structural wrappers."""

    @staticmethod
    def guid() -> GuidMatcher:
        return GuidMatcher()

    @staticmethod
    def string() -> AnyStringMatcher:
        return AnyStringMatcher()

    @staticmethod
    def non_empty_string() -> NonEmptyStringMatcher:
        return NonEmptyStringMatcher()

    @staticmethod
    def email() -> EmailMatcher:
        return EmailMatcher()

    @staticmethod
    def uri() -> UriMatcher:
        return UriMatcher()

    @staticmethod
    def regex(pattern: str, example: str) -> RegexMatcher:
        """String matching *pattern*; *example* is used for generated samples."""
        return RegexMatcher(pattern=pattern, example=example)

    @staticmethod
    def integer(min: Optional[int] = None, max: Optional[int] = None) -> IntegerRangeMatcher:
        return IntegerRangeMatcher(min=min, max=max)

    @staticmethod
    def decimal(min: Optional[float] = None, max: Optional[float] = None) -> DecimalRangeMatcher:
        return DecimalRangeMatcher(min=min, max=max)

    @staticmethod
    def boolean() -> BooleanMatcher:
        return BooleanMatcher()

    @staticmethod
    def date_time() -> DateTimeMatcher:
        return DateTimeMatcher()

    @staticmethod
    def date_only() -> DateOnlyMatcher:
        return DateOnlyMatcher()

    @staticmethod
    def time_only() -> TimeOnlyMatcher:
        return TimeOnlyMatcher()

    @staticmethod
    def one_of(*values: Any) -> OneOfMatcher:
        if not values:
            raise ValueError("At least one value must be provided")
        return OneOfMatcher(values=list(values))

    @staticmethod
    def null() -> NullOnlyMatcher:
        return NullOnlyMatcher()

    @staticmethod
    def any() -> AnyValueMatcher:
        return AnyValueMatcher()

    @staticmethod
    def type_of(example: Any) -> TypeMatcher:
        """Match any value of the same JSON kind as *example*."""
        return TypeMatcher(json_kind=_kind_for_example(example), example=example)

    @staticmethod
    def each_like(example: Any, min_count: int = 1) -> EachLikeMatcher:
        return EachLikeMatcher(item=build_matcher_tree(example), min_count=min_count)

    @staticmethod
    def object(schema: Mapping[str, Any]) -> ObjectOfMatcher:
        return ObjectOfMatcher(
            properties={str(k): build_matcher_tree(v) for k, v in schema.items()}
        )

    @staticmethod
    def nullable(matcher: MatcherBase) -> Matcher:
        """Copy of *matcher* that also accepts null."""
        return matcher.model_copy(update={"nullable": True})


def _kind_for_example(example: Any) -> SchemaKind:
    if isinstance(example, bool):
        return SchemaKind.BOOLEAN
    if is_number(example):
        return SchemaKind.INTEGER if isinstance(example, int) else SchemaKind.NUMBER
    if isinstance(example, str):
        return SchemaKind.STRING
    if isinstance(example, (list, tuple)):
        return SchemaKind.ARRAY
    if isinstance(example, Mapping):
        return SchemaKind.OBJECT
    raise ValueError(f"cannot infer a JSON kind from {example!r}")


def build_matcher_tree(example: Any) -> Matcher:
    """Convert an example literal into a matcher tree.

    Raises:
        TypeError: If the literal contains a value with no JSON equivalent.
    """
    if isinstance(example, MatcherBase):
        return example
    if example is None:
        return NullOnlyMatcher()
    if isinstance(example, Mapping):
        return ObjectOfMatcher(
            properties={str(k): build_matcher_tree(v) for k, v in example.items()}
        )
    if isinstance(example, (list, tuple)):
        if not example:
            return EachLikeMatcher(item=AnyValueMatcher(), min_count=0)
        return EachLikeMatcher(item=build_matcher_tree(example[0]), min_count=0)
    if isinstance(example, (str, bool)) or is_number(example):
        return EqualsMatcher(value=example)
    raise TypeError(f"unsupported value in matcher example: {type(example).__name__}")


# ---------------------------------------------------------------------------
# Schema conversion
# ---------------------------------------------------------------------------


def _string_node(m: MatcherBase, **kwargs: Any) -> SchemaNode:
    return SchemaNode(kind=SchemaKind.STRING, nullable=m.nullable, **kwargs)


def _literal_kind(values: list[Any]) -> SchemaKind:
    kinds = set()
    for v in values:
        if v is None:
            continue
        if isinstance(v, bool):
            kinds.add(SchemaKind.BOOLEAN)
        elif is_number(v):
            kinds.add(SchemaKind.INTEGER if is_integral(v) else SchemaKind.NUMBER)
        elif isinstance(v, str):
            kinds.add(SchemaKind.STRING)
        else:
            return SchemaKind.ANY
    if kinds == {SchemaKind.INTEGER, SchemaKind.NUMBER}:
        return SchemaKind.NUMBER
    if len(kinds) == 1:
        return kinds.pop()
    return SchemaKind.ANY


def matcher_to_schema(matcher: MatcherBase) -> SchemaNode:
    """Return the ``SchemaNode`` equivalent of a matcher tree."""
    m = matcher
    if isinstance(m, GuidMatcher):
        return _string_node(m, format="uuid")
    if isinstance(m, AnyStringMatcher):
        return _string_node(m)
    if isinstance(m, NonEmptyStringMatcher):
        return _string_node(m, min_length=1)
    if isinstance(m, EmailMatcher):
        return _string_node(m, format="email")
    if isinstance(m, UriMatcher):
        return _string_node(m, format="uri")
    if isinstance(m, RegexMatcher):
        return _string_node(m, pattern=m.pattern, example=m.example)
    if isinstance(m, DateTimeMatcher):
        return _string_node(m, format="date-time")
    if isinstance(m, DateOnlyMatcher):
        return _string_node(m, format="date")
    if isinstance(m, TimeOnlyMatcher):
        return _string_node(m, format="time")
    if isinstance(m, IntegerRangeMatcher):
        return SchemaNode(
            kind=SchemaKind.INTEGER, minimum=m.min, maximum=m.max, nullable=m.nullable
        )
    if isinstance(m, DecimalRangeMatcher):
        return SchemaNode(
            kind=SchemaKind.NUMBER, minimum=m.min, maximum=m.max, nullable=m.nullable
        )
    if isinstance(m, BooleanMatcher):
        return SchemaNode(kind=SchemaKind.BOOLEAN, nullable=m.nullable)
    if isinstance(m, OneOfMatcher):
        return SchemaNode(
            kind=_literal_kind(m.values),
            enum_values=list(m.values),
            nullable=m.nullable or any(v is None for v in m.values),
        )
    if isinstance(m, NullOnlyMatcher):
        return SchemaNode(kind=SchemaKind.NULL)
    if isinstance(m, AnyValueMatcher):
        return SchemaNode(kind=SchemaKind.ANY, nullable=True)
    if isinstance(m, TypeMatcher):
        kind = m.json_kind
        if kind == SchemaKind.INTEGER:
            # type matchers accept any JSON number
            kind = SchemaKind.NUMBER
        return SchemaNode(kind=kind, nullable=m.nullable)
    if isinstance(m, EqualsMatcher):
        return SchemaNode(
            kind=_literal_kind([m.value]), const_value=m.value, nullable=m.nullable
        )
    if isinstance(m, ObjectOfMatcher):
        return object_schema(
            {name: matcher_to_schema(child) for name, child in m.properties.items()},
            required=list(m.properties),
            nullable=m.nullable,
        )
    if isinstance(m, EachLikeMatcher):
        return SchemaNode(
            kind=SchemaKind.ARRAY,
            item_schema=matcher_to_schema(m.item),
            min_items=m.min_count or None,
            nullable=m.nullable,
        )
    raise TypeError(f"unknown matcher type: {type(m).__name__}")
