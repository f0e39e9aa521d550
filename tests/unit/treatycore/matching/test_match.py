"""Tests for the Match factory, matcher tree building and schema conversion."""

from __future__ import annotations

import pytest

from treatycore.matching.match import Match, build_matcher_tree, matcher_to_schema
from treatycore.matching.matchers import (
    AnyValueMatcher,
    EachLikeMatcher,
    EqualsMatcher,
    GuidMatcher,
    IntegerRangeMatcher,
    NullOnlyMatcher,
    ObjectOfMatcher,
    TypeMatcher,
)
from treatycore.types import SchemaKind


class TestMatchFactory:
    def test_leaf_factories(self):
        assert isinstance(Match.guid(), GuidMatcher)
        matcher = Match.integer(min=0, max=100)
        assert isinstance(matcher, IntegerRangeMatcher)
        assert (matcher.min, matcher.max) == (0, 100)

    def test_one_of_requires_values(self):
        with pytest.raises(ValueError, match="At least one value"):
            Match.one_of()

    def test_type_of_infers_kind(self):
        assert Match.type_of("x").json_kind == SchemaKind.STRING
        assert Match.type_of(3).json_kind == SchemaKind.INTEGER
        assert Match.type_of(2.5).json_kind == SchemaKind.NUMBER
        assert Match.type_of(True).json_kind == SchemaKind.BOOLEAN
        assert Match.type_of([1]).json_kind == SchemaKind.ARRAY
        assert Match.type_of({"a": 1}).json_kind == SchemaKind.OBJECT
        assert isinstance(Match.type_of("x"), TypeMatcher)

    def test_type_of_null_rejected(self):
        with pytest.raises(ValueError):
            Match.type_of(None)

    def test_each_like_builds_item_tree(self):
        matcher = Match.each_like({"id": Match.guid()}, min_count=2)
        assert matcher.min_count == 2
        assert isinstance(matcher.item, ObjectOfMatcher)

    def test_nullable_copies(self):
        base = Match.email()
        relaxed = Match.nullable(base)
        assert relaxed.nullable
        assert not base.nullable


class TestBuildMatcherTree:
    def test_matchers_stay_leaves(self):
        guid = Match.guid()
        assert build_matcher_tree(guid) is guid

    def test_dicts_become_objects(self):
        tree = build_matcher_tree({"id": Match.guid(), "kind": "user", "count": 3})
        assert isinstance(tree, ObjectOfMatcher)
        assert isinstance(tree.properties["id"], GuidMatcher)
        assert tree.properties["kind"] == EqualsMatcher(value="user")
        assert tree.properties["count"] == EqualsMatcher(value=3)

    def test_lists_become_each_like_over_first_element(self):
        tree = build_matcher_tree(["a", "b"])
        assert isinstance(tree, EachLikeMatcher)
        assert tree.min_count == 0
        assert tree.item == EqualsMatcher(value="a")

    def test_empty_list(self):
        tree = build_matcher_tree([])
        assert tree == EachLikeMatcher(item=AnyValueMatcher(), min_count=0)

    def test_none_becomes_null_only(self):
        assert isinstance(build_matcher_tree(None), NullOnlyMatcher)

    def test_unsupported_value(self):
        with pytest.raises(TypeError, match="unsupported value"):
            build_matcher_tree({"when": object()})


class TestMatcherToSchema:
    def test_object_properties_are_required(self):
        node = matcher_to_schema(build_matcher_tree({"id": Match.guid(), "age": Match.integer(min=0)}))
        assert node.kind == SchemaKind.OBJECT
        assert node.required == frozenset({"id", "age"})
        assert node.properties["id"].node.format == "uuid"
        assert node.properties["age"].node.minimum == 0

    def test_each_like(self):
        node = matcher_to_schema(Match.each_like(Match.email(), min_count=2))
        assert node.kind == SchemaKind.ARRAY
        assert node.min_items == 2
        assert node.item_schema.format == "email"

    def test_one_of_becomes_enum(self):
        node = matcher_to_schema(Match.one_of("a", "b"))
        assert node.kind == SchemaKind.STRING
        assert node.enum_values == ["a", "b"]

    def test_mixed_numbers_one_of_is_number(self):
        assert matcher_to_schema(Match.one_of(1, 2.5)).kind == SchemaKind.NUMBER

    def test_equals_becomes_const(self):
        node = matcher_to_schema(EqualsMatcher(value=True))
        assert node.kind == SchemaKind.BOOLEAN
        assert node.const_value is True

    def test_type_matcher_integer_widens_to_number(self):
        assert matcher_to_schema(Match.type_of(1)).kind == SchemaKind.NUMBER

    def test_nullable_carried(self):
        assert matcher_to_schema(Match.nullable(Match.string())).nullable

    def test_regex_keeps_example(self):
        node = matcher_to_schema(Match.regex(r"^\d{3}$", "123"))
        assert node.pattern == r"^\d{3}$"
        assert node.example == "123"
