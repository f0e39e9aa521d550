"""Tests for JSON document diffs."""

from __future__ import annotations

from treatycore.diagnostics.json_diff import (
    JsonDiff,
    compare_json,
    compare_values,
    format_diffs,
    format_side_by_side,
)
from treatycore.types import DiffKind


class TestCompareValues:
    def test_identical(self):
        assert compare_values({"a": [1, {"b": None}]}, {"a": [1, {"b": None}]}) == []

    def test_numbers_compare_by_magnitude(self):
        assert compare_values({"n": 1}, {"n": 1.0}) == []

    def test_added_removed_changed(self):
        diffs = compare_values({"a": 1, "b": "x"}, {"a": 2, "c": True})
        assert [(d.kind, d.path) for d in diffs] == [
            (DiffKind.CHANGED, "$.a"),
            (DiffKind.REMOVED, "$.b"),
            (DiffKind.ADDED, "$.c"),
        ]
        assert diffs[0].expected == "1"
        assert diffs[0].actual == "2"

    def test_type_mismatch(self):
        diff = compare_values({"a": "1"}, {"a": 1})[0]
        assert diff.kind == DiffKind.TYPE_MISMATCH
        assert (diff.expected, diff.actual) == ("string", "number")

    def test_boolean_is_not_a_number(self):
        assert compare_values(1, True)[0].kind == DiffKind.TYPE_MISMATCH

    def test_arrays(self):
        diffs = compare_values([1, 2], [1, 3, 4])
        assert [(d.kind, d.path) for d in diffs] == [
            (DiffKind.CHANGED, "$[1]"),
            (DiffKind.ADDED, "$[2]"),
        ]


class TestCompareJson:
    def test_blank_inputs(self):
        assert compare_json("", "  ") == []
        assert compare_json(None, '{"a":1}') == [JsonDiff.added("$", '{"a":1}')]
        assert compare_json('{"a":1}', None)[0].kind == DiffKind.REMOVED

    def test_parses_both_sides(self):
        diffs = compare_json('{"a": 1}', '{"a": 1, "b": [2]}')
        assert [str(d) for d in diffs] == ["+ $.b: [2]"]

    def test_invalid_json_compared_as_text(self):
        assert compare_json("not json", "not json") == []
        diff = compare_json("not json", '{"a": 1}')[0]
        assert diff.kind == DiffKind.CHANGED
        assert diff.path == "$"


class TestRendering:
    def test_str(self):
        assert str(JsonDiff.removed("$.a", "1")) == "- $.a: 1"
        assert str(JsonDiff.changed("$.a", "1", "2")) == "~ $.a: 1 → 2"
        assert str(JsonDiff.type_mismatch("$.a", "string", "number")) == "! $.a: expected string, got number"

    def test_format_diffs(self):
        text = format_diffs([JsonDiff.changed("$.a", "1", "2")])
        assert text.splitlines() == [
            "--- Expected",
            "+++ Actual",
            "",
            "~ $.a:",
            "    Expected: 1",
            "    Actual:   2",
            "    Note: Value differs from expected",
            "",
        ]

    def test_format_no_diffs(self):
        assert format_diffs([]) == ""

    def test_side_by_side(self):
        text = format_side_by_side('{"a": 1}', "")
        lines = text.splitlines()
        assert lines[0].startswith("Expected:")
        assert lines[1] == "-" * 70
        assert lines[2] == "{".ljust(35) + " | (empty)"
        assert lines[3] == '  "a": 1'.ljust(35) + " | "

    def test_side_by_side_truncates(self):
        long_value = '{"key": "' + "x" * 60 + '"}'
        line = format_side_by_side(long_value, long_value).splitlines()[3]
        left = line.split(" | ", 1)[0]
        assert left.endswith("...")
        assert len(left) == 35
