"""
Structural diff between an expected and an actual JSON document.

Used to show what a payload got wrong next to a generated sample::

    from treatycore.diagnostics.json_diff import compare_json, format_diffs

    diffs = compare_json(expected_text, actual_text)
    print(format_diffs(diffs))

Paths follow the violation convention (``$``, ``$.a``, ``$.items[0]``).
"""

from __future__ import annotations

import json
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from treatycore._json import is_number, same_value
from treatycore.types import DiffKind
from treatycore.validation import paths

_PREFIX = {
    DiffKind.ADDED: "+",
    DiffKind.REMOVED: "-",
    DiffKind.CHANGED: "~",
    DiffKind.TYPE_MISMATCH: "!",
}

COLUMN_WIDTH = 35


class JsonDiff(BaseModel):
    """One difference between two JSON documents."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: str
    kind: DiffKind
    expected: Optional[str] = None
    actual: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def added(cls, path: str, actual: str) -> JsonDiff:
        return cls(
            path=path, kind=DiffKind.ADDED, actual=actual,
            description="Field present in response but not in contract schema",
        )

    @classmethod
    def removed(cls, path: str, expected: str) -> JsonDiff:
        return cls(
            path=path, kind=DiffKind.REMOVED, expected=expected,
            description="Required field missing from response",
        )

    @classmethod
    def changed(cls, path: str, expected: str, actual: str) -> JsonDiff:
        return cls(
            path=path, kind=DiffKind.CHANGED, expected=expected, actual=actual,
            description="Value differs from expected",
        )

    @classmethod
    def type_mismatch(cls, path: str, expected_type: str, actual_type: str) -> JsonDiff:
        return cls(
            path=path, kind=DiffKind.TYPE_MISMATCH,
            expected=expected_type, actual=actual_type,
            description=f"Expected type '{expected_type}', got '{actual_type}'",
        )

    @property
    def prefix(self) -> str:
        return _PREFIX[self.kind]

    def __str__(self) -> str:
        if self.kind == DiffKind.ADDED:
            return f"+ {self.path}: {self.actual}"
        if self.kind == DiffKind.REMOVED:
            return f"- {self.path}: {self.expected}"
        if self.kind == DiffKind.CHANGED:
            return f"~ {self.path}: {self.expected} → {self.actual}"
        return f"! {self.path}: expected {self.expected}, got {self.actual}"


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def _show(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def compare_values(expected: Any, actual: Any, path: str = paths.ROOT) -> list[JsonDiff]:
    """Diff two decoded JSON values."""
    diffs: list[JsonDiff] = []
    _compare(expected, actual, path, diffs)
    return diffs


def _compare(expected: Any, actual: Any, path: str, diffs: list[JsonDiff]) -> None:
    expected_type, actual_type = _type_name(expected), _type_name(actual)
    if expected_type != actual_type:
        diffs.append(JsonDiff.type_mismatch(path, expected_type, actual_type))
        return

    if isinstance(expected, dict):
        for name, value in expected.items():
            child = paths.child(path, name)
            if name not in actual:
                diffs.append(JsonDiff.removed(child, _show(value)))
            else:
                _compare(value, actual[name], child, diffs)
        for name, value in actual.items():
            if name not in expected:
                diffs.append(JsonDiff.added(paths.child(path, name), _show(value)))
    elif isinstance(expected, list):
        for i in range(max(len(expected), len(actual))):
            child = paths.index(path, i)
            if i >= len(expected):
                diffs.append(JsonDiff.added(child, _show(actual[i])))
            elif i >= len(actual):
                diffs.append(JsonDiff.removed(child, _show(expected[i])))
            else:
                _compare(expected[i], actual[i], child, diffs)
    elif not same_value(expected, actual):
        diffs.append(JsonDiff.changed(path, _show(expected), _show(actual)))


def compare_json(expected: Optional[str], actual: Optional[str]) -> list[JsonDiff]:
    """Diff two JSON texts.

    Blank input on one side reports the whole other document as added or
    removed.  If either side is not valid JSON the texts are compared as
    plain strings.
    """
    expected_blank = not expected or not expected.strip()
    actual_blank = not actual or not actual.strip()
    if expected_blank and actual_blank:
        return []
    if expected_blank:
        return [JsonDiff.added(paths.ROOT, actual or "null")]
    if actual_blank:
        return [JsonDiff.removed(paths.ROOT, expected or "null")]

    try:
        expected_value = json.loads(expected)
        actual_value = json.loads(actual)
    except ValueError:
        if expected == actual:
            return []
        return [JsonDiff.changed(paths.ROOT, expected, actual)]
    return compare_values(expected_value, actual_value)


def format_diffs(diffs: list[JsonDiff]) -> str:
    """Render diffs as a unified-style block ('' when there are none)."""
    if not diffs:
        return ""
    lines = ["--- Expected", "+++ Actual", ""]
    for diff in diffs:
        lines.append(f"{diff.prefix} {diff.path}:")
        if diff.expected is not None:
            lines.append(f"    Expected: {diff.expected}")
        if diff.actual is not None:
            lines.append(f"    Actual:   {diff.actual}")
        if diff.description is not None:
            lines.append(f"    Note: {diff.description}")
        lines.append("")
    return "\n".join(lines)


def _pretty(text: Optional[str]) -> str:
    if not text or not text.strip():
        return "(empty)"
    try:
        return json.dumps(json.loads(text), indent=2, ensure_ascii=False)
    except ValueError:
        return text


def format_side_by_side(expected: Optional[str], actual: Optional[str]) -> str:
    """Render both documents pretty-printed in two columns."""
    left_lines = _pretty(expected).split("\n")
    right_lines = _pretty(actual).split("\n")
    lines = ["Expected:                          Actual:", "-" * 70]
    for i in range(max(len(left_lines), len(right_lines))):
        left = left_lines[i].rstrip() if i < len(left_lines) else ""
        right = right_lines[i].rstrip() if i < len(right_lines) else ""
        if len(left) > COLUMN_WIDTH - 3:
            left = left[: COLUMN_WIDTH - 3] + "..."
        lines.append(f"{left.ljust(COLUMN_WIDTH)} | {right}")
    return "\n".join(lines)
