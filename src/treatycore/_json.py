"""
Small helpers for reasoning about decoded JSON values.

Values are the plain Python objects produced by ``json.loads``: ``dict``,
``list``, ``str``, ``int``, ``float``, ``bool`` and ``None``.
"""

from __future__ import annotations

import json
from typing import Any, Hashable


def kind_of(value: Any) -> str:
    """Return the JSON kind name of a decoded value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "integer" if value.is_integer() else "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def is_number(value: Any) -> bool:
    # bool is an int subclass but never a JSON number
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_integral(value: Any) -> bool:
    """True for JSON numbers with no fractional part (``3`` and ``3.0``)."""
    if not is_number(value):
        return False
    return isinstance(value, int) or value.is_integer()


def canonical(value: Any) -> Hashable:
    """Hashable form used to compare JSON values for equality.

    Numbers compare by magnitude (``1 == 1.0``) while booleans, strings and
    numbers never compare equal to each other.
    """
    if value is None:
        return ("null",)
    if isinstance(value, bool):
        return ("boolean", value)
    if is_number(value):
        return ("number", float(value))
    if isinstance(value, str):
        return ("string", value)
    if isinstance(value, (list, tuple)):
        return ("array", tuple(canonical(v) for v in value))
    if isinstance(value, dict):
        return ("object", tuple(sorted((str(k), canonical(v)) for k, v in value.items())))
    return ("other", repr(value))


def same_value(left: Any, right: Any) -> bool:
    return canonical(left) == canonical(right)


def render(value: Any) -> str:
    """Render a value for a diagnostic message.

    Strings are shown bare, integral floats without the trailing ``.0``
    and everything else as compact JSON.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    try:
        return json.dumps(value, separators=(",", ":"), default=str)
    except (TypeError, ValueError):
        return repr(value)


def render_literal(value: Any) -> str:
    """Like :func:`render` but quotes strings, for lists of allowed values."""
    if isinstance(value, str):
        return json.dumps(value)
    return render(value)
