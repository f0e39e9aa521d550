"""
Human-readable rendering of validation violations.

Output shape for a single violation::

    ✗ MissingRequired
       Path: `$.name`
       Issue: Missing required field 'name'
       Expected: string
       Actual:   missing

       Fix: Add the missing field to your payload or mark it as optional in the contract.

Icons and suggestions can be switched off, either per formatter or through
``TreatyConfig.use_icons`` / ``TreatyConfig.include_suggestions``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from treatycore.types import ViolationKind
from treatycore.validation.models import Violation

_K = ViolationKind

ICONS: dict[ViolationKind, str] = {
    _K.MISSING_REQUIRED: "✗",
    _K.UNEXPECTED_STATUS_CODE: "✗",
    _K.MISSING_HEADER: "✗",
    _K.UNEXPECTED_NULL: "✗",
    _K.MISSING_QUERY_PARAMETER: "✗",
    _K.INVALID_TYPE: "⚠",
    _K.INVALID_FORMAT: "⚠",
    _K.OUT_OF_RANGE: "⚠",
    _K.INVALID_ENUM_VALUE: "⚠",
    _K.PATTERN_MISMATCH: "⚠",
    _K.INVALID_HEADER_VALUE: "⚠",
    _K.INVALID_CONTENT_TYPE: "⚠",
    _K.INVALID_QUERY_PARAMETER_VALUE: "⚠",
    _K.DISCRIMINATOR_MISMATCH: "⚠",
    _K.UNEXPECTED_FIELD: "?",
}
DEFAULT_ICON = "•"

SEPARATOR = "─" * 60


def suggestion_for(violation: Violation) -> Optional[str]:
    """Return a one-sentence fix hint for *violation*, if one applies."""
    k = violation.kind
    expected, actual = violation.expected, violation.actual
    if k == _K.MISSING_REQUIRED:
        return "Add the missing field to your payload or mark it as optional in the contract."
    if k == _K.INVALID_TYPE:
        return f"Ensure the value is serialized as {expected} instead of {actual}."
    if k == _K.INVALID_FORMAT:
        return f"The value should match the format '{expected}'. Check your serialization settings."
    if k == _K.OUT_OF_RANGE:
        return "The value exceeds the allowed range. Ensure it's within the defined limits."
    if k == _K.INVALID_ENUM_VALUE:
        return f"Use one of the allowed values: {expected}."
    if k == _K.PATTERN_MISMATCH:
        return f"The value doesn't match the required pattern: {expected}."
    if k == _K.UNEXPECTED_STATUS_CODE:
        return f"Your API returned {actual} but the contract expects {expected}."
    if k == _K.MISSING_HEADER:
        return "Add the header in your middleware or handler."
    if k == _K.INVALID_HEADER_VALUE:
        return f"The header value should be {expected}."
    if k == _K.UNEXPECTED_NULL:
        return "Return a non-null value, or update the contract to allow null."
    if k == _K.UNEXPECTED_FIELD:
        return "Remove this field from the payload, or enable ignore_extra_fields for this check."
    if k == _K.INVALID_CONTENT_TYPE:
        return f"Set Content-Type to '{expected}'."
    if k == _K.MISSING_QUERY_PARAMETER:
        return "Include the query parameter or mark it as optional in the contract."
    if k == _K.INVALID_QUERY_PARAMETER_VALUE:
        return "Ensure the query parameter value matches the expected type."
    if k == _K.DISCRIMINATOR_MISMATCH:
        return f"Set the discriminator to one of: {expected}."
    return None


def format_path(path: str) -> str:
    if not path:
        return "(root)"
    return f"`{path}`"


class DiagnosticFormatter:
    """Formats violations for test output and logs.

    Args:
        use_icons: Prefix kinds with an icon; defaults to ``TreatyConfig.use_icons``.
        include_suggestions: Append a "Fix:" line; defaults to
            ``TreatyConfig.include_suggestions``.
    """

    def __init__(
        self,
        use_icons: Optional[bool] = None,
        include_suggestions: Optional[bool] = None,
    ) -> None:
        if use_icons is None or include_suggestions is None:
            from treatycore.config import get_config

            config = get_config()
            if use_icons is None:
                use_icons = config.use_icons
            if include_suggestions is None:
                include_suggestions = config.include_suggestions
        self.use_icons = use_icons
        self.include_suggestions = include_suggestions

    def icon_for(self, kind: ViolationKind) -> str:
        return ICONS.get(kind, DEFAULT_ICON)

    def format_violation(self, violation: Violation) -> str:
        heading = violation.kind.value
        if self.use_icons:
            heading = f"{self.icon_for(violation.kind)} {heading}"
        lines = [
            heading,
            f"   Path: {format_path(violation.path)}",
            f"   Issue: {violation.message}",
        ]
        if violation.expected is not None:
            lines.append(f"   Expected: {violation.expected}")
        if violation.actual is not None:
            lines.append(f"   Actual:   {violation.actual}")
        if self.include_suggestions:
            suggestion = suggestion_for(violation)
            if suggestion:
                lines.append("")
                lines.append(f"   Fix: {suggestion}")
        return "\n".join(lines)

    def format_violations(self, endpoint: str, violations: Sequence[Violation]) -> str:
        lines = [
            f"Contract verification failed for {endpoint}",
            "",
            f"Found {len(violations)} violation(s):",
            SEPARATOR,
        ]
        for i, violation in enumerate(violations, start=1):
            if i > 1:
                lines.append("")
            lines.append(f"{i}. {self.format_violation(violation)}")
        return "\n".join(lines)

    def format_summary_line(self, endpoint: str, violations: Sequence[Violation]) -> str:
        if not violations:
            return f"✓ {endpoint} - PASSED"
        first = violations[0]
        extra = f" (+{len(violations) - 1} more)" if len(violations) > 1 else ""
        return f"✗ {endpoint} - {first.kind.value} at {first.path}{extra}"
