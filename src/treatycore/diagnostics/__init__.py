"""
Human-readable reports, JSON diffs and OTel span events.

Public API::

    from treatycore.diagnostics import (
        # Formatting
        DiagnosticFormatter,
        suggestion_for,
        format_path,
        # JSON diff
        JsonDiff,
        compare_json,
        compare_values,
        format_diffs,
        format_side_by_side,
        # OTel helpers
        emit_validation_result,
        emit_verification_result,
        emit_contract_diff,
        emit_breaking_change,
    )
"""

from treatycore.diagnostics.formatter import (
    DiagnosticFormatter,
    format_path,
    suggestion_for,
)
from treatycore.diagnostics.json_diff import (
    JsonDiff,
    compare_json,
    compare_values,
    format_diffs,
    format_side_by_side,
)
from treatycore.diagnostics.otel import (
    emit_breaking_change,
    emit_contract_diff,
    emit_validation_result,
    emit_verification_result,
)

__all__ = [
    # Formatting
    "DiagnosticFormatter",
    "suggestion_for",
    "format_path",
    # JSON diff
    "JsonDiff",
    "compare_json",
    "compare_values",
    "format_diffs",
    "format_side_by_side",
    # OTel helpers
    "emit_validation_result",
    "emit_verification_result",
    "emit_contract_diff",
    "emit_breaking_change",
]
