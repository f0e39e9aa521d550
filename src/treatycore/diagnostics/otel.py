"""
OTel span event emission for validation, verification and comparison.

Every emitter logs the outcome and then adds a span event to the current
span through ``add_span_event()``.  Span events are skipped when
``TreatyConfig.emit_telemetry`` is False; logging always happens.

Usage::

    from treatycore.diagnostics.otel import (
        emit_contract_diff,
        emit_validation_result,
        emit_verification_result,
    )

    emit_validation_result(result)
    emit_contract_diff(diff)
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING

from treatycore._otel_helpers import add_span_event
from treatycore.config import get_config

if TYPE_CHECKING:
    from treatycore.comparison.changes import Change, ContractDiff
    from treatycore.validation.models import ValidationResult

logger = logging.getLogger(__name__)


def _emit(name: str, attrs: dict[str, str | int | float | bool]) -> None:
    if get_config().emit_telemetry:
        add_span_event(name, attrs)


def _result_attributes(result: ValidationResult) -> dict[str, str | int | float | bool]:
    kinds = Counter(v.kind.value for v in result.violations)
    attrs: dict[str, str | int | float | bool] = {
        "treaty.endpoint": result.endpoint,
        "treaty.direction": result.direction.value if result.direction else "",
        "treaty.valid": result.is_valid,
        "treaty.violation_count": len(result.violations),
        "treaty.violation_kinds": ",".join(sorted(kinds)),
    }
    if result.violations:
        first = result.violations[0]
        attrs["treaty.first_violation.kind"] = first.kind.value
        attrs["treaty.first_violation.path"] = first.path
    return attrs


def emit_validation_result(result: ValidationResult) -> None:
    """Emit a span event for a body validation result.

    Event name: ``treaty.validation.result``
    """
    if result.is_valid:
        logger.debug("Validation passed: %s", result.endpoint or "<body>")
    else:
        logger.warning(
            "Validation failed: %s violations=%d",
            result.endpoint or "<body>",
            len(result.violations),
        )
    _emit("treaty.validation.result", _result_attributes(result))


def emit_verification_result(result: ValidationResult) -> None:
    """Emit a span event for a request/response verification result.

    Event name: ``treaty.verification.result``
    """
    direction = result.direction.value if result.direction else ""
    if result.is_valid:
        logger.debug("Verification passed: %s %s", result.endpoint, direction)
    else:
        logger.warning(
            "Verification failed: %s %s violations=%d",
            result.endpoint,
            direction,
            len(result.violations),
        )
    _emit("treaty.verification.result", _result_attributes(result))


def emit_breaking_change(diff: ContractDiff, change: Change) -> None:
    """Emit a span event for a single breaking change.

    Event name: ``treaty.comparison.breaking``
    """
    attrs: dict[str, str | int | float | bool] = {
        "treaty.old_contract": diff.old_name,
        "treaty.new_contract": diff.new_name,
        "treaty.change.kind": change.kind.value,
        "treaty.change.location": change.location.value,
        "treaty.change.endpoint": change.endpoint,
        "treaty.change.field": change.field or "",
        "treaty.change.description": change.description,
    }
    logger.warning(
        "Breaking change: %s -> %s kind=%s %s",
        diff.old_name,
        diff.new_name,
        change.kind.value,
        change.description,
    )
    _emit("treaty.comparison.breaking", attrs)


def emit_contract_diff(diff: ContractDiff) -> None:
    """Emit a summary span event plus one event per breaking change.

    Event names: ``treaty.comparison.result``, ``treaty.comparison.breaking``
    """
    breaking = diff.breaking_changes
    attrs: dict[str, str | int | float | bool] = {
        "treaty.old_contract": diff.old_name,
        "treaty.new_contract": diff.new_name,
        "treaty.compatible": diff.is_compatible,
        "treaty.change_count": len(diff.changes),
        "treaty.breaking_count": len(breaking),
        "treaty.non_breaking_count": len(diff.changes) - len(breaking),
    }
    if diff.is_compatible:
        logger.debug(
            "Contract comparison: %s -> %s compatible changes=%d",
            diff.old_name,
            diff.new_name,
            len(diff.changes),
        )
    else:
        logger.warning(
            "Contract comparison FAILED: %s -> %s breaking=%d",
            diff.old_name,
            diff.new_name,
            len(breaking),
        )
    _emit("treaty.comparison.result", attrs)
    for change in breaking:
        emit_breaking_change(diff, change)
