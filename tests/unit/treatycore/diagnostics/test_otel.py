"""Tests for OTel span event emission helpers."""

from __future__ import annotations

import logging

from treatycore.comparison.changes import Change, ContractDiff
from treatycore.config import get_config
from treatycore.diagnostics.otel import (
    emit_breaking_change,
    emit_contract_diff,
    emit_validation_result,
    emit_verification_result,
)
from treatycore.types import (
    ChangeKind,
    ChangeLocation,
    ChangeSeverity,
    ValidationDirection,
    ViolationKind,
)
from treatycore.validation.models import ValidationResult, Violation


def _make_result(*kinds: ViolationKind) -> ValidationResult:
    return ValidationResult(
        endpoint="GET /users/{id}",
        direction=ValidationDirection.RESPONSE,
        violations=[
            Violation(kind=k, path=f"$.f{i}", message="bad") for i, k in enumerate(kinds)
        ],
    )


def _make_diff() -> ContractDiff:
    return ContractDiff(
        old_name="users-api v1.0.0",
        new_name="users-api v2.0.0",
        changes=[
            Change(
                kind=ChangeKind.FIELD_REMOVED,
                severity=ChangeSeverity.BREAKING,
                description="Response field '$.x' removed from GET /a (status 200)",
                location=ChangeLocation.RESPONSE_BODY,
                method="GET",
                path="/a",
                field="$.x",
            ),
            Change(
                kind=ChangeKind.ENDPOINT_ADDED,
                severity=ChangeSeverity.NON_BREAKING,
                description="Endpoint added: GET /b",
                method="GET",
                path="/b",
            ),
        ],
    )


# ---------------------------------------------------------------------------
# emit_validation_result / emit_verification_result
# ---------------------------------------------------------------------------


class TestEmitValidationResult:
    def test_valid_result(self, mock_otel):
        emit_validation_result(_make_result())
        call_args = mock_otel.add_event.call_args
        assert call_args.kwargs["name"] == "treaty.validation.result"
        attrs = call_args.kwargs["attributes"]
        assert attrs["treaty.endpoint"] == "GET /users/{id}"
        assert attrs["treaty.direction"] == "response"
        assert attrs["treaty.valid"] is True
        assert attrs["treaty.violation_count"] == 0
        assert "treaty.first_violation.kind" not in attrs

    def test_invalid_result(self, mock_otel):
        emit_validation_result(_make_result(ViolationKind.OUT_OF_RANGE, ViolationKind.INVALID_TYPE))
        attrs = mock_otel.add_event.call_args.kwargs["attributes"]
        assert attrs["treaty.valid"] is False
        assert attrs["treaty.violation_count"] == 2
        assert attrs["treaty.violation_kinds"] == "InvalidType,OutOfRange"
        assert attrs["treaty.first_violation.kind"] == "OutOfRange"
        assert attrs["treaty.first_violation.path"] == "$.f0"

    def test_failure_is_logged(self, mock_otel, caplog):
        with caplog.at_level(logging.WARNING, logger="treatycore.diagnostics.otel"):
            emit_validation_result(_make_result(ViolationKind.MISSING_REQUIRED))
        assert "Validation failed: GET /users/{id} violations=1" in caplog.text

    def test_no_direction(self, mock_otel):
        emit_validation_result(ValidationResult())
        attrs = mock_otel.add_event.call_args.kwargs["attributes"]
        assert attrs["treaty.direction"] == ""


class TestEmitVerificationResult:
    def test_emits_correct_event(self, mock_otel):
        emit_verification_result(_make_result(ViolationKind.MISSING_HEADER))
        call_args = mock_otel.add_event.call_args
        assert call_args.kwargs["name"] == "treaty.verification.result"
        assert call_args.kwargs["attributes"]["treaty.first_violation.kind"] == "MissingHeader"

    def test_telemetry_disabled(self, mock_otel, caplog):
        get_config(emit_telemetry=False)
        with caplog.at_level(logging.WARNING, logger="treatycore.diagnostics.otel"):
            emit_verification_result(_make_result(ViolationKind.MISSING_HEADER))
        mock_otel.add_event.assert_not_called()
        assert "Verification failed" in caplog.text

    def test_not_recording_span(self, mock_otel):
        mock_otel.is_recording.return_value = False
        emit_verification_result(_make_result())
        mock_otel.add_event.assert_not_called()


# ---------------------------------------------------------------------------
# emit_contract_diff / emit_breaking_change
# ---------------------------------------------------------------------------


class TestEmitContractDiff:
    def test_summary_and_breaking_events(self, mock_otel):
        emit_contract_diff(_make_diff())
        names = [c.kwargs["name"] for c in mock_otel.add_event.call_args_list]
        assert names == ["treaty.comparison.result", "treaty.comparison.breaking"]
        attrs = mock_otel.add_event.call_args_list[0].kwargs["attributes"]
        assert attrs["treaty.old_contract"] == "users-api v1.0.0"
        assert attrs["treaty.new_contract"] == "users-api v2.0.0"
        assert attrs["treaty.compatible"] is False
        assert attrs["treaty.change_count"] == 2
        assert attrs["treaty.breaking_count"] == 1
        assert attrs["treaty.non_breaking_count"] == 1

    def test_compatible_diff(self, mock_otel):
        emit_contract_diff(ContractDiff(old_name="a v1", new_name="a v2"))
        mock_otel.add_event.assert_called_once()
        assert mock_otel.add_event.call_args.kwargs["attributes"]["treaty.compatible"] is True

    def test_breaking_change_attributes(self, mock_otel):
        diff = _make_diff()
        emit_breaking_change(diff, diff.changes[0])
        attrs = mock_otel.add_event.call_args.kwargs["attributes"]
        assert attrs["treaty.change.kind"] == "FieldRemoved"
        assert attrs["treaty.change.location"] == "response_body"
        assert attrs["treaty.change.endpoint"] == "GET /a"
        assert attrs["treaty.change.field"] == "$.x"

    def test_missing_field_is_empty_string(self, mock_otel):
        diff = _make_diff()
        emit_breaking_change(diff, diff.changes[1])
        assert mock_otel.add_event.call_args.kwargs["attributes"]["treaty.change.field"] == ""
