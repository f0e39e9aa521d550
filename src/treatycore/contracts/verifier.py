"""
Contract verification for captured HTTP exchanges.

``ContractVerifier`` checks one request or response against an
``EndpointContract``: status code, headers, content type and body.  The
body check delegates to ``StructuralValidator``.  Verification never
raises for a non-conforming exchange; it returns a ``ValidationResult``
the caller can inspect or turn into an exception with
``raise_if_invalid()``.

A body of ``None`` means "no body was sent".  ``str``/``bytes`` bodies are
raw payload text and are parsed as JSON; anything else is treated as an
already-decoded value.

Usage::

    from treatycore.contracts.verifier import ContractVerifier

    verifier = ContractVerifier(api_contract)
    result = verifier.verify_response_for(
        "GET", "/users/42", 200,
        body={"id": 42, "email": "a@b.co"},
        headers={"Content-Type": "application/json"},
    )
    result.raise_if_invalid()
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Optional, Union

from treatycore.contracts.endpoint import (
    ApiContract,
    EndpointContract,
    HeaderExpectation,
)
from treatycore.diagnostics.otel import emit_verification_result
from treatycore.types import ValidationDirection, ViolationKind
from treatycore.validation import paths
from treatycore.validation.models import (
    PartialValidationConfig,
    ValidationResult,
    Violation,
)
from treatycore.validation.validator import StructuralValidator, default_validator

QueryValue = Union[str, Sequence[str]]


def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def _lower_keys(headers: Optional[Mapping[str, str]]) -> dict[str, str]:
    return {k.lower(): v for k, v in (headers or {}).items()}


class ContractVerifier:
    """Verifies HTTP exchanges against endpoint contracts.

    Args:
        contract: API contract used by the ``*_for`` lookups.
        validator: Body validator; defaults to one configured from ``TreatyConfig``.
    """

    def __init__(
        self,
        contract: Optional[ApiContract] = None,
        validator: Optional[StructuralValidator] = None,
    ) -> None:
        self._contract = contract
        self._validator = validator or default_validator()

    # -- responses ---------------------------------------------------------

    def verify_response(
        self,
        endpoint: EndpointContract,
        status_code: int,
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        content_type: Optional[str] = None,
    ) -> ValidationResult:
        """Verify a response against *endpoint*.

        Checks run in order: status code, headers, content type, body.  An
        undeclared status code stops verification.
        """
        label = str(endpoint)
        violations: list[Violation] = []
        lowered = _lower_keys(headers)
        if content_type is None:
            content_type = lowered.get("content-type")

        expectation = endpoint.response_for(status_code)
        if expectation is None:
            if endpoint.responses:
                violations.append(Violation(
                    endpoint=label,
                    path=paths.ROOT,
                    message=f"Unexpected status code {status_code}",
                    kind=ViolationKind.UNEXPECTED_STATUS_CODE,
                    expected=", ".join(str(c) for c in endpoint.status_codes),
                    actual=str(status_code),
                ))
            return self._finish(label, ValidationDirection.RESPONSE, violations)

        self._check_headers(label, expectation.headers, lowered, violations)
        self._check_content_type(label, expectation.content_type, content_type, body, violations)

        if expectation.body is not None and body is not None:
            violations.extend(self._validate_body(
                label, body, expectation.body, ValidationDirection.RESPONSE,
                expectation.partial_validation,
            ))
        return self._finish(label, ValidationDirection.RESPONSE, violations)

    def verify_response_for(
        self,
        method: str,
        path: str,
        status_code: int,
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        content_type: Optional[str] = None,
    ) -> ValidationResult:
        endpoint = self._lookup(method, path)
        if endpoint is None:
            return self._unknown_endpoint(method, path, ValidationDirection.RESPONSE)
        return self.verify_response(endpoint, status_code, body, headers, content_type)

    # -- requests ----------------------------------------------------------

    def verify_request(
        self,
        endpoint: EndpointContract,
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        query: Optional[Mapping[str, QueryValue]] = None,
        content_type: Optional[str] = None,
    ) -> ValidationResult:
        """Verify a request against *endpoint*.

        Checks run in order: headers, query parameters, content type, body.
        """
        label = str(endpoint)
        violations: list[Violation] = []
        lowered = _lower_keys(headers)
        if content_type is None:
            content_type = lowered.get("content-type")

        self._check_headers(label, endpoint.headers, lowered, violations)
        self._check_query(label, endpoint, query or {}, violations)

        expectation = endpoint.request
        if expectation is not None:
            self._check_content_type(label, expectation.content_type, content_type, body, violations)
            if body is None:
                if expectation.required and expectation.body is not None:
                    violations.append(Violation(
                        endpoint=label,
                        path=paths.ROOT,
                        message="Request body is required but was not provided",
                        kind=ViolationKind.MISSING_REQUIRED,
                        expected="request body",
                        actual="missing",
                    ))
            elif expectation.body is not None:
                violations.extend(self._validate_body(
                    label, body, expectation.body, ValidationDirection.REQUEST, None
                ))
        return self._finish(label, ValidationDirection.REQUEST, violations)

    def verify_request_for(
        self,
        method: str,
        path: str,
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        query: Optional[Mapping[str, QueryValue]] = None,
        content_type: Optional[str] = None,
    ) -> ValidationResult:
        endpoint = self._lookup(method, path)
        if endpoint is None:
            return self._unknown_endpoint(method, path, ValidationDirection.REQUEST)
        return self.verify_request(endpoint, body, headers, query, content_type)

    # -- checks ------------------------------------------------------------

    def _validate_body(
        self,
        label: str,
        body: Any,
        schema: Any,
        direction: ValidationDirection,
        config: Optional[PartialValidationConfig],
    ) -> list[Violation]:
        if isinstance(body, (str, bytes, bytearray)):
            # raw payload; undecodable bytes surface as InvalidFormat
            return self._validator.validate_json(body, schema, direction, config=config, endpoint=label)
        return self._validator.validate(body, schema, direction, config=config, endpoint=label)

    @staticmethod
    def _check_headers(
        label: str,
        expected: list[HeaderExpectation],
        actual: dict[str, str],
        violations: list[Violation],
    ) -> None:
        for header in expected:
            path = f"header:{header.name}"
            value = actual.get(header.name.lower())
            if value is None:
                if header.required:
                    violations.append(Violation(
                        endpoint=label,
                        path=path,
                        message=f"Missing required header '{header.name}'",
                        kind=ViolationKind.MISSING_HEADER,
                        expected=header.expected_text,
                        actual="missing",
                    ))
                continue
            if not header.accepts(value):
                violations.append(Violation(
                    endpoint=label,
                    path=path,
                    message=f"Header '{header.name}' has incorrect value",
                    kind=ViolationKind.INVALID_HEADER_VALUE,
                    expected=header.expected_text,
                    actual=value,
                ))

    @staticmethod
    def _check_content_type(
        label: str,
        expected: Optional[str],
        actual: Optional[str],
        body: Any,
        violations: list[Violation],
    ) -> None:
        if expected is None or actual is None or body is None:
            return
        if _media_type(actual) != _media_type(expected):
            violations.append(Violation(
                endpoint=label,
                path=paths.ROOT,
                message="Content type mismatch",
                kind=ViolationKind.INVALID_CONTENT_TYPE,
                expected=expected,
                actual=actual,
            ))

    @staticmethod
    def _check_query(
        label: str,
        endpoint: EndpointContract,
        query: Mapping[str, QueryValue],
        violations: list[Violation],
    ) -> None:
        for param in endpoint.query_parameters:
            path = f"query:{param.name}"
            raw = query.get(param.name)
            values = [raw] if isinstance(raw, str) else list(raw or [])
            values = [v for v in values if v != ""]
            if not values:
                if param.required:
                    violations.append(Violation(
                        endpoint=label,
                        path=path,
                        message=f"Missing required query parameter '{param.name}'",
                        kind=ViolationKind.MISSING_QUERY_PARAMETER,
                        expected=param.type.value,
                        actual="missing",
                    ))
                continue
            for value in values:
                problem = param.problem_with(value)
                if problem is not None:
                    violations.append(Violation(
                        endpoint=label,
                        path=path,
                        message=f"Query parameter '{param.name}' has invalid value ({problem})",
                        kind=ViolationKind.INVALID_QUERY_PARAMETER_VALUE,
                        expected=param.type.value,
                        actual=value,
                    ))
                    break

    # -- helpers -----------------------------------------------------------

    def _lookup(self, method: str, path: str) -> Optional[EndpointContract]:
        if self._contract is None:
            raise ValueError("this verifier was created without an ApiContract")
        return self._contract.find_endpoint(method, path)

    def _unknown_endpoint(
        self, method: str, path: str, direction: ValidationDirection
    ) -> ValidationResult:
        label = f"{method.upper()} {path}"
        return self._finish(label, direction, [Violation(
            endpoint=label,
            path=paths.ROOT,
            message=f"No contract definition found for endpoint {label}",
            kind=ViolationKind.MISSING_REQUIRED,
        )])

    @staticmethod
    def _finish(
        label: str, direction: ValidationDirection, violations: list[Violation]
    ) -> ValidationResult:
        result = ValidationResult(endpoint=label, direction=direction, violations=violations)
        emit_verification_result(result)
        return result
