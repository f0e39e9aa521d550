"""
Validation result models.

``Violation`` is the diagnostic record every validator produces.
``ValidationResult`` groups the violations of one validation call and lets
the caller choose between reporting (``summary()`` / ``report()``) and
failing (``raise_if_invalid()``).

Usage::

    from treatycore.validation.models import ValidationResult

    result = ValidationResult(endpoint="GET /users/{id}", violations=violations)
    if not result.is_valid:
        print(result.report())
    result.raise_if_invalid()
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from treatycore.types import ValidationDirection, ViolationKind


class Violation(BaseModel):
    """A single validation failure at a JSON path."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    endpoint: str = ""
    path: str = Field(default="$", description="Dotted/bracketed JSON path, root = $")
    message: str
    kind: ViolationKind
    expected: Optional[str] = None
    actual: Optional[str] = None

    def __str__(self) -> str:
        text = f"  - {self.message} at path '{self.path}'"
        if self.expected is not None or self.actual is not None:
            text += f" (expected: {self.expected}, got: {self.actual})"
        return text


class PartialValidationConfig(BaseModel):
    """Per-call validation policy.

    An empty ``properties_to_validate`` checks every top-level property.
    ``ignore_extra_fields`` wins over ``strict_mode``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    properties_to_validate: frozenset[str] = Field(default_factory=frozenset)
    ignore_extra_fields: bool = False
    strict_mode: bool = False

    def allows(self, name: str) -> bool:
        """Whether a top-level property is in scope (case-insensitive)."""
        if not self.properties_to_validate:
            return True
        lowered = name.lower()
        return any(p.lower() == lowered for p in self.properties_to_validate)

    def flags_undeclared(self, additional_properties_allowed: bool) -> bool:
        """Whether an undeclared field is a violation under this policy."""
        if self.ignore_extra_fields:
            return False
        return self.strict_mode or not additional_properties_allowed


class ContractViolationError(AssertionError):
    """Raised by ``ValidationResult.raise_if_invalid()``."""

    def __init__(self, endpoint: str, violations: list[Violation]) -> None:
        from treatycore.diagnostics.formatter import DiagnosticFormatter

        self.endpoint = endpoint
        self.violations = violations
        formatter = DiagnosticFormatter()
        super().__init__(
            formatter.format_summary_line(endpoint, violations)
            + "\n\n"
            + formatter.format_violations(endpoint, violations)
        )


class ValidationResult(BaseModel):
    """Violations collected by one validation or verification call."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    endpoint: str = ""
    direction: Optional[ValidationDirection] = None
    violations: list[Violation] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.violations

    def violations_of(self, kind: ViolationKind) -> list[Violation]:
        return [v for v in self.violations if v.kind == kind]

    def summary(self) -> str:
        """One-line pass/fail summary."""
        from treatycore.diagnostics.formatter import DiagnosticFormatter

        return DiagnosticFormatter().format_summary_line(self.endpoint, self.violations)

    def report(self) -> str:
        """Full human-readable report ('' when valid)."""
        from treatycore.diagnostics.formatter import DiagnosticFormatter

        if self.is_valid:
            return ""
        return DiagnosticFormatter().format_violations(self.endpoint, self.violations)

    def raise_if_invalid(self) -> None:
        """Raise ``ContractViolationError`` when any violation was found."""
        if self.violations:
            raise ContractViolationError(self.endpoint, list(self.violations))
