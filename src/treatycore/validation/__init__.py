"""
Structural validation and sample generation.

Public API::

    from treatycore.validation import (
        # Models
        Violation,
        ValidationResult,
        PartialValidationConfig,
        ContractViolationError,
        # Validator
        StructuralValidator,
        validate,
        validate_json,
        check,
        # Samples
        SampleGenerator,
        SampleGenerationError,
        generate_sample,
        generate_sample_json,
    )
"""

from treatycore.validation.models import (
    ContractViolationError,
    PartialValidationConfig,
    ValidationResult,
    Violation,
)
from treatycore.validation.sample import (
    SampleGenerationError,
    SampleGenerator,
    generate_sample,
    generate_sample_json,
)
from treatycore.validation.validator import (
    StructuralValidator,
    check,
    validate,
    validate_json,
)

__all__ = [
    # Models
    "Violation",
    "ValidationResult",
    "PartialValidationConfig",
    "ContractViolationError",
    # Validator
    "StructuralValidator",
    "validate",
    "validate_json",
    "check",
    # Samples
    "SampleGenerator",
    "SampleGenerationError",
    "generate_sample",
    "generate_sample_json",
]
