"""
treatycore - Contract validation and breaking-change detection for JSON APIs.

Validates request/response payloads against schema nodes or matcher trees,
generates self-valid sample payloads, verifies recorded HTTP exchanges
against endpoint contracts, and classifies the differences between two
contract versions as breaking or non-breaking.

Example usage:
    from treatycore import Match, build_matcher_tree, validate

    body = build_matcher_tree({
        "id": Match.guid(),
        "age": Match.integer(min=0, max=150),
    })
    violations = validate({"id": "not-a-guid", "age": 200}, body, "response")

    from treatycore import compare

    diff = compare(v1_contract, v2_contract)
    diff.raise_if_breaking()
"""

from treatycore.comparison import (
    Change,
    ContractBreakingChangeError,
    ContractComparator,
    ContractDiff,
    compare,
    compare_schemas,
)
from treatycore.config import TreatyConfig, configure_logging, get_config, reset_config
from treatycore.contracts import (
    ApiContract,
    ApiContractLoader,
    ContractVerifier,
    EndpointContract,
    HeaderExpectation,
    QueryParameterExpectation,
    RequestExpectation,
    ResponseExpectation,
)
from treatycore.diagnostics import DiagnosticFormatter, compare_json
from treatycore.matching import Match, build_matcher_tree, matcher_to_schema
from treatycore.schema import SchemaCache, SchemaNode, schema_from_model
from treatycore.types import (
    ChangeKind,
    ChangeSeverity,
    SchemaKind,
    ValidationDirection,
    ViolationKind,
    Visibility,
)
from treatycore.validation import (
    ContractViolationError,
    PartialValidationConfig,
    SampleGenerationError,
    StructuralValidator,
    ValidationResult,
    Violation,
    check,
    generate_sample,
    validate,
    validate_json,
)

__version__ = "0.1.0"

__all__ = [
    # Core operations
    "validate",
    "validate_json",
    "check",
    "generate_sample",
    "compare",
    "compare_schemas",
    # Schema and matchers
    "SchemaNode",
    "SchemaCache",
    "schema_from_model",
    "Match",
    "build_matcher_tree",
    "matcher_to_schema",
    # Results
    "Violation",
    "ValidationResult",
    "PartialValidationConfig",
    "ContractViolationError",
    "SampleGenerationError",
    "Change",
    "ContractDiff",
    "ContractBreakingChangeError",
    # Contracts
    "ApiContract",
    "EndpointContract",
    "RequestExpectation",
    "ResponseExpectation",
    "HeaderExpectation",
    "QueryParameterExpectation",
    "ApiContractLoader",
    "ContractVerifier",
    "ContractComparator",
    "StructuralValidator",
    # Diagnostics
    "DiagnosticFormatter",
    "compare_json",
    # Enums
    "SchemaKind",
    "Visibility",
    "ValidationDirection",
    "ViolationKind",
    "ChangeKind",
    "ChangeSeverity",
    # Config
    "TreatyConfig",
    "get_config",
    "reset_config",
    "configure_logging",
    "__version__",
]
