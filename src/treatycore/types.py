"""
Shared enumerations for treatycore.

Every enum is ``str``-valued so that models serialize to plain strings in
YAML/JSON contract files and in OTel span attributes.

Usage::

    from treatycore.types import ValidationDirection, ViolationKind

    if violation.kind == ViolationKind.MISSING_REQUIRED:
        ...
"""

from __future__ import annotations

from enum import Enum


# ---------------------------------------------------------------------------
# Schema vocabulary
# ---------------------------------------------------------------------------


class SchemaKind(str, Enum):
    """JSON kind a schema node expects."""

    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    ANY = "any"


class Visibility(str, Enum):
    """Which side of a request/response pair a property may appear on."""

    ALWAYS = "always"
    REQUEST_ONLY = "request_only"  # write-only
    RESPONSE_ONLY = "response_only"  # read-only


class ValidationDirection(str, Enum):
    """Direction of the payload being validated or generated."""

    REQUEST = "request"
    RESPONSE = "response"


class CompositionMode(str, Enum):
    ONE_OF = "oneOf"
    ANY_OF = "anyOf"
    ALL_OF = "allOf"


class QueryParameterType(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"


# ---------------------------------------------------------------------------
# Diagnostics vocabulary
# ---------------------------------------------------------------------------


class ViolationKind(str, Enum):
    """Closed taxonomy of validation violations."""

    MISSING_REQUIRED = "MissingRequired"
    INVALID_TYPE = "InvalidType"
    INVALID_FORMAT = "InvalidFormat"
    OUT_OF_RANGE = "OutOfRange"
    INVALID_ENUM_VALUE = "InvalidEnumValue"
    PATTERN_MISMATCH = "PatternMismatch"
    UNEXPECTED_NULL = "UnexpectedNull"
    UNEXPECTED_FIELD = "UnexpectedField"
    UNEXPECTED_STATUS_CODE = "UnexpectedStatusCode"
    MISSING_HEADER = "MissingHeader"
    INVALID_HEADER_VALUE = "InvalidHeaderValue"
    INVALID_CONTENT_TYPE = "InvalidContentType"
    MISSING_QUERY_PARAMETER = "MissingQueryParameter"
    INVALID_QUERY_PARAMETER_VALUE = "InvalidQueryParameterValue"
    DISCRIMINATOR_MISMATCH = "DiscriminatorMismatch"


class ChangeKind(str, Enum):
    """Kinds of difference the comparator reports between contract versions."""

    ENDPOINT_ADDED = "EndpointAdded"
    ENDPOINT_REMOVED = "EndpointRemoved"
    FIELD_ADDED = "FieldAdded"
    FIELD_REMOVED = "FieldRemoved"
    TYPE_CHANGED = "TypeChanged"
    REQUIRED_ADDED = "RequiredAdded"
    REQUIRED_REMOVED = "RequiredRemoved"
    ENUM_NARROWED = "EnumNarrowed"
    ENUM_WIDENED = "EnumWidened"
    STATUS_CODE_REMOVED = "StatusCodeRemoved"
    STATUS_CODE_ADDED = "StatusCodeAdded"
    FORMAT_CHANGED = "FormatChanged"
    NULLABILITY_CHANGED = "NullabilityChanged"
    HEADER_ADDED = "HeaderAdded"
    HEADER_REMOVED = "HeaderRemoved"
    QUERY_PARAMETER_ADDED = "QueryParameterAdded"
    QUERY_PARAMETER_REMOVED = "QueryParameterRemoved"


class ChangeSeverity(str, Enum):
    BREAKING = "Breaking"
    NON_BREAKING = "NonBreaking"


class ChangeLocation(str, Enum):
    """Where in an endpoint contract a change was found."""

    ENDPOINT = "endpoint"
    REQUEST_BODY = "request_body"
    RESPONSE_BODY = "response_body"
    REQUEST_HEADER = "request_header"
    RESPONSE_HEADER = "response_header"
    QUERY_PARAMETER = "query_parameter"
    STATUS_CODE = "status_code"


class DiffKind(str, Enum):
    """Kinds of difference between an expected and an actual JSON document."""

    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"
    TYPE_MISMATCH = "type_mismatch"
