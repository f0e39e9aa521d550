"""
Endpoint contract models.

An ``ApiContract`` is a named, versioned list of ``EndpointContract``
entries.  Each endpoint pairs an HTTP method and path template with the
request it accepts and the responses it may return.  Bodies are described
either by a ``SchemaNode`` or by a matcher tree.

Usage::

    from treatycore.contracts.endpoint import EndpointContract, ResponseExpectation

    endpoint = EndpointContract(
        method="GET",
        path_template="/users/{id}",
        responses=[ResponseExpectation(status_code=200, body=user_schema)],
    )
    endpoint.matches("get", "/users/42")           # True
    endpoint.extract_path_parameters("/users/42")  # {'id': '42'}
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from treatycore.matching.matchers import Matcher
from treatycore.schema.nodes import SchemaNode
from treatycore.types import QueryParameterType
from treatycore.validation.models import PartialValidationConfig

Body = Union[SchemaNode, Matcher]

_PARAM_RE = re.compile(r"\{([^}/]+)\}")


def normalize_path(path_template: str) -> str:
    """Replace every ``{name}`` segment with ``{param}``."""
    return _PARAM_RE.sub("{param}", path_template)


def endpoint_key(method: str, path_template: str) -> str:
    return f"{method.upper()} {normalize_path(path_template)}"


# ---------------------------------------------------------------------------
# Header / query expectations
# ---------------------------------------------------------------------------


class HeaderExpectation(BaseModel):
    """Expected HTTP header.  Names compare case-insensitively."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., min_length=1)
    required: bool = True
    value: Optional[str] = None
    pattern: Optional[str] = None

    @model_validator(mode="after")
    def _check_value_rule(self) -> HeaderExpectation:
        if self.value is not None and self.pattern is not None:
            raise ValueError("a header declares either an exact value or a pattern")
        if self.pattern is not None:
            re.compile(self.pattern)
        return self

    def accepts(self, actual: str) -> bool:
        if self.value is not None:
            return actual.lower() == self.value.lower()
        if self.pattern is not None:
            return re.search(self.pattern, actual) is not None
        return True

    @property
    def expected_text(self) -> str:
        if self.value is not None:
            return self.value
        if self.pattern is not None:
            return f"matching '{self.pattern}'"
        return "any value"


class QueryParameterExpectation(BaseModel):
    """Expected query-string parameter."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., min_length=1)
    required: bool = False
    type: QueryParameterType = QueryParameterType.STRING
    value: Optional[str] = None
    allowed_values: Optional[list[str]] = None

    def problem_with(self, actual: str) -> Optional[str]:
        """Describe why *actual* is unacceptable, or None when it is fine."""
        if self.value is not None and actual != self.value:
            return f"expected '{self.value}'"
        if self.allowed_values is not None and actual not in self.allowed_values:
            return "expected one of: " + ", ".join(self.allowed_values)
        if self.type == QueryParameterType.INTEGER:
            try:
                int(actual)
            except ValueError:
                return "expected an integer"
        elif self.type == QueryParameterType.NUMBER:
            try:
                float(actual)
            except ValueError:
                return "expected a number"
        elif self.type == QueryParameterType.BOOLEAN and actual.lower() not in ("true", "false"):
            return "expected true or false"
        return None


# ---------------------------------------------------------------------------
# Request / response expectations
# ---------------------------------------------------------------------------


class RequestExpectation(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    content_type: str = "application/json"
    body: Optional[Body] = None
    required: bool = True


class ResponseExpectation(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    status_code: int = Field(..., ge=100, le=599)
    content_type: Optional[str] = "application/json"
    body: Optional[Body] = None
    headers: list[HeaderExpectation] = Field(default_factory=list)
    partial_validation: Optional[PartialValidationConfig] = None


# ---------------------------------------------------------------------------
# Endpoint / API
# ---------------------------------------------------------------------------


class EndpointContract(BaseModel):
    """Contract for a single HTTP method + path template."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    method: str
    path_template: str
    request: Optional[RequestExpectation] = None
    responses: list[ResponseExpectation] = Field(default_factory=list)
    headers: list[HeaderExpectation] = Field(default_factory=list)
    query_parameters: list[QueryParameterExpectation] = Field(default_factory=list)
    description: Optional[str] = None

    @field_validator("method")
    @classmethod
    def _upper_method(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("method must not be empty")
        return v

    @field_validator("path_template")
    @classmethod
    def _check_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError(f"path template must start with '/': {v!r}")
        return v

    @model_validator(mode="after")
    def _check_unique_status(self) -> EndpointContract:
        codes = [r.status_code for r in self.responses]
        if len(codes) != len(set(codes)):
            raise ValueError(f"duplicate status codes for {self.method} {self.path_template}")
        return self

    @property
    def key(self) -> str:
        return endpoint_key(self.method, self.path_template)

    @property
    def status_codes(self) -> list[int]:
        return sorted(r.status_code for r in self.responses)

    def matches(self, method: str, path: str) -> bool:
        if method.upper() != self.method:
            return False
        return _path_regex(self.path_template).match(_strip_query(path)) is not None

    def extract_path_parameters(self, path: str) -> dict[str, str]:
        """Return the path parameter values captured from *path*."""
        match = _path_regex(self.path_template).match(_strip_query(path))
        if match is None:
            return {}
        names = _PARAM_RE.findall(self.path_template)
        return {name: match.group(_group_name(name)) for name in names}

    def response_for(self, status_code: int) -> Optional[ResponseExpectation]:
        for response in self.responses:
            if response.status_code == status_code:
                return response
        return None

    def __str__(self) -> str:
        return f"{self.method} {self.path_template}"


class ApiContract(BaseModel):
    """A named, versioned collection of endpoint contracts."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    version: str = "1.0.0"
    description: Optional[str] = None
    endpoints: list[EndpointContract] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_endpoints(self) -> ApiContract:
        seen: set[str] = set()
        for endpoint in self.endpoints:
            if endpoint.key in seen:
                raise ValueError(f"duplicate endpoint: {endpoint.key}")
            seen.add(endpoint.key)
        return self

    def find_endpoint(self, method: str, path: str) -> Optional[EndpointContract]:
        for endpoint in self.endpoints:
            if endpoint.matches(method, path):
                return endpoint
        return None

    def __str__(self) -> str:
        return f"{self.name} v{self.version}"


def _group_name(name: str) -> str:
    # regex group names must be identifiers
    return "p_" + re.sub(r"\W", "_", name)


def _strip_query(path: str) -> str:
    return path.split("?", 1)[0]


@lru_cache(maxsize=512)
def _path_regex(path_template: str) -> re.Pattern[str]:
    """Anchored, case-insensitive regex for a path template."""
    pattern = ""
    cursor = 0
    for match in _PARAM_RE.finditer(path_template):
        pattern += re.escape(path_template[cursor:match.start()])
        pattern += f"(?P<{_group_name(match.group(1))}>[^/]+)"
        cursor = match.end()
    pattern += re.escape(path_template[cursor:])
    pattern = pattern.rstrip("/")
    return re.compile(f"^{pattern}/?$", re.IGNORECASE)
