"""
Pytest configuration and fixtures for treatycore tests.
"""

from __future__ import annotations

import os
from typing import Generator
from unittest.mock import MagicMock, patch

import pytest

from treatycore.config import reset_config
from treatycore.contracts.endpoint import (
    ApiContract,
    EndpointContract,
    HeaderExpectation,
    QueryParameterExpectation,
    RequestExpectation,
    ResponseExpectation,
)
from treatycore.schema.nodes import (
    SchemaNode,
    array_schema,
    integer_schema,
    object_schema,
    string_schema,
)


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_treaty_env() -> Generator[None, None, None]:
    """Strip TREATY_* variables and reset the config singleton around each test."""
    original = {k: v for k, v in os.environ.items() if k.startswith("TREATY_")}
    for key in original:
        del os.environ[key]
    reset_config()

    yield

    reset_config()
    for key in [k for k in os.environ if k.startswith("TREATY_")]:
        del os.environ[key]
    os.environ.update(original)


# ============================================================================
# Schema Fixtures
# ============================================================================


@pytest.fixture
def user_schema() -> SchemaNode:
    """User resource: server-assigned id, write-only password."""
    return object_schema(
        {
            "id": integer_schema(minimum=1),
            "name": string_schema(min_length=1),
            "email": string_schema(format="email"),
            "password": string_schema(min_length=8),
            "tags": array_schema(string_schema()),
        },
        required=["id", "name", "email", "password"],
        read_only=["id"],
        write_only=["password"],
    )


@pytest.fixture
def users_contract(user_schema: SchemaNode) -> ApiContract:
    """Small two-endpoint contract used by verifier and comparator tests."""
    return ApiContract(
        name="users-api",
        version="1.0.0",
        endpoints=[
            EndpointContract(
                method="GET",
                path_template="/users/{id}",
                responses=[
                    ResponseExpectation(
                        status_code=200,
                        body=user_schema,
                        headers=[HeaderExpectation(name="X-Request-Id", pattern=r"^[a-f0-9-]+$")],
                    ),
                    ResponseExpectation(status_code=404, body=None),
                ],
            ),
            EndpointContract(
                method="POST",
                path_template="/users",
                request=RequestExpectation(body=user_schema),
                headers=[HeaderExpectation(name="Authorization", pattern=r"^Bearer ")],
                query_parameters=[
                    QueryParameterExpectation(name="dry_run", type="boolean"),
                ],
                responses=[ResponseExpectation(status_code=201, body=user_schema)],
            ),
        ],
    )


# ============================================================================
# OTel Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_span() -> MagicMock:
    """Create a mock OTel span that is recording."""
    span = MagicMock()
    span.is_recording.return_value = True
    return span


@pytest.fixture
def mock_otel(mock_span: MagicMock) -> Generator[MagicMock, None, None]:
    """Patch OTel to return our mock span."""
    with patch("treatycore._otel_helpers.otel_trace") as mock_trace:
        mock_trace.get_current_span.return_value = mock_span
        yield mock_span
