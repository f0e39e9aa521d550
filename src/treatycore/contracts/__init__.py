"""
Endpoint contracts, verification of HTTP exchanges and contract files.

Public API::

    from treatycore.contracts import (
        # Models
        ApiContract,
        EndpointContract,
        RequestExpectation,
        ResponseExpectation,
        HeaderExpectation,
        QueryParameterExpectation,
        # Verifier
        ContractVerifier,
        # Loader
        ApiContractLoader,
    )
"""

from treatycore.contracts.endpoint import (
    ApiContract,
    EndpointContract,
    HeaderExpectation,
    QueryParameterExpectation,
    RequestExpectation,
    ResponseExpectation,
    endpoint_key,
    normalize_path,
)
from treatycore.contracts.loader import ApiContractLoader
from treatycore.contracts.verifier import ContractVerifier

__all__ = [
    # Models
    "ApiContract",
    "EndpointContract",
    "RequestExpectation",
    "ResponseExpectation",
    "HeaderExpectation",
    "QueryParameterExpectation",
    "endpoint_key",
    "normalize_path",
    # Verifier
    "ContractVerifier",
    # Loader
    "ApiContractLoader",
]
