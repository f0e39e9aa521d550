"""
Contract file loader.

Contract files are YAML (or JSON) dumps of ``ApiContract``.  Bodies are
written either as schema nodes (``kind: object`` ...) or as matcher trees
(``type: guid`` ...).  Relative names resolve against
``TreatyConfig.contracts_dir``.

Usage::

    from treatycore.contracts.loader import ApiContractLoader

    loader = ApiContractLoader()
    contract = loader.load_named("users-api.yaml")

Example file::

    name: users-api
    version: 2.1.0
    endpoints:
      - method: GET
        path_template: /users/{id}
        responses:
          - status_code: 200
            body:
              kind: object
              required: [id]
              properties:
                id: {node: {kind: integer}}
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

from treatycore._loader_base import BaseModelLoader
from treatycore.config import get_config
from treatycore.contracts.endpoint import ApiContract


class ApiContractLoader(BaseModelLoader[ApiContract]):
    """Loads and caches ``ApiContract`` files."""

    _model_class = ApiContract

    def load_named(self, name: Union[str, Path]) -> ApiContract:
        """Load a contract by file name relative to the configured contracts directory."""
        return self.load(get_config().resolve_contract_path(name))

    def _log_loaded(self, contract: ApiContract, key: str) -> None:
        self._logger.debug(
            "Loaded API contract %s v%s: endpoints=%d (%s)",
            contract.name,
            contract.version,
            len(contract.endpoints),
            key,
        )
