"""
Generic YAML/JSON model loader with per-path caching.

``BaseModelLoader[T]`` parses a document with ``yaml.safe_load`` (which
also reads JSON), checks the root is a mapping and validates it into the
subclass's pydantic model.  Each subclass gets its own cache keyed by the
resolved file path.  ``dump_to_string()`` writes a model back out in the
same format it is read from.

Usage::

    from treatycore._loader_base import BaseModelLoader
    from treatycore.contracts.endpoint import ApiContract

    class ApiContractLoader(BaseModelLoader[ApiContract]):
        _model_class = ApiContract
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar, Generic, TypeVar

import yaml
from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


class BaseModelLoader(Generic[T]):
    """Base for loaders that turn YAML/JSON files into pydantic models."""

    _model_class: type[T]
    _cache: ClassVar[dict[str, BaseModel]] = {}
    _logger: ClassVar[logging.Logger]

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        cls._cache = {}
        cls._logger = logging.getLogger(cls.__module__)

    @classmethod
    def clear_cache(cls) -> None:
        """Forget every document this loader class has read."""
        cls._cache.clear()

    def load(self, path: Path) -> T:
        """Load and validate a model from a YAML or JSON file.

        Raises:
            FileNotFoundError: Nothing exists at *path*.
            TypeError: The top-level value is not a mapping.
            yaml.YAMLError: If the file is not valid YAML/JSON.
            pydantic.ValidationError: If the document does not match the model.
        """
        key = str(path.resolve())
        cached = self._cache.get(key)
        if cached is not None:
            self._logger.debug("Reusing cached %s for %s", self._model_class.__name__, key)
            return cached  # type: ignore[return-value]

        if not path.exists():
            raise FileNotFoundError(f"No contract document at {path}")

        with open(path, encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)

        model = self._validate(raw, source=str(path))
        self._cache[key] = model
        self._log_loaded(model, key)
        return model

    def load_from_string(self, text: str) -> T:
        """Load a model from YAML or JSON text (not cached)."""
        return self._validate(yaml.safe_load(text), source="<string>")

    def dump_to_string(self, model: T) -> str:
        """Serialize *model* to YAML that ``load_from_string`` reads back."""
        data = model.model_dump(mode="json", exclude_none=True)
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)

    def save(self, model: T, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.dump_to_string(model), encoding="utf-8")
        self._cache.pop(str(path.resolve()), None)
        self._logger.debug("Saved %s to %s", type(model).__name__, path)

    def _validate(self, raw: object, source: str) -> T:
        if not isinstance(raw, dict):
            raise TypeError(
                f"{source} must contain a mapping at the top level, "
                f"got {type(raw).__name__}"
            )
        return self._model_class.model_validate(raw)

    def _log_loaded(self, model: T, key: str) -> None:
        """Hook for subclass-specific debug logging after a load."""
        self._logger.debug("Read %s from %s", self._model_class.__name__, key)
