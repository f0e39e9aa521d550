"""
Settings for treatycore.

Values are read through pydantic-settings, so every field can come from
the process environment or a local ``.env`` file. Precedence, highest
first: keyword arguments, ``TREATY_*`` variables, ``.env``, field defaults.

Example:
    from treatycore.config import get_config

    settings = get_config()
    if settings.strict_mode:
        ...

    # Replace the shared instance with one using different values
    settings = get_config(use_icons=False)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TreatyConfig(BaseSettings):
    """Defaults shared by validation, diagnostics and contract loading.

    Each field maps to a ``TREATY_<FIELD>`` variable, e.g.
    ``TREATY_STRICT_MODE=true`` or ``TREATY_LOG_LEVEL=debug``.
    """

    model_config = SettingsConfigDict(
        env_prefix="TREATY_", env_file=".env", extra="ignore"
    )

    # Validation defaults
    strict_mode: bool = Field(
        default=False,
        description="Treat undeclared fields as violations when a call gives no explicit config",
    )
    ignore_extra_fields: bool = Field(
        default=False,
        description="Skip undeclared fields in matcher objects when a call gives no explicit config",
    )

    # Diagnostics
    use_icons: bool = Field(
        default=True,
        description="Prefix formatted violations with status icons",
    )
    include_suggestions: bool = Field(
        default=True,
        description="Append a 'Fix:' suggestion to formatted violations",
    )

    # Reflection
    max_reflection_depth: int = Field(
        default=32,
        ge=1,
        description="Maximum nesting depth when deriving schemas from model classes",
    )

    # Contracts
    contracts_dir: Optional[str] = Field(
        default=None,
        description="Directory searched for contract files by relative name",
    )

    # Telemetry and logging
    emit_telemetry: bool = Field(
        default=True,
        description="Emit OTel span events for validation and comparison results",
    )
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Logging level for treatycore",
    )

    @field_validator("contracts_dir")
    @classmethod
    def expand_path(cls, v: Optional[str]) -> Optional[str]:
        """Expand ~ in paths."""
        if v is None:
            return v
        return os.path.expanduser(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.lower() if isinstance(v, str) else v

    def resolve_contract_path(self, name: str | Path) -> Path:
        """Resolve a contract file name against ``contracts_dir``.

        Absolute paths, and any path when no directory is configured,
        are returned unchanged.
        """
        path = Path(name)
        if path.is_absolute() or self.contracts_dir is None:
            return path
        return Path(self.contracts_dir) / path


# Global config instance (lazy-loaded)
_config: Optional[TreatyConfig] = None


def get_config(**overrides) -> TreatyConfig:
    """Return the shared settings, building them on first use.

    Passing keyword overrides builds a fresh instance from them and
    makes it the shared one.
    """
    global _config
    if _config is None or overrides:
        _config = TreatyConfig(**overrides)
    return _config


def reset_config() -> None:
    """Drop the shared settings so the next lookup re-reads the environment."""
    global _config
    _config = None


def get_log_level() -> str:
    return get_config().log_level


def configure_logging() -> logging.Logger:
    """Apply the configured log level to the ``treatycore`` logger.

    Handlers are left to the application.
    """
    package_logger = logging.getLogger("treatycore")
    package_logger.setLevel(get_log_level().upper())
    return package_logger
