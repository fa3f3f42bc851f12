"""
Configuration for schemac.

Two layers live here:
- AnalyzerOptions: the small, immutable configuration bag handed to the
  analysis stage (pluralization overrides, table-name overrides, path prefix)
- CompilerSettings: environment-driven settings (prefix SCHEMAC_) used by
  whatever host process drives a compilation run

Invariants:
    - The analysis stage only ever sees AnalyzerOptions; it never reads
      the process environment itself
    - All settings have sensible defaults for local development
    - AnalyzerOptions is frozen and safe to share between runs

How to change safely:
    - Add new options with defaults that keep existing output stable
    - Mirror every new option in CompilerSettings.to_options()
    - Options that change generated names change the result fingerprint
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

import json_log_formatter
from pydantic import Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_LOG_FORMATS = ("text", "json")


def _frozen_mapping(data: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(data or {}))


@dataclass(frozen=True)
class AnalyzerOptions:
    """Configuration bag consumed by the analysis stage.

    Attributes:
        pluralization: Custom singular -> plural overrides (e.g. {"cactus": "cactuses"})
        table_map: Entity name -> storage table name overrides
        api_prefix: Prefix for each entity's externally addressable path
    """

    pluralization: Mapping[str, str] = field(default_factory=dict)
    table_map: Mapping[str, str] = field(default_factory=dict)
    api_prefix: str = "/api"

    def __post_init__(self) -> None:
        """Freeze mappings and normalize the path prefix."""
        object.__setattr__(
            self,
            "pluralization",
            _frozen_mapping({k.lower(): v.lower() for k, v in self.pluralization.items()}),
        )
        object.__setattr__(self, "table_map", _frozen_mapping(self.table_map))
        object.__setattr__(self, "api_prefix", self.api_prefix.rstrip("/"))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "pluralization": dict(self.pluralization),
            "table_map": dict(self.table_map),
            "api_prefix": self.api_prefix,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnalyzerOptions:
        """Create from dictionary representation."""
        return cls(
            pluralization=data.get("pluralization") or {},
            table_map=data.get("table_map") or {},
            api_prefix=data.get("api_prefix", "/api"),
        )


class CompilerSettings(BaseSettings):
    """Environment-driven compiler settings.

    Mapping-valued settings are read from the environment as JSON, e.g.
    SCHEMAC_TABLE_MAP='{"User": "app_users"}'.
    """

    api_prefix: str = Field(default="/api", description="Prefix for entity endpoints")
    pluralization: dict[str, str] = Field(default_factory=dict)
    table_map: dict[str, str] = Field(default_factory=dict)

    # Observability
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="text", description="text or json")

    model_config = {"env_prefix": "SCHEMAC_"}

    def validate_settings(self) -> None:
        """Validate settings consistency.

        Raises:
            ValueError: If a setting is invalid.
        """
        if self.api_prefix and not self.api_prefix.startswith("/"):
            raise ValueError(f"SCHEMAC_API_PREFIX must start with '/', got '{self.api_prefix}'")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(
                f"Invalid SCHEMAC_LOG_LEVEL '{self.log_level}'. Must be one of: {', '.join(_LOG_LEVELS)}"
            )
        if self.log_format not in _LOG_FORMATS:
            raise ValueError(
                f"Invalid SCHEMAC_LOG_FORMAT '{self.log_format}'. Must be one of: text, json"
            )
        for entity, table in self.table_map.items():
            if not table:
                raise ValueError(f"Empty table name for entity '{entity}' in SCHEMAC_TABLE_MAP")

    def to_options(self) -> AnalyzerOptions:
        """Build the analysis-stage configuration bag."""
        return AnalyzerOptions(
            pluralization=self.pluralization,
            table_map=self.table_map,
            api_prefix=self.api_prefix,
        )

    def log_config(self) -> None:
        """Log the effective configuration."""
        logger.info(
            "Compiler configuration loaded",
            extra={
                "api_prefix": self.api_prefix,
                "pluralization_overrides": len(self.pluralization),
                "table_overrides": len(self.table_map),
                "log_level": self.log_level,
            },
        )


def load_settings() -> CompilerSettings:
    """Load and validate settings from the environment.

    Raises:
        ValueError: If configuration is invalid.
    """
    settings = CompilerSettings()
    settings.validate_settings()
    return settings


def setup_logging(settings: CompilerSettings) -> None:
    """Configure logging based on settings.

    Args:
        settings: Compiler settings
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_format == "json":
        formatter: logging.Formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]
