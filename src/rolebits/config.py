"""Configuration models for the rolebits permission engine.

This module provides Pydantic-validated configuration for the engine itself
(logging) and for every functional area it serves (bit tables, synonyms,
implication overrides, opaque per-area params).

Area definitions are validated here once, so the catalog can treat its bit
table as trusted and immutable for the rest of the process lifetime.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AreaConfig(BaseModel):
    """Definition of one functional area ("bundle").

    Example::

        AreaConfig(
            name="blog",
            permissions={
                "posts": {"viewown": 2, "viewother": 4, "editown": 8, "full": 1024},
            },
            level_synonyms={"view": "viewother"},
        )
    """

    model_config = {"extra": "forbid"}

    name: str = Field(description="Stable area identifier, used as 'area:name' in composite keys")
    enabled: bool = Field(
        default=True,
        description="Disabled areas grant nothing and are skipped by conversions",
    )
    permissions: dict[str, dict[str, int]] = Field(
        default_factory=dict,
        description="Permission name -> level name -> bit value",
    )
    synonyms: dict[str, str] = Field(
        default_factory=dict,
        description="Legacy/aliased permission name -> stored permission name",
    )
    level_synonyms: dict[str, str] = Field(
        default_factory=dict,
        description="Legacy/aliased level name -> stored level name",
    )
    implications: Optional[dict[str, list[str]]] = Field(
        default=None,
        description="Granted level -> implied levels. None keeps the default table",
    )
    params: dict[str, Any] = Field(
        default_factory=dict,
        description="Opaque area-specific settings handed to the area",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Area names are the left half of composite keys."""
        if not v:
            raise ValueError("Area name must not be empty")
        if ":" in v:
            raise ValueError(f"Area name must not contain ':': {v!r}")
        return v

    @field_validator("permissions")
    @classmethod
    def validate_permissions(cls, v: dict[str, dict[str, int]]) -> dict[str, dict[str, int]]:
        """Bits must be non-negative integers."""
        for perm_name, levels in v.items():
            for level, bit in levels.items():
                if bit < 0:
                    raise ValueError(f"Negative bit for {perm_name}.{level}: {bit}")
        return v


class RoleBitsConfig(BaseModel):
    """Top-level configuration for a permission engine instance.

    RULE: environment variables are read only by :func:`load_config_from_env`.
    """

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level for the engine",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    service_name: Optional[str] = Field(
        default=None,
        description="Name of the hosting application, used as logger name",
    )

    areas: list[AreaConfig] = Field(
        default_factory=list,
        description="Functional areas served by this engine",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    @model_validator(mode="after")
    def validate_unique_areas(self) -> "RoleBitsConfig":
        seen: set[str] = set()
        for area in self.areas:
            if area.name in seen:
                raise ValueError(f"Duplicate area name: {area.name!r}")
            seen.add(area.name)
        return self

    model_config = {
        "use_enum_values": True,
        "extra": "forbid",
    }


def load_config_from_env(areas: Optional[list[AreaConfig | dict[str, Any]]] = None) -> RoleBitsConfig:
    """Load engine configuration from environment variables.

    Area definitions come from the caller (they are application code, not
    deployment settings); the environment may only switch areas off.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - SERVICE_NAME: Hosting application name
    - ROLEBITS_DISABLED_AREAS: Comma-separated area names to force-disable

    Returns:
        RoleBitsConfig instance with values from environment or defaults.
    """
    import os

    disabled_raw = os.getenv("ROLEBITS_DISABLED_AREAS", "")
    disabled = {a.strip() for a in disabled_raw.split(",") if a.strip()}

    resolved: list[AreaConfig] = []
    for area in areas or []:
        area_cfg = area if isinstance(area, AreaConfig) else AreaConfig.model_validate(area)
        if area_cfg.name in disabled:
            area_cfg = area_cfg.model_copy(update={"enabled": False})
        resolved.append(area_cfg)

    return RoleBitsConfig(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes"),
        service_name=os.getenv("SERVICE_NAME"),
        areas=resolved,
    )


__all__ = [
    "AreaConfig",
    "LogLevel",
    "RoleBitsConfig",
    "load_config_from_env",
]
