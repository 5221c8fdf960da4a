"""Logging utilities for the rolebits permission engine.

This module provides:
- Logging configuration from RoleBitsConfig
- Safe preview of permission maps for log lines
- Structured (JSON) or plain text formatting
- Automatic area/role context on log records
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from .config import LogLevel, RoleBitsConfig

# Record attributes owned by the logging module itself
_RESERVED_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "exc_info", "exc_text", "stack_info",
        "taskName", "area", "role",
    }
)


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a length-bounded, single-line preview of a value for logging.

    Grant maps can be large (one entry per permission of every area), so
    anything logged from the engine goes through here.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list, tuple)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    # Normalize whitespace
    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


class RoleBitsFormatter(logging.Formatter):
    """Formatter that includes area/role context and optional JSON output."""

    def __init__(
        self,
        json_format: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.json_format = json_format

    def format(self, record: logging.LogRecord) -> str:
        area = getattr(record, "area", None)
        role = getattr(record, "role", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if area:
            log_data["area"] = area
        if role is not None:
            log_data["role"] = str(role)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = safe_preview(value)

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        if area:
            parts.append(f"area={area}")
        if role is not None:
            parts.append(f"role={role}")
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class RoleBitsLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds ``area`` and ``role`` to every record.

    Usage:
        logger = get_area_logger(__name__, area="blog")
        logger.info("Role saved", role=42)
    """

    def __init__(
        self,
        logger: logging.Logger,
        area: Optional[str] = None,
        role: Optional[Any] = None,
    ):
        super().__init__(logger, {})
        self.area = area
        self.role = role

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        area = kwargs.pop("area", self.area)
        role = kwargs.pop("role", self.role)

        extra = kwargs.get("extra", {})
        if area:
            extra["area"] = area
        if role is not None:
            extra["role"] = role
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[RoleBitsConfig] = None,
    json_format: Optional[bool] = None,
) -> None:
    """Configure logging for an application hosting the engine.

    Args:
        config: RoleBitsConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json``
    """
    if config is None:
        from .config import load_config_from_env
        config = load_config_from_env()

    log_level = getattr(logging, LogLevel(config.log_level).value, logging.INFO)
    use_json = config.log_json if json_format is None else json_format

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(RoleBitsFormatter(json_format=use_json))
    root_logger.addHandler(console_handler)

    if config.service_name:
        logging.getLogger(config.service_name).setLevel(log_level)


def get_area_logger(
    name: str,
    area: Optional[str] = None,
    role: Optional[Any] = None,
) -> RoleBitsLoggerAdapter:
    """Get a logger adapter bound to an area (and optionally a role).

    Example:
        logger = get_area_logger(__name__, area="blog")
        logger.debug("Implied level added", role=role_id)
    """
    logger = logging.getLogger(name)
    return RoleBitsLoggerAdapter(logger, area=area, role=role)


__all__ = [
    "RoleBitsFormatter",
    "RoleBitsLoggerAdapter",
    "get_area_logger",
    "safe_preview",
    "setup_logging",
]
