"""Exception hierarchy for rolebits.

Every error raised by the engine inherits from RoleBitsError. This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for mapping codes back to exception classes

Usage in callers:
    from rolebits.exceptions import (
        RoleBitsError,
        MalformedKeyError,
        UnknownAreaError,
    )

Unsupported permission names or levels are NOT errors; lookups return
``False`` / ``0`` for them. Exceptions are reserved for caller contract
violations such as malformed composite keys or unregistered areas.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "RoleBitsError",
    "ConfigurationError",
    "MalformedKeyError",
    "UnknownAreaError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
]


# ---- Exception Hierarchy ----------------------------------------------------


class RoleBitsError(Exception):
    """Base exception for the permission engine.

    Attributes:
        code: Stable error code string (e.g. "MALFORMED_KEY").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(RoleBitsError):
    """Invalid area definition or engine configuration."""

    code: str = "CONFIGURATION_ERROR"
    message: str = "Invalid permission configuration"


class MalformedKeyError(RoleBitsError, ValueError):
    """Composite permission key is not in ``area:name`` form."""

    code: str = "MALFORMED_KEY"
    message: str = "Composite permission key must look like 'area:name'"


class UnknownAreaError(RoleBitsError, LookupError):
    """Operation targeted an area that is not registered."""

    code: str = "UNKNOWN_AREA"
    message: str = "Permission area is not registered"


# ---- Error Registry ---------------------------------------------------------

_E = TypeVar("_E", bound=type[RoleBitsError])


class ErrorRegistry:
    """Registry for mapping stable error codes to exception classes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[RoleBitsError]] = {}

    def register(self, code: str, error_cls: type[RoleBitsError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[RoleBitsError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[RoleBitsError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("LOCKED_AREA")
        class LockedAreaError(RoleBitsError):
            code = "LOCKED_AREA"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", RoleBitsError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("MALFORMED_KEY", MalformedKeyError)
error_registry.register("UNKNOWN_AREA", UnknownAreaError)
