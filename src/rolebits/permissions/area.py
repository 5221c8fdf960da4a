"""Functional area definitions.

A ``PermissionArea`` is the per-area value the catalog works against: the
area's stable name, its permission-name → level → bit table, and the hooks an
area may customize (enablement, synonym resolution, form building, client-side
scoring). Areas are composed in a registry; subclass only when a hook needs
real code rather than configuration.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Sequence

from ..config import AreaConfig
from ..exceptions import ConfigurationError
from .constants import KEY_SEPARATOR
from .implications import DEFAULT_IMPLICATIONS

FormHook = Callable[["PermissionArea", Any, Mapping[str, Any], Mapping[str, Any]], None]
JavascriptHook = Callable[["PermissionArea", dict[str, Any]], None]


class PermissionArea:
    """One functional area ("bundle") and its bit table.

    Args:
        name: Stable area identifier. Must not contain ``:``.
        permissions: Permission name → level name → bit value.
        params: Opaque area-specific configuration.
        enabled: When False the area grants nothing and conversions skip it.
        synonyms: Aliased permission name → stored permission name.
        level_synonyms: Aliased level name → stored level name.
        implications: Granted level → implied levels. Defaults to
            :data:`DEFAULT_IMPLICATIONS`.
        form_hook: Called by :meth:`build_form`.
        javascript_hook: Called by :meth:`parse_for_javascript`.

    Example::

        blog = PermissionArea(
            "blog",
            {"posts": {"viewown": 2, "viewother": 4, "editown": 8, "full": 1024}},
            level_synonyms={"view": "viewother"},
        )
        blog.get_synonym("posts", "view")  # ("posts", "viewother")
    """

    def __init__(
        self,
        name: str,
        permissions: Mapping[str, Mapping[str, int]],
        params: Optional[Mapping[str, Any]] = None,
        *,
        enabled: bool = True,
        synonyms: Optional[Mapping[str, str]] = None,
        level_synonyms: Optional[Mapping[str, str]] = None,
        implications: Optional[Mapping[str, Sequence[str]]] = None,
        form_hook: Optional[FormHook] = None,
        javascript_hook: Optional[JavascriptHook] = None,
    ) -> None:
        if not name or KEY_SEPARATOR in name:
            raise ConfigurationError(f"Invalid area name: {name!r}", area=name)

        self._name = name
        # Frozen copies: the table is read concurrently for the process lifetime
        self._permissions = MappingProxyType(
            {perm: MappingProxyType(dict(levels)) for perm, levels in permissions.items()}
        )
        self.params: dict[str, Any] = dict(params or {})
        self._enabled = enabled
        self._synonyms = dict(synonyms or {})
        self._level_synonyms = dict(level_synonyms or {})
        source = DEFAULT_IMPLICATIONS if implications is None else implications
        self._implications = {level: tuple(implied) for level, implied in source.items()}
        self._form_hook = form_hook
        self._javascript_hook = javascript_hook

    @classmethod
    def from_config(cls, config: AreaConfig, **hooks: Any) -> "PermissionArea":
        """Build an area from validated configuration."""
        return cls(
            config.name,
            config.permissions,
            config.params,
            enabled=config.enabled,
            synonyms=config.synonyms,
            level_synonyms=config.level_synonyms,
            implications=config.implications,
            **hooks,
        )

    def get_name(self) -> str:
        return self._name

    def is_enabled(self) -> bool:
        """Whether the area is active (e.g. its owning feature is switched on)."""
        return self._enabled

    def get_permissions(self) -> Mapping[str, Mapping[str, int]]:
        return self._permissions

    def get_implications(self) -> Mapping[str, tuple[str, ...]]:
        return self._implications

    def get_synonym(self, name: str, level: str) -> tuple[str, str]:
        """Map a requested ``(name, level)`` to the stored identifiers.

        Identity unless synonyms were configured.
        """
        return (
            self._synonyms.get(name, name),
            self._level_synonyms.get(level, level),
        )

    def build_form(self, builder: Any, options: Mapping[str, Any], data: Mapping[str, Any]) -> None:
        """Let the area add its own fields to a role form. No-op by default."""
        if self._form_hook is not None:
            self._form_hook(self, builder, options, data)

    def parse_for_javascript(self, perms: dict[str, Any]) -> None:
        """Let the area adjust client-side permission scoring data in place."""
        if self._javascript_hook is not None:
            self._javascript_hook(self, perms)

    def __repr__(self) -> str:
        return f"PermissionArea(name={self._name!r}, permissions={sorted(self._permissions)!r})"


__all__ = [
    "FormHook",
    "JavascriptHook",
    "PermissionArea",
]
