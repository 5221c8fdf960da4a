"""Registry of permission catalogs, one per functional area.

The registry is how an application wires areas together: it owns the shared
:class:`LevelNameCache`, builds catalogs from :class:`RoleBitsConfig`, and
runs cross-area operations (converting a whole role, normalizing a whole
role form, scoring a whole role). Unlike the per-area catalog, it rejects
input that names an area it does not know with :class:`UnknownAreaError`.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, Mapping, MutableMapping, Optional, Sequence

from ..config import RoleBitsConfig
from ..exceptions import ConfigurationError, MalformedKeyError, UnknownAreaError
from ..logging import safe_preview
from .area import PermissionArea
from .cache import LevelNameCache, LevelNames
from .catalog import PermissionCatalog
from .constants import split_composite_key

logger = logging.getLogger(__name__)


class CatalogRegistry:
    """Area name → :class:`PermissionCatalog`.

    Example::

        registry = CatalogRegistry.from_config(config)
        registry.is_granted("blog", {"posts": 2}, "posts", "viewown")  # True
        registry.get("shop")  # raises UnknownAreaError if not configured
    """

    def __init__(self, cache: Optional[LevelNameCache] = None) -> None:
        self.cache = cache if cache is not None else LevelNameCache()
        self._catalogs: dict[str, PermissionCatalog] = {}

    @classmethod
    def from_config(
        cls,
        config: RoleBitsConfig,
        hooks: Optional[Mapping[str, Mapping[str, Any]]] = None,
    ) -> "CatalogRegistry":
        """Build a registry with one catalog per configured area.

        Args:
            config: Validated engine configuration.
            hooks: Optional area name → ``{"form_hook": ..., "javascript_hook": ...}``.
        """
        registry = cls()
        registry._load(config, hooks)
        return registry

    def _load(
        self,
        config: RoleBitsConfig,
        hooks: Optional[Mapping[str, Mapping[str, Any]]],
    ) -> None:
        hooks = hooks or {}
        for area_cfg in config.areas:
            area = PermissionArea.from_config(area_cfg, **hooks.get(area_cfg.name, {}))
            self.register(area)
        logger.info("Loaded %d permission areas", len(self._catalogs))

    def reconfigure(
        self,
        config: RoleBitsConfig,
        hooks: Optional[Mapping[str, Mapping[str, Any]]] = None,
    ) -> None:
        """Replace every area and drop all memoized conversions.

        The new areas are built aside first; if any of them fails, the
        registry and its cache are left exactly as they were.
        """
        staged = CatalogRegistry(cache=self.cache)
        staged._load(config, hooks)

        self._catalogs = staged._catalogs
        self.cache.clear()

    # ── Membership ──────────────────────────────────────

    def register(self, area: PermissionArea | PermissionCatalog) -> PermissionCatalog:
        """Add an area. Catalogs passed in are rebound to the registry cache."""
        if isinstance(area, PermissionCatalog):
            area = area.area
        name = area.get_name()
        if name in self._catalogs:
            raise ConfigurationError(f"Area already registered: {name!r}", area=name)

        catalog = PermissionCatalog(area, cache=self.cache)
        self._catalogs[name] = catalog
        return catalog

    def get(self, area_name: str) -> PermissionCatalog:
        try:
            return self._catalogs[area_name]
        except KeyError:
            raise UnknownAreaError(f"Unknown permission area: {area_name!r}", area=area_name) from None

    def areas(self) -> list[str]:
        return list(self._catalogs)

    def enabled(self) -> list[PermissionCatalog]:
        return [c for c in self._catalogs.values() if c.is_enabled()]

    def __contains__(self, area_name: object) -> bool:
        return area_name in self._catalogs

    def __iter__(self) -> Iterator[PermissionCatalog]:
        return iter(self._catalogs.values())

    def __len__(self) -> int:
        return len(self._catalogs)

    # ── Cross-area operations ───────────────────────────

    def is_granted(self, area_name: str, user_permissions: Mapping[str, int], name: str, level: str) -> bool:
        return self.get(area_name).is_granted(user_permissions, name, level)

    def convert_bits_to_permission_names(
        self, permissions: Mapping[str, Mapping[Any, Mapping[str, Any]]]
    ) -> dict[str, LevelNames]:
        """Convert a role's stored records for every area.

        Returns:
            Area name → permission name → level names. Areas that are
            disabled or absent from ``permissions`` are left out.

        Raises:
            UnknownAreaError: if ``permissions`` holds an unregistered area.
        """
        self._require_known(permissions)

        converted: dict[str, LevelNames] = {}
        for catalog in self._catalogs.values():
            levels = catalog.convert_bits_to_permission_names(permissions)
            if catalog.get_name() in self.cache:
                converted[catalog.get_name()] = levels
        return converted

    def analyze_permissions(self, permissions: MutableMapping[str, Sequence[str]]) -> None:
        """Add implied levels for every area, in place.

        Raises:
            MalformedKeyError: if a key has no ``:``.
            UnknownAreaError: if a key names an unregistered area.

        Keys are validated before anything is modified.
        """
        areas = {self._split_key(key)[0] for key in permissions}
        self._require_known(areas)

        for area_name in areas:
            self._catalogs[area_name].analyze_permissions(permissions)

    def get_permission_ratio(self, data: Mapping[str, Mapping[str, Iterable[str]]]) -> tuple[int, int]:
        """Sum granted/available levels over all enabled areas.

        Args:
            data: Area name → permission name → granted level names.
        """
        self._require_known(data)

        total_granted = total_available = 0
        for catalog in self.enabled():
            granted, available = catalog.get_permission_ratio(data.get(catalog.get_name(), {}))
            total_granted += granted
            total_available += available
        return total_granted, total_available

    def _split_key(self, key: str) -> tuple[str, str]:
        try:
            return split_composite_key(key)
        except MalformedKeyError:
            logger.warning("Rejecting malformed permission key %s", safe_preview(key))
            raise

    def _require_known(self, area_names: Iterable[str]) -> None:
        unknown = sorted(a for a in area_names if a not in self._catalogs)
        if unknown:
            logger.warning("Rejecting permissions for unknown areas: %s", ", ".join(unknown))
            raise UnknownAreaError(f"Unknown permission areas: {unknown!r}", areas=unknown)

    def __repr__(self) -> str:
        return f"CatalogRegistry(areas={self.areas()!r})"


__all__ = [
    "CatalogRegistry",
]
