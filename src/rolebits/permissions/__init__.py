"""Bitwise permission catalogs for functional areas.

Defines:
- PermissionArea: one area's bit table and customization hooks
- PermissionCatalog: support/value/grant checks, bits ⇄ names, implications, ratios
- CatalogRegistry: area name → catalog, cross-area operations
- LevelNameCache: memo of bits → names conversions
- DEFAULT_IMPLICATIONS / expand_levels(): granted level → required levels
"""

from .area import FormHook, JavascriptHook, PermissionArea
from .cache import LevelNameCache, LevelNames
from .catalog import PermissionCatalog
from .constants import KEY_SEPARATOR, Levels, composite_key, split_composite_key
from .implications import DEFAULT_IMPLICATIONS, expand_levels
from .registry import CatalogRegistry

__all__ = [
    "DEFAULT_IMPLICATIONS",
    "KEY_SEPARATOR",
    "CatalogRegistry",
    "FormHook",
    "JavascriptHook",
    "LevelNameCache",
    "LevelNames",
    "Levels",
    "PermissionArea",
    "PermissionCatalog",
    "composite_key",
    "expand_levels",
    "split_composite_key",
]
