"""Memo of bits → level-name conversions, keyed by area.

Converting a role's stored bitmasks to level names happens on every role
form render; the result for an area does not change while the process runs
with the same catalog, so it is computed once per area.
"""

from __future__ import annotations

import logging
import threading
from types import MappingProxyType
from typing import Callable, Mapping, Sequence

logger = logging.getLogger(__name__)

LevelNames = Mapping[str, tuple[str, ...]]

_EMPTY: LevelNames = MappingProxyType({})


class LevelNameCache:
    """Thread-safe, per-area memo.

    Created once (usually by :class:`~rolebits.permissions.registry.CatalogRegistry`)
    and injected into every catalog. Call :meth:`clear` after reconfiguring
    the catalogs; there is no other invalidation.

    Stored entries are read-only (a mapping proxy over tuples); every caller
    of an area gets the same object.
    """

    __slots__ = ("_entries", "_lock")

    def __init__(self) -> None:
        self._entries: dict[str, LevelNames] = {}
        self._lock = threading.Lock()

    def get_or_compute(self, area: str, compute: Callable[[], Mapping[str, Sequence[str]] | None]) -> LevelNames:
        """Return the cached value for ``area``, computing it on first use.

        ``compute`` runs under the lock, so concurrent first calls for the
        same area compute exactly once. If ``compute`` returns ``None`` the
        area is left unpopulated and an empty mapping is returned. The
        computed value is frozen before it is stored.
        """
        with self._lock:
            cached = self._entries.get(area)
            if cached is not None:
                return cached

            logger.debug("Level-name cache miss for area '%s'", area)
            value = compute()
            if value is None:
                return _EMPTY
            frozen: LevelNames = MappingProxyType({name: tuple(levels) for name, levels in value.items()})
            self._entries[area] = frozen
            return frozen

    def get(self, area: str) -> LevelNames | None:
        with self._lock:
            return self._entries.get(area)

    def clear(self, area: str | None = None) -> None:
        """Drop one area, or everything when ``area`` is None."""
        with self._lock:
            if area is None:
                self._entries.clear()
            else:
                self._entries.pop(area, None)

    def __contains__(self, area: object) -> bool:
        with self._lock:
            return area in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        with self._lock:
            areas = sorted(self._entries)
        return f"LevelNameCache(areas={areas!r})"


__all__ = [
    "LevelNameCache",
    "LevelNames",
]
