"""Bitwise permission catalog for one functional area.

The catalog answers every question the application asks about an area's
permissions:

- Is a permission name (and level) supported?
- Which bit does a level map to?
- Does a role's bitmask grant a level?
- Which level names does a stored bitmask stand for?
- Which levels must be added because another level was granted?
- How many of the available levels does a role hold?

Example::

    area = PermissionArea("blog", {
        "posts": {"viewown": 2, "viewother": 4, "editown": 8, "editother": 16, "full": 1024},
    })
    catalog = PermissionCatalog(area)

    catalog.is_granted({"posts": 2 | 8}, "posts", "editown")    # True
    catalog.is_granted({"posts": 1024}, "posts", "editother")   # True (full)
    catalog.is_granted({}, "posts", "viewown")                  # False
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, MutableMapping, Optional, Sequence

from ..exceptions import MalformedKeyError
from ..logging import get_area_logger, safe_preview
from .area import PermissionArea
from .cache import LevelNameCache, LevelNames
from .constants import Levels, split_composite_key
from .implications import expand_levels


class PermissionCatalog:
    """Query, grant and scoring operations over one area's bit table.

    Args:
        area: The area definition (name, bit table, hooks).
        cache: Memo for :meth:`convert_bits_to_permission_names`. Share one
            instance between catalogs of a registry; a private cache is
            created when omitted.
    """

    def __init__(self, area: PermissionArea, cache: Optional[LevelNameCache] = None) -> None:
        self.area = area
        self.cache = cache if cache is not None else LevelNameCache()
        self._log = get_area_logger(__name__, area=area.get_name())

    # ── Area passthrough ────────────────────────────────

    def get_name(self) -> str:
        return self.area.get_name()

    def is_enabled(self) -> bool:
        return self.area.is_enabled()

    @property
    def params(self) -> dict[str, Any]:
        return self.area.params

    def get_permissions(self) -> Mapping[str, Mapping[str, int]]:
        """Permission name → level name → bit (read-only)."""
        return self.area.get_permissions()

    def get_synonym(self, name: str, level: str) -> tuple[str, str]:
        return self.area.get_synonym(name, level)

    # ── Lookups ─────────────────────────────────────────

    def is_supported(self, name: str, level: str = "") -> bool:
        """Check whether ``name`` (and ``level``, if given) exist in the catalog.

        Both are resolved through :meth:`get_synonym` first.
        """
        name, level = self.get_synonym(name, level)
        permissions = self.get_permissions()

        if not level:
            return name in permissions
        return level in permissions.get(name, {})

    def get_value(self, name: str, level: str) -> int:
        """Bit assigned to ``name``/``level``, or ``0`` if unsupported."""
        if not self.is_supported(name, level):
            return 0
        name, level = self.get_synonym(name, level)
        return self.get_permissions()[name][level]

    def is_granted(self, user_permissions: Mapping[str, int], name: str, level: str) -> bool:
        """Determine whether a role's bitmasks grant ``level`` of ``name``.

        Checks in order:
        1. Disabled area → False
        2. No entry for ``name`` in ``user_permissions`` → False (no implicit access)
        3. ``full`` bit set → True, whatever level was asked
        4. Requested level's bit set → True

        A disabled area grants nothing, not even to a role holding the
        ``full`` bit; the ``full`` short-circuit applies to enabled areas only.

        Args:
            user_permissions: Permission name → bitmask granted to the role.
            name: Permission name (e.g. ``"posts"``).
            level: Level name (e.g. ``"editown"``).
        """
        if not self.is_enabled():
            return False

        name, level = self.get_synonym(name, level)
        if name not in user_permissions:
            return False

        granted = user_permissions[name]
        levels = self.get_permissions().get(name, {})
        if levels.get(Levels.FULL, 0) & granted:
            return True
        return bool(levels.get(level, 0) & granted)

    # ── Bits ⇄ names ────────────────────────────────────

    def get_level_names(self, name: str, bitwise: int) -> list[str]:
        """Level names of ``name`` whose bit is set in ``bitwise``, in table order."""
        name, _ = self.get_synonym(name, "")
        levels = self.get_permissions().get(name, {})
        return [level for level, bit in levels.items() if bit & bitwise]

    def convert_permission_names_to_bits(self, name: str, levels: Iterable[str]) -> int:
        """OR together the bits of the supported ``levels`` of ``name``.

        Inverse of :meth:`get_level_names`; unsupported levels contribute nothing.

        Example::

            catalog.convert_permission_names_to_bits("posts", ["viewown", "editown"])  # 10
        """
        bitwise = 0
        for level in levels:
            bitwise |= self.get_value(name, level)
        return bitwise

    def convert_bits_to_permission_names(
        self, permissions: Mapping[str, Mapping[Any, Mapping[str, Any]]]
    ) -> LevelNames:
        """Convert stored role records of this area to level names.

        Args:
            permissions: Area name → permission id → ``{"name": ..., "bitwise": ...}``,
                as returned by a role-permission store.

        Returns:
            Read-only mapping of permission name → tuple of level names set
            in the stored bitmask. Only permissions still supported by the
            catalog are included.

        The result is memoized per area for the lifetime of :attr:`cache`;
        later calls return the same object even if ``permissions`` changed.
        A disabled area, or one missing from ``permissions``, yields ``{}``
        and nothing is cached for it.
        """
        area_name = self.get_name()

        def compute() -> dict[str, list[str]] | None:
            if not self.is_enabled() or area_name not in permissions:
                self._log.debug("Nothing to convert (enabled=%s)", self.is_enabled())
                return None

            converted: dict[str, list[str]] = {}
            for details in permissions[area_name].values():
                perm_name = details["name"]
                if not self.is_supported(perm_name):
                    # Permission was removed from the catalog since it was stored
                    self._log.debug("Skipping unsupported stored permission '%s'", perm_name)
                    continue
                stored_name, _ = self.get_synonym(perm_name, "")
                converted[stored_name] = self.get_level_names(stored_name, int(details["bitwise"]))
            return converted

        return self.cache.get_or_compute(area_name, compute)

    # ── Implications ────────────────────────────────────

    def analyze_permissions(self, permissions: MutableMapping[str, Sequence[str]]) -> None:
        """Add implied levels to a role selection, in place.

        ``permissions`` maps composite keys (``"area:name"``) to the granted
        level names. For keys of this area, each granted level pulls in the
        levels the implication table requires (e.g. ``edit`` → ``viewother``,
        ``viewown``) when the catalog supports them. Additions are appended
        after existing entries. Keys of other areas are left alone.

        The caller keeps ownership of ``permissions``; values of this area's
        keys are replaced with new lists. Calling it twice gives the same
        result as calling it once. Not safe to run concurrently on the same
        mapping.

        Raises:
            MalformedKeyError: if any key has no ``:`` separator. Nothing is
                modified in that case.
        """
        area_name = self.get_name()
        implications = self.area.get_implications()

        # Validate every key before touching anything
        targets: list[tuple[str, str]] = []
        for key in permissions:
            try:
                key_area, perm_name = split_composite_key(key)
            except MalformedKeyError:
                self._log.warning("Rejecting malformed permission key %s", safe_preview(key))
                raise
            if key_area == area_name:
                targets.append((key, perm_name))

        for key, perm_name in targets:
            granted = permissions[key]

            def accept(implied: str, perm_name: str = perm_name) -> str | None:
                _, resolved = self.get_synonym(perm_name, implied)
                return resolved if self.is_supported(perm_name, resolved) else None

            updated = expand_levels(granted, implications, accept)
            if len(updated) != len(granted):
                self._log.debug("Implied levels for %s: %s", key, safe_preview(updated[len(granted):]))
            permissions[key] = updated

    # ── Scoring ─────────────────────────────────────────

    def get_permission_ratio(self, data: Mapping[str, Iterable[str]]) -> tuple[int, int]:
        """Count granted and available levels for a "N of M granted" indicator.

        Args:
            data: Permission name → granted level names.

        Returns:
            ``(total_granted, total_available)``.

        Rules per permission name:
        - ``full`` as the only level counts as one available level.
        - ``full`` next to other levels is not itself counted as available;
          granting it credits every other level.
        - Otherwise each granted, supported level counts once.

        Example::

            # {"article": {"view": 1, "edit": 2, "full": 3}}
            catalog.get_permission_ratio({"article": ["full"]})  # (2, 2)
        """
        total_granted = total_available = 0

        for perm_name, levels in self.get_permissions().items():
            level_names = set(levels)
            total_available += len(level_names)
            chosen = set(data.get(perm_name) or ())

            if Levels.FULL in level_names:
                if len(level_names) == 1:
                    if Levels.FULL in chosen:
                        total_granted += 1
                    continue

                total_available -= 1
                if Levels.FULL in chosen:
                    total_granted += len(level_names) - 1
                    continue

            total_granted += len(chosen & level_names)

        return total_granted, total_available

    # ── UI hooks ────────────────────────────────────────

    def build_form(self, builder: Any, options: Mapping[str, Any], data: Mapping[str, Any]) -> None:
        """Let the area add fields to a role form builder."""
        self.area.build_form(builder, options, data)

    def parse_for_javascript(self, perms: dict[str, Any]) -> None:
        """Let the area adjust client-side scoring data (mutated in place)."""
        self.area.parse_for_javascript(perms)

    def __repr__(self) -> str:
        return f"PermissionCatalog(area={self.get_name()!r}, enabled={self.is_enabled()!r})"


__all__ = [
    "PermissionCatalog",
]
