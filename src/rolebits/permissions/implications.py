"""Level implication rules.

Provides:
- ``DEFAULT_IMPLICATIONS``: granted level → levels it requires.
- ``expand_levels()``: append implied levels to a granted list.

A role selection is expanded through this table before it is persisted.
"""

from __future__ import annotations

from typing import Callable, Mapping, Sequence

from .constants import Levels

# ── Default Implication Table ───────────────────────────
# Order matters: implied levels are appended in this order.

DEFAULT_IMPLICATIONS: dict[str, tuple[str, ...]] = {
    Levels.EDIT: (Levels.VIEW_OTHER, Levels.VIEW_OWN),
    Levels.EDIT_OTHER: (Levels.VIEW_OTHER, Levels.VIEW_OWN),
    Levels.DELETE: (Levels.EDIT_OTHER, Levels.VIEW_OTHER, Levels.VIEW_OWN),
    Levels.DELETE_OTHER: (Levels.EDIT_OTHER, Levels.VIEW_OTHER, Levels.VIEW_OWN),
    Levels.PUBLISH: (Levels.VIEW_OTHER, Levels.VIEW_OWN),
    Levels.PUBLISH_OTHER: (Levels.VIEW_OTHER, Levels.VIEW_OWN),
    Levels.VIEW_OTHER: (Levels.VIEW_OWN,),
    Levels.EDIT_OWN: (Levels.VIEW_OWN,),
    Levels.DELETE_OWN: (Levels.VIEW_OWN,),
    Levels.PUBLISH_OWN: (Levels.VIEW_OWN,),
    Levels.CREATE: (Levels.VIEW_OWN,),
}


def expand_levels(
    granted: Sequence[str],
    implications: Mapping[str, Sequence[str]],
    accept: Callable[[str], str | None],
) -> list[str]:
    """Return ``granted`` followed by every implied level it lacks.

    Implied levels are themselves expanded, so the result is closed under
    ``implications`` and running it through again adds nothing.

    Args:
        granted: Levels already granted, in order.
        implications: Granted level → implied levels.
        accept: Maps an implied level to the stored level name to add, or
                ``None`` if the area does not support it.

    Returns:
        New list; the input is not modified.

    Example::

        expand_levels(["edit"], DEFAULT_IMPLICATIONS, lambda lvl: lvl)
        # ["edit", "viewother", "viewown"]
    """
    updated = list(granted)
    # updated grows while we walk it
    for level in updated:
        for implied in implications.get(level, ()):
            resolved = accept(implied)
            if resolved is not None and resolved not in updated:
                updated.append(resolved)
    return updated


__all__ = [
    "DEFAULT_IMPLICATIONS",
    "expand_levels",
]
