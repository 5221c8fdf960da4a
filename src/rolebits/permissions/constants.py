"""Level name constants and composite key helpers.

Provides:
- ``Levels``: reserved and conventional level names.
- ``composite_key()`` / ``split_composite_key()``: the ``area:name`` format.
"""

from __future__ import annotations

from ..exceptions import MalformedKeyError

KEY_SEPARATOR = ":"


class Levels:
    """Conventional level names used by content-style areas.

    Only ``FULL`` has engine-level meaning: when its bit is granted, every
    other level of the same permission name is granted too. The rest are the
    names the default implication table knows about.
    """

    FULL = "full"

    VIEW = "view"
    VIEW_OWN = "viewown"
    VIEW_OTHER = "viewother"

    EDIT = "edit"
    EDIT_OWN = "editown"
    EDIT_OTHER = "editother"

    DELETE = "delete"
    DELETE_OWN = "deleteown"
    DELETE_OTHER = "deleteother"

    PUBLISH = "publish"
    PUBLISH_OWN = "publishown"
    PUBLISH_OTHER = "publishother"

    CREATE = "create"


def composite_key(area: str, name: str) -> str:
    """Build the ``area:name`` key used to group grants.

    Example::

        composite_key("blog", "posts")  # "blog:posts"
    """
    if KEY_SEPARATOR in area:
        raise MalformedKeyError(f"Area name must not contain '{KEY_SEPARATOR}': {area!r}", key=area)
    return f"{area}{KEY_SEPARATOR}{name}"


def split_composite_key(key: str) -> tuple[str, str]:
    """Split ``area:name`` into its two halves.

    Only the first separator counts, so permission names may contain ``:``.

    Raises:
        MalformedKeyError: if the key has no separator.
    """
    area, sep, name = key.partition(KEY_SEPARATOR)
    if not sep:
        raise MalformedKeyError(f"Composite permission key has no '{KEY_SEPARATOR}': {key!r}", key=key)
    return area, name


__all__ = [
    "KEY_SEPARATOR",
    "Levels",
    "composite_key",
    "split_composite_key",
]
