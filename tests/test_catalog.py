"""Tests for PermissionCatalog."""

from __future__ import annotations

import copy

import pytest

from rolebits import (
    LevelNameCache,
    MalformedKeyError,
    PermissionArea,
    PermissionCatalog,
)

BLOG_PERMISSIONS = {
    "posts": {
        "viewown": 1,
        "viewother": 2,
        "editown": 4,
        "editother": 8,
        "create": 16,
        "deleteown": 32,
        "deleteother": 64,
        "publishown": 128,
        "publishother": 256,
        "full": 1024,
    },
    "categories": {"view": 1, "edit": 2, "create": 4, "delete": 8, "publish": 16, "full": 32},
    "settings": {"full": 1},
    "tags": {"view": 1, "edit": 2},
}


def make_catalog(
    name: str = "blog",
    permissions: dict | None = None,
    **kwargs,
) -> PermissionCatalog:
    area = PermissionArea(name, permissions if permissions is not None else BLOG_PERMISSIONS, **kwargs)
    return PermissionCatalog(area)


class TestIsSupported:
    """Tests for is_supported()."""

    def test_name_only(self) -> None:
        """A permission name alone is supported iff it is a catalog key."""
        catalog = make_catalog()
        assert catalog.is_supported("posts")
        assert catalog.is_supported("settings")
        assert not catalog.is_supported("comments")

    def test_name_and_level(self) -> None:
        """With a level, the level must exist under the name."""
        catalog = make_catalog()
        assert catalog.is_supported("posts", "editown")
        assert catalog.is_supported("categories", "view")
        assert not catalog.is_supported("posts", "view")
        assert not catalog.is_supported("comments", "viewown")

    def test_empty_level_checks_name_only(self) -> None:
        """An empty level string means 'name only'."""
        assert make_catalog().is_supported("tags", "")

    def test_synonyms_are_resolved(self) -> None:
        """Aliased names and levels resolve to stored ones before the lookup."""
        catalog = make_catalog(
            synonyms={"articles": "posts"},
            level_synonyms={"view": "viewother"},
        )
        assert catalog.is_supported("articles")
        assert catalog.is_supported("articles", "view")
        assert catalog.get_synonym("articles", "view") == ("posts", "viewother")


class TestGetValue:
    """Tests for get_value()."""

    def test_supported_level(self) -> None:
        """Returns the configured bit."""
        catalog = make_catalog()
        assert catalog.get_value("posts", "editown") == 4
        assert catalog.get_value("posts", "full") == 1024

    def test_unsupported_is_zero(self) -> None:
        """Unsupported names or levels return the 0 sentinel."""
        catalog = make_catalog()
        assert catalog.get_value("posts", "nope") == 0
        assert catalog.get_value("comments", "viewown") == 0

    def test_value_through_synonym(self) -> None:
        """Aliased level returns the stored level's bit."""
        catalog = make_catalog(level_synonyms={"view": "viewother"})
        assert catalog.get_value("posts", "view") == 2


class TestIsGranted:
    """Tests for is_granted()."""

    def test_no_entry_is_never_granted(self) -> None:
        """Without an entry for the name, nothing is granted."""
        catalog = make_catalog()
        for level in ("viewown", "full", "anything", ""):
            assert not catalog.is_granted({}, "posts", level)
            assert not catalog.is_granted({"categories": 63}, "posts", level)

    def test_specific_level(self) -> None:
        """A level is granted iff its bit is set."""
        catalog = make_catalog()
        user = {"posts": 1 | 4}
        assert catalog.is_granted(user, "posts", "viewown")
        assert catalog.is_granted(user, "posts", "editown")
        assert not catalog.is_granted(user, "posts", "editother")

    def test_full_grants_every_level(self) -> None:
        """The full bit short-circuits the level check."""
        catalog = make_catalog()
        user = {"posts": 1024}
        assert catalog.is_granted(user, "posts", "deleteother")
        assert catalog.is_granted(user, "posts", "viewown")
        assert catalog.is_granted(user, "posts", "not-a-level")

    def test_unknown_level_is_not_granted(self) -> None:
        """An unknown level has no bit to match."""
        catalog = make_catalog()
        assert not catalog.is_granted({"posts": 1 | 2 | 4}, "posts", "not-a-level")

    def test_permission_without_full(self) -> None:
        """Names with no full level fall straight to the level check."""
        catalog = make_catalog()
        user = {"tags": 2}
        assert catalog.is_granted(user, "tags", "edit")
        assert not catalog.is_granted(user, "tags", "view")

    def test_zero_mask(self) -> None:
        """An entry with mask 0 grants nothing."""
        assert not make_catalog().is_granted({"posts": 0}, "posts", "viewown")

    def test_synonym_level(self) -> None:
        """Requested alias is checked against the stored level's bit."""
        catalog = make_catalog(level_synonyms={"viewothers": "viewother"})
        assert catalog.is_granted({"posts": 2}, "posts", "viewothers")
        assert not catalog.is_granted({"posts": 1}, "posts", "viewothers")

    def test_disabled_area_grants_nothing(self) -> None:
        """A disabled area is suppressed entirely."""
        catalog = make_catalog(enabled=False)
        user = {"posts": 1024 | 1}
        for level in BLOG_PERMISSIONS["posts"]:
            assert not catalog.is_granted(user, "posts", level)


class TestBitsAndNames:
    """Tests for bits ⇄ level-name conversions."""

    def test_get_level_names_in_table_order(self) -> None:
        """Level names come back in catalog order."""
        catalog = make_catalog()
        assert catalog.get_level_names("posts", 1024 | 4 | 1) == ["viewown", "editown", "full"]

    def test_names_to_bits(self) -> None:
        """Supported levels are OR-ed, unsupported ones ignored."""
        catalog = make_catalog()
        assert catalog.convert_permission_names_to_bits("posts", ["viewown", "editown", "bogus"]) == 5
        assert catalog.convert_permission_names_to_bits("posts", []) == 0

    def test_convert_stored_records(self) -> None:
        """Stored bitmasks become level names for supported permissions only."""
        catalog = make_catalog()
        stored = {
            "blog": {
                1: {"name": "posts", "bitwise": 1 | 4},
                2: {"name": "removed", "bitwise": 3},
                3: {"name": "tags", "bitwise": 2},
            },
            "shop": {4: {"name": "orders", "bitwise": 1}},
        }
        assert catalog.convert_bits_to_permission_names(stored) == {
            "posts": ("viewown", "editown"),
            "tags": ("edit",),
        }

    def test_convert_is_memoized(self) -> None:
        """Second call returns the very same object even with new input."""
        catalog = make_catalog()
        first = catalog.convert_bits_to_permission_names({"blog": {1: {"name": "posts", "bitwise": 1}}})
        second = catalog.convert_bits_to_permission_names({"blog": {1: {"name": "posts", "bitwise": 1024}}})
        assert second is first
        assert second == {"posts": ("viewown",)}

    def test_converted_result_is_read_only(self) -> None:
        """Callers cannot alter the memoized result seen by later calls."""
        catalog = make_catalog()
        stored = {"blog": {1: {"name": "posts", "bitwise": 1}}}
        first = catalog.convert_bits_to_permission_names(stored)

        with pytest.raises(TypeError):
            first["posts"] = ("full",)  # type: ignore[index]
        with pytest.raises(AttributeError):
            first["posts"].append("editown")  # type: ignore[attr-defined]

        assert catalog.convert_bits_to_permission_names(stored) == {"posts": ("viewown",)}

    def test_convert_absent_area_populates_nothing(self) -> None:
        """Missing area returns {} and a later call still computes."""
        catalog = make_catalog()
        assert catalog.convert_bits_to_permission_names({"shop": {}}) == {}
        assert "blog" not in catalog.cache

        result = catalog.convert_bits_to_permission_names({"blog": {7: {"name": "tags", "bitwise": 1}}})
        assert result == {"tags": ("view",)}
        assert "blog" in catalog.cache

    def test_convert_disabled_area(self) -> None:
        """Disabled areas are skipped and not cached."""
        catalog = make_catalog(enabled=False)
        assert catalog.convert_bits_to_permission_names({"blog": {1: {"name": "posts", "bitwise": 1}}}) == {}
        assert "blog" not in catalog.cache

    def test_shared_cache_is_keyed_by_area(self) -> None:
        """Two catalogs sharing a cache do not see each other's results."""
        cache = LevelNameCache()
        blog = PermissionCatalog(PermissionArea("blog", BLOG_PERMISSIONS), cache=cache)
        shop = PermissionCatalog(PermissionArea("shop", {"orders": {"view": 1}}), cache=cache)
        stored = {
            "blog": {1: {"name": "tags", "bitwise": 3}},
            "shop": {2: {"name": "orders", "bitwise": 1}},
        }
        assert blog.convert_bits_to_permission_names(stored) == {"tags": ("view", "edit")}
        assert shop.convert_bits_to_permission_names(stored) == {"orders": ("view",)}
        assert len(cache) == 2


class TestAnalyzePermissions:
    """Tests for analyze_permissions()."""

    def test_edit_implies_views(self) -> None:
        """Granted edit pulls in viewother and viewown."""
        catalog = make_catalog(permissions={"edit": {"edit": 1, "viewother": 2, "viewown": 4}})
        perms = {"blog:edit": ["edit"]}
        catalog.analyze_permissions(perms)
        assert perms == {"blog:edit": ["edit", "viewother", "viewown"]}

    def test_delete_other_chain(self) -> None:
        """deleteother pulls in editother, viewother and viewown in table order."""
        catalog = make_catalog()
        perms = {"blog:posts": ["deleteother"]}
        catalog.analyze_permissions(perms)
        assert perms["blog:posts"] == ["deleteother", "editother", "viewother", "viewown"]

    def test_own_levels_imply_viewown(self) -> None:
        """*own levels and create pull in viewown only."""
        catalog = make_catalog()
        for level in ("editown", "deleteown", "publishown", "create", "viewother"):
            perms = {"blog:posts": [level]}
            catalog.analyze_permissions(perms)
            assert perms["blog:posts"] == [level, "viewown"]

    def test_existing_entries_not_duplicated(self) -> None:
        """Levels already present are kept in place."""
        catalog = make_catalog()
        perms = {"blog:posts": ["viewown", "publishother"]}
        catalog.analyze_permissions(perms)
        assert perms["blog:posts"] == ["viewown", "publishother", "viewother"]

    def test_unsupported_implied_levels_skipped(self) -> None:
        """Implied levels the permission lacks are not added."""
        catalog = make_catalog()
        perms = {"blog:categories": ["edit", "delete"]}
        catalog.analyze_permissions(perms)
        assert perms["blog:categories"] == ["edit", "delete"]

    def test_other_areas_untouched(self) -> None:
        """Keys of other areas keep their exact value."""
        catalog = make_catalog()
        shop_levels = ["editown"]
        perms = {"shop:posts": shop_levels, "blog:posts": ["editown"]}
        catalog.analyze_permissions(perms)
        assert perms["shop:posts"] is shop_levels
        assert perms["blog:posts"] == ["editown", "viewown"]

    def test_idempotent(self) -> None:
        """Running twice gives the same result as once."""
        catalog = make_catalog()
        perms = {
            "blog:posts": ["delete", "publishown", "create"],
            "blog:categories": ["publish"],
            "blog:tags": [],
        }
        catalog.analyze_permissions(perms)
        once = copy.deepcopy(perms)
        catalog.analyze_permissions(perms)
        assert perms == once

    def test_synonyms_applied_to_implied_levels(self) -> None:
        """Implied names go through synonym resolution before being added."""
        catalog = make_catalog(
            "media",
            {"files": {"view": 1, "editown": 2, "editother": 4}},
            level_synonyms={"viewother": "view", "viewown": "view"},
        )
        perms = {"media:files": ["editother"]}
        catalog.analyze_permissions(perms)
        assert perms["media:files"] == ["editother", "view"]

    def test_custom_implication_table(self) -> None:
        """Areas can replace the default table."""
        catalog = make_catalog(
            "reports",
            {"sales": {"read": 1, "export": 2, "schedule": 4}},
            implications={"schedule": ["export"], "export": ["read"]},
        )
        perms = {"reports:sales": ["schedule"]}
        catalog.analyze_permissions(perms)
        assert perms["reports:sales"] == ["schedule", "export", "read"]

    def test_malformed_key(self) -> None:
        """A key without ':' is rejected and nothing is modified."""
        catalog = make_catalog()
        perms = {"blog:posts": ["edit"], "posts": ["edit"]}
        with pytest.raises(MalformedKeyError) as exc_info:
            catalog.analyze_permissions(perms)
        assert exc_info.value.code == "MALFORMED_KEY"
        assert perms == {"blog:posts": ["edit"], "posts": ["edit"]}


class TestPermissionRatio:
    """Tests for get_permission_ratio()."""

    def test_full_only_level(self) -> None:
        """full as the only level counts as one."""
        catalog = make_catalog(permissions={"article": {"full": 1}})
        assert catalog.get_permission_ratio({"article": ["full"]}) == (1, 1)
        assert catalog.get_permission_ratio({}) == (0, 1)

    def test_full_with_other_levels(self) -> None:
        """full is excluded from availability and credits every other level."""
        catalog = make_catalog(permissions={"article": {"view": 1, "edit": 2, "full": 3}})
        assert catalog.get_permission_ratio({"article": ["full"]}) == (2, 2)
        assert catalog.get_permission_ratio({"article": ["view"]}) == (1, 2)

    def test_sums_across_names(self) -> None:
        """Totals add up over every permission name."""
        catalog = make_catalog()
        # posts 9 + categories 5 + settings 1 + tags 2
        assert catalog.get_permission_ratio({}) == (0, 17)
        assert catalog.get_permission_ratio({"posts": ["full"], "settings": ["full"], "tags": ["view"]}) == (
            11,
            17,
        )

    def test_unknown_levels_not_counted(self) -> None:
        """Granted names the catalog lacks don't count."""
        catalog = make_catalog()
        assert catalog.get_permission_ratio({"posts": ["viewown", "editown", "bogus"], "gone": ["x"]}) == (2, 17)

    def test_monotonic(self) -> None:
        """Granting one more level never lowers the granted count."""
        catalog = make_catalog()
        granted: list[str] = []
        previous, _ = catalog.get_permission_ratio({"posts": granted})
        for level in BLOG_PERMISSIONS["posts"]:
            granted.append(level)
            current, _ = catalog.get_permission_ratio({"posts": list(granted)})
            assert current >= previous
            previous = current


class TestHooks:
    """Tests for build_form() and parse_for_javascript()."""

    def test_defaults_are_noops(self) -> None:
        """Without hooks nothing happens."""
        catalog = make_catalog()
        builder: list = []
        perms: dict = {"posts": ["viewown"]}
        catalog.build_form(builder, {}, {})
        catalog.parse_for_javascript(perms)
        assert builder == []
        assert perms == {"posts": ["viewown"]}

    def test_form_hook_sees_catalog_table(self) -> None:
        """The form hook gets the area and the caller's arguments."""
        calls = []

        def form_hook(area, builder, options, data):
            calls.append((area.get_name(), sorted(area.get_permissions()), options, data))
            builder.append("posts")

        catalog = make_catalog(form_hook=form_hook)
        builder: list = []
        catalog.build_form(builder, {"locale": "en"}, {"posts": ["viewown"]})
        assert builder == ["posts"]
        assert calls == [("blog", ["categories", "posts", "settings", "tags"], {"locale": "en"}, {"posts": ["viewown"]})]

    def test_javascript_hook_mutates(self) -> None:
        """The javascript hook may rewrite the scoring data in place."""

        def js_hook(area, perms):
            perms.pop("settings", None)

        catalog = make_catalog(javascript_hook=js_hook)
        perms = {"posts": ["viewown"], "settings": ["full"]}
        catalog.parse_for_javascript(perms)
        assert perms == {"posts": ["viewown"]}


class TestAreaOverrides:
    """Areas can be subclassed when configuration is not enough."""

    def test_subclass_synonym_and_enabled(self) -> None:
        """Overridden hooks are honored by the catalog."""

        class LegacyBlogArea(PermissionArea):
            def get_synonym(self, name: str, level: str) -> tuple[str, str]:
                if name == "blogposts":
                    name = "posts"
                return name, level

            def is_enabled(self) -> bool:
                return self.params.get("feature_enabled", False)

        catalog = PermissionCatalog(LegacyBlogArea("blog", BLOG_PERMISSIONS, {"feature_enabled": True}))
        assert catalog.is_supported("blogposts", "viewown")
        assert catalog.is_granted({"posts": 1}, "blogposts", "viewown")

        disabled = PermissionCatalog(LegacyBlogArea("blog", BLOG_PERMISSIONS))
        assert not disabled.is_enabled()
