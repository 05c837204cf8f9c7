from types import SimpleNamespace

from backend.agency.services.permissions import (
    ACTIONS,
    RESOURCES,
    effective_permissions,
    has_permission,
    nav_item_for,
    role_permissions,
    visible_navigation,
)


def test_super_admin_allowed_everything_even_with_empty_map():
    user = {"role": "super_admin", "permissions": {}}
    for resource in RESOURCES:
        for action in ACTIONS:
            assert has_permission(user, resource, action)


def test_editor_template():
    editor = {"role": "editor", "permissions": role_permissions("editor")}
    assert has_permission(editor, "projects", "write")
    assert not has_permission(editor, "projects", "delete")
    assert has_permission(editor, "team", "read")
    assert not has_permission(editor, "team", "write")
    assert not has_permission(editor, "settings", "read")


def test_admin_template():
    admin = {"role": "admin", "permissions": role_permissions("admin")}
    assert has_permission(admin, "blog", "delete")
    assert not has_permission(admin, "team", "delete")
    assert has_permission(admin, "analytics", "read")
    assert not has_permission(admin, "settings", "write")


def test_missing_resource_or_non_boolean_is_denied():
    user = {"role": "admin", "permissions": {"projects": {"read": "yes"}}}
    assert not has_permission(user, "projects", "read")
    assert not has_permission(user, "unknown", "read")
    assert not has_permission(None, "projects", "read")


def test_role_permissions_returns_copy():
    perms = role_permissions("editor")
    perms["projects"]["delete"] = True
    assert role_permissions("editor")["projects"]["delete"] is False


def test_overrides_merge_over_role_template():
    merged = effective_permissions("editor", {"team": {"write": True}, "projects": {"write": False}})
    assert merged["team"] == {"read": True, "write": True, "delete": False}
    assert merged["projects"]["write"] is False
    assert merged["blog"]["write"] is True


def test_orm_user_uses_effective_permissions():
    user = SimpleNamespace(role="editor", permissions={"contacts": {"read": False}})
    assert has_permission(user, "projects", "read")
    assert not has_permission(user, "contacts", "read")


def test_navigation_filtered_by_permission():
    user = {"role": "editor", "permissions": effective_permissions("editor", {"contacts": {"read": False}})}
    labels = [item.label for item in visible_navigation(user)]
    assert labels == ["Dashboard", "Projects", "Blog", "Team", "Services"]
    assert [item.label for item in visible_navigation({"role": "super_admin"})][-1] == "Contacts"


def test_nav_item_lookup():
    assert nav_item_for("/admin/blog").resource == "blog"
    assert nav_item_for("/admin/dashboard").resource is None
    assert nav_item_for("/admin/unknown") is None
