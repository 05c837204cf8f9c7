from __future__ import annotations

import copy
from typing import Any, Dict, List, Mapping, NamedTuple, Optional

PermissionMap = Dict[str, Dict[str, bool]]

ROLES = ("super_admin", "admin", "editor")
ACTIONS = ("read", "write", "delete")
RESOURCES = ("projects", "blog", "team", "services", "contacts", "analytics", "settings", "users")


def _grant(read: bool = False, write: bool = False, delete: bool = False) -> Dict[str, bool]:
    return {"read": read, "write": write, "delete": delete}


ROLE_PERMISSIONS: Dict[str, PermissionMap] = {
    "super_admin": {
        "projects": _grant(True, True, True),
        "blog": _grant(True, True, True),
        "team": _grant(True, True, True),
        "services": _grant(True, True, True),
        "contacts": _grant(True, True, True),
        "analytics": _grant(True, True),
        "settings": _grant(True, True),
        "users": _grant(True, True, True),
    },
    "admin": {
        "projects": _grant(True, True, True),
        "blog": _grant(True, True, True),
        "team": _grant(True, True),
        "services": _grant(True, True, True),
        "contacts": _grant(True, True, True),
        "analytics": _grant(True),
        "settings": _grant(True),
    },
    "editor": {
        "projects": _grant(True, True),
        "blog": _grant(True, True),
        "team": _grant(True),
        "services": _grant(True, True),
        "contacts": _grant(True),
        "analytics": _grant(True),
        "settings": _grant(),
    },
}


def role_permissions(role: str) -> PermissionMap:
    # unknown roles fall back to the most restricted template
    return copy.deepcopy(ROLE_PERMISSIONS.get(role) or ROLE_PERMISSIONS["editor"])


def effective_permissions(role: str, overrides: Optional[Mapping[str, Mapping[str, Any]]] = None) -> PermissionMap:
    """Role template with per-user overrides applied on top, per (resource, action)."""
    merged = role_permissions(role)
    for resource, actions in (overrides or {}).items():
        if not isinstance(actions, Mapping):
            continue
        target = merged.setdefault(resource, {})
        for action, allowed in actions.items():
            target[action] = allowed is True
    return merged


def _user_fields(user: Any) -> tuple[Optional[str], Mapping[str, Any]]:
    if user is None:
        return None, {}
    if isinstance(user, Mapping):
        return user.get("role"), user.get("permissions") or {}
    role = getattr(user, "role", None)
    # ORM rows keep only the overrides; API payloads already carry the merged map
    return role, effective_permissions(role, getattr(user, "permissions", None))


def has_permission(user: Any, resource: str, action: str) -> bool:
    role, permissions = _user_fields(user)
    if role == "super_admin":
        return True
    actions = permissions.get(resource)
    if not isinstance(actions, Mapping):
        return False
    return actions.get(action) is True


class NavItem(NamedTuple):
    label: str
    path: str
    resource: Optional[str]
    action: str = "read"


ADMIN_NAVIGATION: List[NavItem] = [
    NavItem("Dashboard", "/admin/dashboard", None),
    NavItem("Projects", "/admin/projects", "projects"),
    NavItem("Blog", "/admin/blog", "blog"),
    NavItem("Team", "/admin/team", "team"),
    NavItem("Services", "/admin/services", "services"),
    NavItem("Contacts", "/admin/contacts", "contacts"),
]


def nav_item_for(path: str) -> Optional[NavItem]:
    for item in ADMIN_NAVIGATION:
        if item.path == path:
            return item
    return None


def visible_navigation(user: Any) -> List[NavItem]:
    return [
        item
        for item in ADMIN_NAVIGATION
        if item.resource is None or has_permission(user, item.resource, item.action)
    ]
