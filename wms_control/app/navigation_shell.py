from __future__ import annotations

from dataclasses import dataclass

from wms_control.app.application.auth_controller import AuthController


@dataclass(frozen=True)
class NavItem:
    id: str
    label: str
    href: str


NAV_ITEMS: tuple[NavItem, ...] = (
    NavItem("dashboard", "Dashboard", "/dashboard"),
    NavItem("racks", "Racks", "/dashboard/racks"),
    NavItem("products", "Product codes", "/dashboard/products"),
    NavItem("history", "History", "/dashboard/history"),
    NavItem("users", "Users", "/dashboard/users"),
    NavItem("settings", "Settings", "/dashboard/settings"),
)


def accessible_nav_items(auth: AuthController) -> list[NavItem]:
    if auth.is_loading:
        return []
    visible: list[NavItem] = []
    for item in NAV_ITEMS:
        if item.id == "settings":
            if auth.profile is not None:
                visible.append(item)
        elif auth.has_permission(item.id, "view"):
            visible.append(item)
    return visible


def resolve_route(auth: AuthController, href: str) -> NavItem | None:
    for item in accessible_nav_items(auth):
        if item.href == href:
            return item
    return None


def render_shell(auth: AuthController) -> str:
    profile = auth.profile
    header = f"{profile.name} ({profile.role})" if profile else "Not signed in"
    lines = [header]
    for index, item in enumerate(accessible_nav_items(auth), start=1):
        lines.append(f"{index}. {item.label} [{item.href}]")
    return "\n".join(lines)
