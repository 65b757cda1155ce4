from __future__ import annotations

from collections.abc import Iterable

from wms_control.app.domain.models.profile import KNOWN_PAGES, Permission, Role, UserProfile

VIEW = "view"
EDIT = "edit"
PERMISSION_KINDS = (VIEW, EDIT)

# Pages an administrator can grant from the users screen; settings is open to every signed-in user.
MANAGEABLE_PAGES: tuple[str, ...] = ("dashboard", "racks", "products", "history", "users")

PERMISSION_TEMPLATES: dict[str, tuple[Permission, ...]] = {
    "admin": tuple(Permission(page=page, view=True, edit=True) for page in MANAGEABLE_PAGES),
    "manager": tuple(Permission(page=page, view=True, edit=page != "users") for page in MANAGEABLE_PAGES),
    "viewer": tuple(Permission(page=page, view=True, edit=False) for page in MANAGEABLE_PAGES),
}


class PermissionPolicy:
    @staticmethod
    def decide(profile: UserProfile | None, page_id: str, kind: str) -> bool:
        if kind not in PERMISSION_KINDS:
            raise ValueError(f"unknown permission kind: {kind}")
        if profile is None:
            return False
        if profile.is_admin:
            return True
        permission = profile.permission_for(page_id)
        if permission is None:
            return False
        return bool(getattr(permission, kind))

    @staticmethod
    def fallback_profile(user_id: str, email: str | None, grant_admin: bool) -> UserProfile:
        email = email or ""
        name = email.split("@")[0] if email else "Unknown User"
        if grant_admin:
            return UserProfile(
                id=user_id,
                email=email,
                name=name,
                role=Role.ADMIN.value,
                permissions=tuple(Permission(page=page, view=True, edit=True) for page in KNOWN_PAGES),
            )
        return UserProfile(id=user_id, email=email, name=name, role=Role.VIEWER.value, permissions=())


def apply_permission_change(
    permissions: Iterable[Permission], page: str, kind: str, value: bool
) -> list[Permission]:
    if kind not in PERMISSION_KINDS:
        raise ValueError(f"unknown permission kind: {kind}")
    updated: list[Permission] = []
    for permission in permissions:
        if permission.page != page:
            updated.append(permission)
            continue
        view, edit = permission.view, permission.edit
        if kind == VIEW:
            view = value
            if not value:
                edit = False
        else:
            edit = value
            if value:
                view = True
        updated.append(Permission(page=page, view=view, edit=edit))
    return updated


def apply_template(template_id: str) -> list[Permission]:
    try:
        return list(PERMISSION_TEMPLATES[template_id])
    except KeyError:
        raise ValueError(f"unknown permission template: {template_id}") from None


def match_template(permissions: Iterable[Permission]) -> str | None:
    by_page = {permission.page: permission for permission in permissions}
    for template_id, template in PERMISSION_TEMPLATES.items():
        if all(
            (current := by_page.get(entry.page)) is not None
            and current.view == entry.view
            and current.edit == entry.edit
            for entry in template
        ):
            return template_id
    return None


def normalize_permissions(permissions: Iterable[Permission]) -> list[Permission]:
    by_page = {permission.page: permission for permission in permissions}
    return [by_page.get(page, Permission(page=page, view=False, edit=False)) for page in MANAGEABLE_PAGES]
