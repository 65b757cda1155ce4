from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    VIEWER = "viewer"


class PageId(str, Enum):
    DASHBOARD = "dashboard"
    RACKS = "racks"
    PRODUCTS = "products"
    HISTORY = "history"
    USERS = "users"
    SETTINGS = "settings"


KNOWN_PAGES: tuple[str, ...] = tuple(page.value for page in PageId)
# Profile rows without a role resolve to this non-admin placeholder.
GUEST_ROLE = "guest"


@dataclass(frozen=True)
class Permission:
    page: str
    view: bool = False
    edit: bool = False

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Permission":
        return cls(
            page=str(payload.get("page", "")),
            view=bool(payload.get("view", False)),
            edit=bool(payload.get("edit", False)),
        )

    def to_payload(self) -> dict[str, Any]:
        return {"page": self.page, "view": self.view, "edit": self.edit}


@dataclass(frozen=True)
class UserProfile:
    id: str
    email: str
    name: str
    role: str
    permissions: tuple[Permission, ...] = field(default_factory=tuple)

    @property
    def is_admin(self) -> bool:
        return (self.role or "").strip().lower() == Role.ADMIN.value

    def permission_for(self, page_id: str) -> Permission | None:
        for permission in self.permissions:
            if permission.page == page_id:
                return permission
        return None

    @classmethod
    def from_row(cls, row: dict[str, Any], auth_user: Any | None = None) -> "UserProfile":
        auth_email = getattr(auth_user, "email", "") if auth_user is not None else ""
        auth_metadata = getattr(auth_user, "user_metadata", {}) if auth_user is not None else {}
        email = row.get("email") or auth_email or ""
        name = row.get("name") or (auth_metadata or {}).get("name") or email or "Unknown User"
        raw_permissions = row.get("permissions") or []
        return cls(
            id=str(row.get("id") or getattr(auth_user, "id", "")),
            email=email,
            name=name,
            role=str(row.get("role") or GUEST_ROLE),
            permissions=tuple(
                Permission.from_payload(entry) for entry in raw_permissions if isinstance(entry, dict)
            ),
        )

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "UserProfile":
        return cls.from_row(payload)

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "permissions": [permission.to_payload() for permission in self.permissions],
        }
