from __future__ import annotations

from typing import Any

from clients.wms_backend_sdk.auth_client import AuthClient
from clients.wms_backend_sdk.http_client import HttpClient


class AdminApiAdapter:
    """Calls the administrative endpoints served by ``app.main``."""

    def __init__(self, http: HttpClient, auth: AuthClient | None = None) -> None:
        self.http = http
        self.auth = auth

    def _token(self) -> str | None:
        return self.auth.access_token() if self.auth is not None else None

    def create_user(
        self,
        email: str,
        password: str,
        name: str,
        role: str,
        permissions: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        payload = self.http.request(
            "POST",
            "/api/admin/create-user",
            token=self._token(),
            json_body={
                "email": email,
                "password": password,
                "name": name,
                "role": role,
                "permissions": permissions or [],
            },
        )
        return payload.get("user") or {}

    def update_password(self, user_id: str, new_password: str) -> dict[str, Any]:
        payload = self.http.request(
            "POST",
            "/api/admin/update-password",
            token=self._token(),
            json_body={"userId": user_id, "newPassword": new_password},
        )
        return payload.get("user") or {}

    def update_user_name(self, user_id: str, name: str) -> dict[str, Any]:
        payload = self.http.request(
            "POST",
            "/api/admin/update-user-name",
            token=self._token(),
            json_body={"userId": user_id, "name": name},
        )
        return payload.get("user") or {}

    def verify_password(self, email: str, password: str) -> bool:
        payload = self.http.request(
            "POST",
            "/api/auth/verify-password",
            json_body={"email": email, "password": password},
        )
        return bool(payload.get("success"))
