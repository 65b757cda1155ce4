from __future__ import annotations

from typing import Any

from clients.wms_backend_sdk.errors import BackendError, ErrorKind
from wms_control.app.application.auth_controller import AuthController
from wms_control.app.application.data_cache_controller import DataCacheController
from wms_control.app.application.use_cases.result import UseCaseResult
from wms_control.app.domain.models.profile import Permission
from wms_control.app.domain.models.records import UserRecord
from wms_control.app.infrastructure.errors.error_mapper import ErrorMapper
from wms_control.app.infrastructure.logging.logger import get_logger, log_action
from wms_control.app.infrastructure.sdk_adapter.admin_api_adapter import AdminApiAdapter
from wms_control.app.ui.forms import validate_user_form

USERS_PAGE = "users"

logger = get_logger("wms_control.users")


def _permission_payloads(permissions: list[Permission] | None) -> list[dict[str, Any]]:
    return [permission.to_payload() for permission in permissions or []]


class ManageUsersUseCase:
    def __init__(self, auth: AuthController, cache: DataCacheController, admin_api: AdminApiAdapter) -> None:
        self.auth = auth
        self.cache = cache
        self.admin_api = admin_api

    def _log(self, action: str, user_id: str | None, outcome: str, **extra) -> None:
        actor = self.auth.profile
        log_action(
            logger,
            module=USERS_PAGE,
            action=action,
            actor_role=actor.role if actor else None,
            user_id=user_id,
            outcome=outcome,
            **extra,
        )

    def create_user(
        self,
        name: str,
        email: str,
        password: str,
        role: str,
        permissions: list[Permission] | None = None,
    ) -> UseCaseResult:
        form = validate_user_form(name, email, password, self.cache.snapshot().users)
        if not form.is_valid:
            return UseCaseResult.invalid(form.field_errors)
        if not self.auth.has_permission(USERS_PAGE, "edit"):
            return UseCaseResult.denied(USERS_PAGE)

        values = {
            "name": form.values["name"],
            "email": form.values["email"],
            "role": role,
            "status": "active",
            "permissions": list(permissions or []),
        }
        try:
            created = self.admin_api.create_user(
                email=values["email"],
                password=form.values["password"],
                name=values["name"],
                role=role,
                permissions=_permission_payloads(permissions),
            )
        except BackendError as error:
            if error.kind in (ErrorKind.DUPLICATE, ErrorKind.VALIDATION):
                self._log("create_user", None, f"rejected:{error.kind.value}", code=error.code)
                payload = ErrorMapper.to_payload(error)
                return UseCaseResult(success=False, code=payload["code"], message=payload["message"])
            logger.warning("create-user endpoint failed; creating a local user code=%s", error.code)
            record = self.cache.add_user(values)
            self._log("create_user", record.id, "local_only", code=error.code)
            return UseCaseResult(
                success=True,
                code="SIGN_IN_LIMITED",
                message="User saved, but sign-in is unavailable until the account is created on the server.",
                record=record,
            )

        record = UserRecord(
            id=str(created.get("id", "")),
            email=values["email"],
            name=values["name"],
            role=role,
            status="active",
            permissions=tuple(permissions or ()),
        )
        self.cache.record_user(record)
        self._log("create_user", record.id, "success")
        return UseCaseResult(success=True, message=f"User {record.name} created.", record=record)

    def update_user(
        self,
        user_id: str,
        name: str,
        email: str,
        role: str,
        permissions: list[Permission] | None = None,
        password: str | None = None,
    ) -> UseCaseResult:
        form = validate_user_form(name, email, password, self.cache.snapshot().users, editing_id=user_id)
        if not form.is_valid:
            return UseCaseResult.invalid(form.field_errors)
        if not self.auth.has_permission(USERS_PAGE, "edit"):
            return UseCaseResult.denied(USERS_PAGE)

        current = next((user for user in self.cache.snapshot().users if user.id == user_id), None)
        updates: dict[str, Any] = {"name": form.values["name"], "email": form.values["email"], "role": role}
        if permissions is not None:
            updates["permissions"] = list(permissions)
        record = self.cache.update_user(user_id, updates)
        if record is None:
            return UseCaseResult(success=False, code="NOT_FOUND", message="User not found.")

        persisted = not record.is_pending
        if persisted and current is not None and current.name != record.name:
            try:
                self.admin_api.update_user_name(user_id, record.name)
            except BackendError as error:
                logger.warning("auth metadata name update failed user_id=%s code=%s", user_id, error.code)

        if persisted and form.values["password"]:
            try:
                self.admin_api.update_password(user_id, form.values["password"])
            except BackendError as error:
                self._log("update_password", user_id, f"failed:{error.kind.value}", code=error.code)
                return UseCaseResult(
                    success=False,
                    code=ErrorMapper.to_payload(error)["code"],
                    message="User saved, but the password was not changed.",
                    record=record,
                )
        self._log("update_user", user_id, "success")
        return UseCaseResult(success=True, message=f"User {record.name} updated.", record=record)

    def update_permissions(self, user_id: str, permissions: list[Permission]) -> UseCaseResult:
        if not self.auth.has_permission(USERS_PAGE, "edit"):
            return UseCaseResult.denied(USERS_PAGE)
        record = self.cache.update_user(user_id, {"permissions": list(permissions)})
        if record is None:
            return UseCaseResult(success=False, code="NOT_FOUND", message="User not found.")
        self._log("update_permissions", user_id, "success")
        return UseCaseResult(success=True, message=f"Permissions for {record.name} updated.", record=record)

    def toggle_status(self, user_id: str) -> UseCaseResult:
        if not self.auth.has_permission(USERS_PAGE, "edit"):
            return UseCaseResult.denied(USERS_PAGE)
        current = next((user for user in self.cache.snapshot().users if user.id == user_id), None)
        if current is None:
            return UseCaseResult(success=False, code="NOT_FOUND", message="User not found.")
        status = "inactive" if current.status == "active" else "active"
        record = self.cache.update_user(user_id, {"status": status})
        self._log("toggle_status", user_id, status)
        return UseCaseResult(success=True, message=f"User {current.name} is now {status}.", record=record)

    def delete_user(self, user_id: str) -> UseCaseResult:
        if not self.auth.has_permission(USERS_PAGE, "edit"):
            return UseCaseResult.denied(USERS_PAGE)
        self.cache.delete_user(user_id)
        self._log("delete_user", user_id, "success")
        return UseCaseResult(success=True, message="User deleted.")
