from __future__ import annotations

import logging
from dataclasses import asdict

from clients.wms_backend_sdk.auth_store import AuthUser
from clients.wms_backend_sdk.errors import BackendError, ErrorKind
from app.wms.core.error_catalog import AppError, ErrorCatalog
from app.wms.core.logging import log_json
from app.wms.schemas.admin import CreateUserRequest
from app.wms.services.backend import BackendGateway

logger = logging.getLogger("wms.admin_users")

USERS_TABLE = "users"


def _backend_failure(error: BackendError, action: str) -> AppError:
    log_json(
        logger,
        {"event": "backend_call_failed", "action": action, "code": error.code, "kind": error.kind.value},
        level=logging.WARNING,
    )
    if error.kind is ErrorKind.DUPLICATE:
        return AppError(ErrorCatalog.EMAIL_ALREADY_REGISTERED)
    if error.kind is ErrorKind.NETWORK:
        return AppError(ErrorCatalog.BACKEND_ERROR, details={"backend_code": error.code, "kind": error.kind.value})
    return AppError(ErrorCatalog.BACKEND_REJECTED, details={"backend_code": error.code, "message": error.message})


def _auth_user_payload(user: AuthUser) -> dict:
    return asdict(user)


class AdminUserService:
    def __init__(self, gateway: BackendGateway) -> None:
        self.gateway = gateway

    def create_user(self, payload: CreateUserRequest) -> dict:
        try:
            auth_user = self.gateway.admin.auth_admin.create_user(
                email=payload.email,
                password=payload.password,
                user_metadata={"name": payload.name, "role": payload.role},
                email_confirm=True,
            )
        except BackendError as error:
            raise _backend_failure(error, "create_user") from error
        if not auth_user.id:
            raise AppError(ErrorCatalog.BACKEND_REJECTED, details={"message": "no user returned"})

        permissions = [entry.model_dump() for entry in payload.permissions]
        profile = {
            "id": auth_user.id,
            "email": payload.email,
            "name": payload.name,
            "role": payload.role,
            "permissions": permissions,
        }
        try:
            self.gateway.admin.tables.insert(USERS_TABLE, profile)
        except BackendError as error:
            # The auth account exists even when the profile row could not be written.
            log_json(
                logger,
                {"event": "profile_insert_failed", "user_id": auth_user.id, "code": error.code},
                level=logging.WARNING,
            )
        log_json(logger, {"event": "user_created", "user_id": auth_user.id, "role": payload.role})
        return profile

    def update_password(self, user_id: str, new_password: str) -> dict:
        try:
            auth_user = self.gateway.admin.auth_admin.update_user_by_id(user_id, {"password": new_password})
        except BackendError as error:
            raise _backend_failure(error, "update_password") from error
        log_json(logger, {"event": "password_updated", "user_id": user_id})
        return _auth_user_payload(auth_user)

    def update_user_name(self, user_id: str, name: str) -> dict:
        try:
            auth_user = self.gateway.admin.auth_admin.update_user_by_id(user_id, {"user_metadata": {"name": name}})
        except BackendError as error:
            raise _backend_failure(error, "update_user_name") from error
        try:
            self.gateway.admin.tables.update(USERS_TABLE, {"name": name}, filters={"id": user_id})
        except BackendError as error:
            log_json(
                logger,
                {"event": "profile_name_update_failed", "user_id": user_id, "code": error.code},
                level=logging.WARNING,
            )
        log_json(logger, {"event": "user_name_updated", "user_id": user_id})
        return _auth_user_payload(auth_user)

    def verify_password(self, email: str, password: str) -> None:
        auth = self.gateway.public_auth()
        try:
            auth.sign_in_with_password(email, password)
        except BackendError as error:
            if error.kind is ErrorKind.NETWORK:
                raise _backend_failure(error, "verify_password") from error
            log_json(logger, {"event": "password_verification_failed", "code": error.code}, level=logging.WARNING)
            raise AppError(ErrorCatalog.INVALID_CREDENTIALS) from error
        try:
            auth.sign_out()
        except BackendError as error:
            log_json(logger, {"event": "verification_sign_out_failed", "code": error.code}, level=logging.WARNING)

    def probe(self) -> None:
        self.gateway.admin.tables.select(USERS_TABLE, columns="id", limit=1)
