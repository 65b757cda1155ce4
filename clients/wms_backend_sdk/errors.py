from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx


class ErrorKind(str, Enum):
    CREDENTIALS = "credentials"
    PERMISSION = "permission"
    NETWORK = "network"
    VALIDATION = "validation"
    DUPLICATE = "duplicate"
    NOT_FOUND = "not_found"
    UNKNOWN = "unknown"


_CREDENTIAL_CODES = {"invalid_credentials", "invalid_grant", "bad_jwt", "session_not_found"}
_PERMISSION_CODES = {"42501", "not_admin", "insufficient_privilege"}
_DUPLICATE_CODES = {"email_exists", "user_already_exists", "phone_exists", "23505"}
_NOT_FOUND_CODES = {"PGRST116", "user_not_found"}


@dataclass
class BackendError(Exception):
    code: str
    message: str
    kind: ErrorKind = ErrorKind.UNKNOWN
    details: dict[str, Any] | list[Any] | str | None = None
    status_code: int | None = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    @classmethod
    def network(cls, exc: Exception) -> "BackendError":
        return cls(
            code="NETWORK_ERROR",
            message="Network error while calling the backend",
            kind=ErrorKind.NETWORK,
            details=str(exc),
            status_code=None,
        )

    @classmethod
    def from_http_response(cls, response: httpx.Response) -> "BackendError":
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not isinstance(payload, dict):
            return cls(
                code="HTTP_ERROR",
                message=response.text or "HTTP request failed",
                kind=classify(response.status_code, None),
                details=payload,
                status_code=response.status_code,
            )

        # auth endpoints answer {error_code, msg} or {error, error_description};
        # table endpoints answer {code, message, details, hint};
        # the admin endpoints answer {success, error, code, details, trace_id}.
        code = payload.get("error_code") or payload.get("code") or payload.get("error") or "HTTP_ERROR"
        code = str(code)
        message = (
            payload.get("msg")
            or payload.get("message")
            or payload.get("error_description")
            or (payload.get("error") if payload.get("code") else None)
            or response.text
            or "HTTP request failed"
        )
        return cls(
            code=code,
            message=str(message),
            kind=classify(response.status_code, code),
            details=payload.get("details") or payload.get("hint"),
            status_code=response.status_code,
        )


def classify(status_code: int | None, code: str | None) -> ErrorKind:
    if code in _DUPLICATE_CODES:
        return ErrorKind.DUPLICATE
    if code in _PERMISSION_CODES:
        return ErrorKind.PERMISSION
    if code in _CREDENTIAL_CODES:
        return ErrorKind.CREDENTIALS
    if code in _NOT_FOUND_CODES:
        return ErrorKind.NOT_FOUND

    if status_code is None:
        return ErrorKind.NETWORK
    if status_code == 401:
        return ErrorKind.CREDENTIALS
    if status_code == 403:
        return ErrorKind.PERMISSION
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code == 409:
        return ErrorKind.DUPLICATE
    if status_code in {400, 422}:
        return ErrorKind.VALIDATION
    if status_code >= 500:
        return ErrorKind.NETWORK
    return ErrorKind.UNKNOWN
