from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from wms_control.app.domain.models.records import UserRecord

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


@dataclass
class FormResult:
    values: dict[str, Any]
    field_errors: dict[str, str]

    @property
    def first_invalid_field(self) -> str | None:
        return next(iter(self.field_errors), None)

    @property
    def is_valid(self) -> bool:
        return len(self.field_errors) == 0


def _normalize_required_text(value: str | None) -> str:
    return (value or "").strip()


def validate_login_form(email: str | None, password: str | None) -> FormResult:
    normalized_email = _normalize_required_text(email)
    field_errors: dict[str, str] = {}
    if not normalized_email:
        field_errors["email"] = "Email is required."
    elif not EMAIL_REGEX.match(normalized_email):
        field_errors["email"] = "Enter a valid email address."
    if not password:
        field_errors["password"] = "Password is required."
    return FormResult(values={"email": normalized_email, "password": password or ""}, field_errors=field_errors)


def validate_user_form(
    name: str | None,
    email: str | None,
    password: str | None,
    existing_users: Iterable[UserRecord],
    editing_id: str | None = None,
) -> FormResult:
    normalized_name = _normalize_required_text(name)
    normalized_email = _normalize_required_text(email)
    password = password or ""

    field_errors: dict[str, str] = {}
    if not normalized_name:
        field_errors["name"] = "Name is required."

    if not normalized_email:
        field_errors["email"] = "Email is required."
    elif not EMAIL_REGEX.match(normalized_email):
        field_errors["email"] = "Enter a valid email address."
    elif any(user.email == normalized_email and user.id != editing_id for user in existing_users):
        field_errors["email"] = "This email is already in use."

    if editing_id is None and not password.strip():
        field_errors["password"] = "Password is required."
    elif password.strip() and len(password) < MIN_PASSWORD_LENGTH:
        field_errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters."

    return FormResult(
        values={"name": normalized_name, "email": normalized_email, "password": password},
        field_errors=field_errors,
    )
