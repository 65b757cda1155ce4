from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: str | None = None
    user_metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "AuthUser":
        return cls(
            id=str(payload.get("id") or ""),
            email=payload.get("email"),
            user_metadata=dict(payload.get("user_metadata") or {}),
        )


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    refresh_token: str | None
    expires_at: float | None
    user: AuthUser

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and self.expires_at <= now

    @classmethod
    def from_token_response(cls, payload: dict[str, Any], now: float) -> "AuthSession":
        expires_at = payload.get("expires_at")
        if expires_at is None and payload.get("expires_in") is not None:
            expires_at = now + float(payload["expires_in"])
        return cls(
            access_token=str(payload.get("access_token") or ""),
            refresh_token=payload.get("refresh_token"),
            expires_at=float(expires_at) if expires_at is not None else None,
            user=AuthUser.from_payload(payload.get("user") or {}),
        )


class AuthStore:
    def __init__(self, now: Callable[[], float] | None = None) -> None:
        self._now = now or time.time
        self._lock = threading.Lock()
        self._session: AuthSession | None = None

    def set_session(self, session: AuthSession) -> None:
        with self._lock:
            self._session = session

    def get_session(self) -> AuthSession | None:
        with self._lock:
            return self._session

    def get_token(self) -> str | None:
        session = self.get_session()
        if session is None or session.is_expired(self._now()):
            return None
        return session.access_token

    def clear(self) -> None:
        with self._lock:
            self._session = None
