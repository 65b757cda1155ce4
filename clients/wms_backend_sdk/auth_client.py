from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from enum import Enum

from clients.wms_backend_sdk.auth_store import AuthSession, AuthStore, AuthUser
from clients.wms_backend_sdk.errors import BackendError, ErrorKind
from clients.wms_backend_sdk.http_client import HttpClient
from clients.wms_backend_sdk.realtime import Subscription

AUTH_PREFIX = "/auth/v1"

logger = logging.getLogger("wms_backend_sdk.auth")


class AuthChangeEvent(str, Enum):
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"


AuthListener = Callable[[AuthChangeEvent, AuthSession | None], None]


class AuthClient:
    def __init__(
        self,
        http_client: HttpClient,
        auth_store: AuthStore | None = None,
        now: Callable[[], float] | None = None,
    ) -> None:
        self.http_client = http_client
        self._now = now or time.time
        self.auth_store = auth_store or AuthStore(now=self._now)
        self._lock = threading.Lock()
        self._listeners: dict[int, AuthListener] = {}
        self._next_listener_id = 0

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        payload = self.http_client.request(
            "POST",
            f"{AUTH_PREFIX}/token",
            params={"grant_type": "password"},
            json_body={"email": email, "password": password},
        )
        session = AuthSession.from_token_response(payload, now=self._now())
        if not session.access_token or not session.user.id:
            raise BackendError(
                code="SESSION_MISSING",
                message="Sign-in returned no session",
                kind=ErrorKind.CREDENTIALS,
                status_code=None,
            )
        self.auth_store.set_session(session)
        self._emit(AuthChangeEvent.SIGNED_IN, session)
        return session

    def sign_out(self) -> None:
        session = self.auth_store.get_session()
        try:
            if session is not None:
                self.http_client.request("POST", f"{AUTH_PREFIX}/logout", token=session.access_token)
        finally:
            self.auth_store.clear()
            self._emit(AuthChangeEvent.SIGNED_OUT, None)

    def get_session(self) -> AuthSession | None:
        session = self.auth_store.get_session()
        if session is None:
            return None
        if not session.is_expired(self._now()):
            return session
        if not session.refresh_token:
            self.auth_store.clear()
            return None
        return self.refresh_session()

    def refresh_session(self) -> AuthSession | None:
        session = self.auth_store.get_session()
        if session is None or not session.refresh_token:
            return None
        try:
            payload = self.http_client.request(
                "POST",
                f"{AUTH_PREFIX}/token",
                params={"grant_type": "refresh_token"},
                json_body={"refresh_token": session.refresh_token},
            )
        except BackendError as error:
            if error.kind is ErrorKind.CREDENTIALS:
                self.auth_store.clear()
                self._emit(AuthChangeEvent.SIGNED_OUT, None)
                return None
            raise
        refreshed = AuthSession.from_token_response(payload, now=self._now())
        self.auth_store.set_session(refreshed)
        self._emit(AuthChangeEvent.TOKEN_REFRESHED, refreshed)
        return refreshed

    def access_token(self) -> str | None:
        return self.auth_store.get_token()

    def on_auth_state_change(self, listener: AuthListener, emit_initial: bool = True) -> Subscription:
        with self._lock:
            listener_id = self._next_listener_id
            self._next_listener_id += 1
            self._listeners[listener_id] = listener

        def _remove() -> None:
            with self._lock:
                self._listeners.pop(listener_id, None)

        subscription = Subscription(_remove)
        if emit_initial:
            listener(AuthChangeEvent.INITIAL_SESSION, self.auth_store.get_session())
        return subscription

    def _emit(self, event: AuthChangeEvent, session: AuthSession | None) -> None:
        with self._lock:
            listeners = list(self._listeners.values())
        for listener in listeners:
            try:
                listener(event, session)
            except Exception:
                logger.exception("auth listener failed for event=%s", event.value)


class AdminAuthClient:
    """Privileged user management; requires the service role key."""

    def __init__(self, http_client: HttpClient) -> None:
        self.http_client = http_client

    def create_user(
        self,
        email: str,
        password: str,
        user_metadata: dict | None = None,
        email_confirm: bool = True,
    ) -> AuthUser:
        payload = self.http_client.request(
            "POST",
            f"{AUTH_PREFIX}/admin/users",
            json_body={
                "email": email,
                "password": password,
                "email_confirm": email_confirm,
                "user_metadata": user_metadata or {},
            },
        )
        return AuthUser.from_payload(payload.get("user") or payload)

    def update_user_by_id(self, user_id: str, attributes: dict) -> AuthUser:
        payload = self.http_client.request("PUT", f"{AUTH_PREFIX}/admin/users/{user_id}", json_body=attributes)
        return AuthUser.from_payload(payload.get("user") or payload)
