"""Session/Auth controller.

Tracks who is signed in and answers permission checks for the navigation
shell and the CRUD screens. The controller is a small state machine::

    UNINITIALIZED -> INITIALIZING -> AUTHENTICATED | ANONYMOUS
    AUTHENTICATED <-> ANONYMOUS      (sign-in / sign-out events)

Initialization races the first session lookup against a safety timeout; a
one-shot guard makes whichever finishes first win and the other a no-op.
Backend auth events are authoritative for the signed-in profile, so the return
value of :meth:`AuthController.login` and the ``SIGNED_IN`` event may arrive
in either order.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum

from clients.wms_backend_sdk.auth_client import AuthChangeEvent, AuthClient
from clients.wms_backend_sdk.auth_store import AuthSession, AuthUser
from clients.wms_backend_sdk.errors import BackendError, ErrorKind
from clients.wms_backend_sdk.realtime import Subscription
from wms_control.app.config import AppConfig
from wms_control.app.domain.models.profile import UserProfile
from wms_control.app.domain.policies.permission_policy import PERMISSION_KINDS, PermissionPolicy
from wms_control.app.infrastructure.logging.logger import get_logger, log_action
from wms_control.app.infrastructure.sdk_adapter.warehouse_adapter import WarehouseAdapter
from wms_control.app.local_mirror import PROFILE_KEY, ROLE_KEY, SESSION_MARKER_KEY, LocalMirror
from wms_control.app.scheduler import Scheduler, TimerHandle

LOGIN_ROUTE = "/login"
DASHBOARD_ROUTE = "/dashboard"
LOGIN_LOADING_TIMEOUT_SECONDS = 3.0

logger = get_logger("wms_control.auth")


class AuthState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


AuthListener = Callable[["AuthController"], None]


class AuthController:
    def __init__(
        self,
        auth: AuthClient,
        profiles: WarehouseAdapter,
        mirror: LocalMirror,
        scheduler: Scheduler,
        config: AppConfig | None = None,
        navigate: Callable[[str], None] | None = None,
    ) -> None:
        self.auth = auth
        self.profiles = profiles
        self.mirror = mirror
        self.scheduler = scheduler
        self.config = config or AppConfig()
        self._navigate = navigate
        self.last_route: str | None = None

        self._lock = threading.RLock()
        self._state = AuthState.UNINITIALIZED
        self._profile: UserProfile | None = None
        self._is_loading = False
        self._initialization_complete = False
        self._logout_pending = False
        self._alive = True
        self._subscription: Subscription | None = None
        self._safety_timer: TimerHandle | None = None
        self._login_timer: TimerHandle | None = None
        self._listeners: list[AuthListener] = []

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def profile(self) -> UserProfile | None:
        return self._profile

    @property
    def is_loading(self) -> bool:
        with self._lock:
            return self._is_loading or self._state in (AuthState.UNINITIALIZED, AuthState.INITIALIZING)

    @property
    def is_initialized(self) -> bool:
        return self._initialization_complete

    def add_listener(self, listener: AuthListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def _remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _remove

    def start(self) -> None:
        with self._lock:
            if self._state is not AuthState.UNINITIALIZED or not self._alive:
                return
            seeded = self.mirror.read(PROFILE_KEY)
            if isinstance(seeded, dict) and seeded.get("id"):
                self._profile = UserProfile.from_payload(seeded)
                logger.info("seeded profile from local mirror user_id=%s", self._profile.id)
            self._state = AuthState.INITIALIZING
            self._is_loading = True
            self._subscription = self.auth.on_auth_state_change(self._on_auth_event, emit_initial=False)
            self._safety_timer = self.scheduler.call_later(
                self.config.init_safety_timeout_seconds, self._on_safety_timeout
            )
            self.scheduler.call_later(0, self._initialize)
        logger.info("auth state -> %s", AuthState.INITIALIZING.value)
        self._notify()

    def close(self) -> None:
        with self._lock:
            if not self._alive:
                return
            self._alive = False
            self._initialization_complete = True
            for handle in (self._safety_timer, self._login_timer):
                if handle is not None:
                    handle.cancel()
            self._safety_timer = None
            self._login_timer = None
            subscription, self._subscription = self._subscription, None
            self._listeners.clear()
        if subscription is not None:
            subscription.unsubscribe()

    def login(self, identifier: str, secret: str) -> bool:
        with self._lock:
            if not self._alive:
                return False
            self._is_loading = True
        self._notify()
        try:
            session = self.auth.sign_in_with_password(identifier, secret)
        except BackendError as error:
            level = logging.WARNING if error.kind is ErrorKind.CREDENTIALS else logging.ERROR
            log_action(
                logger,
                module="auth",
                action="login",
                actor_role=None,
                user_id=None,
                outcome=f"rejected:{error.kind.value}",
                level=level,
                code=error.code,
            )
            with self._lock:
                self._is_loading = False
            self._notify()
            return False

        log_action(logger, module="auth", action="login", actor_role=None, user_id=session.user.id, outcome="success")
        with self._lock:
            # SIGNED_IN normally clears the loading flag; this covers an event that never arrives.
            if self._alive and self._is_loading:
                self._login_timer = self.scheduler.call_later(LOGIN_LOADING_TIMEOUT_SECONDS, self._on_login_timeout)
        return True

    def logout(self) -> None:
        with self._lock:
            if self._logout_pending:
                logger.info("logout already in progress; skipping")
                return
            if not self._alive:
                return
            self._logout_pending = True
            self._is_loading = True
            actor = self._profile
            self._profile = None
            self._state = AuthState.ANONYMOUS
        self._clear_local_profile()
        self._notify()
        try:
            self.auth.sign_out()
        except BackendError as error:
            logger.error("backend sign-out failed code=%s kind=%s", error.code, error.kind.value)
        finally:
            with self._lock:
                self._logout_pending = False
                self._is_loading = False
            log_action(
                logger,
                module="auth",
                action="logout",
                actor_role=actor.role if actor else None,
                user_id=actor.id if actor else None,
                outcome="success",
            )
            if self.last_route != LOGIN_ROUTE:
                self._go(LOGIN_ROUTE)
            self._notify()

    def force_logout(self) -> None:
        logger.warning("emergency logout; clearing the whole local mirror")
        with self._lock:
            self._profile = None
            self._state = AuthState.ANONYMOUS
            self._is_loading = False
        self.auth.auth_store.clear()
        self.mirror.clear()
        self._go(LOGIN_ROUTE)
        self._notify()

    def has_permission(self, page_id: str, kind: str) -> bool:
        if kind not in PERMISSION_KINDS:
            raise ValueError(f"unknown permission kind: {kind}")
        with self._lock:
            if self._logout_pending and self._profile is None:
                return False
            if self._state in (AuthState.UNINITIALIZED, AuthState.INITIALIZING):
                return True
            profile = self._profile
        return PermissionPolicy.decide(profile, page_id, kind)

    def _initialize(self) -> None:
        if not self._alive or self._initialization_complete:
            return
        try:
            session = self.auth.get_session()
        except BackendError as error:
            logger.error("session lookup failed code=%s kind=%s", error.code, error.kind.value)
            session = None
        with self._lock:
            if not self._alive or self._initialization_complete:
                logger.info("session lookup finished after initialization; ignoring")
                return
        profile = self._resolve_profile(session.user if session else None)
        with self._lock:
            if not self._alive or self._initialization_complete:
                return
            self._profile = profile
            self._complete_initialization_locked()
        self._persist_profile(profile)
        self._notify()

    def _on_safety_timeout(self) -> None:
        with self._lock:
            if not self._alive or self._initialization_complete:
                return
            logger.warning(
                "initialization not finished after %.1fs; forcing completion",
                self.config.init_safety_timeout_seconds,
            )
            self._complete_initialization_locked()
        self._notify()

    def _on_login_timeout(self) -> None:
        with self._lock:
            self._login_timer = None
            if not self._alive or not self._is_loading:
                return
            logger.warning("no sign-in event after login; clearing loading flag")
            self._is_loading = False
        self._notify()

    def _on_auth_event(self, event: AuthChangeEvent, session: AuthSession | None) -> None:
        if not self._alive:
            return
        if event is AuthChangeEvent.INITIAL_SESSION and self._initialization_complete:
            return
        logger.info("auth event %s user_id=%s", event.value, session.user.id if session else None)
        profile = self._resolve_profile(session.user if session else None)
        with self._lock:
            if not self._alive:
                return
            self._profile = profile
            if self._initialization_complete:
                self._state = AuthState.AUTHENTICATED if profile else AuthState.ANONYMOUS
            if event in (AuthChangeEvent.SIGNED_IN, AuthChangeEvent.SIGNED_OUT):
                self._is_loading = False
                if self._login_timer is not None:
                    self._login_timer.cancel()
                    self._login_timer = None
        self._persist_profile(profile)
        if event is AuthChangeEvent.SIGNED_OUT:
            self._go(LOGIN_ROUTE)
        elif event is AuthChangeEvent.SIGNED_IN and profile is not None and self.last_route in (None, LOGIN_ROUTE):
            self._go(DASHBOARD_ROUTE)
        self._notify()

    def _resolve_profile(self, user: AuthUser | None) -> UserProfile | None:
        if user is None or not user.id:
            return None
        try:
            row = self.profiles.fetch_profile(user.id)
        except BackendError as error:
            if error.kind in (ErrorKind.PERMISSION, ErrorKind.NOT_FOUND):
                logger.warning(
                    "profile lookup unavailable user_id=%s code=%s kind=%s", user.id, error.code, error.kind.value
                )
            else:
                logger.error("profile lookup failed user_id=%s code=%s kind=%s", user.id, error.code, error.kind.value)
            return self._fallback_profile(user)
        if not row:
            logger.warning("no profile row for user_id=%s", user.id)
            return self._fallback_profile(user)
        return UserProfile.from_row(row, auth_user=user)

    def _fallback_profile(self, user: AuthUser) -> UserProfile:
        grant_admin = self.config.fallback_admin_profile
        if grant_admin:
            logger.warning("granting fallback admin profile to user_id=%s", user.id)
        return PermissionPolicy.fallback_profile(user.id, user.email, grant_admin=grant_admin)

    def _complete_initialization_locked(self) -> None:
        self._initialization_complete = True
        self._is_loading = False
        if self._safety_timer is not None:
            self._safety_timer.cancel()
            self._safety_timer = None
        self._state = AuthState.AUTHENTICATED if self._profile else AuthState.ANONYMOUS
        logger.info("auth state -> %s", self._state.value)

    def _persist_profile(self, profile: UserProfile | None) -> None:
        if profile is None:
            self._clear_local_profile()
            return
        self.mirror.write(PROFILE_KEY, profile.to_payload())
        self.mirror.write(ROLE_KEY, profile.role)
        self.mirror.write_marker(SESSION_MARKER_KEY, profile.id)

    def _clear_local_profile(self) -> None:
        for key in (PROFILE_KEY, ROLE_KEY, SESSION_MARKER_KEY):
            self.mirror.remove(key)

    def _go(self, route: str) -> None:
        self.last_route = route
        if self._navigate is not None:
            self._navigate(route)

    def _notify(self) -> None:
        with self._lock:
            if not self._alive:
                return
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(self)
            except Exception:
                logger.exception("auth listener failed")
