from __future__ import annotations

import pytest

from clients.wms_backend_sdk.auth_client import AuthChangeEvent
from clients.wms_backend_sdk.errors import BackendError, ErrorKind
from tests.fakes import StubAuth, StubProfiles, make_session
from wms_control.app.application.auth_controller import (
    DASHBOARD_ROUTE,
    LOGIN_ROUTE,
    AuthController,
    AuthState,
)
from wms_control.app.config import AppConfig
from wms_control.app.domain.models.profile import KNOWN_PAGES
from wms_control.app.infrastructure.sdk_adapter.warehouse_adapter import WarehouseAdapter
from wms_control.app.local_mirror import PROFILE_KEY, ROLE_KEY, SESSION_MARKER_KEY


def _controller(auth, profiles, mirror, scheduler, **config) -> AuthController:
    routes = []
    controller = AuthController(
        auth=auth,
        profiles=profiles,
        mirror=mirror,
        scheduler=scheduler,
        config=AppConfig(**config),
        navigate=routes.append,
    )
    controller.routes = routes
    return controller


def _viewer_row(user_id="u1", **permissions):
    return {
        "id": user_id,
        "email": "ana@example.com",
        "name": "Ana",
        "role": "viewer",
        "permissions": [{"page": page, "view": True, "edit": edit} for page, edit in permissions.items()],
    }


@pytest.mark.parametrize("page", KNOWN_PAGES + ("unknown-page",))
@pytest.mark.parametrize("kind", ["view", "edit"])
def test_fail_open_while_initializing(page, kind, mirror, scheduler) -> None:
    controller = _controller(StubAuth(), StubProfiles(), mirror, scheduler)
    assert controller.has_permission(page, kind) is True

    controller.start()

    assert controller.state is AuthState.INITIALIZING
    assert controller.is_loading is True
    assert controller.has_permission(page, kind) is True


def test_unknown_permission_kind_is_rejected(mirror, scheduler) -> None:
    controller = _controller(StubAuth(), StubProfiles(), mirror, scheduler)
    with pytest.raises(ValueError):
        controller.has_permission("racks", "delete")


def test_admin_role_can_edit_everything_without_entries(mirror, scheduler) -> None:
    row = {"id": "u1", "email": "ana@example.com", "name": "Ana", "role": "admin", "permissions": []}
    controller = _controller(StubAuth(make_session()), StubProfiles({"u1": row}), mirror, scheduler)
    controller.start()
    scheduler.advance(0)

    assert controller.state is AuthState.AUTHENTICATED
    assert all(controller.has_permission(page, "edit") for page in KNOWN_PAGES + ("anything",))


def test_non_admin_edit_follows_stored_entry(mirror, scheduler) -> None:
    profiles = StubProfiles({"u1": _viewer_row(racks=True, products=False)})
    controller = _controller(StubAuth(make_session()), profiles, mirror, scheduler)
    controller.start()
    scheduler.advance(0)

    assert controller.has_permission("racks", "edit") is True
    assert controller.has_permission("products", "edit") is False
    assert controller.has_permission("products", "view") is True
    assert controller.has_permission("history", "view") is False


def test_login_scenario_against_backend(backend_client, fake_backend, mirror, scheduler) -> None:
    user_id = fake_backend.add_account("user@x.com", "right")
    fake_backend.tables["users"] = [
        {"id": user_id, "email": "user@x.com", "name": "User X", "role": "manager", "permissions": [
            {"page": "racks", "view": True, "edit": True},
        ]}
    ]
    controller = _controller(backend_client.auth, WarehouseAdapter(backend_client.tables), mirror, scheduler)
    controller.start()
    scheduler.advance(0)
    assert controller.state is AuthState.ANONYMOUS

    assert controller.login("user@x.com", "wrong") is False
    assert controller.state is AuthState.ANONYMOUS
    assert controller.is_loading is False

    assert controller.login("user@x.com", "right") is True
    assert controller.state is AuthState.AUTHENTICATED
    assert controller.is_loading is False
    assert controller.profile.id == user_id
    assert controller.profile.name == "User X"
    assert controller.profile.role == "manager"
    assert controller.has_permission("racks", "edit") is True
    assert controller.routes[-1] == DASHBOARD_ROUTE

    assert mirror.read(PROFILE_KEY)["id"] == user_id
    assert mirror.read(ROLE_KEY) == "manager"
    assert mirror.read_marker(SESSION_MARKER_KEY) == user_id


def test_login_loading_flag_clears_without_sign_in_event(mirror, scheduler) -> None:
    controller = _controller(StubAuth(), StubProfiles(), mirror, scheduler)
    controller.start()
    scheduler.advance(0)

    assert controller.login("ana@example.com", "right") is True
    assert controller.is_loading is True

    scheduler.advance(3.0)
    assert controller.is_loading is False


def test_permission_denied_lookup_grants_fallback_admin(backend_client, fake_backend, mirror, scheduler) -> None:
    fake_backend.add_account("user@x.com", "right")
    fake_backend.table_failures["users"] = (403, {"code": "42501", "message": "permission denied for table users"})
    controller = _controller(backend_client.auth, WarehouseAdapter(backend_client.tables), mirror, scheduler)
    controller.start()
    scheduler.advance(0)

    controller.login("user@x.com", "right")

    profile = controller.profile
    assert profile.role == "admin"
    assert {permission.page for permission in profile.permissions} == set(KNOWN_PAGES)
    assert all(permission.view and permission.edit for permission in profile.permissions)


def test_missing_profile_row_with_fallback_disabled(mirror, scheduler) -> None:
    controller = _controller(StubAuth(make_session()), StubProfiles(), mirror, scheduler, fallback_admin_profile=False)
    controller.start()
    scheduler.advance(0)

    assert controller.state is AuthState.AUTHENTICATED
    assert controller.profile.role == "viewer"
    assert controller.profile.permissions == ()
    assert controller.has_permission("dashboard", "view") is False


def test_lookup_network_error_also_uses_fallback(mirror, scheduler) -> None:
    error = BackendError(code="NETWORK_ERROR", message="down", kind=ErrorKind.NETWORK)
    controller = _controller(StubAuth(make_session()), StubProfiles(error=error), mirror, scheduler)
    controller.start()
    scheduler.advance(0)

    assert controller.profile.is_admin


def test_logout_while_pending_is_noop(mirror, scheduler) -> None:
    auth = StubAuth(make_session())
    controller = _controller(auth, StubProfiles({"u1": _viewer_row(racks=True)}), mirror, scheduler)
    controller.start()
    scheduler.advance(0)
    observed = {}

    def _second_logout():
        observed["permission"] = controller.has_permission("racks", "view")
        observed["state_before"] = controller.state
        controller.logout()
        observed["state_after"] = controller.state

    auth.sign_out_hook = _second_logout
    controller.logout()

    assert auth.sign_out_calls == 1
    assert observed == {
        "permission": False,
        "state_before": AuthState.ANONYMOUS,
        "state_after": AuthState.ANONYMOUS,
    }
    assert controller.profile is None
    assert controller.routes[-1] == LOGIN_ROUTE
    assert mirror.read(PROFILE_KEY) is None
    assert mirror.read_marker(SESSION_MARKER_KEY) is None


def test_logout_clears_local_state_when_backend_fails(mirror, scheduler) -> None:
    auth = StubAuth(make_session())

    def _fail():
        raise BackendError(code="NETWORK_ERROR", message="down", kind=ErrorKind.NETWORK)

    auth.sign_out_hook = _fail
    controller = _controller(auth, StubProfiles({"u1": _viewer_row()}), mirror, scheduler)
    controller.start()
    scheduler.advance(0)

    controller.logout()

    assert controller.state is AuthState.ANONYMOUS
    assert controller.profile is None
    assert controller.is_loading is False
    assert controller.routes[-1] == LOGIN_ROUTE


def test_force_logout_wipes_whole_mirror(mirror, scheduler) -> None:
    auth = StubAuth(make_session())
    auth.auth_store.set_session(make_session())
    controller = _controller(auth, StubProfiles({"u1": _viewer_row()}), mirror, scheduler)
    controller.start()
    scheduler.advance(0)
    mirror.write("products", [{"id": "p1", "code": "A"}])

    controller.force_logout()

    assert mirror.read("products") is None
    assert auth.auth_store.get_session() is None
    assert auth.sign_out_calls == 0
    assert controller.routes[-1] == LOGIN_ROUTE


def test_safety_timeout_wins_and_late_resolution_is_ignored(mirror, scheduler) -> None:
    auth = StubAuth(make_session())
    profiles = StubProfiles({"u1": _viewer_row()})
    controller = _controller(auth, profiles, mirror, scheduler)
    auth.get_session_hook = lambda: scheduler.advance(2.0)
    controller.start()

    scheduler.advance(0)

    assert controller.is_initialized is True
    assert controller.state is AuthState.ANONYMOUS
    assert controller.profile is None
    assert profiles.lookups == 0


def test_safety_timeout_keeps_seeded_profile(mirror, scheduler) -> None:
    mirror.write(PROFILE_KEY, _viewer_row("seeded"))
    auth = StubAuth(None)
    auth.get_session_hook = lambda: scheduler.advance(2.0)
    controller = _controller(auth, StubProfiles(), mirror, scheduler)

    controller.start()
    assert controller.profile.id == "seeded"
    scheduler.advance(0)

    assert controller.state is AuthState.AUTHENTICATED
    assert controller.profile.id == "seeded"


def test_initial_session_event_ignored_after_initialization(mirror, scheduler) -> None:
    auth = StubAuth(None)
    profiles = StubProfiles({"u1": _viewer_row()})
    controller = _controller(auth, profiles, mirror, scheduler)
    controller.start()
    scheduler.advance(0)

    auth.emit(AuthChangeEvent.INITIAL_SESSION, make_session())
    assert controller.state is AuthState.ANONYMOUS
    assert profiles.lookups == 0

    auth.emit(AuthChangeEvent.SIGNED_IN, make_session())
    assert controller.state is AuthState.AUTHENTICATED
    auth.emit(AuthChangeEvent.SIGNED_OUT, None)
    assert controller.state is AuthState.ANONYMOUS
    assert controller.routes[-1] == LOGIN_ROUTE


def test_close_drops_late_continuations(mirror, scheduler) -> None:
    auth = StubAuth(make_session())
    profiles = StubProfiles({"u1": _viewer_row()})
    controller = _controller(auth, profiles, mirror, scheduler)
    seen = []
    controller.add_listener(lambda ctrl: seen.append(ctrl.state))
    controller.start()
    seen.clear()

    controller.close()
    scheduler.advance(5.0)
    auth.emit(AuthChangeEvent.SIGNED_IN, make_session())

    assert profiles.lookups == 0
    assert seen == []
    assert auth.listeners == []


def test_listeners_hear_transitions_and_can_be_removed(mirror, scheduler) -> None:
    controller = _controller(StubAuth(make_session()), StubProfiles({"u1": _viewer_row()}), mirror, scheduler)
    seen = []
    remove = controller.add_listener(lambda ctrl: seen.append(ctrl.state))

    controller.start()
    scheduler.advance(0)
    remove()
    controller.logout()

    assert seen == [AuthState.INITIALIZING, AuthState.AUTHENTICATED]


def test_logout_navigates_to_login_once(mirror, scheduler) -> None:
    auth = StubAuth(None)
    controller = _controller(auth, StubProfiles({"u1": _viewer_row()}), mirror, scheduler)
    controller.start()
    scheduler.advance(0)
    auth.emit(AuthChangeEvent.SIGNED_IN, make_session())
    assert controller.routes[-1] == DASHBOARD_ROUTE
    before = len(controller.routes)

    controller.logout()

    assert controller.routes[before:] == [LOGIN_ROUTE]
