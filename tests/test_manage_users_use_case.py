from __future__ import annotations

import pytest

from clients.wms_backend_sdk.http_client import HttpClient
from tests.fakes import ImmediateExecutor, StubAuth, StubProfiles, make_session
from wms_control.app.application.auth_controller import AuthController
from wms_control.app.application.data_cache_controller import DataCacheController
from wms_control.app.application.use_cases.manage_users_use_case import ManageUsersUseCase
from wms_control.app.domain.policies.permission_policy import apply_template
from wms_control.app.infrastructure.sdk_adapter.admin_api_adapter import AdminApiAdapter
from wms_control.app.infrastructure.sdk_adapter.warehouse_adapter import WarehouseAdapter


def _auth(mirror, scheduler, role="admin") -> AuthController:
    row = {"id": "u1", "email": "boss@example.com", "name": "Boss", "role": role, "permissions": []}
    controller = AuthController(StubAuth(make_session()), StubProfiles({"u1": row}), mirror, scheduler)
    controller.start()
    scheduler.advance(0)
    return controller


@pytest.fixture()
def cache(backend_client, mirror, scheduler):
    controller = DataCacheController(
        WarehouseAdapter(backend_client.tables),
        backend_client.changes,
        mirror,
        scheduler,
        executor=ImmediateExecutor(),
    )
    yield controller
    controller.close()


@pytest.fixture()
def admin_api(client, sdk_config) -> AdminApiAdapter:
    return AdminApiAdapter(HttpClient(config=sdk_config, client=client))


@pytest.fixture()
def users(mirror, scheduler, cache, admin_api) -> ManageUsersUseCase:
    return ManageUsersUseCase(_auth(mirror, scheduler), cache, admin_api)


def test_create_user_through_admin_endpoint(users, cache, fake_backend) -> None:
    result = users.create_user("Ana", "ana@example.com", "secret123", "manager", apply_template("manager"))

    assert result.success is True
    assert result.code is None
    account = fake_backend.accounts["ana@example.com"]
    assert result.record.id == account["id"]
    assert [user.email for user in cache.snapshot().users] == ["ana@example.com"]
    assert len(fake_backend.tables["users"]) == 1
    assert fake_backend.tables["users"][0]["permissions"][0] == {"page": "dashboard", "view": True, "edit": True}


def test_create_user_reports_duplicate(users, cache, fake_backend) -> None:
    fake_backend.add_account("ana@example.com", "whatever")

    result = users.create_user("Ana", "ana@example.com", "secret123", "viewer")

    assert result.success is False
    assert result.code == "EMAIL_ALREADY_REGISTERED"
    assert cache.snapshot().users == ()


def test_create_user_validates_before_calling_backend(users, fake_backend) -> None:
    result = users.create_user("", "not-an-email", "123", "viewer")

    assert result.code == "VALIDATION_ERROR"
    assert set(result.field_errors) == {"name", "email", "password"}
    assert fake_backend.requests == []


def test_create_user_requires_users_edit(mirror, scheduler, cache, admin_api, fake_backend) -> None:
    users = ManageUsersUseCase(_auth(mirror, scheduler, role="viewer"), cache, admin_api)

    result = users.create_user("Ana", "ana@example.com", "secret123", "viewer")

    assert result.code == "PERMISSION_DENIED"
    assert "ana@example.com" not in fake_backend.accounts


def test_create_user_falls_back_to_local_pending_user(users, cache, fake_backend) -> None:
    fake_backend.unreachable = True

    result = users.create_user("Ana", "ana@example.com", "secret123", "viewer")

    assert result.success is True
    assert result.code == "SIGN_IN_LIMITED"
    (user,) = cache.snapshot().users
    assert user.is_pending
    assert user.email == "ana@example.com"


def test_update_user_changes_name_and_password(users, cache, fake_backend) -> None:
    created = users.create_user("Ana", "ana@example.com", "secret123", "viewer").record

    result = users.update_user(created.id, "Ana B", "ana@example.com", "viewer", password="newpass1")

    assert result.success is True
    account = fake_backend.accounts["ana@example.com"]
    assert account["password"] == "newpass1"
    assert account["user_metadata"]["name"] == "Ana B"
    assert cache.snapshot().users[0].name == "Ana B"


def test_update_user_reports_password_failure(users, fake_backend) -> None:
    created = users.create_user("Ana", "ana@example.com", "secret123", "viewer").record
    fake_backend.auth_failures[f"admin/users/{created.id}"] = (422, {"error_code": "weak_password", "msg": "weak"})

    result = users.update_user(created.id, "Ana", "ana@example.com", "viewer", password="123456")

    assert result.success is False
    assert result.message == "User saved, but the password was not changed."


def test_permissions_status_and_delete(users, cache) -> None:
    created = users.create_user("Ana", "ana@example.com", "secret123", "viewer").record

    assert users.update_permissions(created.id, apply_template("admin")).success
    assert cache.snapshot().users[0].permissions == tuple(apply_template("admin"))

    toggled = users.toggle_status(created.id)
    assert toggled.record.status == "inactive"
    assert users.toggle_status(created.id).record.status == "active"

    assert users.delete_user(created.id).success
    assert cache.snapshot().users == ()
    assert users.toggle_status(created.id).code == "NOT_FOUND"
