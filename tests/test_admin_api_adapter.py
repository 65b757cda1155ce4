import pytest

from clients.wms_backend_sdk.errors import BackendError, ErrorKind
from clients.wms_backend_sdk.http_client import HttpClient
from wms_control.app.infrastructure.sdk_adapter.admin_api_adapter import AdminApiAdapter


@pytest.fixture()
def admin_api(client, sdk_config) -> AdminApiAdapter:
    return AdminApiAdapter(HttpClient(config=sdk_config, client=client))


def test_create_user_returns_created_profile(admin_api, fake_backend) -> None:
    user = admin_api.create_user("ana@example.com", "secret123", "Ana", "viewer", [{"page": "history", "view": True}])

    assert user["id"] == fake_backend.accounts["ana@example.com"]["id"]
    assert user["permissions"] == [{"page": "history", "view": True, "edit": False}]


def test_duplicate_is_classified_from_status(admin_api, fake_backend) -> None:
    fake_backend.add_account("ana@example.com", "x")

    with pytest.raises(BackendError) as excinfo:
        admin_api.create_user("ana@example.com", "secret123", "Ana", "viewer")

    assert excinfo.value.code == "EMAIL_ALREADY_REGISTERED"
    assert excinfo.value.kind is ErrorKind.DUPLICATE


def test_password_and_name_updates(admin_api, fake_backend) -> None:
    user_id = fake_backend.add_account("ana@example.com", "old-pass", name="Ana")

    assert admin_api.update_password(user_id, "new-pass")["id"] == user_id
    assert admin_api.update_user_name(user_id, "Ana B")["user_metadata"]["name"] == "Ana B"
    assert fake_backend.accounts["ana@example.com"]["password"] == "new-pass"


def test_verify_password(admin_api, fake_backend) -> None:
    fake_backend.add_account("ana@example.com", "secret123")

    assert admin_api.verify_password("ana@example.com", "secret123") is True
    with pytest.raises(BackendError) as excinfo:
        admin_api.verify_password("ana@example.com", "wrong")
    assert excinfo.value.kind is ErrorKind.CREDENTIALS
