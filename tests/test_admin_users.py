import pytest


def _create_payload(**overrides):
    payload = {
        "email": "ana@example.com",
        "password": "secret123",
        "name": "Ana",
        "role": "manager",
        "permissions": [{"page": "racks", "view": True, "edit": True}],
    }
    payload.update(overrides)
    return payload


def test_create_user_missing_fields(client, fake_backend):
    response = client.post("/api/admin/create-user", json={"email": "ana@example.com"})
    assert response.status_code == 400
    payload = response.json()
    assert payload["success"] is False
    assert payload["code"] == "MISSING_FIELDS"
    fields = {error["field"] for error in payload["details"]["errors"]}
    assert {"password", "name", "role"} <= fields
    assert not fake_backend.calls("POST", "/auth/v1/admin/users")


def test_create_user_blank_field_is_missing(client):
    response = client.post("/api/admin/create-user", json=_create_payload(name=""))
    assert response.status_code == 400
    assert response.json()["code"] == "MISSING_FIELDS"


def test_create_user_duplicate_email(client, fake_backend):
    fake_backend.add_account("ana@example.com", "whatever")
    response = client.post("/api/admin/create-user", json=_create_payload())
    assert response.status_code == 409
    assert response.json()["code"] == "EMAIL_ALREADY_REGISTERED"
    assert "users" not in fake_backend.tables


def test_create_user_success(client, fake_backend):
    response = client.post("/api/admin/create-user", json=_create_payload())
    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    user = payload["user"]
    assert user["email"] == "ana@example.com"
    assert user["role"] == "manager"
    assert user["permissions"] == [{"page": "racks", "view": True, "edit": True}]

    account = fake_backend.accounts["ana@example.com"]
    assert account["id"] == user["id"]
    assert account["user_metadata"] == {"name": "Ana", "role": "manager"}
    request = fake_backend.calls("POST", "/auth/v1/admin/users")[0]
    assert request.headers["apikey"] == "service-key"

    (row,) = fake_backend.tables["users"]
    assert row["id"] == user["id"]
    assert row["name"] == "Ana"
    assert "password" not in row


def test_create_user_survives_profile_insert_failure(client, fake_backend):
    fake_backend.table_failures["users"] = (403, {"code": "42501", "message": "permission denied"})
    response = client.post("/api/admin/create-user", json=_create_payload())
    assert response.status_code == 200
    assert response.json()["user"]["id"] == fake_backend.accounts["ana@example.com"]["id"]


def test_create_user_backend_unreachable(client, fake_backend):
    fake_backend.unreachable = True
    response = client.post("/api/admin/create-user", json=_create_payload())
    assert response.status_code == 500
    assert response.json()["code"] == "BACKEND_ERROR"
    assert response.json()["details"]["kind"] == "network"


def test_update_password(client, fake_backend):
    user_id = fake_backend.add_account("ana@example.com", "old-pass")
    response = client.post("/api/admin/update-password", json={"userId": user_id, "newPassword": "new-pass"})
    assert response.status_code == 200
    assert response.json()["user"]["id"] == user_id
    assert fake_backend.accounts["ana@example.com"]["password"] == "new-pass"


def test_update_password_unknown_user(client):
    response = client.post("/api/admin/update-password", json={"userId": "missing", "newPassword": "new-pass"})
    assert response.status_code == 400
    assert response.json()["code"] == "BACKEND_REJECTED"


def test_update_password_missing_fields(client):
    response = client.post("/api/admin/update-password", json={"userId": "abc"})
    assert response.status_code == 400
    assert response.json()["code"] == "MISSING_FIELDS"


def test_update_user_name(client, fake_backend):
    user_id = fake_backend.add_account("ana@example.com", "pw", name="Ana")
    fake_backend.tables["users"] = [{"id": user_id, "email": "ana@example.com", "name": "Ana"}]
    response = client.post("/api/admin/update-user-name", json={"userId": user_id, "name": "Ana María"})
    assert response.status_code == 200
    assert response.json()["user"]["user_metadata"]["name"] == "Ana María"
    assert fake_backend.tables["users"][0]["name"] == "Ana María"


def test_update_user_name_tolerates_table_failure(client, fake_backend):
    user_id = fake_backend.add_account("ana@example.com", "pw", name="Ana")
    fake_backend.table_failures["users"] = (500, {"code": "XX000", "message": "boom"})
    response = client.post("/api/admin/update-user-name", json={"userId": user_id, "name": "Ana B"})
    assert response.status_code == 200
    assert fake_backend.accounts["ana@example.com"]["user_metadata"]["name"] == "Ana B"


@pytest.mark.parametrize(
    ("path", "body"),
    [
        ("/api/admin/update-password", {"userId": "u1", "newPassword": "new-pass"}),
        ("/api/admin/update-user-name", {"userId": "u1", "name": "Bo"}),
    ],
)
def test_user_updates_answer_500_when_backend_unreachable(client, fake_backend, path, body):
    fake_backend.unreachable = True
    response = client.post(path, json=body)
    assert response.status_code == 500
    assert response.json()["code"] == "BACKEND_ERROR"
