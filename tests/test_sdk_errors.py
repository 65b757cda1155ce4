import httpx
import pytest

from clients.wms_backend_sdk.errors import BackendError, ErrorKind, classify


@pytest.mark.parametrize(
    ("status_code", "code", "kind"),
    [
        (400, "invalid_credentials", ErrorKind.CREDENTIALS),
        (422, "email_exists", ErrorKind.DUPLICATE),
        (409, "23505", ErrorKind.DUPLICATE),
        (401, "42501", ErrorKind.PERMISSION),
        (406, "PGRST116", ErrorKind.NOT_FOUND),
        (403, None, ErrorKind.PERMISSION),
        (400, None, ErrorKind.VALIDATION),
        (502, None, ErrorKind.NETWORK),
        (None, None, ErrorKind.NETWORK),
        (418, None, ErrorKind.UNKNOWN),
    ],
)
def test_classify_uses_codes_before_status(status_code, code, kind) -> None:
    assert classify(status_code, code) is kind


def test_auth_error_shape() -> None:
    response = httpx.Response(400, json={"error_code": "invalid_credentials", "msg": "Invalid login credentials"})
    error = BackendError.from_http_response(response)

    assert error.code == "invalid_credentials"
    assert error.message == "Invalid login credentials"
    assert error.kind is ErrorKind.CREDENTIALS
    assert error.status_code == 400


def test_table_error_shape_keeps_hint() -> None:
    response = httpx.Response(
        409, json={"code": "23505", "message": "duplicate key value", "details": None, "hint": "code must be unique"}
    )
    error = BackendError.from_http_response(response)

    assert error.kind is ErrorKind.DUPLICATE
    assert error.details == "code must be unique"


def test_admin_endpoint_error_shape() -> None:
    response = httpx.Response(
        409,
        json={"success": False, "error": "Email already registered", "code": "EMAIL_ALREADY_REGISTERED", "details": None},
    )
    error = BackendError.from_http_response(response)

    assert error.code == "EMAIL_ALREADY_REGISTERED"
    assert error.message == "Email already registered"
    assert error.kind is ErrorKind.DUPLICATE


def test_message_text_does_not_drive_classification() -> None:
    response = httpx.Response(500, json={"code": "XX000", "message": "permission denied for table users"})
    assert BackendError.from_http_response(response).kind is ErrorKind.NETWORK


def test_non_json_body() -> None:
    error = BackendError.from_http_response(httpx.Response(502, text="Bad gateway"))
    assert error.code == "HTTP_ERROR"
    assert error.message == "Bad gateway"
    assert str(error) == "HTTP_ERROR: Bad gateway"
