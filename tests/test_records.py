import random

from wms_control.app.domain.models.profile import UserProfile
from wms_control.app.domain.models.records import (
    Pending,
    Persisted,
    Product,
    UserRecord,
    new_placeholder_id,
    parse_record_id,
)


def test_placeholder_id_format() -> None:
    placeholder = new_placeholder_id(now_ms=1700000000000, rng=random.Random(7))

    prefix, millis, suffix = placeholder.split("-")
    assert prefix == "temp"
    assert millis == "1700000000000"
    assert len(suffix) == 9
    assert suffix.isalnum() and suffix == suffix.lower()


def test_record_id_variant() -> None:
    assert parse_record_id("temp-1-abc") == Pending("temp-1-abc")
    assert parse_record_id("8b1f") == Persisted("8b1f")
    assert Product(id="temp-1-abc", code="A").is_pending
    assert not Product(id="p1", code="A").is_pending


def test_user_natural_key_ignores_case() -> None:
    assert UserRecord(id="u1", email=" Ana@Example.com ").natural_key == "ana@example.com"


def test_profile_falls_back_to_auth_identity() -> None:
    class _AuthUser:
        id = "u1"
        email = "ana@example.com"
        user_metadata = {"name": "Ana"}

    profile = UserProfile.from_row({"id": "u1"}, auth_user=_AuthUser())

    assert profile.email == "ana@example.com"
    assert profile.name == "Ana"
    assert profile.role == "guest"
    assert not profile.is_admin
    assert UserProfile.from_payload(profile.to_payload()) == profile
