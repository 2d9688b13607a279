import dataclasses

from fastapi.testclient import TestClient
from jose import jwt

from pathwise.core import verification
from pathwise.core.metrics import counter_value
from pathwise.core.security import ALGORITHM
from pathwise.core.settings import get_settings
from pathwise.core.verification import MS_PER_HOUR, derive_code
from pathwise.main import app

from conftest import auth_header, error_payload, make_user

NOW_MS = 480_000 * MS_PER_HOUR + 123_456


def _freeze_clock(monkeypatch):
    monkeypatch.setattr(verification, "current_time_ms", lambda: NOW_MS)
    return derive_code("test-subject", 480_000, "test-salt")


def test_verify_accepts_current_code(api, monkeypatch):
    code = _freeze_clock(monkeypatch)
    api.add(make_user(user_id="u1"))

    response = api.client.post("/verify", json={"code": code}, headers=auth_header("u1"))
    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["message"] == "Verification successful"
    assert counter_value("verify_total", result="success") == 1


def test_verify_wrong_code_is_not_an_error_status(api, monkeypatch):
    _freeze_clock(monkeypatch)
    api.add(make_user(user_id="u1"))

    response = api.client.post("/verify", json={"code": "000000000000"}, headers=auth_header("u1"))
    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is False
    assert payload["message"] == "Invalid verification code"


def test_verify_rejects_previous_hour_code(api, monkeypatch):
    _freeze_clock(monkeypatch)
    api.add(make_user(user_id="u1"))
    stale = derive_code("test-subject", 479_999, "test-salt")

    response = api.client.post("/verify", json={"code": stale}, headers=auth_header("u1"))
    assert response.status_code == 200
    assert response.json()["success"] is False


def test_verify_same_code_can_be_replayed_within_hour(api, monkeypatch):
    code = _freeze_clock(monkeypatch)
    api.add(make_user(user_id="u1"))

    for _ in range(3):
        response = api.client.post("/verify", json={"code": code}, headers=auth_header("u1"))
        assert response.json()["success"] is True


def test_verify_requires_authorization_header(api, monkeypatch):
    calls = []
    monkeypatch.setattr(verification, "current_time_ms", lambda: calls.append(1) or NOW_MS)

    response = api.client.post("/verify", json={"code": "abc"})
    assert response.status_code == 401
    payload = error_payload(response)
    assert payload["error"]["code"] == "http_401"

    for body in (b"{code", b"", b'{"code": 7}'):
        unauthenticated = api.client.post("/verify", content=body, headers={"Content-Type": "application/json"})
        assert unauthenticated.status_code == 401
        assert error_payload(unauthenticated)["error"]["code"] == "http_401"
    assert calls == []


def test_verify_rejects_bad_and_expired_tokens(api):
    api.add(make_user(user_id="u1"))

    garbage = api.client.post("/verify", json={"code": "abc"}, headers={"Authorization": "Bearer not-a-jwt"})
    assert garbage.status_code == 401

    expired_token = jwt.encode({"sub": "u1", "exp": 1}, "test-secret-key", algorithm=ALGORITHM)
    expired = api.client.post("/verify", json={"code": "abc"}, headers={"Authorization": f"Bearer {expired_token}"})
    assert expired.status_code == 401

    unknown = api.client.post("/verify", json={"code": "abc"}, headers=auth_header("ghost"))
    assert unknown.status_code == 401


def test_verify_rejects_blocked_user(api):
    api.add(make_user(user_id="u1", is_blocked=True))
    response = api.client.post("/verify", json={"code": "abc"}, headers=auth_header("u1"))
    assert response.status_code == 401


def test_verify_malformed_body_is_controlled_error(api):
    api.add(make_user(user_id="u1"))

    missing = api.client.post("/verify", json={}, headers=auth_header("u1"))
    assert missing.status_code == 422
    assert error_payload(missing)["error"]["code"] == "validation_error"

    not_a_string = api.client.post("/verify", json={"code": 123456789012}, headers=auth_header("u1"))
    assert not_a_string.status_code == 422
    assert error_payload(not_a_string)["error"]["code"] == "validation_error"

    not_json = api.client.post(
        "/verify",
        content=b"{code",
        headers={**auth_header("u1"), "Content-Type": "application/json"},
    )
    assert not_json.status_code == 422


def test_verify_missing_salt_is_internal_error(api):
    api.add(make_user(user_id="u1"))
    app.dependency_overrides[get_settings] = lambda: dataclasses.replace(get_settings(), verify_salt=None)

    client = TestClient(app, raise_server_exceptions=False)
    response = client.post("/verify", json={"code": "abc"}, headers=auth_header("u1"))
    assert response.status_code == 500
    payload = error_payload(response)
    assert payload["error"]["code"] == "internal_error"
    assert "VERIFY_SALT" in payload["error"]["details"]


def test_preflight_returns_ok(api):
    plain = api.client.options("/verify")
    assert plain.status_code == 200
    assert plain.text == "ok"

    cors = api.client.options(
        "/verify",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, content-type",
        },
    )
    assert cors.status_code == 200
    assert cors.headers["access-control-allow-origin"] == "*"


def test_verify_non_object_body_is_validation_error(api):
    api.add(make_user(user_id="u1"))
    response = api.client.post("/verify", json=["abc"], headers=auth_header("u1"))
    assert response.status_code == 422
    assert error_payload(response)["error"]["code"] == "validation_error"
