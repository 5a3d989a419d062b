"""Login, token issuance/validation and the Bearer dependency."""

import asyncio
import time

import pytest
from jose import jwt

from wardrounds.auth import ALGORITHM, TOKEN_EXPIRE_SECONDS, DoctorPrincipal, create_token, decode_token
from wardrounds.exceptions import InvalidCredentials, InvalidToken
from wardrounds.services.auth_service import AuthService

from conftest import JWT_SECRET, make_user

PRINCIPAL = DoctorPrincipal(id_user="D01", kd_dokter="D01", nm_dokter="dr. Andi, Sp.PD")


def test_token_valid_at_29_minutes_and_expired_at_31():
    issued = 1_700_000_000
    token, principal = create_token(PRINCIPAL, JWT_SECRET, now=issued)
    assert principal.expires_at - principal.issued_at == TOKEN_EXPIRE_SECONDS

    claims = decode_token(token, JWT_SECRET, now=issued + 29 * 60)
    assert claims.kd_dokter == "D01"
    assert claims.nm_dokter == "dr. Andi, Sp.PD"

    with pytest.raises(InvalidToken):
        decode_token(token, JWT_SECRET, now=issued + 31 * 60)


def test_token_signed_with_other_secret_is_rejected():
    token, _ = create_token(PRINCIPAL, "other-secret")
    with pytest.raises(InvalidToken):
        decode_token(token, JWT_SECRET)


def test_token_without_doctor_claims_is_rejected():
    now = int(time.time())
    token = jwt.encode({"id_user": "D01", "iat": now, "exp": now + 60}, JWT_SECRET, algorithm=ALGORITHM)
    with pytest.raises(InvalidToken):
        decode_token(token, JWT_SECRET)


def test_long_expired_token_follows_pinned_clock():
    issued = 1_000_000_000
    token, _ = create_token(PRINCIPAL, JWT_SECRET, now=issued)
    assert decode_token(token, JWT_SECRET, now=issued + 60).kd_dokter == "D01"


@pytest.mark.parametrize("missing", ["exp", "iat"])
def test_token_without_time_claims_is_rejected(missing):
    now = int(time.time())
    payload = {"id_user": "D01", "kd_dokter": "D01", "iat": now, "exp": now + 60}
    del payload[missing]
    token = jwt.encode(payload, JWT_SECRET, algorithm=ALGORITHM)
    with pytest.raises(InvalidToken):
        decode_token(token, JWT_SECRET)


def test_garbage_token_is_rejected():
    with pytest.raises(InvalidToken):
        decode_token("not-a-jwt", JWT_SECRET)


def test_login_returns_token_and_doctor(client, ward_fixtures):
    resp = client.post("/api/v1/auth/login", json={"id_user": "D01", "password": "rahasia"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "success"
    data = body["data"]
    assert data["id_user"] == "D01"
    assert data["kd_dokter"] == "D01"
    assert data["nm_dokter"] == "dr. Andi, Sp.PD"

    claims = decode_token(data["token"], JWT_SECRET)
    assert claims.expires_at == data["expires_at"]


def test_wrong_password_and_unknown_user_fail_identically(client, ward_fixtures):
    wrong_password = client.post("/api/v1/auth/login", json={"id_user": "D01", "password": "salah"})
    unknown_user = client.post("/api/v1/auth/login", json={"id_user": "D99", "password": "rahasia"})
    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json()
    assert wrong_password.json()["message"] == "invalid credentials"


def test_password_of_another_doctor_does_not_match(client, ward_fixtures):
    resp = client.post("/api/v1/auth/login", json={"id_user": "D01", "password": "lain"})
    assert resp.status_code == 401


def test_login_without_doctor_row_is_rejected(session_factory, seed, settings):
    seed(make_user("ADMIN", "admin", settings))

    async def _login():
        async with session_factory() as db:
            await AuthService.from_settings(db, settings).login("ADMIN", "admin")

    with pytest.raises(InvalidCredentials):
        asyncio.run(_login())


def test_login_missing_field_is_bad_request(client, ward_fixtures):
    resp = client.post("/api/v1/auth/login", json={"id_user": "D01"})
    assert resp.status_code == 400
    assert resp.json()["status"] == "error"


def test_validate_echoes_claims(client, auth_headers):
    resp = client.get("/api/v1/auth/validate", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["kd_dokter"] == "D01"


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": "Token abc"},
        {"Authorization": "Bearer"},
        {"Authorization": "Bearer not-a-jwt"},
    ],
)
def test_protected_routes_require_bearer_token(client, ward_fixtures, headers):
    resp = client.get("/api/v1/ranap/pasien", headers=headers)
    assert resp.status_code == 401
    assert resp.json()["status"] == "error"


def test_expired_token_is_unauthorized(client, ward_fixtures):
    token, _ = create_token(PRINCIPAL, JWT_SECRET, now=time.time() - 31 * 60)
    resp = client.get("/api/v1/profile", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
