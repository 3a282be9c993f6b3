import time

import jwt
import pytest
from fastapi.testclient import TestClient

from signage.core.errors import AuthenticationError, RateLimitError
from signage.web import create_app
from signage.web.auth import RateLimiter, bearer_token, check_password, create_token, verify_token

from .conftest import ADMIN_PASSWORD, JWT_SECRET, FakeWeather, make_config


def test_login_issues_usable_token(client):
    response = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
    assert response.status_code == 200
    token = response.json()["token"]

    claims = jwt.decode(token, JWT_SECRET, algorithms=["HS256"])
    assert claims["role"] == "admin"
    assert claims["exp"] - claims["iat"] == 86400

    data = client.get("/api/admin/data", headers={"Authorization": f"Bearer {token}"})
    assert data.status_code == 200


def test_login_wrong_password(client):
    response = client.post("/api/admin/login", json={"password": "nope"})
    assert response.status_code == 401
    assert response.json() == {
        "success": False,
        "error": "AuthenticationError",
        "detail": "Invalid password",
    }


def test_login_without_configured_password(tmp_path):
    app = create_app(make_config(tmp_path, admin_password=""), weather=FakeWeather())
    with TestClient(app) as client:
        response = client.post("/api/admin/login", json={"password": ""})
    assert response.status_code == 400
    assert response.json()["detail"] == "Admin password not configured"


def test_login_rate_limited(tmp_path):
    app = create_app(make_config(tmp_path, login_attempts_per_minute=2), weather=FakeWeather())
    with TestClient(app) as client:
        for _ in range(2):
            assert client.post("/api/admin/login", json={"password": "x"}).status_code == 401
        response = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
    assert response.status_code == 429
    assert "Retry-After" in response.headers


@pytest.mark.parametrize(
    "header",
    [
        None,
        "Bearer",
        "Basic abc123",
        "Bearer not-a-jwt",
        "Bearer " + create_token("some-other-secret"),
        "Bearer " + create_token(JWT_SECRET, lifetime=60, now=time.time() - 3600),
    ],
)
def test_admin_routes_reject_bad_tokens(client, header):
    headers = {"Authorization": header} if header else {}
    response = client.get("/api/admin/data", headers=headers)
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_transfer_routes_require_token(client):
    assert client.get("/api/admin/export/all").status_code == 401
    assert client.post("/api/admin/import/all", json={}).status_code == 401


def test_verify_token_rejects_non_admin_role():
    token = jwt.encode({"role": "viewer", "exp": int(time.time()) + 60}, JWT_SECRET, algorithm="HS256")
    with pytest.raises(AuthenticationError):
        verify_token(token, JWT_SECRET)


def test_verify_token_expired_message():
    token = create_token(JWT_SECRET, lifetime=60, now=time.time() - 120)
    with pytest.raises(AuthenticationError, match="Token expired"):
        verify_token(token, JWT_SECRET)


def test_bearer_token_parsing():
    assert bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"
    assert bearer_token("bearer abc") == "abc"
    with pytest.raises(AuthenticationError, match="No token"):
        bearer_token(None)
    with pytest.raises(AuthenticationError, match="Malformed"):
        bearer_token("Token abc")


def test_check_password():
    assert check_password("secret", "secret")
    assert not check_password("Secret", "secret")
    assert not check_password("", "")


def test_rate_limiter_blocks_then_recovers():
    limiter = RateLimiter(requests_per_minute=2, block_duration=300)
    limiter.check("1.2.3.4", now=0)
    limiter.check("1.2.3.4", now=1)
    with pytest.raises(RateLimitError):
        limiter.check("1.2.3.4", now=2)

    # Other clients are unaffected
    limiter.check("5.6.7.8", now=2)

    with pytest.raises(RateLimitError) as excinfo:
        limiter.check("1.2.3.4", now=100)
    assert excinfo.value.retry_after == 203

    limiter.check("1.2.3.4", now=400)
