from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from signage.core.config import AuthConfig, Config, DatabaseConfig, StorageConfig
from signage.weather import WeatherResult
from signage.web import create_app
from signage.web.auth import create_token

ADMIN_PASSWORD = "let-me-in"
JWT_SECRET = "test-jwt-secret"


class FakeWeather:
    """Stands in for WeatherService; returns a canned provider payload."""

    def __init__(self, current=None, snowfall=None, ok=True):
        self.current = current or {}
        self.snowfall = snowfall
        self.ok = ok
        self.locations = []

    async def refresh(self, location):
        self.locations.append(location)
        if not self.ok:
            return WeatherResult(ok=False, error="Weather API error! status: 500")
        return WeatherResult(
            ok=True,
            current=self.current,
            snowfall=self.snowfall,
            fetched_at=datetime(2026, 1, 5, 14, 0, tzinfo=timezone.utc),
            fresh=True,
        )


WEATHERAPI_CURRENT = {
    "temp_c": -3.0,
    "temp_f": 26.6,
    "feelslike_c": -8.1,
    "feelslike_f": 17.4,
    "wind_kph": 20.2,
    "wind_mph": 12.5,
    "precip_mm": 0.4,
    "precip_in": 0.02,
    "vis_km": 8.0,
    "vis_miles": 4.0,
    "condition": {"text": "Light snow", "code": 1213},
    "wind_dir": "NW",
    "wind_degree": 310,
    "humidity": 86,
}


def make_config(tmp_path, **auth):
    return Config(
        auth=AuthConfig(
            admin_password=auth.get("admin_password", ADMIN_PASSWORD),
            jwt_secret=JWT_SECRET,
            login_attempts_per_minute=auth.get("login_attempts_per_minute", 10),
        ),
        database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'signage.db'}"),
        storage=StorageConfig(
            upload_dir=str(tmp_path / "userImages"),
            weather_dir=str(tmp_path / "weather"),
        ),
    )


@pytest.fixture
def config(tmp_path):
    return make_config(tmp_path)


@pytest.fixture
def weather():
    return FakeWeather(current=WEATHERAPI_CURRENT)


@pytest.fixture
def app(config, weather):
    return create_app(config, weather=weather)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def database(app, client):
    return app.state.database


@pytest.fixture
def auth():
    return {"Authorization": f"Bearer {create_token(JWT_SECRET)}"}


@pytest.fixture
def admin_data(client, auth):
    def fetch():
        response = client.get("/api/admin/data", headers=auth)
        assert response.status_code == 200
        return response.json()

    return fetch
