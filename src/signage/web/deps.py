"""Request-scoped dependencies backed by ``app.state``."""

from typing import Iterator

from fastapi import Request
from sqlalchemy.orm import Session

from ..core.config import Config
from ..db import Database
from ..weather import WeatherService
from .auth import RateLimiter


def get_app_config(request: Request) -> Config:
    return request.app.state.config


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_session(request: Request) -> Iterator[Session]:
    """One session per request, closed when the response is done."""
    with request.app.state.database.session() as session:
        yield session


def get_weather_service(request: Request) -> WeatherService:
    return request.app.state.weather


def get_login_limiter(request: Request) -> RateLimiter:
    return request.app.state.login_limiter


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"
