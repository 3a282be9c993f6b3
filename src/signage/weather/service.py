"""Best-effort weather refresh with a per-location cache.

The display endpoint calls ``refresh`` on every request; a failure never
propagates, the caller simply serves whatever snapshot is already stored.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import httpx

from ..core.config import WeatherConfig
from ..core.errors import SignageError
from ..core.threading import LockedValue
from .client import fetch_weather_data, get_snowfall_total, write_weather_data
from .units import apply_weather

logger = logging.getLogger(__name__)


@dataclass
class WeatherResult:
    """Outcome of a refresh.

    ``fresh`` is True only when this call actually hit the provider, so
    callers persist the snapshot once per fetch rather than per request.
    """

    ok: bool
    current: dict[str, Any] = field(default_factory=dict)
    snowfall: float | None = None
    fetched_at: datetime | None = None
    fresh: bool = False
    error: str | None = None

    def fields(self, unit_system: str) -> dict[str, Any]:
        """snake_case config fields for this result in the given units."""
        if not self.ok:
            return {}
        values = apply_weather(self.current, unit_system)
        values["snowfall"] = self.snowfall
        values["weather_updated_at"] = self.fetched_at
        return values


@dataclass
class _CacheEntry:
    stamp: float
    result: WeatherResult


class WeatherService:
    """Fetches current conditions, caching per location for ``refresh_interval`` seconds."""

    def __init__(
        self,
        config: WeatherConfig,
        weather_dir: str | Path | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.weather_dir = Path(weather_dir) if weather_dir else None
        self._transport = transport
        self._clock = clock
        self._cache: LockedValue[dict[str, _CacheEntry]] = LockedValue({})

    @property
    def enabled(self) -> bool:
        return bool(self.config.api_key)

    def cached(self, location: str) -> WeatherResult | None:
        """Cached result for a location if still within the refresh interval."""
        entry = self._cache.get().get(location.strip().lower())
        if entry is None:
            return None
        if self._clock() - entry.stamp >= self.config.refresh_interval:
            return None
        return WeatherResult(
            ok=True,
            current=entry.result.current,
            snowfall=entry.result.snowfall,
            fetched_at=entry.result.fetched_at,
        )

    async def refresh(self, location: str | None) -> WeatherResult:
        """Current weather for a location. Never raises."""
        location = (location or "").strip()
        if not location:
            return WeatherResult(ok=False, error="No weather location configured")
        if not self.enabled:
            return WeatherResult(ok=False, error="Weather API key not configured")

        cached = self.cached(location)
        if cached is not None:
            return cached

        try:
            async with httpx.AsyncClient(timeout=self.config.timeout, transport=self._transport) as client:
                data = await fetch_weather_data(
                    location,
                    self.config.api_key,
                    api_url=self.config.api_url,
                    client=client,
                )
                snowfall = None
                if self.config.snowfall_enabled:
                    snowfall = await get_snowfall_total(self.config.snowfall_url, client=client)
        except SignageError as e:
            logger.error("Error fetching weather data: %s", e)
            return WeatherResult(ok=False, error=str(e))

        current = data.get("current")
        if not isinstance(current, dict):
            logger.error("Weather response for %s has no current conditions", location)
            return WeatherResult(ok=False, error="Malformed weather response")

        result = WeatherResult(
            ok=True,
            current=current,
            snowfall=snowfall,
            fetched_at=datetime.now(timezone.utc),
            fresh=True,
        )
        key = location.lower()
        self._cache.update(lambda cache: {**cache, key: _CacheEntry(self._clock(), result)})

        if self.weather_dir is not None:
            try:
                write_weather_data(data, location, self.weather_dir)
            except OSError as e:
                logger.warning("Could not write weather snapshot: %s", e)

        return result
