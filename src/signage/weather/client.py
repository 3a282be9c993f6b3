"""Weather provider access.

Talks to weatherapi.com's current-conditions endpoint, scrapes the season
snowfall total from a local news page and keeps a dated JSON snapshot of
every fetch on disk for debugging.
"""

import html
import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any

import httpx

from ..core.errors import UpstreamError
from ..core.retry import UPSTREAM_RETRY_CONFIG, async_retry

logger = logging.getLogger(__name__)

API_URL = "https://api.weatherapi.com/v1/current.json"
SNOWFALL_URL = "https://www.keweenawcountyonline.org/snowfall2.php"

_SUB_SNOW = re.compile(
    r"<p\b[^>]*\bclass\s*=\s*[\"'][^\"']*\bsub-snow\b[^\"']*[\"'][^>]*>(.*?)</p\s*>",
    re.IGNORECASE | re.DOTALL,
)
_TAG = re.compile(r"<[^>]+>")
_SEASON_TOTAL = re.compile(r"Season Total:\s*(\d+(?:\.\d+)?)\s*inches", re.IGNORECASE)


def location_query(location: str) -> str:
    """Free-text location as the API expects it ("Houghton, MI" -> "Houghton,MI")."""
    return re.sub(r"\s*,\s*", ",", location.strip())


@async_retry(UPSTREAM_RETRY_CONFIG)
async def _get(client: httpx.AsyncClient, url: str, params: dict[str, str] | None = None) -> httpx.Response:
    return await client.get(url, params=params)


async def fetch_weather_data(
    location: str,
    api_key: str,
    *,
    api_url: str = API_URL,
    client: httpx.AsyncClient | None = None,
    timeout: float = 10.0,
) -> dict[str, Any]:
    """Fetch current conditions for a location.

    Args:
        location: Free-text location, e.g. "Houghton, MI"
        api_key: weatherapi.com key
        api_url: Endpoint override
        client: Shared client (a short-lived one is created otherwise)
        timeout: Timeout for the short-lived client

    Returns:
        Decoded response body; conditions live under ``current``

    Raises:
        UpstreamError: transport failure, non-success status or bad JSON
    """
    params = {"key": api_key, "q": location_query(location), "aqi": "yes"}

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout) as own_client:
                response = await _get(own_client, api_url, params)
        else:
            response = await _get(client, api_url, params)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise UpstreamError("Weather API unreachable", details={"location": location}, cause=e) from e

    if not response.is_success:
        raise UpstreamError(
            f"Weather API error! status: {response.status_code}",
            details={"location": location},
        )

    try:
        data = response.json()
    except ValueError as e:
        raise UpstreamError("Weather API returned invalid JSON", cause=e) from e
    if not isinstance(data, dict):
        raise UpstreamError("Weather API returned an unexpected body", details={"location": location})

    logger.debug("Weather fetched for %s", location)
    return data


def snapshot_path(location: str, directory: str | Path, now: datetime | None = None) -> Path:
    """``<dir>/<location> <Www Mmm DD YYYY> <H>hr.json``: one file per hour."""
    now = now or datetime.now()
    safe_location = re.sub(r"[\\/:*?\"<>|]", "-", location.strip()) or "unknown"
    return Path(directory) / f"{safe_location} {now.strftime('%a %b %d %Y')} {now.hour}hr.json"


def write_weather_data(
    snapshot: dict[str, Any],
    location: str,
    directory: str | Path,
    now: datetime | None = None,
) -> Path:
    """Write a fetched payload to disk, overwriting the file for this hour."""
    path = snapshot_path(location, directory, now)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(snapshot, indent=2), encoding="utf-8")
    return path


def clear_weather_dir(directory: str | Path) -> int:
    """Remove old snapshots (run at startup).

    Returns:
        Number of files removed
    """
    path = Path(directory)
    path.mkdir(parents=True, exist_ok=True)
    removed = 0
    for snapshot in path.glob("*.json"):
        snapshot.unlink()
        removed += 1
    if removed:
        logger.info("Cleared %d weather snapshot(s) from %s", removed, path)
    return removed


def parse_snowfall_total(page: str) -> float | None:
    """Season total in inches from the page's ``p.sub-snow`` paragraphs."""
    text = " ".join(html.unescape(_TAG.sub(" ", block)) for block in _SUB_SNOW.findall(page))
    match = _SEASON_TOTAL.search(text)
    return float(match.group(1)) if match else None


async def get_snowfall_total(
    url: str = SNOWFALL_URL,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = 10.0,
) -> float | None:
    """Scrape the season snowfall total. Never raises; None on any failure."""
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout) as own_client:
                response = await _get(own_client, url)
        else:
            response = await _get(client, url)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.error("Error fetching snowfall data: %s", e)
        return None

    total = parse_snowfall_total(response.text)
    if total is None:
        logger.error("Could not find snowfall total on %s", url)
    return total
