"""Public display routes (no authentication)."""

import logging

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from ...core.errors import NotFoundError
from ...db import Database
from ...schemas import APIResponse, DisplayDataResponse, GlobalConfigOut, ImageListOut
from ...store import global_config, image_lists
from ...weather import WeatherService
from ..deps import get_database, get_weather_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/display", tags=["display"])
health_router = APIRouter(prefix="/api", tags=["health"])


def _load_config(database: Database) -> GlobalConfigOut:
    with database.session() as session:
        config = global_config.get_global_config(session)
        if config is None:
            raise NotFoundError("Global configuration not found.")
        return GlobalConfigOut.model_validate(config)


def _load_display(database: Database) -> DisplayDataResponse:
    with database.session() as session:
        config = global_config.get_global_config(session)
        if config is None:
            raise NotFoundError("Global configuration not found.")

        image_list = image_lists.resolve_active_list(session, config)
        if image_list is None:
            raise NotFoundError("Default image list not found.")

        return DisplayDataResponse(
            global_config=GlobalConfigOut.model_validate(config),
            image_list=ImageListOut.model_validate(image_list),
        )


def _record_weather(database: Database, fields: dict) -> None:
    with database.session() as session:
        global_config.record_weather(session, fields)


@router.get("/data")
async def display_data(
    database: Database = Depends(get_database),
    weather: WeatherService = Depends(get_weather_service),
) -> DisplayDataResponse:
    """Active slideshow plus settings, with weather refreshed best-effort."""
    data = await run_in_threadpool(_load_display, database)
    config = data.global_config

    result = await weather.refresh(config.weather_location)
    if not result.ok:
        logger.debug("Serving stored weather: %s", result.error)
        return data

    fields = result.fields(config.unit_system)
    if result.fresh:
        await run_in_threadpool(_record_weather, database, fields)

    return data.model_copy(update={"global_config": config.model_copy(update=fields)})


@router.get("/global-config")
async def display_global_config(database: Database = Depends(get_database)) -> GlobalConfigOut:
    """Stored config without a weather refresh."""
    return await run_in_threadpool(_load_config, database)


@health_router.get("/health")
async def health_check() -> APIResponse:
    """Health check endpoint (no auth required)."""
    return APIResponse(success=True, message="OK")
