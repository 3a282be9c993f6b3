"""FastAPI application for the signage server.

Serves the admin and public JSON APIs, uploaded images, and the two HTML
pages (display and admin).
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from .. import __version__
from ..core.config import Config, get_config_manager
from ..core.errors import RateLimitError, SignageError
from ..db import Database
from ..db.seed import seed_default_data
from ..schemas import ErrorResponse
from ..weather import WeatherService, clear_weather_dir
from .auth import RateLimiter
from .routes import admin_router, display_router, health_router, transfer_router

logger = logging.getLogger(__name__)

# Module directory for templates/static
MODULE_DIR = Path(__file__).parent


def initialize(config: Config, database: Database) -> None:
    """One-time startup work: schema, first-run seed, stale weather snapshots."""
    database.create_all()
    with database.session() as session:
        seed_default_data(session)
    clear_weather_dir(config.storage.weather_dir)


def create_app(
    config: Config | None = None,
    database: Database | None = None,
    weather: WeatherService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Server configuration (defaults to the config manager's)
        database: Database handle (defaults to ``config.database.url``)
        weather: Weather service (defaults to one built from ``config.weather``)

    Returns:
        Configured FastAPI app
    """
    config = config or get_config_manager().get()
    database = database or Database(config.database.url, echo=config.database.echo)
    weather = weather or WeatherService(config.weather, weather_dir=config.storage.weather_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        initialize(config, database)
        logger.info("Signage server ready (database: %s)", database.url)
        yield
        database.dispose()

    app = FastAPI(
        title="Digital Signage",
        description="Digital signage admin and display API",
        version=__version__,
        docs_url="/api/docs",
        redoc_url=None,
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.database = database
    app.state.weather = weather
    app.state.login_limiter = RateLimiter(requests_per_minute=config.auth.login_attempts_per_minute)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    upload_dir = Path(config.storage.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/userImages", StaticFiles(directory=str(upload_dir)), name="user_images")

    static_dir = MODULE_DIR / "static"
    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    templates = Jinja2Templates(directory=str(MODULE_DIR / "templates"))

    app.include_router(health_router)
    app.include_router(admin_router)
    app.include_router(transfer_router)
    app.include_router(display_router)

    @app.get("/", response_class=HTMLResponse, include_in_schema=False)
    async def display_page(request: Request):
        """Full-screen slideshow page."""
        return templates.TemplateResponse(
            request,
            "display.html",
            {
                "poll_interval": config.display.poll_interval,
                "error_reload_delay": config.display.error_reload_delay,
                "fallback_duration": config.display.fallback_duration,
            },
        )

    @app.get("/admin", response_class=HTMLResponse, include_in_schema=False)
    async def admin_page(request: Request):
        """Admin single-page UI."""
        return templates.TemplateResponse(request, "admin.html", {"version": __version__})

    return app


def _error_response(status_code: int, error: str, detail: str, headers: dict | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, detail=detail)
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(SignageError)
    async def signage_error_handler(request: Request, exc: SignageError):
        if exc.status_code >= 500:
            logger.log(exc.log_level, "%s %s failed: %s", request.method, request.url.path, exc, extra=exc.to_dict())
        else:
            logger.debug("%s %s rejected: %s", request.method, request.url.path, exc)

        headers = None
        if isinstance(exc, RateLimitError) and exc.retry_after is not None:
            headers = {"Retry-After": str(exc.retry_after)}
        return _error_response(exc.status_code, type(exc).__name__, exc.message, headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = "Invalid request."
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            detail = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
        return _error_response(400, "ValidationError", detail)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(500, "ServerError", "Server Error")


# Global app instance
_app: FastAPI | None = None


def get_app() -> FastAPI:
    """Get or create the FastAPI application.

    Returns:
        FastAPI application instance
    """
    global _app
    if _app is None:
        _app = create_app()
    return _app
