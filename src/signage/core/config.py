"""Server settings: pydantic models backed by a YAML file.

Sections mirror the parts of the system (server, auth, database, storage,
weather, display, logging). Deployment secrets can be supplied through
environment variables instead of the file.
"""

import logging
import os
import secrets
import threading
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, SecretStr, field_serializer, field_validator

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/signage.yaml")

# Environment variable -> (section, field)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "DATABASE_URL": ("database", "url"),
    "SIGNAGE_DATABASE_URL": ("database", "url"),
    "JWT_SECRET": ("auth", "jwt_secret"),
    "ADMIN_PASSWORD": ("auth", "admin_password"),
    "WEATHER_API_KEY": ("weather", "api_key"),
    "PORT": ("server", "port"),
}


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = Field("0.0.0.0", description="Server bind address")
    port: int = Field(5001, ge=1, le=65535, description="Server port")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")


class AuthConfig(BaseModel):
    """Admin authentication configuration."""

    admin_password: SecretStr = Field(default=SecretStr(""), description="Admin password (empty disables login)")
    jwt_secret: SecretStr = Field(
        default_factory=lambda: SecretStr(secrets.token_hex(32)),
        description="Token signing secret",
    )
    token_lifetime: int = Field(86400, ge=60, description="Token lifetime in seconds")
    login_attempts_per_minute: int = Field(10, ge=1, description="Login attempts allowed per client IP")

    @field_serializer("admin_password", "jwt_secret", when_used="json")
    def _expose_secret(self, value: SecretStr) -> str:
        # Secrets are written to the config file in clear text
        return value.get_secret_value()


class DatabaseConfig(BaseModel):
    """Data store configuration."""

    url: str = Field("sqlite:///./signage.db", description="SQLAlchemy database URL")
    echo: bool = Field(False, description="Log SQL statements")


class StorageConfig(BaseModel):
    """On-disk locations for uploads and weather snapshots."""

    upload_dir: str = Field("userImages", description="Directory for uploaded images")
    weather_dir: str = Field("weather", description="Directory for weather snapshots")


class WeatherConfig(BaseModel):
    """Weather provider settings."""

    api_key: str = Field("", description="weatherapi.com API key")
    api_url: str = Field("https://api.weatherapi.com/v1/current.json", description="Current weather endpoint")
    refresh_interval: int = Field(60, ge=0, description="Seconds a fetched snapshot stays fresh")
    timeout: float = Field(10.0, gt=0, description="HTTP timeout in seconds")
    snowfall_enabled: bool = Field(False, description="Scrape the season snowfall total")
    snowfall_url: str = Field(
        "https://www.keweenawcountyonline.org/snowfall2.php",
        description="Page carrying the season snowfall total",
    )


class DisplayConfig(BaseModel):
    """Display client timing."""

    poll_interval: int = Field(60, ge=5, description="Seconds between display data refetches")
    error_reload_delay: int = Field(30, ge=1, description="Seconds before reloading after an error")
    fallback_duration: float = Field(7.0, gt=0, description="Slide duration when nothing else is set")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field("INFO", description="Log level")
    format: str = Field("simple", description="Format: simple, structured")
    file: str | None = Field(None, description="Log file path")
    max_size_mb: int = Field(10, ge=1, description="Max log file size")
    backup_count: int = Field(3, ge=0, description="Number of backup files")

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v not in ("simple", "structured"):
            raise ValueError("format must be 'simple' or 'structured'")
        return v


class Config(BaseModel):
    """Root configuration model."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    weather: WeatherConfig = Field(default_factory=WeatherConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def apply_env_overrides(config: Config, environ: dict[str, str] | None = None) -> Config:
    """Return a copy of ``config`` with deployment environment values applied.

    Args:
        config: Configuration loaded from file
        environ: Environment mapping (defaults to ``os.environ``)
    """
    environ = os.environ if environ is None else environ
    data = config.model_dump(mode="json")
    for var, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(var)
        if value:
            data[section][key] = value
    try:
        return Config.model_validate(data)
    except ValueError as e:
        raise ConfigurationError("Invalid environment override", cause=e) from e


class ConfigManager:
    """Owns the YAML config file.

    The file holds what an operator set; ``get()`` layers the environment
    on top of it each time, so secrets supplied by the deployment never
    land on disk. A missing file is created with defaults, which also
    pins the generated JWT secret across restarts.
    """

    _instance: "ConfigManager | None" = None
    _instance_lock = threading.Lock()

    def __init__(self, config_path: str | Path) -> None:
        self._path = Path(config_path)
        self._lock = threading.RLock()
        self._stored = self._read() if self._path.exists() else self._create()

    @classmethod
    def get_instance(cls, config_path: str | Path | None = None) -> "ConfigManager":
        """Process-wide manager; ``config_path`` only matters on the first call."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls(config_path or DEFAULT_CONFIG_PATH)
            return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        with cls._instance_lock:
            cls._instance = None

    @property
    def path(self) -> Path:
        return self._path

    def _create(self) -> Config:
        logger.info("No config at %s, writing defaults", self._path)
        config = Config()
        self._write(config)
        return config

    def _read(self) -> Config:
        try:
            raw = yaml.safe_load(self._path.read_text()) or {}
            config = Config.model_validate(raw)
        except (OSError, yaml.YAMLError, ValueError) as e:
            raise ConfigurationError("Failed to load config", details={"path": str(self._path)}, cause=e) from e
        logger.info("Loaded config from %s", self._path)
        return config

    def _write(self, config: Config) -> None:
        # Write-then-rename so a crash never leaves half a file behind
        self._path.parent.mkdir(parents=True, exist_ok=True)
        staging = self._path.with_suffix(".tmp")
        staging.write_text(yaml.safe_dump(config.model_dump(mode="json"), default_flow_style=False, sort_keys=False))
        staging.replace(self._path)

    def get(self) -> Config:
        """Stored settings with environment overrides applied."""
        with self._lock:
            return apply_env_overrides(self._stored)


def get_config() -> Config:
    return ConfigManager.get_instance().get()


def get_config_manager() -> ConfigManager:
    return ConfigManager.get_instance()
