"""Shared plumbing: settings, exceptions, logging, retries and locking."""

from .config import Config, ConfigManager, get_config
from .errors import (
    SignageError,
    ConfigurationError,
    AuthenticationError,
    ValidationError,
    NotFoundError,
    RateLimitError,
    UpstreamError,
)
from .logging import setup_logging, get_logger
from .retry import retry, async_retry, RetryConfig
from .threading import LockedValue, StoppableThread

__all__ = [
    # Config
    "Config",
    "ConfigManager",
    "get_config",
    # Errors
    "SignageError",
    "ConfigurationError",
    "AuthenticationError",
    "ValidationError",
    "NotFoundError",
    "RateLimitError",
    "UpstreamError",
    # Logging
    "setup_logging",
    "get_logger",
    # Retry
    "retry",
    "async_retry",
    "RetryConfig",
    # Threading
    "LockedValue",
    "StoppableThread",
]
