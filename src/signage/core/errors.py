"""Exceptions raised by the signage server and player.

Each class knows the HTTP status it is reported with and the log level
it deserves, so the web layer turns any of them into a response with a
single handler.
"""

import logging
from typing import Any


class SignageError(Exception):
    """Root of the signage exception tree.

    ``message`` is what API clients see; ``details`` is extra context that
    only goes to the logs.
    """

    status_code: int = 500
    log_level: int = logging.ERROR

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})
        self.cause = cause

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"

    def to_dict(self) -> dict[str, Any]:
        """Log-friendly view, safe to pass as ``extra=``."""
        return {
            "error_type": type(self).__name__,
            "error_message": self.message,
            "error_details": self.details,
        }


class ConfigurationError(SignageError):
    """The YAML file or an environment override holds an unusable value."""

    log_level = logging.CRITICAL


class AuthenticationError(SignageError):
    """Wrong admin password, or a bearer token that is absent, bad or expired."""

    status_code = 401
    log_level = logging.WARNING


class ValidationError(SignageError):
    """A request the store refuses.

    Covers blank or duplicate names, unknown image ids inside a list,
    malformed import documents and attempts to delete the Default list.
    """

    status_code = 400
    log_level = logging.WARNING


class NotFoundError(SignageError):
    status_code = 404
    log_level = logging.INFO


class RateLimitError(SignageError):
    """Too many login attempts from one address.

    ``retry_after`` is the number of seconds until the block lifts and is
    echoed in the ``Retry-After`` header.
    """

    status_code = 429
    log_level = logging.WARNING

    def __init__(self, message: str, retry_after: int | None = None, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details)
        self.retry_after = retry_after
        if retry_after is not None:
            self.details["retry_after"] = retry_after


class UpstreamError(SignageError):
    """The weather API, the snowfall page or the display server misbehaved.

    Transport failures, non-success statuses and unparseable bodies all
    end up here.
    """

    status_code = 502
