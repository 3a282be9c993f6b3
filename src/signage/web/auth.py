"""Admin authentication.

Provides:
- Constant-time password check against the configured admin password
- Signed, expiring JWT bearer tokens (HS256)
- ``require_admin`` dependency for protected routes
- In-memory per-IP rate limiting for login attempts
"""

import hmac
import logging
import threading
import time

import jwt
from fastapi import Header, Request

from ..core.errors import AuthenticationError, RateLimitError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ADMIN_ROLE = "admin"


def check_password(candidate: str, expected: str) -> bool:
    """Compare passwords in constant time. An empty expected password never matches."""
    if not expected:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


def create_token(secret: str, lifetime: int = 86400, now: float | None = None) -> str:
    """Issue an admin token.

    Args:
        secret: Signing secret
        lifetime: Seconds until the token expires
        now: Issue time (epoch seconds), defaults to the current time

    Returns:
        Encoded JWT
    """
    issued = int(now if now is not None else time.time())
    payload = {"role": ADMIN_ROLE, "iat": issued, "exp": issued + lifetime}
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def verify_token(token: str, secret: str) -> dict:
    """Decode and validate an admin token.

    Raises:
        AuthenticationError: expired, tampered or not an admin token
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Token expired.", cause=e) from e
    except jwt.InvalidTokenError as e:
        raise AuthenticationError("Invalid token.", cause=e) from e

    if payload.get("role") != ADMIN_ROLE:
        raise AuthenticationError("Invalid token.")
    return payload


def bearer_token(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise AuthenticationError("No token provided.")

    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or " " in token:
        raise AuthenticationError("Malformed authorization header.")
    return token


def require_admin(
    request: Request,
    authorization: str | None = Header(None),
) -> dict:
    """Dependency guarding admin routes; returns the token claims."""
    secret = request.app.state.config.auth.jwt_secret.get_secret_value()
    return verify_token(bearer_token(authorization), secret)


class RateLimiter:
    """Simple in-memory rate limiter keyed by client IP."""

    def __init__(
        self,
        requests_per_minute: int = 10,
        block_duration: int = 300,
    ) -> None:
        self.per_minute = requests_per_minute
        self.block_duration = block_duration
        self._requests: dict[str, list[float]] = {}
        self._blocked: dict[str, float] = {}
        self._lock = threading.Lock()

    def check(self, client_ip: str, now: float | None = None) -> None:
        """Record an attempt.

        Raises:
            RateLimitError: the client is blocked or just went over the limit
        """
        now = now if now is not None else time.time()

        with self._lock:
            blocked_until = self._blocked.get(client_ip)
            if blocked_until is not None:
                if now < blocked_until:
                    remaining = int(blocked_until - now) + 1
                    raise RateLimitError(f"Rate limited. Try again in {remaining}s", retry_after=remaining)
                del self._blocked[client_ip]

            minute_ago = now - 60
            attempts = [t for t in self._requests.get(client_ip, []) if t > minute_ago]

            if len(attempts) >= self.per_minute:
                self._blocked[client_ip] = now + self.block_duration
                self._requests[client_ip] = attempts
                logger.warning("Blocking %s after %d attempts in a minute", client_ip, len(attempts))
                raise RateLimitError("Too many requests", retry_after=self.block_duration)

            attempts.append(now)
            self._requests[client_ip] = attempts

    def reset(self, client_ip: str | None = None) -> None:
        with self._lock:
            if client_ip is None:
                self._requests.clear()
                self._blocked.clear()
            else:
                self._requests.pop(client_ip, None)
                self._blocked.pop(client_ip, None)
