"""Web API routes."""

from .admin import router as admin_router
from .display import health_router
from .display import router as display_router
from .transfer import router as transfer_router

__all__ = [
    "admin_router",
    "display_router",
    "health_router",
    "transfer_router",
]
