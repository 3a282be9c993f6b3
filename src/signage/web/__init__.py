"""Web interface module.

Provides:
- FastAPI application with the admin and display REST APIs
- JWT authentication for admin routes
- Admin and display HTML pages
"""

from .app import create_app, get_app

__all__ = [
    "create_app",
    "get_app",
]
