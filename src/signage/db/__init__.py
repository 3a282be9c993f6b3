"""Data store: SQLAlchemy models, sessions and first-run seeding."""

from .models import (
    DEFAULT_LIST_NAME,
    Base,
    GlobalConfig,
    Image,
    ImageList,
    ImageListEntry,
)
from .session import Database

__all__ = [
    "DEFAULT_LIST_NAME",
    "Base",
    "Database",
    "GlobalConfig",
    "Image",
    "ImageList",
    "ImageListEntry",
]
