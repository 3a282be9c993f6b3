"""Operations on the data model used by the HTTP layer.

Functions take an open SQLAlchemy session, commit their own work and raise
``NotFoundError`` / ``ValidationError`` for the web layer to translate.
"""

from . import global_config, image_lists, images, transfer, uploads

__all__ = [
    "global_config",
    "image_lists",
    "images",
    "transfer",
    "uploads",
]
