"""Uploaded image files on disk."""

import logging
import random
import shutil
import time
from pathlib import Path
from typing import BinaryIO

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/userImages/"


def unique_filename(original: str | None) -> str:
    """``<epoch-ms>-<random><ext>``, keeping the original extension."""
    suffix = Path(original or "").suffix.lower()
    return f"{int(time.time() * 1000)}-{random.randint(0, 999_999_999)}{suffix}"


def save_upload(source: BinaryIO, original_name: str | None, upload_dir: str | Path) -> str:
    """Store an uploaded file and return its public URL path."""
    directory = Path(upload_dir)
    directory.mkdir(parents=True, exist_ok=True)

    filename = unique_filename(original_name)
    with open(directory / filename, "wb") as target:
        shutil.copyfileobj(source, target)

    logger.info("Stored upload %s as %s", original_name, filename)
    return UPLOAD_URL_PREFIX + filename


def remove_upload(url: str, upload_dir: str | Path) -> bool:
    """Delete the file behind an upload URL. Other URLs are left alone.

    Returns:
        True if a file was removed
    """
    if not url.startswith(UPLOAD_URL_PREFIX):
        return False

    name = url[len(UPLOAD_URL_PREFIX):]
    # Reject anything that is not a plain file name
    if not name or Path(name).name != name:
        return False

    path = Path(upload_dir) / name
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    logger.info("Removed upload %s", name)
    return True
