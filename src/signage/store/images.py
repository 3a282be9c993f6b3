"""Image library operations."""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.errors import NotFoundError
from ..db.models import Image, ImageList, ImageListEntry

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("url", "credit", "duration", "order")


def list_images(session: Session) -> list[Image]:
    """All images, newest first."""
    return list(session.scalars(select(Image).order_by(Image.created_at.desc(), Image.id)))


def get_image(session: Session, image_id: str) -> Image:
    image = session.get(Image, image_id)
    if image is None:
        raise NotFoundError("Image not found.", details={"id": image_id})
    return image


def find_image_by_url(session: Session, url: str) -> Image | None:
    """Oldest image with exactly this URL."""
    return session.scalars(
        select(Image).where(Image.url == url).order_by(Image.created_at, Image.id).limit(1)
    ).first()


def create_image(
    session: Session,
    url: str,
    credit: str = "",
    duration: float | None = None,
    order: int = 0,
    commit: bool = True,
) -> Image:
    image = Image(url=url, credit=credit or "", duration=duration, order=order)
    session.add(image)
    if commit:
        session.commit()
        logger.info("Image %s created: %s", image.id, url)
    else:
        session.flush()
    return image


def update_image(session: Session, image_id: str, changes: dict[str, Any]) -> Image:
    """Apply the given fields; ``duration=None`` clears the per-image duration."""
    image = get_image(session, image_id)
    for key in EDITABLE_FIELDS:
        if key not in changes:
            continue
        value = changes[key]
        if key == "credit" and value is None:
            value = ""
        if key in ("url", "order") and value is None:
            continue
        setattr(image, key, value)
    session.commit()
    return image


def delete_image(session: Session, image_id: str) -> Image:
    """Delete an image and pull it out of every list that references it.

    Returns:
        The deleted (detached) image, so callers can clean up its file
    """
    image = get_image(session, image_id)

    lists = session.scalars(
        select(ImageList).join(ImageListEntry).where(ImageListEntry.image_id == image_id).distinct()
    ).all()
    for image_list in lists:
        for entry in [e for e in image_list.entries if e.image_id == image_id]:
            image_list.entries.remove(entry)

    session.delete(image)
    session.commit()

    logger.info("Image %s deleted and removed from %d list(s)", image_id, len(lists))
    return image
