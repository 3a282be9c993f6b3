"""Image list (slideshow) operations."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.errors import NotFoundError, ValidationError
from ..db.models import DEFAULT_LIST_NAME, GlobalConfig, Image, ImageList

logger = logging.getLogger(__name__)

_UNSET = object()


def list_image_lists(session: Session) -> list[ImageList]:
    """All lists sorted by name."""
    return list(session.scalars(select(ImageList).order_by(ImageList.name)))


def get_image_list(session: Session, list_id: str) -> ImageList:
    image_list = session.get(ImageList, list_id)
    if image_list is None:
        raise NotFoundError("Image list not found.", details={"id": list_id})
    return image_list


def find_image_list(session: Session, name: str) -> ImageList | None:
    """Exact, case-sensitive name lookup."""
    return session.scalars(select(ImageList).where(ImageList.name == name)).first()


def create_image_list(session: Session, name: str | None) -> ImageList:
    """Create an empty list.

    Raises:
        ValidationError: name is blank or already taken
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("Image list name cannot be empty.")
    if find_image_list(session, name) is not None:
        raise ValidationError("Image list already exists.", details={"name": name})

    image_list = ImageList(name=name)
    session.add(image_list)
    session.commit()

    logger.info("Image list %r created", name)
    return image_list


def resolve_images(session: Session, image_ids: list[str]) -> list[Image]:
    """Load images for an ordered id sequence, keeping duplicates.

    Raises:
        ValidationError: any id is unknown
    """
    found = {
        image.id: image
        for image in session.scalars(select(Image).where(Image.id.in_(set(image_ids))))
    }
    missing = [image_id for image_id in image_ids if image_id not in found]
    if missing:
        raise ValidationError("Unknown image id(s).", details={"ids": ",".join(missing)})
    return [found[image_id] for image_id in image_ids]


def replace_images(
    session: Session,
    list_id: str,
    image_ids: list[str],
    default_duration: float | None | object = _UNSET,
) -> ImageList:
    """Replace a list's image sequence wholesale (reorder/add/remove in one call)."""
    image_list = get_image_list(session, list_id)
    image_list.set_images(resolve_images(session, image_ids))
    if default_duration is not _UNSET:
        image_list.default_duration = default_duration
    session.commit()

    logger.debug("Image list %r now holds %d image(s)", image_list.name, len(image_ids))
    return image_list


def delete_image_list(session: Session, list_id: str) -> None:
    """Delete a list; the Default list is protected.

    Clears the active slideshow selection when it pointed at this list.
    """
    image_list = get_image_list(session, list_id)
    if image_list.is_default:
        raise ValidationError(f"Cannot delete the '{DEFAULT_LIST_NAME}' slideshow.")

    for config in session.scalars(select(GlobalConfig).where(GlobalConfig.active_slideshow_id == list_id)):
        config.active_slideshow_id = None

    session.delete(image_list)
    session.commit()
    logger.info("Image list %r deleted", image_list.name)


def resolve_active_list(session: Session, config: GlobalConfig) -> ImageList | None:
    """The list to display: the selected one, else the Default list."""
    if config.active_slideshow_id:
        image_list = session.get(ImageList, config.active_slideshow_id)
        if image_list is not None:
            return image_list
        logger.warning(
            "Active slideshow %s no longer exists, falling back to %s",
            config.active_slideshow_id,
            DEFAULT_LIST_NAME,
        )
    return find_image_list(session, DEFAULT_LIST_NAME)
