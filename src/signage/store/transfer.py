"""Import and export of the whole database or a single slideshow.

Full import is delete-then-reinsert without a surrounding transaction; a
crash midway leaves partial state.
"""

import logging
from typing import Any

from sqlalchemy import delete
from sqlalchemy.orm import Session

from ..core.errors import ValidationError
from ..db.models import DEFAULT_LIST_NAME, Image, ImageList, ImageListEntry
from ..schemas import (
    ExportAllResponse,
    ExportedList,
    GlobalConfigOut,
    ImageOut,
    ImportAllRequest,
    ListExport,
    ListImportRequest,
)
from .global_config import get_global_config, get_or_create_global_config
from .image_lists import find_image_list, get_image_list, list_image_lists
from .images import find_image_by_url, list_images

logger = logging.getLogger(__name__)


def export_all(session: Session) -> ExportAllResponse:
    """Dump config, lists (image ids only) and images."""
    config = get_global_config(session)
    return ExportAllResponse(
        global_config=GlobalConfigOut.model_validate(config) if config else None,
        image_lists=[
            ExportedList(
                id=image_list.id,
                name=image_list.name,
                images=image_list.image_ids,
                default_duration=image_list.default_duration,
                created_at=image_list.created_at,
            )
            for image_list in list_image_lists(session)
        ],
        images=[ImageOut.model_validate(image) for image in list_images(session)],
    )


def import_all(session: Session, payload: ImportAllRequest) -> dict[str, int]:
    """Replace everything with the payload, remapping ids.

    Image ids referenced by lists, and the active slideshow id, are
    translated from the file's id space to freshly generated ones.

    Returns:
        Counts of imported images and lists
    """
    config = get_or_create_global_config(session)
    settings = payload.global_config.changes()
    old_active_id = settings.pop("active_slideshow_id", None)
    config.apply(settings)
    config.active_slideshow_id = None

    session.execute(delete(ImageListEntry))
    session.execute(delete(ImageList))
    session.execute(delete(Image))
    session.flush()

    image_ids: dict[str, Image] = {}
    for record in payload.images:
        image = Image(
            url=record.url,
            credit=record.credit or "",
            duration=record.duration,
            order=record.order,
        )
        if record.created_at is not None:
            image.created_at = record.created_at
        session.add(image)
        if record.id:
            image_ids[record.id] = image
    session.flush()

    list_ids: dict[str, str] = {}
    seen_names: set[str] = set()
    for record in payload.image_lists:
        name = record.name.strip()
        if not name or name in seen_names:
            logger.warning("Skipping imported list with blank or duplicate name %r", record.name)
            continue
        seen_names.add(name)

        image_list = ImageList(name=name, default_duration=record.default_duration)
        # Ids that do not resolve are dropped
        image_list.set_images([image_ids[i] for i in record.images if i in image_ids])
        session.add(image_list)
        session.flush()
        if record.id:
            list_ids[record.id] = image_list.id

    if DEFAULT_LIST_NAME not in seen_names:
        session.add(ImageList(name=DEFAULT_LIST_NAME))

    if old_active_id:
        config.active_slideshow_id = list_ids.get(old_active_id)

    session.commit()

    counts = {"images": len(payload.images), "imageLists": len(seen_names)}
    logger.info("Imported %(images)d image(s) and %(imageLists)d list(s)", counts)
    return counts


def export_list(session: Session, list_id: str) -> ListExport:
    """One slideshow with its images embedded."""
    image_list = get_image_list(session, list_id)
    return ListExport(
        name=image_list.name,
        default_duration=image_list.default_duration,
        images=[ImageOut.model_validate(image) for image in image_list.images],
    )


def import_list(session: Session, list_id: str, payload: ListImportRequest) -> ImageList:
    """Overwrite one slideshow from an exported file.

    Incoming images are matched to the library by exact URL: a match is
    reused (its credit and duration refreshed), anything else is created.
    The list is renamed when the file carries a different, free name.
    """
    image_list = get_image_list(session, list_id)

    images: list[Image] = []
    created = 0
    for record in payload.images:
        url = record.url.strip()
        if not url:
            raise ValidationError("Imported image is missing a url.")

        image = find_image_by_url(session, url)
        if image is None:
            image = Image(url=url, credit=record.credit or "", duration=record.duration, order=record.order)
            session.add(image)
            created += 1
        else:
            image.credit = record.credit or image.credit
            if record.duration is not None:
                image.duration = record.duration
        images.append(image)
    session.flush()

    image_list.set_images(images)
    if "default_duration" in payload.model_fields_set:
        image_list.default_duration = payload.default_duration

    new_name = (payload.name or "").strip()
    if new_name and new_name != image_list.name:
        if image_list.is_default:
            logger.info("Keeping the %s list name on import", DEFAULT_LIST_NAME)
        elif find_image_list(session, new_name) is not None:
            logger.info("Not renaming %r: %r is taken", image_list.name, new_name)
        else:
            image_list.name = new_name

    session.commit()
    logger.info(
        "Imported %d image(s) into %r (%d new)", len(images), image_list.name, created
    )
    return image_list


def import_summary(counts: dict[str, Any]) -> str:
    return f"Data imported successfully ({counts['images']} images, {counts['imageLists']} slideshows)."
