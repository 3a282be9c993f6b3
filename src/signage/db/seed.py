"""First-run seeding of placeholder content."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import DEFAULT_LIST_NAME, GLOBAL_CONFIG_ID, GlobalConfig, Image, ImageList

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGES = (
    {
        "url": "https://placehold.co/1280x720/1a1a1a/ffffff?text=Image+One",
        "credit": "First slide",
        "duration": 5,
    },
    {
        "url": "https://placehold.co/1280x720/4a4a4a/ffffff?text=Image+Two",
        "credit": "Second slide",
    },
)


def seed_default_data(session: Session) -> bool:
    """Create placeholder images, the Default list and the config singleton.

    Skipped when a global config already exists; a missing Default list is
    recreated either way.

    Returns:
        True if the database was seeded
    """
    default_list = session.scalars(select(ImageList).where(ImageList.name == DEFAULT_LIST_NAME)).first()

    if session.scalars(select(GlobalConfig)).first() is not None:
        if default_list is None:
            session.add(ImageList(name=DEFAULT_LIST_NAME))
            session.commit()
            logger.warning("Default image list was missing and has been recreated")
        else:
            logger.info("Existing data found, skipping database seed")
        return False

    logger.info("No data found, seeding the database with default values")

    images = [Image(**fields) for fields in PLACEHOLDER_IMAGES]
    session.add_all(images)

    if default_list is None:
        default_list = ImageList(name=DEFAULT_LIST_NAME)
        session.add(default_list)
    default_list.set_images(images)

    session.add(
        GlobalConfig(
            id=GLOBAL_CONFIG_ID,
            name="Global Display Config",
            title="Welcome to the Display!",
            global_slide_duration=8,
            unit_system="imperial",
        )
    )
    session.commit()

    logger.info("Database seeding complete")
    return True
