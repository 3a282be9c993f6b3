"""Access to the singleton global display configuration."""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.errors import ValidationError
from ..db.models import GLOBAL_CONFIG_ID, WEATHER_FIELDS, GlobalConfig, ImageList

logger = logging.getLogger(__name__)


def get_global_config(session: Session) -> GlobalConfig | None:
    """Return the config row, or None before first-run seeding."""
    return session.scalars(select(GlobalConfig).order_by(GlobalConfig.id).limit(1)).first()


def get_or_create_global_config(session: Session, **defaults: Any) -> GlobalConfig:
    """Find the singleton, creating it on first access."""
    config = get_global_config(session)
    if config is None:
        config = GlobalConfig(id=GLOBAL_CONFIG_ID)
        config.apply(defaults)
        session.add(config)
        session.flush()
        logger.info("Created global config")
    return config


def update_global_config(session: Session, changes: dict[str, Any]) -> GlobalConfig:
    """Upsert settings on the singleton.

    Args:
        session: Open session
        changes: snake_case settings to apply; snapshot fields are ignored

    Raises:
        ValidationError: ``active_slideshow_id`` names a list that does not exist
    """
    changes = {k: v for k, v in changes.items() if k not in WEATHER_FIELDS}

    active_id = changes.get("active_slideshow_id")
    if active_id and session.get(ImageList, active_id) is None:
        raise ValidationError("Selected slideshow does not exist.", details={"id": active_id})

    config = get_or_create_global_config(session)
    config.apply(changes)
    session.commit()

    logger.info("Global config updated: %s", ", ".join(sorted(changes)) or "no changes")
    return config


def record_weather(session: Session, snapshot: dict[str, Any]) -> None:
    """Store the latest weather snapshot fields on the config row."""
    config = get_global_config(session)
    if config is None:
        return
    config.apply({k: v for k, v in snapshot.items() if k in WEATHER_FIELDS})
    session.commit()
