"""SQLAlchemy models for the signage data store.

Three collections: the image library, named image lists (slideshows) and
the singleton global display config. List membership is an explicit,
ordered relation table so the same image may appear in many lists, or
twice in one.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

DEFAULT_LIST_NAME = "Default"
GLOBAL_CONFIG_ID = 1


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for all models."""


class Image(Base):
    """A library image, referenced by any number of image lists."""

    __tablename__ = "images"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    credit: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    # Seconds; None falls back to the list / global default
    duration: Mapped[float | None] = mapped_column(Float, nullable=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Image(id={self.id}, url={self.url!r})>"


class ImageList(Base):
    """A named slideshow: an ordered sequence of image references."""

    __tablename__ = "image_lists"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    default_duration: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    entries: Mapped[list["ImageListEntry"]] = relationship(
        back_populates="image_list",
        order_by="ImageListEntry.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )

    @property
    def images(self) -> list[Image]:
        """Images in playback order."""
        return [entry.image for entry in self.entries]

    @property
    def image_ids(self) -> list[str]:
        return [entry.image_id for entry in self.entries]

    def set_images(self, images: list[Image]) -> None:
        """Replace the whole sequence; positions are renumbered from 0."""
        self.entries = [ImageListEntry(image=image, position=i) for i, image in enumerate(images)]

    @property
    def is_default(self) -> bool:
        return self.name == DEFAULT_LIST_NAME

    def __repr__(self) -> str:
        return f"<ImageList(id={self.id}, name={self.name!r}, size={len(self.entries)})>"


class ImageListEntry(Base):
    """One slot of an image list."""

    __tablename__ = "image_list_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    list_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("image_lists.id", ondelete="CASCADE"), nullable=False, index=True
    )
    image_id: Mapped[str] = mapped_column(String(32), ForeignKey("images.id"), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    image_list: Mapped[ImageList] = relationship(back_populates="entries")
    image: Mapped[Image] = relationship(lazy="joined")


class GlobalConfig(Base):
    """Display-wide settings and the last fetched weather snapshot.

    Singleton - only one row exists (id=1).
    """

    __tablename__ = "global_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=GLOBAL_CONFIG_ID)

    # Settings
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="Global Display Config")
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="Welcome!")
    location: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    global_slide_duration: Mapped[float] = mapped_column(Float, nullable=False, default=7)
    weather_location: Mapped[str] = mapped_column(String(255), nullable=False, default="Houghton, MI")
    time_format: Mapped[str] = mapped_column(String(8), nullable=False, default="12hr")
    unit_system: Mapped[str] = mapped_column(String(16), nullable=False, default="metric")
    active_slideshow_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    events: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Weather snapshot
    temp: Mapped[float | None] = mapped_column(Float, nullable=True)
    wind_chill: Mapped[float | None] = mapped_column(Float, nullable=True)
    wind_speed: Mapped[float | None] = mapped_column(Float, nullable=True)
    precipitation: Mapped[float | None] = mapped_column(Float, nullable=True)
    visibility: Mapped[float | None] = mapped_column(Float, nullable=True)
    condition: Mapped[str | None] = mapped_column(String(255), nullable=True)
    wind_dir: Mapped[str | None] = mapped_column(String(8), nullable=True)
    wind_degree: Mapped[float | None] = mapped_column(Float, nullable=True)
    humidity: Mapped[float | None] = mapped_column(Float, nullable=True)
    snowfall: Mapped[float | None] = mapped_column(Float, nullable=True)
    weather_updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def apply(self, fields: dict[str, Any]) -> None:
        """Set known attributes from a snake_case mapping."""
        for key, value in fields.items():
            if key in SETTINGS_FIELDS or key in WEATHER_FIELDS:
                setattr(self, key, value)

    def __repr__(self) -> str:
        return f"<GlobalConfig(title={self.title!r}, active={self.active_slideshow_id})>"


SETTINGS_FIELDS = frozenset(
    {
        "name",
        "title",
        "location",
        "global_slide_duration",
        "weather_location",
        "time_format",
        "unit_system",
        "active_slideshow_id",
        "events",
    }
)

WEATHER_FIELDS = frozenset(
    {
        "temp",
        "wind_chill",
        "wind_speed",
        "precipitation",
        "visibility",
        "condition",
        "wind_dir",
        "wind_degree",
        "humidity",
        "snowfall",
        "weather_updated_at",
    }
)
