"""Pydantic schemas for the JSON wire format.

Field names are snake_case in Python and camelCase on the wire. The same
models serve the API, the import/export files and the display player.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model speaking camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _adopt_mongo_id(data: Any) -> Any:
    """Accept ``_id`` (older exports) as an alias of ``id``."""
    if isinstance(data, dict) and "_id" in data and "id" not in data:
        data = {**data, "id": str(data["_id"])}
    return data


# =============================================================================
# Records
# =============================================================================


class ImageOut(CamelModel):
    """Image as returned by the API."""

    id: str
    url: str
    credit: str = ""
    duration: float | None = None
    order: int = 0
    created_at: datetime | None = None


class ImageListOut(CamelModel):
    """Image list with its images populated, in playback order."""

    id: str
    name: str
    images: list[ImageOut] = Field(default_factory=list)
    default_duration: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class GlobalConfigOut(CamelModel):
    """Global display configuration including the weather snapshot."""

    name: str = "Global Display Config"
    title: str = "Welcome!"
    location: str = ""
    global_slide_duration: float = 7
    weather_location: str = "Houghton, MI"
    time_format: str = "12hr"
    unit_system: str = "metric"
    active_slideshow_id: str | None = None
    events: list[str] = Field(default_factory=list)

    temp: float | None = None
    wind_chill: float | None = None
    wind_speed: float | None = None
    precipitation: float | None = None
    visibility: float | None = None
    condition: str | None = None
    wind_dir: str | None = None
    wind_degree: float | None = None
    humidity: float | None = None
    snowfall: float | None = None
    weather_updated_at: datetime | None = None


# =============================================================================
# Request Schemas
# =============================================================================


class LoginRequest(BaseModel):
    """Admin login request."""

    password: SecretStr


class ImageCreate(CamelModel):
    """New library image."""

    url: str
    credit: str = ""
    duration: float | None = Field(None, gt=0)
    order: int = 0

    @field_validator("url")
    @classmethod
    def url_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Image url is required")
        return v


class ImageUpdate(CamelModel):
    """Partial image update; only fields present in the body are applied."""

    url: str | None = None
    credit: str | None = None
    duration: float | None = Field(None, gt=0)
    order: int | None = None

    @field_validator("url")
    @classmethod
    def url_not_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Image url cannot be empty")
        return v.strip() if v else v


class ImageListCreate(CamelModel):
    """New image list."""

    name: str = ""


class ImageListUpdate(CamelModel):
    """Wholesale replacement of a list's image sequence."""

    images: list[str]
    default_duration: float | None = Field(None, gt=0)


class GlobalConfigUpdate(CamelModel):
    """Partial global config update. Unknown and snapshot fields are ignored."""

    name: str | None = None
    title: str | None = None
    location: str | None = None
    global_slide_duration: float | None = Field(None, gt=0)
    weather_location: str | None = None
    time_format: Literal["12hr", "24hr"] | None = None
    unit_system: Literal["metric", "imperial"] | None = None
    active_slideshow_id: str | None = None
    events: list[str] | None = None

    @field_validator(
        "name",
        "title",
        "location",
        "global_slide_duration",
        "weather_location",
        "time_format",
        "unit_system",
        "events",
        mode="before",
    )
    @classmethod
    def not_null(cls, v: Any) -> Any:
        # Omit a field to leave it alone; only the active slideshow can be cleared
        if v is None:
            raise ValueError("may not be null")
        return v

    @field_validator("active_slideshow_id")
    @classmethod
    def empty_means_none(cls, v: str | None) -> str | None:
        return v or None

    @field_validator("events")
    @classmethod
    def drop_blank_events(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return [line.strip() for line in v if line.strip()]

    def changes(self) -> dict[str, Any]:
        """Fields explicitly sent, keyed by model attribute name."""
        return self.model_dump(include=self.model_fields_set)


# =============================================================================
# Import / Export
# =============================================================================


class ImportedImage(CamelModel):
    """Image record inside an import file."""

    id: str | None = None
    url: str
    credit: str | None = None
    duration: float | None = None
    order: int = 0
    created_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def accept_mongo_id(cls, data: Any) -> Any:
        return _adopt_mongo_id(data)

    @field_validator("duration")
    @classmethod
    def positive_or_none(cls, v: float | None) -> float | None:
        return v if v and v > 0 else None

    @field_validator("credit", mode="before")
    @classmethod
    def credit_or_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class ImportedList(CamelModel):
    """Image list inside a full import file. ``images`` holds image ids."""

    id: str | None = None
    name: str
    images: list[str] = Field(default_factory=list)
    default_duration: float | None = None

    @model_validator(mode="before")
    @classmethod
    def accept_mongo_id(cls, data: Any) -> Any:
        return _adopt_mongo_id(data)

    @field_validator("images", mode="before")
    @classmethod
    def ids_from_embedded(cls, v: Any) -> Any:
        # Populated exports embed whole image objects
        if isinstance(v, list):
            return [
                str(item.get("id") or item.get("_id")) if isinstance(item, dict) else item
                for item in v
            ]
        return v


class ImportAllRequest(CamelModel):
    """Full database restore."""

    global_config: GlobalConfigUpdate
    image_lists: list[ImportedList]
    images: list[ImportedImage]


class ListImportRequest(CamelModel):
    """Single slideshow import; images are matched by exact URL."""

    name: str | None = None
    default_duration: float | None = None
    images: list[ImportedImage]

    @model_validator(mode="before")
    @classmethod
    def unwrap(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("imageList"), dict):
            return data["imageList"]
        return data


class ExportedList(CamelModel):
    """Image list inside a full export: images are referenced by id."""

    id: str
    name: str
    images: list[str]
    default_duration: float | None = None
    created_at: datetime | None = None


class ExportAllResponse(CamelModel):
    global_config: GlobalConfigOut | None
    image_lists: list[ExportedList]
    images: list[ImageOut]


class ListExport(CamelModel):
    name: str
    default_duration: float | None = None
    images: list[ImageOut]


# =============================================================================
# Response Schemas
# =============================================================================


class APIResponse(BaseModel):
    """Standard API response wrapper."""

    success: bool
    message: str = ""
    data: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Error response."""

    success: bool = False
    error: str
    detail: str | None = None


class TokenResponse(BaseModel):
    token: str


class UploadResponse(BaseModel):
    url: str


class AdminDataResponse(CamelModel):
    global_config: GlobalConfigOut | None
    image_lists: list[ImageListOut]
    images: list[ImageOut]


class DisplayDataResponse(CamelModel):
    """What a display needs: settings, weather and the active slideshow."""

    global_config: GlobalConfigOut
    image_list: ImageListOut


class ListImportResponse(CamelModel):
    msg: str
    image_list: ImageListOut
