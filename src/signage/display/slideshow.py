"""Slideshow state machine shared by the headless player and its tests.

States::

    LOADING -> DISPLAYING(i) -> DISPLAYING((i + 1) mod N) -> ...
    any     -> ERROR  (fetch failure, missing or empty list)
    ERROR   -> LOADING (reload after a fixed delay)
"""

import logging
from enum import Enum

from ..schemas import DisplayDataResponse, GlobalConfigOut, ImageListOut, ImageOut

logger = logging.getLogger(__name__)

FALLBACK_DURATION = 7.0


class SlideshowState(Enum):
    LOADING = "loading"
    DISPLAYING = "displaying"
    ERROR = "error"


def resolve_duration(*candidates: float | None, fallback: float = FALLBACK_DURATION) -> float:
    """First positive candidate, else ``fallback``.

    Called as ``resolve_duration(image.duration, list.default_duration,
    config.global_slide_duration)``.
    """
    for value in candidates:
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)) and value > 0:
            return float(value)
    return fallback


class Slideshow:
    """Tracks the displayed slide of the active image list."""

    def __init__(self, fallback_duration: float = FALLBACK_DURATION):
        self.fallback_duration = fallback_duration
        self.state = SlideshowState.LOADING
        self.index = 0
        self.config: GlobalConfigOut | None = None
        self.image_list: ImageListOut | None = None
        self.error: str | None = None

    @property
    def images(self) -> list[ImageOut]:
        return self.image_list.images if self.image_list else []

    @property
    def current(self) -> ImageOut | None:
        if self.state is not SlideshowState.DISPLAYING:
            return None
        return self.images[self.index]

    def load(self, data: DisplayDataResponse) -> None:
        """Take freshly fetched display data.

        The current index survives when still in range, otherwise playback
        restarts at the first slide. An empty list is an error.
        """
        self.config = data.global_config
        self.image_list = data.image_list

        if not self.images:
            self.fail("No images in the selected slideshow.")
            return

        if self.state is not SlideshowState.DISPLAYING or self.index >= len(self.images):
            self.index = 0
        self.state = SlideshowState.DISPLAYING
        self.error = None

    def fail(self, message: str) -> None:
        if self.state is not SlideshowState.ERROR:
            logger.warning("Slideshow error: %s", message)
        self.state = SlideshowState.ERROR
        self.error = message

    def reload(self) -> None:
        self.state = SlideshowState.LOADING
        self.error = None

    def current_duration(self) -> float:
        """Seconds to show the current slide (image, then list, then global)."""
        image = self.current
        if image is None:
            return self.fallback_duration
        return resolve_duration(
            image.duration,
            self.image_list.default_duration if self.image_list else None,
            self.config.global_slide_duration if self.config else None,
            fallback=self.fallback_duration,
        )

    def advance(self) -> bool:
        """Move to the next slide.

        Returns:
            True when playback wrapped back to the first slide
        """
        if self.state is not SlideshowState.DISPLAYING:
            return False
        self.index = (self.index + 1) % len(self.images)
        return self.index == 0
