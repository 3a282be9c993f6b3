"""Headless display player.

Polls a signage server's public display endpoint and steps through the
active slideshow, reporting every slide change to a callback. The browser
display page follows the same rules in JavaScript.
"""

import logging
import time
from typing import Callable

import httpx
from pydantic import ValidationError as PydanticValidationError

from ..core.errors import NotFoundError, SignageError, UpstreamError
from ..core.retry import UPSTREAM_RETRY_CONFIG, retry
from ..core.threading import StoppableThread
from ..schemas import DisplayDataResponse, ImageOut
from .slideshow import FALLBACK_DURATION, Slideshow, SlideshowState

logger = logging.getLogger(__name__)

DISPLAY_DATA_PATH = "/api/display/data"

FetchFunc = Callable[[], DisplayDataResponse]
SlideCallback = Callable[[ImageOut, int], None]


@retry(UPSTREAM_RETRY_CONFIG)
def _get(client: httpx.Client, url: str) -> httpx.Response:
    return client.get(url)


def fetch_display_data(base_url: str, timeout: float = 10.0) -> DisplayDataResponse:
    """GET the display payload from a server.

    Raises:
        NotFoundError: server has no config or no list to show
        UpstreamError: server unreachable, erroring or sending bad data
    """
    url = base_url.rstrip("/") + DISPLAY_DATA_PATH
    try:
        with httpx.Client(timeout=timeout) as client:
            response = _get(client, url)
    except httpx.HTTPError as e:
        raise UpstreamError("Display server unreachable", details={"url": url}, cause=e) from e

    if response.status_code == 404:
        try:
            detail = response.json().get("detail", "Not found")
        except ValueError:
            detail = "Not found"
        raise NotFoundError(detail, details={"url": url})
    if not response.is_success:
        raise UpstreamError(f"Display server error! status: {response.status_code}", details={"url": url})

    try:
        return DisplayDataResponse.model_validate(response.json())
    except (ValueError, PydanticValidationError) as e:
        raise UpstreamError("Display server sent malformed data", details={"url": url}, cause=e) from e


class DisplayPlayer:
    """Drives a ``Slideshow`` from fetched display data.

    Timers are recomputed on every step from absolute deadlines, so a
    refetch never leaves a stale slide timer behind.

    Usage:
        player = DisplayPlayer("http://localhost:5001", on_slide=show)
        player.start()
        ...
        player.stop()
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        fetch: FetchFunc | None = None,
        on_slide: SlideCallback | None = None,
        clock: Callable[[], float] = time.monotonic,
        poll_interval: float = 60.0,
        error_reload_delay: float = 30.0,
        fallback_duration: float = FALLBACK_DURATION,
    ) -> None:
        if fetch is None:
            if not base_url:
                raise ValueError("DisplayPlayer needs a base_url or a fetch function")
            fetch = lambda: fetch_display_data(base_url)  # noqa: E731

        self.base_url = base_url
        self.slideshow = Slideshow(fallback_duration)
        self.poll_interval = poll_interval
        self.error_reload_delay = error_reload_delay

        self._fetch = fetch
        self._on_slide = on_slide
        self._clock = clock
        self._thread: StoppableThread | None = None

        self._next_poll = 0.0
        self._slide_until = 0.0
        self._reload_at = 0.0
        self._shown_id: str | None = None

    @property
    def state(self) -> SlideshowState:
        return self.slideshow.state

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> float:
        """Advance the state machine as far as the clock allows.

        Returns:
            Seconds until the next step is due
        """
        now = self._clock()

        if self.slideshow.state is SlideshowState.ERROR:
            if now < self._reload_at:
                return self._reload_at - now
            logger.info("Reloading display data")
            self.slideshow.reload()

        if self.slideshow.state is SlideshowState.LOADING:
            self._refresh(now)
            if self.slideshow.state is SlideshowState.DISPLAYING:
                self._show(now)
        else:
            if now >= self._next_poll:
                self._refresh(now)
                current = self.slideshow.current
                if current is not None and current.id != self._shown_id:
                    self._show(now)

            if self.slideshow.state is SlideshowState.DISPLAYING and now >= self._slide_until:
                if self.slideshow.advance():
                    self._refresh(now)
                if self.slideshow.state is SlideshowState.DISPLAYING:
                    self._show(now)

        if self.slideshow.state is SlideshowState.ERROR:
            return max(0.0, self._reload_at - now)
        return max(0.0, min(self._slide_until, self._next_poll) - now)

    def _refresh(self, now: float) -> None:
        self._next_poll = now + self.poll_interval
        try:
            data = self._fetch()
        except SignageError as e:
            logger.error("Error fetching display data: %s", e)
            self.slideshow.fail(str(e))
        else:
            self.slideshow.load(data)

        if self.slideshow.state is SlideshowState.ERROR:
            self._reload_at = now + self.error_reload_delay

    def _show(self, now: float) -> None:
        image = self.slideshow.current
        if image is None:
            return
        duration = self.slideshow.current_duration()
        self._shown_id = image.id
        self._slide_until = now + duration

        logger.info(
            "Slide %d/%d: %s (%.1fs)",
            self.slideshow.index + 1,
            len(self.slideshow.images),
            image.url,
            duration,
        )
        if self._on_slide:
            self._on_slide(image, self.slideshow.index)

    def start(self) -> None:
        """Run the player in a background thread."""
        if self.is_running:
            logger.warning("Player already running")
            return

        logger.info("Starting display player for %s", self.base_url or "custom source")
        self._thread = StoppableThread(target=self._loop, name="DisplayPlayer")
        self._thread.start()

    def stop(self) -> None:
        if self._thread is None:
            return
        logger.info("Stopping display player")
        self._thread.stop(timeout=2.0)
        self._thread = None

    def _loop(self, thread: StoppableThread) -> None:
        logger.debug("Player loop started")

        while not thread.should_stop():
            try:
                delay = self.run_once()
            except Exception as e:
                logger.exception("Player loop error: %s", e)
                delay = 1.0
            thread.wait(max(delay, 0.05))

        logger.debug("Player loop stopped")
