"""Slideshow state machine and headless display player."""

from .player import DisplayPlayer, fetch_display_data
from .slideshow import Slideshow, SlideshowState, resolve_duration

__all__ = [
    "DisplayPlayer",
    "Slideshow",
    "SlideshowState",
    "fetch_display_data",
    "resolve_duration",
]
