import pytest

from signage.display import Slideshow, SlideshowState, resolve_duration
from signage.schemas import DisplayDataResponse


def display_data(durations, default_duration=None, global_duration=8):
    return DisplayDataResponse.model_validate(
        {
            "globalConfig": {"globalSlideDuration": global_duration},
            "imageList": {
                "id": "list",
                "name": "Default",
                "defaultDuration": default_duration,
                "images": [
                    {"id": f"img{i}", "url": f"https://example.com/{i}.jpg", "duration": d}
                    for i, d in enumerate(durations)
                ],
            },
        }
    )


@pytest.mark.parametrize(
    "candidates, expected",
    [
        ((5, 10, 8), 5),
        ((None, 10, 8), 10),
        ((None, None, 8), 8),
        ((None, None, None), 7),
        ((0, -3, 8), 8),
        ((0, None, 0), 7),
    ],
)
def test_resolve_duration_chain(candidates, expected):
    assert resolve_duration(*candidates) == expected


def test_durations_across_a_list():
    # image 5s, list default 10s, then nothing set anywhere -> 7s
    assert resolve_duration(5, None, None) == 5
    assert resolve_duration(None, 10, None) == 10
    assert resolve_duration(None, None, None) == 7


def test_starts_loading():
    slideshow = Slideshow()
    assert slideshow.state is SlideshowState.LOADING
    assert slideshow.current is None


def test_load_and_advance_wraps():
    slideshow = Slideshow()
    slideshow.load(display_data([5, None, None], default_duration=None, global_duration=8))

    assert slideshow.state is SlideshowState.DISPLAYING
    assert slideshow.current.id == "img0"
    assert slideshow.current_duration() == 5

    assert slideshow.advance() is False
    assert slideshow.current_duration() == 8
    assert slideshow.advance() is False
    assert slideshow.advance() is True
    assert slideshow.index == 0


def test_list_default_duration_is_middle_tier():
    slideshow = Slideshow()
    slideshow.load(display_data([None], default_duration=10, global_duration=8))
    assert slideshow.current_duration() == 10


def test_empty_list_is_an_error():
    slideshow = Slideshow()
    slideshow.load(display_data([]))
    assert slideshow.state is SlideshowState.ERROR
    assert slideshow.current is None
    assert slideshow.advance() is False

    slideshow.reload()
    assert slideshow.state is SlideshowState.LOADING


def test_reload_keeps_index_in_range():
    slideshow = Slideshow()
    slideshow.load(display_data([1, 1, 1]))
    slideshow.advance()
    slideshow.advance()

    slideshow.load(display_data([1, 1, 1, 1]))
    assert slideshow.index == 2

    slideshow.load(display_data([1, 1]))
    assert slideshow.index == 0
