from datetime import timedelta
from unittest import mock

import pytest

from medialine.broadcast import ReaderFunc
from medialine.video.image import Rectangle, new_rgba
from medialine.video.transforms import detect_changes, throttle


def _noop():
    return None


def _sized_source(size):
    def read():
        return new_rgba(Rectangle(0, 0, size["width"], size["height"])), _noop

    return ReaderFunc(read)


class _Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def _ticking_source(clock, step):
    state = {"step": step, "pushed": 0}

    def read():
        clock.now += state["step"]
        state["pushed"] += 1
        return new_rgba(Rectangle(0, 0, 4, 2)), _noop

    return ReaderFunc(read), state


def test_on_change_called_before_first_frame():
    seen = []
    src = detect_changes(timedelta(seconds=1), 0, seen.append)(
        _sized_source({"width": 64, "height": 36})
    )
    frame, _ = src.read()
    assert len(seen) == 1
    assert seen[0].video.width == 64
    assert seen[0].video.height == 36
    assert seen[0].video.frame_rate == 0.0
    assert (frame.bounds().dx(), frame.bounds().dy()) == (64, 36)


def test_detect_changes_on_every_update():
    size = {"width": 0, "height": 0}
    seen = []
    src = detect_changes(timedelta(seconds=1), 0, seen.append)(_sized_source(size))
    for width in range(20, 60, 10):
        for height in range(10, 40, 10):
            size["width"], size["height"] = width, height
            frame, _ = src.read()
            assert seen[-1].video.width == width
            assert seen[-1].video.height == height
            assert frame.bounds().dx() == width
            assert frame.bounds().dy() == height


def test_no_change_reported_for_same_size():
    seen = []
    src = detect_changes(timedelta(hours=1), 0, seen.append)(
        _sized_source({"width": 8, "height": 8})
    )
    for _ in range(5):
        src.read()
    assert len(seen) == 1


def test_frame_rate_measured_over_interval():
    clock = _Clock()
    seen = []
    with mock.patch("time.monotonic", new=clock):
        source, _ = _ticking_source(clock, 1 / 32)
        src = detect_changes(timedelta(seconds=1), 0, seen.append)(source)
        for _ in range(33):
            src.read()
    assert len(seen) == 2
    assert seen[1].video.frame_rate == 32.0
    assert seen[1].video.width == 4


def test_tolerated_frame_rate_variation_not_reported():
    clock = _Clock()
    seen = []
    with mock.patch("time.monotonic", new=clock):
        source, state = _ticking_source(clock, 1 / 32)
        src = detect_changes(timedelta(seconds=1), 5, seen.append)(source)
        for _ in range(33):
            src.read()
        state["step"] = 1 / 30
        for _ in range(100):
            src.read()
    assert len(seen) == 2


def test_untolerated_frame_rate_variation_reported():
    clock = _Clock()
    seen = []
    with mock.patch("time.monotonic", new=clock):
        source, state = _ticking_source(clock, 1 / 32)
        src = detect_changes(timedelta(seconds=1), 0, seen.append)(source)
        for _ in range(33):
            src.read()
        state["step"] = 1 / 16
        for _ in range(40):
            src.read()
    assert len(seen) > 2
    assert seen[-1].video.frame_rate == pytest.approx(16.0)


def test_throttle_drops_frames():
    clock = _Clock()
    with mock.patch("time.monotonic", new=clock):
        source, state = _ticking_source(clock, 1 / 128)
        reader = throttle(64)(source)
        for _ in range(10):
            reader.read()
    assert state["pushed"] == 20


def test_throttle_passes_slow_source_through():
    clock = _Clock()
    with mock.patch("time.monotonic", new=clock):
        source, state = _ticking_source(clock, 1 / 32)
        reader = throttle(64)(source)
        for _ in range(20):
            reader.read()
    assert state["pushed"] == 20


def test_throttle_propagates_errors():
    def fail():
        raise EOFError("done")

    reader = throttle(50)(ReaderFunc(fail))
    with pytest.raises(EOFError):
        reader.read()


def test_throttle_rejects_non_positive_rate():
    with pytest.raises(ValueError):
        throttle(0)