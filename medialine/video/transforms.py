"""Video transforms that depend on time: property detection and throttling."""

from __future__ import annotations

import copy
import math
import time
from datetime import timedelta
from typing import Any, Callable

from ..broadcast import Reader, ReaderFunc, ReleaseHandle
from ..media import Media

__all__ = ["detect_changes", "throttle"]


def detect_changes(
    interval: timedelta,
    fps_diff_tolerance: float,
    on_change: Callable[[Media], None],
) -> Callable[[Reader], Reader]:
    """Call ``on_change`` with the new properties whenever frame size or rate change.

    The frame rate is measured over ``interval`` and only counts as changed
    when it differs from the last one by more than ``fps_diff_tolerance``.
    """
    interval_seconds = interval.total_seconds()

    def transform(reader: Reader) -> Reader:
        current = Media()
        last_taken: float | None = None
        frames = 0

        def read() -> tuple[Any, Callable[[], None]]:
            nonlocal last_taken, frames
            img, _ = reader.read()
            video = current.video
            dirty = False

            bounds = img.bounds()
            if video.width != bounds.dx():
                video.width = bounds.dx()
                dirty = True
            if video.height != bounds.dy():
                video.height = bounds.dy()
                dirty = True

            now = time.monotonic()
            elapsed = math.inf if last_taken is None else now - last_taken
            if elapsed >= interval_seconds:
                if elapsed > 0:
                    fps = frames / elapsed
                else:
                    fps = math.inf if frames else math.nan
                frames = 0
                last_taken = now
                if abs(video.frame_rate - fps) > fps_diff_tolerance:
                    video.frame_rate = fps
                    dirty = True

            if dirty:
                on_change(copy.deepcopy(current))

            frames += 1
            return img, ReleaseHandle()

        return ReaderFunc(read)

    return transform


def throttle(rate: float) -> Callable[[Reader], Reader]:
    """Return a transform that drops frames to deliver at most ``rate`` frames per second."""
    if rate <= 0:
        raise ValueError("rate must be positive")
    period = 1.0 / rate

    def transform(reader: Reader) -> Reader:
        next_tick = time.monotonic() + period

        def read() -> tuple[Any, Callable[[], None]]:
            nonlocal next_tick
            while True:
                img, _ = reader.read()
                now = time.monotonic()
                if now >= next_tick:
                    # Missed ticks are dropped; wait for the next boundary.
                    next_tick += period * (math.floor((now - next_tick) / period) + 1)
                    return img, ReleaseHandle()

        return ReaderFunc(read)

    return transform