"""Video readers: transform chaining and broadcasting.

A video frame is any image object from :mod:`medialine.video.image`, or any
object with ``bounds()`` and ``rgba64_at(x, y)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..broadcast import Broadcaster as _CoreBroadcaster
from ..broadcast import BroadcasterConfig as _CoreConfig
from ..broadcast import Reader, ReaderFunc, ReleaseHandle
from .framebuffer import FrameBuffer

__all__ = [
    "TransformFunc",
    "merge",
    "BroadcasterConfig",
    "Broadcaster",
]

TransformFunc = Callable[[Reader], Reader]


def merge(*transforms: Optional[TransformFunc]) -> TransformFunc:
    """Chain transforms into one that applies them in order, skipping ``None``."""

    def apply(reader: Reader) -> Reader:
        for transform in transforms:
            if transform is not None:
                reader = transform(reader)
        return reader

    return apply


@dataclass(frozen=True)
class BroadcasterConfig:
    """Video broadcaster settings."""

    core: Optional[_CoreConfig] = None


class Broadcaster:
    """Shares one video source among many readers.

    The source is expected to drop frames when a reader is slower than it.
    """

    def __init__(self, source: Reader, config: Optional[BroadcasterConfig] = None) -> None:
        core_config = config.core if config is not None else None
        self._core = _CoreBroadcaster(source, core_config)

    def new_reader(self, copy_frame: bool) -> Reader:
        """Create a reader; with ``copy_frame`` each frame read is this reader's own copy."""
        copy_fn: Optional[Callable[[Any], Any]] = None
        if copy_frame:
            buffer = FrameBuffer(0)

            def copy_fn(src: Any) -> Any:
                buffer.store_copy(src)
                return buffer.load()

        reader = self._core.new_reader(copy_fn)

        def read() -> tuple[Any, Callable[[], None]]:
            frame, _ = reader.read()
            return frame, ReleaseHandle()

        return ReaderFunc(read)

    def replace_source(self, source: Reader) -> None:
        """Replace the underlying source; safe while readers are reading."""
        self._core.replace_source(source)

    def source(self) -> Reader:
        """Return a reader over the underlying source."""
        source = self._core.source()

        def read() -> tuple[Any, Callable[[], None]]:
            frame, _ = source.read()
            return frame, ReleaseHandle()

        return ReaderFunc(read)