"""Audio readers: transform chaining, broadcasting and property detection.

An audio chunk is any object with a ``chunk_info()`` method whose result has
``len`` (samples per channel), ``channels`` and ``sampling_rate``.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Optional, Protocol

from ..broadcast import Broadcaster as _CoreBroadcaster
from ..broadcast import BroadcasterConfig as _CoreConfig
from ..broadcast import Reader, ReaderFunc, ReleaseHandle
from ..media import Media

__all__ = [
    "TransformFunc",
    "merge",
    "BroadcasterConfig",
    "Broadcaster",
    "detect_changes",
]

TransformFunc = Callable[[Reader], Reader]


class _ChunkInfo(Protocol):
    len: int
    channels: int
    sampling_rate: int


class _Chunk(Protocol):
    def chunk_info(self) -> _ChunkInfo: ...


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
    """Audio broadcaster settings."""

    core: Optional[_CoreConfig] = None


class Broadcaster:
    """Shares one audio source among many readers."""

    def __init__(self, source: Reader, config: Optional[BroadcasterConfig] = None) -> None:
        core_config = config.core if config is not None else None
        self._core = _CoreBroadcaster(source, core_config)

    def new_reader(self, copy_chunk: bool) -> Reader:
        """Create a reader; with ``copy_chunk`` each chunk read is this reader's own copy."""
        copy_fn = copy.deepcopy if copy_chunk else None
        reader = self._core.new_reader(copy_fn)

        def read() -> tuple[Any, Callable[[], None]]:
            chunk, _ = reader.read()
            return chunk, ReleaseHandle()

        return ReaderFunc(read)

    def replace_source(self, source: Reader) -> None:
        """Replace the underlying source; safe while readers are reading."""
        self._core.replace_source(source)

    def source(self) -> Reader:
        """Return a reader over the underlying source."""
        source = self._core.source()

        def read() -> tuple[Any, Callable[[], None]]:
            chunk, _ = source.read()
            return chunk, ReleaseHandle()

        return ReaderFunc(read)


def detect_changes(
    interval: timedelta, on_change: Callable[[Media], None]
) -> TransformFunc:
    """Call ``on_change`` with the new properties whenever channel count, rate or latency change.

    ``interval`` is accepted for parity with the video transform; audio
    latency follows from each chunk's length and sample rate.
    """

    def transform(reader: Reader) -> Reader:
        current = Media()

        def read() -> tuple[Any, Callable[[], None]]:
            chunk, _ = reader.read()
            info = chunk.chunk_info()
            audio = current.audio
            dirty = False

            if audio.channel_count != info.channels:
                audio.channel_count = info.channels
                dirty = True
            if audio.sample_rate != info.sampling_rate:
                audio.sample_rate = info.sampling_rate
                dirty = True

            latency = timedelta(0)
            if audio.sample_rate:
                nanoseconds = info.len * 1_000_000_000 // audio.sample_rate
                latency = timedelta(microseconds=nanoseconds / 1000)
            if audio.latency != latency:
                audio.latency = latency
                dirty = True

            if dirty:
                on_change(copy.deepcopy(current))
            return chunk, ReleaseHandle()

        return ReaderFunc(read)

    return transform