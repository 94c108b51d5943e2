"""Sets of media properties and the constraints that select among them."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import timedelta
from typing import Any, Callable

from .constraints import Constraint

__all__ = [
    "VideoConstraints",
    "AudioConstraints",
    "MediaConstraints",
    "Video",
    "Audio",
    "Media",
]


def _is_group(value: Any) -> bool:
    return is_dataclass(value) and not isinstance(value, (Constraint, type))


def _prettify(obj: Any) -> str:
    rows: list[str] = []

    def add_rows(level: int, item: Any) -> None:
        padding = "  " * level
        for f in fields(item):
            value = getattr(item, f.name)
            if _is_group(value):
                rows.append(f"{padding}{f.name}:")
                add_rows(level + 1, value)
            elif value is None:
                rows.append(f"{padding}{f.name}: any")
            else:
                rows.append(f"{padding}{f.name}: {value}")

    add_rows(0, obj)
    return "\n".join(rows)


@dataclass
class VideoConstraints:
    """Constraints on video properties."""

    width: Constraint | None = None
    height: Constraint | None = None
    frame_rate: Constraint | None = None
    frame_format: Constraint | None = None
    discard_frames_older_than: timedelta = timedelta(0)


@dataclass
class AudioConstraints:
    """Constraints on audio properties."""

    channel_count: Constraint | None = None
    latency: Constraint | None = None
    sample_rate: Constraint | None = None
    sample_size: Constraint | None = None
    is_big_endian: Constraint | None = None
    is_float: Constraint | None = None
    is_interleaved: Constraint | None = None


@dataclass
class MediaConstraints:
    """Constraints on a whole set of media properties; ``None`` means any value."""

    device_id: Constraint | None = None
    video: VideoConstraints = field(default_factory=VideoConstraints)
    audio: AudioConstraints = field(default_factory=AudioConstraints)

    def __str__(self) -> str:
        return _prettify(self)

    def fitness_distance(self, media: Media) -> tuple[float, bool]:
        """Return the summed fitness distance to ``media`` and whether it satisfies all constraints."""
        video, audio = self.video, self.audio
        pairs: list[tuple[Any, Any]] = [
            (self.device_id, media.device_id),
            (video.width, media.video.width),
            (video.height, media.video.height),
            (video.frame_format, media.video.frame_format),
        ]
        # The frame rate is only compared when the media reports one.
        if media.video.frame_rate > 0.0:
            pairs.append((video.frame_rate, media.video.frame_rate))
        pairs += [
            (audio.sample_rate, media.audio.sample_rate),
            (audio.latency, media.audio.latency),
            (audio.channel_count, media.audio.channel_count),
            (audio.is_big_endian, media.audio.is_big_endian),
            (audio.is_float, media.audio.is_float),
            (audio.is_interleaved, media.audio.is_interleaved),
        ]

        distance = 0.0
        for desired, actual in pairs:
            if desired is None:
                continue
            if not isinstance(desired, Constraint):
                raise TypeError("unsupported constraint type")
            d, ok = desired.compare(actual)
            distance += d
            if not ok:
                return 0.0, False
        return distance, True


@dataclass
class Video:
    """Video properties."""

    width: int = 0
    height: int = 0
    frame_rate: float = 0.0
    frame_format: str = ""
    discard_frames_older_than: timedelta = timedelta(0)


@dataclass
class Audio:
    """Audio properties."""

    channel_count: int = 0
    latency: timedelta = timedelta(0)
    sample_rate: int = 0
    sample_size: int = 0
    is_big_endian: bool = False
    is_float: bool = False
    is_interleaved: bool = False


def _merge_into(
    target: Any, source: Any, assign: Callable[[Any, str, Any], None]
) -> None:
    for f in fields(source):
        value = getattr(source, f.name)
        if _is_group(value):
            _merge_into(getattr(target, f.name), value, assign)
            continue
        # Zero values are skipped, except booleans, which are always taken.
        if not isinstance(value, bool) and not value:
            continue
        assign(target, f.name, value)


def _assign_preferred(target: Any, name: str, value: Any) -> None:
    if not isinstance(value, Constraint):
        raise TypeError("unsupported property type")
    preferred = value.preferred()
    if preferred is not None:
        setattr(target, name, preferred)


@dataclass
class Media:
    """One set of media properties."""

    device_id: str = ""
    video: Video = field(default_factory=Video)
    audio: Audio = field(default_factory=Audio)

    def __str__(self) -> str:
        return _prettify(self)

    def merge(self, other: Media) -> None:
        """Copy every non-zero property of ``other`` into this one; booleans are always copied."""
        _merge_into(self, other, setattr)

    def merge_constraints(self, constraints: MediaConstraints) -> None:
        """Set every property whose constraint names a preferred value to that value."""
        _merge_into(self, constraints, _assign_preferred)