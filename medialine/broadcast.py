"""Pull-based broadcasting of one data source to any number of readers.

A reader's ``read()`` returns ``(data, release)``. ``release`` may be called
once the data is no longer needed, so that the source can reuse its memory.
Calling it is optional. A failed read raises instead of returning.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Optional

__all__ = [
    "Reader",
    "ReaderFunc",
    "ReleaseHandle",
    "InsufficientBufferError",
    "BroadcasterConfig",
    "Broadcaster",
]

Release = Callable[[], None]
CopyFn = Callable[[Any], Any]

DEFAULT_BUFFER_SIZE = 32
# Sources faster than about 30 fps will see some jitter; that is enough for
# general use.
DEFAULT_POLL_DURATION = timedelta(milliseconds=33)


class ReleaseHandle:
    """Release function for data that holds no pooled memory.

    Calling it records that the caller is done with the data; calling it
    more than once is harmless.
    """

    __slots__ = ("released",)

    def __init__(self) -> None:
        self.released = False

    def __call__(self) -> None:
        self.released = True


class Reader(ABC):
    """A source of data items."""

    @abstractmethod
    def read(self) -> tuple[Any, Release]:
        """Return the next item and a function that releases its memory."""


class ReaderFunc(Reader):
    """A reader backed by a plain callable returning ``(data, release)``."""

    __slots__ = ("_fn",)

    def __init__(self, fn: Callable[[], tuple[Any, Release]]) -> None:
        self._fn = fn

    def read(self) -> tuple[Any, Release]:
        return self._fn()


class InsufficientBufferError(Exception):
    """The buffer given is too small to hold the whole sample."""

    def __init__(self, required_size: int) -> None:
        self.required_size = required_size
        super().__init__(
            "provided buffer doesn't meet the size requirement of length, "
            f"{required_size}"
        )


@dataclass(frozen=True)
class _Entry:
    count: int
    data: Any
    error: Optional[BaseException]


class _Ring:
    """Ring buffer of the latest items, shared by every reader of a broadcaster."""

    def __init__(self, size: int, poll_seconds: float) -> None:
        self._slots: list[Optional[_Entry]] = [None] * size
        self._poll = poll_seconds
        self._next = 0
        self._reading = False
        self._cond = threading.Condition()

    def _index(self, count: int) -> int:
        return count % len(self._slots)

    def acquire(self, count: int) -> Optional[Callable[[_Entry], None]]:
        """Claim the right to read item ``count`` from the source.

        Only the first reader to reach the newest item gets it; the others
        wait for that reader and share what it got.
        """
        with self._cond:
            if self._reading or self._next != count:
                return None
            self._reading = True

        def push(entry: _Entry) -> None:
            with self._cond:
                self._slots[self._index(count)] = entry
                self._next = count + 1
                self._reading = False
                self._cond.notify_all()

        return push

    def get(self, count: int) -> _Entry:
        """Return item ``count``, or the oldest later one still held."""
        with self._cond:
            while True:
                while self._reading and self._next == count:
                    self._cond.wait(self._poll)
                entry = self._slots[self._index(count)]
                if entry is not None and entry.count == count:
                    return entry
                count += 1

    def last_count(self) -> int:
        with self._cond:
            return self._next - 1


@dataclass(frozen=True)
class BroadcasterConfig:
    """Broadcaster settings; a zero value selects the default."""

    buffer_size: int = 0
    poll_duration: timedelta = timedelta(0)


class Broadcaster:
    """Shares one source among readers that may come and go at any time.

    The source is expected to drop items when a reader is slower than it.
    Readers that fall further behind than the ring buffer holds skip the
    items they missed.
    """

    def __init__(self, source: Reader, config: Optional[BroadcasterConfig] = None) -> None:
        config = config or BroadcasterConfig()
        size = config.buffer_size or DEFAULT_BUFFER_SIZE
        poll = config.poll_duration or DEFAULT_POLL_DURATION
        self._ring = _Ring(size, poll.total_seconds())
        self._source: Reader
        self.replace_source(source)

    def new_reader(self, copy_fn: Optional[CopyFn]) -> Reader:
        """Create a reader; ``copy_fn`` copies each shared item for this reader."""
        copy = copy_fn if copy_fn is not None else (lambda item: item)
        current = self._ring.last_count()

        def read() -> tuple[Any, Release]:
            nonlocal current
            current += 1
            push = self._ring.acquire(current)
            if push is not None:
                try:
                    data, _ = self._source.read()
                except BaseException as exc:
                    push(_Entry(current, None, exc))
                    raise
                push(_Entry(current, data, None))
            else:
                entry = self._ring.get(current)
                current = entry.count
                if entry.error is not None:
                    raise entry.error
                data = entry.data

            if data is not None:
                data = copy(data)
            return data, ReleaseHandle()

        return ReaderFunc(read)

    def replace_source(self, source: Reader) -> None:
        """Replace the underlying source; safe to call while readers are reading."""
        if source is None:
            raise ValueError("source can't be None")
        self._source = source

    def source(self) -> Reader:
        """Return the underlying source."""
        return self._source