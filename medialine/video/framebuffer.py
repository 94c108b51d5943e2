"""A buffer that keeps a private copy of the latest image stored in it."""

from __future__ import annotations

import dataclasses
from typing import Any, Optional

from .convert import image_to_rgba
from .image import NYCbCrA, PackedImage, YCbCr

__all__ = ["FrameBuffer"]


class FrameBuffer:
    """Holds a copy of an image, reusing its memory when the next image has the same layout."""

    def __init__(self, initial_size: int = 0) -> None:
        self._spare = bytearray(initial_size)
        self._image: Optional[Any] = None

    def load(self) -> Any:
        """Return the currently held copy, or ``None``."""
        return self._image

    def _copy_plane(self, name: str, data: bytearray) -> bytearray:
        previous = self._image
        if type(previous) is not None and previous is not None:
            old = getattr(previous, name, None)
            if isinstance(old, bytearray) and len(old) == len(data):
                old[:] = data
                return old
        if len(self._spare) == len(data):
            buffer, self._spare = self._spare, bytearray()
            buffer[:] = data
            return buffer
        return bytearray(data)

    def store_copy(self, src: Any) -> None:
        """Store a copy of ``src``; unknown image types are stored as RGBA."""
        if isinstance(src, YCbCr):
            planes = ["y", "cb", "cr"]
            if isinstance(src, NYCbCrA):
                planes.append("a")
        elif isinstance(src, PackedImage):
            planes = ["pix"]
        else:
            self.store_copy(image_to_rgba(src))
            return

        reuse = type(self._image) is type(src)
        copies = {}
        for name in planes:
            data = getattr(src, name)
            copies[name] = self._copy_plane(name, data) if reuse else bytearray(data)
        self._image = dataclasses.replace(src, **copies)