"""Video scaling transform."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Optional

from ..broadcast import Reader, ReaderFunc, ReleaseHandle
from .image import (
    RGBA,
    Rectangle,
    SubsampleRatio,
    YCbCr,
    new_rgba,
    new_ycbcr,
)

__all__ = ["Scaler", "scale"]


class Scaler(enum.Enum):
    """Scaling algorithm."""

    NEAREST_NEIGHBOR = "NearestNeighbor"


@dataclass
class _Plane:
    """One 8-bit plane viewed as a grey image."""

    pix: bytearray
    stride: int
    rect: Rectangle

    def get(self, x: int, y: int) -> int:
        if not self.rect.contains(x, y):
            return 0
        return self.pix[(y - self.rect.min_y) * self.stride + (x - self.rect.min_x)]

    def put(self, x: int, y: int, value: int) -> None:
        if self.rect.contains(x, y):
            self.pix[(y - self.rect.min_y) * self.stride + (x - self.rect.min_x)] = value


def _chroma_rect(rect: Rectangle, ratio: SubsampleRatio) -> Rectangle:
    if ratio is SubsampleRatio.RATIO_422:
        return Rectangle(rect.min_x, rect.min_y, rect.max_x // 2, rect.max_y)
    if ratio is SubsampleRatio.RATIO_420:
        return Rectangle(rect.min_x, rect.min_y, rect.max_x // 2, rect.max_y // 2)
    return rect


def _source_coords(d_min: int, d_len: int, s_min: int, s_len: int) -> list[tuple[int, int]]:
    """Map each destination coordinate to the nearest source coordinate."""
    return [
        (d_min + d, s_min + (2 * d + 1) * s_len // (2 * d_len)) for d in range(d_len)
    ]


def _scale_rgba(dst: RGBA, dr: Rectangle, src: RGBA, sr: Rectangle) -> None:
    columns = _source_coords(dr.min_x, dr.dx(), sr.min_x, sr.dx())
    for y, sy in _source_coords(dr.min_y, dr.dy(), sr.min_y, sr.dy()):
        for x, sx in columns:
            so = src.pix_offset(sx, sy)
            do = dst.pix_offset(x, y)
            dst.pix[do : do + 4] = src.pix[so : so + 4]


def _scale_ycbcr(
    dst: tuple[_Plane, _Plane, _Plane], src: tuple[_Plane, _Plane, _Plane]
) -> None:
    dst_y, dst_cb, dst_cr = dst
    src_y, src_cb, src_cr = src
    dr, sr = dst_y.rect, src_y.rect
    columns = _source_coords(dr.min_x, dr.dx(), sr.min_x, sr.dx())
    for y, sy in _source_coords(dr.min_y, dr.dy(), sr.min_y, sr.dy()):
        for x, sx in columns:
            dst_y.put(x, y, src_y.get(sx, sy))
            # The chroma planes are addressed at luma coordinates.
            if src_cb.rect.contains(sx, sy):
                cb, cr = src_cb.get(sx, sy), src_cr.get(sx, sy)
            else:
                cb = cr = 0
            if dst_cb.rect.contains(x, y):
                dst_cb.put(x, y, cb)
                dst_cr.put(x, y, cr)


def scale(width: int, height: int, scaler: Optional[Scaler] = None) -> Callable[[Reader], Reader]:
    """Return a transform that scales RGBA and Y'CbCr frames to ``width`` x ``height``.

    A non-positive width or height keeps the aspect ratio of the incoming
    frame. ``scaler`` defaults to nearest neighbour. Raises ``ValueError``
    when both sizes are non-positive; the returned reader raises
    ``TypeError`` for other image types.
    """
    if width <= 0 and height <= 0:
        raise ValueError("both width and height are non-positive")
    algorithm = scaler if scaler is not None else Scaler.NEAREST_NEIGHBOR
    if not isinstance(algorithm, Scaler):
        raise TypeError(f"unsupported scaler: {algorithm!r}")

    def target_rect(src: Rectangle) -> Rectangle:
        if width > 0 and height > 0:
            return Rectangle(0, 0, width, height)
        if height <= 0:
            return Rectangle(0, 0, width, src.dy() * width // src.dx())
        return Rectangle(0, 0, src.dx() * height // src.dy(), height)

    def transform(reader: Reader) -> Reader:
        def read():
            img, _ = reader.read()

            if type(img) is RGBA:
                rect = target_rect(img.rect)
                dst = new_rgba(rect)
                _scale_rgba(dst, rect, img, img.rect)
                return dst, ReleaseHandle()

            if type(img) is YCbCr:
                rect = target_rect(img.rect)
                ratio = img.subsample_ratio
                out = new_ycbcr(rect, ratio)
                c_rect = _chroma_rect(rect, ratio)
                src_c_rect = _chroma_rect(img.rect, ratio)
                _scale_ycbcr(
                    (
                        _Plane(out.y, out.y_stride, rect),
                        _Plane(out.cb, out.c_stride, c_rect),
                        _Plane(out.cr, out.c_stride, c_rect),
                    ),
                    (
                        _Plane(img.y, img.y_stride, img.rect),
                        _Plane(img.cb, img.c_stride, src_c_rect),
                        _Plane(img.cr, img.c_stride, src_c_rect),
                    ),
                )
                return out, ReleaseHandle()

            raise TypeError("scaling: unsupported image type")

        return ReaderFunc(read)

    return transform