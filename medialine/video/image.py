"""In-memory raster images and the colour conversions they need.

Packed images keep their pixels in one ``bytearray`` row after row, ``stride``
bytes apart. Planar Y'CbCr images keep one plane for luma and two chroma
planes that may be subsampled. ``rgba64_at`` returns alpha-premultiplied
16-bit ``(r, g, b, a)`` values, and zeros outside the image bounds.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import ClassVar

__all__ = [
    "Rectangle",
    "SubsampleRatio",
    "PackedImage",
    "Alpha",
    "Alpha16",
    "CMYK",
    "Gray",
    "Gray16",
    "NRGBA",
    "NRGBA64",
    "RGBA",
    "RGBA64",
    "YCbCr",
    "NYCbCrA",
    "new_ycbcr",
    "new_rgba",
    "new_gray",
    "rgb_to_ycbcr",
    "ycbcr_to_rgb",
]

_TRANSPARENT = (0, 0, 0, 0)


@dataclass(frozen=True)
class Rectangle:
    """A half-open rectangle: ``min`` is inside, ``max`` is not."""

    min_x: int
    min_y: int
    max_x: int
    max_y: int

    def dx(self) -> int:
        return self.max_x - self.min_x

    def dy(self) -> int:
        return self.max_y - self.min_y

    def contains(self, x: int, y: int) -> bool:
        return self.min_x <= x < self.max_x and self.min_y <= y < self.max_y


class SubsampleRatio(enum.Enum):
    """Chroma subsampling of a Y'CbCr image."""

    RATIO_444 = "YCbCrSubsampleRatio444"
    RATIO_422 = "YCbCrSubsampleRatio422"
    RATIO_420 = "YCbCrSubsampleRatio420"
    RATIO_440 = "YCbCrSubsampleRatio440"
    RATIO_411 = "YCbCrSubsampleRatio411"
    RATIO_410 = "YCbCrSubsampleRatio410"

    def __str__(self) -> str:
        return self.value


def _clamp8(v: int) -> int:
    if 0 <= v < 1 << 24:
        return v >> 16
    return 0 if v < 0 else 255


def _clamp16(v: int) -> int:
    if 0 <= v < 1 << 24:
        return v >> 8
    return 0 if v < 0 else 0xFFFF


def rgb_to_ycbcr(r: int, g: int, b: int) -> tuple[int, int, int]:
    """Convert an 8-bit RGB triple to 8-bit Y'CbCr (JFIF, full range)."""
    yy = (19595 * r + 38470 * g + 7471 * b + (1 << 15)) >> 16
    cb = _clamp8(-11056 * r - 21712 * g + 32768 * b + (257 << 15))
    cr = _clamp8(32768 * r - 27440 * g - 5328 * b + (257 << 15))
    return yy & 0xFF, cb, cr


def ycbcr_to_rgb(y: int, cb: int, cr: int) -> tuple[int, int, int]:
    """Convert an 8-bit Y'CbCr triple to 8-bit RGB (JFIF, full range)."""
    yy = y * 0x10101
    cb -= 128
    cr -= 128
    return (
        _clamp8(yy + 91881 * cr),
        _clamp8(yy - 22554 * cb - 46802 * cr),
        _clamp8(yy + 116130 * cb),
    )


def _ycbcr_to_rgb16(y: int, cb: int, cr: int) -> tuple[int, int, int]:
    yy = y * 0x10101
    cb -= 128
    cr -= 128
    return (
        _clamp16(yy + 91881 * cr),
        _clamp16(yy - 22554 * cb - 46802 * cr),
        _clamp16(yy + 116130 * cb),
    )


@dataclass
class PackedImage:
    """An image whose pixels are packed into one byte array."""

    BYTES_PER_PIXEL: ClassVar[int] = 1

    pix: bytearray
    stride: int
    rect: Rectangle

    def bounds(self) -> Rectangle:
        return self.rect

    def pix_offset(self, x: int, y: int) -> int:
        return (y - self.rect.min_y) * self.stride + (x - self.rect.min_x) * self.BYTES_PER_PIXEL

    def rgba64_at(self, x: int, y: int) -> tuple[int, int, int, int]:
        if not self.rect.contains(x, y):
            return _TRANSPARENT
        return self._color(self.pix_offset(x, y))

    def _word(self, offset: int) -> int:
        return (self.pix[offset] << 8) | self.pix[offset + 1]

    def _color(self, offset: int) -> tuple[int, int, int, int]:
        raise NotImplementedError


class Alpha(PackedImage):
    """8-bit alpha only."""

    def _color(self, o: int) -> tuple[int, int, int, int]:
        a = self.pix[o] * 0x101
        return a, a, a, a


class Alpha16(PackedImage):
    """16-bit big-endian alpha only."""

    BYTES_PER_PIXEL = 2

    def _color(self, o: int) -> tuple[int, int, int, int]:
        a = self._word(o)
        return a, a, a, a


class CMYK(PackedImage):
    """8-bit cyan, magenta, yellow and black."""

    BYTES_PER_PIXEL = 4

    def _color(self, o: int) -> tuple[int, int, int, int]:
        c, m, y, k = self.pix[o : o + 4]
        w = 0xFFFF - k * 0x101
        return (
            (0xFFFF - c * 0x101) * w // 0xFFFF,
            (0xFFFF - m * 0x101) * w // 0xFFFF,
            (0xFFFF - y * 0x101) * w // 0xFFFF,
            0xFFFF,
        )


class Gray(PackedImage):
    """8-bit grey."""

    def _color(self, o: int) -> tuple[int, int, int, int]:
        v = self.pix[o] * 0x101
        return v, v, v, 0xFFFF


class Gray16(PackedImage):
    """16-bit big-endian grey."""

    BYTES_PER_PIXEL = 2

    def _color(self, o: int) -> tuple[int, int, int, int]:
        v = self._word(o)
        return v, v, v, 0xFFFF


class NRGBA(PackedImage):
    """8-bit non-premultiplied RGBA."""

    BYTES_PER_PIXEL = 4

    def _color(self, o: int) -> tuple[int, int, int, int]:
        r, g, b, a = (v * 0x101 for v in self.pix[o : o + 4])
        return r * a // 0xFFFF, g * a // 0xFFFF, b * a // 0xFFFF, a


class NRGBA64(PackedImage):
    """16-bit big-endian non-premultiplied RGBA."""

    BYTES_PER_PIXEL = 8

    def _color(self, o: int) -> tuple[int, int, int, int]:
        r, g, b, a = (self._word(o + i) for i in (0, 2, 4, 6))
        return r * a // 0xFFFF, g * a // 0xFFFF, b * a // 0xFFFF, a


class RGBA(PackedImage):
    """8-bit premultiplied RGBA."""

    BYTES_PER_PIXEL = 4

    def _color(self, o: int) -> tuple[int, int, int, int]:
        r, g, b, a = (v * 0x101 for v in self.pix[o : o + 4])
        return r, g, b, a


class RGBA64(PackedImage):
    """16-bit big-endian premultiplied RGBA."""

    BYTES_PER_PIXEL = 8

    def _color(self, o: int) -> tuple[int, int, int, int]:
        r, g, b, a = (self._word(o + i) for i in (0, 2, 4, 6))
        return r, g, b, a


@dataclass
class YCbCr:
    """A planar Y'CbCr image with subsampled chroma."""

    y: bytearray
    cb: bytearray
    cr: bytearray
    y_stride: int
    c_stride: int
    subsample_ratio: SubsampleRatio
    rect: Rectangle

    def bounds(self) -> Rectangle:
        return self.rect

    def y_offset(self, x: int, y: int) -> int:
        return (y - self.rect.min_y) * self.y_stride + (x - self.rect.min_x)

    def c_offset(self, x: int, y: int) -> int:
        r = self.rect
        ratio = self.subsample_ratio
        if ratio is SubsampleRatio.RATIO_422:
            return (y - r.min_y) * self.c_stride + (x // 2 - r.min_x // 2)
        if ratio is SubsampleRatio.RATIO_420:
            return (y // 2 - r.min_y // 2) * self.c_stride + (x // 2 - r.min_x // 2)
        if ratio is SubsampleRatio.RATIO_440:
            return (y // 2 - r.min_y // 2) * self.c_stride + (x - r.min_x)
        if ratio is SubsampleRatio.RATIO_411:
            return (y - r.min_y) * self.c_stride + (x // 4 - r.min_x // 4)
        if ratio is SubsampleRatio.RATIO_410:
            return (y // 2 - r.min_y // 2) * self.c_stride + (x // 4 - r.min_x // 4)
        return (y - r.min_y) * self.c_stride + (x - r.min_x)

    def rgba64_at(self, x: int, y: int) -> tuple[int, int, int, int]:
        if not self.rect.contains(x, y):
            return _TRANSPARENT
        ci = self.c_offset(x, y)
        r, g, b = _ycbcr_to_rgb16(self.y[self.y_offset(x, y)], self.cb[ci], self.cr[ci])
        return r, g, b, 0xFFFF


@dataclass
class NYCbCrA(YCbCr):
    """A planar Y'CbCr image with a non-premultiplied alpha plane."""

    a: bytearray
    a_stride: int

    def rgba64_at(self, x: int, y: int) -> tuple[int, int, int, int]:
        if not self.rect.contains(x, y):
            return _TRANSPARENT
        r, g, b, _ = super().rgba64_at(x, y)
        a = self.a[(y - self.rect.min_y) * self.a_stride + (x - self.rect.min_x)] * 0x101
        return r * a // 0xFFFF, g * a // 0xFFFF, b * a // 0xFFFF, a


def new_ycbcr(rect: Rectangle, ratio: SubsampleRatio) -> YCbCr:
    """Create a zeroed Y'CbCr image of the given bounds and subsampling."""
    w, h = rect.dx(), rect.dy()
    half_w = (rect.max_x + 1) // 2 - rect.min_x // 2
    half_h = (rect.max_y + 1) // 2 - rect.min_y // 2
    quarter_w = (rect.max_x + 3) // 4 - rect.min_x // 4
    cw, ch = {
        SubsampleRatio.RATIO_444: (w, h),
        SubsampleRatio.RATIO_422: (half_w, h),
        SubsampleRatio.RATIO_420: (half_w, half_h),
        SubsampleRatio.RATIO_440: (w, half_h),
        SubsampleRatio.RATIO_411: (quarter_w, h),
        SubsampleRatio.RATIO_410: (quarter_w, half_h),
    }[ratio]
    return YCbCr(
        y=bytearray(w * h),
        cb=bytearray(cw * ch),
        cr=bytearray(cw * ch),
        y_stride=w,
        c_stride=cw,
        subsample_ratio=ratio,
        rect=rect,
    )


def new_rgba(rect: Rectangle) -> RGBA:
    """Create a zeroed RGBA image."""
    return RGBA(pix=bytearray(4 * rect.dx() * rect.dy()), stride=4 * rect.dx(), rect=rect)


def new_gray(rect: Rectangle) -> Gray:
    """Create a zeroed grey image."""
    return Gray(pix=bytearray(rect.dx() * rect.dy()), stride=rect.dx(), rect=rect)