"""Pixel-format conversion of images and of video readers."""

from __future__ import annotations

import dataclasses
from typing import Any, Callable

from ..broadcast import Reader, ReaderFunc, ReleaseHandle
from .image import (
    RGBA,
    SubsampleRatio,
    YCbCr,
    rgb_to_ycbcr,
    ycbcr_to_rgb,
)

__all__ = [
    "image_to_ycbcr",
    "image_to_rgba",
    "i444_to_i420",
    "i422_to_i420",
    "to_i420",
    "to_rgba",
]


def image_to_ycbcr(src: Any) -> YCbCr:
    """Return ``src`` as a Y'CbCr image; other formats become 4:4:4 (possibly lossy)."""
    if type(src) is YCbCr:
        return dataclasses.replace(src)

    bounds = src.bounds()
    dx, dy = bounds.dx(), bounds.dy()
    flat = dx * dy
    y, cb, cr = bytearray(flat), bytearray(flat), bytearray(flat)

    if type(src) is RGBA:
        pix = src.pix
        for i in range(flat):
            o = 4 * i
            y[i], cb[i], cr[i] = rgb_to_ycbcr(pix[o], pix[o + 1], pix[o + 2])
    else:
        i = 0
        for yi in range(dy):
            for xi in range(dx):
                r, g, b, _ = src.rgba64_at(xi, yi)
                y[i], cb[i], cr[i] = rgb_to_ycbcr(r >> 8, g >> 8, b >> 8)
                i += 1

    return YCbCr(
        y=y,
        cb=cb,
        cr=cr,
        y_stride=dx,
        c_stride=dx,
        subsample_ratio=SubsampleRatio.RATIO_444,
        rect=bounds,
    )


def i444_to_i420(img: YCbCr) -> YCbCr:
    """Average each 2x2 chroma block of a 4:4:4 image into a 4:2:0 image."""
    h = img.rect.dy()
    stride = img.c_stride
    c_len = stride * h // 4
    cb_dst, cr_dst = bytearray(c_len), bytearray(c_len)
    dst = 0
    for row in range(h // 2):
        top = 2 * row * stride
        bottom = top + stride
        for col in range(0, stride // 2 * 2, 2):
            a, b = top + col, bottom + col
            cb_dst[dst] = (img.cb[a] + img.cb[b] + img.cb[a + 1] + img.cb[b + 1]) // 4
            cr_dst[dst] = (img.cr[a] + img.cr[b] + img.cr[a + 1] + img.cr[b + 1]) // 4
            dst += 1
    return dataclasses.replace(
        img,
        cb=cb_dst,
        cr=cr_dst,
        c_stride=stride // 2,
        subsample_ratio=SubsampleRatio.RATIO_420,
    )


def i422_to_i420(img: YCbCr) -> YCbCr:
    """Average each vertical pair of chroma rows of a 4:2:2 image into a 4:2:0 image."""
    h = img.rect.dy()
    stride = img.c_stride
    c_len = stride * (h // 2)
    cb_dst, cr_dst = bytearray(c_len), bytearray(c_len)
    dst = 0
    for row in range(h // 2):
        top = 2 * row * stride
        for col in range(stride):
            a, b = top + col, top + col + stride
            cb_dst[dst] = (img.cb[a] + img.cb[b]) // 2
            cr_dst[dst] = (img.cr[a] + img.cr[b]) // 2
            dst += 1
    return dataclasses.replace(
        img, cb=cb_dst, cr=cr_dst, subsample_ratio=SubsampleRatio.RATIO_420
    )


def image_to_rgba(src: Any) -> RGBA:
    """Return ``src`` as an RGBA image."""
    if type(src) is RGBA:
        return dataclasses.replace(src)

    bounds = src.bounds()
    dx, dy = bounds.dx(), bounds.dy()
    pix = bytearray(4 * dx * dy)

    if type(src) is YCbCr and src.subsample_ratio is SubsampleRatio.RATIO_444:
        for j in range(dx * dy):
            r, g, b = ycbcr_to_rgb(src.y[j], src.cb[j], src.cr[j])
            pix[4 * j : 4 * j + 4] = bytes((r, g, b, 0xFF))
    else:
        i = 0
        for yi in range(dy):
            for xi in range(dx):
                pix[i : i + 4] = bytes(v >> 8 for v in src.rgba64_at(xi, yi))
                i += 4

    return RGBA(pix=pix, stride=4 * dx, rect=bounds)


def to_i420(reader: Reader) -> Reader:
    """Wrap ``reader`` so that it yields 4:2:0 Y'CbCr images.

    Raises ``ValueError`` for subsampling that cannot be converted.
    """

    def read() -> tuple[YCbCr, Callable[[], None]]:
        img, _ = reader.read()
        yuv = image_to_ycbcr(img)
        ratio = yuv.subsample_ratio
        if ratio is SubsampleRatio.RATIO_444:
            yuv = i444_to_i420(yuv)
        elif ratio is SubsampleRatio.RATIO_422:
            yuv = i422_to_i420(yuv)
        elif ratio is not SubsampleRatio.RATIO_420:
            raise ValueError(f"unsupported pixel format: {ratio}")
        return yuv, ReleaseHandle()

    return ReaderFunc(read)


def to_rgba(reader: Reader) -> Reader:
    """Wrap ``reader`` so that it yields RGBA images."""

    def read() -> tuple[RGBA, Callable[[], None]]:
        img, _ = reader.read()
        return image_to_rgba(img), ReleaseHandle()

    return ReaderFunc(read)