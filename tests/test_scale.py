import pytest

from medialine.broadcast import ReaderFunc
from medialine.video.image import (
    RGBA,
    Rectangle,
    SubsampleRatio,
    YCbCr,
    new_gray,
    new_rgba,
)
from medialine.video.scale import Scaler, scale


def _noop():
    return None


def _b(*rows):
    return bytearray.fromhex(" ".join(rows))


def _ycbcr(y, cb, cr, y_stride, c_stride, ratio, w, h):
    return YCbCr(
        y=y,
        cb=cb,
        cr=cr,
        y_stride=y_stride,
        c_stride=c_stride,
        subsample_ratio=ratio,
        rect=Rectangle(0, 0, w, h),
    )


R444 = SubsampleRatio.RATIO_444
R422 = SubsampleRatio.RATIO_422
R420 = SubsampleRatio.RATIO_420

RGBA_SRC_ROWS = (
    "80 00 00 FF 80 00 00 FF 00 00 00 FF 00 00 00 FF",
    "80 00 00 FF 80 00 00 FF 00 00 00 FF 00 00 00 FF",
    "00 40 00 FF 00 40 00 FF 00 00 60 FF 00 00 60 FF",
    "00 40 00 FF 00 40 00 FF 00 00 60 FF 00 00 60 FF",
)

I444_Y = (
    "F0 F0 00 00 00 00", "F0 F0 00 00 00 00",
    "00 00 00 00 40 40", "00 00 00 00 40 40",
    "00 00 80 80 00 00", "00 00 80 80 00 00",
)
I444_CB = (
    "20 20 80 80 80 80", "20 20 80 80 80 80",
    "80 80 80 80 C0 C0", "80 80 80 80 C0 C0",
    "80 80 80 80 80 80", "80 80 80 80 80 80",
)
I444_CR = (
    "E0 E0 80 80 80 80", "E0 E0 80 80 80 80",
    "80 80 80 80 80 80", "80 80 80 80 80 80",
    "80 80 40 40 80 80", "80 80 40 40 80 80",
)

Y8 = (
    "F0 F0 10 10 00 00 00 00", "F0 F0 10 10 00 00 00 00",
    "00 00 00 00 40 40 00 00", "00 00 00 00 40 40 00 00",
    "00 00 00 00 00 00 00 00", "00 00 00 00 00 00 00 00",
    "00 00 80 80 30 30 00 00", "00 00 80 80 30 30 00 00",
)
Y4 = ("F0 10 00 00", "00 00 40 00", "00 00 00 00", "00 80 30 00")

I422_CB = (
    "20 20 80 80", "20 20 80 80",
    "80 80 80 80", "80 80 80 80",
    "80 80 80 80", "80 80 80 80",
    "80 80 E0 E0", "80 80 E0 E0",
)
I422_CR = (
    "E0 E0 80 80", "E0 E0 80 80",
    "80 80 80 80", "80 80 80 80",
    "80 80 80 80", "80 80 80 80",
    "F0 F0 40 40", "F0 F0 40 40",
)
I420_CB = ("20 20 80 80", "20 20 80 80", "80 80 E0 E0", "80 80 E0 E0")
I420_CR = ("E0 E0 80 80", "E0 E0 80 80", "F0 F0 40 40", "F0 F0 40 40")

NS_Y = (
    "F0 F0 10 10 00 00 00 00 F0 F0 10 10", "F0 F0 10 10 00 00 00 00 F0 F0 10 10",
    "00 00 00 00 40 40 00 00 40 40 00 00", "00 00 00 00 40 40 00 00 40 40 00 00",
    "00 00 00 00 00 00 00 00 00 00 00 00", "00 00 00 00 00 00 00 00 00 00 00 00",
    "00 00 80 80 30 30 00 00 30 30 00 00", "00 00 80 80 30 30 00 00 30 30 00 00",
)
NS_CB = (
    "20 20 80 80 50 50", "20 20 80 80 50 50",
    "80 80 E0 E0 30 30", "80 80 E0 E0 30 30",
)
NS_CR = (
    "E0 E0 80 80 B0 B0", "E0 E0 80 80 B0 B0",
    "F0 F0 40 40 C0 C0", "F0 F0 40 40 C0 C0",
)


def _cases():
    return {
        "RGBA": (
            RGBA(pix=_b(*RGBA_SRC_ROWS), stride=16, rect=Rectangle(0, 0, 4, 4)),
            2,
            2,
            RGBA(
                pix=_b("80 00 00 FF 00 00 00 FF", "00 40 00 FF 00 00 60 FF"),
                stride=8,
                rect=Rectangle(0, 0, 2, 2),
            ),
        ),
        "RGBASameSize": (
            RGBA(pix=_b(*RGBA_SRC_ROWS), stride=16, rect=Rectangle(0, 0, 4, 4)),
            4,
            4,
            RGBA(pix=_b(*RGBA_SRC_ROWS), stride=16, rect=Rectangle(0, 0, 4, 4)),
        ),
        "I444": (
            _ycbcr(_b(*I444_Y), _b(*I444_CB), _b(*I444_CR), 6, 6, R444, 6, 6),
            3,
            3,
            _ycbcr(
                _b("F0 00 00", "00 00 40", "00 80 00"),
                _b("20 80 80", "80 80 C0", "80 80 80"),
                _b("E0 80 80", "80 80 80", "80 40 80"),
                3, 3, R444, 3, 3,
            ),
        ),
        "I444SameSize": (
            _ycbcr(_b(*I444_Y), _b(*I444_CB), _b(*I444_CR), 6, 6, R444, 6, 6),
            6,
            6,
            _ycbcr(_b(*I444_Y), _b(*I444_CB), _b(*I444_CR), 6, 6, R444, 6, 6),
        ),
        "I422": (
            _ycbcr(_b(*Y8), _b(*I422_CB), _b(*I422_CR), 8, 4, R422, 8, 8),
            4,
            4,
            _ycbcr(
                _b(*Y4),
                _b("20 80", "80 80", "80 80", "80 E0"),
                _b("E0 80", "80 80", "80 80", "F0 40"),
                4, 2, R422, 4, 4,
            ),
        ),
        "I422SameSize": (
            _ycbcr(_b(*Y8), _b(*I422_CB), _b(*I422_CR), 8, 4, R422, 8, 8),
            8,
            8,
            _ycbcr(_b(*Y8), _b(*I422_CB), _b(*I422_CR), 8, 4, R422, 8, 8),
        ),
        "I420": (
            _ycbcr(_b(*Y8), _b(*I420_CB), _b(*I420_CR), 8, 4, R420, 8, 8),
            4,
            4,
            _ycbcr(
                _b(*Y4), _b("20 80", "80 E0"), _b("E0 80", "F0 40"), 4, 2, R420, 4, 4
            ),
        ),
        "I420SameSize": (
            _ycbcr(_b(*Y8), _b(*I420_CB), _b(*I420_CR), 8, 4, R420, 8, 8),
            8,
            8,
            _ycbcr(_b(*Y8), _b(*I420_CB), _b(*I420_CR), 8, 4, R420, 8, 8),
        ),
        "I420NonSquareImage": (
            _ycbcr(_b(*NS_Y), _b(*NS_CB), _b(*NS_CR), 12, 6, R420, 12, 8),
            6,
            4,
            _ycbcr(
                _b(
                    "F0 10 00 00 F0 10",
                    "00 00 40 00 40 00",
                    "00 00 00 00 00 00",
                    "00 80 30 00 30 00",
                ),
                _b("20 80 50", "80 E0 30"),
                _b("E0 80 B0", "F0 40 C0"),
                6, 3, R420, 6, 4,
            ),
        ),
    }


@pytest.mark.parametrize("name", sorted(_cases()))
@pytest.mark.parametrize("algo", [None, Scaler.NEAREST_NEIGHBOR])
def test_scale(name, algo):
    src, width, height, expected = _cases()[name]
    reader = scale(width, height, algo)(ReaderFunc(lambda: (src, _noop)))
    for _ in range(4):
        out, _ = reader.read()
        assert out == expected
        # Destroy output contents; later reads must not be affected.
        if isinstance(out, RGBA):
            out.stride = 10
            del out.pix[1:]
        else:
            out.y_stride = 10
            out.c_stride = 100
            del out.y[1:]
            del out.cb[2:]
            del out.cr[1:]
        out.rect = Rectangle(0, 0, 1, out.rect.max_y)


def test_scale_keeps_aspect_ratio_for_height():
    src = new_rgba(Rectangle(0, 0, 8, 4))
    out, _ = scale(4, -1)(ReaderFunc(lambda: (src, _noop))).read()
    assert out.rect == Rectangle(0, 0, 4, 2)
    assert len(out.pix) == 4 * 4 * 2


def test_scale_keeps_aspect_ratio_for_width():
    src = new_rgba(Rectangle(0, 0, 8, 4))
    out, _ = scale(0, 2)(ReaderFunc(lambda: (src, _noop))).read()
    assert out.rect == Rectangle(0, 0, 4, 2)
    assert out.stride == 16


def test_scale_rejects_both_sizes_non_positive():
    with pytest.raises(ValueError):
        scale(0, -1)


def test_scale_rejects_unsupported_image():
    src = new_gray(Rectangle(0, 0, 4, 4))
    reader = scale(2, 2)(ReaderFunc(lambda: (src, _noop)))
    with pytest.raises(TypeError):
        reader.read()


def test_scale_propagates_source_error():
    def fail():
        raise EOFError("done")

    reader = scale(2, 2)(ReaderFunc(fail))
    with pytest.raises(EOFError):
        reader.read()