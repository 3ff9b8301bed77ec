"""Tests for canvas encoding.

Tests:
    - PNG is lossless RGBA (decoded pixels identical)
    - BMP is lossless RGB
    - JPEG / WEBP decode to the canvas dimensions
    - Quality handling and defaults
    - Buffer validation and encoder failure wrapping
    - ImageFormat name resolution

Run:
    pytest tests/test_encoder.py -v
"""

import io

import numpy as np
import pytest
from PIL import Image

from uvwire.renderer import encoder
from uvwire.renderer.canvas import Canvas
from uvwire.renderer.encoder import (
    EncodeError,
    EncodeErrorKind,
    ImageFormat,
    default_quality,
    encode,
)


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def drawn_canvas():
    """64 px canvas with a translucent background and AA strokes."""
    canvas = Canvas(64)
    canvas.fill((240, 240, 255, 200))
    canvas.stroke_line((4.0, 4.0), (60.0, 30.0), "black", 2.0)
    canvas.stroke_line((60.0, 30.0), (10.0, 58.0), "#ff000080", 3.0)
    canvas.fill_circle((32.0, 32.0), 4.0, "blue")
    return canvas


@pytest.fixture
def noise_canvas():
    rng = np.random.default_rng(0)
    canvas = Canvas(128)
    canvas.pixels[...] = rng.integers(0, 256, size=(128, 128, 4), dtype=np.uint8)
    canvas.pixels[..., 3] = 255
    return canvas


def _decode(data):
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


# ============================================================================
# TEST SUITE 1: Formats
# ============================================================================

def test_png_is_lossless_rgba(drawn_canvas):
    data = encode(drawn_canvas, ImageFormat.PNG)

    assert data[:8] == b"\x89PNG\r\n\x1a\n"
    img = _decode(data)
    assert img.mode == "RGBA"
    np.testing.assert_array_equal(np.array(img), drawn_canvas.pixels)


def test_bmp_is_lossless_rgb(drawn_canvas):
    data = encode(drawn_canvas, ImageFormat.BMP)

    assert data[:2] == b"BM"
    img = _decode(data)
    assert img.mode == "RGB"
    np.testing.assert_array_equal(np.array(img), drawn_canvas.pixels[..., :3])


def test_jpeg_dimensions_and_content(drawn_canvas):
    data = encode(drawn_canvas, ImageFormat.JPEG)

    assert data[:2] == b"\xff\xd8"
    img = _decode(data)
    assert img.format == "JPEG"
    assert img.mode == "RGB"
    assert img.size == (64, 64)
    # Solid blue marker survives compression
    r, g, b = np.array(img)[32, 32]
    assert b > r + 100 and b > g + 100


def test_webp_dimensions(drawn_canvas):
    data = encode(drawn_canvas, ImageFormat.WEBP)

    assert data[:4] == b"RIFF"
    assert data[8:12] == b"WEBP"
    img = _decode(data)
    assert img.format == "WEBP"
    assert img.size == (64, 64)


def test_encode_does_not_modify_canvas(drawn_canvas):
    before = drawn_canvas.pixels.copy()
    for fmt in ImageFormat:
        encode(drawn_canvas, fmt)
    np.testing.assert_array_equal(drawn_canvas.pixels, before)


def test_encoding_is_deterministic(drawn_canvas):
    assert encode(drawn_canvas, ImageFormat.PNG) == encode(drawn_canvas, ImageFormat.PNG)


# ============================================================================
# TEST SUITE 2: Quality
# ============================================================================

def test_default_quality():
    assert default_quality(ImageFormat.JPEG) == 90
    assert default_quality(ImageFormat.WEBP) == 100
    assert default_quality(ImageFormat.PNG) == 100
    assert default_quality(ImageFormat.BMP) == 100


def test_jpeg_quality_affects_size(noise_canvas):
    low = encode(noise_canvas, ImageFormat.JPEG, quality=10)
    high = encode(noise_canvas, ImageFormat.JPEG, quality=95)
    assert len(low) < len(high)


def test_png_ignores_quality(drawn_canvas):
    assert encode(drawn_canvas, ImageFormat.PNG, quality=1) == encode(drawn_canvas, ImageFormat.PNG)


@pytest.mark.parametrize("quality", [0, 101, -5])
def test_invalid_quality(drawn_canvas, quality):
    with pytest.raises(ValueError):
        encode(drawn_canvas, ImageFormat.JPEG, quality=quality)


# ============================================================================
# TEST SUITE 3: Failures
# ============================================================================

def test_zero_size_canvas():
    with pytest.raises(EncodeError) as exc_info:
        encode(Canvas(0), ImageFormat.PNG)
    assert exc_info.value.kind is EncodeErrorKind.UNSUPPORTED_BUFFER


@pytest.mark.parametrize("pixels", [
    np.zeros((8, 8, 3), dtype=np.uint8),
    np.zeros((8, 8, 4), dtype=np.float32),
    np.zeros((8, 6, 4), dtype=np.uint8),
    np.zeros((8, 8), dtype=np.uint8),
])
def test_malformed_buffer(pixels):
    canvas = Canvas(8)
    canvas.pixels = pixels

    with pytest.raises(EncodeError) as exc_info:
        encode(canvas, ImageFormat.PNG)
    assert exc_info.value.kind is EncodeErrorKind.UNSUPPORTED_BUFFER


def test_writer_failure_is_wrapped(drawn_canvas, monkeypatch):
    def broken_writer(img, buf, quality):
        raise OSError("encoder exploded")

    monkeypatch.setitem(encoder._WRITERS, ImageFormat.PNG, broken_writer)

    with pytest.raises(EncodeError) as exc_info:
        encode(drawn_canvas, ImageFormat.PNG)
    assert exc_info.value.kind is EncodeErrorKind.ENCODER_FAILURE
    assert "encoder exploded" in str(exc_info.value)
    assert str(exc_info.value).startswith("[encoder_failure]")


# ============================================================================
# TEST SUITE 4: Format names
# ============================================================================

@pytest.mark.parametrize("name, expected", [
    ("png", ImageFormat.PNG),
    ("PNG", ImageFormat.PNG),
    (".png", ImageFormat.PNG),
    ("jpg", ImageFormat.JPEG),
    ("jpeg", ImageFormat.JPEG),
    (".JPEG", ImageFormat.JPEG),
    ("bmp", ImageFormat.BMP),
    (" webp ", ImageFormat.WEBP),
])
def test_from_name(name, expected):
    assert ImageFormat.from_name(name) is expected


@pytest.mark.parametrize("name", ["gif", "tiff", "", "pn"])
def test_from_name_unknown(name):
    with pytest.raises(ValueError):
        ImageFormat.from_name(name)


def test_extensions():
    assert [f.extension for f in ImageFormat] == ["png", "jpg", "bmp", "webp"]
