"""Canvas → encoded image bytes (PNG, JPEG, BMP, WEBP) via Pillow.

Formats:
    PNG   lossless, RGBA
    JPEG  lossy, RGB (alpha dropped), default quality 90
    BMP   lossless, RGB (opaque by convention)
    WEBP  lossy at `quality`, RGBA, default quality 100

Each format has its own writer; encode() validates the buffer, resolves the
quality and dispatches. Output is always bytes (nothing is written to disk).

Usage:
    from uvwire.renderer.encoder import ImageFormat, encode
    data = encode(canvas, ImageFormat.PNG)
    data = encode(canvas, ImageFormat.from_name("jpg"), quality=80)
"""

import enum
import io
import logging
from typing import Callable, Dict, Optional

import numpy as np
from PIL import Image

from .canvas import Canvas

logger = logging.getLogger(__name__)


class ImageFormat(enum.Enum):
    """Supported output formats (value = canonical file extension)."""

    PNG = "png"
    JPEG = "jpg"
    BMP = "bmp"
    WEBP = "webp"

    @property
    def extension(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> 'ImageFormat':
        """Resolve 'png', 'jpg', 'jpeg', 'bmp', 'webp' (any case, optional dot)."""
        key = name.strip().lower().lstrip('.')
        if key == "jpeg":
            key = "jpg"
        for fmt in cls:
            if fmt.value == key:
                return fmt
        raise ValueError(
            f"Unsupported image format '{name}'; expected one of "
            f"{[f.value for f in cls] + ['jpeg']}"
        )


class EncodeErrorKind(enum.Enum):
    UNSUPPORTED_BUFFER = "unsupported_buffer"
    ENCODER_FAILURE = "encoder_failure"


class EncodeError(Exception):
    """Raised when a canvas cannot be encoded."""

    def __init__(self, kind: EncodeErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"


_DEFAULT_QUALITY = {
    ImageFormat.PNG: 100,
    ImageFormat.JPEG: 90,
    ImageFormat.BMP: 100,
    ImageFormat.WEBP: 100,
}


def default_quality(fmt: ImageFormat) -> int:
    """Quality used when the caller passes none (JPEG 90, others 100)."""
    return _DEFAULT_QUALITY[fmt]


# ============================================================================
# FORMAT WRITERS
# ============================================================================

def _write_png(img: Image.Image, buf: io.BytesIO, quality: int) -> None:
    img.save(buf, format="PNG")


def _write_jpeg(img: Image.Image, buf: io.BytesIO, quality: int) -> None:
    img.convert("RGB").save(buf, format="JPEG", quality=quality)


def _write_bmp(img: Image.Image, buf: io.BytesIO, quality: int) -> None:
    img.convert("RGB").save(buf, format="BMP")


def _write_webp(img: Image.Image, buf: io.BytesIO, quality: int) -> None:
    img.save(buf, format="WEBP", quality=quality, lossless=False)


_WRITERS: Dict[ImageFormat, Callable[[Image.Image, io.BytesIO, int], None]] = {
    ImageFormat.PNG: _write_png,
    ImageFormat.JPEG: _write_jpeg,
    ImageFormat.BMP: _write_bmp,
    ImageFormat.WEBP: _write_webp,
}


# ============================================================================
# PUBLIC API
# ============================================================================

def encode(
    canvas: Canvas,
    fmt: ImageFormat,
    quality: Optional[int] = None
) -> bytes:
    """Encode a canvas to image bytes.

    Parameters
    ----------
    canvas : Canvas
        Finished canvas; not modified
    fmt : ImageFormat
        Target format
    quality : int, optional
        1-100; None → default_quality(fmt). Ignored by PNG and BMP.

    Returns
    -------
    bytes
        Encoded image

    Raises
    ------
    ValueError
        If quality is outside [1, 100]
    EncodeError
        UNSUPPORTED_BUFFER for empty or malformed pixel buffers,
        ENCODER_FAILURE when Pillow rejects the image
    """
    if quality is None:
        quality = default_quality(fmt)
    if not 1 <= quality <= 100:
        raise ValueError(f"quality must be in [1, 100], got {quality}")

    pixels = canvas.pixels
    if (
        pixels.dtype != np.uint8
        or pixels.ndim != 3
        or pixels.shape[2] != 4
        or pixels.shape[0] != pixels.shape[1]
    ):
        raise EncodeError(
            EncodeErrorKind.UNSUPPORTED_BUFFER,
            f"Expected (N, N, 4) uint8 buffer, got {pixels.shape} {pixels.dtype}"
        )
    if pixels.shape[0] == 0:
        raise EncodeError(EncodeErrorKind.UNSUPPORTED_BUFFER, "Cannot encode a zero-sized canvas")

    buf = io.BytesIO()
    try:
        img = Image.fromarray(np.ascontiguousarray(pixels))
        _WRITERS[fmt](img, buf, quality)
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(
            EncodeErrorKind.ENCODER_FAILURE,
            f"{fmt.name} encoder failed: {e}"
        ) from e

    data = buf.getvalue()
    logger.debug(f"Encoded {canvas.size}x{canvas.size} canvas as {fmt.name} ({len(data)} bytes, q={quality})")
    return data
