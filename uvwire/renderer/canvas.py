"""RGBA raster canvas with anti-aliased line and disc primitives.

Deterministic pure-CPU rasterizer built on numpy:

Architecture:
    - Pixel buffer: (size, size, 4) uint8, straight (non-premultiplied) alpha
    - Each primitive works inside its bounding-box ROI clipped to the canvas
    - Coverage is analytic: distance from each pixel center to the primitive,
      turned into a 1-px linear ramp at the boundary
    - Source-over compositing in straight alpha, per primitive

Coverage model:
    - Segment (round caps): clip(thickness/2 + 0.5 - d_segment, 0, 1)
    - Disc:                 clip(radius + 0.5 - d_center, 0, 1)
    Pixel (x, y) is sampled at its center (x + 0.5, y + 0.5).

Invariants:
    - Pixels with zero coverage are never written
    - Same calls in the same order → byte-identical buffers
    - No layering or undo: drawing mutates the one buffer immediately

Usage:
    canvas = Canvas(1024)
    canvas.fill((255, 255, 255, 255))
    canvas.stroke_line((10.0, 10.0), (500.0, 300.0), (0, 0, 0, 255), 2.0)
    canvas.fill_circle((10.0, 10.0), 2.5, (0, 0, 0, 255))
"""

import math
from typing import Optional, Sequence, Tuple

import numpy as np
from PIL import Image

from ..utils import color as color_utils

Point = Tuple[float, float]


class Canvas:
    """Square RGBA pixel buffer owned by a single render pass.

    Attributes
    ----------
    size : int
        Edge length in pixels (width == height)
    pixels : np.ndarray
        (size, size, 4) uint8 buffer, rows top to bottom, RGBA order
    """

    def __init__(self, size: int):
        if size < 0:
            raise ValueError(f"Canvas size must be >= 0, got {size}")
        self.size = int(size)
        self.pixels = np.zeros((self.size, self.size, 4), dtype=np.uint8)

    def __repr__(self) -> str:
        return f"Canvas(size={self.size})"

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    def fill(self, color: color_utils.ColorLike) -> None:
        """Set every pixel to color (replaces, does not blend)."""
        self.pixels[...] = np.asarray(color_utils.parse_color(color), dtype=np.uint8)

    def stroke_line(
        self,
        p0: Sequence[float],
        p1: Sequence[float],
        color: color_utils.ColorLike,
        thickness_px: float
    ) -> None:
        """Draw an anti-aliased segment with round caps.

        Parameters
        ----------
        p0, p1 : (x, y)
            Segment endpoints in pixel coordinates
        color : RGBA or color string
            Stroke color; its alpha scales the coverage
        thickness_px : float
            Full stroke width perpendicular to the segment

        Raises
        ------
        ValueError
            If thickness_px <= 0 or an endpoint is not finite

        Notes
        -----
        A zero-length segment renders as a dot of diameter thickness_px.
        """
        if not thickness_px > 0:
            raise ValueError(f"thickness_px must be > 0, got {thickness_px}")
        x0, y0 = _finite_point(p0)
        x1, y1 = _finite_point(p1)
        rgba = color_utils.parse_color(color)

        half = 0.5 * float(thickness_px)
        reach = half + 1.0
        roi = self._roi(
            min(x0, x1) - reach, max(x0, x1) + reach,
            min(y0, y1) - reach, max(y0, y1) + reach
        )
        if roi is None:
            return
        px, py = self._pixel_centers(roi)

        dx, dy = x1 - x0, y1 - y0
        len_sq = dx * dx + dy * dy
        if len_sq > 0.0:
            t = np.clip(((px - x0) * dx + (py - y0) * dy) / len_sq, 0.0, 1.0)
        else:
            t = 0.0
        dist = np.hypot(px - (x0 + t * dx), py - (y0 + t * dy))

        coverage = np.clip(half + 0.5 - dist, 0.0, 1.0)
        self._composite(roi, coverage, rgba)

    def fill_circle(
        self,
        center: Sequence[float],
        radius: float,
        color: color_utils.ColorLike
    ) -> None:
        """Draw an anti-aliased filled disc.

        Parameters
        ----------
        center : (x, y)
            Disc center in pixel coordinates
        radius : float
            Disc radius in pixels; radius <= 0 draws nothing
        color : RGBA or color string
            Fill color

        Raises
        ------
        ValueError
            If center is not finite
        """
        cx, cy = _finite_point(center)
        rgba = color_utils.parse_color(color)
        if not radius > 0:
            return

        reach = float(radius) + 1.0
        roi = self._roi(cx - reach, cx + reach, cy - reach, cy + reach)
        if roi is None:
            return
        px, py = self._pixel_centers(roi)

        dist = np.hypot(px - cx, py - cy)
        coverage = np.clip(radius + 0.5 - dist, 0.0, 1.0)
        self._composite(roi, coverage, rgba)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_image(self) -> Image.Image:
        """Return the buffer as a PIL RGBA image (copies the pixels)."""
        return Image.fromarray(self.pixels.copy())

    def copy(self) -> 'Canvas':
        """Independent copy of this canvas."""
        other = Canvas(self.size)
        other.pixels[...] = self.pixels
        return other

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _roi(
        self,
        x_min: float,
        x_max: float,
        y_min: float,
        y_max: float
    ) -> Optional[Tuple[slice, slice]]:
        """Integer pixel window covering [x_min, x_max]×[y_min, y_max], clipped."""
        c0 = max(0, int(math.floor(x_min)))
        c1 = min(self.size, int(math.ceil(x_max)) + 1)
        r0 = max(0, int(math.floor(y_min)))
        r1 = min(self.size, int(math.ceil(y_max)) + 1)
        if c1 <= c0 or r1 <= r0:
            return None
        return slice(r0, r1), slice(c0, c1)

    @staticmethod
    def _pixel_centers(roi: Tuple[slice, slice]) -> Tuple[np.ndarray, np.ndarray]:
        rows, cols = roi
        py, px = np.meshgrid(
            np.arange(rows.start, rows.stop, dtype=np.float64) + 0.5,
            np.arange(cols.start, cols.stop, dtype=np.float64) + 0.5,
            indexing='ij'
        )
        return px, py

    def _composite(
        self,
        roi: Tuple[slice, slice],
        coverage: np.ndarray,
        rgba: color_utils.RGBA
    ) -> None:
        """Source-over blend rgba into the ROI, weighted by coverage.

        Straight alpha:
            a_out   = a_s + a_d (1 - a_s)
            rgb_out = (rgb_s a_s + rgb_d a_d (1 - a_s)) / a_out
        with a_s = color alpha × coverage.
        """
        mask = coverage > 0.0
        if not mask.any():
            return

        src = color_utils.to_unit(rgba).astype(np.float64)
        src_a = src[3] * coverage[mask]

        region = self.pixels[roi]
        dst = region[mask].astype(np.float64) / 255.0
        dst_weight = dst[:, 3] * (1.0 - src_a)

        out_a = src_a + dst_weight
        num = src[np.newaxis, :3] * src_a[:, np.newaxis] + dst[:, :3] * dst_weight[:, np.newaxis]
        out_rgb = np.divide(
            num,
            out_a[:, np.newaxis],
            out=np.zeros_like(num),
            where=out_a[:, np.newaxis] > 0.0
        )

        out = np.concatenate([out_rgb, out_a[:, np.newaxis]], axis=1)
        region[mask] = np.clip(np.rint(out * 255.0), 0, 255).astype(np.uint8)


def _finite_point(p: Sequence[float]) -> Point:
    x, y = float(p[0]), float(p[1])
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ValueError(f"Point must be finite, got ({x}, {y})")
    return x, y
