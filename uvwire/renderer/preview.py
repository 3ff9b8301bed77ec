"""Downscaled previews of rendered canvases.

Large outputs (4096-8192 px) are impractical to display directly; a host
shell shows a small preview instead. OpenCV INTER_AREA averages source
pixels, so thin anti-aliased lines fade instead of dropping out.
"""

import logging

import cv2

from .canvas import Canvas

logger = logging.getLogger(__name__)


def make_preview(canvas: Canvas, max_px: int) -> Canvas:
    """Downscale a canvas so its edge is at most max_px.

    Parameters
    ----------
    canvas : Canvas
        Source canvas (not modified)
    max_px : int
        Maximum preview edge length in pixels

    Returns
    -------
    Canvas
        New canvas of size min(max_px, canvas.size); a plain copy when no
        downscale is needed

    Raises
    ------
    ValueError
        If max_px <= 0 or the canvas is empty
    """
    if max_px <= 0:
        raise ValueError(f"max_px must be > 0, got {max_px}")
    if canvas.size == 0:
        raise ValueError("Cannot preview an empty canvas")

    if canvas.size <= max_px:
        return canvas.copy()

    preview = Canvas(max_px)
    preview.pixels[...] = cv2.resize(
        canvas.pixels, (max_px, max_px), interpolation=cv2.INTER_AREA
    )
    logger.debug(f"Preview {canvas.size}px → {max_px}px")
    return preview
