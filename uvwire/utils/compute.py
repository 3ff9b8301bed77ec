"""Coordinate conversions between UV space and canvas pixels.

Frames:
    - UV: normalized texture space, u → right, v → down, [0,1]×[0,1]
    - Pixel: canvas raster, origin at the top-left corner of pixel (0, 0)

The mapping is a plain scale after clamping; there is no aspect-ratio
correction (the canvas is square) and no Y flip (v = 0 is the top edge).
A UV of 1.0 maps to x = size, i.e. the far edge of the last pixel.

Usage:
    from uvwire.utils.compute import uv_to_px
    x, y = uv_to_px(point, 2048)
"""

import math
from typing import Tuple

import numpy as np


def clamp01(value: float) -> float:
    """Clamp a scalar to [0, 1]; NaN maps to 0."""
    if math.isnan(value):
        return 0.0
    return min(max(value, 0.0), 1.0)


def uv_to_px(point, size: int) -> Tuple[float, float]:
    """Map a UV point to pixel coordinates on a size×size canvas.

    Parameters
    ----------
    point : UVPoint or (u, v)
        Anything with ``u``/``v`` attributes, or a 2-sequence
    size : int
        Canvas edge length in pixels

    Returns
    -------
    Tuple[float, float]
        (x, y) in pixels, each in [0, size]

    Notes
    -----
    Total: out-of-range and non-finite inputs are clamped, never rejected.

    Examples
    --------
    >>> uv_to_px((-5.0, 2.0), 100)
    (0.0, 100.0)
    """
    if hasattr(point, 'u'):
        u, v = point.u, point.v
    else:
        u, v = point
    return clamp01(float(u)) * size, clamp01(float(v)) * size


def uv_array_to_px(uv: np.ndarray, size: int) -> np.ndarray:
    """Vectorized uv_to_px for an (N, 2) array.

    Parameters
    ----------
    uv : np.ndarray
        UV coordinates, shape (N, 2)
    size : int
        Canvas edge length in pixels

    Returns
    -------
    np.ndarray
        Pixel coordinates, shape (N, 2), float64

    Raises
    ------
    ValueError
        If uv is not shaped (N, 2)
    """
    uv = np.asarray(uv, dtype=np.float64)
    if uv.ndim != 2 or uv.shape[1] != 2:
        raise ValueError(f"uv must have shape (N, 2), got {uv.shape}")
    clamped = np.clip(np.nan_to_num(uv, nan=0.0), 0.0, 1.0)
    return clamped * size
