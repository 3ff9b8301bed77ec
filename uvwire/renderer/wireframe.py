"""Wireframe rendering of parsed UV meshes.

Draws every triangle of a MeshData as three independent stroked edges on a
fresh Canvas, then optionally overlays a marker disc on every point.

Triangle grouping:
    points[3i], points[3i+1], points[3i+2] form triangle i, for
    i in range(len(points) // 3). Trailing 1-2 points never form edges.

Edges shared by neighbouring triangles are stroked once per triangle, so
they are composited twice. No adjacency is computed.

Draw order:
    1. fill(background_color)
    2. edges a→b, b→c, c→a for each triangle, in point order
    3. if draw_vertices: marker disc for every point, in point order
"""

import logging
from typing import Iterator, Sequence, Tuple

import numpy as np

from ..data_pipeline.uv_csv import MeshData, UVPoint
from ..utils.compute import uv_array_to_px
from ..utils.validators import RenderOptions
from .canvas import Canvas

logger = logging.getLogger(__name__)

MIN_MARKER_RADIUS_PX = 2.5
MARKER_RADIUS_SCALE = 1.2


def marker_radius(line_thickness_px: float) -> float:
    """Vertex marker radius: max(thickness × 1.2, 2.5) px, always visible."""
    return max(line_thickness_px * MARKER_RADIUS_SCALE, MIN_MARKER_RADIUS_PX)


def iter_triangles(points: Sequence[UVPoint]) -> Iterator[Tuple[int, int, int]]:
    """Yield (i0, i1, i2) point indices of each complete consecutive triple."""
    for i in range(len(points) // 3):
        yield 3 * i, 3 * i + 1, 3 * i + 2


def render_wireframe(mesh: MeshData, options: RenderOptions) -> Canvas:
    """Rasterize a mesh as a triangle-edge wireframe.

    Parameters
    ----------
    mesh : MeshData
        Parsed mesh (non-empty points)
    options : RenderOptions
        Output size, colors, thickness and vertex toggle

    Returns
    -------
    Canvas
        New output_size × output_size canvas, fully drawn

    Notes
    -----
    Deterministic. Out-of-range UVs are clamped by the coordinate mapper,
    so any non-empty mesh renders without error.
    """
    size = options.output_size
    canvas = Canvas(size)
    canvas.fill(options.background_color)

    if not mesh.points:
        return canvas

    uv = np.array([(p.u, p.v) for p in mesh.points], dtype=np.float64)
    px = uv_array_to_px(uv, size)

    triangle_count = 0
    for i0, i1, i2 in iter_triangles(mesh.points):
        a, b, c = px[i0], px[i1], px[i2]
        canvas.stroke_line(a, b, options.line_color, options.line_thickness_px)
        canvas.stroke_line(b, c, options.line_color, options.line_thickness_px)
        canvas.stroke_line(c, a, options.line_color, options.line_thickness_px)
        triangle_count += 1

    if options.draw_vertices:
        radius = marker_radius(options.line_thickness_px)
        for center in px:
            canvas.fill_circle(center, radius, options.line_color)

    logger.debug(
        f"Rendered {triangle_count} triangles, {len(mesh.points)} points "
        f"at {size}x{size} (vertices={'on' if options.draw_vertices else 'off'})"
    )
    return canvas
