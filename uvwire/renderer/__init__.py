"""Wireframe rasterization and image encoding.

Modules:
    - canvas: RGBA buffer with anti-aliased stroke_line / fill_circle
    - wireframe: MeshData + RenderOptions → Canvas (edges, vertex markers)
    - encoder: Canvas → PNG / JPEG / BMP / WEBP bytes (Pillow)
    - preview: area-averaged downscale for display (OpenCV)

Invariants:
    - Pure CPU, deterministic (no randomness, no time dependence)
    - One Canvas per render call; never shared between renders
    - Straight alpha throughout; no colorspace conversion
"""
