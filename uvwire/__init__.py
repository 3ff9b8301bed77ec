"""UV Wireframe: render UV-coordinate CSV files as wireframe images.

This package turns a row-oriented UV coordinate file into a square raster
image showing every triangle's outline, optionally with vertex markers.

Architecture layers (strict one-way dependency):
    scripts/ → uvwire/{data_pipeline,renderer}/ → uvwire/utils/

Pipeline:
    text → data_pipeline.uv_csv.parse_uv_csv → MeshData
         → renderer.wireframe.render_wireframe → Canvas
         → renderer.encoder.encode → bytes

Key invariants:
    - UV space is [0,1]×[0,1], top-left origin, +V down (no Y flip)
    - Output canvas is always square (output_size × output_size)
    - Every consecutive run of 3 points is one independent triangle
    - The core is stateless; file I/O lives in scripts/ and utils.fs
    - YAML-only configs
"""

__version__ = "1.0.0"
