"""Input parsing for UV wireframe rendering.

Modules:
    - uv_csv: UV coordinate CSV → MeshData (UVPoint sequence + texture size)

Workflow:
    1. Drop blank lines, skip the header
    2. Read texture size (metadata only)
    3. Parse each u,v[,lod] row, skipping malformed rows whole
    4. Fail with ParseError if nothing usable remains

Outputs are immutable (frozen dataclasses) and deterministic.
"""
