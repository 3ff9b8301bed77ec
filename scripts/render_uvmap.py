#!/usr/bin/env python3
"""Render a UV coordinate CSV to a wireframe image.

Runs the full pipeline for one input file:
    1. Load render config (configs/render_v1.yaml) and apply CLI overrides
    2. Parse the CSV → MeshData
    3. Render the wireframe → Canvas
    4. Encode (PNG / JPEG / BMP / WEBP) and write atomically
    5. Optionally write a downscaled preview and a provenance manifest

Refactored architecture:
    - render_main(input_path, output_path, config, **overrides) → dict
        * Callable function (used by tests and host shells)
    - CLI entry point: if __name__ == "__main__"

CLI:
    python scripts/render_uvmap.py exports/body_uv.csv
    python scripts/render_uvmap.py body_uv.csv -o out/body.webp --size 4096 \\
                                   --line-color red --thickness 1.5 --no-vertices
    python scripts/render_uvmap.py body_uv.csv --format jpg --quality 80 \\
                                   --preview-px 512 --manifest

Output structure (default, next to the input):
    <input_dir>/
        uvmap.<ext>
        uvmap_preview.png      (--preview-px)
        uvmap_manifest.yaml    (--manifest)

Exit codes:
    0: Image written
    1: Parse, encode, config or write failure
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

sys.path.insert(0, str(Path(__file__).parent.parent))

import uvwire
from uvwire.data_pipeline.uv_csv import ParseError, load_uv_csv
from uvwire.renderer.encoder import EncodeError, ImageFormat, encode
from uvwire.renderer.preview import make_preview
from uvwire.renderer.wireframe import render_wireframe
from uvwire.utils import fs, hashing, logging_config, validators
from uvwire.utils.validators import ConfigError, RenderConfigV1, RenderOptions

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "configs" / "render_v1.yaml"
DEFAULT_OUTPUT_STEM = "uvmap"


def _resolve_config(config: Union[None, str, Path, RenderConfigV1]) -> RenderConfigV1:
    if isinstance(config, RenderConfigV1):
        return config
    return validators.load_render_config(config or DEFAULT_CONFIG_PATH)


def _resolve_format(
    fmt: Optional[str],
    output_path: Optional[Path],
    cfg: RenderConfigV1
) -> ImageFormat:
    """Explicit format > recognized output extension > config default."""
    if fmt:
        return ImageFormat.from_name(fmt)
    if output_path is not None and output_path.suffix:
        try:
            return ImageFormat.from_name(output_path.suffix)
        except ValueError:
            pass
    return ImageFormat.from_name(cfg.output.format)


def _resolve_output_path(
    input_path: Path,
    output_path: Optional[Path],
    fmt: ImageFormat
) -> Path:
    if output_path is None:
        return input_path.parent / f"{DEFAULT_OUTPUT_STEM}.{fmt.extension}"
    if not output_path.suffix:
        return output_path.with_suffix(f".{fmt.extension}")
    return output_path


def render_main(
    input_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    config: Union[None, str, Path, RenderConfigV1] = None,
    *,
    size: Optional[int] = None,
    background: Optional[str] = None,
    line_color: Optional[str] = None,
    thickness: Optional[float] = None,
    draw_vertices: Optional[bool] = None,
    fmt: Optional[str] = None,
    quality: Optional[int] = None,
    preview_px: Optional[int] = None,
    manifest: bool = False,
) -> Dict[str, Any]:
    """Parse, render, encode and write one UV CSV.

    Parameters
    ----------
    input_path : str or Path
        UV CSV file
    output_path : str or Path, optional
        Output image path; default <input_dir>/uvmap.<ext>
    config : path or RenderConfigV1, optional
        Render config; default configs/render_v1.yaml
    size, background, line_color, thickness, draw_vertices : optional
        RenderOptions overrides (None keeps the config value)
    fmt : str, optional
        Output format override ('png', 'jpg', 'bmp', 'webp')
    quality : int, optional
        Encoder quality override (1-100)
    preview_px : int, optional
        Also write <stem>_preview.png downscaled to this edge length
    manifest : bool
        Also write <stem>_manifest.yaml with hashes and counts

    Returns
    -------
    Dict[str, Any]
        Results dict with:
            - output_path: str
            - format: str (extension)
            - point_count, triangle_count: int
            - texture_size: [width, height]
            - bytes_written: int
            - sha256: str (of the encoded image)
            - preview_path: Optional[str]
            - manifest_path: Optional[str]

    Raises
    ------
    ParseError
        If the CSV cannot produce a mesh
    EncodeError
        If the canvas cannot be encoded
    ConfigError
        If the config file or an override is invalid
    AtomicWriteError
        If an output file cannot be written
    """
    cfg = _resolve_config(config)
    input_path = Path(input_path)
    out = Path(output_path) if output_path is not None else None

    overrides = {
        'output_size': size,
        'background_color': background,
        'line_color': line_color,
        'line_thickness_px': thickness,
        'draw_vertices': draw_vertices,
    }
    merged = cfg.options.model_dump()
    merged.update({k: v for k, v in overrides.items() if v is not None})
    try:
        options = RenderOptions(**merged)
        image_format = _resolve_format(fmt, out, cfg)
    except (ValidationError, ValueError) as e:
        raise ConfigError(f"Invalid render options: {e}") from e

    if quality is None:
        quality = cfg.output.quality
    if preview_px is None:
        preview_px = cfg.output.preview_px
    elif preview_px <= 0:
        raise ConfigError(f"preview_px must be > 0, got {preview_px}")

    out = _resolve_output_path(input_path, out, image_format)
    with logging_config.log_context(input=input_path.name):
        mesh = load_uv_csv(input_path)
        logger.info(
            f"Parsed {len(mesh.points)} points ({mesh.triangle_count} triangles), "
            f"texture {mesh.texture_width}x{mesh.texture_height}"
        )
        if len(mesh.points) % 3:
            logger.warning(
                f"{len(mesh.points) % 3} trailing point(s) do not complete a triangle"
            )

        canvas = render_wireframe(mesh, options)
        try:
            data = encode(canvas, image_format, quality)
        except ValueError as e:
            raise ConfigError(f"Invalid output settings: {e}") from e
        fs.atomic_write_bytes(out, data)
        digest = hashing.sha256_bytes(data)
        logger.info(f"Wrote {out} ({image_format.name}, {options.output_size}px, {len(data)} bytes)")

        preview_path = None
        if preview_px:
            preview_path = out.with_name(f"{out.stem}_preview.png")
            fs.atomic_write_bytes(
                preview_path, encode(make_preview(canvas, preview_px), ImageFormat.PNG)
            )
            logger.info(f"Wrote preview {preview_path}")

        manifest_path = None
        if manifest:
            manifest_path = out.with_name(f"{out.stem}_manifest.yaml")
            options_dict = validators.options_to_dict(options)
            fs.atomic_yaml_dump(
                {
                    'schema': 'render_manifest.v1',
                    'uvwire_version': uvwire.__version__,
                    'input': str(input_path),
                    'input_sha256': hashing.sha256_file(input_path),
                    'output': str(out),
                    'output_sha256': digest,
                    'format': image_format.extension,
                    'quality': quality,
                    'options': options_dict,
                    'options_sha256': hashing.hash_dict(options_dict),
                    'texture_size': [mesh.texture_width, mesh.texture_height],
                    'point_count': len(mesh.points),
                    'triangle_count': mesh.triangle_count,
                },
                manifest_path
            )
            logger.info(f"Wrote manifest {manifest_path}")

    return {
        'output_path': str(out),
        'format': image_format.extension,
        'point_count': len(mesh.points),
        'triangle_count': mesh.triangle_count,
        'texture_size': [mesh.texture_width, mesh.texture_height],
        'bytes_written': len(data),
        'sha256': digest,
        'preview_path': str(preview_path) if preview_path else None,
        'manifest_path': str(manifest_path) if manifest_path else None,
    }


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a UV coordinate CSV as a wireframe image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument("input", type=str, help="UV CSV file")
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output image path (default: <input_dir>/uvmap.<ext>)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=str(DEFAULT_CONFIG_PATH),
        help="Path to render config",
    )
    parser.add_argument(
        "--size",
        type=int,
        choices=validators.REFERENCE_OUTPUT_SIZES,
        help="Output edge length in pixels",
    )
    parser.add_argument("--background", type=str, help="Background color (name or #RRGGBB[AA])")
    parser.add_argument("--line-color", type=str, help="Line color (name or #RRGGBB[AA])")
    parser.add_argument("--thickness", type=float, help="Line thickness in pixels")
    parser.add_argument(
        "--vertices",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Draw vertex markers (default: from config)",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["png", "jpg", "jpeg", "bmp", "webp"],
        help="Output format (default: from -o extension, else config)",
    )
    parser.add_argument("--quality", type=int, help="Encoder quality 1-100 (JPEG/WEBP)")
    parser.add_argument("--preview-px", type=int, help="Also write a downscaled PNG preview")
    parser.add_argument(
        "--manifest",
        action="store_true",
        help="Also write a YAML manifest with hashes and counts",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Override config log level (DEBUG, INFO, ...)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Write JSON lines to the log file",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """CLI entry point; returns the process exit code."""
    args = parse_args(argv)

    try:
        cfg = validators.load_render_config(args.config)
    except ConfigError as e:
        logging_config.setup_logging(log_level="INFO", context={"app": "render"})
        logger.error(f"Config error: {e}")
        return 1

    logging_config.setup_logging(
        log_level=args.log_level or cfg.logging.level,
        log_file=cfg.logging.file,
        json=args.json_logs or cfg.logging.json_format,
        quiet_libs=["PIL"],
        context={"app": "render"},
    )
    logging_config.install_excepthook()

    try:
        result = render_main(
            args.input,
            args.output,
            cfg,
            size=args.size,
            background=args.background,
            line_color=args.line_color,
            thickness=args.thickness,
            draw_vertices=args.vertices,
            fmt=args.format,
            quality=args.quality,
            preview_px=args.preview_px,
            manifest=args.manifest,
        )
    except ParseError as e:
        logger.error(f"Cannot parse {args.input}: {e}")
        return 1
    except EncodeError as e:
        logger.error(f"Cannot encode image: {e}")
        return 1
    except ConfigError as e:
        logger.error(f"Config error: {e}")
        return 1
    except fs.AtomicWriteError as e:
        logger.error(f"Cannot write output: {e}")
        return 1
    finally:
        logging_config.shutdown()

    print(f"Image: {result['output_path']}")
    if result['preview_path']:
        print(f"Preview: {result['preview_path']}")
    if result['manifest_path']:
        print(f"Manifest: {result['manifest_path']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
