"""Render option schemas and YAML config loading.

Provides centralized validation using pydantic:
    - RenderOptions: the explicit parameters of one wireframe render
    - Render config schema (render.v1.yaml): options + output + logging

Every RenderOptions field is required: the core never invents defaults.
Defaults for the command line live in configs/render_v1.yaml.

Units:
    - Sizes and thickness: pixels
    - Colors: RGBA ints [0, 255], straight alpha

Usage:
    from uvwire.utils import validators

    options = validators.RenderOptions(
        output_size=1024,
        background_color="white",
        line_color="#000000",
        line_thickness_px=2.0,
        draw_vertices=True,
    )
    cfg = validators.load_render_config("configs/render_v1.yaml")
"""

from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from . import color as color_utils
from .fs import load_yaml

# Output sizes offered by the reference shell; the core accepts any size > 0
REFERENCE_OUTPUT_SIZES = (512, 1024, 2048, 4096, 8192)

FORMAT_NAMES = ("png", "jpg", "jpeg", "bmp", "webp")


class ConfigError(Exception):
    """Raised when a render config file is missing or invalid."""

    pass


# ============================================================================
# RENDER OPTIONS
# ============================================================================

class RenderOptions(BaseModel):
    """Parameters of a single wireframe render.

    Colors accept anything color.parse_color() understands and are stored
    as RGBA tuples.
    """
    model_config = ConfigDict(frozen=True, extra='forbid')

    output_size: int = Field(..., gt=0, description="Canvas edge length (px)")
    background_color: Tuple[int, int, int, int] = Field(..., description="Background RGBA")
    line_color: Tuple[int, int, int, int] = Field(..., description="Edge and marker RGBA")
    line_thickness_px: float = Field(
        ..., gt=0.0, allow_inf_nan=False, description="Stroke width (px)"
    )
    draw_vertices: bool = Field(..., description="Draw a marker at every point")

    @field_validator('background_color', 'line_color', mode='before')
    @classmethod
    def validate_color(cls, v: Any) -> Tuple[int, int, int, int]:
        return color_utils.parse_color(v)


# ============================================================================
# RENDER CONFIG SCHEMA V1
# ============================================================================

class OutputConfig(BaseModel):
    """Encoded output settings."""
    model_config = ConfigDict(extra='forbid')

    format: str = Field("png", description="png | jpg | jpeg | bmp | webp")
    quality: Optional[int] = Field(None, ge=1, le=100, description="None → per-format default")
    preview_px: Optional[int] = Field(None, gt=0, description="Optional preview edge length (px)")

    @field_validator('format')
    @classmethod
    def validate_format(cls, v: str) -> str:
        name = v.strip().lower().lstrip('.')
        if name not in FORMAT_NAMES:
            raise ValueError(f"Output format must be one of {list(FORMAT_NAMES)}, got '{v}'")
        return name


class LoggingConfig(BaseModel):
    """Logging settings forwarded to logging_config.setup_logging()."""
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    level: str = Field("INFO", description="DEBUG | INFO | WARNING | ERROR | CRITICAL")
    file: Optional[str] = Field(None, description="Log file path")
    json_format: bool = Field(False, alias="json", description="JSON lines in the log file")

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of {allowed}, got '{v}'")
        return v.upper()


class RenderConfigV1(BaseModel):
    """Render config schema v1 (complete config file)."""
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    schema_version: str = Field("render.v1", alias="schema", description="Schema version")
    options: RenderOptions
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "render.v1":
            raise ValueError(f"Expected schema 'render.v1', got '{v}'")
        return v


def load_render_config(path: Union[str, Path]) -> RenderConfigV1:
    """Load and validate a render config YAML file.

    Parameters
    ----------
    path : Union[str, Path]
        Path to render config YAML

    Returns
    -------
    RenderConfigV1
        Validated config

    Raises
    ------
    ConfigError
        If the file is missing, is not valid YAML, or fails validation
    """
    path = Path(path)
    try:
        data = load_yaml(path)
    except (FileNotFoundError, yaml.YAMLError) as e:
        raise ConfigError(str(e)) from e

    if not isinstance(data, dict):
        raise ConfigError(f"Render config {path} must be a mapping, got {type(data).__name__}")

    try:
        return RenderConfigV1.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid render config {path}:\n{e}") from e


def options_to_dict(options: RenderOptions) -> Dict[str, Any]:
    """Plain-dict view of RenderOptions (tuples → lists) for YAML/JSON."""
    data = options.model_dump()
    data['background_color'] = list(data['background_color'])
    data['line_color'] = list(data['line_color'])
    return data
