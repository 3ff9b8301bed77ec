"""UV coordinate CSV parsing.

Reads the row-oriented UV export format into an immutable MeshData:

    line 0:  <header, ignored>
    line 1:  <texture_width>,<texture_height>
    line 2+: <u>,<v>[,<lod>]

Rules:
    - Blank / whitespace-only lines are dropped before anything is counted
    - Fields are split on ',', ';' or tab and trimmed
    - Numbers accept invariant ("0.5"), current-locale, or comma-decimal
      ("0,5" with ';' or tab delimiters) forms; NaN and Infinity are kept
    - A coordinate row that fails anywhere (u, v or lod) is skipped whole;
      skipped rows are not errors
    - Structural problems (missing lines, bad size line, no points) raise
      ParseError with a ParseErrorKind

Every consecutive run of 3 points forms one triangle; see
renderer.wireframe for how they are drawn.

Usage:
    from uvwire.data_pipeline.uv_csv import parse_uv_csv, load_uv_csv
    mesh = load_uv_csv("exports/character_uv.csv")
    mesh.triangle_count
"""

import enum
import locale
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple, Union

from ..utils import fs

logger = logging.getLogger(__name__)

_DELIMITERS = re.compile(r"[,;\t]")
_INVARIANT_FLOAT = re.compile(
    r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|(?i:nan|inf(?:inity)?))"
)
_INVARIANT_INT = re.compile(r"[+-]?\d+")


# ============================================================================
# DATA MODEL
# ============================================================================

@dataclass(frozen=True)
class UVPoint:
    """Normalized texture-space point with its level-of-detail tag.

    u, v are stored as parsed (possibly outside [0, 1]); clamping happens
    at pixel mapping. lod is carried through and not used for rendering.
    """

    u: float
    v: float
    lod: int = 0


@dataclass(frozen=True)
class MeshData:
    """Parsed UV mesh: texture size metadata plus ordered points.

    texture_width / texture_height do not affect rendering scale. Trailing
    points beyond the last full triple are kept but never form a triangle.
    """

    texture_width: int
    texture_height: int
    points: Tuple[UVPoint, ...]

    @property
    def triangle_count(self) -> int:
        return len(self.points) // 3

    @property
    def texture_size(self) -> Tuple[int, int]:
        return self.texture_width, self.texture_height


# ============================================================================
# ERRORS
# ============================================================================

class ParseErrorKind(enum.Enum):
    """File-level parse failure categories."""

    TOO_FEW_LINES = "too_few_lines"
    INVALID_SIZE_FORMAT = "invalid_size_format"
    NO_VALID_POINTS = "no_valid_points"
    IO_OR_FORMAT = "io_or_format"


class ParseError(Exception):
    """Raised when a UV CSV cannot produce a valid MeshData."""

    def __init__(self, kind: ParseErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"


# ============================================================================
# NUMBER PARSING
# ============================================================================

def _parse_invariant(text: str) -> Optional[float]:
    if _INVARIANT_FLOAT.fullmatch(text):
        return float(text)
    return None


def _parse_current_locale(text: str) -> Optional[float]:
    # float() accepts '1_000'; no locale groups digits with underscores
    if '_' in text:
        return None
    try:
        return locale.atof(text)
    except ValueError:
        return None


def _parse_comma_decimal(text: str) -> Optional[float]:
    return _parse_invariant(text.replace(',', '.'))


_FLOAT_PARSERS: Tuple[Callable[[str], Optional[float]], ...] = (
    _parse_invariant,
    _parse_current_locale,
    _parse_comma_decimal,
)


def parse_float(text: str) -> Optional[float]:
    """Parse a number using the invariant → locale → comma-decimal chain.

    Parameters
    ----------
    text : str
        Field text (surrounding whitespace is ignored)

    Returns
    -------
    float or None
        First successful interpretation; None if every attempt fails.
        "NaN", "Infinity" and overflowing exponents ("1e400") give non-finite
        floats, which clamp at pixel mapping

    Examples
    --------
    >>> parse_float("0.25")
    0.25
    >>> parse_float("0,25")
    0.25
    >>> parse_float("abc") is None
    True
    """
    text = text.strip()
    for attempt in _FLOAT_PARSERS:
        value = attempt(text)
        if value is not None:
            return value
    return None


def parse_int(text: str) -> Optional[int]:
    """Parse an invariant-culture integer ('[+-]digits'); None on failure."""
    text = text.strip()
    if _INVARIANT_INT.fullmatch(text):
        return int(text)
    return None


def split_fields(line: str) -> List[str]:
    """Split a record on ',', ';' or tab; drop zero-length pieces, trim the rest."""
    return [field.strip() for field in _DELIMITERS.split(line) if field]


# ============================================================================
# PARSER
# ============================================================================

def _parse_size(line: str) -> Tuple[int, int]:
    fields = split_fields(line)
    if len(fields) < 2:
        raise ParseError(
            ParseErrorKind.INVALID_SIZE_FORMAT,
            f"Texture size line must have 2 fields, got {len(fields)}: {line.strip()!r}"
        )
    width, height = parse_int(fields[0]), parse_int(fields[1])
    if width is None or height is None:
        raise ParseError(
            ParseErrorKind.INVALID_SIZE_FORMAT,
            f"Texture size must be two integers, got {fields[0]!r}, {fields[1]!r}"
        )
    return width, height


def _parse_point(line: str) -> Optional[UVPoint]:
    """Parse one coordinate row; None means the whole row is skipped."""
    fields = split_fields(line)
    if len(fields) < 2:
        return None
    u, v = parse_float(fields[0]), parse_float(fields[1])
    if u is None or v is None:
        return None
    lod = 0
    if len(fields) >= 3:
        lod = parse_int(fields[2])
        if lod is None:
            return None
    return UVPoint(u, v, lod)


def parse_uv_csv(source: Union[str, Iterable[str]]) -> MeshData:
    """Parse UV CSV text into MeshData.

    Parameters
    ----------
    source : str or iterable of str
        Whole file text, or the file's lines

    Returns
    -------
    MeshData
        Texture size and every accepted point, in file order (never empty)

    Raises
    ------
    ParseError
        TOO_FEW_LINES: fewer than 3 non-blank lines
        INVALID_SIZE_FORMAT: size line has < 2 fields or non-integer fields
        NO_VALID_POINTS: no coordinate row was accepted
        IO_OR_FORMAT: any other failure while reading the source
    """
    try:
        if isinstance(source, str):
            source = source.splitlines()
        lines = [line for line in source if line and not line.isspace()]

        if len(lines) < 3:
            raise ParseError(
                ParseErrorKind.TOO_FEW_LINES,
                f"CSV must have at least 3 lines (header, size, data), got {len(lines)}"
            )

        width, height = _parse_size(lines[1])

        points = []
        skipped = 0
        for line in lines[2:]:
            point = _parse_point(line)
            if point is None:
                skipped += 1
                continue
            points.append(point)
    except ParseError:
        raise
    except Exception as e:
        raise ParseError(ParseErrorKind.IO_OR_FORMAT, f"Error parsing CSV: {e}") from e

    if skipped:
        logger.debug(f"Skipped {skipped} malformed coordinate row(s)")

    if not points:
        raise ParseError(
            ParseErrorKind.NO_VALID_POINTS,
            "No valid UV coordinates found in CSV"
        )

    logger.debug(
        f"Parsed {len(points)} points ({len(points) // 3} triangles), "
        f"texture {width}x{height}"
    )
    return MeshData(texture_width=width, texture_height=height, points=tuple(points))


def load_uv_csv(path: Union[str, Path]) -> MeshData:
    """Read a UV CSV file and parse it.

    Parameters
    ----------
    path : Union[str, Path]
        CSV file path (UTF-8, optional BOM)

    Returns
    -------
    MeshData
        Parsed mesh

    Raises
    ------
    ParseError
        IO_OR_FORMAT if the file cannot be read or decoded; otherwise as
        parse_uv_csv()
    """
    try:
        text = fs.read_text(path)
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(ParseErrorKind.IO_OR_FORMAT, f"Cannot read {path}: {e}") from e
    return parse_uv_csv(text)
