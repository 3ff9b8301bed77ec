"""RGBA color handling for wireframe rendering.

Provides:
    - RGBA: straight (non-premultiplied) 8-bit color tuple
    - NAMED_COLORS: background and line color choices by name
    - parse_color(): names, '#RRGGBB', '#RRGGBBAA', or 3/4-sequences → RGBA
    - to_unit(): RGBA → float32 array in [0,1] for compositing
    - to_hex(): RGBA → '#RRGGBBAA'

Invariants:
    - Channels are ints in [0, 255]
    - Alpha is straight, never premultiplied
    - Colors are treated as plain numbers (no sRGB/linear conversion)
"""

from typing import Sequence, Tuple, Union

import numpy as np

RGBA = Tuple[int, int, int, int]

NAMED_COLORS = {
    'white': (255, 255, 255, 255),
    'black': (0, 0, 0, 255),
    'transparent': (0, 0, 0, 0),
    'gray': (128, 128, 128, 255),
    'grey': (128, 128, 128, 255),
    'red': (255, 0, 0, 255),
    'green': (0, 128, 0, 255),
    'blue': (0, 0, 255, 255),
}

ColorLike = Union[str, Sequence[int]]


def _check_channels(channels: Sequence[int]) -> RGBA:
    """Validate 3 or 4 integer channels and return a full RGBA tuple."""
    if len(channels) not in (3, 4):
        raise ValueError(f"Color must have 3 or 4 channels, got {len(channels)}")
    out = []
    for c in channels:
        if isinstance(c, bool) or not isinstance(c, (int, np.integer)):
            raise ValueError(f"Color channels must be integers, got {c!r}")
        if not 0 <= int(c) <= 255:
            raise ValueError(f"Color channel {c} out of range [0, 255]")
        out.append(int(c))
    if len(out) == 3:
        out.append(255)
    return tuple(out)


def parse_color(value: ColorLike) -> RGBA:
    """Parse a color specification into an RGBA tuple.

    Parameters
    ----------
    value : str or sequence of int
        One of:
        - palette name (case-insensitive): 'white', 'black', 'transparent', ...
        - '#RRGGBB' or 'RRGGBB' (opaque)
        - '#RRGGBBAA' or 'RRGGBBAA'
        - (r, g, b) or (r, g, b, a) with ints in [0, 255]

    Returns
    -------
    RGBA
        (r, g, b, a) with ints in [0, 255]

    Raises
    ------
    ValueError
        If the value is not a recognized color

    Examples
    --------
    >>> parse_color("red")
    (255, 0, 0, 255)
    >>> parse_color("#00ff0080")
    (0, 255, 0, 128)
    """
    if isinstance(value, str):
        text = value.strip().lower()
        if text in NAMED_COLORS:
            return NAMED_COLORS[text]
        hex_str = text.lstrip('#')
        if len(hex_str) not in (6, 8):
            raise ValueError(
                f"Unknown color {value!r}: expected one of {sorted(NAMED_COLORS)} "
                f"or '#RRGGBB' / '#RRGGBBAA'"
            )
        try:
            channels = [int(hex_str[i:i + 2], 16) for i in range(0, len(hex_str), 2)]
        except ValueError as e:
            raise ValueError(f"Invalid hex color {value!r}") from e
        return _check_channels(channels)

    return _check_channels(list(value))


def to_unit(color: RGBA) -> np.ndarray:
    """Convert RGBA to float32 array of shape (4,) in [0, 1]."""
    return np.asarray(color, dtype=np.float32) / 255.0


def to_hex(color: RGBA) -> str:
    """Format RGBA as lowercase '#rrggbbaa'."""
    return '#' + ''.join(f"{c:02x}" for c in color)
