"""Tests for the RGBA canvas rasterizer.

Tests:
    - Construction and fill
    - stroke_line coverage (solid core, AA fringe, round caps, dots)
    - fill_circle coverage and radius <= 0
    - Straight-alpha source-over compositing
    - ROI clipping at canvas borders
    - Argument validation
    - Determinism and export

Run:
    pytest tests/test_canvas.py -v
"""

import numpy as np
import pytest
from PIL import Image

from uvwire.renderer.canvas import Canvas

WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)
RED = (255, 0, 0, 255)


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def white_canvas():
    canvas = Canvas(20)
    canvas.fill(WHITE)
    return canvas


# ============================================================================
# TEST SUITE 1: Construction
# ============================================================================

def test_new_canvas_is_transparent_black():
    canvas = Canvas(8)
    assert canvas.pixels.shape == (8, 8, 4)
    assert canvas.pixels.dtype == np.uint8
    assert not canvas.pixels.any()


def test_zero_size_canvas():
    canvas = Canvas(0)
    assert canvas.pixels.shape == (0, 0, 4)
    canvas.fill(WHITE)
    canvas.stroke_line((0, 0), (5, 5), BLACK, 2.0)
    canvas.fill_circle((0, 0), 3.0, BLACK)


def test_negative_size_rejected():
    with pytest.raises(ValueError):
        Canvas(-1)


def test_fill_replaces_every_pixel():
    canvas = Canvas(4)
    canvas.fill("#11223344")
    assert (canvas.pixels == [0x11, 0x22, 0x33, 0x44]).all()

    canvas.fill("transparent")
    assert not canvas.pixels.any()


# ============================================================================
# TEST SUITE 2: Lines
# ============================================================================

def test_horizontal_line_core_and_fringe(white_canvas):
    """2 px line at y=10: rows 9 and 10 solid, rows 8 and 11 untouched."""
    white_canvas.stroke_line((2.0, 10.0), (18.0, 10.0), BLACK, 2.0)
    px = white_canvas.pixels

    assert (px[9:11, 2:18] == BLACK).all()
    assert (px[8] == WHITE).all()
    assert (px[11] == WHITE).all()
    assert (px[9:11, 0] == WHITE).all()


def test_round_caps_are_partial(white_canvas):
    """Pixel centers just past the endpoints get fractional coverage."""
    white_canvas.stroke_line((2.0, 10.0), (18.0, 10.0), BLACK, 2.0)
    cap_left = white_canvas.pixels[9, 1, 0]
    cap_right = white_canvas.pixels[10, 18, 0]

    assert 0 < cap_left < 255
    assert cap_left == cap_right


def test_diagonal_line_is_antialiased():
    canvas = Canvas(32)
    canvas.fill(WHITE)
    canvas.stroke_line((3.2, 4.7), (28.9, 21.3), BLACK, 1.5)

    values = np.unique(canvas.pixels[..., 0])
    assert values.min() < 64
    assert ((values > 0) & (values < 255)).any()
    # Alpha stays opaque over an opaque background
    assert (canvas.pixels[..., 3] == 255).all()


def test_zero_length_line_is_dot():
    """A degenerate segment matches a disc of radius thickness / 2."""
    dot = Canvas(24)
    dot.stroke_line((12.3, 11.7), (12.3, 11.7), RED, 4.0)

    disc = Canvas(24)
    disc.fill_circle((12.3, 11.7), 2.0, RED)

    np.testing.assert_array_equal(dot.pixels, disc.pixels)
    assert dot.pixels[11, 12, 3] == 255


def test_line_direction_does_not_matter():
    a = Canvas(32)
    a.stroke_line((1.0, 2.0), (30.0, 17.5), BLACK, 2.5)
    b = Canvas(32)
    b.stroke_line((30.0, 17.5), (1.0, 2.0), BLACK, 2.5)
    diff = np.abs(a.pixels.astype(int) - b.pixels.astype(int))
    assert diff.max() <= 1


@pytest.mark.parametrize("thickness", [0.0, -1.0, float("nan")])
def test_invalid_thickness(white_canvas, thickness):
    with pytest.raises(ValueError):
        white_canvas.stroke_line((0, 0), (5, 5), BLACK, thickness)


@pytest.mark.parametrize("point", [(float("nan"), 1.0), (1.0, float("inf"))])
def test_non_finite_endpoint(white_canvas, point):
    with pytest.raises(ValueError):
        white_canvas.stroke_line(point, (5, 5), BLACK, 1.0)


# ============================================================================
# TEST SUITE 3: Circles
# ============================================================================

def test_circle_coverage(white_canvas):
    white_canvas.fill_circle((10.0, 10.0), 3.0, BLACK)
    px = white_canvas.pixels

    assert (px[9, 9] == BLACK).all()
    assert (px[10, 10] == BLACK).all()
    # Farther than radius + 0.5 from the center → untouched
    assert (px[10, 15] == WHITE).all()
    assert (px[0, 0] == WHITE).all()


@pytest.mark.parametrize("radius", [0.0, -2.0])
def test_non_positive_radius_draws_nothing(white_canvas, radius):
    before = white_canvas.pixels.copy()
    white_canvas.fill_circle((10.0, 10.0), radius, BLACK)
    np.testing.assert_array_equal(white_canvas.pixels, before)


def test_circle_non_finite_center(white_canvas):
    with pytest.raises(ValueError):
        white_canvas.fill_circle((float("nan"), 3.0), 2.0, BLACK)


# ============================================================================
# TEST SUITE 4: Compositing
# ============================================================================

def test_straight_alpha_over_transparent():
    """Color stays exact at the fringe; only alpha carries coverage."""
    canvas = Canvas(20)
    canvas.fill_circle((10.0, 10.0), 4.0, RED)
    px = canvas.pixels

    assert (px[10, 10] == RED).all()

    fringe = px[(px[..., 3] > 0) & (px[..., 3] < 255)]
    assert len(fringe) > 0
    assert (fringe[:, :3] == [255, 0, 0]).all()


def test_half_alpha_over_white(white_canvas):
    white_canvas.fill_circle((10.0, 10.0), 3.0, (0, 0, 0, 128))
    assert tuple(white_canvas.pixels[10, 10]) == (127, 127, 127, 255)


def test_overdraw_accumulates(white_canvas):
    """Drawing the same translucent stroke twice darkens it further."""
    once = white_canvas.copy()
    once.stroke_line((2.0, 10.0), (18.0, 10.0), (0, 0, 0, 128), 2.0)

    white_canvas.stroke_line((2.0, 10.0), (18.0, 10.0), (0, 0, 0, 128), 2.0)
    white_canvas.stroke_line((2.0, 10.0), (18.0, 10.0), (0, 0, 0, 128), 2.0)

    assert white_canvas.pixels[10, 10, 0] < once.pixels[10, 10, 0]


def test_transparent_color_changes_nothing(white_canvas):
    before = white_canvas.pixels.copy()
    white_canvas.stroke_line((0, 0), (20, 20), "transparent", 3.0)
    np.testing.assert_array_equal(white_canvas.pixels, before)


def test_zero_coverage_pixels_untouched():
    """Transparent pixels outside the primitive keep their exact bytes."""
    canvas = Canvas(16)
    canvas.pixels[...] = (10, 20, 30, 0)
    canvas.fill_circle((8.0, 8.0), 2.0, BLACK)

    assert tuple(canvas.pixels[0, 0]) == (10, 20, 30, 0)
    assert tuple(canvas.pixels[8, 8]) == BLACK


# ============================================================================
# TEST SUITE 5: Clipping
# ============================================================================

def test_primitives_outside_canvas(white_canvas):
    before = white_canvas.pixels.copy()
    white_canvas.stroke_line((-50.0, -50.0), (-10.0, -30.0), BLACK, 2.0)
    white_canvas.fill_circle((100.0, 5.0), 3.0, BLACK)
    np.testing.assert_array_equal(white_canvas.pixels, before)


def test_primitives_straddling_edges(white_canvas):
    white_canvas.stroke_line((-5.0, 0.0), (25.0, 0.0), BLACK, 2.0)
    white_canvas.fill_circle((20.0, 20.0), 2.5, BLACK)

    assert (white_canvas.pixels[0, :, 0] == 0).all()
    assert white_canvas.pixels[19, 19, 0] == 0


# ============================================================================
# TEST SUITE 6: Determinism and export
# ============================================================================

def _draw_scene(canvas):
    canvas.fill("gray")
    canvas.stroke_line((1.1, 2.2), (60.3, 40.7), "#ff000080", 1.7)
    canvas.stroke_line((60.3, 40.7), (5.5, 62.0), BLACK, 3.0)
    canvas.fill_circle((33.3, 33.3), 2.5, "blue")


def test_determinism():
    a, b = Canvas(64), Canvas(64)
    _draw_scene(a)
    _draw_scene(b)
    np.testing.assert_array_equal(a.pixels, b.pixels)


def test_to_image():
    canvas = Canvas(64)
    _draw_scene(canvas)
    img = canvas.to_image()

    assert isinstance(img, Image.Image)
    assert img.mode == "RGBA"
    assert img.size == (64, 64)
    np.testing.assert_array_equal(np.array(img), canvas.pixels)

    # Image does not alias the buffer
    canvas.fill(WHITE)
    assert np.array(img)[0, 0, 0] != 255


def test_copy_is_independent():
    canvas = Canvas(8)
    canvas.fill(BLACK)
    clone = canvas.copy()
    clone.fill(WHITE)

    assert (canvas.pixels == BLACK).all()
    assert clone.size == canvas.size
