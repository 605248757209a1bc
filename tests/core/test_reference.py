from __future__ import annotations

import math

import numpy as np
import pytest

from bezcanvas.core.raster import PixelCanvas
from bezcanvas.core.reference import (
    MAX_REFERENCE_ZOOM,
    MIN_REFERENCE_ZOOM,
    ReferenceLayer,
    compute_contain_fit,
    wheel_zoom_factor,
)


def _solid(h: int, w: int, rgba: tuple[int, int, int, int]) -> np.ndarray:
    img = np.zeros((h, w, 4), dtype=np.uint8)
    img[:, :] = rgba
    return img


def test_compute_contain_fit_centres_image() -> None:
    fit = compute_contain_fit(200, 100, 100, 100)
    assert (fit.x, fit.y, fit.width, fit.height) == (0.0, 25.0, 100.0, 50.0)

    zoomed = compute_contain_fit(200, 100, 100, 100, zoom=2.0)
    assert (zoomed.x, zoomed.y, zoomed.width, zoomed.height) == (-50.0, 0.0, 200.0, 100.0)


def test_compute_contain_fit_zoom_floor_and_empty_source() -> None:
    tiny = compute_contain_fit(100, 100, 100, 100, zoom=0.01)
    assert tiny.width == pytest.approx(100 * MIN_REFERENCE_ZOOM)
    empty = compute_contain_fit(0, 10, 80, 60)
    assert (empty.x, empty.y, empty.width, empty.height) == (0.0, 0.0, 80.0, 60.0)


def test_wheel_zoom_factor() -> None:
    assert wheel_zoom_factor(0.0) == 1.0
    assert wheel_zoom_factor(100.0) == pytest.approx(math.exp(-0.15))
    assert wheel_zoom_factor(-100.0) > 1.0


def test_set_image_shows_and_resets_transform() -> None:
    layer = ReferenceLayer()
    assert not layer.set_visible(True)
    layer.set_flip_x(True)
    layer.set_offset("x", 12.0)
    layer.set_image(_solid(4, 6, (1, 2, 3, 255)))
    assert layer.visible
    assert layer.image_size == (6, 4)
    t = layer.transform()
    assert (t.flip_x, t.offset_x, t.zoom) == (False, 0.0, 1.0)

    layer.clear_image()
    assert not layer.visible
    assert not layer.has_image()


def test_reset_returns_to_configured_zoom() -> None:
    layer = ReferenceLayer(zoom=2.0)
    layer.set_image(_solid(4, 6, (1, 2, 3, 255)))
    assert layer.zoom == 2.0

    layer.set_zoom(0.5)
    layer.set_image(_solid(4, 6, (1, 2, 3, 255)))
    assert layer.zoom == 2.0

    layer.set_zoom(0.5)
    layer.clear_image()
    assert layer.zoom == 2.0

    clamped = ReferenceLayer(zoom=10.0)
    clamped.set_image(_solid(4, 6, (1, 2, 3, 255)))
    assert clamped.zoom == MAX_REFERENCE_ZOOM


def test_set_image_rejects_non_rgba() -> None:
    with pytest.raises(ValueError):
        ReferenceLayer().set_image(np.zeros((4, 4, 3), dtype=np.uint8))


def test_setters_report_change_and_normalize() -> None:
    layer = ReferenceLayer()
    assert layer.set_opacity(2.0)
    assert layer.opacity == 1.0
    assert not layer.set_opacity(1.0005)
    assert layer.set_zoom(10.0)
    assert layer.zoom == MAX_REFERENCE_ZOOM
    assert not layer.set_offset("x", 0.05)
    assert layer.set_offset("y", 3.0)
    assert layer.set_offset("y", math.nan)
    assert layer.offset_y == 0.0
    assert not layer.set_offset("z", 5.0)


def test_zoom_around_keeps_anchor_fixed() -> None:
    layer = ReferenceLayer()
    layer.set_image(_solid(10, 10, (0, 0, 0, 255)))
    anchor = (25.0, 40.0)

    def image_coord() -> tuple[float, float]:
        fit = layer.fit(100, 100)
        return (
            (anchor[0] - (fit.x + layer.offset_x)) / fit.width,
            (anchor[1] - (fit.y + layer.offset_y)) / fit.height,
        )

    before = image_coord()
    assert layer.zoom_around(2.0, *anchor, canvas_width=100, canvas_height=100)
    assert layer.zoom == 2.0
    after = image_coord()
    assert after[0] == pytest.approx(before[0])
    assert after[1] == pytest.approx(before[1])


def test_zoom_around_without_image_is_noop() -> None:
    layer = ReferenceLayer()
    assert not layer.zoom_around(2.0, 10.0, 10.0, canvas_width=100, canvas_height=100)
    assert layer.zoom == 1.0


def test_composite_under_blank_canvas_uses_opacity() -> None:
    canvas = PixelCanvas(4, 4)
    layer = ReferenceLayer(opacity=0.5)
    layer.set_image(_solid(2, 2, (10, 20, 30, 255)))
    assert layer.composite_under(canvas)
    assert tuple(canvas.data[0, 0]) == (10, 20, 30, 128)
    assert tuple(canvas.data[3, 3]) == (10, 20, 30, 128)


def test_composite_under_keeps_opaque_pixels_on_top() -> None:
    canvas = PixelCanvas(4, 4)
    canvas.plot_hard(-2.0, 2.0, (255, 0, 0, 255))
    layer = ReferenceLayer(opacity=1.0)
    layer.set_image(_solid(2, 2, (10, 20, 30, 255)))
    layer.composite_under(canvas)
    assert tuple(canvas.data[0, 0]) == (255, 0, 0, 255)
    assert tuple(canvas.data[1, 1]) == (10, 20, 30, 255)


def test_composite_under_flip_x() -> None:
    img = np.zeros((1, 2, 4), dtype=np.uint8)
    img[0, 0] = (255, 0, 0, 255)
    img[0, 1] = (0, 0, 255, 255)

    layer = ReferenceLayer(opacity=1.0)
    layer.set_image(img)
    canvas = PixelCanvas(2, 2)
    layer.composite_under(canvas)
    assert tuple(canvas.data[0, 0]) == (255, 0, 0, 255)
    # contain-fit で縦は中央の 1 行だけ。
    assert canvas.data[1, 0, 3] == 0

    layer.set_flip_x(True)
    canvas.clear()
    layer.composite_under(canvas)
    assert tuple(canvas.data[0, 0]) == (0, 0, 255, 255)


def test_composite_under_skips_hidden_or_transparent() -> None:
    canvas = PixelCanvas(4, 4)
    layer = ReferenceLayer(opacity=1.0)
    assert not layer.composite_under(canvas)
    layer.set_image(_solid(2, 2, (10, 20, 30, 255)))
    layer.set_visible(False)
    assert not layer.composite_under(canvas)
    layer.set_visible(True)
    layer.set_opacity(0.0)
    assert not layer.composite_under(canvas)
    assert not canvas.data.any()
