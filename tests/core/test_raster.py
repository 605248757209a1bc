from __future__ import annotations

import math

import numpy as np
import pytest

from bezcanvas.core.raster import PixelCanvas, soft_alpha

RED = (255, 0, 0, 255)


def test_canvas_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError):
        PixelCanvas(0, 10)


def test_plot_hard_single_pixel_and_inclusive_disc() -> None:
    canvas = PixelCanvas(10, 10)
    canvas.plot_hard(0.0, 0.0, RED)
    assert tuple(canvas.data[5, 5]) == RED
    assert int(canvas.data[..., 3].astype(bool).sum()) == 1

    canvas.clear()
    canvas.plot_hard(0.0, 0.0, RED, radius=2)
    filled = canvas.data[..., 3] > 0
    # 境界 dx^2 + dy^2 == r^2 を含む。
    assert filled[5, 7] and filled[3, 5]
    assert not filled[3, 3]
    assert int(filled.sum()) == 13


def test_plot_hard_clips_and_ignores_non_finite() -> None:
    canvas = PixelCanvas(8, 8)
    canvas.plot_hard(1000.0, 1000.0, RED, radius=3)
    canvas.plot_hard(math.nan, 0.0, RED, radius=3)
    assert not canvas.data.any()

    # 端に掛かる円は内側だけが描かれる。
    canvas.plot_hard(-4.0, 4.0, RED, radius=1)
    assert tuple(canvas.data[0, 0]) == RED
    assert int((canvas.data[..., 3] > 0).sum()) == 3


def test_plot_soft_center_alpha_equals_intensity() -> None:
    canvas = PixelCanvas(10, 10)
    # ラスタ (5.5, 5.5) はピクセル (5, 5) の中心。
    canvas.plot_soft(0.5, -0.5, RED, radius=2.0, intensity=0.4)
    assert tuple(canvas.data[5, 5]) == (255, 0, 0, 102)


def test_plot_soft_alpha_vanishes_at_radius() -> None:
    assert soft_alpha(2.0, 2.0, 0.4) == pytest.approx(0.0)
    assert soft_alpha(0.0, 2.0, 0.4) == pytest.approx(0.4)
    assert soft_alpha(1.0, 2.0, 0.4) == pytest.approx(0.2)
    assert soft_alpha(5.0, 2.0, 0.4) == 0.0

    canvas = PixelCanvas(10, 10)
    canvas.plot_soft(0.5, -0.5, RED, radius=2.0, intensity=0.4)
    # 中心から距離 2 のピクセル (7, 5) は alpha 0。
    assert canvas.data[5, 7, 3] == 0
    assert canvas.data[5, 6, 3] > 0


def test_plot_soft_accumulates_source_over() -> None:
    canvas = PixelCanvas(10, 10)
    canvas.plot_soft(0.5, -0.5, RED, radius=2.0, intensity=0.5)
    first = int(canvas.data[5, 5, 3])
    canvas.plot_soft(0.5, -0.5, RED, radius=2.0, intensity=0.5)
    second = int(canvas.data[5, 5, 3])
    assert first == 128
    # 0.5 + 0.5 * (1 - 0.5) = 0.75
    assert second == pytest.approx(191, abs=1)


def test_plot_soft_many_matches_repeated_plot_soft() -> None:
    points = np.array([[0.5, -0.5], [2.0, 1.0], [-3.0, 2.5]])
    a = PixelCanvas(16, 16)
    a.plot_soft_many(points, RED, radius=2.0, intensity=0.4)
    b = PixelCanvas(16, 16)
    for x, y in points:
        b.plot_soft(float(x), float(y), RED, radius=2.0, intensity=0.4)
    np.testing.assert_array_equal(a.data, b.data)


def test_blend_pixel_out_of_range_is_ignored() -> None:
    canvas = PixelCanvas(4, 4)
    canvas.blend_pixel(-1, 0, RED, 1.0)
    canvas.blend_pixel(0, 4, RED, 1.0)
    assert not canvas.data.any()
    canvas.blend_pixel(1, 2, RED, 1.0)
    assert tuple(canvas.data[2, 1]) == RED


def test_set_pixel_writes_opaque_grey_in_raster_space() -> None:
    canvas = PixelCanvas(4, 4)
    canvas.set_pixel(1, 2)
    assert tuple(canvas.data[2, 1]) == (255, 255, 255, 255)
    canvas.set_pixel(3, 0, brightness=0.5)
    assert tuple(canvas.data[0, 3]) == (128, 128, 128, 255)
    canvas.set_pixel(10, 10)
    canvas.set_pixel(math.inf, 0)
    assert int((canvas.data[..., 3] > 0).sum()) == 2


def test_tobytes_is_row_major_top_down() -> None:
    canvas = PixelCanvas(2, 2)
    canvas.fill((0, 0, 0, 255))
    canvas.set_pixel(1, 0)
    raw = canvas.tobytes()
    assert len(raw) == 2 * 2 * 4
    assert raw[4:8] == bytes((255, 255, 255, 255))
