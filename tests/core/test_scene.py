from __future__ import annotations

import numpy as np
import pytest

from bezcanvas.core import colors
from bezcanvas.core.geometry import Point, round_half_up
from bezcanvas.core.raster import PixelCanvas
from bezcanvas.core.reference import ReferenceLayer
from bezcanvas.core.scene import (
    SceneSettings,
    draw_curve,
    draw_trail,
    render_frame,
    render_step_frame,
    sample_parameters,
    step_parameter,
)

ARCH = (Point(-15.0, 0.0), Point(0.0, 15.0), Point(15.0, 0.0))
SMALL = SceneSettings(samples=8, supersamples=1, soft_radius=1.5, soft_intensity=0.5)


def test_sample_parameters_include_both_ends() -> None:
    ts = sample_parameters(4)
    np.testing.assert_allclose(ts, [0.0, 0.25, 0.5, 0.75, 1.0])
    assert sample_parameters(0).tolist() == [0.0, 1.0]


def test_step_parameter() -> None:
    assert step_parameter(3, 12) == 0.25
    assert step_parameter(5, 0) == 0.0


def test_render_frame_draws_control_points_on_top() -> None:
    canvas = PixelCanvas(40, 40)
    render_frame(canvas, ARCH, SMALL, selected_index=2)
    # (-15, 0) -> raster (5, 20)
    assert tuple(canvas.data[20, 5]) == colors.CONTROL
    # (15, 0) -> raster (35, 20) は選択色。
    assert tuple(canvas.data[20, 35]) == colors.SELECTED_CONTROL


def test_render_frame_clears_previous_content() -> None:
    canvas = PixelCanvas(40, 40)
    canvas.fill((1, 2, 3, 255))
    render_frame(canvas, ARCH, SMALL)
    assert canvas.data[0, 0, 3] == 0


def test_draw_curve_passes_through_midpoint() -> None:
    canvas = PixelCanvas(40, 40)
    draw_curve(canvas, ARCH, SMALL)
    # t=0.5 の曲線点は (0, 7.5) -> raster (20, 12.5)。
    assert canvas.data[12, 20, 3] > 0
    assert canvas.data[39, 0, 3] == 0


def test_draw_trail_skips_result_points() -> None:
    canvas = PixelCanvas(40, 40)
    # 2 点では構築点が result だけなので何も描かれない。
    draw_trail(canvas, ARCH[:2], 8)
    assert not canvas.data.any()

    draw_trail(canvas, ARCH, 8)
    assert canvas.data[..., 3].any()


def test_draw_trail_pairs_scaffold_and_intermediate_levels() -> None:
    canvas = PixelCanvas(500, 400)
    points = (
        Point(-200.0, 0.0),
        Point(-100.0, 150.0),
        Point(0.0, -150.0),
        Point(100.0, 150.0),
        Point(200.0, 0.0),
    )
    # t=0.5 の構築点:
    #   depth 0: (-150, 75) (-50, 0) (50, 0) (150, 75)
    #   depth 1: (-100, 37.5) (0, 0) (100, 37.5)
    #   depth 2: (-50, 18.75) (50, 18.75)
    draw_trail(canvas, points, 2)
    total = len(points) - 2

    def at(x: float, y: float) -> tuple[int, ...]:
        col, row = canvas.to_raster(x, y)
        return tuple(canvas.data[round_half_up(row), round_half_up(col)])

    assert at(-150.0, 75.0) == colors.scaffold_color(0, total)
    assert at(0.0, 0.0) == colors.scaffold_color(1, total)
    assert at(-50.0, 18.75) == colors.scaffold_color(1, total)
    assert at(50.0, 18.75) == colors.scaffold_color(1, total)


def test_render_step_frame_draws_result_point() -> None:
    canvas = PixelCanvas(40, 40)
    render_step_frame(canvas, ARCH, 0.5)
    assert tuple(canvas.data[13, 20]) == colors.RESULT


def test_render_frame_composites_reference_underneath() -> None:
    canvas = PixelCanvas(40, 40)
    reference = ReferenceLayer(opacity=1.0)
    img = np.zeros((4, 4, 4), dtype=np.uint8)
    img[:, :] = (0, 255, 0, 255)
    reference.set_image(img)
    render_frame(canvas, ARCH, SMALL, reference=reference)
    assert tuple(canvas.data[39, 0]) == (0, 255, 0, 255)
    assert tuple(canvas.data[20, 5]) == colors.CONTROL


@pytest.mark.parametrize("trail", [True, False])
def test_render_frame_trail_toggle(trail: bool) -> None:
    canvas = PixelCanvas(40, 40)
    settings = SceneSettings(samples=8, supersamples=1, trail=trail)
    render_frame(canvas, ARCH, settings)
    assert canvas.data[..., 3].any()
