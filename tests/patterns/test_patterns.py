from __future__ import annotations

import pytest

from bezcanvas.core.raster import PixelCanvas
from bezcanvas.patterns import pattern, pattern_registry, render_pattern
from bezcanvas.patterns.builtins import draw_linear_line
from bezcanvas.patterns.registry import PatternRegistry


def _lit(canvas: PixelCanvas) -> int:
    return int((canvas.data[..., 0] > 0).sum())


def test_builtin_patterns_are_registered() -> None:
    assert {"line", "linear_line", "parabola"} <= set(pattern_registry.names())
    assert pattern_registry.get_defaults("parabola") == {"curvature": 3.0}


def test_render_pattern_uses_opaque_black_background() -> None:
    canvas = render_pattern("line", 20, 10)
    assert (canvas.data[..., 3] == 255).all()
    # 中央の行だけが白い。
    assert (canvas.data[5, :, 0] == 255).all()
    assert _lit(canvas) == 20


def test_unknown_pattern_raises_key_error() -> None:
    with pytest.raises(KeyError):
        render_pattern("spiral", 10, 10)


def test_linear_line_is_three_pixels_thick() -> None:
    canvas = PixelCanvas(20, 20)
    draw_linear_line(canvas, 2, 10, 8, 10)
    # 水平線: x = 2..7 で y = 9, 10, 11 の 3 行。
    assert _lit(canvas) == 6 * 3
    assert canvas.data[9, 2, 0] == 255 and canvas.data[11, 7, 0] == 255
    assert canvas.data[10, 8, 0] == 0


def test_linear_line_vertical_segment() -> None:
    canvas = PixelCanvas(20, 20)
    draw_linear_line(canvas, 5, 15, 5, 3)
    assert _lit(canvas) == 12
    assert (canvas.data[3:15, 5, 0] == 255).all()


def test_parabola_stays_inside_padding() -> None:
    canvas = render_pattern("parabola", 100, 80)
    cols = (canvas.data[..., 0] > 0).any(axis=0)
    assert cols[10] and cols[89]
    assert not cols[:10].any()
    assert not cols[90:].any()
    # 頂点（中央）は高さ 4/5 付近。
    assert canvas.data[64, 50, 0] == 255


def test_pattern_decorator_with_custom_registry_name() -> None:
    @pattern(name="_test_dot")
    def _dot(canvas: PixelCanvas, *, x: int = 1) -> None:
        canvas.set_pixel(x, 1)

    try:
        canvas = render_pattern("_test_dot", 4, 4)
        assert canvas.data[1, 1, 0] == 255
        assert pattern_registry.get_defaults("_test_dot") == {"x": 1}
    finally:
        pattern_registry._items.pop("_test_dot", None)
        pattern_registry._defaults.pop("_test_dot", None)


def test_registry_rejects_duplicate_without_overwrite() -> None:
    registry = PatternRegistry()
    registry._register("a", lambda canvas: None)
    with pytest.raises(ValueError):
        registry._register("a", lambda canvas: None, overwrite=False)
