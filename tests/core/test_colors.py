from __future__ import annotations

from bezcanvas.core import colors


def test_scaffold_gradient_stops() -> None:
    assert colors.scaffold_gradient(0.0) == (26, 26, 26, 255)
    assert colors.scaffold_gradient(0.5) == (255, 255, 255, 255)
    assert colors.scaffold_gradient(1.0) == (255, 128, 128, 255)
    # 範囲外は端に寄せる。
    assert colors.scaffold_gradient(-1.0) == colors.scaffold_gradient(0.0)
    assert colors.scaffold_gradient(2.0) == colors.scaffold_gradient(1.0)


def test_scaffold_color_progresses_with_depth() -> None:
    shades = [colors.scaffold_color(i, 3) for i in range(3)]
    # 暗 -> 明へ進み、どの段も両端の色そのものにはならない。
    assert shades[0][0] < shades[1][0]
    assert shades[0] != colors.scaffold_gradient(0.0)
    assert colors.scaffold_color(10, 3) == colors.scaffold_color(3, 3)
    assert colors.scaffold_color(0, 0) == colors.SCAFFOLD


def test_lerp_color_rounds_half_up() -> None:
    assert colors.lerp_color((0, 0, 0), (1, 3, 5), 0.5) == (1, 2, 3, 255)


def test_role_colors_cover_every_role() -> None:
    assert set(colors.ROLE_COLORS) == {"scaffold", "intermediate", "result"}
    assert colors.ROLE_COLORS["result"] == colors.RESULT
