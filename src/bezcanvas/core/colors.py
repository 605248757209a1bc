# どこで: `src/bezcanvas/core/colors.py`。
# 何を: 描画要素ごとの色・半径と、scaffold の深さグラデーションを定義する。
# なぜ: 配色の判断を scene から切り離し、depth -> 色の対応を単独でテストできるようにするため。

from __future__ import annotations

from bezcanvas.core.geometry import lerp, round_half_up

Color = tuple[int, int, int, int]

CONTROL: Color = (255, 32, 32, 255)
SELECTED_CONTROL: Color = (255, 190, 0, 255)
SCAFFOLD: Color = (180, 180, 180, 255)
INTERMEDIATE: Color = (210, 210, 210, 255)
RESULT: Color = (255, 0, 0, 255)

ROLE_COLORS: dict[str, Color] = {
    "scaffold": SCAFFOLD,
    "intermediate": INTERMEDIATE,
    "result": RESULT,
}

RADIUS_CURVE = 2
RADIUS_SCAFFOLD = 1
RADIUS_INTERMEDIATE = 1
RADIUS_CONTROL = 6
RADIUS_SELECTED_CONTROL = 7

# scaffold グラデーション: 暗灰 -> 白 -> 淡赤
_GRADIENT_START = (26, 26, 26)
_GRADIENT_MID = (255, 255, 255)
_GRADIENT_END = (255, 128, 128)


def lerp_color(start: tuple[int, int, int], end: tuple[int, int, int], t: float) -> Color:
    """RGB を t で補間し、不透明の RGBA を返す。"""

    return (
        round_half_up(lerp(start[0], end[0], t)),
        round_half_up(lerp(start[1], end[1], t)),
        round_half_up(lerp(start[2], end[2], t)),
        255,
    )


def scaffold_gradient(progress: float) -> Color:
    """progress (0..1) に対応する scaffold 色を返す。"""

    p = min(1.0, max(0.0, float(progress)))
    if p <= 0.5:
        return lerp_color(_GRADIENT_START, _GRADIENT_MID, p / 0.5)
    return lerp_color(_GRADIENT_MID, _GRADIENT_END, (p - 0.5) / 0.5)


def scaffold_color(level_index: int, total_levels: int) -> Color:
    """scaffold 段 `level_index` の色を返す（段数 `total_levels` で正規化）。"""

    if total_levels <= 0:
        return SCAFFOLD
    clamped = min(int(total_levels), max(0, int(level_index)))
    return scaffold_gradient((clamped + 1) / (total_levels + 1))


__all__ = [
    "CONTROL",
    "Color",
    "INTERMEDIATE",
    "RADIUS_CONTROL",
    "RADIUS_CURVE",
    "RADIUS_INTERMEDIATE",
    "RADIUS_SCAFFOLD",
    "RADIUS_SELECTED_CONTROL",
    "RESULT",
    "ROLE_COLORS",
    "SCAFFOLD",
    "SELECTED_CONTROL",
    "lerp_color",
    "scaffold_color",
    "scaffold_gradient",
]
