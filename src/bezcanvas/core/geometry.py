# どこで: `src/bezcanvas/core/geometry.py`。
# 何を: 2D 点・線形補間・座標変換・clamp 系の最小ユーティリティを提供する。
# なぜ: bezier / raster / interactive が同じ座標規約（中心原点・y 上向き）を共有するため。

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Point:
    """補間で生成される不変な 2D 点（中心原点・y 上向きのデカルト座標）。"""

    x: float
    y: float


def lerp(a: float, b: float, t: float) -> float:
    """`a` から `b` へ t で線形補間した値を返す。"""

    return (b - a) * t + a


def lerp_point(p1: Point, p2: Point, t: float) -> Point:
    """2 点間を t で線形補間した Point を返す。

    `p1` / `p2` は `.x` / `.y` を持つ任意のオブジェクトでよい（ControlPoint も受理する）。
    """

    return Point(x=lerp(float(p1.x), float(p2.x), t), y=lerp(float(p1.y), float(p2.y), t))


def cartesian_to_raster(x: float, y: float, width: int, height: int) -> tuple[float, float]:
    """デカルト座標をラスタ座標（左上原点・y 下向き）へ変換する。"""

    return (float(x) + width / 2, height / 2 - float(y))


def raster_to_cartesian(x: float, y: float, width: int, height: int) -> tuple[float, float]:
    """ラスタ座標をデカルト座標へ変換する（`cartesian_to_raster` の逆変換）。"""

    return (float(x) - width / 2, height / 2 - float(y))


def window_to_raster(
    x: float,
    y: float,
    window_width: int,
    window_height: int,
    canvas_width: int,
    canvas_height: int,
) -> tuple[float, float]:
    """ウィンドウのピクセル (x, y)（左下原点）を、そこに表示される canvas ピクセルのラスタ座標へ写す。

    ラスタのピクセル i は座標 i を中心に持つ（`round_half_up` で描画位置を決める規約）。
    ウィンドウと canvas の大きさが違う場合はピクセル中心どうしで軸ごとに拡縮する。
    """

    ww = max(1, int(window_width))
    wh = max(1, int(window_height))
    return (
        (float(x) + 0.5) * canvas_width / ww - 0.5,
        (wh - float(y) - 0.5) * canvas_height / wh - 0.5,
    )


def round_half_up(value: float) -> int:
    """0.5 境界を +inf 方向へ丸めた整数を返す（ブラウザの Math.round と同じ規則）。"""

    return int(math.floor(float(value) + 0.5))


def clamp(value: float, lo: float, hi: float) -> float:
    """value を [lo, hi] に収めて返す。

    Notes
    -----
    - 非有限値（NaN / inf）や数値化できない値は `lo` に倒す（スライダー入力の防御）。
    - `lo > hi` の場合は入れ替えて扱う。
    """

    try:
        v = float(value)
    except (TypeError, ValueError):
        return float(min(lo, hi))
    lower = float(min(lo, hi))
    upper = float(max(lo, hi))
    if not math.isfinite(v):
        return lower
    return min(upper, max(lower, v))


def clamp01(value: float) -> float:
    """value を [0, 1] に収めて返す。非有限値は 0。"""

    return clamp(value, 0.0, 1.0)


__all__ = [
    "Point",
    "cartesian_to_raster",
    "clamp",
    "clamp01",
    "lerp",
    "lerp_point",
    "raster_to_cartesian",
    "round_half_up",
    "window_to_raster",
]
