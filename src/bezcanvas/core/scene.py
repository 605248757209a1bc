"""
どこで: `src/bezcanvas/core/scene.py`。
何を: 制御点スナップショットと描画設定から 1 フレーム分をキャンバスへ描く。
なぜ: interactive（pyglet 表示）と export（PNG 出力）で同じ描画パスを共有するため。

描画順
------
1. clear
2. trail: 各サンプル t の De Casteljau 構築点（scaffold / intermediate）を深さグラデーションで描く
3. curve: サンプル数 x supersamples の曲線点をソフト円で合成する
4. 制御点（選択中は色と半径を変える）
5. 下絵を既存ピクセルの下へ合成する

step モードでは 2-3 の代わりに、現在の t 1 つ分の構築点だけを役割色で描く。
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from bezcanvas.core import colors
from bezcanvas.core.bezier import HierarchyRole, evaluate_bezier_many, render_hierarchy
from bezcanvas.core.geometry import Point
from bezcanvas.core.raster import PixelCanvas
from bezcanvas.core.reference import ReferenceLayer

DEFAULT_SAMPLES = 1000
DEFAULT_SUPERSAMPLES = 4
DEFAULT_SOFT_RADIUS = 2.0
DEFAULT_SOFT_INTENSITY = 0.4
MIN_SOFT_RADIUS = 0.1


@dataclass(slots=True)
class SceneSettings:
    """描画設定。値の正規化（clamp）は controller 側の setter が担う。"""

    samples: int = DEFAULT_SAMPLES
    supersamples: int = DEFAULT_SUPERSAMPLES
    soft_radius: float = DEFAULT_SOFT_RADIUS
    soft_intensity: float = DEFAULT_SOFT_INTENSITY
    trail: bool = True


def sample_parameters(samples: int) -> np.ndarray:
    """`0..samples` を samples で割った t 列（両端含む）を返す。"""

    n = max(1, int(samples))
    return np.arange(n + 1, dtype=np.float64) / n


def step_parameter(step: int, steps: int) -> float:
    """step モードの t を返す（steps == 0 なら 0）。"""

    if int(steps) == 0:
        return 0.0
    return int(step) / int(steps)


def draw_trail(canvas: PixelCanvas, points: Sequence[Point], samples: int) -> None:
    """全サンプルの scaffold / intermediate 点を深さグラデーションで描く。

    曲線上の点（role="result"）はここでは描かない（曲線はソフト円で別途描く）。
    """

    total_levels = max(1, len(points) - 2)

    def _visit(p: Point, depth: int, role: HierarchyRole) -> None:
        if role == "result":
            return
        # scaffold 段とその内側の intermediate 段は同じグラデーション段を共有する。
        color = colors.scaffold_color((depth + 1) // 2, total_levels)
        radius = colors.RADIUS_SCAFFOLD if role == "scaffold" else colors.RADIUS_INTERMEDIATE
        canvas.plot_hard(p.x, p.y, color, radius)

    for t in sample_parameters(samples):
        render_hierarchy(points, float(t), _visit)


def draw_curve(
    canvas: PixelCanvas,
    points: Sequence[Point],
    settings: SceneSettings,
) -> None:
    """supersample した曲線点をソフト円で合成する。"""

    total = max(1, int(settings.samples) * max(1, int(settings.supersamples)))
    curve = evaluate_bezier_many(points, sample_parameters(total))
    canvas.plot_soft_many(curve, colors.RESULT, settings.soft_radius, settings.soft_intensity)


def draw_hierarchy_at(canvas: PixelCanvas, points: Sequence[Point], t: float) -> None:
    """1 つの t における構築点を役割色で描く（step モード）。"""

    def _visit(p: Point, _depth: int, role: HierarchyRole) -> None:
        radius = colors.RADIUS_CURVE if role == "result" else colors.RADIUS_SCAFFOLD
        canvas.plot_hard(p.x, p.y, colors.ROLE_COLORS[role], radius)

    render_hierarchy(points, t, _visit)


def draw_control_points(
    canvas: PixelCanvas,
    points: Sequence[Point],
    selected_index: int | None,
) -> None:
    for index, p in enumerate(points):
        if index == selected_index:
            canvas.plot_hard(p.x, p.y, colors.SELECTED_CONTROL, colors.RADIUS_SELECTED_CONTROL)
        else:
            canvas.plot_hard(p.x, p.y, colors.CONTROL, colors.RADIUS_CONTROL)


def render_frame(
    canvas: PixelCanvas,
    points: Sequence[Point],
    settings: SceneSettings,
    *,
    selected_index: int | None = None,
    reference: ReferenceLayer | None = None,
) -> None:
    """trail + 曲線 + 制御点 + 下絵の 1 フレームを描く。"""

    canvas.clear()
    if settings.trail:
        draw_trail(canvas, points, settings.samples)
    draw_curve(canvas, points, settings)
    draw_control_points(canvas, points, selected_index)
    if reference is not None:
        reference.composite_under(canvas)


def render_step_frame(
    canvas: PixelCanvas,
    points: Sequence[Point],
    t: float,
    *,
    selected_index: int | None = None,
    reference: ReferenceLayer | None = None,
) -> None:
    """step モードの 1 フレームを描く。"""

    canvas.clear()
    draw_hierarchy_at(canvas, points, t)
    draw_control_points(canvas, points, selected_index)
    if reference is not None:
        reference.composite_under(canvas)


__all__ = [
    "DEFAULT_SAMPLES",
    "DEFAULT_SOFT_INTENSITY",
    "DEFAULT_SOFT_RADIUS",
    "DEFAULT_SUPERSAMPLES",
    "MIN_SOFT_RADIUS",
    "SceneSettings",
    "draw_control_points",
    "draw_curve",
    "draw_hierarchy_at",
    "draw_trail",
    "render_frame",
    "render_step_frame",
    "sample_parameters",
    "step_parameter",
]
