"""
どこで: `src/bezcanvas/core/bezier.py`。
何を: De Casteljau による Bezier 曲線評価と、構築過程（補間点の階層）の列挙を提供する。
なぜ: 描画（scene）や対話（controller）から独立した純粋関数として、テスト可能に保つため。

De Casteljau 構築
-----------------
n 個の制御点に対し、隣接ペアを t で線形補間して n-1 点を得る操作を 1 点になるまで繰り返す。
各段（depth）で得られる点は可視化用に role でタグ付けされる。

- `"scaffold"`: 偶数 depth の途中点
- `"intermediate"`: 奇数 depth の途中点
- `"result"`: 1 点だけ得られた段の点（曲線上の点）
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Callable, Literal, Protocol

import numpy as np

from bezcanvas.core.geometry import Point, lerp_point

HierarchyRole = Literal["scaffold", "intermediate", "result"]


class PointLike(Protocol):
    @property
    def x(self) -> float: ...

    @property
    def y(self) -> float: ...


HierarchyVisitor = Callable[[Point, int, HierarchyRole], None]


def _interpolate_level(points: Sequence[PointLike], t: float) -> list[Point]:
    return [lerp_point(points[i], points[i + 1], t) for i in range(len(points) - 1)]


def evaluate_bezier(points: Sequence[PointLike], t: float) -> Point:
    """制御点列の Bezier 曲線上の点を t で評価する。

    Parameters
    ----------
    points : Sequence[PointLike]
        制御点列（`.x` / `.y` を持つ点）。空は不可。
    t : float
        曲線パラメータ。意味を持つのは [0, 1]。

    Returns
    -------
    Point
        曲線上の点。制御点が 1 点なら t に依らずその点。

    Raises
    ------
    ValueError
        `points` が空の場合。
    """

    if len(points) == 0:
        raise ValueError("evaluate_bezier には 1 点以上の制御点が必要")

    current = [Point(x=float(p.x), y=float(p.y)) for p in points]
    # len(points) - 1 回の補間でちょうど 1 点になる。
    while len(current) > 1:
        current = _interpolate_level(current, t)
    return current[0]


def evaluate_bezier_many(points: Sequence[PointLike], ts: Sequence[float] | np.ndarray) -> np.ndarray:
    """複数の t に対して De Casteljau をベクトル化して評価する。

    Returns
    -------
    np.ndarray
        shape (len(ts), 2) の float64 配列。
    """

    if len(points) == 0:
        raise ValueError("evaluate_bezier_many には 1 点以上の制御点が必要")

    t_arr = np.asarray(ts, dtype=np.float64).reshape(-1, 1, 1)
    # (T, N, 2) を段ごとに (T, N-1, 2) へ縮める。
    ctrl = np.asarray([[float(p.x), float(p.y)] for p in points], dtype=np.float64)
    current = np.broadcast_to(ctrl, (t_arr.shape[0],) + ctrl.shape)
    while current.shape[1] > 1:
        a = current[:, :-1, :]
        b = current[:, 1:, :]
        current = (b - a) * t_arr + a
    return np.ascontiguousarray(current[:, 0, :])


def bernstein_point(points: Sequence[PointLike], t: float) -> Point:
    """Bernstein 多項式の明示展開で曲線上の点を返す（検算用）。"""

    n = len(points) - 1
    if n < 0:
        raise ValueError("bernstein_point には 1 点以上の制御点が必要")
    x = 0.0
    y = 0.0
    for i, p in enumerate(points):
        w = math.comb(n, i) * (1.0 - t) ** (n - i) * t**i
        x += w * float(p.x)
        y += w * float(p.y)
    return Point(x=x, y=y)


def _role_for_level(depth: int, count: int) -> HierarchyRole:
    if count == 1:
        return "result"
    return "intermediate" if depth % 2 == 1 else "scaffold"


def render_hierarchy(
    points: Sequence[PointLike],
    t: float,
    visitor: HierarchyVisitor,
) -> None:
    """De Casteljau 構築の全補間点を depth / role 付きで visitor に渡す。

    Parameters
    ----------
    points : Sequence[PointLike]
        制御点列。2 点未満なら何もしない。
    t : float
        曲線パラメータ。
    visitor : Callable[[Point, int, HierarchyRole], None]
        `(point, depth, role)` を受け取るコールバック。

    Notes
    -----
    - n 点入力に対し visitor はちょうど `n*(n-1)/2` 回呼ばれる。
    - 再帰は使わず、段ごとのワークリストで処理する（depth <= n-1）。
    """

    level: list[Point] = [Point(x=float(p.x), y=float(p.y)) for p in points]
    depth = 0
    while len(level) >= 2:
        level = _interpolate_level(level, t)
        role = _role_for_level(depth, len(level))
        for p in level:
            visitor(p, depth, role)
        depth += 1


def hierarchy_levels(points: Sequence[PointLike], t: float) -> list[list[Point]]:
    """De Casteljau 構築の各段の点列を depth 順に返す。"""

    levels: list[list[Point]] = []

    def _collect(p: Point, depth: int, _role: HierarchyRole) -> None:
        if depth == len(levels):
            levels.append([])
        levels[depth].append(p)

    render_hierarchy(points, t, _collect)
    return levels


def hierarchy_visit_count(n_points: int) -> int:
    """n 点入力で `render_hierarchy` が visitor を呼ぶ回数を返す。"""

    n = int(n_points)
    if n < 2:
        return 0
    return n * (n - 1) // 2


__all__ = [
    "HierarchyRole",
    "HierarchyVisitor",
    "bernstein_point",
    "evaluate_bezier",
    "evaluate_bezier_many",
    "hierarchy_levels",
    "hierarchy_visit_count",
    "render_hierarchy",
]
