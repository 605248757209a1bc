"""
どこで: `src/bezcanvas/core/raster.py`。
何を: RGBA ピクセルバッファ `PixelCanvas` と、点の描画（ハード円 / ソフト円）を提供する。
なぜ: 表示（pyglet blit）や PNG 出力から独立した、決定的でテスト可能なラスタ層を持つため。

座標系
------
- バッファは shape `(height, width, 4)` の uint8（行優先・左上原点）。
- 描画 API はデカルト座標（中心原点・y 上向き）で受け取り、`to_raster()` で変換する。
- `set_pixel()` だけはラスタ座標で受け取る（pattern 用）。

合成
----
ソフト円は距離減衰 `alpha = intensity * max(0, 1 - d / radius)` を source-over で合成する。

    outA = srcA + dstA * (1 - srcA)
    out  = (src * srcA + dst * dstA * (1 - srcA)) / outA   (outA > 0)
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np
from numba import njit  # type: ignore[import-untyped]

from bezcanvas.core.geometry import cartesian_to_raster, raster_to_cartesian, round_half_up


@njit(cache=True)
def _blend_pixel_kernel(
    buf: np.ndarray,
    px: int,
    py: int,
    r: float,
    g: float,
    b: float,
    a: float,
    alpha: float,
) -> None:
    """1 ピクセルへ source-over 合成する（Numba）。境界チェックは呼び出し側で行う。"""
    if alpha <= 0.0:
        return
    src_alpha = alpha * (a / 255.0)
    if src_alpha > 1.0:
        src_alpha = 1.0
    if src_alpha < 0.0:
        src_alpha = 0.0
    dst_alpha = buf[py, px, 3] / 255.0
    out_alpha = src_alpha + dst_alpha * (1.0 - src_alpha)
    if out_alpha <= 0.0:
        return

    src = (r, g, b)
    for c in range(3):
        s = src[c] / 255.0
        d = buf[py, px, c] / 255.0
        out = (s * src_alpha + d * dst_alpha * (1.0 - src_alpha)) / out_alpha
        v = int(math.floor(out * 255.0 + 0.5))
        buf[py, px, c] = min(255, max(0, v))
    va = int(math.floor(out_alpha * 255.0 + 0.5))
    buf[py, px, 3] = min(255, max(0, va))


@njit(cache=True)
def _plot_hard_kernel(
    buf: np.ndarray,
    cx: int,
    cy: int,
    radius: int,
    r: int,
    g: int,
    b: int,
    a: int,
) -> int:
    """中心 (cx, cy) 半径 radius の塗り円を上書きし、書いたピクセル数を返す（Numba）。"""
    height = buf.shape[0]
    width = buf.shape[1]
    radius_sq = radius * radius
    written = 0
    for dy in range(-radius, radius + 1):
        py = cy + dy
        if py < 0 or py >= height:
            continue
        for dx in range(-radius, radius + 1):
            if radius > 0 and dx * dx + dy * dy > radius_sq:
                continue
            px = cx + dx
            if px < 0 or px >= width:
                continue
            buf[py, px, 0] = r
            buf[py, px, 1] = g
            buf[py, px, 2] = b
            buf[py, px, 3] = a
            written += 1
    return written


@njit(cache=True)
def _plot_soft_kernel(
    buf: np.ndarray,
    cx: float,
    cy: float,
    radius: float,
    intensity: float,
    r: float,
    g: float,
    b: float,
    a: float,
) -> None:
    """中心 (cx, cy) の距離減衰円を合成する（Numba）。ピクセル中心 (px+0.5, py+0.5) で距離を測る。"""
    height = buf.shape[0]
    width = buf.shape[1]
    radius_sq = radius * radius
    min_x = max(0, int(math.floor(cx - radius)))
    max_x = min(width - 1, int(math.ceil(cx + radius)))
    min_y = max(0, int(math.floor(cy - radius)))
    max_y = min(height - 1, int(math.ceil(cy + radius)))

    for py in range(min_y, max_y + 1):
        oy = py + 0.5 - cy
        for px in range(min_x, max_x + 1):
            ox = px + 0.5 - cx
            dist_sq = ox * ox + oy * oy
            if dist_sq > radius_sq:
                continue
            falloff = 1.0 - math.sqrt(dist_sq) / radius
            if falloff < 0.0:
                falloff = 0.0
            _blend_pixel_kernel(buf, px, py, r, g, b, a, falloff * intensity)


@njit(cache=True)
def _plot_soft_many_kernel(
    buf: np.ndarray,
    xs: np.ndarray,
    ys: np.ndarray,
    radius: float,
    intensity: float,
    r: float,
    g: float,
    b: float,
    a: float,
) -> None:
    """ラスタ座標列 (xs, ys) の各点へ距離減衰円を順に合成する（Numba）。"""
    for i in range(xs.shape[0]):
        x = xs[i]
        y = ys[i]
        if not (math.isfinite(x) and math.isfinite(y)):
            continue
        _plot_soft_kernel(buf, x, y, radius, intensity, r, g, b, a)


def soft_alpha(distance: float, radius: float, intensity: float) -> float:
    """ソフト円の距離 distance における alpha を返す。"""

    if radius <= 0.0:
        return 0.0
    return float(intensity) * max(0.0, 1.0 - float(distance) / float(radius))


class PixelCanvas:
    """RGBA ラスタ面。

    Parameters
    ----------
    width, height : int
        キャンバスのピクセル寸法（正の整数）。
    """

    def __init__(self, width: int, height: int) -> None:
        w = int(width)
        h = int(height)
        if w <= 0 or h <= 0:
            raise ValueError(f"canvas の寸法は正である必要がある: got={width}x{height}")
        self.width = w
        self.height = h
        self.data = np.zeros((h, w, 4), dtype=np.uint8)

    def clear(self) -> None:
        """バッファをゼロ埋めする。"""

        self.data.fill(0)

    def to_raster(self, x: float, y: float) -> tuple[float, float]:
        return cartesian_to_raster(x, y, self.width, self.height)

    def to_cartesian(self, x: float, y: float) -> tuple[float, float]:
        return raster_to_cartesian(x, y, self.width, self.height)

    def plot_hard(self, x: float, y: float, color: Sequence[int], radius: int = 0) -> None:
        """デカルト座標 (x, y) に塗り円（radius=0 なら 1 ピクセル）を上書き描画する。"""

        if not (math.isfinite(x) and math.isfinite(y)):
            return
        rx, ry = self.to_raster(x, y)
        r, g, b, a = (int(c) for c in color)
        _plot_hard_kernel(
            self.data,
            round_half_up(rx),
            round_half_up(ry),
            max(0, int(radius)),
            r,
            g,
            b,
            a,
        )

    def plot_soft(
        self,
        x: float,
        y: float,
        color: Sequence[int],
        radius: float = 1.5,
        intensity: float = 0.5,
    ) -> None:
        """デカルト座標 (x, y) に距離減衰円を合成する。"""

        if not (math.isfinite(x) and math.isfinite(y)):
            return
        radius_f = float(radius)
        if not math.isfinite(radius_f) or radius_f <= 0.0:
            return
        rx, ry = self.to_raster(x, y)
        r, g, b, a = (float(c) for c in color)
        _plot_soft_kernel(self.data, float(rx), float(ry), radius_f, float(intensity), r, g, b, a)

    def plot_soft_many(
        self,
        points: np.ndarray,
        color: Sequence[int],
        radius: float = 1.5,
        intensity: float = 0.5,
    ) -> None:
        """shape (N, 2) のデカルト座標列を順に `plot_soft` する。"""

        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        radius_f = float(radius)
        if pts.shape[0] == 0 or not math.isfinite(radius_f) or radius_f <= 0.0:
            return
        xs = np.ascontiguousarray(pts[:, 0] + self.width / 2)
        ys = np.ascontiguousarray(self.height / 2 - pts[:, 1])
        r, g, b, a = (float(c) for c in color)
        _plot_soft_many_kernel(self.data, xs, ys, radius_f, float(intensity), r, g, b, a)

    def blend_pixel(self, px: int, py: int, color: Sequence[int], alpha: float) -> None:
        """ラスタ座標 (px, py) の 1 ピクセルへ source-over 合成する。範囲外は無視。"""

        px_i = int(px)
        py_i = int(py)
        if px_i < 0 or px_i >= self.width or py_i < 0 or py_i >= self.height:
            return
        r, g, b, a = (float(c) for c in color)
        _blend_pixel_kernel(self.data, px_i, py_i, r, g, b, a, float(alpha))

    def set_pixel(self, x: float, y: float, brightness: float = 1.0) -> None:
        """ラスタ座標 (x, y) に不透明なグレーのピクセルを書く。範囲外は無視。

        brightness は 0.0（黒）..1.0（白）。
        """

        if not (math.isfinite(x) and math.isfinite(y)):
            return
        px = round_half_up(x)
        py = round_half_up(y)
        if px < 0 or px >= self.width or py < 0 or py >= self.height:
            return
        level = min(255, max(0, round_half_up(float(brightness) * 255.0)))
        self.data[py, px, 0:3] = level
        self.data[py, px, 3] = 255

    def fill(self, color: Sequence[int]) -> None:
        """全ピクセルを color で塗る。"""

        self.data[:, :] = np.asarray(tuple(int(c) for c in color), dtype=np.uint8)

    def tobytes(self) -> bytes:
        """行優先（上から下）の RGBA バイト列を返す。"""

        return self.data.tobytes()


__all__ = ["PixelCanvas", "soft_alpha"]
