"""
どこで: `src/bezcanvas/patterns/builtins.py`。
何を: 組み込み pattern（水平線・2 本の直線・放物線）を登録する。
なぜ: 陽関数 y = f(x) をそのままピクセルへ落とす最小例として、ラスタ層の挙動を目で確かめるため。

すべてラスタ座標（左上原点・y 下向き）で描く。線は x を 1px ずつ進めて y を求めるだけなので、
傾きが大きい区間では点が離れる（それも含めて観察対象）。
"""

from __future__ import annotations

from bezcanvas.core.raster import PixelCanvas
from bezcanvas.patterns.registry import pattern


def draw_linear_line(canvas: PixelCanvas, x1: float, y1: float, x2: float, y2: float) -> None:
    """(x1, y1) - (x2, y2) を y = m x + b で描く（上下 1px を足して 3px 太）。

    x1 == x2 の垂直線は y を 1px ずつ進めて描く。
    """

    if x1 == x2:
        less_y = min(y1, y2)
        more_y = max(y1, y2)
        y = less_y
        while y < more_y:
            canvas.set_pixel(x1, y)
            y += 1
        return

    # y1 = m x1 + b, y2 = m x2 + b から m, b を解く
    m = (y1 - y2) / (x1 - x2)
    b = y2 - m * x2

    lesser_x = min(x1, x2)
    greater_x = max(x1, x2)
    x = lesser_x
    while x < greater_x:
        y = m * x + b
        canvas.set_pixel(x, y)
        canvas.set_pixel(x, y + 1)
        canvas.set_pixel(x, y - 1)
        x += 1


@pattern
def line(canvas: PixelCanvas, *, brightness: float = 1.0) -> None:
    """キャンバス中央の高さに水平線を引く。"""

    y = canvas.height // 2
    for x in range(canvas.width):
        canvas.set_pixel(x, y, brightness)


@pattern
def linear_line(canvas: PixelCanvas) -> None:
    """斜めの線と、中央の垂直線を引く。"""

    w = canvas.width
    h = canvas.height
    draw_linear_line(canvas, w / 12, h / 9, (w * 5) / 12, (h * 8) / 9)
    draw_linear_line(canvas, w / 2, h / 18, w / 2, (h * 17) / 18)


@pattern
def parabola(canvas: PixelCanvas, *, curvature: float = 3.0) -> None:
    """下に開いた放物線（頂点は高さ 4/5、左右に幅 1/10 の余白）を 3px 太で描く。"""

    w = canvas.width
    h = canvas.height
    vertex = (h * 4) / 5
    padding_x = w / 10
    domain = w - padding_x - padding_x
    half_domain = domain / 2

    x = padding_x
    while x < w - padding_x:
        # padding_x を -half_domain に対応させる
        x2 = x - padding_x - half_domain
        y = vertex - ((x2 * x2) / w) * curvature
        canvas.set_pixel(x, y)
        canvas.set_pixel(x, y + 1)
        canvas.set_pixel(x, y + 2)
        x += 1


__all__ = ["draw_linear_line", "line", "linear_line", "parabola"]
