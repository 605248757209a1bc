"""
どこで: `src/bezcanvas/interactive/draw_window.py`。
何を: PixelCanvas を表示する pyglet Window と、マウス/キー入力の controller への中継。
なぜ: pyglet のイベント（左下原点）をラスタ座標（左上原点）へ変換する境界を 1 箇所に置くため。

使用例:
    win = DrawWindow(960, 720)
    controller = InteractionController.from_config(cfg, on_present=win.present)
    win.attach(controller)
    pyglet.app.run()
"""

from __future__ import annotations

import logging

import pyglet
from pyglet.window import key, mouse

from bezcanvas.core.geometry import window_to_raster
from bezcanvas.core.raster import PixelCanvas
from bezcanvas.interactive.controller import PRIMARY_BUTTON, InteractionController

_logger = logging.getLogger(__name__)

# pyglet のスクロール 1 ノッチをブラウザの wheel deltaY 相当へ換算する係数。
SCROLL_TO_DELTA_Y = 100.0


class DrawWindow(pyglet.window.Window):
    def __init__(self, width: int, height: int, *, caption: str = "bezcanvas") -> None:
        super().__init__(width=int(width), height=int(height), caption=caption, resizable=False)
        self._controller: InteractionController | None = None
        self._image: pyglet.image.ImageData | None = None
        self._canvas_size = (int(width), int(height))

    def attach(self, controller: InteractionController) -> None:
        """入力の転送先を設定し、初回描画を行う。"""

        self._controller = controller
        self._canvas_size = (controller.canvas.width, controller.canvas.height)
        controller.render()

    def present(self, canvas: PixelCanvas) -> None:
        """canvas の現在のピクセルを次の on_draw で表示する。"""

        w = canvas.width
        h = canvas.height
        self._canvas_size = (w, h)
        # 負の pitch で「上の行が先」の canvas バッファをそのまま渡す。
        self._image = pyglet.image.ImageData(w, h, "RGBA", canvas.tobytes(), pitch=-w * 4)

    def on_draw(self) -> None:
        self.clear()
        if self._image is not None:
            self._image.blit(0, 0, width=self.width, height=self.height)

    # ---- input ----
    def _to_raster(self, x: float, y: float) -> tuple[float, float]:
        cw, ch = self._canvas_size
        return window_to_raster(x, y, self.width, self.height, cw, ch)

    def on_mouse_press(self, x: int, y: int, button: int, modifiers: int) -> None:
        if self._controller is None:
            return
        rx, ry = self._to_raster(x, y)
        logical_button = PRIMARY_BUTTON if button == mouse.LEFT else PRIMARY_BUTTON + 1
        self._controller.pointer_down(rx, ry, pointer_id=button, button=logical_button)

    def on_mouse_drag(self, x: int, y: int, dx: int, dy: int, buttons: int, modifiers: int) -> None:
        if self._controller is None or not (buttons & mouse.LEFT):
            return
        rx, ry = self._to_raster(x, y)
        self._controller.pointer_move(rx, ry, pointer_id=mouse.LEFT)

    def on_mouse_release(self, x: int, y: int, button: int, modifiers: int) -> None:
        if self._controller is None:
            return
        self._controller.pointer_up(button)

    def on_mouse_leave(self, x: int, y: int) -> None:
        if self._controller is None:
            return
        self._controller.pointer_leave(mouse.LEFT)

    def on_mouse_scroll(self, x: int, y: int, scroll_x: float, scroll_y: float) -> None:
        if self._controller is None:
            return
        rx, ry = self._to_raster(x, y)
        self._controller.wheel(rx, ry, -float(scroll_y) * SCROLL_TO_DELTA_Y)

    def on_key_press(self, symbol: int, modifiers: int):  # noqa: ANN201 - pyglet のイベント戻り値
        if symbol == key.ESCAPE:
            _logger.info("Escape で終了します")
            self.dispatch_event("on_close")
            return pyglet.event.EVENT_HANDLED
        if self._controller is None:
            return None
        name = key.symbol_string(symbol).lower()
        if self._controller.key_press(name):
            return pyglet.event.EVENT_HANDLED
        return None


__all__ = ["DrawWindow", "SCROLL_TO_DELTA_Y"]
