# どこで: `src/bezcanvas/interactive/runner.py`。
# 何を: 描画ウィンドウとコントロールパネルを生成・配線し、pyglet のイベントループを回す。
# なぜ: ウィンドウ生成・配置・終了処理の順序を 1 箇所に固定するため。

from __future__ import annotations

import logging
from pathlib import Path

from bezcanvas.core.runtime_config import runtime_config, set_config_path

_logger = logging.getLogger(__name__)


def run(config_path: str | Path | None = None) -> None:
    """対話ビューアを起動し、ウィンドウが閉じられるまでブロックする。"""

    import pyglet

    from bezcanvas.export.image import default_output_path, export_png
    from bezcanvas.interactive.control_panel import ControlPanel
    from bezcanvas.interactive.controller import InteractionController
    from bezcanvas.interactive.draw_window import DrawWindow
    from bezcanvas.interactive.image_loader import load_rgba_image

    if config_path is not None:
        set_config_path(config_path)
    cfg = runtime_config()
    width, height = cfg.canvas_size
    _logger.info("起動: canvas=%dx%d config=%s", width, height, cfg.config_path)

    draw_window = DrawWindow(width, height, caption="bezcanvas")
    draw_window.set_location(*cfg.window_pos_draw)
    controller = InteractionController.from_config(cfg, on_present=draw_window.present)

    panel_w, panel_h = cfg.control_panel_window_size
    panel_window = pyglet.window.Window(
        width=int(panel_w),
        height=int(panel_h),
        caption="bezcanvas controls",
        resizable=True,
    )
    panel_window.set_location(*cfg.window_pos_control_panel)

    def _save() -> Path:
        return export_png(controller.canvas, default_output_path(), overwrite=False)

    panel = ControlPanel(
        panel_window,
        controller=controller,
        image_loader=load_rgba_image,
        on_save=_save,
    )

    @panel_window.event
    def on_draw() -> None:  # noqa: ANN202 - pyglet のイベント登録
        panel.draw_frame()

    closing = False

    def _shutdown() -> bool:
        nonlocal closing
        if closing:
            return pyglet.event.EVENT_HANDLED
        closing = True
        panel.close()
        draw_window.close()
        pyglet.app.exit()
        return pyglet.event.EVENT_HANDLED

    # どちらのウィンドウを閉じても両方を閉じて終了する。
    draw_window.push_handlers(on_close=_shutdown)
    panel_window.push_handlers(on_close=_shutdown)

    draw_window.attach(controller)
    try:
        pyglet.app.run()
    finally:
        _shutdown()
        _logger.info("終了しました")


__all__ = ["run"]
