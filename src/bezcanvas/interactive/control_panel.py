# どこで: `src/bezcanvas/interactive/control_panel.py`。
# 何を: InteractionController を pyimgui で操作するためのコントロールパネル（初期化/1フレーム描画/破棄）。
# なぜ: imgui のライフサイクル管理を 1 箇所に閉じ込め、controller を UI 依存から切り離すため。

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

import numpy as np

from bezcanvas.core.reference import MAX_REFERENCE_ZOOM, MIN_REFERENCE_ZOOM, ReferenceTransform
from bezcanvas.core.scene import MIN_SOFT_RADIUS
from bezcanvas.interactive.controller import InteractionController

_logger = logging.getLogger(__name__)

# スライダーの表示範囲（入力値そのものは controller 側で正規化する）。
SAMPLES_UI_MAX = 4000
SOFT_RADIUS_UI_MAX = 8.0
OFFSET_UI_RANGE = 2000.0
_PATH_BUFFER_LENGTH = 1024


class ControlPanel:
    """pyimgui で描画設定と下絵を編集する最小パネル。

    `draw_frame()` を呼ぶことで 1 フレーム分の UI を描画する。
    """

    def __init__(
        self,
        gui_window: Any,
        *,
        controller: InteractionController,
        image_loader: Callable[[Path], np.ndarray],
        on_save: Callable[[], Path] | None = None,
        title: str = "Controls",
    ) -> None:
        import imgui  # type: ignore[import-untyped]

        try:
            from imgui.integrations.pyglet import create_renderer  # type: ignore[import-untyped]
        except Exception as exc:
            raise RuntimeError(f"imgui.integrations.pyglet を import できない: {exc}")

        self._window = gui_window
        self._controller = controller
        self._image_loader = image_loader
        self._on_save = on_save
        self._title = str(title)

        self._reference_path = ""
        self._status = ""

        # ImGui はグローバルな current context 前提なので、自前コンテキストを作って切り替えながら使う。
        self._imgui = imgui
        self._context = imgui.create_context()
        imgui.style_colors_dark()
        imgui.set_current_context(self._context)
        self._renderer = create_renderer(gui_window)

        # controller 側の変化（キー操作やパン/ズーム）をステータス表示へ反映する。
        controller.on_selection_change = self._on_selection_change
        controller.on_reference_transform_change = self._on_reference_transform_change
        controller.on_reference_adjust_mode_change = self._on_reference_adjust_mode_change

        self._prev_time = time.monotonic()
        self._closed = False

    # ---- controller listeners ----
    def _on_selection_change(self, index: int | None) -> None:
        self._status = "選択なし" if index is None else f"制御点 {index} を選択"

    def _on_reference_transform_change(self, transform: ReferenceTransform) -> None:
        _logger.debug("reference transform: %s", transform)

    def _on_reference_adjust_mode_change(self, enabled: bool) -> None:
        self._status = "下絵調整モード: on" if enabled else "下絵調整モード: off"

    # ---- sections ----
    def _draw_curve_section(self) -> None:
        imgui = self._imgui
        c = self._controller
        settings = c.settings

        imgui.text("Curve")
        clicked, trail = imgui.checkbox("Trail (t)", bool(settings.trail))
        if clicked:
            c.set_trail_enabled(trail)

        changed, samples = imgui.slider_int("Steps", int(settings.samples), 1, SAMPLES_UI_MAX)
        if changed:
            c.set_sample_count(samples)

        changed, radius = imgui.slider_float(
            "Soft radius",
            float(settings.soft_radius),
            MIN_SOFT_RADIUS,
            SOFT_RADIUS_UI_MAX,
            "%.2f",
        )
        if changed:
            c.set_soft_radius(radius)

        changed, intensity = imgui.slider_float(
            "Soft intensity",
            float(settings.soft_intensity),
            0.0,
            1.0,
            "%.2f",
        )
        if changed:
            c.set_soft_intensity(intensity)

    def _draw_points_section(self) -> None:
        imgui = self._imgui
        c = self._controller

        imgui.text("Control points")
        selected = "-" if c.selected_index is None else str(c.selected_index)
        imgui.text(f"count: {len(c.points)}  selected: {selected}")
        if imgui.button("Duplicate (d)") and c.can_duplicate:
            c.duplicate_selected_point()
        imgui.same_line()
        if imgui.button("Delete (Del)") and c.can_delete:
            c.delete_selected_point()

        clicked, step_mode = imgui.checkbox("Step mode", bool(c.step_mode))
        if clicked:
            c.set_step_mode(step_mode)
        imgui.same_line()
        if imgui.button("Next step (n)"):
            c.next_step()
        if c.step_mode:
            imgui.text(f"step: {c.step} / {c.settings.samples}")

    def _draw_reference_section(self) -> None:
        imgui = self._imgui
        c = self._controller
        ref = c.reference

        imgui.text("Reference image")
        _changed, self._reference_path = imgui.input_text(
            "Path", self._reference_path, _PATH_BUFFER_LENGTH
        )
        if imgui.button("Load"):
            path = self._reference_path.strip()
            if path:
                ok = c.load_reference_file(path, self._image_loader)
                self._status = f"読み込み: {path}" if ok else f"読み込み失敗: {path}"
        imgui.same_line()
        if imgui.button("Clear"):
            c.clear_reference_image()
            self._status = "下絵をクリア"

        if not ref.has_image():
            imgui.text("(no image)")
            return

        clicked, visible = imgui.checkbox("Visible", bool(ref.visible))
        if clicked:
            c.set_reference_visibility(visible)
        imgui.same_line()
        clicked, adjust = imgui.checkbox("Adjust (r)", bool(c.reference_adjust_mode))
        if clicked:
            c.set_reference_adjust_mode(adjust)

        clicked, flip_x = imgui.checkbox("Flip X", bool(ref.flip_x))
        if clicked:
            c.set_reference_flip_x(flip_x)
        imgui.same_line()
        clicked, flip_y = imgui.checkbox("Flip Y", bool(ref.flip_y))
        if clicked:
            c.set_reference_flip_y(flip_y)

        changed, opacity = imgui.slider_float("Opacity", float(ref.opacity), 0.0, 1.0, "%.2f")
        if changed:
            c.set_reference_opacity(opacity)
        changed, zoom = imgui.slider_float(
            "Zoom",
            float(ref.zoom),
            MIN_REFERENCE_ZOOM,
            MAX_REFERENCE_ZOOM,
            "%.2f",
        )
        if changed:
            c.set_reference_zoom(zoom)
        changed, offset_x = imgui.slider_float(
            "Offset X", float(ref.offset_x), -OFFSET_UI_RANGE, OFFSET_UI_RANGE, "%.1f"
        )
        if changed:
            c.set_reference_offset("x", offset_x)
        changed, offset_y = imgui.slider_float(
            "Offset Y", float(ref.offset_y), -OFFSET_UI_RANGE, OFFSET_UI_RANGE, "%.1f"
        )
        if changed:
            c.set_reference_offset("y", offset_y)

    def _draw_output_section(self) -> None:
        if self._on_save is None:
            return
        if self._imgui.button("Save PNG"):
            try:
                path = self._on_save()
            except Exception:
                _logger.warning("PNG 保存に失敗しました", exc_info=True)
                self._status = "PNG 保存に失敗"
            else:
                self._status = f"保存: {path}"

    # ---- frame ----
    def draw_frame(self) -> None:
        """1 フレーム分の GUI を描画する。`flip()` は呼ばない。"""

        if self._closed:
            return

        now = time.monotonic()
        dt = now - self._prev_time
        self._prev_time = now

        imgui = self._imgui
        imgui.set_current_context(self._context)

        # 注: process_inputs() は内部で pyglet.clock.tick() を呼ぶため、app.run() 駆動時は呼ばない。
        io = imgui.get_io()
        io.display_size = (float(self._window.width), float(self._window.height))
        if dt > 0.0:
            io.delta_time = float(dt)

        imgui.new_frame()
        imgui.set_next_window_position(0, 0)
        imgui.set_next_window_size(self._window.width, self._window.height)
        imgui.begin(
            self._title,
            flags=imgui.WINDOW_NO_RESIZE | imgui.WINDOW_NO_COLLAPSE | imgui.WINDOW_NO_TITLE_BAR,
        )
        self._draw_curve_section()
        imgui.separator()
        self._draw_points_section()
        imgui.separator()
        self._draw_reference_section()
        imgui.separator()
        self._draw_output_section()
        if self._status:
            imgui.text(self._status)
        imgui.end()
        imgui.render()

        import pyglet

        pyglet.gl.glClearColor(0.12, 0.12, 0.12, 1.0)
        self._window.clear()
        self._renderer.render(imgui.get_draw_data())

    def close(self) -> None:
        """GUI を終了し、コンテキストとウィンドウを破棄する。"""

        if self._closed:
            return
        self._closed = True
        shutdown = getattr(self._renderer, "shutdown", None)
        if callable(shutdown):
            shutdown()
        self._imgui.destroy_context(self._context)
        self._window.close()


__all__ = ["ControlPanel"]
