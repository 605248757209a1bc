"""
どこで: `src/bezcanvas/interactive/controller.py`。
何を: ポインタ/ホイール/キー入力を制御点・下絵・描画設定の変更へ写し、同期的に再描画する。
なぜ: pyglet / imgui の配線から状態機械を切り離し、ウィンドウ無しでテストできるようにするため。

状態
----
- `"idle"`: 何も掴んでいない。
- `"dragging"`: 制御点 `selected_index` をポインタ `drag_pointer_id` で移動中。
- `"panning"`: 下絵調整モードで下絵をパン中。

ポインタ座標はすべてラスタ座標（左上原点・y 下向き）で受け取る。
状態が変わった入力のたびに `render()` を呼び、描画後に `on_present(canvas)` を 1 回呼ぶ。
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from pathlib import Path
from typing import Literal

import numpy as np

from bezcanvas.core.control_points import DEFAULT_DUPLICATE_OFFSET, ControlPointSet
from bezcanvas.core.geometry import clamp01
from bezcanvas.core.raster import PixelCanvas
from bezcanvas.core.reference import (
    MAX_REFERENCE_ZOOM,
    MIN_REFERENCE_ZOOM,
    ReferenceLayer,
    ReferenceTransform,
    wheel_zoom_factor,
)
from bezcanvas.core.runtime_config import RuntimeConfig
from bezcanvas.core.scene import (
    MIN_SOFT_RADIUS,
    SceneSettings,
    render_frame,
    render_step_frame,
    step_parameter,
)

_logger = logging.getLogger(__name__)

InteractionState = Literal["idle", "dragging", "panning"]
ImageLoader = Callable[[Path], np.ndarray]

DEFAULT_SELECT_RADIUS = 18.0
PRIMARY_BUTTON = 0


class InteractionController:
    """Bezier 可視化の対話状態を保持し、入力を状態変更と再描画に変換する。"""

    def __init__(
        self,
        canvas: PixelCanvas,
        points: ControlPointSet,
        *,
        settings: SceneSettings | None = None,
        reference: ReferenceLayer | None = None,
        select_radius: float = DEFAULT_SELECT_RADIUS,
        duplicate_offset: tuple[float, float] = DEFAULT_DUPLICATE_OFFSET,
        on_present: Callable[[PixelCanvas], None] | None = None,
    ) -> None:
        self.canvas = canvas
        self.points = points
        self.settings = settings if settings is not None else SceneSettings()
        self.reference = reference if reference is not None else ReferenceLayer()
        self.select_radius = float(select_radius)
        self.duplicate_offset = (float(duplicate_offset[0]), float(duplicate_offset[1]))

        self.selected_index: int | None = None
        self.drag_pointer_id: int | None = None
        self.step_mode = False
        self.step = 0

        self.reference_adjust_mode = False
        self._pan_pointer_id: int | None = None
        self._pan_start: tuple[float, float] | None = None
        self._pan_initial_offset: tuple[float, float] | None = None

        self.on_present = on_present
        self.on_selection_change: Callable[[int | None], None] | None = None
        self.on_reference_transform_change: Callable[[ReferenceTransform], None] | None = None
        self.on_reference_adjust_mode_change: Callable[[bool], None] | None = None
        self.render_count = 0

    @classmethod
    def from_config(
        cls,
        cfg: RuntimeConfig,
        *,
        on_present: Callable[[PixelCanvas], None] | None = None,
    ) -> InteractionController:
        """`RuntimeConfig` から canvas / 制御点 / 設定を組み立てる。"""

        width, height = cfg.canvas_size
        curve = cfg.curve
        return cls(
            PixelCanvas(width, height),
            ControlPointSet(curve.control_points, min_points=cfg.interaction.min_control_points),
            settings=SceneSettings(
                samples=curve.steps,
                supersamples=curve.supersamples,
                soft_radius=curve.soft_radius,
                soft_intensity=curve.soft_intensity,
                trail=curve.trail,
            ),
            reference=ReferenceLayer(opacity=cfg.reference_opacity, zoom=cfg.reference_zoom),
            select_radius=cfg.interaction.select_radius,
            duplicate_offset=cfg.interaction.duplicate_offset,
            on_present=on_present,
        )

    # --- state ---------------------------------------------------------

    @property
    def state(self) -> InteractionState:
        if self._pan_pointer_id is not None:
            return "panning"
        if self.drag_pointer_id is not None:
            return "dragging"
        return "idle"

    @property
    def can_duplicate(self) -> bool:
        return self.selected_index is not None

    @property
    def can_delete(self) -> bool:
        return self.selected_index is not None and self.points.can_delete()

    # --- rendering -----------------------------------------------------

    def render(self) -> None:
        """現在の状態を canvas へ描き、`on_present` を 1 回呼ぶ。"""

        snapshot = self.points.snapshot()
        if self.step_mode:
            render_step_frame(
                self.canvas,
                snapshot,
                step_parameter(self.step, self.settings.samples),
                selected_index=self.selected_index,
                reference=self.reference,
            )
        else:
            render_frame(
                self.canvas,
                snapshot,
                self.settings,
                selected_index=self.selected_index,
                reference=self.reference,
            )
        self.render_count += 1
        if self.on_present is not None:
            self.on_present(self.canvas)

    # --- pointer -------------------------------------------------------

    def pointer_down(self, x: float, y: float, pointer_id: int, button: int = PRIMARY_BUTTON) -> None:
        """ポインタ押下。下絵調整モードならパン開始、そうでなければ制御点を選択する。"""

        if int(button) != PRIMARY_BUTTON:
            return
        if self.reference_adjust_mode and self.reference.has_image():
            self._pan_pointer_id = int(pointer_id)
            self._pan_start = (float(x), float(y))
            self._pan_initial_offset = (self.reference.offset_x, self.reference.offset_y)
            return
        if self.drag_pointer_id is not None:
            # 別ポインタで掴んでいる間は新しいドラッグを始めない。
            return

        hit = self.points.hit_test(
            x,
            y,
            width=self.canvas.width,
            height=self.canvas.height,
            radius=self.select_radius,
        )
        if hit is not None:
            self.select_point(hit)
            self.drag_pointer_id = int(pointer_id)
            _logger.debug("drag start: index=%d pointer=%d", hit, pointer_id)
        else:
            self.clear_selection()

    def pointer_move(self, x: float, y: float, pointer_id: int) -> None:
        if self._pan_pointer_id is not None:
            if int(pointer_id) != self._pan_pointer_id:
                return
            self._update_pan(float(x), float(y))
            return

        if self.drag_pointer_id is None or int(pointer_id) != self.drag_pointer_id:
            return
        if self.selected_index is None:
            return
        if not (math.isfinite(x) and math.isfinite(y)):
            return
        cx, cy = self.canvas.to_cartesian(x, y)
        self.points.move(self.selected_index, cx, cy)
        self.render()

    def pointer_up(self, pointer_id: int) -> None:
        """ポインタ解放 / leave / cancel。アクティブなポインタ以外は無視する。"""

        if self._pan_pointer_id is not None and int(pointer_id) == self._pan_pointer_id:
            self._pan_pointer_id = None
            self._pan_start = None
            self._pan_initial_offset = None
            return
        if self.drag_pointer_id is not None and int(pointer_id) == self.drag_pointer_id:
            _logger.debug("drag end: pointer=%d", pointer_id)
            self.drag_pointer_id = None

    pointer_leave = pointer_up
    pointer_cancel = pointer_up

    def _update_pan(self, x: float, y: float) -> None:
        if self._pan_start is None or self._pan_initial_offset is None:
            return
        dx = x - self._pan_start[0]
        dy = y - self._pan_start[1]
        changed_x = self.reference.set_offset("x", self._pan_initial_offset[0] + dx)
        changed_y = self.reference.set_offset("y", self._pan_initial_offset[1] + dy)
        if changed_x or changed_y:
            self.render()
        self._notify_reference_transform()

    def wheel(self, x: float, y: float, delta_y: float) -> bool:
        """ホイール入力。下絵調整モードでのみポインタ位置を中心にズームする。"""

        if not self.reference_adjust_mode or not self.reference.has_image():
            return False
        target = self.reference.zoom * wheel_zoom_factor(delta_y)
        target = min(MAX_REFERENCE_ZOOM, max(MIN_REFERENCE_ZOOM, target))
        self.reference.zoom_around(
            target,
            x,
            y,
            canvas_width=self.canvas.width,
            canvas_height=self.canvas.height,
        )
        self.render()
        self._notify_reference_transform()
        return True

    # --- selection / editing -------------------------------------------

    def select_point(self, index: int) -> None:
        if self.selected_index == index:
            return
        self.selected_index = int(index)
        self.render()
        if self.on_selection_change is not None:
            self.on_selection_change(self.selected_index)

    def clear_selection(self) -> None:
        if self.selected_index is None:
            return
        self.selected_index = None
        self.render()
        if self.on_selection_change is not None:
            self.on_selection_change(None)

    def duplicate_selected_point(self) -> None:
        if self.selected_index is None:
            return
        new_index = self.points.duplicate(self.selected_index, self.duplicate_offset)
        self.selected_index = None
        self.select_point(new_index)

    def delete_selected_point(self) -> None:
        if self.selected_index is None:
            return
        next_index = self.points.delete(self.selected_index)
        if next_index is None:
            return
        self.selected_index = next_index
        self.render()
        if self.on_selection_change is not None:
            self.on_selection_change(self.selected_index)

    # --- step mode -----------------------------------------------------

    def next_step(self) -> None:
        """step モードへ入り、t を 1 ステップ進める（末尾の次は 0 へ戻る）。"""

        self.step_mode = True
        self.step += 1
        if self.step > self.settings.samples:
            self.step = 0
        self.render()

    def set_step_mode(self, enabled: bool) -> None:
        if self.step_mode == bool(enabled):
            return
        self.step_mode = bool(enabled)
        self.step = 0
        self.render()

    # --- setters (UI controls) -----------------------------------------

    def set_trail_enabled(self, enabled: bool) -> None:
        if self.settings.trail == bool(enabled):
            return
        self.settings.trail = bool(enabled)
        self.render()

    def set_sample_count(self, count: float) -> None:
        try:
            value = float(count)
        except (TypeError, ValueError):
            value = 1.0
        clamped = max(1, math.floor(value)) if math.isfinite(value) else 1
        if clamped == self.settings.samples:
            return
        self.settings.samples = int(clamped)
        if self.step > self.settings.samples:
            self.step = 0
        self.render()

    def set_soft_radius(self, radius: float) -> None:
        try:
            value = float(radius)
        except (TypeError, ValueError):
            value = 0.0
        if not math.isfinite(value):
            value = 0.0
        normalized = max(MIN_SOFT_RADIUS, value)
        if abs(normalized - self.settings.soft_radius) < 1e-3:
            return
        self.settings.soft_radius = normalized
        self.render()

    def set_soft_intensity(self, intensity: float) -> None:
        normalized = clamp01(intensity)
        if abs(normalized - self.settings.soft_intensity) < 1e-3:
            return
        self.settings.soft_intensity = normalized
        self.render()

    # --- reference image -----------------------------------------------

    def load_reference_file(self, path: str | Path, loader: ImageLoader) -> bool:
        """path の画像を loader でデコードして下絵に設定する。失敗時は False。"""

        try:
            image = loader(Path(path))
            self.reference.set_image(image)
        except Exception:
            _logger.warning("下絵の読み込みに失敗しました: path=%s", path, exc_info=True)
            return False
        _logger.info("下絵を読み込みました: path=%s", path)
        self.render()
        self._notify_reference_transform()
        return True

    def set_reference_image(self, image: np.ndarray) -> None:
        self.reference.set_image(image)
        self.render()
        self._notify_reference_transform()

    def clear_reference_image(self) -> None:
        self.reference.clear_image()
        self.set_reference_adjust_mode(False)
        self.render()
        self._notify_reference_transform()

    def set_reference_visibility(self, enabled: bool) -> None:
        if not self.reference.set_visible(enabled):
            return
        if not self.reference.visible:
            self.set_reference_adjust_mode(False)
        self.render()

    def set_reference_opacity(self, value: float) -> None:
        if self.reference.set_opacity(value):
            self.render()

    def set_reference_flip_x(self, enabled: bool) -> None:
        if not self.reference.set_flip_x(enabled):
            return
        if self.reference.has_image():
            self.render()
        self._notify_reference_transform()

    def set_reference_flip_y(self, enabled: bool) -> None:
        if not self.reference.set_flip_y(enabled):
            return
        if self.reference.has_image():
            self.render()
        self._notify_reference_transform()

    def set_reference_offset(self, axis: str, value: float) -> None:
        if not self.reference.set_offset(axis, value):
            return
        if self.reference.has_image():
            self.render()
        self._notify_reference_transform()

    def set_reference_zoom(self, value: float) -> None:
        if not self.reference.set_zoom(value):
            return
        if self.reference.has_image():
            self.render()
        self._notify_reference_transform()

    def set_reference_adjust_mode(self, enabled: bool) -> None:
        """下絵調整モードを切り替える。下絵が無い場合は常に off。"""

        next_value = bool(enabled) and self.reference.has_image()
        if next_value == self.reference_adjust_mode:
            return
        self.reference_adjust_mode = next_value
        if not next_value:
            self._pan_pointer_id = None
            self._pan_start = None
            self._pan_initial_offset = None
        if self.on_reference_adjust_mode_change is not None:
            self.on_reference_adjust_mode_change(next_value)

    def _notify_reference_transform(self) -> None:
        if self.on_reference_transform_change is not None:
            self.on_reference_transform_change(self.reference.transform())

    # --- keyboard ------------------------------------------------------

    def key_press(self, key: str) -> bool:
        """キー名（小文字）に対応する操作を実行し、処理したら True を返す。"""

        k = str(key).lower()
        if k == "n":
            self.next_step()
            return True
        if k == "d":
            self.duplicate_selected_point()
            return True
        if k in ("delete", "backspace"):
            self.delete_selected_point()
            return True
        if k == "t":
            self.set_trail_enabled(not self.settings.trail)
            return True
        if k == "s":
            self.set_step_mode(not self.step_mode)
            return True
        if k == "r":
            self.set_reference_adjust_mode(not self.reference_adjust_mode)
            return True
        return False


__all__ = [
    "DEFAULT_SELECT_RADIUS",
    "ImageLoader",
    "InteractionController",
    "InteractionState",
]
