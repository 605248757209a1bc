"""
どこで: `src/bezcanvas/core/reference.py`。
何を: 下絵（reference image）の状態（表示/不透明度/反転/パン/ズーム）と、キャンバスへの合成を提供する。
なぜ: 画像のデコード（pyglet）や UI 配線から切り離し、幾何と合成を純粋に扱うため。

合成は destination-over（既存ピクセルの「下」に敷く）で行う。曲線や制御点が常に下絵より手前に見える。
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from bezcanvas.core.geometry import clamp, clamp01
from bezcanvas.core.raster import PixelCanvas

_logger = logging.getLogger(__name__)

DEFAULT_REFERENCE_OPACITY = 0.6
DEFAULT_REFERENCE_ZOOM = 1.0
MIN_REFERENCE_ZOOM = 0.2
MAX_REFERENCE_ZOOM = 3.0
WHEEL_ZOOM_SENSITIVITY = 0.0015


@dataclass(frozen=True, slots=True)
class ContainFit:
    """キャンバス内に収めた画像の描画矩形（ラスタ座標）。"""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class ReferenceTransform:
    """UI 同期用の変換スナップショット。"""

    flip_x: bool
    flip_y: bool
    offset_x: float
    offset_y: float
    zoom: float


def compute_contain_fit(
    src_width: float,
    src_height: float,
    dst_width: float,
    dst_height: float,
    zoom: float = 1.0,
) -> ContainFit:
    """src を dst に contain で収め、zoom 倍して中央に置いた矩形を返す。

    src の寸法が 0 以下なら dst 全面を返す。
    """

    if src_width <= 0 or src_height <= 0:
        return ContainFit(x=0.0, y=0.0, width=float(dst_width), height=float(dst_height))
    contain = min(dst_width / src_width, dst_height / src_height)
    scale = contain * max(MIN_REFERENCE_ZOOM, float(zoom))
    width = src_width * scale
    height = src_height * scale
    return ContainFit(
        x=(dst_width - width) / 2,
        y=(dst_height - height) / 2,
        width=float(width),
        height=float(height),
    )


def wheel_zoom_factor(delta_y: float) -> float:
    """ホイール量 delta_y（ブラウザ規約: 正で縮小）に対するズーム倍率を返す。"""

    return math.exp(-float(delta_y) * WHEEL_ZOOM_SENSITIVITY)


class ReferenceLayer:
    """下絵の状態を保持する。

    setter はすべて「状態が変わったか」を bool で返す。再描画や UI 同期の判断は呼び出し側が行う。
    """

    def __init__(
        self,
        *,
        opacity: float = DEFAULT_REFERENCE_OPACITY,
        zoom: float = DEFAULT_REFERENCE_ZOOM,
    ) -> None:
        self.image: np.ndarray | None = None
        self.visible = False
        self.opacity = clamp01(opacity)
        self.flip_x = False
        self.flip_y = False
        self.offset_x = 0.0
        self.offset_y = 0.0
        # 画像の差し替え・クリア時はこの初期ズームへ戻す。
        self._initial_zoom = clamp(zoom, MIN_REFERENCE_ZOOM, MAX_REFERENCE_ZOOM)
        self.zoom = self._initial_zoom

    # --- image ---------------------------------------------------------

    def has_image(self) -> bool:
        return self.image is not None

    @property
    def image_size(self) -> tuple[int, int]:
        """(width, height)。画像が無ければ (0, 0)。"""

        if self.image is None:
            return (0, 0)
        return (int(self.image.shape[1]), int(self.image.shape[0]))

    def set_image(self, image: np.ndarray) -> None:
        """RGBA 画像（shape (h, w, 4) uint8）を設定し、表示して変換をリセットする。"""

        arr = np.asarray(image)
        if arr.ndim != 3 or arr.shape[2] != 4:
            raise ValueError(f"reference image は shape (h, w, 4) である必要がある: got={arr.shape}")
        if arr.dtype != np.uint8:
            arr = arr.astype(np.uint8)
        self.image = arr
        self.visible = True
        self.reset_transform()
        _logger.debug("reference image set: %dx%d", arr.shape[1], arr.shape[0])

    def clear_image(self) -> None:
        self.image = None
        self.visible = False
        self.reset_transform()

    # --- transform -----------------------------------------------------

    def reset_transform(self) -> None:
        self.flip_x = False
        self.flip_y = False
        self.offset_x = 0.0
        self.offset_y = 0.0
        self.zoom = self._initial_zoom

    def transform(self) -> ReferenceTransform:
        return ReferenceTransform(
            flip_x=self.flip_x,
            flip_y=self.flip_y,
            offset_x=self.offset_x,
            offset_y=self.offset_y,
            zoom=self.zoom,
        )

    def set_visible(self, enabled: bool) -> bool:
        """表示を切り替える。画像が無い場合は常に非表示。"""

        next_value = bool(enabled) and self.has_image()
        if next_value == self.visible:
            return False
        self.visible = next_value
        return True

    def set_opacity(self, value: float) -> bool:
        normalized = clamp01(value)
        if abs(normalized - self.opacity) < 1e-3:
            return False
        self.opacity = normalized
        return True

    def set_flip_x(self, enabled: bool) -> bool:
        if self.flip_x == bool(enabled):
            return False
        self.flip_x = bool(enabled)
        return True

    def set_flip_y(self, enabled: bool) -> bool:
        if self.flip_y == bool(enabled):
            return False
        self.flip_y = bool(enabled)
        return True

    def set_offset(self, axis: str, value: float) -> bool:
        """axis ("x" / "y") のパン量を設定する。0.1px 未満の変化は無視する。"""

        if axis not in ("x", "y"):
            return False
        try:
            normalized = float(value)
        except (TypeError, ValueError):
            normalized = 0.0
        if not math.isfinite(normalized):
            normalized = 0.0
        current = self.offset_x if axis == "x" else self.offset_y
        if abs(normalized - current) < 0.1:
            return False
        if axis == "x":
            self.offset_x = normalized
        else:
            self.offset_y = normalized
        return True

    def set_zoom(self, value: float) -> bool:
        normalized = clamp(value, MIN_REFERENCE_ZOOM, MAX_REFERENCE_ZOOM)
        if abs(normalized - self.zoom) < 1e-3:
            return False
        self.zoom = normalized
        return True

    def fit(self, canvas_width: int, canvas_height: int, zoom: float | None = None) -> ContainFit:
        w, h = self.image_size
        return compute_contain_fit(w, h, canvas_width, canvas_height, self.zoom if zoom is None else zoom)

    def zoom_around(
        self,
        value: float,
        anchor_x: float | None,
        anchor_y: float | None,
        *,
        canvas_width: int,
        canvas_height: int,
    ) -> bool:
        """ズームを変更し、アンカー（ラスタ座標）下の画像位置を固定するようにパンを補正する。

        アンカーが None の場合はキャンバス中央を使う。画像が無い場合は何もしない。
        """

        if not self.has_image():
            return False
        normalized = clamp(value, MIN_REFERENCE_ZOOM, MAX_REFERENCE_ZOOM)
        current_fit = self.fit(canvas_width, canvas_height)
        new_fit = self.fit(canvas_width, canvas_height, zoom=normalized)
        ax = canvas_width / 2 if anchor_x is None else float(anchor_x)
        ay = canvas_height / 2 if anchor_y is None else float(anchor_y)
        current_draw_x = current_fit.x + self.offset_x
        current_draw_y = current_fit.y + self.offset_y
        ratio_x = (ax - current_draw_x) / current_fit.width if current_fit.width else 0.5
        ratio_y = (ay - current_draw_y) / current_fit.height if current_fit.height else 0.5
        desired_x = ax - ratio_x * new_fit.width
        desired_y = ay - ratio_y * new_fit.height
        self.offset_x = desired_x - new_fit.x
        self.offset_y = desired_y - new_fit.y
        self.zoom = normalized
        return True

    # --- compositing ---------------------------------------------------

    def composite_under(self, canvas: PixelCanvas) -> bool:
        """下絵をキャンバスの既存ピクセルの下へ合成する（destination-over）。

        Returns
        -------
        bool
            合成を行った場合 True（非表示 / 画像なし / 不透明度 0 なら False）。
        """

        image = self.image
        if image is None or not self.visible:
            return False
        opacity = clamp01(self.opacity)
        if opacity <= 0.0:
            return False
        img_h, img_w = int(image.shape[0]), int(image.shape[1])
        if img_w <= 0 or img_h <= 0:
            return False

        fit = self.fit(canvas.width, canvas.height)
        if fit.width <= 0 or fit.height <= 0:
            return False
        draw_x = fit.x + self.offset_x
        draw_y = fit.y + self.offset_y

        # ピクセル中心を画像の正規化座標 (u, v) へ写し、最近傍でサンプリングする。
        u = (np.arange(canvas.width, dtype=np.float64) + 0.5 - draw_x) / fit.width
        v = (np.arange(canvas.height, dtype=np.float64) + 0.5 - draw_y) / fit.height
        if self.flip_x:
            u = 1.0 - u
        if self.flip_y:
            v = 1.0 - v
        valid_x = (u >= 0.0) & (u < 1.0)
        valid_y = (v >= 0.0) & (v < 1.0)
        if not valid_x.any() or not valid_y.any():
            return False
        sx = np.clip(np.floor(u * img_w).astype(np.int64), 0, img_w - 1)
        sy = np.clip(np.floor(v * img_h).astype(np.int64), 0, img_h - 1)

        mask = valid_y[:, None] & valid_x[None, :]
        src = image[sy[:, None], sx[None, :]].astype(np.float64) / 255.0
        dst = canvas.data.astype(np.float64) / 255.0

        ref_a = src[..., 3] * opacity * mask
        dst_a = dst[..., 3]
        out_a = dst_a + ref_a * (1.0 - dst_a)
        safe = np.where(out_a > 0.0, out_a, 1.0)
        out_rgb = (
            dst[..., :3] * dst_a[..., None] + src[..., :3] * (ref_a * (1.0 - dst_a))[..., None]
        ) / safe[..., None]
        out_rgb = np.where((out_a > 0.0)[..., None], out_rgb, dst[..., :3])

        canvas.data[..., :3] = np.clip(np.floor(out_rgb * 255.0 + 0.5), 0, 255).astype(np.uint8)
        canvas.data[..., 3] = np.clip(np.floor(out_a * 255.0 + 0.5), 0, 255).astype(np.uint8)
        return True


__all__ = [
    "ContainFit",
    "DEFAULT_REFERENCE_OPACITY",
    "DEFAULT_REFERENCE_ZOOM",
    "MAX_REFERENCE_ZOOM",
    "MIN_REFERENCE_ZOOM",
    "ReferenceLayer",
    "ReferenceTransform",
    "compute_contain_fit",
    "wheel_zoom_factor",
]
