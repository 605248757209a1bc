"""
どこで: `src/bezcanvas/export/image.py`。
何を: PixelCanvas を PNG として保存する。設定ファイルから 1 フレームをウィンドウ無しで描く補助も持つ。
なぜ: interactive と CLI（`python -m bezcanvas export/pattern`）で同じ保存経路を使うため。

PNG エンコードは pyglet の image codec に任せる（追加の画像ライブラリを持たない）。
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from bezcanvas.core.control_points import ControlPointSet
from bezcanvas.core.raster import PixelCanvas
from bezcanvas.core.runtime_config import RuntimeConfig, output_root_dir
from bezcanvas.core.scene import SceneSettings, render_frame

_logger = logging.getLogger(__name__)


def export_png(canvas: PixelCanvas, path: str | Path, *, overwrite: bool = True) -> Path:
    """canvas を PNG として保存し、実際に書いたパスを返す。

    Parameters
    ----------
    overwrite : bool
        False の場合、既存ファイルがあれば `name-1.png` のように連番で避ける。
    """

    import pyglet

    p = Path(path).expanduser()
    if p.suffix.lower() != ".png":
        p = p.with_suffix(".png")
    p.parent.mkdir(parents=True, exist_ok=True)
    if not overwrite:
        p = _unique_path(p)

    w = canvas.width
    h = canvas.height
    try:
        img = pyglet.image.ImageData(w, h, "RGBA", canvas.tobytes(), pitch=-w * 4)
        img.save(str(p))
    except Exception as e:
        raise RuntimeError(f"PNG 書き出しに失敗: {e}") from e
    _logger.info("PNG を保存しました: %s (%dx%d)", p, w, h)
    return p


def render_config_frame(cfg: RuntimeConfig) -> PixelCanvas:
    """設定の既定制御点と描画設定で 1 フレームを描いた canvas を返す。"""

    width, height = cfg.canvas_size
    curve = cfg.curve
    canvas = PixelCanvas(width, height)
    points = ControlPointSet(curve.control_points, min_points=cfg.interaction.min_control_points)
    settings = SceneSettings(
        samples=curve.steps,
        supersamples=curve.supersamples,
        soft_radius=curve.soft_radius,
        soft_intensity=curve.soft_intensity,
        trail=curve.trail,
    )
    render_frame(canvas, points.snapshot(), settings)
    return canvas


def default_output_path(stem: str = "bezier") -> Path:
    """`paths.output_dir` 配下のタイムスタンプ付き PNG パスを返す。"""

    stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    return output_root_dir() / "png" / f"{stem}-{stamp}.png"


def _unique_path(path: Path) -> Path:
    if not path.exists():
        return path
    stem = path.stem
    suffix = path.suffix
    parent = path.parent
    i = 1
    while True:
        cand = parent / f"{stem}-{i}{suffix}"
        if not cand.exists():
            return cand
        i += 1


__all__ = ["default_output_path", "export_png", "render_config_frame"]
