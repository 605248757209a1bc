# どこで: `src/bezcanvas/interactive/image_loader.py`。
# 何を: 画像ファイルを pyglet でデコードし、(h, w, 4) uint8 RGBA 配列（上の行が先）にする。
# なぜ: 下絵レイヤはピクセル配列だけを受け取り、デコード手段（pyglet）から切り離すため。

from __future__ import annotations

from pathlib import Path

import numpy as np


def load_rgba_image(path: str | Path) -> np.ndarray:
    """画像ファイルを読み込み、RGBA 配列を返す。

    Raises
    ------
    FileNotFoundError
        ファイルが存在しない場合。
    RuntimeError
        pyglet がデコードできない場合。
    """

    p = Path(path).expanduser()
    if not p.is_file():
        raise FileNotFoundError(f"画像ファイルが見つからない: {p}")

    import pyglet

    try:
        image = pyglet.image.load(str(p)).get_image_data()
    except Exception as exc:
        raise RuntimeError(f"画像をデコードできない: {p}: {exc}") from exc

    width = int(image.width)
    height = int(image.height)
    # 負の pitch で上の行から順に並べる（pyglet 既定は下の行から）。
    data = image.get_data("RGBA", -width * 4)
    arr = np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4)
    return arr.copy()


__all__ = ["load_rgba_image"]
