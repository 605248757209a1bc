# どこで: `src/bezcanvas/patterns/registry.py`。
# 何を: pattern 名から描画関数を引くレジストリと、登録用 `@pattern` デコレータを提供する。
# なぜ: CLI（`python -m bezcanvas pattern <name>`）から pattern を名前で選べるようにするため。

from __future__ import annotations

import inspect
from collections.abc import ItemsView
from typing import Any, Callable

from bezcanvas.core.raster import PixelCanvas

PatternFunc = Callable[..., None]

# pattern の背景（不透明な黒）。
BACKGROUND = (0, 0, 0, 255)


class PatternRegistry:
    """pattern 名と描画関数を対応付けるレジストリ。

    Notes
    -----
    登録された関数のシグネチャは ``func(canvas: PixelCanvas, **params) -> None`` を想定する。
    """

    def __init__(self) -> None:
        self._items: dict[str, PatternFunc] = {}
        self._defaults: dict[str, dict[str, Any]] = {}

    def _register(self, name: str, func: PatternFunc, *, overwrite: bool = True) -> None:
        if not overwrite and name in self._items:
            raise ValueError(f"pattern '{name}' は既に登録されている")
        self._items[name] = func
        defaults: dict[str, Any] = {}
        for param in list(inspect.signature(func).parameters.values())[1:]:
            if param.default is not inspect.Parameter.empty:
                defaults[param.name] = param.default
        self._defaults[name] = defaults

    def get(self, name: str) -> PatternFunc:
        """名前に対応する pattern を返す。未登録なら KeyError。"""
        return self._items[name]

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __getitem__(self, name: str) -> PatternFunc:
        return self.get(name)

    def items(self) -> ItemsView[str, PatternFunc]:
        return self._items.items()

    def names(self) -> list[str]:
        return sorted(self._items)

    def get_defaults(self, name: str) -> dict[str, Any]:
        return dict(self._defaults.get(name, {}))


pattern_registry = PatternRegistry()


def pattern(func: PatternFunc | None = None, *, name: str | None = None) -> Any:
    """関数を pattern として登録するデコレータ。`@pattern` / `@pattern(name=...)` の両方を受理する。"""

    def _decorator(f: PatternFunc) -> PatternFunc:
        pattern_registry._register(name or f.__name__, f)
        return f

    if func is not None:
        return _decorator(func)
    return _decorator


def render_pattern(name: str, width: int, height: int, **params: Any) -> PixelCanvas:
    """黒背景のキャンバスを作り、pattern `name` を描いて返す。"""

    func = pattern_registry.get(name)
    canvas = PixelCanvas(width, height)
    canvas.fill(BACKGROUND)
    func(canvas, **params)
    return canvas


__all__ = [
    "BACKGROUND",
    "PatternFunc",
    "PatternRegistry",
    "pattern",
    "pattern_registry",
    "render_pattern",
]
