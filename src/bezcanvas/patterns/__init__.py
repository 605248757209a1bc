from bezcanvas.patterns import builtins as _builtins  # noqa: F401  # 組み込み pattern を登録する
from bezcanvas.patterns.registry import pattern, pattern_registry, render_pattern

__all__ = ["pattern", "pattern_registry", "render_pattern"]
