# どこで: `src/bezcanvas/__main__.py`。
# 何を: `python -m bezcanvas ...` の CLI エントリポイントを提供する。
# なぜ: 対話ビューア / PNG 書き出し / pattern 描画を短い導線で実行できるようにするため。

from __future__ import annotations

import argparse
import logging
import sys

from bezcanvas.core.log import setup_default_logging

_logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="python -m bezcanvas")
    p.add_argument("--config", default=None, help="使用する config.yaml のパス")
    p.add_argument("--log-level", default="INFO", help="ログレベル（DEBUG/INFO/WARNING...）")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("run", help="対話ビューアを起動する")

    export = sub.add_parser("export", help="既定の制御点で 1 フレームを描いて PNG に保存する")
    export.add_argument("path", nargs="?", default=None, help="出力 PNG パス（省略時は paths.output_dir 配下）")

    pattern = sub.add_parser("pattern", help="組み込み pattern を PNG に保存する")
    pattern.add_argument("name", help="pattern 名（`list` で一覧）")
    pattern.add_argument("path", nargs="?", default=None, help="出力 PNG パス")
    pattern.add_argument("--width", type=int, default=None, help="キャンバス幅（省略時は canvas.width）")
    pattern.add_argument("--height", type=int, default=None, help="キャンバス高さ（省略時は canvas.height）")

    sub.add_parser("list", help="組み込み pattern を一覧表示する")
    return p


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    args = _build_parser().parse_args(argv)
    setup_default_logging(args.log_level)

    from bezcanvas.core.runtime_config import runtime_config, set_config_path

    if args.config is not None:
        set_config_path(args.config)

    if args.cmd == "run":
        from bezcanvas.interactive.runner import run

        run()
        return 0

    if args.cmd == "export":
        from bezcanvas.export.image import default_output_path, export_png, render_config_frame

        canvas = render_config_frame(runtime_config())
        out = export_png(canvas, args.path or default_output_path())
        print(out)
        return 0

    if args.cmd == "pattern":
        from bezcanvas.export.image import default_output_path, export_png
        from bezcanvas.patterns import pattern_registry, render_pattern

        if args.name not in pattern_registry:
            names = ", ".join(pattern_registry.names())
            _logger.error("未知の pattern です: %s（利用可能: %s）", args.name, names)
            return 2
        cfg_w, cfg_h = runtime_config().canvas_size
        width = args.width if args.width is not None else cfg_w
        height = args.height if args.height is not None else cfg_h
        canvas = render_pattern(args.name, width, height)
        out = export_png(canvas, args.path or default_output_path(args.name))
        print(out)
        return 0

    if args.cmd == "list":
        from bezcanvas.patterns import pattern_registry

        for name in pattern_registry.names():
            defaults = pattern_registry.get_defaults(name)
            suffix = "" if not defaults else "  " + ", ".join(f"{k}={v!r}" for k, v in defaults.items())
            print(f"{name}{suffix}")
        return 0

    raise AssertionError(f"unknown cmd: {args.cmd!r}")


if __name__ == "__main__":
    raise SystemExit(main())
