# どこで: `src/bezcanvas/core/log.py`。
# 何を: CLI / runner 用に、未設定の場合だけ logging を最小構成で初期化する。
# なぜ: 各モジュールは `logging.getLogger(__name__)` だけを使い、出力先の決定をエントリポイントに寄せるため。

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_default_logging(level: int | str = "INFO") -> None:
    """root logger が未設定なら basicConfig を 1 回だけ適用する。

    - root logger に handler がある場合は何もしない（アプリ側の設定を尊重する）
    - 文字列の level は大文字化して解釈し、不明なら INFO
    """

    if isinstance(level, str):
        lvl = getattr(logging, level.upper(), logging.INFO)
    else:
        lvl = int(level)

    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(level=lvl, format=LOG_FORMAT)


__all__ = ["LOG_FORMAT", "setup_default_logging"]
