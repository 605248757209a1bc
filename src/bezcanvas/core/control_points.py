# どこで: `src/bezcanvas/core/control_points.py`。
# 何を: 可変な制御点列（移動/複製/削除/ヒットテスト）を提供する。
# なぜ: controller が唯一の所有者として変更し、renderer はスナップショットだけを読む形にするため。

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from bezcanvas.core.geometry import Point, cartesian_to_raster

_logger = logging.getLogger(__name__)

MIN_CONTROL_POINTS = 2
DEFAULT_DUPLICATE_OFFSET = (20.0, 0.0)


@dataclass(slots=True)
class ControlPoint:
    """ユーザーが配置する可変な制御点（デカルト座標）。"""

    x: float
    y: float


class ControlPointSet:
    """順序付き制御点列。

    Notes
    -----
    - 順序が Bezier の基底を決めるため、挿入/削除は相対順序を保つ。
    - 点数は `min_points` 未満にならない（削除は no-op になる）。
    """

    def __init__(
        self,
        points: Iterable[tuple[float, float] | ControlPoint | Point],
        *,
        min_points: int = MIN_CONTROL_POINTS,
    ) -> None:
        self._min_points = max(1, int(min_points))
        self._points: list[ControlPoint] = []
        for p in points:
            if isinstance(p, (ControlPoint, Point)):
                self._points.append(ControlPoint(x=float(p.x), y=float(p.y)))
            else:
                x, y = p
                self._points.append(ControlPoint(x=float(x), y=float(y)))
        if len(self._points) < self._min_points:
            raise ValueError(
                f"制御点は {self._min_points} 点以上必要: got={len(self._points)}"
            )

    @property
    def min_points(self) -> int:
        return self._min_points

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[ControlPoint]:
        return iter(self._points)

    def __getitem__(self, index: int) -> ControlPoint:
        return self._points[index]

    def snapshot(self) -> tuple[Point, ...]:
        """描画 1 回分の読み取り専用スナップショットを返す。"""

        return tuple(Point(x=p.x, y=p.y) for p in self._points)

    def as_tuples(self) -> list[tuple[float, float]]:
        return [(p.x, p.y) for p in self._points]

    def move(self, index: int, x: float, y: float) -> None:
        """index の点を (x, y) へ移動する（in-place）。"""

        point = self._points[index]
        point.x = float(x)
        point.y = float(y)

    def duplicate(self, index: int, offset: tuple[float, float] = DEFAULT_DUPLICATE_OFFSET) -> int:
        """index の点を offset だけずらして直後に挿入し、新しい index を返す。"""

        source = self._points[index]
        dx, dy = offset
        insert_index = int(index) + 1
        self._points.insert(insert_index, ControlPoint(x=source.x + float(dx), y=source.y + float(dy)))
        _logger.debug("duplicate: %d -> %d (n=%d)", index, insert_index, len(self._points))
        return insert_index

    def can_delete(self) -> bool:
        return len(self._points) > self._min_points

    def delete(self, index: int) -> int | None:
        """index の点を削除し、選択を移すべき index を返す。

        Returns
        -------
        int | None
            削除した場合は `min(index, len-1)`。点数下限により削除しなかった場合は None。
        """

        if not self.can_delete():
            return None
        removed = int(index)
        del self._points[removed]
        _logger.debug("delete: %d (n=%d)", removed, len(self._points))
        return min(removed, len(self._points) - 1)

    def hit_test(
        self,
        raster_x: float,
        raster_y: float,
        *,
        width: int,
        height: int,
        radius: float,
    ) -> int | None:
        """ラスタ座標に最も近い、半径 radius 以内の点の index を返す。

        距離が等しい場合は先に現れた点を優先する。該当なしは None。
        """

        closest_index: int | None = None
        closest_distance = math.inf
        for index, point in enumerate(self._points):
            px, py = cartesian_to_raster(point.x, point.y, width, height)
            distance = math.hypot(float(raster_x) - px, float(raster_y) - py)
            if distance <= float(radius) and distance < closest_distance:
                closest_distance = distance
                closest_index = index
        return closest_index


__all__ = [
    "ControlPoint",
    "ControlPointSet",
    "DEFAULT_DUPLICATE_OFFSET",
    "MIN_CONTROL_POINTS",
]
