from __future__ import annotations

import pytest

from bezcanvas.core.control_points import MIN_CONTROL_POINTS, ControlPointSet
from bezcanvas.core.geometry import Point


def _points() -> ControlPointSet:
    return ControlPointSet([(-30.0, 0.0), (0.0, 30.0), (30.0, 0.0)])


def test_requires_min_points() -> None:
    with pytest.raises(ValueError):
        ControlPointSet([(0.0, 0.0)])
    with pytest.raises(ValueError):
        ControlPointSet([(0.0, 0.0), (1.0, 1.0)], min_points=3)


def test_snapshot_is_detached_from_later_moves() -> None:
    points = _points()
    snap = points.snapshot()
    points.move(1, 5.0, 6.0)
    assert snap[1] == Point(0.0, 30.0)
    assert points.snapshot()[1] == Point(5.0, 6.0)


def test_duplicate_inserts_after_source_with_offset() -> None:
    points = _points()
    new_index = points.duplicate(0, (20.0, 0.0))
    assert new_index == 1
    assert points.as_tuples() == [(-30.0, 0.0), (-10.0, 0.0), (0.0, 30.0), (30.0, 0.0)]


def test_delete_returns_next_selection() -> None:
    points = _points()
    assert points.delete(2) == 1
    assert len(points) == 2


def test_delete_at_minimum_is_noop() -> None:
    points = ControlPointSet([(0.0, 0.0), (1.0, 1.0)])
    assert len(points) == MIN_CONTROL_POINTS
    assert not points.can_delete()
    assert points.delete(0) is None
    assert points.as_tuples() == [(0.0, 0.0), (1.0, 1.0)]


def test_duplicate_then_delete_restores_length() -> None:
    points = _points()
    before = len(points)
    new_index = points.duplicate(1)
    points.delete(new_index)
    assert len(points) == before
    assert points.as_tuples() == [(-30.0, 0.0), (0.0, 30.0), (30.0, 0.0)]


def test_hit_test_nearest_within_radius() -> None:
    points = _points()
    # canvas 100x100 では (-30, 0) -> raster (20, 50)。
    assert points.hit_test(22.0, 51.0, width=100, height=100, radius=18.0) == 0
    assert points.hit_test(50.0, 90.0, width=100, height=100, radius=18.0) is None
    # 半径ちょうどは含む。
    assert points.hit_test(38.0, 50.0, width=100, height=100, radius=18.0) == 0


def test_hit_test_tie_prefers_first() -> None:
    points = ControlPointSet([(0.0, 0.0), (0.0, 0.0), (10.0, 0.0)])
    assert points.hit_test(50.0, 50.0, width=100, height=100, radius=5.0) == 0
