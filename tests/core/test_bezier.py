from __future__ import annotations

import numpy as np
import pytest

from bezcanvas.core.bezier import (
    bernstein_point,
    evaluate_bezier,
    evaluate_bezier_many,
    hierarchy_levels,
    hierarchy_visit_count,
    render_hierarchy,
)
from bezcanvas.core.geometry import Point

CUBIC = [Point(-250.0, 0.0), Point(0.0, 100.0), Point(50.0, 0.0), Point(150.0, 100.0)]


def test_evaluate_bezier_known_point() -> None:
    p = evaluate_bezier(CUBIC, 0.5)
    assert p.x == pytest.approx(6.25)
    assert p.y == pytest.approx(50.0)


def test_evaluate_bezier_endpoints() -> None:
    assert evaluate_bezier(CUBIC, 0.0) == CUBIC[0]
    assert evaluate_bezier(CUBIC, 1.0) == CUBIC[-1]


def test_evaluate_bezier_matches_bernstein() -> None:
    rng = np.random.default_rng(0)
    for n in (2, 3, 5, 8):
        pts = [Point(float(x), float(y)) for x, y in rng.uniform(-400, 400, size=(n, 2))]
        for t in np.linspace(0.0, 1.0, 17):
            a = evaluate_bezier(pts, float(t))
            b = bernstein_point(pts, float(t))
            assert a.x == pytest.approx(b.x, abs=1e-9)
            assert a.y == pytest.approx(b.y, abs=1e-9)


def test_evaluate_bezier_two_points_is_lerp() -> None:
    p = evaluate_bezier([Point(0.0, 0.0), Point(10.0, -20.0)], 0.25)
    assert p == Point(2.5, -5.0)


def test_evaluate_bezier_single_point_ignores_t() -> None:
    assert evaluate_bezier([Point(3.0, 4.0)], 0.7) == Point(3.0, 4.0)


def test_evaluate_bezier_empty_raises() -> None:
    with pytest.raises(ValueError):
        evaluate_bezier([], 0.5)


def test_evaluate_bezier_many_matches_scalar() -> None:
    ts = np.linspace(0.0, 1.0, 11)
    out = evaluate_bezier_many(CUBIC, ts)
    assert out.shape == (11, 2)
    expected = np.array([[evaluate_bezier(CUBIC, float(t)).x, evaluate_bezier(CUBIC, float(t)).y] for t in ts])
    np.testing.assert_allclose(out, expected, atol=1e-9)


def test_render_hierarchy_visit_count_and_roles() -> None:
    for n in range(2, 7):
        pts = [Point(float(i), float(i * i)) for i in range(n)]
        visits: list[tuple[Point, int, str]] = []
        render_hierarchy(pts, 0.3, lambda p, d, r: visits.append((p, d, r)))
        assert len(visits) == n * (n - 1) // 2 == hierarchy_visit_count(n)

        # 最後の 1 点だけが result で、曲線上の点と一致する。
        results = [v for v in visits if v[2] == "result"]
        assert len(results) == 1
        assert results[0][1] == n - 2
        expected = evaluate_bezier(pts, 0.3)
        assert results[0][0].x == pytest.approx(expected.x)
        assert results[0][0].y == pytest.approx(expected.y)

        for _p, depth, role in visits:
            if role == "result":
                continue
            assert role == ("intermediate" if depth % 2 == 1 else "scaffold")


def test_render_hierarchy_depth_is_bounded() -> None:
    pts = [Point(float(i), 0.0) for i in range(6)]
    depths: list[int] = []
    render_hierarchy(pts, 0.5, lambda _p, d, _r: depths.append(d))
    assert max(depths) <= len(pts) - 1
    assert depths == sorted(depths)


def test_render_hierarchy_noop_below_two_points() -> None:
    calls: list[object] = []
    render_hierarchy([], 0.5, lambda *a: calls.append(a))
    render_hierarchy([Point(1.0, 1.0)], 0.5, lambda *a: calls.append(a))
    assert calls == []
    assert hierarchy_visit_count(1) == 0


def test_hierarchy_levels_shapes() -> None:
    levels = hierarchy_levels(CUBIC, 0.5)
    assert [len(level) for level in levels] == [3, 2, 1]
    assert levels[0][0] == Point(-125.0, 50.0)
