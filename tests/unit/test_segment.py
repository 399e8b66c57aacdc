"""Tests for the segment curve kernel."""

import math

import pytest

from shapecomp.domain import Matrix44, Segment, Vector2
from shapecomp.exceptions import SegmentError


def assert_close(a: Vector2, b: Vector2, tol: float = 1e-6) -> None:
    assert a.x == pytest.approx(b.x, abs=tol)
    assert a.y == pytest.approx(b.y, abs=tol)


@pytest.fixture
def diagonal() -> Segment:
    """Straight line from the origin to (100, 100)."""
    return Segment.line(Vector2(0.0, 0.0), Vector2(100.0, 100.0))


@pytest.fixture
def hook() -> Segment:
    """Cubic that overshoots to the right and curls back to x = 0."""
    return Segment.cubic_bezier(
        Vector2(0.0, 0.0),
        Vector2(100.0, 100.0),
        Vector2(50.0, 100.0),
        Vector2(0.0, 100.0),
    )


@pytest.fixture
def arch() -> Segment:
    """Quadratic arch from (0, 0) to (100, 0) peaking at (50, 50)."""
    return Segment.quadratic_bezier(Vector2(0.0, 0.0), Vector2(50.0, 100.0), Vector2(100.0, 0.0))


class TestConstruction:
    """Tests for segment construction."""

    def test_degrees(self, diagonal: Segment, arch: Segment, hook: Segment) -> None:
        assert diagonal.degree == 1
        assert diagonal.linear
        assert arch.degree == 2
        assert hook.degree == 3
        assert not hook.linear

    def test_points_in_curve_order(self, hook: Segment) -> None:
        assert hook.points == [
            Vector2(0.0, 0.0),
            Vector2(100.0, 100.0),
            Vector2(50.0, 100.0),
            Vector2(0.0, 100.0),
        ]

    def test_from_points(self) -> None:
        s = Segment.from_points([Vector2(0.0, 0.0), Vector2(1.0, 1.0), Vector2(2.0, 0.0)])
        assert s.degree == 2
        assert s.control == (Vector2(1.0, 1.0),)

    def test_from_points_rejects_bad_count(self) -> None:
        """Test that a single point or five points cannot form a segment."""
        with pytest.raises(SegmentError):
            Segment.from_points([Vector2(0.0, 0.0)])
        with pytest.raises(SegmentError):
            Segment.from_points([Vector2(float(i), 0.0) for i in range(5)])

    def test_too_many_controls(self) -> None:
        p = Vector2(0.0, 0.0)
        with pytest.raises(SegmentError):
            Segment(p, p, (p, p, p))

    def test_control_list_is_stored_as_tuple(self) -> None:
        s = Segment(Vector2(0.0, 0.0), Vector2(1.0, 0.0), [Vector2(0.5, 1.0)])  # type: ignore[arg-type]
        assert isinstance(s.control, tuple)
        assert hash(s) == hash(Segment.quadratic_bezier(s.start, Vector2(0.5, 1.0), s.end))


class TestEvaluation:
    """Tests for position, derivative and normal."""

    def test_line_position(self, diagonal: Segment) -> None:
        assert diagonal.position(0.25) == Vector2(25.0, 25.0)

    def test_curve_endpoints(self, hook: Segment) -> None:
        assert hook.position(0.0) == hook.start
        assert hook.position(1.0) == hook.end

    def test_line_normal_points_left(self) -> None:
        s = Segment.line(Vector2(0.0, 0.0), Vector2(10.0, 0.0))
        assert s.normal(0.5) == Vector2(0.0, 1.0)

    def test_normal_is_unit_length(self, hook: Segment) -> None:
        for t in (0.0, 0.3, 0.7, 1.0):
            assert hook.normal(t).length == pytest.approx(1.0)

    def test_degenerate_normal_is_zero(self) -> None:
        p = Vector2(3.0, 3.0)
        assert Segment.line(p, p).normal(0.5) == Vector2.ZERO

    def test_coincident_control_uses_next_point_for_tangent(self) -> None:
        """Test the endpoint tangent when the first control sits on the start."""
        s = Segment.cubic_bezier(
            Vector2(0.0, 0.0), Vector2(0.0, 0.0), Vector2(10.0, 0.0), Vector2(10.0, 10.0)
        )
        assert s.direction(0.0) == Vector2(1.0, 0.0)


class TestSplitAndSub:
    """Tests for splitting and sub-curves."""

    def test_split_at_boundaries_is_noop(self, hook: Segment) -> None:
        assert hook.split(0.0) == (hook,)
        assert hook.split(1.0) == (hook,)

    def test_split_in_middle(self, hook: Segment) -> None:
        left, right = hook.split(0.5)
        assert left.start == hook.start
        assert right.end == hook.end
        assert left.end == right.start
        assert_close(left.end, hook.position(0.5))
        assert_close(left.position(0.5), hook.position(0.25))

    @pytest.mark.parametrize("t", [0.1, 0.37, 0.8])
    @pytest.mark.parametrize("curve", ["arch", "hook"])
    def test_split_halves_trace_the_curve(self, curve: str, t: float, request) -> None:
        """Test that the two halves of a split follow the original curve."""
        segment = request.getfixturevalue(curve)
        left, right = segment.split(t)
        for i in range(11):
            u = i / 10.0
            if u <= t:
                assert_close(left.position(u / t), segment.position(u))
            else:
                assert_close(right.position((u - t) / (1.0 - t)), segment.position(u))

    def test_sub_range(self, hook: Segment) -> None:
        s = hook.sub(0.25, 0.75)
        assert_close(s.start, hook.position(0.25))
        assert_close(s.end, hook.position(0.75))
        assert_close(s.position(0.5), hook.position(0.5))

    def test_sub_reversed_range(self, hook: Segment) -> None:
        s = hook.sub(0.75, 0.25)
        assert_close(s.start, hook.position(0.75))
        assert_close(s.end, hook.position(0.25))

    def test_sub_full_range_is_self(self, hook: Segment) -> None:
        assert hook.sub(0.0, 1.0) is hook

    def test_sub_empty_range_collapses(self, hook: Segment) -> None:
        s = hook.sub(0.5, 0.5)
        assert s.start == s.end
        assert s.degree == hook.degree
        assert s.length == pytest.approx(0.0)

    def test_reverse(self, arch: Segment) -> None:
        r = arch.reverse
        assert r.start == arch.end
        assert r.end == arch.start
        assert_close(r.position(0.3), arch.position(0.7))


class TestMetrics:
    """Tests for length, bounds, extrema and inflections."""

    def test_line_length(self, diagonal: Segment) -> None:
        assert diagonal.length == pytest.approx(math.sqrt(20000.0))

    def test_line_bounds(self, diagonal: Segment) -> None:
        b = diagonal.bounds
        assert (b.x, b.y, b.width, b.height) == (0.0, 0.0, 100.0, 100.0)

    def test_curve_length_exceeds_chord(self, arch: Segment) -> None:
        assert arch.length > 100.0
        assert arch.length < 200.0

    def test_quadratic_extrema(self, arch: Segment) -> None:
        assert arch.extrema() == [pytest.approx(0.5)]

    def test_quadratic_bounds_are_tight(self, arch: Segment) -> None:
        b = arch.bounds
        assert b.height == pytest.approx(50.0)
        assert b.width == pytest.approx(100.0)

    def test_cubic_extrema(self, hook: Segment) -> None:
        extrema = hook.extrema()
        assert extrema
        assert extrema[0] == pytest.approx((3.0 - math.sqrt(3.0)) / 3.0)
        assert hook.bounds.x_max > 50.0

    def test_line_has_no_extrema(self, diagonal: Segment) -> None:
        assert diagonal.extrema() == []
        assert diagonal.inflections() == []

    def test_s_curve_inflection(self) -> None:
        s = Segment.cubic_bezier(
            Vector2(0.0, 0.0), Vector2(1.0, 2.0), Vector2(2.0, -2.0), Vector2(3.0, 0.0)
        )
        assert s.inflections() == [pytest.approx(0.5)]

    def test_control_bounds_contain_bounds(self, hook: Segment) -> None:
        assert hook.control_bounds.x_max >= hook.bounds.x_max


class TestReduction:
    """Tests for simplicity and reduction."""

    def test_line_is_simple(self, diagonal: Segment) -> None:
        assert diagonal.is_simple
        assert diagonal.reduced() == [diagonal]

    def test_hook_is_not_simple(self, hook: Segment) -> None:
        assert not hook.is_simple

    def test_reduced_pieces_are_simple(self, hook: Segment) -> None:
        pieces = hook.reduced()
        assert len(pieces) > 1
        assert all(piece.is_simple for piece in pieces)

    def test_reduced_pieces_are_connected(self, hook: Segment) -> None:
        pieces = hook.reduced()
        assert_close(pieces[0].start, hook.start)
        assert_close(pieces[-1].end, hook.end)
        for left, right in zip(pieces, pieces[1:]):
            assert_close(left.end, right.start)


class TestOffset:
    """Tests for offset curves."""

    def test_line_offset(self, diagonal: Segment) -> None:
        result = diagonal.offset(10.0)
        assert len(result) == 1
        shift = 10.0 / math.sqrt(2.0)
        assert_close(result[0].start, Vector2(-shift, shift))
        assert_close(result[0].end, Vector2(100.0 - shift, 100.0 + shift))

    def test_zero_length_line_has_no_offset(self) -> None:
        p = Vector2(1.0, 1.0)
        assert Segment.line(p, p).offset(5.0) == []

    def test_curve_offset_keeps_distance(self, arch: Segment) -> None:
        result = arch.offset(5.0)
        assert result
        for piece in result:
            sample = piece.position(0.5)
            nearest = arch.nearest(sample)
            assert nearest.position.distance_to(sample) == pytest.approx(5.0, abs=0.1)

    def test_curve_offset_is_connected(self, hook: Segment) -> None:
        result = hook.offset(4.0)
        for left, right in zip(result, result[1:]):
            assert left.end.distance_to(right.start) < 0.5


class TestConversion:
    """Tests for degree conversion."""

    def test_line_to_cubic(self, diagonal: Segment) -> None:
        c = diagonal.cubic
        assert c.degree == 3
        assert_close(c.position(0.3), diagonal.position(0.3))

    def test_quadratic_to_cubic_is_exact(self, arch: Segment) -> None:
        c = arch.cubic
        for t in (0.1, 0.5, 0.9):
            assert_close(c.position(t), arch.position(t))

    def test_promoted_cubic_round_trips_to_quadratic(self, arch: Segment) -> None:
        q = arch.cubic.quadratic
        assert_close(q.control[0], arch.control[0])

    def test_line_to_quadratic(self, diagonal: Segment) -> None:
        assert diagonal.quadratic.control == (Vector2(50.0, 50.0),)


class TestNearest:
    """Tests for nearest point queries."""

    def test_line_projection(self) -> None:
        s = Segment.line(Vector2(0.0, 0.0), Vector2(10.0, 0.0))
        p = s.nearest(Vector2(5.0, 5.0))
        assert p.segment_t == pytest.approx(0.5)
        assert p.position == Vector2(5.0, 0.0)

    def test_line_projection_clamps(self) -> None:
        s = Segment.line(Vector2(0.0, 0.0), Vector2(10.0, 0.0))
        assert s.nearest(Vector2(-5.0, 1.0)).segment_t == 0.0

    def test_curve_nearest(self, arch: Segment) -> None:
        p = arch.nearest(Vector2(50.0, 100.0))
        assert p.segment_t == pytest.approx(0.5, abs=1e-4)
        assert_close(p.position, Vector2(50.0, 50.0), tol=1e-3)


class TestTransformAndIntersections:
    """Tests for transforms and pairwise intersections."""

    def test_translate(self, arch: Segment) -> None:
        moved = arch.transform(Matrix44.translate(10.0, 5.0))
        assert moved.start == Vector2(10.0, 5.0)
        assert moved.control == (Vector2(60.0, 105.0),)

    def test_identity_transform_returns_self(self, arch: Segment) -> None:
        assert arch.transform(Matrix44.IDENTITY) is arch

    def test_crossing_lines(self) -> None:
        a = Segment.line(Vector2(0.0, 0.0), Vector2(10.0, 10.0))
        b = Segment.line(Vector2(0.0, 10.0), Vector2(10.0, 0.0))
        hits = a.intersections(b)
        assert len(hits) == 1
        assert hits[0].a_t == pytest.approx(0.5)
        assert_close(hits[0].position, Vector2(5.0, 5.0))
