"""Tests for the closed-form polynomial root solvers."""

import pytest

from shapecomp.domain._roots import solve_cubic, solve_quadratic


def assert_roots_among(roots: list[float], expected: list[float], tol: float) -> None:
    assert roots
    for root in roots:
        assert min(abs(root - e) for e in expected) < tol


class TestQuadratic:
    """Tests for solve_quadratic."""

    def test_two_roots(self) -> None:
        assert solve_quadratic(1.0, -3.0, 2.0) == [pytest.approx(1.0), pytest.approx(2.0)]

    def test_no_real_roots(self) -> None:
        assert solve_quadratic(1.0, 0.0, 1.0) == []

    def test_degenerate_to_linear(self) -> None:
        assert solve_quadratic(0.0, 2.0, -1.0) == [pytest.approx(0.5)]


class TestCubic:
    """Tests for solve_cubic."""

    def test_three_distinct_roots(self) -> None:
        # (t - 1)(t - 2)(t - 3)
        roots = solve_cubic(1.0, -6.0, 11.0, -6.0)
        assert roots == [pytest.approx(1.0), pytest.approx(2.0), pytest.approx(3.0)]

    def test_single_real_root(self) -> None:
        # (t - 2)(t^2 + 1)
        assert solve_cubic(1.0, -2.0, 1.0, -2.0) == [pytest.approx(2.0)]

    def test_exact_double_root(self) -> None:
        # (t - 1)^2 (t + 3)
        roots = solve_cubic(1.0, 1.0, -5.0, 3.0)
        assert_roots_among(roots, [1.0, -3.0], 1e-9)
        assert any(r == pytest.approx(1.0) for r in roots)
        assert any(r == pytest.approx(-3.0) for r in roots)

    def test_inexact_double_root_stays_put(self) -> None:
        """Test that a double root is not pushed away by the polish step."""
        # (t - 0.3)^2 (t - 2)
        roots = solve_cubic(1.0, -2.6, 1.29, -0.18)
        assert_roots_among(roots, [0.3, 2.0], 1e-6)

    def test_scaled_double_root(self) -> None:
        # 10000 (t - 0.7)^2 (t + 2.5)
        a, b, c, d = 1.0, 1.1, -3.01, 1.225
        roots = solve_cubic(1e4 * a, 1e4 * b, 1e4 * c, 1e4 * d)
        assert_roots_among(roots, [0.7, -2.5], 1e-6)

    def test_degenerate_to_quadratic(self) -> None:
        assert solve_cubic(0.0, 1.0, -3.0, 2.0) == [pytest.approx(1.0), pytest.approx(2.0)]
