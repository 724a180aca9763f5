"""
Tests for the shared Newton/bisection root finder.
"""

import math
from dataclasses import replace

import pytest

from app.calculations.roots import IRR_POLICY, RATE_POLICY, bisect, find_rate, newton


class TestNewton:
    """Test Newton-Raphson iteration."""

    def test_linear_converges_in_one_step(self):
        assert newton(lambda x: x - 0.3, lambda x: 1.0) == pytest.approx(0.3)

    def test_flat_derivative_returns_best_iterate(self):
        policy = replace(RATE_POLICY, guess=0.2)
        assert newton(lambda x: 1.0, lambda x: 0.0, policy) == 0.2

    def test_iterates_stay_inside_bounds(self):
        """A step far past the upper bound is pulled back halfway toward it."""
        seen = []

        def f(x):
            seen.append(x)
            return x - 50.0

        newton(f, lambda x: 0.01, replace(RATE_POLICY, newton_max_iterations=5))
        assert all(RATE_POLICY.lower_bound < x <= RATE_POLICY.upper_bound for x in seen)

    def test_rate_policy_halves_iterate_below_lower_bound(self):
        """A step past the lower bound halves the iterate for I/Y."""
        seen = []

        def f(x):
            seen.append(x)
            return x + 50.0

        newton(f, lambda x: 1.0, replace(RATE_POLICY, guess=0.2, newton_max_iterations=2))
        assert seen[-1] == pytest.approx(0.1)

    def test_irr_policy_moves_halfway_to_lower_bound(self):
        seen = []

        def f(x):
            seen.append(x)
            return x + 50.0

        newton(f, lambda x: 1.0, replace(IRR_POLICY, guess=0.2, newton_max_iterations=2))
        assert seen[-1] == pytest.approx((0.2 - 0.99) / 2)

    def test_default_policies(self):
        assert RATE_POLICY.guess == 0.05
        assert RATE_POLICY.newton_max_iterations == 50
        assert IRR_POLICY.guess == 0.1
        assert IRR_POLICY.newton_max_iterations == 100
        assert IRR_POLICY.bracket == (-0.99, 2.0)


class TestBisection:
    """Test bisection with probe list."""

    def test_simple_bracket(self):
        assert bisect(lambda x: x - 0.25, -0.99, 2.0) == pytest.approx(0.25, abs=1e-9)

    def test_interior_point_finds_sub_bracket(self):
        """Both roots are inside the bracket, so the endpoints share a sign."""
        f = lambda x: (x - 0.05) * (x - 1.9)
        root = bisect(f, -0.99, 2.0, probes=RATE_POLICY.probes)
        assert root == pytest.approx(0.05, abs=1e-9)

    def test_no_sign_change(self):
        assert bisect(lambda x: x * x + 1, -0.99, 2.0, probes=RATE_POLICY.probes) is None

    def test_nan_endpoint_is_not_a_bracket(self):
        """An overflowing endpoint must not be treated as a sign change."""
        f = lambda x: math.nan if x > 1.5 else 1.0
        assert bisect(f, -0.99, 2.0) is None
        assert bisect(f, -0.99, 2.0, probes=RATE_POLICY.probes) is None

    def test_nan_endpoint_replaced_by_interior_point(self):
        f = lambda x: math.nan if x > 1.5 else x - 0.3
        assert bisect(f, -0.99, 2.0, probes=(0.5,)) == pytest.approx(0.3, abs=1e-9)

    def test_probes_outside_bracket_ignored(self):
        f = lambda x: (x - 0.05) * (x - 1.9)
        assert bisect(f, 0.2, 1.8, probes=(-0.5, 0.0, 1.95)) is None


class TestFindRate:
    """Test the Newton-then-bisection combination."""

    def test_newton_result_accepted(self):
        assert find_rate(lambda x: x - 0.07, lambda x: 1.0) == pytest.approx(0.07)

    def test_falls_back_to_bisection(self):
        """A zero derivative stops Newton at the guess; bisection finishes the job."""
        rate = find_rate(lambda x: x - 0.4, lambda x: 0.0)
        assert rate == pytest.approx(0.4, abs=1e-9)

    def test_returns_none_without_bracket(self):
        assert find_rate(lambda x: x * x + 1, lambda x: 2 * x) is None
