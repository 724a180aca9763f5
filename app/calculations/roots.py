"""
Root Finding

Newton-Raphson with best-iterate tracking, falling back to bounded bisection
with a probe list when Newton does not reach the acceptance residual.
Used to solve for interest rates (I/Y and IRR).
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

Function = Callable[[float], float]


@dataclass(frozen=True)
class RootPolicy:
    """Tolerances and bounds used by find_rate()."""

    guess: float = 0.05
    newton_max_iterations: int = 50
    newton_tolerance: float = 1e-10
    step_tolerance: float = 1e-12
    derivative_floor: float = 1e-15

    # Newton iterates are kept inside (lower_bound, upper_bound]
    lower_bound: float = -0.99
    upper_bound: float = 10.0
    # below lower_bound: halve the current iterate instead of moving toward the bound
    halve_on_lower_clamp: bool = False

    # Newton results with a larger residual go to bisection
    accept_residual: float = 1e-6

    bracket: Tuple[float, float] = (-0.99, 2.0)
    probes: Tuple[float, ...] = (-0.5, 0.0, 0.01, 0.1, 0.5, 1.0, 1.5)
    bisection_max_iterations: int = 100
    bisection_tolerance: float = 1e-10


RATE_POLICY = RootPolicy(halve_on_lower_clamp=True)
IRR_POLICY = RootPolicy(guess=0.1, newton_max_iterations=100, step_tolerance=1e-10)


def newton(f: Function, df: Function, policy: RootPolicy = RATE_POLICY) -> float:
    """
    Run Newton-Raphson from policy.guess.

    Newton can oscillate, so the lowest-residual iterate seen is returned
    when the iterations run out or the derivative vanishes.

    Args:
        f: Objective function
        df: Derivative of the objective
        policy: Tolerances and bounds

    Returns:
        Best iterate found
    """
    x = policy.guess
    best_x = x
    best_residual = abs(f(x))

    for _ in range(policy.newton_max_iterations):
        fx = f(x)

        if abs(fx) < policy.newton_tolerance:
            return x

        if abs(fx) < best_residual:
            best_residual = abs(fx)
            best_x = x

        dfx = df(x)
        if abs(dfx) < policy.derivative_floor:
            break

        next_x = x - fx / dfx

        if next_x <= policy.lower_bound:
            if policy.halve_on_lower_clamp:
                next_x = x / 2
            else:
                next_x = (x + policy.lower_bound) / 2
        if next_x > policy.upper_bound:
            next_x = (x + policy.upper_bound) / 2

        if abs(next_x - x) < policy.step_tolerance:
            return next_x

        x = next_x

    return best_x


def bisect(
    f: Function,
    lo: float,
    hi: float,
    probes: Sequence[float] = (),
    max_iterations: int = 100,
    tolerance: float = 1e-10,
) -> Optional[float]:
    """
    Find a root of f on [lo, hi] by bisection.

    If f(lo) and f(hi) do not have opposite signs (a nan endpoint counts),
    the first probe strictly inside the interval with a sign opposite to a
    finite endpoint replaces the other endpoint.

    Returns:
        The root, or None if no sign change could be found
    """
    f_lo, f_hi = f(lo), f(hi)

    if f_lo == 0:
        return lo
    if f_hi == 0:
        return hi

    if not f_lo * f_hi < 0:
        for test in probes:
            if not lo < test < hi:
                continue
            f_test = f(test)
            if f_test * f_lo < 0:
                hi, f_hi = test, f_test
                break
            if f_test * f_hi < 0:
                lo, f_lo = test, f_test
                break
        else:
            return None

    for _ in range(max_iterations):
        mid = (lo + hi) / 2
        f_mid = f(mid)

        if abs(f_mid) < tolerance:
            return mid

        if f_lo * f_mid < 0:
            hi = mid
        else:
            lo, f_lo = mid, f_mid

    return (lo + hi) / 2


def find_rate(f: Function, df: Function, policy: RootPolicy = RATE_POLICY) -> Optional[float]:
    """
    Solve f(rate) = 0 with Newton, falling back to bisection.

    Args:
        f: Objective in terms of the periodic rate
        df: Derivative of the objective
        policy: Tolerances and bounds

    Returns:
        Periodic rate, or None if bisection found no sign change
    """
    best = newton(f, df, policy)

    # written so that a nan residual also falls through to bisection
    if abs(f(best)) <= policy.accept_residual:
        return best

    logger.debug(f"Newton stopped at {best} without converging; falling back to bisection")

    lo, hi = policy.bracket
    return bisect(
        f,
        lo,
        hi,
        probes=policy.probes,
        max_iterations=policy.bisection_max_iterations,
        tolerance=policy.bisection_tolerance,
    )
