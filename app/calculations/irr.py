"""
IRR and NPV Calculations

NPV by direct summation of discounted cash flows; IRR by Newton-Raphson
with a bisection fallback on the NPV function.
"""

import math
from typing import List, Sequence

import numpy as np

from app.calculations.results import ErrorKind, Result
from app.calculations.roots import IRR_POLICY, RootPolicy, find_rate


def present_value(cash_flows: Sequence[float], rate: float) -> float:
    """
    Discount cash flows to period 0.

    Args:
        cash_flows: CF0..CFk, CFt occurring at the end of period t
        rate: Periodic discount rate as decimal

    Returns:
        Sum of CF[t] / (1 + rate)^t
    """
    cfs = np.asarray(cash_flows, dtype=float)
    periods = np.arange(len(cfs))
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        return float(np.sum(cfs / np.power(1.0 + rate, periods)))


def _npv_derivative(cash_flows: Sequence[float], rate: float) -> float:
    """Calculate derivative of NPV with respect to rate (for Newton-Raphson)."""
    cfs = np.asarray(cash_flows, dtype=float)[1:]
    periods = np.arange(1, len(cfs) + 1)
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        return float(-np.sum(periods * cfs / np.power(1.0 + rate, periods + 1)))


def calculate_npv(
    cash_flows: Sequence[float], nominal_rate: float, payments_per_year: int = 12
) -> Result[float]:
    """
    Calculate NPV (Net Present Value) of cash flows.

    Args:
        cash_flows: Periodic cash flows (negative = outflow, positive = inflow)
        nominal_rate: Nominal annual discount rate in percent (e.g., 10 for 10%)
        payments_per_year: Periods per year (P/Y)

    Returns:
        Result holding the NPV
    """
    if len(cash_flows) < 2:
        return Result.failure(
            ErrorKind.INSUFFICIENT_CASH_FLOWS, "Enter at least 2 cash flows"
        )

    npv = present_value(cash_flows, nominal_rate / 100 / payments_per_year)

    if not math.isfinite(npv):
        return Result.failure(ErrorKind.NO_SOLUTION, "NPV is undefined at this rate")

    return Result.success(npv)


def periodic_irr(cash_flows: Sequence[float], policy: RootPolicy = IRR_POLICY) -> Result[float]:
    """
    Calculate IRR as a periodic rate.

    Args:
        cash_flows: Periodic cash flows
        policy: Root-finding policy (initial guess 10%)

    Returns:
        Result holding the periodic IRR as decimal
    """
    if len(cash_flows) < 2:
        return Result.failure(
            ErrorKind.INSUFFICIENT_CASH_FLOWS, "Enter at least 2 cash flows"
        )

    has_positive = any(cf > 0 for cf in cash_flows)
    has_negative = any(cf < 0 for cf in cash_flows)

    if not has_positive or not has_negative:
        return Result.failure(
            ErrorKind.NO_SIGN_CHANGE, "Need both positive and negative cash flows"
        )

    flows: List[float] = [float(cf) for cf in cash_flows]

    rate = find_rate(
        lambda r: present_value(flows, r),
        lambda r: _npv_derivative(flows, r),
        policy,
    )

    if rate is None or not math.isfinite(rate):
        return Result.failure(
            ErrorKind.DID_NOT_CONVERGE, "IRR calculation did not converge"
        )

    return Result.success(rate)


def calculate_irr(
    cash_flows: Sequence[float], payments_per_year: int = 12, policy: RootPolicy = IRR_POLICY
) -> Result[float]:
    """
    Calculate IRR (Internal Rate of Return) as a nominal annual rate.

    Args:
        cash_flows: Periodic cash flows
        payments_per_year: Periods per year (P/Y)
        policy: Root-finding policy

    Returns:
        Result holding the annual IRR in percent (periodic IRR * P/Y * 100)
    """
    result = periodic_irr(cash_flows, policy)
    if not result.ok:
        return result

    return Result.success(result.value * payments_per_year * 100)
