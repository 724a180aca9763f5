"""
Interest Rate Conversions

Converts nominal annual rates (in percent) to the effective rate per payment
period and back, accounting for compounding more or less often than payments.
"""

import math


def growth_factor(rate: float, periods: float) -> float:
    """
    Calculate (1 + rate) ** periods.

    Overflow gives inf and an undefined real power (negative base with a
    fractional exponent) gives nan, so callers can test the result with
    math.isfinite() instead of handling exceptions.
    """
    try:
        return math.pow(1 + rate, periods)
    except OverflowError:
        return math.inf
    except ValueError:
        return math.nan


def periodic_rate(nominal_rate: float, compounding_per_year: int, payments_per_year: int) -> float:
    """
    Calculate the effective interest rate per payment period.

    Args:
        nominal_rate: Nominal annual rate in percent (e.g., 6 for 6%)
        compounding_per_year: Compounding periods per year (C/Y)
        payments_per_year: Payment periods per year (P/Y)

    Returns:
        Periodic rate as decimal (e.g., 0.005 for 0.5% per period)
    """
    r = nominal_rate / 100

    if compounding_per_year == payments_per_year:
        return r / payments_per_year

    return growth_factor(r / compounding_per_year, compounding_per_year / payments_per_year) - 1


def nominal_rate(periodic: float, compounding_per_year: int, payments_per_year: int) -> float:
    """
    Convert a periodic rate back to a nominal annual rate.

    Inverse of periodic_rate().

    Returns:
        Nominal annual rate in percent
    """
    if compounding_per_year == payments_per_year:
        nominal = periodic * payments_per_year
    else:
        nominal = compounding_per_year * (
            growth_factor(periodic, payments_per_year / compounding_per_year) - 1
        )

    return nominal * 100


def effective_annual_rate(nominal: float, compounding_per_year: int) -> float:
    """Convert a nominal annual rate (percent) to the effective annual rate (percent)."""
    r = nominal / 100
    return (growth_factor(r / compounding_per_year, compounding_per_year) - 1) * 100
