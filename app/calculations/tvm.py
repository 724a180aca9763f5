"""
Time Value of Money Solver

Solves the TVM equation

    PV * (1+i)^N + PMT * AF(i, N) + FV = 0

for whichever of N, I/Y, PV, PMT or FV is missing, where i is the periodic
rate and AF is the annuity factor for end-of-period or begin-of-period
payments. FV, PV and PMT have closed forms; N is closed-form only when the
rate or payment is zero; I/Y is always found numerically.
"""

import logging
import math
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Callable, Dict, List, Optional

from app.calculations.rates import growth_factor, nominal_rate, periodic_rate
from app.calculations.results import ErrorKind, Result
from app.calculations.roots import RATE_POLICY, RootPolicy, bisect, find_rate

logger = logging.getLogger(__name__)

ZERO_RATE = 1e-10
ZERO_AMOUNT = 1e-15

N_BRACKET = (0.01, 1000.0)
N_PROBES = (1.0, 10.0, 100.0, 1000.0, 10000.0)


class TVMVariable(str, Enum):
    """The five TVM registers."""

    N = "N"
    IY = "IY"
    PV = "PV"
    PMT = "PMT"
    FV = "FV"

    @property
    def field_name(self) -> str:
        return self.value.lower()


class PaymentTiming(str, Enum):
    """END = ordinary annuity, BEGIN = annuity-due."""

    END = "end"
    BEGIN = "begin"


@dataclass(frozen=True)
class CompoundingConfig:
    """Compounding periods per year (C/Y) and payment periods per year (P/Y)."""

    compounding_per_year: int = 12
    payments_per_year: int = 12

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not 1 <= value <= 365:
                raise ValueError(f"{f.name} must be between 1 and 365, got {value}")

    def with_xpy(self) -> "CompoundingConfig":
        """Return a copy with P/Y set equal to C/Y."""
        return replace(self, payments_per_year=self.compounding_per_year)

    def periodic_rate(self, nominal: float) -> float:
        return periodic_rate(nominal, self.compounding_per_year, self.payments_per_year)


@dataclass(frozen=True)
class TVMRegisters:
    """
    TVM register set. None marks a register that is not set.

    iy is the nominal annual rate in percent. No sign convention is
    enforced; by convention outflows are negative and inflows positive.
    """

    n: Optional[float] = None
    iy: Optional[float] = None
    pv: Optional[float] = None
    pmt: Optional[float] = None
    fv: Optional[float] = None

    def get(self, variable: TVMVariable) -> Optional[float]:
        return getattr(self, variable.field_name)

    def with_value(self, variable: TVMVariable, value: Optional[float]) -> "TVMRegisters":
        return replace(self, **{variable.field_name: value})

    def missing(self) -> List[TVMVariable]:
        return [v for v in TVMVariable if self.get(v) is None]


@dataclass(frozen=True)
class Solution:
    variable: TVMVariable
    value: float
    registers: TVMRegisters


def annuity_factor(i: float, n: float, timing: PaymentTiming = PaymentTiming.END) -> float:
    """
    Calculate the annuity factor [(1+i)^n - 1] / i.

    Multiplied by (1+i) for begin-of-period payments. Returns n at a zero
    rate.
    """
    if abs(i) < ZERO_RATE:
        return n

    factor = (growth_factor(i, n) - 1) / i
    return factor * (1 + i) if timing == PaymentTiming.BEGIN else factor


def present_value_factor(i: float, n: float) -> float:
    """(1+i)^-n"""
    return growth_factor(i, -n)


def solve_fv(n: float, i: float, pv: float, pmt: float, timing: PaymentTiming = PaymentTiming.END) -> float:
    """FV = -(PV * (1+i)^N + PMT * AF)"""
    return -(pv * growth_factor(i, n) + pmt * annuity_factor(i, n, timing))


def solve_pv(n: float, i: float, pmt: float, fv: float, timing: PaymentTiming = PaymentTiming.END) -> float:
    """PV = -(PMT * AF + FV) / (1+i)^N"""
    return -(pmt * annuity_factor(i, n, timing) + fv) * present_value_factor(i, n)


def solve_pmt(n: float, i: float, pv: float, fv: float, timing: PaymentTiming = PaymentTiming.END) -> float:
    """
    PMT = -(PV * (1+i)^N + FV) / AF

    Returns nan when there are no payment periods to spread the amount over.
    """
    af = annuity_factor(i, n, timing)

    if abs(af) < ZERO_AMOUNT:
        return math.nan

    return -(pv * growth_factor(i, n) + fv) / af


def solve_n(i: float, pv: float, pmt: float, fv: float, timing: PaymentTiming = PaymentTiming.END) -> float:
    """
    Solve for the number of periods.

    Uses a closed form at a zero rate or zero payment, bisection otherwise.
    Returns nan when no solution exists.
    """
    if abs(i) < ZERO_RATE:
        if abs(pmt) < ZERO_AMOUNT:
            return math.nan
        return -(pv + fv) / pmt

    if abs(pmt) < ZERO_AMOUNT:
        # PV * (1+i)^N + FV = 0
        if abs(pv) < ZERO_AMOUNT:
            return math.nan
        ratio = -fv / pv
        if ratio <= 0 or 1 + i <= 0:
            return math.nan
        return math.log(ratio) / math.log(1 + i)

    return _solve_n_numeric(i, pv, pmt, fv, timing)


def _solve_n_numeric(i: float, pv: float, pmt: float, fv: float, timing: PaymentTiming) -> float:
    def f(n: float) -> float:
        if n <= 0:
            return pv + fv
        return pv * growth_factor(i, n) + pmt * annuity_factor(i, n, timing) + fv

    lo, hi = N_BRACKET
    f_lo = f(lo)

    if not f_lo * f(hi) < 0:
        for test in N_PROBES:
            if f(test) * f_lo < 0:
                hi = test
                break
        else:
            logger.debug(f"No sign change for N in ({lo}, {N_PROBES[-1]}]")
            return math.nan

    n = bisect(f, lo, hi)
    return math.nan if n is None else n


def solve_iy(
    n: float,
    pv: float,
    pmt: float,
    fv: float,
    timing: PaymentTiming = PaymentTiming.END,
    compounding: CompoundingConfig = CompoundingConfig(),
    policy: RootPolicy = RATE_POLICY,
) -> float:
    """
    Solve for the nominal annual rate in percent.

    The periodic rate is found with Newton-Raphson (analytic derivative)
    and bisection fallback, then converted back to a nominal rate.
    Returns nan when no rate could be bracketed.
    """
    begin = timing == PaymentTiming.BEGIN

    def f(i: float) -> float:
        return pv * growth_factor(i, n) + pmt * annuity_factor(i, n, timing) + fv

    def df(i: float) -> float:
        if abs(i) < ZERO_RATE:
            return pv * n + pmt * n * (n + 1) / 2

        growth = growth_factor(i, n)
        d_growth = n * growth_factor(i, n - 1)
        af = (growth - 1) / i
        d_af = (d_growth * i - (growth - 1)) / (i * i)
        if begin:
            d_af = d_af * (1 + i) + af

        return pv * d_growth + pmt * d_af

    i = find_rate(f, df, policy)
    if i is None:
        return math.nan

    return nominal_rate(i, compounding.compounding_per_year, compounding.payments_per_year)


def _compute_n(r: TVMRegisters, timing, compounding, policy) -> float:
    return solve_n(compounding.periodic_rate(r.iy), r.pv, r.pmt, r.fv, timing)


def _compute_iy(r: TVMRegisters, timing, compounding, policy) -> float:
    return solve_iy(r.n, r.pv, r.pmt, r.fv, timing, compounding, policy)


def _compute_pv(r: TVMRegisters, timing, compounding, policy) -> float:
    return solve_pv(r.n, compounding.periodic_rate(r.iy), r.pmt, r.fv, timing)


def _compute_pmt(r: TVMRegisters, timing, compounding, policy) -> float:
    return solve_pmt(r.n, compounding.periodic_rate(r.iy), r.pv, r.fv, timing)


def _compute_fv(r: TVMRegisters, timing, compounding, policy) -> float:
    return solve_fv(r.n, compounding.periodic_rate(r.iy), r.pv, r.pmt, timing)


SOLVERS: Dict[TVMVariable, Callable[..., float]] = {
    TVMVariable.N: _compute_n,
    TVMVariable.IY: _compute_iy,
    TVMVariable.PV: _compute_pv,
    TVMVariable.PMT: _compute_pmt,
    TVMVariable.FV: _compute_fv,
}


def solve(
    registers: TVMRegisters,
    timing: PaymentTiming = PaymentTiming.END,
    compounding: CompoundingConfig = CompoundingConfig(),
    policy: RootPolicy = RATE_POLICY,
) -> Result[Solution]:
    """
    Compute the one register that is not set (CPT).

    Args:
        registers: Register set with exactly one register unset
        timing: Payment timing
        compounding: C/Y and P/Y used to derive the periodic rate
        policy: Root-finding policy for the I/Y solve

    Returns:
        Result holding the Solution with the updated register set
    """
    missing = registers.missing()

    if not missing:
        return Result.failure(
            ErrorKind.OVER_CONSTRAINED, "All values set - clear one to compute"
        )

    if len(missing) > 1:
        names = ", ".join(v.value for v in missing)
        return Result.failure(
            ErrorKind.INSUFFICIENT_CONSTRAINTS, f"Set more values ({names} not set)"
        )

    target = missing[0]
    value = SOLVERS[target](registers, timing, compounding, policy)

    if not math.isfinite(value):
        return Result.failure(ErrorKind.NO_SOLUTION, "No solution found")

    return Result.success(
        Solution(variable=target, value=value, registers=registers.with_value(target, value))
    )
