"""
Loan Amortization Calculations

Replays the period-by-period balance of a loan described by the TVM
registers and splits each payment into interest and principal, matching
a financial calculator's AMORT worksheet.
"""

import math
from dataclasses import dataclass
from typing import Iterator, List, Tuple

from app.calculations.results import ErrorKind, Result
from app.calculations.tvm import CompoundingConfig, PaymentTiming, TVMRegisters


@dataclass(frozen=True)
class AmortizationRow:
    period: int
    payment: float
    interest: float
    principal: float
    balance: float


@dataclass(frozen=True)
class AmortizationResult:
    """Totals over periods start_period..end_period and the balance after end_period."""

    start_period: int
    end_period: int
    principal: float
    interest: float
    balance: float


def _iterate_periods(
    balance: float, rate: float, pmt: float, timing: PaymentTiming
) -> Iterator[AmortizationRow]:
    """Yield one row per period, forever; callers stop at the last period they need."""
    period = 0
    while True:
        period += 1
        if timing == PaymentTiming.BEGIN:
            # payment is applied before interest accrues
            principal = -pmt
            balance += principal
            interest = balance * rate
            balance += interest
        else:
            interest = balance * rate
            principal = -pmt - interest
            balance += interest + pmt

        yield AmortizationRow(
            period=period,
            payment=-pmt,
            interest=interest,
            principal=principal,
            balance=balance,
        )


def _check_state(registers: TVMRegisters) -> Result[None]:
    if None in (registers.n, registers.iy, registers.pv, registers.pmt):
        return Result.failure(ErrorKind.INCOMPLETE_STATE, "Set N, I/Y, PV, PMT first")
    if not math.isfinite(registers.n):
        return Result.failure(ErrorKind.INVALID_RANGE, "N must be finite")
    return Result.success(None)


def calculate_amortization(
    registers: TVMRegisters,
    start_period: int,
    end_period: int,
    timing: PaymentTiming = PaymentTiming.END,
    compounding: CompoundingConfig = CompoundingConfig(),
) -> Result[AmortizationResult]:
    """
    Calculate principal and interest paid over a range of periods.

    Args:
        registers: TVM registers; N, I/Y, PV and PMT must be set
        start_period: First period of the range (P1, 1-indexed)
        end_period: Last period of the range (P2, inclusive)
        timing: Payment timing
        compounding: C/Y and P/Y used to derive the periodic rate

    Returns:
        Result holding the range totals and the balance after end_period
    """
    state = _check_state(registers)
    if not state.ok:
        return state

    max_period = math.floor(registers.n)
    if not 1 <= start_period <= end_period <= max_period:
        return Result.failure(
            ErrorKind.INVALID_RANGE,
            f"Periods must satisfy 1 <= P1 <= P2 <= {max_period}, "
            f"got P1={start_period}, P2={end_period}",
        )

    rate = compounding.periodic_rate(registers.iy)

    total_principal = 0.0
    total_interest = 0.0
    balance = registers.pv

    # periods before start_period still move the balance
    for row in _iterate_periods(registers.pv, rate, registers.pmt, timing):
        if row.period >= start_period:
            total_principal += row.principal
            total_interest += row.interest
        balance = row.balance
        if row.period == end_period:
            break

    return Result.success(
        AmortizationResult(
            start_period=start_period,
            end_period=end_period,
            principal=total_principal,
            interest=total_interest,
            balance=balance,
        )
    )


def generate_amortization_schedule(
    registers: TVMRegisters,
    timing: PaymentTiming = PaymentTiming.END,
    compounding: CompoundingConfig = CompoundingConfig(),
) -> Result[List[AmortizationRow]]:
    """
    Generate a full amortization schedule, one row per period 1..floor(N).

    Returns:
        Result holding the list of amortization rows
    """
    state = _check_state(registers)
    if not state.ok:
        return state

    max_period = math.floor(registers.n)
    if max_period < 1:
        return Result.failure(ErrorKind.INVALID_RANGE, "N must be at least 1")

    rate = compounding.periodic_rate(registers.iy)

    schedule = []
    for row in _iterate_periods(registers.pv, rate, registers.pmt, timing):
        schedule.append(row)
        if row.period == max_period:
            break

    return Result.success(schedule)


def calculate_total_interest(schedule: List[AmortizationRow]) -> float:
    """Calculate total interest paid over loan term."""
    return sum(row.interest for row in schedule)


def calculate_total_principal(schedule: List[AmortizationRow]) -> float:
    return sum(row.principal for row in schedule)


def period_range_after(start_period: int, end_period: int, n: float) -> Tuple[int, int]:
    """Step to the single period following end_period, staying within N."""
    if end_period < math.floor(n):
        return end_period + 1, end_period + 1
    return start_period, end_period


def period_range_before(start_period: int, end_period: int) -> Tuple[int, int]:
    """Step to the single period preceding start_period, staying at or above 1."""
    if start_period > 1:
        return start_period - 1, start_period - 1
    return start_period, end_period
