"""
Financial Calculation Engine

Time-value-of-money solver, cash-flow evaluation (NPV/IRR) and loan
amortization. All calculations are pure functions returning a Result.
"""

from app.calculations import amortization, irr, rates, roots, tvm
from app.calculations.amortization import (
    AmortizationResult,
    AmortizationRow,
    calculate_amortization,
    generate_amortization_schedule,
)
from app.calculations.irr import calculate_irr, calculate_npv
from app.calculations.rates import effective_annual_rate, nominal_rate, periodic_rate
from app.calculations.results import CalculationError, CalculationFailed, ErrorKind, Result
from app.calculations.tvm import (
    CompoundingConfig,
    PaymentTiming,
    Solution,
    TVMRegisters,
    TVMVariable,
    solve,
)

__all__ = [
    "amortization",
    "irr",
    "rates",
    "roots",
    "tvm",
    "AmortizationResult",
    "AmortizationRow",
    "CalculationError",
    "CalculationFailed",
    "CompoundingConfig",
    "ErrorKind",
    "PaymentTiming",
    "Result",
    "Solution",
    "TVMRegisters",
    "TVMVariable",
    "calculate_amortization",
    "calculate_irr",
    "calculate_npv",
    "effective_annual_rate",
    "generate_amortization_schedule",
    "nominal_rate",
    "periodic_rate",
    "solve",
]
