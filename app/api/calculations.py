"""
Financial calculation API endpoints.

These endpoints accept inputs and return calculated results. Every request
is an independent computation.
"""

import logging
from dataclasses import asdict, replace
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from app.calculations import amortization, irr, rates, tvm
from app.calculations.results import CalculationFailed, ErrorKind, Result
from app.calculations.roots import IRR_POLICY, RATE_POLICY, RootPolicy
from app.config import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


def _unwrap(result: Result):
    """Return the result value or raise a 400 carrying the error kind."""
    try:
        return result.unwrap()
    except CalculationFailed as e:
        logger.info(f"Calculation rejected: {e.kind.value}: {e}")
        raise HTTPException(
            status_code=400, detail={"error": e.kind.value, "message": str(e)}
        )


def get_rate_policy(settings: Settings = Depends(get_settings)) -> RootPolicy:
    return replace(RATE_POLICY, **settings.root_policy_overrides())


def get_irr_policy(settings: Settings = Depends(get_settings)) -> RootPolicy:
    return replace(IRR_POLICY, **settings.root_policy_overrides())


class CompoundingInput(BaseModel):
    """C/Y and P/Y settings shared by TVM requests."""

    compounding_per_year: int = Field(12, ge=1, le=365)
    payments_per_year: int = Field(12, ge=1, le=365)

    def compounding(self) -> tvm.CompoundingConfig:
        return tvm.CompoundingConfig(self.compounding_per_year, self.payments_per_year)


class RateInput(CompoundingInput):
    """Input for rate conversion."""

    nominal_rate: float


class RateResponse(BaseModel):
    periodic_rate: float
    effective_annual_rate: float


@router.post("/rates", response_model=RateResponse)
async def convert_rate(inputs: RateInput):
    """Convert a nominal annual rate to periodic and effective annual rates."""
    return RateResponse(
        periodic_rate=rates.periodic_rate(
            inputs.nominal_rate, inputs.compounding_per_year, inputs.payments_per_year
        ),
        effective_annual_rate=rates.effective_annual_rate(
            inputs.nominal_rate, inputs.compounding_per_year
        ),
    )


class Registers(BaseModel):
    """TVM registers. Null means not set."""

    n: Optional[float] = None
    iy: Optional[float] = None
    pv: Optional[float] = None
    pmt: Optional[float] = None
    fv: Optional[float] = None


class TVMInput(CompoundingInput, Registers):
    """Input for a TVM solve: leave exactly one register null."""

    begin: bool = False

    def registers(self) -> tvm.TVMRegisters:
        return tvm.TVMRegisters(n=self.n, iy=self.iy, pv=self.pv, pmt=self.pmt, fv=self.fv)

    def timing(self) -> tvm.PaymentTiming:
        return tvm.PaymentTiming.BEGIN if self.begin else tvm.PaymentTiming.END


class TVMResponse(BaseModel):
    """Solved register and the updated register set."""

    solved_for: Optional[str] = None
    value: Optional[float] = None
    registers: Registers
    message: str


@router.post("/tvm", response_model=TVMResponse)
async def solve_tvm(inputs: TVMInput, policy: RootPolicy = Depends(get_rate_policy)):
    """Compute the missing TVM register."""
    registers = inputs.registers()
    result = tvm.solve(registers, inputs.timing(), inputs.compounding(), policy)

    if not result.ok and result.error.kind == ErrorKind.OVER_CONSTRAINED:
        return TVMResponse(registers=Registers(**asdict(registers)), message=result.error.message)

    solution = _unwrap(result)
    return TVMResponse(
        solved_for=solution.variable.value,
        value=solution.value,
        registers=Registers(**asdict(solution.registers)),
        message=f"{solution.variable.value} = {solution.value}",
    )


class NPVInput(BaseModel):
    """Input for NPV calculation."""

    cash_flows: List[float]
    nominal_rate: float
    payments_per_year: int = Field(12, ge=1, le=365)


class NPVResponse(BaseModel):
    npv: float


@router.post("/npv", response_model=NPVResponse)
async def calculate_npv_endpoint(inputs: NPVInput):
    """Calculate NPV for given cash flows."""
    npv = _unwrap(irr.calculate_npv(inputs.cash_flows, inputs.nominal_rate, inputs.payments_per_year))
    return NPVResponse(npv=npv)


class IRRInput(BaseModel):
    """Input for IRR calculation."""

    cash_flows: List[float]
    payments_per_year: int = Field(12, ge=1, le=365)


class IRRResponse(BaseModel):
    """Response with IRR calculation."""

    irr: float
    periodic_irr: float


@router.post("/irr", response_model=IRRResponse)
async def calculate_irr_endpoint(inputs: IRRInput, policy: RootPolicy = Depends(get_irr_policy)):
    """Calculate IRR for given cash flows."""
    annual = _unwrap(irr.calculate_irr(inputs.cash_flows, inputs.payments_per_year, policy))
    return IRRResponse(
        irr=annual,
        periodic_irr=annual / inputs.payments_per_year / 100,
    )


class AmortizationInput(CompoundingInput):
    """Input for amortization calculation."""

    n: Optional[float] = None
    iy: Optional[float] = None
    pv: Optional[float] = None
    pmt: Optional[float] = None
    begin: bool = False

    def registers(self) -> tvm.TVMRegisters:
        return tvm.TVMRegisters(n=self.n, iy=self.iy, pv=self.pv, pmt=self.pmt)

    def timing(self) -> tvm.PaymentTiming:
        return tvm.PaymentTiming.BEGIN if self.begin else tvm.PaymentTiming.END


class AmortizationRangeInput(AmortizationInput):
    p1: int = Field(1, ge=1)
    p2: int = Field(1, ge=1)


class AmortizationResponse(BaseModel):
    p1: int
    p2: int
    principal: float
    interest: float
    balance: float


@router.post("/amortization", response_model=AmortizationResponse)
async def calculate_amortization_endpoint(inputs: AmortizationRangeInput):
    """Calculate principal, interest and balance over periods P1..P2."""
    totals = _unwrap(
        amortization.calculate_amortization(
            inputs.registers(),
            inputs.p1,
            inputs.p2,
            timing=inputs.timing(),
            compounding=inputs.compounding(),
        )
    )
    return AmortizationResponse(
        p1=totals.start_period,
        p2=totals.end_period,
        principal=totals.principal,
        interest=totals.interest,
        balance=totals.balance,
    )


@router.post("/amortization/schedule")
async def generate_schedule_endpoint(inputs: AmortizationInput):
    """Generate loan amortization schedule."""
    schedule = _unwrap(
        amortization.generate_amortization_schedule(
            inputs.registers(), timing=inputs.timing(), compounding=inputs.compounding()
        )
    )

    return {
        "schedule": [asdict(row) for row in schedule],
        "total_interest": amortization.calculate_total_interest(schedule),
        "total_principal": amortization.calculate_total_principal(schedule),
    }
