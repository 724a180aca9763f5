"""
Calculation Results

Every calculation returns a Result holding either a value or a
CalculationError. Expected failures (bad inputs, no convergence) are
reported this way instead of being raised.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Kinds of calculation failure."""

    INSUFFICIENT_CONSTRAINTS = "insufficient_constraints"
    OVER_CONSTRAINED = "over_constrained"
    NO_SOLUTION = "no_solution"
    INSUFFICIENT_CASH_FLOWS = "insufficient_cash_flows"
    NO_SIGN_CHANGE = "no_sign_change"
    DID_NOT_CONVERGE = "did_not_converge"
    INCOMPLETE_STATE = "incomplete_state"
    INVALID_RANGE = "invalid_range"


@dataclass(frozen=True)
class CalculationError:
    kind: ErrorKind
    message: str


class CalculationFailed(ValueError):
    """Raised by Result.unwrap() when the result holds an error."""

    def __init__(self, error: CalculationError):
        super().__init__(error.message)
        self.error = error

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind


@dataclass(frozen=True)
class Result(Generic[T]):
    """Value-or-error returned by every calculation."""

    value: Optional[T] = None
    error: Optional[CalculationError] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "Result[T]":
        return cls(error=CalculationError(kind, message))

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """
        Return the value, raising CalculationFailed if this is an error.

        Returns:
            The calculated value

        Raises:
            CalculationFailed: If the calculation failed
        """
        if self.error is not None:
            raise CalculationFailed(self.error)
        return self.value
