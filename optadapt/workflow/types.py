"""Workflow data types for exercise-at-expiry.

All types: @final @dataclass(frozen=True, slots=True). Fields are plain
str / int / bool so that Temporal's default JSON converter round-trips
them; addresses are 0x-hex strings and amounts are 18-decimal ints.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import final


class ExerciseOutcome(Enum):
    """Terminal states of the exercise workflow."""

    EXERCISED = "Exercised"
    NOT_PROFITABLE = "NotProfitable"
    FAILED = "Failed"


@final
@dataclass(frozen=True, slots=True)
class ExerciseRequest:
    """Workflow input. ``request_id`` serves as the Temporal workflow id."""

    request_id: str
    caller: str
    otoken: str
    option_id: int
    amount: int
    recipient: str
    expiry: int
    # wait this long after expiry for the oracle to finalize the price
    settlement_delay_seconds: int = 0

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise TypeError(f"ExerciseRequest.amount must be > 0, got {self.amount}")
        if self.settlement_delay_seconds < 0:
            raise TypeError("ExerciseRequest.settlement_delay_seconds must be >= 0")


@final
@dataclass(frozen=True, slots=True)
class CanExerciseInput:
    otoken: str
    option_id: int
    amount: int


@final
@dataclass(frozen=True, slots=True)
class ExerciseInput:
    """Input of the exercise activity. ``request_id`` is the idempotency key."""

    request_id: str
    caller: str
    otoken: str
    option_id: int
    amount: int
    recipient: str


@final
@dataclass(frozen=True, slots=True)
class ExerciseOutput:
    """Output of the exercise activity: exactly one of payout or error."""

    payout: int | None = None
    error_code: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if (self.payout is None) == (self.error is None):
            raise TypeError("ExerciseOutput must have exactly one of payout or error")


@final
@dataclass(frozen=True, slots=True)
class ExerciseResult:
    """Workflow result."""

    request_id: str
    outcome: str
    payout: int = 0
    reason: str | None = None
