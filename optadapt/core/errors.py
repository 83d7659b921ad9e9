"""Error value hierarchy for the adapters.

No domain function raises. Each failure is a frozen dataclass value with a
stable ``code`` so the calling instrument can branch on it (e.g. "not
tradable yet" vs "insufficient funds" vs "too early to exercise").
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import final

from optadapt.core.types import UtcDatetime


@dataclass(frozen=True, slots=True)
class AdapterError:
    """Base error value. NOT @final, has subclasses."""

    message: str
    code: str
    timestamp: UtcDatetime
    source: str  # "module.function" that produced this error

    def with_context(self, context: str) -> AdapterError:
        """Return a copy with context prepended to message."""
        return replace(self, message=f"{context}: {self.message}")

    def to_dict(self) -> dict[str, object]:
        return {
            "message": self.message,
            "code": self.code,
            "timestamp": self.timestamp.value.isoformat(),
            "source": self.source,
        }


@final
@dataclass(frozen=True, slots=True)
class UnknownOptionError(AdapterError):
    """Terms do not resolve to an issued oToken. Expected, not a crash."""

    terms_hash: str

    def to_dict(self) -> dict[str, object]:
        return {**AdapterError.to_dict(self), "terms_hash": self.terms_hash}


@final
@dataclass(frozen=True, slots=True)
class InvalidOptionError(AdapterError):
    """Short creation requested for terms with no oToken."""

    terms_hash: str

    def to_dict(self) -> dict[str, object]:
        return {**AdapterError.to_dict(self), "terms_hash": self.terms_hash}


@final
@dataclass(frozen=True, slots=True)
class OrderMismatchError(AdapterError):
    """A swap order field does not match what the adapter expects."""

    field: str
    expected: str
    actual: str

    def to_dict(self) -> dict[str, object]:
        return {
            **AdapterError.to_dict(self),
            "field": self.field,
            "expected": self.expected,
            "actual": self.actual,
        }


@final
@dataclass(frozen=True, slots=True)
class InsufficientFundsError(AdapterError):
    """Supplied native value does not cover the cost."""

    required: int
    supplied: int

    def to_dict(self) -> dict[str, object]:
        return {
            **AdapterError.to_dict(self),
            "required": str(self.required),
            "supplied": str(self.supplied),
        }


@final
@dataclass(frozen=True, slots=True)
class StaleOrderError(AdapterError):
    """Swap order carries zero amounts (sentinel or expired quote)."""


@final
@dataclass(frozen=True, slots=True)
class NotYetExpiredError(AdapterError):
    """Exercise attempted before expiry."""

    expiry: int
    now: int

    def to_dict(self) -> dict[str, object]:
        return {**AdapterError.to_dict(self), "expiry": self.expiry, "now": self.now}


@final
@dataclass(frozen=True, slots=True)
class ZeroProfitError(AdapterError):
    """Exercise of a position that pays nothing."""


@final
@dataclass(frozen=True, slots=True)
class CollateralTooSmallError(AdapterError):
    """Collateral below the protocol's absolute floor."""

    minimum: int
    actual: int

    def to_dict(self) -> dict[str, object]:
        return {
            **AdapterError.to_dict(self),
            "minimum": str(self.minimum),
            "actual": str(self.actual),
        }


@final
@dataclass(frozen=True, slots=True)
class ArithmeticOverflowError(AdapterError):
    """Fixed-point arithmetic left the unsigned 256-bit range."""

    operation: str

    def to_dict(self) -> dict[str, object]:
        return {**AdapterError.to_dict(self), "operation": self.operation}


@final
@dataclass(frozen=True, slots=True)
class OptionExpiredError(AdapterError):
    """Quote or purchase requested for an expired option."""

    expiry: int

    def to_dict(self) -> dict[str, object]:
        return {**AdapterError.to_dict(self), "expiry": self.expiry}


@final
@dataclass(frozen=True, slots=True)
class InsufficientLiquidityError(AdapterError):
    """Exchange pool cannot supply the requested amount."""

    token: str
    requested: int
    available: int

    def to_dict(self) -> dict[str, object]:
        return {
            **AdapterError.to_dict(self),
            "token": self.token,
            "requested": str(self.requested),
            "available": str(self.available),
        }


@final
@dataclass(frozen=True, slots=True)
class UnauthorizedError(AdapterError):
    """Owner-only operation called by someone else."""

    caller: str

    def to_dict(self) -> dict[str, object]:
        return {**AdapterError.to_dict(self), "caller": self.caller}


@final
@dataclass(frozen=True, slots=True)
class TransferError(AdapterError):
    """Token or native transfer could not be applied."""

    asset: str
    holder: str
    amount: int
    balance: int

    def to_dict(self) -> dict[str, object]:
        return {
            **AdapterError.to_dict(self),
            "asset": self.asset,
            "holder": self.holder,
            "amount": str(self.amount),
            "balance": str(self.balance),
        }


@final
@dataclass(frozen=True, slots=True)
class ResidualBalanceError(AdapterError):
    """The adapter would be left holding tokens at a call boundary."""

    asset: str
    balance: int

    def to_dict(self) -> dict[str, object]:
        return {**AdapterError.to_dict(self), "asset": self.asset, "balance": str(self.balance)}


@final
@dataclass(frozen=True, slots=True)
class SettlementError(AdapterError):
    """The issuing protocol or swap venue refused the operation."""

    operation: str

    def to_dict(self) -> dict[str, object]:
        return {**AdapterError.to_dict(self), "operation": self.operation}


@final
@dataclass(frozen=True, slots=True)
class PersistenceError(AdapterError):
    """Event publication or storage failed."""

    operation: str

    def to_dict(self) -> dict[str, object]:
        return {**AdapterError.to_dict(self), "operation": self.operation}
