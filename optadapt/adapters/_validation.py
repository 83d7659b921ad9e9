"""Shared error constructors and balance checks for the adapter components."""

from __future__ import annotations

from collections.abc import Iterable

from optadapt.core.errors import (
    InsufficientFundsError,
    InvalidOptionError,
    NotYetExpiredError,
    OrderMismatchError,
    ResidualBalanceError,
    StaleOrderError,
    UnauthorizedError,
    UnknownOptionError,
)
from optadapt.core.result import Err, Ok
from optadapt.core.types import Address, UtcDatetime
from optadapt.infra.protocols import TokenBank


def unknown_option(source: str, terms_hash: str) -> Err[UnknownOptionError]:
    return Err(UnknownOptionError(
        message="No oToken has been issued for these terms",
        code="UNKNOWN_OPTION",
        timestamp=UtcDatetime.now(),
        source=source,
        terms_hash=terms_hash,
    ))


def invalid_option(source: str, terms_hash: str) -> Err[InvalidOptionError]:
    return Err(InvalidOptionError(
        message="Invalid oToken",
        code="INVALID_OPTION",
        timestamp=UtcDatetime.now(),
        source=source,
        terms_hash=terms_hash,
    ))


def order_mismatch(
    source: str, field: str, expected: str, actual: str,
) -> Err[OrderMismatchError]:
    return Err(OrderMismatchError(
        message=f"Order {field} is {actual}, expected {expected}",
        code="ORDER_MISMATCH",
        timestamp=UtcDatetime.now(),
        source=source,
        field=field,
        expected=expected,
        actual=actual,
    ))


def insufficient_funds(
    source: str, required: int, supplied: int, message: str | None = None,
) -> Err[InsufficientFundsError]:
    return Err(InsufficientFundsError(
        message=message or f"Supplied {supplied} does not cover required {required}",
        code="INSUFFICIENT_FUNDS",
        timestamp=UtcDatetime.now(),
        source=source,
        required=required,
        supplied=supplied,
    ))


def stale_order(source: str, detail: str) -> Err[StaleOrderError]:
    return Err(StaleOrderError(
        message=detail,
        code="STALE_ORDER",
        timestamp=UtcDatetime.now(),
        source=source,
    ))


def not_yet_expired(source: str, expiry: int, now: int) -> Err[NotYetExpiredError]:
    return Err(NotYetExpiredError(
        message=f"Option expires at {expiry}, now is {now}",
        code="NOT_YET_EXPIRED",
        timestamp=UtcDatetime.now(),
        source=source,
        expiry=expiry,
        now=now,
    ))


def unauthorized(source: str, caller: Address) -> Err[UnauthorizedError]:
    return Err(UnauthorizedError(
        message="only owner",
        code="UNAUTHORIZED",
        timestamp=UtcDatetime.now(),
        source=source,
        caller=caller.value,
    ))


def check_no_residual(
    bank: TokenBank, holder: Address, assets: Iterable[Address], source: str,
) -> Ok[None] | Err[ResidualBalanceError]:
    """Err if ``holder`` has a non-zero balance of any of ``assets``."""
    for asset in assets:
        balance = bank.balance_of(holder, asset)
        if balance != 0:
            return Err(ResidualBalanceError(
                message=f"Adapter left holding {balance} of {asset}",
                code="RESIDUAL_BALANCE",
                timestamp=UtcDatetime.now(),
                source=source,
                asset=asset.value,
                balance=balance,
            ))
    return Ok(None)
