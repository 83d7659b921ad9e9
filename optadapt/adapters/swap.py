"""Validation of externally supplied swap orders.

Only the structured fields are checked; the payload is forwarded to the
venue verbatim. Checks run in a fixed order so the caller always gets the
most fundamental reason first: a sentinel (zero) quote, then a token
mismatch, then a funding shortfall.
"""

from __future__ import annotations

from collections.abc import Collection

from optadapt.adapters._validation import insufficient_funds, order_mismatch, stale_order
from optadapt.core.errors import InsufficientFundsError, OrderMismatchError, StaleOrderError
from optadapt.core.result import Err, Ok
from optadapt.core.types import Address
from optadapt.instrument.orders import SwapOrder as SwapOrder

_SOURCE = "adapters.swap.validate_order"


def validate_order(
    order: SwapOrder,
    expected_buy_token: Address,
    funds_supplied: int,
    *,
    allowed_sell_tokens: Collection[Address],
    sell_cost: int | None = None,
) -> Ok[int] | Err[StaleOrderError | OrderMismatchError | InsufficientFundsError]:
    """Check ``order`` and return the native value it will consume.

    ``sell_cost`` is the native cost of acquiring ``sell_amount`` of the sell
    token; it defaults to ``sell_amount`` itself (native sold one-to-one via
    the wrapper). The protocol fee is always paid in native currency.
    """
    if order.buy_amount == 0 or order.sell_amount == 0:
        return stale_order(
            _SOURCE,
            f"Order has zero amounts (buy {order.buy_amount}, sell {order.sell_amount})",
        )
    if order.buy_token != expected_buy_token:
        return order_mismatch(_SOURCE, "buy_token", expected_buy_token.value, order.buy_token.value)
    if order.sell_token not in allowed_sell_tokens:
        expected = ",".join(sorted(a.value for a in allowed_sell_tokens))
        return order_mismatch(_SOURCE, "sell_token", expected, order.sell_token.value)
    required = (order.sell_amount if sell_cost is None else sell_cost) + order.protocol_fee
    if required > funds_supplied:
        return insufficient_funds(_SOURCE, required, funds_supplied)
    return Ok(required)
