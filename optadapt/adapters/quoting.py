"""Premium quotes, in native currency.

ExternalPremium: price discovery happens at an external venue, the quote
is the sentinel 0 and the caller brings a validated SwapOrder.

ConstantProductPremium: the adapter owns pricing. The premium is the
native input needed to buy the oToken amount out of a constant-product
pool, rounded up by one wei as the pool does.
"""

from __future__ import annotations

from typing import Protocol, final, runtime_checkable

from optadapt.core.errors import AdapterError, OptionExpiredError
from optadapt.core.result import Err, Ok
from optadapt.core.scaling import WAD_DECIMALS, scale_amount
from optadapt.core.types import UtcDatetime
from optadapt.instrument.terms import OptionToken
from optadapt.infra.protocols import Clock, ConstantProductExchange

EXTERNAL_PRICE: int = 0


@runtime_checkable
class PremiumQuoter(Protocol):
    def quote_premium(self, token: OptionToken, amount: int) -> Ok[int] | Err[AdapterError]:
        """Native cost of ``amount`` (18 decimals) of ``token``."""
        ...


@final
class ExternalPremium:
    def quote_premium(self, token: OptionToken, amount: int) -> Ok[int] | Err[AdapterError]:  # noqa: ARG002
        return Ok(EXTERNAL_PRICE)


@final
class ConstantProductPremium:
    def __init__(self, exchange: ConstantProductExchange, clock: Clock) -> None:
        self._exchange = exchange
        self._clock = clock

    def quote_premium(self, token: OptionToken, amount: int) -> Ok[int] | Err[AdapterError]:
        now = self._clock.now()
        if now >= token.terms.expiry:
            return Err(OptionExpiredError(
                message=f"Option expired at {token.terms.expiry}",
                code="OPTION_EXPIRED",
                timestamp=UtcDatetime.now(),
                source="adapters.quoting.ConstantProductPremium.quote_premium",
                expiry=token.terms.expiry,
            ))
        match scale_amount(amount, WAD_DECIMALS, token.decimals):
            case Err() as e:
                return e
            case Ok(amount_out):
                pass
        if amount_out == 0:
            return Ok(0)
        match self._exchange.quote_native_for_exact_tokens(token.identity, amount_out):
            case Err() as e:
                return e
            case Ok(cost):
                return Ok(cost)
