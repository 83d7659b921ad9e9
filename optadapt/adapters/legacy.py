"""LegacyAdapter: registry-addressed oTokens priced by a constant-product pool.

The owner maps option terms to oTokens. The adapter owns pricing: the
premium is the pool's native input for the oToken amount, and a purchase
swaps exactly that on the exchange, refunding any over-payment.
"""

from __future__ import annotations

from typing import final

from optadapt.adapters._validation import check_no_residual, insufficient_funds, unknown_option
from optadapt.adapters.events import Purchased
from optadapt.adapters.exercise import ExerciseEngine
from optadapt.adapters.facade import AdapterCore
from optadapt.adapters.quoting import ConstantProductPremium
from optadapt.adapters.resolver import RegistryResolver
from optadapt.adapters.shorts import ShortPositionManager
from optadapt.core.errors import AdapterError, UnauthorizedError
from optadapt.core.result import Err, Ok
from optadapt.core.scaling import WAD_DECIMALS, scale_amount
from optadapt.core.types import NATIVE, Address
from optadapt.instrument.orders import SwapOrder
from optadapt.instrument.terms import OptionTerms, OptionToken, Position
from optadapt.infra.config import TOPIC_PURCHASES, LegacyConfig
from optadapt.infra.protocols import (
    Clock,
    ConstantProductExchange,
    Controller,
    EventBus,
    Journal,
    PriceOracle,
    TokenBank,
    WrappedNative,
)


@final
class LegacyAdapter:
    def __init__(
        self,
        *,
        address: Address,
        config: LegacyConfig,
        bank: TokenBank,
        clock: Clock,
        journal: Journal,
        controller: Controller,
        oracle: PriceOracle,
        exchange: ConstantProductExchange,
        wrapped_native: WrappedNative,
        bus: EventBus | None = None,
    ) -> None:
        if wrapped_native.address != config.weth:
            raise TypeError("LegacyConfig.weth must be the wrapped native token's address")
        self._address = address
        self._config = config
        self._bank = bank
        self._exchange = exchange
        self._registry = RegistryResolver(config.owner, bank)
        self._quoter = ConstantProductPremium(exchange, clock)
        self._core = AdapterCore(
            journal=journal,
            resolver=self._registry,
            engine=ExerciseEngine(
                adapter=address,
                bank=bank,
                clock=clock,
                controller=controller,
                oracle=oracle,
                resolver=self._registry,
                wrapped_native=wrapped_native,
                policy=config.zero_profit_policy,
                basis=config.call_payout_basis,
            ),
            shorts=ShortPositionManager(
                adapter=address,
                bank=bank,
                controller=controller,
                resolver=self._registry,
                wrapped_native=wrapped_native,
                min_collateral=config.min_collateral,
            ),
            bus=bus,
        )

    @property
    def address(self) -> Address:
        return self._address

    @property
    def owner(self) -> Address:
        return self._config.owner

    def protocol_name(self) -> str:
        return self._config.protocol_name

    def non_fungible(self) -> bool:
        return False

    # -- owner configuration --

    def set_otoken_with_terms(
        self, caller: Address, terms: OptionTerms, otoken: Address,
    ) -> Ok[None] | Err[UnauthorizedError]:
        return self._registry.set_otoken_with_terms(caller, terms, otoken)

    # -- uniform interface --

    def lookup_otoken(self, terms: OptionTerms) -> Ok[Address] | Err[AdapterError]:
        return self._core.lookup_otoken(terms)

    def _token(self, terms: OptionTerms) -> Ok[OptionToken] | Err[AdapterError]:
        match self._core.lookup_otoken(terms):
            case Err() as e:
                return e
            case Ok(otoken):
                pass
        token = self._core.token_details(otoken)
        if token is None:
            return unknown_option("adapters.legacy.LegacyAdapter._token", terms.terms_hash())
        return Ok(token)

    def premium(self, terms: OptionTerms, amount: int) -> Ok[int] | Err[AdapterError]:
        return self._token(terms).and_then(lambda token: self._quoter.quote_premium(token, amount))

    def purchase(
        self,
        caller: Address,
        terms: OptionTerms,
        amount: int,
        funds: int,
        order: SwapOrder | None = None,  # noqa: ARG002
    ) -> Ok[Position] | Err[AdapterError]:
        """Buy ``amount`` on the exchange. ``funds`` above the premium are refunded."""
        source = "adapters.legacy.LegacyAdapter.purchase"

        def operation() -> Ok[Position] | Err[AdapterError]:
            match self._token(terms):
                case Err() as e:
                    return e
                case Ok(token):
                    pass
            match self._quoter.quote_premium(token, amount):
                case Err() as e:
                    return e
                case Ok(cost):
                    pass
            if funds < cost:
                return insufficient_funds(source, cost, funds, "Value does not cover cost.")
            match scale_amount(amount, WAD_DECIMALS, token.decimals):
                case Err() as e:
                    return e
                case Ok(amount_out):
                    pass

            match self._bank.transfer(NATIVE, caller, self._address, funds):
                case Err() as e:
                    return e
                case Ok(_):
                    pass
            spent = 0
            if amount_out > 0:
                match self._exchange.swap_native_for_exact_tokens(
                    token.identity, amount_out, self._address, self._address, cost,
                ):
                    case Err() as e:
                        return e
                    case Ok(spent):
                        pass
            match self._bank.transfer(token.identity, self._address, caller, amount_out):
                case Err() as e:
                    return e
                case Ok(_):
                    pass
            match self._bank.transfer(NATIVE, self._address, caller, funds - spent):
                case Err() as e:
                    return e
                case Ok(_):
                    pass
            match check_no_residual(self._bank, self._address, (token.identity, NATIVE), source):
                case Err() as e:
                    return e
                case Ok(_):
                    pass

            event = Purchased(
                caller=caller,
                protocol_name=self._config.protocol_name,
                otoken=token.identity,
                underlying=terms.underlying,
                strike_asset=terms.strike_asset,
                expiry=terms.expiry,
                strike_price=terms.strike_price,
                option_type=terms.option_type,
                amount=amount_out,
                premium=spent,
                option_id=0,
            )
            position = Position(holder=caller, otoken=token.identity, option_id=0, amount=amount_out)
            return self._core.publish(TOPIC_PURCHASES, event, position)

        return self._core.run(operation)

    def exercise_profit(
        self, otoken: Address, option_id: int, amount: int,
    ) -> Ok[int] | Err[AdapterError]:
        return self._core.exercise_profit(otoken, option_id, amount)

    def can_exercise(self, otoken: Address, option_id: int, amount: int) -> bool:
        return self._core.can_exercise(otoken, option_id, amount)

    def exercise(
        self, caller: Address, otoken: Address, option_id: int, amount: int, recipient: Address,
    ) -> Ok[int] | Err[AdapterError]:
        return self._core.exercise(caller, otoken, option_id, amount, recipient)

    def create_short(
        self, caller: Address, terms: OptionTerms, collateral_amount: int,
    ) -> Ok[int] | Err[AdapterError]:
        return self._core.create_short(caller, terms, collateral_amount)
