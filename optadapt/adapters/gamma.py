"""GammaAdapter: factory-addressed oTokens bought through an external venue.

Price discovery happens off-chain: ``premium`` is the sentinel 0 and a
purchase brings a SwapOrder quoted by the venue. The order sells either
wrapped native currency or one of the configured intermediate assets; an
intermediate is first bought with native currency on the exchange.

Purchase, in order: validate the order, take the caller's funds, acquire
the sell token, fill at the venue, check the delivered amount, forward
the oTokens, refund what was not spent, check the adapter holds nothing.
"""

from __future__ import annotations

from typing import final

from optadapt.adapters._validation import check_no_residual, order_mismatch, stale_order
from optadapt.adapters.events import Purchased
from optadapt.adapters.exercise import ExerciseEngine
from optadapt.adapters.facade import AdapterCore
from optadapt.adapters.quoting import ExternalPremium
from optadapt.adapters.resolver import FactoryResolver
from optadapt.adapters.shorts import ShortPositionManager
from optadapt.adapters.swap import validate_order
from optadapt.core.errors import AdapterError, SettlementError
from optadapt.core.result import Err, Ok
from optadapt.core.scaling import WAD_DECIMALS, scale_amount
from optadapt.core.types import NATIVE, Address, UtcDatetime
from optadapt.instrument.orders import SwapOrder
from optadapt.instrument.terms import OptionTerms, Position
from optadapt.infra.config import TOPIC_PURCHASES, GammaConfig
from optadapt.infra.protocols import (
    Clock,
    ConstantProductExchange,
    Controller,
    EventBus,
    Journal,
    OTokenFactory,
    PriceOracle,
    SwapVenue,
    TokenBank,
    WrappedNative,
)


@final
class GammaAdapter:
    def __init__(
        self,
        *,
        address: Address,
        config: GammaConfig,
        bank: TokenBank,
        clock: Clock,
        journal: Journal,
        factory: OTokenFactory,
        controller: Controller,
        oracle: PriceOracle,
        venue: SwapVenue,
        wrapped_native: WrappedNative,
        exchange: ConstantProductExchange | None = None,
        bus: EventBus | None = None,
    ) -> None:
        if wrapped_native.address != config.weth:
            raise TypeError("GammaConfig.weth must be the wrapped native token's address")
        self._address = address
        self._config = config
        self._bank = bank
        self._venue = venue
        self._wrapped = wrapped_native
        self._exchange = exchange
        self._quoter = ExternalPremium()
        resolver = FactoryResolver(factory, config.weth, config.otoken_decimals)
        self._core = AdapterCore(
            journal=journal,
            resolver=resolver,
            engine=ExerciseEngine(
                adapter=address,
                bank=bank,
                clock=clock,
                controller=controller,
                oracle=oracle,
                resolver=resolver,
                wrapped_native=wrapped_native,
                policy=config.zero_profit_policy,
                basis=config.call_payout_basis,
            ),
            shorts=ShortPositionManager(
                adapter=address,
                bank=bank,
                controller=controller,
                resolver=resolver,
                wrapped_native=wrapped_native,
                min_collateral=config.min_collateral,
            ),
            bus=bus,
        )

    @property
    def address(self) -> Address:
        return self._address

    def protocol_name(self) -> str:
        return self._config.protocol_name

    def non_fungible(self) -> bool:
        return False

    def lookup_otoken(self, terms: OptionTerms) -> Ok[Address] | Err[AdapterError]:
        return self._core.lookup_otoken(terms)

    def premium(self, terms: OptionTerms, amount: int) -> Ok[int] | Err[AdapterError]:
        match self._core.lookup_otoken(terms):
            case Err() as e:
                return e
            case Ok(otoken):
                pass
        token = self._core.token_details(otoken)
        if token is None:
            return Ok(0)
        return self._quoter.quote_premium(token, amount)

    def _sell_cost(self, order: SwapOrder) -> Ok[int | None] | Err[AdapterError]:
        """Native cost of the order's sell token; None when it is wrapped native."""
        if order.sell_token == self._config.weth:
            return Ok(None)
        if order.sell_token in self._config.intermediate_assets and self._exchange is not None:
            return self._exchange.quote_native_for_exact_tokens(order.sell_token, order.sell_amount)
        # let validate_order report the mismatch
        return Ok(None)

    def _allowed_sell_tokens(self) -> frozenset[Address]:
        if self._exchange is None:
            return frozenset({self._config.weth})
        return frozenset({self._config.weth}) | self._config.intermediate_assets

    def purchase(
        self,
        caller: Address,
        terms: OptionTerms,
        amount: int,
        funds: int,
        order: SwapOrder | None = None,
    ) -> Ok[Position] | Err[AdapterError]:
        """Buy through the venue with ``order``; ``amount`` may not exceed its buy amount."""
        source = "adapters.gamma.GammaAdapter.purchase"

        def operation() -> Ok[Position] | Err[AdapterError]:
            match self._core.lookup_otoken(terms):
                case Err() as e:
                    return e
                case Ok(otoken):
                    pass
            if order is None:
                return stale_order(source, "A swap order is required to purchase")
            match scale_amount(amount, WAD_DECIMALS, self._config.otoken_decimals):
                case Err() as e:
                    return e
                case Ok(wanted):
                    pass
            if wanted > order.buy_amount:
                return order_mismatch(source, "buy_amount", f">= {wanted}", str(order.buy_amount))
            match self._sell_cost(order):
                case Err() as e:
                    return e
                case Ok(sell_cost):
                    pass
            match validate_order(
                order, otoken, funds,
                allowed_sell_tokens=self._allowed_sell_tokens(),
                sell_cost=sell_cost,
            ):
                case Err() as e:
                    return e
                case Ok(_):
                    pass

            native_before = self._bank.balance_of(self._address, NATIVE)
            match self._bank.transfer(NATIVE, caller, self._address, funds):
                case Err() as e:
                    return e
                case Ok(_):
                    pass
            match self._acquire_sell_token(order, funds):
                case Err() as e:
                    return e
                case Ok(_):
                    pass

            held_before = self._bank.balance_of(self._address, otoken)
            match self._venue.fill(order, self._address, order.protocol_fee):
                case Err() as e:
                    return e
                case Ok(_):
                    pass
            received = self._bank.balance_of(self._address, otoken) - held_before
            if received < order.buy_amount:
                return Err(SettlementError(
                    message=f"Venue delivered {received}, order promised {order.buy_amount}",
                    code="SETTLEMENT_FAILED",
                    timestamp=UtcDatetime.now(),
                    source=source,
                    operation="fill",
                ))

            match self._bank.transfer(otoken, self._address, caller, received):
                case Err() as e:
                    return e
                case Ok(_):
                    pass
            refund = self._bank.balance_of(self._address, NATIVE) - native_before
            match self._bank.transfer(NATIVE, self._address, caller, refund):
                case Err() as e:
                    return e
                case Ok(_):
                    pass
            match check_no_residual(
                self._bank, self._address, (otoken, order.sell_token, self._config.weth), source,
            ):
                case Err() as e:
                    return e
                case Ok(_):
                    pass

            event = Purchased(
                caller=caller,
                protocol_name=self._config.protocol_name,
                otoken=otoken,
                underlying=terms.underlying,
                strike_asset=terms.strike_asset,
                expiry=terms.expiry,
                strike_price=terms.strike_price,
                option_type=terms.option_type,
                amount=received,
                premium=funds - refund,
                option_id=0,
            )
            position = Position(holder=caller, otoken=otoken, option_id=0, amount=received)
            return self._core.publish(TOPIC_PURCHASES, event, position)

        return self._core.run(operation)

    def _acquire_sell_token(self, order: SwapOrder, funds: int) -> Ok[None] | Err[AdapterError]:
        if order.sell_token == self._config.weth:
            return self._wrapped.wrap(self._address, order.sell_amount)
        if self._exchange is None:
            return order_mismatch(
                "adapters.gamma.GammaAdapter._acquire_sell_token",
                "sell_token", self._config.weth.value, order.sell_token.value,
            )
        match self._exchange.swap_native_for_exact_tokens(
            order.sell_token,
            order.sell_amount,
            self._address,
            self._address,
            funds - order.protocol_fee,
        ):
            case Err() as e:
                return e
            case Ok(_):
                return Ok(None)

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
