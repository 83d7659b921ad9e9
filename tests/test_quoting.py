"""Tests for optadapt.adapters.quoting: external and constant-product premiums."""

from __future__ import annotations

from optadapt.adapters.quoting import ConstantProductPremium, ExternalPremium, PremiumQuoter
from optadapt.core.errors import OptionExpiredError
from optadapt.core.result import Err, Ok, unwrap
from optadapt.core.scaling import WAD
from optadapt.instrument.terms import OptionToken
from world import EXPIRY, LP, World, call_terms


def _token(world: World) -> OptionToken:
    return OptionToken(identity=world.call_otoken, terms=call_terms(), decimals=8)


def _with_liquidity(world: World) -> ConstantProductPremium:
    world.fund(world.call_otoken, LP, 50 * 10**8)
    unwrap(world.exchange.add_liquidity(LP, world.call_otoken, 50 * 10**8, 100 * WAD))
    return ConstantProductPremium(world.exchange, world.chain)


class TestExternalPremium:
    def test_sentinel_zero(self, world: World) -> None:
        quoter = ExternalPremium()
        assert isinstance(quoter, PremiumQuoter)
        assert quoter.quote_premium(_token(world), WAD) == Ok(0)


class TestConstantProductPremium:
    def test_pool_price(self, world: World) -> None:
        quoter = _with_liquidity(world)
        native, tokens = world.exchange.reserves(world.call_otoken)
        expected = native * 10**8 * 1000 // ((tokens - 10**8) * 997) + 1
        assert quoter.quote_premium(_token(world), WAD) == Ok(expected)

    def test_grows_with_amount(self, world: World) -> None:
        quoter = _with_liquidity(world)
        one = unwrap(quoter.quote_premium(_token(world), WAD))
        two = unwrap(quoter.quote_premium(_token(world), 2 * WAD))
        assert two > 2 * one - 2

    def test_dust_amount_is_free(self, world: World) -> None:
        quoter = _with_liquidity(world)
        assert quoter.quote_premium(_token(world), 10**10 - 1) == Ok(0)

    def test_expired(self, world: World) -> None:
        quoter = _with_liquidity(world)
        world.chain.set_time(EXPIRY)
        result = quoter.quote_premium(_token(world), WAD)
        assert isinstance(result, Err)
        assert isinstance(result.error, OptionExpiredError)

    def test_no_pool(self, world: World) -> None:
        quoter = ConstantProductPremium(world.exchange, world.chain)
        assert isinstance(quoter.quote_premium(_token(world), WAD), Err)
