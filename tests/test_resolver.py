"""Tests for optadapt.adapters.resolver: factory and registry addressing."""

from __future__ import annotations

from dataclasses import replace

from optadapt.adapters.resolver import FactoryResolver, RegistryResolver, TermsResolver
from optadapt.core.errors import UnauthorizedError, UnknownOptionError
from optadapt.core.result import Err, Ok, unwrap
from optadapt.core.scaling import WAD
from optadapt.core.types import NATIVE
from world import OWNER, USDC, USER, WETH, World, addr, call_terms, put_terms


def _factory(world: World) -> FactoryResolver:
    return FactoryResolver(world.factory, WETH)


class TestFactoryResolver:
    def test_is_a_terms_resolver(self, world: World) -> None:
        assert isinstance(_factory(world), TermsResolver)

    def test_native_underlying_maps_to_wrapped(self, world: World) -> None:
        assert _factory(world).resolve_token(call_terms()) == Ok(world.call_otoken)

    def test_explicit_wrapped_underlying(self, world: World) -> None:
        terms = replace(call_terms(), underlying=WETH, collateral_asset=WETH)
        assert _factory(world).resolve_token(terms) == Ok(world.call_otoken)

    def test_put_collateral_follows_strike_asset(self, world: World) -> None:
        # the terms' own collateral is ignored for addressing
        terms = replace(put_terms(), collateral_asset=NATIVE)
        assert _factory(world).resolve_token(terms) == Ok(world.put_otoken)

    def test_deterministic(self, world: World) -> None:
        resolver = _factory(world)
        assert resolver.resolve_token(put_terms()) == resolver.resolve_token(put_terms())

    def test_unknown_strike(self, world: World) -> None:
        result = _factory(world).resolve_token(call_terms(strike=1000 * WAD))
        assert isinstance(result, Err)
        assert isinstance(result.error, UnknownOptionError)
        assert result.error.terms_hash == call_terms(strike=1000 * WAD).terms_hash()

    def test_strike_truncated_to_factory_precision(self, world: World) -> None:
        result = _factory(world).resolve_token(call_terms(strike=960 * WAD + 1))
        assert result == _factory(world).resolve_token(call_terms())

    def test_token_details(self, world: World) -> None:
        details = _factory(world).token_details(world.call_otoken)
        assert details is not None
        assert details.terms.underlying == WETH
        assert _factory(world).token_details(addr(0x77)) is None


class TestRegistryResolver:
    def test_set_and_resolve(self, world: World) -> None:
        registry = RegistryResolver(OWNER, world.chain)
        unwrap(registry.set_otoken_with_terms(OWNER, call_terms(), world.call_otoken))
        assert registry.resolve_token(call_terms()) == Ok(world.call_otoken)

    def test_unregistered(self, world: World) -> None:
        result = RegistryResolver(OWNER, world.chain).resolve_token(put_terms())
        assert isinstance(result, Err)
        assert isinstance(result.error, UnknownOptionError)

    def test_only_owner_sets_terms(self, world: World) -> None:
        registry = RegistryResolver(OWNER, world.chain)
        result = registry.set_otoken_with_terms(USER, call_terms(), world.call_otoken)
        assert isinstance(result, Err)
        assert isinstance(result.error, UnauthorizedError)
        assert result.error.message == "only owner"
        assert isinstance(registry.resolve_token(call_terms()), Err)

    def test_details_keep_registered_terms(self, world: World) -> None:
        registry = RegistryResolver(OWNER, world.chain)
        unwrap(registry.set_otoken_with_terms(OWNER, put_terms(), world.put_otoken))
        details = registry.token_details(world.put_otoken)
        assert details is not None
        assert details.terms == put_terms()
        assert details.decimals == 8
        assert details.terms.strike_asset == USDC
