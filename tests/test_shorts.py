"""Tests for optadapt.adapters.shorts: collateralized vault creation."""

from __future__ import annotations

from dataclasses import replace

from optadapt.adapters.resolver import FactoryResolver
from optadapt.adapters.shorts import ShortPositionManager
from optadapt.core.errors import CollateralTooSmallError, InvalidOptionError
from optadapt.core.result import Err, unwrap
from optadapt.core.scaling import WAD
from optadapt.core.types import NATIVE, FrozenMap
from optadapt.infra.config import GAMMA_MIN_WETH_COLLATERAL
from world import ADAPTER, MARGIN_POOL, USDC, USER, WETH, World, call_terms, put_terms


def _manager(world: World, floor: int = GAMMA_MIN_WETH_COLLATERAL) -> ShortPositionManager:
    return ShortPositionManager(
        adapter=ADAPTER,
        bank=world.chain,
        controller=world.controller,
        resolver=FactoryResolver(world.factory, WETH),
        wrapped_native=world.weth,
        min_collateral=unwrap(FrozenMap.create({WETH: floor})),
    )


class TestCreateShort:
    def test_call_from_native(self, world: World) -> None:
        vault = unwrap(_manager(world).create_short(USER, call_terms(), WAD))
        assert vault.vault_id == 1
        assert vault.owner == ADAPTER
        assert vault.collateral_asset == WETH
        assert vault.collateral_amount == WAD
        assert vault.minted_amount == 10**8
        assert world.balance(USER, world.call_otoken) == 10**8
        assert world.balance(USER, NATIVE) == 99 * WAD
        assert world.balance(MARGIN_POOL, WETH) == WAD

    def test_call_from_wrapped(self, world: World) -> None:
        world.fund(WETH, USER, WAD)
        terms = call_terms()
        vault = unwrap(_manager(world).create_short(USER, replace(terms, collateral_asset=WETH), WAD))
        assert vault.minted_amount == 10**8
        assert world.balance(USER, WETH) == 0
        assert world.balance(USER, NATIVE) == 100 * WAD

    def test_put_from_strike_asset(self, world: World) -> None:
        world.fund(USDC, USER, 10**9)
        vault = unwrap(_manager(world).create_short(USER, put_terms(), 10**9))
        assert vault.collateral_asset == USDC
        assert vault.minted_amount == 125_000_000
        assert world.balance(USER, world.put_otoken) == 125_000_000

    def test_vault_ids_increase(self, world: World) -> None:
        manager = _manager(world)
        assert unwrap(manager.create_short(USER, call_terms(), WAD)).vault_id == 1
        assert unwrap(manager.create_short(USER, call_terms(), WAD)).vault_id == 2

    def test_below_floor(self, world: World) -> None:
        result = _manager(world).create_short(USER, call_terms(), GAMMA_MIN_WETH_COLLATERAL - 1)
        assert isinstance(result, Err)
        assert isinstance(result.error, CollateralTooSmallError)
        assert result.error.message == f"Must deposit at least {GAMMA_MIN_WETH_COLLATERAL} collateral"
        assert world.controller.vault_count(ADAPTER) == 0

    def test_exactly_floor_accepted(self, world: World) -> None:
        vault = unwrap(_manager(world, floor=WAD).create_short(USER, call_terms(), WAD))
        assert vault.collateral_amount == WAD
        assert vault.minted_amount == 10**8

    def test_one_below_configured_floor(self, world: World) -> None:
        result = _manager(world, floor=WAD).create_short(USER, call_terms(), WAD - 1)
        assert isinstance(result, Err)
        assert isinstance(result.error, CollateralTooSmallError)
        assert result.error.minimum == WAD
        assert result.error.message == f"Must deposit at least {WAD} collateral"

    def test_amount_that_mints_nothing(self, world: World) -> None:
        world.fund(USDC, USER, 10**9)
        result = _manager(world).create_short(USER, put_terms(), 1)
        assert isinstance(result, Err)
        assert isinstance(result.error, CollateralTooSmallError)
        assert result.error.minimum == 1

    def test_unissued_terms(self, world: World) -> None:
        result = _manager(world).create_short(USER, call_terms(strike=2000 * WAD), WAD)
        assert isinstance(result, Err)
        assert isinstance(result.error, InvalidOptionError)
        assert result.error.message == "Invalid oToken"
