"""Tests for optadapt.infra.atomic: revert on Err and on exceptions."""

from __future__ import annotations

import pytest

from optadapt.core.result import Err, Ok, unwrap
from optadapt.core.types import NATIVE
from optadapt.infra.atomic import atomically
from world import ADAPTER, USER, World


class TestAtomically:
    def test_ok_keeps_effects(self, world: World) -> None:
        def op() -> Ok[int] | Err[str]:
            unwrap(world.chain.transfer(NATIVE, USER, ADAPTER, 5))
            return Ok(5)

        assert atomically(world.chain, op) == Ok(5)
        assert world.balance(ADAPTER, NATIVE) == 5

    def test_err_reverts_balances_and_vaults(self, world: World) -> None:
        def op() -> Ok[int] | Err[str]:
            unwrap(world.chain.transfer(NATIVE, USER, ADAPTER, 5))
            unwrap(world.controller.open_vault(ADAPTER))
            return Err("late failure")

        assert atomically(world.chain, op) == Err("late failure")
        assert world.balance(ADAPTER, NATIVE) == 0
        assert world.controller.vault_count(ADAPTER) == 0

    def test_exception_reverts_and_propagates(self, world: World) -> None:
        def op() -> Ok[int] | Err[str]:
            unwrap(world.chain.transfer(NATIVE, USER, ADAPTER, 5))
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            atomically(world.chain, op)
        assert world.balance(ADAPTER, NATIVE) == 0
