"""Collateralized short positions (vaults) at the issuing protocol.

The adapter is the nominal vault owner. Effects happen in a fixed order:
pull collateral, open vault, deposit, mint into adapter custody, forward
the minted oTokens to the caller. The vault id comes from the controller;
this component only returns it.
"""

from __future__ import annotations

from typing import final

from optadapt.adapters._validation import check_no_residual, invalid_option
from optadapt.adapters.resolver import TermsResolver
from optadapt.core.errors import AdapterError, CollateralTooSmallError, UnknownOptionError
from optadapt.core.result import Err, Ok
from optadapt.core.types import NATIVE, Address, FrozenMap, UtcDatetime
from optadapt.instrument.payoff import minted_amount
from optadapt.instrument.terms import OptionTerms, Vault
from optadapt.infra.protocols import Controller, TokenBank, WrappedNative

__all__ = ["ShortPositionManager", "minted_amount"]


def _too_small(source: str, minimum: int, actual: int) -> Err[CollateralTooSmallError]:
    return Err(CollateralTooSmallError(
        message=f"Must deposit at least {minimum} collateral",
        code="COLLATERAL_TOO_SMALL",
        timestamp=UtcDatetime.now(),
        source=source,
        minimum=minimum,
        actual=actual,
    ))


@final
class ShortPositionManager:
    def __init__(
        self,
        *,
        adapter: Address,
        bank: TokenBank,
        controller: Controller,
        resolver: TermsResolver,
        wrapped_native: WrappedNative,
        min_collateral: FrozenMap[Address, int],
    ) -> None:
        self._adapter = adapter
        self._bank = bank
        self._controller = controller
        self._resolver = resolver
        self._wrapped = wrapped_native
        self._min_collateral = min_collateral

    def create_short(
        self, caller: Address, terms: OptionTerms, collateral_amount: int,
    ) -> Ok[Vault] | Err[AdapterError]:
        """Write ``terms`` against ``collateral_amount``; minted oTokens go to ``caller``.

        Calls backed by the wrapped native asset may be funded in native
        currency by passing the zero address as the terms' collateral.
        """
        source = "adapters.shorts.ShortPositionManager.create_short"
        match self._resolver.resolve_token(terms):
            case Err(UnknownOptionError()):
                return invalid_option(source, terms.terms_hash())
            case Err() as e:
                return e
            case Ok(otoken):
                pass
        token = self._resolver.token_details(otoken)
        if token is None:
            return invalid_option(source, terms.terms_hash())

        collateral = token.terms.collateral_asset
        if collateral.is_zero:
            collateral = self._wrapped.address
        floor = max(self._min_collateral.get(collateral, 0) or 0, 1)
        if collateral_amount < floor:
            return _too_small(source, floor, collateral_amount)
        match minted_amount(
            token.terms, collateral_amount, self._bank.decimals(collateral), token.decimals,
        ):
            case Err() as e:
                return e
            case Ok(to_mint):
                pass
        if to_mint == 0:
            return _too_small(source, floor, collateral_amount)

        # fund
        if collateral == self._wrapped.address and terms.collateral_asset.is_zero:
            match self._bank.transfer(NATIVE, caller, self._adapter, collateral_amount):
                case Err() as e:
                    return e
                case Ok(_):
                    pass
            match self._wrapped.wrap(self._adapter, collateral_amount):
                case Err() as e:
                    return e
                case Ok(_):
                    pass
        else:
            match self._bank.transfer(collateral, caller, self._adapter, collateral_amount):
                case Err() as e:
                    return e
                case Ok(_):
                    pass

        match self._controller.open_vault(self._adapter):
            case Err() as e:
                return e
            case Ok(vault_id):
                pass
        match self._controller.deposit_collateral(self._adapter, vault_id, collateral, collateral_amount):
            case Err() as e:
                return e
            case Ok(_):
                pass
        match self._controller.mint_otoken(self._adapter, vault_id, otoken, to_mint, self._adapter):
            case Err() as e:
                return e
            case Ok(_):
                pass
        match self._bank.transfer(otoken, self._adapter, caller, to_mint):
            case Err() as e:
                return e
            case Ok(_):
                pass

        match check_no_residual(self._bank, self._adapter, (otoken, collateral), source):
            case Err() as e:
                return e
            case Ok(_):
                pass
        return self._controller.get_vault(self._adapter, vault_id)
