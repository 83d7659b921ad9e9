"""Option terms -> oToken identity.

Two addressing schemes:

* FactoryResolver asks the issuing protocol's read-only factory. Terms are
  normalized the way the protocol indexes them first: native underlying
  becomes the wrapped native asset, the collateral follows the option type
  and the strike is rescaled to the factory's precision.
* RegistryResolver keeps an owner-maintained table keyed by terms hash.

Resolution is pure and deterministic. Nothing is cached here; callers may
cache by ``terms.terms_hash()``.
"""

from __future__ import annotations

from typing import Protocol, final, runtime_checkable

from optadapt.adapters._validation import unauthorized, unknown_option
from optadapt.core.errors import ArithmeticOverflowError, UnauthorizedError, UnknownOptionError
from optadapt.core.result import Err, Ok
from optadapt.core.scaling import WAD_DECIMALS, scale_amount
from optadapt.core.types import Address
from optadapt.instrument.terms import OptionTerms, OptionToken
from optadapt.infra.protocols import OTokenFactory, TokenBank


@runtime_checkable
class TermsResolver(Protocol):
    def resolve_token(
        self, terms: OptionTerms,
    ) -> Ok[Address] | Err[UnknownOptionError | ArithmeticOverflowError]: ...

    def token_details(self, otoken: Address) -> OptionToken | None: ...


@final
class FactoryResolver:
    """Resolves against an OTokenFactory."""

    def __init__(self, factory: OTokenFactory, weth: Address, strike_decimals: int = 8) -> None:
        self._factory = factory
        self._weth = weth
        self._strike_decimals = strike_decimals

    def resolve_token(
        self, terms: OptionTerms,
    ) -> Ok[Address] | Err[UnknownOptionError | ArithmeticOverflowError]:
        underlying = self._weth if terms.underlying.is_zero else terms.underlying
        # puts are collateralized in the strike asset, calls in the underlying
        collateral = terms.strike_asset if terms.is_put else underlying
        match scale_amount(terms.strike_price, WAD_DECIMALS, self._strike_decimals):
            case Err() as e:
                return e
            case Ok(strike):
                pass
        otoken = self._factory.get_otoken(
            underlying, terms.strike_asset, collateral, strike, terms.expiry, terms.is_put,
        )
        if otoken is None:
            return unknown_option("adapters.resolver.FactoryResolver.resolve_token", terms.terms_hash())
        return Ok(otoken)

    def token_details(self, otoken: Address) -> OptionToken | None:
        return self._factory.get_details(otoken)


@final
class RegistryResolver:
    """Owner-maintained terms -> oToken table."""

    def __init__(self, owner: Address, bank: TokenBank) -> None:
        self._owner = owner
        self._bank = bank
        self._by_hash: dict[str, Address] = {}
        self._terms: dict[Address, OptionTerms] = {}

    @property
    def owner(self) -> Address:
        return self._owner

    def set_otoken_with_terms(
        self, caller: Address, terms: OptionTerms, otoken: Address,
    ) -> Ok[None] | Err[UnauthorizedError]:
        if caller != self._owner:
            return unauthorized("adapters.resolver.RegistryResolver.set_otoken_with_terms", caller)
        self._by_hash[terms.terms_hash()] = otoken
        self._terms[otoken] = terms
        return Ok(None)

    def resolve_token(
        self, terms: OptionTerms,
    ) -> Ok[Address] | Err[UnknownOptionError | ArithmeticOverflowError]:
        terms_hash = terms.terms_hash()
        otoken = self._by_hash.get(terms_hash)
        if otoken is None:
            return unknown_option("adapters.resolver.RegistryResolver.resolve_token", terms_hash)
        return Ok(otoken)

    def token_details(self, otoken: Address) -> OptionToken | None:
        terms = self._terms.get(otoken)
        if terms is None:
            return None
        return OptionToken(identity=otoken, terms=terms, decimals=self._bank.decimals(otoken))
