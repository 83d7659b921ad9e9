"""Exercise of a held oToken position.

Position phases: UNEXERCISABLE until expiry, EXERCISABLE from expiry on,
EXERCISED once the position has been settled away. Amounts at this
interface are 18-decimal; they are truncated to the oToken's precision
before any computation so that the quoted profit and the settled payout
agree to the unit.
"""

from __future__ import annotations

from typing import final

from optadapt.adapters._validation import check_no_residual, not_yet_expired
from optadapt.adapters.resolver import TermsResolver
from optadapt.core.errors import AdapterError, UnknownOptionError, ZeroProfitError
from optadapt.core.result import Err, Ok
from optadapt.core.scaling import WAD_DECIMALS, from_wad, scale_amount, to_wad
from optadapt.core.types import NATIVE, Address, UtcDatetime
from optadapt.instrument.payoff import CallPayoutBasis, compute_exercise_profit
from optadapt.instrument.terms import ExercisePhase, OptionTerms, OptionToken
from optadapt.infra.config import ZeroProfitPolicy
from optadapt.infra.protocols import Clock, Controller, PriceOracle, TokenBank, WrappedNative

# Re-exported: the pure payoff is part of this component's surface.
__all__ = ["ExerciseEngine", "compute_exercise_profit", "exercise_phase"]


def exercise_phase(terms: OptionTerms, now: int, amount_held: int | None = None) -> ExercisePhase:
    """Phase of a position in ``terms`` at block time ``now``.

    ``amount_held`` of zero after expiry means the position was settled.
    """
    if now < terms.expiry:
        return ExercisePhase.UNEXERCISABLE
    if amount_held == 0:
        return ExercisePhase.EXERCISED
    return ExercisePhase.EXERCISABLE


@final
class ExerciseEngine:
    """Computes exercise profit and drives settlement at the controller."""

    def __init__(
        self,
        *,
        adapter: Address,
        bank: TokenBank,
        clock: Clock,
        controller: Controller,
        oracle: PriceOracle,
        resolver: TermsResolver,
        wrapped_native: WrappedNative,
        policy: ZeroProfitPolicy,
        basis: CallPayoutBasis = CallPayoutBasis.STRIKE,
    ) -> None:
        self._adapter = adapter
        self._bank = bank
        self._clock = clock
        self._controller = controller
        self._oracle = oracle
        self._resolver = resolver
        self._wrapped = wrapped_native
        self._policy = policy
        self._basis = basis

    def _normalize(self, asset: Address) -> Address:
        return self._wrapped.address if asset.is_zero else asset

    def _token(self, otoken: Address, source: str) -> Ok[OptionToken] | Err[UnknownOptionError]:
        token = self._resolver.token_details(otoken)
        if token is None:
            return Err(UnknownOptionError(
                message=f"Unknown oToken {otoken}",
                code="UNKNOWN_OPTION",
                timestamp=UtcDatetime.now(),
                source=source,
                terms_hash="",
            ))
        return Ok(token)

    def _settlement_price(self, terms: OptionTerms) -> Ok[int] | Err[AdapterError]:
        """Finalized expiry price if available, else spot; 18 decimals."""
        asset = self._normalize(terms.underlying)
        match self._oracle.get_expiry_price(asset, terms.expiry):
            case Ok(price):
                pass
            case Err(_):
                match self._oracle.get_price(asset):
                    case Err() as e:
                        return e
                    case Ok(price):
                        pass
        return scale_amount(price, self._oracle.decimals, WAD_DECIMALS)

    def _profit(self, token: OptionToken, amount: int) -> Ok[tuple[int, int]] | Err[AdapterError]:
        """(oToken units, profit in collateral units) for an 18-decimal amount."""
        match from_wad(amount, token.decimals):
            case Err() as e:
                return e
            case Ok(units):
                pass
        match to_wad(units, token.decimals):
            case Err() as e:
                return e
            case Ok(amount_wad):
                pass
        match self._settlement_price(token.terms):
            case Err() as e:
                return e
            case Ok(price):
                pass
        collateral = self._normalize(token.terms.collateral_asset)
        match compute_exercise_profit(
            token.terms, amount_wad, price, self._bank.decimals(collateral), self._basis,
        ):
            case Err() as e:
                return e
            case Ok(profit):
                return Ok((units, profit))

    def exercise_profit(
        self, otoken: Address, option_id: int, amount: int,  # noqa: ARG002
    ) -> Ok[int] | Err[AdapterError]:
        match self._token(otoken, "adapters.exercise.ExerciseEngine.exercise_profit"):
            case Err() as e:
                return e
            case Ok(token):
                pass
        return self._profit(token, amount).map(lambda pair: pair[1])

    def can_exercise(self, otoken: Address, option_id: int, amount: int) -> bool:
        """False before expiry whatever the moneyness, and until the expiry
        price is finalized; else profit > 0."""
        token = self._resolver.token_details(otoken)
        if token is None or self._clock.now() < token.terms.expiry:
            return False
        asset = self._normalize(token.terms.underlying)
        if isinstance(self._oracle.get_expiry_price(asset, token.terms.expiry), Err):
            return False
        match self.exercise_profit(otoken, option_id, amount):
            case Ok(profit):
                return profit > 0
            case Err(_):
                return False
        return False

    def exercise(
        self,
        caller: Address,
        otoken: Address,
        option_id: int,  # noqa: ARG002
        amount: int,
        recipient: Address,
    ) -> Ok[int] | Err[AdapterError]:
        """Settle ``amount`` of the caller's oTokens, pay the profit to ``recipient``.

        Not atomic by itself; the adapter facade runs it under a journal.
        """
        source = "adapters.exercise.ExerciseEngine.exercise"
        match self._token(otoken, source):
            case Err() as e:
                return e
            case Ok(token):
                pass
        now = self._clock.now()
        if now < token.terms.expiry:
            return not_yet_expired(source, token.terms.expiry, now)
        match self._profit(token, amount):
            case Err() as e:
                return e
            case Ok((units, profit)):
                pass
        if profit == 0:
            if self._policy is ZeroProfitPolicy.NOOP:
                return Ok(0)
            return Err(ZeroProfitError(
                message="Not profitable to exercise",
                code="ZERO_PROFIT",
                timestamp=UtcDatetime.now(),
                source=source,
            ))

        match self._bank.transfer(otoken, caller, self._adapter, units):
            case Err() as e:
                return e
            case Ok(_):
                pass
        match self._controller.settle(self._adapter, otoken, units):
            case Err() as e:
                return e
            case Ok(payout):
                pass

        collateral = self._normalize(token.terms.collateral_asset)
        pay_asset = collateral
        if collateral == self._wrapped.address:
            match self._wrapped.unwrap(self._adapter, payout):
                case Err() as e:
                    return e
                case Ok(_):
                    pay_asset = NATIVE
        match self._bank.transfer(pay_asset, self._adapter, recipient, payout):
            case Err() as e:
                return e
            case Ok(_):
                pass
        match check_no_residual(self._bank, self._adapter, (otoken, collateral, pay_asset), source):
            case Err() as e:
                return e
            case Ok(_):
                return Ok(payout)
