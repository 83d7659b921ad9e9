"""Payoff arithmetic shared by the adapters and the in-memory protocol.

Pure functions over 18-decimal fixed point. Results are truncated toward
zero and rescaled to the asset they are paid in.
"""

from __future__ import annotations

from enum import Enum

from optadapt.core.errors import ArithmeticOverflowError
from optadapt.core.result import Err, Ok
from optadapt.core.scaling import WAD_DECIMALS, checked_mul, from_wad, scale_amount, wdiv
from optadapt.instrument.terms import OptionTerms, OptionType


class CallPayoutBasis(Enum):
    """Denominator of the call payout when paid in underlying collateral.

    STRIKE:     (S - K) * amount / K
    SETTLEMENT: (S - K) * amount / S  (cash value of the spread in underlying)
    """

    STRIKE = "STRIKE"
    SETTLEMENT = "SETTLEMENT"


def compute_exercise_profit(
    terms: OptionTerms,
    amount: int,
    settlement_price: int,
    collateral_decimals: int,
    basis: CallPayoutBasis = CallPayoutBasis.STRIKE,
) -> Ok[int] | Err[ArithmeticOverflowError]:
    """Exercise profit of ``amount`` options (18 decimals) at ``settlement_price``.

    Calls pay in collateral (underlying) units; puts pay in strike-asset
    units. Either way the result is expressed in ``collateral_decimals``.
    Out-of-the-money positions pay exactly zero.
    """
    strike = terms.strike_price
    if terms.option_type is OptionType.CALL:
        if settlement_price <= strike:
            return Ok(0)
        denominator = strike if basis is CallPayoutBasis.STRIKE else settlement_price
        match checked_mul(settlement_price - strike, amount):
            case Err() as e:
                return e
            case Ok(numerator):
                profit_wad = numerator // denominator
    else:
        if settlement_price >= strike:
            return Ok(0)
        match checked_mul(strike - settlement_price, amount):
            case Err() as e:
                return e
            case Ok(numerator):
                profit_wad = numerator // 10**WAD_DECIMALS
    return from_wad(profit_wad, collateral_decimals)


def minted_amount(
    terms: OptionTerms,
    collateral_amount: int,
    collateral_decimals: int,
    otoken_decimals: int,
) -> Ok[int] | Err[ArithmeticOverflowError]:
    """oTokens a vault with ``collateral_amount`` can back. Floor-truncated.

    Call: one oToken per unit of underlying collateral.
    Put:  collateral / strike oTokens, collateral in strike-asset units.
    """
    if terms.option_type is OptionType.CALL:
        return scale_amount(collateral_amount, collateral_decimals, otoken_decimals)
    match wdiv(collateral_amount, terms.strike_price):
        case Err() as e:
            return e
        case Ok(options):
            return scale_amount(options, collateral_decimals, otoken_decimals)
