"""Integer fixed-point arithmetic across asset precisions.

Token amounts are plain ints in each asset's smallest unit (USDC 6
decimals, WBTC and Gamma oTokens 8, ETH/WETH 18). The canonical internal
precision is 18 decimals (WAD). Every result must fit an unsigned 256-bit
word; leaving that range is an ArithmeticOverflowError, never a silent wrap.

Downscaling truncates toward zero. Upscaling is exact.
"""

from __future__ import annotations

from optadapt.core.errors import ArithmeticOverflowError
from optadapt.core.result import Err, Ok
from optadapt.core.types import UtcDatetime

WAD_DECIMALS = 18
WAD = 10**WAD_DECIMALS
UINT256_MAX = 2**256 - 1


def _overflow(operation: str, message: str) -> Err[ArithmeticOverflowError]:
    return Err(ArithmeticOverflowError(
        message=message,
        code="OVERFLOW",
        timestamp=UtcDatetime.now(),
        source=f"core.scaling.{operation}",
        operation=operation,
    ))


def _in_range(value: int) -> bool:
    return 0 <= value <= UINT256_MAX


def scale_amount(
    amount: int, from_decimals: int, to_decimals: int,
) -> Ok[int] | Err[ArithmeticOverflowError]:
    """Rescale ``amount`` from one decimal precision to another.

    >>> scale_amount(10**18, 18, 8)
    Ok(value=100000000)
    """
    if from_decimals < 0 or to_decimals < 0:
        return _overflow("scale_amount", f"decimals must be >= 0, got {from_decimals} -> {to_decimals}")
    if not _in_range(amount):
        return _overflow("scale_amount", f"amount out of uint256 range: {amount}")
    if to_decimals == from_decimals:
        return Ok(amount)
    if to_decimals < from_decimals:
        return Ok(amount // 10 ** (from_decimals - to_decimals))
    scaled = amount * 10 ** (to_decimals - from_decimals)
    if scaled > UINT256_MAX:
        return _overflow(
            "scale_amount",
            f"upscaling {amount} from {from_decimals} to {to_decimals} decimals overflows",
        )
    return Ok(scaled)


def to_wad(amount: int, decimals: int) -> Ok[int] | Err[ArithmeticOverflowError]:
    return scale_amount(amount, decimals, WAD_DECIMALS)


def from_wad(amount: int, decimals: int) -> Ok[int] | Err[ArithmeticOverflowError]:
    return scale_amount(amount, WAD_DECIMALS, decimals)


def checked_mul(a: int, b: int) -> Ok[int] | Err[ArithmeticOverflowError]:
    if not (_in_range(a) and _in_range(b)):
        return _overflow("checked_mul", f"operands out of uint256 range: {a}, {b}")
    product = a * b
    if product > UINT256_MAX:
        return _overflow("checked_mul", f"{a} * {b} overflows uint256")
    return Ok(product)


def wmul(x: int, y: int) -> Ok[int] | Err[ArithmeticOverflowError]:
    """x * y / WAD, floored."""
    match checked_mul(x, y):
        case Err() as e:
            return e
        case Ok(product):
            return Ok(product // WAD)


def wdiv(x: int, y: int) -> Ok[int] | Err[ArithmeticOverflowError]:
    """x * WAD / y, floored. Division by zero is reported as overflow."""
    if y == 0:
        return _overflow("wdiv", "division by zero")
    match checked_mul(x, WAD):
        case Err() as e:
            return e
        case Ok(numerator):
            return Ok(numerator // y)
