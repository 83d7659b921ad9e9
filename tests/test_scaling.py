"""Tests for optadapt.core.scaling: fixed-point rescaling within uint256."""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from optadapt.core.errors import ArithmeticOverflowError
from optadapt.core.result import Err, Ok, unwrap
from optadapt.core.scaling import (
    UINT256_MAX,
    WAD,
    checked_mul,
    from_wad,
    scale_amount,
    to_wad,
    wdiv,
    wmul,
)
from world import uint256s


class TestScaleAmount:
    def test_downscale_wad_to_otoken(self) -> None:
        assert scale_amount(10**18, 18, 8) == Ok(10**8)

    def test_downscale_truncates(self) -> None:
        assert scale_amount(10**10 - 1, 18, 8) == Ok(0)
        assert scale_amount(123456789012345678, 18, 8) == Ok(12345678)

    def test_upscale_exact(self) -> None:
        assert scale_amount(10**8, 8, 18) == Ok(10**18)
        assert scale_amount(1_000_000, 6, 18) == Ok(WAD)

    def test_same_decimals_identity(self) -> None:
        assert scale_amount(42, 6, 6) == Ok(42)

    def test_upscale_overflow(self) -> None:
        result = scale_amount(UINT256_MAX, 0, 18)
        assert isinstance(result, Err)
        assert isinstance(result.error, ArithmeticOverflowError)
        assert result.error.operation == "scale_amount"

    def test_negative_amount_rejected(self) -> None:
        assert isinstance(scale_amount(-1, 18, 8), Err)

    def test_negative_decimals_rejected(self) -> None:
        assert isinstance(scale_amount(1, -1, 8), Err)

    def test_wad_helpers(self) -> None:
        assert to_wad(1_000_000, 6) == Ok(WAD)
        assert from_wad(WAD, 6) == Ok(1_000_000)

    @given(uint256s(max_value=2**200), st.integers(min_value=0, max_value=18))
    def test_down_then_up_never_exceeds_original(self, amount: int, decimals: int) -> None:
        down = unwrap(scale_amount(amount, 18, decimals))
        back = unwrap(scale_amount(down, decimals, 18))
        assert back <= amount
        assert amount - back < 10 ** (18 - decimals)


class TestWadArithmetic:
    def test_wmul(self) -> None:
        assert wmul(2 * WAD, 3 * WAD) == Ok(6 * WAD)
        assert wmul(WAD // 10, 125 * WAD) == Ok(12_500_000_000_000_000_000)

    def test_wdiv(self) -> None:
        assert wdiv(WAD, 4 * WAD) == Ok(WAD // 4)

    def test_wdiv_by_zero(self) -> None:
        assert isinstance(wdiv(WAD, 0), Err)

    def test_checked_mul_overflow(self) -> None:
        assert isinstance(checked_mul(2**200, 2**60), Err)

    def test_checked_mul_negative_rejected(self) -> None:
        assert isinstance(checked_mul(-1, 1), Err)
