"""Tests for optadapt.core.result: Ok / Err values and combinators."""

from __future__ import annotations

import dataclasses

import pytest
from hypothesis import given
from hypothesis import strategies as st

from optadapt.core.result import Err, Ok, sequence, unwrap

# ---------------------------------------------------------------------------
# Core: Ok and Err hold values, are frozen, support pattern matching
# ---------------------------------------------------------------------------


class TestOkBasics:
    def test_ok_holds_value(self) -> None:
        assert Ok(42).value == 42

    def test_ok_is_frozen(self) -> None:
        ok = Ok(42)
        with pytest.raises(dataclasses.FrozenInstanceError):
            ok.value = 99  # type: ignore[misc]

    def test_ok_equality(self) -> None:
        assert Ok(42) == Ok(42)
        assert Ok(42) != Ok(99)

    def test_pattern_match_ok(self) -> None:
        match Ok(42):
            case Ok(v):
                assert v == 42
            case _:
                pytest.fail("Should match Ok")

    def test_is_ok(self) -> None:
        assert Ok(1).is_ok
        assert not Err("e").is_ok


class TestErrBasics:
    def test_err_holds_error(self) -> None:
        assert Err("fail").error == "fail"

    def test_err_is_frozen(self) -> None:
        err = Err("fail")
        with pytest.raises(dataclasses.FrozenInstanceError):
            err.error = "other"  # type: ignore[misc]

    def test_pattern_match_err(self) -> None:
        match Err("fail"):
            case Err(e):
                assert e == "fail"
            case _:
                pytest.fail("Should match Err")


# ---------------------------------------------------------------------------
# Combinators
# ---------------------------------------------------------------------------


def _safe_div(x: int) -> Ok[int] | Err[str]:
    if x == 0:
        return Err("division by zero")
    return Ok(100 // x)


class TestCombinators:
    def test_ok_map_applies_function(self) -> None:
        assert Ok(5).map(lambda x: x * 2) == Ok(10)

    def test_err_map_passthrough(self) -> None:
        assert Err("fail").map(lambda x: x * 2) == Err("fail")

    def test_and_then_chains(self) -> None:
        assert Ok(5).and_then(_safe_div) == Ok(20)
        assert Ok(0).and_then(_safe_div) == Err("division by zero")
        assert Err("e").and_then(_safe_div) == Err("e")

    def test_map_err(self) -> None:
        assert Err("x").map_err(str.upper) == Err("X")
        assert Ok(1).map_err(str.upper) == Ok(1)

    def test_unwrap_or(self) -> None:
        assert Ok(42).unwrap_or(0) == 42
        assert Err("fail").unwrap_or(0) == 0

    def test_method_unwrap_raises_on_err(self) -> None:
        with pytest.raises(RuntimeError, match="unwrap called on Err"):
            Err("fail").unwrap()


class TestUnwrapFunction:
    def test_ok(self) -> None:
        assert unwrap(Ok("v")) == "v"

    def test_err_raises(self) -> None:
        with pytest.raises(RuntimeError, match="fail"):
            unwrap(Err("fail"))


class TestSequence:
    def test_all_ok(self) -> None:
        assert sequence([Ok(1), Ok(2), Ok(3)]) == Ok([1, 2, 3])

    def test_first_err_wins(self) -> None:
        assert sequence([Ok(1), Err("a"), Err("b")]) == Err("a")

    def test_empty(self) -> None:
        assert sequence([]) == Ok([])

    @given(st.lists(st.integers()))
    def test_sequence_of_oks_preserves_values(self, xs: list[int]) -> None:
        assert sequence([Ok(x) for x in xs]) == Ok(xs)
