"""Tests for optadapt.core.types: Address, UtcDatetime, FrozenMap."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest
from hypothesis import given

from optadapt.core.result import Err, Ok, unwrap
from optadapt.core.types import NATIVE, Address, FrozenMap, UtcDatetime
from world import addresses

_CHECKSUMMED = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"


class TestAddress:
    def test_parse_normalizes_case(self) -> None:
        a = unwrap(Address.parse(_CHECKSUMMED))
        assert a.value == _CHECKSUMMED.lower()

    def test_two_spellings_are_equal(self) -> None:
        assert unwrap(Address.parse(_CHECKSUMMED)) == unwrap(Address.parse(_CHECKSUMMED.lower()))

    def test_parse_rejects_short(self) -> None:
        assert isinstance(Address.parse("0x1234"), Err)

    def test_parse_rejects_missing_prefix(self) -> None:
        assert isinstance(Address.parse("c02aaa39b223fe8d0a0e5c4f27ead9083c756cc2aa"), Err)

    def test_parse_rejects_non_hex(self) -> None:
        assert isinstance(Address.parse("0x" + "g" * 40), Err)

    def test_parse_rejects_non_str(self) -> None:
        assert isinstance(Address.parse(123), Err)  # type: ignore[arg-type]

    def test_constructor_rejects_uppercase(self) -> None:
        with pytest.raises(TypeError):
            Address(value=_CHECKSUMMED)

    def test_native_is_zero(self) -> None:
        assert NATIVE.is_zero
        assert NATIVE == Address.ZERO
        assert str(NATIVE) == "0x" + "0" * 40

    @given(addresses())
    def test_parse_roundtrip(self, a: Address) -> None:
        assert Address.parse(a.value) == Ok(a)
        assert Address.parse(a.value.upper().replace("0X", "0x")) == Ok(a)


class TestUtcDatetime:
    def test_rejects_naive(self) -> None:
        with pytest.raises(TypeError):
            UtcDatetime(value=datetime(2021, 1, 1))

    def test_parse_converts_to_utc(self) -> None:
        local = datetime(2021, 1, 1, 10, 0, tzinfo=timezone(timedelta(hours=2)))
        parsed = unwrap(UtcDatetime.parse(local))
        assert parsed.value == datetime(2021, 1, 1, 8, 0, tzinfo=UTC)

    def test_parse_naive_err(self) -> None:
        assert isinstance(UtcDatetime.parse(datetime(2021, 1, 1)), Err)

    def test_from_timestamp(self) -> None:
        dt = UtcDatetime.from_timestamp(1610697600)
        assert dt.value == datetime(2021, 1, 15, 8, 0, tzinfo=UTC)
        assert dt.timestamp == 1610697600


class TestFrozenMap:
    def test_create_and_lookup(self) -> None:
        m = unwrap(FrozenMap.create({"b": 2, "a": 1}))
        assert m["a"] == 1
        assert m.get("b") == 2
        assert m.get("c") is None
        assert m.get("c", 0) == 0

    def test_entries_sorted(self) -> None:
        m = unwrap(FrozenMap.create([("b", 2), ("a", 1)]))
        assert list(m) == ["a", "b"]
        assert m.items() == (("a", 1), ("b", 2))

    def test_missing_key_raises(self) -> None:
        m = unwrap(FrozenMap.create({"a": 1}))
        with pytest.raises(KeyError):
            m["z"]

    def test_contains_and_len(self) -> None:
        m = unwrap(FrozenMap.create({"a": 1}))
        assert "a" in m
        assert "b" not in m
        assert len(m) == 1
        assert len(FrozenMap.EMPTY) == 0

    def test_address_keys(self) -> None:
        a = Address(value="0x" + "1" * 40)
        m = unwrap(FrozenMap.create({a: 10**8}))
        assert m.get(a) == 10**8
