"""Tests for optadapt.instrument.expiry: the 08:00 UTC expiry calendar."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest
from dateutil.relativedelta import TH
from hypothesis import given
from hypothesis import strategies as st

from optadapt.instrument.expiry import is_valid_expiry, next_expiry
from world import EXPIRY


class TestIsValidExpiry:
    def test_eight_utc(self) -> None:
        assert is_valid_expiry(EXPIRY)

    def test_off_by_one_second(self) -> None:
        assert not is_valid_expiry(EXPIRY + 1)

    def test_non_positive(self) -> None:
        assert not is_valid_expiry(0)
        assert not is_valid_expiry(-28800)


class TestNextExpiry:
    def test_thursday_rolls_to_friday(self) -> None:
        assert next_expiry(datetime(2021, 1, 14, tzinfo=UTC)) == 1610697600

    def test_friday_before_eight_same_day(self) -> None:
        assert next_expiry(datetime(2021, 1, 15, 7, 59, tzinfo=UTC)) == 1610697600

    def test_friday_at_eight_rolls_a_week(self) -> None:
        assert next_expiry(datetime(2021, 1, 15, 8, 0, tzinfo=UTC)) == 1610697600 + 7 * 86400

    def test_other_timezone(self) -> None:
        # 2021-01-15 09:30 in UTC+2 is 07:30 UTC
        local = datetime(2021, 1, 15, 9, 30, tzinfo=timezone(timedelta(hours=2)))
        assert next_expiry(local) == 1610697600

    def test_other_weekday(self) -> None:
        assert next_expiry(datetime(2021, 1, 14, 9, 0, tzinfo=UTC), TH) == 1610697600 - 86400 + 7 * 86400

    def test_naive_raises(self) -> None:
        with pytest.raises(TypeError):
            next_expiry(datetime(2021, 1, 14))

    @given(st.datetimes(
        min_value=datetime(2000, 1, 1), max_value=datetime(2100, 1, 1), timezones=st.just(UTC),
    ))
    def test_always_valid_and_within_a_week(self, after: datetime) -> None:
        expiry = next_expiry(after)
        assert is_valid_expiry(expiry)
        assert datetime.fromtimestamp(expiry, tz=UTC).weekday() == 4
        assert 0 < expiry - after.timestamp() <= 7 * 86400
