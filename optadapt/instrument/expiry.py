"""Expiry calendar for oTokens.

Gamma oTokens can only be created with an expiry at 08:00 UTC. Weekly
series expire on Fridays.
"""

from __future__ import annotations

from datetime import UTC, datetime

from dateutil.relativedelta import FR, relativedelta, weekday

EXPIRY_HOUR_UTC = 8


def is_valid_expiry(expiry: int) -> bool:
    """True iff ``expiry`` (unix seconds) falls exactly on 08:00:00 UTC."""
    if expiry <= 0:
        return False
    dt = datetime.fromtimestamp(expiry, tz=UTC)
    return (dt.hour, dt.minute, dt.second) == (EXPIRY_HOUR_UTC, 0, 0)


def next_expiry(after: datetime, day: weekday = FR) -> int:
    """First 08:00 UTC on ``day`` strictly after ``after``, as unix seconds.

    >>> next_expiry(datetime(2021, 1, 14, tzinfo=UTC))
    1610697600
    """
    if after.tzinfo is None:
        raise TypeError("next_expiry requires a timezone-aware datetime")
    start = after.astimezone(UTC)
    candidate = start + relativedelta(
        weekday=day(+1), hour=EXPIRY_HOUR_UTC, minute=0, second=0, microsecond=0,
    )
    if candidate <= start:
        candidate = start + relativedelta(
            days=+1, weekday=day(+1), hour=EXPIRY_HOUR_UTC, minute=0, second=0, microsecond=0,
        )
    return int(candidate.timestamp())
