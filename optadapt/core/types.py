"""Core value types: UtcDatetime, Address, FrozenMap."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, ClassVar, final

from optadapt.core.result import Err, Ok

_HEX = frozenset("0123456789abcdef")


@final
@dataclass(frozen=True, slots=True)
class UtcDatetime:
    """Timezone-aware UTC datetime. Naive datetimes are rejected."""

    value: datetime

    def __post_init__(self) -> None:
        if self.value.tzinfo is None:
            raise TypeError("UtcDatetime requires timezone-aware datetime, got naive")

    @staticmethod
    def parse(raw: datetime) -> Ok[UtcDatetime] | Err[str]:
        if raw.tzinfo is None:
            return Err("UtcDatetime requires timezone-aware datetime, got naive")
        return Ok(UtcDatetime(value=raw.astimezone(UTC)))

    @staticmethod
    def now() -> UtcDatetime:
        return UtcDatetime(value=datetime.now(tz=UTC))

    @staticmethod
    def from_timestamp(seconds: int) -> UtcDatetime:
        """Convert unix seconds (the on-chain clock) to UtcDatetime."""
        return UtcDatetime(value=datetime.fromtimestamp(seconds, tz=UTC))

    @property
    def timestamp(self) -> int:
        """Unix seconds, truncated."""
        return int(self.value.timestamp())


@final
@dataclass(frozen=True, slots=True)
class Address:
    """20-byte account or token address, ``0x`` + 40 hex chars, lowercase.

    Mixed-case (checksummed) input is accepted and normalized so that two
    spellings of one address compare and hash equal.
    """

    value: str

    ZERO: ClassVar[Address]  # Assigned after class definition

    def __post_init__(self) -> None:
        if not _is_address(self.value) or self.value != self.value.lower():
            raise TypeError(f"Address requires lowercase 0x-prefixed 40 hex chars, got {self.value!r}")

    @staticmethod
    def parse(raw: str) -> Ok[Address] | Err[str]:
        if not isinstance(raw, str):
            return Err(f"Address requires str, got {type(raw).__name__}")
        lowered = raw.lower()
        if not _is_address(lowered):
            return Err(f"Address must be 0x followed by 40 hex characters, got '{raw}'")
        return Ok(Address(value=lowered))

    @property
    def is_zero(self) -> bool:
        return self == Address.ZERO

    def __str__(self) -> str:
        return self.value


def _is_address(raw: str) -> bool:
    if len(raw) != 42 or not raw.startswith("0x"):
        return False
    return all(c in _HEX for c in raw[2:].lower())


Address.ZERO = Address(value="0x" + "0" * 40)

# Native currency (ETH) is addressed by the zero address.
NATIVE: Address = Address.ZERO


@final
@dataclass(frozen=True, slots=True)
class FrozenMap[K, V]:
    """Immutable mapping with sorted entries, for configuration tables."""

    _entries: tuple[tuple[K, V], ...]

    EMPTY: ClassVar[FrozenMap[Any, Any]]  # Assigned after class definition

    @staticmethod
    def create(items: dict[K, V] | Iterable[tuple[K, V]]) -> Ok[FrozenMap[K, V]] | Err[str]:
        """Build from a dict or pairs. Duplicate keys: last value wins."""
        d = items if isinstance(items, dict) else dict(items)
        try:
            entries = tuple(sorted(d.items(), key=lambda kv: str(kv[0])))
        except TypeError as e:
            return Err(f"FrozenMap keys must be sortable: {e}")
        return Ok(FrozenMap(_entries=entries))

    def get(self, key: K, default: V | None = None) -> V | None:
        for k, v in self._entries:
            if k == key:
                return v
        return default

    def __getitem__(self, key: K) -> V:
        for k, v in self._entries:
            if k == key:
                return v
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return any(k == key for k, _ in self._entries)

    def __iter__(self) -> Iterator[K]:
        return (k for k, _ in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def items(self) -> tuple[tuple[K, V], ...]:
        return self._entries


FrozenMap.EMPTY = FrozenMap(_entries=())
