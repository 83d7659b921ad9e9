"""Option terms and the values derived from them.

All types are @final @dataclass(frozen=True, slots=True). OptionTerms is the
sole input to token resolution; two terms with equal fields hash equally
and therefore resolve to the same oToken.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import final

from optadapt.core.result import Err, Ok, unwrap
from optadapt.core.scaling import UINT256_MAX
from optadapt.core.serialization import content_hash
from optadapt.core.types import Address, UtcDatetime


class OptionType(Enum):
    """Numeric values match the on-chain encoding."""

    PUT = 1
    CALL = 2


class ExercisePhase(Enum):
    UNEXERCISABLE = "UNEXERCISABLE"
    EXERCISABLE = "EXERCISABLE"
    EXERCISED = "EXERCISED"


@final
@dataclass(frozen=True, slots=True)
class OptionTerms:
    """(underlying, strike asset, collateral asset, expiry, strike, type).

    ``expiry`` is unix seconds; ``strike_price`` is 18-decimal fixed point.
    """

    underlying: Address
    strike_asset: Address
    collateral_asset: Address
    expiry: int
    strike_price: int
    option_type: OptionType

    def __post_init__(self) -> None:
        if not isinstance(self.strike_price, int) or not 0 < self.strike_price <= UINT256_MAX:
            raise TypeError(f"OptionTerms.strike_price must be a positive uint256, got {self.strike_price!r}")
        if not isinstance(self.expiry, int) or self.expiry <= 0:
            raise TypeError(f"OptionTerms.expiry must be positive unix seconds, got {self.expiry!r}")

    @staticmethod
    def create(
        underlying: str,
        strike_asset: str,
        collateral_asset: str,
        expiry: int,
        strike_price: int,
        option_type: OptionType | int,
    ) -> Ok[OptionTerms] | Err[str]:
        addresses: list[Address] = []
        for name, raw in (
            ("underlying", underlying),
            ("strike_asset", strike_asset),
            ("collateral_asset", collateral_asset),
        ):
            match Address.parse(raw):
                case Err(e):
                    return Err(f"OptionTerms.{name}: {e}")
                case Ok(addr):
                    addresses.append(addr)
        if isinstance(option_type, OptionType):
            otype = option_type
        else:
            try:
                otype = OptionType(option_type)
            except ValueError:
                return Err(f"OptionTerms.option_type: unknown value {option_type!r}")
        if not isinstance(strike_price, int) or strike_price <= 0:
            return Err(f"OptionTerms.strike_price: must be > 0, got {strike_price!r}")
        if strike_price > UINT256_MAX:
            return Err("OptionTerms.strike_price: exceeds uint256")
        if not isinstance(expiry, int) or expiry <= 0:
            return Err(f"OptionTerms.expiry: must be > 0, got {expiry!r}")
        return Ok(OptionTerms(
            underlying=addresses[0],
            strike_asset=addresses[1],
            collateral_asset=addresses[2],
            expiry=expiry,
            strike_price=strike_price,
            option_type=otype,
        ))

    @property
    def is_put(self) -> bool:
        return self.option_type is OptionType.PUT

    @property
    def expiry_time(self) -> UtcDatetime:
        return UtcDatetime.from_timestamp(self.expiry)

    def terms_hash(self) -> str:
        """Content hash; stable across processes, usable as a cache key."""
        # every field is serializable by construction
        return unwrap(content_hash(self))


@final
@dataclass(frozen=True, slots=True)
class OptionToken:
    """A specific issued option. The adapter never owns one across calls."""

    identity: Address
    terms: OptionTerms
    decimals: int


@final
@dataclass(frozen=True, slots=True)
class Vault:
    """Collateral position at the issuing protocol backing minted oTokens."""

    owner: Address
    vault_id: int
    collateral_asset: Address
    collateral_amount: int
    otoken: Address | None
    minted_amount: int


@final
@dataclass(frozen=True, slots=True)
class Position:
    """What the calling instrument holds after a purchase. Not persisted here."""

    holder: Address
    otoken: Address
    option_id: int
    amount: int
