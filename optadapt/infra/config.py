"""Event topics and per-variant adapter configuration.

No client library is imported. Pure configuration data. Every address an
adapter needs is passed in here or through a collaborator handle; nothing
is pinned globally.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import final

from optadapt.core.types import Address, FrozenMap
from optadapt.instrument.payoff import CallPayoutBasis

# ---------------------------------------------------------------------------
# Topic names
# ---------------------------------------------------------------------------

TOPIC_PURCHASES: str = "optadapt.purchases"
TOPIC_EXERCISES: str = "optadapt.exercises"
TOPIC_SHORTS: str = "optadapt.shorts"

ADAPTER_TOPICS: tuple[str, ...] = (
    TOPIC_PURCHASES,
    TOPIC_EXERCISES,
    TOPIC_SHORTS,
)

GAMMA_PROTOCOL_NAME: str = "OPYN_GAMMA"
LEGACY_PROTOCOL_NAME: str = "OPYN_V1"

GAMMA_OTOKEN_DECIMALS: int = 8
# Smallest WETH deposit the Gamma adapter accepts for a short, in wei.
GAMMA_MIN_WETH_COLLATERAL: int = 10**8


class ZeroProfitPolicy(Enum):
    """What ``exercise`` does with a position that pays nothing."""

    REJECT = "REJECT"  # ZeroProfitError
    NOOP = "NOOP"      # Ok(0), no state change


@final
@dataclass(frozen=True, slots=True)
class GammaConfig:
    """Configuration for the factory-addressed, swap-venue-priced variant."""

    weth: Address
    intermediate_assets: frozenset[Address] = frozenset()
    min_collateral: FrozenMap[Address, int] = field(default_factory=lambda: FrozenMap.EMPTY)
    zero_profit_policy: ZeroProfitPolicy = ZeroProfitPolicy.REJECT
    call_payout_basis: CallPayoutBasis = CallPayoutBasis.STRIKE
    otoken_decimals: int = GAMMA_OTOKEN_DECIMALS
    protocol_name: str = GAMMA_PROTOCOL_NAME

    def __post_init__(self) -> None:
        if self.otoken_decimals < 0:
            raise TypeError(f"GammaConfig.otoken_decimals must be >= 0, got {self.otoken_decimals}")

    @staticmethod
    def default(weth: Address, *intermediate_assets: Address) -> GammaConfig:
        """Production defaults: WETH floor of 10**8 wei, REJECT on zero profit."""
        floor: FrozenMap[Address, int] = FrozenMap(_entries=((weth, GAMMA_MIN_WETH_COLLATERAL),))
        return GammaConfig(
            weth=weth,
            intermediate_assets=frozenset(intermediate_assets),
            min_collateral=floor,
        )


@final
@dataclass(frozen=True, slots=True)
class LegacyConfig:
    """Configuration for the registry-addressed, exchange-priced variant."""

    owner: Address
    weth: Address
    min_collateral: FrozenMap[Address, int] = field(default_factory=lambda: FrozenMap.EMPTY)
    zero_profit_policy: ZeroProfitPolicy = ZeroProfitPolicy.NOOP
    call_payout_basis: CallPayoutBasis = CallPayoutBasis.STRIKE
    protocol_name: str = LEGACY_PROTOCOL_NAME
