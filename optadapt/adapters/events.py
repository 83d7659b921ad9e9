"""Events published after a successful adapter operation.

Values are frozen dataclasses serialized with ``canonical_bytes`` and keyed
by oToken address, so every event of one option lands on one partition.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

from optadapt.core.errors import PersistenceError
from optadapt.core.result import Err, Ok
from optadapt.core.serialization import canonical_bytes
from optadapt.core.types import Address, UtcDatetime
from optadapt.instrument.terms import OptionType
from optadapt.infra.protocols import EventBus


@final
@dataclass(frozen=True, slots=True)
class Purchased:
    caller: Address
    protocol_name: str
    otoken: Address
    underlying: Address
    strike_asset: Address
    expiry: int
    strike_price: int
    option_type: OptionType
    amount: int
    premium: int
    option_id: int


@final
@dataclass(frozen=True, slots=True)
class Exercised:
    caller: Address
    otoken: Address
    option_id: int
    amount: int
    exercise_profit: int


@final
@dataclass(frozen=True, slots=True)
class ShortCreated:
    caller: Address
    otoken: Address
    vault_id: int
    collateral_asset: Address
    collateral_amount: int
    minted_amount: int


type AdapterEvent = Purchased | Exercised | ShortCreated


def publish_event(
    bus: EventBus | None, topic: str, event: AdapterEvent,
) -> Ok[None] | Err[PersistenceError]:
    """Serialize and publish ``event``. A missing bus is a no-op."""
    if bus is None:
        return Ok(None)
    match canonical_bytes(event):
        case Err(e):
            return Err(PersistenceError(
                message=e,
                code="PERSISTENCE_ERROR",
                timestamp=UtcDatetime.now(),
                source="adapters.events.publish_event",
                operation="serialize",
            ))
        case Ok(payload):
            return bus.publish(topic, event.otoken.value, payload)
