"""Ledger value types: Move, Transaction, Balance, ExecuteResult.

A Move is one leg of a token transfer. Minting and burning are ordinary
moves whose source or destination is the token's own issuance account
(the token address), so the sum of every asset's balances stays zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import final

from optadapt.core.result import Err, Ok
from optadapt.core.types import Address, UtcDatetime


class ExecuteResult(Enum):
    APPLIED = "APPLIED"
    ALREADY_APPLIED = "ALREADY_APPLIED"


@final
@dataclass(frozen=True, slots=True)
class Move:
    """Atomic balance transfer: one leg of a transaction."""

    source: Address
    destination: Address
    asset: Address
    amount: int

    def __post_init__(self) -> None:
        if not isinstance(self.amount, int) or self.amount <= 0:
            raise TypeError(f"Move.amount must be a positive int, got {self.amount!r}")
        if self.source == self.destination:
            raise TypeError(f"Move source and destination must differ, both are {self.source}")

    @staticmethod
    def create(
        source: Address, destination: Address, asset: Address, amount: int,
    ) -> Ok[Move] | Err[str]:
        if not isinstance(amount, int) or amount <= 0:
            return Err(f"Move.amount must be > 0, got {amount!r}")
        if source == destination:
            return Err(f"Move source and destination must differ, both are {source}")
        return Ok(Move(source=source, destination=destination, asset=asset, amount=amount))

    @property
    def is_mint(self) -> bool:
        return self.source == self.asset

    @property
    def is_burn(self) -> bool:
        return self.destination == self.asset


@final
@dataclass(frozen=True, slots=True)
class Transaction:
    """Atomic batch of moves."""

    tx_id: str
    moves: tuple[Move, ...]
    timestamp: UtcDatetime

    @staticmethod
    def create(
        tx_id: str, moves: tuple[Move, ...], timestamp: UtcDatetime,
    ) -> Ok[Transaction] | Err[str]:
        if not tx_id:
            return Err("Transaction.tx_id must be non-empty")
        if not moves:
            return Err("Transaction requires at least one move")
        return Ok(Transaction(tx_id=tx_id, moves=moves, timestamp=timestamp))


@final
@dataclass(frozen=True, slots=True)
class Balance:
    holder: Address
    asset: Address
    amount: int
