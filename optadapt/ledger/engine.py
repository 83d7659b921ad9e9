"""Token balance ledger with conservation and rollback.

Core invariant: for every asset A, sum over holders of balance(H, A) == 0,
where the asset's own issuance account carries minus the circulating
supply. Only the issuance account may go negative.

TokenLedger is @final but NOT a dataclass: it holds mutable state.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import final

from optadapt.core.errors import TransferError
from optadapt.core.result import Err, Ok
from optadapt.core.types import Address, UtcDatetime
from optadapt.ledger.transactions import Balance, ExecuteResult, Move, Transaction


@final
@dataclass(frozen=True, slots=True)
class LedgerSnapshot:
    """Opaque copy of ledger state, used to revert an operation."""

    balances: tuple[tuple[tuple[Address, Address], int], ...]
    applied: frozenset[str]
    tx_count: int


@final
class TokenLedger:
    """Balances of every (holder, asset) pair the simulation knows about."""

    def __init__(self) -> None:
        self._balances: dict[tuple[Address, Address], int] = defaultdict(int)
        self._applied_tx_ids: set[str] = set()
        self._tx_count = 0

    def execute(self, tx: Transaction) -> Ok[ExecuteResult] | Err[TransferError]:
        """Apply every move of ``tx`` or none of them.

        Moves are applied in order, so a later move may spend what an
        earlier move credited. A move that would overdraw a non-issuance
        account rolls the whole transaction back.
        """
        if tx.tx_id in self._applied_tx_ids:
            return Ok(ExecuteResult.ALREADY_APPLIED)

        old_balances: dict[tuple[Address, Address], int] = {}
        for move in tx.moves:
            src_key = (move.source, move.asset)
            dst_key = (move.destination, move.asset)
            old_balances.setdefault(src_key, self._balances[src_key])
            old_balances.setdefault(dst_key, self._balances[dst_key])

            available = self._balances[src_key]
            if not move.is_mint and available < move.amount:
                for key, val in old_balances.items():
                    self._balances[key] = val
                return Err(TransferError(
                    message=(
                        f"Insufficient balance of {move.asset} for {move.source}: "
                        f"{available} < {move.amount}"
                    ),
                    code="TRANSFER_FAILED",
                    timestamp=tx.timestamp,
                    source="ledger.engine.TokenLedger.execute",
                    asset=move.asset.value,
                    holder=move.source.value,
                    amount=move.amount,
                    balance=available,
                ))
            self._balances[src_key] -= move.amount
            self._balances[dst_key] += move.amount

        self._applied_tx_ids.add(tx.tx_id)
        self._tx_count += 1
        return Ok(ExecuteResult.APPLIED)

    def _next_tx_id(self) -> str:
        return f"TX-{self._tx_count + 1}"

    def transfer(
        self, asset: Address, source: Address, destination: Address, amount: int,
    ) -> Ok[None] | Err[TransferError]:
        """Single-move transfer. Zero amounts are a no-op."""
        if amount == 0 or source == destination:
            return Ok(None)
        if amount < 0:
            return Err(TransferError(
                message=f"Transfer amount must be >= 0, got {amount}",
                code="TRANSFER_FAILED",
                timestamp=UtcDatetime.now(),
                source="ledger.engine.TokenLedger.transfer",
                asset=asset.value,
                holder=source.value,
                amount=amount,
                balance=self.balance_of(source, asset),
            ))
        tx = Transaction(
            tx_id=self._next_tx_id(),
            moves=(Move(source=source, destination=destination, asset=asset, amount=amount),),
            timestamp=UtcDatetime.now(),
        )
        match self.execute(tx):
            case Err() as e:
                return e
            case Ok(_):
                return Ok(None)

    def mint(self, asset: Address, to: Address, amount: int) -> Ok[None] | Err[TransferError]:
        return self.transfer(asset, asset, to, amount)

    def burn(self, asset: Address, holder: Address, amount: int) -> Ok[None] | Err[TransferError]:
        return self.transfer(asset, holder, asset, amount)

    def balance_of(self, holder: Address, asset: Address) -> int:
        return self._balances.get((holder, asset), 0)

    def total_supply(self, asset: Address) -> int:
        """Circulating supply: minus the issuance account's balance."""
        return -self._balances.get((asset, asset), 0)

    def sigma(self, asset: Address) -> int:
        """Sum over all accounts including issuance. Always zero."""
        return sum(qty for (_, a), qty in self._balances.items() if a == asset)

    def balances(self) -> tuple[Balance, ...]:
        """All non-zero balances, issuance accounts excluded."""
        return tuple(
            Balance(holder=holder, asset=asset, amount=qty)
            for (holder, asset), qty in sorted(
                self._balances.items(), key=lambda kv: (kv[0][0].value, kv[0][1].value),
            )
            if qty != 0 and holder != asset
        )

    def transaction_count(self) -> int:
        return self._tx_count

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            balances=tuple((k, v) for k, v in self._balances.items() if v != 0),
            applied=frozenset(self._applied_tx_ids),
            tx_count=self._tx_count,
        )

    def restore(self, snapshot: LedgerSnapshot) -> None:
        self._balances = defaultdict(int, dict(snapshot.balances))
        self._applied_tx_ids = set(snapshot.applied)
        self._tx_count = snapshot.tx_count
