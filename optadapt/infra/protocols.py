"""Collaborator protocols for the adapters.

Adapter code depends on these abstractions. The issuing protocol, the
oracle, the swap venue and the exchange are external systems; this module
fixes only the narrow surface the adapters consume. In-memory
implementations live in ``optadapt.infra.memory_adapter``.

Fallible operations return Ok[T] | Err[AdapterError]. Infrastructure
failures are visible values in the type system, never exceptions.

infra/protocols.py may import domain types for protocol signatures.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from optadapt.core.errors import (
    AdapterError,
    InsufficientFundsError,
    InsufficientLiquidityError,
    PersistenceError,
    SettlementError,
    TransferError,
)
from optadapt.core.result import Err, Ok
from optadapt.core.types import Address
from optadapt.instrument.orders import SwapOrder
from optadapt.instrument.terms import OptionToken, Vault


@runtime_checkable
class Clock(Protocol):
    """Block time in unix seconds."""

    def now(self) -> int: ...


@runtime_checkable
class Stateful(Protocol):
    """Component whose state is captured by a Journal checkpoint."""

    def snapshot(self) -> object: ...

    def restore(self, snapshot: object) -> None: ...


@runtime_checkable
class Journal(Protocol):
    """Checkpoint / revert over every effect an operation performs.

    The host environment's atomic-transaction guarantee. ``revert`` returns
    all registered state to what it was at ``checkpoint``.
    """

    def checkpoint(self) -> object: ...

    def revert(self, checkpoint: object) -> None: ...


@runtime_checkable
class TokenBank(Protocol):
    """Fungible balances of every asset, native currency included."""

    def balance_of(self, holder: Address, asset: Address) -> int: ...

    def transfer(
        self, asset: Address, source: Address, destination: Address, amount: int,
    ) -> Ok[None] | Err[TransferError]: ...

    def decimals(self, asset: Address) -> int: ...


@runtime_checkable
class OTokenFactory(Protocol):
    """Read-only index of issued oTokens, keyed by their terms.

    ``strike_price`` uses the oToken's own precision (8 decimals for Gamma).
    """

    def get_otoken(
        self,
        underlying: Address,
        strike_asset: Address,
        collateral_asset: Address,
        strike_price: int,
        expiry: int,
        is_put: bool,
    ) -> Address | None: ...

    def get_details(self, otoken: Address) -> OptionToken | None: ...


@runtime_checkable
class Controller(Protocol):
    """The issuing protocol: vaults, collateral custody, mint and settle.

    Vault ids are issued here, monotonically per owner. Collateral is held
    by ``margin_pool``.
    """

    @property
    def margin_pool(self) -> Address: ...

    def open_vault(self, owner: Address) -> Ok[int] | Err[SettlementError]: ...

    def deposit_collateral(
        self, owner: Address, vault_id: int, asset: Address, amount: int,
    ) -> Ok[None] | Err[AdapterError]: ...

    def mint_otoken(
        self, owner: Address, vault_id: int, otoken: Address, amount: int, recipient: Address,
    ) -> Ok[None] | Err[AdapterError]: ...

    def settle(
        self, holder: Address, otoken: Address, amount: int,
    ) -> Ok[int] | Err[AdapterError]: ...

    def get_vault(self, owner: Address, vault_id: int) -> Ok[Vault] | Err[SettlementError]: ...

    def vault_count(self, owner: Address) -> int: ...


@runtime_checkable
class PriceOracle(Protocol):
    """Spot and finalized expiry prices, in ``decimals`` precision."""

    @property
    def decimals(self) -> int: ...

    def get_price(self, asset: Address) -> Ok[int] | Err[SettlementError]: ...

    def get_expiry_price(self, asset: Address, expiry: int) -> Ok[int] | Err[SettlementError]: ...


@runtime_checkable
class SwapVenue(Protocol):
    """External order venue. Fills a validated order for ``taker``.

    Pulls ``sell_amount`` of the sell token and ``native_value`` of native
    currency (the protocol fee) from the taker; returns the amount of buy
    token delivered.
    """

    @property
    def address(self) -> Address: ...

    def fill(
        self, order: SwapOrder, taker: Address, native_value: int,
    ) -> Ok[int] | Err[AdapterError]: ...


@runtime_checkable
class ConstantProductExchange(Protocol):
    """x*y=k pool paired with native currency."""

    @property
    def address(self) -> Address: ...

    def quote_native_for_exact_tokens(
        self, token: Address, amount_out: int,
    ) -> Ok[int] | Err[InsufficientLiquidityError]: ...

    def swap_native_for_exact_tokens(
        self,
        token: Address,
        amount_out: int,
        payer: Address,
        recipient: Address,
        max_native: int,
    ) -> Ok[int] | Err[InsufficientLiquidityError | InsufficientFundsError | TransferError]: ...


@runtime_checkable
class WrappedNative(Protocol):
    """1:1 ERC20 wrapper of the native currency."""

    @property
    def address(self) -> Address: ...

    def wrap(self, holder: Address, amount: int) -> Ok[None] | Err[TransferError]: ...

    def unwrap(self, holder: Address, amount: int) -> Ok[None] | Err[TransferError]: ...


@runtime_checkable
class EventBus(Protocol):
    """Append-only event transport.

    Messages are keyed for deterministic partitioning. Values are opaque
    bytes; serialization is the caller's responsibility.
    """

    def publish(
        self, topic: str, key: str, value: bytes,
    ) -> Ok[None] | Err[PersistenceError]: ...
