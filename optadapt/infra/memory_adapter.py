"""In-memory implementations of every collaborator protocol.

Test doubles that let the whole suite run without a chain node. They
model the external systems closely enough to exercise the adapters'
ordering and no-residual guarantees: the controller refuses to mint
beyond a vault's collateral, the venue and exchange move real ledger
balances, and the chain reverts everything on a failed operation.

All classes are @final. None of them are production code.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import final

from optadapt.core.errors import (
    AdapterError,
    InsufficientFundsError,
    InsufficientLiquidityError,
    PersistenceError,
    SettlementError,
    TransferError,
)
from optadapt.core.result import Err, Ok
from optadapt.core.scaling import WAD_DECIMALS, scale_amount, to_wad
from optadapt.core.serialization import derive_address
from optadapt.core.types import NATIVE, Address, UtcDatetime
from optadapt.instrument.expiry import is_valid_expiry
from optadapt.instrument.orders import SwapOrder
from optadapt.instrument.payoff import CallPayoutBasis, compute_exercise_profit, minted_amount
from optadapt.instrument.terms import OptionTerms, OptionToken, OptionType, Vault
from optadapt.infra.protocols import PriceOracle, Stateful
from optadapt.ledger.engine import LedgerSnapshot, TokenLedger
from optadapt.ledger.transactions import Move, Transaction


def _settlement_error(source: str, operation: str, detail: str) -> SettlementError:
    return SettlementError(
        message=detail,
        code="SETTLEMENT_FAILED",
        timestamp=UtcDatetime.now(),
        source=f"memory_adapter.{source}",
        operation=operation,
    )


def _persistence_error(operation: str, detail: str) -> PersistenceError:
    """Helper to construct PersistenceError with consistent formatting."""
    return PersistenceError(
        message=detail,
        code="PERSISTENCE_ERROR",
        timestamp=UtcDatetime.now(),
        source=f"memory_adapter.{operation}",
        operation=operation,
    )


# ---------------------------------------------------------------------------
# Chain: ledger + clock + journal
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class ChainCheckpoint:
    ledger: LedgerSnapshot
    components: tuple[object, ...]


@final
class InMemoryChain:
    """Token balances, block time and checkpoint/revert in one place.

    Implements TokenBank, Clock and Journal. Components with their own
    state (controller vaults, registries) ``attach`` themselves so that a
    revert covers them too.
    """

    def __init__(self, now: int = 0) -> None:
        self._ledger = TokenLedger()
        self._decimals: dict[Address, int] = {NATIVE: WAD_DECIMALS}
        self._now = now
        self._components: list[Stateful] = []
        self._tx_seq = 0

    # -- Clock --

    def now(self) -> int:
        return self._now

    def set_time(self, now: int) -> None:
        self._now = now

    def advance(self, seconds: int) -> None:
        self._now += seconds

    # -- TokenBank --

    def register_token(self, asset: Address, decimals: int) -> None:
        self._decimals[asset] = decimals

    def decimals(self, asset: Address) -> int:
        return self._decimals.get(asset, WAD_DECIMALS)

    def balance_of(self, holder: Address, asset: Address) -> int:
        return self._ledger.balance_of(holder, asset)

    def total_supply(self, asset: Address) -> int:
        return self._ledger.total_supply(asset)

    def transfer(
        self, asset: Address, source: Address, destination: Address, amount: int,
    ) -> Ok[None] | Err[TransferError]:
        return self._ledger.transfer(asset, source, destination, amount)

    def execute(self, moves: list[Move]) -> Ok[None] | Err[TransferError]:
        """Apply several moves as one all-or-nothing ledger transaction."""
        if not moves:
            return Ok(None)
        self._tx_seq += 1
        tx = Transaction(
            tx_id=f"CHAIN-{self._tx_seq}",
            moves=tuple(moves),
            timestamp=UtcDatetime.from_timestamp(self._now),
        )
        match self._ledger.execute(tx):
            case Err() as e:
                return e
            case Ok(_):
                return Ok(None)

    def faucet(self, asset: Address, holder: Address, amount: int) -> Ok[None] | Err[TransferError]:
        """Test-only: credit ``amount`` of ``asset`` out of thin air."""
        return self._ledger.mint(asset, holder, amount)

    def mint(self, asset: Address, holder: Address, amount: int) -> Ok[None] | Err[TransferError]:
        return self._ledger.mint(asset, holder, amount)

    def burn(self, asset: Address, holder: Address, amount: int) -> Ok[None] | Err[TransferError]:
        return self._ledger.burn(asset, holder, amount)

    @property
    def ledger(self) -> TokenLedger:
        return self._ledger

    # -- Journal --

    def attach(self, component: Stateful) -> None:
        self._components.append(component)

    def checkpoint(self) -> ChainCheckpoint:
        return ChainCheckpoint(
            ledger=self._ledger.snapshot(),
            components=tuple(c.snapshot() for c in self._components),
        )

    def revert(self, checkpoint: object) -> None:
        if not isinstance(checkpoint, ChainCheckpoint):
            raise TypeError(f"Expected ChainCheckpoint, got {type(checkpoint).__name__}")
        self._ledger.restore(checkpoint.ledger)
        for component, state in zip(self._components, checkpoint.components, strict=False):
            component.restore(state)


# ---------------------------------------------------------------------------
# Wrapped native currency
# ---------------------------------------------------------------------------


@final
class InMemoryWrappedNative:
    """WETH-style wrapper. Native deposits are held at the wrapper address."""

    def __init__(self, chain: InMemoryChain, address: Address) -> None:
        self._chain = chain
        self._address = address
        chain.register_token(address, WAD_DECIMALS)

    @property
    def address(self) -> Address:
        return self._address

    def wrap(self, holder: Address, amount: int) -> Ok[None] | Err[TransferError]:
        if amount == 0:
            return Ok(None)
        return self._chain.execute([
            Move(source=holder, destination=self._address, asset=NATIVE, amount=amount),
            Move(source=self._address, destination=holder, asset=self._address, amount=amount),
        ])

    def unwrap(self, holder: Address, amount: int) -> Ok[None] | Err[TransferError]:
        if amount == 0:
            return Ok(None)
        return self._chain.execute([
            Move(source=holder, destination=self._address, asset=self._address, amount=amount),
            Move(source=self._address, destination=holder, asset=NATIVE, amount=amount),
        ])


# ---------------------------------------------------------------------------
# oToken factory
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class _OTokenKey:
    underlying: Address
    strike_asset: Address
    collateral_asset: Address
    strike_price: int
    expiry: int
    is_put: bool


@final
class InMemoryOTokenFactory:
    """Issues oTokens at deterministic addresses derived from their terms.

    ``strike_price`` arguments use ``strike_decimals`` precision; stored
    OptionToken terms carry the 18-decimal strike.
    """

    def __init__(
        self,
        chain: InMemoryChain,
        *,
        strike_decimals: int = 8,
        enforce_expiry_calendar: bool = True,
    ) -> None:
        self._chain = chain
        self._strike_decimals = strike_decimals
        self._enforce_expiry_calendar = enforce_expiry_calendar
        self._by_key: dict[_OTokenKey, Address] = {}
        self._details: dict[Address, OptionToken] = {}

    def create_otoken(
        self,
        underlying: Address,
        strike_asset: Address,
        collateral_asset: Address,
        strike_price: int,
        expiry: int,
        is_put: bool,
        decimals: int = 8,
    ) -> Ok[Address] | Err[str]:
        """Issue a new oToken. Creating the same terms twice is an error."""
        if self._enforce_expiry_calendar and not is_valid_expiry(expiry):
            return Err(f"OtokenFactory: invalid expiry {expiry}, must be 08:00 UTC")
        key = _OTokenKey(underlying, strike_asset, collateral_asset, strike_price, expiry, is_put)
        if key in self._by_key:
            return Err("OtokenFactory: option already created")
        match scale_amount(strike_price, self._strike_decimals, WAD_DECIMALS):
            case Err(e):
                return Err(e.message)
            case Ok(strike_wad):
                pass
        match OptionTerms.create(
            underlying.value,
            strike_asset.value,
            collateral_asset.value,
            expiry,
            strike_wad,
            OptionType.PUT if is_put else OptionType.CALL,
        ):
            case Err(e):
                return Err(e)
            case Ok(terms):
                pass
        match derive_address(key):
            case Err(e):
                return Err(e)
            case Ok(otoken):
                pass
        self._by_key[key] = otoken
        self._details[otoken] = OptionToken(identity=otoken, terms=terms, decimals=decimals)
        self._chain.register_token(otoken, decimals)
        return Ok(otoken)

    def get_otoken(
        self,
        underlying: Address,
        strike_asset: Address,
        collateral_asset: Address,
        strike_price: int,
        expiry: int,
        is_put: bool,
    ) -> Address | None:
        key = _OTokenKey(underlying, strike_asset, collateral_asset, strike_price, expiry, is_put)
        return self._by_key.get(key)

    def get_details(self, otoken: Address) -> OptionToken | None:
        return self._details.get(otoken)

    def count(self) -> int:
        """Test-only helper."""
        return len(self._details)


# ---------------------------------------------------------------------------
# Price oracle
# ---------------------------------------------------------------------------


@final
class InMemoryOracle:
    """Spot prices and finalized expiry prices, 8 decimals by default."""

    def __init__(self, decimals: int = 8) -> None:
        self._decimals = decimals
        self._spot: dict[Address, int] = {}
        self._expiry: dict[tuple[Address, int], int] = {}

    @property
    def decimals(self) -> int:
        return self._decimals

    def set_price(self, asset: Address, price: int) -> None:
        self._spot[asset] = price

    def set_expiry_price(self, asset: Address, expiry: int, price: int) -> None:
        self._expiry[(asset, expiry)] = price

    def get_price(self, asset: Address) -> Ok[int] | Err[SettlementError]:
        if asset not in self._spot:
            return Err(_settlement_error("InMemoryOracle.get_price", "get_price", f"No price for {asset}"))
        return Ok(self._spot[asset])

    def get_expiry_price(self, asset: Address, expiry: int) -> Ok[int] | Err[SettlementError]:
        price = self._expiry.get((asset, expiry))
        if price is None:
            return Err(_settlement_error(
                "InMemoryOracle.get_expiry_price",
                "get_expiry_price",
                f"Expiry price for {asset} at {expiry} not finalized",
            ))
        return Ok(price)


# ---------------------------------------------------------------------------
# Issuing-protocol controller
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class _ControllerState:
    vaults: tuple[tuple[tuple[Address, int], Vault], ...]
    counts: tuple[tuple[Address, int], ...]


@final
class InMemoryController:
    """Gamma-style controller with a margin pool.

    Mint capacity of a vault is ``minted_amount`` of its collateral, so a
    mint before the matching deposit is refused. Settlement pays the cash
    value at the finalized expiry price out of the margin pool and burns
    the settled oTokens.
    """

    def __init__(
        self,
        chain: InMemoryChain,
        factory: InMemoryOTokenFactory,
        oracle: PriceOracle,
        margin_pool: Address,
        basis: CallPayoutBasis = CallPayoutBasis.STRIKE,
    ) -> None:
        self._chain = chain
        self._factory = factory
        self._oracle = oracle
        self._margin_pool = margin_pool
        self._basis = basis
        self._vaults: dict[tuple[Address, int], Vault] = {}
        self._counts: dict[Address, int] = {}
        chain.attach(self)

    @property
    def margin_pool(self) -> Address:
        return self._margin_pool

    def open_vault(self, owner: Address) -> Ok[int] | Err[SettlementError]:
        vault_id = self._counts.get(owner, 0) + 1
        self._counts[owner] = vault_id
        self._vaults[(owner, vault_id)] = Vault(
            owner=owner,
            vault_id=vault_id,
            collateral_asset=Address.ZERO,
            collateral_amount=0,
            otoken=None,
            minted_amount=0,
        )
        return Ok(vault_id)

    def deposit_collateral(
        self, owner: Address, vault_id: int, asset: Address, amount: int,
    ) -> Ok[None] | Err[AdapterError]:
        vault = self._vaults.get((owner, vault_id))
        if vault is None:
            return Err(_settlement_error("InMemoryController.deposit_collateral", "deposit", "Controller: invalid vault id"))
        if vault.collateral_amount > 0 and vault.collateral_asset != asset:
            return Err(_settlement_error(
                "InMemoryController.deposit_collateral", "deposit",
                "Controller: vault already holds a different collateral asset",
            ))
        match self._chain.transfer(asset, owner, self._margin_pool, amount):
            case Err() as e:
                return e
            case Ok(_):
                pass
        self._vaults[(owner, vault_id)] = replace(
            vault, collateral_asset=asset, collateral_amount=vault.collateral_amount + amount,
        )
        return Ok(None)

    def mint_otoken(
        self, owner: Address, vault_id: int, otoken: Address, amount: int, recipient: Address,
    ) -> Ok[None] | Err[AdapterError]:
        source = "InMemoryController.mint_otoken"
        vault = self._vaults.get((owner, vault_id))
        if vault is None:
            return Err(_settlement_error(source, "mint", "Controller: invalid vault id"))
        details = self._factory.get_details(otoken)
        if details is None:
            return Err(_settlement_error(source, "mint", f"Controller: unknown oToken {otoken}"))
        if vault.otoken is not None and vault.otoken != otoken:
            return Err(_settlement_error(source, "mint", "Controller: vault already shorts another oToken"))
        if vault.collateral_amount == 0 or vault.collateral_asset != details.terms.collateral_asset:
            return Err(_settlement_error(source, "mint", "Controller: vault is not collateralized"))
        match minted_amount(
            details.terms,
            vault.collateral_amount,
            self._chain.decimals(vault.collateral_asset),
            details.decimals,
        ):
            case Err() as e:
                return e
            case Ok(capacity):
                pass
        if vault.minted_amount + amount > capacity:
            return Err(_settlement_error(
                source, "mint",
                f"Controller: minting {amount} exceeds collateral capacity {capacity - vault.minted_amount}",
            ))
        match self._chain.mint(otoken, recipient, amount):
            case Err() as e:
                return e
            case Ok(_):
                pass
        self._vaults[(owner, vault_id)] = replace(
            vault, otoken=otoken, minted_amount=vault.minted_amount + amount,
        )
        return Ok(None)

    def settle(
        self, holder: Address, otoken: Address, amount: int,
    ) -> Ok[int] | Err[AdapterError]:
        """Redeem ``amount`` oTokens held by ``holder`` for their cash value."""
        source = "InMemoryController.settle"
        details = self._factory.get_details(otoken)
        if details is None:
            return Err(_settlement_error(source, "settle", f"Controller: unknown oToken {otoken}"))
        terms = details.terms
        if self._chain.now() < terms.expiry:
            return Err(_settlement_error(source, "settle", "Controller: can't settle an unexpired oToken"))
        match self._oracle.get_expiry_price(terms.underlying, terms.expiry):
            case Err() as e:
                return e
            case Ok(raw_price):
                pass
        match scale_amount(raw_price, self._oracle.decimals, WAD_DECIMALS):
            case Err() as e:
                return e
            case Ok(price):
                pass
        match to_wad(amount, details.decimals):
            case Err() as e:
                return e
            case Ok(amount_wad):
                pass
        match compute_exercise_profit(
            terms, amount_wad, price, self._chain.decimals(terms.collateral_asset), self._basis,
        ):
            case Err() as e:
                return e
            case Ok(payout):
                pass
        match self._chain.burn(otoken, holder, amount):
            case Err() as e:
                return e
            case Ok(_):
                pass
        match self._chain.transfer(terms.collateral_asset, self._margin_pool, holder, payout):
            case Err() as e:
                return e
            case Ok(_):
                return Ok(payout)

    def get_vault(self, owner: Address, vault_id: int) -> Ok[Vault] | Err[SettlementError]:
        vault = self._vaults.get((owner, vault_id))
        if vault is None:
            return Err(_settlement_error("InMemoryController.get_vault", "get_vault", "Controller: invalid vault id"))
        return Ok(vault)

    def vault_count(self, owner: Address) -> int:
        return self._counts.get(owner, 0)

    def snapshot(self) -> _ControllerState:
        return _ControllerState(
            vaults=tuple(self._vaults.items()),
            counts=tuple(self._counts.items()),
        )

    def restore(self, snapshot: object) -> None:
        if not isinstance(snapshot, _ControllerState):
            raise TypeError(f"Expected controller state, got {type(snapshot).__name__}")
        self._vaults = dict(snapshot.vaults)
        self._counts = dict(snapshot.counts)


# ---------------------------------------------------------------------------
# Swap venue
# ---------------------------------------------------------------------------


@final
class InMemorySwapVenue:
    """Fills orders against a market maker's ledger inventory.

    ``shortfall`` makes the venue under-deliver by that many units, which
    lets tests exercise the post-fill balance check.
    """

    def __init__(self, chain: InMemoryChain, address: Address, maker: Address) -> None:
        self._chain = chain
        self._address = address
        self._maker = maker
        self.shortfall = 0
        self._fills = 0

    @property
    def address(self) -> Address:
        return self._address

    @property
    def maker(self) -> Address:
        return self._maker

    def fill(
        self, order: SwapOrder, taker: Address, native_value: int,
    ) -> Ok[int] | Err[AdapterError]:
        source = "InMemorySwapVenue.fill"
        if order.taker_address != self._address:
            return Err(_settlement_error(source, "fill", f"Order is addressed to {order.taker_address}, not this venue"))
        if native_value < order.protocol_fee:
            return Err(_settlement_error(source, "fill", "Insufficient protocol fee"))
        delivered = max(order.buy_amount - self.shortfall, 0)
        moves = [
            Move(source=taker, destination=self._maker, asset=order.sell_token, amount=order.sell_amount),
        ]
        if native_value > 0:
            moves.append(Move(source=taker, destination=order.fee_recipient, asset=NATIVE, amount=native_value))
        if delivered > 0:
            moves.append(Move(source=self._maker, destination=taker, asset=order.buy_token, amount=delivered))
        match self._chain.execute(moves):
            case Err() as e:
                return e
            case Ok(_):
                self._fills += 1
                return Ok(delivered)

    def fill_count(self) -> int:
        """Test-only helper."""
        return self._fills


# ---------------------------------------------------------------------------
# Constant-product exchange
# ---------------------------------------------------------------------------

FEE_NUMERATOR = 997
FEE_DENOMINATOR = 1000


@final
class InMemoryConstantProductExchange:
    """Native/token pools with a 0.3% input fee. Reserves are ledger balances."""

    def __init__(self, chain: InMemoryChain, address: Address) -> None:
        self._chain = chain
        self._address = address

    @property
    def address(self) -> Address:
        return self._address

    def add_liquidity(
        self, provider: Address, token: Address, token_amount: int, native_amount: int,
    ) -> Ok[None] | Err[TransferError]:
        return self._chain.execute([
            Move(source=provider, destination=self._address, asset=token, amount=token_amount),
            Move(source=provider, destination=self._address, asset=NATIVE, amount=native_amount),
        ])

    def reserves(self, token: Address) -> tuple[int, int]:
        """(native reserve, token reserve). Native is pooled across tokens."""
        return (
            self._chain.balance_of(self._address, NATIVE),
            self._chain.balance_of(self._address, token),
        )

    def quote_native_for_exact_tokens(
        self, token: Address, amount_out: int,
    ) -> Ok[int] | Err[InsufficientLiquidityError]:
        native_reserve, token_reserve = self.reserves(token)
        if amount_out <= 0 or amount_out >= token_reserve or native_reserve == 0:
            return Err(InsufficientLiquidityError(
                message=f"Pool cannot supply {amount_out} of {token} (reserve {token_reserve})",
                code="INSUFFICIENT_LIQUIDITY",
                timestamp=UtcDatetime.now(),
                source="memory_adapter.InMemoryConstantProductExchange.quote_native_for_exact_tokens",
                token=token.value,
                requested=amount_out,
                available=token_reserve,
            ))
        numerator = native_reserve * amount_out * FEE_DENOMINATOR
        denominator = (token_reserve - amount_out) * FEE_NUMERATOR
        return Ok(numerator // denominator + 1)

    def swap_native_for_exact_tokens(
        self,
        token: Address,
        amount_out: int,
        payer: Address,
        recipient: Address,
        max_native: int,
    ) -> Ok[int] | Err[InsufficientLiquidityError | InsufficientFundsError | TransferError]:
        match self.quote_native_for_exact_tokens(token, amount_out):
            case Err() as e:
                return e
            case Ok(cost):
                pass
        if cost > max_native:
            return Err(InsufficientFundsError(
                message=f"Exchange input {cost} exceeds maximum {max_native}",
                code="INSUFFICIENT_FUNDS",
                timestamp=UtcDatetime.now(),
                source="memory_adapter.InMemoryConstantProductExchange.swap_native_for_exact_tokens",
                required=cost,
                supplied=max_native,
            ))
        match self._chain.execute([
            Move(source=payer, destination=self._address, asset=NATIVE, amount=cost),
            Move(source=self._address, destination=recipient, asset=token, amount=amount_out),
        ]):
            case Err() as e:
                return e
            case Ok(_):
                return Ok(cost)


# ---------------------------------------------------------------------------
# Event bus
# ---------------------------------------------------------------------------


@final
class InMemoryEventBus:
    """In-memory event bus. Messages stored per-topic as (key, value) pairs."""

    def __init__(self) -> None:
        self._topics: dict[str, list[tuple[str, bytes]]] = {}
        self.available = True

    def publish(
        self, topic: str, key: str, value: bytes,
    ) -> Ok[None] | Err[PersistenceError]:
        if not self.available:
            return Err(_persistence_error("publish", f"Event bus unavailable for topic {topic}"))
        if topic not in self._topics:
            self._topics[topic] = []
        self._topics[topic].append((key, value))
        return Ok(None)

    def get_messages(self, topic: str) -> list[tuple[str, bytes]]:
        """Test-only helper."""
        return list(self._topics.get(topic, []))

    def topic_count(self) -> int:
        """Test-only helper."""
        return len(self._topics)
