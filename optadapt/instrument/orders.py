"""SwapOrder: an externally supplied venue trade, untrusted until validated.

Orders are typically relayed from an off-chain quote. The structured
fields are checked by ``optadapt.adapters.swap.validate_order``; the
payload is forwarded to the venue verbatim and never interpreted here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, final

from optadapt.core.result import Err, Ok
from optadapt.core.scaling import UINT256_MAX
from optadapt.core.types import Address


@final
@dataclass(frozen=True, slots=True)
class SwapOrder:
    taker_address: Address
    buy_token: Address
    sell_token: Address
    fee_recipient: Address
    protocol_fee: int
    buy_amount: int
    sell_amount: int
    payload: bytes = b""

    def __post_init__(self) -> None:
        for name in ("protocol_fee", "buy_amount", "sell_amount"):
            value = getattr(self, name)
            if not isinstance(value, int) or not 0 <= value <= UINT256_MAX:
                raise TypeError(f"SwapOrder.{name} must be a uint256, got {value!r}")

    @staticmethod
    def create(
        taker_address: str,
        buy_token: str,
        sell_token: str,
        fee_recipient: str,
        protocol_fee: int | str,
        buy_amount: int | str,
        sell_amount: int | str,
        payload: bytes | str = b"",
    ) -> Ok[SwapOrder] | Err[str]:
        """Build from raw (quote-API shaped) fields.

        Amounts may arrive as decimal strings; ``payload`` as 0x-hex.
        """
        addresses: dict[str, Address] = {}
        for name, raw in (
            ("taker_address", taker_address),
            ("buy_token", buy_token),
            ("sell_token", sell_token),
            ("fee_recipient", fee_recipient),
        ):
            match Address.parse(raw):
                case Err(e):
                    return Err(f"SwapOrder.{name}: {e}")
                case Ok(addr):
                    addresses[name] = addr
        amounts: dict[str, int] = {}
        for name, raw_amount in (
            ("protocol_fee", protocol_fee),
            ("buy_amount", buy_amount),
            ("sell_amount", sell_amount),
        ):
            match _parse_uint(raw_amount):
                case Err(e):
                    return Err(f"SwapOrder.{name}: {e}")
                case Ok(value):
                    amounts[name] = value
        if isinstance(payload, str):
            try:
                data = bytes.fromhex(payload.removeprefix("0x"))
            except ValueError:
                return Err("SwapOrder.payload: not a hex string")
        else:
            data = payload
        return Ok(SwapOrder(**addresses, **amounts, payload=data))

    @staticmethod
    def from_quote(quote: dict[str, Any]) -> Ok[SwapOrder] | Err[str]:
        """Build from a swap-API quote response (``to``, ``buyTokenAddress``, ...)."""
        try:
            return SwapOrder.create(
                taker_address=quote["to"],
                buy_token=quote["buyTokenAddress"],
                sell_token=quote["sellTokenAddress"],
                fee_recipient=quote["to"],
                protocol_fee=quote["protocolFee"],
                buy_amount=quote["buyAmount"],
                sell_amount=quote["sellAmount"],
                payload=quote.get("data", b""),
            )
        except KeyError as e:
            return Err(f"SwapOrder quote missing field {e}")


def _parse_uint(raw: int | str) -> Ok[int] | Err[str]:
    if isinstance(raw, bool):
        return Err("must be an integer, got bool")
    if isinstance(raw, str):
        if not raw.isdigit():
            return Err(f"must be a non-negative integer string, got '{raw}'")
        raw = int(raw)
    if not isinstance(raw, int) or raw < 0:
        return Err(f"must be a non-negative integer, got {raw!r}")
    if raw > UINT256_MAX:
        return Err("exceeds uint256")
    return Ok(raw)
