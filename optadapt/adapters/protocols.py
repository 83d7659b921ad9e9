"""The uniform adapter interface exposed to the calling instrument.

Amounts are 18-decimal unless stated otherwise; premiums and funds are in
native currency. Variants are chosen at construction time.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from optadapt.core.errors import AdapterError
from optadapt.core.result import Err, Ok
from optadapt.core.types import Address
from optadapt.instrument.orders import SwapOrder
from optadapt.instrument.terms import OptionTerms, Position


@runtime_checkable
class OptionsAdapter(Protocol):
    def protocol_name(self) -> str: ...

    def non_fungible(self) -> bool: ...

    def lookup_otoken(self, terms: OptionTerms) -> Ok[Address] | Err[AdapterError]: ...

    def premium(self, terms: OptionTerms, amount: int) -> Ok[int] | Err[AdapterError]: ...

    def purchase(
        self,
        caller: Address,
        terms: OptionTerms,
        amount: int,
        funds: int,
        order: SwapOrder | None = None,
    ) -> Ok[Position] | Err[AdapterError]:
        """Buy ``amount`` of the option for ``caller``, paying from ``funds``.

        Unspent funds are refunded. Variants priced at an external venue
        require ``order``.
        """
        ...

    def exercise_profit(
        self, otoken: Address, option_id: int, amount: int,
    ) -> Ok[int] | Err[AdapterError]: ...

    def can_exercise(self, otoken: Address, option_id: int, amount: int) -> bool: ...

    def exercise(
        self, caller: Address, otoken: Address, option_id: int, amount: int, recipient: Address,
    ) -> Ok[int] | Err[AdapterError]: ...

    def create_short(
        self, caller: Address, terms: OptionTerms, collateral_amount: int,
    ) -> Ok[int] | Err[AdapterError]: ...
