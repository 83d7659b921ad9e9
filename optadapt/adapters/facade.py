"""Operations both adapter variants share: exercise, shorts, lookups.

Each state-changing operation runs under ``atomically`` and publishes its
event as the last step, so a failed publish reverts the operation and no
event is ever emitted for reverted state.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import final

from optadapt.adapters.events import AdapterEvent, Exercised, ShortCreated, publish_event
from optadapt.adapters.exercise import ExerciseEngine
from optadapt.adapters.resolver import TermsResolver
from optadapt.adapters.shorts import ShortPositionManager
from optadapt.core.errors import AdapterError
from optadapt.core.result import Err, Ok
from optadapt.core.types import Address
from optadapt.instrument.terms import OptionTerms, OptionToken
from optadapt.infra.atomic import atomically
from optadapt.infra.config import TOPIC_EXERCISES, TOPIC_SHORTS
from optadapt.infra.protocols import EventBus, Journal


@final
class AdapterCore:
    def __init__(
        self,
        *,
        journal: Journal,
        resolver: TermsResolver,
        engine: ExerciseEngine,
        shorts: ShortPositionManager,
        bus: EventBus | None,
    ) -> None:
        self._journal = journal
        self._resolver = resolver
        self._engine = engine
        self._shorts = shorts
        self._bus = bus

    def run[T](self, operation: Callable[[], Ok[T] | Err[AdapterError]]) -> Ok[T] | Err[AdapterError]:
        return atomically(self._journal, operation)

    def publish[T](self, topic: str, event: AdapterEvent, value: T) -> Ok[T] | Err[AdapterError]:
        match publish_event(self._bus, topic, event):
            case Err() as e:
                return e
            case Ok(_):
                return Ok(value)

    def lookup_otoken(self, terms: OptionTerms) -> Ok[Address] | Err[AdapterError]:
        return self._resolver.resolve_token(terms)

    def token_details(self, otoken: Address) -> OptionToken | None:
        return self._resolver.token_details(otoken)

    def exercise_profit(
        self, otoken: Address, option_id: int, amount: int,
    ) -> Ok[int] | Err[AdapterError]:
        return self._engine.exercise_profit(otoken, option_id, amount)

    def can_exercise(self, otoken: Address, option_id: int, amount: int) -> bool:
        return self._engine.can_exercise(otoken, option_id, amount)

    def exercise(
        self, caller: Address, otoken: Address, option_id: int, amount: int, recipient: Address,
    ) -> Ok[int] | Err[AdapterError]:
        def operation() -> Ok[int] | Err[AdapterError]:
            match self._engine.exercise(caller, otoken, option_id, amount, recipient):
                case Err() as e:
                    return e
                case Ok(0):
                    return Ok(0)
                case Ok(profit):
                    event = Exercised(
                        caller=caller,
                        otoken=otoken,
                        option_id=option_id,
                        amount=amount,
                        exercise_profit=profit,
                    )
                    return self.publish(TOPIC_EXERCISES, event, profit)

        return self.run(operation)

    def create_short(
        self, caller: Address, terms: OptionTerms, collateral_amount: int,
    ) -> Ok[int] | Err[AdapterError]:
        def operation() -> Ok[int] | Err[AdapterError]:
            match self._shorts.create_short(caller, terms, collateral_amount):
                case Err() as e:
                    return e
                case Ok(vault):
                    pass
            event = ShortCreated(
                caller=caller,
                otoken=vault.otoken if vault.otoken is not None else Address.ZERO,
                vault_id=vault.vault_id,
                collateral_asset=vault.collateral_asset,
                collateral_amount=vault.collateral_amount,
                minted_amount=vault.minted_amount,
            )
            return self.publish(TOPIC_SHORTS, event, vault.vault_id)

        return self.run(operation)
