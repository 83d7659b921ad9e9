"""Activity implementations for the exercise-at-expiry workflow.

Activities are thin IO wrappers over an OptionsAdapter. All domain logic
lives in the adapter. Domain failures come back as values in the output;
only infrastructure failures (event bus, persistence) are raised, so
that Temporal retries them.
"""

from __future__ import annotations

from temporalio import activity
from temporalio.exceptions import ApplicationError

from optadapt.adapters.protocols import OptionsAdapter
from optadapt.core.errors import PersistenceError
from optadapt.core.result import Err, Ok
from optadapt.core.types import Address
from optadapt.workflow.types import CanExerciseInput, ExerciseInput, ExerciseOutput


def _address(raw: str) -> Address:
    match Address.parse(raw):
        case Ok(addr):
            return addr
        case Err(e):
            raise ApplicationError(e, type="InvalidAddress", non_retryable=True)
    raise ApplicationError(f"Unparseable address {raw!r}", type="InvalidAddress", non_retryable=True)


class AdapterActivities:
    """Activities bound to one adapter instance. Register the bound methods."""

    def __init__(self, adapter: OptionsAdapter) -> None:
        self._adapter = adapter
        # request_id -> payout of every exercise that settled
        self._completed: dict[str, int] = {}

    @activity.defn(name="check_can_exercise")
    async def check_can_exercise(self, inp: CanExerciseInput) -> bool:
        """Read-only. Timeout: 30s | Retries: 3"""
        activity.logger.info("Checking exercisability of %s amount %s", inp.otoken, inp.amount)
        return self._adapter.can_exercise(_address(inp.otoken), inp.option_id, inp.amount)

    @activity.defn(name="exercise_position")
    async def exercise_position(self, inp: ExerciseInput) -> ExerciseOutput:
        """Settle the position and pay the recipient.

        Timeout: 60s | Retries: 3 | Non-retryable: domain errors
        Idempotent: yes (keyed by request_id). A retry after a lost
        completion returns the recorded payout without settling again.
        """
        done = self._completed.get(inp.request_id)
        if done is not None:
            activity.logger.info("Exercise %s already settled, payout %s", inp.request_id, done)
            return ExerciseOutput(payout=done)
        activity.logger.info(
            "Exercising %s amount %s for %s", inp.otoken, inp.amount, inp.caller,
        )
        result = self._adapter.exercise(
            _address(inp.caller),
            _address(inp.otoken),
            inp.option_id,
            inp.amount,
            _address(inp.recipient),
        )
        match result:
            case Ok(payout):
                self._completed[inp.request_id] = payout
                activity.logger.info("Exercised %s, payout %s", inp.otoken, payout)
                return ExerciseOutput(payout=payout)
            case Err(PersistenceError() as e):
                raise ApplicationError(e.message, type="PersistenceError")
            case Err(e):
                activity.logger.warning("Exercise of %s failed: %s (%s)", inp.otoken, e.message, e.code)
                return ExerciseOutput(error_code=e.code, error=e.message)
        raise ApplicationError("Unexpected exercise result", type="InternalError", non_retryable=True)
