"""Durable workflow that exercises an option position once it has expired.

Steps: sleep until expiry (+ settlement delay) -> can_exercise -> exercise.
Exercise before expiry is never attempted; a position that is worthless
at expiry ends as NOT_PROFITABLE without touching any balance.

Determinism contract: this module contains NO I/O, NO randomness, NO
system clock access (uses workflow.now()). All external interaction is
delegated to activities.
"""

from __future__ import annotations

import asyncio
from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy

with workflow.unsafe.imports_passed_through():
    from optadapt.workflow.activities import AdapterActivities
    from optadapt.workflow.types import (
        CanExerciseInput,
        ExerciseInput,
        ExerciseOutcome,
        ExerciseRequest,
        ExerciseResult,
    )

CHECK_RETRY = RetryPolicy(
    initial_interval=timedelta(seconds=2),
    backoff_coefficient=2.0,
    maximum_interval=timedelta(seconds=30),
    maximum_attempts=3,
)

EXERCISE_RETRY = RetryPolicy(
    initial_interval=timedelta(seconds=5),
    backoff_coefficient=2.0,
    maximum_interval=timedelta(seconds=60),
    maximum_attempts=3,
    non_retryable_error_types=["InvalidAddress", "InternalError"],
)


@workflow.defn(name="ExerciseAtExpiry")
class ExerciseAtExpiryWorkflow:
    """Waits for expiry, then exercises if the position pays.

    Invariants maintained:
    - Every request reaches exactly one terminal outcome
    - The exercise activity never runs before expiry
    - Deterministic under Temporal replay
    """

    def __init__(self) -> None:
        self._status: str = "RECEIVED"

    @workflow.query
    def get_status(self) -> str:
        """Current workflow phase."""
        return self._status

    @workflow.run
    async def run(self, req: ExerciseRequest) -> ExerciseResult:
        # --- Step 1: wait for expiry ---
        self._status = "WAITING_FOR_EXPIRY"
        exercisable_at = req.expiry + req.settlement_delay_seconds
        delay = exercisable_at - workflow.now().timestamp()
        if delay > 0:
            workflow.logger.info("Request %s sleeping %.0fs until expiry", req.request_id, delay)
            await asyncio.sleep(delay)

        # --- Step 2: is it worth exercising? ---
        self._status = "CHECKING"
        can_exercise = await workflow.execute_activity_method(
            AdapterActivities.check_can_exercise,
            CanExerciseInput(otoken=req.otoken, option_id=req.option_id, amount=req.amount),
            start_to_close_timeout=timedelta(seconds=30),
            retry_policy=CHECK_RETRY,
        )
        if not can_exercise:
            self._status = "COMPLETED"
            return ExerciseResult(
                request_id=req.request_id,
                outcome=ExerciseOutcome.NOT_PROFITABLE.value,
                reason="Position has no exercise profit",
            )

        # --- Step 3: exercise ---
        self._status = "EXERCISING"
        out = await workflow.execute_activity_method(
            AdapterActivities.exercise_position,
            ExerciseInput(
                request_id=req.request_id,
                caller=req.caller,
                otoken=req.otoken,
                option_id=req.option_id,
                amount=req.amount,
                recipient=req.recipient,
            ),
            start_to_close_timeout=timedelta(seconds=60),
            retry_policy=EXERCISE_RETRY,
        )
        self._status = "COMPLETED"
        if out.error is not None:
            return ExerciseResult(
                request_id=req.request_id,
                outcome=ExerciseOutcome.FAILED.value,
                reason=f"{out.error_code}: {out.error}",
            )
        assert out.payout is not None  # guaranteed when error is None
        return ExerciseResult(
            request_id=req.request_id,
            outcome=ExerciseOutcome.EXERCISED.value,
            payout=out.payout,
        )
