"""Integration tests for ExerciseAtExpiryWorkflow.

Uses Temporal's time-skipping test environment -- no real server needed.
The in-memory chain is already past expiry; the workflow's own timer
(skipped) models waiting for it.
"""

from __future__ import annotations

import time

import pytest
from temporalio.client import WorkflowFailureError
from temporalio.testing import ActivityEnvironment, WorkflowEnvironment

from optadapt.core.result import unwrap
from optadapt.core.scaling import WAD
from optadapt.core.types import NATIVE
from optadapt.workflow.activities import AdapterActivities
from optadapt.workflow.exercise_workflow import ExerciseAtExpiryWorkflow
from optadapt.workflow.types import ExerciseInput, ExerciseOutcome, ExerciseOutput, ExerciseRequest
from optadapt.workflow.worker import build_worker
from world import RECIPIENT, USER, World, build_gamma, build_world

TASK_QUEUE = "test-exercise"


def _world(price_units: int) -> World:
    world = build_world()
    world.fund(world.call_otoken, USER, 10**7)
    world.fund_pool()
    world.settle_at(price_units)
    return world


def _request(world: World, request_id: str, delay: int = 0) -> ExerciseRequest:
    return ExerciseRequest(
        request_id=request_id,
        caller=USER.value,
        otoken=world.call_otoken.value,
        option_id=0,
        amount=WAD // 10,
        recipient=RECIPIENT.value,
        expiry=int(time.time()) + 3600,
        settlement_delay_seconds=delay,
    )


class TestWorkflowTypes:
    def test_output_needs_exactly_one(self) -> None:
        with pytest.raises(TypeError):
            ExerciseOutput()
        with pytest.raises(TypeError):
            ExerciseOutput(payout=1, error="x")

    def test_request_rejects_zero_amount(self) -> None:
        with pytest.raises(TypeError):
            ExerciseRequest(
                request_id="r", caller="c", otoken="o", option_id=0,
                amount=0, recipient="r", expiry=1,
            )


def _exercise_input(world: World, request_id: str) -> ExerciseInput:
    return ExerciseInput(
        request_id=request_id,
        caller=USER.value,
        otoken=world.call_otoken.value,
        option_id=0,
        amount=WAD // 10,
        recipient=RECIPIENT.value,
    )


@pytest.mark.asyncio
async def test_exercise_activity_repeat_returns_recorded_payout() -> None:
    world = _world(1080)
    activities = AdapterActivities(build_gamma(world))
    env = ActivityEnvironment()
    inp = _exercise_input(world, "EX-RETRY")
    first = await env.run(activities.exercise_position, inp)
    # completion lost; Temporal retries with the same input
    second = await env.run(activities.exercise_position, inp)
    assert first == ExerciseOutput(payout=12_500_000_000_000_000)
    assert second == first
    assert world.balance(RECIPIENT, NATIVE) == 12_500_000_000_000_000


@pytest.mark.asyncio
async def test_exercise_activity_new_request_id_settles_again() -> None:
    world = _world(1080)
    world.fund(world.call_otoken, USER, 10**7)
    activities = AdapterActivities(build_gamma(world))
    env = ActivityEnvironment()
    await env.run(activities.exercise_position, _exercise_input(world, "EX-A"))
    out = await env.run(activities.exercise_position, _exercise_input(world, "EX-B"))
    assert out.payout == 12_500_000_000_000_000
    assert world.balance(RECIPIENT, NATIVE) == 25_000_000_000_000_000


@pytest.mark.asyncio
async def test_failed_exercise_not_recorded() -> None:
    world = _world(1080)
    activities = AdapterActivities(build_gamma(world))
    env = ActivityEnvironment()
    unwrap(world.chain.transfer(world.call_otoken, USER, RECIPIENT, 10**7))
    inp = _exercise_input(world, "EX-LATER")
    failed = await env.run(activities.exercise_position, inp)
    assert failed.error_code == "TRANSFER_FAILED"
    unwrap(world.chain.transfer(world.call_otoken, RECIPIENT, USER, 10**7))
    retried = await env.run(activities.exercise_position, inp)
    assert retried.payout == 12_500_000_000_000_000


@pytest.mark.asyncio
async def test_exercises_after_expiry() -> None:
    world = _world(1080)
    adapter = build_gamma(world)
    async with await WorkflowEnvironment.start_time_skipping() as env:
        async with build_worker(env.client, adapter, TASK_QUEUE):
            result = await env.client.execute_workflow(
                ExerciseAtExpiryWorkflow.run,
                _request(world, "EX-ITM", delay=600),
                id="EX-ITM",
                task_queue=TASK_QUEUE,
            )
    assert result.outcome == ExerciseOutcome.EXERCISED.value
    assert result.payout == 12_500_000_000_000_000
    assert world.balance(RECIPIENT, NATIVE) == 12_500_000_000_000_000
    assert world.balance(USER, world.call_otoken) == 0


@pytest.mark.asyncio
async def test_worthless_position_not_exercised() -> None:
    world = _world(900)
    adapter = build_gamma(world)
    async with await WorkflowEnvironment.start_time_skipping() as env:
        async with build_worker(env.client, adapter, TASK_QUEUE):
            result = await env.client.execute_workflow(
                ExerciseAtExpiryWorkflow.run,
                _request(world, "EX-OTM"),
                id="EX-OTM",
                task_queue=TASK_QUEUE,
            )
    assert result.outcome == ExerciseOutcome.NOT_PROFITABLE.value
    assert result.payout == 0
    assert world.balance(USER, world.call_otoken) == 10**7


@pytest.mark.asyncio
async def test_domain_failure_reported() -> None:
    world = _world(1080)
    adapter = build_gamma(world)
    # the holder moved the tokens away before the workflow fired
    unwrap(world.chain.transfer(world.call_otoken, USER, RECIPIENT, 10**7))
    async with await WorkflowEnvironment.start_time_skipping() as env:
        async with build_worker(env.client, adapter, TASK_QUEUE):
            result = await env.client.execute_workflow(
                ExerciseAtExpiryWorkflow.run,
                _request(world, "EX-GONE"),
                id="EX-GONE",
                task_queue=TASK_QUEUE,
            )
    assert result.outcome == ExerciseOutcome.FAILED.value
    assert result.reason is not None
    assert result.reason.startswith("TRANSFER_FAILED")


@pytest.mark.asyncio
async def test_invalid_address_fails_workflow() -> None:
    world = _world(1080)
    adapter = build_gamma(world)
    request = _request(world, "EX-BAD")
    bad = ExerciseRequest(
        request_id=request.request_id,
        caller="not-an-address",
        otoken=request.otoken,
        option_id=0,
        amount=request.amount,
        recipient=request.recipient,
        expiry=request.expiry,
    )
    async with await WorkflowEnvironment.start_time_skipping() as env:
        async with build_worker(env.client, adapter, TASK_QUEUE):
            with pytest.raises(WorkflowFailureError):
                await env.client.execute_workflow(
                    ExerciseAtExpiryWorkflow.run,
                    bad,
                    id="EX-BAD",
                    task_queue=TASK_QUEUE,
                )
