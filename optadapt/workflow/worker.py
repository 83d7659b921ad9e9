"""Worker configuration for the exercise-at-expiry workflow.

Usage::

    import asyncio
    from optadapt.workflow.worker import run_worker

    asyncio.run(run_worker(adapter))
"""

from __future__ import annotations

from temporalio.client import Client
from temporalio.worker import Worker

from optadapt.adapters.protocols import OptionsAdapter
from optadapt.workflow.activities import AdapterActivities
from optadapt.workflow.exercise_workflow import ExerciseAtExpiryWorkflow

TASK_QUEUE = "optadapt-exercise"


def build_worker(client: Client, adapter: OptionsAdapter, task_queue: str = TASK_QUEUE) -> Worker:
    """Worker with the workflow and the adapter-bound activities registered."""
    activities = AdapterActivities(adapter)
    return Worker(
        client,
        task_queue=task_queue,
        workflows=[ExerciseAtExpiryWorkflow],
        activities=[activities.check_can_exercise, activities.exercise_position],
    )


async def run_worker(
    adapter: OptionsAdapter,
    *,
    target_host: str = "localhost:7233",
    namespace: str = "default",
    task_queue: str = TASK_QUEUE,
) -> None:
    """Connect to Temporal and run the worker until interrupted."""
    client = await Client.connect(target_host, namespace=namespace)
    worker = build_worker(client, adapter, task_queue)
    await worker.run()
