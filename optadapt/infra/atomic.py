"""All-or-nothing execution of an adapter operation.

Every public state-changing operation runs inside ``atomically``: a
checkpoint is taken before the first effect, and an Err result or an
exception reverts every effect made since.
"""

from __future__ import annotations

from collections.abc import Callable

from optadapt.core.result import Err, Ok
from optadapt.infra.protocols import Journal


def atomically[T, E](journal: Journal, operation: Callable[[], Ok[T] | Err[E]]) -> Ok[T] | Err[E]:
    """Run ``operation``; revert the journal unless it returns Ok."""
    checkpoint = journal.checkpoint()
    try:
        result = operation()
    except BaseException:
        journal.revert(checkpoint)
        raise
    if isinstance(result, Err):
        journal.revert(checkpoint)
    return result
