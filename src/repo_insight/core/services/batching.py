from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

from ..domain.exceptions import PipelineCancelledError


T = TypeVar("T")
R = TypeVar("R")

DEFAULT_BATCH_SIZE = 5


async def run_in_batches(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    on_error: Callable[[T, Exception], R],
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    cancel: Optional[asyncio.Event] = None,
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> list[R]:
    """Run ``worker`` over ``items`` in sequential groups of concurrent calls.

    At most ``batch_size`` calls are in flight at once. A group is awaited in
    full before the next one starts. An exception raised by one call is
    turned into a result by ``on_error`` and never reaches its siblings.

    Results keep the input order.

    Raises:
        ValueError: if batch_size is not positive
        PipelineCancelledError: if ``cancel`` is set before a group starts
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    async def _guarded(item: T) -> R:
        try:
            return await worker(item)
        except Exception as exc:
            return on_error(item, exc)

    results: list[R] = []
    total = len(items)
    for start in range(0, total, batch_size):
        if cancel is not None and cancel.is_set():
            raise PipelineCancelledError(completed=len(results), total=total)

        group = items[start:start + batch_size]
        results.extend(await asyncio.gather(*(_guarded(item) for item in group)))

        if on_progress is not None:
            on_progress(len(results), total)

    return results
