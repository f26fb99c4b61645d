"""Bounded worker pool with order-preserving results.

Work items are dispatched to a thread pool and every result is written
into a slot pre-allocated for the item's input position, so the merged
output never depends on scheduling.
"""

import logging
import os
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

MAX_DEFAULT_WORKERS = 32


def default_workers() -> int:
    """Return the default pool size, about the number of available CPUs."""
    return min(MAX_DEFAULT_WORKERS, os.cpu_count() or 1)


def run_indexed(
    func: Callable[[T], R],
    items: Sequence[T],
    *,
    max_workers: int | None = None,
    cancel: threading.Event | None = None,
) -> list[R | None]:
    """Apply a function to every item on a bounded thread pool.

    Results are placed at the index of their input item. Once ``cancel``
    is set, items that have not started are abandoned and their slots
    stay None; items already running finish on their own (callers pass
    the same event down so they can stop early).

    Args:
        func: Function applied to each item.
        items: Items to process.
        max_workers: Pool size. Defaults to default_workers().
        cancel: Event signalling cancellation.

    Returns:
        List of results aligned with ``items``; None for abandoned items.

    Raises:
        Exception: Any exception raised by ``func`` is re-raised.
    """
    slots: list[R | None] = [None] * len(items)
    if not items:
        return slots

    workers = max(1, min(max_workers or default_workers(), len(items)))

    def _run(position: int) -> None:
        if cancel is not None and cancel.is_set():
            return
        slots[position] = func(items[position])

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(_run, i) for i in range(len(items))]
        for future in as_completed(futures):
            future.result()

    if cancel is not None and cancel.is_set():
        abandoned = sum(1 for s in slots if s is None)
        logger.debug("Worker pool cancelled, %d of %d items abandoned", abandoned, len(items))
    return slots
