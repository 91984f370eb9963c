# gap_roadmap/analysis/runner.py
"""
Bounded, order-preserving fan-out of blocking evidence work.

Each item runs in a worker thread; results come back in input order
regardless of completion order. A failed item becomes an AnalysisIssue
instead of failing the batch. With a timeout, unfinished items are
reported and dropped while finished ones are kept.
"""

import asyncio
import logging
from typing import Callable, Sequence, TypeVar

from gap_roadmap.errors import GapDetectionError
from gap_roadmap.models.gaps import AnalysisIssue

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def run_in_threads(
    items: Sequence[T],
    worker: Callable[[T], R],
    *,
    operation: str,
    describe: Callable[[T], str],
    parallelism: int = 8,
    timeout: float | None = None,
) -> tuple[list[R | None], list[AnalysisIssue]]:
    """
    Run worker(item) for every item in worker threads.

    Args:
        items: Work items
        worker: Blocking function applied to each item
        operation: Operation name used in issue records
        describe: Produces the issue `source` for an item
        parallelism: Maximum concurrent workers
        timeout: Seconds for the whole batch (None = no limit)

    Returns:
        (results aligned with items, None where an item failed; issues)
    """
    if not items:
        return [], []

    semaphore = asyncio.Semaphore(parallelism)

    async def run_one(item: T) -> R:
        async with semaphore:
            return await asyncio.to_thread(worker, item)

    tasks = [asyncio.create_task(run_one(item)) for item in items]
    _, pending = await asyncio.wait(tasks, timeout=timeout)
    for task in pending:
        task.cancel()
    if pending:
        # Threads already running keep going; we just stop waiting for them
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning(f"{operation}: {len(pending)} of {len(tasks)} items timed out")

    results: list[R | None] = []
    issues: list[AnalysisIssue] = []
    for item, task in zip(items, tasks):
        if task in pending or task.cancelled():
            results.append(None)
            issues.append(AnalysisIssue(
                source=describe(item),
                operation=operation,
                message=f"Timed out after {timeout}s; evidence not gathered",
            ))
            continue

        exc = task.exception()
        if exc is not None:
            if not isinstance(exc, GapDetectionError):
                exc = GapDetectionError(operation, f"{type(exc).__name__}: {exc}")
            logger.warning(f"{describe(item)}: {exc.message}")
            results.append(None)
            issues.append(AnalysisIssue(source=describe(item), operation=operation, message=exc.message))
            continue

        results.append(task.result())
    return results, issues
