"""
Order-preserving parallel execution

Runs independent work items (encode one sequence, decode one record, encode
one window) on a bounded thread pool. Results come back in submission
order, whatever order the workers finish in, and every item carries its own
success or failure: one bad record never hides or cancels its siblings.

Usage:
    results = run_ordered(encode_one, sequences, threads=4)
    for result in results:
        if result.ok:
            write(result.value)
        else:
            logger.error(result.error)
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class ItemResult(Generic[R]):
    """Outcome of one work item."""
    index: int
    value: Optional[R] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        """True if the item completed without error."""
        return self.error is None

    def unwrap(self) -> R:
        """Return the value, re-raising the item's error if it failed."""
        if self.error is not None:
            raise self.error
        return self.value


def _run_one(func: Callable[[T], R], index: int, item: T) -> ItemResult[R]:
    try:
        return ItemResult(index=index, value=func(item))
    except Exception as e:
        return ItemResult(index=index, error=e)


def run_ordered(
    func: Callable[[T], R],
    items: Sequence[T],
    threads: int = 1,
    label: str = "items",
    log_progress: bool = False
) -> List[ItemResult[R]]:
    """
    Apply func to every item, possibly in parallel, keeping input order.

    Args:
        func: Callable applied to each item; must not touch shared state
        items: Work items
        threads: Worker threads; 1 or less runs serially in this thread
        label: Noun used in progress messages
        log_progress: Log "Progress: done/total" after each completion

    Returns:
        One ItemResult per item, results[i] belonging to items[i]
    """
    total = len(items)
    results: List[Optional[ItemResult[R]]] = [None] * total

    if threads <= 1 or total <= 1:
        for index, item in enumerate(items):
            results[index] = _run_one(func, index, item)
            if log_progress:
                logger.info(f"Progress: {index + 1}/{total} {label}")
        return results

    with ThreadPoolExecutor(max_workers=threads) as executor:
        future_to_index = {
            executor.submit(_run_one, func, index, item): index
            for index, item in enumerate(items)
        }

        completed = 0
        for future in as_completed(future_to_index):
            index = future_to_index[future]
            results[index] = future.result()
            completed += 1
            if log_progress:
                logger.info(f"Progress: {completed}/{total} {label}")

    return results


def count_failures(results: Sequence[ItemResult]) -> int:
    """Number of failed items in a result list."""
    return sum(1 for r in results if not r.ok)
