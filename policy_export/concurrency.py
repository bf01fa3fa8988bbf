"""
policy_export.concurrency — Sequential or bounded-pool execution of per-item work.

Runs a function over a list of items either one at a time (the default) or on
a ThreadPoolExecutor, always returning results in input order.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_items(
    items: Sequence[T],
    func: Callable[[T], Any],
    max_workers: int = 1,
    show_progress: bool = True,
    label: str = "item",
) -> List[Optional[Any]]:
    """
    Apply func to every item, sequentially or on a bounded worker pool.

    A failing call is logged and leaves None in its result slot; the other
    items still run.

    Args:
        items: Work items, processed in order when sequential
        func: Callable taking one item
        max_workers: 1 = sequential; >1 = size of the thread pool
        show_progress: Log a progress line per completed item
        label: Noun used in progress messages

    Returns:
        list: One result per item, in input order

    Example:
        >>> run_items(arns, lambda arn: export_policy(iam, arn, out_dir), max_workers=4)
    """
    if max_workers <= 1 or len(items) <= 1:
        return _run_items_sequential(items, func, show_progress, label)

    total = len(items)
    results: List[Optional[Any]] = [None] * total
    completed = 0

    logger.info("Processing %d %s(s) concurrently (max_workers=%d)", total, label, max_workers)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_index = {executor.submit(func, item): i for i, item in enumerate(items)}

        for future in as_completed(future_to_index):
            index = future_to_index[future]
            completed += 1
            try:
                results[index] = future.result()
            except Exception as e:
                logger.error("Error processing %s %s: %s", label, items[index], e)

            if show_progress:
                progress = (completed / total) * 100
                logger.info(
                    "[%.1f%%] Completed %s %d/%d: %s", progress, label, completed, total, items[index]
                )

    return results


def _run_items_sequential(
    items: Sequence[T],
    func: Callable[[T], Any],
    show_progress: bool = True,
    label: str = "item",
) -> List[Optional[Any]]:
    """Process items one at a time, in order."""
    results: List[Optional[Any]] = []
    total = len(items)

    for i, item in enumerate(items, 1):
        if show_progress:
            progress = (i / total) * 100
            logger.info("[%.1f%%] Processing %s %d/%d: %s", progress, label, i, total, item)

        try:
            results.append(func(item))
        except Exception as e:
            logger.error("Error processing %s %s: %s", label, item, e)
            results.append(None)

    return results
