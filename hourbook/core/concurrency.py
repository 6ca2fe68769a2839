"""
Concurrent fan-out of independent reads.

Every task is started; the join waits for all of them. With
``all_or_nothing`` the first failure (in submission order) is re-raised
once the group has finished, so one failing sub-fetch fails the group.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Mapping

Task = Callable[[], Any]


def gather(tasks: Mapping[str, Task], *, max_workers: int = 8) -> Dict[str, Any]:
    """Run named tasks concurrently; all-or-nothing join."""
    if not tasks:
        return {}
    workers = max(1, min(max_workers, len(tasks)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {name: executor.submit(task) for name, task in tasks.items()}
        # result() re-raises the task's own exception
        return {name: future.result() for name, future in futures.items()}


def gather_settled(tasks: Mapping[str, Task], *, max_workers: int = 8) -> Dict[str, Any]:
    """Run named tasks concurrently; failures are returned in place of results."""
    if not tasks:
        return {}
    workers = max(1, min(max_workers, len(tasks)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {name: executor.submit(task) for name, task in tasks.items()}
        settled: Dict[str, Any] = {}
        for name, future in futures.items():
            error = future.exception()
            settled[name] = error if error is not None else future.result()
        return settled
