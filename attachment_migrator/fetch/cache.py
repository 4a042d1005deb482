"""
Per-run deduplication of attachment work.

FetchCache maps each URL to the single task that migrates it. The first
resolve() for a URL schedules the worker; every later call, including calls
made while the first is still running, gets the same task back. join() is
the barrier that waits for all scheduled tasks.

Inserts happen synchronously on the event loop thread (no await between the
lookup and the insert), which is what guarantees at most one worker per URL.
A multi-threaded variant would need a lock around resolve().
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Generic, TypeVar

T = TypeVar("T")


class FetchCache(Generic[T]):
    """Single-flight map from URL to the task producing its result.

    Attributes:
        worker_count: Number of workers started (one per distinct URL). A
            worker may finish without any network fetch, e.g. for a URL that
            is already published.
    """

    def __init__(self, worker: Callable[[str], Awaitable[T]]):
        """Initialize the cache.

        Args:
            worker: Coroutine function run once per distinct URL
        """
        self._worker = worker
        self._tasks: dict[str, asyncio.Task[T]] = {}
        self.worker_count = 0

    def __contains__(self, url: object) -> bool:
        return url in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def resolve(self, url: str) -> asyncio.Task[T]:
        """Return the task for a URL, scheduling the worker on first use.

        Must be called from within a running event loop.
        """
        task = self._tasks.get(url)
        if task is None:
            task = asyncio.create_task(self._run(url), name=f"migrate:{url}")
            self._tasks[url] = task
        return task

    async def _run(self, url: str) -> T:
        self.worker_count += 1
        return await self._worker(url)

    async def join(self) -> dict[str, T]:
        """Wait for every scheduled task and return results by URL.

        The first failure propagates; there is no partial result.
        """
        urls = list(self._tasks)
        results = await asyncio.gather(*(self._tasks[url] for url in urls))
        return dict(zip(urls, results))
