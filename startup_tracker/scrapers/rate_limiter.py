"""
Rate limiting for outbound calls.

A RateLimiter is a single-lane scheduler: submitted tasks run one at a time,
in submission order, with a fixed minimum gap between consecutive task starts.
Create one limiter per external service and pass it to everything that talks
to that service.
"""

import asyncio
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Dict, Optional, Tuple, TypeVar

T = TypeVar("T")


class RateLimiter:
    """Serializes async tasks so no two start closer than ``interval`` seconds apart."""

    def __init__(self, requests_per_second: float, name: str = "default"):
        if requests_per_second <= 0:
            raise ValueError("requests_per_second must be positive")
        self.name = name
        self.interval = 1.0 / requests_per_second
        self._queue: Deque[Tuple[Callable[[], Awaitable[Any]], asyncio.Future]] = deque()
        self._draining = False
        self._drain_task: Optional[asyncio.Task] = None
        self._last_start: Optional[float] = None
        self.stats = {
            'submitted': 0,
            'completed': 0,
            'failed': 0,
        }

    async def submit(self, task: Callable[[], Awaitable[T]]) -> T:
        """
        Queue a task and wait for its outcome.

        Args:
            task: Zero-argument callable returning an awaitable

        Returns:
            Whatever the task returns; the task's exception is re-raised here
        """
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        self._queue.append((task, future))
        self.stats['submitted'] += 1

        if not self._draining:
            self._draining = True
            self._drain_task = loop.create_task(self._drain())

        return await future

    async def _drain(self):
        """Run queued tasks until the queue is empty."""
        loop = asyncio.get_running_loop()
        try:
            while self._queue:
                if self._last_start is not None:
                    wait = max(0.0, self._last_start + self.interval - loop.time())
                    if wait > 0:
                        await asyncio.sleep(wait)

                task, future = self._queue.popleft()
                self._last_start = loop.time()

                try:
                    result = await task()
                except Exception as e:
                    self.stats['failed'] += 1
                    if not future.done():
                        future.set_exception(e)
                else:
                    self.stats['completed'] += 1
                    if not future.done():
                        future.set_result(result)
        finally:
            self._draining = False
            # Cancelled mid-drain: fail whatever is still waiting
            while self._queue:
                _, future = self._queue.popleft()
                if not future.done():
                    future.cancel()

    @property
    def pending(self) -> int:
        """Number of tasks waiting to start."""
        return len(self._queue)

    def get_stats(self) -> Dict[str, Any]:
        """Get rate limiting statistics."""
        return {
            "name": self.name,
            "interval_seconds": self.interval,
            "pending": self.pending,
            "draining": self._draining,
            **self.stats,
        }

    def __repr__(self) -> str:
        return f"<RateLimiter(name='{self.name}', interval={self.interval:.3f}s)>"
