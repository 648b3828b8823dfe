"""Bounded worker pool for asyncio jobs.

Jobs are queued in an unbounded FIFO queue and consumed by a fixed number of
worker tasks, so at most ``concurrency`` jobs run at any moment no matter how
fast the producer submits them.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[Any]]


class WorkerPool:
    """Runs submitted jobs with a hard ceiling on concurrency."""

    def __init__(self, concurrency: int):
        """Initialize worker pool.

        Args:
            concurrency: Maximum number of jobs executing at the same time
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.concurrency = concurrency
        self._queue: Optional["asyncio.Queue[Tuple[Job, asyncio.Future]]"] = None
        self._workers: List[asyncio.Task] = []
        self._closed = False

        self.active = 0
        self.peak_active = 0
        self.submitted = 0
        self.completed = 0

    @property
    def pending(self) -> int:
        """Number of submitted jobs that have not finished yet."""
        return self.submitted - self.completed

    def _start(self) -> None:
        # The queue and workers must be created inside the running loop.
        self._queue = asyncio.Queue()
        self._workers = [
            asyncio.create_task(self._worker(), name=f"worker-pool-{i}")
            for i in range(self.concurrency)
        ]

    def submit(self, job: Job) -> asyncio.Future:
        """Queue a job without waiting for a free slot.

        Args:
            job: Zero-argument coroutine function

        Returns:
            Future resolved with the job's result or exception
        """
        if self._closed:
            raise RuntimeError("Cannot submit to a drained worker pool")
        if self._queue is None:
            self._start()

        future = asyncio.get_running_loop().create_future()
        self._queue.put_nowait((job, future))
        self.submitted += 1
        return future

    async def _worker(self) -> None:
        while True:
            job, future = await self._queue.get()
            self.active += 1
            self.peak_active = max(self.peak_active, self.active)
            try:
                result = await job()
            except asyncio.CancelledError:
                future.cancel()
                raise
            except Exception as e:
                logger.error("Worker pool job failed: %s", e, exc_info=True)
                if not future.cancelled():
                    future.set_exception(e)
            else:
                if not future.cancelled():
                    future.set_result(result)
            finally:
                self.active -= 1
                self.completed += 1
                self._queue.task_done()

    async def drain(self) -> None:
        """Wait until every submitted job has finished, then stop the workers."""
        self._closed = True
        if self._queue is None:
            return

        await self._queue.join()

        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.debug(
            "Worker pool drained: %d jobs completed, peak concurrency %d",
            self.completed,
            self.peak_active,
        )

    async def __aenter__(self) -> "WorkerPool":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.drain()
