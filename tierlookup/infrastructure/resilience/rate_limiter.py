"""Paced request queue.

Every outbound call goes through one RequestScheduler: operations start in
submission order, one at a time, and consecutive starts are at least
``min_interval`` seconds apart.
"""

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Deque, Optional

from tierlookup.domain.events.api_events import ApiCallDeferred, RequestQueued, dispatch_event

logger = logging.getLogger(__name__)

DEFAULT_MIN_INTERVAL_SECONDS = 1.0  # 1 request per second

Operation = Callable[[], Awaitable[Any]]


@dataclass
class QueuedTask:
    """An operation waiting for its turn, and the future its caller awaits."""
    operation: Operation
    future: asyncio.Future


class RequestScheduler:
    """Single-drain FIFO queue enforcing a minimum gap between request starts.

    No priorities and no cancellation: once enqueued, an operation runs
    exactly once. The queue is unbounded.
    """

    def __init__(
        self,
        min_interval: float = DEFAULT_MIN_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initializes the scheduler.

        Args:
            min_interval: Minimum seconds between two consecutive starts.
            clock: Monotonic time source.
            sleep: Coroutine used for pacing waits.
        """
        if min_interval < 0:
            raise ValueError("min_interval must be non-negative.")
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self.last_request_time: Optional[float] = None
        self.queue: Deque[QueuedTask] = deque()
        self.draining = False
        self._drain_task: Optional[asyncio.Task] = None
        logger.info(f"RequestScheduler initialized: min_interval={min_interval}s")

    def __len__(self) -> int:
        return len(self.queue)

    async def enqueue(self, operation: Operation) -> Any:
        """Runs ``operation`` when its turn comes and returns its result.

        Exceptions raised by the operation propagate to the caller unchanged.
        """
        future = asyncio.get_running_loop().create_future()
        self.queue.append(QueuedTask(operation=operation, future=future))
        start_drain = not self.draining
        if start_drain:
            self.draining = True
            self._drain_task = asyncio.create_task(self._drain())
        dispatch_event(RequestQueued(queue_length=len(self.queue), drain_started=start_drain))
        return await future

    async def _drain(self) -> None:
        try:
            while self.queue:
                if self.last_request_time is not None:
                    elapsed = self._clock() - self.last_request_time
                    if elapsed < self.min_interval:
                        wait_time = self.min_interval - elapsed
                        dispatch_event(ApiCallDeferred(wait_time_seconds=wait_time))
                        await self._sleep(wait_time)

                task = self.queue.popleft()
                self.last_request_time = self._clock()
                try:
                    result = await task.operation()
                except Exception as e:
                    if not task.future.done():
                        task.future.set_exception(e)
                except BaseException:
                    # Cancellation or interpreter exit: stop draining
                    if not task.future.done():
                        task.future.cancel()
                    raise
                else:
                    if not task.future.done():
                        task.future.set_result(result)
        finally:
            self.draining = False
            self._drain_task = None
            self._abandon_queued()

    def _abandon_queued(self) -> None:
        """Cancels callers still waiting after the drain stopped early."""
        if self.queue:
            logger.warning(f"Request drain stopped with {len(self.queue)} queued request(s); cancelling them.")
        while self.queue:
            task = self.queue.popleft()
            if not task.future.done():
                task.future.cancel()

    def reset(self) -> None:
        """Forgets the last request time. Only allowed while idle."""
        if self.draining or self.queue:
            raise RuntimeError("Cannot reset a RequestScheduler while requests are pending.")
        self.last_request_time = None
