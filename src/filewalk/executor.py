"""Worker pool that runs a fixed list of tasks under a concurrency cap."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Sequence, TypeVar

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

TaskFactory = Callable[[], Awaitable[T]]


@dataclass(frozen=True)
class TaskOutcome(Generic[T]):
    """Settled result of one task: either a value or the error it raised."""

    value: T | None = None
    error: BaseException | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class BoundedExecutor:
    """Runs every task exactly once with at most ``concurrency`` in flight.

    A fixed set of workers drains a queue of pending tasks; a worker picks up
    the next task as soon as its current one settles. An exception raised by
    one task is stored in that task's outcome and never reaches the others.
    Cancellation is not captured and propagates to the caller.
    """

    def __init__(self, concurrency: int = 1) -> None:
        """Initialize the executor.

        Args:
            concurrency: Maximum number of tasks running at the same time.

        Raises:
            ConfigurationError: If concurrency is below 1.

        """
        if concurrency < 1:
            raise ConfigurationError(f"concurrency must be >= 1, got {concurrency}")
        self.concurrency = concurrency
        self.in_flight = 0
        self.peak_in_flight = 0

    async def run(self, tasks: Sequence[TaskFactory[T]]) -> list[TaskOutcome[T]]:
        """Execute all tasks and wait for every one of them to settle.

        Args:
            tasks: Zero-argument callables returning awaitables.

        Returns:
            One outcome per task, in input order.

        """
        self.peak_in_flight = 0
        outcomes: list[TaskOutcome[T] | None] = [None] * len(tasks)
        if not tasks:
            return []

        queue: asyncio.Queue[tuple[int, TaskFactory[T]]] = asyncio.Queue()
        for index, task in enumerate(tasks):
            queue.put_nowait((index, task))

        workers = [
            asyncio.create_task(self._worker(queue, outcomes), name=f"filewalk-worker-{n}")
            for n in range(min(self.concurrency, len(tasks)))
        ]
        try:
            await asyncio.gather(*workers)
        except BaseException:
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
            raise

        return [outcome for outcome in outcomes if outcome is not None]

    async def _worker(
        self,
        queue: asyncio.Queue[tuple[int, TaskFactory[T]]],
        outcomes: list[TaskOutcome[T] | None],
    ) -> None:
        while True:
            try:
                index, task = queue.get_nowait()
            except asyncio.QueueEmpty:
                return

            outcomes[index] = await self._run_one(index, task)

    async def _run_one(self, index: int, task: TaskFactory[T]) -> TaskOutcome[T]:
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            value = await task()
        except Exception as e:
            logger.debug("Task %d failed: %s", index, e)
            return TaskOutcome(error=e)
        finally:
            self.in_flight -= 1
        return TaskOutcome(value=value)
