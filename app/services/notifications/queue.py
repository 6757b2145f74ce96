"""
In-process notification queue.

Decouples reservation state changes from sending email: callers enqueue a
task and return immediately, the queue delivers it on the event loop with
bounded concurrency and retries failures with exponential backoff.

Nothing is persisted. Pending and in-flight tasks are lost on restart; the
reservation record in the database stays authoritative either way.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

from .types import NotificationTask, QueueStats, TaskSpec


logger = logging.getLogger(__name__)

Handler = Callable[[NotificationTask], Awaitable[None]]


class QueueNotRunning(Exception):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def retry_delay(base_delay: float, attempts: int) -> float:
    """Backoff before the next try after `attempts` failures: base * 2^(attempts-1)."""
    return base_delay * (2 ** (max(attempts, 1) - 1))


class NotificationQueue:
    """
    Priority-ordered retrying task queue driven by a single event loop.

    All mutation of the pending list and the in-flight map happens on the
    bound loop, so no locking is needed. `enqueue` may be called from worker
    threads (sync FastAPI handlers); it hands the task to the loop.
    """

    def __init__(
        self,
        handler: Handler,
        max_concurrency: int = 10,
        retry_base_delay: float = 5.0,
        recheck_delay: float = 1.0,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self._handler = handler
        self.max_concurrency = max_concurrency
        self.retry_base_delay = retry_base_delay
        self.recheck_delay = recheck_delay
        self._clock = clock or _utcnow

        self._pending: list[NotificationTask] = []
        self._in_flight: dict[str, asyncio.Task] = {}
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._idle: Optional[asyncio.Event] = None
        self._drain_scheduled = False
        self._recheck_handle: Optional[asyncio.TimerHandle] = None
        self._closed = False

        self._succeeded = 0
        self._retried = 0
        self._failed = 0

    # ---- lifecycle ----

    def start(self) -> None:
        """Bind the queue to the running event loop."""
        self._loop = asyncio.get_running_loop()
        self._idle = asyncio.Event()
        self._closed = False
        self._update_idle()

    async def shutdown(self) -> int:
        """Stop accepting work, drop pending tasks and wait for in-flight ones.

        Returns the number of pending tasks dropped.
        """
        self._closed = True
        self._cancel_recheck()
        dropped = len(self._pending)
        self._pending.clear()
        if dropped:
            logger.warning(f"Notification queue shutting down, dropping {dropped} pending task(s)")

        in_flight = list(self._in_flight.values())
        if in_flight:
            await asyncio.gather(*in_flight, return_exceptions=True)
        self._update_idle()
        return dropped

    async def join(self, timeout: Optional[float] = None) -> None:
        """Wait until nothing is pending or in flight."""
        if self._idle is None:
            return
        await asyncio.wait_for(self._idle.wait(), timeout)

    def clear(self) -> None:
        """Drop every pending task. In-flight tasks still run to completion."""
        self._pending.clear()
        self._cancel_recheck()
        self._update_idle()

    # ---- public API ----

    def enqueue(self, spec: TaskSpec) -> str:
        if self._closed:
            raise QueueNotRunning("Notification queue has been shut down")
        if self._loop is None:
            try:
                self.start()
            except RuntimeError as e:
                raise QueueNotRunning("Notification queue is not bound to an event loop") from e

        task = NotificationTask.from_spec(spec, created_at=self._clock())
        if self._on_loop():
            self._accept(task)
        else:
            self._loop.call_soon_threadsafe(self._accept, task)
        return task.id

    def get_stats(self) -> QueueStats:
        return QueueStats(
            pending_count=len(self._pending),
            in_flight_count=len(self._in_flight),
            succeeded=self._succeeded,
            retried=self._retried,
            failed=self._failed,
        )

    # ---- internals ----

    def _on_loop(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False

    def _accept(self, task: NotificationTask) -> None:
        if self._closed:
            logger.warning(f"Dropping task {task.id}: queue is shut down")
            return
        self._insert(task)
        logger.info(f"Queued notification task {task.id} (priority={task.priority.value}, pending={len(self._pending)})")
        self._schedule_drain()

    def _insert(self, task: NotificationTask) -> None:
        # Before the first task of strictly lower priority; ties keep arrival order.
        index = next(
            (i for i, existing in enumerate(self._pending) if existing.priority.rank > task.priority.rank),
            len(self._pending),
        )
        self._pending.insert(index, task)
        self._update_idle()

    def _schedule_drain(self) -> None:
        if self._drain_scheduled or self._closed:
            return
        self._drain_scheduled = True
        self._loop.call_soon(self._drain)

    def _drain(self) -> None:
        self._drain_scheduled = False
        if self._closed:
            return

        now = self._clock()
        while self._pending and len(self._in_flight) < self.max_concurrency:
            task = self._pending.pop(0)
            if task.scheduled_at is not None and task.scheduled_at > now:
                # Delayed retry: park it at the tail and end this pass.
                self._pending.append(task)
                break
            self._dispatch(task)

        if self._pending:
            self._schedule_recheck()
        self._update_idle()

    def _dispatch(self, task: NotificationTask) -> None:
        self._in_flight[task.id] = self._loop.create_task(self._process(task), name=f"notification:{task.id}")

    async def _process(self, task: NotificationTask) -> None:
        logger.info(f"Processing notification task: {task.type.value} for reservation {task.payload.reservation_id}")
        error: Optional[Exception] = None
        try:
            await self._handler(task)
        except Exception as e:
            error = e
        finally:
            self._in_flight.pop(task.id, None)

        if error is None:
            self._succeeded += 1
            logger.info(f"Successfully processed notification task: {task.id}")
        else:
            self._handle_failure(task, error)

        if self._pending:
            self._schedule_drain()
        self._update_idle()

    def _handle_failure(self, task: NotificationTask, error: Exception) -> None:
        task.attempts += 1
        if task.attempts < task.max_attempts:
            delay = retry_delay(self.retry_base_delay, task.attempts)
            task.scheduled_at = self._clock() + timedelta(seconds=delay)
            self._retried += 1
            logger.warning(
                f"Failed to process task {task.id} (attempt {task.attempts}/{task.max_attempts}): "
                f"{type(error).__name__}: {error}. Retrying in {delay:.2f}s"
            )
            if not self._closed:
                self._pending.append(task)
        else:
            self._failed += 1
            logger.error(
                f"Task {task.id} exceeded max attempts ({task.max_attempts}) and will be discarded: "
                f"{type(error).__name__}: {error}"
            )

    def _schedule_recheck(self) -> None:
        if self._recheck_handle is not None or self._closed:
            return
        self._recheck_handle = self._loop.call_later(self.recheck_delay, self._on_recheck)

    def _on_recheck(self) -> None:
        self._recheck_handle = None
        self._drain()

    def _cancel_recheck(self) -> None:
        if self._recheck_handle is not None:
            self._recheck_handle.cancel()
            self._recheck_handle = None

    def _update_idle(self) -> None:
        if self._idle is None:
            return
        if self._pending or self._in_flight:
            self._idle.clear()
        else:
            self._idle.set()
