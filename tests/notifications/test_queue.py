import asyncio
import pytest
from datetime import datetime, timedelta, timezone

from app.services.notifications import (
    NotificationQueue,
    NotificationTask,
    Priority,
    QueueNotRunning,
    TaskPayload,
    TaskSpec,
    TaskType,
    TransientDeliveryFailure,
    retry_delay,
)


def spec(reservation_id=1, priority=Priority.NORMAL, task_type=TaskType.USER_CONFIRMATION, max_attempts=3) -> TaskSpec:
    return TaskSpec(
        type=task_type,
        payload=TaskPayload(reservation_id=reservation_id, recipient_email="user@example.com"),
        priority=priority,
        max_attempts=max_attempts,
    )


def fast_queue(handler, **kwargs) -> NotificationQueue:
    kwargs.setdefault("retry_base_delay", 0.01)
    kwargs.setdefault("recheck_delay", 0.005)
    queue = NotificationQueue(handler, **kwargs)
    queue.start()
    return queue


class FlakyHandler:
    """Fails the first `failures` calls per task id, then succeeds."""

    def __init__(self, failures=0):
        self.failures = failures
        self.calls = []
        self._seen = {}

    async def __call__(self, task: NotificationTask) -> None:
        self.calls.append((task.id, task.attempts))
        count = self._seen.get(task.id, 0)
        self._seen[task.id] = count + 1
        if count < self.failures:
            raise TransientDeliveryFailure(f"attempt {count + 1} failed")


class TestRetryDelay:
    def test_exponential(self):
        assert retry_delay(5.0, 1) == 5.0
        assert retry_delay(5.0, 2) == 10.0
        assert retry_delay(5.0, 3) == 20.0

    def test_never_below_base(self):
        assert retry_delay(5.0, 0) == 5.0


class TestTaskIds:
    @pytest.mark.asyncio
    async def test_id_format(self):
        queue = fast_queue(FlakyHandler())
        task_id = queue.enqueue(spec(reservation_id=42, task_type=TaskType.APPROVAL))
        assert task_id.startswith("approval_42_")
        await queue.join(timeout=1)

    @pytest.mark.asyncio
    async def test_ids_unique(self):
        queue = fast_queue(FlakyHandler())
        ids = {queue.enqueue(spec(reservation_id=1)) for _ in range(20)}
        assert len(ids) == 20
        await queue.join(timeout=1)


class TestOrdering:
    @pytest.mark.asyncio
    async def test_priority_order_with_fifo_ties(self):
        order = []

        async def handler(task):
            order.append(task.payload.reservation_id)

        queue = fast_queue(handler, max_concurrency=1)
        queue.enqueue(spec(1, Priority.LOW))
        queue.enqueue(spec(2, Priority.NORMAL))
        queue.enqueue(spec(3, Priority.HIGH))
        queue.enqueue(spec(4, Priority.HIGH))
        queue.enqueue(spec(5, Priority.NORMAL))

        await queue.join(timeout=1)
        assert order == [3, 4, 2, 5, 1]

    @pytest.mark.asyncio
    async def test_concurrency_bound(self):
        running = 0
        peak = 0

        async def handler(task):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1

        queue = fast_queue(handler, max_concurrency=2)
        for i in range(6):
            queue.enqueue(spec(i))

        await queue.join(timeout=2)
        assert peak == 2
        assert queue.get_stats().succeeded == 6

    def test_rejects_zero_concurrency(self):
        with pytest.raises(ValueError):
            NotificationQueue(FlakyHandler(), max_concurrency=0)


class TestRetries:
    @pytest.mark.asyncio
    async def test_high_priority_succeeds_on_last_attempt(self):
        handler = FlakyHandler(failures=2)
        queue = fast_queue(handler)
        task_id = queue.enqueue(spec(9, Priority.HIGH, TaskType.APPROVAL, max_attempts=3))

        await queue.join(timeout=2)

        assert [attempts for _, attempts in handler.calls] == [0, 1, 2]
        assert all(call_id == task_id for call_id, _ in handler.calls)
        stats = queue.get_stats()
        assert stats.succeeded == 1
        assert stats.retried == 2
        assert stats.failed == 0
        assert stats.pending_count == 0
        assert stats.in_flight_count == 0

    @pytest.mark.asyncio
    async def test_permanent_failure_is_discarded(self):
        handler = FlakyHandler(failures=10)
        queue = fast_queue(handler)
        queue.enqueue(spec(1, max_attempts=2))

        await queue.join(timeout=2)

        assert len(handler.calls) == 2
        stats = queue.get_stats()
        assert stats.failed == 1
        assert stats.retried == 1
        assert stats.pending_count == 0
        assert stats.in_flight_count == 0

    @pytest.mark.asyncio
    async def test_single_attempt_never_retries(self):
        handler = FlakyHandler(failures=1)
        queue = fast_queue(handler)
        queue.enqueue(spec(1, max_attempts=1))

        await queue.join(timeout=1)
        assert len(handler.calls) == 1
        assert queue.get_stats().failed == 1

    @pytest.mark.asyncio
    async def test_failure_does_not_affect_other_tasks(self):
        async def handler(task):
            if task.payload.reservation_id == 1:
                raise RuntimeError("smtp down")

        queue = fast_queue(handler)
        queue.enqueue(spec(1, max_attempts=2))
        queue.enqueue(spec(2))
        queue.enqueue(spec(3))

        await queue.join(timeout=2)
        stats = queue.get_stats()
        assert stats.succeeded == 2
        assert stats.failed == 1

    @pytest.mark.asyncio
    async def test_backoff_grows_between_attempts(self):
        now = datetime(2025, 1, 20, 9, 0, tzinfo=timezone.utc)
        queue = NotificationQueue(FlakyHandler(), retry_base_delay=5.0, clock=lambda: now)
        queue.start()
        task = NotificationTask.from_spec(spec(1, max_attempts=4), created_at=now)

        queue._handle_failure(task, TransientDeliveryFailure("boom"))
        first = task.scheduled_at - now
        queue._handle_failure(task, TransientDeliveryFailure("boom"))
        second = task.scheduled_at - now

        assert first == timedelta(seconds=5)
        assert second == timedelta(seconds=10)
        assert task.attempts == 2
        queue.clear()

    @pytest.mark.asyncio
    async def test_delayed_retry_waits_for_schedule(self):
        loop = asyncio.get_running_loop()
        call_times = []

        async def handler(task):
            call_times.append(loop.time())
            if len(call_times) == 1:
                raise TransientDeliveryFailure("first try fails")

        queue = fast_queue(handler, retry_base_delay=0.05)
        queue.enqueue(spec(1))
        await queue.join(timeout=2)

        assert len(call_times) == 2
        assert call_times[1] - call_times[0] >= 0.04


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_stats_return_to_idle(self):
        queue = fast_queue(FlakyHandler())
        for i in range(3):
            queue.enqueue(spec(i))
        assert queue.get_stats().pending_count == 3

        await queue.join(timeout=1)
        stats = queue.get_stats()
        assert stats.pending_count == 0
        assert stats.in_flight_count == 0
        assert stats.succeeded == 3

    @pytest.mark.asyncio
    async def test_enqueue_from_worker_thread(self):
        handler = FlakyHandler()
        queue = fast_queue(handler)

        task_id = await asyncio.to_thread(queue.enqueue, spec(5))
        await asyncio.sleep(0.01)
        await queue.join(timeout=1)

        assert handler.calls[0][0] == task_id

    @pytest.mark.asyncio
    async def test_clear_drops_pending(self):
        handler = FlakyHandler()
        queue = fast_queue(handler)
        queue.enqueue(spec(1))
        queue.enqueue(spec(2))
        queue.clear()

        await queue.join(timeout=1)
        assert handler.calls == []
        assert queue.get_stats().pending_count == 0

    @pytest.mark.asyncio
    async def test_shutdown_drops_pending_and_finishes_in_flight(self):
        async def handler(task):
            await asyncio.sleep(0.01)

        queue = fast_queue(handler, max_concurrency=1)
        for i in range(3):
            queue.enqueue(spec(i))
        await asyncio.sleep(0)  # let the first drain dispatch one task

        dropped = await queue.shutdown()

        assert dropped == 2
        stats = queue.get_stats()
        assert stats.succeeded == 1
        assert stats.pending_count == 0
        assert stats.in_flight_count == 0

    @pytest.mark.asyncio
    async def test_enqueue_after_shutdown(self):
        queue = fast_queue(FlakyHandler())
        await queue.shutdown()
        with pytest.raises(QueueNotRunning):
            queue.enqueue(spec(1))

    def test_enqueue_without_loop(self):
        queue = NotificationQueue(FlakyHandler())
        with pytest.raises(QueueNotRunning):
            queue.enqueue(spec(1))

    @pytest.mark.asyncio
    async def test_join_times_out_while_busy(self):
        release = asyncio.Event()

        async def handler(task):
            await release.wait()

        queue = fast_queue(handler)
        queue.enqueue(spec(1))
        with pytest.raises(asyncio.TimeoutError):
            await queue.join(timeout=0.02)

        release.set()
        await queue.join(timeout=1)
        assert queue.get_stats().succeeded == 1
