"""Outbox worker for delivering outbound events downstream.

The worker runs as a background task within the FastAPI application,
polling the outbound_events table on a fixed delay and delivering due
records one by one.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.outbox.models import OutboundEventModel
from infrastructure.outbox.repository import OutboundEventRepository
from shared_kernel.outbox.circuit_breaker import CircuitBreaker
from shared_kernel.outbox.exceptions import DeliveryTimeoutError
from shared_kernel.outbox.value_objects import EventStatus

if TYPE_CHECKING:
    from shared_kernel.outbox.observability import OutboxWorkerProbe
    from shared_kernel.outbox.ports import EventDispatcher


def _utc_now() -> datetime:
    return datetime.now(UTC)


class OutboxWorker:
    """Background worker that delivers outbound events with retry and backoff.

    Exactly one worker may run system-wide. Each cycle:

    1. Skips entirely (without reading the queue) while the circuit is open.
    2. Fetches up to batch_size due records, oldest first.
    3. Delivers them in order, re-checking the circuit before each one and
       stopping the batch as soon as it trips.
    4. Commits each record's outcome before moving to the next.

    Cycles never overlap: a cycle requested while another is running
    returns immediately. The worker owns its CircuitBreaker; nothing else
    reads or writes that state.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        dispatcher: EventDispatcher,
        probe: OutboxWorkerProbe,
        breaker: CircuitBreaker | None = None,
        poll_interval_seconds: float = 5.0,
        batch_size: int = 50,
        delivery_timeout_seconds: float = 10.0,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize the worker.

        Args:
            session_factory: Factory for creating database sessions
            dispatcher: Routes each record to its downstream delivery handler
            probe: Observability probe for logging/metrics
            breaker: Circuit breaker guarding delivery (default: 5 failures, 60s)
            poll_interval_seconds: Delay between the end of one cycle and the next
            batch_size: Maximum records fetched per cycle
            delivery_timeout_seconds: Upper bound for one delivery attempt
            clock: Source of the current time (UTC)
        """
        self._session_factory = session_factory
        self._dispatcher = dispatcher
        self._probe = probe
        self._breaker = breaker or CircuitBreaker(clock=clock)
        self._poll_interval = poll_interval_seconds
        self._batch_size = batch_size
        self._delivery_timeout = delivery_timeout_seconds
        self._clock = clock
        self._running = False
        self._cycle_lock = asyncio.Lock()
        self._task: asyncio.Task[None] | None = None

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the poll loop as a background task."""
        if self._task is not None:
            return

        self._running = True
        self._probe.worker_started()
        self._task = asyncio.create_task(self._poll_loop())

    async def stop(self) -> None:
        """Gracefully stop the worker.

        Cancels the poll loop and waits for it to finish. A delivery in
        flight is cancelled; its record keeps its previous state and is
        picked up again by the next worker.
        """
        self._running = False

        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        self._probe.worker_stopped()

    async def _poll_loop(self) -> None:
        """Run cycles with a fixed delay between them until stopped."""
        self._probe.poll_loop_started()

        while self._running:
            try:
                await self.run_cycle()
            except Exception as e:
                self._probe.poll_loop_error(str(e))

            await asyncio.sleep(self._poll_interval)

    async def run_cycle(self) -> int:
        """Run one poll cycle unless one is already in progress.

        Returns:
            Number of delivery attempts made in this cycle
        """
        if self._cycle_lock.locked():
            self._probe.cycle_skipped_overlapping()
            return 0

        async with self._cycle_lock:
            return await self._process_batch()

    async def _process_batch(self) -> int:
        """Fetch due records and attempt delivery of each, in order."""
        if self._breaker.is_open():
            self._probe.cycle_skipped_circuit_open(self._breaker.open_until)
            return 0

        async with self._session_factory() as session:
            repository = OutboundEventRepository(session)
            records = await repository.fetch_due(self._clock(), self._batch_size)

            if not records:
                return 0

            self._probe.batch_fetched(len(records))

            attempted = 0
            for index, record in enumerate(records):
                if self._breaker.is_open():
                    self._probe.batch_halted_circuit_open(len(records) - index)
                    break

                await self._deliver(record)
                await session.commit()
                attempted += 1

            self._probe.batch_processed(attempted)
            return attempted

    async def _deliver(self, record: OutboundEventModel) -> None:
        """Attempt delivery of one record and apply the outcome to it.

        The record is only marked DELIVERED after the dispatcher returned.
        Any exception, including a timeout, counts as a failed attempt.
        """
        entry = record.to_value_object()

        try:
            await self._dispatch_with_timeout(entry)
        except Exception as e:
            self._handle_failure(record, _describe(e))
        else:
            record.mark_delivered(self._clock())
            cleared = self._breaker.record_success()
            self._probe.event_delivered(record.id, record.event_type, record.event_id)
            self._probe.circuit_reset(cleared)

    async def _dispatch_with_timeout(self, entry) -> None:
        try:
            await asyncio.wait_for(
                self._dispatcher.deliver(entry),
                timeout=self._delivery_timeout,
            )
        except TimeoutError as e:
            raise DeliveryTimeoutError(
                f"Delivery timed out after {self._delivery_timeout}s"
            ) from e

    def _handle_failure(self, record: OutboundEventModel, error: str) -> None:
        """Apply a failed attempt to the record and feed the circuit breaker."""
        record.mark_failed(error, self._clock())

        if record.status == EventStatus.PERMANENTLY_FAILED:
            self._probe.event_permanently_failed(
                record.id,
                record.event_type,
                record.event_id,
                error,
                record.retry_count,
            )
        else:
            self._probe.event_delivery_failed(
                record.id,
                record.event_id,
                error,
                record.retry_count,
                record.next_retry_at,
            )

        if self._breaker.record_failure():
            self._probe.circuit_opened(
                self._breaker.consecutive_failures,
                self._breaker.open_until,
            )


def _describe(error: Exception) -> str:
    message = str(error)
    return message if message else type(error).__name__
