"""Observability probes for the outbox.

Following Domain Oriented Observability, probes capture domain-significant
events and metrics without cluttering business logic with logging concerns.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

import structlog

logger = structlog.get_logger()


class OutboxWorkerProbe(Protocol):
    """Protocol for outbox worker observability.

    Implementations can log, emit metrics, or send traces.
    """

    def worker_started(self) -> None:
        """Called when the worker starts."""
        ...

    def worker_stopped(self) -> None:
        """Called when the worker stops."""
        ...

    def poll_loop_started(self) -> None:
        """Called when the poll loop starts."""
        ...

    def poll_loop_error(self, error: str) -> None:
        """Called when a poll cycle raises unexpectedly."""
        ...

    def cycle_skipped_overlapping(self) -> None:
        """Called when a cycle is requested while another is still running."""
        ...

    def cycle_skipped_circuit_open(self, open_until: datetime) -> None:
        """Called when a cycle is skipped because the circuit is open."""
        ...

    def batch_fetched(self, count: int) -> None:
        """Called when due records have been fetched."""
        ...

    def batch_halted_circuit_open(self, remaining: int) -> None:
        """Called when the circuit trips mid-batch and the rest is left for later."""
        ...

    def batch_processed(self, attempted: int) -> None:
        """Called when a batch finishes."""
        ...

    def event_delivered(self, record_id: UUID, event_type: str, event_id: str) -> None:
        """Called when a record is delivered."""
        ...

    def event_delivery_failed(
        self,
        record_id: UUID,
        event_id: str,
        error: str,
        retry_count: int,
        next_retry_at: datetime,
    ) -> None:
        """Called when delivery fails and the record will be retried."""
        ...

    def event_permanently_failed(
        self,
        record_id: UUID,
        event_type: str,
        event_id: str,
        error: str,
        retry_count: int,
    ) -> None:
        """Called when a record exhausts its retries. This is the alerting signal."""
        ...

    def circuit_opened(self, consecutive_failures: int, open_until: datetime) -> None:
        """Called when the circuit breaker opens."""
        ...

    def circuit_reset(self, cleared_failures: int) -> None:
        """Called when a success closes a circuit that had recorded failures."""
        ...

    def unknown_event_type(self, record_id: UUID, event_type: str) -> None:
        """Called when a record carries an event type no handler recognizes."""
        ...

    def event_without_consumer(self, event_type: str, event_id: str) -> None:
        """Called when an event kind has no downstream consumer configured."""
        ...


class DefaultOutboxWorkerProbe:
    """Default implementation using structlog.

    Logs all worker events with appropriate log levels.
    """

    def __init__(self) -> None:
        """Initialize the probe with a logger."""
        self._log = logger.bind(component="outbox_worker")

    def worker_started(self) -> None:
        """Log worker start."""
        self._log.info("outbox_worker_started")

    def worker_stopped(self) -> None:
        """Log worker stop."""
        self._log.info("outbox_worker_stopped")

    def poll_loop_started(self) -> None:
        """Log poll loop start."""
        self._log.info("outbox_poll_loop_started")

    def poll_loop_error(self, error: str) -> None:
        """Log poll loop error."""
        self._log.warning("outbox_poll_loop_error", error=error)

    def cycle_skipped_overlapping(self) -> None:
        self._log.debug("outbox_cycle_skipped_overlapping")

    def cycle_skipped_circuit_open(self, open_until: datetime) -> None:
        self._log.debug(
            "outbox_cycle_skipped_circuit_open",
            open_until=open_until.isoformat(),
        )

    def batch_fetched(self, count: int) -> None:
        self._log.debug("outbox_batch_fetched", count=count)

    def batch_halted_circuit_open(self, remaining: int) -> None:
        self._log.info("outbox_batch_halted_circuit_open", remaining=remaining)

    def batch_processed(self, attempted: int) -> None:
        """Log batch processing."""
        if attempted > 0:
            self._log.info("outbox_batch_processed", attempted=attempted)

    def event_delivered(self, record_id: UUID, event_type: str, event_id: str) -> None:
        """Log successful delivery."""
        self._log.info(
            "outbox_event_delivered",
            record_id=str(record_id),
            event_type=event_type,
            event_id=event_id,
        )

    def event_delivery_failed(
        self,
        record_id: UUID,
        event_id: str,
        error: str,
        retry_count: int,
        next_retry_at: datetime,
    ) -> None:
        """Log failed delivery that will be retried."""
        self._log.warning(
            "outbox_event_delivery_failed",
            record_id=str(record_id),
            event_id=event_id,
            error=error,
            retry_count=retry_count,
            next_retry_at=next_retry_at.isoformat(),
        )

    def event_permanently_failed(
        self,
        record_id: UUID,
        event_type: str,
        event_id: str,
        error: str,
        retry_count: int,
    ) -> None:
        """Log a record that exhausted its retries."""
        self._log.error(
            "outbox_event_permanently_failed",
            record_id=str(record_id),
            event_type=event_type,
            event_id=event_id,
            error=error,
            retry_count=retry_count,
            alert=True,
        )

    def circuit_opened(self, consecutive_failures: int, open_until: datetime) -> None:
        self._log.warning(
            "outbox_circuit_opened",
            consecutive_failures=consecutive_failures,
            open_until=open_until.isoformat(),
            alert=True,
        )

    def circuit_reset(self, cleared_failures: int) -> None:
        if cleared_failures > 0:
            self._log.info("outbox_circuit_reset", cleared_failures=cleared_failures)

    def unknown_event_type(self, record_id: UUID, event_type: str) -> None:
        """Log a record whose event type has no handler.

        Such records are retried like transient failures until they are
        permanently failed.
        """
        self._log.warning(
            "outbox_unknown_event_type",
            record_id=str(record_id),
            event_type=event_type,
        )

    def event_without_consumer(self, event_type: str, event_id: str) -> None:
        self._log.info(
            "outbox_event_without_consumer",
            event_type=event_type,
            event_id=event_id,
        )


class OutboxPublisherProbe(Protocol):
    """Protocol for event publisher observability."""

    def event_recorded(self, event_type: str, event_id: str) -> None:
        """Called when an event is added to the outbox."""
        ...

    def event_serialization_failed(self, event_type: str, error: str) -> None:
        """Called when an event could not be serialized."""
        ...

    def sync_delivery_succeeded(self, event_type: str, event_id: str) -> None:
        """Called when a best-effort synchronous delivery succeeds."""
        ...

    def sync_delivery_failed(self, event_type: str, event_id: str, error: str) -> None:
        """Called when a best-effort synchronous delivery fails."""
        ...


class DefaultOutboxPublisherProbe:
    """Default implementation using structlog."""

    def __init__(self) -> None:
        self._log = logger.bind(component="outbox_publisher")

    def event_recorded(self, event_type: str, event_id: str) -> None:
        self._log.debug("outbox_event_recorded", event_type=event_type, event_id=event_id)

    def event_serialization_failed(self, event_type: str, error: str) -> None:
        self._log.error(
            "outbox_event_serialization_failed",
            event_type=event_type,
            error=error,
        )

    def sync_delivery_succeeded(self, event_type: str, event_id: str) -> None:
        self._log.info(
            "outbox_sync_delivery_succeeded",
            event_type=event_type,
            event_id=event_id,
        )

    def sync_delivery_failed(self, event_type: str, event_id: str, error: str) -> None:
        """Log a failed synchronous delivery; the outbox will retry it."""
        self._log.warning(
            "outbox_sync_delivery_failed",
            event_type=event_type,
            event_id=event_id,
            error=error,
        )


class OutboxCleanupProbe(Protocol):
    """Protocol for cleanup job observability."""

    def cleanup_started(self, cutoff: datetime) -> None: ...

    def cleanup_completed(self, deleted: int, retention_days: int) -> None: ...

    def cleanup_failed(self, error: str) -> None: ...


class DefaultOutboxCleanupProbe:
    """Default implementation using structlog."""

    def __init__(self) -> None:
        self._log = logger.bind(component="outbox_cleanup")

    def cleanup_started(self, cutoff: datetime) -> None:
        self._log.debug("outbox_cleanup_started", cutoff=cutoff.isoformat())

    def cleanup_completed(self, deleted: int, retention_days: int) -> None:
        if deleted > 0:
            self._log.info(
                "outbox_cleanup_completed",
                deleted=deleted,
                retention_days=retention_days,
            )
        else:
            self._log.debug("outbox_cleanup_nothing_to_purge")

    def cleanup_failed(self, error: str) -> None:
        self._log.error("outbox_cleanup_failed", error=error)


class OutboxAdminProbe(Protocol):
    """Protocol for outbox admin observability."""

    def event_reset(self, record_id: UUID, event_id: str, previous_status: str) -> None:
        ...

    def event_reset_not_found(self, record_id: UUID) -> None: ...


class DefaultOutboxAdminProbe:
    """Default implementation using structlog."""

    def __init__(self) -> None:
        self._log = logger.bind(component="outbox_admin")

    def event_reset(self, record_id: UUID, event_id: str, previous_status: str) -> None:
        self._log.info(
            "outbox_event_reset",
            record_id=str(record_id),
            event_id=event_id,
            previous_status=previous_status,
        )

    def event_reset_not_found(self, record_id: UUID) -> None:
        self._log.warning("outbox_event_reset_not_found", record_id=str(record_id))
