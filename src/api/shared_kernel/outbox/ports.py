"""Protocols (ports) for the outbox pattern.

These protocols define the interfaces for outbox persistence and delivery.
The bounded context that owns the events provides the serializer, the
dispatcher and the downstream client; shared_kernel stays agnostic of
specific event payloads.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable
from uuid import UUID

if TYPE_CHECKING:
    from shared_kernel.outbox.value_objects import (
        EventStatus,
        OutboundEventEntry,
        OutboxStats,
    )


@runtime_checkable
class IOutboundEventRepository(Protocol):
    """Repository for outbound event records.

    The repository shares the same database session as the calling service,
    so appends happen within the same transaction as the business change.
    It never commits; the caller owns the transaction boundary.
    """

    async def append(
        self,
        event_type: str,
        event_id: str,
        payload: dict[str, str],
        next_retry_at: datetime,
        max_retries: int,
    ) -> OutboundEventEntry:
        """Add a new PENDING record to the current transaction.

        Args:
            event_type: Kind of event (e.g., "INVITATION_ACCEPTED")
            event_id: Deterministic idempotency key
            payload: Pre-serialized event payload
            next_retry_at: Earliest delivery time (normally now)
            max_retries: Failures allowed before PERMANENTLY_FAILED

        Returns:
            Snapshot of the record as it will be written
        """
        ...

    async def fetch_due(self, now: datetime, limit: int) -> list[Any]:
        """Fetch PENDING/FAILED records with next_retry_at <= now, oldest first."""
        ...

    async def get_by_id(self, record_id: UUID) -> Any | None:
        """Fetch a record by its storage key."""
        ...

    async def list_by_status(self, status: EventStatus) -> list[OutboundEventEntry]:
        """List all records with the given status, oldest first."""
        ...

    async def count_by_status(self) -> OutboxStats:
        """Count records grouped by status."""
        ...

    async def delete_delivered_older_than(self, cutoff: datetime) -> int:
        """Delete DELIVERED records last updated before cutoff.

        Returns:
            Number of deleted records
        """
        ...


@runtime_checkable
class EventDispatcher(Protocol):
    """Routes an outbound event record to its delivery handler.

    Implementations raise on any failure. They must not retry; retry and
    backoff are owned by the worker.
    """

    async def deliver(self, entry: OutboundEventEntry) -> None:
        """Deliver one record to the downstream consumer.

        Raises:
            DeliveryError: If delivery failed for any reason
        """
        ...


@runtime_checkable
class DownstreamEventClient(Protocol):
    """Delivery capability offered by the downstream consumer.

    One operation per deliverable event kind. Each receives the kind's
    business fields plus the record's event_id for consumer-side
    deduplication.
    """

    async def notify_invitation_accepted(
        self,
        invitation_id: str,
        target_user_id: str,
        context_type: str,
        context_id: str,
        context_role: str,
        display_name: str,
        added_by: str,
        event_id: str,
    ) -> None: ...

    async def notify_user_name_updated(
        self,
        user_id: str,
        new_display_name: str,
        event_id: str,
    ) -> None: ...

    async def notify_user_id_migrated(
        self,
        old_user_id: str,
        new_user_id: str,
        event_id: str,
    ) -> None: ...


@runtime_checkable
class EventSerializer(Protocol):
    """Serializes and deserializes domain events.

    Each bounded context provides its own implementation that knows how to
    turn its domain events into outbox payloads and back.
    """

    def supported_event_types(self) -> frozenset[str]:
        """Return the event type names this serializer handles."""
        ...

    def serialize(self, event: Any) -> dict[str, str]:
        """Convert a domain event to a JSON-serializable payload.

        Raises:
            EventSerializationError: If the event cannot be serialized
        """
        ...

    def deserialize(self, event_type: str, payload: dict[str, str]) -> Any:
        """Reconstruct a domain event from a payload.

        Raises:
            UnknownEventTypeError: If the event type is not supported
        """
        ...
