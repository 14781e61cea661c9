"""Value objects for the outbox pattern.

Value objects are immutable descriptors that provide type safety and
domain semantics for outbound event records.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class EventType(StrEnum):
    """Closed set of outbound event kinds.

    Each kind maps to exactly one delivery handler and payload shape.
    """

    INVITATION_ACCEPTED = "INVITATION_ACCEPTED"
    USER_NAME_UPDATED = "USER_NAME_UPDATED"
    USER_ID_MIGRATED = "USER_ID_MIGRATED"
    PENDING_USER_ACTION = "PENDING_USER_ACTION"


class EventStatus(StrEnum):
    """Delivery state of an outbound event record."""

    PENDING = "PENDING"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"
    PERMANENTLY_FAILED = "PERMANENTLY_FAILED"


# Statuses the worker picks up when next_retry_at has passed
DELIVERABLE_STATUSES: frozenset[EventStatus] = frozenset(
    {EventStatus.PENDING, EventStatus.FAILED}
)


@dataclass(frozen=True)
class OutboundEventEntry:
    """Represents a single row in the outbound_events table.

    This is an immutable snapshot of a record as it exists in the database.
    It carries everything a dispatcher needs to deliver the event and
    everything an operator needs to triage it.

    Attributes:
        id: Internal storage key (UUID)
        event_type: Kind of event, one of EventType (stored as a string)
        event_id: Deterministic idempotency key shared with the consumer
        payload: Serialized key/value mapping handed to the delivery handler
        status: Current delivery status
        retry_count: Number of failed delivery attempts so far
        max_retries: Failures after which the record becomes PERMANENTLY_FAILED
        next_retry_at: Earliest time the record is eligible for delivery
        last_error: Most recent failure cause (if any)
        created_at: When the record was written
        updated_at: When the record was last changed
    """

    id: UUID
    event_type: str
    event_id: str
    payload: dict[str, str]
    status: EventStatus
    retry_count: int
    max_retries: int
    next_retry_at: datetime
    last_error: str | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class OutboxStats:
    """Record counts grouped by delivery status."""

    pending: int = 0
    failed: int = 0
    delivered: int = 0
    permanently_failed: int = 0

    @property
    def total(self) -> int:
        """Total number of records across all statuses."""
        return self.pending + self.failed + self.delivered + self.permanently_failed

    @classmethod
    def from_counts(cls, counts: dict[EventStatus, int]) -> OutboxStats:
        """Build stats from a status -> count mapping, defaulting missing ones to 0."""
        return cls(
            pending=counts.get(EventStatus.PENDING, 0),
            failed=counts.get(EventStatus.FAILED, 0),
            delivered=counts.get(EventStatus.DELIVERED, 0),
            permanently_failed=counts.get(EventStatus.PERMANENTLY_FAILED, 0),
        )
