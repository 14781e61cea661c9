"""SQLAlchemy ORM models for the outbox pattern.

This module provides the database model for the outbound_events table used
in the transactional outbox pattern, together with the status transitions
a record goes through during delivery.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin
from shared_kernel.outbox.backoff import compute_backoff_seconds
from shared_kernel.outbox.transitions import ensure_transition
from shared_kernel.outbox.value_objects import EventStatus, OutboundEventEntry

DEFAULT_MAX_RETRIES = 5


class OutboundEventModel(TimestampMixin, Base):
    """ORM model for the outbound_events table.

    One row per outbound event. Rows are inserted inside the business
    transaction that produced them, mutated only by the worker (delivery
    outcome) or the admin service (reset), and deleted only by the cleanup
    job once DELIVERED and past the retention window.

    Indexes:
    - uq_outbound_events_event_id: idempotency key is unique for all time
    - idx_outbound_events_due: status + next_retry_at + created_at for polling
    """

    __tablename__ = "outbound_events"
    __table_args__ = (
        UniqueConstraint("event_id", name="uq_outbound_events_event_id"),
        Index(
            "idx_outbound_events_due",
            "status",
            "next_retry_at",
            "created_at",
        ),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    event_type: Mapped[str] = mapped_column(String(30), nullable=False)
    event_id: Mapped[str] = mapped_column(String(100), nullable=False)
    payload: Mapped[dict] = mapped_column(JSONB, nullable=False)
    status: Mapped[str] = mapped_column(
        String(25),
        nullable=False,
        default=EventStatus.PENDING.value,
    )
    retry_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
    )
    max_retries: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=DEFAULT_MAX_RETRIES,
        server_default=str(DEFAULT_MAX_RETRIES),
    )
    next_retry_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def status_enum(self) -> EventStatus:
        return EventStatus(self.status)

    def mark_delivered(self, now: datetime) -> None:
        """Record a successful delivery."""
        ensure_transition(self.status_enum, EventStatus.DELIVERED)
        self.status = EventStatus.DELIVERED.value
        self.updated_at = now

    def mark_failed(self, error: str, now: datetime) -> None:
        """Record a failed delivery attempt.

        Increments retry_count exactly once. At max_retries the record becomes
        PERMANENTLY_FAILED and next_retry_at is left untouched; otherwise it
        becomes FAILED and next_retry_at moves forward by the backoff delay.

        Args:
            error: Human-readable failure cause
            now: Time of the attempt (UTC)
        """
        new_retry_count = self.retry_count + 1

        if new_retry_count >= self.max_retries:
            target = EventStatus.PERMANENTLY_FAILED
        else:
            target = EventStatus.FAILED
        ensure_transition(self.status_enum, target)

        self.retry_count = new_retry_count
        self.last_error = error
        self.status = target.value
        if target == EventStatus.FAILED:
            self.next_retry_at = now + timedelta(
                seconds=compute_backoff_seconds(new_retry_count)
            )
        self.updated_at = now

    def reset_for_retry(self, now: datetime) -> None:
        """Put the record back into the delivery queue (administrative action)."""
        ensure_transition(self.status_enum, EventStatus.PENDING, administrative=True)
        self.status = EventStatus.PENDING.value
        self.retry_count = 0
        self.next_retry_at = now
        self.last_error = None
        self.updated_at = now

    def to_value_object(self) -> OutboundEventEntry:
        """Convert this ORM model to an OutboundEventEntry value object.

        Returns:
            An immutable OutboundEventEntry with all fields copied from this model.
        """
        return OutboundEventEntry(
            id=self.id,
            event_type=self.event_type,
            event_id=self.event_id,
            payload=dict(self.payload),
            status=self.status_enum,
            retry_count=self.retry_count,
            max_retries=self.max_retries,
            next_retry_at=self.next_retry_at,
            last_error=self.last_error,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<OutboundEventModel("
            f"id={self.id}, "
            f"event_type={self.event_type}, "
            f"event_id={self.event_id}, "
            f"status={self.status}, "
            f"retry_count={self.retry_count}"
            f")>"
        )
