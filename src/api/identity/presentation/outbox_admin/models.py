"""Pydantic models for outbox admin API responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from shared_kernel.outbox.value_objects import (
    EventStatus,
    OutboundEventEntry,
    OutboxStats,
)


class OutboundEventResponse(BaseModel):
    """Response model for a single outbound event record."""

    id: str = Field(..., description="Record id (UUID)")
    event_type: str = Field(..., description="Event kind")
    event_id: str = Field(..., description="Deterministic idempotency key")
    payload: dict[str, str] = Field(..., description="Serialized event payload")
    status: EventStatus = Field(..., description="Delivery status")
    retry_count: int = Field(..., description="Failed delivery attempts so far")
    max_retries: int = Field(..., description="Failures allowed before giving up")
    next_retry_at: datetime = Field(..., description="Earliest next delivery time")
    last_error: str | None = Field(None, description="Most recent failure cause")
    created_at: datetime = Field(..., description="When the record was written")
    updated_at: datetime = Field(..., description="When the record last changed")

    @classmethod
    def from_domain(cls, entry: OutboundEventEntry) -> OutboundEventResponse:
        """Convert an OutboundEventEntry value object to an API response.

        Args:
            entry: Outbound event value object

        Returns:
            OutboundEventResponse with every field of the record
        """
        return cls(
            id=str(entry.id),
            event_type=entry.event_type,
            event_id=entry.event_id,
            payload=entry.payload,
            status=entry.status,
            retry_count=entry.retry_count,
            max_retries=entry.max_retries,
            next_retry_at=entry.next_retry_at,
            last_error=entry.last_error,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )


class RetryEventResponse(BaseModel):
    """Response model for a reset record."""

    id: str = Field(..., description="Record id (UUID)")
    event_id: str = Field(..., description="Deterministic idempotency key")
    status: EventStatus = Field(..., description="Status after the reset")
    message: str = Field(..., description="Human-readable outcome")

    @classmethod
    def from_domain(cls, entry: OutboundEventEntry) -> RetryEventResponse:
        return cls(
            id=str(entry.id),
            event_id=entry.event_id,
            status=entry.status,
            message=f"Event {entry.event_id} reset for redelivery",
        )


class OutboxStatsResponse(BaseModel):
    """Response model for record counts per status."""

    pending: int = Field(..., description="Records awaiting their first attempt")
    failed: int = Field(..., description="Records awaiting a retry")
    delivered: int = Field(..., description="Delivered records not yet purged")
    permanently_failed: int = Field(
        ..., description="Records that exhausted their retries"
    )
    total: int = Field(..., description="Sum of all counts")

    @classmethod
    def from_domain(cls, stats: OutboxStats) -> OutboxStatsResponse:
        return cls(
            pending=stats.pending,
            failed=stats.failed,
            delivered=stats.delivered,
            permanently_failed=stats.permanently_failed,
            total=stats.total,
        )
