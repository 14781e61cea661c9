"""Outbound event repository implementation.

This module provides the PostgreSQL implementation of the outbound event
repository. It handles persisting event records written by publishers and
the queries used by the worker, the cleanup job and the admin service.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.outbox.models import OutboundEventModel
from shared_kernel.outbox.value_objects import (
    DELIVERABLE_STATUSES,
    EventStatus,
    OutboundEventEntry,
    OutboxStats,
)


class OutboundEventRepository:
    """PostgreSQL implementation of the outbound event repository.

    This repository shares the same database session as the calling service,
    ensuring that event appends happen within the same transaction as the
    business change. This is critical for the atomicity guarantee of the
    outbox pattern.

    The repository only calls session.add() and session.execute() - it never
    calls session.commit(). The calling service owns the transaction boundary.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository with a session.

        Args:
            session: The SQLAlchemy async session (shared with calling service)
        """
        self._session = session

    async def append(
        self,
        event_type: str,
        event_id: str,
        payload: dict[str, str],
        next_retry_at: datetime,
        max_retries: int,
    ) -> OutboundEventEntry:
        """Append a PENDING record to the current transaction.

        A duplicate event_id is rejected by the unique constraint when the
        caller flushes or commits, aborting its transaction.

        Args:
            event_type: Kind of event (e.g., "INVITATION_ACCEPTED")
            event_id: Deterministic idempotency key
            payload: Pre-serialized event payload
            next_retry_at: Earliest delivery time, also used as creation time
            max_retries: Failures allowed before PERMANENTLY_FAILED

        Returns:
            Snapshot of the record as it will be written
        """
        model = OutboundEventModel(
            id=uuid4(),
            event_type=event_type,
            event_id=event_id,
            payload=payload,
            status=EventStatus.PENDING.value,
            retry_count=0,
            max_retries=max_retries,
            next_retry_at=next_retry_at,
            last_error=None,
            created_at=next_retry_at,
            updated_at=next_retry_at,
        )
        self._session.add(model)

        return model.to_value_object()

    async def fetch_due(self, now: datetime, limit: int) -> list[OutboundEventModel]:
        """Fetch records eligible for delivery, oldest first.

        Eligible means PENDING or FAILED with next_retry_at <= now. Models
        are returned (not value objects) because the worker mutates and
        persists them one by one.

        Args:
            now: Current time (UTC)
            limit: Maximum number of records to fetch

        Returns:
            List of attached OutboundEventModel instances
        """
        stmt = (
            select(OutboundEventModel)
            .where(
                OutboundEventModel.status.in_(
                    sorted(status.value for status in DELIVERABLE_STATUSES)
                )
            )
            .where(OutboundEventModel.next_retry_at <= now)
            .order_by(OutboundEventModel.created_at.asc())
            .limit(limit)
        )

        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_id(self, record_id: UUID) -> OutboundEventModel | None:
        """Fetch a record by its storage key.

        Args:
            record_id: The UUID of the record

        Returns:
            The attached model, or None if no such record exists
        """
        stmt = select(OutboundEventModel).where(OutboundEventModel.id == record_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_status(self, status: EventStatus) -> list[OutboundEventEntry]:
        """List all records with the given status, oldest first."""
        stmt = (
            select(OutboundEventModel)
            .where(OutboundEventModel.status == status.value)
            .order_by(OutboundEventModel.created_at.asc())
        )
        result = await self._session.execute(stmt)
        return [model.to_value_object() for model in result.scalars().all()]

    async def count_by_status(self) -> OutboxStats:
        """Count records grouped by status in a single query."""
        stmt = select(
            OutboundEventModel.status,
            func.count(OutboundEventModel.id),
        ).group_by(OutboundEventModel.status)

        result = await self._session.execute(stmt)
        counts = {EventStatus(status): count for status, count in result.all()}
        return OutboxStats.from_counts(counts)

    async def delete_delivered_older_than(self, cutoff: datetime) -> int:
        """Delete DELIVERED records whose updated_at is before cutoff.

        Records in any other status are never touched, whatever their age.

        Args:
            cutoff: Records last updated strictly before this time are deleted

        Returns:
            Number of deleted records
        """
        stmt = (
            delete(OutboundEventModel)
            .where(OutboundEventModel.status == EventStatus.DELIVERED.value)
            .where(OutboundEventModel.updated_at < cutoff)
        )

        result = await self._session.execute(stmt)
        return result.rowcount or 0
