"""Outbox administration service.

Lets operators inspect records that exhausted their retries, see the
queue's shape, and put a record back into the delivery queue.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shared_kernel.outbox.exceptions import OutboundEventNotFoundError
from shared_kernel.outbox.observability import (
    DefaultOutboxAdminProbe,
    OutboxAdminProbe,
)
from shared_kernel.outbox.value_objects import EventStatus

if TYPE_CHECKING:
    from shared_kernel.outbox.ports import IOutboundEventRepository
    from shared_kernel.outbox.value_objects import OutboundEventEntry, OutboxStats


def _utc_now() -> datetime:
    return datetime.now(UTC)


class OutboxAdminService:
    """Application service behind the outbox admin routes."""

    def __init__(
        self,
        session: AsyncSession,
        repository: IOutboundEventRepository,
        clock: Callable[[], datetime] = _utc_now,
        probe: OutboxAdminProbe | None = None,
    ):
        self._session = session
        self._repository = repository
        self._clock = clock
        self._probe = probe or DefaultOutboxAdminProbe()

    async def list_permanently_failed(self) -> list[OutboundEventEntry]:
        """Return every record that exhausted its retries, oldest first."""
        return await self._repository.list_by_status(EventStatus.PERMANENTLY_FAILED)

    async def get_stats(self) -> OutboxStats:
        """Return record counts per status."""
        return await self._repository.count_by_status()

    async def reset_event(self, record_id: UUID) -> OutboundEventEntry:
        """Put a record back into the delivery queue.

        Works from any status: the record becomes PENDING with retry_count 0,
        no last_error, and is due immediately.

        Args:
            record_id: Storage key of the record

        Returns:
            Snapshot of the reset record

        Raises:
            OutboundEventNotFoundError: If no record has this id
        """
        async with self._session.begin():
            record = await self._repository.get_by_id(record_id)
            if record is None:
                self._probe.event_reset_not_found(record_id)
                raise OutboundEventNotFoundError(f"Outbound event {record_id} not found")

            previous_status = record.status
            record.reset_for_retry(self._clock())
            entry = record.to_value_object()

        self._probe.event_reset(record_id, entry.event_id, previous_status)
        return entry
