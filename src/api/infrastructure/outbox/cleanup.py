"""Periodic purge of delivered outbound events.

Delivered records are kept for a retention window for auditing, then
deleted. Records in any other status are never purged.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.outbox.repository import OutboundEventRepository

if TYPE_CHECKING:
    from shared_kernel.outbox.observability import OutboxCleanupProbe


def _utc_now() -> datetime:
    return datetime.now(UTC)


class OutboxCleanupJob:
    """Deletes DELIVERED records older than the retention window.

    Runs once per interval as a background task. A failed run is logged
    and the next run tries again.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        probe: OutboxCleanupProbe,
        retention_days: int = 30,
        interval_seconds: float = 86400.0,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if retention_days < 1:
            raise ValueError("retention_days must be at least 1")

        self._session_factory = session_factory
        self._probe = probe
        self._retention_days = retention_days
        self._interval = interval_seconds
        self._clock = clock
        self._running = False
        self._task: asyncio.Task[None] | None = None

    @property
    def retention_days(self) -> int:
        return self._retention_days

    async def start(self) -> None:
        if self._task is not None:
            return

        self._running = True
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        self._running = False

        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _loop(self) -> None:
        while self._running:
            await asyncio.sleep(self._interval)
            try:
                await self.run_once()
            except Exception as e:
                self._probe.cleanup_failed(str(e))

    async def run_once(self) -> int:
        """Purge delivered records last updated before now minus retention.

        Returns:
            Number of deleted records
        """
        cutoff = self._clock() - timedelta(days=self._retention_days)
        self._probe.cleanup_started(cutoff)

        async with self._session_factory() as session:
            repository = OutboundEventRepository(session)
            deleted = await repository.delete_delivered_older_than(cutoff)
            await session.commit()

        self._probe.cleanup_completed(deleted, self._retention_days)
        return deleted
