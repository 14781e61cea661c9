"""User-id migration application service.

Announces that a placeholder user has been linked to a real account. The
event goes through the outbox like every other identity event and is also
pushed synchronously right after the commit, so the downstream service can
rewrite its references without waiting for the next poll.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession

from shared_kernel.outbox.observability import (
    DefaultOutboxPublisherProbe,
    OutboxPublisherProbe,
)

if TYPE_CHECKING:
    from identity.application.event_publisher import OutboxEventPublisher
    from shared_kernel.outbox.ports import DownstreamEventClient
    from shared_kernel.outbox.value_objects import OutboundEventEntry


class UserIdMigrationService:
    """Application service for the user-id migration event.

    The outbox record is the source of truth. The synchronous call is best
    effort: if it fails the worker delivers the record later, and if it
    succeeds the worker delivers it again. The consumer discards the second
    copy because both carry the same eventId.
    """

    def __init__(
        self,
        session: AsyncSession,
        publisher: OutboxEventPublisher,
        client: DownstreamEventClient,
        probe: OutboxPublisherProbe | None = None,
    ):
        """Initialize the service.

        Args:
            session: Database session for transaction management
            publisher: Outbox publisher bound to the same session
            client: Downstream client used for the synchronous side channel
            probe: Optional domain probe for observability
        """
        self._session = session
        self._publisher = publisher
        self._client = client
        self._probe = probe or DefaultOutboxPublisherProbe()

    async def migrate(self, old_user_id: str, new_user_id: str) -> OutboundEventEntry:
        """Record the migration durably, then notify downstream right away.

        Args:
            old_user_id: The placeholder user's id
            new_user_id: The id the user is known by from now on

        Returns:
            Snapshot of the outbox record

        Raises:
            ValueError: If both ids are the same
            EventSerializationError: If the event cannot be recorded
        """
        if old_user_id == new_user_id:
            raise ValueError("old_user_id and new_user_id must differ")

        async with self._session.begin():
            entry = await self._publisher.publish_user_id_migrated(
                old_user_id=old_user_id,
                new_user_id=new_user_id,
            )

        try:
            await self._client.notify_user_id_migrated(
                old_user_id=old_user_id,
                new_user_id=new_user_id,
                event_id=entry.event_id,
            )
        except Exception as e:
            # The committed outbox record guarantees eventual delivery
            self._probe.sync_delivery_failed(entry.event_type, entry.event_id, str(e))
        else:
            self._probe.sync_delivery_succeeded(entry.event_type, entry.event_id)

        return entry
