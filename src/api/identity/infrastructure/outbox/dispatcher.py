"""Routes outbound event records to the downstream client.

Each record is deserialized back into its domain event and handed to the
client operation for its kind, together with the record's event_id so the
consumer can deduplicate.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from identity.domain.events import (
    InvitationAccepted,
    PendingUserAction,
    UserIdMigrated,
    UserNameUpdated,
)
from shared_kernel.outbox.exceptions import UnknownEventTypeError

if TYPE_CHECKING:
    from identity.infrastructure.outbox.serializer import IdentityEventSerializer
    from shared_kernel.outbox.observability import OutboxWorkerProbe
    from shared_kernel.outbox.ports import DownstreamEventClient
    from shared_kernel.outbox.value_objects import OutboundEventEntry


class IdentityEventDispatcher:
    """Delivers identity outbox records through a DownstreamEventClient.

    Raises on any failure and never retries; the worker owns retry and
    backoff. A record whose event_type is not an identity event kind raises
    UnknownEventTypeError, which the worker handles like any other failed
    delivery.
    """

    def __init__(
        self,
        client: DownstreamEventClient,
        serializer: IdentityEventSerializer,
        probe: OutboxWorkerProbe,
    ) -> None:
        self._client = client
        self._serializer = serializer
        self._probe = probe

    async def deliver(self, entry: OutboundEventEntry) -> None:
        """Deliver one record to the downstream consumer.

        Args:
            entry: Snapshot of the record to deliver

        Raises:
            UnknownEventTypeError: If the record's event_type has no handler
            DeliveryError: If the downstream call fails
        """
        try:
            event = self._serializer.deserialize(entry.event_type, entry.payload)
        except UnknownEventTypeError:
            self._probe.unknown_event_type(entry.id, entry.event_type)
            raise

        match event:
            case InvitationAccepted():
                await self._client.notify_invitation_accepted(
                    invitation_id=event.invitation_id,
                    target_user_id=event.target_user_id,
                    context_type=event.context_type,
                    context_id=event.context_id,
                    context_role=event.context_role,
                    display_name=event.display_name,
                    added_by=event.added_by,
                    event_id=entry.event_id,
                )
            case UserNameUpdated():
                await self._client.notify_user_name_updated(
                    user_id=event.user_id,
                    new_display_name=event.new_display_name,
                    event_id=entry.event_id,
                )
            case UserIdMigrated():
                await self._client.notify_user_id_migrated(
                    old_user_id=event.old_user_id,
                    new_user_id=event.new_user_id,
                    event_id=entry.event_id,
                )
            case PendingUserAction():
                # No consumer yet; the record is acknowledged so it does not
                # accumulate retries
                self._probe.event_without_consumer(entry.event_type, entry.event_id)
