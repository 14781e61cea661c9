"""Transactional outbox publisher for identity events.

Writes events to the outbound_events table within the caller's
transaction. Events are delivered asynchronously by the OutboxWorker.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from identity.domain.events import (
    DEFAULT_CONTEXT_ROLE,
    DomainEvent,
    InvitationAccepted,
    PendingUserAction,
    UserIdMigrated,
    UserNameUpdated,
)
from shared_kernel.outbox.exceptions import EventSerializationError
from shared_kernel.outbox.observability import (
    DefaultOutboxPublisherProbe,
    OutboxPublisherProbe,
)

if TYPE_CHECKING:
    from shared_kernel.outbox.ports import EventSerializer, IOutboundEventRepository
    from shared_kernel.outbox.value_objects import OutboundEventEntry


def _utc_now() -> datetime:
    return datetime.now(UTC)


class OutboxEventPublisher:
    """Records identity events in the outbox.

    The publisher never touches the network and never commits. It adds a
    PENDING record to the session the caller is already using, so the
    record is committed or rolled back together with the business change.
    """

    def __init__(
        self,
        repository: IOutboundEventRepository,
        serializer: EventSerializer,
        max_retries: int = 5,
        clock: Callable[[], datetime] = _utc_now,
        probe: OutboxPublisherProbe | None = None,
    ) -> None:
        """Initialize the publisher.

        Args:
            repository: Outbound event repository sharing the caller's session
            serializer: Converts events to outbox payloads
            max_retries: Failures allowed before a record is permanently failed
            clock: Source of the current time (UTC)
            probe: Optional domain probe for observability
        """
        self._repository = repository
        self._serializer = serializer
        self._max_retries = max_retries
        self._clock = clock
        self._probe = probe or DefaultOutboxPublisherProbe()

    async def publish(self, event: DomainEvent) -> OutboundEventEntry:
        """Add an event to the outbox as part of the current transaction.

        Args:
            event: The identity domain event to record

        Returns:
            Snapshot of the PENDING record

        Raises:
            EventSerializationError: If the event cannot be serialized. The
                caller must let this abort its transaction.
        """
        event_type = event.event_type.value

        try:
            payload = self._serializer.serialize(event)
        except EventSerializationError as e:
            self._probe.event_serialization_failed(event_type, str(e))
            raise

        entry = await self._repository.append(
            event_type=event_type,
            event_id=event.event_id,
            payload=payload,
            next_retry_at=self._clock(),
            max_retries=self._max_retries,
        )
        self._probe.event_recorded(event_type, entry.event_id)
        return entry

    async def publish_invitation_accepted(
        self,
        invitation_id: str,
        target_user_id: str,
        context_type: str,
        context_id: str,
        context_role: str | None = None,
        display_name: str | None = None,
        added_by: str | None = None,
    ) -> OutboundEventEntry:
        return await self.publish(
            InvitationAccepted(
                invitation_id=invitation_id,
                target_user_id=target_user_id,
                context_type=context_type,
                context_id=context_id,
                context_role=context_role or DEFAULT_CONTEXT_ROLE,
                display_name=display_name or "",
                added_by=added_by or "",
            )
        )

    async def publish_user_name_updated(
        self,
        user_id: str,
        new_display_name: str,
        updated_at: datetime,
    ) -> OutboundEventEntry:
        """Record a display-name change.

        Args:
            user_id: The user whose name changed
            new_display_name: The new display name
            updated_at: The user's last-modified timestamp after the change,
                which makes the event id unique per change
        """
        return await self.publish(
            UserNameUpdated(
                user_id=user_id,
                new_display_name=new_display_name,
                updated_at=updated_at,
            )
        )

    async def publish_user_id_migrated(
        self,
        old_user_id: str,
        new_user_id: str,
    ) -> OutboundEventEntry:
        return await self.publish(
            UserIdMigrated(old_user_id=old_user_id, new_user_id=new_user_id)
        )

    async def publish_pending_user_action(
        self,
        invitation_id: str,
        target_user_id: str,
        context_type: str,
        context_id: str,
    ) -> OutboundEventEntry:
        return await self.publish(
            PendingUserAction(
                invitation_id=invitation_id,
                target_user_id=target_user_id,
                context_type=context_type,
                context_id=context_id,
            )
        )
