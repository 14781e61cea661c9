"""Identity-specific event serializer for outbox persistence.

This module converts identity domain events to the flat payloads stored in
the outbound_events table and reconstructs them when the worker delivers a
record. Payload keys are camelCase to match the downstream wire contract.
"""

from __future__ import annotations

import json
from typing import Any

from identity.domain.events import (
    DomainEvent,
    InvitationAccepted,
    PendingUserAction,
    UserIdMigrated,
    UserNameUpdated,
    from_epoch_millis,
)
from shared_kernel.outbox.exceptions import (
    EventSerializationError,
    UnknownEventTypeError,
)
from shared_kernel.outbox.value_objects import EventType

_SUPPORTED_EVENTS: frozenset[str] = frozenset(kind.value for kind in EventType)


class IdentityEventSerializer:
    """Serializes and deserializes identity domain events.

    Every payload is a ``str -> str`` mapping. Serialization fails loudly,
    at publish time, rather than leaving an undeliverable record behind.
    """

    def supported_event_types(self) -> frozenset[str]:
        """Return the event type names this serializer handles."""
        return _SUPPORTED_EVENTS

    def serialize(self, event: DomainEvent) -> dict[str, str]:
        """Convert a domain event to its outbox payload.

        Args:
            event: The domain event to serialize

        Returns:
            Flat mapping of camelCase keys to string values

        Raises:
            EventSerializationError: If the event is not an identity event or
                any field is not a string
        """
        match event:
            case InvitationAccepted():
                payload: dict[str, Any] = {
                    "invitationId": event.invitation_id,
                    "targetUserId": event.target_user_id,
                    "contextType": event.context_type,
                    "contextId": event.context_id,
                    "contextRole": event.context_role,
                    "displayName": event.display_name,
                    "addedBy": event.added_by,
                }
            case UserNameUpdated():
                payload = {
                    "userId": event.user_id,
                    "newDisplayName": event.new_display_name,
                    "updatedAtMillis": str(event.updated_at_millis),
                }
            case UserIdMigrated():
                payload = {
                    "oldUserId": event.old_user_id,
                    "newUserId": event.new_user_id,
                }
            case PendingUserAction():
                payload = {
                    "invitationId": event.invitation_id,
                    "targetUserId": event.target_user_id,
                    "contextType": event.context_type,
                    "contextId": event.context_id,
                }
            case _:
                raise EventSerializationError(
                    f"Unsupported event type: {type(event).__name__}"
                )

        self._validate(payload)
        return payload

    def deserialize(self, event_type: str, payload: dict[str, str]) -> DomainEvent:
        """Reconstruct a domain event from a stored payload.

        Args:
            event_type: The stored event type tag
            payload: The stored payload

        Returns:
            The reconstructed domain event

        Raises:
            UnknownEventTypeError: If the tag is not an identity event kind
            KeyError: If the payload lacks a required field
        """
        if event_type not in _SUPPORTED_EVENTS:
            raise UnknownEventTypeError(event_type)

        match EventType(event_type):
            case EventType.INVITATION_ACCEPTED:
                return InvitationAccepted(
                    invitation_id=payload["invitationId"],
                    target_user_id=payload["targetUserId"],
                    context_type=payload["contextType"],
                    context_id=payload["contextId"],
                    context_role=payload.get("contextRole", "MEMBER"),
                    display_name=payload.get("displayName", ""),
                    added_by=payload.get("addedBy", ""),
                )
            case EventType.USER_NAME_UPDATED:
                return UserNameUpdated(
                    user_id=payload["userId"],
                    new_display_name=payload["newDisplayName"],
                    updated_at=from_epoch_millis(int(payload["updatedAtMillis"])),
                )
            case EventType.USER_ID_MIGRATED:
                return UserIdMigrated(
                    old_user_id=payload["oldUserId"],
                    new_user_id=payload["newUserId"],
                )
            case EventType.PENDING_USER_ACTION:
                return PendingUserAction(
                    invitation_id=payload["invitationId"],
                    target_user_id=payload["targetUserId"],
                    context_type=payload["contextType"],
                    context_id=payload["contextId"],
                )

    def _validate(self, payload: dict[str, Any]) -> None:
        """Ensure the payload is a JSON-encodable string mapping."""
        for key, value in payload.items():
            if not isinstance(value, str):
                raise EventSerializationError(
                    f"Field {key} must be a string, got {type(value).__name__}"
                )

        try:
            json.dumps(payload)
        except (TypeError, ValueError) as e:
            raise EventSerializationError(f"Payload is not JSON-encodable: {e}") from e
