"""Domain layer for the identity context."""

from identity.domain.events import (
    DomainEvent,
    InvitationAccepted,
    PendingUserAction,
    UserIdMigrated,
    UserNameUpdated,
)

__all__ = [
    "DomainEvent",
    "InvitationAccepted",
    "PendingUserAction",
    "UserIdMigrated",
    "UserNameUpdated",
]
