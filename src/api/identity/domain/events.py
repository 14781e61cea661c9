"""Domain events for the identity context.

Domain events capture facts about things that have happened in the domain.
They are immutable value objects that carry all the information needed
to describe the occurrence of an event.

Every event exposes a deterministic ``event_id`` derived from business
facts, never from the time it was emitted. Publishing the same logical
change twice yields the same ``event_id``, which lets the downstream
consumer discard duplicate deliveries.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import ClassVar

from shared_kernel.outbox.value_objects import EventType

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

DEFAULT_CONTEXT_ROLE = "MEMBER"


def epoch_millis(moment: datetime) -> int:
    """Convert a datetime to whole milliseconds since the Unix epoch.

    Naive datetimes are taken to be UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return (moment - _EPOCH) // timedelta(milliseconds=1)


def from_epoch_millis(millis: int) -> datetime:
    """Inverse of epoch_millis, returning an aware UTC datetime."""
    return _EPOCH + timedelta(milliseconds=millis)


@dataclass(frozen=True)
class InvitationAccepted:
    """Event raised when a user accepts an invitation to a context.

    The downstream consumer adds the user to the context with the given role.

    Attributes:
        invitation_id: Identifier of the accepted invitation
        target_user_id: User who joins the context
        context_type: Kind of context the invitation grants access to
        context_id: Identifier of that context
        context_role: Role granted in the context
        display_name: Display name of the joining user
        added_by: User who sent the invitation
    """

    event_type: ClassVar[EventType] = EventType.INVITATION_ACCEPTED

    invitation_id: str
    target_user_id: str
    context_type: str
    context_id: str
    context_role: str = DEFAULT_CONTEXT_ROLE
    display_name: str = ""
    added_by: str = ""

    @property
    def event_id(self) -> str:
        # An invitation is accepted at most once
        return f"INV_ACC:{self.invitation_id}"


@dataclass(frozen=True)
class UserNameUpdated:
    """Event raised when a user's canonical display name changes.

    Attributes:
        user_id: The user whose name changed
        new_display_name: The new display name
        updated_at: The user's last-modified timestamp after the change
    """

    event_type: ClassVar[EventType] = EventType.USER_NAME_UPDATED

    user_id: str
    new_display_name: str
    updated_at: datetime

    @property
    def updated_at_millis(self) -> int:
        return epoch_millis(self.updated_at)

    @property
    def event_id(self) -> str:
        # A later rename moves updated_at forward and so yields a new id
        return f"USR_UPD:{self.user_id}:{self.updated_at_millis}"


@dataclass(frozen=True)
class UserIdMigrated:
    """Event raised when a placeholder user is linked to a real account.

    The downstream consumer rewrites every reference to the old id.

    Attributes:
        old_user_id: The placeholder user's id
        new_user_id: The id the user is known by from now on
    """

    event_type: ClassVar[EventType] = EventType.USER_ID_MIGRATED

    old_user_id: str
    new_user_id: str

    @property
    def event_id(self) -> str:
        return f"UID_MIG:{self.old_user_id}:{self.new_user_id}"


@dataclass(frozen=True)
class PendingUserAction:
    """Event raised when an invitation needs explicit consent from its target.

    No downstream consumer exists for this kind yet.
    """

    event_type: ClassVar[EventType] = EventType.PENDING_USER_ACTION

    invitation_id: str
    target_user_id: str
    context_type: str
    context_id: str

    @property
    def event_id(self) -> str:
        return f"PUA:{self.invitation_id}"


# Type alias for all identity domain events
DomainEvent = InvitationAccepted | UserNameUpdated | UserIdMigrated | PendingUserAction
