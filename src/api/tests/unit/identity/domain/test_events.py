"""Unit tests for identity domain events."""

from dataclasses import FrozenInstanceError
from datetime import UTC, datetime, timedelta, timezone

import pytest

from identity.domain.events import (
    InvitationAccepted,
    PendingUserAction,
    UserIdMigrated,
    UserNameUpdated,
    epoch_millis,
    from_epoch_millis,
)
from shared_kernel.outbox.value_objects import EventType


class TestEpochMillis:
    def test_epoch_is_zero(self):
        assert epoch_millis(datetime(1970, 1, 1, tzinfo=UTC)) == 0

    def test_truncates_to_milliseconds(self):
        moment = datetime(1970, 1, 1, 0, 0, 1, 999_999, tzinfo=UTC)
        assert epoch_millis(moment) == 1999

    def test_naive_datetime_is_treated_as_utc(self):
        naive = datetime(2026, 1, 8, 12, 0, 0)
        aware = datetime(2026, 1, 8, 12, 0, 0, tzinfo=UTC)
        assert epoch_millis(naive) == epoch_millis(aware)

    def test_offset_is_honoured(self):
        plus_two = datetime(2026, 1, 8, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        utc = datetime(2026, 1, 8, 12, 0, 0, tzinfo=UTC)
        assert epoch_millis(plus_two) == epoch_millis(utc)

    def test_from_epoch_millis_inverts(self):
        moment = datetime(2026, 1, 8, 12, 0, 0, 123_000, tzinfo=UTC)
        assert from_epoch_millis(epoch_millis(moment)) == moment


class TestInvitationAccepted:
    def test_event_id_depends_only_on_invitation(self):
        first = InvitationAccepted("INV1", "user-1", "GROUP", "group-1")
        second = InvitationAccepted(
            "INV1", "user-2", "TEAM", "team-9", context_role="ADMIN"
        )
        assert first.event_id == "INV_ACC:INV1"
        assert second.event_id == first.event_id

    def test_defaults(self):
        event = InvitationAccepted("INV1", "user-1", "GROUP", "group-1")
        assert event.context_role == "MEMBER"
        assert event.display_name == ""
        assert event.added_by == ""
        assert event.event_type == EventType.INVITATION_ACCEPTED

    def test_is_immutable(self):
        event = InvitationAccepted("INV1", "user-1", "GROUP", "group-1")
        with pytest.raises(FrozenInstanceError):
            event.invitation_id = "INV2"  # type: ignore[misc]


class TestUserNameUpdated:
    def test_event_id_uses_updated_at_millis(self):
        updated_at = datetime(1970, 1, 1, 0, 0, 1, 500_000, tzinfo=UTC)
        event = UserNameUpdated("user-1", "Ada", updated_at)
        assert event.updated_at_millis == 1500
        assert event.event_id == "USR_UPD:user-1:1500"

    def test_same_change_yields_same_id(self):
        updated_at = datetime(2026, 1, 8, 12, 0, 0, tzinfo=UTC)
        assert (
            UserNameUpdated("user-1", "Ada", updated_at).event_id
            == UserNameUpdated("user-1", "Ada", updated_at).event_id
        )

    def test_later_change_yields_new_id(self):
        updated_at = datetime(2026, 1, 8, 12, 0, 0, tzinfo=UTC)
        first = UserNameUpdated("user-1", "Ada", updated_at)
        second = UserNameUpdated(
            "user-1", "Ada", updated_at + timedelta(milliseconds=1)
        )
        assert first.event_id != second.event_id


class TestUserIdMigrated:
    def test_event_id(self):
        event = UserIdMigrated(old_user_id="ph-1", new_user_id="user-1")
        assert event.event_id == "UID_MIG:ph-1:user-1"
        assert event.event_type == EventType.USER_ID_MIGRATED


class TestPendingUserAction:
    def test_event_id(self):
        event = PendingUserAction("INV7", "user-1", "GROUP", "group-1")
        assert event.event_id == "PUA:INV7"
        assert event.event_type == EventType.PENDING_USER_ACTION
