"""Unit tests for outbox value objects."""

from dataclasses import FrozenInstanceError, replace
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from shared_kernel.outbox.value_objects import (
    DELIVERABLE_STATUSES,
    EventStatus,
    EventType,
    OutboundEventEntry,
    OutboxStats,
)

NOW = datetime(2026, 1, 8, 12, 0, 0, tzinfo=UTC)


def _entry(**overrides) -> OutboundEventEntry:
    entry = OutboundEventEntry(
        id=uuid4(),
        event_type=EventType.INVITATION_ACCEPTED.value,
        event_id="INV_ACC:INV1",
        payload={"invitationId": "INV1"},
        status=EventStatus.PENDING,
        retry_count=0,
        max_retries=5,
        next_retry_at=NOW,
        last_error=None,
        created_at=NOW,
        updated_at=NOW,
    )
    return replace(entry, **overrides)


class TestEventType:
    def test_is_closed_set_of_four_kinds(self):
        assert {kind.value for kind in EventType} == {
            "INVITATION_ACCEPTED",
            "USER_NAME_UPDATED",
            "USER_ID_MIGRATED",
            "PENDING_USER_ACTION",
        }

    def test_compares_equal_to_stored_string(self):
        assert EventType.USER_ID_MIGRATED == "USER_ID_MIGRATED"


class TestOutboundEventEntry:
    def test_is_immutable(self):
        entry = _entry()
        with pytest.raises(FrozenInstanceError):
            entry.status = EventStatus.DELIVERED  # type: ignore[misc]

    def test_carries_every_record_field(self):
        entry = _entry(status=EventStatus.FAILED, retry_count=2, last_error="HTTP 503")

        assert entry.status == EventStatus.FAILED
        assert entry.retry_count == 2
        assert entry.last_error == "HTTP 503"
        assert entry.next_retry_at == NOW


class TestDeliverableStatuses:
    def test_only_pending_and_failed_are_picked_up(self):
        assert DELIVERABLE_STATUSES == {EventStatus.PENDING, EventStatus.FAILED}


class TestOutboxStats:
    def test_total_sums_all_statuses(self):
        stats = OutboxStats(pending=1, failed=2, delivered=3, permanently_failed=4)
        assert stats.total == 10

    def test_from_counts_defaults_missing_statuses_to_zero(self):
        stats = OutboxStats.from_counts({EventStatus.FAILED: 7})

        assert stats == OutboxStats(pending=0, failed=7, delivered=0, permanently_failed=0)
        assert stats.total == 7
