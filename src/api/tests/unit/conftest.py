"""Unit test fixtures with mocked dependencies."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from infrastructure.outbox.models import OutboundEventModel
from shared_kernel.outbox.value_objects import EventStatus, EventType

NOW = datetime(2026, 1, 8, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_record():
    """Build in-memory OutboundEventModel instances.

    Defaults describe a fresh, due INVITATION_ACCEPTED record.
    """

    def _make(**overrides) -> OutboundEventModel:
        invitation_id = overrides.pop("invitation_id", "INV1")
        fields = {
            "id": uuid4(),
            "event_type": EventType.INVITATION_ACCEPTED.value,
            "event_id": f"INV_ACC:{invitation_id}",
            "payload": {
                "invitationId": invitation_id,
                "targetUserId": "user-1",
                "contextType": "GROUP",
                "contextId": "group-1",
                "contextRole": "MEMBER",
                "displayName": "Ada",
                "addedBy": "user-0",
            },
            "status": EventStatus.PENDING.value,
            "retry_count": 0,
            "max_retries": 5,
            "next_retry_at": NOW,
            "last_error": None,
            "created_at": NOW,
            "updated_at": NOW,
        }
        fields.update(overrides)
        return OutboundEventModel(**fields)

    return _make


@pytest.fixture
def mock_session():
    """Create mock async session with transaction support."""
    session = AsyncMock()
    session.add = MagicMock()
    # Mock transaction context manager properly
    mock_transaction = MagicMock()
    mock_transaction.__aenter__ = AsyncMock(return_value=None)
    mock_transaction.__aexit__ = AsyncMock(return_value=None)
    session.begin = MagicMock(return_value=mock_transaction)
    return session


@pytest.fixture
def mock_session_factory(mock_session):
    """Create a sessionmaker stand-in whose sessions are mock_session."""
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=mock_session)
    factory.return_value.__aexit__ = AsyncMock(return_value=None)
    return factory
