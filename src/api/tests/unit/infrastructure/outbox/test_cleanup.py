"""Unit tests for OutboxCleanupJob."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from infrastructure.outbox.cleanup import OutboxCleanupJob


@pytest.fixture
def mock_probe():
    return MagicMock()


@pytest.fixture
def mock_repository():
    with patch("infrastructure.outbox.cleanup.OutboundEventRepository") as repo_cls:
        repository = repo_cls.return_value
        repository.delete_delivered_older_than = AsyncMock(return_value=3)
        yield repository


class TestOutboxCleanupJob:
    def test_rejects_retention_below_one_day(self, mock_session_factory, mock_probe):
        with pytest.raises(ValueError, match="retention_days"):
            OutboxCleanupJob(mock_session_factory, mock_probe, retention_days=0)

    def test_defaults_to_thirty_days(self, mock_session_factory, mock_probe):
        job = OutboxCleanupJob(mock_session_factory, mock_probe)
        assert job.retention_days == 30

    @pytest.mark.asyncio
    async def test_run_once_purges_before_retention_cutoff(
        self, mock_session_factory, mock_session, mock_probe, mock_repository, now
    ):
        job = OutboxCleanupJob(
            mock_session_factory, mock_probe, retention_days=30, clock=lambda: now
        )

        deleted = await job.run_once()

        assert deleted == 3
        cutoff = mock_repository.delete_delivered_older_than.call_args.args[0]
        assert cutoff == now - timedelta(days=30)
        # 31 days old is purged, 29 days old is kept
        assert now - timedelta(days=31) < cutoff
        assert now - timedelta(days=29) > cutoff
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_run_once_reports_to_probe(
        self, mock_session_factory, mock_probe, mock_repository, now
    ):
        job = OutboxCleanupJob(
            mock_session_factory, mock_probe, retention_days=7, clock=lambda: now
        )

        await job.run_once()

        mock_probe.cleanup_started.assert_called_once_with(now - timedelta(days=7))
        mock_probe.cleanup_completed.assert_called_once_with(3, 7)

    @pytest.mark.asyncio
    async def test_loop_reports_failures_and_keeps_running(
        self, mock_session_factory, mock_probe, mock_repository, now
    ):
        mock_repository.delete_delivered_older_than.side_effect = RuntimeError("locked")
        job = OutboxCleanupJob(
            mock_session_factory,
            mock_probe,
            interval_seconds=0.01,
            clock=lambda: now,
        )

        await job.start()
        await asyncio.sleep(0.05)
        await job.stop()

        assert mock_probe.cleanup_failed.call_count >= 2
        mock_probe.cleanup_failed.assert_called_with("locked")

    @pytest.mark.asyncio
    async def test_stop_before_first_run_deletes_nothing(
        self, mock_session_factory, mock_probe, mock_repository
    ):
        job = OutboxCleanupJob(mock_session_factory, mock_probe, interval_seconds=3600)

        await job.start()
        await job.stop()

        mock_repository.delete_delivered_older_than.assert_not_called()
