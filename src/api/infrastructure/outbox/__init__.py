"""Infrastructure layer for the outbox pattern.

Contains the SQLAlchemy model, repository implementation, delivery worker
and cleanup job for outbound event persistence and processing.
"""

from infrastructure.outbox.cleanup import OutboxCleanupJob
from infrastructure.outbox.models import OutboundEventModel
from infrastructure.outbox.repository import OutboundEventRepository
from infrastructure.outbox.worker import OutboxWorker

__all__ = [
    "OutboundEventModel",
    "OutboundEventRepository",
    "OutboxCleanupJob",
    "OutboxWorker",
]
