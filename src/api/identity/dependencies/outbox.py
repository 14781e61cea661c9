from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from identity.application.event_publisher import OutboxEventPublisher
from identity.application.services.outbox_admin_service import OutboxAdminService
from identity.application.services.user_id_migration_service import (
    UserIdMigrationService,
)
from identity.dependencies.downstream import get_downstream_client
from identity.infrastructure.downstream_client import DownstreamServiceClient
from identity.infrastructure.outbox.serializer import IdentityEventSerializer
from infrastructure.database.dependencies import get_write_session
from infrastructure.outbox.repository import OutboundEventRepository
from infrastructure.settings import OutboxSettings, get_outbox_settings
from shared_kernel.outbox.observability import (
    DefaultOutboxAdminProbe,
    DefaultOutboxPublisherProbe,
    OutboxAdminProbe,
    OutboxPublisherProbe,
)


def get_outbound_event_repository(
    session: Annotated[AsyncSession, Depends(get_write_session)],
) -> OutboundEventRepository:
    """Get OutboundEventRepository instance.

    The repository accepts pre-serialized payloads and never commits.

    Args:
        session: Async database session (shared with the calling service)

    Returns:
        OutboundEventRepository instance
    """
    return OutboundEventRepository(session=session)


@lru_cache
def get_event_serializer() -> IdentityEventSerializer:
    """Get the stateless identity event serializer."""
    return IdentityEventSerializer()


def get_outbox_publisher_probe() -> OutboxPublisherProbe:
    return DefaultOutboxPublisherProbe()


def get_outbox_admin_probe() -> OutboxAdminProbe:
    """Get OutboxAdminProbe instance.

    Returns:
        DefaultOutboxAdminProbe instance for observability
    """
    return DefaultOutboxAdminProbe()


def get_event_publisher(
    repository: Annotated[
        OutboundEventRepository, Depends(get_outbound_event_repository)
    ],
    serializer: Annotated[IdentityEventSerializer, Depends(get_event_serializer)],
    settings: Annotated[OutboxSettings, Depends(get_outbox_settings)],
    probe: Annotated[OutboxPublisherProbe, Depends(get_outbox_publisher_probe)],
) -> OutboxEventPublisher:
    """Get OutboxEventPublisher instance.

    Args:
        repository: Outbound event repository (shares the request session)
        serializer: Identity event serializer
        settings: Outbox settings, for max_retries
        probe: Publisher probe for observability

    Returns:
        OutboxEventPublisher bound to the request session
    """
    return OutboxEventPublisher(
        repository=repository,
        serializer=serializer,
        max_retries=settings.max_retries,
        probe=probe,
    )


def get_user_id_migration_service(
    session: Annotated[AsyncSession, Depends(get_write_session)],
    publisher: Annotated[OutboxEventPublisher, Depends(get_event_publisher)],
    client: Annotated[DownstreamServiceClient, Depends(get_downstream_client)],
    probe: Annotated[OutboxPublisherProbe, Depends(get_outbox_publisher_probe)],
) -> UserIdMigrationService:
    return UserIdMigrationService(
        session=session,
        publisher=publisher,
        client=client,
        probe=probe,
    )


def get_outbox_admin_service(
    session: Annotated[AsyncSession, Depends(get_write_session)],
    repository: Annotated[
        OutboundEventRepository, Depends(get_outbound_event_repository)
    ],
    probe: Annotated[OutboxAdminProbe, Depends(get_outbox_admin_probe)],
) -> OutboxAdminService:
    """Get OutboxAdminService instance.

    Args:
        session: Database session for transaction management
        repository: Outbound event repository (shares session via FastAPI dependency caching)
        probe: Admin probe for observability

    Returns:
        OutboxAdminService instance
    """
    return OutboxAdminService(session=session, repository=repository, probe=probe)
