"""HTTP routes for outbox administration.

Operators use these routes to list records that exhausted their retries,
put a record back into the delivery queue, and see the queue's shape.
"""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from identity.application.services.outbox_admin_service import OutboxAdminService
from identity.dependencies.internal_auth import require_internal_api_key
from identity.dependencies.outbox import get_outbox_admin_service
from identity.presentation.outbox_admin.models import (
    OutboundEventResponse,
    OutboxStatsResponse,
    RetryEventResponse,
)
from shared_kernel.outbox.exceptions import OutboundEventNotFoundError

router = APIRouter(
    prefix="/internal/admin/outbox",
    tags=["outbox-admin"],
    dependencies=[Depends(require_internal_api_key)],
)


@router.get(
    "/failed",
    response_model=list[OutboundEventResponse],
    summary="List permanently failed outbound events",
    responses={
        200: {"description": "Records listed successfully"},
        401: {"description": "Invalid or missing API key"},
        500: {"description": "Internal server error"},
    },
)
async def list_failed_events(
    service: Annotated[OutboxAdminService, Depends(get_outbox_admin_service)],
) -> list[OutboundEventResponse]:
    """List every record that exhausted its retries, oldest first."""
    try:
        entries = await service.list_permanently_failed()
        return [OutboundEventResponse.from_domain(entry) for entry in entries]

    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list failed events",
        )


@router.post("/{record_id}/retry")
async def retry_event(
    record_id: str,
    service: Annotated[OutboxAdminService, Depends(get_outbox_admin_service)],
) -> RetryEventResponse:
    """Reset a record for redelivery, whatever its current status.

    Args:
        record_id: Storage key of the record (UUID), not its event_id
        service: Outbox admin service

    Returns:
        RetryEventResponse with the record's new status

    Raises:
        HTTPException: 400 if the id is not a UUID
        HTTPException: 404 if no record has this id
        HTTPException: 500 for unexpected errors
    """
    try:
        parsed_id = UUID(record_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid record ID format",
        )

    try:
        entry = await service.reset_event(parsed_id)
        return RetryEventResponse.from_domain(entry)

    except OutboundEventNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found",
        )
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to reset event",
        )


@router.get("/stats")
async def get_outbox_stats(
    service: Annotated[OutboxAdminService, Depends(get_outbox_admin_service)],
) -> OutboxStatsResponse:
    """Get record counts per status."""
    try:
        stats = await service.get_stats()
        return OutboxStatsResponse.from_domain(stats)

    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get outbox statistics",
        )
