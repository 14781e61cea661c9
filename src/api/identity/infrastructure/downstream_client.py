"""HTTP client for delivering identity events to the downstream service.

Called by the outbox dispatcher and the user-id migration side channel.
Errors are raised as DeliveryError so the worker can turn them into
retries; this client never retries on its own.
"""

from __future__ import annotations

from typing import Any

import httpx

from shared_kernel.outbox.exceptions import DeliveryError, DeliveryTimeoutError

INVITATION_ACCEPTED_PATH = "/internal/events/invitation-accepted"
USER_NAME_UPDATED_PATH = "/internal/events/user-name-updated"
USER_ID_MIGRATED_PATH = "/internal/events/user-id-migrated"


class DownstreamServiceClient:
    """Posts identity events as JSON to the downstream service.

    Every request carries the X-API-Key header and the record's eventId in
    its body.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Root URL of the downstream service
            api_key: Shared secret sent as X-API-Key
            timeout_seconds: Timeout applied to every request
            transport: Optional httpx transport (used by tests)
        """
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"X-API-Key": api_key},
            timeout=timeout_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    async def notify_invitation_accepted(
        self,
        invitation_id: str,
        target_user_id: str,
        context_type: str,
        context_id: str,
        context_role: str,
        display_name: str,
        added_by: str,
        event_id: str,
    ) -> None:
        await self._post(
            INVITATION_ACCEPTED_PATH,
            {
                "invitationId": invitation_id,
                "targetUserId": target_user_id,
                "contextType": context_type,
                "contextId": context_id,
                "contextRole": context_role or "MEMBER",
                "displayName": display_name or "",
                "addedBy": added_by or "",
                "eventId": event_id,
            },
        )

    async def notify_user_name_updated(
        self,
        user_id: str,
        new_display_name: str,
        event_id: str,
    ) -> None:
        await self._post(
            USER_NAME_UPDATED_PATH,
            {
                "userId": user_id,
                "newDisplayName": new_display_name,
                "eventId": event_id,
            },
        )

    async def notify_user_id_migrated(
        self,
        old_user_id: str,
        new_user_id: str,
        event_id: str,
    ) -> None:
        await self._post(
            USER_ID_MIGRATED_PATH,
            {
                "oldUserId": old_user_id,
                "newUserId": new_user_id,
                "eventId": event_id,
            },
        )

    async def _post(self, path: str, body: dict[str, Any]) -> None:
        """POST a JSON body and map transport and HTTP errors to DeliveryError."""
        try:
            response = await self._client.post(path, json=body)
        except httpx.TimeoutException as e:
            raise DeliveryTimeoutError(f"Timed out calling {path}") from e
        except httpx.HTTPError as e:
            raise DeliveryError(f"Failed to call {path}: {e!r}") from e

        if not response.is_success:
            raise DeliveryError(
                f"HTTP {response.status_code} from {path}",
                status_code=response.status_code,
            )
