"""Downstream client dependency.

One client (and so one connection pool) is shared by the worker, the
user-id migration side channel and every request.
"""

from __future__ import annotations

from functools import lru_cache

from identity.infrastructure.downstream_client import DownstreamServiceClient
from infrastructure.settings import get_downstream_settings


@lru_cache
def get_downstream_client() -> DownstreamServiceClient:
    """Get the shared downstream client, creating it from settings on first use."""
    settings = get_downstream_settings()
    return DownstreamServiceClient(
        base_url=settings.base_url,
        api_key=settings.api_key.get_secret_value(),
        timeout_seconds=settings.timeout_seconds,
    )


async def close_downstream_client() -> None:
    """Close the shared client on application shutdown."""
    if get_downstream_client.cache_info().currsize:
        await get_downstream_client().aclose()
        get_downstream_client.cache_clear()
