"""Authentication for internal routes.

Internal routes are called by other services and by operators, never by end
users. They authenticate with a single shared key in the X-API-Key header.
"""

from __future__ import annotations

import secrets
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from infrastructure.settings import InternalApiSettings, get_internal_api_settings


async def require_internal_api_key(
    settings: Annotated[InternalApiSettings, Depends(get_internal_api_settings)],
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> None:
    """Reject the request unless X-API-Key matches the configured key.

    Raises:
        HTTPException 401: If the header is missing or wrong, or no key is
            configured
    """
    expected = settings.api_key.get_secret_value()

    if not expected or x_api_key is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
            headers={"WWW-Authenticate": "API-Key"},
        )

    if not secrets.compare_digest(x_api_key.encode(), expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
            headers={"WWW-Authenticate": "API-Key"},
        )
