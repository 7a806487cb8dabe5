"""
Request Gate and API Key Resolution
===================================

FastAPI dependencies guarding the ``/api`` routes.

- ``require_app_token``: when APP_TOKEN is configured, the request must carry
  a matching ``x-app-token`` header. When it is not configured the gate lets
  every request through.
- ``resolve_api_key``: picks the Freepik API key to send upstream. The
  server-side FREEPIK_API_KEY wins over the client's ``x-freepik-api-key``
  header.
"""

import logging
import secrets
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from ..config import Settings
from ..dependencies import get_app_settings

logger = logging.getLogger(__name__)

MISSING_API_KEY_DETAIL = (
    "Missing Freepik API Key (set FREEPIK_API_KEY or send x-freepik-api-key)"
)


def require_app_token(
    x_app_token: Optional[str] = Header(None),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """
    Dependency that rejects requests without the configured shared secret.

    Raises:
        HTTPException: 401 if APP_TOKEN is set and the header is missing or wrong
    """
    expected = settings.APP_TOKEN
    if not expected:
        return

    if not x_app_token or not secrets.compare_digest(
        x_app_token.encode("utf-8"), expected.encode("utf-8")
    ):
        logger.warning("Rejected request with missing or bad x-app-token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized (bad x-app-token)"
        )


def pick_api_key(settings: Settings, client_key: Optional[str]) -> Optional[str]:
    """Return the server key if configured, else the client-supplied one."""
    return settings.FREEPIK_API_KEY or client_key or None


def resolve_api_key(
    x_freepik_api_key: Optional[str] = Header(None),
    settings: Settings = Depends(get_app_settings),
) -> str:
    """
    Dependency resolving the API key used for the upstream call.

    Raises:
        HTTPException: 400 if neither the server nor the client provides a key
    """
    api_key = pick_api_key(settings, x_freepik_api_key)
    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=MISSING_API_KEY_DETAIL
        )
    return api_key
