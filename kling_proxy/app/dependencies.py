from fastapi import HTTPException, Request, status
import httpx

from .config import Settings


def get_app_settings(request: Request) -> Settings:
    """
    Dependency returning the Settings the application was created with.
    """
    return request.app.state.settings


def get_upstream_client(request: Request) -> httpx.AsyncClient:
    """
    Dependency to get the upstream HTTP client from app state.

    Raises:
        HTTPException: If the client was not created by the lifespan
    """
    client = getattr(request.app.state, "upstream_client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Upstream client not available"
        )
    return client
