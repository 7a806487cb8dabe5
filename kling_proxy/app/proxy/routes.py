"""
Proxy Routes - Upstream Request Forwarding
==========================================

This module implements the endpoints that forward image-to-video requests
from browser clients to the Freepik API with a server-resolved API key.

Security Model:
---------------
1. If APP_TOKEN is configured, requests must send a matching x-app-token
2. The API key comes from FREEPIK_API_KEY, or else from x-freepik-api-key
3. Only the resolved key header is sent upstream; client headers are not forwarded

Endpoints:
----------
- POST /api/{model}: Create a task from a multipart upload (image + prompt)
- GET /api/{model}/{task_id}: Poll a task created earlier

The multipart upload is the only accepted input. The older base64-in-JSON
body (``image_base64``) is deprecated and is treated as a missing image.
"""

import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import JSONResponse
import httpx

from ..auth.gate import require_app_token, resolve_api_key
from ..config import Settings
from ..dependencies import get_app_settings, get_upstream_client
from ..models import ErrorResponse, ForwardResult, TaskSubmission, UpstreamReply
from .forwarder import fetch_task, submit_task

logger = logging.getLogger(__name__)

# Path segments copied into the upstream URL; dots and slashes are excluded
PATH_SEGMENT = re.compile(r"^[A-Za-z0-9_-]+$")

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing field, API key, or invalid path segment"},
    401: {"model": ErrorResponse, "description": "Missing or bad x-app-token"},
    500: {"model": ErrorResponse, "description": "Upstream call failed"},
}

proxy_router = APIRouter(
    dependencies=[Depends(require_app_token)],
    responses=ERROR_RESPONSES,
)


def check_path_segment(name: str, value: str) -> str:
    """
    Reject path values that could move the upstream URL off its model route.

    Raises:
        HTTPException: 400 if the value is not a plain identifier
    """
    if not PATH_SEGMENT.match(value):
        logger.warning("Rejected invalid path segment", extra={"segment": name})
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {name}"
        )
    return value


def to_response(result: ForwardResult) -> JSONResponse:
    """Map a forwarding result onto the HTTP response sent to the client."""
    if isinstance(result, UpstreamReply):
        return JSONResponse(status_code=result.status_code, content=result.body)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": result.message}
    )


@proxy_router.post("/{model}/", include_in_schema=False)
@proxy_router.post("/{model}")
async def create_task(
    model: str,
    prompt: Optional[str] = Form(None),
    negative_prompt: Optional[str] = Form(None),
    creativity: Optional[str] = Form(None),
    duration: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    api_key: str = Depends(resolve_api_key),
    settings: Settings = Depends(get_app_settings),
    client: httpx.AsyncClient = Depends(get_upstream_client),
):
    """
    Submit an image-to-video task.

    Flow:
    1. Gate and API key checks (dependencies)
    2. Require the image file, then the prompt
    3. Re-encode the received fields as multipart and POST upstream
    4. Return upstream status and body unchanged
    """
    check_path_segment("model", model)
    if image is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing image file (field: image)"
        )
    if not prompt:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing prompt"
        )

    submission = TaskSubmission(
        prompt=prompt,
        negative_prompt=negative_prompt,
        creativity=creativity,
        duration=duration,
        image=await image.read(),
        image_filename=image.filename or "image.png",
        image_content_type=image.content_type,
    )

    result = await submit_task(
        client, settings.upstream_base_url, model, api_key, submission
    )
    return to_response(result)


@proxy_router.get("/{model}/{task_id}")
async def get_task(
    model: str,
    task_id: str,
    api_key: str = Depends(resolve_api_key),
    settings: Settings = Depends(get_app_settings),
    client: httpx.AsyncClient = Depends(get_upstream_client),
):
    """Poll an upstream task and relay its status and body unchanged."""
    check_path_segment("model", model)
    check_path_segment("task id", task_id)
    result = await fetch_task(
        client, settings.upstream_base_url, model, task_id, api_key
    )
    return to_response(result)
