"""
Upstream Forwarder
==================

Performs the single outbound call for each proxy request and reports the
outcome as a value instead of raising:

- ``UpstreamReply``: the provider answered (any status); status and JSON body
  are relayed unchanged.
- ``ForwardFailure``: the call raised an httpx error, or the provider's body
  was not JSON.

No retries are attempted.
"""

import logging
from typing import Any, Dict, Tuple

import httpx

from ..models import ForwardFailure, ForwardResult, TaskSubmission, UpstreamReply

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-freepik-api-key"


def build_task_url(base_url: str, model: str, task_id: str = "") -> str:
    url = f"{base_url.rstrip('/')}/{model}"
    if task_id:
        url = f"{url}/{task_id}"
    return url


def build_task_form(
    submission: TaskSubmission,
) -> Tuple[Dict[str, str], Dict[str, Tuple[Any, ...]]]:
    """
    Build the multipart ``data`` and ``files`` arguments for httpx.

    Returns:
        Tuple of (text fields, file parts). The image part carries the
        uploaded bytes unchanged.
    """
    image_part: Tuple[Any, ...] = (submission.image_filename, submission.image)
    if submission.image_content_type:
        image_part = image_part + (submission.image_content_type,)
    return submission.form_fields(), {"image": image_part}


def decode_body(response: httpx.Response) -> Any:
    """
    Decode the upstream body; an empty body decodes to ``{}``.

    A non-JSON body on an error status is relayed as ``{}`` by ``_relay``;
    only a successful response with an unreadable body is a failure.

    Raises:
        ValueError: If a non-empty body is not valid JSON
    """
    if not response.content.strip():
        return {}
    return response.json()


def _failure(e: Exception, *, model: str, task_id: str) -> ForwardFailure:
    logger.error(
        f"Upstream call failed: {e}",
        extra={"model": model, "task_id": task_id, "exception_type": type(e).__name__}
    )
    return ForwardFailure(message=str(e) or "Server error")


async def _relay(send, *, model: str, task_id: str = "") -> ForwardResult:
    try:
        response = await send()
    except httpx.HTTPError as e:
        return _failure(e, model=model, task_id=task_id)

    try:
        body = decode_body(response)
    except ValueError as e:
        # Error statuses are relayed even when the body is not JSON
        if response.is_success:
            return _failure(e, model=model, task_id=task_id)
        body = {}

    reply = UpstreamReply(status_code=response.status_code, body=body)
    if reply.ok:
        logger.info(
            "Upstream call succeeded",
            extra={"model": model, "task_id": task_id, "status_code": reply.status_code}
        )
    else:
        logger.warning(
            f"Upstream returned error status: {reply.status_code}",
            extra={"model": model, "task_id": task_id, "status_code": reply.status_code}
        )
    return reply


async def submit_task(
    client: httpx.AsyncClient,
    base_url: str,
    model: str,
    api_key: str,
    submission: TaskSubmission,
) -> ForwardResult:
    """
    Create an image-to-video task upstream.

    Args:
        client: Shared HTTP client
        base_url: Upstream image-to-video base URL
        model: Model identifier taken from the request path
        api_key: Resolved Freepik API key
        submission: Validated task fields and image

    Returns:
        UpstreamReply or ForwardFailure
    """
    data, files = build_task_form(submission)
    url = build_task_url(base_url, model)

    logger.info(
        "Forwarding task submission",
        extra={"model": model, "fields": sorted(data), "image_bytes": len(submission.image)}
    )

    return await _relay(
        lambda: client.post(url, data=data, files=files, headers={API_KEY_HEADER: api_key}),
        model=model,
    )


async def fetch_task(
    client: httpx.AsyncClient,
    base_url: str,
    model: str,
    task_id: str,
    api_key: str,
) -> ForwardResult:
    """Fetch the status of a task previously created upstream."""
    url = build_task_url(base_url, model, task_id)

    logger.info("Forwarding task status request", extra={"model": model, "task_id": task_id})

    return await _relay(
        lambda: client.get(url, headers={API_KEY_HEADER: api_key}),
        model=model,
        task_id=task_id,
    )
