"""
Data Models Module

This module defines Pydantic models for request/response validation
and for the values passed between the routes and the upstream forwarder.

Models are organized by functional area:
- Task models (the submission decoded from the inbound multipart form)
- Forwarding result models (upstream reply or forwarding failure)
- System models (health check, error body)
"""

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Task Models
# ============================================================================

class TaskSubmission(BaseModel):
    """Image-to-video task fields received from the client."""

    model_config = ConfigDict(frozen=True)

    prompt: str = Field(..., description="Text prompt describing the motion", min_length=1)
    negative_prompt: Optional[str] = Field(None, description="Things the video should avoid")
    creativity: Optional[str] = Field(None, description="Creativity value, forwarded as sent")
    duration: Optional[str] = Field(None, description="Clip duration, forwarded as sent")
    image: bytes = Field(..., description="Raw bytes of the uploaded source image")
    image_filename: str = Field(default="image.png", description="Filename sent with the image part")
    image_content_type: Optional[str] = Field(None, description="Content type of the uploaded image")

    def form_fields(self) -> Dict[str, str]:
        """
        Text fields of the outbound multipart form.

        Only the fields the client supplied are included: ``negative_prompt``
        and ``duration`` when non-empty, ``creativity`` whenever it was sent.
        """
        fields = {"prompt": self.prompt}
        if self.negative_prompt:
            fields["negative_prompt"] = self.negative_prompt
        if self.creativity is not None:
            fields["creativity"] = self.creativity
        if self.duration:
            fields["duration"] = self.duration
        return fields


# ============================================================================
# Forwarding Result Models
# ============================================================================

class UpstreamReply(BaseModel):
    """Response received from the upstream provider, relayed verbatim."""

    model_config = ConfigDict(frozen=True)

    status_code: int = Field(..., description="Upstream HTTP status code")
    body: Any = Field(default_factory=dict, description="Decoded upstream JSON body")

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class ForwardFailure(BaseModel):
    """The upstream call could not be completed or its body could not be read."""

    model_config = ConfigDict(frozen=True)

    message: str = Field(..., description="Message of the underlying error")


ForwardResult = Union[UpstreamReply, ForwardFailure]


# ============================================================================
# System Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response model."""
    ok: bool = Field(default=True, description="Liveness flag")
    service: str = Field(..., description="Service name")
    ts: int = Field(..., description="Server time in epoch milliseconds")


class ErrorResponse(BaseModel):
    """Error body returned by the proxy itself."""
    message: str = Field(..., description="Human-readable error message")
