"""Pydantic request and response models for the generation service.

These models define the JSON contract consumed by
:class:`~hypercards.api.client.GenerationServiceClient`.  Responses are
validated on arrival; anything that does not fit is treated as a malformed
response by the client.

Models
------
SubmitRequest
    Payload for the submit endpoint: payment header plus card parameters.
JobPayload
    Job description embedded in the submit response.
SubmitResponse
    Submit response: the job and an optional ancillary access grant.
StatusResponse
    Status endpoint response, polled until the job is terminal.
ResourceInfo
    Target resource metadata used for price resolution.
AssetResponse
    Asset generation response for a completed job.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from hypercards.core.models import (
    JobHandle,
    JobResult,
    JobSnapshot,
    JobStatus,
    TaskProgress,
)

logger = logging.getLogger(__name__)


class SubmitRequest(BaseModel):
    """Request body for the submit endpoint.

    Attributes:
        payment_header: Signed single-use payment header.
        target_resource_id: Resource the card is generated from.
        theme_text: Trimmed card theme (3–500 characters).
        is_public: Whether the finished card is publicly listed.
        length_mode: Requested output length.
        generation_mode: Generation pipeline requested from the backend.
    """

    payment_header: str = Field(..., description="Signed payment header.")
    target_resource_id: str = Field(..., description="Target resource id.")
    theme_text: str = Field(..., description="Card theme text.")
    is_public: bool = Field(default=True, description="Publicly listed card.")
    length_mode: str = Field(default="short", description="Output length mode.")
    generation_mode: str = Field(default="card", description="Generation mode.")


class _StatusFields(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: JobStatus
    progress: TaskProgress | None = None
    word_count: int | None = None
    preview: str | None = None
    banner_url: str | None = None

    @field_validator("progress", mode="wrap")
    @classmethod
    def drop_unreadable_progress(cls, v: Any, handler) -> TaskProgress | None:
        """Progress never masks the job status; an unreadable payload is dropped."""
        try:
            return handler(v)
        except ValidationError as e:
            logger.debug(f"Ignoring unreadable progress payload: {e}")
            return None

    def to_snapshot(self) -> JobSnapshot:
        """Build a snapshot; the result is attached only to completed jobs."""
        result = None
        if self.status is JobStatus.COMPLETED:
            result = JobResult(
                preview_text=self.preview,
                word_count=self.word_count,
                banner_url=self.banner_url,
            )
        return JobSnapshot(status=self.status, progress=self.progress, result=result)


class JobPayload(_StatusFields):
    id: str = Field(..., min_length=1)


class SubmitResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    job: JobPayload
    ancillary_access: Any = None

    def to_handle(self) -> JobHandle:
        return JobHandle(
            id=self.job.id,
            status=self.job.status,
            snapshot=self.job.to_snapshot(),
            ancillary_access=self.ancillary_access,
        )


class StatusResponse(_StatusFields):
    pass


class ResourceInfo(BaseModel):
    """Target resource metadata.

    Attributes:
        price_usd: Static base price of the resource.
        current_price_usd: Current dynamic price; zero or missing means the
            base price applies.
    """

    model_config = ConfigDict(extra="ignore")

    price_usd: Decimal
    current_price_usd: Decimal | None = None


class AssetResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    asset_url: str
    cached: bool = False
    enhanced: bool | None = None
