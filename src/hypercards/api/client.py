"""Async HTTP client for the card generation service.

:class:`GenerationServiceClient` wraps an ``httpx.AsyncClient`` and maps the
service's HTTP contract onto typed models and the package's error taxonomy:

- network failures, 5xx responses and malformed bodies become
  :class:`~hypercards.core.errors.BackendUnavailable`
- submission rejections become :class:`PaymentRejected`,
  :class:`SubmissionValidationError` or a plain :class:`SubmissionError`
- asset generation failures become :class:`AssetTimeout` (503 or client
  timeout) or :class:`AssetGenerationError`

Cancelling the task awaiting any of these coroutines cancels the underlying
request at the transport level.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from hypercards.core.config import HypercardsConfig, config
from hypercards.core.errors import (
    AssetGenerationError,
    AssetTimeout,
    BackendUnavailable,
    PaymentRejected,
    SubmissionError,
    SubmissionValidationError,
)

from .models import AssetResponse, ResourceInfo, StatusResponse, SubmitRequest, SubmitResponse

logger = logging.getLogger(__name__)

# Longest backend text kept as an error message
_MAX_MESSAGE_LENGTH = 200


def extract_error(response: httpx.Response) -> tuple[str, Any]:
    """Extract a human-readable message and details from an error response.

    JSON bodies use the first of ``error``, ``message`` or ``detail``; other
    bodies use their text, truncated.  Falls back to a status-based message.

    Args:
        response: Non-2xx response

    Returns:
        Tuple of (message, details)
    """
    message = f"Request failed with status {response.status_code}"
    details: Any = None

    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            data = response.json()
        except ValueError:
            return message, "Failed to parse error response"

        if isinstance(data, dict):
            for key in ("error", "message", "detail"):
                value = data.get(key)
                if isinstance(value, str) and value:
                    message = value
                    break
            details = data.get("details", data.get("detail", data))
        else:
            details = data
    elif response.text:
        message = response.text[:_MAX_MESSAGE_LENGTH]
        details = response.text

    return message, details


def _field_errors(details: Any) -> dict[str, str]:
    """Collect per-field messages from a validation error body.

    Understands FastAPI-style ``[{"loc": [...], "msg": "..."}]`` lists and
    plain ``{"field": "message"}`` mappings.
    """
    fields: dict[str, str] = {}
    if isinstance(details, list):
        for item in details:
            if not isinstance(item, dict):
                continue
            loc = item.get("loc") or []
            name = str(loc[-1]) if loc else "request"
            fields[name] = str(item.get("msg", "invalid value"))
    elif isinstance(details, dict):
        for name, value in details.items():
            if isinstance(value, str):
                fields[str(name)] = value
    return fields


class GenerationServiceClient:
    """Client for the submit, status, resource and asset endpoints.

    Args:
        settings: Configuration providing the base URL, paths and timeouts
        http_client: Pre-built ``httpx.AsyncClient`` (e.g. with a mock
            transport). When omitted, one is created and owned by this client.
    """

    def __init__(
        self,
        settings: HypercardsConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = settings or config
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=self._config.api_base_url,
            timeout=self._config.request_timeout_seconds,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> GenerationServiceClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # -- Requests -----------------------------------------------------------

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e!r}")
            raise BackendUnavailable(
                "Failed to connect to the generation service. Please try again."
            ) from e

    @staticmethod
    def _parse(model, response: httpx.Response):
        try:
            return model.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            logger.warning(f"Malformed response from {response.request.url}: {e}")
            raise BackendUnavailable(
                "Received a malformed response from the generation service",
                status_code=response.status_code,
            ) from e

    async def get_resource(self, resource_id: str) -> ResourceInfo:
        """Fetch target resource metadata.

        Raises:
            BackendUnavailable: On any failure (the price cannot be resolved)
        """
        path = self._config.resource_path.format(resource_id=resource_id)
        response = await self._request("GET", path)

        if response.is_error:
            message, details = extract_error(response)
            raise BackendUnavailable(
                f"Failed to fetch resource details: {message}",
                status_code=response.status_code,
                details=details,
            )

        return self._parse(ResourceInfo, response)

    async def submit(self, payload: SubmitRequest) -> SubmitResponse:
        """Submit a creation request.

        Raises:
            PaymentRejected: Payment header invalid, expired or mismatched
            SubmissionValidationError: Backend rejected request fields
            BackendUnavailable: Network failure, 5xx or malformed response
            SubmissionError: Any other rejection
        """
        response = await self._request(
            "POST", self._config.submit_path, json=payload.model_dump(mode="json")
        )

        if response.is_error:
            raise self._submission_error(response)

        return self._parse(SubmitResponse, response)

    @staticmethod
    def _submission_error(response: httpx.Response) -> SubmissionError:
        message, details = extract_error(response)
        status = response.status_code
        logger.info(f"Submission rejected ({status}): {message}")

        if status == 402 or (status in (400, 401, 403) and "payment" in message.lower()):
            return PaymentRejected(message, status_code=status, details=details)
        if status in (400, 422):
            return SubmissionValidationError(
                message, fields=_field_errors(details), status_code=status, details=details
            )
        if status >= 500:
            return BackendUnavailable(message, status_code=status, details=details)
        return SubmissionError(message, status_code=status, details=details)

    async def get_status(self, job_id: str) -> StatusResponse:
        """Fetch the current status of a job.

        Raises:
            BackendUnavailable: On any failure, including non-2xx responses
        """
        path = self._config.status_path.format(job_id=job_id)
        response = await self._request("GET", path)

        if response.is_error:
            message, details = extract_error(response)
            raise BackendUnavailable(message, status_code=response.status_code, details=details)

        return self._parse(StatusResponse, response)

    async def generate_asset(self, job_id: str) -> AssetResponse:
        """Generate (or fetch the cached) asset for a completed job.

        Raises:
            AssetTimeout: Backend 503 or client-side timeout
            AssetGenerationError: Any other failure
        """
        path = self._config.asset_path.format(job_id=job_id)
        params = {"enhance": "true"} if self._config.asset_enhance else None

        try:
            response = await self._http.post(
                path, params=params, timeout=self._config.asset_timeout_seconds
            )
        except httpx.TimeoutException as e:
            raise AssetTimeout("Request timeout. Image generation took too long.") from e
        except httpx.HTTPError as e:
            raise AssetGenerationError(
                "Failed to connect to the generation service. Please try again."
            ) from e

        if response.status_code == 503:
            message, _ = extract_error(response)
            raise AssetTimeout(message, status_code=503)
        if response.is_error:
            message, _ = extract_error(response)
            raise AssetGenerationError(message, status_code=response.status_code)

        try:
            return AssetResponse.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise AssetGenerationError(
                "Received a malformed asset response", status_code=response.status_code
            ) from e
