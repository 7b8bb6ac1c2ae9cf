"""Submission of payment-authorized creation requests."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from hypercards.api.models import SubmitRequest

from .config import HypercardsConfig, config
from .models import CreationRequest, JobHandle, PaymentAuthorization
from .validation import parse_amount, validate_creation_request

if TYPE_CHECKING:
    from hypercards.api.client import GenerationServiceClient

logger = logging.getLogger(__name__)


class JobSubmitter:
    """Validate and submit creation requests.

    Args:
        client: Generation service client
        settings: Configuration supplying ``length_mode`` and
            ``generation_mode`` for every submission
    """

    def __init__(self, client: GenerationServiceClient, settings: HypercardsConfig | None = None):
        self._client = client
        self._config = settings or config

    async def resolve_price(self, request: CreationRequest) -> Decimal:
        """Determine the price to authorize for ``request``.

        A positive quoted price wins. Otherwise the target resource's current
        price is used when positive, falling back to its static base price.

        Raises:
            BackendUnavailable: If the resource metadata cannot be fetched
        """
        if request.quoted_price_usd is not None:
            quoted = parse_amount(request.quoted_price_usd)
            if quoted > 0:
                return quoted

        logger.info(f"No quoted price, fetching price for resource {request.target_resource_id}")
        resource = await self._client.get_resource(request.target_resource_id)

        current = resource.current_price_usd
        if current is not None and current > 0:
            return current

        return resource.price_usd

    async def submit(self, request: CreationRequest, auth: PaymentAuthorization) -> JobHandle:
        """Submit ``request`` bundled with ``auth``.

        The theme is re-validated first; invalid input never reaches the
        network.

        Returns:
            Handle of the created job. Its status may already be
            ``completed`` when the backend finished synchronously.

        Raises:
            ValidationError: Local validation failed
            PaymentRejected: The backend refused the payment authorization
            SubmissionValidationError: The backend refused request fields
            BackendUnavailable: Network failure or malformed response
        """
        theme = validate_creation_request(request)

        payload = SubmitRequest(
            payment_header=auth.header,
            target_resource_id=request.target_resource_id,
            theme_text=theme,
            is_public=request.is_public,
            length_mode=self._config.length_mode,
            generation_mode=self._config.generation_mode,
        )

        logger.info(
            f"Submitting card for resource {request.target_resource_id} "
            f"(public={request.is_public}, amount=${auth.amount})"
        )
        response = await self._client.submit(payload)
        handle = response.to_handle()

        logger.info(f"Job {handle.id} accepted with status {handle.status.value}")
        return handle
