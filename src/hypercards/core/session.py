"""End-to-end card creation flow.

:class:`CardCreationSession` wires the lifecycle components together the way
a creation dialog uses them:

1. validate the theme locally (invalid input never triggers a signing prompt)
2. resolve the price to charge
3. obtain a payment authorization from the signer
4. submit the request with the authorization
5. record any ancillary access grant
6. hand the job to the tracker, which polls until a terminal state

Closing the session (or leaving its ``async with`` block) resets the
tracker, cancelling any outstanding poll.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from .access_store import AncillaryAccessStore
from .config import HypercardsConfig, config
from .errors import TrackerStateError
from .models import AssetResult, CreationRequest, JobHandle
from .payment import PaymentAuthorizer, PaymentSigner
from .submitter import JobSubmitter
from .tracker import JobLifecycleTracker, Listener, Sleep, TrackerState
from .validation import validate_creation_request

if TYPE_CHECKING:
    from hypercards.api.client import GenerationServiceClient

logger = logging.getLogger(__name__)


class CardCreationSession:
    """One creation dialog: authorize, submit and track a single card at a time.

    Args:
        client: Generation service client
        signer: External payment signer
        settings: Configuration (default: global config)
        listener: Receives every tracker update
        access_store: Store for ancillary access grants (default: the file
            at ``settings.access_store_path``)
        sleep: Coroutine the tracker waits with between polls
    """

    def __init__(
        self,
        client: GenerationServiceClient,
        signer: PaymentSigner,
        settings: HypercardsConfig | None = None,
        listener: Listener | None = None,
        access_store: AncillaryAccessStore | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._config = settings or config
        self._client = client
        self.authorizer = PaymentAuthorizer(signer)
        self.submitter = JobSubmitter(client, self._config)
        self.tracker = JobLifecycleTracker(
            client,
            interval=self._config.poll_interval_seconds,
            listener=listener,
            sleep=sleep,
        )
        self.access_store = access_store or AncillaryAccessStore(self._config.access_store_path)

    async def create(self, request: CreationRequest) -> JobHandle:
        """Authorize, submit and start tracking a new card.

        Returns:
            The submitted job handle. Tracking continues in the background;
            use ``await session.tracker.wait()`` for the outcome.

        Raises:
            ValidationError: Invalid input (no signing prompt is shown)
            AuthorizationError: Signing cancelled or failed
            SubmissionError: The backend rejected the request
            TrackerStateError: A job is already being submitted or polled
        """
        if self.tracker.state in (TrackerState.SUBMITTING, TrackerState.POLLING):
            raise TrackerStateError("A card is already being created")

        validate_creation_request(request)

        # Claimed before the first await so overlapping calls never reach the signer
        self.tracker.begin_submission()
        try:
            price = await self.submitter.resolve_price(request)
            auth = await self.authorizer.authorize(price)
            handle = await self.submitter.submit(request, auth)
        except BaseException:
            self.tracker.reset()
            raise

        if handle.ancillary_access is not None:
            self._record_access(handle)

        self.tracker.track(handle)
        return handle

    def _record_access(self, handle: JobHandle) -> None:
        try:
            self.access_store.record(handle.id, handle.ancillary_access)
        except (OSError, TypeError) as e:
            logger.warning(f"Failed to store ancillary access for job {handle.id}: {e}")

    async def generate_asset(self) -> AssetResult:
        """Generate the asset (banner image) for the completed job.

        Raises:
            TrackerStateError: If the current job has not completed
            AssetGenerationError: If generation fails or times out
        """
        job_id = self.tracker.job_id
        if job_id is None or self.tracker.state is not TrackerState.COMPLETED:
            raise TrackerStateError("Assets can only be generated for completed cards")

        response = await self._client.generate_asset(job_id)
        logger.info(
            f"Asset for job {job_id} ready (cached={response.cached}, enhanced={response.enhanced})"
        )
        return AssetResult(
            asset_url=response.asset_url,
            cached=response.cached,
            enhanced=response.enhanced,
        )

    async def close(self) -> None:
        """Stop tracking and cancel any outstanding request."""
        await self.tracker.aclose()

    async def __aenter__(self) -> CardCreationSession:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
