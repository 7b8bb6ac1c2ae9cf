"""Core card creation lifecycle.

This module provides the components that take a card from user input to a
finished job:

- **PaymentAuthorizer**: Signs a single-use payment for the quoted amount
- **JobSubmitter**: Validates input, resolves the price and submits the job
- **JobLifecycleTracker**: Polls the job until it completes or fails
- **translate**: Flattens hierarchical task progress for display
- **CardCreationSession**: Runs the whole flow for one creation dialog
- **HypercardsConfig**: Configuration management using Pydantic Settings
- **config**: Global configuration instance (loads from environment variables)

Architecture Overview
---------------------
1. **Configuration Layer** (config.py):
   - Environment-based configuration using Pydantic Settings
   - All settings prefixed with HYPERCARDS_ in .env files

2. **Lifecycle Layer** (payment.py, submitter.py, tracker.py):
   - Signer call, submission and polling are the only suspension points
   - The tracker owns its timer and in-flight request exclusively

3. **Support Utilities**:
   - progress.py: Pure progress translation
   - validation.py: Theme and amount validation
   - access_store.py: Write-once record of ancillary access grants
   - errors.py: Error taxonomy

Usage Example
-------------
    from hypercards import CardCreationSession, CreationRequest, GenerationServiceClient

    async with GenerationServiceClient() as client:
        async with CardCreationSession(client, signer) as session:
            await session.create(
                CreationRequest(theme_text="A warm holiday greeting", target_resource_id="bonfire-1")
            )
            state = await session.tracker.wait()
"""

from hypercards.core.config import HypercardsConfig, config
from hypercards.core.payment import PaymentAuthorizer, PaymentSigner
from hypercards.core.progress import translate
from hypercards.core.session import CardCreationSession
from hypercards.core.submitter import JobSubmitter
from hypercards.core.tracker import JobLifecycleTracker, TrackerState

__all__ = [
    "CardCreationSession",
    "HypercardsConfig",
    "JobLifecycleTracker",
    "JobSubmitter",
    "PaymentAuthorizer",
    "PaymentSigner",
    "TrackerState",
    "config",
    "translate",
]
