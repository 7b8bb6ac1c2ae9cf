"""HyperCards - payment-gated card generation client."""

__version__ = "0.1.0"

from hypercards.api.client import GenerationServiceClient
from hypercards.core.config import HypercardsConfig, config
from hypercards.core.models import CreationRequest, JobHandle, JobStatus, Visibility
from hypercards.core.session import CardCreationSession
from hypercards.core.tracker import JobLifecycleTracker, TrackerState

__all__ = [
    "CardCreationSession",
    "CreationRequest",
    "GenerationServiceClient",
    "HypercardsConfig",
    "JobHandle",
    "JobLifecycleTracker",
    "JobStatus",
    "TrackerState",
    "Visibility",
    "config",
]
