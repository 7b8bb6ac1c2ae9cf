"""Error taxonomy for the card creation lifecycle.

Every error raised by the package derives from :class:`HypercardsError` and
carries a human-readable ``message`` (safe to show to the user as-is) and a
stable ``error_code`` for logging and analytics.

Families
--------
ValidationError
    Local, pre-network input problems.  Progress stops immediately.
AuthorizationError
    The payment signer was cancelled or failed.  Nothing is submitted.
SubmissionError
    The backend rejected the creation request or could not be reached.
PollTransientError
    A status poll failed for reasons unrelated to the job itself.  Logged and
    retried on the next tick, never surfaced as a hard failure.
TerminalFailure
    The backend reports that the job failed.  A new submission is required.
AssetGenerationError
    Asset generation for a completed job failed or timed out.
"""

from __future__ import annotations

from typing import Any


class HypercardsError(Exception):
    """Base class for all HyperCards errors."""

    error_code = "hypercards_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(HypercardsError):
    """User-friendly validation error.

    The message is intended to be displayed directly to the user.
    """

    error_code = "validation_error"


class TrackerStateError(HypercardsError):
    """An operation was requested in a lifecycle state that does not allow it."""

    error_code = "invalid_state"


# -- Authorization --------------------------------------------------------


class AuthorizationError(HypercardsError):
    """Payment authorization could not be obtained."""

    error_code = "authorization_error"


class InvalidAmount(ValidationError, AuthorizationError):
    error_code = "invalid_amount"

    def __init__(self, amount: Any) -> None:
        super().__init__(f"Payment amount must be a positive number, got {amount!r}")
        self.amount = amount


class UserRejected(AuthorizationError):
    error_code = "user_rejected"

    def __init__(self, message: str = "Payment signing was cancelled") -> None:
        super().__init__(message)


class SigningFailed(AuthorizationError):
    error_code = "signing_failed"

    def __init__(self, message: str = "Payment signing failed") -> None:
        super().__init__(message)


class SignerCancelled(Exception):
    """Raised by a :class:`~hypercards.core.payment.PaymentSigner` when the
    human operator dismisses the signing prompt."""


# -- Submission -----------------------------------------------------------


class SubmissionError(HypercardsError):
    """The backend rejected the creation request.

    Attributes:
        status_code: HTTP status of the rejecting response, if any.
        details: Raw error details reported by the backend, if any.
    """

    error_code = "submission_error"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class PaymentRejected(SubmissionError):
    """The payment authorization was invalid, expired or mismatched."""

    error_code = "payment_rejected"


class SubmissionValidationError(SubmissionError):
    """The backend rejected one or more request fields.

    Attributes:
        fields: Mapping of field name to validation message (may be empty
            when the backend does not report individual fields).
    """

    error_code = "submission_invalid"

    def __init__(
        self,
        message: str,
        fields: dict[str, str] | None = None,
        status_code: int | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message, status_code=status_code, details=details)
        self.fields = dict(fields or {})


class BackendUnavailable(SubmissionError):
    """Network/connectivity failure, server error, or malformed response."""

    error_code = "backend_unavailable"


# -- Polling --------------------------------------------------------------


class PollTransientError(HypercardsError):
    """A status poll failed; the next scheduled tick proceeds normally."""

    error_code = "poll_transient"

    def __init__(self, job_id: str, cause: Exception) -> None:
        super().__init__(f"Status poll for job {job_id} failed: {cause}")
        self.job_id = job_id
        self.cause = cause


class TerminalFailure(HypercardsError):
    """The backend reported the job as failed."""

    error_code = "job_failed"

    def __init__(
        self, job_id: str, message: str = "Card creation failed. Please try again."
    ) -> None:
        super().__init__(message)
        self.job_id = job_id


# -- Assets ---------------------------------------------------------------


class AssetGenerationError(HypercardsError):
    error_code = "asset_failed"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AssetTimeout(AssetGenerationError):
    """Asset generation took too long (backend 503 or client-side timeout)."""

    error_code = "asset_timeout"
