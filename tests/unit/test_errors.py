"""Unit tests for the error taxonomy."""

import pytest

from hypercards.core.errors import (
    AssetGenerationError,
    AssetTimeout,
    AuthorizationError,
    BackendUnavailable,
    HypercardsError,
    InvalidAmount,
    PaymentRejected,
    PollTransientError,
    SigningFailed,
    SubmissionError,
    SubmissionValidationError,
    TerminalFailure,
    UserRejected,
    ValidationError,
)


class TestHierarchy:
    """Errors are grouped into the documented families."""

    @pytest.mark.parametrize("error_cls", [InvalidAmount, UserRejected, SigningFailed])
    def test_authorization_family(self, error_cls):
        assert issubclass(error_cls, AuthorizationError)

    @pytest.mark.parametrize(
        "error_cls", [PaymentRejected, SubmissionValidationError, BackendUnavailable]
    )
    def test_submission_family(self, error_cls):
        assert issubclass(error_cls, SubmissionError)

    def test_invalid_amount_is_local_validation(self):
        assert issubclass(InvalidAmount, ValidationError)

    def test_asset_timeout_is_asset_error(self):
        assert issubclass(AssetTimeout, AssetGenerationError)

    def test_everything_derives_from_base(self):
        for error_cls in (ValidationError, SubmissionError, PollTransientError, TerminalFailure):
            assert issubclass(error_cls, HypercardsError)


class TestErrorDetails:
    def test_message_attribute(self):
        error = SubmissionError("Dataroom not found", status_code=404)
        assert error.message == "Dataroom not found"
        assert str(error) == "Dataroom not found"
        assert error.status_code == 404

    def test_field_errors(self):
        error = SubmissionValidationError("Invalid input", fields={"theme_text": "too short"})
        assert error.fields == {"theme_text": "too short"}
        assert error.error_code == "submission_invalid"

    def test_field_errors_default_empty(self):
        assert SubmissionValidationError("Invalid input").fields == {}

    def test_poll_transient_keeps_cause(self):
        cause = BackendUnavailable("Request failed with status 500", status_code=500)
        error = PollTransientError("abc123", cause)
        assert error.job_id == "abc123"
        assert error.cause is cause
        assert "abc123" in str(error)

    def test_terminal_failure_message(self):
        error = TerminalFailure("abc123")
        assert error.job_id == "abc123"
        assert "try again" in error.message

    def test_invalid_amount_keeps_amount(self):
        assert InvalidAmount(-5).amount == -5
