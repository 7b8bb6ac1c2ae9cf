"""Unit tests for JobSubmitter.

The generation service client is replaced with ``AsyncMock`` methods so the
tests can assert exactly which requests were (or were not) made.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from hypercards.api.models import ResourceInfo, SubmitResponse
from hypercards.core.errors import BackendUnavailable, PaymentRejected, ValidationError
from hypercards.core.models import CreationRequest, JobStatus, PaymentAuthorization, Visibility
from hypercards.core.submitter import JobSubmitter

AUTH = PaymentAuthorization(header="signed-payment-header", amount="9.99", payer="0xaa")


def _mock_client(submit_response=None, resource=None) -> MagicMock:
    client = MagicMock()
    client.submit = AsyncMock(
        return_value=submit_response
        or SubmitResponse.model_validate({"job": {"id": "abc123", "status": "generating"}})
    )
    client.get_resource = AsyncMock(
        return_value=resource or ResourceInfo.model_validate({"price_usd": "4.00"})
    )
    return client


class TestResolvePrice:
    """Tests for JobSubmitter.resolve_price."""

    @pytest.mark.asyncio
    async def test_quoted_price_wins(self, test_config, valid_request):
        client = _mock_client()
        price = await JobSubmitter(client, test_config).resolve_price(valid_request)

        assert price == Decimal("9.99")
        client.get_resource.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quoted", [None, Decimal("0"), Decimal("-1")])
    async def test_uses_current_price(self, test_config, quoted):
        client = _mock_client(
            resource=ResourceInfo.model_validate({"price_usd": "4.00", "current_price_usd": "6.50"})
        )
        request = CreationRequest(
            theme_text="Snowy cabin", target_resource_id="bonfire-1", quoted_price_usd=quoted
        )

        price = await JobSubmitter(client, test_config).resolve_price(request)

        assert price == Decimal("6.50")
        client.get_resource.assert_awaited_once_with("bonfire-1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("current", [None, "0", "0.00"])
    async def test_falls_back_to_base_price(self, test_config, current):
        client = _mock_client(
            resource=ResourceInfo.model_validate({"price_usd": "4.00", "current_price_usd": current})
        )
        request = CreationRequest(theme_text="Snowy cabin", target_resource_id="bonfire-1")

        assert await JobSubmitter(client, test_config).resolve_price(request) == Decimal("4.00")

    @pytest.mark.asyncio
    async def test_metadata_failure_propagates(self, test_config):
        client = _mock_client()
        client.get_resource.side_effect = BackendUnavailable("Failed to fetch resource details")
        request = CreationRequest(theme_text="Snowy cabin", target_resource_id="bonfire-1")

        with pytest.raises(BackendUnavailable):
            await JobSubmitter(client, test_config).resolve_price(request)


class TestSubmit:
    """Tests for JobSubmitter.submit."""

    @pytest.mark.asyncio
    async def test_payload(self, test_config):
        client = _mock_client()
        request = CreationRequest(
            theme_text="  Christmas wishes for a special friend  ",
            target_resource_id="bonfire-1",
            visibility=Visibility.PRIVATE,
        )

        await JobSubmitter(client, test_config).submit(request, AUTH)

        payload = client.submit.await_args.args[0]
        assert payload.payment_header == "signed-payment-header"
        assert payload.target_resource_id == "bonfire-1"
        assert payload.theme_text == "Christmas wishes for a special friend"
        assert payload.is_public is False
        assert payload.length_mode == "short"
        assert payload.generation_mode == "card"

    @pytest.mark.asyncio
    async def test_returns_handle(self, test_config, valid_request):
        handle = await JobSubmitter(_mock_client(), test_config).submit(valid_request, AUTH)
        assert handle.id == "abc123"
        assert handle.status is JobStatus.GENERATING

    @pytest.mark.asyncio
    async def test_ancillary_access_passed_through(self, test_config, valid_request):
        grant = {"session": "santa", "nested": {"level": 2}}
        client = _mock_client(
            submit_response=SubmitResponse.model_validate(
                {"job": {"id": "abc123", "status": "completed"}, "ancillary_access": grant}
            )
        )

        handle = await JobSubmitter(client, test_config).submit(valid_request, AUTH)

        assert handle.status is JobStatus.COMPLETED
        assert handle.ancillary_access == grant

    @pytest.mark.asyncio
    async def test_overlong_theme_never_submitted(self, test_config):
        client = _mock_client()
        request = CreationRequest(theme_text="x" * 501, target_resource_id="bonfire-1")

        with pytest.raises(ValidationError):
            await JobSubmitter(client, test_config).submit(request, AUTH)
        client.submit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_backend_rejection_propagates(self, test_config, valid_request):
        client = _mock_client()
        client.submit.side_effect = PaymentRejected("Payment expired", status_code=402)

        with pytest.raises(PaymentRejected, match="Payment expired"):
            await JobSubmitter(client, test_config).submit(valid_request, AUTH)
