"""Payment authorization through an external wallet signer.

The signer is anything implementing :class:`PaymentSigner`: typically a
bridge to a browser wallet or a hardware device that shows the operator a
signing prompt.  The prompt may be dismissed, which the signer reports by
raising :class:`~hypercards.core.errors.SignerCancelled` (or by resolving to
an empty header).
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from .errors import SignerCancelled, SigningFailed, UserRejected
from .models import PaymentAuthorization
from .validation import format_amount

logger = logging.getLogger(__name__)


@runtime_checkable
class PaymentSigner(Protocol):
    """External signer producing single-use payment headers."""

    @property
    def payer(self) -> str | None:
        """Identity (e.g. wallet address) of the paying account."""
        ...

    async def sign(self, amount: str) -> str | None:
        """Build and sign a payment header for ``amount`` (e.g. ``"9.99"``).

        Resolves only when the operator approves or dismisses the prompt.
        """
        ...


class PaymentAuthorizer:
    """Obtain payment authorizations for quoted amounts.

    Authorizations are never cached: every call to :meth:`authorize` prompts
    the signer again, and each result is meant for exactly one submission.
    """

    def __init__(self, signer: PaymentSigner):
        self._signer = signer

    async def authorize(self, amount_usd) -> PaymentAuthorization:
        """Sign a payment for ``amount_usd``.

        Args:
            amount_usd: Price in USD (Decimal, int, float or numeric string)

        Returns:
            Signed authorization bound to the two-digit amount

        Raises:
            InvalidAmount: If the amount is not numeric or not strictly
                positive. The signer is not invoked.
            UserRejected: If the operator cancelled the signing prompt
            SigningFailed: For any other signer error
        """
        amount = format_amount(amount_usd)
        payer = getattr(self._signer, "payer", None)

        logger.info(f"Requesting payment signature for ${amount}")

        try:
            header = await self._signer.sign(amount)
        except SignerCancelled as e:
            logger.info("Payment signing cancelled by user")
            raise UserRejected() from e
        except Exception as e:
            logger.error(f"Payment signing failed: {e}")
            raise SigningFailed(f"Payment signing failed: {e}") from e

        if not header:
            logger.info("Signer returned no payment header, treating as cancelled")
            raise UserRejected()

        return PaymentAuthorization(header=header, amount=amount, payer=payer)
