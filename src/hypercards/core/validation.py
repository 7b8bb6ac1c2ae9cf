"""Validation utilities for card creation inputs."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .errors import InvalidAmount, ValidationError
from .models import MAX_THEME_LENGTH, MIN_THEME_LENGTH, CreationRequest

_CENTS = Decimal("0.01")


def validate_theme_text(text: str | None) -> str:
    """Validate the card theme and return it trimmed.

    Args:
        text: Raw theme text from the user

    Returns:
        Trimmed theme text

    Raises:
        ValidationError: If the trimmed text is shorter than 3 or longer than
            500 characters
    """
    if text is None:
        raise ValidationError("Please describe your card message theme")

    trimmed = text.strip()

    if len(trimmed) < MIN_THEME_LENGTH:
        raise ValidationError(
            f"Theme must be at least {MIN_THEME_LENGTH} characters, got {len(trimmed)}"
        )
    if len(trimmed) > MAX_THEME_LENGTH:
        raise ValidationError(
            f"Theme must be at most {MAX_THEME_LENGTH} characters, got {len(trimmed)}"
        )

    return trimmed


def validate_creation_request(request: CreationRequest) -> str:
    """Validate a creation request before any signing or network activity.

    Args:
        request: Creation request to validate

    Returns:
        Trimmed theme text

    Raises:
        ValidationError: If any field is invalid
    """
    theme = validate_theme_text(request.theme_text)

    if not request.target_resource_id or not str(request.target_resource_id).strip():
        raise ValidationError("No target resource selected")

    return theme


def parse_amount(amount) -> Decimal:
    """Convert a user- or backend-supplied amount to a ``Decimal``.

    Floats are converted through ``str`` so that ``9.99`` stays ``9.99``.

    Raises:
        InvalidAmount: If the amount is not a finite number
    """
    if isinstance(amount, bool):
        raise InvalidAmount(amount)

    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
    except (InvalidOperation, ValueError, TypeError) as e:
        raise InvalidAmount(amount) from e

    if not value.is_finite():
        raise InvalidAmount(amount)

    return value


def format_amount(amount) -> str:
    """Format a strictly positive amount with exactly two fractional digits.

    Args:
        amount: Decimal, int, float or numeric string

    Returns:
        Amount string such as ``"9.99"``

    Raises:
        InvalidAmount: If the amount is not numeric or not strictly positive
            once rounded to cents
    """
    value = parse_amount(amount)
    try:
        rounded = value.quantize(_CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise InvalidAmount(amount) from e

    if rounded <= 0:
        raise InvalidAmount(amount)

    return f"{rounded:.2f}"
