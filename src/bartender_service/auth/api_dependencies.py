"""FastAPI dependencies for PIN authentication."""

from typing import Annotated

from fastapi import Header

from bartender_service.auth.pin_validator import PinValidator
from bartender_service.errors import ForbiddenError

PIN_HEADER = "X-Bartender-Pin"


def get_pin_from_header(
    x_bartender_pin: Annotated[str | None, Header()] = None,
    validator: PinValidator | None = None,
) -> str:
    """Extract and validate the PIN from the X-Bartender-Pin header.

    Args:
        x_bartender_pin: PIN from the header (injected by FastAPI)
        validator: PinValidator instance

    Returns:
        str: The validated PIN

    Raises:
        ForbiddenError: If the PIN is missing or wrong
    """
    if not x_bartender_pin:
        raise ForbiddenError("Missing PIN")

    if validator is None or not validator.validate(x_bartender_pin):
        raise ForbiddenError("Invalid PIN")

    return x_bartender_pin
