"""Shared-secret PIN validation for write-protected endpoints."""

import hmac


class PinValidator:
    """Validates the PIN sent with inventory writes.

    Matching is exact (case- and whitespace-sensitive) and done in constant
    time.
    """

    def __init__(self, pin: str) -> None:
        """Initialize validator with the configured PIN.

        Args:
            pin: The shared secret

        Raises:
            ValueError: If pin is empty
        """
        if not pin:
            raise ValueError("A PIN must be provided")

        self._pin = pin.encode()

    def validate(self, pin: str) -> bool:
        """Validate a PIN.

        Args:
            pin: The PIN supplied by the client

        Returns:
            bool: True if it matches the configured PIN exactly
        """
        return hmac.compare_digest(pin.encode(), self._pin)
