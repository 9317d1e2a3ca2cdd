"""Exception types raised by the bartender service.

Services raise these for failures the HTTP layer maps to a status code.
Expected "nothing to do" outcomes (no draft to discard, recipe already on
the menu, no inventory marker in a reply) are plain return values instead.
"""


class BartenderServiceError(Exception):
    """Base class for all service errors."""


class ForbiddenError(BartenderServiceError):
    """Raised when a write-protected endpoint gets a missing or wrong PIN."""


class NotFoundError(BartenderServiceError):
    """Raised when a requested resource (snapshot, favorite) does not exist."""


class VersionConflictError(BartenderServiceError):
    """Raised when a publish is based on a stale live menu version."""

    def __init__(self, expected_version: int, current_version: int) -> None:
        self.expected_version = expected_version
        self.current_version = current_version
        super().__init__(
            f"Live menu is at version {current_version}, but the publish was based on "
            f"version {expected_version}. Reload the menu and try again."
        )


class ItemVersionConflictError(BartenderServiceError):
    """Raised when a menu item edit is based on a stale item version."""

    def __init__(self, item_id: str, expected_version: int, current_version: int) -> None:
        self.item_id = item_id
        self.expected_version = expected_version
        self.current_version = current_version
        super().__init__(
            f"Item version mismatch. You provided v{expected_version}, but current is "
            f"v{current_version}. Please refresh and retry."
        )


class MenuValidationError(BartenderServiceError):
    """Raised when a menu breaks a rule no single item can check (duplicate ids, size)."""


class UpstreamUnavailableError(BartenderServiceError):
    """Raised when the generative-AI service fails or returns nothing usable.

    Attributes:
        provider: Name of the provider that failed (e.g. 'gemini', 'groq')
        status_code: HTTP status returned upstream, None for transport errors
        body: Upstream response body, kept for server-side logs only
    """

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        self.provider = provider
        self.status_code = status_code
        self.body = body
        super().__init__(f"{provider}: {message}")


class StoreError(BartenderServiceError):
    """Raised when the key-value store cannot be read or written."""
