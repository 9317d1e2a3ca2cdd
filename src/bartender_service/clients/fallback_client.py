"""Client that tries several providers in order."""

import logging

from bartender_service.clients.base_client import CompletionRequest, GenerativeAIClient
from bartender_service.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)


class FallbackAIClient(GenerativeAIClient):
    """Tries each configured client in order until one answers.

    Used so a quota error on the primary provider (typically Gemini 429s)
    falls through to the secondary one.
    """

    def __init__(self, clients: list[GenerativeAIClient]) -> None:
        """Initialize with clients in priority order.

        Raises:
            ValueError: If no clients are given
        """
        if not clients:
            raise ValueError("At least one AI client must be configured")
        super().__init__("auto")
        self.clients = clients

    @property
    def provider_names(self) -> list[str]:
        return [client.provider_name for client in self.clients]

    def for_provider(self, provider: str | None) -> GenerativeAIClient:
        """Return the named provider's client alone, or self for "auto" and unknown names.

        A forced provider gets no fallback.
        """
        if provider:
            for client in self.clients:
                if client.provider_name == provider.lower():
                    return client
        return self

    async def complete(self, request: CompletionRequest) -> str:
        last_error: UpstreamUnavailableError | None = None
        for client in self.clients:
            try:
                return await client.complete(request)
            except UpstreamUnavailableError as e:
                last_error = e
                if e.status_code == 429:
                    logger.warning(f"{client.provider_name} quota exceeded, trying next provider")
                else:
                    logger.warning(f"{client.provider_name} unavailable ({e}), trying next provider")

        if last_error is None:
            raise UpstreamUnavailableError("auto", "no providers configured")
        raise last_error
