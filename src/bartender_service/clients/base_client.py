"""Base class for generative-AI provider clients.

Every provider client turns a CompletionRequest into reply text. Failures
(transport errors, non-2xx responses, empty replies) are raised as
UpstreamUnavailableError; callers decide whether to fall back or give up.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import httpx

from bartender_service.errors import UpstreamUnavailableError
from bartender_service.models.inventory_models import ChatMessage
from bartender_service.observability.metrics import record_upstream_call

logger = logging.getLogger(__name__)


@dataclass
class CompletionRequest:
    """Provider-neutral description of one generation call.

    Attributes:
        message: The new user message
        system_prompt: Optional instructions placed before the history
        history: Earlier turns, oldest first
        temperature: Sampling temperature
        max_tokens: Output token cap
    """

    message: str
    system_prompt: str | None = None
    history: list[ChatMessage] = field(default_factory=list)
    temperature: float = 0.6
    max_tokens: int = 400


class GenerativeAIClient(ABC):
    """Abstract client for a generative-AI provider."""

    def __init__(self, provider_name: str, timeout_seconds: float = 30.0) -> None:
        """Initialize the client.

        Args:
            provider_name: Short provider name used in logs and metrics
            timeout_seconds: Timeout for each HTTP request
        """
        self.provider_name = provider_name
        self.timeout_seconds = timeout_seconds

    def for_provider(self, provider: str | None) -> "GenerativeAIClient":
        """Client to use when a caller asks for a specific provider.

        Single-provider clients always answer themselves.
        """
        return self

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> str:
        """Generate a reply.

        Returns:
            Non-empty reply text, stripped of surrounding whitespace

        Raises:
            UpstreamUnavailableError: If the provider fails or returns no text
        """

    async def _post_json(
        self, url: str, payload: dict, headers: dict[str, str] | None = None
    ) -> dict:
        """POST ``payload`` and decode the JSON reply.

        Raises:
            UpstreamUnavailableError: On transport errors or non-2xx status
        """
        started = time.perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(url, json=payload, headers=headers)
        except httpx.RequestError as e:
            record_upstream_call(self.provider_name, time.perf_counter() - started, success=False)
            logger.error(f"{self.provider_name} request failed: {e}")
            raise UpstreamUnavailableError(self.provider_name, f"request failed: {e}") from e

        duration = time.perf_counter() - started
        if not response.is_success:
            record_upstream_call(self.provider_name, duration, success=False)
            logger.error(f"{self.provider_name} error {response.status_code}: {response.text}")
            raise UpstreamUnavailableError(
                self.provider_name,
                f"error {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        record_upstream_call(self.provider_name, duration, success=True)
        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamUnavailableError(self.provider_name, "response was not JSON") from e
        return data if isinstance(data, dict) else {}
