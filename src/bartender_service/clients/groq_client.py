"""Groq client (OpenAI-compatible chat completions API)."""

import logging
from typing import Any

from bartender_service.clients.base_client import CompletionRequest, GenerativeAIClient
from bartender_service.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"


class GroqClient(GenerativeAIClient):
    """Client for models served by Groq."""

    def __init__(
        self,
        api_key: str,
        model: str = "llama-3-70b-8192",
        base_url: str = GROQ_BASE_URL,
        timeout_seconds: float = 30.0,
    ) -> None:
        super().__init__("groq", timeout_seconds=timeout_seconds)
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")

    def build_payload(self, request: CompletionRequest) -> dict[str, Any]:
        """Translate a CompletionRequest into a chat completions body."""
        messages: list[dict[str, str]] = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})
        for turn in request.history:
            messages.append(
                {"role": "user" if turn.is_user else "assistant", "content": turn.content}
            )
        messages.append({"role": "user", "content": request.message})

        return {
            "model": self.model,
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "messages": messages,
        }

    async def complete(self, request: CompletionRequest) -> str:
        data = await self._post_json(
            f"{self.base_url}/chat/completions",
            self.build_payload(request),
            headers={"Authorization": f"Bearer {self.api_key}"},
        )

        try:
            text = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            text = ""
        text = text.strip() if isinstance(text, str) else ""
        if not text:
            logger.error("Groq returned empty response")
            raise UpstreamUnavailableError(self.provider_name, "empty response")
        return text
