"""Google Gemini client (generateContent REST API)."""

import logging
from typing import Any

from bartender_service.clients.base_client import CompletionRequest, GenerativeAIClient
from bartender_service.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


def extract_gemini_text(data: dict[str, Any]) -> str:
    """Pull the first candidate's text out of a generateContent reply."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return ""
    return text.strip() if isinstance(text, str) else ""


class GeminiClient(GenerativeAIClient):
    """Client for Gemini models.

    Gemini has no system role in this API version, so the system prompt is
    sent as the first user turn and assistant turns use the 'model' role.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        base_url: str = GEMINI_BASE_URL,
        timeout_seconds: float = 30.0,
    ) -> None:
        super().__init__("gemini", timeout_seconds=timeout_seconds)
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")

    def build_payload(self, request: CompletionRequest) -> dict[str, Any]:
        """Translate a CompletionRequest into a generateContent body."""
        contents: list[dict[str, Any]] = []
        if request.system_prompt:
            contents.append({"role": "user", "parts": [{"text": request.system_prompt}]})
        for turn in request.history:
            contents.append(
                {"role": "user" if turn.is_user else "model", "parts": [{"text": turn.content}]}
            )
        contents.append({"role": "user", "parts": [{"text": request.message}]})

        return {
            "contents": contents,
            "generationConfig": {
                "temperature": request.temperature,
                "topK": 40,
                "topP": 0.95,
                "maxOutputTokens": request.max_tokens,
            },
        }

    async def complete(self, request: CompletionRequest) -> str:
        url = f"{self.base_url}/models/{self.model}:generateContent?key={self.api_key}"
        data = await self._post_json(url, self.build_payload(request))

        text = extract_gemini_text(data)
        if not text:
            logger.error("Gemini returned empty response")
            raise UpstreamUnavailableError(self.provider_name, "empty response")
        return text
