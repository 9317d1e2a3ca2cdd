"""Unit tests for FallbackAIClient."""

import pytest

from bartender_service.clients.base_client import CompletionRequest
from bartender_service.clients.fallback_client import FallbackAIClient
from bartender_service.errors import UpstreamUnavailableError


@pytest.mark.unit
class TestFallbackAIClient:
    """Test suite for FallbackAIClient."""

    def test_requires_a_client(self) -> None:
        with pytest.raises(ValueError):
            FallbackAIClient([])

    @pytest.mark.asyncio
    async def test_uses_first_client_when_it_answers(self, ai_client_factory: type) -> None:
        primary = ai_client_factory(["from gemini"], provider_name="gemini")
        secondary = ai_client_factory(["from groq"], provider_name="groq")

        reply = await FallbackAIClient([primary, secondary]).complete(CompletionRequest(message="hi"))

        assert reply == "from gemini"
        assert secondary.requests == []

    @pytest.mark.asyncio
    async def test_falls_back_on_quota_error(self, ai_client_factory: type) -> None:
        quota = UpstreamUnavailableError("gemini", "error 429", status_code=429)
        primary = ai_client_factory([quota], provider_name="gemini")
        secondary = ai_client_factory(["from groq"], provider_name="groq")

        reply = await FallbackAIClient([primary, secondary]).complete(CompletionRequest(message="hi"))

        assert reply == "from groq"
        assert len(primary.requests) == 1

    @pytest.mark.asyncio
    async def test_raises_last_error_when_all_fail(self, ai_client_factory: type) -> None:
        primary = ai_client_factory([UpstreamUnavailableError("gemini", "down")], provider_name="gemini")
        last = UpstreamUnavailableError("groq", "error 500", status_code=500)
        secondary = ai_client_factory([last], provider_name="groq")

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await FallbackAIClient([primary, secondary]).complete(CompletionRequest(message="hi"))

        assert exc_info.value is last

    @pytest.mark.asyncio
    async def test_no_providers_left_raises_upstream_error(self, ai_client_factory: type) -> None:
        client = FallbackAIClient([ai_client_factory(["unused"])])
        client.clients = []

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await client.complete(CompletionRequest(message="hi"))

        assert exc_info.value.provider == "auto"

    def test_for_provider(self, ai_client_factory: type) -> None:
        gemini = ai_client_factory(provider_name="gemini")
        groq = ai_client_factory(provider_name="groq")
        client = FallbackAIClient([gemini, groq])

        assert client.provider_names == ["gemini", "groq"]
        assert client.for_provider("Groq") is groq
        assert client.for_provider("auto") is client
        assert client.for_provider(None) is client
        assert groq.for_provider("gemini") is groq
