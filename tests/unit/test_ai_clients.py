"""Unit tests for the Gemini and Groq clients."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from bartender_service.clients.base_client import CompletionRequest
from bartender_service.clients.gemini_client import GeminiClient, extract_gemini_text
from bartender_service.clients.groq_client import GroqClient
from bartender_service.errors import UpstreamUnavailableError
from bartender_service.models.inventory_models import ChatMessage


def _response(status_code: int, json_body: object | None = None, text: str = "") -> httpx.Response:
    request = httpx.Request("POST", "https://example.invalid")
    if json_body is not None:
        return httpx.Response(status_code, json=json_body, request=request)
    return httpx.Response(status_code, text=text, request=request)


@pytest.fixture
def chat_request() -> CompletionRequest:
    return CompletionRequest(
        message="Make me a Manhattan",
        system_prompt="You are a bartender.",
        history=[
            ChatMessage(role="user", content="Hi"),
            ChatMessage(role="assistant", content="Hello! What are we drinking?"),
        ],
        temperature=0.3,
        max_tokens=1024,
    )


@pytest.mark.unit
class TestGeminiClient:
    """Test suite for GeminiClient."""

    def test_build_payload(self, chat_request: CompletionRequest) -> None:
        payload = GeminiClient(api_key="key").build_payload(chat_request)

        assert [turn["role"] for turn in payload["contents"]] == ["user", "user", "model", "user"]
        assert payload["contents"][0]["parts"][0]["text"] == "You are a bartender."
        assert payload["contents"][-1]["parts"][0]["text"] == "Make me a Manhattan"
        assert payload["generationConfig"] == {
            "temperature": 0.3,
            "topK": 40,
            "topP": 0.95,
            "maxOutputTokens": 1024,
        }

    def test_extract_text(self) -> None:
        data = {"candidates": [{"content": {"parts": [{"text": "  Stir with ice.  "}]}}]}

        assert extract_gemini_text(data) == "Stir with ice."
        assert extract_gemini_text({"candidates": []}) == ""

    @pytest.mark.asyncio
    async def test_complete_success(self, chat_request: CompletionRequest) -> None:
        client = GeminiClient(api_key="secret", model="gemini-test")
        body = {"candidates": [{"content": {"parts": [{"text": "Here is your Manhattan."}]}}]}

        with patch.object(httpx.AsyncClient, "post", new=AsyncMock(return_value=_response(200, body))) as post:
            reply = await client.complete(chat_request)

        assert reply == "Here is your Manhattan."
        url = post.call_args.args[0]
        assert url.endswith("/models/gemini-test:generateContent?key=secret")

    @pytest.mark.asyncio
    async def test_rate_limited(self, chat_request: CompletionRequest) -> None:
        client = GeminiClient(api_key="secret")

        with patch.object(
            httpx.AsyncClient, "post", new=AsyncMock(return_value=_response(429, text="quota"))
        ):
            with pytest.raises(UpstreamUnavailableError) as exc_info:
                await client.complete(chat_request)

        assert exc_info.value.status_code == 429
        assert exc_info.value.body == "quota"
        assert exc_info.value.provider == "gemini"

    @pytest.mark.asyncio
    async def test_empty_reply_is_an_error(self, chat_request: CompletionRequest) -> None:
        client = GeminiClient(api_key="secret")

        with patch.object(
            httpx.AsyncClient, "post", new=AsyncMock(return_value=_response(200, {"candidates": []}))
        ):
            with pytest.raises(UpstreamUnavailableError):
                await client.complete(chat_request)

    @pytest.mark.asyncio
    async def test_transport_error(self, chat_request: CompletionRequest) -> None:
        client = GeminiClient(api_key="secret")
        error = httpx.ConnectTimeout("timed out")

        with patch.object(httpx.AsyncClient, "post", new=AsyncMock(side_effect=error)):
            with pytest.raises(UpstreamUnavailableError) as exc_info:
                await client.complete(chat_request)

        assert exc_info.value.status_code is None


@pytest.mark.unit
class TestGroqClient:
    """Test suite for GroqClient."""

    def test_build_payload(self, chat_request: CompletionRequest) -> None:
        payload = GroqClient(api_key="key", model="llama-test").build_payload(chat_request)

        assert payload["model"] == "llama-test"
        assert [m["role"] for m in payload["messages"]] == ["system", "user", "assistant", "user"]
        assert payload["max_tokens"] == 1024

    @pytest.mark.asyncio
    async def test_complete_success(self, chat_request: CompletionRequest) -> None:
        client = GroqClient(api_key="gsk")
        body = {"choices": [{"message": {"content": " Two ounces rye. "}}]}

        with patch.object(httpx.AsyncClient, "post", new=AsyncMock(return_value=_response(200, body))) as post:
            reply = await client.complete(chat_request)

        assert reply == "Two ounces rye."
        assert post.call_args.args[0] == "https://api.groq.com/openai/v1/chat/completions"
        assert post.call_args.kwargs["headers"] == {"Authorization": "Bearer gsk"}

    @pytest.mark.asyncio
    async def test_server_error(self, chat_request: CompletionRequest) -> None:
        client = GroqClient(api_key="gsk")

        with patch.object(
            httpx.AsyncClient, "post", new=AsyncMock(return_value=_response(503, text="down"))
        ):
            with pytest.raises(UpstreamUnavailableError) as exc_info:
                await client.complete(chat_request)

        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_null_content_is_an_error(self, chat_request: CompletionRequest) -> None:
        client = GroqClient(api_key="gsk")
        body = {"choices": [{"message": {"content": None}}]}

        with patch.object(httpx.AsyncClient, "post", new=AsyncMock(return_value=_response(200, body))):
            with pytest.raises(UpstreamUnavailableError):
                await client.complete(chat_request)
