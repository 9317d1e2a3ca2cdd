"""Unit tests for ChatOrchestrator."""

from unittest.mock import MagicMock

import pytest

from bartender_service.errors import UpstreamUnavailableError
from bartender_service.models.inventory_models import ChatMessage, InventoryItem
from bartender_service.repositories.bar_repositories import InventoryRepository
from bartender_service.services.chat_orchestrator import ChatOrchestrator


@pytest.fixture
def mock_inventory_repo() -> InventoryRepository:
    return MagicMock(spec=InventoryRepository)


def _history(turns: int) -> list[ChatMessage]:
    return [
        ChatMessage(role="user" if i % 2 == 0 else "assistant", content=f"turn {i}") for i in range(turns)
    ]


@pytest.mark.unit
class TestBuildRequest:
    """Tests for request assembly."""

    def test_history_is_bounded_to_most_recent_turns(
        self, ai_client_factory: type, mock_inventory_repo: InventoryRepository
    ) -> None:
        orchestrator = ChatOrchestrator(ai_client_factory(), mock_inventory_repo)

        request = orchestrator.build_request("Another?", [], _history(10))

        assert [turn.content for turn in request.history] == [f"turn {i}" for i in range(4, 10)]
        assert request.message == "Another?"
        assert request.temperature == 0.3
        assert request.max_tokens == 1024

    def test_system_prompt_includes_inventory(
        self,
        ai_client_factory: type,
        mock_inventory_repo: InventoryRepository,
        sample_inventory: list[InventoryItem],
    ) -> None:
        orchestrator = ChatOrchestrator(ai_client_factory(), mock_inventory_repo, history_limit=2)

        request = orchestrator.build_request("Hi", sample_inventory, _history(3))

        assert request.system_prompt is not None
        assert "Bourbon Whiskey" in request.system_prompt
        assert len(request.history) == 2


@pytest.mark.unit
class TestHandleMessage:
    """Tests for handle_message."""

    @pytest.mark.asyncio
    async def test_plain_reply_is_not_persisted(
        self,
        ai_client_factory: type,
        mock_inventory_repo: MagicMock,
        sample_inventory: list[InventoryItem],
    ) -> None:
        orchestrator = ChatOrchestrator(ai_client_factory(["Try an Old Fashioned."]), mock_inventory_repo)

        result = await orchestrator.handle_message("Ideas?", sample_inventory, [])

        assert result.response_text == "Try an Old Fashioned."
        assert result.updated_inventory is None
        mock_inventory_repo.save_inventory.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_directive_is_applied_and_saved(
        self,
        ai_client_factory: type,
        mock_inventory_repo: MagicMock,
        sample_inventory: list[InventoryItem],
    ) -> None:
        reply = 'Nice work! [INVENTORY_UPDATE]{"updates": [{"name": "Bourbon Whiskey", "subtract": 60}]}'
        orchestrator = ChatOrchestrator(ai_client_factory([reply]), mock_inventory_repo)

        result = await orchestrator.handle_message("I made it", sample_inventory, [])

        assert result.response_text == "Nice work!"
        assert result.updated_inventory is not None
        assert result.updated_inventory[0].amount_remaining == "690"
        assert len(result.updated_inventory) == len(sample_inventory)
        mock_inventory_repo.save_inventory.assert_called_once_with(result.updated_inventory)

    @pytest.mark.asyncio
    async def test_malformed_directive_returns_raw_reply(
        self,
        ai_client_factory: type,
        mock_inventory_repo: MagicMock,
        sample_inventory: list[InventoryItem],
    ) -> None:
        reply = "Cheers [INVENTORY_UPDATE] oops"
        orchestrator = ChatOrchestrator(ai_client_factory([reply]), mock_inventory_repo)

        result = await orchestrator.handle_message("I made it", sample_inventory, [])

        assert result.response_text == reply
        assert result.updated_inventory is None
        mock_inventory_repo.save_inventory.assert_not_called()

    @pytest.mark.asyncio
    async def test_upstream_failure_propagates(
        self, ai_client_factory: type, mock_inventory_repo: MagicMock
    ) -> None:
        client = ai_client_factory([UpstreamUnavailableError("gemini", "error 500", status_code=500)])
        orchestrator = ChatOrchestrator(client, mock_inventory_repo)

        with pytest.raises(UpstreamUnavailableError):
            await orchestrator.handle_message("Hello", [], [])

        mock_inventory_repo.save_inventory.assert_not_called()
