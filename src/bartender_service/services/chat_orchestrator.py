"""Chat orchestration: prompt building, the upstream call and reconciliation."""

import logging
from dataclasses import dataclass

from bartender_service.clients.base_client import CompletionRequest, GenerativeAIClient
from bartender_service.errors import UpstreamUnavailableError
from bartender_service.models.inventory_models import ChatMessage, InventoryItem
from bartender_service.observability import traced
from bartender_service.observability.metrics import record_chat_request
from bartender_service.repositories.bar_repositories import InventoryRepository
from bartender_service.services.inventory_reconciler import InventoryReconciler
from bartender_service.services.prompts import build_system_prompt

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 6
CHAT_TEMPERATURE = 0.3
CHAT_MAX_TOKENS = 1024


@dataclass
class ChatResult:
    """Reply for the UI.

    Attributes:
        response_text: Text to show the user, directive removed
        updated_inventory: Persisted inventory if the reply changed it, else None
    """

    response_text: str
    updated_inventory: list[InventoryItem] | None = None


class ChatOrchestrator:
    """Builds the AI request for a chat turn and post-processes the reply."""

    def __init__(
        self,
        ai_client: GenerativeAIClient,
        inventory_repository: InventoryRepository,
        reconciler: InventoryReconciler | None = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            ai_client: Client used for the chat completion
            inventory_repository: Where reconciled inventory is saved
            reconciler: Directive parser (default InventoryReconciler())
            history_limit: Number of most recent turns sent upstream
        """
        self.ai_client = ai_client
        self.inventory_repository = inventory_repository
        self.reconciler = reconciler or InventoryReconciler()
        self.history_limit = history_limit

    def build_request(
        self, message: str, inventory: list[InventoryItem], chat_history: list[ChatMessage]
    ) -> CompletionRequest:
        """Assemble the completion request for one chat turn."""
        recent = chat_history[-self.history_limit :] if self.history_limit > 0 else []
        return CompletionRequest(
            message=message,
            system_prompt=build_system_prompt(inventory),
            history=list(recent),
            temperature=CHAT_TEMPERATURE,
            max_tokens=CHAT_MAX_TOKENS,
        )

    @traced("chat.handle_message")
    async def handle_message(
        self, message: str, inventory: list[InventoryItem], chat_history: list[ChatMessage]
    ) -> ChatResult:
        """Answer a chat message and apply any confirmed consumption.

        Raises:
            UpstreamUnavailableError: If no provider produced a reply; nothing
                is persisted in that case
        """
        request = self.build_request(message, inventory, chat_history)
        try:
            reply = await self.ai_client.complete(request)
        except UpstreamUnavailableError:
            record_chat_request("upstream_error")
            raise

        result = self.reconciler.reconcile(reply, inventory)
        if not result.changed:
            record_chat_request("ok")
            return ChatResult(response_text=result.response_text.strip())

        self.inventory_repository.save_inventory(result.inventory)
        record_chat_request("inventory_updated")
        logger.info("Chat reply updated inventory")
        return ChatResult(response_text=result.response_text, updated_inventory=result.inventory)
