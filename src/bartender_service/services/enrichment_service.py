"""Fill in missing flavor notes for inventory items."""

import asyncio
import logging

from bartender_service.clients.base_client import CompletionRequest, GenerativeAIClient
from bartender_service.errors import UpstreamUnavailableError
from bartender_service.models.inventory_models import InventoryItem
from bartender_service.observability import traced
from bartender_service.observability.metrics import record_enrichment
from bartender_service.services.prompts import FLAVOR_NOTES_SYSTEM_PROMPT, build_flavor_notes_prompt

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5


def needs_flavor_notes(item: InventoryItem) -> bool:
    """Named items with blank flavor notes."""
    return bool(item.name.strip()) and not (item.flavor_notes or "").strip()


class EnrichmentService:
    """Asks the AI provider for tasting notes, a small batch per call.

    Each item in the batch is requested concurrently; one item's failure
    leaves that item as it was and does not affect the others.
    """

    def __init__(self, ai_client: GenerativeAIClient, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        self.ai_client = ai_client
        self.batch_size = batch_size

    async def _describe(self, client: GenerativeAIClient, item: InventoryItem) -> str:
        request = CompletionRequest(
            message=build_flavor_notes_prompt(item),
            system_prompt=FLAVOR_NOTES_SYSTEM_PROMPT,
            temperature=0.6,
            max_tokens=160,
        )
        return await client.complete(request)

    @traced("inventory.enrich")
    async def enrich(
        self, inventory: list[InventoryItem], provider: str | None = None
    ) -> list[InventoryItem]:
        """Return the inventory with flavor notes filled for up to ``batch_size`` items.

        Args:
            inventory: Items as sent by the UI
            provider: Provider name to force ("groq"), or None/"auto" for the default chain

        Returns:
            Inventory in the same order and length as the input
        """
        client = self.ai_client.for_provider(provider)
        batch = [index for index, item in enumerate(inventory) if needs_flavor_notes(item)]
        batch = batch[: self.batch_size]
        if not batch:
            return list(inventory)

        results = await asyncio.gather(
            *(self._describe(client, inventory[index]) for index in batch),
            return_exceptions=True,
        )

        enriched = list(inventory)
        for index, outcome in zip(batch, results, strict=True):
            name = inventory[index].name
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                if isinstance(outcome, UpstreamUnavailableError):
                    logger.error(f"Failed to enrich {name}: {outcome}")
                else:
                    logger.error(f"Unexpected error enriching {name}: {outcome!r}")
                record_enrichment(False)
                continue

            enriched[index] = inventory[index].model_copy(update={"flavor_notes": outcome})
            record_enrichment(True)

        return enriched
