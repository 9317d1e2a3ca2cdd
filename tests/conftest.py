"""Shared pytest fixtures and configuration for all tests."""

import os
from collections.abc import Callable

os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402

from bartender_service.clients.base_client import CompletionRequest, GenerativeAIClient  # noqa: E402
from bartender_service.errors import UpstreamUnavailableError  # noqa: E402
from bartender_service.models.inventory_models import InventoryItem, Recipe  # noqa: E402
from bartender_service.models.menu_models import MenuItem  # noqa: E402
from bartender_service.repositories.kv_store import InMemoryKeyValueStore  # noqa: E402


class ScriptedAIClient(GenerativeAIClient):
    """AI client that returns queued replies and records every request."""

    def __init__(self, replies: list[str | Exception] | None = None, provider_name: str = "fake") -> None:
        super().__init__(provider_name)
        self.replies = list(replies or [])
        self.requests: list[CompletionRequest] = []

    async def complete(self, request: CompletionRequest) -> str:
        self.requests.append(request)
        if not self.replies:
            raise UpstreamUnavailableError(self.provider_name, "no scripted reply")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    """Fixture providing an empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def sample_inventory() -> list[InventoryItem]:
    """Fixture providing a small bar inventory."""
    return [
        InventoryItem(
            name="Bourbon Whiskey",
            type="Whiskey",
            proof=90,
            bottle_size_ml=750,
            amount_remaining="750",
        ),
        InventoryItem(
            name="London Dry Gin",
            type="Gin",
            proof=94,
            bottle_size_ml=750,
            amount_remaining="500",
            flavor_notes="Juniper forward with citrus peel.",
        ),
        InventoryItem(name="Simple Syrup", type="Mixer", amount_remaining="0"),
    ]


@pytest.fixture
def sample_recipe() -> Recipe:
    """Fixture providing a saved favorite recipe."""
    return Recipe.model_validate(
        {
            "id": 1700000000000,
            "name": "Gimlet",
            "ingredients": [{"value": "Gin", "amount": "2", "unit": "oz"}, {"value": "Lime juice"}],
            "instructions": "Shake with ice and strain into a chilled coupe.",
            "tags": "classic, sour",
            "primarySpirit": "Gin",
        }
    )


def make_menu_item(favorite_id: str, name: str, primary_spirit: str = "other", **extra: object) -> MenuItem:
    """Build a menu item for tests."""
    return MenuItem(
        id=MenuItem.id_for(favorite_id),
        favorite_id=favorite_id,
        name=name,
        primary_spirit=primary_spirit,
        **extra,
    )


@pytest.fixture
def sample_menu_items() -> list[MenuItem]:
    """Fixture providing unsorted menu items."""
    return [
        make_menu_item("3", "Mojito", "rum"),
        make_menu_item("1", "Martini", "gin"),
        make_menu_item("2", "Gimlet", "gin"),
    ]


@pytest.fixture
def menu_item_factory() -> Callable[..., MenuItem]:
    """Fixture exposing the menu item builder."""
    return make_menu_item


@pytest.fixture
def ai_client_factory() -> type[ScriptedAIClient]:
    """Fixture exposing the scripted AI client class."""
    return ScriptedAIClient
