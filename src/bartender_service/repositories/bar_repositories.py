"""Typed repositories over the key-value store.

Each repository owns one or more keys and converts between stored JSON and
models. Writes raise StoreError when the store reports a failed put, so a
service never reports success for state that was not persisted.
"""

import logging
from typing import Any

from pydantic import ValidationError

from bartender_service.errors import StoreError
from bartender_service.models.inventory_models import InventoryItem, Recipe
from bartender_service.models.menu_models import MenuDocument
from bartender_service.repositories.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

INVENTORY_KEY = "inventory"
FAVORITES_KEY = "favorites"

# UI-owned lists stored verbatim: response field name -> store key
COLLECTION_KEYS: dict[str, str] = {
    "recipes": "recipes",
    "shopping": "shopping",
    "favorites": FAVORITES_KEY,
    "chatHistory": "chatHistory",
}


class InventoryRepository:
    """Repository for the bar inventory list."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def get_inventory(self) -> list[InventoryItem]:
        """Load the inventory.

        Returns:
            list: Inventory items in stored order (empty list if none saved)
        """
        data = self.store.get_json(INVENTORY_KEY, default=[])
        if not isinstance(data, list):
            logger.warning(f"Stored inventory is a {type(data).__name__}, not a list; ignoring")
            return []
        return [InventoryItem.model_validate(item) for item in data if isinstance(item, dict)]

    def save_inventory(self, inventory: list[InventoryItem]) -> None:
        """Replace the stored inventory.

        Raises:
            StoreError: If the store rejected the write
        """
        payload = [item.model_dump(by_alias=True, exclude_none=True) for item in inventory]
        if not self.store.put_json(INVENTORY_KEY, payload):
            raise StoreError("Failed to save inventory")
        logger.info(f"Saved inventory with {len(payload)} items")


class CollectionRepository:
    """Repository for UI-owned JSON lists (recipes, shopping, favorites, chat history)."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def get_collection(self, name: str) -> list[Any]:
        """Load a collection by its API name.

        Raises:
            KeyError: If ``name`` is not a known collection
        """
        data = self.store.get_json(COLLECTION_KEYS[name], default=[])
        return data if isinstance(data, list) else []

    def save_collection(self, name: str, values: list[Any]) -> None:
        """Replace a collection.

        Raises:
            KeyError: If ``name`` is not a known collection
            StoreError: If the store rejected the write
        """
        if not self.store.put_json(COLLECTION_KEYS[name], values):
            raise StoreError(f"Failed to save {name}")

    def find_favorite(self, favorite_id: str) -> Recipe | None:
        """Find a saved favorite recipe by id (compared as strings).

        Returns:
            Recipe if found and well-formed, None otherwise
        """
        for entry in self.get_collection("favorites"):
            if not isinstance(entry, dict) or str(entry.get("id")) != str(favorite_id):
                continue
            try:
                return Recipe.model_validate(entry)
            except ValidationError as e:
                logger.warning(f"Favorite {favorite_id} is malformed: {e}")
                return None
        return None


class MenuRepository:
    """Repository for per-tenant menu documents."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    @staticmethod
    def key_for(tenant_id: str) -> str:
        return f"menu:{tenant_id}"

    def get_document(self, tenant_id: str) -> MenuDocument:
        """Load a tenant's menu document, or a fresh one if none exists."""
        data = self.store.get_json(self.key_for(tenant_id))
        if data is None:
            return MenuDocument()
        return MenuDocument.model_validate(data)

    def save_document(self, tenant_id: str, document: MenuDocument) -> None:
        """Write a tenant's menu document in a single put.

        Raises:
            StoreError: If the store rejected the write
        """
        payload = document.model_dump(mode="json", by_alias=True)
        if not self.store.put_json(self.key_for(tenant_id), payload):
            raise StoreError(f"Failed to save menu for tenant {tenant_id}")
