"""Unit tests for bar repositories."""

from unittest.mock import MagicMock

import pytest

from bartender_service.errors import StoreError
from bartender_service.models.inventory_models import InventoryItem
from bartender_service.models.menu_models import DraftMenu, MenuDocument
from bartender_service.repositories.bar_repositories import (
    INVENTORY_KEY,
    CollectionRepository,
    InventoryRepository,
    MenuRepository,
)
from bartender_service.repositories.kv_store import InMemoryKeyValueStore, KeyValueStore


@pytest.fixture
def failing_store() -> KeyValueStore:
    store = MagicMock(spec=KeyValueStore)
    store.put_json.return_value = False
    return store


@pytest.mark.unit
class TestInventoryRepository:
    """Test suite for InventoryRepository."""

    def test_get_inventory_empty_when_unset(self, kv_store: InMemoryKeyValueStore) -> None:
        assert InventoryRepository(kv_store).get_inventory() == []

    def test_save_and_load_uses_camel_case(
        self, kv_store: InMemoryKeyValueStore, sample_inventory: list[InventoryItem]
    ) -> None:
        repository = InventoryRepository(kv_store)

        repository.save_inventory(sample_inventory)

        stored = kv_store.get_json(INVENTORY_KEY)
        assert stored[0]["amountRemaining"] == "750"
        assert "flavorNotes" not in stored[0]
        assert repository.get_inventory() == sample_inventory

    def test_ignores_non_list_value(self, kv_store: InMemoryKeyValueStore) -> None:
        kv_store.put_json(INVENTORY_KEY, {"oops": True})

        assert InventoryRepository(kv_store).get_inventory() == []

    def test_save_raises_when_store_rejects(self, failing_store: KeyValueStore) -> None:
        with pytest.raises(StoreError):
            InventoryRepository(failing_store).save_inventory([InventoryItem(name="Rum")])


@pytest.mark.unit
class TestCollectionRepository:
    """Test suite for CollectionRepository."""

    def test_round_trips_verbatim(self, kv_store: InMemoryKeyValueStore) -> None:
        repository = CollectionRepository(kv_store)
        shopping = [{"item": "Limes", "qty": 6, "done": False}]

        repository.save_collection("shopping", shopping)

        assert repository.get_collection("shopping") == shopping
        assert repository.get_collection("recipes") == []

    def test_chat_history_key(self, kv_store: InMemoryKeyValueStore) -> None:
        CollectionRepository(kv_store).save_collection("chatHistory", [{"role": "user", "content": "hi"}])

        assert kv_store.get_json("chatHistory") == [{"role": "user", "content": "hi"}]

    def test_unknown_collection_raises_key_error(self, kv_store: InMemoryKeyValueStore) -> None:
        with pytest.raises(KeyError):
            CollectionRepository(kv_store).get_collection("bottles")

    def test_find_favorite_compares_ids_as_strings(self, kv_store: InMemoryKeyValueStore) -> None:
        kv_store.put_json("favorites", [{"id": 17, "name": "Sazerac"}, {"id": "18", "name": "Manhattan"}])
        repository = CollectionRepository(kv_store)

        recipe = repository.find_favorite("17")

        assert recipe is not None
        assert recipe.name == "Sazerac"
        assert repository.find_favorite("99") is None

    def test_find_favorite_returns_none_for_malformed_entry(self, kv_store: InMemoryKeyValueStore) -> None:
        kv_store.put_json("favorites", [{"id": 5}])

        assert CollectionRepository(kv_store).find_favorite("5") is None

    def test_save_raises_when_store_rejects(self, failing_store: KeyValueStore) -> None:
        with pytest.raises(StoreError):
            CollectionRepository(failing_store).save_collection("recipes", [])


@pytest.mark.unit
class TestMenuRepository:
    """Test suite for MenuRepository."""

    def test_missing_document_is_fresh(self, kv_store: InMemoryKeyValueStore) -> None:
        document = MenuRepository(kv_store).get_document("menu-primary")

        assert document == MenuDocument()

    def test_documents_are_per_tenant(self, kv_store: InMemoryKeyValueStore) -> None:
        repository = MenuRepository(kv_store)

        repository.save_document("bar-a", MenuDocument(draft=DraftMenu(items=[])))

        assert kv_store.keys() == ["menu:bar-a"]
        assert repository.get_document("bar-a").has_draft
        assert not repository.get_document("bar-b").has_draft

    def test_save_raises_when_store_rejects(self, failing_store: KeyValueStore) -> None:
        with pytest.raises(StoreError):
            MenuRepository(failing_store).save_document("menu-primary", MenuDocument())
