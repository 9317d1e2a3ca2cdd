"""Unit tests for menu ordering and availability rules."""

from collections.abc import Callable

import pytest

from bartender_service.models.inventory_models import InventoryItem, Recipe
from bartender_service.models.menu_models import MenuItem
from bartender_service.services.menu_rules import (
    ingredient_in_stock,
    names_match,
    recipe_is_available,
    sort_menu_items,
    spirit_rank,
)


@pytest.mark.unit
class TestSortMenuItems:
    """Tests for menu ordering."""

    def test_orders_by_spirit_then_name(self, sample_menu_items: list[MenuItem]) -> None:
        ordered = sort_menu_items(sample_menu_items)

        assert [item.name for item in ordered] == ["Gimlet", "Martini", "Mojito"]

    def test_unknown_spirit_sorts_last(self, menu_item_factory: Callable[..., MenuItem]) -> None:
        items = [
            menu_item_factory("1", "Aperol Spritz", "aperitivo"),
            menu_item_factory("2", "Old Fashioned", "whiskey"),
            menu_item_factory("3", "Cosmopolitan", "vodka"),
        ]

        ordered = sort_menu_items(items)

        assert [item.name for item in ordered] == ["Cosmopolitan", "Old Fashioned", "Aperol Spritz"]
        assert spirit_rank("aperitivo") == spirit_rank("other")

    def test_name_comparison_ignores_case_and_is_stable(
        self, menu_item_factory: Callable[..., MenuItem]
    ) -> None:
        items = [
            menu_item_factory("1", "negroni", "gin"),
            menu_item_factory("2", "Bramble", "gin"),
            menu_item_factory("3", "Negroni", "gin"),
        ]

        ordered = sort_menu_items(items)

        assert [item.favorite_id for item in ordered] == ["2", "1", "3"]

    def test_sort_is_idempotent(self, sample_menu_items: list[MenuItem]) -> None:
        once = sort_menu_items(sample_menu_items)

        assert sort_menu_items(once) == once


@pytest.mark.unit
class TestNamesMatch:
    """Tests for fuzzy name matching."""

    @pytest.mark.parametrize(
        ("left", "right", "expected"),
        [
            ("Bourbon Whiskey", "whiskey", True),
            ("Gin", "London Dry Gin", True),
            ("Rum", "Vodka", False),
            ("", "Gin", False),
            ("Gin", "   ", False),
        ],
    )
    def test_names_match(self, left: str, right: str, expected: bool) -> None:
        assert names_match(left, right) is expected


@pytest.mark.unit
class TestAvailability:
    """Tests for ingredient and recipe availability."""

    def test_empty_bottle_is_not_in_stock(self, sample_inventory: list[InventoryItem]) -> None:
        assert ingredient_in_stock("Gin", sample_inventory)
        assert not ingredient_in_stock("Simple Syrup", sample_inventory)
        assert not ingredient_in_stock("Campari", sample_inventory)

    def test_recipe_with_missing_ingredient_is_unavailable(
        self, sample_recipe: Recipe, sample_inventory: list[InventoryItem]
    ) -> None:
        assert not recipe_is_available(sample_recipe, sample_inventory)

        stocked = [*sample_inventory, InventoryItem(name="Fresh Lime Juice", amount_remaining="200")]
        assert recipe_is_available(sample_recipe, stocked)

    def test_recipe_without_ingredients_is_available(self) -> None:
        recipe = Recipe(id="1", name="Mystery", ingredients=[])

        assert recipe_is_available(recipe, [])

    def test_blank_ingredient_lines_are_skipped(self, sample_inventory: list[InventoryItem]) -> None:
        recipe = Recipe.model_validate(
            {"id": "2", "name": "Gin Neat", "ingredients": [{"value": "Gin"}, {"value": "  "}]}
        )

        assert recipe_is_available(recipe, sample_inventory)
