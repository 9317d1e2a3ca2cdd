"""Ordering and availability rules shared by the menu workflows."""

from collections.abc import Iterable

from bartender_service.models.inventory_models import InventoryItem, Recipe, parse_amount
from bartender_service.models.menu_models import MenuItem, PrimarySpirit

SPIRITS_ORDER: tuple[PrimarySpirit, ...] = tuple(PrimarySpirit)


def spirit_rank(primary_spirit: str | None) -> int:
    """Position of a spirit in the display order; unknown values rank as 'other'."""
    return SPIRITS_ORDER.index(PrimarySpirit.coerce(primary_spirit))


def sort_menu_items(items: Iterable[MenuItem]) -> list[MenuItem]:
    """Order items by spirit category, then case-insensitive name.

    The sort is stable, so items that compare equal keep their input order.
    """
    return sorted(items, key=lambda item: (spirit_rank(item.primary_spirit), item.name.casefold()))


def names_match(left: str, right: str) -> bool:
    """Case-insensitive substring containment in either direction.

    Blank names never match anything.
    """
    a = left.strip().casefold()
    b = right.strip().casefold()
    if not a or not b:
        return False
    return a in b or b in a


def ingredient_in_stock(ingredient_name: str, inventory: Iterable[InventoryItem]) -> bool:
    """Whether some bottle with a positive remaining amount matches the ingredient."""
    return any(
        parse_amount(item.amount_remaining) > 0 and names_match(item.name, ingredient_name)
        for item in inventory
    )


def recipe_is_available(recipe: Recipe, inventory: list[InventoryItem]) -> bool:
    """Whether every named ingredient of a recipe is in stock.

    Recipes without ingredients cannot be checked and count as available;
    blank ingredient lines are skipped.
    """
    names = [ingredient.value for ingredient in recipe.ingredients if ingredient.value.strip()]
    return all(ingredient_in_stock(name, inventory) for name in names)
