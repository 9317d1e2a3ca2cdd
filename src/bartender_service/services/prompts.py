"""Prompt text sent to the generative-AI providers."""

from bartender_service.models.inventory_models import InventoryItem
from bartender_service.services.inventory_reconciler import UPDATE_MARKER

EMPTY_INVENTORY = "No items in inventory"

BARTENDER_INSTRUCTIONS = f"""RULES:
1. When asked for a drink by name, give the recipe right away using the bottles above. Do not ask what they mean.
2. If you do not know the drink, suggest 2-3 similar classics that can be made from the inventory.
3. Cross-reference every ingredient against the remaining amounts above. If something is missing or too low, say so and offer a substitute from the inventory or a different drink.
4. Keep answers under 150 words unless you are giving a recipe.
5. For batch or multi-serving requests, scale every ingredient amount proportionally and show the scaled amounts.
6. After every recipe, ask whether they made it so the inventory can be updated.

RESPONSE FORMAT FOR A RECIPE:

Drink: [Name]

Ingredients:
- [amount] [ingredient] (Available: [X ml])

Tools:
- [tools]

Garnish:
- [garnish]

Instructions:
1. [steps]

Did you make this drink? Let me know so I can update your inventory!

INVENTORY UPDATES:
Only when the user confirms they made a drink, end your reply with the marker {UPDATE_MARKER} immediately followed by JSON listing the amounts used in ml, for example:
{UPDATE_MARKER}{{"updates": [{{"name": "Bourbon Whiskey", "subtract": 60}}, {{"name": "Simple Syrup", "subtract": 7.5}}]}}
Use bottle names exactly as listed in the inventory. Never emit the marker for drinks that were only discussed.
"""

FLAVOR_NOTES_SYSTEM_PROMPT = "You are a spirits sommelier who writes short tasting notes."


def format_inventory_item(item: InventoryItem) -> str:
    """Render one bottle as a single prompt line."""
    type_label = f"{item.type}: " if item.type else ""
    name_label = item.name or "Unnamed bottle"
    proof_label = f"{item.proof} proof" if item.proof else "proof unknown"
    size_label = f"{item.bottle_size_ml} ml bottle" if item.bottle_size_ml else "bottle size unknown"
    remaining_label = (
        f"{item.amount_remaining} ml remaining" if item.amount_remaining else "remaining amount unknown"
    )

    line = f"- {type_label}{name_label} | {proof_label} | {size_label} | {remaining_label}"
    if item.flavor_notes:
        line += f" | Notes: {item.flavor_notes}"
    return line


def format_inventory(inventory: list[InventoryItem]) -> str:
    """Render the inventory listing, one bottle per line."""
    if not inventory:
        return EMPTY_INVENTORY
    return "\n".join(format_inventory_item(item) for item in inventory)


def build_system_prompt(inventory: list[InventoryItem]) -> str:
    """System prompt for the bartender chat."""
    return (
        "You are a bartender AI assistant. When asked for a drink, give a recipe that works "
        "with the customer's bar, say exactly how to make it, and state any substitutions.\n\n"
        f"CURRENT BAR INVENTORY:\n{format_inventory(inventory)}\n\n"
        f"{BARTENDER_INSTRUCTIONS}"
    )


def build_flavor_notes_prompt(item: InventoryItem) -> str:
    """Prompt asking for a short tasting note for one bottle."""
    name = item.name or "this spirit"
    spirit_type = item.type or "spirit"
    proof = f"{item.proof} proof" if item.proof else "proof unspecified"
    size = f"{item.bottle_size_ml} ml bottle" if item.bottle_size_ml else "bottle size unspecified"
    return (
        f"Write two concise sentences (max 45 words total) describing the flavor profile for "
        f"{name}, a {spirit_type} ({proof}, {size}). Mention aroma, palate, and finish, and "
        f"optionally suggest a classic cocktail style it shines in. No marketing fluff or bullet points."
    )
