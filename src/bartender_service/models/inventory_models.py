"""Inventory, recipe and chat data models.

The UI stores these as camelCase JSON in the key-value store, so every model
uses camelCase aliases and keeps unknown fields so round-trips never drop
data the service does not understand.
"""

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))")


def parse_amount(value: str | float | None) -> float:
    """Parse the leading number of an amount ("750", "12.5 ml"); 0 when absent."""
    if value is None:
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    match = _LEADING_NUMBER.match(value)
    return float(match.group(1)) if match else 0.0


def format_amount(value: float) -> str:
    """Render a quantity the way the UI stores it ("690", "12.5")."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


class InventoryItem(BaseModel):
    """A bottle (or garnish, tool, mixer) in the home bar."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    name: str = Field(default="", description="Bottle name, e.g. 'Bourbon Whiskey'")
    type: str | None = Field(None, description="Category, e.g. 'Whiskey' or 'Garnish'")
    proof: int | float | str | None = Field(None, description="Proof as entered by the user")
    bottle_size_ml: int | float | str | None = Field(None, description="Bottle size in ml")
    amount_remaining: str | None = Field(None, description="Remaining amount in ml, numeric string")
    flavor_notes: str | None = Field(None, description="Short tasting notes")

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, v: Any) -> str:
        """Treat a missing name as blank."""
        return "" if v is None else str(v)

    @field_validator("amount_remaining", mode="before")
    @classmethod
    def coerce_amount_remaining(cls, v: Any) -> str | None:
        """Store numeric amounts as strings."""
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, bool):
            raise ValueError("amountRemaining must be a number or numeric string")
        if isinstance(v, int | float):
            return format_amount(v)
        raise ValueError("amountRemaining must be a number or numeric string")


class RecipeIngredient(BaseModel):
    """One ingredient line of a saved recipe."""

    model_config = ConfigDict(extra="allow")

    value: str = ""
    amount: str | int | float | None = None
    unit: str | None = None

    @field_validator("value", mode="before")
    @classmethod
    def coerce_value(cls, v: Any) -> str:
        return "" if v is None else str(v)


class Recipe(BaseModel):
    """A saved favorite/custom recipe that can be put on the menu."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str
    name: str
    ingredients: list[RecipeIngredient] = Field(default_factory=list)
    instructions: str | None = None
    glass: str | None = None
    garnish: str | None = None
    tags: str | list[str] | None = None
    primary_spirit: str | None = None
    menu_description: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        """Recipe ids are timestamps in older data; compare them as strings."""
        return str(v)


class ChatMessage(BaseModel):
    """A single chat turn exchanged with the UI."""

    model_config = ConfigDict(extra="ignore")

    role: str
    content: str

    @property
    def is_user(self) -> bool:
        return self.role == "user"
