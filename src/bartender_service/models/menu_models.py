"""Menu data models.

A tenant's menu is stored as a single document holding the live menu, the
optional draft and the append-only snapshot log. The draft is a tagged union
on ``source`` so that "no draft" and "an empty draft" are different values.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
MAX_TAGS_PER_ITEM = 10
MAX_TAG_LENGTH = 30
ITEM_ID_PATTERN = r"^[a-z0-9\-]{1,100}$"


class PrimarySpirit(str, Enum):
    """Spirit categories in menu display order."""

    VODKA = "vodka"
    GIN = "gin"
    RUM = "rum"
    TEQUILA = "tequila"
    WHISKEY = "whiskey"
    BRANDY = "brandy"
    LIQUEUR = "liqueur"
    WINE = "wine"
    BEER = "beer"
    MIXER = "mixer"
    OTHER = "other"

    @classmethod
    def coerce(cls, value: str | None) -> "PrimarySpirit":
        """Map free-form input to a known category, falling back to OTHER."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.OTHER


class MenuItemStatus(str, Enum):
    """Availability of a menu item."""

    ACTIVE = "active"
    TEMPORARILY_UNAVAILABLE = "temporarily_unavailable"
    RETIRED = "retired"


class CamelModel(BaseModel):
    """Base model for camelCase JSON documents."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def normalize_tags(tags: list[Any]) -> list[str]:
    """Trim tags, drop blank or overlong ones and remove duplicates, keeping order."""
    seen: set[str] = set()
    result: list[str] = []
    for tag in tags:
        if not isinstance(tag, str):
            continue
        tag = tag.strip()
        if not tag or len(tag) > MAX_TAG_LENGTH or tag in seen:
            continue
        seen.add(tag)
        result.append(tag)
    return result


class MenuItem(CamelModel):
    """A drink on the menu, derived from a saved recipe."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str = Field(..., pattern=ITEM_ID_PATTERN, description="'menu-' + favoriteId, unique within a menu")
    favorite_id: str = Field(..., description="Recipe this item was built from")
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH, description="Display name")
    description: str = Field(
        default="", max_length=MAX_DESCRIPTION_LENGTH, description="Short menu description"
    )
    primary_spirit: str = Field(
        default=PrimarySpirit.OTHER.value, description="Spirit category used for ordering"
    )
    tags: list[str] = Field(default_factory=list, description="Ordered display tags")
    status: MenuItemStatus = Field(default=MenuItemStatus.ACTIVE)
    version: int = Field(default=1, ge=1)

    @field_validator("favorite_id", mode="before")
    @classmethod
    def coerce_favorite_id(cls, v: Any) -> str:
        return str(v)

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("primary_spirit", mode="before")
    @classmethod
    def coerce_primary_spirit(cls, v: Any) -> str:
        """Unknown categories are stored as 'other'."""
        if isinstance(v, PrimarySpirit):
            return v.value
        return PrimarySpirit.coerce(v if isinstance(v, str) else None).value

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v: Any) -> Any:
        if not isinstance(v, list):
            return v
        tags = normalize_tags(v)
        if len(tags) > MAX_TAGS_PER_ITEM:
            raise ValueError(f"at most {MAX_TAGS_PER_ITEM} tags are allowed")
        return tags

    @staticmethod
    def id_for(favorite_id: str) -> str:
        """Derive the menu item id for a recipe, in lowercase kebab-case."""
        slug = re.sub(r"[^a-z0-9\-]+", "-", str(favorite_id).strip().lower()).strip("-")
        return f"menu-{slug}"


class MenuItemChanges(CamelModel):
    """Fields an editor may change on a single menu item. Unset fields are kept."""

    name: str | None = None
    description: str | None = None
    primary_spirit: str | None = None
    status: MenuItemStatus | None = None
    tags: list[str] | None = None


class Snapshot(CamelModel):
    """Immutable record of a published menu."""

    version: int = Field(..., ge=1)
    items: list[MenuItem] = Field(default_factory=list)
    updated_at: datetime


class LiveMenu(CamelModel):
    """The published menu."""

    source: Literal["live"] = "live"
    items: list[MenuItem] = Field(default_factory=list)
    version: int = Field(default=0, ge=0, description="0 until the first publish")
    updated_at: datetime | None = None


class NoDraft(CamelModel):
    """Marker for a tenant that is editing the live menu directly."""

    source: Literal["live"] = "live"


class DraftMenu(CamelModel):
    """Unpublished working copy of the menu. ``items`` may be empty."""

    source: Literal["draft"] = "draft"
    items: list[MenuItem] = Field(default_factory=list)
    updated_at: datetime | None = None


DraftState = Annotated[NoDraft | DraftMenu, Field(discriminator="source")]

MenuState = Annotated[LiveMenu | DraftMenu, Field(discriminator="source")]


class MenuDocument(CamelModel):
    """Everything persisted for one menu tenant.

    ``snapshots`` is an append-only log: the snapshot at index ``i`` always
    has version ``i + 1`` and the live version equals the log length.
    """

    live: LiveMenu = Field(default_factory=LiveMenu)
    draft: DraftState = Field(default_factory=NoDraft)
    snapshots: list[Snapshot] = Field(default_factory=list)

    @property
    def has_draft(self) -> bool:
        return isinstance(self.draft, DraftMenu)

    def find_snapshot(self, version: int) -> Snapshot | None:
        """Look up a snapshot by version."""
        if 1 <= version <= len(self.snapshots):
            return self.snapshots[version - 1]
        return None


class AdminMenuView(CamelModel):
    """What the menu editor sees: the draft when there is one, else live."""

    source: Literal["draft", "live"]
    items: list[MenuItem]
    version: int


class AddToMenuResult(CamelModel):
    """Outcome of adding a recipe to the working menu."""

    added: bool
    message: str
    item: MenuItem | None = None


class RollbackResult(CamelModel):
    """Outcome of restoring a snapshot."""

    restored_from: int
    version: int
