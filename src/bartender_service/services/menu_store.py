"""Menu version store: live menu, draft and snapshot history for one tenant."""

import logging
import re
from collections import Counter
from collections.abc import Callable
from datetime import UTC, datetime

from pydantic import ValidationError

from bartender_service.errors import (
    ItemVersionConflictError,
    MenuValidationError,
    NotFoundError,
    VersionConflictError,
)
from bartender_service.models.inventory_models import InventoryItem, Recipe
from bartender_service.models.menu_models import (
    MAX_DESCRIPTION_LENGTH,
    MAX_NAME_LENGTH,
    MAX_TAGS_PER_ITEM,
    AddToMenuResult,
    AdminMenuView,
    DraftMenu,
    LiveMenu,
    MenuDocument,
    MenuItem,
    MenuItemChanges,
    MenuItemStatus,
    NoDraft,
    PrimarySpirit,
    RollbackResult,
    Snapshot,
    normalize_tags,
)
from bartender_service.observability import traced
from bartender_service.observability.metrics import record_menu_change
from bartender_service.repositories.bar_repositories import MenuRepository
from bartender_service.services.menu_rules import recipe_is_available, sort_menu_items

logger = logging.getLogger(__name__)

DESCRIPTION_FALLBACK_LENGTH = 100
MAX_ITEMS_PER_MENU = 200
ALREADY_ON_MENU = "Recipe already on menu"


def _split_tags(tags: str | list[str] | None) -> list[str]:
    if not tags:
        return []
    if isinstance(tags, str):
        return [tag for tag in re.split(r"[\s,]+", tags) if tag]
    return [tag for tag in tags if tag]


def validate_menu(items: list[MenuItem]) -> None:
    """Check the rules that span a whole menu.

    Raises:
        MenuValidationError: If the menu is too large or two items share an id
    """
    if len(items) > MAX_ITEMS_PER_MENU:
        raise MenuValidationError(
            f"A menu can hold at most {MAX_ITEMS_PER_MENU} items, got {len(items)}"
        )

    duplicates = sorted(item_id for item_id, count in Counter(i.id for i in items).items() if count > 1)
    if duplicates:
        raise MenuValidationError(f"Duplicate menu item ids: {', '.join(duplicates)}")


def menu_item_from_recipe(recipe: Recipe, inventory: list[InventoryItem]) -> MenuItem:
    """Build a new menu item for a recipe, with status from ingredient availability."""
    description = recipe.menu_description or (recipe.instructions or "")[:DESCRIPTION_FALLBACK_LENGTH]
    status = (
        MenuItemStatus.ACTIVE
        if recipe_is_available(recipe, inventory)
        else MenuItemStatus.TEMPORARILY_UNAVAILABLE
    )
    try:
        return MenuItem(
            id=MenuItem.id_for(recipe.id),
            favorite_id=recipe.id,
            name=recipe.name.strip()[:MAX_NAME_LENGTH],
            description=description.strip()[:MAX_DESCRIPTION_LENGTH],
            primary_spirit=PrimarySpirit.coerce(recipe.primary_spirit).value,
            tags=normalize_tags(_split_tags(recipe.tags))[:MAX_TAGS_PER_ITEM],
            status=status,
            version=1,
        )
    except ValidationError as e:
        raise MenuValidationError(f"Recipe '{recipe.id}' cannot be put on the menu: {e}") from e


class MenuVersionStore:
    """Owns the live/draft/snapshot lifecycle of a tenant's menu.

    Every operation reads the tenant's menu document once and, when it
    changes anything, writes it back once. There is no in-process state
    between calls.
    """

    def __init__(self, menu_repository: MenuRepository, tenant_id: str = "menu-primary") -> None:
        """Initialize the store.

        Args:
            menu_repository: Repository holding menu documents
            tenant_id: Menu tenant this store operates on
        """
        self.menu_repository = menu_repository
        self.tenant_id = tenant_id

    def _load(self) -> MenuDocument:
        return self.menu_repository.get_document(self.tenant_id)

    def _save(self, document: MenuDocument) -> None:
        self.menu_repository.save_document(self.tenant_id, document)

    async def get_live(self) -> LiveMenu:
        """Return the published menu."""
        return self._load().live

    async def get_admin(self) -> AdminMenuView:
        """Return the draft if one exists, otherwise the live menu."""
        document = self._load()
        if isinstance(document.draft, DraftMenu):
            return AdminMenuView(
                source="draft", items=document.draft.items, version=document.live.version
            )
        return AdminMenuView(source="live", items=document.live.items, version=document.live.version)

    @traced("menu.save_draft")
    async def save_draft(self, items: list[MenuItem]) -> DraftMenu:
        """Replace (or create) the draft. An empty list is a valid draft.

        Raises:
            MenuValidationError: If item ids repeat or the menu is too large
        """
        validate_menu(items)
        document = self._load()
        draft = DraftMenu(items=sort_menu_items(items), updated_at=datetime.now(UTC))
        document.draft = draft
        self._save(document)

        record_menu_change("save_draft")
        logger.info(f"Saved draft with {len(draft.items)} items for {self.tenant_id}")
        return draft

    @traced("menu.discard_draft")
    async def discard_draft(self) -> bool:
        """Drop the draft, leaving the live menu untouched.

        Returns:
            True if a draft was discarded, False if there was none
        """
        document = self._load()
        if not document.has_draft:
            return False

        document.draft = NoDraft()
        self._save(document)

        record_menu_change("discard_draft")
        logger.info(f"Discarded draft for {self.tenant_id}")
        return True

    @traced("menu.publish")
    async def publish(self, items: list[MenuItem], expected_live_version: int) -> int:
        """Make ``items`` the live menu.

        Args:
            items: Items to publish
            expected_live_version: Live version the editor started from

        Returns:
            The new live version

        Raises:
            MenuValidationError: If item ids repeat or the menu is too large
            VersionConflictError: If the live menu moved on since the editor loaded it
        """
        validate_menu(items)
        document = self._load()
        if document.live.version != expected_live_version:
            logger.warning(
                f"Rejected publish for {self.tenant_id}: expected v{expected_live_version}, "
                f"live is v{document.live.version}"
            )
            raise VersionConflictError(expected_live_version, document.live.version)

        new_version = self._append_live(document, sort_menu_items(items))
        self._save(document)

        record_menu_change("publish")
        logger.info(f"Published menu v{new_version} with {len(items)} items for {self.tenant_id}")
        return new_version

    @traced("menu.rollback")
    async def rollback(self, target_version: int) -> RollbackResult:
        """Restore a snapshot's items as a new live version.

        History is never rewound: the restore is appended as a fresh snapshot
        with a new version number.

        Raises:
            NotFoundError: If no snapshot has ``target_version``
        """
        document = self._load()
        snapshot = document.find_snapshot(target_version)
        if snapshot is None:
            raise NotFoundError(f"Snapshot version {target_version} not found")

        restored = [item.model_copy(deep=True) for item in snapshot.items]
        new_version = self._append_live(document, restored)
        self._save(document)

        record_menu_change("rollback")
        logger.info(f"Rolled back {self.tenant_id} to v{target_version} as v{new_version}")
        return RollbackResult(restored_from=target_version, version=new_version)

    async def list_snapshots(self, limit: int | None = None) -> list[Snapshot]:
        """Return snapshots, most recent first."""
        snapshots = list(reversed(self._load().snapshots))
        return snapshots[:limit] if limit is not None else snapshots

    @traced("menu.add_recipe")
    async def add_recipe(self, recipe: Recipe, inventory: list[InventoryItem]) -> AddToMenuResult:
        """Add a recipe to the working menu.

        The working menu is the draft if one exists; otherwise the live items
        are copied into a new draft. Adding a recipe that is already on the
        working menu changes nothing.
        """
        document = self._load()
        working = self._working_items(document)

        item_id = MenuItem.id_for(recipe.id)
        if any(item.id == item_id for item in working):
            return AddToMenuResult(added=False, message=ALREADY_ON_MENU)
        if len(working) >= MAX_ITEMS_PER_MENU:
            raise MenuValidationError(f"Menu already has the maximum of {MAX_ITEMS_PER_MENU} items")

        new_item = menu_item_from_recipe(recipe, inventory)
        document.draft = DraftMenu(
            items=sort_menu_items([*working, new_item]), updated_at=datetime.now(UTC)
        )
        self._save(document)

        record_menu_change("add_recipe")
        logger.info(f"Added {new_item.id} ({new_item.status.value}) to draft for {self.tenant_id}")
        return AddToMenuResult(added=True, message=f'Added "{recipe.name}" to draft', item=new_item)

    @traced("menu.update_item")
    async def update_item(
        self,
        item_id: str,
        expected_version: int,
        changes: MenuItemChanges,
        find_recipe: Callable[[str], Recipe | None] | None = None,
        inventory: list[InventoryItem] | None = None,
    ) -> MenuItem:
        """Edit one item on the working menu.

        Only fields set on ``changes`` are applied. If the item would end up
        active while its recipe's ingredients are out of stock, it is marked
        temporarily unavailable instead.

        Args:
            item_id: Menu item to edit
            expected_version: Item version the editor started from
            changes: Fields to overwrite
            find_recipe: Looks up a favorite by id, for the availability check
            inventory: Current bar inventory

        Returns:
            The updated item, with its version incremented

        Raises:
            NotFoundError: If the working menu has no item ``item_id``
            ItemVersionConflictError: If the item changed since the editor loaded it
            MenuValidationError: If the edited item breaks a field rule
        """
        document = self._load()
        working = self._working_items(document)
        index, current = self._find_item(working, item_id, expected_version)

        fields = current.model_dump()
        fields.update(changes.model_dump(exclude_unset=True, exclude_none=True))
        fields["version"] = current.version + 1
        try:
            updated = MenuItem.model_validate(fields)
        except ValidationError as e:
            raise MenuValidationError(f"Invalid changes for menu item '{item_id}': {e}") from e

        if updated.status == MenuItemStatus.ACTIVE and find_recipe is not None:
            recipe = find_recipe(updated.favorite_id)
            if recipe is not None and not recipe_is_available(recipe, inventory or []):
                updated.status = MenuItemStatus.TEMPORARILY_UNAVAILABLE

        working[index] = updated
        document.draft = DraftMenu(items=sort_menu_items(working), updated_at=datetime.now(UTC))
        self._save(document)

        record_menu_change("update_item")
        logger.info(f"Updated {item_id} to v{updated.version} in draft for {self.tenant_id}")
        return updated

    @traced("menu.retire_item")
    async def retire_item(self, item_id: str, expected_version: int) -> MenuItem:
        """Mark an item on the working menu as retired.

        The item stays on the menu so the change can be published or undone.

        Raises:
            NotFoundError: If the working menu has no item ``item_id``
            ItemVersionConflictError: If the item changed since the editor loaded it
        """
        document = self._load()
        working = self._working_items(document)
        index, current = self._find_item(working, item_id, expected_version)

        retired = current.model_copy(
            update={"status": MenuItemStatus.RETIRED, "version": current.version + 1}
        )
        working[index] = retired
        document.draft = DraftMenu(items=sort_menu_items(working), updated_at=datetime.now(UTC))
        self._save(document)

        record_menu_change("retire_item")
        logger.info(f"Retired {item_id} in draft for {self.tenant_id}")
        return retired

    def _find_item(
        self, items: list[MenuItem], item_id: str, expected_version: int
    ) -> tuple[int, MenuItem]:
        for index, item in enumerate(items):
            if item.id == item_id:
                break
        else:
            raise NotFoundError(f"Menu item '{item_id}' not found")

        if item.version != expected_version:
            logger.warning(
                f"Rejected edit of {item_id} for {self.tenant_id}: expected v{expected_version}, "
                f"item is v{item.version}"
            )
            raise ItemVersionConflictError(item_id, expected_version, item.version)
        return index, item

    @staticmethod
    def _working_items(document: MenuDocument) -> list[MenuItem]:
        """The draft's items, or a copy of the live items when there is no draft."""
        if isinstance(document.draft, DraftMenu):
            return document.draft.items
        return [item.model_copy(deep=True) for item in document.live.items]

    @staticmethod
    def _append_live(document: MenuDocument, items: list[MenuItem]) -> int:
        """Install ``items`` as live at the next version, log a snapshot, clear the draft."""
        new_version = len(document.snapshots) + 1
        now = datetime.now(UTC)

        document.live = LiveMenu(items=items, version=new_version, updated_at=now)
        document.snapshots.append(
            Snapshot(
                version=new_version,
                items=[item.model_copy(deep=True) for item in items],
                updated_at=now,
            )
        )
        document.draft = NoDraft()
        return new_version
