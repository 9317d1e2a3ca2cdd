"""FastAPI application for the bartender HTTP API."""

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

from fastapi import Body, Depends, FastAPI, Header, Query, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from bartender_service.auth.api_dependencies import PIN_HEADER, get_pin_from_header
from bartender_service.auth.pin_validator import PinValidator
from bartender_service.errors import (
    ForbiddenError,
    ItemVersionConflictError,
    MenuValidationError,
    NotFoundError,
    StoreError,
    UpstreamUnavailableError,
    VersionConflictError,
)
from bartender_service.models.inventory_models import ChatMessage, InventoryItem
from bartender_service.models.menu_models import (
    AddToMenuResult,
    MenuItem,
    MenuItemChanges,
    MenuItemStatus,
)
from bartender_service.repositories.bar_repositories import (
    COLLECTION_KEYS,
    CollectionRepository,
    InventoryRepository,
)
from bartender_service.services.chat_orchestrator import ChatOrchestrator
from bartender_service.services.enrichment_service import EnrichmentService
from bartender_service.services.menu_store import MenuVersionStore

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PATCH, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": f"Content-Type, {PIN_HEADER}",
}

UPSTREAM_ERROR_MESSAGE = "AI service unavailable. Please try again."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again."

MAX_BODY_SIZE = 100 * 1024

# API collection name -> URL path
COLLECTION_PATHS = {
    "recipes": "/recipes",
    "shopping": "/shopping",
    "favorites": "/favorites",
    "chatHistory": "/chat-history",
}


class ApiModel(BaseModel):
    """Request/response model with camelCase JSON names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class SuccessResponse(BaseModel):
    """Acknowledgement for writes."""

    success: bool = True


class InventoryPayload(ApiModel):
    """Inventory list in request and response bodies."""

    inventory: list[InventoryItem]


class ChatRequest(ApiModel):
    """A chat turn from the UI."""

    message: str = Field(..., min_length=1)
    inventory: list[InventoryItem] = Field(default_factory=list)
    chat_history: list[ChatMessage] = Field(default_factory=list)


class ChatResponse(ApiModel):
    """Reply to a chat turn."""

    response: str
    updated_inventory: list[InventoryItem] | None = None


class LiveMenuResponse(ApiModel):
    """Public view of the published menu."""

    items: list[MenuItem]
    version: int
    updated_at: datetime | None = None


class AdminMenuResponse(ApiModel):
    """Editor view: draft if present, else live."""

    source: str
    items: list[MenuItem]
    version: int


class DraftRequest(ApiModel):
    items: list[MenuItem]


class DraftSavedResponse(ApiModel):
    success: bool = True
    item_count: int


class DraftDiscardedResponse(ApiModel):
    success: bool = True
    discarded: bool


class AddRecipeRequest(ApiModel):
    favorite_id: str

    @field_validator("favorite_id", mode="before")
    @classmethod
    def coerce_favorite_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) and not isinstance(v, bool) else v


class PublishRequest(ApiModel):
    items: list[MenuItem]
    version: int = Field(..., ge=0, description="Live version the draft was based on")


class ItemUpdateRequest(MenuItemChanges):
    version: int = Field(..., ge=1, description="Item version the edit is based on")


class ItemRetireRequest(ApiModel):
    version: int = Field(..., ge=1, description="Item version the edit is based on")


class ItemResponse(ApiModel):
    success: bool = True
    item: MenuItem


class PublishResponse(ApiModel):
    success: bool = True
    version: int


class RollbackResponse(ApiModel):
    success: bool = True
    version: int
    restored_from: int


class SnapshotSummary(ApiModel):
    version: int
    updated_at: datetime
    item_count: int


class SnapshotListResponse(ApiModel):
    snapshots: list[SnapshotSummary]


def _error(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ForbiddenError)
    async def forbidden_handler(_request: Request, exc: ForbiddenError) -> JSONResponse:
        logger.warning(f"Rejected write: {exc}")
        return _error(403, str(exc))

    @app.exception_handler(NotFoundError)
    async def not_found_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
        return _error(404, str(exc))

    @app.exception_handler(VersionConflictError)
    async def conflict_handler(_request: Request, exc: VersionConflictError) -> JSONResponse:
        return _error(409, str(exc), currentVersion=exc.current_version)

    @app.exception_handler(ItemVersionConflictError)
    async def item_conflict_handler(
        _request: Request, exc: ItemVersionConflictError
    ) -> JSONResponse:
        return _error(409, str(exc), currentVersion=exc.current_version)

    @app.exception_handler(MenuValidationError)
    async def menu_validation_handler(_request: Request, exc: MenuValidationError) -> JSONResponse:
        logger.warning(f"Rejected menu change: {exc}")
        return _error(422, str(exc))

    @app.exception_handler(UpstreamUnavailableError)
    async def upstream_handler(_request: Request, exc: UpstreamUnavailableError) -> JSONResponse:
        logger.error(
            f"AI provider failure ({exc.provider}, status {exc.status_code}): {exc.body or exc}"
        )
        return _error(500, UPSTREAM_ERROR_MESSAGE)

    @app.exception_handler(StoreError)
    async def store_handler(_request: Request, exc: StoreError) -> JSONResponse:
        logger.error(f"Key-value store failure: {exc}")
        return _error(503, "Storage temporarily unavailable. Please try again.")


def _register_collection_routes(app: FastAPI, name: str, path: str) -> None:
    """GET/POST routes for a UI-owned list stored verbatim."""

    @app.get(path, tags=["Collections"], name=f"get_{name}")
    async def get_collection() -> dict[str, list[Any]]:
        return {name: app.state.collection_repository.get_collection(name)}

    @app.post(path, response_model=SuccessResponse, tags=["Collections"], name=f"save_{name}")
    async def save_collection(payload: dict[str, Any] = Body(...)) -> SuccessResponse:
        values = payload.get(name)
        if not isinstance(values, list):
            return _error(422, f"'{name}' must be a list")  # type: ignore[return-value]
        app.state.collection_repository.save_collection(name, values)
        return SuccessResponse()


def create_app(
    menu_store: MenuVersionStore,
    chat_orchestrator: ChatOrchestrator,
    enrichment_service: EnrichmentService,
    inventory_repository: InventoryRepository,
    collection_repository: CollectionRepository,
    pin: str,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        menu_store: Menu draft/publish/rollback store
        chat_orchestrator: Chat request handler
        enrichment_service: Flavor-note enrichment
        inventory_repository: Inventory persistence
        collection_repository: Persistence for recipes, shopping, favorites, chat history
        pin: Shared secret required to overwrite the inventory

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Bartender Service API",
        description="AI bartender chat, bar inventory and menu publishing",
        version="1.0.0",
    )

    app.state.menu_store = menu_store
    app.state.chat_orchestrator = chat_orchestrator
    app.state.enrichment_service = enrichment_service
    app.state.inventory_repository = inventory_repository
    app.state.collection_repository = collection_repository
    app.state.pin_validator = PinValidator(pin=pin)

    _register_exception_handlers(app)

    @app.middleware("http")
    async def cors_and_errors(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Handle preflights and oversized bodies; add CORS headers and catch stray exceptions."""
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=CORS_HEADERS)

        content_length = request.headers.get("content-length", "")
        if content_length.isdigit() and int(content_length) > MAX_BODY_SIZE:
            logger.warning(f"Rejected {content_length}-byte body on {request.url.path}")
            response: Response = _error(413, "Request body exceeds 100 KB limit")
        else:
            try:
                response = await call_next(request)
            except Exception:
                logger.exception(f"Unhandled error on {request.method} {request.url.path}")
                response = _error(500, UNEXPECTED_ERROR_MESSAGE)

        response.headers.update(CORS_HEADERS)
        return response

    def require_pin(x_bartender_pin: str | None = Header(None)) -> str:
        """Dependency to validate the inventory PIN."""
        return get_pin_from_header(
            x_bartender_pin=x_bartender_pin, validator=app.state.pin_validator
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy")

    # Inventory

    @app.get("/inventory", response_model=InventoryPayload, tags=["Inventory"])
    async def get_inventory() -> InventoryPayload:
        return InventoryPayload(inventory=app.state.inventory_repository.get_inventory())

    @app.post("/inventory", response_model=SuccessResponse, tags=["Inventory"])
    async def save_inventory(
        payload: InventoryPayload,
        _pin: str = Depends(require_pin),
    ) -> SuccessResponse:
        """Replace the stored inventory. Requires the X-Bartender-Pin header."""
        app.state.inventory_repository.save_inventory(payload.inventory)
        return SuccessResponse()

    @app.post("/enrich-inventory", response_model=InventoryPayload, tags=["Inventory"])
    async def enrich_inventory(
        payload: dict[str, Any] = Body(...),
        provider: str = Query("auto"),
    ) -> InventoryPayload:
        """Fill missing flavor notes for a small batch of items.

        Nothing is persisted; the UI saves the returned inventory itself.
        """
        raw = payload.get("inventory")
        if not isinstance(raw, list):
            return InventoryPayload(inventory=[])

        try:
            inventory = [InventoryItem.model_validate(item) for item in raw]
        except ValidationError as e:
            return _error(422, f"Invalid inventory: {e.error_count()} error(s)")  # type: ignore[return-value]

        enriched = await app.state.enrichment_service.enrich(inventory, provider=provider)
        return InventoryPayload(inventory=enriched)

    # Chat

    @app.post("/chat", response_model=ChatResponse, tags=["Chat"])
    async def chat(payload: ChatRequest) -> ChatResponse:
        """Answer a chat message, applying any confirmed consumption to the inventory."""
        result = await app.state.chat_orchestrator.handle_message(
            message=payload.message,
            inventory=payload.inventory,
            chat_history=payload.chat_history,
        )
        return ChatResponse(response=result.response_text, updated_inventory=result.updated_inventory)

    # Menu

    @app.get("/menu", response_model=LiveMenuResponse, tags=["Menu"])
    async def get_live_menu(active_only: bool = Query(False, alias="activeOnly")) -> LiveMenuResponse:
        """Published menu. ``activeOnly`` hides unavailable and retired items."""
        live = await app.state.menu_store.get_live()
        items = live.items
        if active_only:
            items = [item for item in items if item.status == MenuItemStatus.ACTIVE]
        return LiveMenuResponse(items=items, version=live.version, updated_at=live.updated_at)

    @app.get("/menu/admin", response_model=AdminMenuResponse, tags=["Menu"])
    async def get_admin_menu() -> AdminMenuResponse:
        view = await app.state.menu_store.get_admin()
        return AdminMenuResponse(source=view.source, items=view.items, version=view.version)

    @app.post("/menu/draft", response_model=DraftSavedResponse, tags=["Menu"])
    async def save_draft(payload: DraftRequest) -> DraftSavedResponse:
        draft = await app.state.menu_store.save_draft(payload.items)
        return DraftSavedResponse(item_count=len(draft.items))

    @app.delete("/menu/draft", response_model=DraftDiscardedResponse, tags=["Menu"])
    async def discard_draft() -> DraftDiscardedResponse:
        discarded = await app.state.menu_store.discard_draft()
        return DraftDiscardedResponse(discarded=discarded)

    @app.post("/menu/draft/items", response_model=AddToMenuResult, tags=["Menu"])
    async def add_recipe_to_menu(payload: AddRecipeRequest) -> AddToMenuResult:
        """Add a saved favorite recipe to the draft menu."""
        recipe = app.state.collection_repository.find_favorite(payload.favorite_id)
        if recipe is None:
            raise NotFoundError(f"Favorite '{payload.favorite_id}' not found")

        inventory = app.state.inventory_repository.get_inventory()
        result: AddToMenuResult = await app.state.menu_store.add_recipe(recipe, inventory)
        return result

    @app.patch("/menu/draft/items/{item_id}", response_model=ItemResponse, tags=["Menu"])
    async def update_menu_item(item_id: str, payload: ItemUpdateRequest) -> ItemResponse:
        """Edit one draft item; 409 if the item version moved on."""
        changes = MenuItemChanges.model_validate(
            payload.model_dump(exclude={"version"}, exclude_unset=True)
        )
        item = await app.state.menu_store.update_item(
            item_id,
            payload.version,
            changes,
            find_recipe=app.state.collection_repository.find_favorite,
            inventory=app.state.inventory_repository.get_inventory(),
        )
        return ItemResponse(item=item)

    @app.delete("/menu/draft/items/{item_id}", response_model=ItemResponse, tags=["Menu"])
    async def retire_menu_item(item_id: str, payload: ItemRetireRequest) -> ItemResponse:
        """Retire one draft item; 409 if the item version moved on."""
        item = await app.state.menu_store.retire_item(item_id, payload.version)
        return ItemResponse(item=item)

    @app.post("/menu/publish", response_model=PublishResponse, tags=["Menu"])
    async def publish_menu(payload: PublishRequest) -> PublishResponse:
        """Publish items as the live menu; 409 if the live version moved on."""
        version = await app.state.menu_store.publish(payload.items, payload.version)
        return PublishResponse(version=version)

    @app.post("/menu/rollback/{version}", response_model=RollbackResponse, tags=["Menu"])
    async def rollback_menu(version: int) -> RollbackResponse:
        result = await app.state.menu_store.rollback(version)
        return RollbackResponse(version=result.version, restored_from=result.restored_from)

    @app.get("/menu/snapshots", response_model=SnapshotListResponse, tags=["Menu"])
    async def list_snapshots(limit: int | None = Query(None, ge=1)) -> SnapshotListResponse:
        snapshots = await app.state.menu_store.list_snapshots(limit=limit)
        return SnapshotListResponse(
            snapshots=[
                SnapshotSummary(
                    version=s.version, updated_at=s.updated_at, item_count=len(s.items)
                )
                for s in snapshots
            ]
        )

    for name in COLLECTION_KEYS:
        _register_collection_routes(app, name, COLLECTION_PATHS[name])

    return app
