"""Main application entry point for the bartender service.

This module wires storage, AI providers and services into the FastAPI
application for running locally, in a container or behind Lambda.
"""

import logging
import os
import secrets
from typing import Any

import boto3
from fastapi import FastAPI

from bartender_service.clients.base_client import GenerativeAIClient
from bartender_service.clients.fallback_client import FallbackAIClient
from bartender_service.clients.gemini_client import GeminiClient
from bartender_service.clients.groq_client import GroqClient
from bartender_service.handlers.api_handler import create_app
from bartender_service.observability import configure_logging, setup_observability
from bartender_service.repositories.bar_repositories import (
    CollectionRepository,
    InventoryRepository,
    MenuRepository,
)
from bartender_service.repositories.kv_store import (
    DynamoDBKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
)
from bartender_service.services.chat_orchestrator import DEFAULT_HISTORY_LIMIT, ChatOrchestrator
from bartender_service.services.enrichment_service import DEFAULT_BATCH_SIZE, EnrichmentService
from bartender_service.services.menu_store import MenuVersionStore

logger = logging.getLogger(__name__)


def get_dynamodb_resource() -> Any:
    """Create DynamoDB resource with appropriate configuration.

    Returns:
        Boto3 DynamoDB resource configured for environment
    """
    endpoint_url = os.getenv("DYNAMODB_ENDPOINT")
    region = os.getenv("AWS_REGION", "us-east-1")

    if endpoint_url:
        logger.info(f"Using local DynamoDB at {endpoint_url}")
        return boto3.resource(
            "dynamodb",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        )

    logger.info(f"Using AWS DynamoDB in region {region}")
    return boto3.resource("dynamodb", region_name=region)


def create_key_value_store() -> KeyValueStore:
    """Create the key-value store selected by KV_BACKEND ("dynamodb" or "memory")."""
    backend = os.getenv("KV_BACKEND", "dynamodb").lower()
    if backend == "memory":
        logger.warning("Using in-memory key-value store; data is lost on restart")
        return InMemoryKeyValueStore()
    if backend != "dynamodb":
        raise ValueError(f"Unknown KV_BACKEND '{backend}', expected 'dynamodb' or 'memory'")

    table_name = os.getenv("DYNAMODB_KV_TABLE", "bartender-kv")
    logger.info(f"Key-value store configured - table: {table_name}")
    return DynamoDBKeyValueStore(dynamodb_resource=get_dynamodb_resource(), table_name=table_name)


def create_ai_client() -> GenerativeAIClient:
    """Create the AI client chain from the configured provider keys.

    Gemini is tried first, Groq second.

    Raises:
        ValueError: If no provider key is configured
    """
    timeout = float(os.getenv("AI_TIMEOUT_SECONDS", "30"))
    clients: list[GenerativeAIClient] = []

    gemini_key = os.getenv("GEMINI_API_KEY")
    if gemini_key:
        clients.append(
            GeminiClient(
                api_key=gemini_key,
                model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
                timeout_seconds=timeout,
            )
        )

    groq_key = os.getenv("GROQ_API_KEY")
    if groq_key:
        clients.append(
            GroqClient(
                api_key=groq_key,
                model=os.getenv("GROQ_MODEL", "llama-3-70b-8192"),
                timeout_seconds=timeout,
            )
        )

    if not clients:
        raise ValueError("GEMINI_API_KEY or GROQ_API_KEY must be set in environment")

    fallback = FallbackAIClient(clients)
    logger.info(f"AI providers configured: {', '.join(fallback.provider_names)}")
    return fallback


def get_bartender_pin() -> str:
    """PIN required for inventory writes.

    Without BARTENDER_PIN a random PIN is generated so writes stay locked.
    """
    pin = os.getenv("BARTENDER_PIN", "")
    if not pin:
        logger.warning("No BARTENDER_PIN configured - inventory writes will be rejected")
        return secrets.token_urlsafe(16)
    return pin


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    Returns:
        Configured FastAPI application instance
    """
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Initializing bartender service...")

    store = create_key_value_store()
    inventory_repository = InventoryRepository(store)
    collection_repository = CollectionRepository(store)
    menu_repository = MenuRepository(store)

    tenant_id = os.getenv("MENU_TENANT_ID", "menu-primary")
    menu_store = MenuVersionStore(menu_repository, tenant_id=tenant_id)

    ai_client = create_ai_client()
    chat_orchestrator = ChatOrchestrator(
        ai_client=ai_client,
        inventory_repository=inventory_repository,
        history_limit=int(os.getenv("CHAT_HISTORY_LIMIT", str(DEFAULT_HISTORY_LIMIT))),
    )
    enrichment_service = EnrichmentService(
        ai_client=ai_client,
        batch_size=int(os.getenv("ENRICH_BATCH_SIZE", str(DEFAULT_BATCH_SIZE))),
    )

    logger.info(f"Services initialized - menu tenant: {tenant_id}")

    app = create_app(
        menu_store=menu_store,
        chat_orchestrator=chat_orchestrator,
        enrichment_service=enrichment_service,
        inventory_repository=inventory_repository,
        collection_repository=collection_repository,
        pin=get_bartender_pin(),
    )

    if os.getenv("OTEL_ENABLED", "false").lower() == "true":
        setup_observability(app)

    logger.info("Bartender service initialized successfully")
    return app


# Skip wiring during test collection
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    app = FastAPI()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8001"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting development server on {host}:{port}")
    logger.info(f"API documentation available at http://{host}:{port}/docs")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
