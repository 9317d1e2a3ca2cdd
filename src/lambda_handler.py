"""AWS Lambda handler for API Gateway events.

The FastAPI application is built once per container and served through
the Mangum ASGI adapter.
"""

import logging
import os
from typing import Any

from mangum import Mangum

logger = logging.getLogger(__name__)

_mangum_handler: Mangum | None = None


def get_mangum_handler() -> Mangum:
    """Create or retrieve the cached Mangum adapter."""
    global _mangum_handler

    if _mangum_handler is None:
        from main import create_application

        logger.info("Cold start: creating FastAPI application")
        _mangum_handler = Mangum(create_application(), lifespan="off")

    return _mangum_handler


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Serve an API Gateway request.

    Args:
        event: The API Gateway event payload
        context: The Lambda context object

    Returns:
        API Gateway response dict
    """
    logger.info(f"Received Lambda invocation, request_id: {getattr(context, 'aws_request_id', None)}")

    try:
        result: dict[str, Any] = get_mangum_handler()(event, context)
        return result
    except Exception as e:
        logger.exception(f"Unhandled error in Lambda handler: {e}")
        return {
            "statusCode": 500,
            "headers": {"Content-Type": "application/json", "Access-Control-Allow-Origin": "*"},
            "body": '{"error": "An unexpected error occurred. Please try again."}',
        }


if os.getenv("ENVIRONMENT") != "test":
    get_mangum_handler()
