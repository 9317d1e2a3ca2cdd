"""Key-value store adapters.

All service state lives behind a plain get/put/delete-by-key interface with
JSON-serialized values. DynamoDB backs deployments; the in-memory store backs
local development and tests.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from bartender_service.errors import StoreError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Abstract JSON key-value store.

    ``get_json`` returns ``default`` when the key is absent and raises
    StoreError when the backend cannot be read, so a failed read is never
    mistaken for empty state. ``put_json`` returns True when the value was
    written, False otherwise.
    """

    @abstractmethod
    def get_json(self, key: str, default: Any = None) -> Any:
        """Read and decode the value stored under ``key``."""

    @abstractmethod
    def put_json(self, key: str, value: Any) -> bool:
        """Encode and store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove ``key``. Deleting a missing key succeeds."""


class DynamoDBKeyValueStore(KeyValueStore):
    """Key-value store on a DynamoDB table keyed by a ``key`` string attribute.

    Values are kept as JSON text in a ``value`` attribute, which sidesteps
    DynamoDB's Decimal conversion for numbers.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize the store.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def get_json(self, key: str, default: Any = None) -> Any:
        try:
            response = self.table.get_item(Key={"key": key})
        except ClientError as e:
            logger.error(f"Failed to read key '{key}' from {self.table_name}: {e}")
            raise StoreError(f"Failed to read '{key}'") from e

        if "Item" not in response:
            return default

        raw = response["Item"].get("value")
        if raw is None:
            return default

        try:
            return json.loads(str(raw))
        except json.JSONDecodeError as e:
            logger.error(f"Stored value for '{key}' is not valid JSON: {e}")
            raise StoreError(f"Corrupt value stored under '{key}'") from e

    def put_json(self, key: str, value: Any) -> bool:
        try:
            self.table.put_item(Item={"key": key, "value": json.dumps(value)})
            return True

        except ClientError as e:
            logger.error(f"Failed to write key '{key}' to {self.table_name}: {e}")
            return False

    def delete(self, key: str) -> bool:
        try:
            self.table.delete_item(Key={"key": key})
            return True

        except ClientError as e:
            logger.error(f"Failed to delete key '{key}' from {self.table_name}: {e}")
            return False


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store holding JSON text, for development and tests."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.put_json(key, value)

    def get_json(self, key: str, default: Any = None) -> Any:
        raw = self._data.get(key)
        if raw is None:
            return default
        return json.loads(raw)

    def put_json(self, key: str, value: Any) -> bool:
        self._data[key] = json.dumps(value)
        return True

    def delete(self, key: str) -> bool:
        self._data.pop(key, None)
        return True

    def keys(self) -> list[str]:
        return sorted(self._data)
