"""Services package."""

from klarity.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    NotFoundError,
    QuotaExceededError,
    SerializationError,
    StorageError,
    create_key_value_store,
)

__all__ = [
    # Storage services
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "NotFoundError",
    "QuotaExceededError",
    "SerializationError",
    "StorageError",
    "create_key_value_store",
]
