"""
Storage Services Package

Provides the key-value interface and its concrete implementations.
The stores only ever see `KeyValueStore`; which backend sits behind it
is a configuration choice.
"""

from typing import Optional

from klarity.config import StorageSettings, get_settings
from klarity.services.storage.interface import (
    KeyValueStore,
    NotFoundError,
    QuotaExceededError,
    SerializationError,
    StorageError,
)
from klarity.services.storage.json_files import JsonFileKeyValueStore
from klarity.services.storage.memory import InMemoryKeyValueStore


def create_key_value_store(
    settings: Optional[StorageSettings] = None,
) -> KeyValueStore:
    """Build the backend named in the storage settings."""
    settings = settings or get_settings().storage
    if settings.backend == "memory":
        return InMemoryKeyValueStore(quota_bytes=settings.memory_quota_bytes)
    return JsonFileKeyValueStore(settings.data_dir)


__all__ = [
    # Interface
    "KeyValueStore",
    # Exceptions
    "NotFoundError",
    "QuotaExceededError",
    "SerializationError",
    "StorageError",
    # Implementations
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "create_key_value_store",
]
