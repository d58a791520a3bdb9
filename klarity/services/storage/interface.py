"""
Abstract Storage Interface

DESIGN DECISION: Persistence is a plain key-value store of strings.
This allows us to:
1. Run the same stores against a directory of JSON files or memory
2. Use in-memory storage for testing
3. Keep every store's read-modify-write logic independent of the backend

The interface is intentionally tiny - get, set, remove. Everything
else (JSON encoding, ordering, defaults) belongs to the stores.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract interface for the persistence substrate.

    Implementations must make `set` all-or-nothing per key: after a failed
    `set` the key still holds its previous value.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: The storage key

        Returns:
            The stored string, or None if the key is absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store a value, replacing any previous one.

        Args:
            key: The storage key
            value: The string to store

        Raises:
            QuotaExceededError: If the backend is out of space
            StorageError: If the write fails for any other reason
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """
        Remove a key. Removing an absent key is not an error.

        Raises:
            StorageError: If the backend cannot remove the key
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class QuotaExceededError(StorageError):
    """The backend has no room for the value."""
    pass


class SerializationError(StorageError):
    """A value could not be encoded to, or decoded from, JSON."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass
