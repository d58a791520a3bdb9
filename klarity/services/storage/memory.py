"""
In-Memory Key-Value Store

Holds everything in a dict. Used by tests and by the `memory` backend
setting. An optional byte quota mimics a browser's local storage limit
so quota failures can be exercised without a full disk.
"""

from typing import Optional

from klarity.services.storage.interface import KeyValueStore, QuotaExceededError


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store with an optional total size limit."""

    def __init__(
        self,
        initial: Optional[dict[str, str]] = None,
        quota_bytes: int = 0,
    ):
        """
        Args:
            initial: Pre-populated contents (copied).
            quota_bytes: Maximum total UTF-8 size of all values; 0 disables the limit.
        """
        self._data: dict[str, str] = dict(initial or {})
        self._quota_bytes = quota_bytes

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self._quota_bytes:
            used = sum(
                len(v.encode("utf-8"))
                for k, v in self._data.items()
                if k != key
            )
            if used + len(value.encode("utf-8")) > self._quota_bytes:
                raise QuotaExceededError(
                    f"Storing {key!r} would exceed the {self._quota_bytes} byte quota"
                )
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)
