"""JSON encoding between the stores and the key-value substrate."""

import json
from typing import Any

from klarity.services.storage import KeyValueStore, SerializationError


def read_json(kv: KeyValueStore, key: str) -> Any:
    """
    Decode the JSON stored under `key`.

    Returns None for an absent key. Raises ValueError for undecodable
    content and StorageError if the backend cannot be read.
    """
    raw = kv.get(key)
    if raw is None:
        return None
    return json.loads(raw)


def write_json(kv: KeyValueStore, key: str, payload: Any) -> None:
    """
    Encode `payload` completely, then hand it to the backend in one `set`.

    Encoding happens before the write so a serialization problem never
    reaches the store as a partial document.
    """
    try:
        text = json.dumps(payload, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Cannot encode value for {key!r}: {e}") from e
    kv.set(key, text)
