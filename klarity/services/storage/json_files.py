"""
JSON File Key-Value Store

DESIGN DECISION: Each key is one file in a data directory.
1. A user can open their data in any text editor
2. Writes go through a temp file and os.replace, so a crash mid-write
   leaves the previous value intact rather than half a JSON document
3. No database to install for a single-user, single-device tool

TRADEOFFS:
- No cross-key transactions (the stores are written to expect that)
- Whole-value rewrites on every change (fine for a personal ledger)
"""

import errno
import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from klarity.services.storage.interface import (
    KeyValueStore,
    QuotaExceededError,
    StorageError,
)

logger = structlog.get_logger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileKeyValueStore(KeyValueStore):
    """
    Directory-backed key-value store.

    Values are stored verbatim in `<data_dir>/<key>.json`.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {key!r}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            self._atomic_write(path, value)
        except OSError as e:
            if e.errno in (errno.ENOSPC, errno.EDQUOT):
                raise QuotaExceededError(f"No space left to store {key!r}") from e
            raise StorageError(f"Failed to write {key!r}: {e}") from e

    def remove(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Failed to remove {key!r}: {e}") from e

    @retry(
        retry=retry_if_exception_type(PermissionError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=0.5),
        reraise=True,
    )
    def _atomic_write(self, path: Path, value: str) -> None:
        """
        Write to a sibling temp file, then rename it over the target.

        PermissionError is retried: on some platforms os.replace fails
        transiently while another process holds the target open.
        """
        fd, temp_name = tempfile.mkstemp(
            prefix=path.name + "-",
            suffix=".tmp",
            dir=str(path.parent),
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(temp_name, path)
        except BaseException:
            try:
                os.unlink(temp_name)
            except FileNotFoundError:
                pass
            except OSError:
                logger.warning("temp_file_cleanup_failed", path=temp_name)
            raise
