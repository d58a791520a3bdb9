"""
Target Store

Savings goals, kept in insertion order. Deposits are not handled here:
the synthetic expense that mirrors a deposit belongs to the ledger, and
the two writes are sequenced by the caller (see `TargetFlow`).
"""

from typing import Any, Optional, Sequence

import structlog
from pydantic import ValidationError

from klarity.audit import AuditLogger
from klarity.models.audit import AuditEventBuilder
from klarity.models.ledger import Target, TargetListResult
from klarity.services.storage import KeyValueStore, NotFoundError, StorageError
from klarity.stores.codec import read_json, write_json

logger = structlog.get_logger(__name__)


class TargetStore:
    """Upsert / delete over the target list."""

    def __init__(
        self,
        kv: KeyValueStore,
        key: str = "klarity_targets",
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._kv = kv
        self._key = key
        self._audit_logger = audit_logger

    @property
    def key(self) -> str:
        return self._key

    def _load_records(self) -> tuple[list[Target], list[Any]]:
        """Valid targets plus the raw items that failed validation."""
        try:
            data = read_json(self._kv, self._key)
        except ValueError as e:
            logger.error("targets_corrupt", key=self._key, error=str(e))
            return [], []

        if not isinstance(data, list):
            if data is not None:
                logger.error("targets_not_a_list", key=self._key)
            return [], []

        targets, unreadable = [], []
        for item in data:
            try:
                targets.append(Target.model_validate(item))
            except ValidationError as e:
                logger.warning("target_skipped", key=self._key, error=str(e))
                unreadable.append(item)
        return targets, unreadable

    def _load(self) -> list[Target]:
        return self._load_records()[0]

    def _persist(self, targets: list[Target], unreadable: Sequence[Any] = ()) -> None:
        # Unreadable items are written back as they were found
        write_json(self._kv, self._key, [t.to_wire() for t in targets] + list(unreadable))

    def _failure(self, error: StorageError, entity_id: Optional[str]) -> TargetListResult:
        logger.error("targets_save_failed", key=self._key, error=str(error))
        if self._audit_logger:
            self._audit_logger.log_save_failed("target", str(error), entity_id)
        return TargetListResult(
            targets=self.list_targets(),
            success=False,
            error_message=str(error),
        )

    def list_targets(self) -> list[Target]:
        try:
            return self._load()
        except StorageError as e:
            logger.error("targets_load_failed", key=self._key, error=str(e))
            return []

    def get(self, target_id: str) -> Optional[Target]:
        return next((t for t in self.list_targets() if t.id == target_id), None)

    def require(self, target_id: str) -> Target:
        """
        Like `get`, for callers that cannot continue without the target.

        Raises:
            NotFoundError: If no target has this id.
        """
        target = self.get(target_id)
        if target is None:
            raise NotFoundError(f"Target not found: {target_id}")
        return target

    def save(self, target: Target) -> TargetListResult:
        """Insert, or replace in place when the id already exists."""
        try:
            current, unreadable = self._load_records()
            for i, existing in enumerate(current):
                if existing.id == target.id:
                    current[i] = target
                    break
            else:
                current.append(target)
            self._persist(current, unreadable)
        except StorageError as e:
            return self._failure(e, target.id)

        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.target_saved(
                target_id=target.id,
                name=target.name,
                collected_amount=target.collected_amount,
            ))
        return TargetListResult(targets=current)

    def delete_by_id(self, target_id: str) -> TargetListResult:
        try:
            loaded, unreadable = self._load_records()
            current = [t for t in loaded if t.id != target_id]
            self._persist(current, unreadable)
        except StorageError as e:
            return self._failure(e, target_id)

        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.target_deleted(target_id))
        return TargetListResult(targets=current)

    def replace_all(self, targets: list[Target]) -> None:
        """
        Overwrite the whole list. Used by restore.

        Raises:
            StorageError: If the write fails.
        """
        self._persist(targets)
