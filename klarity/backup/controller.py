"""
Backup / Restore Controller

DESIGN DECISION: Restore is a full, destructive replace.
1. All three keys are removed first (no ghost data from the old state)
2. Each collection is then written from the backup; a missing array
   becomes empty and missing settings become the defaults
3. A backup that fails validation is rejected before step 1

TRADEOFFS:
- The wipe and the three writes are separate key-value operations. If one
  fails, settings are reset to defaults (best effort) and the ledger and
  targets may already be empty. Callers must reload all three collections
  after any failed restore.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional, Union

import structlog
from pydantic import ValidationError

from klarity.audit import AuditLogger
from klarity.models.audit import AuditEventBuilder
from klarity.models.backup import BackupSnapshot, RestoreResult
from klarity.models.ledger import Target, Transaction
from klarity.services.storage import KeyValueStore, StorageError
from klarity.stores import LedgerStore, SettingsStore, TargetStore
from klarity.validation import LedgerValidator

logger = structlog.get_logger(__name__)


def _iso_utc(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a Z suffix."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class BackupController:
    """Exports the whole on-device state and restores it from a snapshot."""

    def __init__(
        self,
        kv: KeyValueStore,
        ledger: LedgerStore,
        targets: TargetStore,
        settings_store: SettingsStore,
        version: str = "1.1",
        clock: Callable[[], datetime] = datetime.now,
        validator: Optional[LedgerValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._kv = kv
        self._ledger = ledger
        self._targets = targets
        self._settings_store = settings_store
        self._version = version
        self._clock = clock
        self._validator = validator or LedgerValidator()
        self._audit_logger = audit_logger

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def export(self) -> BackupSnapshot:
        """Snapshot of everything: sorted transactions, targets, merged settings."""
        snapshot = BackupSnapshot(
            transactions=self._ledger.list_transactions(),
            targets=self._targets.list_targets(),
            settings=self._settings_store.get(),
            timestamp=_iso_utc(self._clock()),
            version=self._version,
        )
        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.backup_exported(
                transaction_count=len(snapshot.transactions),
                target_count=len(snapshot.targets),
            ))
        return snapshot

    def export_json(self) -> str:
        return json.dumps(self.export().to_wire(), indent=2, ensure_ascii=False)

    def backup_filename(self, now: Optional[datetime] = None) -> str:
        day = (now or self._clock()).date().isoformat()
        return f"klarity_backup_{day}.json"

    def write_backup(self, directory: Union[str, Path]) -> Path:
        """
        Write the backup JSON into `directory` and return the file path.

        Raises:
            OSError: If the file cannot be written.
        """
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.backup_filename()
        path.write_text(self.export_json(), encoding="utf-8")
        return path

    # -------------------------------------------------------------------------
    # Restore
    # -------------------------------------------------------------------------

    def restore(self, data: Any) -> bool:
        """
        Replace all stored state with the contents of `data`.

        Returns True on success. On False, re-read every collection.
        """
        return self._restore(data).success

    def _restore(self, data: Any) -> RestoreResult:
        if isinstance(data, BackupSnapshot):
            data = data.to_wire()
        if not isinstance(data, dict):
            return self._rejected("Backup must be a JSON object")

        # Decode everything before the wipe
        raw_transactions = data.get("transactions")
        raw_targets = data.get("targets")
        raw_settings = data.get("settings")
        try:
            transactions = [
                Transaction.model_validate(item)
                for item in (raw_transactions if isinstance(raw_transactions, list) else [])
            ]
            targets = [
                Target.model_validate(item)
                for item in (raw_targets if isinstance(raw_targets, list) else [])
            ]
            settings = self._settings_store.merge_over_defaults(
                raw_settings if isinstance(raw_settings, dict) else None
            )
        except ValidationError as e:
            return self._rejected(f"Backup contains invalid records: {e.error_count()} error(s)")

        try:
            self._kv.remove(self._ledger.key)
            self._kv.remove(self._targets.key)
            self._kv.remove(self._settings_store.key)

            self._ledger.replace_all(transactions)
            self._targets.replace_all(targets)
            self._settings_store.save(settings)
        except StorageError as e:
            logger.error("restore_failed", error=str(e))
            if self._audit_logger:
                self._audit_logger.log(AuditEventBuilder.restore_failed(str(e)))
            try:
                self._settings_store.reset()
            except StorageError as reset_error:
                logger.error("restore_settings_reset_failed", error=str(reset_error))
            return RestoreResult(
                success=False,
                error_message=str(e),
                reload_required=True,
            )

        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.backup_restored(
                transaction_count=len(transactions),
                target_count=len(targets),
            ))
        return RestoreResult(
            success=True,
            transactions_restored=len(transactions),
            targets_restored=len(targets),
            reload_required=True,
        )

    def _rejected(self, reason: str) -> RestoreResult:
        logger.warning("backup_rejected", reason=reason)
        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.backup_rejected(reason))
        return RestoreResult(success=False, error_message=reason)

    def import_json(self, content: str) -> RestoreResult:
        """
        Parse a backup file's text, apply the acceptance rule, then restore.

        Parse and acceptance failures change nothing.
        """
        if not content or not content.strip():
            return self._rejected("Backup file is empty")
        try:
            data = json.loads(content)
        except ValueError:
            return self._rejected("Backup file is not valid JSON")

        validation = self._validator.validate_backup_payload(data)
        if not validation.is_valid:
            return self._rejected(validation.first_error() or "Backup file rejected")

        return self._restore(data)

    def import_file(self, path: Union[str, Path]) -> RestoreResult:
        try:
            content = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return self._rejected(f"Cannot read backup file: {e}")
        return self.import_json(content)
