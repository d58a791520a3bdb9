"""
Ledger Store

CRUD over the transaction list held under a single key.

GUARANTEES:
- Reads are always sorted: date descending, then entry timestamp descending
  (sorted on read, so storage order is irrelevant)
- A failed write leaves the previous list in place and the caller gets the
  re-read list plus an error message, never an exception
- Deleting an impulse purchase increments the shame counter first, then
  removes the transaction; the two writes are not atomic
"""

from datetime import datetime, time, timedelta
from typing import Any, Callable, Optional, Sequence
from uuid import UUID

import structlog
from pydantic import ValidationError

from klarity.audit import AuditLogger
from klarity.models.audit import AuditEventBuilder
from klarity.models.ledger import (
    Transaction,
    TransactionDeleteResult,
    TransactionListResult,
)
from klarity.services.storage import KeyValueStore, StorageError
from klarity.stores.codec import read_json, write_json
from klarity.stores.settings import SettingsStore

logger = structlog.get_logger(__name__)


def sort_transactions(transactions: list[Transaction]) -> list[Transaction]:
    """Newest date first; same-day entries by most recently entered."""
    return sorted(
        transactions,
        key=lambda t: (t.date, t.timestamp),
        reverse=True,
    )


class LedgerStore:
    """Transaction list persistence with the shame side effect on deletion."""

    def __init__(
        self,
        kv: KeyValueStore,
        settings_store: SettingsStore,
        key: str = "klarity_transactions",
        clock: Callable[[], datetime] = datetime.now,
        delayed_entry_hours: int = 24,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._kv = kv
        self._settings_store = settings_store
        self._key = key
        self._clock = clock
        self._delayed_after = timedelta(hours=delayed_entry_hours)
        self._audit_logger = audit_logger

    @property
    def key(self) -> str:
        return self._key

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def _load_records(self) -> tuple[list[Transaction], list[Any]]:
        """
        Decode the stored list, unsorted.

        Returns the valid transactions plus the raw items that failed
        validation. Mutations write the raw items back untouched so an
        unreadable record is never lost to an unrelated write.

        Undecodable JSON reads as an empty ledger. Backend read failures
        propagate as StorageError so a mutation never overwrites data it
        could not read.
        """
        try:
            data = read_json(self._kv, self._key)
        except ValueError as e:
            logger.error("transactions_corrupt", key=self._key, error=str(e))
            return [], []

        if data is None:
            return [], []
        if not isinstance(data, list):
            logger.error("transactions_not_a_list", key=self._key)
            return [], []

        transactions, unreadable = [], []
        for item in data:
            try:
                transactions.append(Transaction.model_validate(item))
            except ValidationError as e:
                logger.warning("transaction_skipped", key=self._key, error=str(e))
                unreadable.append(item)
        return transactions, unreadable

    def _load(self) -> list[Transaction]:
        return self._load_records()[0]

    def list_transactions(self) -> list[Transaction]:
        """All transactions, sorted. Returns [] if the backend cannot be read."""
        try:
            return sort_transactions(self._load())
        except StorageError as e:
            logger.error("transactions_load_failed", key=self._key, error=str(e))
            return []

    def get(self, transaction_id: str) -> Optional[Transaction]:
        for transaction in self.list_transactions():
            if transaction.id == transaction_id:
                return transaction
        return None

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    def is_delayed(self, transaction: Transaction, now: datetime) -> bool:
        """True when the attributed day started more than the delay window before `now`."""
        day_start = datetime.combine(transaction.date, time.min, tzinfo=now.tzinfo)
        return now - day_start > self._delayed_after

    def _persist(self, transactions: list[Transaction], unreadable: Sequence[Any] = ()) -> None:
        write_json(self._kv, self._key, [t.to_wire() for t in transactions] + list(unreadable))

    def _failure(self, error: StorageError, entity_id: Optional[str] = None) -> TransactionListResult:
        logger.error("transactions_save_failed", key=self._key, error=str(error))
        if self._audit_logger:
            self._audit_logger.log_save_failed("transaction", str(error), entity_id)
        return TransactionListResult(
            transactions=self.list_transactions(),
            success=False,
            error_message=str(error),
        )

    def create(
        self,
        transaction: Transaction,
        correlation_id: Optional[UUID] = None,
    ) -> TransactionListResult:
        """
        Flag delayed entries, append and persist.

        `correlation_id` ties the audit event to a composite action such as
        a target deposit. Returns the freshly sorted list (read back from
        the store).
        """
        now = self._clock()
        transaction = transaction.model_copy(
            update={"is_delayed_entry": self.is_delayed(transaction, now)}
        )

        try:
            current, unreadable = self._load_records()
            self._persist([transaction] + current, unreadable)
        except StorageError as e:
            return self._failure(e, transaction.id)

        if self._audit_logger:
            self._audit_logger.log_transaction_saved(
                transaction_id=transaction.id,
                amount=transaction.amount,
                transaction_type=transaction.type.value,
                is_delayed_entry=transaction.is_delayed_entry,
                correlation_id=correlation_id,
            )
        return TransactionListResult(transactions=self.list_transactions())

    def update(self, transaction: Transaction) -> TransactionListResult:
        """
        Replace the stored transaction with the same id.

        Full replacement, no field patching. An unknown id changes nothing.
        """
        try:
            current, unreadable = self._load_records()
            index = next(
                (i for i, t in enumerate(current) if t.id == transaction.id),
                None,
            )
            if index is not None:
                current[index] = transaction
                self._persist(current, unreadable)
        except StorageError as e:
            return self._failure(e, transaction.id)

        if index is not None and self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.transaction_updated(
                transaction_id=transaction.id,
                amount=transaction.amount,
            ))
        return TransactionListResult(transactions=self.list_transactions())

    def delete_by_id(self, transaction_id: str) -> TransactionDeleteResult:
        """
        Remove a transaction. Deleting an impulse purchase costs one shame point.

        The shame counter is written before the list. If the second write
        fails the counter stays incremented (`shame_triggered` is still
        reported so the caller refreshes settings).
        """
        shame_triggered = False
        try:
            current, unreadable = self._load_records()
            target = next((t for t in current if t.id == transaction_id), None)

            if target is not None and target.is_impulse:
                settings = self._settings_store.increment_shame()
                shame_triggered = True
                if self._audit_logger:
                    self._audit_logger.log_shame_incremented(
                        transaction_id, settings.shame_count
                    )

            self._persist([t for t in current if t.id != transaction_id], unreadable)
        except StorageError as e:
            failure = self._failure(e, transaction_id)
            return TransactionDeleteResult(
                transactions=failure.transactions,
                success=False,
                error_message=failure.error_message,
                shame_triggered=shame_triggered,
            )

        if self._audit_logger:
            self._audit_logger.log_transaction_deleted(transaction_id, shame_triggered)
        return TransactionDeleteResult(
            transactions=self.list_transactions(),
            shame_triggered=shame_triggered,
        )

    def replace_all(self, transactions: list[Transaction]) -> None:
        """
        Overwrite the whole list. Used by restore.

        Raises:
            StorageError: If the write fails.
        """
        self._persist(transactions)
