"""
Main Orchestrator for Klarity

This module ties together all the components and defines the
end-to-end flows for:
1. Transactions (friction gate → validate → create / edit → delete)
2. Targets (create with opening balance → deposit → edit → delete)
3. Settings (onboarding and edits)
4. The read side (dashboard, analysis, reckoning, statement, backup)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches a store without passing validation first
- Every positive change of a target's collected amount is mirrored by
  exactly one synthetic savings expense
- Storage failures come back as failed results, never as exceptions

Composite actions (target write + synthetic expense) are two separate
writes. The target is written first; if the expense write then fails the
result says so and the caller reloads both lists.
"""

from datetime import date, datetime
from typing import Callable, Optional
from uuid import UUID

import structlog
from pydantic import ValidationError
from pydantic.alias_generators import to_snake

from klarity.audit import AuditLogger, create_correlation_id
from klarity.backup import BackupController
from klarity.config import Settings, get_settings
from klarity.friction import FrictionGate
from klarity.metrics import MetricsEngine
from klarity.models.audit import AuditEventBuilder
from klarity.models.ledger import (
    SAVINGS_CATEGORY,
    EmotionalTag,
    Target,
    TargetListResult,
    Transaction,
    TransactionDeleteResult,
    TransactionListResult,
    TransactionType,
    UserSettings,
    epoch_ms,
)
from klarity.models.metrics import DashboardStats, ReckoningSummary, SpendingAnalysis
from klarity.models.validation import ValidationIssue, ValidationResult
from klarity.reports import Statement, build_statement
from klarity.services.storage import (
    KeyValueStore,
    NotFoundError,
    StorageError,
    create_key_value_store,
)
from klarity.stores import LedgerStore, SettingsStore, TargetStore
from klarity.validation import LedgerValidator

logger = structlog.get_logger(__name__)


class TransactionFlow:
    """
    Orchestrates recording, editing and deleting transactions.

    Flow for a new expense:
    1. Friction gate → the user confirms they still want to spend
    2. Validate → errors block, warnings are returned alongside
    3. Save → LedgerStore.create (flags delayed entries)
    """

    def __init__(
        self,
        ledger: LedgerStore,
        validator: Optional[LedgerValidator] = None,
        friction_delay_seconds: int = 10,
    ):
        self._ledger = ledger
        self._validator = validator or LedgerValidator()
        self._friction_delay_seconds = friction_delay_seconds

    def start_friction(self, user_settings: UserSettings) -> FrictionGate:
        """Open the pre-spending interrogation for the current life anchor."""
        return FrictionGate(
            life_anchor=user_settings.life_anchor,
            delay_seconds=self._friction_delay_seconds,
        )

    def _rejected(self, validation: ValidationResult) -> TransactionListResult:
        return TransactionListResult(
            transactions=self._ledger.list_transactions(),
            success=False,
            error_message=validation.first_error(),
        )

    def record(self, transaction: Transaction) -> tuple[TransactionListResult, ValidationResult]:
        validation = self._validator.validate_transaction(transaction)
        if validation.has_errors:
            return self._rejected(validation), validation
        return self._ledger.create(transaction), validation

    def edit(self, transaction: Transaction) -> tuple[TransactionListResult, ValidationResult]:
        validation = self._validator.validate_transaction(transaction)
        if validation.has_errors:
            return self._rejected(validation), validation
        return self._ledger.update(transaction), validation

    def delete(self, transaction_id: str) -> TransactionDeleteResult:
        """Delete; impulse purchases cost a shame point (see `shame_triggered`)."""
        return self._ledger.delete_by_id(transaction_id)


class TargetFlow:
    """
    Orchestrates savings targets and their mirrored expenses.

    The synthetic expense is categorised as savings, tagged as a need and
    marked fixed, so it lowers liquidity without eating the variable budget.
    """

    def __init__(
        self,
        targets: TargetStore,
        ledger: LedgerStore,
        clock: Callable[[], datetime] = datetime.now,
        validator: Optional[LedgerValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._targets = targets
        self._ledger = ledger
        self._clock = clock
        self._validator = validator or LedgerValidator()
        self._audit_logger = audit_logger

    def _savings_expense(self, amount: int, reason: str) -> Transaction:
        now = self._clock()
        return Transaction(
            amount=amount,
            type=TransactionType.EXPENSE,
            category=SAVINGS_CATEGORY,
            emotional_tag=EmotionalTag.NEED,
            reason=reason,
            date=now.date(),
            timestamp=epoch_ms(now),
            is_fixed_expense=True,
        )

    def _mirror(
        self,
        saved: TargetListResult,
        amount: int,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[TargetListResult, Optional[TransactionListResult]]:
        """Record the synthetic expense after a successful target write."""
        if not saved.success or amount <= 0:
            return saved, None

        ledger_result = self._ledger.create(
            self._savings_expense(amount, reason),
            correlation_id=correlation_id,
        )
        if not ledger_result.success:
            logger.error("savings_expense_failed", reason=reason, error=ledger_result.error_message)
        return saved, ledger_result

    def create_target(
        self,
        name: str,
        target_amount: int,
        initial_amount: int = 0,
        deadline: Optional[date] = None,
    ) -> tuple[TargetListResult, Optional[TransactionListResult], ValidationResult]:
        """
        Create a target. A positive opening balance is money set aside now,
        so it is also recorded as an expense.
        """
        target = Target(
            name=name.strip(),
            target_amount=target_amount,
            collected_amount=max(0, initial_amount),
            deadline=deadline,
        )
        validation = self._validator.validate_target(target)
        if validation.has_errors:
            return self._rejected(validation.first_error()), None, validation

        saved, ledger_result = self._mirror(
            self._targets.save(target),
            target.collected_amount,
            f"Saldo Awal: {target.name}",
        )
        return saved, ledger_result, validation

    def deposit(
        self,
        target_id: str,
        amount: int,
    ) -> tuple[TargetListResult, Optional[TransactionListResult]]:
        """
        Add `amount` to a target's collected amount and mirror it in the ledger.

        Returns (target result, ledger result). The ledger result is None when
        no expense was written.
        """
        validation = self._validator.validate_deposit(amount)
        if validation.has_errors:
            return self._rejected(validation.first_error()), None

        try:
            target = self._targets.require(target_id)
        except NotFoundError as e:
            return self._rejected(str(e)), None

        correlation_id = create_correlation_id()
        updated = target.model_copy(
            update={"collected_amount": target.collected_amount + amount}
        )
        saved, ledger_result = self._mirror(
            self._targets.save(updated),
            amount,
            f"Tabungan: {target.name}",
            correlation_id=correlation_id,
        )
        if saved.success and self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.target_deposit(
                target_id=target_id,
                amount=amount,
                correlation_id=correlation_id,
            ))
        return saved, ledger_result

    def edit_target(
        self,
        target: Target,
    ) -> tuple[TargetListResult, Optional[TransactionListResult], ValidationResult]:
        """
        Save an edited target. If the collected amount grew, the increase
        is recorded as a savings expense; decreases are not mirrored.
        """
        validation = self._validator.validate_target(target)
        if validation.has_errors:
            return self._rejected(validation.first_error()), None, validation

        previous = self._targets.get(target.id)
        delta = target.collected_amount - (previous.collected_amount if previous else 0)
        saved, ledger_result = self._mirror(
            self._targets.save(target),
            delta,
            f"Tabungan: {target.name}",
        )
        return saved, ledger_result, validation

    def delete_target(self, target_id: str) -> TargetListResult:
        """Remove a target. Past savings expenses stay in the ledger."""
        return self._targets.delete_by_id(target_id)

    def _rejected(self, message: Optional[str]) -> TargetListResult:
        return TargetListResult(
            targets=self._targets.list_targets(),
            success=False,
            error_message=message,
        )


class SettingsFlow:
    """Onboarding and settings edits."""

    def __init__(
        self,
        settings_store: SettingsStore,
        validator: Optional[LedgerValidator] = None,
    ):
        self._settings_store = settings_store
        self._validator = validator or LedgerValidator()

    def current(self) -> UserSettings:
        return self._settings_store.get()

    def save(self, user_settings: UserSettings) -> tuple[bool, ValidationResult]:
        """
        Validate and persist. Returns (saved, validation).

        Storage failures are logged and reported as not saved.
        """
        validation = self._validator.validate_settings(user_settings)
        if validation.has_errors:
            return False, validation
        try:
            self._settings_store.save(user_settings)
        except StorageError as e:
            logger.error("settings_save_failed", error=str(e))
            return False, validation
        return True, validation

    def update(self, **changes) -> tuple[bool, ValidationResult]:
        """
        Apply field changes (snake_case names) over the current settings.

        Values the model rejects come back as error issues, one per field;
        nothing is saved.
        """
        current = self._settings_store.get()
        try:
            updated = UserSettings.model_validate({**current.model_dump(), **changes})
        except ValidationError as e:
            return False, ValidationResult(
                subject="settings",
                issues=[
                    ValidationIssue(
                        field=to_snake(str(err["loc"][0])) if err["loc"] else "settings",
                        issue_type="invalid_value",
                        message=err["msg"],
                        severity="error",
                    )
                    for err in e.errors()
                ],
            )
        return self.save(updated)


class KlarityApp:
    """
    All components of one install, wired to a single key-value store.

    Screens read through the convenience methods; mutations go through
    the flows.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        ledger: LedgerStore,
        targets: TargetStore,
        settings_store: SettingsStore,
        engine: MetricsEngine,
        backup: BackupController,
        transaction_flow: TransactionFlow,
        target_flow: TargetFlow,
        settings_flow: SettingsFlow,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.kv = kv
        self.ledger = ledger
        self.targets = targets
        self.settings_store = settings_store
        self.engine = engine
        self.backup = backup
        self.transaction_flow = transaction_flow
        self.target_flow = target_flow
        self.settings_flow = settings_flow
        self._clock = clock

    def dashboard(self, month: Optional[str] = None) -> DashboardStats:
        return self.engine.dashboard(
            self.ledger.list_transactions(),
            self.settings_store.get(),
            month=month,
            now=self._clock(),
        )

    def analysis(self) -> Optional[SpendingAnalysis]:
        return self.engine.analysis(self.ledger.list_transactions())

    def reckoning(self) -> ReckoningSummary:
        return self.engine.reckoning(
            self.ledger.list_transactions(),
            self.settings_store.get(),
            now=self._clock(),
        )

    def statement(self) -> Statement:
        return build_statement(
            self.ledger.list_transactions(),
            self.settings_store.get(),
            now=self._clock(),
        )


def create_app_components(
    kv: Optional[KeyValueStore] = None,
    settings: Optional[Settings] = None,
    clock: Callable[[], datetime] = datetime.now,
    audit_logger: Optional[AuditLogger] = None,
) -> KlarityApp:
    """
    Factory function to create all application components.

    Args:
        kv: Key-value backend. Defaults to the one named in the storage
            settings (JSON files under the data directory).
        settings: Configuration; defaults to `get_settings()`.
        clock: Source of "now" for every component.
        audit_logger: Defaults to a local structlog audit logger.
    """
    settings = settings or get_settings()
    kv = kv if kv is not None else create_key_value_store(settings.storage)
    audit_logger = audit_logger or AuditLogger()
    validator = LedgerValidator()

    settings_store = SettingsStore(
        kv,
        key=settings.storage.settings_key,
        clock=clock,
        audit_logger=audit_logger,
    )
    ledger = LedgerStore(
        kv,
        settings_store,
        key=settings.storage.transactions_key,
        clock=clock,
        delayed_entry_hours=settings.app.delayed_entry_hours,
        audit_logger=audit_logger,
    )
    targets = TargetStore(
        kv,
        key=settings.storage.targets_key,
        audit_logger=audit_logger,
    )
    backup = BackupController(
        kv,
        ledger,
        targets,
        settings_store,
        version=settings.app.backup_version,
        clock=clock,
        validator=validator,
        audit_logger=audit_logger,
    )

    return KlarityApp(
        kv=kv,
        ledger=ledger,
        targets=targets,
        settings_store=settings_store,
        engine=MetricsEngine(settings.metrics),
        backup=backup,
        transaction_flow=TransactionFlow(
            ledger,
            validator=validator,
            friction_delay_seconds=settings.app.friction_delay_seconds,
        ),
        target_flow=TargetFlow(
            targets,
            ledger,
            clock=clock,
            validator=validator,
            audit_logger=audit_logger,
        ),
        settings_flow=SettingsFlow(settings_store, validator=validator),
        clock=clock,
    )
