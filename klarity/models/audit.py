"""
Audit Models for Klarity

Every mutation of the on-device state produces an audit event.
This provides:
1. A trail of what the user recorded, edited and deleted
2. Debugging information when a write fails
3. Visibility into the shame mechanic (deleted impulse purchases)

DESIGN DECISION: Audit events are emitted, never edited. They are
written to the structured log, not to the key-value store, so the
three persisted keys stay exactly what the backup format describes.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ledger
    TRANSACTION_SAVED = "transaction_saved"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    SHAME_INCREMENTED = "shame_incremented"

    # Targets
    TARGET_SAVED = "target_saved"
    TARGET_DEPOSIT = "target_deposit"
    TARGET_DELETED = "target_deleted"

    # Settings
    SETTINGS_SAVED = "settings_saved"

    # Backup
    BACKUP_EXPORTED = "backup_exported"
    BACKUP_RESTORED = "backup_restored"
    BACKUP_REJECTED = "backup_rejected"
    RESTORE_FAILED = "restore_failed"

    # Persistence
    SAVE_FAILED = "save_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'target', 'settings')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., a deposit and its synthetic expense)"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_saved(tx_id, amount, "EXPENSE", False)
        event = AuditEventBuilder.shame_incremented(tx_id, shame_count)
    """

    @staticmethod
    def transaction_saved(
        transaction_id: str,
        amount: int,
        transaction_type: str,
        is_delayed_entry: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_SAVED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction saved: {transaction_type} {amount}",
            details={
                "amount": amount,
                "type": transaction_type,
                "is_delayed_entry": is_delayed_entry,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_updated(transaction_id: str, amount: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction updated: {amount}",
            details={"amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: str,
        shame_triggered: bool,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            description="Transaction deleted",
            details={"shame_triggered": shame_triggered},
            is_user_action=True,
        )

    @staticmethod
    def shame_incremented(transaction_id: str, shame_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SHAME_INCREMENTED,
            severity=AuditSeverity.WARNING,
            entity_type="settings",
            description=f"Impulse purchase deleted, shame count is now {shame_count}",
            details={
                "deleted_transaction_id": transaction_id,
                "shame_count": shame_count,
            },
        )

    @staticmethod
    def target_saved(target_id: str, name: str, collected_amount: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TARGET_SAVED,
            entity_type="target",
            entity_id=target_id,
            description=f"Target saved: {name}",
            details={"collected_amount": collected_amount},
            is_user_action=True,
        )

    @staticmethod
    def target_deposit(
        target_id: str,
        amount: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TARGET_DEPOSIT,
            entity_type="target",
            entity_id=target_id,
            correlation_id=correlation_id,
            description=f"Deposit of {amount} into target",
            details={"amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def target_deleted(target_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TARGET_DELETED,
            entity_type="target",
            entity_id=target_id,
            description="Target deleted",
            is_user_action=True,
        )

    @staticmethod
    def settings_saved(monthly_budget: int, payday_day_of_month: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_SAVED,
            entity_type="settings",
            description="Settings saved",
            details={
                "monthly_budget": monthly_budget,
                "payday_day_of_month": payday_day_of_month,
            },
            is_user_action=True,
        )

    @staticmethod
    def backup_exported(transaction_count: int, target_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_EXPORTED,
            entity_type="backup",
            description=f"Backup exported with {transaction_count} transactions",
            details={
                "transaction_count": transaction_count,
                "target_count": target_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def backup_restored(transaction_count: int, target_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_RESTORED,
            severity=AuditSeverity.WARNING,
            entity_type="backup",
            description=f"All data replaced from backup ({transaction_count} transactions)",
            details={
                "transaction_count": transaction_count,
                "target_count": target_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def backup_rejected(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="backup",
            description="Backup file rejected before restore",
            error_message=reason,
        )

    @staticmethod
    def restore_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RESTORE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="backup",
            description="Restore failed; settings reset to defaults",
            error_message=error_message,
        )

    @staticmethod
    def save_failed(
        entity_type: str,
        error_message: str,
        entity_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"Failed to persist {entity_type}",
            error_message=error_message,
        )
