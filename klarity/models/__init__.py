"""
Data Models Package

This package contains all Pydantic models used in Klarity.
Everything stored, exported or derived conforms to these schemas.
"""

from klarity.models.ledger import (
    CATEGORIES,
    EMOTIONAL_TAG_LABELS,
    SAVINGS_CATEGORY,
    EmotionalTag,
    Target,
    TargetListResult,
    Transaction,
    TransactionDeleteResult,
    TransactionListResult,
    TransactionType,
    UserSettings,
    default_settings,
    epoch_ms,
)
from klarity.models.metrics import (
    CategoryTotal,
    DashboardStats,
    MonthlyStats,
    ProgressTier,
    ReckoningSummary,
    SpendingAnalysis,
)
from klarity.models.backup import BackupSnapshot, RestoreResult
from klarity.models.validation import ValidationIssue, ValidationResult
from klarity.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "CATEGORIES",
    "EMOTIONAL_TAG_LABELS",
    "SAVINGS_CATEGORY",
    "EmotionalTag",
    "Target",
    "TargetListResult",
    "Transaction",
    "TransactionDeleteResult",
    "TransactionListResult",
    "TransactionType",
    "UserSettings",
    "default_settings",
    "epoch_ms",
    # Metric models
    "CategoryTotal",
    "DashboardStats",
    "MonthlyStats",
    "ProgressTier",
    "ReckoningSummary",
    "SpendingAnalysis",
    # Backup models
    "BackupSnapshot",
    "RestoreResult",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
