"""
Input Validation

DESIGN DECISION: The stores trust their callers. Amount positivity,
target sanity and backup acceptability are checked here, before anything
reaches a store, and reported as issues for the caller to show.

Checks fall into two groups:

STRUCTURAL:
- Positive amounts, non-empty names, payload shapes
- Errors block the action

ADVISORY:
- Empty reasons, future dates, categories outside the suggested list
- Warnings and info are shown but never block

IMPORTANT: Validation NEVER silently fixes issues.
"""

from datetime import date, datetime
from typing import Any, Optional

from klarity.models.ledger import CATEGORIES, Target, Transaction, UserSettings
from klarity.models.validation import ValidationIssue, ValidationResult


class LedgerValidator:
    """Validates transactions, targets, settings and backup payloads."""

    def __init__(self, today: Optional[date] = None):
        """
        Args:
            today: Reference day for future-date checks; defaults to the
                   current local date at validation time.
        """
        self._today = today

    def _reference_day(self) -> date:
        return self._today or datetime.now().date()

    def validate_transaction(self, transaction: Transaction) -> ValidationResult:
        issues = []

        if transaction.amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
                suggested_fix="Enter the amount without a minus sign",
            ))

        if not transaction.reason.strip():
            issues.append(ValidationIssue(
                field="reason",
                issue_type="missing",
                message="No reason given for this transaction",
                severity="warning",
                suggested_fix="One honest sentence is enough",
            ))

        if transaction.is_income and transaction.emotional_tag is not None:
            issues.append(ValidationIssue(
                field="emotional_tag",
                issue_type="ignored",
                message="Emotional tags only apply to expenses",
                severity="info",
            ))

        if transaction.date > self._reference_day():
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Transaction is dated in the future ({transaction.date})",
                severity="warning",
            ))

        if transaction.category not in CATEGORIES:
            issues.append(ValidationIssue(
                field="category",
                issue_type="custom_category",
                message=f"'{transaction.category}' is not one of the suggested categories",
                severity="info",
            ))

        return ValidationResult(subject="transaction", issues=issues)

    def validate_target(self, target: Target) -> ValidationResult:
        issues = []

        if not target.name.strip():
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Target needs a name",
                severity="error",
            ))

        if target.target_amount <= 0:
            issues.append(ValidationIssue(
                field="target_amount",
                issue_type="invalid_value",
                message="Target amount must be greater than zero",
                severity="error",
            ))

        if target.deadline and target.deadline < self._reference_day():
            issues.append(ValidationIssue(
                field="deadline",
                issue_type="past_date",
                message="Deadline has already passed",
                severity="warning",
            ))

        return ValidationResult(subject="target", issues=issues)

    def validate_deposit(self, amount: int) -> ValidationResult:
        issues = []
        if amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Deposit must be greater than zero",
                severity="error",
            ))
        return ValidationResult(subject="deposit", issues=issues)

    def validate_settings(self, settings: UserSettings) -> ValidationResult:
        issues = []

        if settings.monthly_budget <= 0:
            issues.append(ValidationIssue(
                field="monthly_budget",
                issue_type="missing",
                message="Monthly budget is not set",
                severity="error",
                suggested_fix="Set the amount you allow yourself between paydays",
            ))

        if not settings.life_anchor.strip():
            issues.append(ValidationIssue(
                field="life_anchor",
                issue_type="missing",
                message="Life anchor is empty",
                severity="error",
                suggested_fix="Write down what you are saving for",
            ))

        return ValidationResult(subject="settings", issues=issues)

    def validate_backup_payload(self, data: Any) -> ValidationResult:
        """
        Acceptance rule for backup files: an object holding either a
        `transactions` array or a `settings` object. Anything else is
        rejected before any destructive step.
        """
        issues = []

        if not isinstance(data, dict):
            issues.append(ValidationIssue(
                field="backup",
                issue_type="invalid_format",
                message="Backup must be a JSON object",
                severity="error",
            ))
            return ValidationResult(subject="backup", issues=issues)

        has_transactions = isinstance(data.get("transactions"), list)
        has_settings = isinstance(data.get("settings"), dict)

        if not (has_transactions or has_settings):
            issues.append(ValidationIssue(
                field="backup",
                issue_type="not_restorable",
                message="File is not a valid Klarity backup",
                severity="error",
                suggested_fix="Choose a file created with 'Backup Data'",
            ))
            return ValidationResult(subject="backup", issues=issues)

        if not has_transactions:
            issues.append(ValidationIssue(
                field="transactions",
                issue_type="missing",
                message="Backup has no transactions; the ledger will be emptied",
                severity="warning",
            ))
        if not isinstance(data.get("targets"), list):
            issues.append(ValidationIssue(
                field="targets",
                issue_type="missing",
                message="Backup has no targets; all targets will be removed",
                severity="warning",
            ))
        if not has_settings:
            issues.append(ValidationIssue(
                field="settings",
                issue_type="missing",
                message="Backup has no settings; defaults will be used",
                severity="warning",
            ))

        return ValidationResult(subject="backup", issues=issues)
