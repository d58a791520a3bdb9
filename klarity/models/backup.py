"""
Backup Models

A backup is the whole on-device state in one JSON document:

    {
      "transactions": [...],
      "targets": [...],
      "settings": {...},
      "timestamp": "2024-12-01T10:00:00.000Z",
      "version": "1.1"
    }
"""

from typing import Optional

from pydantic import BaseModel, Field

from klarity.models.ledger import Target, Transaction, UserSettings


class BackupSnapshot(BaseModel):
    """Portable copy of transactions, targets and settings."""

    transactions: list[Transaction] = Field(default_factory=list)
    targets: list[Target] = Field(default_factory=list)
    settings: UserSettings = Field(default_factory=UserSettings)
    timestamp: str = Field(
        ...,
        description="Export instant, ISO-8601"
    )
    version: str = Field(
        ...,
        description="Backup format version"
    )

    def to_wire(self) -> dict:
        return {
            "transactions": [t.to_wire() for t in self.transactions],
            "targets": [t.to_wire() for t in self.targets],
            "settings": self.settings.to_wire(),
            "timestamp": self.timestamp,
            "version": self.version,
        }


class RestoreResult(BaseModel):
    """Outcome of importing a backup file."""

    success: bool
    error_message: Optional[str] = None
    transactions_restored: int = 0
    targets_restored: int = 0
    reload_required: bool = Field(
        default=False,
        description="True whenever stored state may have changed; callers re-read everything"
    )
