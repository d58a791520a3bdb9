"""Backup and restore package."""

from klarity.backup.controller import BackupController

__all__ = ["BackupController"]
