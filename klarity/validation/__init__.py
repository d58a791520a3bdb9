"""Validation package."""

from klarity.validation.validator import LedgerValidator

__all__ = ["LedgerValidator"]
