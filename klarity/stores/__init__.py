"""Stores over the key-value substrate: ledger, settings, targets."""

from klarity.stores.ledger import LedgerStore, sort_transactions
from klarity.stores.settings import SettingsStore
from klarity.stores.targets import TargetStore

__all__ = [
    "LedgerStore",
    "SettingsStore",
    "TargetStore",
    "sort_transactions",
]
