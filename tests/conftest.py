"""
Shared fixtures.

Time is injected everywhere: stores and flows get `clock`, metric
functions get `now`. Nothing in the tests patches the real clock.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional

import pytest

from klarity.audit import AuditLogger
from klarity.models.ledger import EmotionalTag, Transaction, TransactionType, epoch_ms
from klarity.orchestrator import KlarityApp, create_app_components
from klarity.services.storage import InMemoryKeyValueStore
from klarity.stores import LedgerStore, SettingsStore, TargetStore


# Tuesday 10 December 2024, 14:30 UTC
NOW = datetime(2024, 12, 10, 14, 30, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger()


@pytest.fixture
def settings_store(kv, clock, audit_logger) -> SettingsStore:
    return SettingsStore(kv, clock=clock, audit_logger=audit_logger)


@pytest.fixture
def ledger(kv, settings_store, clock, audit_logger) -> LedgerStore:
    return LedgerStore(kv, settings_store, clock=clock, audit_logger=audit_logger)


@pytest.fixture
def target_store(kv, audit_logger) -> TargetStore:
    return TargetStore(kv, audit_logger=audit_logger)


@pytest.fixture
def app(kv, clock) -> KlarityApp:
    return create_app_components(kv=kv, clock=clock)


@pytest.fixture
def make_transaction() -> Callable[..., Transaction]:
    """
    Factory for transactions dated relative to NOW.

    Defaults to a variable, untagged expense on NOW's date, entered at NOW.
    """
    def _make(
        amount: int = 10000,
        type: TransactionType = TransactionType.EXPENSE,
        day: Optional[date] = None,
        tag: Optional[EmotionalTag] = None,
        fixed: bool = False,
        entered: Optional[datetime] = None,
        category: str = "Makanan & Minuman",
        reason: str = "makan siang",
        **extra,
    ) -> Transaction:
        return Transaction(
            amount=amount,
            type=type,
            category=category,
            emotional_tag=tag,
            reason=reason,
            date=day or NOW.date(),
            timestamp=epoch_ms(entered or NOW),
            is_fixed_expense=fixed,
            **extra,
        )

    return _make
