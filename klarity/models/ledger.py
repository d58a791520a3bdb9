"""
Core Data Models for Klarity

These models define the schemas for everything held in the on-device
key-value store: transactions, savings targets and the user settings record.

DESIGN DECISION: Python attributes are snake_case, the stored JSON is
camelCase. The wire format is the one the original app wrote to local
storage, so old backups restore without a migration step.
"""

import datetime as dt
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)
from pydantic.alias_generators import to_camel


def epoch_ms(moment: dt.datetime) -> int:
    """Milliseconds since the epoch, the unit of every stored timestamp."""
    return int(moment.timestamp() * 1000)


def new_id() -> str:
    return str(uuid4())


_WIRE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
)


# =============================================================================
# VOCABULARIES
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a cash movement."""
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class EmotionalTag(str, Enum):
    """
    Why the money left the wallet.

    Only meaningful on expenses. IMPULSE is the one that matters:
    deleting an impulse purchase bumps the shame counter and impulse
    spending drives the future damage projection.
    """
    NEED = "Need"
    IMPULSE = "Impulse"
    HUNGER = "Hunger"
    SOCIAL = "Social"
    EMERGENCY = "Emergency"
    BOREDOM = "Boredom"


# Suggested categories. Category is a free string; older data and
# user-entered labels outside this list are stored as-is.
CATEGORIES = [
    "Makanan & Minuman",
    "Transportasi",
    "Tempat Tinggal",
    "Hiburan",
    "Belanja",
    "Kesehatan",
    "Edukasi",
    "Investasi",
    "Bayar Utang",
    "Lainnya",
]

SAVINGS_CATEGORY = "Investasi"

EMOTIONAL_TAG_LABELS = {
    EmotionalTag.NEED: "Butuh",
    EmotionalTag.IMPULSE: "Impulsif",
    EmotionalTag.HUNGER: "Lapar",
    EmotionalTag.SOCIAL: "Sosial",
    EmotionalTag.BOREDOM: "Bosan",
    EmotionalTag.EMERGENCY: "Darurat",
}


# =============================================================================
# ENTITIES
# =============================================================================

class Transaction(BaseModel):
    """
    One recorded cash movement.

    `date` is the calendar day the money is attributed to; `timestamp` is
    when it was entered. They differ for back-dated entries, which is what
    `is_delayed_entry` records (set once at creation, never recomputed).
    """
    model_config = _WIRE_CONFIG

    id: str = Field(
        default_factory=new_id,
        description="Opaque unique identifier"
    )
    amount: int = Field(
        ...,
        description="Amount in the smallest currency unit"
    )
    type: TransactionType
    category: str = Field(
        default=CATEGORIES[0],
        description="Free-form category label"
    )
    emotional_tag: Optional[EmotionalTag] = None
    reason: str = Field(
        default="",
        description="One sentence justification; may be empty"
    )
    date: dt.date
    timestamp: int = Field(
        default_factory=lambda: epoch_ms(dt.datetime.now()),
        description="Creation instant in epoch milliseconds"
    )
    is_delayed_entry: bool = False
    is_fixed_expense: bool = False

    @model_validator(mode='after')
    def coerce_fixed_flag(self) -> 'Transaction':
        """Only expenses can be fixed."""
        if self.type != TransactionType.EXPENSE and self.is_fixed_expense:
            self.is_fixed_expense = False
        return self

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    @property
    def is_impulse(self) -> bool:
        return self.emotional_tag == EmotionalTag.IMPULSE

    def to_wire(self) -> dict:
        """JSON-ready dict in the stored (camelCase) layout."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Target(BaseModel):
    """A savings goal. `collected_amount` may overshoot `target_amount`."""
    model_config = _WIRE_CONFIG

    id: str = Field(default_factory=new_id)
    name: str
    target_amount: int
    collected_amount: int = Field(default=0, ge=0)
    deadline: Optional[dt.date] = None

    @property
    def progress_percent(self) -> float:
        if self.target_amount <= 0:
            return 0.0
        return min(100.0, self.collected_amount / self.target_amount * 100)

    @property
    def is_reached(self) -> bool:
        return self.target_amount > 0 and self.collected_amount >= self.target_amount

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class UserSettings(BaseModel):
    """
    The single settings record of an install.

    A zero budget or an empty life anchor means the user has not finished
    onboarding yet.
    """
    model_config = _WIRE_CONFIG

    monthly_income: int = 0
    monthly_budget: int = 0
    payday_day_of_month: int = Field(default=1, ge=1, le=31)
    life_anchor: str = ""
    shame_count: int = Field(default=0, ge=0)
    install_date: int = Field(
        default_factory=lambda: epoch_ms(dt.datetime.now()),
        description="Install instant in epoch milliseconds"
    )

    @property
    def needs_onboarding(self) -> bool:
        return self.monthly_budget == 0 or not self.life_anchor

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def default_settings(install_date: Optional[int] = None) -> UserSettings:
    """Fresh-install settings. `install_date` defaults to now."""
    if install_date is None:
        return UserSettings()
    return UserSettings(install_date=install_date)


# =============================================================================
# STORE RESULTS
# =============================================================================

class TransactionListResult(BaseModel):
    """
    Outcome of a ledger mutation.

    On failure `transactions` holds the last successfully persisted list
    (re-read from the store), never the attempted state.
    """

    transactions: list[Transaction] = Field(default_factory=list)
    success: bool = True
    error_message: Optional[str] = None


class TransactionDeleteResult(TransactionListResult):
    """Ledger deletion outcome; `shame_triggered` tells the UI to refresh settings."""

    shame_triggered: bool = False


class TargetListResult(BaseModel):
    """Outcome of a target mutation."""

    targets: list[Target] = Field(default_factory=list)
    success: bool = True
    error_message: Optional[str] = None
