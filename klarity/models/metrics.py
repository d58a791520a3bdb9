"""
Metric Result Models

Plain containers for what the metrics engine derives from a ledger
snapshot. Nothing here is persisted; these are recomputed on every
snapshot change.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from klarity.models.ledger import Transaction


class ProgressTier(str, Enum):
    """Colour band of the monthly budget bar."""
    NORMAL = "primary"
    AMBER = "amber"
    ROSE = "rose"


class MonthlyStats(BaseModel):
    """Aggregates for one calendar month (not necessarily the current one)."""

    month: str = Field(
        ...,
        pattern=r"^\d{4}-\d{2}$",
        description="Month as YYYY-MM"
    )
    variable_expense: int = 0
    fixed_expense: int = 0
    income: int = 0
    budget_remaining: int = 0
    budget_progress: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        description="Variable spending as a percentage of the budget, clamped"
    )
    transactions: list[Transaction] = Field(default_factory=list)


class DashboardStats(BaseModel):
    """
    Everything the home screen shows for a selected month.

    `safe_daily` and `is_crisis` are only meaningful when
    `is_current_month` is true; otherwise they are 0 / False.
    """

    month: str
    is_current_month: bool
    liquidity: int
    variable_expense: int
    fixed_expense: int
    monthly_income: int
    budget_remaining: int
    budget_progress: float
    progress_tier: ProgressTier
    safe_daily: float
    is_crisis: bool
    is_low_safe_daily: bool
    days_until_payday: int
    burn_rate: float
    future_damage: int
    monthly_transactions: list[Transaction] = Field(default_factory=list)


class CategoryTotal(BaseModel):
    name: str
    amount: int


class SpendingAnalysis(BaseModel):
    """Arithmetic 'brutal truth' over all recorded expenses."""

    total_expense: int
    impulse_total: int
    impulse_percentage: float
    top_category: Optional[CategoryTotal] = None
    emotional_breakdown: dict[str, int] = Field(default_factory=dict)


class ReckoningSummary(BaseModel):
    """Numbers shown on the lock screen the user must confess past."""

    future_damage: int
    impulse_count: int
    shame_count: int
