"""
Metrics Engine

DESIGN DECISION: Every derived number is a pure function of a ledger
snapshot, the settings record and an explicit `now`.
The engine never reads or writes storage; callers pass it whatever the
stores returned and re-run it after every mutation.

GUARANTEES:
- Deterministic for a given snapshot and `now`
- Division by zero is defined (unconfigured budget reads as 0% progress,
  zero days to payday reads as 0 safe daily spend)
- Liquidity is all-time; everything else is scoped to a month or a window
"""

import calendar
import math
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

from klarity.config import MetricsSettings, get_settings
from klarity.models.ledger import (
    EmotionalTag,
    Transaction,
    UserSettings,
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

UNTAGGED = "Untagged"
CONFESSION_PHRASE = "SAYA BOROS"


# =============================================================================
# MONTH HELPERS
# =============================================================================

def month_key(day: date) -> str:
    """YYYY-MM of a date or datetime."""
    return f"{day.year:04d}-{day.month:02d}"


def shift_month(month: str, offset: int) -> str:
    """Move a YYYY-MM key by `offset` months (negative goes back)."""
    year, mon = (int(part) for part in month.split("-"))
    index = year * 12 + (mon - 1) + offset
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def in_month(transactions: Iterable[Transaction], month: str) -> list[Transaction]:
    return [t for t in transactions if month_key(t.date) == month]


def _sum(transactions: Iterable[Transaction]) -> int:
    return sum(t.amount for t in transactions)


# =============================================================================
# CORE METRICS
# =============================================================================

def burn_rate(
    transactions: Iterable[Transaction],
    now: datetime,
    window_days: int = 30,
) -> float:
    """
    Average daily spend over the trailing window.

    The window is continuous and measured on entry timestamps, not on
    attributed dates, so a back-dated entry made today still counts.
    """
    cutoff = epoch_ms(now - timedelta(days=window_days))
    recent = [t for t in transactions if t.is_expense and t.timestamp >= cutoff]
    return _sum(recent) / window_days


def _payday_in(year: int, month: int, payday: int) -> date:
    # Paydays past the end of a short month fall on its last day
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(payday, last_day))


def next_payday(payday_day_of_month: int, now: datetime) -> date:
    """
    The next payday strictly after today.

    On payday itself the countdown rolls to next month's payday.
    """
    this_month = _payday_in(now.year, now.month, payday_day_of_month)
    if now.day < this_month.day:
        return this_month
    if now.month == 12:
        return _payday_in(now.year + 1, 1, payday_day_of_month)
    return _payday_in(now.year, now.month + 1, payday_day_of_month)


def days_until_payday(payday_day_of_month: int, now: datetime) -> int:
    """Whole days (rounded up) from `now` to midnight of the next payday."""
    target = datetime.combine(
        next_payday(payday_day_of_month, now), time.min, tzinfo=now.tzinfo
    )
    remaining = (target - now).total_seconds() / 86400
    return max(0, math.ceil(remaining))


def future_damage(
    transactions: Iterable[Transaction],
    now: datetime,
    months: int = 12,
) -> int:
    """
    This calendar month's impulse spending times `months`.

    A straight extrapolation: one big impulse purchase this month
    dominates the projection.
    """
    current = month_key(now)
    impulsive = [
        t for t in transactions
        if t.is_expense and t.is_impulse and month_key(t.date) == current
    ]
    return _sum(impulsive) * months


def liquidity(transactions: Iterable[Transaction]) -> int:
    """All-time income minus all-time expense, fixed expenses included."""
    transactions = list(transactions)
    income = _sum(t for t in transactions if t.is_income)
    expense = _sum(t for t in transactions if t.is_expense)
    return income - expense


def budget_progress(variable_expense: int, monthly_budget: int) -> float:
    """
    Variable spending as a percentage of the budget, clamped to 0..100.

    An unconfigured budget (0 or less) reads as 0%.
    """
    if monthly_budget <= 0:
        return 0.0
    return max(0.0, min(100.0, variable_expense / monthly_budget * 100))


def progress_tier(
    progress: float,
    amber_percent: float = 75.0,
    rose_percent: float = 90.0,
) -> ProgressTier:
    if progress > rose_percent:
        return ProgressTier.ROSE
    if progress >= amber_percent:
        return ProgressTier.AMBER
    return ProgressTier.NORMAL


def monthly_stats(
    transactions: Iterable[Transaction],
    monthly_budget: int,
    month: str,
) -> MonthlyStats:
    """Fixed vs variable expenses, income, remaining budget for one month."""
    selected = in_month(transactions, month)
    expenses = [t for t in selected if t.is_expense]
    variable = _sum(t for t in expenses if not t.is_fixed_expense)
    fixed = _sum(t for t in expenses if t.is_fixed_expense)

    return MonthlyStats(
        month=month,
        variable_expense=variable,
        fixed_expense=fixed,
        income=_sum(t for t in selected if t.is_income),
        budget_remaining=monthly_budget - variable,
        budget_progress=budget_progress(variable, monthly_budget),
        transactions=selected,
    )


def safe_daily_spend(
    liquidity_amount: int,
    budget_remaining: int,
    days_left: int,
    is_current_month: bool,
) -> float:
    """
    What may be spent per day until payday without exceeding either the
    real cash position or the remaining budget.

    Only defined for the current month; 0 otherwise and 0 when no days remain.
    """
    if not is_current_month or days_left <= 0:
        return 0.0
    effective_available = min(liquidity_amount, budget_remaining)
    return max(0.0, effective_available / days_left)


def is_crisis(
    safe_daily: float,
    is_current_month: bool,
    threshold: int = 20000,
) -> bool:
    return is_current_month and safe_daily < threshold


def current_month_totals(
    transactions: Iterable[Transaction],
    now: datetime,
) -> dict[str, int]:
    """Income and expense of the calendar month containing `now`."""
    selected = in_month(transactions, month_key(now))
    return {
        "total_income": _sum(t for t in selected if t.is_income),
        "total_expense": _sum(t for t in selected if t.is_expense),
    }


# =============================================================================
# ANALYSIS & RECKONING
# =============================================================================

def emotional_breakdown(transactions: Iterable[Transaction]) -> dict[str, int]:
    """Expense total per emotional tag; untagged expenses under 'Untagged'."""
    totals: dict[str, int] = defaultdict(int)
    for t in transactions:
        if not t.is_expense:
            continue
        key = t.emotional_tag.value if t.emotional_tag else UNTAGGED
        totals[key] += t.amount
    return dict(totals)


def spending_analysis(transactions: Iterable[Transaction]) -> Optional[SpendingAnalysis]:
    """
    Impulse share and top category over every recorded expense.

    Returns None when nothing has been spent yet.
    """
    expenses = [t for t in transactions if t.is_expense]
    if not expenses:
        return None

    total = _sum(expenses)
    impulse_total = _sum(t for t in expenses if t.is_impulse)

    by_category: dict[str, int] = defaultdict(int)
    for t in expenses:
        by_category[t.category] += t.amount
    top_name, top_amount = max(by_category.items(), key=lambda item: item[1])

    return SpendingAnalysis(
        total_expense=total,
        impulse_total=impulse_total,
        impulse_percentage=impulse_total / total * 100 if total > 0 else 0.0,
        top_category=CategoryTotal(name=top_name, amount=top_amount),
        emotional_breakdown=emotional_breakdown(expenses),
    )


def reckoning_summary(
    transactions: Iterable[Transaction],
    settings: UserSettings,
    now: datetime,
    months: int = 12,
) -> ReckoningSummary:
    transactions = list(transactions)
    return ReckoningSummary(
        future_damage=future_damage(transactions, now, months),
        impulse_count=sum(
            1 for t in transactions if t.emotional_tag == EmotionalTag.IMPULSE
        ),
        shame_count=settings.shame_count,
    )


def confession_accepted(text: str) -> bool:
    """The reckoning screen unlocks once the user types the confession."""
    return text.upper() == CONFESSION_PHRASE


# =============================================================================
# ENGINE
# =============================================================================

class MetricsEngine:
    """
    Applies the configured thresholds to the pure metric functions.

    GUARANTEES:
    - Never mutates its inputs
    - Same snapshot, settings and `now` give the same result
    """

    def __init__(self, settings: Optional[MetricsSettings] = None):
        self._settings = settings or get_settings().metrics

    @property
    def settings(self) -> MetricsSettings:
        return self._settings

    def dashboard(
        self,
        transactions: list[Transaction],
        user_settings: UserSettings,
        month: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> DashboardStats:
        """
        Everything the home screen needs for `month` (default: current month).
        """
        now = now or datetime.now()
        month = month or month_key(now)
        is_current = month == month_key(now)
        cfg = self._settings

        stats = monthly_stats(transactions, user_settings.monthly_budget, month)
        cash = liquidity(transactions)
        days_left = days_until_payday(user_settings.payday_day_of_month, now)
        safe_daily = safe_daily_spend(
            cash, stats.budget_remaining, days_left, is_current
        )

        return DashboardStats(
            month=month,
            is_current_month=is_current,
            liquidity=cash,
            variable_expense=stats.variable_expense,
            fixed_expense=stats.fixed_expense,
            monthly_income=stats.income,
            budget_remaining=stats.budget_remaining,
            budget_progress=stats.budget_progress,
            progress_tier=progress_tier(
                stats.budget_progress,
                cfg.amber_progress_percent,
                cfg.rose_progress_percent,
            ),
            safe_daily=safe_daily,
            is_crisis=is_crisis(safe_daily, is_current, cfg.crisis_threshold),
            is_low_safe_daily=is_current and safe_daily < cfg.low_safe_daily_threshold,
            days_until_payday=days_left,
            burn_rate=burn_rate(transactions, now, cfg.burn_rate_window_days),
            future_damage=future_damage(transactions, now, cfg.damage_projection_months),
            monthly_transactions=stats.transactions,
        )

    def analysis(self, transactions: list[Transaction]) -> Optional[SpendingAnalysis]:
        return spending_analysis(transactions)

    def reckoning(
        self,
        transactions: list[Transaction],
        user_settings: UserSettings,
        now: Optional[datetime] = None,
    ) -> ReckoningSummary:
        return reckoning_summary(
            transactions,
            user_settings,
            now or datetime.now(),
            self._settings.damage_projection_months,
        )
