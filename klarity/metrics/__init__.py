"""Metrics package: pure calculations over a ledger snapshot."""

from klarity.metrics.engine import (
    CONFESSION_PHRASE,
    MetricsEngine,
    budget_progress,
    burn_rate,
    confession_accepted,
    current_month_totals,
    days_until_payday,
    emotional_breakdown,
    future_damage,
    is_crisis,
    liquidity,
    month_key,
    monthly_stats,
    next_payday,
    progress_tier,
    reckoning_summary,
    safe_daily_spend,
    shift_month,
    spending_analysis,
)

__all__ = [
    "CONFESSION_PHRASE",
    "MetricsEngine",
    "budget_progress",
    "burn_rate",
    "confession_accepted",
    "current_month_totals",
    "days_until_payday",
    "emotional_breakdown",
    "future_damage",
    "is_crisis",
    "liquidity",
    "month_key",
    "monthly_stats",
    "next_payday",
    "progress_tier",
    "reckoning_summary",
    "safe_daily_spend",
    "shift_month",
    "spending_analysis",
]
