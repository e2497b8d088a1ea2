"""Aggregates, time series and behavioural analytics over the ledger."""

from .behavior import HoldingPeriodStats, WeekdayStats, holding_bucket, holding_period_stats, weekday_stats
from .insights import InsightData, build_insights
from .overall import OverallStats, build_overall_stats
from .performance import (
    MonthlyActivity,
    StrategyPerf,
    TagPerf,
    monthly_activity,
    strategy_performance,
    tag_performance,
)
from .streaks import Streak, StreakStats, compute_streaks
from .symbols import SymbolSummary, summarize_symbols
from .timeseries import (
    EquityPoint,
    PnLPoint,
    daily_pnl_points,
    equity_curve,
    monthly_pnl_points,
    realized_for_day,
)

__all__ = [
    "EquityPoint",
    "HoldingPeriodStats",
    "InsightData",
    "MonthlyActivity",
    "OverallStats",
    "PnLPoint",
    "StrategyPerf",
    "Streak",
    "StreakStats",
    "SymbolSummary",
    "TagPerf",
    "WeekdayStats",
    "build_insights",
    "build_overall_stats",
    "compute_streaks",
    "daily_pnl_points",
    "equity_curve",
    "holding_bucket",
    "holding_period_stats",
    "monthly_activity",
    "monthly_pnl_points",
    "realized_for_day",
    "strategy_performance",
    "summarize_symbols",
    "tag_performance",
    "weekday_stats",
]
