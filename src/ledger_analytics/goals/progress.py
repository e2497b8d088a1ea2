"""Progress of realized results against monthly goals.

Covers a trailing window of calendar months ending with the current month
(taken from the injected clock), most recent first.  Months without a goal
are still reported so the caller can prompt for one.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from ..analytics.performance import MonthlyActivity
from ..analytics.timeseries import PnLPoint
from ..core.models import MonthlyGoal
from ..core.serialize import dataclass_to_dict

_ZERO = Decimal("0")


@dataclass(frozen=True)
class MonthlyProgress:
    month: str                  # YYYY-MM
    goal: MonthlyGoal | None
    actual_pnl: Decimal
    actual_trades: int
    actual_win_rate: float
    pnl_progress: float         # percent of target, 0 without a target
    trades_progress: float
    win_rate_progress: float

    @property
    def has_goal(self) -> bool:
        return self.goal is not None

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)


def progress_percent(actual: Decimal | float | int, target: Decimal | float | int) -> float:
    """``actual / target * 100``; 0.0 when the target is zero or negative."""
    if target is None or target <= 0:
        return 0.0
    return float(Decimal(str(actual)) / Decimal(str(target)) * 100)


def trailing_month_keys(today: date, months: int = 6) -> list[str]:
    """``months`` month keys ending with ``today``'s month, newest first."""
    keys: list[str] = []
    year, month = today.year, today.month
    for _ in range(max(months, 0)):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return keys


def monthly_progress(
    goals: Iterable[MonthlyGoal],
    monthly_points: Sequence[PnLPoint],
    activity: Mapping[str, MonthlyActivity],
    today: date,
    window_months: int = 6,
) -> list[MonthlyProgress]:
    """Join goals with monthly realized PnL and closing activity."""
    goals_by_month: dict[str, MonthlyGoal] = {}
    for goal in goals:
        goals_by_month[goal.month_key] = goal  # last one wins
    pnl_by_month = {p.key: p.value for p in monthly_points}

    rows: list[MonthlyProgress] = []
    for key in trailing_month_keys(today, window_months):
        goal = goals_by_month.get(key)
        act = activity.get(key)
        actual_pnl = pnl_by_month.get(key, _ZERO)
        actual_trades = act.trade_count if act else 0
        actual_win_rate = act.win_rate if act else 0.0

        if goal is None:
            pnl_pg = trades_pg = win_rate_pg = 0.0
        else:
            pnl_pg = progress_percent(actual_pnl, goal.target_pnl)
            trades_pg = progress_percent(actual_trades, goal.target_trades)
            win_rate_pg = progress_percent(actual_win_rate, goal.target_win_rate)

        rows.append(
            MonthlyProgress(
                month=key,
                goal=goal,
                actual_pnl=actual_pnl,
                actual_trades=actual_trades,
                actual_win_rate=actual_win_rate,
                pnl_progress=pnl_pg,
                trades_progress=trades_pg,
                win_rate_progress=win_rate_pg,
            )
        )
    return rows
