"""Tests for monthly goal progress."""

from datetime import date
from decimal import Decimal

from ledger_analytics.analytics.performance import monthly_activity
from ledger_analytics.analytics.timeseries import PnLPoint, monthly_pnl_points
from ledger_analytics.core.models import MonthlyGoal
from ledger_analytics.goals.progress import (
    monthly_progress,
    progress_percent,
    trailing_month_keys,
)
from ledger_analytics.ledger.position import build_ledger


def test_trailing_month_keys_cross_year():
    assert trailing_month_keys(date(2024, 2, 29), 4) == [
        "2024-02",
        "2024-01",
        "2023-12",
        "2023-11",
    ]


def test_trailing_month_keys_default_six():
    assert len(trailing_month_keys(date(2024, 6, 1))) == 6


def test_progress_percent():
    assert progress_percent(Decimal("750000"), Decimal("1000000")) == 75.0
    assert progress_percent(Decimal("10"), Decimal("0")) == 0.0
    assert progress_percent(3, 0) == 0.0
    assert progress_percent(Decimal("-50"), Decimal("100")) == -50.0


class TestMonthlyProgress:

    def test_pnl_progress_against_goal(self):
        goal = MonthlyGoal(year=2024, month=3, target_pnl=Decimal("1000000"))
        points = [PnLPoint("2024-03", "Mar 2024", Decimal("750000"))]
        rows = monthly_progress([goal], points, {}, date(2024, 3, 15))
        current = rows[0]
        assert current.month == "2024-03"
        assert current.goal == goal
        assert current.actual_pnl == Decimal("750000")
        assert current.pnl_progress == 75.0
        assert current.trades_progress == 0.0

    def test_window_most_recent_first(self, mixed_trades):
        events = build_ledger(mixed_trades).closing_events
        goals = [
            MonthlyGoal(year=2024, month=2, target_trades=4, target_win_rate=50.0),
        ]
        rows = monthly_progress(
            goals,
            monthly_pnl_points(events),
            monthly_activity(events),
            date(2024, 3, 15),
        )
        assert [r.month for r in rows] == [
            "2024-03", "2024-02", "2024-01", "2023-12", "2023-11", "2023-10",
        ]
        march, feb = rows[0], rows[1]
        assert not march.has_goal
        assert march.actual_trades == 2
        assert march.actual_pnl == Decimal("125")
        assert march.pnl_progress == 0.0
        assert feb.has_goal
        assert feb.trades_progress == 50.0
        assert feb.win_rate_progress == 100.0
        assert rows[-1].actual_pnl == 0
        assert rows[-1].actual_trades == 0

    def test_goals_outside_window_ignored(self):
        goal = MonthlyGoal(year=2023, month=1, target_pnl=Decimal("10"))
        rows = monthly_progress([goal], [], {}, date(2024, 3, 15))
        assert all(r.goal is None for r in rows)
