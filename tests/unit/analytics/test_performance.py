"""Tests for tag, strategy and monthly aggregates."""

from decimal import Decimal

from ledger_analytics.analytics.performance import (
    monthly_activity,
    strategy_performance,
    tag_performance,
)
from ledger_analytics.core.models import Strategy
from ledger_analytics.ledger.position import build_ledger


class TestTagPerformance:

    def test_rows_sorted_by_count_then_tag(self, mixed_trades):
        rows = tag_performance(build_ledger(mixed_trades).closing_events)
        assert [r.tag for r in rows] == ["breakout", "dip", "news"]

    def test_multi_tag_closing_counts_for_each_tag(self, mixed_trades):
        rows = {r.tag: r for r in tag_performance(build_ledger(mixed_trades).closing_events)}
        assert rows["breakout"].trade_count == 2
        assert rows["breakout"].realized_pnl == 0
        assert rows["breakout"].win_rate == 50.0
        assert rows["news"].trade_count == 1
        assert rows["news"].realized_pnl == Decimal("-50")
        assert rows["dip"].realized_pnl == Decimal("125")
        assert rows["dip"].avg_pnl_per_trade == Decimal("62.5")

    def test_no_tags_no_rows(self, scale_in_trades):
        events = build_ledger(scale_in_trades[:2]).closing_events
        assert tag_performance(events) == []


class TestStrategyPerformance:

    def test_named_rows(self, mixed_trades):
        events = build_ledger(mixed_trades).closing_events
        rows = strategy_performance(events, [Strategy(id="s1", name="Breakout")])
        assert [r.strategy_id for r in rows] == ["s1", "s2"]
        s1, s2 = rows
        assert s1.name == "Breakout"
        assert s1.trade_count == 2
        assert s1.max_win == Decimal("50")
        assert s1.max_loss == Decimal("-50")
        assert s2.name is None
        assert s2.realized_pnl == Decimal("100")

    def test_untagged_closings_skipped(self, mixed_trades):
        rows = strategy_performance(build_ledger(mixed_trades).closing_events)
        assert sum(r.trade_count for r in rows) == 3


class TestMonthlyActivity:

    def test_per_month(self, mixed_trades):
        activity = monthly_activity(build_ledger(mixed_trades).closing_events)
        assert list(activity) == ["2024-02", "2024-03"]
        feb, mar = activity["2024-02"], activity["2024-03"]
        assert feb.trade_count == 2
        assert feb.win_rate == 50.0
        assert feb.realized_pnl == 0
        assert mar.win_count == 2
        assert mar.realized_pnl == Decimal("125")
