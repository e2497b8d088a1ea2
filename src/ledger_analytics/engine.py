"""Analytics engine: one pass from raw trades to every read model.

Pipeline::

    trades -> ledger -> symbol summaries -> overall stats
                     -> closing events   -> tag / strategy / monthly aggregates
                                         -> daily & monthly series -> equity curves
                                         -> weekday / holding / streaks -> insights
           summaries + prices + balance  -> position risks -> high-risk subset
           daily pnl + risk settings     -> daily-loss alert
           goals + monthly aggregates    -> goal progress

Each run re-derives everything from its inputs and allocates fresh output;
nothing is cached between runs.  Two runs over the same inputs (and the same
clock date) produce reports with the same :meth:`AnalyticsReport.fingerprint`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from .analytics.behavior import HoldingPeriodStats, WeekdayStats, holding_period_stats, weekday_stats
from .analytics.insights import InsightData, build_insights
from .analytics.overall import OverallStats, build_overall_stats
from .analytics.performance import (
    MonthlyActivity,
    StrategyPerf,
    TagPerf,
    monthly_activity,
    strategy_performance,
    tag_performance,
)
from .analytics.streaks import StreakStats, compute_streaks
from .analytics.symbols import SymbolSummary, summarize_symbols
from .analytics.timeseries import (
    EquityPoint,
    PnLPoint,
    daily_pnl_points,
    equity_curve,
    monthly_pnl_points,
    realized_for_day,
)
from .core.clock import IClock, WallClock
from .core.config import Settings
from .core.errors import MalformedTradeError
from .core.models import MonthlyGoal, RiskSettings, Strategy, Trade, to_decimal
from .core.serialize import canonical_json, payload_hash, to_jsonable
from .goals.progress import MonthlyProgress, monthly_progress
from .ledger.position import DataQualityIssue, Ledger, build_ledger, parse_trades
from .observability.logger import new_run_id
from .risk.concentration import ConcentrationEvaluator, PositionRisk
from .risk.daily_loss import DailyLossAlert, check_daily_loss

logger = logging.getLogger(__name__)


@dataclass
class AnalyticsReport:
    """Every read model produced by one engine run."""

    as_of: date
    ledger: Ledger
    symbol_summaries: list[SymbolSummary] = field(default_factory=list)
    tag_stats: list[TagPerf] = field(default_factory=list)
    strategy_stats: list[StrategyPerf] = field(default_factory=list)
    monthly_activity: dict[str, MonthlyActivity] = field(default_factory=dict)
    overall_stats: OverallStats | None = None
    daily_points: list[PnLPoint] = field(default_factory=list)
    monthly_points: list[PnLPoint] = field(default_factory=list)
    daily_equity: list[EquityPoint] = field(default_factory=list)
    monthly_equity: list[EquityPoint] = field(default_factory=list)
    weekday_stats: list[WeekdayStats] = field(default_factory=list)
    holding_period_stats: list[HoldingPeriodStats] = field(default_factory=list)
    streaks: StreakStats = field(default_factory=StreakStats)
    insights: InsightData | None = None
    position_risks: list[PositionRisk] = field(default_factory=list)
    high_risk_positions: list[PositionRisk] = field(default_factory=list)
    daily_pnl: Decimal = Decimal("0")
    daily_loss_alert: DailyLossAlert | None = None
    monthly_progress: list[MonthlyProgress] = field(default_factory=list)

    @property
    def rejected(self) -> list[MalformedTradeError]:
        return self.ledger.rejected

    @property
    def data_quality(self) -> list[DataQualityIssue]:
        return self.ledger.issues

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "as_of": self.as_of.isoformat(),
            "ledger": {
                symbol: [entry.to_dict() for entry in sym.entries]
                for symbol, sym in self.ledger.symbols.items()
            },
            "closing_events": to_jsonable(self.ledger.closing_events),
            "rejected": [err.to_dict() for err in self.rejected],
            "data_quality": to_jsonable(self.data_quality),
        }
        for name in (
            "symbol_summaries",
            "tag_stats",
            "strategy_stats",
            "monthly_activity",
            "overall_stats",
            "daily_points",
            "monthly_points",
            "daily_equity",
            "monthly_equity",
            "weekday_stats",
            "holding_period_stats",
            "streaks",
            "insights",
            "position_risks",
            "high_risk_positions",
            "daily_pnl",
            "daily_loss_alert",
            "monthly_progress",
        ):
            data[name] = to_jsonable(getattr(self, name))
        return data

    def to_json(self, *, indent: int | None = None) -> str:
        return canonical_json(self.to_dict(), indent=indent)

    def fingerprint(self) -> str:
        """SHA-256 of the canonical JSON rendering."""
        return payload_hash(self.to_dict())


class AnalyticsEngine:
    """Derives a full :class:`AnalyticsReport` from a trade list.

    Usage::

        engine = AnalyticsEngine(settings=load_settings("ledger.toml"))
        report = engine.run(trades, current_prices={"AAPL": 190}, account_balance=50_000)
        print(report.overall_stats.total_pnl)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        clock: IClock | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._clock = clock or WallClock()
        self._concentration = ConcentrationEvaluator(
            bands=self._settings.risk_bands,
            value_unpriced_at_cost=self._settings.value_unpriced_at_cost,
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    def run(
        self,
        trades: Iterable[Trade],
        current_prices: Mapping[str, Any] | None = None,
        account_balance: Decimal | float | int = 0,
        risk_settings: RiskSettings | None = None,
        monthly_goals: Iterable[MonthlyGoal] = (),
        strategies: Iterable[Strategy] = (),
        daily_pnl: Decimal | float | int | None = None,
    ) -> AnalyticsReport:
        """Run the whole pipeline.

        Args:
            trades: Trades in any order.
            current_prices: Latest price per symbol; missing symbols stay
                unpriced (valuation fields ``None``).
            account_balance: Reference capital for risk percentages.
            risk_settings: Limits; defaults to ``settings.default_risk``.
            monthly_goals: Goals to track over the trailing window.
            strategies: Strategy templates used to name strategy rows.
            daily_pnl: Today's PnL for the loss-limit check.  Defaults to
                today's realized PnL from the daily series.

        Raises:
            MalformedTradeError: Only in strict mode.
        """
        run_id = new_run_id()
        settings = self._settings
        today = self._clock.today()
        prices = dict(current_prices or {})
        balance = to_decimal(account_balance)
        risk = risk_settings or settings.default_risk

        ledger = build_ledger(
            trades,
            intraday_order=settings.intraday_order,
            realized_pnl_decimals=settings.realized_pnl_decimals,
            strict=settings.strict,
        )
        events = ledger.closing_events

        summaries = summarize_symbols(ledger, prices)
        streaks = compute_streaks(events)
        overall = build_overall_stats(summaries, events, streaks.current)

        tags = tag_performance(events)
        activity = monthly_activity(events)
        daily = daily_pnl_points(events)
        monthly = monthly_pnl_points(events)
        daily_curve = equity_curve(daily)
        weekdays = weekday_stats(events)

        risks = self._concentration.evaluate(summaries, prices, balance, risk)
        today_pnl = (
            realized_for_day(daily, today) if daily_pnl is None else to_decimal(daily_pnl)
        )

        report = AnalyticsReport(
            as_of=today,
            ledger=ledger,
            symbol_summaries=summaries,
            tag_stats=tags,
            strategy_stats=strategy_performance(events, strategies),
            monthly_activity=activity,
            overall_stats=overall,
            daily_points=daily,
            monthly_points=monthly,
            daily_equity=daily_curve,
            monthly_equity=equity_curve(monthly),
            weekday_stats=weekdays,
            holding_period_stats=holding_period_stats(events),
            streaks=streaks,
            insights=build_insights(events, weekdays, tags, daily_curve),
            position_risks=risks,
            high_risk_positions=self._concentration.high_risk(risks),
            daily_pnl=today_pnl,
            daily_loss_alert=check_daily_loss(today_pnl, balance, risk),
            monthly_progress=monthly_progress(
                monthly_goals,
                monthly,
                activity,
                today,
                window_months=settings.goals.window_months,
            ),
        )

        logger.info(
            "Analytics run %s: %d trades, %d symbols, %d closings, %d rejected, "
            "%d oversells, realized=%s",
            run_id,
            ledger.trade_count,
            len(summaries),
            len(events),
            len(ledger.rejected),
            len(ledger.issues),
            overall.total_realized_pnl,
        )
        return report

    def run_records(
        self,
        records: Iterable[Mapping[str, Any]],
        **kwargs: Any,
    ) -> AnalyticsReport:
        """Parse raw trade records, then :meth:`run`.

        Records that fail to parse are reported in ``report.rejected``
        ahead of the trades the ledger itself rejected.

        Raises:
            MalformedTradeError: In strict mode, for the first bad record.
        """
        trades, errors = parse_trades(records)
        if errors and self._settings.strict:
            raise errors[0]
        report = self.run(trades, **kwargs)
        report.ledger.rejected[:0] = errors
        return report
