"""Tag, strategy and monthly performance aggregates.

A closing trade carrying tags ``{A, B}`` counts once for ``A`` and once for
``B``; totals across tags therefore need not add up to the overall total.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from ..core.models import Strategy
from ..core.serialize import dataclass_to_dict
from ..ledger.position import ClosingEvent
from .counters import OutcomeCounter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TagPerf:
    tag: str
    trade_count: int
    win_count: int
    loss_count: int
    even_count: int
    realized_pnl: Decimal
    avg_pnl_per_trade: Decimal
    win_rate: float

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)


@dataclass(frozen=True)
class StrategyPerf:
    strategy_id: str
    name: str | None
    trade_count: int
    win_count: int
    loss_count: int
    even_count: int
    realized_pnl: Decimal
    avg_pnl_per_trade: Decimal
    win_rate: float
    max_win: Decimal
    max_loss: Decimal

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)


@dataclass(frozen=True)
class MonthlyActivity:
    """Closing activity of one calendar month (``YYYY-MM``)."""

    month: str
    trade_count: int
    win_count: int
    realized_pnl: Decimal
    win_rate: float

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)


def tag_performance(events: Iterable[ClosingEvent]) -> list[TagPerf]:
    """Aggregate closings per tag, most active tags first."""
    counters: dict[str, OutcomeCounter] = defaultdict(OutcomeCounter)
    for event in events:
        for tag in event.tags:
            counters[tag].record(event)

    rows = [
        TagPerf(
            tag=tag,
            trade_count=c.trades,
            win_count=c.wins,
            loss_count=c.losses,
            even_count=c.evens,
            realized_pnl=c.total_pnl,
            avg_pnl_per_trade=c.avg_pnl,
            win_rate=c.win_rate,
        )
        for tag, c in counters.items()
    ]
    rows.sort(key=lambda r: (-r.trade_count, r.tag))
    return rows


def strategy_performance(
    events: Iterable[ClosingEvent],
    strategies: Iterable[Strategy] = (),
) -> list[StrategyPerf]:
    """Aggregate closings per strategy id; untagged closings are skipped."""
    names = {s.id: s.name for s in strategies}
    counters: dict[str, OutcomeCounter] = defaultdict(OutcomeCounter)
    for event in events:
        if event.strategy_id:
            counters[event.strategy_id].record(event)

    unknown = sorted(sid for sid in counters if names and sid not in names)
    if unknown:
        logger.debug("Closings reference unknown strategies: %s", unknown)

    rows = [
        StrategyPerf(
            strategy_id=sid,
            name=names.get(sid),
            trade_count=c.trades,
            win_count=c.wins,
            loss_count=c.losses,
            even_count=c.evens,
            realized_pnl=c.total_pnl,
            avg_pnl_per_trade=c.avg_pnl,
            win_rate=c.win_rate,
            max_win=c.max_win,
            max_loss=c.max_loss,
        )
        for sid, c in counters.items()
    ]
    rows.sort(key=lambda r: (-r.trade_count, r.strategy_id))
    return rows


def monthly_activity(events: Iterable[ClosingEvent]) -> dict[str, MonthlyActivity]:
    """Closing counts and win rate per month key, in ascending month order."""
    counters: dict[str, OutcomeCounter] = defaultdict(OutcomeCounter)
    for event in events:
        counters[event.month_key].record(event)
    return {
        month: MonthlyActivity(
            month=month,
            trade_count=c.trades,
            win_count=c.wins,
            realized_pnl=c.total_pnl,
            win_rate=c.win_rate,
        )
        for month, c in sorted(counters.items())
    }
