"""Superlatives distilled from the other analytics.

Every trade in the journal is a long trade: a BUY opens or adds, a SELL
reduces or closes.  All closings therefore count toward the long win rate
and the short win rate is always 0.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from ..core.serialize import dataclass_to_dict
from ..ledger.position import ClosingEvent
from .behavior import WeekdayStats
from .counters import OutcomeCounter
from .performance import TagPerf
from .timeseries import EquityPoint, max_drawdown

_ZERO = Decimal("0")


@dataclass(frozen=True)
class InsightData:
    best_day: int | None        # weekday index, None without closings
    best_tag: str | None        # None unless some tag is net positive
    long_win_rate: float
    short_win_rate: float
    max_win: Decimal            # >= 0
    max_loss: Decimal           # <= 0
    max_drawdown: Decimal       # <= 0
    max_drawdown_pct: float     # <= 0

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)


def _best_day(rows: Sequence[WeekdayStats]) -> int | None:
    best: WeekdayStats | None = None
    for row in rows:  # rows are in weekday order, so ties keep the earliest day
        if best is None or row.total_pnl > best.total_pnl:
            best = row
    return best.day_index if best is not None else None


def _best_tag(rows: Sequence[TagPerf]) -> str | None:
    ranked = sorted(rows, key=lambda r: (-r.realized_pnl, r.tag))
    if ranked and ranked[0].realized_pnl > 0:
        return ranked[0].tag
    return None


def build_insights(
    events: Sequence[ClosingEvent],
    weekday_rows: Sequence[WeekdayStats],
    tag_rows: Sequence[TagPerf],
    daily_curve: Sequence[EquityPoint],
) -> InsightData:
    long_legs = OutcomeCounter()
    for event in events:
        long_legs.record(event)

    dd_amount, dd_pct = max_drawdown(daily_curve)

    return InsightData(
        best_day=_best_day(weekday_rows),
        best_tag=_best_tag(tag_rows),
        long_win_rate=long_legs.win_rate,
        short_win_rate=0.0,
        max_win=max(long_legs.max_win, _ZERO),
        max_loss=min(long_legs.max_loss, _ZERO),
        max_drawdown=dd_amount,
        max_drawdown_pct=dd_pct,
    )
