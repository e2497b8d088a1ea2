"""Weekday and holding-period performance analysis.

Breaks closing-trade performance down by the weekday of the sell and by
how long the position had been held, answering questions like "Are my
Monday exits worse?" or "Do my swing trades beat my day trades?".

Weekdays are reported as an index (0=Sunday .. 6=Saturday); naming them is
left to the presentation layer.

Holding time is an approximation: the ledger uses average cost and keeps
no per-lot dates, so a sell is measured from the buy that last opened the
position from flat.  Scaling into a position does not move that anchor.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from ..core.enums import HoldingBucket
from ..core.serialize import dataclass_to_dict
from ..ledger.position import ClosingEvent
from .counters import OutcomeCounter

# Inclusive upper bound (days) of each bucket; the last bucket is open-ended
HOLDING_BUCKET_LIMITS: tuple[tuple[HoldingBucket, int | None], ...] = (
    (HoldingBucket.SAME_DAY, 0),
    (HoldingBucket.DAYS_1_3, 3),
    (HoldingBucket.DAYS_4_7, 7),
    (HoldingBucket.WEEKS_1_2, 14),
    (HoldingBucket.WEEKS_2_MONTH_1, 30),
    (HoldingBucket.MONTH_1_PLUS, None),
)


@dataclass(frozen=True)
class WeekdayStats:
    day_index: int  # 0=Sunday .. 6=Saturday
    trade_count: int
    win_count: int
    loss_count: int
    win_rate: float
    total_pnl: Decimal
    avg_pnl: Decimal

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)


@dataclass(frozen=True)
class HoldingPeriodStats:
    period: HoldingBucket
    trade_count: int
    win_count: int
    loss_count: int
    win_rate: float
    total_pnl: Decimal
    avg_pnl: Decimal
    avg_holding_days: float

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)


def holding_bucket(days: int) -> HoldingBucket:
    """Map a holding duration in days to its bucket."""
    for bucket, limit in HOLDING_BUCKET_LIMITS:
        if limit is None or days <= limit:
            return bucket
    return HoldingBucket.MONTH_1_PLUS


def weekday_stats(events: Iterable[ClosingEvent]) -> list[WeekdayStats]:
    """Per-weekday performance for weekdays with at least one closing."""
    by_day: dict[int, OutcomeCounter] = defaultdict(OutcomeCounter)
    for event in events:
        by_day[event.weekday].record(event)

    return [
        WeekdayStats(
            day_index=day,
            trade_count=c.trades,
            win_count=c.wins,
            loss_count=c.losses,
            win_rate=c.win_rate,
            total_pnl=c.total_pnl,
            avg_pnl=c.avg_pnl,
        )
        for day, c in sorted(by_day.items())
    ]


def holding_period_stats(events: Iterable[ClosingEvent]) -> list[HoldingPeriodStats]:
    """Per-bucket performance, in bucket order, skipping empty buckets.

    Closings without a holding anchor (sells out of a flat position) are
    left out.
    """
    counters: dict[HoldingBucket, OutcomeCounter] = defaultdict(OutcomeCounter)
    days_total: dict[HoldingBucket, int] = defaultdict(int)
    for event in events:
        if event.holding_days is None:
            continue
        bucket = holding_bucket(event.holding_days)
        counters[bucket].record(event)
        days_total[bucket] += event.holding_days

    rows: list[HoldingPeriodStats] = []
    for bucket, _ in HOLDING_BUCKET_LIMITS:
        c = counters.get(bucket)
        if c is None:
            continue
        rows.append(
            HoldingPeriodStats(
                period=bucket,
                trade_count=c.trades,
                win_count=c.wins,
                loss_count=c.losses,
                win_rate=c.win_rate,
                total_pnl=c.total_pnl,
                avg_pnl=c.avg_pnl,
                avg_holding_days=days_total[bucket] / c.trades,
            )
        )
    return rows
