"""Realized-PnL time series and equity curves.

Closing events are bucketed into day keys (``YYYY-MM-DD``) and, separately,
month keys (``YYYY-MM``).  An equity curve is the running sum of a bucket
series together with its running peak; drawdown is measured from that peak.

Daily and monthly curves are each built from their own bucket series and
never resampled from one another, so both reconcile exactly with the
closing events they came from.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from ..core.serialize import dataclass_to_dict
from ..ledger.position import ClosingEvent

_ZERO = Decimal("0")

_MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


@dataclass(frozen=True)
class PnLPoint:
    key: str    # YYYY-MM-DD or YYYY-MM
    label: str
    value: Decimal

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)


@dataclass(frozen=True)
class EquityPoint:
    key: str
    cumulative_pnl: Decimal
    peak: Decimal
    drawdown: Decimal       # cumulative - peak, always <= 0
    drawdown_pct: float     # drawdown / peak * 100 when peak > 0, else 0

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)


def month_label(month_key: str) -> str:
    """``"2024-03"`` -> ``"Mar 2024"``; unknown shapes are returned as-is."""
    year, _, month = month_key.partition("-")
    if not month.isdigit() or not 1 <= int(month) <= 12:
        return month_key
    return f"{_MONTH_ABBR[int(month) - 1]} {year}"


def _bucket(events: Iterable[ClosingEvent], key_of) -> dict[str, Decimal]:
    sums: dict[str, Decimal] = defaultdict(lambda: _ZERO)
    for event in events:
        sums[key_of(event)] += event.realized_pnl
    return dict(sorted(sums.items()))


def daily_pnl_points(events: Iterable[ClosingEvent]) -> list[PnLPoint]:
    """One point per day that has at least one closing, ascending."""
    return [
        PnLPoint(key=key, label=key, value=value)
        for key, value in _bucket(events, lambda e: e.day_key).items()
    ]


def monthly_pnl_points(events: Iterable[ClosingEvent]) -> list[PnLPoint]:
    """One point per month that has at least one closing, ascending."""
    return [
        PnLPoint(key=key, label=month_label(key), value=value)
        for key, value in _bucket(events, lambda e: e.month_key).items()
    ]


def equity_curve(points: Sequence[PnLPoint]) -> list[EquityPoint]:
    """Cumulative PnL with running peak and drawdown.

    The peak starts at zero, so a history that opens with losses is in
    drawdown from the first point while ``drawdown_pct`` stays 0 until a
    profit has been banked.
    """
    curve: list[EquityPoint] = []
    cumulative = _ZERO
    peak = _ZERO
    for point in sorted(points, key=lambda p: p.key):
        cumulative += point.value
        if cumulative > peak:
            peak = cumulative
        drawdown = cumulative - peak
        drawdown_pct = float(drawdown / peak * 100) if peak > 0 else 0.0
        curve.append(
            EquityPoint(
                key=point.key,
                cumulative_pnl=cumulative,
                peak=peak,
                drawdown=drawdown,
                drawdown_pct=drawdown_pct,
            )
        )
    return curve


def max_drawdown(curve: Sequence[EquityPoint]) -> tuple[Decimal, float]:
    """Most negative drawdown amount and most negative drawdown percent."""
    if not curve:
        return _ZERO, 0.0
    worst_amount = min(p.drawdown for p in curve)
    worst_pct = min(p.drawdown_pct for p in curve)
    return min(worst_amount, _ZERO), min(worst_pct, 0.0)


def realized_for_day(points: Sequence[PnLPoint], day: date) -> Decimal:
    """Realized PnL of one day from a daily series (0 when no closings)."""
    key = day.isoformat()
    for point in points:
        if point.key == key:
            return point.value
    return _ZERO
