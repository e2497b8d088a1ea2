"""Portfolio-wide totals across all symbols."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from ..core.serialize import dataclass_to_dict
from ..ledger.position import ClosingEvent
from .counters import OutcomeCounter, percent
from .streaks import Streak
from .symbols import SymbolSummary

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


@dataclass(frozen=True)
class OverallStats:
    total_buy_amount: Decimal
    total_sell_amount: Decimal
    total_realized_pnl: Decimal
    total_open_cost_basis: Decimal      # priced open positions only
    total_open_market_value: Decimal    # priced open positions only
    eval_pnl: Decimal
    total_pnl: Decimal
    holding_return_rate: float
    total_trades: int
    win_count: int
    loss_count: int
    even_count: int
    win_rate: float
    profit_factor: float | None
    current_streak: Streak = field(default_factory=Streak)
    unpriced_symbols: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)


def build_overall_stats(
    summaries: Sequence[SymbolSummary],
    events: Sequence[ClosingEvent],
    current_streak: Streak | None = None,
) -> OverallStats:
    total_buy = _ZERO
    total_sell = _ZERO
    total_realized = _ZERO
    open_cost = _ZERO
    open_value = _ZERO
    unpriced: list[str] = []

    for s in summaries:
        total_buy += s.total_buy_amount
        total_sell += s.total_sell_amount
        total_realized += s.realized_pnl
        if s.position_qty <= 0:
            continue
        if s.current_price is None:
            unpriced.append(s.symbol)
            continue
        open_cost += s.cost_basis
        open_value += s.position_qty * s.current_price

    if unpriced:
        logger.info("Open positions without a current price: %s", ", ".join(unpriced))

    counter = OutcomeCounter()
    for event in events:
        counter.record(event)

    eval_pnl = open_value - open_cost
    return OverallStats(
        total_buy_amount=total_buy,
        total_sell_amount=total_sell,
        total_realized_pnl=total_realized,
        total_open_cost_basis=open_cost,
        total_open_market_value=open_value,
        eval_pnl=eval_pnl,
        total_pnl=total_realized + eval_pnl,
        holding_return_rate=percent(eval_pnl, open_cost),
        total_trades=counter.trades,
        win_count=counter.wins,
        loss_count=counter.losses,
        even_count=counter.evens,
        win_rate=counter.win_rate,
        profit_factor=counter.profit_factor,
        current_streak=current_streak or Streak(),
        unpriced_symbols=tuple(unpriced),
    )
