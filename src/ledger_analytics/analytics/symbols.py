"""Per-symbol summaries folded from the ledger.

A summary combines the terminal position state of a symbol with the win /
loss counts of its closing trades.  Valuation fields are only populated when
the caller supplies a current price for the symbol; an unpriced symbol keeps
``None`` there so it can be told apart from a position worth zero.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from ..core.models import coerce_price
from ..core.serialize import dataclass_to_dict
from ..ledger.position import Ledger
from .counters import OutcomeCounter


@dataclass(frozen=True)
class SymbolSummary:
    symbol: str
    symbol_name: str | None
    total_buy_qty: Decimal
    total_buy_amount: Decimal
    total_sell_qty: Decimal
    total_sell_amount: Decimal
    position_qty: Decimal
    avg_cost: Decimal
    cost_basis: Decimal
    realized_pnl: Decimal
    trade_count: int
    win_count: int
    loss_count: int
    even_count: int
    win_rate: float
    current_price: Decimal | None = None
    current_value: Decimal | None = None
    unrealized_pnl: Decimal | None = None
    return_rate: float | None = None

    @property
    def is_priced(self) -> bool:
        return self.current_price is not None

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)


def summarize_symbols(
    ledger: Ledger,
    current_prices: Mapping[str, Any] | None = None,
) -> list[SymbolSummary]:
    """Build one summary per symbol, sorted by symbol."""
    prices = current_prices or {}
    summaries: list[SymbolSummary] = []

    for symbol, sym_ledger in ledger.symbols.items():
        state = sym_ledger.final_state
        counter = OutcomeCounter()
        for event in sym_ledger.closing_events:
            counter.record(event)

        current_value: Decimal | None = None
        unrealized: Decimal | None = None
        return_rate: float | None = None
        current_price = coerce_price(prices.get(symbol))
        if current_price is not None:
            current_value = state.quantity * current_price
            unrealized = (
                state.quantity * (current_price - state.avg_cost)
                if state.quantity > 0
                else Decimal("0")
            )
            if state.quantity > 0 and state.avg_cost > 0:
                return_rate = float(
                    (current_price - state.avg_cost) / state.avg_cost * 100
                )

        summaries.append(
            SymbolSummary(
                symbol=symbol,
                symbol_name=sym_ledger.symbol_name,
                total_buy_qty=state.bought_qty,
                total_buy_amount=state.bought_amount,
                total_sell_qty=state.sold_qty,
                total_sell_amount=state.sold_amount,
                position_qty=state.quantity,
                avg_cost=state.avg_cost,
                cost_basis=state.cost_basis,
                realized_pnl=state.realized_pnl,
                trade_count=counter.trades,
                win_count=counter.wins,
                loss_count=counter.losses,
                even_count=counter.evens,
                win_rate=counter.win_rate,
                current_price=current_price,
                current_value=current_value,
                unrealized_pnl=unrealized,
                return_rate=return_rate,
            )
        )

    return summaries
