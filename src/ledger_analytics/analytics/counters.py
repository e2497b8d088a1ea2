"""Outcome accumulator shared by every per-bucket aggregate."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..core.enums import Outcome
from ..ledger.position import ClosingEvent

_ZERO = Decimal("0")


def win_rate(wins: int, trades: int) -> float:
    """Percentage of winning closings; exactly 0.0 when there are none."""
    if trades <= 0:
        return 0.0
    return wins / trades * 100.0


def safe_div(num: Decimal, den: Decimal | int) -> Decimal:
    if den == 0:
        return _ZERO
    return num / den


def percent(num: Decimal, den: Decimal) -> float:
    """``num / den * 100`` as float, 0.0 when ``den`` is not positive."""
    if den <= 0:
        return 0.0
    return float(num / den * 100)


@dataclass
class OutcomeCounter:
    """Running totals over a set of closing events."""

    trades: int = 0
    wins: int = 0
    losses: int = 0
    evens: int = 0
    total_pnl: Decimal = _ZERO
    gross_wins: Decimal = _ZERO
    gross_losses: Decimal = _ZERO
    max_win: Decimal = _ZERO
    max_loss: Decimal = _ZERO

    def record(self, event: ClosingEvent) -> None:
        pnl = event.realized_pnl
        self.trades += 1
        self.total_pnl += pnl
        if event.outcome == Outcome.WIN:
            self.wins += 1
            self.gross_wins += pnl
            if pnl > self.max_win:
                self.max_win = pnl
        elif event.outcome == Outcome.LOSS:
            self.losses += 1
            self.gross_losses += -pnl
            if pnl < self.max_loss:
                self.max_loss = pnl
        else:
            self.evens += 1

    @property
    def win_rate(self) -> float:
        return win_rate(self.wins, self.trades)

    @property
    def avg_pnl(self) -> Decimal:
        return safe_div(self.total_pnl, self.trades)

    @property
    def profit_factor(self) -> float | None:
        """Gross wins / gross losses.

        ``None`` when there are winnings but no losses (unbounded), 0.0 when
        there is neither.
        """
        if self.gross_losses > 0:
            return float(self.gross_wins / self.gross_losses)
        if self.gross_wins > 0:
            return None
        return 0.0
