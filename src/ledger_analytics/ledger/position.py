"""Position & realization ledger: weighted-average-cost replay.

Replays every trade of a symbol in chronological order and records the
position state after each one.  Every SELL produces a :class:`ClosingEvent`
carrying the PnL it realized against the average cost held immediately
before the sale.

Accounting convention
---------------------
* BUY:  ``avg = (qty*avg + q*p) / (qty + q)``; ``qty += q``.  A buy into a
  flat (or oversold) position restarts the basis at the trade price.
* SELL: ``realized = q * (p - avg)``; ``qty -= q``.  The average cost is not
  touched by a sell, except that it resets to zero once the position is
  flat or below.

Same-date trades have no canonical order in the journal, yet average cost
for a mixed buy/sell day depends on it.  Trades are sorted by date, then by
trade id, then by input position (``IntradayOrder.ID``); ``IntradayOrder.INPUT``
keeps input order within a day instead.

Holding time is approximate: average cost keeps no lot dates, so a sell is
measured from the buy that last opened the position from flat.

Usage::

    ledger = build_ledger(trades)
    for event in ledger.closing_events:
        print(event.trade_id, event.realized_pnl, event.outcome)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from pydantic import ValidationError

from ..core.enums import IntradayOrder, Outcome, Side
from ..core.errors import MalformedTradeError
from ..core.models import Trade
from ..core.serialize import dataclass_to_dict

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PositionState:
    """Position of one symbol immediately after a trade was applied."""

    symbol: str
    quantity: Decimal = _ZERO
    avg_cost: Decimal = _ZERO
    bought_qty: Decimal = _ZERO
    bought_amount: Decimal = _ZERO
    sold_qty: Decimal = _ZERO
    sold_amount: Decimal = _ZERO
    realized_pnl: Decimal = _ZERO
    holding_since: date | None = None

    @property
    def cost_basis(self) -> Decimal:
        """Open cost (quantity x average cost), zero unless long."""
        if self.quantity <= 0:
            return _ZERO
        return self.quantity * self.avg_cost

    @property
    def is_open(self) -> bool:
        return self.quantity > 0

    def to_dict(self) -> dict[str, Any]:
        data = dataclass_to_dict(self)
        data["cost_basis"] = str(self.cost_basis)
        return data


@dataclass(frozen=True)
class ClosingEvent:
    """The realized outcome of one SELL trade."""

    trade_id: str
    symbol: str
    date: date
    quantity: Decimal
    price: Decimal
    avg_cost_before: Decimal
    position_before: Decimal
    realized_pnl: Decimal
    outcome: Outcome
    tags: tuple[str, ...] = ()
    strategy_id: str | None = None
    emotion_tag: str | None = None
    holding_days: int | None = None
    oversold: bool = False

    @property
    def day_key(self) -> str:
        return self.date.isoformat()

    @property
    def month_key(self) -> str:
        return f"{self.date.year:04d}-{self.date.month:02d}"

    @property
    def weekday(self) -> int:
        """Weekday of the trade date, 0=Sunday .. 6=Saturday."""
        return (self.date.weekday() + 1) % 7

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)


@dataclass(frozen=True)
class LedgerEntry:
    """One replayed trade with the resulting position state."""

    trade: Trade
    state: PositionState
    closing: ClosingEvent | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "trade_id": self.trade.id,
            "date": self.trade.date.isoformat(),
            "side": self.trade.side.value,
            "state": self.state.to_dict(),
            "closing": self.closing.to_dict() if self.closing else None,
        }


@dataclass(frozen=True)
class DataQualityIssue:
    """Computed-anyway condition the caller may want to surface."""

    trade_id: str
    symbol: str
    kind: str  # "oversell"
    detail: str

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)


@dataclass
class SymbolLedger:
    """Chronological replay of one symbol."""

    symbol: str
    symbol_name: str | None = None
    entries: list[LedgerEntry] = field(default_factory=list)

    @property
    def final_state(self) -> PositionState:
        if not self.entries:
            return PositionState(symbol=self.symbol)
        return self.entries[-1].state

    @property
    def closing_events(self) -> list[ClosingEvent]:
        return [e.closing for e in self.entries if e.closing is not None]


@dataclass
class Ledger:
    """Replay output across all symbols.

    ``closing_events`` is in global chronological order (same ordering as
    the replay), which is the order streaks are measured in.
    """

    symbols: dict[str, SymbolLedger] = field(default_factory=dict)
    closing_events: list[ClosingEvent] = field(default_factory=list)
    rejected: list[MalformedTradeError] = field(default_factory=list)
    issues: list[DataQualityIssue] = field(default_factory=list)

    @property
    def trade_count(self) -> int:
        return sum(len(s.entries) for s in self.symbols.values())

    def get(self, symbol: str) -> SymbolLedger | None:
        return self.symbols.get(symbol)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_trade(trade: Trade) -> None:
    """Reject trades the ledger cannot replay.

    Raises:
        MalformedTradeError: non-positive or non-finite quantity, negative
            or non-finite price, or an empty symbol.
    """
    trade_id = trade.id or "<no id>"
    if not trade.symbol:
        raise MalformedTradeError(trade_id, "empty symbol")
    if not trade.quantity.is_finite():
        raise MalformedTradeError(trade_id, f"non-finite quantity {trade.quantity}")
    if trade.quantity <= 0:
        raise MalformedTradeError(trade_id, f"non-positive quantity {trade.quantity}")
    if not trade.price.is_finite():
        raise MalformedTradeError(trade_id, f"non-finite price {trade.price}")
    if trade.price < 0:
        raise MalformedTradeError(trade_id, f"negative price {trade.price}")


def parse_trades(
    raw: Iterable[Any],
) -> tuple[list[Trade], list[MalformedTradeError]]:
    """Build :class:`Trade` models from raw records, one error per bad record.

    Non-object entries, unparsable dates, unknown sides and NaN prices
    surface here as :class:`MalformedTradeError` instead of aborting the
    whole batch.
    """
    trades: list[Trade] = []
    errors: list[MalformedTradeError] = []
    for i, record in enumerate(raw):
        if not isinstance(record, Mapping):
            errors.append(MalformedTradeError(f"#{i}", "not an object"))
            logger.warning("Skipping trade #%d: not an object", i)
            continue
        trade_id = str(record.get("id") or f"#{i}")
        try:
            trades.append(Trade.model_validate(dict(record)))
        except ValidationError as exc:
            reasons = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            )
            errors.append(MalformedTradeError(trade_id, reasons))
            logger.warning("Skipping unparsable trade %s: %s", trade_id, reasons)
    return trades, errors


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------

def sort_trades(
    trades: Iterable[Trade],
    intraday_order: IntradayOrder = IntradayOrder.ID,
) -> list[Trade]:
    """Chronological order with a deterministic same-date tie-break."""
    indexed = list(enumerate(trades))
    if intraday_order == IntradayOrder.INPUT:
        indexed.sort(key=lambda it: (it[1].date, it[0]))
    else:
        indexed.sort(key=lambda it: (it[1].date, it[1].id, it[0]))
    return [t for _, t in indexed]


# ---------------------------------------------------------------------------
# Replay
# ---------------------------------------------------------------------------

@dataclass
class _Book:
    """Mutable running state for one symbol during a replay."""

    quantity: Decimal = _ZERO
    avg_cost: Decimal = _ZERO
    bought_qty: Decimal = _ZERO
    bought_amount: Decimal = _ZERO
    sold_qty: Decimal = _ZERO
    sold_amount: Decimal = _ZERO
    realized_pnl: Decimal = _ZERO
    holding_since: date | None = None

    def snapshot(self, symbol: str) -> PositionState:
        return PositionState(
            symbol=symbol,
            quantity=self.quantity,
            avg_cost=self.avg_cost,
            bought_qty=self.bought_qty,
            bought_amount=self.bought_amount,
            sold_qty=self.sold_qty,
            sold_amount=self.sold_amount,
            realized_pnl=self.realized_pnl,
            holding_since=self.holding_since,
        )


def _classify(pnl: Decimal) -> Outcome:
    if pnl > 0:
        return Outcome.WIN
    if pnl < 0:
        return Outcome.LOSS
    return Outcome.EVEN


def _round_pnl(value: Decimal, decimals: int | None) -> Decimal:
    if decimals is None:
        return value
    return value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)


def _apply_buy(book: _Book, trade: Trade) -> None:
    held = book.quantity if book.quantity > 0 else _ZERO
    new_qty = book.quantity + trade.quantity

    if held == 0:
        # Opening from flat (or covering an oversold position): fresh basis
        book.avg_cost = trade.price if new_qty > 0 else _ZERO
        book.holding_since = trade.date if new_qty > 0 else None
    else:
        book.avg_cost = (held * book.avg_cost + trade.amount) / (held + trade.quantity)

    book.quantity = new_qty
    book.bought_qty += trade.quantity
    book.bought_amount += trade.amount


def _apply_sell(
    book: _Book,
    trade: Trade,
    realized_pnl_decimals: int | None,
) -> ClosingEvent:
    qty_before = book.quantity
    avg_before = book.avg_cost
    oversold = trade.quantity > qty_before

    realized = _round_pnl(trade.quantity * (trade.price - avg_before), realized_pnl_decimals)

    holding_days: int | None = None
    if book.holding_since is not None:
        holding_days = (trade.date - book.holding_since).days

    book.quantity = qty_before - trade.quantity
    book.sold_qty += trade.quantity
    book.sold_amount += trade.amount
    book.realized_pnl += realized
    if book.quantity <= 0:
        book.avg_cost = _ZERO
        book.holding_since = None

    return ClosingEvent(
        trade_id=trade.id,
        symbol=trade.symbol,
        date=trade.date,
        quantity=trade.quantity,
        price=trade.price,
        avg_cost_before=avg_before,
        position_before=qty_before,
        realized_pnl=realized,
        outcome=_classify(realized),
        tags=trade.tags,
        strategy_id=trade.strategy_id,
        emotion_tag=trade.emotion_tag.value if trade.emotion_tag else None,
        holding_days=holding_days,
        oversold=oversold,
    )


def build_ledger(
    trades: Iterable[Trade],
    *,
    intraday_order: IntradayOrder = IntradayOrder.ID,
    realized_pnl_decimals: int | None = None,
    strict: bool = False,
) -> Ledger:
    """Replay all trades, grouped by symbol, in chronological order.

    Malformed trades are collected in ``Ledger.rejected`` and skipped; with
    ``strict=True`` the first one is raised instead.  Sells larger than the
    held quantity are computed anyway and listed in ``Ledger.issues``.
    """
    ledger = Ledger()
    valid: list[Trade] = []
    for trade in trades:
        try:
            validate_trade(trade)
        except MalformedTradeError as exc:
            if strict:
                raise
            logger.warning("Rejected trade %s: %s", exc.trade_id, exc.reason)
            ledger.rejected.append(exc)
            continue
        valid.append(trade)

    books: dict[str, _Book] = {}
    for trade in sort_trades(valid, intraday_order):
        book = books.get(trade.symbol)
        if book is None:
            book = books[trade.symbol] = _Book()
        sym_ledger = ledger.symbols.get(trade.symbol)
        if sym_ledger is None:
            sym_ledger = ledger.symbols[trade.symbol] = SymbolLedger(
                symbol=trade.symbol, symbol_name=trade.symbol_name or None
            )
        elif trade.symbol_name and not sym_ledger.symbol_name:
            sym_ledger.symbol_name = trade.symbol_name

        closing: ClosingEvent | None = None
        if trade.side == Side.BUY:
            _apply_buy(book, trade)
        else:
            closing = _apply_sell(book, trade, realized_pnl_decimals)
            ledger.closing_events.append(closing)
            if closing.oversold:
                detail = (
                    f"sell of {trade.quantity} exceeds held quantity "
                    f"{closing.position_before}"
                )
                logger.warning("Oversell on %s (%s): %s", trade.symbol, trade.id, detail)
                ledger.issues.append(
                    DataQualityIssue(
                        trade_id=trade.id,
                        symbol=trade.symbol,
                        kind="oversell",
                        detail=detail,
                    )
                )

        sym_ledger.entries.append(
            LedgerEntry(trade=trade, state=book.snapshot(trade.symbol), closing=closing)
        )

    ledger.symbols = dict(sorted(ledger.symbols.items()))
    logger.debug(
        "Ledger replayed: %d trades, %d symbols, %d closings, %d rejected",
        len(valid),
        len(ledger.symbols),
        len(ledger.closing_events),
        len(ledger.rejected),
    )
    return ledger


def replay_symbol(
    trades: Iterable[Trade],
    *,
    intraday_order: IntradayOrder = IntradayOrder.ID,
    realized_pnl_decimals: int | None = None,
    strict: bool = False,
) -> SymbolLedger:
    """Replay the trades of a single symbol.

    Raises:
        ValueError: If the trades span more than one symbol.
    """
    ledger = build_ledger(
        trades,
        intraday_order=intraday_order,
        realized_pnl_decimals=realized_pnl_decimals,
        strict=strict,
    )
    if len(ledger.symbols) > 1:
        raise ValueError(
            f"replay_symbol expects one symbol, got {sorted(ledger.symbols)}"
        )
    if not ledger.symbols:
        return SymbolLedger(symbol="")
    return next(iter(ledger.symbols.values()))
