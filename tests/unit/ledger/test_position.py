"""Tests for the weighted-average-cost ledger replay."""

from datetime import date
from decimal import Decimal

import pytest

from ledger_analytics.core.enums import IntradayOrder, Outcome
from ledger_analytics.core.errors import MalformedTradeError
from ledger_analytics.ledger.position import (
    build_ledger,
    parse_trades,
    replay_symbol,
    sort_trades,
    validate_trade,
)

from tests.factories import buy, make_trade, sell


class TestWeightedAverageCost:

    def test_scale_in_then_partial_sell(self, scale_in_trades):
        ledger = build_ledger(scale_in_trades)
        sym = ledger.get("AAPL")

        after_second_buy = sym.entries[1].state
        assert after_second_buy.quantity == Decimal("20")
        assert after_second_buy.avg_cost == Decimal("110")

        event = sym.entries[2].closing
        assert event.avg_cost_before == Decimal("110")
        assert event.realized_pnl == Decimal("600")
        assert event.outcome == Outcome.WIN

        final = sym.final_state
        assert final.quantity == Decimal("5")
        assert final.avg_cost == Decimal("110")
        assert final.cost_basis == Decimal("550")
        assert final.realized_pnl == Decimal("600")

    def test_sell_does_not_change_avg_cost(self):
        trades = [
            buy(100, 10, date(2024, 1, 2), "b1"),
            sell(80, 4, date(2024, 1, 3), "s1"),
        ]
        final = build_ledger(trades).get("AAPL").final_state
        assert final.avg_cost == Decimal("100")
        assert final.realized_pnl == Decimal("-80")

    def test_flat_position_resets_avg_cost(self):
        trades = [
            buy(100, 10, date(2024, 1, 2), "b1"),
            sell(110, 10, date(2024, 1, 3), "s1"),
        ]
        final = build_ledger(trades).get("AAPL").final_state
        assert final.quantity == 0
        assert final.avg_cost == 0
        assert final.cost_basis == 0
        assert not final.is_open

    def test_rebuy_after_flat_starts_fresh_basis(self):
        trades = [
            buy(100, 10, date(2024, 1, 2), "b1"),
            sell(110, 10, date(2024, 1, 3), "s1"),
            buy(200, 5, date(2024, 1, 4), "b2"),
        ]
        final = build_ledger(trades).get("AAPL").final_state
        assert final.avg_cost == Decimal("200")
        assert final.holding_since == date(2024, 1, 4)

    def test_even_sell_is_even_outcome(self):
        trades = [
            buy(100, 10, date(2024, 1, 2), "b1"),
            sell(100, 5, date(2024, 1, 3), "s1"),
        ]
        event = build_ledger(trades).closing_events[0]
        assert event.realized_pnl == 0
        assert event.outcome == Outcome.EVEN

    def test_bought_and_sold_totals(self, scale_in_trades):
        final = build_ledger(scale_in_trades).get("AAPL").final_state
        assert final.bought_qty == Decimal("20")
        assert final.bought_amount == Decimal("2200")
        assert final.sold_qty == Decimal("15")
        assert final.sold_amount == Decimal("2250")
        # bought - sold + realized == qty * avg
        assert final.bought_amount - final.sold_amount + final.realized_pnl == (
            final.quantity * final.avg_cost
        )


class TestOrdering:

    def test_trades_replayed_chronologically(self):
        trades = [
            sell(150, 15, date(2024, 3, 5), "a3"),
            buy(120, 10, date(2024, 3, 2), "a2"),
            buy(100, 10, date(2024, 3, 1), "a1"),
        ]
        ledger = build_ledger(trades)
        assert [e.trade.id for e in ledger.get("AAPL").entries] == ["a1", "a2", "a3"]
        assert ledger.closing_events[0].realized_pnl == Decimal("600")

    def test_same_day_tie_broken_by_id(self):
        # Input lists the sell first; id order puts the buy first
        day = date(2024, 3, 1)
        trades = [
            sell(120, 5, day, "x2"),
            buy(100, 10, day, "x1"),
        ]
        ledger = build_ledger(trades, intraday_order=IntradayOrder.ID)
        event = ledger.closing_events[0]
        assert event.position_before == Decimal("10")
        assert event.realized_pnl == Decimal("100")
        assert not ledger.issues

    def test_same_day_input_order(self):
        day = date(2024, 3, 1)
        trades = [
            sell(120, 5, day, "x2"),
            buy(100, 10, day, "x1"),
        ]
        ledger = build_ledger(trades, intraday_order=IntradayOrder.INPUT)
        event = ledger.closing_events[0]
        assert event.position_before == 0
        assert event.oversold
        assert len(ledger.issues) == 1

    def test_duplicate_ids_fall_back_to_input_position(self):
        day = date(2024, 3, 1)
        first = buy(100, 1, day, "dup")
        second = buy(200, 1, day, "dup")
        assert sort_trades([first, second]) == [first, second]
        assert sort_trades([second, first]) == [second, first]

    def test_symbols_sorted(self):
        trades = [
            buy(10, 1, date(2024, 1, 1), "1", symbol="ZZZ"),
            buy(10, 1, date(2024, 1, 1), "2", symbol="AAA"),
        ]
        assert list(build_ledger(trades).symbols) == ["AAA", "ZZZ"]


class TestOversell:

    def test_oversell_is_computed_and_flagged(self):
        trades = [
            buy(100, 5, date(2024, 1, 2), "b1"),
            sell(120, 8, date(2024, 1, 3), "s1"),
        ]
        ledger = build_ledger(trades)
        event = ledger.closing_events[0]
        assert event.oversold
        assert event.realized_pnl == Decimal("160")  # 8 * (120 - 100)
        final = ledger.get("AAPL").final_state
        assert final.quantity == Decimal("-3")
        assert final.avg_cost == 0
        assert final.cost_basis == 0

        issue = ledger.issues[0]
        assert issue.kind == "oversell"
        assert issue.trade_id == "s1"

    def test_sell_from_flat_has_no_holding_days(self):
        ledger = build_ledger([sell(50, 1, date(2024, 1, 2), "s1")])
        event = ledger.closing_events[0]
        assert event.holding_days is None
        assert event.avg_cost_before == 0
        assert event.realized_pnl == Decimal("50")

    def test_buy_covering_oversold_position_restarts_basis(self):
        trades = [
            sell(50, 2, date(2024, 1, 2), "s1"),
            buy(40, 5, date(2024, 1, 3), "b1"),
        ]
        final = build_ledger(trades).get("AAPL").final_state
        assert final.quantity == Decimal("3")
        assert final.avg_cost == Decimal("40")


class TestHoldingDays:

    def test_anchor_is_opening_buy(self, scale_in_trades):
        event = build_ledger(scale_in_trades).closing_events[0]
        assert event.holding_days == 4

    def test_same_day_round_trip(self):
        day = date(2024, 1, 2)
        trades = [buy(10, 1, day, "a"), sell(11, 1, day, "b")]
        assert build_ledger(trades).closing_events[0].holding_days == 0


class TestMalformedTrades:

    def test_zero_quantity_rejected(self):
        bad = make_trade(quantity=0, trade_id="bad")
        ledger = build_ledger([bad, buy(10, 1, date(2024, 1, 1), "ok")])
        assert [e.trade_id for e in ledger.rejected] == ["bad"]
        assert ledger.trade_count == 1

    def test_negative_price_rejected(self):
        with pytest.raises(MalformedTradeError, match="negative price"):
            validate_trade(make_trade(price=-1, trade_id="neg"))

    def test_non_finite_price_rejected(self):
        with pytest.raises(MalformedTradeError, match="non-finite price"):
            validate_trade(
                make_trade(trade_id="nan").model_copy(update={"price": Decimal("NaN")})
            )

    def test_empty_symbol_rejected(self):
        with pytest.raises(MalformedTradeError, match="empty symbol"):
            validate_trade(make_trade(symbol="   ", trade_id="blank"))

    def test_strict_mode_raises(self):
        bad = make_trade(quantity=-5, trade_id="bad")
        with pytest.raises(MalformedTradeError) as exc_info:
            build_ledger([bad], strict=True)
        assert exc_info.value.trade_id == "bad"

    def test_error_message_and_dict(self):
        err = MalformedTradeError("t9", "empty symbol")
        assert str(err) == "Malformed trade [t9]: empty symbol"
        assert err.to_dict() == {"trade_id": "t9", "reason": "empty symbol"}


class TestParseTrades:

    def test_valid_records(self):
        trades, errors = parse_trades([
            {"id": "1", "date": "2024-03-01", "symbol": " aapl ", "side": "buy",
             "price": "100.5", "quantity": 3, "tags": "swing, breakout swing"},
        ])
        assert errors == []
        trade = trades[0]
        assert trade.symbol == "aapl"
        assert trade.side.value == "BUY"
        assert trade.price == Decimal("100.5")
        assert trade.tags == ("breakout", "swing")
        assert trade.amount == Decimal("301.5")

    def test_bad_date_and_side_collected(self):
        trades, errors = parse_trades([
            {"id": "1", "date": "not-a-date", "symbol": "A", "side": "BUY",
             "price": 1, "quantity": 1},
            {"date": "2024-01-01", "symbol": "A", "side": "HOLD", "price": 1, "quantity": 1},
            {"id": "3", "date": "2024-01-01", "symbol": "A", "side": "SELL",
             "price": 1, "quantity": 1},
        ])
        assert [t.id for t in trades] == ["3"]
        assert [e.trade_id for e in errors] == ["1", "#1"]
        assert "date" in errors[0].reason

    def test_nan_price_rejected_at_parse_time(self):
        trades, errors = parse_trades([
            {"id": "n", "date": "2024-01-01", "symbol": "A", "side": "BUY",
             "price": "NaN", "quantity": 1},
        ])
        assert trades == []
        assert [e.trade_id for e in errors] == ["n"]
        assert "price" in errors[0].reason

    def test_non_object_records_collected(self):
        trades, errors = parse_trades([
            {"id": "1", "date": "2024-01-01", "symbol": "A", "side": "BUY",
             "price": 1, "quantity": 1},
            "garbage",
            None,
            [1, 2],
        ])
        assert [t.id for t in trades] == ["1"]
        assert [(e.trade_id, e.reason) for e in errors] == [
            ("#1", "not an object"),
            ("#2", "not an object"),
            ("#3", "not an object"),
        ]


class TestRounding:

    def test_realized_rounded_half_up(self):
        trades = [
            buy("10.005", 1, date(2024, 1, 2), "b1"),
            sell("10.010", 1, date(2024, 1, 3), "s1"),
        ]
        exact = build_ledger(trades).closing_events[0].realized_pnl
        assert exact == Decimal("0.005")
        rounded = build_ledger(trades, realized_pnl_decimals=2).closing_events[0].realized_pnl
        assert rounded == Decimal("0.01")
        whole = build_ledger(trades, realized_pnl_decimals=0).closing_events[0].realized_pnl
        assert whole == 0


class TestReplaySymbol:

    def test_single_symbol(self, scale_in_trades):
        sym = replay_symbol(scale_in_trades)
        assert sym.symbol == "AAPL"
        assert len(sym.closing_events) == 1

    def test_empty(self):
        sym = replay_symbol([])
        assert sym.entries == []
        assert sym.final_state.quantity == 0

    def test_multiple_symbols_raise(self, mixed_trades):
        with pytest.raises(ValueError):
            replay_symbol(mixed_trades)
