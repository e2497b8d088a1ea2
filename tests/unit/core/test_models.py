"""Tests for input models and serialisation helpers."""

import json
from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from ledger_analytics.core.clock import FixedClock
from ledger_analytics.core.enums import EmotionTag, RiskLevel
from ledger_analytics.core.models import (
    MonthlyGoal,
    Trade,
    coerce_price,
    normalize_tags,
    to_decimal,
)
from ledger_analytics.core.serialize import canonical_json, payload_hash, to_jsonable


def test_normalize_tags():
    assert normalize_tags(" b, a  a,,c ") == ("a", "b", "c")
    assert normalize_tags(["X", " x ", ""]) == ("X", "x")
    assert normalize_tags(None) == ()


def test_trade_is_frozen():
    trade = Trade(
        id="1", date="2024-01-02", symbol="A", side="sell", price=1, quantity=1,
        emotion_tag="FOMO", strategy_id="  ",
    )
    assert trade.emotion_tag == EmotionTag.FOMO
    assert trade.strategy_id is None
    with pytest.raises(ValidationError):
        trade.price = Decimal("2")


def test_goal_month_bounds():
    assert MonthlyGoal(year=2024, month=3).month_key == "2024-03"
    with pytest.raises(ValidationError):
        MonthlyGoal(year=2024, month=13)


def test_to_decimal():
    assert to_decimal(1.1) == Decimal("1.1")
    assert to_decimal(Decimal("2")) == Decimal("2")


@pytest.mark.parametrize(
    "raw",
    [None, float("nan"), float("inf"), float("-inf"), "NaN", Decimal("sNaN"), "n/a", True, [1]],
)
def test_coerce_price_rejects_unusable_quotes(raw):
    assert coerce_price(raw) is None


def test_coerce_price_accepts_numbers():
    assert coerce_price(130) == Decimal("130")
    assert coerce_price("99.5") == Decimal("99.5")
    assert coerce_price(0) == 0


def test_risk_level_rank():
    assert RiskLevel.LOW.rank < RiskLevel.MEDIUM.rank < RiskLevel.HIGH.rank < RiskLevel.CRITICAL.rank


def test_canonical_json_is_stable():
    data = {"b": Decimal("1.50"), "a": date(2024, 1, 2), "c": RiskLevel.HIGH}
    text = canonical_json(data)
    assert text == '{"a":"2024-01-02","b":"1.50","c":"high"}'
    assert json.loads(text)["b"] == "1.50"
    assert payload_hash(data) == payload_hash(dict(reversed(list(data.items()))))
    assert len(payload_hash(data, length=16)) == 16


def test_to_jsonable_nan_float():
    assert to_jsonable(float("nan")) == 0.0


def test_fixed_clock():
    clock = FixedClock(date(2024, 1, 1))
    assert clock.today() == date(2024, 1, 1)
    clock.set_today(date(2024, 2, 1))
    assert clock.today() == date(2024, 2, 1)
