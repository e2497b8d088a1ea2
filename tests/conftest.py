"""Shared fixtures for the ledger-analytics test suite."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from ledger_analytics.core.clock import FixedClock
from ledger_analytics.core.config import Settings
from ledger_analytics.core.models import RiskSettings, Trade
from ledger_analytics.engine import AnalyticsEngine

from tests.factories import buy, sell


@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock(date(2024, 3, 15))


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def engine(settings, fixed_clock) -> AnalyticsEngine:
    return AnalyticsEngine(settings=settings, clock=fixed_clock)


@pytest.fixture
def risk_settings() -> RiskSettings:
    return RiskSettings(
        max_position_percent=20.0,
        max_daily_loss_percent=3.0,
        max_daily_loss_amount=Decimal("0"),
        alert_enabled=True,
    )


@pytest.fixture
def scale_in_trades() -> list[Trade]:
    """Buy 10@100, buy 10@120, sell 15@150: avg 110, realized 600, 5 left."""
    return [
        buy(100, 10, date(2024, 3, 1), "a1"),
        buy(120, 10, date(2024, 3, 2), "a2"),
        sell(150, 15, date(2024, 3, 5), "a3", tags=("swing",)),
    ]


@pytest.fixture
def mixed_trades() -> list[Trade]:
    """Two symbols, wins and losses across two months."""
    return [
        buy(100, 10, date(2024, 2, 5), "m01", tags=("breakout",), strategy_id="s1"),
        sell(110, 5, date(2024, 2, 6), "m02", tags=("breakout",), strategy_id="s1"),
        sell(90, 5, date(2024, 2, 20), "m03", tags=("breakout", "news"), strategy_id="s1"),
        buy(50, 20, date(2024, 3, 1), "m04", symbol="MSFT", tags=("dip",)),
        sell(60, 10, date(2024, 3, 4), "m05", symbol="MSFT", tags=("dip",), strategy_id="s2"),
        sell(55, 5, date(2024, 3, 11), "m06", symbol="MSFT", tags=("dip",)),
    ]
