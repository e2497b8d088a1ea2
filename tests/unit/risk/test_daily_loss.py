"""Tests for the daily loss-limit check."""

from decimal import Decimal

from ledger_analytics.core.enums import AlertType
from ledger_analytics.core.models import RiskSettings
from ledger_analytics.risk.daily_loss import check_daily_loss


class TestDailyLoss:

    def test_percent_limit_breached(self, risk_settings):
        alert = check_daily_loss(Decimal("-40000"), Decimal("1000000"), risk_settings)
        assert alert is not None
        assert alert.type == AlertType.PERCENT
        assert alert.value == 4.0
        assert alert.limit == 3.0
        assert "4.0%" in alert.message

    def test_within_percent_limit(self, risk_settings):
        assert check_daily_loss(Decimal("-20000"), Decimal("1000000"), risk_settings) is None

    def test_exactly_at_limit_alerts(self, risk_settings):
        alert = check_daily_loss(Decimal("-30000"), Decimal("1000000"), risk_settings)
        assert alert is not None
        assert alert.type == AlertType.PERCENT

    def test_amount_limit_only(self):
        settings = RiskSettings(
            max_daily_loss_percent=0.0, max_daily_loss_amount=Decimal("500")
        )
        alert = check_daily_loss(Decimal("-600"), Decimal("1000000"), settings)
        assert alert is not None
        assert alert.type == AlertType.AMOUNT
        assert alert.value == 600.0
        assert alert.limit == 500.0

    def test_amount_checked_when_balance_unknown(self):
        settings = RiskSettings(max_daily_loss_amount=Decimal("100"))
        alert = check_daily_loss(Decimal("-150"), Decimal("0"), settings)
        assert alert.type == AlertType.AMOUNT

    def test_percent_checked_before_amount(self):
        settings = RiskSettings(
            max_daily_loss_percent=1.0, max_daily_loss_amount=Decimal("10")
        )
        alert = check_daily_loss(Decimal("-500"), Decimal("1000"), settings)
        assert alert.type == AlertType.PERCENT

    def test_disabled(self):
        settings = RiskSettings(alert_enabled=False)
        assert check_daily_loss(Decimal("-999999"), Decimal("1000"), settings) is None

    def test_gain_never_alerts(self, risk_settings):
        assert check_daily_loss(Decimal("5000"), Decimal("1000"), risk_settings) is None
        assert check_daily_loss(Decimal("0"), Decimal("1000"), risk_settings) is None

    def test_amount_zero_disables_amount_check(self, risk_settings):
        assert check_daily_loss(Decimal("-10"), Decimal("0"), risk_settings) is None
