"""Position concentration and daily loss-limit checks."""

from .concentration import ConcentrationEvaluator, PositionRisk, classify_risk, position_percent
from .daily_loss import DailyLossAlert, check_daily_loss

__all__ = [
    "ConcentrationEvaluator",
    "DailyLossAlert",
    "PositionRisk",
    "check_daily_loss",
    "classify_risk",
    "position_percent",
]
