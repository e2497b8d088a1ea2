"""Enumerations used across the analytics engine."""

from enum import Enum


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class Outcome(str, Enum):
    """Win / loss / even classification of a closing trade."""

    WIN = "win"
    LOSS = "loss"
    EVEN = "even"


class StreakType(str, Enum):
    WIN = "win"
    LOSS = "loss"
    NONE = "none"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]


_RISK_RANK = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.CRITICAL: 3,
}


class AlertType(str, Enum):
    PERCENT = "percent"
    AMOUNT = "amount"


class IntradayOrder(str, Enum):
    """Tie-break for trades sharing the same date."""

    ID = "id"        # Trade id ascending, then input position
    INPUT = "input"  # Input position only


class TagFilterMode(str, Enum):
    AND = "AND"
    OR = "OR"


class EmotionTag(str, Enum):
    PLANNED = "PLANNED"
    FOMO = "FOMO"
    FEAR = "FEAR"
    GREED = "GREED"
    REVENGE = "REVENGE"
    IMPULSIVE = "IMPULSIVE"
    CONFIDENT = "CONFIDENT"
    HESITANT = "HESITANT"


class HoldingBucket(str, Enum):
    """Holding-duration buckets, in display order."""

    SAME_DAY = "same_day"
    DAYS_1_3 = "1_3d"
    DAYS_4_7 = "4_7d"
    WEEKS_1_2 = "1_2w"
    WEEKS_2_MONTH_1 = "2w_1m"
    MONTH_1_PLUS = "1m_plus"
