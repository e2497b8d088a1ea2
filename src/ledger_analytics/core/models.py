"""Input models consumed by the analytics engine.

These are the canonical records handed to the engine by its collaborators
(trade store, settings store, market data).  They are immutable: the engine
never mutates a trade, it only derives new read models from them.
"""

from __future__ import annotations

import datetime as dt
import re
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import EmotionTag, Side

_TAG_SPLIT = re.compile(r"[,\s]+")


def normalize_tags(value: Any) -> tuple[str, ...]:
    """Trim, de-duplicate and sort tag text (case preserved).

    Accepts an iterable of strings or a single comma/space separated string.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        raw = _TAG_SPLIT.split(value)
    else:
        raw = list(value)
    cleaned = {str(t).strip() for t in raw}
    cleaned.discard("")
    return tuple(sorted(cleaned))


# ---------------------------------------------------------------------------
# Trade
# ---------------------------------------------------------------------------

class Trade(BaseModel):
    """One executed buy or sell, as recorded in the journal."""

    model_config = ConfigDict(frozen=True)

    id: str
    date: dt.date
    symbol: str
    side: Side
    price: Decimal
    quantity: Decimal
    symbol_name: str | None = None
    tags: tuple[str, ...] = ()
    strategy_id: str | None = None
    emotion_tag: EmotionTag | None = None

    # Display-only, ignored by the engine
    memo: str = ""
    image: str | None = None

    @field_validator("side", mode="before")
    @classmethod
    def _upper_side(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("symbol", mode="before")
    @classmethod
    def _strip_symbol(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, v: Any) -> tuple[str, ...]:
        return normalize_tags(v)

    @field_validator("strategy_id", "emotion_tag", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def amount(self) -> Decimal:
        """Gross traded amount (price x quantity)."""
        return self.price * self.quantity


# ---------------------------------------------------------------------------
# User-editable settings
# ---------------------------------------------------------------------------

class RiskSettings(BaseModel):
    """Position-concentration and daily-loss limits."""

    max_position_percent: float = 20.0
    max_daily_loss_percent: float = 3.0
    max_daily_loss_amount: Decimal = Decimal("0")  # 0 disables the amount check
    alert_enabled: bool = True


class AccountBalance(BaseModel):
    """User-entered account balance for one day."""

    date: dt.date
    balance: Decimal
    deposit: Decimal = Decimal("0")
    withdrawal: Decimal = Decimal("0")
    notes: str = ""


class MonthlyGoal(BaseModel):
    """User-authored targets for one calendar month."""

    year: int
    month: int = Field(ge=1, le=12)
    target_pnl: Decimal = Decimal("0")
    target_trades: int = 0
    target_win_rate: float = 0.0
    notes: str = ""
    id: str | None = None

    @property
    def month_key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


class Strategy(BaseModel):
    """User-defined strategy template; only used to label performance rows."""

    id: str
    name: str
    description: str = ""
    color: str = "#6366f1"


def to_decimal(value: Any) -> Decimal:
    """Coerce an externally supplied number (e.g. a quote) to Decimal."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def coerce_price(value: Any) -> Decimal | None:
    """Coerce a current-price quote, or ``None`` when it is missing or unusable.

    Non-numeric text, NaN and infinities all count as "no quote".
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        price = to_decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not price.is_finite():
        return None
    return price
