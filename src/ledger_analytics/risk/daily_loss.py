"""Daily loss-limit check.

Compares the day's PnL (realized plus unrealized, supplied by the caller)
against the percent and amount limits in :class:`RiskSettings`.  The
percent limit is checked first; the first limit breached is the one
reported.  A limit of zero is treated as disabled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from ..core.enums import AlertType
from ..core.models import RiskSettings, to_decimal
from ..core.serialize import dataclass_to_dict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DailyLossAlert:
    type: AlertType
    value: float    # loss percent or loss amount, matching ``type``
    limit: float
    message: str

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)


def check_daily_loss(
    daily_pnl: Decimal,
    account_balance: Decimal,
    settings: RiskSettings,
) -> DailyLossAlert | None:
    """Return an alert when a daily loss limit is breached, else ``None``.

    Args:
        daily_pnl: Today's PnL (negative means a loss).
        account_balance: Reference capital for the percent limit.  When it
            is not positive only the amount limit can trigger.
        settings: Limits and the master ``alert_enabled`` switch.
    """
    if not settings.alert_enabled:
        return None

    pnl = to_decimal(daily_pnl)
    if pnl >= 0:
        return None

    balance = to_decimal(account_balance)
    loss = -pnl

    if settings.max_daily_loss_percent > 0 and balance > 0:
        loss_pct = float(loss / balance * 100)
        if loss_pct >= settings.max_daily_loss_percent:
            logger.warning(
                "Daily loss limit BREACHED: pnl=%s (%.2f%%), limit=%.2f%%",
                pnl,
                loss_pct,
                settings.max_daily_loss_percent,
            )
            return DailyLossAlert(
                type=AlertType.PERCENT,
                value=loss_pct,
                limit=settings.max_daily_loss_percent,
                message=(
                    f"Daily loss of {loss_pct:.1f}% exceeds the "
                    f"{settings.max_daily_loss_percent:g}% limit"
                ),
            )

    limit_amount = settings.max_daily_loss_amount
    if limit_amount > 0 and loss >= limit_amount:
        logger.warning(
            "Daily loss limit BREACHED: loss=%s, limit=%s", loss, limit_amount
        )
        return DailyLossAlert(
            type=AlertType.AMOUNT,
            value=float(loss),
            limit=float(limit_amount),
            message=f"Daily loss of {loss} exceeds the {limit_amount} limit",
        )

    return None
