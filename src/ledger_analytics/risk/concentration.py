"""Per-position concentration risk.

Values every open position at its current price, expresses it as a share of
the account balance and bands that share against the configured
``max_position_percent``.

Banding (fractions of the limit, configurable via ``RiskBandConfig``)::

    < 50 %   low
    < 80 %   medium
    < 100 %  high
    >= 100 % critical

A limit of zero or below means no limit is configured and every position is
low.  The banding is monotonic in ``position_percent``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from ..analytics.symbols import SymbolSummary
from ..core.config import RiskBandConfig
from ..core.enums import RiskLevel
from ..core.models import RiskSettings, coerce_price, to_decimal
from ..core.serialize import dataclass_to_dict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PositionRisk:
    """Concentration of one open position.

    ``position_value``, ``position_percent`` and ``risk_level`` are ``None``
    when the symbol has no current price.
    """

    symbol: str
    symbol_name: str | None
    quantity: Decimal
    current_price: Decimal | None
    position_value: Decimal | None
    position_percent: float | None
    risk_level: RiskLevel | None

    @property
    def is_high_risk(self) -> bool:
        return self.risk_level in (RiskLevel.HIGH, RiskLevel.CRITICAL)

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)


def classify_risk(
    position_percent: float,
    max_position_percent: float,
    bands: RiskBandConfig | None = None,
) -> RiskLevel:
    """Band a position share against the configured limit."""
    bands = bands or RiskBandConfig()
    if max_position_percent <= 0:
        return RiskLevel.LOW
    ratio = position_percent / max_position_percent
    if ratio >= bands.critical_at:
        return RiskLevel.CRITICAL
    if ratio >= bands.high_at:
        return RiskLevel.HIGH
    if ratio >= bands.medium_at:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def position_percent(position_value: Decimal, account_balance: Decimal) -> float:
    """Position value as a percentage of the balance, 0 when balance <= 0."""
    if account_balance <= 0:
        return 0.0
    return float(position_value / account_balance * 100)


class ConcentrationEvaluator:
    """Evaluates concentration risk for open positions.

    Usage::

        evaluator = ConcentrationEvaluator(bands=settings.risk_bands)
        risks = evaluator.evaluate(summaries, prices, balance, risk_settings)
        alarming = evaluator.high_risk(risks)
    """

    def __init__(
        self,
        *,
        bands: RiskBandConfig | None = None,
        value_unpriced_at_cost: bool = False,
    ) -> None:
        self._bands = bands or RiskBandConfig()
        self._value_unpriced_at_cost = value_unpriced_at_cost

    def evaluate(
        self,
        summaries: Iterable[SymbolSummary],
        current_prices: Mapping[str, Any] | None,
        account_balance: Decimal,
        settings: RiskSettings,
    ) -> list[PositionRisk]:
        """Return one :class:`PositionRisk` per open position.

        Sorted by ``position_percent`` descending (unpriced last), then symbol.
        """
        prices = current_prices or {}
        balance = to_decimal(account_balance)
        if balance <= 0:
            logger.warning(
                "Concentration check: account balance %s is non-positive", balance
            )

        risks: list[PositionRisk] = []
        for s in summaries:
            if s.position_qty <= 0:
                continue

            price = coerce_price(prices.get(s.symbol))
            if price is None and self._value_unpriced_at_cost:
                price = s.avg_cost

            if price is None:
                risks.append(
                    PositionRisk(
                        symbol=s.symbol,
                        symbol_name=s.symbol_name,
                        quantity=s.position_qty,
                        current_price=None,
                        position_value=None,
                        position_percent=None,
                        risk_level=None,
                    )
                )
                continue

            value = s.position_qty * price
            pct = position_percent(value, balance)
            level = classify_risk(pct, settings.max_position_percent, self._bands)
            if level == RiskLevel.CRITICAL:
                logger.warning(
                    "Position concentration CRITICAL: %s at %.2f%% (limit %.2f%%)",
                    s.symbol,
                    pct,
                    settings.max_position_percent,
                )
            risks.append(
                PositionRisk(
                    symbol=s.symbol,
                    symbol_name=s.symbol_name,
                    quantity=s.position_qty,
                    current_price=price,
                    position_value=value,
                    position_percent=pct,
                    risk_level=level,
                )
            )

        risks.sort(
            key=lambda r: (
                r.position_percent is None,
                -(r.position_percent or 0.0),
                r.symbol,
            )
        )
        return risks

    @staticmethod
    def high_risk(risks: Iterable[PositionRisk]) -> list[PositionRisk]:
        """Positions banded high or critical."""
        return [r for r in risks if r.is_high_risk]
