"""Trade list filtering ahead of a replay.

Filtering happens on the input trades, before the ledger sees them.  A date
range that cuts off the buys of a position therefore changes the cost basis
the ledger computes for the sells that remain; callers that want
whole-history cost basis should filter closing events instead.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from .core.enums import TagFilterMode
from .core.models import Trade

logger = logging.getLogger(__name__)

_KEYWORD_SPLIT = re.compile(r"[,\s]+")


def parse_keywords(text: str) -> list[str]:
    """Split tag search text into lower-cased keywords."""
    return [kw for kw in (k.strip().lower() for k in _KEYWORD_SPLIT.split(text)) if kw]


def available_tags(trades: Iterable[Trade]) -> list[str]:
    """Every tag used by ``trades``, sorted."""
    tags: set[str] = set()
    for trade in trades:
        tags.update(trade.tags)
    return sorted(tags)


@dataclass(frozen=True)
class TradeFilter:
    """Filter criteria; every empty criterion matches all trades.

    Attributes:
        symbol_query: Case-insensitive substring of the symbol.
        symbol: Exact symbol (drill-down into one position).
        tag_query: Comma/space separated keywords, each matched as a
            case-insensitive substring of a trade's tags.
        tag_mode: ``AND`` needs every keyword to match some tag, ``OR`` any.
        date_from: Inclusive lower bound on the trade date.
        date_to: Inclusive upper bound on the trade date.
    """

    symbol_query: str = ""
    symbol: str = ""
    tag_query: str = ""
    tag_mode: TagFilterMode = TagFilterMode.OR
    date_from: date | None = None
    date_to: date | None = None

    @property
    def is_empty(self) -> bool:
        return not (
            self.symbol_query
            or self.symbol
            or parse_keywords(self.tag_query)
            or self.date_from
            or self.date_to
        )

    def _match_tags(self, trade: Trade, keywords: list[str]) -> bool:
        tags = [t.lower() for t in trade.tags]
        if not tags:
            return False
        hits = (any(kw in tag for tag in tags) for kw in keywords)
        if self.tag_mode == TagFilterMode.AND:
            return all(hits)
        return any(hits)

    def matches(self, trade: Trade) -> bool:
        if self.symbol_query and self.symbol_query.lower() not in trade.symbol.lower():
            return False
        keywords = parse_keywords(self.tag_query)
        if keywords and not self._match_tags(trade, keywords):
            return False
        if self.symbol and trade.symbol != self.symbol:
            return False
        if self.date_from and trade.date < self.date_from:
            return False
        if self.date_to and trade.date > self.date_to:
            return False
        return True

    def apply(self, trades: Iterable[Trade]) -> list[Trade]:
        """Matching trades, in input order."""
        trades = list(trades)
        if self.is_empty:
            return trades
        kept = [t for t in trades if self.matches(t)]
        logger.debug("Trade filter kept %d of %d trades", len(kept), len(trades))
        return kept
