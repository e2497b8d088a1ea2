"""Position & realization ledger."""

from .position import (
    ClosingEvent,
    DataQualityIssue,
    Ledger,
    LedgerEntry,
    PositionState,
    SymbolLedger,
    build_ledger,
    parse_trades,
    replay_symbol,
    sort_trades,
    validate_trade,
)

__all__ = [
    "ClosingEvent",
    "DataQualityIssue",
    "Ledger",
    "LedgerEntry",
    "PositionState",
    "SymbolLedger",
    "build_ledger",
    "parse_trades",
    "replay_symbol",
    "sort_trades",
    "validate_trade",
]
