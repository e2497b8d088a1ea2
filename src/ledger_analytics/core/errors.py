"""Custom exception hierarchy for the analytics engine."""


class AnalyticsError(Exception):
    """Base exception for all analytics engine errors."""


# --- Configuration ---
class ConfigError(AnalyticsError):
    """Invalid or missing configuration."""


# --- Data ---
class DataError(AnalyticsError):
    """Input data error."""


class MalformedTradeError(DataError):
    """A single trade record cannot be used by the ledger.

    Raised per trade; the ledger collects these and keeps going unless it
    runs in strict mode.
    """

    def __init__(self, trade_id: str, reason: str):
        self.trade_id = trade_id
        self.reason = reason
        super().__init__(f"Malformed trade [{trade_id}]: {reason}")

    def to_dict(self) -> dict:
        return {"trade_id": self.trade_id, "reason": self.reason}


# --- Settings storage ---
class SettingsStoreError(AnalyticsError):
    """Settings could not be loaded from or saved to the backing store."""
