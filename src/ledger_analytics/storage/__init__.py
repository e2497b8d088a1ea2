"""Settings persistence behind :class:`~ledger_analytics.core.interfaces.ISettingsStore`."""

from .settings_store import (
    BALANCE_HISTORY_LIMIT,
    SCOPE_BALANCE_HISTORY,
    SCOPE_MONTHLY_GOALS,
    SCOPE_RISK_SETTINGS,
    JsonFileSettingsStore,
    MemorySettingsStore,
    load_balance_history,
    load_goals,
    load_risk_settings,
    record_balance,
    remove_goal,
    save_risk_settings,
    upsert_goal,
)

__all__ = [
    "BALANCE_HISTORY_LIMIT",
    "JsonFileSettingsStore",
    "MemorySettingsStore",
    "SCOPE_BALANCE_HISTORY",
    "SCOPE_MONTHLY_GOALS",
    "SCOPE_RISK_SETTINGS",
    "load_balance_history",
    "load_goals",
    "load_risk_settings",
    "record_balance",
    "remove_goal",
    "save_risk_settings",
    "upsert_goal",
]
