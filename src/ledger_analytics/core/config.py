"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings

from .enums import IntradayOrder
from .errors import ConfigError
from .models import RiskSettings


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class RiskBandConfig(BaseModel):
    """Risk-level thresholds as fractions of ``max_position_percent``.

    A position below ``medium_at`` of the limit is low, below ``high_at``
    medium, below ``critical_at`` high, and critical otherwise.
    """

    medium_at: float = 0.5
    high_at: float = 0.8
    critical_at: float = 1.0

    @model_validator(mode="after")
    def _check_order(self) -> "RiskBandConfig":
        if not (0.0 <= self.medium_at <= self.high_at <= self.critical_at):
            raise ValueError(
                "risk bands must satisfy 0 <= medium_at <= high_at <= critical_at"
            )
        return self


class GoalConfig(BaseModel):
    window_months: int = 6  # Trailing months, current month included


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Engine settings.

    Loaded from TOML config files, overridden by environment variables
    (``LEDGER_`` prefix, ``__`` for nested keys).
    """

    # Ledger
    intraday_order: IntradayOrder = IntradayOrder.ID
    realized_pnl_decimals: int | None = None  # None keeps exact Decimal PnL
    strict: bool = False  # Raise on the first malformed trade

    # Risk
    risk_bands: RiskBandConfig = Field(default_factory=RiskBandConfig)
    default_risk: RiskSettings = Field(default_factory=RiskSettings)
    value_unpriced_at_cost: bool = False

    goals: GoalConfig = Field(default_factory=GoalConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "LEDGER_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.

    Raises:
        ConfigError: If the file is missing or the values do not validate.
    """
    from pydantic import ValidationError

    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        import tomli

        with open(path, "rb") as f:
            data = tomli.load(f)

    if overrides:
        data.update(overrides)

    try:
        return Settings(**data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
