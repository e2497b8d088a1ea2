"""Trade-ledger analytics engine.

Turns a flat list of BUY/SELL trade records into positions, realized and
unrealized PnL, equity curves, behavioural statistics, concentration risk
and monthly goal progress.  Every run is a pure function of its inputs.
"""

from .engine import AnalyticsEngine, AnalyticsReport

__version__ = "0.1.0"

__all__ = ["AnalyticsEngine", "AnalyticsReport", "__version__"]
