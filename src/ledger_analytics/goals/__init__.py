"""Monthly goal tracking."""

from .progress import MonthlyProgress, monthly_progress, progress_percent, trailing_month_keys

__all__ = [
    "MonthlyProgress",
    "monthly_progress",
    "progress_percent",
    "trailing_month_keys",
]
