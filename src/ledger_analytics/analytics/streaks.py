"""Win / loss streak tracking over closing trades."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from ..core.enums import Outcome, StreakType
from ..core.serialize import dataclass_to_dict
from ..ledger.position import ClosingEvent

_STREAK_OF = {Outcome.WIN: StreakType.WIN, Outcome.LOSS: StreakType.LOSS}


@dataclass(frozen=True)
class Streak:
    type: StreakType = StreakType.NONE
    count: int = 0

    @property
    def signed(self) -> int:
        """Positive for a win streak, negative for a loss streak."""
        if self.type == StreakType.WIN:
            return self.count
        if self.type == StreakType.LOSS:
            return -self.count
        return 0

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)


@dataclass(frozen=True)
class StreakStats:
    current: Streak = field(default_factory=Streak)
    max_win_streak: int = 0
    max_loss_streak: int = 0

    def to_dict(self) -> dict[str, Any]:
        return dataclass_to_dict(self)


def compute_streaks(events: Iterable[ClosingEvent]) -> StreakStats:
    """Walk closings in order; an even result ends any running streak."""
    current = StreakType.NONE
    count = 0
    max_win = 0
    max_loss = 0

    for event in events:
        kind = _STREAK_OF.get(event.outcome, StreakType.NONE)
        if kind == StreakType.NONE:
            current, count = StreakType.NONE, 0
            continue
        if kind == current:
            count += 1
        else:
            current, count = kind, 1
        if kind == StreakType.WIN:
            max_win = max(max_win, count)
        else:
            max_loss = max(max_loss, count)

    return StreakStats(
        current=Streak(type=current, count=count),
        max_win_streak=max_win,
        max_loss_streak=max_loss,
    )
