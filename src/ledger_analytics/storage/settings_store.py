"""Settings stores and typed helpers for user-editable settings.

Two interchangeable :class:`ISettingsStore` implementations:

MemorySettingsStore    Process-local dict, for tests and embedding
JsonFileSettingsStore  One JSON document per scope under a directory

The typed helpers validate whatever comes back from a store through the
pydantic models in ``core.models``, so a store only ever deals in plain
JSON-compatible data.
"""

from __future__ import annotations

import copy
import fcntl
import json
import logging
import os
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..core.errors import SettingsStoreError
from ..core.interfaces import ISettingsStore
from ..core.models import AccountBalance, MonthlyGoal, RiskSettings
from ..core.serialize import to_jsonable

logger = logging.getLogger(__name__)

SCOPE_RISK_SETTINGS = "risk_settings"
SCOPE_BALANCE_HISTORY = "account_balance_history"
SCOPE_MONTHLY_GOALS = "monthly_goals"

BALANCE_HISTORY_LIMIT = 30


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

class MemorySettingsStore:
    """In-memory store.  Values are deep-copied in and out."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self._lock = threading.RLock()

    def load(self, scope: str) -> Any | None:
        value = self._data.get(scope)
        return copy.deepcopy(value)

    def save(self, scope: str, value: Any) -> None:
        self._data[scope] = copy.deepcopy(to_jsonable(value))

    @contextmanager
    def transaction(self, scope: str) -> Iterator[None]:
        with self._lock:
            yield


class JsonFileSettingsStore:
    """Stores each scope as ``<directory>/<scope>.json``.

    Writes go to a temporary file in the same directory, are fsynced, and
    then renamed over the target, so a reader never sees a half-written
    document.  :meth:`transaction` takes an exclusive ``fcntl`` lock on
    ``<directory>/<scope>.lock``, which every writer of that scope shares.
    """

    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory)

    def _path(self, scope: str) -> Path:
        if not scope or "/" in scope or scope.startswith("."):
            raise SettingsStoreError(f"Invalid settings scope: {scope!r}")
        return self._dir / f"{scope}.json"

    def load(self, scope: str) -> Any | None:
        path = self._path(scope)
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise SettingsStoreError(f"Cannot read settings {path}: {exc}") from exc

    def save(self, scope: str, value: Any) -> None:
        path = self._path(scope)
        payload = json.dumps(to_jsonable(value), indent=2, sort_keys=True)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._dir, prefix=f".{scope}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise SettingsStoreError(f"Cannot write settings {path}: {exc}") from exc
        logger.debug("Saved settings scope %s to %s", scope, path)

    @contextmanager
    def transaction(self, scope: str) -> Iterator[None]:
        lock_path = self._path(scope).with_suffix(".lock")
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            lock_file = open(lock_path, "a")
        except OSError as exc:
            raise SettingsStoreError(f"Cannot lock settings {lock_path}: {exc}") from exc
        with lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)


# ---------------------------------------------------------------------------
# Typed helpers
# ---------------------------------------------------------------------------

def _validate(model: type, raw: Any, scope: str) -> Any:
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise SettingsStoreError(f"Stored {scope} is invalid: {exc}") from exc


def load_risk_settings(store: ISettingsStore) -> RiskSettings:
    """Stored risk settings, or the defaults when nothing was saved."""
    raw = store.load(SCOPE_RISK_SETTINGS)
    if raw is None:
        return RiskSettings()
    return _validate(RiskSettings, raw, SCOPE_RISK_SETTINGS)


def save_risk_settings(store: ISettingsStore, settings: RiskSettings) -> None:
    store.save(SCOPE_RISK_SETTINGS, settings.model_dump())


def load_balance_history(store: ISettingsStore) -> list[AccountBalance]:
    """Balance history, most recent date first."""
    raw = store.load(SCOPE_BALANCE_HISTORY) or []
    history = [_validate(AccountBalance, item, SCOPE_BALANCE_HISTORY) for item in raw]
    history.sort(key=lambda b: b.date, reverse=True)
    return history


def record_balance(store: ISettingsStore, entry: AccountBalance) -> list[AccountBalance]:
    """Insert or replace the balance for ``entry.date``.

    Keeps at most :data:`BALANCE_HISTORY_LIMIT` entries (the most recent
    dates) and returns the stored history, most recent first.
    """
    with store.transaction(SCOPE_BALANCE_HISTORY):
        history = [b for b in load_balance_history(store) if b.date != entry.date]
        history.append(entry)
        history.sort(key=lambda b: b.date, reverse=True)
        dropped = len(history) - BALANCE_HISTORY_LIMIT
        if dropped > 0:
            logger.debug("Balance history trimmed by %d entries", dropped)
        history = history[:BALANCE_HISTORY_LIMIT]
        store.save(SCOPE_BALANCE_HISTORY, [b.model_dump() for b in history])
    return history


def load_goals(store: ISettingsStore) -> list[MonthlyGoal]:
    """Monthly goals, most recent month first."""
    raw = store.load(SCOPE_MONTHLY_GOALS) or []
    goals = [_validate(MonthlyGoal, item, SCOPE_MONTHLY_GOALS) for item in raw]
    goals.sort(key=lambda g: (g.year, g.month), reverse=True)
    return goals


def upsert_goal(store: ISettingsStore, goal: MonthlyGoal) -> list[MonthlyGoal]:
    """Insert or replace the goal for ``(goal.year, goal.month)``."""
    with store.transaction(SCOPE_MONTHLY_GOALS):
        goals = [
            g for g in load_goals(store) if (g.year, g.month) != (goal.year, goal.month)
        ]
        goals.append(goal)
        goals.sort(key=lambda g: (g.year, g.month), reverse=True)
        store.save(SCOPE_MONTHLY_GOALS, [g.model_dump() for g in goals])
    return goals


def remove_goal(store: ISettingsStore, year: int, month: int) -> bool:
    """Delete the goal for one month; returns whether one existed."""
    with store.transaction(SCOPE_MONTHLY_GOALS):
        goals = load_goals(store)
        kept = [g for g in goals if (g.year, g.month) != (year, month)]
        if len(kept) == len(goals):
            return False
        store.save(SCOPE_MONTHLY_GOALS, [g.model_dump() for g in kept])
    return True
