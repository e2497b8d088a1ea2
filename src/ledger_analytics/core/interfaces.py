"""Protocol interfaces for the engine's collaborators.

Implementations can be swapped (in-memory, file, remote) without changing
callers.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# Settings storage
# ---------------------------------------------------------------------------

@runtime_checkable
class ISettingsStore(Protocol):
    """Key/value store for user-editable settings.

    ``scope`` names one settings document (e.g. ``"risk_settings"``).
    ``load`` returns ``None`` when nothing has been saved yet.
    ``transaction`` holds an exclusive lock on one scope so a
    load-modify-save cycle is not interleaved with another writer.
    """

    def load(self, scope: str) -> Any | None: ...

    def save(self, scope: str, value: Any) -> None: ...

    def transaction(self, scope: str) -> AbstractContextManager[None]: ...
