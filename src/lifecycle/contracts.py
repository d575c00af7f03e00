"""Protocols for the collaborators a timer lifecycle depends on."""

from __future__ import annotations

import datetime as dt
from typing import Optional, Protocol

from registry import HistoryEntry


class TimerStoreLike(Protocol):
    """Subset of the registry store used by a timer process."""
    def insert(
        self,
        duration_spec: str,
        message: str,
        pid: int,
        *,
        started_at: Optional[dt.datetime] = None,
    ) -> int:
        ...

    def remove(self, record_id: int) -> bool:
        ...

    def append_history(
        self,
        duration_spec: str,
        message: str,
        foreground: bool,
        *,
        timestamp: Optional[dt.datetime] = None,
    ) -> HistoryEntry:
        ...


class Notifier(Protocol):
    """Shows the expiry alert and blocks until the user picks an action."""
    def prompt(self, message: str) -> str:
        ...


class Waiter(Protocol):
    """Blocks the calling process until ``seconds`` have elapsed."""
    def wait(self, seconds: float) -> None:
        ...
