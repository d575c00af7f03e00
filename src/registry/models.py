"""Immutable rows read from and written to the registry store."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

from durations import deadline_after


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


@dataclass(frozen=True)
class ActiveTimerRecord:
    """One registered waiting period of a live timer process."""
    id: int
    pid: int
    started_at: dt.datetime
    duration_spec: str
    message: str

    def deadline(self) -> dt.datetime:
        """Re-parse ``duration_spec`` on every call; raises ``DurationParseError``."""
        return deadline_after(self.started_at, self.duration_spec)

    def remaining_seconds(self, now: dt.datetime | None = None) -> float:
        current = now or utc_now()
        return (self.deadline() - current).total_seconds()


@dataclass(frozen=True)
class HistoryEntry:
    """Append-only record of a timer entering the running state."""
    id: int
    timestamp: dt.datetime
    duration_spec: str
    message: str
    foreground: bool


def to_storage_time(value: dt.datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc).isoformat()


def from_storage_time(raw: str) -> dt.datetime:
    parsed = dt.datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.timezone.utc)
    return parsed
