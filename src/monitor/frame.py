"""Frame computation and plain-text tables for the monitor and history views."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from durations import DurationParseError, format_clock
from registry import ActiveTimerRecord, HistoryEntry

CLEAR_SCREEN = "\x1b[2J\x1b[H"


@dataclass(frozen=True)
class FrameRow:
    record: ActiveTimerRecord
    remaining_seconds: float


@dataclass(frozen=True)
class Frame:
    """One monitor refresh: visible rows plus rows to reap or skip."""
    rows: list[FrameRow] = field(default_factory=list)
    expired: list[ActiveTimerRecord] = field(default_factory=list)
    unparseable: list[ActiveTimerRecord] = field(default_factory=list)

    def find(self, record_id: int) -> FrameRow | None:
        for row in self.rows:
            if row.record.id == record_id:
                return row
        return None


def build_frame(records: Iterable[ActiveTimerRecord], now: dt.datetime) -> Frame:
    frame = Frame()
    for record in sorted(records, key=lambda item: item.id):
        try:
            remaining = record.remaining_seconds(now)
        except DurationParseError:
            frame.unparseable.append(record)
            continue
        if remaining <= 0:
            frame.expired.append(record)
            continue
        frame.rows.append(FrameRow(record=record, remaining_seconds=remaining))
    return frame


def render_active_table(rows: Sequence[FrameRow]) -> str:
    lines = [
        f"{'ID':<6} | {'PID':<8} | {'Remaining':<10} | {'Duration':<12} | Message",
        "-" * 70,
    ]
    if not rows:
        lines.append("No active timers.")
    for row in rows:
        record = row.record
        lines.append(
            f"{record.id:<6} | {record.pid:<8} | "
            f"{format_clock(row.remaining_seconds):<10} | "
            f"{record.duration_spec:<12} | {record.message}"
        )
    return "\n".join(lines)


def render_history_table(entries: Sequence[HistoryEntry]) -> str:
    lines = [
        f"{'Timestamp':<20} | {'Duration':<12} | {'Message':<20} | Background",
        "-" * 70,
    ]
    for entry in entries:
        local_time = entry.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S")
        lines.append(
            f"{local_time:<20} | {entry.duration_spec:<12} | "
            f"{entry.message:<20} | {str(not entry.foreground).lower()}"
        )
    return "\n".join(lines)
