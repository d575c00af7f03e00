"""Live monitor for every timer registered on this machine."""

from .commands import MonitorCommand, parse_command
from .frame import Frame, FrameRow, build_frame, render_active_table, render_history_table
from .kill import KillOutcome, TimerKiller
from .loop import LiveMonitor, MonitorDependencies
from .reader import CommandReader

__all__ = [
    "CommandReader",
    "Frame",
    "FrameRow",
    "KillOutcome",
    "LiveMonitor",
    "MonitorCommand",
    "MonitorDependencies",
    "TimerKiller",
    "build_frame",
    "parse_command",
    "render_active_table",
    "render_history_table",
]
