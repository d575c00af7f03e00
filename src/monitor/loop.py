"""Interactive live monitor: refresh the active-timer table and accept kills."""

from __future__ import annotations

import datetime as dt
import logging
import sys
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, TextIO

from registry import RegistryStore, utc_now

from .commands import parse_command
from .frame import CLEAR_SCREEN, Frame, build_frame, render_active_table
from .kill import KillOutcome, TimerKiller

DEFAULT_REFRESH_INTERVAL_SECONDS = 1.0
DEFAULT_COMMAND_PAUSE_SECONDS = 2.0

FOOTER = "Enter a timer ID to kill it, 'all' to kill every timer, Ctrl+C to exit."


class CommandSource(Protocol):
    def start(self) -> None:
        ...

    def poll(self) -> Optional[str]:
        ...


@dataclass(frozen=True)
class MonitorDependencies:
    """Collaborators required by the monitor loop."""
    store: RegistryStore
    killer: TimerKiller
    commands: CommandSource
    logger: logging.Logger
    output: TextIO = sys.stdout
    clock: Callable[[], dt.datetime] = utc_now
    sleep: Callable[[float], None] = time.sleep


class LiveMonitor:
    """Single-threaded render loop fed by a non-blocking command source.

    Expired rows are reaped as a side effect of rendering. Commands are
    resolved against the most recently displayed frame.
    """

    def __init__(
        self,
        dependencies: MonitorDependencies,
        *,
        refresh_interval_seconds: float = DEFAULT_REFRESH_INTERVAL_SECONDS,
        command_pause_seconds: float = DEFAULT_COMMAND_PAUSE_SECONDS,
        clear_screen: bool = True,
    ):
        self._deps = dependencies
        self._logger = dependencies.logger
        self._refresh_interval_seconds = refresh_interval_seconds
        self._command_pause_seconds = command_pause_seconds
        self._clear_screen = clear_screen
        self._last_frame = Frame()

    @property
    def last_frame(self) -> Frame:
        return self._last_frame

    def run(self, *, max_frames: Optional[int] = None) -> int:
        """Loop until interrupted; ``KeyboardInterrupt`` propagates untouched."""
        self._deps.commands.start()
        frames = 0
        while max_frames is None or frames < max_frames:
            self._render_safely()
            frames += 1
            self._deps.sleep(self._refresh_interval_seconds)

            line = self._deps.commands.poll()
            if line is None:
                continue
            message = self._handle_safely(line)
            if message:
                self._write(message + "\n")
                self._deps.sleep(self._command_pause_seconds)
        return 0

    def refresh(self) -> Frame:
        """Snapshot the registry, reap expired rows, and draw the table."""
        frame = build_frame(self._deps.store.list_active(), self._deps.clock())
        for record in frame.expired:
            self._deps.store.remove(record.id)
            self._logger.info("Reaped expired timer %d (pid %d)", record.id, record.pid)
        for record in frame.unparseable:
            self._logger.warning(
                "Skipping timer %d with unparseable duration %r",
                record.id,
                record.duration_spec,
            )

        self._last_frame = frame
        screen = CLEAR_SCREEN if self._clear_screen else ""
        self._write(f"{screen}{render_active_table(frame.rows)}\n\n{FOOTER}\n")
        return frame

    def handle_command(self, line: str) -> Optional[KillOutcome]:
        command = parse_command(line)
        if command.kind == "empty":
            return None
        if command.kind == "kill_all":
            return self._deps.killer.kill_all()
        if command.kind == "kill" and command.record_id is not None:
            candidates = [row.record for row in self._last_frame.rows]
            return self._deps.killer.kill(command.record_id, candidates)
        return KillOutcome(message=f"Invalid input: {command.raw}", found=False)

    def _render_safely(self) -> None:
        try:
            self.refresh()
        except Exception as error:
            self._logger.error("Monitor refresh failed: %s", error, exc_info=True)
            self._write(f"Error refreshing timers: {error}\n")

    def _handle_safely(self, line: str) -> Optional[str]:
        try:
            outcome = self.handle_command(line)
        except Exception as error:
            self._logger.error("Monitor command %r failed: %s", line, error, exc_info=True)
            return f"Command failed: {error}"
        return outcome.message if outcome is not None else None

    def _write(self, text: str) -> None:
        self._deps.output.write(text)
        self._deps.output.flush()
