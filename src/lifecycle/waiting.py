"""Blocking waits used while a timer is running."""

from __future__ import annotations

import sys
import time
from typing import Callable, Optional, TextIO

from durations import format_clock


class SleepWaiter:
    """Background wait: one sleep for the whole remaining period."""

    def __init__(self, sleep: Callable[[float], None] = time.sleep):
        self._sleep = sleep

    def wait(self, seconds: float) -> None:
        if seconds > 0:
            self._sleep(seconds)


class CountdownWaiter:
    """Foreground wait that redraws ``Time remaining: HH:MM:SS`` every second."""

    def __init__(
        self,
        *,
        stream: Optional[TextIO] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._stream = stream or sys.stdout
        self._sleep = sleep

    def wait(self, seconds: float) -> None:
        remaining = max(0.0, float(seconds))
        while remaining > 0:
            self._write(f"\rTime remaining: {format_clock(remaining)}")
            step = min(1.0, remaining)
            self._sleep(step)
            remaining -= step
        self._write(f"\rTime remaining: {format_clock(0)}\n")

    def _write(self, text: str) -> None:
        self._stream.write(text)
        self._stream.flush()
