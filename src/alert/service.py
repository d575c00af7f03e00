"""Expiry notifiers that ask the user to snooze, restart or stop a timer."""

from __future__ import annotations

import logging
import subprocess
import sys
from typing import Callable, Optional, TextIO

from lifecycle.constants import (
    ACTION_RESTART,
    ACTION_SNOOZE,
    ACTION_STOP,
    TIMER_ACTIONS,
)


class AlertError(Exception):
    """Raised when the expiry alert cannot be shown or returns no action."""


def parse_alert_token(output: str) -> Optional[str]:
    """Return the last recognised action token printed by the dialog."""
    for line in reversed((output or "").splitlines()):
        token = line.strip().lower()
        if token in TIMER_ACTIONS:
            return token
    return None


class DialogNotifier:
    """Runs the tkinter dialog in a child process and reads its choice."""

    def __init__(
        self,
        *,
        python_executable: Optional[str] = None,
        sound_enabled: bool = True,
        timeout_seconds: Optional[float] = None,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        logger: Optional[logging.Logger] = None,
    ):
        self._python = python_executable or sys.executable
        self._sound_enabled = sound_enabled
        self._timeout_seconds = timeout_seconds
        self._runner = runner
        self._logger = logger or logging.getLogger("alert")

    def command(self, message: str) -> list[str]:
        command = [self._python, "-m", "alert.dialog"]
        if not self._sound_enabled:
            command.append("--silent")
        command.extend(["--", message])
        return command

    def prompt(self, message: str) -> str:
        command = self.command(message)
        self._logger.debug("Showing expiry dialog: %s", message)
        try:
            completed = self._runner(
                command,
                capture_output=True,
                text=True,
                timeout=self._timeout_seconds,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as error:
            raise AlertError(f"Failed to show expiry dialog: {error}") from error

        if completed.returncode != 0:
            stderr = (completed.stderr or "").strip()
            raise AlertError(
                f"Expiry dialog exited with status {completed.returncode}: {stderr}"
            )

        action = parse_alert_token(completed.stdout)
        if action is None:
            raise AlertError(f"Expiry dialog returned no action: {completed.stdout!r}")
        self._logger.info("User chose %s for %r", action, message)
        return action


_CONSOLE_CHOICES = {
    "s": ACTION_SNOOZE,
    "snooze": ACTION_SNOOZE,
    "r": ACTION_RESTART,
    "restart": ACTION_RESTART,
    "x": ACTION_STOP,
    "stop": ACTION_STOP,
    "": ACTION_STOP,
}


class ConsoleNotifier:
    """Terminal prompt used for foreground timers without a display."""

    def __init__(
        self,
        *,
        input_stream: Optional[TextIO] = None,
        output_stream: Optional[TextIO] = None,
        sound_enabled: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        self._input = input_stream or sys.stdin
        self._output = output_stream or sys.stdout
        self._sound_enabled = sound_enabled
        self._logger = logger or logging.getLogger("alert")

    def prompt(self, message: str) -> str:
        bell = "\a" if self._sound_enabled else ""
        self._output.write(f"{bell}⌛ {message}\n")
        while True:
            self._output.write("[s]nooze, [r]estart or [x] stop (default stop): ")
            self._output.flush()
            line = self._input.readline()
            if not line:
                self._output.write("\n")
                return ACTION_STOP
            action = _CONSOLE_CHOICES.get(line.strip().lower())
            if action is not None:
                self._logger.info("User chose %s for %r", action, message)
                return action
            self._output.write(f"Unknown choice: {line.strip()}\n")
