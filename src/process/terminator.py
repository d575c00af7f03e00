"""Best-effort termination of timer processes by OS process id."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import psutil

REASON_SENT = "sent"
REASON_INVALID_PID = "invalid_pid"
REASON_NO_SUCH_PROCESS = "no_such_process"
REASON_ACCESS_DENIED = "access_denied"
REASON_ERROR = "error"


@dataclass(frozen=True)
class TerminationResult:
    """Outcome of one kill request; ``delivered`` does not mean the process exited."""
    pid: int
    delivered: bool
    reason: str


class ProcessTerminator:
    """Sends a single kill request per call; never waits and never retries.

    The pid is not checked against the timer that registered it, so a pid
    reused by the OS would be signalled as well.
    """

    def __init__(
        self,
        *,
        include_children: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        self._include_children = include_children
        self._logger = logger or logging.getLogger("terminator")

    def terminate(self, pid: int) -> TerminationResult:
        if int(pid) <= 0:
            self._logger.warning("Refusing to signal invalid pid %s", pid)
            return TerminationResult(pid=int(pid), delivered=False, reason=REASON_INVALID_PID)

        try:
            process = psutil.Process(int(pid))
            children = process.children(recursive=True) if self._include_children else []
            process.kill()
        except psutil.NoSuchProcess:
            self._logger.warning("Process %s no longer exists", pid)
            return TerminationResult(pid=int(pid), delivered=False, reason=REASON_NO_SUCH_PROCESS)
        except psutil.AccessDenied:
            self._logger.warning("Access denied while killing process %s", pid)
            return TerminationResult(pid=int(pid), delivered=False, reason=REASON_ACCESS_DENIED)
        except psutil.Error as error:
            self._logger.warning("Failed to kill process %s: %s", pid, error)
            return TerminationResult(pid=int(pid), delivered=False, reason=REASON_ERROR)

        # Alert dialogs run as children of the timer process.
        for child in children:
            try:
                child.kill()
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue

        self._logger.info("Sent kill to process %s", pid)
        return TerminationResult(pid=int(pid), delivered=True, reason=REASON_SENT)
