"""Background reader that forwards stdin lines to the monitor loop."""

from __future__ import annotations

import logging
import sys
import threading
from queue import Empty, Queue
from typing import Optional, TextIO


class CommandReader:
    """Daemon thread pushing each completed input line onto a queue.

    The render loop only ever calls ``poll()``, which never blocks.
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        queue: Optional[Queue] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._stream = stream or sys.stdin
        self._queue: Queue[str] = queue if queue is not None else Queue()
        self._logger = logger or logging.getLogger("monitor.input")
        self._thread: Optional[threading.Thread] = None
        self._finished = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def finished(self) -> bool:
        """True once the input stream reached end of file."""
        return self._finished.is_set()

    def start(self) -> None:
        if self.is_running:
            return
        self._finished.clear()
        self._thread = threading.Thread(
            target=self._run, daemon=True, name="monitor-input"
        )
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def poll(self) -> Optional[str]:
        try:
            return self._queue.get_nowait()
        except Empty:
            return None

    def _run(self) -> None:
        try:
            for line in iter(self._stream.readline, ""):
                self._queue.put(line.rstrip("\r\n"))
        except (OSError, ValueError) as error:
            self._logger.error("Monitor input stopped: %s", error)
        finally:
            self._finished.set()
            self._logger.debug("Monitor input reached end of stream")
