"""Kill commands shared by the live monitor and the one-shot ``--kill`` flag."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

from process import TerminationResult
from registry import ActiveTimerRecord


class KillStoreLike(Protocol):
    def get(self, record_id: int) -> Optional[ActiveTimerRecord]:
        ...

    def remove(self, record_id: int) -> bool:
        ...

    def list_active(self) -> list[ActiveTimerRecord]:
        ...


class TerminatorLike(Protocol):
    def terminate(self, pid: int) -> TerminationResult:
        ...


@dataclass(frozen=True)
class KillOutcome:
    message: str
    found: bool = True
    killed: tuple[int, ...] = ()


class TimerKiller:
    """Terminates timer processes and then deletes their registry rows."""

    def __init__(
        self,
        *,
        store: KillStoreLike,
        terminator: TerminatorLike,
        logger: Optional[logging.Logger] = None,
    ):
        self._store = store
        self._terminator = terminator
        self._logger = logger or logging.getLogger("monitor")

    def kill(
        self,
        record_id: int,
        candidates: Optional[Iterable[ActiveTimerRecord]] = None,
    ) -> KillOutcome:
        """Kill ``record_id``; ``candidates`` is the last displayed snapshot."""
        if candidates is None:
            record = self._store.get(record_id)
        else:
            shown = next((item for item in candidates if item.id == record_id), None)
            # The row may have stopped or been reaped since it was displayed.
            record = self._store.get(record_id) if shown is not None else None

        if record is None:
            return KillOutcome(message=f"Timer {record_id} not found", found=False)

        result = self._kill_record(record)
        if result.delivered:
            message = f"Killed timer {record.id} (pid {record.pid})"
        else:
            message = (
                f"Removed timer {record.id}; pid {record.pid} "
                f"could not be signalled ({result.reason})"
            )
        return KillOutcome(message=message, killed=(record.id,))

    def kill_all(self) -> KillOutcome:
        records = self._store.list_active()
        if not records:
            return KillOutcome(message="No active timers to kill")

        killed = []
        for record in records:
            self._kill_record(record)
            killed.append(record.id)
        return KillOutcome(
            message=f"Killed {len(killed)} timer(s)",
            killed=tuple(killed),
        )

    def _kill_record(self, record: ActiveTimerRecord) -> TerminationResult:
        result = self._terminator.terminate(record.pid)
        self._store.remove(record.id)
        self._logger.info(
            "Kill timer %d pid=%d delivered=%s reason=%s",
            record.id,
            record.pid,
            result.delivered,
            result.reason,
        )
        return result
