"""State machine for a single timer process: running, expired, stopped."""

from __future__ import annotations

import datetime as dt
import logging
import os
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from durations import DurationParseError, deadline_after
from registry import utc_now

from .constants import (
    ACTION_RESTART,
    ACTION_SNOOZE,
    ACTION_STOP,
    DEFAULT_SNOOZE_DURATION,
    PHASE_EXPIRED,
    PHASE_IDLE,
    PHASE_RUNNING,
    PHASE_STOPPED,
    REASON_ALREADY_STARTED,
    REASON_NOT_EXPIRED,
    REASON_RESTARTED,
    REASON_SNOOZED,
    REASON_STARTED,
    REASON_STOPPED,
    REASON_UNSUPPORTED_ACTION,
    RESTARTED_PREFIX,
    SNOOZED_PREFIX,
    TIMER_ACTIONS,
)
from .contracts import Notifier, TimerStoreLike, Waiter

TimerPhase = Literal["idle", "running", "expired", "stopped"]
TimerAction = Literal["snooze", "restart", "stop"]


@dataclass(frozen=True)
class LifecycleSnapshot:
    """Immutable view of the timer's current waiting period."""
    phase: TimerPhase
    record_id: Optional[int]
    duration_spec: Optional[str]
    message: Optional[str]
    started_at: Optional[dt.datetime]
    original_duration_spec: Optional[str]
    original_message: Optional[str]

    @property
    def is_active(self) -> bool:
        return self.phase in (PHASE_RUNNING, PHASE_EXPIRED)


@dataclass(frozen=True)
class LifecycleResult:
    """Result envelope returned after starting the timer or applying an action."""
    action: str
    accepted: bool
    reason: str
    snapshot: LifecycleSnapshot


def resolve_snooze_duration(configured: Optional[str]) -> str:
    """Return ``configured`` when it parses, otherwise the 5 minute fallback."""
    candidate = (configured or "").strip()
    if not candidate:
        return DEFAULT_SNOOZE_DURATION
    try:
        deadline_after(utc_now(), candidate)
    except DurationParseError:
        return DEFAULT_SNOOZE_DURATION
    return candidate


class TimerLifecycle:
    """Owns one timer's registry row from creation until it stops.

    Every registry mutation is committed before the process blocks, so an
    external kill during the wait never leaves a half-written row behind.
    """

    def __init__(
        self,
        *,
        store: TimerStoreLike,
        notifier: Notifier,
        waiter: Waiter,
        snooze_duration: Optional[str] = None,
        foreground: bool = False,
        pid: Optional[int] = None,
        clock: Callable[[], dt.datetime] = utc_now,
        logger: Optional[logging.Logger] = None,
    ):
        self._store = store
        self._notifier = notifier
        self._waiter = waiter
        self._snooze_duration = resolve_snooze_duration(snooze_duration)
        self._foreground = bool(foreground)
        self._pid = int(pid) if pid is not None else os.getpid()
        self._clock = clock
        self._logger = logger or logging.getLogger("lifecycle")

        self._phase: TimerPhase = PHASE_IDLE
        self._record_id: Optional[int] = None
        self._duration_spec: Optional[str] = None
        self._message: Optional[str] = None
        self._started_at: Optional[dt.datetime] = None
        self._original_duration_spec: Optional[str] = None
        self._original_message: Optional[str] = None

    @property
    def snooze_duration(self) -> str:
        return self._snooze_duration

    def snapshot(self) -> LifecycleSnapshot:
        return LifecycleSnapshot(
            phase=self._phase,
            record_id=self._record_id,
            duration_spec=self._duration_spec,
            message=self._message,
            started_at=self._started_at,
            original_duration_spec=self._original_duration_spec,
            original_message=self._original_message,
        )

    def start(self, duration_spec: str, message: str) -> LifecycleResult:
        """Register the timer; raises ``DurationParseError`` for a bad duration."""
        if self._phase != PHASE_IDLE:
            return self._result("start", False, REASON_ALREADY_STARTED)

        deadline_after(self._clock(), duration_spec)
        self._original_duration_spec = duration_spec
        self._original_message = message
        self._enter_running(duration_spec, message)
        return self._result("start", True, REASON_STARTED)

    def wait(self) -> None:
        """Block until the current waiting period ends, then mark it expired."""
        if self._phase != PHASE_RUNNING:
            return
        remaining = self.remaining_seconds()
        self._logger.debug("Timer %s waiting %.3fs", self._record_id, remaining)
        self._waiter.wait(max(0.0, remaining))
        self._phase = PHASE_EXPIRED
        self._logger.info("Timer %s expired: message=%s", self._record_id, self._message)

    def remaining_seconds(self) -> float:
        if self._started_at is None or self._duration_spec is None:
            return 0.0
        deadline = deadline_after(self._started_at, self._duration_spec)
        return (deadline - self._clock()).total_seconds()

    def expire(self) -> str:
        """Ask the notifier for the next action; any failure means stop."""
        message = self._message or ""
        try:
            action = self._notifier.prompt(message)
        except Exception as error:
            self._logger.error(
                "Alert for timer %s failed, stopping: %s", self._record_id, error
            )
            return ACTION_STOP

        normalized = str(action or "").strip().lower()
        if normalized not in TIMER_ACTIONS:
            self._logger.warning(
                "Alert returned unknown action %r for timer %s, stopping.",
                action,
                self._record_id,
            )
            return ACTION_STOP
        return normalized

    def apply(self, action: str) -> LifecycleResult:
        if action not in TIMER_ACTIONS:
            return self._result(action, False, REASON_UNSUPPORTED_ACTION)
        if self._phase != PHASE_EXPIRED:
            return self._result(action, False, REASON_NOT_EXPIRED)

        if action == ACTION_STOP:
            self._remove_current()
            self._phase = PHASE_STOPPED
            self._logger.info("Timer stopped: message=%s", self._message)
            return self._result(action, True, REASON_STOPPED)

        original_message = self._original_message or ""
        if action == ACTION_SNOOZE:
            self._remove_current()
            self._enter_running(self._snooze_duration, SNOOZED_PREFIX + original_message)
            return self._result(action, True, REASON_SNOOZED)

        self._remove_current()
        self._enter_running(
            self._original_duration_spec or "",
            RESTARTED_PREFIX + original_message,
        )
        return self._result(ACTION_RESTART, True, REASON_RESTARTED)

    def run(self, duration_spec: str, message: str) -> LifecycleSnapshot:
        """Drive the timer until the user stops it."""
        self.start(duration_spec, message)
        while self._phase == PHASE_RUNNING:
            self.wait()
            self.apply(self.expire())
        return self.snapshot()

    def _enter_running(self, duration_spec: str, message: str) -> None:
        started_at = self._clock()
        deadline_after(started_at, duration_spec)
        record_id = self._store.insert(
            duration_spec,
            message,
            self._pid,
            started_at=started_at,
        )
        self._record_id = record_id
        self._duration_spec = duration_spec
        self._message = message
        self._started_at = started_at
        self._phase = PHASE_RUNNING
        self._store.append_history(
            duration_spec,
            message,
            self._foreground,
            timestamp=started_at,
        )
        self._logger.info(
            "Timer %d running: duration=%s message=%s foreground=%s",
            record_id,
            duration_spec,
            message,
            self._foreground,
        )

    def _remove_current(self) -> None:
        if self._record_id is not None:
            self._store.remove(self._record_id)

    def _result(self, action: str, accepted: bool, reason: str) -> LifecycleResult:
        return LifecycleResult(
            action=action,
            accepted=accepted,
            reason=reason,
            snapshot=self.snapshot(),
        )
