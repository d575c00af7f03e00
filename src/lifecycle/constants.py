"""Phase, action, and reason constants used by the timer lifecycle."""

from __future__ import annotations

DEFAULT_SNOOZE_DURATION = "5m"
DEFAULT_TIMER_MESSAGE = "Time's up!"

SNOOZED_PREFIX = "(Snoozed) "
RESTARTED_PREFIX = "(Restarted) "

PHASE_IDLE = "idle"
PHASE_RUNNING = "running"
PHASE_EXPIRED = "expired"
PHASE_STOPPED = "stopped"

ACTION_SNOOZE = "snooze"
ACTION_RESTART = "restart"
ACTION_STOP = "stop"

TIMER_ACTIONS: frozenset[str] = frozenset({ACTION_SNOOZE, ACTION_RESTART, ACTION_STOP})

REASON_STARTED = "started"
REASON_ALREADY_STARTED = "already_started"
REASON_SNOOZED = "snoozed"
REASON_RESTARTED = "restarted"
REASON_STOPPED = "stopped"
REASON_NOT_EXPIRED = "not_expired"
REASON_UNSUPPORTED_ACTION = "unsupported_action"
