from .constants import (
    ACTION_RESTART,
    ACTION_SNOOZE,
    ACTION_STOP,
    DEFAULT_SNOOZE_DURATION,
    DEFAULT_TIMER_MESSAGE,
)
from .engine import (
    LifecycleResult,
    LifecycleSnapshot,
    TimerAction,
    TimerLifecycle,
    TimerPhase,
    resolve_snooze_duration,
)
from .waiting import CountdownWaiter, SleepWaiter

__all__ = [
    "ACTION_RESTART",
    "ACTION_SNOOZE",
    "ACTION_STOP",
    "CountdownWaiter",
    "DEFAULT_SNOOZE_DURATION",
    "DEFAULT_TIMER_MESSAGE",
    "LifecycleResult",
    "LifecycleSnapshot",
    "SleepWaiter",
    "TimerAction",
    "TimerLifecycle",
    "TimerPhase",
    "resolve_snooze_duration",
]
