"""Persistent registry shared by timer processes and live monitors."""

from .errors import RecordNotFound, RegistryError, StoreUnavailable
from .models import ActiveTimerRecord, HistoryEntry, utc_now
from .store import RegistryStore

__all__ = [
    "ActiveTimerRecord",
    "HistoryEntry",
    "RecordNotFound",
    "RegistryError",
    "RegistryStore",
    "StoreUnavailable",
    "utc_now",
]
