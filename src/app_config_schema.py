"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

DEFAULT_CONFIG_FILE = "~/.config/timer_cli/config.toml"

CONFIG_FILE_ENV = "TIMER_CLI_CONFIG_FILE"
DB_PATH_ENV = "TIMER_CLI_DB"
SNOOZE_ENV = "TIMER_CLI_SNOOZE"
LOG_LEVEL_ENV = "TIMER_CLI_LOG_LEVEL"

ALERT_MODES = frozenset({"dialog", "console"})


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


def default_store_path() -> str:
    return str(Path(tempfile.gettempdir()) / "timer_cli.db")


def default_log_path() -> str:
    return str(Path(tempfile.gettempdir()) / "timer_cli.log")


@dataclass(frozen=True)
class StoreSettings:
    """Registry database location from `[store]`."""
    path: str = field(default_factory=default_store_path)
    busy_timeout_seconds: float = 5.0


@dataclass(frozen=True)
class TimerSettings:
    """Timer defaults from `[timer]`; an invalid snooze span falls back to 5m."""
    snooze_duration: str = ""
    default_message: str = "Time's up!"


@dataclass(frozen=True)
class AlertSettings:
    """Expiry alert settings from `[alert]`."""
    mode: str = "dialog"
    sound_enabled: bool = True
    timeout_seconds: Optional[float] = None


@dataclass(frozen=True)
class MonitorSettings:
    """Live monitor cadence from `[monitor]`."""
    refresh_interval_seconds: float = 1.0
    command_pause_seconds: float = 2.0
    clear_screen: bool = True


@dataclass(frozen=True)
class HistorySettings:
    """History view settings from `[history]`."""
    default_count: int = 20


@dataclass(frozen=True)
class LoggingSettings:
    """Log level and rotating log file from `[logging]`."""
    level: str = "INFO"
    file: str = field(default_factory=default_log_path)
    max_bytes: int = 2_000_000
    backup_count: int = 3


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    store: StoreSettings = field(default_factory=StoreSettings)
    timer: TimerSettings = field(default_factory=TimerSettings)
    alert: AlertSettings = field(default_factory=AlertSettings)
    monitor: MonitorSettings = field(default_factory=MonitorSettings)
    history: HistorySettings = field(default_factory=HistorySettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    source_file: Optional[str] = None
