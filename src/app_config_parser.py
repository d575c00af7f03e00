"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from app_config_schema import (
    ALERT_MODES,
    AlertSettings,
    AppConfig,
    AppConfigurationError,
    HistorySettings,
    LoggingSettings,
    MonitorSettings,
    StoreSettings,
    TimerSettings,
    default_log_path,
    default_store_path,
)


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: Optional[str],
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    return AppConfig(
        store=_parse_store_settings(_section(raw, "store"), base_dir=base_dir),
        timer=_parse_timer_settings(_section(raw, "timer")),
        alert=_parse_alert_settings(_section(raw, "alert")),
        monitor=_parse_monitor_settings(_section(raw, "monitor")),
        history=_parse_history_settings(_section(raw, "history")),
        logging=_parse_logging_settings(_section(raw, "logging"), base_dir=base_dir),
        source_file=source_file,
    )


def _parse_store_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> StoreSettings:
    path = _as_str(section.get("path", ""), "store.path")
    return StoreSettings(
        path=_resolve_path(base_dir, path) if path else default_store_path(),
        busy_timeout_seconds=_as_positive_float(
            section.get("busy_timeout_seconds", 5.0),
            "store.busy_timeout_seconds",
        ),
    )


def _parse_timer_settings(section: Mapping[str, Any]) -> TimerSettings:
    # The snooze span is validated when used; invalid values fall back to 5m.
    return TimerSettings(
        snooze_duration=_as_str(
            section.get("snooze_duration", ""),
            "timer.snooze_duration",
        ),
        default_message=(
            _as_str(section.get("default_message", ""), "timer.default_message")
            or "Time's up!"
        ),
    )


def _parse_alert_settings(section: Mapping[str, Any]) -> AlertSettings:
    mode = _as_str(section.get("mode", "dialog"), "alert.mode").lower()
    if mode not in ALERT_MODES:
        allowed = ", ".join(sorted(ALERT_MODES))
        raise AppConfigurationError(f"alert.mode must be one of: {allowed}.")
    return AlertSettings(
        mode=mode,
        sound_enabled=_as_bool(section.get("sound_enabled", True), "alert.sound_enabled"),
        timeout_seconds=(
            _as_positive_float(section.get("timeout_seconds"), "alert.timeout_seconds")
            if "timeout_seconds" in section
            else None
        ),
    )


def _parse_monitor_settings(section: Mapping[str, Any]) -> MonitorSettings:
    return MonitorSettings(
        refresh_interval_seconds=_as_positive_float(
            section.get("refresh_interval_seconds", 1.0),
            "monitor.refresh_interval_seconds",
        ),
        command_pause_seconds=_as_non_negative_float(
            section.get("command_pause_seconds", 2.0),
            "monitor.command_pause_seconds",
        ),
        clear_screen=_as_bool(section.get("clear_screen", True), "monitor.clear_screen"),
    )


def _parse_history_settings(section: Mapping[str, Any]) -> HistorySettings:
    count = _as_int(section.get("default_count", 20), "history.default_count")
    if count < 1:
        raise AppConfigurationError("history.default_count must be >= 1.")
    return HistorySettings(default_count=count)


def _parse_logging_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> LoggingSettings:
    log_file = _as_str(section.get("file", ""), "logging.file")
    return LoggingSettings(
        level=as_log_level(section.get("level", "INFO"), "logging.level"),
        file=_resolve_path(base_dir, log_file) if log_file else default_log_path(),
        max_bytes=_as_int(section.get("max_bytes", 2_000_000), "logging.max_bytes"),
        backup_count=_as_int(section.get("backup_count", 3), "logging.backup_count"),
    )


def as_log_level(value: Any, field: str) -> str:
    name = _as_str(value, field).upper()
    if not isinstance(logging.getLevelName(name), int):
        raise AppConfigurationError(f"{field} must be a logging level name, got: {value!r}")
    return name


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a float.") from error
    raise AppConfigurationError(f"{field} must be a float.")


def _as_positive_float(value: Any, field: str) -> float:
    number = _as_float(value, field)
    if number <= 0:
        raise AppConfigurationError(f"{field} must be > 0, got: {number}")
    return number


def _as_non_negative_float(value: Any, field: str) -> float:
    number = _as_float(value, field)
    if number < 0:
        raise AppConfigurationError(f"{field} must be >= 0, got: {number}")
    return number


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)
