from __future__ import annotations

import os
from dataclasses import replace
from pathlib import Path
from typing import Mapping, Optional

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for older runtimes
    import tomli as tomllib  # type: ignore

from app_config_parser import as_log_level, parse_app_config
from app_config_schema import (
    CONFIG_FILE_ENV,
    DB_PATH_ENV,
    DEFAULT_CONFIG_FILE,
    LOG_LEVEL_ENV,
    SNOOZE_ENV,
    AppConfig,
    AppConfigurationError,
)

__all__ = [
    "AppConfig",
    "AppConfigurationError",
    "apply_environment_overrides",
    "load_app_config",
    "resolve_config_path",
]


def resolve_config_path(
    config_path: str | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> tuple[Path, bool]:
    """Return the config path and whether it was named explicitly."""
    env = environ if environ is not None else os.environ
    env_path = env.get(CONFIG_FILE_ENV, "").strip() or None
    raw = config_path or env_path or DEFAULT_CONFIG_FILE
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (Path.cwd() / path).resolve()
    return path, bool(config_path or env_path)


def load_app_config(
    config_path: str | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    env = environ if environ is not None else os.environ
    path, explicit = resolve_config_path(config_path, environ=env)

    if not path.exists():
        if explicit:
            raise AppConfigurationError(f"Config file not found: {path}")
        return apply_environment_overrides(AppConfig(), env)
    if not path.is_file():
        raise AppConfigurationError(f"Config path is not a file: {path}")

    try:
        with open(path, "rb") as fh:
            raw = tomllib.load(fh)
    except Exception as error:
        raise AppConfigurationError(f"Failed to parse config TOML: {error}") from error

    config = parse_app_config(raw, base_dir=path.parent, source_file=str(path))
    return apply_environment_overrides(config, env)


def apply_environment_overrides(
    config: AppConfig,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Layer ``TIMER_CLI_*`` variables over file or default settings."""
    env = environ if environ is not None else os.environ

    db_path = _env_value(env, DB_PATH_ENV)
    if db_path:
        config = replace(
            config,
            store=replace(config.store, path=str(Path(db_path).expanduser())),
        )

    snooze = _env_value(env, SNOOZE_ENV)
    if snooze:
        config = replace(config, timer=replace(config.timer, snooze_duration=snooze))

    level = _env_value(env, LOG_LEVEL_ENV)
    if level:
        config = replace(
            config,
            logging=replace(config.logging, level=as_log_level(level, LOG_LEVEL_ENV)),
        )
    return config


def _env_value(environ: Mapping[str, str], name: str) -> Optional[str]:
    return environ.get(name, "").strip() or None
