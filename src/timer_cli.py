"""Command line entry point for countdown timers."""

from __future__ import annotations

import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Sequence

from alert import ConsoleNotifier, DialogNotifier
from app_config import AppConfig, AppConfigurationError, load_app_config
from app_config_schema import DB_PATH_ENV, AlertSettings, LoggingSettings
from durations import DurationParseError, deadline_after, parse_duration
from lifecycle import CountdownWaiter, SleepWaiter, TimerLifecycle
from monitor import (
    CommandReader,
    LiveMonitor,
    MonitorDependencies,
    TimerKiller,
    parse_command,
    render_history_table,
)
from process import ProcessTerminator, SpawnError, WORKER_FLAG, spawn_background_timer
from registry import RegistryError, RegistryStore, utc_now

__version__ = "0.1.0"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

_HISTORY_DEFAULT = -1


def setup_logging(settings: LoggingSettings, *, console: bool = True) -> logging.Logger:
    """Configure logging for the application.

    Console output is limited to warnings so tables and countdowns stay
    readable; the rotating file receives everything at the configured level.
    """
    root = logging.getLogger()
    root.setLevel(settings.level)
    logger = logging.getLogger("timer_cli")
    if root.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    if console:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setLevel(logging.WARNING)
        stream_handler.setFormatter(formatter)
        root.addHandler(stream_handler)

    try:
        Path(settings.file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            settings.file,
            maxBytes=settings.max_bytes,
            backupCount=settings.backup_count,
            encoding="utf-8",
        )
    except OSError as error:
        logger.warning("Log file %s unavailable: %s", settings.file, error)
    else:
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
    return logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="timer_cli",
        description="Countdown timers that survive the terminal they started in.",
    )
    parser.add_argument("duration", nargs="?", help="duration such as 10s, 5m or 1h 30m")
    parser.add_argument("message", nargs="?", help="message shown when the timer expires")
    parser.add_argument(
        "--fg",
        action="store_true",
        help="run in the foreground with a live countdown",
    )
    modes = parser.add_mutually_exclusive_group()
    modes.add_argument(
        "--history",
        nargs="?",
        type=int,
        const=_HISTORY_DEFAULT,
        default=None,
        metavar="N",
        help="show the last N timers started (default 20)",
    )
    modes.add_argument(
        "--live",
        action="store_true",
        help="watch active timers and kill them interactively",
    )
    modes.add_argument(
        "--kill",
        metavar="ID|all",
        help="kill one timer by id, or every timer",
    )
    modes.add_argument(WORKER_FLAG, action="store_true", help=argparse.SUPPRESS)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _validate_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    inspecting = args.history is not None or args.live or args.kill is not None
    if inspecting:
        if args.duration is not None or args.fg:
            parser.error("--history, --live and --kill take no timer arguments")
        if args.kill is not None and parse_command(args.kill).kind not in ("kill", "kill_all"):
            parser.error(f"--kill expects a timer id or 'all', got: {args.kill!r}")
        return
    if args.duration is None:
        parser.error("duration string required unless using --history, --live or --kill")
    if args.worker and args.fg:
        parser.error("--fg cannot be combined with a background worker")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _validate_args(parser, args)

    try:
        config = load_app_config()
    except AppConfigurationError as error:
        print(f"Configuration error: {error}", file=sys.stderr)
        return EXIT_FAILURE

    logger = setup_logging(config.logging, console=not args.worker)
    if config.source_file:
        logger.debug("Loaded config from %s", config.source_file)

    store = RegistryStore(
        config.store.path,
        busy_timeout_seconds=config.store.busy_timeout_seconds,
        logger=logging.getLogger("registry"),
    )
    try:
        with store:
            if args.history is not None:
                return _show_history(store, config, args.history)
            if args.live:
                return _run_live_monitor(store, config, logger)
            if args.kill is not None:
                return _run_kill(store, args.kill)

            message = args.message if args.message is not None else config.timer.default_message
            if args.worker or args.fg:
                return _run_timer(
                    store,
                    config,
                    args.duration,
                    message,
                    foreground=args.fg,
                    logger=logger,
                )
            return _start_background(store, args.duration, message, logger)
    except DurationParseError as error:
        logger.error("Invalid duration %r: %s", args.duration, error)
        print(f"Error parsing duration: {error}", file=sys.stderr)
        return EXIT_FAILURE
    except RegistryError as error:
        logger.error("Timer registry failed: %s", error)
        print(f"Registry error: {error}", file=sys.stderr)
        return EXIT_FAILURE
    except SpawnError as error:
        logger.error("%s", error)
        print(f"Error starting timer: {error}", file=sys.stderr)
        return EXIT_FAILURE


def _start_background(
    store: RegistryStore,
    duration_spec: str,
    message: str,
    logger: logging.Logger,
) -> int:
    seconds = parse_duration(duration_spec)
    deadline_after(utc_now(), duration_spec)
    pid = spawn_background_timer(
        duration_spec,
        message,
        env_overrides={DB_PATH_ENV: str(store.path)},
        logger=logging.getLogger("spawn"),
    )
    logger.info("Background timer started: pid=%d duration=%s", pid, duration_spec)
    print(f"Starting timer for {int(seconds)} seconds...")
    return EXIT_OK


def _run_timer(
    store: RegistryStore,
    config: AppConfig,
    duration_spec: str,
    message: str,
    *,
    foreground: bool,
    logger: logging.Logger,
) -> int:
    lifecycle = TimerLifecycle(
        store=store,
        notifier=_build_notifier(config.alert, foreground=foreground),
        waiter=CountdownWaiter() if foreground else SleepWaiter(),
        snooze_duration=config.timer.snooze_duration,
        foreground=foreground,
        logger=logging.getLogger("lifecycle"),
    )
    if foreground:
        print(f"Starting timer for {int(parse_duration(duration_spec))} seconds...")

    try:
        snapshot = lifecycle.run(duration_spec, message)
    except KeyboardInterrupt:
        current = lifecycle.snapshot()
        if current.is_active and current.record_id is not None:
            store.remove(current.record_id)
        logger.info("Timer %s interrupted", current.record_id)
        print()
        return EXIT_INTERRUPTED

    logger.info("Timer finished: phase=%s", snapshot.phase)
    return EXIT_OK


def _build_notifier(settings: AlertSettings, *, foreground: bool):
    # Background workers have no terminal, so only the dialog can reach the user.
    if foreground and settings.mode == "console":
        return ConsoleNotifier(
            sound_enabled=settings.sound_enabled,
            logger=logging.getLogger("alert"),
        )
    return DialogNotifier(
        sound_enabled=settings.sound_enabled,
        timeout_seconds=settings.timeout_seconds,
        logger=logging.getLogger("alert"),
    )


def _show_history(store: RegistryStore, config: AppConfig, requested: int) -> int:
    count = config.history.default_count if requested == _HISTORY_DEFAULT else requested
    print(render_history_table(store.list_history(count)))
    return EXIT_OK


def _build_killer(store: RegistryStore) -> TimerKiller:
    return TimerKiller(
        store=store,
        terminator=ProcessTerminator(logger=logging.getLogger("terminator")),
        logger=logging.getLogger("monitor"),
    )


def _run_kill(store: RegistryStore, raw: str) -> int:
    command = parse_command(raw)
    killer = _build_killer(store)
    if command.kind == "kill_all":
        outcome = killer.kill_all()
    else:
        outcome = killer.kill(int(command.record_id))
    print(outcome.message)
    return EXIT_OK if outcome.found else EXIT_FAILURE


def _run_live_monitor(
    store: RegistryStore,
    config: AppConfig,
    logger: logging.Logger,
) -> int:
    monitor_logger = logging.getLogger("monitor")
    monitor = LiveMonitor(
        MonitorDependencies(
            store=store,
            killer=_build_killer(store),
            commands=CommandReader(logger=monitor_logger),
            logger=monitor_logger,
        ),
        refresh_interval_seconds=config.monitor.refresh_interval_seconds,
        command_pause_seconds=config.monitor.command_pause_seconds,
        clear_screen=config.monitor.clear_screen,
    )
    try:
        return monitor.run()
    except KeyboardInterrupt:
        logger.info("Live monitor interrupted")
        print("\nExiting live monitor.")
        return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
