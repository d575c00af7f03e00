"""Launch detached background timer processes."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from typing import Callable, Mapping, Optional

WORKER_FLAG = "--worker"


class SpawnError(Exception):
    """Raised when a background timer process cannot be started."""


def background_command(
    duration_spec: str,
    message: str,
    *,
    python_executable: Optional[str] = None,
) -> list[str]:
    return [
        python_executable or sys.executable,
        "-m",
        "timer_cli",
        WORKER_FLAG,
        "--",
        duration_spec,
        message,
    ]


def spawn_background_timer(
    duration_spec: str,
    message: str,
    *,
    env_overrides: Optional[Mapping[str, str]] = None,
    python_executable: Optional[str] = None,
    popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    logger: Optional[logging.Logger] = None,
) -> int:
    """Start the timer in its own session so it outlives this process."""
    log = logger or logging.getLogger("spawn")
    env = dict(os.environ)
    env.update(env_overrides or {})

    kwargs: dict = {
        "stdin": subprocess.DEVNULL,
        "stdout": subprocess.DEVNULL,
        "stderr": subprocess.DEVNULL,
        "close_fds": True,
        "env": env,
    }
    if os.name == "nt":
        kwargs["creationflags"] = getattr(subprocess, "DETACHED_PROCESS", 0) | getattr(
            subprocess, "CREATE_NEW_PROCESS_GROUP", 0
        )
    else:
        kwargs["start_new_session"] = True

    command = background_command(
        duration_spec, message, python_executable=python_executable
    )
    try:
        process = popen(command, **kwargs)
    except OSError as error:
        raise SpawnError(f"Failed to start background timer: {error}") from error

    log.info("Spawned background timer pid=%s duration=%s", process.pid, duration_spec)
    return int(process.pid)
