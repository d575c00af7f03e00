"""OS process helpers: detached timer spawning and cross-process termination."""

from .spawn import SpawnError, WORKER_FLAG, background_command, spawn_background_timer
from .terminator import ProcessTerminator, TerminationResult

__all__ = [
    "ProcessTerminator",
    "SpawnError",
    "TerminationResult",
    "WORKER_FLAG",
    "background_command",
    "spawn_background_timer",
]
