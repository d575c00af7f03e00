"""Standalone expiry dialog: ``python -m alert.dialog <message>``.

Prints exactly one of ``snooze``, ``restart`` or ``stop`` on stdout and exits.
Closing the window counts as ``stop``.
"""

from __future__ import annotations

import argparse
import tkinter as tk

from lifecycle.constants import ACTION_RESTART, ACTION_SNOOZE, ACTION_STOP

BELL_INTERVAL_MS = 2000


def show_dialog(message: str, *, ring: bool = True) -> str:
    choice = {"action": ACTION_STOP}

    root = tk.Tk()
    root.title(message or "Timer")
    root.attributes("-topmost", True)
    root.resizable(False, False)

    tk.Label(root, text="⌛", font=("Helvetica", 36)).pack(padx=24, pady=(16, 4))
    tk.Label(root, text=message, wraplength=360).pack(padx=24, pady=(0, 12))

    def pick(action: str) -> None:
        choice["action"] = action
        root.destroy()

    buttons = tk.Frame(root)
    buttons.pack(padx=16, pady=(0, 16))
    tk.Button(buttons, text="Snooze", width=10, command=lambda: pick(ACTION_SNOOZE)).pack(
        side=tk.LEFT, padx=4
    )
    tk.Button(buttons, text="Restart", width=10, command=lambda: pick(ACTION_RESTART)).pack(
        side=tk.LEFT, padx=4
    )
    tk.Button(buttons, text="Stop", width=10, command=lambda: pick(ACTION_STOP)).pack(
        side=tk.LEFT, padx=4
    )
    root.protocol("WM_DELETE_WINDOW", lambda: pick(ACTION_STOP))

    def ring_bell() -> None:
        root.bell()
        root.after(BELL_INTERVAL_MS, ring_bell)

    if ring:
        ring_bell()

    root.mainloop()
    return choice["action"]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="alert.dialog")
    parser.add_argument("--silent", action="store_true", help="Do not ring the bell")
    parser.add_argument("message", nargs="*")
    args = parser.parse_args(argv)
    print(show_dialog(" ".join(args.message), ring=not args.silent), flush=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
