"""Expiry alerts shown when a timer's waiting period ends."""

from .service import AlertError, ConsoleNotifier, DialogNotifier, parse_alert_token

__all__ = ["AlertError", "ConsoleNotifier", "DialogNotifier", "parse_alert_token"]
