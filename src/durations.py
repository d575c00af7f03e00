"""Human duration expressions such as ``"2s"`` or ``"1min 30 seconds"``."""

from __future__ import annotations

import datetime as dt
import math
import re

_UNIT_SECONDS: dict[str, float] = {
    "nsec": 1e-9,
    "ns": 1e-9,
    "usec": 1e-6,
    "us": 1e-6,
    "msec": 1e-3,
    "ms": 1e-3,
    "seconds": 1.0,
    "second": 1.0,
    "secs": 1.0,
    "sec": 1.0,
    "s": 1.0,
    "minutes": 60.0,
    "minute": 60.0,
    "mins": 60.0,
    "min": 60.0,
    "m": 60.0,
    "hours": 3600.0,
    "hour": 3600.0,
    "hrs": 3600.0,
    "hr": 3600.0,
    "h": 3600.0,
    "days": 86400.0,
    "day": 86400.0,
    "d": 86400.0,
    "weeks": 604800.0,
    "week": 604800.0,
    "w": 604800.0,
    "months": 2630016.0,
    "month": 2630016.0,
    "M": 2630016.0,
    "years": 31557600.0,
    "year": 31557600.0,
    "y": 31557600.0,
}

_TOKEN = re.compile(r"\s*(\d+)\s*([A-Za-z]+)\s*")

MAX_DURATION_SECONDS = dt.timedelta.max.total_seconds()


class DurationParseError(ValueError):
    """Raised when a duration expression cannot be parsed."""


def parse_duration(text: str) -> float:
    """Return the number of seconds described by ``text``.

    Components are ``<integer><unit>`` pairs, optionally separated by
    whitespace, and are summed: ``"1h 30m"`` is 5400 seconds.
    """
    if not isinstance(text, str):
        raise DurationParseError(f"duration must be a string, got {type(text).__name__}")
    raw = text.strip()
    if not raw:
        raise DurationParseError("duration is empty")

    total = 0.0
    position = 0
    while position < len(raw):
        match = _TOKEN.match(raw, position)
        if match is None:
            if raw[position:].strip().isdigit():
                raise DurationParseError(f"time unit needed in {text!r}")
            raise DurationParseError(f"invalid duration {text!r}")
        amount, unit = match.groups()
        factor = _UNIT_SECONDS.get(unit)
        if factor is None:
            raise DurationParseError(f"unknown time unit {unit!r} in {text!r}")
        try:
            total += int(amount) * factor
        except OverflowError as error:
            raise DurationParseError(f"duration {text!r} is out of range") from error
        position = match.end()

    if not math.isfinite(total) or total > MAX_DURATION_SECONDS:
        raise DurationParseError(f"duration {text!r} is out of range")
    return total


def deadline_after(start: dt.datetime, text: str) -> dt.datetime:
    """Return ``start`` plus the span of ``text``.

    Raises ``DurationParseError`` when the deadline falls outside the
    calendar range ``datetime`` can represent.
    """
    seconds = parse_duration(text)
    try:
        return start + dt.timedelta(seconds=seconds)
    except OverflowError as error:
        raise DurationParseError(f"duration {text!r} ends past the supported date range") from error


def is_valid_duration(text: str) -> bool:
    try:
        parse_duration(text)
    except DurationParseError:
        return False
    return True


def format_clock(seconds: float) -> str:
    """Format seconds as ``HH:MM:SS``; negative values clamp to zero."""
    whole = max(0, int(math.ceil(seconds)))
    hours, remainder = divmod(whole, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
