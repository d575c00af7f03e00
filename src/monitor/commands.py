"""Parsing of the line commands accepted by the live monitor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

CommandKind = Literal["kill", "kill_all", "invalid", "empty"]

ALL_TOKEN = "all"


@dataclass(frozen=True)
class MonitorCommand:
    kind: CommandKind
    raw: str
    record_id: Optional[int] = None


def parse_command(line: str) -> MonitorCommand:
    text = (line or "").strip()
    if not text:
        return MonitorCommand(kind="empty", raw=text)
    if text.lower() == ALL_TOKEN:
        return MonitorCommand(kind="kill_all", raw=text)
    if text.isascii() and text.isdigit():
        return MonitorCommand(kind="kill", raw=text, record_id=int(text))
    return MonitorCommand(kind="invalid", raw=text)
