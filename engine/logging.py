"""engine.logging

Small helpers for the in-game log book.

The log book is game data (shown to the player), newest entry first and
capped. Diagnostics go through the standard `logging` module instead.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, List

from core.state import LOG_CAPACITY, LogEntry, LogType


Clock = Callable[[], datetime]


def format_timestamp(now: datetime) -> str:
    return now.strftime("%H:%M:%S")


def make_log_entry(message: str, type: LogType = LogType.INFO, *, clock: Clock = datetime.now) -> LogEntry:
    return LogEntry(type=LogType(type), message=str(message), timestamp=format_timestamp(clock()))


def push_log(logs: List[LogEntry], entry: LogEntry, capacity: int = LOG_CAPACITY) -> List[LogEntry]:
    """Return a new list with `entry` first and the oldest entries dropped past `capacity`."""
    return [entry, *logs][: max(0, int(capacity))]


def format_money(amount: int) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(int(amount)):,}"


def format_delta(cash_delta: int, brand_delta: int) -> str:
    cash_s = ("+" if cash_delta >= 0 else "-") + f"${abs(int(cash_delta)):,}"
    brand_s = f"{int(brand_delta):+d}"
    return f"Runway {cash_s} / Brand {brand_s}"
