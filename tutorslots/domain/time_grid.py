"""
Fixed half-hour grid covering one wall-clock day.

A tick is an integer ``0 <= tick < 48``; tick ``t`` stands for the half-open
interval ``[t*30, t*30+30)`` minutes after midnight. The value ``48`` is only
meaningful as the exclusive end of a range ("until midnight").
"""

import re
from typing import Tuple

from .exceptions import InvalidTimeFormat

SLOT_MINUTES = 30
SLOTS_PER_DAY = 24 * 60 // SLOT_MINUTES
TICKS_PER_HOUR = 60 // SLOT_MINUTES
MIDNIGHT_TICK = SLOTS_PER_DAY

# Seconds are tolerated and truncated, never validated.
_TIME_PATTERN = re.compile(r"^(\d{2}):(\d{2})(?::\d{2}(?:\.\d+)?)?$")


def _parse(text: str, allow_midnight_end: bool) -> Tuple[int, int]:
    if not isinstance(text, str):
        raise InvalidTimeFormat(f"Expected a HH:MM string, got {text!r}")

    match = _TIME_PATTERN.match(text.strip())
    if not match:
        raise InvalidTimeFormat(f"Invalid time '{text}', expected zero-padded HH:MM")

    hour, minute = int(match.group(1)), int(match.group(2))
    if allow_midnight_end and hour == 24 and minute == 0:
        return hour, minute
    if hour > 23 or minute > 59:
        raise InvalidTimeFormat(f"Time '{text}' is outside 00:00-23:59")
    return hour, minute


def minutes_of(text: str, allow_midnight_end: bool = False) -> int:
    """Return minutes since midnight for a HH:MM[:SS] string."""
    hour, minute = _parse(text, allow_midnight_end)
    return hour * 60 + minute


def tick_of(text: str) -> int:
    """
    Convert a HH:MM[:SS] string to the tick containing it.

    Off-grid minutes floor to the enclosing half hour ("13:15" -> 13:00).

    Raises:
        InvalidTimeFormat: If the text is not a zero-padded 24-hour time.
    """
    return minutes_of(text) // SLOT_MINUTES


def boundary_tick_of(text: str) -> int:
    """Like :func:`tick_of` but also accepts ``24:00`` as the end of the day."""
    return minutes_of(text, allow_midnight_end=True) // SLOT_MINUTES


def time_of(tick: int) -> str:
    """Format a tick (or the midnight end boundary) as ``HH:MM``."""
    if not 0 <= tick <= MIDNIGHT_TICK:
        raise ValueError(f"Tick must be between 0 and {MIDNIGHT_TICK}, got {tick}")
    minutes = tick * SLOT_MINUTES
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def succ(tick: int) -> int:
    """Return the following tick."""
    if not 0 <= tick < SLOTS_PER_DAY - 1:
        raise ValueError(f"Tick {tick} has no successor on the grid")
    return tick + 1


def is_tick(value: int) -> bool:
    return isinstance(value, int) and 0 <= value < SLOTS_PER_DAY


def hour_of(tick: int) -> int:
    return tick // TICKS_PER_HOUR


def hour_ticks(hour: int) -> Tuple[int, int]:
    """Both ticks of an hour, e.g. ``10 -> (20, 21)`` for 10:00 and 10:30."""
    if not 0 <= hour < 24:
        raise ValueError(f"Hour must be between 0 and 23, got {hour}")
    first = hour * TICKS_PER_HOUR
    return first, first + 1
