"""
Conversion between stored slot sets and human-facing time ranges.

Slot sets are the canonical representation; ranges are derived from them.
Both directions must round-trip without drift:

    ranges_to_slots(slots_to_ranges(S)) == S
    slots_to_ranges(ranges_to_slots(R)) == R   (R sorted, disjoint, non-adjacent)
"""

import logging
from typing import FrozenSet, Iterable, List

from .exceptions import InvalidRange, RoundTripViolation
from .models import TimeRange
from .time_grid import (
    MIDNIGHT_TICK,
    SLOT_MINUTES,
    boundary_tick_of,
    is_tick,
    minutes_of,
)

logger = logging.getLogger(__name__)


def ranges_to_slots(ranges: Iterable[TimeRange]) -> FrozenSet[int]:
    """
    Expand ranges into the set of ticks they cover.

    Overlapping or duplicate ranges are tolerated (union semantics).
    """
    slots: set[int] = set()
    for time_range in ranges:
        slots.update(time_range.ticks())
    return frozenset(slots)


def slots_to_ranges(slots: Iterable[int]) -> List[TimeRange]:
    """
    Collapse a slot set into maximal runs of consecutive ticks.

    Example: {18, 19, 22} -> [09:00-10:00, 11:00-11:30]

    The result is sorted by start, pairwise disjoint, and always leaves a gap
    of at least one tick between neighbours.
    """
    ticks = sorted(set(slots))
    if not ticks:
        return []

    invalid = [t for t in ticks if not is_tick(t)]
    if invalid:
        raise ValueError(f"Ticks outside the day grid: {invalid}")

    ranges: List[TimeRange] = []
    run_start = previous = ticks[0]

    for tick in ticks[1:]:
        if tick == previous + 1:
            previous = tick
            continue
        ranges.append(TimeRange(start_tick=run_start, end_tick=previous + 1))
        run_start = previous = tick

    ranges.append(TimeRange(start_tick=run_start, end_tick=previous + 1))
    return ranges


def round_trips(time_range: TimeRange) -> bool:
    """Check that a single range survives conversion to slots and back."""
    return slots_to_ranges(ranges_to_slots([time_range])) == [time_range]


def verify_round_trip(slots: Iterable[int]) -> FrozenSet[int]:
    """
    Assert that a slot set survives conversion to ranges and back.

    Raises:
        RoundTripViolation: If information is lost in either direction.
    """
    original = frozenset(slots)
    restored = ranges_to_slots(slots_to_ranges(original))
    if restored != original:
        logger.error(
            "Slot set did not round-trip: missing=%s extra=%s",
            sorted(original - restored),
            sorted(restored - original),
        )
        raise RoundTripViolation(
            f"Slot set changed during conversion: {sorted(original)} -> {sorted(restored)}"
        )
    return original


def range_from_input(start: str, end: str) -> TimeRange:
    """
    Build a range from user-entered HH:MM bounds.

    An off-grid start moves up to the next tick boundary ("13:15" starts at
    13:30), so the range never begins before the entered time. The end
    starts at the tick boundary covering the entered time and is walked
    back, one tick at a time, until the range round-trips and its formatted
    end does not run past what the user typed ("16:10" ends at 16:00, never
    16:30).

    Raises:
        InvalidTimeFormat: If either bound is not a valid time.
        InvalidRange: If the corrected range would be empty.
        RoundTripViolation: If no end tick satisfies the round-trip law.
    """
    start_minutes = minutes_of(start)
    end_minutes = minutes_of(end, allow_midnight_end=True)

    if end_minutes <= start_minutes:
        raise InvalidRange(f"Start time {start} must be before end time {end}")

    start_tick = -(-start_minutes // SLOT_MINUTES)
    candidate = min(-(-end_minutes // SLOT_MINUTES), MIDNIGHT_TICK)
    end_tick = candidate

    while end_tick > start_tick:
        overshoots = end_tick * SLOT_MINUTES > end_minutes
        if not overshoots and round_trips(TimeRange(start_tick=start_tick, end_tick=end_tick)):
            break
        end_tick -= 1

    if end_tick <= start_tick:
        if candidate > start_tick and boundary_tick_of(end) > start_tick:
            logger.error("No round-trip-safe end for %s-%s", start, end)
            raise RoundTripViolation(f"Could not build a stable range for {start}-{end}")
        raise InvalidRange(
            f"Range {start}-{end} does not cover a full {SLOT_MINUTES}-minute slot"
        )

    if end_tick != candidate:
        logger.debug("Adjusted end of %s-%s to tick %d", start, end, end_tick)

    return TimeRange(start_tick=start_tick, end_tick=end_tick)
