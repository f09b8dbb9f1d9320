"""
Read-only questions asked of a weekly availability.
"""

from typing import List

from .models import AvailabilitySummary, DayName, WeeklyAvailability
from .time_grid import SLOT_MINUTES, tick_of, time_of


def summarize(weekly: WeeklyAvailability) -> AvailabilitySummary:
    """Count available days and total declared hours for the week."""
    slots_per_day = {day.value: len(weekly.slots[day]) for day in weekly.days}
    total_minutes = sum(slots_per_day.values()) * SLOT_MINUTES

    return AvailabilitySummary(
        available_days=len(weekly.available_days()),
        total_days=len(weekly.days),
        total_hours=total_minutes / 60,
        slots_per_day=slots_per_day,
    )


def is_available_at(weekly: WeeklyAvailability, day: DayName, at: str) -> bool:
    """Check whether the half hour containing ``at`` is available on ``day``."""
    return tick_of(at) in weekly.slots_for(day)


def slot_start_times(weekly: WeeklyAvailability, day: DayName) -> List[str]:
    """Start time of every available half hour on ``day``, in order."""
    return [time_of(tick) for tick in sorted(weekly.slots_for(day))]
