"""
Domain layer - Pure scheduling logic without external dependencies.
"""

from .models import (
    DEFAULT_WEEK,
    AvailabilitySummary,
    DisplayMode,
    TimeRange,
    ViewFilter,
    WeeklyAvailability,
    Weekday,
)
from .range_codec import range_from_input, ranges_to_slots, slots_to_ranges
from .range_editor import EditResult, RangeEditor

__all__ = [
    "DEFAULT_WEEK",
    "AvailabilitySummary",
    "DisplayMode",
    "EditResult",
    "RangeEditor",
    "TimeRange",
    "ViewFilter",
    "WeeklyAvailability",
    "Weekday",
    "range_from_input",
    "ranges_to_slots",
    "slots_to_ranges",
]
