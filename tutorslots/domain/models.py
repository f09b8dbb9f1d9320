"""
Domain models for weekly availability.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Mapping, Tuple, Union

from .exceptions import UnknownDay
from .time_grid import MIDNIGHT_TICK, SLOTS_PER_DAY, is_tick, time_of


class Weekday(str, Enum):
    """Day of the week as named in stored availability records."""
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


# Tutoring happens Monday through Saturday.
DEFAULT_WEEK: Tuple[Weekday, ...] = (
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
    Weekday.SATURDAY,
)


class DisplayMode(str, Enum):
    """Granularity used to display and toggle the grid."""
    HALF_HOUR = "half_hour"
    HOURLY = "hourly"


@dataclass(frozen=True)
class TimeRange:
    """
    A contiguous, half-open run of ticks ``[start_tick, end_tick)``.

    Invariant: start_tick must be before end_tick.
    """
    start_tick: int
    end_tick: int

    def __post_init__(self):
        if not (0 <= self.start_tick < SLOTS_PER_DAY and 0 < self.end_tick <= MIDNIGHT_TICK):
            raise ValueError(
                f"Range {self.start_tick}-{self.end_tick} is outside the day grid"
            )
        if self.start_tick >= self.end_tick:
            raise ValueError(
                f"Start tick {self.start_tick} must be before end tick {self.end_tick}"
            )

    @property
    def start_time(self) -> str:
        return time_of(self.start_tick)

    @property
    def end_time(self) -> str:
        return time_of(self.end_tick)

    def ticks(self) -> range:
        """Return every tick covered by this range."""
        return range(self.start_tick, self.end_tick)

    def __str__(self) -> str:
        return f"{self.start_time} - {self.end_time}"


@dataclass(frozen=True)
class ViewFilter:
    """
    Ephemeral display scope: an hour window ``[start_hour, end_hour)`` and a
    display granularity. Never persisted.
    """
    start_hour: int = 0
    end_hour: int = 24
    display_mode: DisplayMode = DisplayMode.HALF_HOUR

    def __post_init__(self):
        if not 0 <= self.start_hour < self.end_hour <= 24:
            raise ValueError(
                f"Filter window must satisfy 0 <= start < end <= 24, "
                f"got {self.start_hour}-{self.end_hour}"
            )
        # Accept plain strings such as "hourly" from config and prompts.
        object.__setattr__(self, "display_mode", DisplayMode(self.display_mode))

    @classmethod
    def full_day(cls, display_mode: DisplayMode = DisplayMode.HALF_HOUR) -> "ViewFilter":
        return cls(start_hour=0, end_hour=24, display_mode=display_mode)

    @property
    def hours(self) -> range:
        return range(self.start_hour, self.end_hour)

    @property
    def is_hourly(self) -> bool:
        return self.display_mode is DisplayMode.HOURLY

    @property
    def narrows_view(self) -> bool:
        """True when the filter hides part of the day or groups ticks by hour."""
        return self.start_hour > 0 or self.end_hour < 24 or self.is_hourly


DayName = Union[Weekday, str]


@dataclass(frozen=True)
class WeeklyAvailability:
    """
    Per-day slot sets for one tutor.

    Every configured day is always present; an unavailable day maps to an
    empty set. Instances are immutable; mutations return a new value.
    """
    days: Tuple[Weekday, ...] = DEFAULT_WEEK
    slots: Mapping[Weekday, FrozenSet[int]] = field(default_factory=dict)

    def __post_init__(self):
        days = tuple(Weekday(day) for day in self.days)
        if len(set(days)) != len(days):
            raise ValueError(f"Duplicate days in week: {[d.value for d in days]}")

        normalized: Dict[Weekday, FrozenSet[int]] = {day: frozenset() for day in days}
        for day, ticks in self.slots.items():
            weekday = self._lookup(days, day)
            ticks = frozenset(ticks)
            invalid = sorted(t for t in ticks if not is_tick(t))
            if invalid:
                raise ValueError(f"Ticks outside the day grid for {weekday.value}: {invalid}")
            normalized[weekday] = ticks

        object.__setattr__(self, "days", days)
        object.__setattr__(self, "slots", normalized)

    @staticmethod
    def _lookup(days: Iterable[Weekday], name: DayName) -> Weekday:
        for day in days:
            if name is day or name == day.value:
                return day
        shown = name.value if isinstance(name, Weekday) else name
        raise UnknownDay(f"Unknown day '{shown}'. Expected one of: {', '.join(d.value for d in days)}")

    @classmethod
    def empty(cls, days: Iterable[DayName] = DEFAULT_WEEK) -> "WeeklyAvailability":
        return cls(days=tuple(Weekday(day) for day in days))

    def resolve_day(self, name: DayName) -> Weekday:
        """
        Resolve a day name (case-sensitive) against this week.

        Raises:
            UnknownDay: If the name is not one of the configured days.
        """
        return self._lookup(self.days, name)

    def slots_for(self, day: DayName) -> FrozenSet[int]:
        return self.slots[self.resolve_day(day)]

    def with_slots(self, day: DayName, ticks: Iterable[int]) -> "WeeklyAvailability":
        """Return a copy with the slot set of ``day`` replaced."""
        weekday = self.resolve_day(day)
        updated = dict(self.slots)
        updated[weekday] = frozenset(ticks)
        return WeeklyAvailability(days=self.days, slots=updated)

    def available_days(self) -> List[Weekday]:
        return [day for day in self.days if self.slots[day]]


@dataclass(frozen=True)
class AvailabilitySummary:
    """Headline numbers shown on the tutor dashboard."""
    available_days: int
    total_days: int
    total_hours: float
    slots_per_day: Dict[str, int]

    def format_display(self) -> str:
        return (
            f"{self.available_days} of {self.total_days} days, "
            f"{self.total_hours:.1f} hours per week"
        )
