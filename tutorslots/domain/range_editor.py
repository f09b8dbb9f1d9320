"""
Editing operations over a tutor's weekly availability.

The module-level functions are pure transitions
``(WeeklyAvailability, ...) -> WeeklyAvailability`` that raise ``EditError``
subclasses on bad input. ``RangeEditor`` wraps them in an edit session that
never raises for user mistakes: every operation returns an ``EditResult`` and
leaves the availability untouched when it fails.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple, Union

from .exceptions import EditError, InvalidRange, InvalidTimeFormat, StaleRange
from .models import DayName, DisplayMode, TimeRange, ViewFilter, WeeklyAvailability, Weekday
from .range_codec import range_from_input, ranges_to_slots, slots_to_ranges
from .time_grid import boundary_tick_of, hour_of, hour_ticks, is_tick, tick_of
from .view_filter import toggle_scope

logger = logging.getLogger(__name__)

RangeLike = Union[TimeRange, Tuple[str, str]]
TickLike = Union[int, str]


def coerce_range(value: RangeLike) -> TimeRange:
    """Accept a TimeRange or a ``(start, end)`` pair of HH:MM strings."""
    if isinstance(value, TimeRange):
        return value
    if isinstance(value, str) or len(value) != 2:
        raise InvalidRange(f"Expected a (start, end) pair, got {value!r}")
    start, end = value
    start_tick = tick_of(start)
    end_tick = boundary_tick_of(end)
    if start_tick >= end_tick:
        raise InvalidRange(f"Start time {start} must be before end time {end}")
    return TimeRange(start_tick=start_tick, end_tick=end_tick)


def coerce_tick(value: TickLike) -> int:
    if isinstance(value, str):
        return tick_of(value)
    if not is_tick(value):
        raise InvalidTimeFormat(f"Tick {value!r} is outside the day grid")
    return value


def add_range(weekly: WeeklyAvailability, day: DayName, start: str, end: str) -> WeeklyAvailability:
    """Union the ticks of ``start``-``end`` into the day. Overlaps merge."""
    current = weekly.slots_for(day)
    added = ranges_to_slots([range_from_input(start, end)])
    return weekly.with_slots(day, current | added)


def edit_range(
    weekly: WeeklyAvailability,
    day: DayName,
    old_range: RangeLike,
    new_start: str,
    new_end: str,
) -> WeeklyAvailability:
    """
    Replace one of the day's current ranges with new bounds.

    Raises:
        StaleRange: If ``old_range`` is not one of the day's current ranges.
    """
    current = weekly.slots_for(day)
    target = coerce_range(old_range)
    if target not in slots_to_ranges(current):
        raise StaleRange(f"Range {target} is no longer part of {weekly.resolve_day(day).value}")

    # Validate the new bounds before touching the day.
    replacement = range_from_input(new_start, new_end)
    remaining = current - ranges_to_slots([target])
    return weekly.with_slots(day, remaining | ranges_to_slots([replacement]))


def delete_range(weekly: WeeklyAvailability, day: DayName, time_range: RangeLike) -> WeeklyAvailability:
    """Remove exactly the ticks of ``time_range``; deleting twice is harmless."""
    current = weekly.slots_for(day)
    return weekly.with_slots(day, current - ranges_to_slots([coerce_range(time_range)]))


def toggle_slot(
    weekly: WeeklyAvailability,
    day: DayName,
    tick: TickLike,
    display_mode: DisplayMode = DisplayMode.HALF_HOUR,
) -> WeeklyAvailability:
    """
    Flip one tick, or in hourly mode both ticks of the tick's hour.

    Hourly mode removes the pair only when both halves are present and adds
    both otherwise.
    """
    current = weekly.slots_for(day)
    tick = coerce_tick(tick)

    if DisplayMode(display_mode) is DisplayMode.HOURLY:
        pair = frozenset(hour_ticks(hour_of(tick)))
        if pair <= current:
            return weekly.with_slots(day, current - pair)
        return weekly.with_slots(day, current | pair)

    return weekly.with_slots(day, current ^ {tick})


def toggle_day(
    weekly: WeeklyAvailability,
    day: DayName,
    view: ViewFilter,
    snapshot: Optional[FrozenSet[int]] = None,
    editing: bool = False,
) -> Tuple[WeeklyAvailability, Optional[FrozenSet[int]]]:
    """
    Select or clear every tick of the day inside the filter's toggle scope.

    ``snapshot`` is the selection remembered from earlier clears. When part
    of it lies in the scope and is not selected yet, that part is restored.
    Otherwise a fully selected scope is cleared, and while editing a partly
    selected scope is cleared as well. An untouched scope is selected
    entirely. Ticks outside the scope are never touched.

    Returns:
        The new availability and the selection to remember for the day
        (``None`` when nothing is left to restore). Remembered ticks outside
        the scope are carried over, so narrowing the filter between a clear
        and a restore loses nothing.
    """
    current = weekly.slots_for(day)
    scope = toggle_scope(view)
    selected = current & scope
    remembered = snapshot or frozenset()
    outside = remembered - scope

    restore = remembered & scope
    if restore and not restore <= current:
        return weekly.with_slots(day, current | restore), outside or None

    if selected and (selected == scope or editing):
        return weekly.with_slots(day, current - scope), selected | outside

    return weekly.with_slots(day, current | scope), outside or None


@dataclass(frozen=True)
class EditResult:
    """Outcome of an edit session operation."""
    availability: WeeklyAvailability
    error: Optional[EditError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        return str(self.error) if self.error else ""


class RangeEditor:
    """
    One tutor's edit session over a WeeklyAvailability.

    Keeps the availability the session started from (for ``cancel``), the
    active view filter, and the last selection cleared per day by
    ``toggle_day`` so a second toggle restores it.
    """

    def __init__(
        self,
        availability: WeeklyAvailability,
        view: Optional[ViewFilter] = None,
        editing: bool = True,
    ):
        self._availability = availability
        self._original = availability
        self._view = view or ViewFilter.full_day()
        self._editing = editing
        self._snapshots: Dict[Weekday, FrozenSet[int]] = {}

    @property
    def availability(self) -> WeeklyAvailability:
        return self._availability

    @property
    def view(self) -> ViewFilter:
        return self._view

    @property
    def editing(self) -> bool:
        return self._editing

    @property
    def has_changes(self) -> bool:
        return self._availability != self._original

    def set_filter(self, view: ViewFilter) -> None:
        self._view = view

    def begin_edit(self) -> None:
        self._editing = True
        self._original = self._availability

    def cancel(self) -> WeeklyAvailability:
        """Drop every change made since the session started."""
        self._availability = self._original
        self._snapshots.clear()
        self._editing = False
        return self._availability

    def finish(self) -> WeeklyAvailability:
        self._snapshots.clear()
        self._editing = False
        return self._availability

    def ranges(self, day: DayName) -> List[TimeRange]:
        return slots_to_ranges(self._availability.slots_for(day))

    def add_range(self, day: DayName, start: str, end: str) -> EditResult:
        return self._apply("add_range", day, lambda w: add_range(w, day, start, end))

    def edit_range(self, day: DayName, old_range: RangeLike, new_start: str, new_end: str) -> EditResult:
        return self._apply(
            "edit_range", day, lambda w: edit_range(w, day, old_range, new_start, new_end)
        )

    def delete_range(self, day: DayName, time_range: RangeLike) -> EditResult:
        return self._apply("delete_range", day, lambda w: delete_range(w, day, time_range))

    def toggle_slot(self, day: DayName, tick: TickLike) -> EditResult:
        mode = self._view.display_mode
        return self._apply("toggle_slot", day, lambda w: toggle_slot(w, day, tick, mode))

    def toggle_day(self, day: DayName, view: Optional[ViewFilter] = None) -> EditResult:
        view = view or self._view
        try:
            weekday = self._availability.resolve_day(day)
            updated, remembered = toggle_day(
                self._availability,
                weekday,
                view,
                snapshot=self._snapshots.get(weekday),
                editing=self._editing,
            )
        except EditError as exc:
            logger.debug("Rejected toggle_day on %s: %s", day, exc)
            return EditResult(availability=self._availability, error=exc)

        if remembered and self._editing:
            self._snapshots[weekday] = remembered
        else:
            self._snapshots.pop(weekday, None)

        self._availability = updated
        return EditResult(availability=updated)

    def _apply(
        self,
        operation: str,
        day: DayName,
        transition: Callable[[WeeklyAvailability], WeeklyAvailability],
    ) -> EditResult:
        try:
            weekday = self._availability.resolve_day(day)
            updated = transition(self._availability)
        except EditError as exc:
            logger.debug("Rejected %s on %s: %s", operation, day, exc)
            return EditResult(availability=self._availability, error=exc)

        # Any direct edit invalidates the remembered selection of that day.
        self._snapshots.pop(weekday, None)
        self._availability = updated
        return EditResult(availability=updated)
